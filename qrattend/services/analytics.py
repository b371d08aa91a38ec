"""Attendance read models built from sessions, enrollments and attendance rows."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from qrattend.models import Attendance, ClassRoom, ClassSession, User, class_students
from qrattend.services import classrooms


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"


class RiskBand(str, Enum):
    SAFE = "Safe"
    WARNING = "Warning"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class ClassSummary:
    class_id: int
    name: str
    subject: str
    total_sessions: int
    total_students: int
    attendance_marked: int
    attendance_percentage: float


@dataclass(frozen=True)
class HistoryRow:
    session_id: int
    session_date: datetime
    class_id: int
    class_name: str
    subject: str
    status: AttendanceStatus
    marked_at: Optional[datetime] = None


@dataclass(frozen=True)
class StudentClassSummary:
    class_id: int
    class_name: str
    subject: str
    total_sessions: int
    present: int
    absent: int
    attendance_percentage: float


@dataclass(frozen=True)
class RosterRow:
    student_id: int
    staff_no: str
    name: str
    present: int
    total_sessions: int
    attendance_percentage: float
    risk: RiskBand


def attendance_percentage(marked: int, possible: int) -> float:
    """``marked / possible * 100`` rounded to 2 places; 0 when nothing was possible."""
    if possible <= 0:
        return 0.0
    # roster shrinkage can leave more rows than the current snapshot allows
    return round(min(marked / possible, 1.0) * 100, 2)


def risk_band(percentage: float) -> RiskBand:
    if percentage >= 75:
        return RiskBand.SAFE
    if percentage >= 50:
        return RiskBand.WARNING
    return RiskBand.CRITICAL


def _counts_by_class(db: Session, column, group_column, class_ids: Sequence[int], *joins) -> Dict[int, int]:
    query = db.query(group_column, func.count(column))
    for target, onclause in joins:
        query = query.join(target, onclause)
    rows = query.filter(group_column.in_(class_ids)).group_by(group_column).all()
    return {class_id: count for class_id, count in rows}


def class_analytics(db: Session, lecturer_id: int) -> List[ClassSummary]:
    """One summary per class the lecturer owns, in creation order.

    total_students is the current roster size, applied to every past session.
    """
    classes = classrooms.list_by_teacher(db, lecturer_id)
    class_ids = [c.id for c in classes]
    if not class_ids:
        return []

    session_counts = _counts_by_class(db, ClassSession.id, ClassSession.class_id, class_ids)
    student_counts = _counts_by_class(db, class_students.c.student_id, class_students.c.class_id, class_ids)
    marked_counts = _counts_by_class(
        db, Attendance.id, ClassSession.class_id, class_ids,
        (Attendance, Attendance.session_id == ClassSession.id),
    )

    summaries = []
    for classroom in classes:
        total_sessions = session_counts.get(classroom.id, 0)
        total_students = student_counts.get(classroom.id, 0)
        marked = marked_counts.get(classroom.id, 0)
        summaries.append(ClassSummary(
            class_id=classroom.id,
            name=classroom.name,
            subject=classroom.subject,
            total_sessions=total_sessions,
            total_students=total_students,
            attendance_marked=marked,
            attendance_percentage=attendance_percentage(marked, total_sessions * total_students),
        ))
    return summaries


def student_history(db: Session, student_id: int) -> List[HistoryRow]:
    """Every session of every class the student is enrolled in, most recent first.

    Sessions without an attendance row for the student are reported Absent.
    """
    rows = (
        db.query(ClassSession, ClassRoom, Attendance.marked_at)
        .join(ClassRoom, ClassSession.class_id == ClassRoom.id)
        .join(class_students, and_(
            class_students.c.class_id == ClassRoom.id,
            class_students.c.student_id == student_id,
        ))
        .outerjoin(Attendance, and_(
            Attendance.session_id == ClassSession.id,
            Attendance.student_id == student_id,
        ))
        .order_by(ClassSession.created_at.desc(), ClassSession.id.desc())
        .all()
    )

    return [
        HistoryRow(
            session_id=session.id,
            session_date=session.created_at,
            class_id=classroom.id,
            class_name=classroom.name,
            subject=classroom.subject,
            status=AttendanceStatus.PRESENT if marked_at is not None else AttendanceStatus.ABSENT,
            marked_at=marked_at,
        )
        for session, classroom, marked_at in rows
    ]


def summarize_history(rows: Sequence[HistoryRow]) -> List[StudentClassSummary]:
    """Per-class present/absent rollup of a student's history rows."""
    grouped: Dict[int, List[HistoryRow]] = {}
    for row in sorted(rows, key=lambda r: r.class_id):
        grouped.setdefault(row.class_id, []).append(row)

    summaries = []
    for class_id, class_rows in grouped.items():
        present = sum(1 for r in class_rows if r.status is AttendanceStatus.PRESENT)
        total = len(class_rows)
        summaries.append(StudentClassSummary(
            class_id=class_id,
            class_name=class_rows[0].class_name,
            subject=class_rows[0].subject,
            total_sessions=total,
            present=present,
            absent=total - present,
            attendance_percentage=attendance_percentage(present, total),
        ))
    return summaries


def class_roster_report(db: Session, classroom: ClassRoom) -> List[RosterRow]:
    """Per-student attendance and risk band for every student currently enrolled."""
    total_sessions = (
        db.query(func.count(ClassSession.id))
        .filter(ClassSession.class_id == classroom.id)
        .scalar()
    )

    present_counts = dict(
        db.query(Attendance.student_id, func.count(Attendance.id))
        .join(ClassSession, Attendance.session_id == ClassSession.id)
        .filter(ClassSession.class_id == classroom.id)
        .group_by(Attendance.student_id)
        .all()
    )

    students = (
        db.query(User)
        .join(class_students, class_students.c.student_id == User.id)
        .filter(class_students.c.class_id == classroom.id)
        .order_by(User.name.asc(), User.id.asc())
        .all()
    )

    report = []
    for student in students:
        present = present_counts.get(student.id, 0)
        percentage = attendance_percentage(present, total_sessions)
        report.append(RosterRow(
            student_id=student.id,
            staff_no=student.staff_no,
            name=student.name,
            present=present,
            total_sessions=total_sessions,
            attendance_percentage=percentage,
            risk=risk_band(percentage),
        ))
    return report
