import csv
import io
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from qrattend.datetime_utils import utcnow
from qrattend.db import get_db
from qrattend.dependencies import require_lecturer
from qrattend.errors import NotFoundError
from qrattend.models import ClassSession, User
from qrattend.schemas.analytics_schemas import ClassSummaryOut, RosterRowOut
from qrattend.schemas.attendance_schemas import SessionAttendeeOut
from qrattend.schemas.session_schemas import CreateSessionRequest, OpenedSessionOut, SessionOut, UserSessionsOut
from qrattend.services import analytics, attendance_store, classrooms, sessions
from qrattend.services.qr import render_qr_data_url

router = APIRouter(prefix="/lecturer", tags=["lecturer"])


def session_out(session, now=None):
    now = now or utcnow()
    return SessionOut(
        id=session.id,
        class_id=session.class_id,
        created_at=session.created_at,
        expires_at=session.expires_at,
        state=sessions.classify(session, now).value,
    )


def opened_session_out(session):
    return OpenedSessionOut(
        **session_out(session).model_dump(),
        token=session.token,
        qr_code=render_qr_data_url(session.token),
    )


def get_owned_session(db: Session, session_id: int, lecturer: User) -> ClassSession:
    session = sessions.get_session(db, session_id)
    if session is None:
        raise NotFoundError("Session not found", session_id=session_id)
    classrooms.get_owned(db, session.class_id, lecturer.id)
    return session


# --- 1. Open Session (POST) ---
@router.post("/sessions", response_model=OpenedSessionOut, status_code=status.HTTP_201_CREATED)
async def open_session(
    payload: CreateSessionRequest,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    classroom = classrooms.get_owned(db, payload.class_id, lecturer.id)
    session = sessions.open_session(db, classroom.id)
    return opened_session_out(session)


# --- 2. Sessions (GET) ---
@router.get("/sessions", response_model=UserSessionsOut)
async def my_sessions(
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    now = utcnow()
    grouped = sessions.sessions_for_user(db, lecturer, now=now)
    return UserSessionsOut(
        active=[session_out(s, now) for s in grouped[sessions.SessionState.ACTIVE]],
        expired=[session_out(s, now) for s in grouped[sessions.SessionState.EXPIRED]],
    )


@router.get("/sessions/{session_id}", response_model=OpenedSessionOut)
async def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    return opened_session_out(get_owned_session(db, session_id, lecturer))


@router.get("/classes/{class_id}/sessions", response_model=List[SessionOut])
async def class_sessions(
    class_id: int,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    classroom = classrooms.get_owned(db, class_id, lecturer.id)
    now = utcnow()
    return [session_out(s, now) for s in sessions.list_sessions_for_class(db, classroom.id)]


# --- 3. Session Attendance (GET) ---
@router.get("/sessions/{session_id}/attendance", response_model=List[SessionAttendeeOut])
async def session_attendance(
    session_id: int,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    session = get_owned_session(db, session_id, lecturer)
    return [
        SessionAttendeeOut(
            student_id=student.id,
            staff_no=student.staff_no,
            name=student.name,
            email=student.email,
            marked_at=record.marked_at,
        )
        for record, student in attendance_store.list_for_session(db, session.id)
    ]


# --- 4. Export Session Attendance to CSV (GET) ---
@router.get("/sessions/{session_id}/export")
async def export_session(
    session_id: int,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    session = get_owned_session(db, session_id, lecturer)
    classroom = session.classroom

    stream = io.StringIO()
    csv_writer = csv.writer(stream)
    csv_writer.writerow(["Matric/Staff No", "Student Name", "Check-in Time", "Class", "Subject"])

    for record, student in attendance_store.list_for_session(db, session.id):
        csv_writer.writerow([
            student.staff_no,
            student.name,
            record.marked_at.strftime('%Y-%m-%d %H:%M:%S'),
            classroom.name,
            classroom.subject,
        ])

    response = StreamingResponse(iter([stream.getvalue()]), media_type="text/csv")
    filename = f"Attendance_{classroom.id}_{session.id}.csv"
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response


# --- 5. Class Analytics (GET) ---
@router.get("/analytics", response_model=List[ClassSummaryOut])
async def class_analytics(
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    return analytics.class_analytics(db, lecturer.id)


# --- 6. Roster Risk Report (GET) ---
@router.get("/classes/{class_id}/report", response_model=List[RosterRowOut])
async def class_report(
    class_id: int,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    classroom = classrooms.get_owned(db, class_id, lecturer.id)
    return analytics.class_roster_report(db, classroom)
