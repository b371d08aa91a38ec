"""ClassRoom collaborator: lookups and the thin roster CRUD the core reads from."""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from qrattend.errors import ForbiddenError, NotFoundError, ValidationFailure
from qrattend.models import ClassRoom, User, class_students

logger = logging.getLogger(__name__)


def find_by_id(db: Session, class_id: int) -> Optional[ClassRoom]:
    return db.get(ClassRoom, class_id)


def is_enrolled(db: Session, class_id: int, student_id: int) -> bool:
    # primary-key probe on the association table
    stmt = select(
        exists().where(
            class_students.c.class_id == class_id,
            class_students.c.student_id == student_id,
        )
    )
    return bool(db.execute(stmt).scalar())


def list_by_teacher(db: Session, lecturer_id: int) -> List[ClassRoom]:
    return (
        db.query(ClassRoom)
        .filter(ClassRoom.lecturer_id == lecturer_id)
        .order_by(ClassRoom.created_at.asc(), ClassRoom.id.asc())
        .all()
    )


def list_by_student(db: Session, student_id: int) -> List[ClassRoom]:
    return (
        db.query(ClassRoom)
        .join(class_students, class_students.c.class_id == ClassRoom.id)
        .filter(class_students.c.student_id == student_id)
        .order_by(ClassRoom.created_at.asc(), ClassRoom.id.asc())
        .all()
    )


def get_owned(db: Session, class_id: int, lecturer_id: int) -> ClassRoom:
    classroom = find_by_id(db, class_id)
    if classroom is None:
        raise NotFoundError("Class not found", class_id=class_id)
    if classroom.lecturer_id != lecturer_id:
        raise ForbiddenError("You do not teach this class", class_id=class_id)
    return classroom


def create_class(db: Session, *, lecturer_id: int, name: str, subject: str,
                 latitude: Optional[float] = None, longitude: Optional[float] = None) -> ClassRoom:
    if (latitude is None) != (longitude is None):
        raise ValidationFailure("Class anchor needs both latitude and longitude")

    classroom = ClassRoom(
        name=name,
        subject=subject,
        lecturer_id=lecturer_id,
        latitude=latitude,
        longitude=longitude,
    )
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    logger.info("Class %s (%s) created by lecturer %s", classroom.id, name, lecturer_id)
    return classroom


def enroll_student(db: Session, classroom: ClassRoom, staff_no: str) -> User:
    student = db.query(User).filter(User.staff_no == staff_no, User.role == "student").first()
    if student is None:
        raise NotFoundError("Student not found", staff_no=staff_no)

    if not is_enrolled(db, classroom.id, student.id):
        classroom.students.append(student)
        db.commit()
        logger.info("Student %s enrolled in class %s", student.id, classroom.id)
    return student
