from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qrattend.models import Attendance, User

logger = logging.getLogger(__name__)

UNIQUE_CONSTRAINT = "uq_attendance_session_student"


def is_duplicate_claim(exc: IntegrityError) -> bool:
    """True when the violation is the (session_id, student_id) uniqueness rule."""
    message = str(exc.orig)
    # postgres names the constraint; sqlite lists the columns instead
    return UNIQUE_CONSTRAINT in message or (
        "UNIQUE constraint failed" in message
        and "attendance.session_id" in message
        and "attendance.student_id" in message
    )


def insert_record(db: Session, *, session_id: int, student_id: int, marked_at: datetime) -> Optional[Attendance]:
    """Insert one attendance row, or return None if the pair is already recorded.

    There is no prior lookup: the unique constraint on (session_id, student_id)
    decides, so two concurrent claims for the same pair cannot both succeed.
    """
    record = Attendance(session_id=session_id, student_id=student_id, marked_at=marked_at)
    db.add(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if not is_duplicate_claim(exc):
            raise
        logger.info("Duplicate attendance for session %s student %s", session_id, student_id)
        return None

    db.refresh(record)
    return record


def list_for_session(db: Session, session_id: int) -> List[Tuple[Attendance, User]]:
    return (
        db.query(Attendance, User)
        .join(User, Attendance.student_id == User.id)
        .filter(Attendance.session_id == session_id)
        .order_by(Attendance.marked_at.asc(), Attendance.id.asc())
        .all()
    )
