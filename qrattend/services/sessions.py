"""Session lifecycle: opening time-boxed sessions and classifying them."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from qrattend.config import SESSION_TTL_MINUTES
from qrattend.datetime_utils import utcnow
from qrattend.errors import NotFoundError
from qrattend.models import ClassSession, User
from qrattend.services import classrooms
from qrattend.services.tokens import create_session_token

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(minutes=SESSION_TTL_MINUTES)


class SessionState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


def open_session(db: Session, class_id: int, *, now: Optional[datetime] = None) -> ClassSession:
    """Open a session for ``class_id`` valid for ``SESSION_TTL`` from ``now``.

    The row is flushed first so its id exists before the token that embeds it;
    both land in the same commit.
    """
    now = now or utcnow()

    classroom = classrooms.find_by_id(db, class_id)
    if classroom is None:
        raise NotFoundError("Class not found", class_id=class_id)

    session = ClassSession(
        class_id=classroom.id,
        created_at=now,
        expires_at=now + SESSION_TTL,
    )
    db.add(session)
    db.flush()

    session.token = create_session_token(
        session_id=session.id,
        class_id=classroom.id,
        issued_at=session.created_at,
        expires_at=session.expires_at,
    )
    db.commit()
    db.refresh(session)

    logger.info("Session %s opened for class %s, expires %s",
                session.id, classroom.id, session.expires_at.isoformat())
    return session


def classify(session: ClassSession, now: datetime) -> SessionState:
    if session.created_at <= now < session.expires_at:
        return SessionState.ACTIVE
    return SessionState.EXPIRED


def get_session(db: Session, session_id: int) -> Optional[ClassSession]:
    return db.get(ClassSession, session_id)


def list_sessions_for_class(db: Session, class_id: int) -> List[ClassSession]:
    return (
        db.query(ClassSession)
        .filter(ClassSession.class_id == class_id)
        .order_by(ClassSession.created_at.desc(), ClassSession.id.desc())
        .all()
    )


def sessions_for_user(db: Session, user: User, *, now: Optional[datetime] = None) -> Dict[SessionState, List[ClassSession]]:
    """Sessions of the classes a lecturer teaches or a student attends, grouped by state."""
    now = now or utcnow()

    if user.role == "lecturer":
        classes = classrooms.list_by_teacher(db, user.id)
    else:
        classes = classrooms.list_by_student(db, user.id)

    grouped = {state: [] for state in SessionState}
    class_ids = [c.id for c in classes]
    if not class_ids:
        return grouped

    rows = (
        db.query(ClassSession)
        .filter(ClassSession.class_id.in_(class_ids))
        .order_by(ClassSession.created_at.desc(), ClassSession.id.desc())
        .all()
    )
    for session in rows:
        grouped[classify(session, now)].append(session)
    return grouped
