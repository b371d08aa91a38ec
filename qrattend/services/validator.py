"""Attendance claim validation.

A claim runs through ordered, short-circuiting checks:

1. the session exists (and, for scanned tokens, still belongs to the same class)
2. the claim is not past the session's expiry
3. the claimant is enrolled in the session's class
4. the claimant is inside the class geofence, when the class has an anchor
5. the (session, student) pair is not already recorded

Expected rejections come back as a :class:`ClaimOutcome` carrying an
:class:`~qrattend.errors.ErrorCode`; nothing here raises for them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

import jwt
from sqlalchemy.orm import Session

from qrattend.config import GEOFENCE_RADIUS_METERS
from qrattend.datetime_utils import utcnow
from qrattend.errors import ErrorCode
from qrattend.models import Attendance
from qrattend.services import attendance_store, classrooms, geo, sessions
from qrattend.services.tokens import decode_session_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceClaim:
    session_id: int
    student_id: int
    location: Optional[Tuple[float, float]] = None
    # Set when the claim came from a scanned token
    class_id: Optional[int] = None


@dataclass(frozen=True)
class ClaimOutcome:
    record: Optional[Attendance] = None
    reason: Optional[ErrorCode] = None
    message: str = ""
    distance_meters: Optional[float] = None

    @property
    def accepted(self) -> bool:
        return self.record is not None

    @classmethod
    def accept(cls, record: Attendance, distance_meters: Optional[float] = None) -> "ClaimOutcome":
        return cls(record=record, message="Attendance marked successfully", distance_meters=distance_meters)

    @classmethod
    def reject(cls, reason: ErrorCode, message: str, distance_meters: Optional[float] = None) -> "ClaimOutcome":
        return cls(reason=reason, message=message, distance_meters=distance_meters)


def claim_from_token(token: str, student_id: int, location: Optional[Tuple[float, float]] = None) -> Optional[AttendanceClaim]:
    """Build a claim from a scanned QR token, or None if the token is not ours."""
    try:
        payload = decode_session_token(token, verify_exp=False)
    except jwt.InvalidTokenError as exc:
        logger.warning("Rejected unreadable session token: %s", exc)
        return None
    return AttendanceClaim(
        session_id=payload.session_id,
        student_id=student_id,
        location=location,
        class_id=payload.class_id,
    )


def validate_claim(
    db: Session,
    claim: AttendanceClaim,
    *,
    now: Optional[datetime] = None,
    radius_meters: float = GEOFENCE_RADIUS_METERS,
) -> ClaimOutcome:
    now = now or utcnow()
    outcome = _run_checks(db, claim, now, radius_meters)

    if outcome.accepted:
        logger.info("Attendance accepted: session %s student %s", claim.session_id, claim.student_id)
    else:
        logger.warning("Attendance rejected (%s): session %s student %s - %s",
                       outcome.reason.value, claim.session_id, claim.student_id, outcome.message)
    return outcome


def _run_checks(db: Session, claim: AttendanceClaim, now: datetime, radius_meters: float) -> ClaimOutcome:
    # 1. Existence
    session = sessions.get_session(db, claim.session_id)
    if session is None:
        return ClaimOutcome.reject(ErrorCode.NOT_FOUND, "Session not found")
    if claim.class_id is not None and claim.class_id != session.class_id:
        return ClaimOutcome.reject(ErrorCode.VALIDATION_FAILURE, "QR code does not belong to this class")

    # 2. Expiry (a claim at exactly expires_at is still on time)
    if now > session.expires_at:
        return ClaimOutcome.reject(ErrorCode.EXPIRED, "QR code expired")

    # 3. Enrollment
    if not classrooms.is_enrolled(db, session.class_id, claim.student_id):
        return ClaimOutcome.reject(ErrorCode.FORBIDDEN, "Student not enrolled in the class")

    # 4. Geofence
    distance = None
    classroom = session.classroom
    if classroom.has_anchor:
        if claim.location is None:
            return ClaimOutcome.reject(ErrorCode.LOCATION_REQUIRED, "This class requires your location")
        distance = geo.distance_meters((classroom.latitude, classroom.longitude), claim.location)
        if geo.is_too_far(distance, radius_meters):
            return ClaimOutcome.reject(
                ErrorCode.TOO_FAR,
                f"You are too far! Distance: {int(distance)}m. Get closer to class.",
                distance_meters=distance,
            )

    # 5. Duplication, decided by the store's unique constraint
    record = attendance_store.insert_record(
        db, session_id=session.id, student_id=claim.student_id, marked_at=now,
    )
    if record is None:
        return ClaimOutcome.reject(ErrorCode.ALREADY_MARKED, "Attendance already recorded for this session",
                                   distance_meters=distance)

    return ClaimOutcome.accept(record, distance_meters=distance)
