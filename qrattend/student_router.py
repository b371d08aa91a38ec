from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from qrattend.datetime_utils import utcnow
from qrattend.db import get_db
from qrattend.dependencies import require_student
from qrattend.errors import ErrorCode, HTTP_STATUS
from qrattend.lecturer_router import session_out
from qrattend.models import User
from qrattend.schemas.analytics_schemas import HistoryRowOut, StudentClassSummaryOut, StudentHistoryOut
from qrattend.schemas.attendance_schemas import AttendanceRecordOut, AttendanceRequest, MarkAttendanceResponse
from qrattend.schemas.session_schemas import UserSessionsOut
from qrattend.services import analytics, sessions
from qrattend.services.validator import AttendanceClaim, claim_from_token, validate_claim

router = APIRouter(prefix="/student", tags=["student"])


def rejection_response(code, detail, **extra):
    body = {"code": code.value, "detail": detail}
    body.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=HTTP_STATUS[code], content=body)


# ==========================================
# CHECK-IN ROUTE
# ==========================================
@router.post("/attendance", response_model=MarkAttendanceResponse, status_code=status.HTTP_201_CREATED)
async def mark_attendance(
    payload: AttendanceRequest,
    db: Session = Depends(get_db),
    student: User = Depends(require_student)
):
    if payload.token:
        claim = claim_from_token(payload.token, student.id, payload.location)
        if claim is None:
            return rejection_response(ErrorCode.VALIDATION_FAILURE, "Invalid QR code")
        if payload.session_id is not None and payload.session_id != claim.session_id:
            return rejection_response(ErrorCode.VALIDATION_FAILURE, "QR code does not match the session")
    else:
        claim = AttendanceClaim(
            session_id=payload.session_id,
            student_id=student.id,
            location=payload.location,
        )

    outcome = validate_claim(db, claim)
    if not outcome.accepted:
        return rejection_response(outcome.reason, outcome.message, distance_meters=outcome.distance_meters)

    return MarkAttendanceResponse(
        message=outcome.message,
        record=AttendanceRecordOut.model_validate(outcome.record),
        distance_meters=outcome.distance_meters,
    )


@router.get("/history", response_model=StudentHistoryOut)
async def history(
    db: Session = Depends(get_db),
    student: User = Depends(require_student)
):
    rows = analytics.student_history(db, student.id)
    return StudentHistoryOut(
        history=[HistoryRowOut.model_validate(r) for r in rows],
        summary=[StudentClassSummaryOut.model_validate(s) for s in analytics.summarize_history(rows)],
    )


@router.get("/sessions", response_model=UserSessionsOut)
async def my_sessions(
    db: Session = Depends(get_db),
    student: User = Depends(require_student)
):
    now = utcnow()
    grouped = sessions.sessions_for_user(db, student, now=now)
    return UserSessionsOut(
        active=[session_out(s, now) for s in grouped[sessions.SessionState.ACTIVE]],
        expired=[session_out(s, now) for s in grouped[sessions.SessionState.EXPIRED]],
    )
