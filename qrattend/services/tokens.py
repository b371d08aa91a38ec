from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import jwt

from qrattend.config import TOKEN_ALGORITHM, TOKEN_SECRET
from qrattend.datetime_utils import to_epoch_seconds


@dataclass(frozen=True)
class SessionToken:
    session_id: int
    class_id: int
    issued_at: datetime
    expires_at: datetime


def create_session_token(session_id: int, class_id: int, issued_at: datetime, expires_at: datetime) -> str:
    """
    Create a signed JWT for a session. Contains:
      - session_id, class_id
      - issued_at, expires_at (ISO, exact)
      - iat, exp (epoch seconds, for generic JWT consumers)
    """
    payload = {
        "session_id": int(session_id),
        "class_id": int(class_id),
        "issued_at": issued_at.isoformat(),
        "expires_at": expires_at.isoformat(),
        "iat": to_epoch_seconds(issued_at),
        "exp": to_epoch_seconds(expires_at, round_up=True),
    }
    return jwt.encode(payload, TOKEN_SECRET, algorithm=TOKEN_ALGORITHM)


def decode_session_token(token: str, *, verify_exp: bool = True) -> SessionToken:
    """
    Returns the decoded payload if the signature is valid, else raises jwt exceptions.

    Attendance claims decode with verify_exp=False: the stored session's
    expires_at is authoritative and is checked by the validator.
    """
    payload = jwt.decode(
        token,
        TOKEN_SECRET,
        algorithms=[TOKEN_ALGORITHM],
        options={"verify_exp": verify_exp, "require": ["session_id", "class_id", "exp"]},
    )
    try:
        return SessionToken(
            session_id=int(payload["session_id"]),
            class_id=int(payload["class_id"]),
            issued_at=datetime.fromisoformat(payload["issued_at"]),
            expires_at=datetime.fromisoformat(payload["expires_at"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError(f"Malformed session token: {exc}") from exc
