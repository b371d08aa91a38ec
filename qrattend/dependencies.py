# qrattend/dependencies.py

from fastapi import Request, Depends
from sqlalchemy.orm import Session

from qrattend.db import get_db
from qrattend.errors import NotAuthenticatedError, RoleDeniedError
from qrattend.models import User


def get_current_user(request: Request, db: Session = Depends(get_db)):
    """Fetches the user object from the session cookie, or rejects with 401."""

    # 1. Get user_id from session
    user_id = request.session.get('user_id')
    if not user_id:
        raise NotAuthenticatedError("Not authenticated")

    # 2. Fetch user from database
    user = db.get(User, user_id)

    # 3. Check for deleted/invalid user
    if not user:
        request.session.clear()  # Clear invalid session
        raise NotAuthenticatedError("User not found")

    return user


def require_role(*roles):
    """Dependency factory: the current user must hold one of ``roles``."""

    def checker(user: User = Depends(get_current_user)):
        if user.role not in roles:
            raise RoleDeniedError(f"Access denied for role: {user.role}")
        return user

    return checker


require_lecturer = require_role("lecturer")
require_student = require_role("student")
