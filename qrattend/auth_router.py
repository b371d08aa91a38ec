import logging

from fastapi import APIRouter, Request, Depends, Form
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from qrattend.db import get_db
from qrattend.dependencies import get_current_user
from qrattend.errors import NotAuthenticatedError
from qrattend.models import User
from qrattend.schemas.auth_schemas import UserOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])
pwd_context = CryptContext(schemes=["sha256_crypt"], deprecated="auto")


def get_password_hash(password):
    return pwd_context.hash(password)


@router.post("/login", response_model=UserOut)
async def login(
    request: Request,
    staff_no: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.staff_no == staff_no).first()

    if not user or not pwd_context.verify(password, user.password_hash):
        logger.warning("Failed login for staff_no %s", staff_no)
        raise NotAuthenticatedError("Invalid Staff Number or Password")

    # Create Session
    request.session["user_id"] = user.id
    request.session["user_role"] = user.role
    request.session["user_name"] = user.name

    return user


@router.get("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"detail": "Logged out"}


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return user
