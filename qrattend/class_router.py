from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from qrattend.db import get_db
from qrattend.dependencies import get_current_user, require_lecturer
from qrattend.errors import ForbiddenError, NotFoundError
from qrattend.models import User
from qrattend.schemas.auth_schemas import UserOut
from qrattend.schemas.class_schemas import ClassDetailOut, ClassOut, CreateClassRequest, EnrollStudentRequest
from qrattend.services import classrooms

router = APIRouter(prefix="/classes", tags=["classes"])


@router.post("", response_model=ClassOut, status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: CreateClassRequest,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    return classrooms.create_class(
        db,
        lecturer_id=lecturer.id,
        name=payload.name,
        subject=payload.subject,
        latitude=payload.latitude,
        longitude=payload.longitude,
    )


@router.post("/{class_id}/students", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def add_student(
    class_id: int,
    payload: EnrollStudentRequest,
    db: Session = Depends(get_db),
    lecturer: User = Depends(require_lecturer)
):
    classroom = classrooms.get_owned(db, class_id, lecturer.id)
    return classrooms.enroll_student(db, classroom, payload.staff_no)


@router.get("", response_model=List[ClassOut])
async def my_classes(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    if user.role == "lecturer":
        return classrooms.list_by_teacher(db, user.id)
    return classrooms.list_by_student(db, user.id)


@router.get("/{class_id}", response_model=ClassDetailOut)
async def class_details(
    class_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    classroom = classrooms.find_by_id(db, class_id)
    if classroom is None:
        raise NotFoundError("Class not found", class_id=class_id)

    # Owners and enrolled students only
    if classroom.lecturer_id != user.id and not classrooms.is_enrolled(db, class_id, user.id):
        raise ForbiddenError("You are not part of this class", class_id=class_id)
    return classroom
