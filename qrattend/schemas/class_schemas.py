from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from qrattend.schemas.auth_schemas import UserOut


class CreateClassRequest(BaseModel):
    name: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_anchor(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be sent together")
        return self


class EnrollStudentRequest(BaseModel):
    staff_no: str = Field(min_length=1)


class ClassOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    subject: str
    lecturer_id: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None


class ClassDetailOut(ClassOut):
    students: List[UserOut] = []
