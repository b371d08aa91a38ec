from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AttendanceRequest(BaseModel):
    session_id: Optional[int] = None
    token: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_claim_shape(self):
        if self.session_id is None and not self.token:
            raise ValueError("Provide a session_id or a scanned token")
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be sent together")
        return self

    @property
    def location(self):
        if self.latitude is None:
            return None
        return (self.latitude, self.longitude)


class AttendanceRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: int
    student_id: int
    marked_at: datetime


class MarkAttendanceResponse(BaseModel):
    message: str
    record: AttendanceRecordOut
    distance_meters: Optional[float] = None


class SessionAttendeeOut(BaseModel):
    student_id: int
    staff_no: Optional[str]
    name: Optional[str]
    email: Optional[str]
    marked_at: datetime
