from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from qrattend.services.analytics import AttendanceStatus, RiskBand


class ClassSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_id: int
    name: str
    subject: str
    total_sessions: int
    total_students: int
    attendance_marked: int
    attendance_percentage: float


class HistoryRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: int
    session_date: datetime
    class_id: int
    class_name: str
    subject: str
    status: AttendanceStatus
    marked_at: Optional[datetime] = None


class StudentClassSummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_id: int
    class_name: str
    subject: str
    total_sessions: int
    present: int
    absent: int
    attendance_percentage: float


class StudentHistoryOut(BaseModel):
    history: List[HistoryRowOut]
    summary: List[StudentClassSummaryOut]


class RosterRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: int
    staff_no: Optional[str]
    name: Optional[str]
    present: int
    total_sessions: int
    attendance_percentage: float
    risk: RiskBand
