from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Table, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from qrattend.datetime_utils import utcnow
from qrattend.db import Base

# Enrollment set: the composite primary key keeps each (class, student) pair unique
# and makes membership an index lookup.
class_students = Table(
    "class_students",
    Base.metadata,
    Column("class_id", Integer, ForeignKey("classes.id"), primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    staff_no = Column(String, unique=True, index=True)
    name = Column(String)
    email = Column(String, unique=True, index=True, nullable=True)
    role = Column(String)  # "lecturer" or "student"
    password_hash = Column(String)

    classes_taught = relationship("ClassRoom", back_populates="lecturer")
    enrolled_classes = relationship("ClassRoom", secondary=class_students, back_populates="students")
    attendance_records = relationship("Attendance", back_populates="student")


class ClassRoom(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    lecturer_id = Column(Integer, ForeignKey("users.id"), index=True)

    # --- GEOFENCE ANCHOR (both or neither) ---
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    # -----------------------------------------

    created_at = Column(DateTime, default=utcnow)

    lecturer = relationship("User", back_populates="classes_taught")
    students = relationship("User", secondary=class_students, back_populates="enrolled_classes")
    sessions = relationship("ClassSession", back_populates="classroom")

    @property
    def has_anchor(self):
        return self.latitude is not None and self.longitude is not None


class ClassSession(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), index=True, nullable=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    # Written in the same transaction as the insert, once the id exists
    token = Column(Text, nullable=True)

    classroom = relationship("ClassRoom", back_populates="sessions")
    attendance_records = relationship("Attendance", back_populates="session")


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), index=True, nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    marked_at = Column(DateTime, nullable=False)

    session = relationship("ClassSession", back_populates="attendance_records")
    student = relationship("User", back_populates="attendance_records")
