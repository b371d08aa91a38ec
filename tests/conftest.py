from __future__ import annotations

from datetime import datetime
from itertools import count

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from qrattend.db import Base
from qrattend.models import ClassRoom, User


@pytest.fixture
def anchor():
    # Lagos campus anchor used by geofenced classes
    return (6.5244, 3.3792)


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 4, 9, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    seq = count(1)

    def _make(role="student", name=None):
        n = next(seq)
        user = User(
            staff_no=f"{role[0].upper()}{1000 + n}",
            name=name or f"{role.title()} {n}",
            email=f"{role}{n}@example.edu",
            role=role,
            password_hash="x",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def lecturer(make_user):
    return make_user("lecturer", name="Dr. Smith")


@pytest.fixture
def make_class(db, lecturer):
    def _make(students=(), anchor=None, name="CSC 301", subject="Data Structures", owner=None):
        classroom = ClassRoom(
            name=name,
            subject=subject,
            lecturer_id=(owner or lecturer).id,
            latitude=anchor[0] if anchor else None,
            longitude=anchor[1] if anchor else None,
        )
        classroom.students.extend(students)
        db.add(classroom)
        db.commit()
        db.refresh(classroom)
        return classroom

    return _make
