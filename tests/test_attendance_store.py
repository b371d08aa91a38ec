from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from qrattend.models import Attendance
from qrattend.services.attendance_store import insert_record, list_for_session
from qrattend.services.sessions import open_session


def test_insert_is_unique_per_session_and_student(db, make_user, make_class, fixed_now):
    student = make_user()
    session = open_session(db, make_class(students=[student]).id, now=fixed_now)

    first = insert_record(db, session_id=session.id, student_id=student.id, marked_at=fixed_now)
    again = insert_record(db, session_id=session.id, student_id=student.id,
                          marked_at=fixed_now + timedelta(seconds=5))

    assert first is not None
    assert again is None
    assert db.query(Attendance).count() == 1
    # the failed insert leaves the session usable
    assert db.get(Attendance, first.id).marked_at == fixed_now


def test_other_integrity_failures_are_not_duplicates(db, make_user, make_class, fixed_now):
    student = make_user()
    session = open_session(db, make_class(students=[student]).id, now=fixed_now)

    with pytest.raises(IntegrityError):
        insert_record(db, session_id=session.id, student_id=student.id, marked_at=None)

    assert db.query(Attendance).count() == 0
    assert insert_record(db, session_id=session.id, student_id=student.id, marked_at=fixed_now)

def test_same_student_can_attend_different_sessions(db, make_user, make_class, fixed_now):
    student = make_user()
    classroom = make_class(students=[student])
    s1 = open_session(db, classroom.id, now=fixed_now)
    s2 = open_session(db, classroom.id, now=fixed_now + timedelta(days=1))

    assert insert_record(db, session_id=s1.id, student_id=student.id, marked_at=fixed_now)
    assert insert_record(db, session_id=s2.id, student_id=student.id, marked_at=fixed_now)


def test_list_for_session_in_marking_order(db, make_user, make_class, fixed_now):
    early, late = make_user(name="Early"), make_user(name="Late")
    session = open_session(db, make_class(students=[early, late]).id, now=fixed_now)
    insert_record(db, session_id=session.id, student_id=late.id, marked_at=fixed_now + timedelta(minutes=4))
    insert_record(db, session_id=session.id, student_id=early.id, marked_at=fixed_now + timedelta(minutes=1))

    rows = list_for_session(db, session.id)

    assert [student.name for _, student in rows] == ["Early", "Late"]
