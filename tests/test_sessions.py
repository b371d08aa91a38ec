from datetime import timedelta

import pytest

from qrattend.errors import NotFoundError
from qrattend.services.sessions import (
    SESSION_TTL,
    SessionState,
    classify,
    list_sessions_for_class,
    open_session,
    sessions_for_user,
)
from qrattend.services.tokens import decode_session_token


def test_open_session_sets_fixed_window(db, make_class, fixed_now):
    classroom = make_class()

    session = open_session(db, classroom.id, now=fixed_now)

    assert session.id is not None
    assert session.class_id == classroom.id
    assert session.created_at == fixed_now
    assert session.expires_at == fixed_now + timedelta(minutes=15)
    assert SESSION_TTL == timedelta(minutes=15)


def test_open_session_token_binds_session_and_class(db, make_class, fixed_now):
    classroom = make_class()

    session = open_session(db, classroom.id, now=fixed_now)
    payload = decode_session_token(session.token, verify_exp=False)

    assert payload.session_id == session.id
    assert payload.class_id == classroom.id
    assert payload.issued_at == session.created_at
    assert payload.expires_at == session.expires_at


def test_open_session_unknown_class(db):
    with pytest.raises(NotFoundError):
        open_session(db, 404)


def test_classify_window(db, make_class, fixed_now):
    session = open_session(db, make_class().id, now=fixed_now)

    assert classify(session, fixed_now) is SessionState.ACTIVE
    assert classify(session, session.expires_at - timedelta(microseconds=1)) is SessionState.ACTIVE
    assert classify(session, session.expires_at) is SessionState.EXPIRED
    assert classify(session, fixed_now + timedelta(hours=2)) is SessionState.EXPIRED


def test_list_sessions_most_recent_first(db, make_class, fixed_now):
    classroom = make_class()
    first = open_session(db, classroom.id, now=fixed_now)
    second = open_session(db, classroom.id, now=fixed_now + timedelta(days=1))

    assert [s.id for s in list_sessions_for_class(db, classroom.id)] == [second.id, first.id]


def test_sessions_for_user_groups_by_state(db, make_user, make_class, lecturer, fixed_now):
    student = make_user()
    outsider = make_user()
    classroom = make_class(students=[student])
    old = open_session(db, classroom.id, now=fixed_now)
    live = open_session(db, classroom.id, now=fixed_now + timedelta(hours=1))

    now = fixed_now + timedelta(hours=1, minutes=5)
    for user in (student, lecturer):
        grouped = sessions_for_user(db, user, now=now)
        assert [s.id for s in grouped[SessionState.ACTIVE]] == [live.id]
        assert [s.id for s in grouped[SessionState.EXPIRED]] == [old.id]

    empty = sessions_for_user(db, outsider, now=now)
    assert empty == {SessionState.ACTIVE: [], SessionState.EXPIRED: []}
