import pytest

from ballotbox.errors import NotEnrolled, PhaseMismatch, Unauthorized
from ballotbox.events import ParticipantEnrolled, ParticipantRevoked

from conftest import AUTHORITY


def test_enroll_emits_one_event_per_new_id(engine, sink):
    added = engine.enroll(AUTHORITY, ["a", "b"])
    assert added == ["a", "b"]
    assert sink.events == [ParticipantEnrolled("a"), ParticipantEnrolled("b")]
    assert engine.session.is_enrolled("a")


def test_reenroll_is_noop(engine, sink):
    engine.enroll(AUTHORITY, ["a"])
    sink.clear()
    assert engine.enroll(AUTHORITY, ["a", "a"]) == []
    assert sink.events == []
    assert engine.session.is_enrolled("a")


def test_enroll_requires_authority_and_phase(engine):
    with pytest.raises(Unauthorized):
        engine.enroll("a", ["a"])
    engine.start_proposals_registering(AUTHORITY)
    with pytest.raises(PhaseMismatch):
        engine.enroll(AUTHORITY, ["a"])
    assert not engine.session.is_enrolled("a")


def test_enroll_rejects_bad_ids_without_partial_apply(engine):
    with pytest.raises(ValueError):
        engine.enroll(AUTHORITY, ["a", ""])
    assert not engine.session.is_enrolled("a")


def test_revoke(engine, sink):
    engine.enroll(AUTHORITY, ["a", "b"])
    assert engine.revoke(AUTHORITY, ["a", "never-seen"]) == ["a"]
    assert sink.of_type(ParticipantRevoked) == [ParticipantRevoked("a")]
    assert not engine.session.is_enrolled("a")
    assert engine.session.is_enrolled("b")


def test_revoke_only_while_registering(engine):
    engine.enroll(AUTHORITY, ["a"])
    engine.start_proposals_registering(AUTHORITY)
    with pytest.raises(PhaseMismatch):
        engine.revoke(AUTHORITY, ["a"])
    assert engine.session.is_enrolled("a")


def test_require_enrolled(engine):
    engine.enroll(AUTHORITY, ["a"])
    engine.require_enrolled("a", 0)
    with pytest.raises(NotEnrolled):
        engine.require_enrolled("b", 0)
    with pytest.raises(NotEnrolled):
        engine.require_enrolled("a", 7)


def test_enrollment_is_per_session(engine):
    engine.enroll(AUTHORITY, ["a"])
    engine.reset(AUTHORITY)
    with pytest.raises(NotEnrolled):
        engine.require_enrolled("a")
    engine.require_enrolled("a", 0)


def test_get_voter(engine):
    engine.enroll(AUTHORITY, ["a"])
    record = engine.get_voter("a", "a")
    assert record.enrolled is True
    assert record.has_voted is False
    assert engine.get_voter("a", "stranger").enrolled is False
    with pytest.raises(NotEnrolled):
        engine.get_voter("stranger", "a")
