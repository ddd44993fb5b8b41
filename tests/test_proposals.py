import sys
import threading

import pytest

from ballotbox import FixedEntropy, VotingEngine
from ballotbox.errors import (
    AlreadyVoted,
    EmptyProposal,
    InvalidProposal,
    NotEnrolled,
    PhaseMismatch,
)
from ballotbox.events import ProposalSubmitted, RecordingSink, VoteCast

from conftest import AUTHORITY, open_voting


@pytest.fixture
def registering(engine):
    engine.enroll(AUTHORITY, ["v1", "v2"])
    engine.start_proposals_registering(AUTHORITY)
    return engine


def test_submit_appends_with_stable_ids(registering, sink):
    assert registering.submit_proposal("v1", "same") == 0
    assert registering.submit_proposal("v2", "same") == 1
    assert sink.of_type(ProposalSubmitted) == [ProposalSubmitted(0), ProposalSubmitted(1)]
    listed = registering.list_proposals()
    assert [p.description for p in listed] == ["same", "same"]
    assert all(p.vote_count == 0 for p in listed)


def test_submit_requires_enrollment_before_phase(engine):
    # not enrolled and wrong phase: enrollment is reported
    with pytest.raises(NotEnrolled):
        engine.submit_proposal("v1", "x")
    engine.enroll(AUTHORITY, ["v1"])
    with pytest.raises(PhaseMismatch):
        engine.submit_proposal("v1", "x")


def test_submit_rejects_empty(registering):
    with pytest.raises(EmptyProposal):
        registering.submit_proposal("v1", "")
    with pytest.raises(EmptyProposal):
        registering.submit_proposal("v1", "   ")
    assert registering.list_proposals() == []


def test_authority_cannot_propose_unless_enrolled(registering):
    with pytest.raises(NotEnrolled):
        registering.submit_proposal(AUTHORITY, "x")


def test_end_registration_activates_and_snapshots(registering):
    for text in ("a", "b", "c", "d"):
        registering.submit_proposal("v1", text)
    assert registering.session.active_ids() == []
    registering.end_proposals_registering(AUTHORITY)
    assert registering.session.active_ids() == [0, 1, 2, 3]
    assert registering.session.tie.last_tie_length == 4


def test_get_proposal(registering):
    registering.submit_proposal("v1", "a")
    assert registering.get_proposal("v2", 0).description == "a"
    with pytest.raises(InvalidProposal):
        registering.get_proposal("v2", 5)
    with pytest.raises(NotEnrolled):
        registering.get_proposal("outsider", 0)


def test_vote_records_choice(voting, sink):
    sink.clear()
    voting.vote("v1", 2)
    record = voting.get_voter("v1", "v1")
    assert record.has_voted and record.voted_proposal == 2
    assert voting.list_proposals()[2].vote_count == 1
    assert voting.session.tie.voter_log == ["v1"]
    assert sink.events == [VoteCast("v1", 2)]
    assert voting.choice_of("v2", "v1") == 2


def test_vote_twice_fails_without_side_effects(voting):
    voting.vote("v1", 0)
    with pytest.raises(AlreadyVoted):
        voting.vote("v1", 1)
    assert [p.vote_count for p in voting.list_proposals()] == [1, 0, 0]
    assert voting.session.tie.voter_log == ["v1"]


@pytest.mark.parametrize("bad_id", [3, -1, 99, "0", True])
def test_vote_out_of_range(voting, bad_id):
    with pytest.raises(InvalidProposal):
        voting.vote("v1", bad_id)
    assert not voting.get_voter("v1", "v1").has_voted


def test_vote_requires_enrollment_and_phase(voting):
    with pytest.raises(NotEnrolled):
        voting.vote("outsider", 0)
    voting.end_voting_session(AUTHORITY)
    with pytest.raises(PhaseMismatch):
        voting.vote("v1", 0)


def test_concurrent_votes_from_one_voter_count_once():
    old_interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    try:
        for _ in range(50):
            engine = VotingEngine(AUTHORITY, entropy=FixedEntropy(), sink=RecordingSink())
            open_voting(engine)
            results = []

            def cast():
                try:
                    engine.vote("v1", 0)
                    results.append("ok")
                except AlreadyVoted:
                    results.append("dup")

            threads = [threading.Thread(target=cast) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
            assert results.count("ok") == 1
            assert engine.list_proposals()[0].vote_count == 1
            assert engine.session.tie.voter_log == ["v1"]
    finally:
        sys.setswitchinterval(old_interval)


def test_reads_return_copies(voting):
    voting.vote("v1", 0)
    listed = voting.list_proposals()
    listed[0].vote_count = 99
    listed[1].active = False
    one = voting.get_proposal("v1", 2)
    one.active = False
    record = voting.get_voter("v1", "v1")
    record.has_voted = False
    assert voting.list_proposals()[0].vote_count == 1
    assert voting.session.active_ids() == [0, 1, 2]
    assert voting.get_voter("v1", "v1").has_voted
