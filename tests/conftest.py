import os
import sys

import pytest

# Ensure the repository root is on sys.path for tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from ballotbox import FixedEntropy, VotingEngine  # noqa: E402
from ballotbox.events import RecordingSink  # noqa: E402

AUTHORITY = "owner"
VOTERS = ["v1", "v2", "v3"]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def entropy():
    return FixedEntropy(timestamp=1700000000, beacon=42)


@pytest.fixture
def engine(entropy, sink):
    return VotingEngine(AUTHORITY, entropy=entropy, sink=sink)


def open_voting(engine, descriptions=("p0", "p1", "p2"), voters=VOTERS):
    """Enroll ``voters``, register one proposal per description and open voting."""
    engine.enroll(AUTHORITY, voters)
    engine.start_proposals_registering(AUTHORITY)
    for i, text in enumerate(descriptions):
        engine.submit_proposal(voters[i % len(voters)], text)
    engine.end_proposals_registering(AUTHORITY)
    engine.start_voting_session(AUTHORITY)


def run_round(engine, ballots):
    """Cast ``{voter: proposal_id}`` and close the voting session."""
    for voter, proposal_id in ballots.items():
        engine.vote(voter, proposal_id)
    engine.end_voting_session(AUTHORITY)


@pytest.fixture
def voting(engine):
    open_voting(engine)
    return engine
