"""ballotbox - a permissioned, multi-session ballot engine with tie re-votes.

An authority enrolls participants, participants submit proposals and cast
one vote each, and the authority tallies. Ties are narrowed by re-voting
among the tied proposals; a tie that stops shrinking is broken with weak,
environment-derived randomness.
"""

from .engine import VotingEngine
from .entropy import FixedEntropy, HostEntropy
from .workflow import Phase

__all__ = ["VotingEngine", "Phase", "FixedEntropy", "HostEntropy"]
