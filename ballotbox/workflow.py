"""Workflow phases and the ordered state machine that guards them.

Transitions are fail-closed: only the pairs in ``TRANSITIONS`` exist. The
single back-edge ``VotingSessionEnded -> VotingSessionStarted`` is reserved
for tie re-votes; a fresh cycle is only reachable through ``reset``.
"""

import enum
from typing import Set, Tuple

from .errors import PhaseMismatch


class Phase(enum.IntEnum):
    RegisteringVoters = 0
    ProposalsRegistrationStarted = 1
    ProposalsRegistrationEnded = 2
    VotingSessionStarted = 3
    VotingSessionEnded = 4
    VotesTallied = 5


TRANSITIONS: Set[Tuple[Phase, Phase]] = {
    (Phase.RegisteringVoters, Phase.ProposalsRegistrationStarted),
    (Phase.ProposalsRegistrationStarted, Phase.ProposalsRegistrationEnded),
    (Phase.ProposalsRegistrationEnded, Phase.VotingSessionStarted),
    (Phase.VotingSessionStarted, Phase.VotingSessionEnded),
    (Phase.VotingSessionEnded, Phase.VotesTallied),
    # tie session
    (Phase.VotingSessionEnded, Phase.VotingSessionStarted),
}


class Workflow:
    """Holds the current phase. Authorization is the caller's concern."""

    def __init__(self, phase: Phase = Phase.RegisteringVoters):
        self.current = phase

    def require(self, expected: Phase) -> None:
        if self.current != expected:
            raise PhaseMismatch(expected=expected, actual=self.current)

    def check(self, from_phase: Phase, to_phase: Phase) -> None:
        """Validate ``advance(from_phase, to_phase)`` without applying it."""
        if (from_phase, to_phase) not in TRANSITIONS:
            raise ValueError(f"no transition {from_phase.name} -> {to_phase.name}")
        self.require(from_phase)

    def advance(self, from_phase: Phase, to_phase: Phase) -> Tuple[Phase, Phase]:
        """Move from ``from_phase`` to ``to_phase`` and return ``(old, new)``."""
        self.check(from_phase, to_phase)
        old = self.current
        self.current = to_phase
        return old, to_phase

    def restart(self) -> Tuple[Phase, Phase]:
        old = self.current
        self.current = Phase.RegisteringVoters
        return old, self.current
