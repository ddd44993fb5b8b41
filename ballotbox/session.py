"""Per-session state and the registry that owns it.

Each session owns its own participant table, proposal list, tie scratch
state and result slot. Sessions live in a list indexed by session number
and are never removed, so results of old sessions stay readable.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import NotEnrolled, SessionNotFinalized


@dataclass
class Participant:
    enrolled: bool = False
    has_voted: bool = False
    # meaningful only when has_voted is True
    voted_proposal: int = 0

    def clear_vote(self) -> None:
        self.has_voted = False
        self.voted_proposal = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "enrolled": self.enrolled,
            "has_voted": self.has_voted,
            "voted_proposal": self.voted_proposal if self.has_voted else None,
        }


@dataclass
class Proposal:
    description: str
    vote_count: int = 0
    active: bool = False


@dataclass
class TieState:
    most_voted: List[int] = field(default_factory=list)
    last_tie_length: int = 0
    voter_log: List[str] = field(default_factory=list)
    # set after a narrowing tie, cleared when the tie round opens
    pending: bool = False


@dataclass
class Session:
    number: int
    participants: Dict[str, Participant] = field(default_factory=dict)
    proposals: List[Proposal] = field(default_factory=list)
    tie: TieState = field(default_factory=TieState)
    winning_proposal_id: Optional[int] = None

    @property
    def finalized(self) -> bool:
        return self.winning_proposal_id is not None

    def is_enrolled(self, participant_id: str) -> bool:
        p = self.participants.get(participant_id)
        return p is not None and p.enrolled

    def require_enrolled(self, participant_id: str) -> Participant:
        if not self.is_enrolled(participant_id):
            raise NotEnrolled(participant_id, self.number)
        return self.participants[participant_id]

    def active_ids(self) -> List[int]:
        return [i for i, p in enumerate(self.proposals) if p.active]


class SessionRegistry:
    """Owns the session counter and every session partition."""

    def __init__(self):
        self._sessions: List[Session] = [Session(number=0)]

    @property
    def current_number(self) -> int:
        return len(self._sessions) - 1

    @property
    def current(self) -> Session:
        return self._sessions[-1]

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, number: Optional[int] = None) -> Session:
        """Return session ``number`` (the current one when None).

        Unknown numbers raise ``KeyError``.
        """
        if number is None:
            return self.current
        if not isinstance(number, int) or isinstance(number, bool) or not 0 <= number < len(self._sessions):
            raise KeyError(number)
        return self._sessions[number]

    def open_next(self) -> Session:
        session = Session(number=len(self._sessions))
        self._sessions.append(session)
        return session

    def winner_of(self, number: int) -> int:
        """Result store read: the recorded winner of a finalized session."""
        try:
            session = self.get(number)
        except KeyError:
            raise SessionNotFinalized(number) from None
        if not session.finalized:
            raise SessionNotFinalized(number)
        return session.winning_proposal_id
