"""Tally and tie resolution.

One call per ``VotingSessionEnded`` phase. Three outcomes:

- a single proposal holds the maximum: it wins;
- several tie and the tie is smaller than the previous one: the others are
  deactivated, votes are wiped and a tie round is left pending;
- several tie and the tie did not shrink: one of them is drawn with the
  (weak) entropy source.

Only active proposals are counted. Stale counts on inactive proposals are
never read.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import structlog

from .entropy import EntropySource
from .errors import NoProposals
from .session import Session

logger = structlog.get_logger(__name__)

WINNER = "winner"
NARROWED = "narrowed"
RANDOM = "random"


@dataclass(frozen=True)
class TallyOutcome:
    kind: str
    tied_ids: Tuple[int, ...] = ()
    winner: Optional[int] = None

    @property
    def finalized(self) -> bool:
        return self.kind != NARROWED


def most_voted(session: Session) -> Tuple[int, Tuple[int, ...]]:
    """Return ``(max_vote, ids)`` over active proposals.

    With no votes at all every active proposal ties at zero.
    """
    active = [(i, p) for i, p in enumerate(session.proposals) if p.active]
    if not active:
        return 0, ()
    max_vote = max(p.vote_count for _, p in active)
    return max_vote, tuple(i for i, p in active if p.vote_count == max_vote)


def _narrow(session: Session, tied: Tuple[int, ...]) -> None:
    keep = set(tied)
    for i, p in enumerate(session.proposals):
        if i not in keep:
            p.active = False
        p.vote_count = 0
    for voter_id in session.tie.voter_log:
        session.participants[voter_id].clear_vote()
    session.tie.voter_log.clear()
    session.tie.last_tie_length = len(tied)
    session.tie.most_voted.clear()
    session.tie.pending = True


def tally(session: Session, entropy: EntropySource, caller: str) -> TallyOutcome:
    """Run one tally attempt against ``session`` and apply its outcome."""
    if not session.proposals:
        raise NoProposals(session.number)

    max_vote, tied = most_voted(session)
    if not tied:
        raise NoProposals(session.number)
    session.tie.most_voted = list(tied)

    if len(tied) == 1:
        session.winning_proposal_id = tied[0]
        logger.info("winner_selected", session=session.number, proposal_id=tied[0], max_vote=max_vote)
        return TallyOutcome(WINNER, tied, tied[0])

    logger.info(
        "tie_detected",
        session=session.number,
        tied_ids=list(tied),
        max_vote=max_vote,
        last_tie_length=session.tie.last_tie_length,
    )
    if len(tied) < session.tie.last_tie_length:
        _narrow(session, tied)
        return TallyOutcome(NARROWED, tied)

    index = entropy.random_int(caller) % len(tied)
    winner = tied[index]
    session.winning_proposal_id = winner
    logger.warning(
        "winner_drawn_from_weak_entropy",
        session=session.number,
        proposal_id=winner,
        tied_ids=list(tied),
    )
    return TallyOutcome(RANDOM, tied, winner)
