"""Proposal ledger: submission, activation and vote casting."""

from .errors import AlreadyVoted, EmptyProposal, InactiveProposal, InvalidProposal
from .session import Proposal, Session


def get(session: Session, proposal_id: int) -> Proposal:
    if (
        not isinstance(proposal_id, int)
        or isinstance(proposal_id, bool)
        or not 0 <= proposal_id < len(session.proposals)
    ):
        raise InvalidProposal(proposal_id)
    return session.proposals[proposal_id]


def submit(session: Session, description: str) -> int:
    """Append a proposal and return its index. Duplicates are allowed."""
    if not isinstance(description, str) or not description.strip():
        raise EmptyProposal()
    session.proposals.append(Proposal(description=description))
    return len(session.proposals) - 1


def close_registration(session: Session) -> None:
    """Activate every proposal and take the first tie baseline.

    The baseline is the proposal count, so a first-round tie across all
    proposals counts as a repeated tie.
    """
    for p in session.proposals:
        p.active = True
    session.tie.last_tie_length = len(session.proposals)


def cast(session: Session, voter_id: str, proposal_id: int) -> None:
    participant = session.participants[voter_id]
    if participant.has_voted:
        raise AlreadyVoted(voter_id)
    proposal = get(session, proposal_id)
    if not proposal.active:
        raise InactiveProposal(proposal_id)

    participant.has_voted = True
    participant.voted_proposal = proposal_id
    proposal.vote_count += 1
    session.tie.voter_log.append(voter_id)
