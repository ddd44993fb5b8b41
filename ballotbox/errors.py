"""Error taxonomy for the ballot engine.

Every failure is a local validation error raised before any state is
touched. Each class carries a stable ``kind`` (used in JSON error bodies)
and the HTTP ``status_code`` the Flask layer answers with.
"""

from typing import Any


class VotingError(Exception):
    kind = "VotingError"
    status_code = 400


class Unauthorized(VotingError, PermissionError):
    """Caller is not the authority."""

    kind = "Unauthorized"
    status_code = 403

    def __init__(self, caller: str):
        super().__init__(f"{caller!r} is not the authority")
        self.caller = caller


class PhaseMismatch(VotingError):
    """Operation attempted in the wrong workflow phase."""

    kind = "PhaseMismatch"
    status_code = 409

    def __init__(self, expected: Any, actual: Any):
        super().__init__(f"expected phase {expected.name}, current phase is {actual.name}")
        self.expected = expected
        self.actual = actual


class NotEnrolled(VotingError, PermissionError):
    kind = "NotEnrolled"
    status_code = 403

    def __init__(self, participant: str, session: int):
        super().__init__(f"{participant!r} is not enrolled in session {session}")
        self.participant = participant
        self.session = session


class AlreadyVoted(VotingError):
    kind = "AlreadyVoted"
    status_code = 409

    def __init__(self, participant: str):
        super().__init__(f"{participant!r} has already voted this round")
        self.participant = participant


class InvalidProposal(VotingError, LookupError):
    kind = "InvalidProposal"
    status_code = 404

    def __init__(self, proposal_id: Any):
        super().__init__(f"no proposal with id {proposal_id!r}")
        self.proposal_id = proposal_id


class InactiveProposal(VotingError):
    """Proposal was excluded by an earlier tie round."""

    kind = "InactiveProposal"
    status_code = 409

    def __init__(self, proposal_id: int):
        super().__init__(f"proposal {proposal_id} is no longer active")
        self.proposal_id = proposal_id


class EmptyProposal(VotingError):
    kind = "EmptyProposal"
    status_code = 400

    def __init__(self):
        super().__init__("proposal description must not be empty")


class NoProposals(VotingError):
    kind = "NoProposals"
    status_code = 409

    def __init__(self, session: int):
        super().__init__(f"session {session} has no proposals to tally")
        self.session = session


class NoTiePending(VotingError):
    kind = "NoTiePending"
    status_code = 409

    def __init__(self, session: int):
        super().__init__(f"session {session} has no tie round waiting to be opened")
        self.session = session


class SessionNotFinalized(VotingError):
    kind = "SessionNotFinalized"
    status_code = 404

    def __init__(self, session: Any):
        super().__init__(f"session {session!r} has not been tallied")
        self.session = session


class HasNotVoted(VotingError):
    kind = "HasNotVoted"
    status_code = 404

    def __init__(self, participant: str, session: int):
        super().__init__(f"{participant!r} has not voted in session {session}")
        self.participant = participant
        self.session = session
