"""The voting engine: one authority, many sessions.

``VotingEngine`` is the top-level coordinator. It holds the authority
identity, the session registry, the workflow, the entropy source and the
event sink, and exposes every operation as a method taking the caller id
first. Each method validates everything before it mutates anything, then
emits its events in order. A rejected call leaves no trace.

Public operations run one at a time under the engine's lock, so a threaded
host (the Flask server) cannot interleave a check with another call's write.
Reads hand back copies of proposals and voter records.
"""

import functools
import threading
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

import structlog

from . import directory, proposals
from .entropy import EntropySource, HostEntropy
from .errors import HasNotVoted, NoTiePending, NotEnrolled, Unauthorized
from .events import (
    EventSink,
    ParticipantEnrolled,
    ParticipantRevoked,
    PhaseChanged,
    ProposalSubmitted,
    RecordingSink,
    SessionReset,
    TieDetected,
    VoteCast,
    WinnerSelected,
)
from .session import Participant, Proposal, Session, SessionRegistry
from .tally import RANDOM, TallyOutcome, tally
from .workflow import Phase, Workflow

logger = structlog.get_logger(__name__)


def serialized(method):
    """Run ``method`` while holding the engine lock."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class VotingEngine:
    def __init__(
        self,
        authority: str,
        entropy: Optional[EntropySource] = None,
        sink: Optional[EventSink] = None,
    ):
        self.authority = authority
        self.entropy = entropy or HostEntropy()
        self.sink = sink if sink is not None else RecordingSink()
        self.registry = SessionRegistry()
        self.workflow = Workflow()
        self._lock = threading.RLock()

    # -- helpers -----------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self.workflow.current

    @property
    def session(self) -> Session:
        return self.registry.current

    @property
    def current_session(self) -> int:
        return self.registry.current_number

    def _require_authority(self, caller: str) -> None:
        if caller != self.authority:
            raise Unauthorized(caller)

    def _emit(self, *events: Any) -> None:
        for event in events:
            self.sink(event)

    def _session_for_read(self, caller: str, session: Optional[int]) -> Session:
        try:
            s = self.registry.get(session)
        except KeyError:
            raise NotEnrolled(caller, session) from None
        s.require_enrolled(caller)
        return s

    def _advance(self, caller: str, from_phase: Phase, to_phase: Phase, before=None) -> PhaseChanged:
        self._require_authority(caller)
        self.workflow.check(from_phase, to_phase)
        if before is not None:
            before()
        old, new = self.workflow.advance(from_phase, to_phase)
        logger.info("phase_changed", session=self.current_session, old=old.name, new=new.name)
        event = PhaseChanged(old, new)
        self._emit(event)
        return event

    # -- participant directory --------------------------------------------

    @serialized
    def enroll(self, caller: str, ids: Iterable[str]) -> List[str]:
        self._require_authority(caller)
        self.workflow.require(Phase.RegisteringVoters)
        added = directory.enroll(self.session, ids)
        for pid in added:
            logger.info("participant_enrolled", session=self.current_session, participant=pid)
        self._emit(*(ParticipantEnrolled(pid) for pid in added))
        return added

    @serialized
    def revoke(self, caller: str, ids: Iterable[str]) -> List[str]:
        self._require_authority(caller)
        self.workflow.require(Phase.RegisteringVoters)
        removed = directory.revoke(self.session, ids)
        for pid in removed:
            logger.info("participant_revoked", session=self.current_session, participant=pid)
        self._emit(*(ParticipantRevoked(pid) for pid in removed))
        return removed

    @serialized
    def require_enrolled(self, participant_id: str, session: Optional[int] = None) -> None:
        self._session_for_read(participant_id, session)

    @serialized
    def get_voter(self, caller: str, participant_id: str, session: Optional[int] = None) -> Participant:
        s = self._session_for_read(caller, session)
        return replace(directory.voter_record(s, participant_id))

    # -- workflow ---------------------------------------------------------

    @serialized
    def start_proposals_registering(self, caller: str) -> PhaseChanged:
        return self._advance(caller, Phase.RegisteringVoters, Phase.ProposalsRegistrationStarted)

    @serialized
    def end_proposals_registering(self, caller: str) -> PhaseChanged:
        return self._advance(
            caller,
            Phase.ProposalsRegistrationStarted,
            Phase.ProposalsRegistrationEnded,
            before=lambda: proposals.close_registration(self.session),
        )

    @serialized
    def start_voting_session(self, caller: str) -> PhaseChanged:
        return self._advance(caller, Phase.ProposalsRegistrationEnded, Phase.VotingSessionStarted)

    @serialized
    def end_voting_session(self, caller: str) -> PhaseChanged:
        return self._advance(caller, Phase.VotingSessionStarted, Phase.VotingSessionEnded)

    @serialized
    def start_tie_session(self, caller: str) -> PhaseChanged:
        """Reopen voting among the proposals left active by a narrowing tie."""
        self._require_authority(caller)
        self.workflow.require(Phase.VotingSessionEnded)
        if not self.session.tie.pending:
            raise NoTiePending(self.current_session)

        def _open():
            self.session.tie.pending = False

        return self._advance(caller, Phase.VotingSessionEnded, Phase.VotingSessionStarted, before=_open)

    @serialized
    def reset(self, caller: str) -> int:
        """Open a new session from any phase and return its number."""
        self._require_authority(caller)
        self.session.tie.most_voted.clear()
        self.session.tie.voter_log.clear()
        self.session.tie.pending = False
        new = self.registry.open_next()
        old_phase, new_phase = self.workflow.restart()
        logger.info("session_reset", session=new.number, previous_phase=old_phase.name)
        self._emit(SessionReset(new.number))
        if old_phase != new_phase:
            self._emit(PhaseChanged(old_phase, new_phase))
        return new.number

    # -- proposal ledger ----------------------------------------------------

    @serialized
    def submit_proposal(self, caller: str, description: str) -> int:
        self.session.require_enrolled(caller)
        self.workflow.require(Phase.ProposalsRegistrationStarted)
        proposal_id = proposals.submit(self.session, description)
        logger.info("proposal_submitted", session=self.current_session, proposal_id=proposal_id, by=caller)
        self._emit(ProposalSubmitted(proposal_id))
        return proposal_id

    @serialized
    def get_proposal(self, caller: str, proposal_id: int, session: Optional[int] = None) -> Proposal:
        s = self._session_for_read(caller, session)
        return replace(proposals.get(s, proposal_id))

    @serialized
    def list_proposals(self, session: Optional[int] = None) -> List[Proposal]:
        return [replace(p) for p in self.registry.get(session).proposals]

    @serialized
    def vote(self, caller: str, proposal_id: int) -> None:
        self.session.require_enrolled(caller)
        self.workflow.require(Phase.VotingSessionStarted)
        proposals.cast(self.session, caller, proposal_id)
        logger.info("vote_cast", session=self.current_session, voter=caller, proposal_id=proposal_id)
        self._emit(VoteCast(caller, proposal_id))

    # -- tally / results ----------------------------------------------------

    @serialized
    def tally_votes(self, caller: str) -> TallyOutcome:
        self._require_authority(caller)
        self.workflow.require(Phase.VotingSessionEnded)
        outcome = tally(self.session, self.entropy, caller)
        if len(outcome.tied_ids) > 1:
            self._emit(TieDetected(outcome.tied_ids))
        if outcome.finalized:
            old, new = self.workflow.advance(Phase.VotingSessionEnded, Phase.VotesTallied)
            logger.info("phase_changed", session=self.current_session, old=old.name, new=new.name)
            self._emit(
                WinnerSelected(self.current_session, outcome.winner, outcome.kind == RANDOM),
                PhaseChanged(old, new),
            )
        return outcome

    @serialized
    def winner_of(self, session: int) -> int:
        return self.registry.winner_of(session)

    @serialized
    def winning_proposal(self, session: int) -> Proposal:
        winner = self.winner_of(session)
        return replace(self.registry.get(session).proposals[winner])

    @serialized
    def choice_of(self, caller: str, participant_id: str, session: Optional[int] = None) -> int:
        s = self._session_for_read(caller, session)
        record = s.participants.get(participant_id)
        if record is None or not record.has_voted:
            raise HasNotVoted(participant_id, s.number)
        return record.voted_proposal

    @serialized
    def status(self) -> Dict[str, Any]:
        s = self.session
        return {
            "session": s.number,
            "phase": self.phase.name,
            "proposal_count": len(s.proposals),
            "active_ids": s.active_ids(),
            "last_tie_length": s.tie.last_tie_length,
            "tie_pending": s.tie.pending,
            "winning_proposal_id": s.winning_proposal_id,
        }
