"""Flask API over a single in-memory VotingEngine.

The caller identity is taken from the ``X-Caller-Id`` header.

Endpoints:
- POST /voters {"ids": [...]}            -> enroll (authority)
- DELETE /voters {"ids": [...]}          -> revoke (authority)
- GET /voters/<id>[?session=n]           -> voter record (enrolled)
- GET /voters/<id>/choice[?session=n]    -> voter's choice (enrolled)
- POST /phase/<action>                   -> workflow transition (authority)
- POST /proposals {"description": ...}   -> submit a proposal (enrolled)
- GET /proposals[?session=n]             -> list proposals
- GET /proposals/<id>[?session=n]        -> one proposal (enrolled)
- POST /votes {"proposal_id": n}         -> cast a vote (enrolled)
- POST /tally                            -> tally / resolve ties (authority)
- POST /reset                            -> open a new session (authority)
- GET /status                            -> current session and phase
- GET /sessions/<n>/winner               -> winner of a finalized session
- GET /events                            -> events recorded so far
"""

from typing import Any, Dict

import structlog
from flask import Flask, jsonify, request

from .config import CALLER_HEADER, load_settings
from .engine import VotingEngine
from .errors import VotingError
from .events import RecordingSink, event_to_dict
from .logging_cfg import configure_logging

logger = structlog.get_logger(__name__)

app = Flask(__name__)

_STATE: Dict[str, Any] = {
    "engine": VotingEngine(load_settings().authority, sink=RecordingSink()),
}


def _engine() -> VotingEngine:
    return _STATE["engine"]


def _caller() -> str:
    return request.headers.get(CALLER_HEADER, "")


def _session_arg():
    raw = request.args.get("session")
    if raw is None:
        return None
    return int(raw)


def _proposal_json(proposal_id: int, proposal) -> Dict[str, Any]:
    return {
        "id": proposal_id,
        "description": proposal.description,
        "vote_count": proposal.vote_count,
        "active": proposal.active,
    }


@app.errorhandler(VotingError)
def _voting_error(e: VotingError):
    logger.debug("request_rejected", path=request.path, kind=e.kind, detail=str(e))
    return jsonify({"error": e.kind, "detail": str(e)}), e.status_code


@app.errorhandler(ValueError)
def _bad_value(e: ValueError):
    return jsonify({"error": "bad request", "detail": str(e)}), 400


@app.route("/voters", methods=["POST", "DELETE"])
def manage_voters():
    """Enroll (POST) or revoke (DELETE) participants: expects {"ids": [...]}."""
    data = request.get_json(silent=True) or {}
    ids = data.get("ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        return jsonify({"error": "ids must be a list of strings"}), 400
    if request.method == "POST":
        changed = _engine().enroll(_caller(), ids)
        return jsonify({"status": "enrolled", "ids": changed})
    changed = _engine().revoke(_caller(), ids)
    return jsonify({"status": "revoked", "ids": changed})


@app.route("/voters/<participant_id>", methods=["GET"])
def get_voter(participant_id: str):
    """Return a participant record for the current or a given session."""
    record = _engine().get_voter(_caller(), participant_id, _session_arg())
    return jsonify({"id": participant_id, **record.to_dict()})


@app.route("/voters/<participant_id>/choice", methods=["GET"])
def get_choice(participant_id: str):
    """Return the proposal a participant voted for."""
    choice = _engine().choice_of(_caller(), participant_id, _session_arg())
    return jsonify({"id": participant_id, "proposal_id": choice})


_PHASE_ACTIONS = {
    "start-proposals": VotingEngine.start_proposals_registering,
    "end-proposals": VotingEngine.end_proposals_registering,
    "start-voting": VotingEngine.start_voting_session,
    "end-voting": VotingEngine.end_voting_session,
    "start-tie-session": VotingEngine.start_tie_session,
}


@app.route("/phase/<action>", methods=["POST"])
def change_phase(action: str):
    """Run a workflow transition named by <action>."""
    handler = _PHASE_ACTIONS.get(action)
    if handler is None:
        return jsonify({"error": f"unknown action {action!r}"}), 404
    event = handler(_engine(), _caller())
    return jsonify({"old": event.old.name, "new": event.new.name})


@app.route("/proposals", methods=["POST"])
def submit_proposal():
    """Submit a proposal: expects {"description": "..."}."""
    data = request.get_json(silent=True) or {}
    description = data.get("description")
    if not isinstance(description, str):
        return jsonify({"error": "missing description"}), 400
    proposal_id = _engine().submit_proposal(_caller(), description)
    return jsonify({"status": "submitted", "proposal_id": proposal_id}), 201


@app.route("/proposals", methods=["GET"])
def list_proposals():
    """List the proposals of the current or a given session."""
    try:
        items = _engine().list_proposals(_session_arg())
    except KeyError:
        return jsonify({"error": "unknown session"}), 404
    return jsonify({"proposals": [_proposal_json(i, p) for i, p in enumerate(items)]})


@app.route("/proposals/<int:proposal_id>", methods=["GET"])
def get_proposal(proposal_id: int):
    """Return one proposal."""
    proposal = _engine().get_proposal(_caller(), proposal_id, _session_arg())
    return jsonify(_proposal_json(proposal_id, proposal))


@app.route("/votes", methods=["POST"])
def cast_vote():
    """Cast the caller's vote: expects {"proposal_id": n}."""
    data = request.get_json(silent=True) or {}
    proposal_id = data.get("proposal_id")
    if not isinstance(proposal_id, int) or isinstance(proposal_id, bool):
        return jsonify({"error": "proposal_id must be an integer"}), 400
    _engine().vote(_caller(), proposal_id)
    return jsonify({"status": "voted", "proposal_id": proposal_id}), 201


@app.route("/tally", methods=["POST"])
def tally_votes():
    """Tally the votes; ties are narrowed or drawn."""
    outcome = _engine().tally_votes(_caller())
    return jsonify(
        {
            "outcome": outcome.kind,
            "tied_ids": list(outcome.tied_ids),
            "winner": outcome.winner,
            "phase": _engine().phase.name,
        }
    )


@app.route("/reset", methods=["POST"])
def reset_session():
    """Open a new session."""
    number = _engine().reset(_caller())
    return jsonify({"status": "reset", "session": number})


@app.route("/status", methods=["GET"])
def status():
    """Current session, phase and tie state."""
    return jsonify(_engine().status())


@app.route("/sessions/<int:number>/winner", methods=["GET"])
def winner(number: int):
    """Winner of a finalized session."""
    engine = _engine()
    winner_id = engine.winner_of(number)
    proposal = engine.winning_proposal(number)
    return jsonify({"session": number, "winner": _proposal_json(winner_id, proposal)})


@app.route("/events", methods=["GET"])
def events():
    """Events recorded so far."""
    sink = _engine().sink
    recorded = getattr(sink, "events", [])
    return jsonify({"events": [event_to_dict(e) for e in recorded]})


def main():
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_format)
    logger.info("server_starting", authority=settings.authority)
    app.run(debug=False)


if __name__ == "__main__":
    main()
