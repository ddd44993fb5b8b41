"""Participant directory: per-session enrollment."""

from typing import Iterable, List

from .session import Participant, Session


def _unique(ids: Iterable[str]) -> List[str]:
    if isinstance(ids, str):
        ids = [ids]
    out = list(dict.fromkeys(ids))
    for pid in out:
        if not isinstance(pid, str) or not pid:
            raise ValueError(f"participant id must be a non-empty string, got {pid!r}")
    return out


def enroll(session: Session, ids: Iterable[str]) -> List[str]:
    """Enroll ``ids`` and return the ones that were not enrolled before.

    Re-enrolling is a no-op.
    """
    ids = _unique(ids)
    added = [pid for pid in ids if not session.is_enrolled(pid)]
    for pid in added:
        session.participants.setdefault(pid, Participant()).enrolled = True
    return added


def revoke(session: Session, ids: Iterable[str]) -> List[str]:
    """Un-enroll ``ids`` and return the ones that were actually enrolled."""
    ids = _unique(ids)
    removed = [pid for pid in ids if session.is_enrolled(pid)]
    for pid in removed:
        session.participants[pid].enrolled = False
    return removed


def voter_record(session: Session, participant_id: str) -> Participant:
    """Participant entry, or a blank one for ids never seen in the session."""
    return session.participants.get(participant_id, Participant())
