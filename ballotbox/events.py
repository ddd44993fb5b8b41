"""Notification events emitted by the engine.

Events are plain frozen dataclasses delivered synchronously, in call order,
to a sink callable. ``RecordingSink`` keeps them in a list for observers and
tests.
"""

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Tuple

from .workflow import Phase


@dataclass(frozen=True)
class ParticipantEnrolled:
    participant: str


@dataclass(frozen=True)
class ParticipantRevoked:
    participant: str


@dataclass(frozen=True)
class PhaseChanged:
    old: Phase
    new: Phase


@dataclass(frozen=True)
class ProposalSubmitted:
    proposal_id: int


@dataclass(frozen=True)
class VoteCast:
    voter: str
    proposal_id: int


@dataclass(frozen=True)
class TieDetected:
    tied_ids: Tuple[int, ...]


@dataclass(frozen=True)
class WinnerSelected:
    session: int
    proposal_id: int
    random: bool


@dataclass(frozen=True)
class SessionReset:
    session: int


EventSink = Callable[[Any], None]


def event_to_dict(event: Any) -> Dict[str, Any]:
    """JSON-friendly form: ``{"type": ClassName, **fields}`` with phases by name."""
    out: Dict[str, Any] = {"type": type(event).__name__}
    for key, value in asdict(event).items():
        if isinstance(value, Phase):
            value = value.name
        elif isinstance(value, tuple):
            value = list(value)
        out[key] = value
    return out


class RecordingSink:
    def __init__(self):
        self.events: List[Any] = []

    def __call__(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, cls) -> List[Any]:
        return [e for e in self.events if isinstance(e, cls)]

    def clear(self) -> None:
        self.events.clear()
