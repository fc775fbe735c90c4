from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Literal

logger = logging.getLogger(__name__)

FormatKind = Literal["paging", "date_window", "revenue_endpoint"]
HISTORY_SIZE = 100

_UNSEEN = object()


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class FormatOutcome:
    """The candidate Planday accepted for one subject, and the ones it refused first.

    ``accepted`` is ``None`` when every candidate was refused.
    """

    kind: str
    subject: str
    accepted: str | None
    rejected: tuple[str, ...] = ()
    recorded_at: str = field(default_factory=_utc_now)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "subject": self.subject,
            "accepted": self.accepted,
            "rejected": list(self.rejected),
            "recorded_at": self.recorded_at,
        }


class FormatLog:
    """Remembers which request formats each department and day ended up using.

    The latest outcome per (kind, subject) is kept indefinitely; the full
    history is bounded. A subject whose accepted format changes between calls
    is logged at WARNING.
    """

    def __init__(self, history_size: int = HISTORY_SIZE) -> None:
        self._history: deque[FormatOutcome] = deque(maxlen=history_size)
        self._latest: dict[tuple[str, str], FormatOutcome] = {}

    def record(
        self,
        kind: FormatKind,
        subject: str,
        accepted: str | None,
        rejected: Iterable[str] = (),
    ) -> FormatOutcome:
        outcome = FormatOutcome(kind=kind, subject=str(subject), accepted=accepted, rejected=tuple(rejected))
        previous = self._latest.get((kind, outcome.subject), _UNSEEN)
        if previous is not _UNSEEN and previous.accepted != accepted:
            logger.warning(
                "Planday %s for %s changed from %s to %s",
                kind,
                outcome.subject,
                previous.accepted,
                accepted,
            )
        self._latest[(kind, outcome.subject)] = outcome
        self._history.append(outcome)
        return outcome

    def recent(self, kind: FormatKind | None = None, limit: int = 25) -> list[FormatOutcome]:
        newest_first = reversed(self._history)
        matching = [outcome for outcome in newest_first if kind is None or outcome.kind == kind]
        return matching[: max(limit, 0)]

    def accepted_for(self, kind: FormatKind, subject: str) -> str | None:
        outcome = self._latest.get((kind, str(subject)))
        return outcome.accepted if outcome else None

    def summary(self) -> dict[str, dict[str, int]]:
        counts: dict[str, Counter] = {}
        for (kind, _subject), outcome in self._latest.items():
            counts.setdefault(kind, Counter())[outcome.accepted or "none"] += 1
        return {kind: dict(counter) for kind, counter in counts.items()}

    def clear(self) -> None:
        self._history.clear()
        self._latest.clear()


format_log = FormatLog()
