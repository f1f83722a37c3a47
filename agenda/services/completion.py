from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableSet
from datetime import date

from agenda.domain.occurrence import OccurrenceKey


def occurrence_key(template_id: str, occurrence_date: date) -> str:
    return OccurrenceKey(template_id, occurrence_date).ledger_key


def mark_occurrence_completed(ledger: MutableSet[str], template_id: str, occurrence_date: date) -> None:
    ledger.add(occurrence_key(template_id, occurrence_date))


def unmark_occurrence_completed(ledger: MutableSet[str], template_id: str, occurrence_date: date) -> None:
    ledger.discard(occurrence_key(template_id, occurrence_date))


def is_occurrence_completed(ledger: Iterable[str], template_id: str, occurrence_date: date) -> bool:
    return occurrence_key(template_id, occurrence_date) in ledger


class CompletionLedger:
    """Set of ledger keys marking which occurrences are done.

    Callers own the instance and hand ``snapshot()`` to the recurrence
    engine; the engine never mutates it.
    """

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys: set[str] = set(keys)

    def mark(self, template_id: str, occurrence_date: date) -> None:
        mark_occurrence_completed(self._keys, template_id, occurrence_date)

    def unmark(self, template_id: str, occurrence_date: date) -> None:
        unmark_occurrence_completed(self._keys, template_id, occurrence_date)

    def is_completed(self, template_id: str, occurrence_date: date) -> bool:
        return is_occurrence_completed(self._keys, template_id, occurrence_date)

    def snapshot(self) -> frozenset[str]:
        return frozenset(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._keys))

    def __len__(self) -> int:
        return len(self._keys)
