from __future__ import annotations

from dataclasses import dataclass
from datetime import date

OCCURRENCE_MARKER = "_occurrence_"


@dataclass(frozen=True)
class OccurrenceKey:
    """Identity of one dated instance of a recurring task.

    Two string forms exist and both are stored by older data:

    * occurrence id: ``<template_id>_occurrence_<YYYY-MM-DD>``
    * ledger key: the occurrence id followed by ``_<YYYY-MM-DD>`` again

    Parsing splits on the last marker, so template ids that contain
    underscores (or even the marker itself) still round-trip.
    """

    template_id: str
    date: date

    @property
    def occurrence_id(self) -> str:
        return f"{self.template_id}{OCCURRENCE_MARKER}{self.date.isoformat()}"

    @property
    def ledger_key(self) -> str:
        return f"{self.occurrence_id}_{self.date.isoformat()}"

    @classmethod
    def parse(cls, occurrence_id: str) -> OccurrenceKey:
        template_id, marker, raw_date = occurrence_id.rpartition(OCCURRENCE_MARKER)
        if not marker or not template_id:
            raise ValueError(f"Not an occurrence id: {occurrence_id!r}")
        return cls(template_id=template_id, date=date.fromisoformat(raw_date))

    @classmethod
    def from_ledger_key(cls, key: str) -> OccurrenceKey:
        occurrence_id, sep, raw_date = key.rpartition("_")
        if not sep:
            raise ValueError(f"Not a ledger key: {key!r}")
        parsed = cls.parse(occurrence_id)
        if parsed.date != date.fromisoformat(raw_date):
            raise ValueError(f"Ledger key dates disagree: {key!r}")
        return parsed


def is_occurrence_id(task_id: str) -> bool:
    try:
        OccurrenceKey.parse(task_id)
    except ValueError:
        return False
    return True
