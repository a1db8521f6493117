# SPDX-License-Identifier: MIT

from abc import ABC, abstractmethod
from typing import Optional

import pendulum

from geonotes import time
from geonotes.geo import distance_km
from geonotes.model.filter import DateRange, NoteFilter
from geonotes.model.location import Coordinate
from geonotes.model.note import Note


def filter_notes(
    notes: list[Note],
    note_filter: NoteFilter,
    now: Optional[pendulum.DateTime] = None,
) -> list[Note]:
    """
    Apply text, date range and radius criteria to a snapshot of notes.

    Criteria combine as a logical AND and the input order is preserved. The
    input list is never mutated. A radius without a center is ignored.
    """
    return generate_filter(note_filter, now).filter(notes)


def generate_filter(
    note_filter: NoteFilter, now: Optional[pendulum.DateTime] = None
) -> "And":
    reference = now if now is not None else time.now_utc()
    predicate = And()

    text = note_filter.get("text")
    if text is not None and text.strip() != "":
        predicate.add_predicate(TextContains(text))

    date_range = note_filter.get("date_range")
    if date_range is not None and date_range != DateRange.ALL:
        predicate.add_predicate(CreatedSince(date_range_cutoff(date_range, reference)))

    radius_km = note_filter.get("radius_km")
    center = note_filter.get("center")
    if radius_km is not None and center is not None:
        predicate.add_predicate(WithinRadius(center, radius_km))

    return predicate


def date_range_cutoff(
    date_range: DateRange, now: pendulum.DateTime
) -> Optional[pendulum.DateTime]:
    match date_range:
        case DateRange.TODAY:
            return time.start_of_local_day(now)
        case DateRange.WEEK:
            return now.subtract(days=7)
        case DateRange.MONTH:
            return now.subtract(months=1)
    return None


class Predicate(ABC):
    @abstractmethod
    def filter(self, items: list[Note]) -> list[Note]: ...


class And(Predicate):
    def __init__(self) -> None:
        self.predicates: list[Predicate] = []

    def add_predicate(self, predicate: Predicate) -> None:
        self.predicates.append(predicate)

    def filter(self, items: list[Note]) -> list[Note]:
        result = list(items)
        for predicate in self.predicates:
            result = predicate.filter(result)
        return result


class TextContains(Predicate):
    def __init__(self, text: str) -> None:
        self.text = text.lower()

    def filter(self, items: list[Note]) -> list[Note]:
        return [item for item in items if self.text in item["text"].lower()]


class CreatedSince(Predicate):
    def __init__(self, cutoff: Optional[pendulum.DateTime]) -> None:
        self.cutoff = cutoff

    def filter(self, items: list[Note]) -> list[Note]:
        if self.cutoff is None:
            return list(items)
        cutoff = self.cutoff
        return [item for item in items if item["timestamp"] >= cutoff]


class WithinRadius(Predicate):
    def __init__(self, center: Coordinate, radius_km: float) -> None:
        self.center = center
        self.radius_km = radius_km

    def filter(self, items: list[Note]) -> list[Note]:
        return [
            item
            for item in items
            if distance_km(
                self.center["lat"], self.center["lng"], item["lat"], item["lng"]
            )
            <= self.radius_km
        ]
