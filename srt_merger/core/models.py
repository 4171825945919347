"""Data models for subtitle entries and processing options.

WHY: Every stage of the tool (parser, engines, serializer, pipeline) passes
the same caption records around. A single immutable Entry value plus two
closed enums (which engine to run, how a split redistributes time) keeps
the stages decoupled and safe to run on worker threads.

HOW: Entry is a frozen dataclass with a derived duration. ProcessingMode
selects the merge or split engine. SplitMethod carries human-readable
metadata (label, description) and one behaviour: the weights used to share
an entry's duration among its fragments. ProcessingParams bundles the live
parameters of both modes into one immutable snapshot.

RULES:
- Entry is immutable; transformations build new entries
- Entry.stop must be >= Entry.start (ValueError otherwise)
- Entry.ordinal is positional only; serializers renumber 1..N
- Times are float seconds, not milliseconds
- SplitMethod descriptions are display metadata, never behaviour
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List

from srt_merger.config import (
    DEFAULT_MAX_DURATION,
    DEFAULT_MAX_GAP,
    DEFAULT_SPLIT_CHARACTERS,
    DEFAULT_SPLIT_METHOD,
)


@dataclass(frozen=True)
class Entry:
    """One timed caption record.

    Attributes:
        ordinal: 1-based position in its sequence (reassigned on output).
        start: Start time in seconds.
        stop: Stop time in seconds.
        caption: Caption text; may contain internal line breaks.
    """

    ordinal: int
    start: float
    stop: float
    caption: str

    def __post_init__(self) -> None:
        if self.stop < self.start:
            raise ValueError(
                "Entry stop ({}) is before start ({})".format(self.stop, self.start)
            )

    @property
    def duration(self) -> float:
        return self.stop - self.start

    def replace(self, **changes) -> "Entry":
        """Return a copy of this entry with the given fields changed."""
        return dataclasses.replace(self, **changes)


def renumber(entries: Iterable[Entry]) -> List[Entry]:
    """Return the entries renumbered 1..N in iteration order."""
    result = []
    for ordinal, entry in enumerate(entries, 1):
        if entry.ordinal != ordinal:
            entry = entry.replace(ordinal=ordinal)
        result.append(entry)
    return result


class ProcessingMode(str, Enum):
    """Which transformation engine the pipeline runs."""

    MERGE = "merge"
    SPLIT = "split"


class SplitMethod(str, Enum):
    """Policy for sharing one entry's duration among its fragments.

    WHY: When a long entry is split, each fragment needs a slice of the
    original time span. Reading time scales with text length, but editors
    sometimes prefer word-based or equal shares.

    HOW: Each member maps to a weight function in _WEIGHT_FUNCTIONS. The
    split engine allocates time proportionally to the weights, so the
    member is effectively a tagged variant whose payload is the function.

    RULES:
    - characters: weight = character count of the fragment, a run of
      whitespace counting as one character (default)
    - words: weight = word count (at least 1)
    - equal: every fragment gets the same share
    """

    CHARACTERS = "characters"
    WORDS = "words"
    EQUAL = "equal"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def weights(self, fragments: List[str]) -> List[float]:
        """Return one non-negative weight per fragment."""
        return _WEIGHT_FUNCTIONS[self](fragments)


def character_count(text: str) -> int:
    """Count characters, a run of whitespace counting as one."""
    count = 0
    previous_space = False
    for char in text:
        is_space = char.isspace()
        if not (is_space and previous_space):
            count += 1
        previous_space = is_space
    return count


def _character_weights(fragments: List[str]) -> List[float]:
    return [float(character_count(fragment)) for fragment in fragments]


def _word_weights(fragments: List[str]) -> List[float]:
    return [float(max(1, len(fragment.split()))) for fragment in fragments]


def _equal_weights(fragments: List[str]) -> List[float]:
    return [1.0] * len(fragments)


_WEIGHT_FUNCTIONS: Dict[SplitMethod, Callable[[List[str]], List[float]]] = {
    SplitMethod.CHARACTERS: _character_weights,
    SplitMethod.WORDS: _word_weights,
    SplitMethod.EQUAL: _equal_weights,
}

_LABELS: Dict[SplitMethod, str] = {
    SplitMethod.CHARACTERS: "Proportional to characters",
    SplitMethod.WORDS: "Proportional to words",
    SplitMethod.EQUAL: "Equal shares",
}

_DESCRIPTIONS: Dict[SplitMethod, str] = {
    SplitMethod.CHARACTERS: (
        "Each fragment gets time in proportion to its number of characters, "
        "approximating reading speed."
    ),
    SplitMethod.WORDS: (
        "Each fragment gets time in proportion to its number of words."
    ),
    SplitMethod.EQUAL: (
        "The original duration is divided evenly between all fragments."
    ),
}


@dataclass(frozen=True)
class ProcessingParams:
    """Immutable snapshot of the live processing parameters.

    Attributes:
        max_gap: Merge entries whose gap is below this (seconds).
        max_duration: Split entries longer than this (seconds).
        split_characters: Characters after which a caption may be cut.
        split_method: Time redistribution policy for split fragments.
    """

    max_gap: float = DEFAULT_MAX_GAP
    max_duration: float = DEFAULT_MAX_DURATION
    split_characters: str = DEFAULT_SPLIT_CHARACTERS
    split_method: SplitMethod = SplitMethod(DEFAULT_SPLIT_METHOD)

    def __post_init__(self) -> None:
        # Accept plain strings from CLI flags and JSON bodies
        if not isinstance(self.split_method, SplitMethod):
            object.__setattr__(self, "split_method", SplitMethod(self.split_method))
        if self.max_gap < 0:
            raise ValueError("max_gap must be >= 0, got {}".format(self.max_gap))
        if self.max_duration <= 0:
            raise ValueError(
                "max_duration must be > 0, got {}".format(self.max_duration)
            )

    def with_changes(self, **changes) -> "ProcessingParams":
        """Return new params with the given fields changed.

        Raises:
            TypeError: If a field name is unknown.
            ValueError: If a new value is out of range.
        """
        return dataclasses.replace(self, **changes)
