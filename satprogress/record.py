"""Statistics indices and the record of values shown in progress reports."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Union

_BOLD_RED = "\x1B[001m\x1B[031m"
_RED = "\x1B[031m"
_BOLD_CYAN = "\x1B[001m\x1B[036m"
_CYAN = "\x1B[036m"
_RESET = "\x1B[000m"

_GROWTH = 1.6

Number = Union[int, float]


class Stat(enum.IntEnum):
    """Indices of the solver's statistics counters."""

    RESTART = 0
    VIVIFICATION = enum.auto()
    VIVIFIED_CLAUSE = enum.auto()
    VIVIFIED_VAR = enum.auto()
    SIMPLIFY = enum.auto()
    SUBSUMED_CLAUSE = enum.auto()
    SLS = enum.auto()


class LogUsizeId(enum.IntEnum):
    """Indices of the integer values kept in a ProgressRecord."""

    NUM_CONFLICT = 0
    NUM_PROPAGATE = enum.auto()
    NUM_DECISION = enum.auto()
    REMAINING_VAR = enum.auto()
    ASSERTED_VAR = enum.auto()
    ELIMINATED_VAR = enum.auto()
    UNREACHABLE_CORE = enum.auto()
    REMOVABLE_CLAUSE = enum.auto()
    LBD2_CLAUSE = enum.auto()
    BI_CLAUSE = enum.auto()
    PERMANENT_CLAUSE = enum.auto()
    RESTART = enum.auto()
    STAGE = enum.auto()
    STAGE_CYCLE = enum.auto()
    STAGE_SEGMENT = enum.auto()
    SIMPLIFY = enum.auto()
    SUBSUMED_CLAUSE = enum.auto()
    VIVIFIED_CLAUSE = enum.auto()
    VIVIFIED_VAR = enum.auto()
    VIVIFY = enum.auto()
    SLS = enum.auto()


class LogF64Id(enum.IntEnum):
    """Indices of the float values kept in a ProgressRecord."""

    PROGRESS = 0
    EMA_ASG = enum.auto()
    EMA_CCC = enum.auto()
    EMA_LBD = enum.auto()
    EMA_MLD = enum.auto()
    TREND_ASG = enum.auto()
    TREND_LBD = enum.auto()
    B_LEVEL = enum.auto()
    C_LEVEL = enum.auto()
    EX_EX_TREND = enum.auto()
    DECISION_PER_CONFLICT = enum.auto()
    CONFLICT_PER_RESTART = enum.auto()
    PROPAGATION_PER_CONFLICT = enum.auto()
    LITERAL_BLOCK_ENTANGLEMENT = enum.auto()
    RESTART_ENERGY = enum.auto()


RecordKey = Union[LogUsizeId, LogF64Id]


@dataclass
class ProgressRecord:
    """The most recently reported value of every progress statistic."""

    vali: list[int] = field(default_factory=lambda: [0] * len(LogUsizeId))
    valf: list[float] = field(default_factory=lambda: [0.0] * len(LogF64Id))

    def __getitem__(self, key: RecordKey) -> Number:
        if isinstance(key, LogUsizeId):
            return self.vali[key]
        if isinstance(key, LogF64Id):
            return self.valf[key]
        raise TypeError(f"invalid progress record key: {key!r}")

    def __setitem__(self, key: RecordKey, value: Number) -> None:
        if isinstance(key, LogUsizeId):
            self.vali[key] = value  # type: ignore[assignment]
        elif isinstance(key, LogF64Id):
            self.valf[key] = value
        else:
            raise TypeError(f"invalid progress record key: {key!r}")


def _wrap(prefix: str, text: str) -> str:
    return f"{prefix}{text}{_RESET}"


def record_plain(
    record: ProgressRecord, key: Optional[RecordKey], value: Number, spec: str
) -> str:
    """Store ``value`` under ``key`` (if given) and return it formatted by ``spec``."""
    if key is not None:
        record[key] = value
    return format(value, spec)


def highlight_change(
    record: ProgressRecord,
    key: Optional[RecordKey],
    value: Number,
    spec: str,
    no_color: bool = False,
) -> str:
    """Store ``value`` and format it, coloured by how it moved from the previous value.

    A drop is red, a rise is cyan; a change by more than a factor of 1.6 is
    also bold. Without a key the value is only formatted.
    """
    text = format(value, spec)
    if key is None:
        return text
    previous = record[key]
    record[key] = value
    if no_color:
        return text
    if value * _GROWTH < previous:
        return _wrap(_BOLD_RED, text)
    if value < previous:
        return _wrap(_RED, text)
    if previous * _GROWTH < value:
        return _wrap(_BOLD_CYAN, text)
    if previous < value:
        return _wrap(_CYAN, text)
    return text


def highlight_threshold(
    record: ProgressRecord,
    key: Optional[RecordKey],
    value: Number,
    spec: str,
    threshold: Number,
    no_color: bool = False,
) -> str:
    """Store ``value`` and format it, red below ``threshold`` and cyan above it."""
    text = format(value, spec)
    if key is None:
        return text
    record[key] = value
    if no_color:
        return text
    if value < threshold:
        return _wrap(_RED, text)
    if threshold < value:
        return _wrap(_CYAN, text)
    return text