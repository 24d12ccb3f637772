"""Solver state: statistics counters, progress reports and timeout handling."""

from __future__ import annotations

import enum
import math
import sys
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, TextIO, Union

from satprogress.record import (
    LogF64Id,
    LogUsizeId,
    ProgressRecord,
    Stat,
    highlight_change,
    record_plain,
)
from satprogress.types import CNFDescription

PROGRESS_REPORT_ROWS = 7
_REPORT_WIDTH = 59
_BLANK_ROW = " " * 50

StateKey = Union[Stat, LogUsizeId, LogF64Id]
Tick = tuple[Optional[int], Optional[int], int]


class StateTusize(enum.Enum):
    """Integer properties a State exposes through ``derefer``."""

    VIVIFICATION = "Vivification"
    VIVIFIED_CLAUSE = "VivifiedClause"
    VIVIFIED_VAR = "VivifiedVar"
    NUM_CYCLE = "NumCycle"
    NUM_STAGE = "NumStage"
    INTERVAL_SCALE = "IntervalScale"
    INTERVAL_SCALE_MAX = "IntervalScaleMax"


class StateTEma(enum.Enum):
    """Moving averages a State exposes through ``refer``."""

    BACKJUMP_LEVEL = "BackjumpLevel"
    CONFLICT_LEVEL = "ConflictLevel"


@dataclass
class DisplayConfig:
    """The configuration switches that govern reporting and timeouts."""

    splr_interface: bool = True
    quiet_mode: bool = False
    use_log: bool = False
    show_journal: bool = False
    no_color: bool = False
    c_timeout: float = 5000.0


@dataclass
class SolverSnapshot:
    """Statistics gathered from the assignment stack and the clause database."""

    num_var: int = 0
    num_asserted_var: int = 0
    num_eliminated_var: int = 0
    num_unasserted_var: int = 0
    num_unreachable_var: int = 0
    num_conflict: int = 0
    num_decision: int = 0
    num_propagation: int = 0
    num_restart: int = 0
    decision_per_conflict: float = 0.0
    propagation_per_conflict: float = 0.0
    conflict_per_restart: float = 0.0
    assign_rate_trend: float = 0.0
    num_clause: int = 0
    num_bi_clause: int = 0
    num_lbd2: int = 0
    num_learnt: int = 0
    num_reduction: int = 0
    literal_block_entanglement: float = 0.0
    lbd_fast: float = 0.0
    lbd_trend: float = 0.0


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.nan if numerator == 0 else math.inf
    return numerator / denominator


@dataclass
class State:
    """Statistics, progress reporting and timing of a solver run."""

    config: DisplayConfig = field(default_factory=DisplayConfig)
    cnf: CNFDescription = field(default_factory=CNFDescription)
    stats: list[int] = field(default_factory=lambda: [0] * len(Stat))
    target: Optional[CNFDescription] = None
    reflection_interval: int = 10_000
    b_lvl: float = 0.0
    c_lvl: float = 0.0
    e_mode_threshold: float = 1.20
    exploration_rate: float = 0.0
    last_asg: int = 0
    new_learnt: list = field(default_factory=list)
    derive20: list = field(default_factory=list)
    progress_cnt: int = 0
    record: ProgressRecord = field(default_factory=ProgressRecord)
    sls_index: int = 0
    time_limit: Optional[float] = None
    stage: int = 0
    cycle: int = 0
    segment: int = 0
    scale: int = 0
    max_scale: int = 0
    restart_energy: float = 0.0
    output: Optional[TextIO] = None
    clock: Callable[[], float] = time.monotonic
    start: Optional[float] = None
    log_messages: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.target is None:
            self.target = replace(self.cnf)
        if self.time_limit is None:
            self.time_limit = self.config.c_timeout
        if self.start is None:
            self.start = self.clock()

    # indexing

    def __getitem__(self, key: StateKey) -> Union[int, float]:
        if isinstance(key, Stat):
            return self.stats[key]
        if isinstance(key, (LogUsizeId, LogF64Id)):
            return self.record[key]
        raise TypeError(f"invalid state key: {key!r}")

    def __setitem__(self, key: StateKey, value: Union[int, float]) -> None:
        if isinstance(key, Stat):
            self.stats[key] = value  # type: ignore[assignment]
        elif isinstance(key, (LogUsizeId, LogF64Id)):
            self.record[key] = value
        else:
            raise TypeError(f"invalid state key: {key!r}")

    # events

    def note_new_var(self) -> None:
        """Account for a variable added to the problem."""
        self.target.num_of_variables += 1

    def note_restart(self) -> None:
        """Account for a restart."""
        self[Stat.RESTART] += 1

    # timing

    def _elapsed_seconds(self) -> float:
        return self.clock() - self.start

    def is_timeout(self) -> bool:
        """Return True once the run has lasted longer than the configured timeout."""
        return int(self.config.c_timeout) < self._elapsed_seconds()

    def elapsed(self) -> Optional[float]:
        """Return the elapsed time as a fraction of the timeout, or None without one."""
        limit = int(self.config.c_timeout)
        if limit <= 0:
            return None
        return self._elapsed_seconds() / limit

    # output

    def _stream(self) -> TextIO:
        return self.output if self.output is not None else sys.stdout

    def _print(self, text: str = "", end: str = "\n") -> None:
        print(text, end=end, file=self._stream())

    def _interactive(self) -> bool:
        cfg = self.config
        return cfg.splr_interface and not cfg.quiet_mode and not cfg.use_log

    def progress_header(self) -> None:
        """Write the report header, reserving the rows that progress overwrites."""
        if not self.config.splr_interface or self.config.quiet_mode:
            return
        if self.config.use_log:
            self._dump_header()
            return
        if self.progress_cnt == 0:
            self.progress_cnt = 1
            self._print(str(self))
            for _ in range(PROGRESS_REPORT_ROWS - 1):
                self._print(_BLANK_ROW)

    def flush(self, message: str) -> None:
        """Write a short message, or clear the current line if it is empty."""
        if not self._interactive():
            return
        stream = self._stream()
        stream.write(message if message else "\x1B[1G\x1B[K")
        stream.flush()

    def log(self, tick: Optional[Tick], message: str) -> None:
        """Queue a one-line journal message for the next progress report."""
        if not self._interactive():
            return
        if tick is None:
            line = f"### {message}"
        else:
            seg, cyc, stg = tick
            if seg is not None and cyc is not None:
                line = f"stage({seg:>2},{cyc:>4},{stg:>5}): {message}"
            elif seg is None and cyc is not None:
                line = f"stage(  ,{cyc:>4},{stg:>5}): {message}"
            elif seg is None and cyc is None:
                line = f"stage(  ,    ,{stg:>5}): {message}"
            else:
                raise ValueError(f"invalid tick: {tick!r}")
        self.log_messages.insert(0, line)

    def progress(self, snapshot: SolverSnapshot) -> None:
        """Write the multi-row progress report and remember the values shown."""
        cfg = self.config
        if not cfg.splr_interface or cfg.quiet_mode:
            self.log_messages.clear()
            self.record_stats(snapshot)
            return
        if cfg.use_log:
            self.dump(snapshot)
            return

        s = snapshot
        rec = self.record
        nc = cfg.no_color

        def hc(key, value, spec):
            return highlight_change(rec, key, value, spec, nc)

        rate = _ratio(s.num_asserted_var + s.num_eliminated_var, s.num_var)
        self.progress_cnt += 1
        self._print(f"\x1B[{PROGRESS_REPORT_ROWS}A\x1B[1G", end="")

        if cfg.show_journal:
            while self.log_messages:
                m = self.log_messages.pop()
                if nc:
                    self._print(m)
                else:
                    self._print(f"\x1B[2K\x1B[000m\x1B[034m{m}\x1B[000m")
        else:
            self.log_messages.clear()

        self._print(f"\x1B[2K{self}")
        self._print(
            "\x1B[2K #conflict:{}, #decision:{}, #propagate:{}".format(
                record_plain(rec, LogUsizeId.NUM_CONFLICT, s.num_conflict, ">11"),
                record_plain(rec, LogUsizeId.NUM_DECISION, s.num_decision, ">13"),
                record_plain(rec, LogUsizeId.NUM_PROPAGATE, s.num_propagation, ">15"),
            )
        )
        self._print(
            "\x1B[2K  Assignment|#rem:{}, #fix:{}, #elm:{}, prg%:{}".format(
                hc(LogUsizeId.REMAINING_VAR, s.num_unasserted_var, ">9"),
                hc(LogUsizeId.ASSERTED_VAR, s.num_asserted_var, ">9"),
                hc(LogUsizeId.ELIMINATED_VAR, s.num_eliminated_var, ">9"),
                hc(LogF64Id.PROGRESS, rate * 100.0, ">9.4f"),
            )
        )
        self._print(
            "\x1B[2K      Clause|Remv:{}, LBD2:{}, BinC:{}, Perm:{}".format(
                hc(LogUsizeId.REMOVABLE_CLAUSE, s.num_learnt, ">9"),
                hc(LogUsizeId.LBD2_CLAUSE, s.num_lbd2, ">9"),
                hc(LogUsizeId.BI_CLAUSE, s.num_bi_clause, ">9"),
                hc(LogUsizeId.PERMANENT_CLAUSE, s.num_clause - s.num_learnt, ">9"),
            )
        )
        self[LogUsizeId.STAGE_SEGMENT] = self.segment
        self[LogF64Id.RESTART_ENERGY] = self.restart_energy
        self[LogF64Id.TREND_ASG] = s.assign_rate_trend
        self._print(
            "\x1B[2K    Conflict|entg:{}, cLvl:{}, bLvl:{}, /cpr:{}".format(
                hc(LogF64Id.LITERAL_BLOCK_ENTANGLEMENT, s.literal_block_entanglement, ">9.4f"),
                hc(LogF64Id.C_LEVEL, self.c_lvl, ">9.4f"),
                hc(LogF64Id.B_LEVEL, self.b_lvl, ">9.4f"),
                hc(LogF64Id.CONFLICT_PER_RESTART, s.conflict_per_restart, ">9.2f"),
            )
        )
        self._print(
            "\x1B[2K    Learning|avrg:{}, trnd:{}, #RST:{}, /dpc:{}".format(
                hc(LogF64Id.EMA_LBD, s.lbd_fast, ">9.4f"),
                hc(LogF64Id.TREND_LBD, s.lbd_trend, ">9.4f"),
                hc(LogUsizeId.RESTART, self[Stat.RESTART], ">9"),
                hc(LogF64Id.DECISION_PER_CONFLICT, s.decision_per_conflict, ">9.2f"),
            )
        )
        core = s.num_unreachable_var or self[LogUsizeId.UNREACHABLE_CORE]
        self._print(
            "\x1B[2K        misc|vivC:{}, xplr:{}, core:{}, /ppc:{}".format(
                hc(LogUsizeId.VIVIFIED_CLAUSE, self[Stat.VIVIFIED_CLAUSE], ">9"),
                hc(LogF64Id.EX_EX_TREND, self.exploration_rate, ">9.4f"),
                hc(LogUsizeId.UNREACHABLE_CORE, core, ">9"),
                hc(LogF64Id.PROPAGATION_PER_CONFLICT, s.propagation_per_conflict, ">9.2f"),
            )
        )
        self[LogUsizeId.STAGE] = self.stage
        self[LogUsizeId.STAGE_CYCLE] = self.cycle
        self[LogUsizeId.VIVIFY] = self[Stat.VIVIFICATION]
        self.flush("")

    def record_stats(self, snapshot: SolverSnapshot) -> None:
        """Store the current statistics in the record without writing anything."""
        s = snapshot
        self[LogUsizeId.NUM_CONFLICT] = s.num_conflict
        self[LogUsizeId.NUM_DECISION] = s.num_decision
        self[LogUsizeId.NUM_PROPAGATE] = s.num_propagation
        self[LogUsizeId.REMAINING_VAR] = s.num_unasserted_var
        self[LogUsizeId.ASSERTED_VAR] = s.num_asserted_var
        self[LogUsizeId.ELIMINATED_VAR] = s.num_eliminated_var
        self[LogF64Id.PROGRESS] = 100.0 * _ratio(
            self[LogUsizeId.ASSERTED_VAR] + s.num_eliminated_var, s.num_var
        )
        self[LogUsizeId.REMOVABLE_CLAUSE] = s.num_learnt
        self[LogUsizeId.LBD2_CLAUSE] = s.num_lbd2
        self[LogUsizeId.BI_CLAUSE] = s.num_bi_clause
        self[LogUsizeId.PERMANENT_CLAUSE] = s.num_clause - self[LogUsizeId.REMOVABLE_CLAUSE]
        self[LogUsizeId.RESTART] = self[Stat.RESTART]
        self[LogUsizeId.STAGE] = self.stage
        self[LogUsizeId.STAGE_CYCLE] = self.cycle
        self[LogUsizeId.STAGE_SEGMENT] = self.max_scale
        self[LogUsizeId.SIMPLIFY] = self[Stat.SIMPLIFY]
        self[LogUsizeId.SUBSUMED_CLAUSE] = self[Stat.SUBSUMED_CLAUSE]
        self[LogUsizeId.VIVIFIED_CLAUSE] = self[Stat.VIVIFIED_CLAUSE]
        self[LogUsizeId.VIVIFIED_VAR] = self[Stat.VIVIFIED_VAR]
        self[LogUsizeId.VIVIFY] = self[Stat.VIVIFICATION]
        self[LogF64Id.EMA_LBD] = s.lbd_fast
        self[LogF64Id.TREND_LBD] = s.lbd_trend
        self[LogF64Id.LITERAL_BLOCK_ENTANGLEMENT] = s.literal_block_entanglement
        self[LogF64Id.DECISION_PER_CONFLICT] = s.decision_per_conflict
        self[LogF64Id.TREND_ASG] = s.assign_rate_trend
        self[LogF64Id.C_LEVEL] = self.c_lvl
        self[LogF64Id.B_LEVEL] = self.b_lvl
        self[LogF64Id.PROPAGATION_PER_CONFLICT] = s.propagation_per_conflict
        if s.num_unreachable_var > 0:
            self[LogUsizeId.UNREACHABLE_CORE] = s.num_unreachable_var
        self[LogF64Id.CONFLICT_PER_RESTART] = s.conflict_per_restart

    def _dump_header(self) -> None:
        self._print(
            "c |      RESTARTS     |       ORIGINAL FORMULA     |       LEARNT CLAUSES     | Progress |\n"
            "c |   number av. cnfl |  Remains  Elim-ed  Clauses | #rdct   Learnts     LBD2 |          |\n"
            "c |-------------------|----------------------------|--------------------------|----------|"
        )

    def dump(self, snapshot: SolverSnapshot) -> None:
        """Write one line of the log-style report."""
        s = snapshot
        self.progress_cnt += 1
        rate = _ratio(s.num_asserted_var + s.num_eliminated_var, s.num_var)
        self._print(
            f"c | {s.num_restart:>8} {s.num_conflict // max(s.num_restart, 1):>8} "
            f"| {s.num_unasserted_var:>8} {s.num_eliminated_var:>8} "
            f"{s.num_clause - s.num_learnt:>8} |  {s.num_reduction:>4}  "
            f"{s.num_learnt:>8} {s.num_lbd2:>8} | {rate * 100.0:>6.3f} % |"
        )

    # properties

    def derefer(self, key: StateTusize) -> int:
        """Return an integer property."""
        table = {
            StateTusize.VIVIFICATION: lambda: self[Stat.VIVIFICATION],
            StateTusize.VIVIFIED_CLAUSE: lambda: self[Stat.VIVIFIED_CLAUSE],
            StateTusize.VIVIFIED_VAR: lambda: self[Stat.VIVIFIED_VAR],
            StateTusize.NUM_CYCLE: lambda: self.cycle,
            StateTusize.NUM_STAGE: lambda: self.stage,
            StateTusize.INTERVAL_SCALE: lambda: self.scale,
            StateTusize.INTERVAL_SCALE_MAX: lambda: self.max_scale,
        }
        try:
            return table[key]()
        except KeyError:
            raise TypeError(f"invalid property: {key!r}") from None

    def refer(self, key: StateTEma) -> float:
        """Return the current value of a moving average."""
        if key is StateTEma.BACKJUMP_LEVEL:
            return self.b_lvl
        if key is StateTEma.CONFLICT_LEVEL:
            return self.c_lvl
        raise TypeError(f"invalid property: {key!r}")

    def __str__(self) -> str:
        tm = int(self._elapsed_seconds() * 1000) / 1000.0
        vc = f"{self.target.num_of_variables},{self.target.num_of_clauses}"
        fname = self.target.pathname.label()
        if _REPORT_WIDTH <= len(fname):
            fname = fname[: max(58 - len(vc), 0)]
        if _REPORT_WIDTH < len(vc) + len(fname) + 1:
            return f"{fname:<{_REPORT_WIDTH}} |time:{tm:>9.2f}"
        pad = _REPORT_WIDTH - len(fname)
        return f"{fname}{vc:>{pad}} |time:{tm:>9.2f}"