"""Basic building blocks: literals, errors, CNF descriptions and small helpers."""

from __future__ import annotations

import enum
import functools
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Callable, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")

VarId = int
DecisionLevel = int


@dataclass(frozen=True, order=True)
class Lit:
    """A literal folded into a positive integer.

    The negative occurrence of variable ``n`` is ``2 * n`` and the positive
    one is ``2 * n + 1``.
    """

    ordinal: int

    def __post_init__(self) -> None:
        if self.ordinal <= 0:
            raise ValueError(f"literal ordinal must be positive, got {self.ordinal}")

    @classmethod
    def from_var(cls, vi: VarId, positive: bool) -> Lit:
        """Build the literal of variable ``vi`` with the given polarity."""
        return cls((vi << 1) + int(bool(positive)))

    @classmethod
    def from_int(cls, x: int) -> Lit:
        """Build a literal from its signed DIMACS form."""
        return cls(-2 * x if x < 0 else 2 * x + 1)

    def vi(self) -> VarId:
        """Return the variable index."""
        return self.ordinal >> 1

    def as_bool(self) -> bool:
        """Return True for a positive literal."""
        return self.ordinal & 1 == 1

    def __bool__(self) -> bool:
        return self.as_bool()

    def __int__(self) -> int:
        magnitude = self.ordinal >> 1
        return -magnitude if self.ordinal % 2 == 0 else magnitude

    def __invert__(self) -> Lit:
        return Lit(self.ordinal ^ 1)

    def __str__(self) -> str:
        return f"{int(self)}L"

    def __repr__(self) -> str:
        return f"{int(self)}L"


def i32s(lits: Iterable[Lit]) -> list[int]:
    """Convert literals to their signed integer forms."""
    return [int(lit) for lit in lits]


class SolverErrorKind(enum.Enum):
    """Kinds of internal solver errors."""

    EMPTY_CLAUSE = "EmptyClause"
    INVALID_LITERAL = "InvalidLiteral"
    IO_ERROR = "IOError"
    INCONSISTENT = "Inconsistent"
    OUT_OF_MEMORY = "OutOfMemory"
    ROOT_LEVEL_CONFLICT = "RootLevelConflict"
    TIME_OUT = "TimeOut"
    SOLVER_BUG = "SolverBug"
    UNDESCRIBED_ERROR = "UndescribedError"


class SolverError(Exception):
    """An error raised by solver operations."""

    def __init__(self, kind: SolverErrorKind, context: Any = None) -> None:
        self.kind = kind
        self.context = context
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.context is None:
            return self.kind.value
        return f"{self.kind.value}({self.context!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SolverError):
            return NotImplemented
        return self.kind == other.kind and self.context == other.context

    def __hash__(self) -> int:
        return hash(self.kind)


class RefClauseKind(enum.Enum):
    """What a clause reference points at."""

    CLAUSE = "Clause"
    DEAD = "Dead"
    EMPTY_CLAUSE = "EmptyClause"
    REGISTERED_CLAUSE = "RegisteredClause"
    UNIT_CLAUSE = "UnitClause"


@dataclass(frozen=True)
class RefClause:
    """A generic reference to a clause or to a degenerate form."""

    kind: RefClauseKind
    value: Any = None

    def as_cid(self) -> Any:
        """Return the clause id; only clause references carry one."""
        if self.kind in (RefClauseKind.CLAUSE, RefClauseKind.REGISTERED_CLAUSE):
            return self.value
        raise ValueError("invalid reference to clause")

    def is_new(self) -> Optional[Any]:
        """Return the clause id if this is a freshly made clause, else None."""
        if self.kind is RefClauseKind.CLAUSE:
            return self.value
        return None


class _CNFSource(enum.Enum):
    VOID = "void"
    FILE = "file"
    LIT_VEC = "lit_vec"


@dataclass(frozen=True)
class CNFIndicator:
    """Where a CNF problem came from."""

    source: _CNFSource = _CNFSource.VOID
    name: str = ""
    count: int = 0

    @classmethod
    def void(cls) -> CNFIndicator:
        return cls()

    @classmethod
    def file(cls, name: str) -> CNFIndicator:
        return cls(_CNFSource.FILE, name=name)

    @classmethod
    def lit_vec(cls, count: int) -> CNFIndicator:
        return cls(_CNFSource.LIT_VEC, count=count)

    def label(self) -> str:
        """Return the short name used in progress reports."""
        if self.source is _CNFSource.FILE:
            return self.name
        if self.source is _CNFSource.LIT_VEC:
            return f"(embedded {self.count} element vector)"
        return "(no cnf)"

    def __str__(self) -> str:
        if self.source is _CNFSource.FILE:
            return f"CNF file({self.name})"
        if self.source is _CNFSource.LIT_VEC:
            return f"A vec({self.count} clauses)"
        return "No CNF specified)"


@dataclass
class CNFDescription:
    """Size and origin of a problem."""

    num_of_variables: int = 0
    num_of_clauses: int = 0
    pathname: CNFIndicator = field(default_factory=CNFIndicator.void)

    @classmethod
    def from_clauses(cls, clauses: Sequence[Sequence[int]]) -> CNFDescription:
        """Describe a problem given as a list of clauses of signed integers."""
        num_vars = max(
            (max((abs(lit) for lit in clause), default=0) for clause in clauses),
            default=0,
        )
        return cls(num_vars, len(clauses), CNFIndicator.lit_vec(len(clauses)))

    def __str__(self) -> str:
        return f"CNF({self.num_of_variables}, {self.num_of_clauses}, {self.pathname})"


class CNFReader:
    """An open DIMACS file positioned just after its ``p cnf`` header."""

    def __init__(self, cnf: CNFDescription, reader: IO[str]) -> None:
        self.cnf = cnf
        self.reader = reader

    @classmethod
    def open(cls, path: str | Path) -> CNFReader:
        """Open ``path`` and read its header; raise SolverError on failure."""
        text = str(path)
        if text == "":
            pathname = "--"
        else:
            pathname = Path(text).name or "aStrangeNamed"
        try:
            stream = open(text, "r", encoding="utf-8")
        except OSError as exc:
            raise SolverError(SolverErrorKind.IO_ERROR) from exc
        try:
            header = cls._read_header(stream)
        except BaseException:
            stream.close()
            raise
        if header is None:
            stream.close()
            raise SolverError(SolverErrorKind.IO_ERROR)
        nv, nc = header
        cnf = CNFDescription(nv, nc, CNFIndicator.file(pathname))
        return cls(cnf, stream)

    @staticmethod
    def _read_header(stream: IO[str]) -> Optional[tuple[int, int]]:
        while True:
            try:
                line = stream.readline()
            except (OSError, UnicodeDecodeError) as exc:
                raise SolverError(SolverErrorKind.IO_ERROR) from exc
            if not line:
                return None
            words = line.split()
            if len(words) >= 4 and words[0] == "p" and words[1] == "cnf":
                try:
                    return int(words[2]), int(words[3])
                except ValueError as exc:
                    raise ValueError(f"malformed cnf header: {line.strip()!r}") from exc

    def close(self) -> None:
        self.reader.close()

    def __enter__(self) -> CNFReader:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def delete_unstable(items: list[T], predicate: Callable[[T], bool]) -> None:
    """Remove the first item matching ``predicate`` by swapping in the last one."""
    for i, item in enumerate(items):
        if predicate(item):
            last = items.pop()
            if i < len(items):
                items[i] = last
            return


class FlagClause(enum.Flag):
    """Miscellaneous flags of a clause."""

    LEARNT = 0b0000_0001
    USED = 0b0000_0010
    ENQUEUED = 0b0000_0100
    OCCUR_LINKED = 0b0000_1000
    DERIVE20 = 0b0001_0000


class FlagVar(enum.Flag):
    """Miscellaneous flags of a variable."""

    PHASE = 0b0000_0001
    USED = 0b0000_0010
    ELIMINATED = 0b0000_0100
    ENQUEUED = 0b0000_1000
    CA_SEEN = 0b0001_0000


class Logger:
    """Writes messages to a file, or to stdout when no file could be made."""

    def __init__(self, fname: Optional[str | Path] = None) -> None:
        self.dest: Optional[IO[str]] = None
        if fname is not None:
            try:
                self.dest = open(fname, "w", encoding="utf-8")
            except OSError:
                self.dest = None

    def dump(self, message: str) -> None:
        if self.dest is not None:
            try:
                self.dest.write(message)
            except OSError as exc:
                raise RuntimeError(f"fail to dump {self.dest!r}") from exc
        else:
            print(message)

    def close(self) -> None:
        if self.dest is not None:
            self.dest.close()
            self.dest = None

    def __str__(self) -> str:
        return f"Dump({self.dest!r})"


@functools.total_ordering
class OrderedProxy:
    """Pairs a value with a float key so it can be sorted by that key."""

    __slots__ = ("body", "index")

    def __init__(self, body: Any = None, index: float = 0.0) -> None:
        self.body = body
        self.index = index

    @classmethod
    def inverted(cls, body: Any, rindex: float) -> OrderedProxy:
        """Build a proxy that sorts in descending order of ``rindex``."""
        return cls(body, -rindex)

    def to(self) -> Any:
        return self.body

    def value(self) -> float:
        return self.index

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, OrderedProxy):
            return NotImplemented
        if abs(self.index - other.index) < sys.float_info.epsilon:
            return self.body < other.body
        return self.index < other.index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedProxy):
            return NotImplemented
        return self.index == other.index and self.body == other.body

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"OrderedProxy(body={self.body!r}, index={self.index!r})"