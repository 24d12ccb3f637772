# satprogress

Data types and progress reporting for a conflict-driven SAT solver.

## Modules

### `satprogress.types`

- `Lit` is a literal. A positive occurrence of variable `n` is encoded as
  `2n + 1` and a negative occurrence as `2n`. You can build one with
  `Lit.from_int(x)` from the signed DIMACS form, or with
  `Lit.from_var(vi, positive)`. `~lit` negates it and `int(lit)` gives the
  signed form back. `lit.vi()` returns the variable. `lit.as_bool()` is true
  for a positive literal. `str(lit)` gives text such as `-2L`.
- `i32s(lits)` converts literals to signed integers.
- `CNFDescription` holds the number of variables, the number of clauses and
  a `CNFIndicator` saying where the problem came from.
  `CNFDescription.from_clauses(clauses)` describes a list of clauses of signed
  integers.
- `CNFReader.open(path)` opens a DIMACS file and reads up to its
  `p cnf <vars> <clauses>` header. It can be used as a context manager.
  - It raises `SolverError` with kind `SolverErrorKind.IO_ERROR` if the file
    cannot be opened or has no header.
  - It raises `ValueError` if the header numbers are malformed.
- `SolverError` is an exception that carries a `SolverErrorKind` and an
  optional context.
- `RefClause` and `RefClauseKind` reference a clause or a degenerate form.
  `as_cid()` raises `ValueError` unless the reference is a clause.
- `FlagClause` and `FlagVar` are `enum.Flag` sets.
- `OrderedProxy(body, index)` sorts by a float key and breaks ties on the
  body. `OrderedProxy.inverted` gives descending order.
- `delete_unstable(items, predicate)` removes the first matching item by
  moving the last item into its place.
- `Logger(fname)` writes messages to a file. When no file could be opened it
  prints them to stdout instead.

### `satprogress.record`

- `Stat`, `LogUsizeId` and `LogF64Id` are integer enums that index the
  statistics.
- `ProgressRecord` keeps the last reported value of each statistic. Index it
  by a `LogUsizeId` or a `LogF64Id`.
- `record_plain` stores a value and formats it.
- `highlight_change` stores a value and formats it with ANSI colour:
  - red when the value fell since the last report;
  - cyan when it rose;
  - bold as well when it changed by more than a factor of 1.6.
- `highlight_threshold` stores a value and formats it red below a threshold
  and cyan above it.

### `satprogress.state`

- `DisplayConfig` holds the reporting switches: `splr_interface`,
  `quiet_mode`, `use_log`, `show_journal` and `no_color`. It also holds
  `c_timeout` in seconds.
- `SolverSnapshot` holds the numbers a report is built from. The caller fills
  them in from its assignment stack and clause database.
- `State` holds the statistics counters and the progress record. It writes
  the reports to `output`, which is stdout by default. Its clock can be
  replaced.
  - `progress_header()` prints the header.
  - `progress(snapshot)` redraws a seven-row report in place with ANSI
    escapes. In log mode it writes one `c | ...` line instead. In quiet mode
    it only records the values.
  - `log(tick, message)` queues journal lines. They are shown on the next
    report when `show_journal` is set.
  - `flush(message)` writes a short message, or clears the line when the
    message is empty.
  - `record_stats(snapshot)` stores the values without printing.
  - `dump(snapshot)` writes the single log-mode line.
  - `is_timeout()` and `elapsed()` check the run against `c_timeout`.
    `elapsed()` returns the elapsed time as a fraction of the timeout, or
    `None` when the timeout is not positive.
  - `note_new_var()` and `note_restart()` update the counters.
  - `derefer(StateTusize...)` and `refer(StateTEma...)` expose internal
    values.

## What it does not do

This package contains no solver: no unit propagation, conflict analysis,
restarts or clause database. `CNFReader` reads only the header of a DIMACS
file and leaves the clauses in its open stream. There is no command-line
program.

## Installing

```
pip install .
```

To install with the test dependencies:

```
pip install .[test]
```

## Example

```python
from satprogress.types import Lit, CNFReader
from satprogress.state import State, SolverSnapshot

lit = Lit.from_int(-2)
assert int(lit) == -2
assert int(~lit) == 2
assert lit.vi() == 2

with CNFReader.open("problem.cnf") as reader:
    print(reader.cnf)   # e.g. CNF(250, 1065, CNF file(problem.cnf))

state = State()
state.progress_header()
state.progress(SolverSnapshot(num_var=250, num_conflict=10))
```

## Running the tests

```
pytest
```