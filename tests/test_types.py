import pytest

from satprogress.types import (
    CNFDescription,
    CNFIndicator,
    CNFReader,
    FlagClause,
    FlagVar,
    Lit,
    Logger,
    OrderedProxy,
    RefClause,
    RefClauseKind,
    SolverError,
    SolverErrorKind,
    delete_unstable,
    i32s,
)


@pytest.mark.parametrize(
    "x, ordinal", [(-1, 2), (1, 3), (-2, 4), (2, 5)]
)
def test_lit_encoding(x, ordinal):
    lit = Lit.from_int(x)
    assert lit.ordinal == ordinal
    assert int(lit) == x


def test_lit_from_var_matches_from_int():
    assert Lit.from_int(1) == Lit.from_var(1, True)
    assert Lit.from_int(2) == Lit.from_var(2, True)
    assert Lit.from_int(-2) == Lit.from_var(2, False)


@pytest.mark.parametrize("vi", [1, 2, 17])
@pytest.mark.parametrize("positive", [True, False])
def test_lit_vi_and_polarity(vi, positive):
    lit = Lit.from_var(vi, positive)
    assert lit.vi() == vi
    assert lit.as_bool() is positive


def test_lit_negation():
    assert Lit.from_int(1) == ~Lit.from_int(-1)
    assert Lit.from_int(-1) == ~Lit.from_int(1)
    assert Lit.from_int(2) == ~Lit.from_int(-2)
    assert Lit.from_int(-2) == ~Lit.from_int(2)
    lit = Lit.from_int(9)
    assert ~~lit == lit


def test_lit_str_and_i32s():
    assert str(Lit.from_int(-3)) == "-3L"
    lits = [Lit.from_int(v) for v in (4, -5, 6)]
    assert i32s(lits) == [4, -5, 6]


def test_lit_rejects_nonpositive_ordinal():
    with pytest.raises(ValueError):
        Lit.from_var(0, False)


def test_solver_error_fields():
    err = SolverError(SolverErrorKind.TIME_OUT)
    assert str(err) == "TimeOut"
    assert err == SolverError(SolverErrorKind.TIME_OUT)
    with pytest.raises(SolverError) as info:
        raise SolverError(SolverErrorKind.EMPTY_CLAUSE)
    assert info.value.kind is SolverErrorKind.EMPTY_CLAUSE


def test_ref_clause():
    ref = RefClause(RefClauseKind.CLAUSE, 7)
    assert ref.as_cid() == 7
    assert ref.is_new() == 7
    registered = RefClause(RefClauseKind.REGISTERED_CLAUSE, 8)
    assert registered.as_cid() == 8
    assert registered.is_new() is None
    assert RefClause(RefClauseKind.DEAD).is_new() is None
    with pytest.raises(ValueError):
        RefClause(RefClauseKind.UNIT_CLAUSE, Lit.from_int(1)).as_cid()


def test_cnf_indicator_text():
    assert str(CNFIndicator.void()) == "No CNF specified)"
    assert str(CNFIndicator.file("a.cnf")) == "CNF file(a.cnf)"
    assert str(CNFIndicator.lit_vec(3)) == "A vec(3 clauses)"
    assert CNFIndicator.void().label() == "(no cnf)"
    assert CNFIndicator.file("a.cnf").label() == "a.cnf"
    assert CNFIndicator.lit_vec(3).label() == "(embedded 3 element vector)"


def test_cnf_description_from_clauses():
    cnf = CNFDescription.from_clauses([[1, -4], [2, 3], [-2]])
    assert cnf.num_of_variables == 4
    assert cnf.num_of_clauses == 3
    assert cnf.pathname == CNFIndicator.lit_vec(3)
    assert str(cnf) == "CNF(4, 3, A vec(3 clauses))"


def test_cnf_description_empty():
    cnf = CNFDescription.from_clauses([])
    assert (cnf.num_of_variables, cnf.num_of_clauses) == (0, 0)
    assert str(CNFDescription()) == "CNF(0, 0, No CNF specified))"


def test_cnf_reader_reads_header(tmp_path):
    path = tmp_path / "sample.cnf"
    path.write_text("c comment\np cnf 250 1065\n1 -2 0\n")
    with CNFReader.open(path) as reader:
        assert reader.cnf.num_of_variables == 250
        assert reader.cnf.num_of_clauses == 1065
        assert reader.cnf.pathname == CNFIndicator.file("sample.cnf")
        assert reader.reader.readline() == "1 -2 0\n"
    assert reader.reader.closed


def test_cnf_reader_missing_file(tmp_path):
    with pytest.raises(SolverError) as info:
        CNFReader.open(tmp_path / "absent.cnf")
    assert info.value.kind is SolverErrorKind.IO_ERROR


def test_cnf_reader_without_header(tmp_path):
    path = tmp_path / "bad.cnf"
    path.write_text("c nothing\np cnf 3\n1 2 0\n")
    with pytest.raises(SolverError) as info:
        CNFReader.open(path)
    assert info.value.kind is SolverErrorKind.IO_ERROR


def test_delete_unstable():
    items = [1, 2, 3, 4, 5]
    delete_unstable(items, lambda x: x == 2)
    assert items == [1, 5, 3, 4]
    delete_unstable(items, lambda x: x == 4)
    assert items == [1, 5, 3]
    delete_unstable(items, lambda x: x == 99)
    assert items == [1, 5, 3]


def test_flags():
    flags = FlagClause(0b0000_0011)
    assert flags == FlagClause.LEARNT | FlagClause.USED
    assert FlagClause.USED in flags
    assert FlagClause.ENQUEUED not in flags
    assert FlagClause(0b0001_0000) == FlagClause.DERIVE20
    var_flags = FlagVar(0b0001_0001)
    assert var_flags == FlagVar.PHASE | FlagVar.CA_SEEN
    assert (var_flags & ~FlagVar.PHASE) == FlagVar.CA_SEEN


def test_logger_to_file(tmp_path):
    path = tmp_path / "log.txt"
    logger = Logger(path)
    logger.dump("abc\n")
    logger.dump("def")
    logger.close()
    assert path.read_text() == "abc\ndef"


def test_logger_to_stdout(capsys):
    logger = Logger()
    logger.dump("hello")
    assert capsys.readouterr().out == "hello\n"


def test_ordered_proxy_sorting():
    items = [OrderedProxy("b", 2.0), OrderedProxy("a", 3.0), OrderedProxy("c", 1.0)]
    assert [p.to() for p in sorted(items)] == ["c", "b", "a"]
    inverted = [OrderedProxy.inverted(p.to(), p.value()) for p in items]
    assert [p.to() for p in sorted(inverted)] == ["a", "b", "c"]


def test_ordered_proxy_ties_and_equality():
    x = OrderedProxy(1, 0.5)
    y = OrderedProxy(2, 0.5)
    assert x < y
    assert OrderedProxy(1, 0.5) == x
    assert OrderedProxy.inverted(1, 0.5).value() == -0.5