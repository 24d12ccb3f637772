import pytest

from satprogress.record import (
    LogF64Id,
    LogUsizeId,
    ProgressRecord,
    Stat,
    highlight_change,
    highlight_threshold,
    record_plain,
)

BOLD_RED = "\x1B[001m\x1B[031m"
RED = "\x1B[031m"
BOLD_CYAN = "\x1B[001m\x1B[036m"
CYAN = "\x1B[036m"
RESET = "\x1B[000m"


@pytest.fixture
def record():
    return ProgressRecord()


def test_default_record_is_all_zero(record):
    assert all(record[k] == 0 for k in LogUsizeId)
    assert all(record[k] == 0.0 for k in LogF64Id)


def test_stat_positions_follow_declaration_order():
    assert Stat(0) is Stat.RESTART
    assert Stat(4) is Stat.SIMPLIFY
    assert Stat(6) is Stat.SLS
    stats = [0] * len(Stat)
    stats[Stat.RESTART] += 1
    stats[Stat.SLS] += 3
    assert stats[0] == 1
    assert stats[6] == 3


@pytest.mark.parametrize("key", [0, "x", Stat.RESTART, None])
def test_invalid_key_raises(record, key):
    with pytest.raises(TypeError):
        record[key]
    with pytest.raises(TypeError):
        record[key] = 1
    assert all(record[k] == 0 for k in LogUsizeId)
    assert all(record[k] == 0.0 for k in LogF64Id)


def test_record_plain_stores_and_formats(record):
    text = record_plain(record, LogUsizeId.NUM_DECISION, 1234, ">13")
    assert text == format(1234, ">13")
    assert record[LogUsizeId.NUM_DECISION] == 1234


def test_record_plain_without_key_does_not_store(record):
    assert record_plain(record, None, 7, ">9") == format(7, ">9")
    assert all(record[k] == 0 for k in LogUsizeId)


def test_highlight_change_no_color_is_plain(record):
    record[LogUsizeId.RESTART] = 100
    text = highlight_change(record, LogUsizeId.RESTART, 1, ">9", no_color=True)
    assert text == format(1, ">9")
    assert record[LogUsizeId.RESTART] == 1


def test_highlight_change_sequence(record):
    key = LogUsizeId.ASSERTED_VAR
    assert highlight_change(record, key, 10, ">9") == BOLD_CYAN + format(10, ">9") + RESET
    assert highlight_change(record, key, 5, ">9") == BOLD_RED + format(5, ">9") + RESET
    assert highlight_change(record, key, 4, ">9") == RED + format(4, ">9") + RESET
    assert highlight_change(record, key, 5, ">9") == CYAN + format(5, ">9") + RESET
    assert highlight_change(record, key, 5, ">9") == format(5, ">9")
    assert record[key] == 5


def test_highlight_change_float(record):
    key = LogF64Id.EMA_LBD
    record[key] = 2.0
    text = highlight_change(record, key, 2.5, ">9.4f")
    assert text == CYAN + format(2.5, ">9.4f") + RESET
    assert record[key] == 2.5


def test_highlight_change_without_key(record):
    assert highlight_change(record, None, 3.0, ">9.2f") == format(3.0, ">9.2f")
    assert all(record[k] == 0.0 for k in LogF64Id)


def test_highlight_threshold(record):
    key = LogF64Id.EX_EX_TREND
    assert highlight_threshold(record, key, 0.5, ">9.4f", 1.0) == RED + format(0.5, ">9.4f") + RESET
    assert highlight_threshold(record, key, 1.5, ">9.4f", 1.0) == CYAN + format(1.5, ">9.4f") + RESET
    assert highlight_threshold(record, key, 1.0, ">9.4f", 1.0) == format(1.0, ">9.4f")
    assert record[key] == 1.0


def test_highlight_threshold_no_color(record):
    key = LogUsizeId.STAGE
    text = highlight_threshold(record, key, 3, ">9", 10, no_color=True)
    assert text == format(3, ">9")
    assert record[key] == 3