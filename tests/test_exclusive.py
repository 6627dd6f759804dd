import logging

import pytest

from noctile.exclusive import MAX_ENTRIES, ExclusiveMonitor


def test_unreserved_address_fails_test():
    monitor = ExclusiveMonitor(2)
    assert monitor.test(0, 0x100) is True
    assert monitor.entries() == []


def test_owner_passes_other_cpu_fails():
    monitor = ExclusiveMonitor(2)
    monitor.mark(0, 0x200)
    assert monitor.test(0, 0x200) is False
    assert monitor.test(1, 0x200) is True


def test_address_is_word_aligned():
    monitor = ExclusiveMonitor(2)
    monitor.mark(1, 0x1003)
    assert monitor.entries() == [(0x1000, 1)]
    assert monitor.test(1, 0x1001) is False


def test_second_mark_keeps_first_owner():
    monitor = ExclusiveMonitor(2)
    monitor.mark(0, 0x40)
    monitor.mark(1, 0x40)
    assert monitor.entries() == [(0x40, 0)]
    assert monitor.test(1, 0x40) is True


def test_clear_removes_and_preserves_order():
    monitor = ExclusiveMonitor(4)
    monitor.mark(0, 0x10)
    monitor.mark(1, 0x20)
    monitor.mark(2, 0x30)
    assert monitor.clear(1, 0x20) is True
    assert monitor.entries() == [(0x10, 0), (0x30, 2)]
    assert monitor.test(1, 0x20) is True


def test_clear_missing_reports_false(caplog):
    monitor = ExclusiveMonitor(1)
    with caplog.at_level(logging.WARNING):
        assert monitor.clear(0, 0x80) is False
    assert "not in the exclusive list" in caplog.text


def test_more_entries_than_cpus_warns(caplog):
    monitor = ExclusiveMonitor(1)
    with caplog.at_level(logging.WARNING):
        monitor.mark(0, 0x10)
        monitor.mark(0, 0x20)
    assert len(monitor.entries()) == 2
    assert "exclusive list" in caplog.text


def test_capacity_limit():
    monitor = ExclusiveMonitor(MAX_ENTRIES)
    for index in range(MAX_ENTRIES):
        monitor.mark(0, index * 4)
    with pytest.raises(OverflowError):
        monitor.mark(0, MAX_ENTRIES * 4)
    assert len(monitor.entries()) == MAX_ENTRIES