import pytest

from noctile.fifo import BoundedFifo, FifoEmptyError, FifoFullError


def test_items_come_out_in_order():
    fifo = BoundedFifo(8)
    for item in ("a", "b", "c"):
        fifo.write(item)
    assert [fifo.read(), fifo.read(), fifo.read()] == ["a", "b", "c"]


def test_read_from_empty_raises():
    fifo = BoundedFifo(2)
    with pytest.raises(FifoEmptyError):
        fifo.read()


def test_write_to_full_raises():
    fifo = BoundedFifo(2)
    fifo.write(1)
    fifo.write(2)
    assert fifo.is_full()
    with pytest.raises(FifoFullError):
        fifo.write(3)


def test_length_follows_writes_and_reads():
    fifo = BoundedFifo(4)
    fifo.write(1)
    fifo.write(2)
    assert len(fifo) == 2
    fifo.read()
    assert len(fifo) == 1


def test_reset_empties_queue():
    fifo = BoundedFifo(3)
    fifo.write(1)
    fifo.write(2)
    fifo.reset()
    assert fifo.is_empty()
    assert len(fifo) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        BoundedFifo(0)


def test_order_kept_across_many_cycles():
    fifo = BoundedFifo(3)
    out = []
    for value in range(20):
        fifo.write(value)
        if fifo.is_full():
            out.append(fifo.read())
    while not fifo.is_empty():
        out.append(fifo.read())
    assert out == list(range(20))