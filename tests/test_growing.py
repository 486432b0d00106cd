from __future__ import annotations

from stream.growing import GrowingSource


def _source(work: list[int]) -> GrowingSource[int]:
    def produce() -> int | None:
        return work.pop(0) if work else None

    return GrowingSource(produce)


def test_replay_starts_from_first_element_every_time() -> None:
    source = _source([1, 2, 3])

    assert source.replay().limit(2).to_list() == [1, 2]
    assert len(source) == 2
    assert source.replay().to_list() == [1, 2, 3]
    assert source.items == (1, 2, 3)
    assert source[0] == 1


def test_cursor_keeps_its_own_position() -> None:
    source = _source([1, 2, 3, 4])
    first = source.cursor()
    second = source.cursor()

    assert first.limit(2).to_list() == [1, 2]
    assert second.find_first() == 1
    assert first.to_list() == [3, 4]
    assert second.to_list() == [2, 3, 4]
    assert first.to_list() == []


def test_producer_may_produce_again_after_running_dry() -> None:
    work = [1]
    source = _source(work)
    cursor = source.cursor()

    assert cursor.to_list() == [1]
    assert cursor.to_list() == []

    work.extend([2, 3])
    assert cursor.to_list() == [2, 3]
    assert source.replay().to_list() == [1, 2, 3]


def test_fresh_only_yields_newly_produced_elements() -> None:
    work = [1, 2]
    source = _source(work)

    assert source.replay().to_list() == [1, 2]
    assert source.fresh().to_list() == []

    work.append(3)
    assert source.fresh().to_list() == [3]
    assert source.items == (1, 2, 3)


def test_advance_records_produced_element() -> None:
    source = _source([7])

    assert source.advance() == 7
    assert source.advance() is None
    assert source.items == (7,)
