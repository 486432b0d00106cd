"""Monotonically growing sources shared by several consumers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from stream.sequence import Sequence

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

T = TypeVar("T")


class GrowingSource(Generic[T]):
    """A list that grows by pulling one element at a time from a producer.

    The producer returns the next element or ``None`` when it has nothing
    more to offer right now. Returning ``None`` is not final: a producer fed
    with new work (a newly registered root, say) may produce again later.

    Consumers read the list through sequences built on top of it:

    - ``replay()`` starts every enumeration from the first element.
    - ``cursor()`` gives a consumer its own position that survives between
      enumerations, so it continues where it stopped.
    - ``fresh()`` only yields elements produced during that enumeration.
    """

    def __init__(self, produce: Callable[[], T | None]) -> None:
        self._produce = produce
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    @property
    def items(self) -> tuple[T, ...]:
        """Elements produced so far, without pulling anything new."""
        return tuple(self._items)

    def advance(self) -> T | None:
        """Pull one new element from the producer and record it."""
        item = self._produce()
        if item is not None:
            self._items.append(item)
        return item

    def _read_from(self, start: int) -> Iterator[T]:
        index = start
        while True:
            if index < len(self._items):
                yield self._items[index]
                index += 1
            elif self.advance() is None:
                return

    def replay(self) -> Sequence[T]:
        return Sequence(lambda: self._read_from(0))

    def cursor(self) -> Sequence[T]:
        position = [0]

        def generate() -> Iterator[T]:
            for item in self._read_from(position[0]):
                position[0] += 1
                yield item

        return Sequence(generate)

    def fresh(self) -> Sequence[T]:
        def generate() -> Iterator[T]:
            while True:
                item = self.advance()
                if item is None:
                    return
                yield item

        return Sequence(generate)


__all__ = ["GrowingSource"]
