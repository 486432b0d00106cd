"""Lazy, restartable sequences used to express every graph query.

A ``Sequence`` wraps a factory returning a fresh iterator, so each terminal
operation re-runs the whole pipeline from scratch. ``cache()`` memoizes the
first (full or partial) enumeration and replays it verbatim afterwards, and
``resume()`` shares a single underlying iterator between enumerations.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable, Iterator

T = TypeVar("T")
R = TypeVar("R")


class Sequence(Generic[T]):
    """A pull-based lazy sequence that can be enumerated any number of times."""

    def __init__(self, factory: Callable[[], Iterator[T]]) -> None:
        self._factory = factory

    # Constructors

    @classmethod
    def of(cls, *items: T) -> Sequence[T]:
        return cls(lambda: iter(items))

    @classmethod
    def from_iterable(cls, iterable: Iterable[T]) -> Sequence[T]:
        """Wrap a re-iterable collection (a list, a tuple, another sequence)."""
        return cls(lambda: iter(iterable))

    @classmethod
    def create(cls, supplier: Callable[[], Iterable[T]]) -> Sequence[T]:
        """Defer building the source until the sequence is first pulled."""
        return cls(lambda: iter(supplier()))

    @classmethod
    def empty(cls) -> Sequence[T]:
        return cls(lambda: iter(()))

    @classmethod
    def concat_all(cls, *sequences: Iterable[T]) -> Sequence[T]:
        return cls(lambda: itertools.chain.from_iterable(sequences))

    def __iter__(self) -> Iterator[T]:
        return self._factory()

    # Lazy operations

    def filter(self, predicate: Callable[[T], bool]) -> Sequence[T]:
        return Sequence(lambda: (item for item in self if predicate(item)))

    def map(self, mapper: Callable[[T], R]) -> Sequence[R]:
        return Sequence(lambda: (mapper(item) for item in self))

    def flat_map(self, mapper: Callable[[T], Iterable[R]]) -> Sequence[R]:
        return Sequence(
            lambda: (inner for item in self for inner in mapper(item))
        )

    def distinct(self, key: Callable[[T], Hashable] | None = None) -> Sequence[T]:
        """Drop repeated elements, keeping the first occurrence of each key."""

        def generate() -> Iterator[T]:
            seen: set[Any] = set()
            for item in self:
                marker = key(item) if key is not None else item
                if marker not in seen:
                    seen.add(marker)
                    yield item

        return Sequence(generate)

    def sorted(
        self,
        key: Callable[[T], Any] | None = None,
        *,
        reverse: bool = False,
    ) -> Sequence[T]:
        return Sequence(lambda: iter(sorted(self, key=key, reverse=reverse)))  # type: ignore[arg-type]

    def concat(self, *others: Iterable[T]) -> Sequence[T]:
        return Sequence.concat_all(self, *others)

    def limit(self, size: int) -> Sequence[T]:
        return Sequence(lambda: itertools.islice(self, size))

    def take_while(self, predicate: Callable[[T], bool]) -> Sequence[T]:
        return Sequence(lambda: itertools.takewhile(predicate, self))

    def cache(self) -> CachedSequence[T]:
        return CachedSequence(self)

    def resume(self) -> ResumableSequence[T]:
        return ResumableSequence(self)

    # Terminal operations

    def for_each(self, action: Callable[[T], object]) -> None:
        for item in self:
            action(item)

    def to_list(self) -> list[T]:
        return list(self)

    def count(self) -> int:
        return sum(1 for _ in self)

    def find_first(self) -> T | None:
        return next(iter(self), None)

    def is_empty(self) -> bool:
        for _ in self:
            return False
        return True

    def any_match(self, predicate: Callable[[T], bool]) -> bool:
        return any(predicate(item) for item in self)

    def all_match(self, predicate: Callable[[T], bool]) -> bool:
        return all(predicate(item) for item in self)

    def none_match(self, predicate: Callable[[T], bool]) -> bool:
        return not self.any_match(predicate)

    def max_by(self, key: Callable[[T], Any]) -> T | None:
        """Return the first element with the greatest key, or None when empty."""
        best: T | None = None
        best_key: Any = None
        found = False
        for item in self:
            item_key = key(item)
            if not found or item_key > best_key:
                best, best_key, found = item, item_key, True
        return best


class CachedSequence(Sequence[T]):
    """A sequence whose first enumeration is memoized and replayed verbatim.

    The source is pulled only as far as consumers actually read, so a partial
    enumeration fills a prefix of the buffer and a later enumeration continues
    filling it. Independent consumers may interleave freely.
    """

    def __init__(self, source: Iterable[T]) -> None:
        super().__init__(self._replay)
        self._source = source
        self._buffer: list[T] = []
        self._live: Iterator[T] | None = None
        self._exhausted = False
        self._filling = False

    def _pull(self) -> bool:
        if self._exhausted:
            return False
        if self._filling:
            msg = "Cached sequence re-entered while it was being filled"
            raise RuntimeError(msg)
        self._filling = True
        try:
            if self._live is None:
                self._live = iter(self._source)
            try:
                item = next(self._live)
            except StopIteration:
                self._exhausted = True
                self._live = None
                return False
            self._buffer.append(item)
            return True
        finally:
            self._filling = False

    def _replay(self) -> Iterator[T]:
        index = 0
        while True:
            if index < len(self._buffer):
                yield self._buffer[index]
                index += 1
            elif not self._pull():
                return

    @property
    def is_complete(self) -> bool:
        return self._exhausted

    def cache(self) -> CachedSequence[T]:
        return self


class ResumableSequence(Sequence[T]):
    """A sequence sharing one underlying iterator across enumerations.

    Each enumeration continues where the previous one stopped; an element
    handed out once is never handed out again.
    """

    def __init__(self, source: Iterable[T]) -> None:
        super().__init__(self._continue)
        self._source = source
        self._shared: Iterator[T] | None = None

    def _continue(self) -> Iterator[T]:
        if self._shared is None:
            self._shared = iter(self._source)
        while True:
            try:
                item = next(self._shared)
            except StopIteration:
                return
            yield item

    def resume(self) -> ResumableSequence[T]:
        return self


__all__ = ["CachedSequence", "ResumableSequence", "Sequence"]
