from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, List, Tuple

if TYPE_CHECKING:
    from .flock import Flock


class BufferLengthError(ValueError):
    """A buffer was seeded with a sequence that is not ``2 * count`` long."""


class StaleViewError(RuntimeError):
    """A buffer view was used after the flock advanced."""


def check_length(name: str, values: List[float], count: int) -> None:
    expected = 2 * count
    if len(values) != expected:
        raise BufferLengthError(f"{name} buffer needs {expected} floats for {count} boids, got {len(values)}")


class BufferView:
    """
    Read/write window onto one of a flock's flat ``[x0, y0, x1, y1, ...]`` buffers.

    A view is only valid until the next ``Flock.update()``; any access after
    that raises ``StaleViewError``. Take a fresh view every frame.
    """

    __slots__ = ("_flock", "_data", "_name", "_generation")

    def __init__(self, flock: "Flock", data: List[float], name: str) -> None:
        self._flock = flock
        self._data = data
        self._name = name
        self._generation = flock.generation

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_valid(self) -> bool:
        return self._generation == self._flock.generation

    def _check(self) -> List[float]:
        if self._generation != self._flock.generation:
            raise StaleViewError(
                f"{self._name} view from generation {self._generation} used at generation {self._flock.generation}"
            )
        return self._data

    def __len__(self) -> int:
        return len(self._check())

    def __getitem__(self, index):
        return self._check()[index]

    def __setitem__(self, index, value) -> None:
        data = self._check()
        if isinstance(index, slice):
            values = [float(v) for v in value]
            if len(data[index]) != len(values):
                raise BufferLengthError(f"slice assignment would resize the {self._name} buffer")
            data[index] = values
            return
        data[index] = float(value)

    def __iter__(self) -> Iterator[float]:
        return iter(list(self._check()))

    def copy(self) -> List[float]:
        return list(self._check())

    def pairs(self) -> List[Tuple[float, float]]:
        data = self._check()
        return [(data[i], data[i + 1]) for i in range(0, len(data), 2)]

    def assign(self, values: Iterable[float]) -> None:
        data = self._check()
        new_values = [float(v) for v in values]
        check_length(self._name, new_values, len(data) // 2)
        data[:] = new_values

    def __repr__(self) -> str:
        state = "valid" if self.is_valid else "stale"
        return f"BufferView({self._name}, len={len(self._data)}, {state})"
