"""Shared fixtures and helpers."""

from __future__ import annotations

import pytest


class ScriptedRng:
    """Stands in for ``numpy.random.Generator``; replays fixed integers."""

    def __init__(self, values: list[int]) -> None:
        self._values = list(values)
        self.calls = 0

    def integers(self, high: int) -> int:
        self.calls += 1
        value = self._values.pop(0) if self._values else 0
        return value % high


@pytest.fixture()
def scripted_rng():
    return ScriptedRng
