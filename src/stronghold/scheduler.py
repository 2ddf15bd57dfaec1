# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
scheduler.py — One-shot deferred effects keyed by tick.

The agenda is part of the World State.  sim.step() drains every effect whose
due tick has come before any subsystem runs; nothing else fires scheduled
mutations.  Dropping the agenda (shutdown) drops every pending effect.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable


@dataclass(order=True)
class ScheduledEffect:
    due_tick:  int
    seq:       int
    action:    Callable = field(compare=False)
    label:     str      = field(default='', compare=False)


class Agenda:
    """Min-heap of pending effects; ties resolve in scheduling order."""

    def __init__(self) -> None:
        self._heap: list[ScheduledEffect] = []
        self._seq = itertools.count()

    def schedule(self, due_tick: int, action: Callable, label: str = '') -> ScheduledEffect:
        effect = ScheduledEffect(due_tick, next(self._seq), action, label)
        heapq.heappush(self._heap, effect)
        return effect

    def pop_due(self, tick: int) -> list[ScheduledEffect]:
        """Remove and return every effect with due_tick <= tick."""
        due: list[ScheduledEffect] = []
        while self._heap and self._heap[0].due_tick <= tick:
            due.append(heapq.heappop(self._heap))
        return due

    def clear(self) -> None:
        self._heap.clear()

    def pending(self) -> list[ScheduledEffect]:
        return sorted(self._heap)

    def __len__(self) -> int:
        return len(self._heap)
