# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
errors.py — Rejection taxonomy shared by every command.

Subsystem command functions raise CommandRejected *before* mutating anything;
commands.execute() is the only place that catches it.  Tick-level shortfalls
(a factory without input, an import without gold) are not errors at all.
"""

from __future__ import annotations

import enum


class Rejection(enum.Enum):
    INSUFFICIENT_RESOURCES        = 'insufficient_resources'
    INSUFFICIENT_POPULATION       = 'insufficient_population'
    MISSING_PREREQUISITE_BUILDING = 'missing_prerequisite_building'
    UNMET_TECHNOLOGY_REQUIREMENT  = 'unmet_technology_requirement'
    RESEARCH_SLOT_OCCUPIED        = 'research_slot_occupied'
    STORAGE_FULL                  = 'storage_full'
    INVALID_TARGET                = 'invalid_target'
    ROUTE_BLOCKED                 = 'route_blocked'


class CommandRejected(Exception):
    """A command failed validation; the World State was left untouched."""

    def __init__(self, reason: Rejection, message: str = '') -> None:
        self.reason  = reason
        self.message = message or reason.value.replace('_', ' ')
        super().__init__(self.message)
