# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
commands.py — The only way a player (or the autopilot) can change the realm.

Architecture
────────────
  Command        — sealed dataclass hierarchy; one class per player action.
  execute()      — validates and applies a command synchronously between
                   ticks, returning a CommandResult.  A rejected command
                   leaves the World State exactly as it was.
  command_from_dict()
                 — parses the discriminated request form
                   ``{"kind": "construct", "building": "house"}``.

Rejections (errors.CommandRejected) never escape execute(); programmer
errors (unknown kinds, bad arguments) do.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field, fields
from typing import Optional

from .        import combat, diplomacy, economy, market, population, technology
from .errors  import CommandRejected, Rejection
from .events  import Event
from .world   import Building, Policy, Resource, Stance, TaxLevel, Tech, Unit, WorldState


# ══════════════════════════════════════════════════════════════════════════
# Command hierarchy
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class Command(abc.ABC):
    """Sealed base class.  Every concrete command must inherit from this."""

    kind = ''

    @abc.abstractmethod
    def apply(self, state: WorldState) -> list[Event]:
        """Mutate *state* or raise CommandRejected without touching it."""

    def describe(self) -> str:
        args = ', '.join(f"{f.name}={_plain(getattr(self, f.name))!r}" for f in fields(self))
        return f"{type(self).__name__}({args})"


def _plain(value):
    return value.value if hasattr(value, 'value') else value


# ── Economy ───────────────────────────────────────────────────────────────

@dataclass
class Construct(Command):
    building: Building
    kind = 'construct'

    def apply(self, state):
        return economy.construct(state, self.building)


@dataclass
class Buy(Command):
    resource: Resource
    amount:   float
    kind = 'buy'

    def apply(self, state):
        return market.buy(state, self.resource, self.amount)


@dataclass
class Sell(Command):
    resource: Resource
    amount:   float
    kind = 'sell'

    def apply(self, state):
        return market.sell(state, self.resource, self.amount)


# ── Population ────────────────────────────────────────────────────────────

@dataclass
class SetTax(Command):
    level: TaxLevel
    kind = 'set_tax'

    def apply(self, state):
        return population.set_tax(state, self.level)


@dataclass
class TogglePolicy(Command):
    policy: Policy
    kind = 'toggle_policy'

    def apply(self, state):
        return population.toggle_policy(state, self.policy)


# ── Research ──────────────────────────────────────────────────────────────

@dataclass
class StartResearch(Command):
    tech: Tech
    kind = 'start_research'

    def apply(self, state):
        return technology.start_research(state, self.tech)


@dataclass
class AccelerateResearch(Command):
    kind = 'accelerate_research'

    def apply(self, state):
        return technology.accelerate_research(state)


@dataclass
class CancelResearch(Command):
    kind = 'cancel_research'

    def apply(self, state):
        return technology.cancel_research(state)


@dataclass
class PauseResearch(Command):
    kind = 'pause_research'

    def apply(self, state):
        return technology.pause_research(state)


# ── Military ──────────────────────────────────────────────────────────────

@dataclass
class Recruit(Command):
    unit: Unit
    kind = 'recruit'

    def apply(self, state):
        return combat.recruit(state, self.unit)


@dataclass
class Dismiss(Command):
    unit: Unit
    kind = 'dismiss'

    def apply(self, state):
        return combat.dismiss(state, self.unit)


@dataclass
class Upgrade(Command):
    upgrade: str          # 'weapons' | 'armor'
    kind = 'upgrade'

    def apply(self, state):
        return combat.upgrade(state, self.upgrade)


@dataclass
class SetStance(Command):
    stance: Stance
    kind = 'set_stance'

    def apply(self, state):
        return combat.set_stance(state, self.stance)


@dataclass
class Attack(Command):
    neighbor: str
    mode:     str         # 'raid' | 'conquer'
    kind = 'attack'

    def apply(self, state):
        return combat.attack(state, self.neighbor, self.mode)


# ── Diplomacy & trade ─────────────────────────────────────────────────────

@dataclass
class ToggleRoute(Command):
    neighbor: str
    kind = 'toggle_route'

    def apply(self, state):
        return diplomacy.toggle_route(state, self.neighbor)


@dataclass
class ConfigureRoute(Command):
    neighbor:  str
    direction: str        # 'import' | 'export'
    resource:  Optional[Resource] = None
    kind = 'configure_route'

    def apply(self, state):
        return diplomacy.configure_route(state, self.neighbor, self.direction, self.resource)


@dataclass
class Diplomacy(Command):
    neighbor: str
    action:   str         # 'gift' | 'insult' | 'war'
    kind = 'diplomacy'

    _ACTIONS = {
        'gift':   diplomacy.send_gift,
        'insult': diplomacy.send_insult,
        'war':    diplomacy.declare_war,
    }

    def __post_init__(self) -> None:
        if self.action not in self._ACTIONS:
            raise ValueError(f"unknown diplomatic action {self.action!r}")

    def apply(self, state):
        return self._ACTIONS[self.action](state, self.neighbor)


@dataclass
class Scout(Command):
    neighbor: str
    kind = 'scout'

    def apply(self, state):
        return diplomacy.scout(state, self.neighbor)


COMMAND_TYPES: dict[str, type[Command]] = {
    cls.kind: cls for cls in (
        Construct, Buy, Sell, SetTax, TogglePolicy,
        StartResearch, AccelerateResearch, CancelResearch, PauseResearch,
        Recruit, Dismiss, Upgrade, SetStance, Attack,
        ToggleRoute, ConfigureRoute, Diplomacy, Scout,
    )
}

# Field name → enum used to coerce the plain-string request form
_ENUM_FIELDS = {
    'building': Building, 'resource': Resource, 'level': TaxLevel, 'policy': Policy,
    'tech': Tech, 'unit': Unit, 'stance': Stance,
}


# ══════════════════════════════════════════════════════════════════════════
# Dispatch
# ══════════════════════════════════════════════════════════════════════════

@dataclass
class CommandResult:
    ok:      bool
    command: Command
    reason:  Optional[Rejection] = None
    message: str                 = ''
    events:  list[Event]         = field(default_factory=list)


def execute(state: WorldState, command: Command) -> CommandResult:
    try:
        events = command.apply(state)
    except CommandRejected as rejected:
        return CommandResult(False, command, rejected.reason, rejected.message)
    return CommandResult(True, command, events=events)


def command_from_dict(request: dict) -> Command:
    """Build a Command from ``{"kind": ..., <field>: <plain value>, ...}``."""
    kind = request['kind']
    try:
        cls = COMMAND_TYPES[kind]
    except KeyError:
        raise ValueError(f"unknown command kind {kind!r}") from None

    kwargs = {}
    for f in fields(cls):
        if f.name not in request:
            continue
        value = request[f.name]
        enum_type = _ENUM_FIELDS.get(f.name)
        if enum_type is not None and value is not None:
            value = enum_type(value)
        kwargs[f.name] = value
    return cls(**kwargs)
