# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
combat.py — Layer 7: army strength, recruitment, upgrades and expeditions.

Expeditions are the only deferred effect in the engine.  attack() snapshots
both sides, marks the target as at war immediately, and schedules
resolve_expedition() on the realm's agenda MARCH_DELAY_TICKS later; sim.step()
fires it before any other layer runs on that tick.

Public helpers used by other modules:
    military_power(state)      -> float
    unit_cost(state, unit)     -> dict   (blacksmith discount applied)
    upgrade_cost(level)        -> dict

Commands:
    recruit(state, unit) · dismiss(state, unit) · upgrade(state, kind)
    set_stance(state, stance) · attack(state, neighbor_id, mode)
"""

from __future__ import annotations

import functools
import math
from dataclasses import dataclass

from .         import config
from .errors   import CommandRejected, Rejection
from .events   import Event, EventKind
from .world    import (
    Building, Policy, Relation, Resource, Stance, Tech, Unit, WorldState,
    can_afford, max_population, pay,
)


# ══════════════════════════════════════════════════════════════════════════
# Unit tables
# ══════════════════════════════════════════════════════════════════════════

UNIT_COSTS: dict[Unit, dict] = {
    Unit.LANCER: {Resource.PLANKS: 10, Resource.IRON_INGOTS: 5,
                  Resource.BREAD: 20,  Resource.GOLD: 10, 'pop': 1},
    Unit.ARCHER: {Resource.PLANKS: 30, Resource.IRON_INGOTS: 2,
                  Resource.BREAD: 30,  Resource.GOLD: 15, 'pop': 1},
    Unit.KNIGHT: {Resource.PLANKS: 20, Resource.IRON_INGOTS: 40,
                  Resource.BREAD: 100, Resource.GOLD: 50, 'pop': 2},
}

UNIT_STATS: dict[Unit, dict] = {
    Unit.LANCER: {'power': 10, 'upkeep_gold': 0.5, 'upkeep_bread': 1},
    Unit.ARCHER: {'power': 15, 'upkeep_gold': 1.0, 'upkeep_bread': 1},
    Unit.KNIGHT: {'power': 45, 'upkeep_gold': 5.0, 'upkeep_bread': 3},
}

STANCE_MULTIPLIERS: dict[Stance, float] = {
    Stance.DEFENSIVE:  1.0,
    Stance.BALANCED:   1.0,
    Stance.AGGRESSIVE: 1.2,
}

UPGRADE_KINDS        = ('weapons', 'armor')
UPGRADE_BASE_INGOTS  = 50
UPGRADE_BASE_GOLD    = 100
UPGRADE_SCALING      = 1.5
WEAPONS_BONUS        = 0.1
ARMOR_BONUS          = 0.05
IRON_WEAPONS_BONUS   = 0.1
TRAINING_BONUS       = 1.1
WALL_DEFENSE         = 100
STONE_WALLS_MULT     = 1.5
BLACKSMITH_DISCOUNT  = 0.05     # per level
MAX_DISCOUNT         = 0.5
RECRUIT_POP_RESERVE  = 2        # citizens that must remain after recruiting

RAID_SHARE           = 0.3
SURVIVOR_SHARE       = 0.7
ATTACK_MODES         = ('raid', 'conquer')


def wall_bonus(state: WorldState) -> float:
    mult = STONE_WALLS_MULT if state.has_tech(Tech.STONE_WALLS) else 1.0
    return state.level(Building.WALL) * WALL_DEFENSE * mult


def military_power(state: WorldState) -> float:
    """Troop strength after upgrades, drill and stance, plus walls."""
    raw = sum(n * UNIT_STATS[u]['power'] for u, n in state.troops.items())
    upgrades = (1
                + state.upgrades.weapons * WEAPONS_BONUS
                + state.upgrades.armor * ARMOR_BONUS
                + (IRON_WEAPONS_BONUS if state.has_tech(Tech.IRON_WEAPONS) else 0))
    drill = TRAINING_BONUS if state.has_policy(Policy.MILITARY_TRAINING) else 1.0
    return raw * upgrades * drill * STANCE_MULTIPLIERS[state.stance] + wall_bonus(state)


def blacksmith_discount(state: WorldState) -> float:
    return min(MAX_DISCOUNT, state.level(Building.BLACKSMITH) * BLACKSMITH_DISCOUNT)


def unit_cost(state: WorldState, unit: Unit) -> dict:
    """Material cost after the blacksmith discount; 'pop' is never discounted."""
    keep = 1 - blacksmith_discount(state)
    cost = {res: math.floor(v * keep) for res, v in UNIT_COSTS[unit].items() if res != 'pop'}
    cost['pop'] = UNIT_COSTS[unit]['pop']
    return cost


def upgrade_cost(level: int) -> dict[Resource, int]:
    factor = UPGRADE_SCALING ** level
    return {
        Resource.IRON_INGOTS: math.floor(UPGRADE_BASE_INGOTS * factor),
        Resource.GOLD:        math.floor(UPGRADE_BASE_GOLD * factor),
    }


# ══════════════════════════════════════════════════════════════════════════
# Army commands
# ══════════════════════════════════════════════════════════════════════════

def recruit(state: WorldState, unit: Unit) -> list[Event]:
    if state.level(Building.BARRACKS) < 1:
        raise CommandRejected(Rejection.MISSING_PREREQUISITE_BUILDING, 'barracks required')
    if unit is Unit.KNIGHT and state.level(Building.STABLE) < 1:
        raise CommandRejected(Rejection.MISSING_PREREQUISITE_BUILDING, 'stable required for knights')

    cost = unit_cost(state, unit)
    pop  = cost.pop('pop')
    if state.population < pop + RECRUIT_POP_RESERVE:
        raise CommandRejected(Rejection.INSUFFICIENT_POPULATION,
                              f"need {pop + RECRUIT_POP_RESERVE} citizens")
    if not can_afford(state, cost):
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"cannot afford a {unit.value}")

    pay(state, cost)
    state.population   -= pop
    state.troops[unit] += 1
    return [Event(EventKind.UNIT_RECRUITED, state.tick,
                  {'unit': unit.value, 'count': state.troops[unit]})]


def dismiss(state: WorldState, unit: Unit) -> list[Event]:
    """Release one unit; its soldiers return home if there is housing for them."""
    if state.troops.get(unit, 0) <= 0:
        raise CommandRejected(Rejection.INVALID_TARGET, f"no {unit.value} to dismiss")
    state.troops[unit] -= 1
    returning = UNIT_COSTS[unit]['pop']
    state.population = max(state.population,
                           min(state.population + returning, max_population(state)))
    return [Event(EventKind.UNIT_DISMISSED, state.tick,
                  {'unit': unit.value, 'count': state.troops[unit]})]


def upgrade(state: WorldState, kind: str) -> list[Event]:
    if kind not in UPGRADE_KINDS:
        raise ValueError(f"upgrade kind must be one of {UPGRADE_KINDS}, got {kind!r}")
    level = getattr(state.upgrades, kind)
    cost  = upgrade_cost(level)
    if not can_afford(state, cost):
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"cannot afford {kind} upgrade")
    pay(state, cost)
    setattr(state.upgrades, kind, level + 1)
    return [Event(EventKind.UPGRADE_FORGED, state.tick, {'kind': kind, 'level': level + 1})]


def set_stance(state: WorldState, stance: Stance) -> list[Event]:
    state.stance = stance
    return [Event(EventKind.STANCE_CHANGED, state.tick, {'stance': stance.value})]


# ══════════════════════════════════════════════════════════════════════════
# Expeditions
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Expedition:
    """Everything the battle needs, frozen at the moment the army marches."""
    neighbor_id:     str
    mode:            str
    attacker_power:  float
    defender_power:  float
    defender_wealth: float
    intel_level:     int
    dispatched:      int


def attack(state: WorldState, neighbor_id: str, mode: str) -> list[Event]:
    if mode not in ATTACK_MODES:
        raise ValueError(f"attack mode must be one of {ATTACK_MODES}, got {mode!r}")
    n = state.neighbor(neighbor_id)
    if n is None:
        raise CommandRejected(Rejection.INVALID_TARGET, f"no neighbour {neighbor_id!r}")
    if n.relation is Relation.VASSAL:
        raise CommandRejected(Rejection.INVALID_TARGET, f"{n.name} already serves us")
    power = military_power(state)
    if power <= 0:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, 'no army to march with')

    n.relation       = Relation.WAR
    n.relation_score = -100
    expedition = Expedition(
        neighbor_id     = n.id,
        mode            = mode,
        attacker_power  = power,
        defender_power  = n.military_power,
        defender_wealth = n.wealth,
        intel_level     = n.intel_level,
        dispatched      = state.tick,
    )
    due = state.tick + config.MARCH_DELAY_TICKS
    state.agenda.schedule(due, functools.partial(resolve_expedition, expedition),
                          label=f"{mode} {n.name}")
    return [Event(EventKind.ARMY_DISPATCHED, state.tick, {
        'neighbor': n.id, 'name': n.name, 'mode': mode, 'arrives': due,
    })]


def resolve_expedition(expedition: Expedition, state: WorldState, t: int,
                       events: list[Event]) -> None:
    n = state.neighbor(expedition.neighbor_id)
    if n is None or n.relation is Relation.VASSAL:
        return

    rng      = state.rng
    spread   = 0.2 if expedition.intel_level >= 2 else 0.5
    defence  = expedition.defender_power * (0.9 + rng.random() * spread)
    offence  = expedition.attacker_power * (0.8 + rng.random() * 0.4)
    detail   = {'neighbor': n.id, 'name': n.name, 'mode': expedition.mode,
                'attack_roll': round(offence, 1), 'defence_roll': round(defence, 1)}

    if offence > defence:
        if expedition.mode == 'conquer':
            n.relation       = Relation.VASSAL
            n.relation_score = 100
            n.military_power = 0
        else:
            loot = min(math.floor(expedition.defender_wealth * RAID_SHARE), max(0, math.floor(n.wealth)))
            n.wealth -= loot
            state.resources[Resource.GOLD] += loot
            detail['loot'] = loot
        events.append(Event(EventKind.BATTLE_WON, t, detail))
        return

    for unit, count in state.troops.items():
        state.troops[unit] = math.floor(count * SURVIVOR_SHARE)
    events.append(Event(EventKind.BATTLE_LOST, t, detail))
