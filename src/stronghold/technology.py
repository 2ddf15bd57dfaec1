# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
technology.py — Layer 1: 3-branch research tree, one research slot, passive effects.

Call order each tick (first layer after due expeditions):
    research_tick(state, t, events)

Commands:
    start_research(state, tech)
    accelerate_research(state)
    cancel_research(state)
    pause_research(state)          toggles pause / resume

Branches
────────
  Economy  : Crop Rotation → Heavy Plough · Trade Guilds · Deep Mining
  Military : Iron Weapons → Standing Army · Stone Walls
  Civil    : Urban Planning → Sanitation · Feudal Code

Effects are read by the layer that owns them (economy reads Crop Rotation,
combat reads Iron Weapons, …) through WorldState.has_tech().
"""

from __future__ import annotations

from .errors import CommandRejected, Rejection
from .events import Event, EventKind
from .world  import ActiveResearch, Building, Resource, Tech, WorldState


# ══════════════════════════════════════════════════════════════════════════
# Tech tree — 10 technologies across 3 branches
# ══════════════════════════════════════════════════════════════════════════

TECH_TREE: dict[Tech, dict] = {

    # ── Economy ──────────────────────────────────────────────────────────
    Tech.CROP_ROTATION: {
        'branch':    'economy',
        'name':      'Crop Rotation',
        'rp':        50,
        'gold':      20,
        'ticks':     30,
        'requires':  [],
        'buildings': {Building.FARM: 1},
        'desc':      'Farms yield +20% wheat',
    },
    Tech.HEAVY_PLOUGH: {
        'branch':    'economy',
        'name':      'Heavy Plough',
        'rp':        150,
        'gold':      100,
        'ticks':     60,
        'requires':  [Tech.CROP_ROTATION],
        'buildings': {Building.BLACKSMITH: 1},
        'desc':      'Farms +30% wheat; windmills +30% bread',
    },
    Tech.TRADE_GUILDS: {
        'branch':    'economy',
        'name':      'Trade Guilds',
        'rp':        200,
        'gold':      150,
        'ticks':     90,
        'requires':  [],
        'buildings': {Building.MARKET: 1},
        'desc':      '+2 gold per market level and per active trade route',
    },
    Tech.DEEP_MINING: {
        'branch':    'economy',
        'name':      'Deep Mining',
        'rp':        100,
        'gold':      50,
        'ticks':     45,
        'requires':  [],
        'buildings': {Building.IRON_MINE: 1},
        'desc':      'Quarries and iron mines yield +20%',
    },

    # ── Military ─────────────────────────────────────────────────────────
    Tech.IRON_WEAPONS: {
        'branch':    'military',
        'name':      'Iron Weapons',
        'rp':        80,
        'gold':      50,
        'ticks':     40,
        'requires':  [],
        'buildings': {Building.BARRACKS: 1},
        'desc':      'Unit strength +10%',
    },
    Tech.STANDING_ARMY: {
        'branch':    'military',
        'name':      'Standing Army',
        'rp':        200,
        'gold':      200,
        'ticks':     100,
        'requires':  [Tech.IRON_WEAPONS],
        'buildings': {Building.BARRACKS: 2},
        'desc':      'Army gold upkeep -10%',
    },
    Tech.STONE_WALLS: {
        'branch':    'military',
        'name':      'Stone Walls',
        'rp':        150,
        'gold':      100,
        'ticks':     60,
        'requires':  [],
        'buildings': {Building.WALL: 1},
        'desc':      'Wall defence x1.5',
    },

    # ── Civil ────────────────────────────────────────────────────────────
    Tech.URBAN_PLANNING: {
        'branch':    'civil',
        'name':      'Urban Planning',
        'rp':        60,
        'gold':      30,
        'ticks':     30,
        'requires':  [],
        'buildings': {Building.TOWN_CENTER: 1},
        'desc':      'Each house holds 2 more people',
    },
    Tech.SANITATION: {
        'branch':    'civil',
        'name':      'Sanitation',
        'rp':        120,
        'gold':      80,
        'ticks':     50,
        'requires':  [Tech.URBAN_PLANNING],
        'buildings': {},
        'desc':      '+0.1 happiness per tick, +5% growth chance',
    },
    Tech.FEUDAL_CODE: {
        'branch':    'civil',
        'name':      'Feudal Code',
        'rp':        250,
        'gold':      150,
        'ticks':     120,
        'requires':  [],
        'buildings': {Building.TOWN_CENTER: 2},
        'desc':      'Tax income +10%',
    },
}

BASE_RESEARCH_RATE    = 1.0
CATHEDRAL_RESEARCH    = 0.5
TOWN_CENTER_RESEARCH  = 0.1
RUSH_COST_GOLD        = 100
RUSH_PROGRESS         = 15


def tech_name(tech: Tech) -> str:
    return TECH_TREE[tech]['name']


def research_rate(state: WorldState) -> float:
    """Research points accrued per tick."""
    return (BASE_RESEARCH_RATE
            + CATHEDRAL_RESEARCH   * state.level(Building.CATHEDRAL)
            + TOWN_CENTER_RESEARCH * state.level(Building.TOWN_CENTER))


def requirements_met(state: WorldState, tech: Tech) -> bool:
    """Prerequisite techs unlocked and building levels reached (costs ignored)."""
    spec = TECH_TREE[tech]
    if not all(state.has_tech(req) for req in spec['requires']):
        return False
    return all(state.level(b) >= lvl for b, lvl in spec['buildings'].items())


def researchable(state: WorldState) -> list[Tech]:
    """Techs not yet unlocked whose prerequisites are satisfied."""
    return [t for t in TECH_TREE if t not in state.unlocked and requirements_met(state, t)]


# ══════════════════════════════════════════════════════════════════════════
# Per-tick layer
# ══════════════════════════════════════════════════════════════════════════

def research_tick(state: WorldState, t: int, events: list[Event]) -> None:
    state.research_points += research_rate(state)

    active = state.research
    if active is None or active.paused:
        return
    active.progress += 1
    if active.progress >= TECH_TREE[active.tech]['ticks']:
        state.unlocked.add(active.tech)
        state.research = None
        events.append(Event(EventKind.RESEARCH_COMPLETED, t, {'tech': active.tech.value}))


# ══════════════════════════════════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════════════════════════════════

def start_research(state: WorldState, tech: Tech) -> list[Event]:
    if state.research is not None:
        raise CommandRejected(Rejection.RESEARCH_SLOT_OCCUPIED,
                              f"already researching {tech_name(state.research.tech)}")
    if tech in state.unlocked:
        raise CommandRejected(Rejection.INVALID_TARGET, f"{tech_name(tech)} is already known")
    if not requirements_met(state, tech):
        raise CommandRejected(Rejection.UNMET_TECHNOLOGY_REQUIREMENT,
                              f"prerequisites for {tech_name(tech)} are missing")

    spec = TECH_TREE[tech]
    if state.research_points < spec['rp']:
        raise CommandRejected(Rejection.UNMET_TECHNOLOGY_REQUIREMENT,
                              f"need {spec['rp']} research points")
    if state.stock(Resource.GOLD) < spec['gold']:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"need {spec['gold']} gold")

    state.research_points          -= spec['rp']
    state.resources[Resource.GOLD] -= spec['gold']
    state.research = ActiveResearch(tech)
    return [Event(EventKind.RESEARCH_STARTED, state.tick, {'tech': tech.value})]


def _active(state: WorldState) -> ActiveResearch:
    if state.research is None:
        raise CommandRejected(Rejection.INVALID_TARGET, 'no research in progress')
    return state.research


def accelerate_research(state: WorldState) -> list[Event]:
    """Pay gold to push the active research forward."""
    active = _active(state)
    if state.stock(Resource.GOLD) < RUSH_COST_GOLD:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"need {RUSH_COST_GOLD} gold")
    state.resources[Resource.GOLD] -= RUSH_COST_GOLD
    duration = TECH_TREE[active.tech]['ticks']
    active.progress = min(duration, active.progress + RUSH_PROGRESS)
    return [Event(EventKind.RESEARCH_RUSHED, state.tick,
                  {'tech': active.tech.value, 'progress': active.progress})]


def cancel_research(state: WorldState) -> list[Event]:
    """Abandon the active research.  Nothing is refunded."""
    active = _active(state)
    state.research = None
    return [Event(EventKind.RESEARCH_CANCELLED, state.tick, {'tech': active.tech.value})]


def pause_research(state: WorldState) -> list[Event]:
    active = _active(state)
    active.paused = not active.paused
    kind = EventKind.RESEARCH_PAUSED if active.paused else EventKind.RESEARCH_RESUMED
    return [Event(kind, state.tick, {'tech': active.tech.value})]
