# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
economy.py — Layer 4: extraction, factory chains, income, upkeep, construction.

Call order each tick (after happiness_tick, before population_tick):
    production_tick(state, t, events)   -> dict[Resource, float]  net change this tick

Commands:
    construct(state, building)

Stage order inside production_tick
──────────────────────────────────
  1. extraction   lumber hut · quarry · iron mine · farm
  2. factories    sawmill · masonry · foundry · windmill (whole batches only)
  3. trade routes diplomacy.trade_route_tick
  4. gold income  town centre · markets · taxes
  5. bread upkeep population (halved under rationing)
  6. festivals    gold per head
  7. army upkeep  gold and bread per unit
  8. floors       gold and bread ≥ 0, goods ≤ storage cap
"""

from __future__ import annotations

import math
from collections import defaultdict

from .          import combat, diplomacy, population
from .errors    import CommandRejected, Rejection
from .events    import Event, EventKind
from .world     import (
    GOODS, STARTING_BUILDINGS, Building, Policy, Resource, Tech, WorldState,
    can_afford, max_storage, pay,
)


# ══════════════════════════════════════════════════════════════════════════
# Production tables (per building level, per tick)
# ══════════════════════════════════════════════════════════════════════════

EXTRACTION: dict[Building, tuple[Resource, float]] = {
    Building.LUMBER_HUT: (Resource.RAW_WOOD,  12),
    Building.QUARRY:     (Resource.RAW_STONE, 10),
    Building.IRON_MINE:  (Resource.IRON_ORE,   8),
    Building.FARM:       (Resource.WHEAT,     15),
}

# building → (input, amount in, output, amount out)
FACTORIES: dict[Building, tuple[Resource, float, Resource, float]] = {
    Building.SAWMILL:  (Resource.RAW_WOOD,  12, Resource.PLANKS,      10),
    Building.MASONRY:  (Resource.RAW_STONE, 10, Resource.BLOCKS,       8),
    Building.FOUNDRY:  (Resource.IRON_ORE,   8, Resource.IRON_INGOTS,  5),
    Building.WINDMILL: (Resource.WHEAT,     10, Resource.BREAD,       10),
}

TOWN_CENTER_GOLD   = 10
MARKET_GOLD        = 15
GUILD_BONUS        = 2       # trade_guilds: per market level and per route
FORCED_LABOR_MULT  = 1.2
BREAD_PER_HEAD     = 0.5
RATIONING_FACTOR   = 0.5
FEUDAL_TAX_MULT    = 1.1
STANDING_ARMY_MULT = 0.9
TRAINING_UPKEEP    = 1.5
MINUTE             = 60      # per-minute rates are divided over 60 ticks

# ── Construction costs for the first level ────────────────────────────────
COST_SCALING = 1.25

BUILDING_COSTS: dict[Building, dict[Resource, int]] = {
    Building.LUMBER_HUT:  {Resource.GOLD: 10},
    Building.FARM:        {Resource.GOLD: 10},
    Building.QUARRY:      {Resource.GOLD: 10},
    Building.IRON_MINE:   {Resource.PLANKS: 50,  Resource.GOLD: 100},
    Building.SAWMILL:     {Resource.GOLD: 100},
    Building.MASONRY:     {Resource.PLANKS: 50,  Resource.GOLD: 100},
    Building.WINDMILL:    {Resource.PLANKS: 30,  Resource.BLOCKS: 10, Resource.GOLD: 50},
    Building.FOUNDRY:     {Resource.PLANKS: 200, Resource.BLOCKS: 100, Resource.GOLD: 300},
    Building.HOUSE:       {Resource.PLANKS: 20,  Resource.GOLD: 10},
    Building.WAREHOUSE:   {Resource.PLANKS: 100, Resource.GOLD: 50},
    Building.MARKET:      {Resource.PLANKS: 100, Resource.GOLD: 100},
    Building.TOWN_CENTER: {Resource.PLANKS: 500, Resource.BLOCKS: 500,
                           Resource.IRON_INGOTS: 200, Resource.GOLD: 1000},
    Building.CATHEDRAL:   {Resource.PLANKS: 400, Resource.BLOCKS: 800,
                           Resource.IRON_INGOTS: 100, Resource.GOLD: 1000},
    Building.WALL:        {Resource.PLANKS: 50,  Resource.BLOCKS: 200,
                           Resource.IRON_INGOTS: 10, Resource.GOLD: 50},
    Building.BARRACKS:    {Resource.PLANKS: 200, Resource.BLOCKS: 50, Resource.GOLD: 150},
    Building.STABLE:      {Resource.PLANKS: 400, Resource.BLOCKS: 100,
                           Resource.IRON_INGOTS: 50, Resource.GOLD: 300},
    Building.BLACKSMITH:  {Resource.PLANKS: 300, Resource.BLOCKS: 300,
                           Resource.IRON_INGOTS: 50, Resource.GOLD: 300},
}


def building_cost(state: WorldState, building: Building) -> dict[Resource, int]:
    """Cost of the next level.  Levels the realm was granted at founding are free of scaling."""
    granted = 1 if STARTING_BUILDINGS.get(building, 0) > 0 else 0
    steps   = max(0, state.level(building) - granted)
    factor  = COST_SCALING ** steps
    return {res: math.floor(amount * factor) for res, amount in BUILDING_COSTS[building].items()}


def production_multiplier(state: WorldState) -> float:
    return FORCED_LABOR_MULT if state.has_policy(Policy.FORCED_LABOR) else 1.0


def _extraction_bonus(state: WorldState, building: Building) -> float:
    if building is Building.FARM:
        return ((0.2 if state.has_tech(Tech.CROP_ROTATION) else 0.0)
                + (0.3 if state.has_tech(Tech.HEAVY_PLOUGH) else 0.0))
    if building in (Building.QUARRY, Building.IRON_MINE):
        return 0.2 if state.has_tech(Tech.DEEP_MINING) else 0.0
    return 0.0


def _factory_bonus(state: WorldState, building: Building) -> float:
    if building is Building.WINDMILL and state.has_tech(Tech.HEAVY_PLOUGH):
        return 0.3
    return 0.0


def guild_bonus(state: WorldState) -> int:
    return GUILD_BONUS if state.has_tech(Tech.TRADE_GUILDS) else 0


def gold_income(state: WorldState) -> float:
    """Town centre, market and tax gold for one tick."""
    tax = population.TAX_RATES[state.tax_level]['gold_per_pop']
    efficiency = FEUDAL_TAX_MULT if state.has_tech(Tech.FEUDAL_CODE) else 1.0
    return (state.level(Building.TOWN_CENTER) * TOWN_CENTER_GOLD
            + state.level(Building.MARKET) * (MARKET_GOLD + guild_bonus(state))
            + state.population * tax / MINUTE * efficiency)


def bread_consumption(state: WorldState) -> float:
    eaten = state.population * BREAD_PER_HEAD
    if state.has_policy(Policy.RATIONING):
        eaten *= RATIONING_FACTOR
    return eaten


def army_upkeep(state: WorldState) -> tuple[float, float]:
    """(gold, bread) the standing army costs this tick."""
    mult = TRAINING_UPKEEP if state.has_policy(Policy.MILITARY_TRAINING) else 1.0
    if state.has_tech(Tech.STANDING_ARMY):
        mult *= STANDING_ARMY_MULT
    gold  = sum(n * combat.UNIT_STATS[u]['upkeep_gold']  for u, n in state.troops.items())
    bread = sum(n * combat.UNIT_STATS[u]['upkeep_bread'] for u, n in state.troops.items())
    return gold / MINUTE * mult, bread / MINUTE


# ══════════════════════════════════════════════════════════════════════════
# Per-tick layer
# ══════════════════════════════════════════════════════════════════════════

def production_tick(state: WorldState, t: int, events: list[Event]) -> dict[Resource, float]:
    res   = state.resources
    cap   = max_storage(state)
    prod  = production_multiplier(state)
    delta: dict[Resource, float] = defaultdict(float)

    # ── 1. Extraction ─────────────────────────────────────────────────────
    for building, (out, rate) in EXTRACTION.items():
        level = state.level(building)
        if level <= 0 or res[out] >= cap:
            continue
        gained = min(rate * level * (prod + _extraction_bonus(state, building)), cap - res[out])
        res[out]   += gained
        delta[out] += gained

    # ── 2. Factories: all-or-nothing batches ──────────────────────────────
    for building, (inp, rate_in, out, rate_out) in FACTORIES.items():
        level = state.level(building)
        if level <= 0:
            continue
        need = rate_in * level * prod
        if res[inp] < need or res[out] >= cap:
            continue
        made = min(rate_out * level * (prod + _factory_bonus(state, building)), cap - res[out])
        res[inp]   -= need
        res[out]   += made
        delta[inp] -= need
        delta[out] += made

    # ── 3. Trade routes ───────────────────────────────────────────────────
    diplomacy.trade_route_tick(state, delta)

    # ── 4. Gold income ────────────────────────────────────────────────────
    income = gold_income(state)
    res[Resource.GOLD]   += income
    delta[Resource.GOLD] += income

    # ── 5. Bread upkeep ───────────────────────────────────────────────────
    eaten = bread_consumption(state)
    res[Resource.BREAD]   -= eaten
    delta[Resource.BREAD] -= eaten

    # ── 6. Festivals ──────────────────────────────────────────────────────
    if state.has_policy(Policy.FESTIVALS):
        cost = state.population / MINUTE
        res[Resource.GOLD]   -= cost
        delta[Resource.GOLD] -= cost

    # ── 7. Army upkeep ────────────────────────────────────────────────────
    gold_up, bread_up = army_upkeep(state)
    res[Resource.GOLD]    -= gold_up
    res[Resource.BREAD]   -= bread_up
    delta[Resource.GOLD]  -= gold_up
    delta[Resource.BREAD] -= bread_up

    # ── 8. Floors and caps ────────────────────────────────────────────────
    if res[Resource.BREAD] <= 0:
        if res[Resource.BREAD] < 0:
            events.append(Event(EventKind.STARVATION, t, {'shortfall': -res[Resource.BREAD]}))
        res[Resource.BREAD] = 0.0
    res[Resource.GOLD] = max(0.0, res[Resource.GOLD])
    for good in GOODS:
        res[good] = min(max(0.0, res[good]), cap)

    return dict(delta)


# ══════════════════════════════════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════════════════════════════════

def construct(state: WorldState, building: Building) -> list[Event]:
    cost = building_cost(state, building)
    if not can_afford(state, cost):
        missing = [r.value for r, a in cost.items() if state.stock(r) < a]
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"short of {', '.join(missing)}")
    pay(state, cost)
    state.buildings[building] = state.level(building) + 1
    return [Event(EventKind.BUILDING_CONSTRUCTED, state.tick, {
        'building': building.value, 'level': state.buildings[building],
    })]
