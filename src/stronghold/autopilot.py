# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
autopilot.py — A scripted governor for headless runs.

Each call to plan() inspects the realm and proposes at most a handful of
commands.  It goes through the same commands.execute() gate as a player,
so everything it tries is validated and anything unaffordable is simply
rejected.

Priorities, highest first:
    1. keep the people fed      (farm → windmill, rationing when bread runs low)
    2. house the growing realm  (houses when crowded)
    3. research                 (highest-scoring available tech)
    4. grow industry            (sawmill, quarry, masonry, market, warehouse)
"""

from __future__ import annotations

from .commands  import (
    Command, Construct, StartResearch, TogglePolicy,
)
from .          import economy, technology
from .world     import (
    Building, Policy, Resource, Tech, WorldState, can_afford, max_population, max_storage,
)

# Branch preference: food first, then civil capacity, then the rest
_BRANCH_WEIGHT = {'economy': 3, 'civil': 2, 'military': 1}

_BUILD_ORDER = [
    Building.SAWMILL, Building.QUARRY, Building.MASONRY, Building.WINDMILL,
    Building.MARKET, Building.IRON_MINE, Building.FOUNDRY, Building.WAREHOUSE,
]

LOW_BREAD    = 100
PLENTY_BREAD = 250


def choose_next_tech(state: WorldState) -> Tech | None:
    """Pick the best affordable tech to research next.

    Scoring:
      +branch weight  economy > civil > military
      +2              if the tech feeds people (crop rotation, heavy plough)
    Ties go to the cheaper tech.
    """
    affordable = [t for t in technology.researchable(state) if _can_afford_tech(state, t)]
    if not affordable:
        return None

    def score(tech: Tech) -> tuple[int, int]:
        info  = technology.TECH_TREE[tech]
        value = _BRANCH_WEIGHT[info['branch']]
        if tech in (Tech.CROP_ROTATION, Tech.HEAVY_PLOUGH):
            value += 2
        return value, -info['rp']

    return max(affordable, key=score)


def _can_afford_tech(state: WorldState, tech: Tech) -> bool:
    info = technology.TECH_TREE[tech]
    return state.research_points >= info['rp'] and state.stock(Resource.GOLD) >= info['gold']


def _affordable(state: WorldState, building: Building) -> bool:
    return can_afford(state, economy.building_cost(state, building))


def plan(state: WorldState) -> list[Command]:
    out: list[Command] = []
    bread = state.stock(Resource.BREAD)

    # ── 1. Food ───────────────────────────────────────────────────────────
    rationing = state.has_policy(Policy.RATIONING)
    if bread < LOW_BREAD and not rationing:
        out.append(TogglePolicy(Policy.RATIONING))
    elif bread > PLENTY_BREAD and rationing:
        out.append(TogglePolicy(Policy.RATIONING))
    if state.level(Building.WINDMILL) < state.level(Building.FARM) and _affordable(state, Building.WINDMILL):
        out.append(Construct(Building.WINDMILL))
    elif bread < LOW_BREAD and _affordable(state, Building.FARM):
        out.append(Construct(Building.FARM))

    # ── 2. Housing ────────────────────────────────────────────────────────
    if state.population >= max_population(state) - 1 and _affordable(state, Building.HOUSE):
        out.append(Construct(Building.HOUSE))

    # ── 3. Research ───────────────────────────────────────────────────────
    if state.research is None:
        tech = choose_next_tech(state)
        if tech is not None:
            out.append(StartResearch(tech))

    # ── 4. Industry ───────────────────────────────────────────────────────
    full = any(state.stock(r) >= max_storage(state) for r in (Resource.RAW_WOOD, Resource.WHEAT))
    if full and _affordable(state, Building.WAREHOUSE):
        out.append(Construct(Building.WAREHOUSE))
    else:
        for building in _BUILD_ORDER:
            if state.level(building) == 0 and _affordable(state, building):
                out.append(Construct(building))
                break
    return out
