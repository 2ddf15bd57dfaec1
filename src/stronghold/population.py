# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
population.py — Layers 3 & 5: happiness drift, stochastic growth and decline.

Call order each tick:
    happiness_tick(state, t, events)     before production_tick
    population_tick(state, t, events)    after production_tick

Commands:
    set_tax(state, level)
    toggle_policy(state, policy)

Happiness reads the bread ledger *before* this tick's production, so a realm
that ran dry last tick is punished even if the windmills refill it now.
Growth and the two decline checks draw independently; all three may fire in
the same tick.
"""

from __future__ import annotations

from .events import Event, EventKind
from .world  import (
    POPULATION_FLOOR, Building, Policy, Resource, TaxLevel, Tech, WorldState,
    clamp, max_population,
)


# ══════════════════════════════════════════════════════════════════════════
# Tables
# ══════════════════════════════════════════════════════════════════════════

TAX_RATES: dict[TaxLevel, dict] = {
    TaxLevel.NONE:      {'gold_per_pop': 0.0, 'happiness':  2.0},
    TaxLevel.LOW:       {'gold_per_pop': 0.2, 'happiness':  0.5},
    TaxLevel.NORMAL:    {'gold_per_pop': 0.5, 'happiness': -0.5},
    TaxLevel.HIGH:      {'gold_per_pop': 1.2, 'happiness': -2.0},
    TaxLevel.EXTORTION: {'gold_per_pop': 2.5, 'happiness': -5.0},
}

# Only the happiness column is read here; the other effects live with the
# layer they modify (economy for rationing/labour/festivals, combat for drill).
POLICIES: dict[Policy, dict] = {
    Policy.RATIONING:         {'happiness': -3.0, 'desc': 'Bread consumption halved'},
    Policy.FORCED_LABOR:      {'happiness': -5.0, 'desc': 'Production x1.2'},
    Policy.FESTIVALS:         {'happiness':  3.0, 'desc': 'Costs 1 gold per 60 people each tick'},
    Policy.MILITARY_TRAINING: {'happiness':  0.0, 'desc': 'Unit strength x1.1, army gold upkeep x1.5'},
}

HAPPINESS_MIN        = 0
HAPPINESS_MAX        = 100
HAPPINESS_NEUTRAL    = 50
HAPPINESS_DRIFT      = 0.5
SANITATION_HAPPINESS = 0.1
OVERCROWDING_PENALTY = -5.0
STARVATION_PENALTY   = -10.0

GROWTH_RATE          = 0.1
CATHEDRAL_GROWTH     = 0.02
SANITATION_GROWTH    = 0.05
CONTENT_THRESHOLD    = 80     # above: +CONTENT_GROWTH
CONTENT_GROWTH       = 0.05
UNREST_THRESHOLD     = 30     # below: UNREST_GROWTH
UNREST_GROWTH        = -0.15
GROWTH_MIN_BREAD     = 10
EXODUS_THRESHOLD     = 20     # below: chance to lose a citizen
EXODUS_CHANCE        = 0.2
FAMINE_CHANCE        = 0.1


def happiness_delta(state: WorldState) -> float:
    """Sum of every happiness modifier in force this tick (before drift)."""
    change = TAX_RATES[state.tax_level]['happiness']
    for policy in state.policies:
        change += POLICIES[policy]['happiness']
    if state.has_tech(Tech.SANITATION):
        change += SANITATION_HAPPINESS
    if state.population > max_population(state):
        change += OVERCROWDING_PENALTY
    if state.stock(Resource.BREAD) <= 0:
        change += STARVATION_PENALTY
    return change


def growth_chance(state: WorldState) -> float:
    bonus = state.level(Building.CATHEDRAL) * CATHEDRAL_GROWTH
    if state.has_tech(Tech.SANITATION):
        bonus += SANITATION_GROWTH
    if state.happiness > CONTENT_THRESHOLD:
        mood = CONTENT_GROWTH
    elif state.happiness < UNREST_THRESHOLD:
        mood = UNREST_GROWTH
    else:
        mood = 0.0
    return max(0.0, GROWTH_RATE + bonus + mood)


# ══════════════════════════════════════════════════════════════════════════
# Per-tick layers
# ══════════════════════════════════════════════════════════════════════════

def happiness_tick(state: WorldState, t: int, events: list[Event]) -> None:
    change = happiness_delta(state)
    if change == 0:
        if state.happiness > HAPPINESS_NEUTRAL:
            change = -HAPPINESS_DRIFT
        elif state.happiness < HAPPINESS_NEUTRAL:
            change = HAPPINESS_DRIFT
    state.happiness = clamp(state.happiness + change, HAPPINESS_MIN, HAPPINESS_MAX)


def population_tick(state: WorldState, t: int, events: list[Event]) -> None:
    rng = state.rng
    cap = max_population(state)

    # ── Growth ────────────────────────────────────────────────────────────
    if state.stock(Resource.BREAD) > GROWTH_MIN_BREAD and state.population < cap:
        if rng.random() < growth_chance(state):
            state.population = min(cap, state.population + 1)
            events.append(Event(EventKind.POPULATION_GREW, t, {'population': state.population}))

    # ── Decline: unrest ───────────────────────────────────────────────────
    if state.happiness < EXODUS_THRESHOLD and state.population > POPULATION_FLOOR:
        if rng.random() < EXODUS_CHANCE:
            state.population = max(POPULATION_FLOOR, state.population - 1)
            events.append(Event(EventKind.POPULATION_DECLINED, t,
                                {'population': state.population, 'cause': 'unrest'}))

    # ── Decline: famine ───────────────────────────────────────────────────
    if state.stock(Resource.BREAD) <= 0 and state.population > POPULATION_FLOOR:
        if rng.random() < FAMINE_CHANCE:
            state.population = max(POPULATION_FLOOR, state.population - 1)
            events.append(Event(EventKind.POPULATION_DECLINED, t,
                                {'population': state.population, 'cause': 'famine'}))


# ══════════════════════════════════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════════════════════════════════

def set_tax(state: WorldState, level: TaxLevel) -> list[Event]:
    previous = state.tax_level
    state.tax_level = level
    return [Event(EventKind.TAX_CHANGED, state.tick, {'from': previous.value, 'to': level.value})]


def toggle_policy(state: WorldState, policy: Policy) -> list[Event]:
    if policy in state.policies:
        state.policies.discard(policy)
        active = False
    else:
        state.policies.add(policy)
        active = True
    return [Event(EventKind.POLICY_TOGGLED, state.tick, {'policy': policy.value, 'active': active})]
