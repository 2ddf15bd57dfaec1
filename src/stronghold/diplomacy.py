# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
diplomacy.py — Layer 6: relationship drift, status classifier, trade routes, espionage.

Call order each tick:
    trade_route_tick(state, delta)      from economy.production_tick (stage 3)
    relation_tick(state, t, events)     last layer, only when t % DIPLOMACY_PERIOD == 0

Commands:
    toggle_route(state, neighbor_id)
    configure_route(state, neighbor_id, direction, resource)
    send_gift(state, neighbor_id)
    send_insult(state, neighbor_id)
    declare_war(state, neighbor_id)
    scout(state, neighbor_id)

Status thresholds (periodic classifier)
───────────────────────────────────────
  score ≥  80  → ally
  score ≥  30  → friendly
  score ≤ −50  → hostile
  otherwise    → neutral
  war / vassal → never reclassified
"""

from __future__ import annotations

from .errors import CommandRejected, Rejection
from .events import Event, EventKind
from .market import BASE_PRICES
from .world  import (
    ABSORBING, GOODS, Neighbor, Relation, Resource, Tech, TradeConfig, WorldState,
    clamp, free_storage,
)

# ── Relationship constants ────────────────────────────────────────────────
ALLY_THRESHOLD     = 80
FRIENDLY_THRESHOLD = 30
HOSTILE_THRESHOLD  = -50
SCORE_MIN, SCORE_MAX = -100, 100
SCORE_DECAY        = 0.5
POWER_GROWTH       = 1
WAR_POWER_GROWTH   = 5

# ── Action costs ──────────────────────────────────────────────────────────
TRADE_ROUTE_COST   = 200
GIFT_COST          = 150
GIFT_BOOST         = 15
INSULT_PENALTY     = 30
SPY_COST           = 100
SPY_FAILURE_CHANCE = 0.2
SPY_FAILURE_PENALTY = 20
MAX_INTEL          = 2

# ── Route flows (per tick) ────────────────────────────────────────────────
ROUTE_TOLL         = 1
ROUTE_GUILD_BONUS  = 2
IMPORT_MARKUP      = 1.5
EXPORT_DISCOUNT    = 0.8


def classify(score: float) -> Relation:
    if score >= ALLY_THRESHOLD:
        return Relation.ALLY
    if score >= FRIENDLY_THRESHOLD:
        return Relation.FRIENDLY
    if score <= HOSTILE_THRESHOLD:
        return Relation.HOSTILE
    return Relation.NEUTRAL


def _decay(score: float) -> float:
    if score > 0:
        return max(0.0, score - SCORE_DECAY)
    if score < 0:
        return min(0.0, score + SCORE_DECAY)
    return score


def _target(state: WorldState, neighbor_id: str) -> Neighbor:
    n = state.neighbor(neighbor_id)
    if n is None:
        raise CommandRejected(Rejection.INVALID_TARGET, f"no neighbour {neighbor_id!r}")
    return n


# ══════════════════════════════════════════════════════════════════════════
# Per-tick layers
# ══════════════════════════════════════════════════════════════════════════

def relation_tick(state: WorldState, t: int, events: list[Event]) -> None:
    for n in state.neighbors:
        if n.relation is Relation.VASSAL:
            continue
        at_war = n.relation is Relation.WAR
        n.military_power += WAR_POWER_GROWTH if at_war else POWER_GROWTH
        if at_war:
            continue
        n.relation_score = _decay(n.relation_score)
        new_status = classify(n.relation_score)
        if new_status is not n.relation:
            events.append(Event(EventKind.RELATION_CHANGED, t, {
                'neighbor': n.id, 'name': n.name,
                'from': n.relation.value, 'to': new_status.value,
            }))
            n.relation = new_status


def trade_route_tick(state: WorldState, delta: dict[Resource, float]) -> None:
    """Tolls plus one unit of import and export per active route.

    Both legs are best-effort: a leg that cannot be afforded or stored is
    skipped for this tick without affecting the other.
    """
    res  = state.resources
    toll = ROUTE_TOLL + (ROUTE_GUILD_BONUS if state.has_tech(Tech.TRADE_GUILDS) else 0)
    tolls = 0.0

    for n in state.neighbors:
        if not n.route_active or n.relation is Relation.WAR:
            continue
        tolls += toll

        imp = n.route.import_res
        if imp is not None:
            cost = BASE_PRICES[imp] * IMPORT_MARKUP
            if res[Resource.GOLD] >= cost and free_storage(state, imp) >= 1:
                res[Resource.GOLD]   -= cost
                res[imp]             += 1
                delta[Resource.GOLD] -= cost
                delta[imp]           += 1

        exp = n.route.export_res
        if exp is not None and res[exp] >= 1:
            price = BASE_PRICES[exp] * EXPORT_DISCOUNT
            res[exp]             -= 1
            res[Resource.GOLD]   += price
            delta[exp]           -= 1
            delta[Resource.GOLD] += price

    res[Resource.GOLD]   += tolls
    delta[Resource.GOLD] += tolls


# ══════════════════════════════════════════════════════════════════════════
# Trade-route commands
# ══════════════════════════════════════════════════════════════════════════

def toggle_route(state: WorldState, neighbor_id: str) -> list[Event]:
    """Open a route for TRADE_ROUTE_COST gold, or close it for free."""
    n = _target(state, neighbor_id)
    if n.route_active:
        n.route_active = False
        n.route = TradeConfig()
        return [Event(EventKind.ROUTE_CLOSED, state.tick, {'neighbor': n.id, 'name': n.name})]

    if n.relation is Relation.WAR:
        raise CommandRejected(Rejection.ROUTE_BLOCKED, f"at war with {n.name}")
    if state.stock(Resource.GOLD) < TRADE_ROUTE_COST:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"need {TRADE_ROUTE_COST} gold")
    state.resources[Resource.GOLD] -= TRADE_ROUTE_COST
    n.route_active = True
    return [Event(EventKind.ROUTE_OPENED, state.tick, {'neighbor': n.id, 'name': n.name})]


def configure_route(state: WorldState, neighbor_id: str, direction: str,
                    resource: Resource | None) -> list[Event]:
    """Set (or clear, with resource=None) the import or export leg of a route."""
    if direction not in ('import', 'export'):
        raise ValueError(f"direction must be 'import' or 'export', got {direction!r}")
    if resource is not None and resource not in GOODS:
        raise ValueError(f"{resource!r} cannot be traded along a route")
    n = _target(state, neighbor_id)
    if n.relation is Relation.WAR:
        raise CommandRejected(Rejection.ROUTE_BLOCKED, f"at war with {n.name}")

    if direction == 'import':
        n.route.import_res = resource
    else:
        n.route.export_res = resource
    return [Event(EventKind.ROUTE_CONFIGURED, state.tick, {
        'neighbor': n.id, 'name': n.name, 'direction': direction,
        'resource': resource.value if resource else None,
    })]


# ══════════════════════════════════════════════════════════════════════════
# Diplomatic actions
# ══════════════════════════════════════════════════════════════════════════

def send_gift(state: WorldState, neighbor_id: str) -> list[Event]:
    n = _target(state, neighbor_id)
    if state.stock(Resource.GOLD) < GIFT_COST:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"need {GIFT_COST} gold")
    state.resources[Resource.GOLD] -= GIFT_COST
    n.relation_score = min(SCORE_MAX, n.relation_score + GIFT_BOOST)
    return [Event(EventKind.GIFT_SENT, state.tick,
                  {'neighbor': n.id, 'name': n.name, 'score': n.relation_score})]


def send_insult(state: WorldState, neighbor_id: str) -> list[Event]:
    n = _target(state, neighbor_id)
    n.relation_score = max(SCORE_MIN, n.relation_score - INSULT_PENALTY)
    return [Event(EventKind.INSULT_SENT, state.tick,
                  {'neighbor': n.id, 'name': n.name, 'score': n.relation_score})]


def enter_war(n: Neighbor) -> None:
    """Put a neighbour on a war footing: score bottoms out, any route closes."""
    n.relation       = Relation.WAR
    n.relation_score = SCORE_MIN
    n.route_active   = False
    n.route          = TradeConfig()


def declare_war(state: WorldState, neighbor_id: str) -> list[Event]:
    n = _target(state, neighbor_id)
    if n.relation in ABSORBING:
        raise CommandRejected(Rejection.INVALID_TARGET,
                              f"{n.name} is already {n.relation.value}")
    enter_war(n)
    return [Event(EventKind.WAR_DECLARED, state.tick, {'neighbor': n.id, 'name': n.name})]


def scout(state: WorldState, neighbor_id: str) -> list[Event]:
    """Send spies.  Caught spies sour relations; successful ones reveal true strength."""
    n = _target(state, neighbor_id)
    if state.stock(Resource.GOLD) < SPY_COST:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES, f"need {SPY_COST} gold")
    state.resources[Resource.GOLD] -= SPY_COST
    n.last_espionage_tick = state.tick

    if state.rng.random() < SPY_FAILURE_CHANCE:
        n.relation_score = clamp(n.relation_score - SPY_FAILURE_PENALTY, SCORE_MIN, SCORE_MAX)
        return [Event(EventKind.SCOUT_FAILED, state.tick,
                      {'neighbor': n.id, 'name': n.name, 'score': n.relation_score})]
    n.intel_level = MAX_INTEL
    return [Event(EventKind.SCOUT_SUCCEEDED, state.tick, {'neighbor': n.id, 'name': n.name})]
