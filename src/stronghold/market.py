# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
market.py — Layer 2: scarcity-driven pricing and manual market trades.

Call order each tick (after research_tick, only when t % MARKET_PERIOD == 0):
    price_tick(state, t, events)

Commands:
    buy(state, res, amount)     -> list[Event]
    sell(state, res, amount)    -> list[Event]

Every recompute overwrites whatever manual trading did to a price since the
last period.
"""

from __future__ import annotations

from .errors import CommandRejected, Rejection
from .events import Event, EventKind
from .world  import (
    GOODS, Building, Resource, Trend, WorldState, clamp, max_storage,
)

# ── Price tables ───────────────────────────────────────────────────────────
BASE_PRICES: dict[Resource, float] = {
    Resource.RAW_WOOD:    2,
    Resource.RAW_STONE:   3,
    Resource.IRON_ORE:    5,
    Resource.WHEAT:       2,
    Resource.PLANKS:      5,
    Resource.BLOCKS:      6,
    Resource.IRON_INGOTS: 15,
    Resource.BREAD:       4,
}

BUY_MARKUP   = 1.3
SELL_MARKDN  = 0.7
SCARCITY_MIN = 0.5
SCARCITY_MAX = 2.5
SCARCITY_K   = 200      # scarcity = K / (stock + SCARCITY_PAD)
SCARCITY_PAD = 50

# Manual trades nudge prices until the next recompute
BUY_PUSH_BUY   = 0.05
BUY_PUSH_SELL  = 0.03
SELL_PUSH_BUY  = 0.05
SELL_PUSH_SELL = 0.03
SELL_FLOOR     = 0.1


def scarcity(stock: float) -> float:
    """Multiplier >1 when a good is short, <1 when plentiful."""
    return clamp(SCARCITY_K / (max(0.0, stock) + SCARCITY_PAD), SCARCITY_MIN, SCARCITY_MAX)


# ══════════════════════════════════════════════════════════════════════════
# Periodic recompute
# ══════════════════════════════════════════════════════════════════════════

def price_tick(state: WorldState, t: int, events: list[Event]) -> None:
    rng = state.rng
    for res in GOODS:
        quote     = state.prices[res]
        variance  = 0.9 + rng.random() * 0.2
        reference = quote.base * scarcity(state.stock(res)) * variance
        new_buy   = round(reference * BUY_MARKUP, 2)
        new_sell  = round(reference * SELL_MARKDN, 2)

        if new_buy > quote.buy:
            quote.trend = Trend.UP
        elif new_buy < quote.buy:
            quote.trend = Trend.DOWN
        else:
            quote.trend = Trend.STABLE
        quote.buy  = new_buy
        quote.sell = new_sell

    events.append(Event(EventKind.PRICES_UPDATED, t, {
        'rising':  [r.value for r in GOODS if state.prices[r].trend is Trend.UP],
        'falling': [r.value for r in GOODS if state.prices[r].trend is Trend.DOWN],
    }))


# ══════════════════════════════════════════════════════════════════════════
# Manual trades
# ══════════════════════════════════════════════════════════════════════════

def _check_tradeable(state: WorldState, res: Resource, amount: float) -> None:
    if res not in GOODS:
        raise ValueError(f"{res!r} cannot be traded on the market")
    if amount <= 0:
        raise ValueError(f"trade amount must be positive, got {amount}")
    if state.level(Building.MARKET) < 1:
        raise CommandRejected(Rejection.MISSING_PREREQUISITE_BUILDING, 'a market is required')


def buy(state: WorldState, res: Resource, amount: float) -> list[Event]:
    _check_tradeable(state, res, amount)
    quote = state.prices[res]
    cost  = quote.buy * amount
    if state.stock(Resource.GOLD) < cost:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES,
                              f"need {cost:.2f} gold for {amount} {res.value}")
    if state.stock(res) + amount > max_storage(state):
        raise CommandRejected(Rejection.STORAGE_FULL, f"no room for {amount} {res.value}")

    state.resources[Resource.GOLD] -= cost
    state.resources[res]           += amount
    quote.buy  = round(quote.buy + BUY_PUSH_BUY, 2)
    quote.sell = round(quote.sell + BUY_PUSH_SELL, 2)
    return [Event(EventKind.MARKET_TRADE, state.tick, {
        'side': 'buy', 'resource': res.value, 'amount': amount, 'gold': round(cost, 2),
    })]


def sell(state: WorldState, res: Resource, amount: float) -> list[Event]:
    _check_tradeable(state, res, amount)
    if state.stock(res) < amount:
        raise CommandRejected(Rejection.INSUFFICIENT_RESOURCES,
                              f"only {state.stock(res):.0f} {res.value} in stock")
    quote  = state.prices[res]
    income = quote.sell * amount

    state.resources[res]           -= amount
    state.resources[Resource.GOLD] += income
    quote.sell = round(max(SELL_FLOOR, quote.sell - SELL_PUSH_SELL), 2)
    quote.buy  = round(max(quote.sell + 0.01, quote.buy - SELL_PUSH_BUY), 2)
    return [Event(EventKind.MARKET_TRADE, state.tick, {
        'side': 'sell', 'resource': res.value, 'amount': amount, 'gold': round(income, 2),
    })]
