# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
events.py — Structured notifications emitted by the engine.

The engine never formats human-readable text; chronicle.py turns these into
log lines.  ``detail`` carries the identifiers a formatter needs.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class EventKind(enum.Enum):
    RESEARCH_STARTED    = 'research_started'
    RESEARCH_COMPLETED  = 'research_completed'
    RESEARCH_CANCELLED  = 'research_cancelled'
    RESEARCH_PAUSED     = 'research_paused'
    RESEARCH_RESUMED    = 'research_resumed'
    RESEARCH_RUSHED     = 'research_rushed'
    BUILDING_CONSTRUCTED = 'building_constructed'
    UNIT_RECRUITED      = 'unit_recruited'
    UNIT_DISMISSED      = 'unit_dismissed'
    UPGRADE_FORGED      = 'upgrade_forged'
    STANCE_CHANGED      = 'stance_changed'
    TAX_CHANGED         = 'tax_changed'
    POLICY_TOGGLED      = 'policy_toggled'
    MARKET_TRADE        = 'market_trade'
    PRICES_UPDATED      = 'prices_updated'
    ROUTE_OPENED        = 'route_opened'
    ROUTE_CLOSED        = 'route_closed'
    ROUTE_CONFIGURED    = 'route_configured'
    GIFT_SENT           = 'gift_sent'
    INSULT_SENT         = 'insult_sent'
    WAR_DECLARED        = 'war_declared'
    RELATION_CHANGED    = 'relation_changed'
    SCOUT_SUCCEEDED     = 'scout_succeeded'
    SCOUT_FAILED        = 'scout_failed'
    ARMY_DISPATCHED     = 'army_dispatched'
    BATTLE_WON          = 'battle_won'
    BATTLE_LOST         = 'battle_lost'
    POPULATION_GREW     = 'population_grew'
    POPULATION_DECLINED = 'population_declined'
    STARVATION          = 'starvation'


@dataclass
class Event:
    kind:   EventKind
    tick:   int
    detail: dict = field(default_factory=dict)
