# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
view.py — Read-only snapshot of the realm for renderers and the autopilot.

RealmView copies what it needs at construction time, so holding one across a
tick never observes half-applied state.  Neighbour strength is intel-gated:
without a full spy report the view shows an estimate instead of the truth.
"""

from __future__ import annotations

from .          import combat, economy, technology
from .world     import (
    GOODS, Neighbor, Relation, Resource, WorldState, max_population, max_storage,
)

HOSTILE_ESTIMATE  = 0.8     # observed strength of an unscouted hostile army
LOW_FOOD          = 100
UNREST            = 30

RISK_LABELS = ((75, 'Critical'), (40, 'High'), (20, 'Moderate'), (0, 'Low'))


def observed_power(n: Neighbor) -> float:
    """What our generals believe a neighbour can field."""
    return n.military_power if n.intel_level >= 2 else n.military_power * HOSTILE_ESTIMATE


def invasion_risk(state: WorldState) -> int:
    """0–100 threat estimate from every hostile or warring neighbour."""
    hostile = sum(observed_power(n) for n in state.neighbors
                  if n.relation in (Relation.WAR, Relation.HOSTILE))
    if hostile == 0:
        return 0
    return min(100, int(hostile / (combat.military_power(state) + 1) * 50))


def risk_label(risk: int) -> str:
    for threshold, label in RISK_LABELS:
        if risk > threshold:
            return label
    return 'Low'


def advisories(state: WorldState) -> list[str]:
    notes = []
    if state.stock(Resource.BREAD) < LOW_FOOD:
        notes.append('Food stores are low: famine is near.')
    if state.happiness < UNREST:
        notes.append('Unrest is growing among the people.')
    if any(n.relation is Relation.WAR for n in state.neighbors):
        notes.append('Fighting continues on the borders.')
    if state.research is not None:
        notes.append(f"Research under way: {technology.tech_name(state.research.tech)}.")
    if not notes:
        notes.append('The realm is at peace.')
    return notes


class RealmView:
    """Immutable snapshot of a WorldState."""

    def __init__(self, state: WorldState) -> None:
        self._tick        = state.tick
        self._resources   = {r.value: round(v, 2) for r, v in state.resources.items()}
        self._buildings   = {b.value: lvl for b, lvl in state.buildings.items()}
        self._troops      = {u.value: n for u, n in state.troops.items()}
        self._population  = state.population
        self._max_pop     = max_population(state)
        self._max_storage = max_storage(state)
        self._happiness   = state.happiness
        self._power       = combat.military_power(state)
        self._research    = None
        if state.research is not None:
            spec = technology.TECH_TREE[state.research.tech]
            self._research = {
                'tech':     state.research.tech.value,
                'name':     spec['name'],
                'progress': state.research.progress,
                'duration': spec['ticks'],
                'paused':   state.research.paused,
            }
        self._rp          = state.research_points
        self._unlocked    = sorted(t.value for t in state.unlocked)
        self._available   = [t.value for t in technology.researchable(state)]
        self._prices      = {
            r.value: {'buy': q.buy, 'sell': q.sell, 'trend': q.trend.value}
            for r, q in state.prices.items() if r in GOODS
        }
        self._neighbors   = [self._neighbor_row(n) for n in state.neighbors]
        self._risk        = invasion_risk(state)
        self._advice      = advisories(state)
        self._policies    = sorted(p.value for p in state.policies)
        self._tax         = state.tax_level.value
        self._stance      = state.stance.value
        self._income      = economy.gold_income(state)
        self._pending     = [e.label for e in state.agenda.pending()]

    @staticmethod
    def _neighbor_row(n: Neighbor) -> dict:
        known = n.intel_level >= 2
        return {
            'id':         n.id,
            'name':       n.name,
            'biome':      n.profile.biome.value,
            'relation':   n.relation.value,
            'score':      n.relation_score,
            'intel':      n.intel_level,
            'power':      n.military_power if known else None,
            'wealth':     n.wealth if known else None,
            'observed':   round(observed_power(n), 1),
            'route':      n.route_active,
            'imports':    n.route.import_res.value if n.route.import_res else None,
            'exports':    n.route.export_res.value if n.route.export_res else None,
            'position':   list(n.profile.position),
            'distance':   n.profile.distance,
        }

    # ── Read-only properties ───────────────────────────────────────────────

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def resources(self) -> dict:
        return dict(self._resources)

    @property
    def buildings(self) -> dict:
        return dict(self._buildings)

    @property
    def troops(self) -> dict:
        return dict(self._troops)

    @property
    def population(self) -> float:
        return self._population

    @property
    def max_population(self) -> int:
        return self._max_pop

    @property
    def max_storage(self) -> int:
        return self._max_storage

    @property
    def happiness(self) -> float:
        return self._happiness

    @property
    def military_power(self) -> float:
        return self._power

    @property
    def research(self) -> dict | None:
        """Active research as {tech, name, progress, duration, paused}, or None."""
        return dict(self._research) if self._research else None

    @property
    def research_points(self) -> float:
        return self._rp

    @property
    def unlocked(self) -> list[str]:
        return list(self._unlocked)

    @property
    def available_research(self) -> list[str]:
        return list(self._available)

    @property
    def prices(self) -> dict:
        return {k: dict(v) for k, v in self._prices.items()}

    @property
    def neighbors(self) -> list[dict]:
        return [dict(row) for row in self._neighbors]

    @property
    def invasion_risk(self) -> int:
        return self._risk

    @property
    def risk_label(self) -> str:
        return risk_label(self._risk)

    @property
    def advisories(self) -> list[str]:
        return list(self._advice)

    @property
    def policies(self) -> list[str]:
        return list(self._policies)

    @property
    def tax_level(self) -> str:
        return self._tax

    @property
    def stance(self) -> str:
        return self._stance

    @property
    def gold_income(self) -> float:
        return self._income

    @property
    def pending_expeditions(self) -> list[str]:
        return list(self._pending)

    def as_dict(self) -> dict:
        return {
            'tick':            self._tick,
            'resources':       self.resources,
            'buildings':       self.buildings,
            'troops':          self.troops,
            'population':      self._population,
            'max_population':  self._max_pop,
            'max_storage':     self._max_storage,
            'happiness':       self._happiness,
            'military_power':  round(self._power, 1),
            'research':        self.research,
            'research_points': round(self._rp, 1),
            'unlocked':        self.unlocked,
            'available':       self.available_research,
            'prices':          self.prices,
            'neighbors':       self.neighbors,
            'invasion_risk':   self._risk,
            'risk_label':      self.risk_label,
            'advisories':      self.advisories,
            'policies':        self.policies,
            'tax_level':       self._tax,
            'stance':          self._stance,
            'gold_income':     round(self._income, 2),
            'pending':         self.pending_expeditions,
        }
