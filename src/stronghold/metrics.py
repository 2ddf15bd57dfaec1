# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
metrics.py — Per-tick metrics logger for stronghold runs.

Collects per-tick realm metrics and discrete events, writing them to CSV
files for later analysis, plus one summary row per run.
"""

import csv
import os
import time
import tracemalloc
from pathlib import Path

from .combat  import military_power
from .market  import BASE_PRICES
from .world   import GOODS, Relation, Resource, max_population


class MetricsLogger:
    """Collects per-tick realm metrics and writes them to CSV."""

    def __init__(self, seed, condition: str = 'default', output_dir: str = "data"):
        self.seed = seed
        self.condition = condition
        self.output_dir = output_dir

        Path(output_dir).mkdir(parents=True, exist_ok=True)

        self._metrics_path = os.path.join(output_dir, f"metrics_seed_{seed}.csv")
        self._events_path = os.path.join(output_dir, f"events_seed_{seed}.csv")

        self._metrics_fh = open(self._metrics_path, 'w', newline='', encoding='utf-8')
        self._events_fh = open(self._events_path, 'w', newline='', encoding='utf-8')

        self._metrics_writer = csv.writer(self._metrics_fh)
        self._events_writer = csv.writer(self._events_fh)

        self._metrics_writer.writerow([
            'seed', 'tick', 'population', 'max_population', 'happiness',
            'gold', 'bread', 'stock_value', 'military_power', 'research_points',
            'techs', 'wars', 'vassals', 'routes',
        ])
        self._metrics_fh.flush()

        self._events_writer.writerow(['seed', 'tick', 'event_type', 'detail'])
        self._events_fh.flush()

        # Cumulative counters
        self.total_battles_won = 0
        self.total_battles_lost = 0
        self.total_births = 0
        self.total_departures = 0
        self.total_techs = 0

        # Running stats for finalize
        self._peak_population = 0
        self._min_happiness = 100.0
        self._peak_gold = 0.0
        self._last_tick = 0

        self.start_time = time.time()
        tracemalloc.start()

    # ──────────────────────────────────────────────────────────────────────
    # Per-tick row
    # ──────────────────────────────────────────────────────────────────────

    @staticmethod
    def stock_value(state) -> float:
        """Value of every stored good at base price."""
        return round(sum(state.stock(r) * BASE_PRICES[r] for r in GOODS), 2)

    def log_tick(self, state, tick: int) -> None:
        gold = state.stock(Resource.GOLD)
        self._peak_population = max(self._peak_population, state.population)
        self._min_happiness = min(self._min_happiness, state.happiness)
        self._peak_gold = max(self._peak_gold, gold)
        self._last_tick = tick

        self._metrics_writer.writerow([
            self.seed, tick,
            round(state.population, 2), max_population(state), round(state.happiness, 2),
            round(gold, 2), round(state.stock(Resource.BREAD), 2), self.stock_value(state),
            round(military_power(state), 2), round(state.research_points, 2),
            len(state.unlocked),
            sum(1 for n in state.neighbors if n.relation is Relation.WAR),
            sum(1 for n in state.neighbors if n.relation is Relation.VASSAL),
            sum(1 for n in state.neighbors if n.route_active),
        ])
        # Flush every 100 ticks
        if tick % 100 == 0:
            self._metrics_fh.flush()

    # ──────────────────────────────────────────────────────────────────────
    # Discrete event recording
    # ──────────────────────────────────────────────────────────────────────

    def record_event(self, event) -> None:
        """Write one row per engine event and bump the matching counter."""
        kind = event.kind.value
        self._events_writer.writerow([
            self.seed, event.tick, kind,
            ';'.join(f"{k}={v}" for k, v in sorted(event.detail.items())),
        ])
        if kind == 'battle_won':
            self.total_battles_won += 1
        elif kind == 'battle_lost':
            self.total_battles_lost += 1
        elif kind == 'population_grew':
            self.total_births += 1
        elif kind == 'population_declined':
            self.total_departures += 1
        elif kind == 'research_completed':
            self.total_techs += 1

    # ──────────────────────────────────────────────────────────────────────
    # Finalize — run-level summary
    # ──────────────────────────────────────────────────────────────────────

    def finalize(self, state) -> str:
        """Close the per-run files and append one row to run_summaries.csv."""
        wall_clock = round(time.time() - self.start_time, 2)
        peak_ram = round(tracemalloc.get_traced_memory()[1] / (1024 * 1024), 2)
        tracemalloc.stop()

        self._metrics_fh.close()
        self._events_fh.close()

        summary_path = os.path.join(self.output_dir, "run_summaries.csv")
        file_exists = os.path.isfile(summary_path)
        with open(summary_path, 'a', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            if not file_exists:
                writer.writerow([
                    'seed', 'condition', 'ticks', 'final_population', 'peak_population',
                    'min_happiness', 'final_gold', 'peak_gold', 'techs',
                    'battles_won', 'battles_lost', 'births', 'departures',
                    'wall_clock_s', 'peak_ram_mb',
                ])
            writer.writerow([
                self.seed, self.condition, self._last_tick,
                round(state.population, 2), round(self._peak_population, 2),
                round(self._min_happiness, 2), round(state.stock(Resource.GOLD), 2),
                round(self._peak_gold, 2), len(state.unlocked),
                self.total_battles_won, self.total_battles_lost,
                self.total_births, self.total_departures,
                wall_clock, peak_ram,
            ])
        return summary_path
