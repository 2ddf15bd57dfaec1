# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
sim.py — The tick pipeline and the driver loop.

step(state) advances the realm by exactly one tick.  Layers run in a fixed
order; every periodic layer is gated on the tick counter *before* it is
incremented, so tick 0 revises prices and relations.

    0. due expeditions          scheduler.Agenda.pop_due
    1. research                 technology.research_tick
    2. market prices            market.price_tick          (t % MARKET_PERIOD == 0)
    3. happiness                population.happiness_tick
    4. production & logistics   economy.production_tick
    5. population               population.population_tick
    6. relations                diplomacy.relation_tick    (t % DIPLOMACY_PERIOD == 0)

Session bundles a realm with its chronicle, speed setting and optional
metrics; run() is the command-line driver.
"""

from __future__ import annotations

import argparse
import enum
import pathlib
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime

from .           import config, dashboard_bridge
from .           import diplomacy, economy, market, population, technology
from .autopilot  import plan
from .chronicle  import Chronicle, LogTee
from .commands   import Command, CommandResult, execute
from .events     import Event
from .metrics    import MetricsLogger
from .view       import RealmView
from .world      import Resource, WorldState, new_realm


class Speed(enum.Enum):
    PAUSED = 0
    NORMAL = 1
    FAST   = 5


def tick_interval(speed: Speed) -> float | None:
    """Seconds between ticks at *speed*, or None when paused."""
    if speed is Speed.PAUSED:
        return None
    return config.TICK_RATE_MS / speed.value / 1000


@dataclass
class TickReport:
    tick:       int
    production: dict[Resource, float] = field(default_factory=dict)
    events:     list[Event]           = field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Pipeline
# ══════════════════════════════════════════════════════════════════════════

def step(state: WorldState) -> TickReport:
    t = state.tick
    events: list[Event] = []

    for effect in state.agenda.pop_due(t):
        effect.action(state, t, events)

    technology.research_tick(state, t, events)
    if t % config.MARKET_PERIOD == 0:
        market.price_tick(state, t, events)
    population.happiness_tick(state, t, events)
    production = economy.production_tick(state, t, events)
    population.population_tick(state, t, events)
    if t % config.DIPLOMACY_PERIOD == 0:
        diplomacy.relation_tick(state, t, events)

    state.tick += 1
    return TickReport(t, production, events)


def shutdown(state: WorldState) -> None:
    """Drop every pending deferred effect; armies still marching never arrive."""
    state.agenda.clear()


# ══════════════════════════════════════════════════════════════════════════
# Session
# ══════════════════════════════════════════════════════════════════════════

class Session:
    """A realm plus the collaborators that watch it."""

    def __init__(self, state: WorldState, chronicle: Chronicle | None = None,
                 metrics: MetricsLogger | None = None, speed: Speed = Speed.NORMAL) -> None:
        self.state     = state
        self.chronicle = chronicle or Chronicle(echo=False)
        self.metrics   = metrics
        self.speed     = speed
        self.last_report: TickReport | None = None

    def issue(self, command: Command) -> CommandResult:
        result = execute(self.state, command)
        self.chronicle.record_result(result, self.state.tick)
        if self.metrics is not None:
            for e in result.events:
                self.metrics.record_event(e)
        return result

    def advance(self) -> TickReport | None:
        """One tick, unless paused."""
        if self.speed is Speed.PAUSED:
            return None
        report = step(self.state)
        self.chronicle.record_all(report.events)
        if self.metrics is not None:
            self.metrics.log_tick(self.state, report.tick)
            for e in report.events:
                self.metrics.record_event(e)
        self.last_report = report
        return report

    def view(self) -> RealmView:
        return RealmView(self.state)

    def close(self) -> None:
        shutdown(self.state)


# ══════════════════════════════════════════════════════════════════════════
# Command-line driver
# ══════════════════════════════════════════════════════════════════════════

def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='stronghold',
        description='Run the stronghold realm simulation headless.',
    )
    parser.add_argument('--ticks', type=int, default=config.TICKS,
                        help='number of ticks to simulate (default: %(default)s)')
    parser.add_argument('--seed', type=int, default=config.SEED,
                        help='RNG seed for a reproducible run')
    parser.add_argument('--speed', choices=[s.name.lower() for s in Speed], default='normal',
                        help='cadence when --realtime is set')
    parser.add_argument('--realtime', action='store_true',
                        help='sleep between ticks instead of running flat out')
    parser.add_argument('--autopilot', action='store_true',
                        help='let the scripted governor issue commands')
    parser.add_argument('--metrics-dir', default=None,
                        help='write per-tick CSV metrics into this directory')
    parser.add_argument('--dashboard', action='store_true',
                        help=f'write {config.DASHBOARD_DATA_PATH} for `streamlit run dashboard.py`')
    return parser.parse_args(argv)


def _final_report(view: RealmView) -> None:
    print('\n' + '═' * 60)
    print(f'  FINAL REPORT  (tick {view.tick})')
    print('═' * 60)
    print(f'  Population {view.population:.0f}/{view.max_population}   '
          f'Happiness {view.happiness:.0f}   Power {view.military_power:.0f}')
    res = view.resources
    print('  ' + '  '.join(f'{k} {v:.0f}' for k, v in res.items()))
    print(f'  Techs: {", ".join(view.unlocked) or "none"}')
    for row in view.neighbors:
        print(f'  {row["name"]:<16} {row["relation"]:<9} score {row["score"]:+.0f}')
    print('═' * 60)


def run(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    # ── Set up file logging ────────────────────────────────────────────────
    pathlib.Path(config.LOG_DIR).mkdir(exist_ok=True)
    _ts       = datetime.now().strftime('%Y%m%d_%H%M%S')
    _log_path = f'{config.LOG_DIR}/run_{_ts}.txt'
    _log_fh   = open(_log_path, 'w', encoding='utf-8')
    _real     = sys.stdout
    _tee      = LogTee(_log_fh, _real)
    sys.stdout = _tee

    _real.write(f"Log → {_log_path}\n")
    _real.write(f"Running {args.ticks}-tick simulation  (wars / discoveries show below)\n\n")

    metrics = MetricsLogger(args.seed, output_dir=args.metrics_dir) if args.metrics_dir else None
    session = Session(new_realm(args.seed), Chronicle(), metrics, Speed[args.speed.upper()])
    interval = tick_interval(session.speed) if args.realtime else None
    _tick_times: list[float] = []
    _print_every = 60 if args.ticks > 600 else 10

    try:
        for _ in range(args.ticks):
            _t0 = time.time()
            t = session.state.tick
            if args.autopilot and t % config.AUTOPILOT_EVERY == 0:
                for command in plan(session.state):
                    session.issue(command)
            session.advance()

            if args.dashboard and t % config.DASHBOARD_WRITE_EVERY == 0:
                dashboard_bridge.write_dashboard_snapshot(
                    session.state, _tick_times, session.chronicle.tail(40))

            _tick_times.append(time.time() - _t0)
            if t % _print_every == 0:
                s = session.state
                _real.write(f'  [{t:{len(str(args.ticks))}d}/{args.ticks}]  '
                            f'Pop:{s.population:4.0f}  Happy:{s.happiness:5.1f}  '
                            f'Gold:{s.stock(Resource.GOLD):7.0f}  '
                            f'Bread:{s.stock(Resource.BREAD):6.0f}  '
                            f'Techs:{len(s.unlocked)}\n')
                _real.flush()
            if interval:
                time.sleep(interval)

    except KeyboardInterrupt:
        print("\n\n[Simulation interrupted by user]\n")

    finally:
        _real.write('\n')
        _tee.passthrough = True
        _final_report(session.view())
        session.close()
        if metrics is not None:
            print(f"Run summary → {metrics.finalize(session.state)}")
        sys.stdout = _real
        _log_fh.close()
        print(f"\nFull log saved → {_log_path}")


# ══════════════════════════════════════════════════════════════════════════
if __name__ == '__main__':
    run()
