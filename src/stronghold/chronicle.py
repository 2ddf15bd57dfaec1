# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
chronicle.py — Logging collaborator: turns engine events into log lines.

The engine emits structured events.Event records and never formats text.
Chronicle owns the wording, assigns each line a severity, prints it, and
keeps a bounded history for the dashboard feed.

    chron = Chronicle()
    chron.record_all(report.events)        # after every sim.step()
    chron.record_result(result)            # after every commands.execute()

LogTee mirrors stdout into logs/run_<timestamp>.txt and lets only notable
lines through to the terminal.
"""

from __future__ import annotations

import collections
from dataclasses import dataclass

from .          import config
from .events    import Event, EventKind
from .technology import tech_name
from .world     import Tech

INFO, SUCCESS, WARNING, DANGER = 'info', 'success', 'warning', 'danger'


@dataclass(frozen=True)
class Entry:
    tick:     int
    severity: str
    text:     str


def _title(value: str) -> str:
    return value.replace('_', ' ').title()


def _tech(detail: dict) -> str:
    return tech_name(Tech(detail['tech']))


# event kind → (severity, formatter(detail) -> message)
_FORMATS: dict[EventKind, tuple[str, object]] = {
    EventKind.RESEARCH_STARTED:   (INFO,    lambda d: f"📜 begins researching {_tech(d)}"),
    EventKind.RESEARCH_COMPLETED: (SUCCESS, lambda d: f"💡 TECH DISCOVERED: {_tech(d)}"),
    EventKind.RESEARCH_CANCELLED: (DANGER,  lambda d: f"✖ research abandoned: {_tech(d)} (costs lost)"),
    EventKind.RESEARCH_PAUSED:    (INFO,    lambda d: f"⏸ research paused: {_tech(d)}"),
    EventKind.RESEARCH_RESUMED:   (INFO,    lambda d: f"▶ research resumed: {_tech(d)}"),
    EventKind.RESEARCH_RUSHED:    (SUCCESS, lambda d: f"⏩ research rushed: {_tech(d)} at {d['progress']:.0f}"),
    EventKind.BUILDING_CONSTRUCTED: (SUCCESS, lambda d: f"🏗 {_title(d['building'])} built (level {d['level']})"),
    EventKind.UNIT_RECRUITED:     (SUCCESS, lambda d: f"⚔ {_title(d['unit'])} recruited ({d['count']} in service)"),
    EventKind.UNIT_DISMISSED:     (INFO,    lambda d: f"🏠 {_title(d['unit'])} dismissed ({d['count']} in service)"),
    EventKind.UPGRADE_FORGED:     (SUCCESS, lambda d: f"🔨 {d['kind']} upgrade forged (level {d['level']})"),
    EventKind.STANCE_CHANGED:     (INFO,    lambda d: f"🛡 army stance now {d['stance']}"),
    EventKind.TAX_CHANGED:        (INFO,    lambda d: f"💰 taxes {d['from']} → {d['to']}"),
    EventKind.POLICY_TOGGLED:     (INFO,    lambda d: f"📯 policy {_title(d['policy'])} "
                                                      f"{'enacted' if d['active'] else 'repealed'}"),
    EventKind.MARKET_TRADE:       (INFO,    lambda d: f"⚖ {'bought' if d['side'] == 'buy' else 'sold'} "
                                                      f"{d['amount']:g} {d['resource']} for {d['gold']:.2f} gold"),
    EventKind.PRICES_UPDATED:     (INFO,    lambda d: "📈 market prices revised"
                                                      + (f" (rising: {', '.join(d['rising'])})" if d['rising'] else '')),
    EventKind.ROUTE_OPENED:       (SUCCESS, lambda d: f"🐪 trade route opened with {d['name']}"),
    EventKind.ROUTE_CLOSED:       (INFO,    lambda d: f"🐪 trade route closed with {d['name']}"),
    EventKind.ROUTE_CONFIGURED:   (INFO,    lambda d: f"🐪 {d['name']} {d['direction']}: {d['resource'] or 'nothing'}"),
    EventKind.GIFT_SENT:          (SUCCESS, lambda d: f"🎁 gift sent to {d['name']} (relation {d['score']:+.0f})"),
    EventKind.INSULT_SENT:        (DANGER,  lambda d: f"🗯 envoy insulted {d['name']} (relation {d['score']:+.0f})"),
    EventKind.WAR_DECLARED:       (DANGER,  lambda d: f"🔥 WAR DECLARED on {d['name']}"),
    EventKind.RELATION_CHANGED:   (INFO,    lambda d: f"🤝 {d['name']} is now {d['to']} (was {d['from']})"),
    EventKind.SCOUT_SUCCEEDED:    (SUCCESS, lambda d: f"🕵 spies report on {d['name']}: full intelligence"),
    EventKind.SCOUT_FAILED:       (DANGER,  lambda d: f"🕵 spies captured by {d['name']} (relation {d['score']:+.0f})"),
    EventKind.ARMY_DISPATCHED:    (INFO,    lambda d: f"🐎 troops marching on {d['name']} ({d['mode']})"),
    EventKind.BATTLE_WON:         (SUCCESS, lambda d: (f"🏆 conquest: {d['name']} is now our vassal"
                                                       if d['mode'] == 'conquer'
                                                       else f"🏆 raid on {d['name']} took {d['loot']} gold")),
    EventKind.BATTLE_LOST:        (DANGER,  lambda d: f"☠ defeat at {d['name']}: heavy losses in retreat"),
    EventKind.POPULATION_GREW:    (INFO,    lambda d: f"👶 population grows to {d['population']:.0f}"),
    EventKind.POPULATION_DECLINED: (WARNING, lambda d: f"🚶 population falls to {d['population']:.0f} ({d['cause']})"),
    EventKind.STARVATION:         (DANGER,  lambda d: "🍞 granaries empty: the realm starves"),
}


def format_event(event: Event) -> Entry:
    severity, fmt = _FORMATS[event.kind]
    return Entry(event.tick, severity, f"Tick {event.tick:04d}: {fmt(event.detail)}")


class Chronicle:
    """Bounded, newest-last history of formatted log entries."""

    def __init__(self, maxlen: int | None = None, echo: bool = True) -> None:
        self.entries: collections.deque[Entry] = collections.deque(
            maxlen=maxlen or config.CHRONICLE_MAX)
        self.echo = echo

    def _add(self, entry: Entry) -> Entry:
        self.entries.append(entry)
        if self.echo:
            print(entry.text)
        return entry

    def record(self, event: Event) -> Entry:
        return self._add(format_event(event))

    def record_all(self, events: list[Event]) -> list[Entry]:
        return [self.record(e) for e in events]

    def record_result(self, result, tick: int) -> list[Entry]:
        """Log a CommandResult: its events on success, a warning on rejection."""
        if result.ok:
            return self.record_all(result.events)
        text = (f"Tick {tick:04d}: ⚠ {result.command.describe()} rejected: "
                f"{result.message}")
        return [self._add(Entry(tick, WARNING, text))]

    def tail(self, n: int = 20) -> list[str]:
        return [e.text for e in list(self.entries)[-n:]]


# ══════════════════════════════════════════════════════════════════════════
# Stdout tee
# ══════════════════════════════════════════════════════════════════════════

class LogTee:
    """Every byte goes to the log file.  Only filtered lines reach the terminal."""

    # Keywords that earn a line a spot on the terminal during the run
    _SHOW = frozenset({
        'WAR DECLARED', 'conquest', 'raid on', 'defeat at',
        'TECH DISCOVERED', 'starves', 'population falls',
        'is now', 'rejected',
        '[Simulation interrupted', 'FINAL REPORT',
    })

    passthrough: bool = False   # True → show everything (used for final report)

    def __init__(self, log_fh, real_stdout):
        self._log  = log_fh
        self._real = real_stdout
        self._buf  = ''

    def write(self, text: str) -> None:
        self._log.write(text)
        self._log.flush()
        self._buf += text
        while '\n' in self._buf:
            line, self._buf = self._buf.split('\n', 1)
            if self.passthrough or any(kw in line for kw in self._SHOW):
                self._real.write(line + '\n')
                self._real.flush()

    def flush(self) -> None:
        self._log.flush()

    def fileno(self) -> int:
        return self._real.fileno()
