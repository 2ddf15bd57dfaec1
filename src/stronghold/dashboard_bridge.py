"""
dashboard_bridge.py — Periodic JSON snapshot writer for the Streamlit live dashboard.

Call write_dashboard_snapshot() from sim.py every config.DASHBOARD_WRITE_EVERY ticks.
Uses an atomic rename-swap so the dashboard process never reads a half-written file.

No Streamlit dependency: this runs inside the main simulation process.
"""

from __future__ import annotations

import collections
import json
import os
import pathlib

from .         import config
from .view     import RealmView
from .world    import GOODS

_HISTORY_MAX = 240   # keep last 240 snapshots → 6 000 ticks of history at interval=25

# ── Rolling economy history (module-level, survives across calls) ──────────
_history: collections.deque = collections.deque(maxlen=_HISTORY_MAX)


# ──────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────

def _tick_rate(tick_times: list) -> float:
    """Ticks per second averaged over the last 30 recorded tick durations."""
    if not tick_times:
        return 0.0
    recent = tick_times[-30:]
    total  = sum(recent)
    return round(len(recent) / total, 2) if total > 0 else 0.0


def reset_history() -> None:
    _history.clear()


def history_row(view: RealmView) -> dict:
    res = view.resources
    return {
        'tick':       view.tick,
        'population': round(view.population, 2),
        'happiness':  round(view.happiness, 2),
        'power':      round(view.military_power, 1),
        'gold':       res['gold'],
        'stock':      {g.value: res[g.value] for g in GOODS},
        'buy':        {k: v['buy'] for k, v in view.prices.items()},
    }


# ──────────────────────────────────────────────────────────────────────────
# Main API
# ──────────────────────────────────────────────────────────────────────────

def build_snapshot(state, tick_times: list, log_tail: list) -> dict:
    view = RealmView(state)
    _history.append(history_row(view))
    snap = view.as_dict()
    snap.update({
        'tick_rate':  _tick_rate(tick_times),
        'history':    list(_history),
        'event_tail': log_tail[-40:],     # last 40 lines for the live feed
    })
    return snap


def write_dashboard_snapshot(state, tick_times: list, log_tail: list,
                             path: str | os.PathLike | None = None) -> pathlib.Path:
    """Serialise current realm state and write it atomically.

    The write goes to a .tmp file first; os.replace() then performs an atomic rename
    so the dashboard reader never sees a partial JSON file.
    """
    target = pathlib.Path(path or config.DASHBOARD_DATA_PATH)
    snap   = build_snapshot(state, tick_times, log_tail)

    tmp = target.with_suffix('.tmp')
    tmp.write_text(json.dumps(snap, separators=(',', ':')), encoding='utf-8')
    os.replace(tmp, target)
    return target
