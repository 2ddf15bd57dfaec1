# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""
config.py — Shared run-level configuration constants for the stronghold simulation.

Gameplay tables (prices, costs, tech tree, tax schedule) live in the module
that owns them.  CLI arguments in sim.run() override the values below at
runtime so a run is identical when none are passed.
"""

# ── Simulation length & cadence ─────────────────────────────────────────
TICKS          = 3600     # total ticks for a headless run (one hour at normal speed)
TICK_RATE_MS   = 1000     # wall-clock interval between ticks at normal speed
SEED           = None     # None → fresh entropy each run

# ── Periodic subsystems ─────────────────────────────────────────────────
MARKET_PERIOD     = 60    # prices recomputed when tick % MARKET_PERIOD == 0
DIPLOMACY_PERIOD  = 60    # relationship period when tick % DIPLOMACY_PERIOD == 0
MARCH_DELAY_TICKS = 2     # ticks between dispatching an army and the battle

# ── Logging collaborator ────────────────────────────────────────────────
CHRONICLE_MAX = 50        # most recent chronicle entries kept in memory
LOG_DIR       = 'logs'    # run_<timestamp>.txt files land here

# ── Dashboard / metrics ─────────────────────────────────────────────────
DASHBOARD_WRITE_EVERY = 25                      # snapshot interval (ticks)
DASHBOARD_DATA_PATH   = 'dashboard_data.json'
METRICS_DIR           = 'data'

# ── Autopilot ───────────────────────────────────────────────────────────
AUTOPILOT_EVERY = 10      # the scripted governor acts once every N ticks
