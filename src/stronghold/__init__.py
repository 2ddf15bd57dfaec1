# (c) 2026 (KriaetvAspie / AspieTheBard)
# Licensed under the Polyform Noncommercial License 1.0.0
"""stronghold — a tick-driven economic and military realm simulation."""

from .commands import CommandResult, command_from_dict, execute
from .sim      import Session, Speed, TickReport, shutdown, step
from .view     import RealmView
from .world    import WorldState, new_realm

__all__ = [
    'CommandResult', 'RealmView', 'Session', 'Speed', 'TickReport', 'WorldState',
    'command_from_dict', 'execute', 'new_realm', 'shutdown', 'step',
]
