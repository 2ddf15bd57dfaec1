"""
conftest.py — shared fixtures for the stronghold test suite.
"""

import pytest

from stronghold.world import Building, Resource, new_realm


class ScriptedRng:
    """Stands in for random.Random: replays *values*, then returns *default*."""

    def __init__(self, *values, default=0.5):
        self._values = list(values)
        self.default = default
        self.calls = 0

    def random(self):
        self.calls += 1
        return self._values.pop(0) if self._values else self.default


@pytest.fixture
def realm():
    """A freshly founded realm with a fixed seed."""
    return new_realm(seed=7)


@pytest.fixture
def scripted():
    """Install a ScriptedRng on a state: ``scripted(state, 0.1, 0.9)``."""
    def _install(state, *values, default=0.5):
        state.rng = ScriptedRng(*values, default=default)
        return state.rng
    return _install


@pytest.fixture
def empty_realm(realm):
    """The seeded realm with every building razed and no army."""
    for b in Building:
        realm.buildings[b] = 0
    return realm


def set_stock(state, **amounts):
    for name, value in amounts.items():
        state.resources[Resource(name)] = float(value)
