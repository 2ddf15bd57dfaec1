"""
test_commands.py — pytest suite for stronghold.commands
=======================================================
Covers: the request-dict parser, describe(), and execute()'s guarantee that
a rejected command leaves the realm untouched.
"""

import copy

import pytest

from stronghold.commands import (
    COMMAND_TYPES, Attack, Buy, Command, ConfigureRoute, Construct, Diplomacy,
    PauseResearch, Recruit, SetTax, StartResearch, command_from_dict, execute,
)
from stronghold.errors import Rejection
from stronghold.world import Building, Resource, TaxLevel, Tech, Unit


def _snapshot(state):
    return (
        copy.deepcopy(state.resources), dict(state.buildings), dict(state.troops),
        state.population, state.happiness, state.research, state.research_points,
        [(n.relation, n.relation_score, n.route_active) for n in state.neighbors],
        len(state.agenda),
    )


# ─────────────────────────────────────────────────────
# command_from_dict
# ─────────────────────────────────────────────────────

class TestFromDict:
    def test_every_kind_registered(self):
        assert len(COMMAND_TYPES) == 18
        assert all(issubclass(cls, Command) for cls in COMMAND_TYPES.values())

    def test_enum_fields_coerced(self):
        assert command_from_dict({'kind': 'construct', 'building': 'house'}) == Construct(Building.HOUSE)
        assert command_from_dict({'kind': 'set_tax', 'level': 'high'}) == SetTax(TaxLevel.HIGH)
        assert command_from_dict({'kind': 'recruit', 'unit': 'knight'}) == Recruit(Unit.KNIGHT)

    def test_plain_fields_pass_through(self):
        cmd = command_from_dict({'kind': 'buy', 'resource': 'wheat', 'amount': 25})
        assert cmd == Buy(Resource.WHEAT, 25)
        assert command_from_dict({'kind': 'attack', 'neighbor': 'n3', 'mode': 'raid'}) == Attack('n3', 'raid')

    def test_optional_resource(self):
        cmd = command_from_dict({'kind': 'configure_route', 'neighbor': 'n1',
                                 'direction': 'export', 'resource': None})
        assert cmd == ConfigureRoute('n1', 'export', None)

    def test_argumentless_command(self):
        assert command_from_dict({'kind': 'pause_research'}) == PauseResearch()

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            command_from_dict({'kind': 'summon_dragon'})

    def test_unknown_enum_value(self):
        with pytest.raises(ValueError):
            command_from_dict({'kind': 'construct', 'building': 'ziggurat'})

    def test_unknown_diplomatic_action(self):
        with pytest.raises(ValueError):
            command_from_dict({'kind': 'diplomacy', 'neighbor': 'n0', 'action': 'flatter'})


class TestDescribe:
    def test_plain_values(self):
        assert Construct(Building.HOUSE).describe() == "Construct(building='house')"
        assert Diplomacy('n2', 'gift').describe() == "Diplomacy(neighbor='n2', action='gift')"


# ─────────────────────────────────────────────────────
# execute
# ─────────────────────────────────────────────────────

class TestExecute:
    @pytest.mark.parametrize("command", [
        Construct(Building.CATHEDRAL),
        Buy(Resource.PLANKS, 10),
        StartResearch(Tech.SANITATION),
        Recruit(Unit.LANCER),
        Attack('n0', 'raid'),
        Diplomacy('n99', 'gift'),
    ])
    def test_rejection_leaves_state_unchanged(self, realm, command):
        before = _snapshot(realm)
        result = execute(realm, command)
        assert not result.ok
        assert isinstance(result.reason, Rejection)
        assert result.message
        assert result.events == []
        assert _snapshot(realm) == before

    def test_success_carries_events(self, realm):
        result = execute(realm, SetTax(TaxLevel.LOW))
        assert result.ok
        assert result.reason is None
        assert result.command == SetTax(TaxLevel.LOW)
        assert len(result.events) == 1
