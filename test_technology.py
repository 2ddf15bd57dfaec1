"""
test_technology.py — pytest suite for stronghold.technology
===========================================================
Covers: research rate, the single research slot, prerequisite gating,
per-tick progress, pause / accelerate / cancel.
"""

import pytest

from conftest import set_stock
from stronghold import technology
from stronghold.commands import (
    AccelerateResearch, CancelResearch, PauseResearch, StartResearch, execute,
)
from stronghold.errors import CommandRejected, Rejection
from stronghold.events import EventKind
from stronghold.world import ActiveResearch, Building, Resource, Tech


@pytest.fixture
def scholar(realm):
    """Realm with plenty of research points and gold banked."""
    realm.research_points = 1000
    set_stock(realm, gold=1000)
    return realm


# ─────────────────────────────────────────────────────
# Tree and rate
# ─────────────────────────────────────────────────────

class TestTree:
    def test_ten_techs_in_three_branches(self):
        assert len(technology.TECH_TREE) == 10
        branches = {spec['branch'] for spec in technology.TECH_TREE.values()}
        assert branches == {'economy', 'military', 'civil'}

    def test_prerequisites_are_in_the_same_tree(self):
        for spec in technology.TECH_TREE.values():
            for req in spec['requires']:
                assert req in technology.TECH_TREE

    def test_starting_realm_choices(self, realm):
        assert set(technology.researchable(realm)) == {Tech.CROP_ROTATION, Tech.URBAN_PLANNING}


class TestResearchRate:
    def test_starting_rate(self, realm):
        assert technology.research_rate(realm) == pytest.approx(1.1)

    def test_cathedral_and_town_centres(self, realm):
        realm.buildings[Building.CATHEDRAL] = 2
        realm.buildings[Building.TOWN_CENTER] = 3
        assert technology.research_rate(realm) == pytest.approx(2.3)

    def test_points_accrue_without_active_research(self, realm):
        realm.research_points = 10
        technology.research_tick(realm, 1, [])
        assert realm.research_points == pytest.approx(11.1)


# ─────────────────────────────────────────────────────
# start_research
# ─────────────────────────────────────────────────────

class TestStartResearch:
    def test_not_enough_points(self, realm):
        realm.research_points = 10
        result = execute(realm, StartResearch(Tech.CROP_ROTATION))
        assert result.reason is Rejection.UNMET_TECHNOLOGY_REQUIREMENT
        assert realm.research is None
        assert realm.research_points == 10

    def test_successful_start_deducts_costs(self, scholar):
        result = execute(scholar, StartResearch(Tech.CROP_ROTATION))
        assert result.ok
        assert scholar.research == ActiveResearch(Tech.CROP_ROTATION)
        assert scholar.research_points == 950
        assert scholar.stock(Resource.GOLD) == 980
        assert result.events[0].kind is EventKind.RESEARCH_STARTED

    def test_slot_occupied(self, scholar):
        execute(scholar, StartResearch(Tech.CROP_ROTATION))
        result = execute(scholar, StartResearch(Tech.URBAN_PLANNING))
        assert result.reason is Rejection.RESEARCH_SLOT_OCCUPIED
        assert scholar.research.tech is Tech.CROP_ROTATION

    def test_missing_prerequisite_tech(self, scholar):
        scholar.buildings[Building.BLACKSMITH] = 1
        result = execute(scholar, StartResearch(Tech.HEAVY_PLOUGH))
        assert result.reason is Rejection.UNMET_TECHNOLOGY_REQUIREMENT

    def test_missing_building(self, scholar):
        result = execute(scholar, StartResearch(Tech.IRON_WEAPONS))
        assert result.reason is Rejection.UNMET_TECHNOLOGY_REQUIREMENT

    def test_already_known(self, scholar):
        scholar.unlocked.add(Tech.CROP_ROTATION)
        result = execute(scholar, StartResearch(Tech.CROP_ROTATION))
        assert result.reason is Rejection.INVALID_TARGET

    def test_not_enough_gold(self, scholar):
        set_stock(scholar, gold=5)
        result = execute(scholar, StartResearch(Tech.CROP_ROTATION))
        assert result.reason is Rejection.INSUFFICIENT_RESOURCES
        assert scholar.research_points == 1000


# ─────────────────────────────────────────────────────
# research_tick and slot commands
# ─────────────────────────────────────────────────────

class TestProgress:
    def test_completes_after_duration(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        events = []
        for t in range(1, 31):
            technology.research_tick(scholar, t, events)
        assert scholar.has_tech(Tech.CROP_ROTATION)
        assert scholar.research is None
        assert [e.kind for e in events] == [EventKind.RESEARCH_COMPLETED]
        assert events[0].tick == 30

    def test_one_tick_short_is_not_complete(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        for t in range(1, 30):
            technology.research_tick(scholar, t, [])
        assert not scholar.has_tech(Tech.CROP_ROTATION)
        assert scholar.research.progress == 29

    def test_paused_research_holds_but_points_accrue(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        result = execute(scholar, PauseResearch())
        assert result.events[0].kind is EventKind.RESEARCH_PAUSED
        points = scholar.research_points
        technology.research_tick(scholar, 1, [])
        assert scholar.research.progress == 0
        assert scholar.research_points == pytest.approx(points + 1.1)

    def test_pause_toggles_back(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        technology.pause_research(scholar)
        events = technology.pause_research(scholar)
        assert events[0].kind is EventKind.RESEARCH_RESUMED
        assert not scholar.research.paused

    def test_accelerate(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        result = execute(scholar, AccelerateResearch())
        assert result.ok
        assert scholar.research.progress == 15
        assert scholar.stock(Resource.GOLD) == 880

    def test_accelerate_clamped_to_duration(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        scholar.research.progress = 25
        technology.accelerate_research(scholar)
        assert scholar.research.progress == 30
        technology.research_tick(scholar, 1, [])
        assert scholar.has_tech(Tech.CROP_ROTATION)

    def test_accelerate_needs_gold(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        set_stock(scholar, gold=99)
        with pytest.raises(CommandRejected) as exc:
            technology.accelerate_research(scholar)
        assert exc.value.reason is Rejection.INSUFFICIENT_RESOURCES

    def test_cancel_frees_slot_without_refund(self, scholar):
        technology.start_research(scholar, Tech.CROP_ROTATION)
        result = execute(scholar, CancelResearch())
        assert result.ok
        assert scholar.research is None
        assert scholar.research_points == 950
        assert scholar.stock(Resource.GOLD) == 980

    def test_cancel_keeps_earlier_discoveries(self, scholar):
        scholar.buildings[Building.BLACKSMITH] = 1
        technology.start_research(scholar, Tech.CROP_ROTATION)
        scholar.research.progress = 30
        technology.research_tick(scholar, 1, [])
        technology.start_research(scholar, Tech.HEAVY_PLOUGH)
        technology.cancel_research(scholar)
        assert scholar.unlocked == {Tech.CROP_ROTATION}

    @pytest.mark.parametrize("command", [AccelerateResearch(), CancelResearch(), PauseResearch()])
    def test_slot_commands_need_active_research(self, realm, command):
        result = execute(realm, command)
        assert result.reason is Rejection.INVALID_TARGET
