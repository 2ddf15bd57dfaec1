"""
test_combat.py — pytest suite for stronghold.combat
===================================================
Covers: military power, unit and upgrade costs, recruitment gating,
dismissal, and expeditions from dispatch to delayed resolution.
"""

import pytest

from conftest import set_stock
from stronghold import combat, config
from stronghold.commands import Attack, Dismiss, Recruit, Upgrade, execute
from stronghold.errors import Rejection
from stronghold.events import EventKind
from stronghold.sim import shutdown, step
from stronghold.world import (
    Building, Policy, Relation, Resource, Stance, Tech, Unit, max_population,
)


@pytest.fixture
def garrison(realm):
    """Realm with barracks and ten lancers (power 100)."""
    realm.buildings[Building.BARRACKS] = 1
    realm.troops[Unit.LANCER] = 10
    return realm


@pytest.fixture
def weakest(garrison):
    """Neighbour n0: power 50, wealth 500."""
    n = garrison.neighbor('n0')
    n.relation = Relation.NEUTRAL
    n.relation_score = 0
    return n


# ─────────────────────────────────────────────────────
# Strength and costs
# ─────────────────────────────────────────────────────

class TestMilitaryPower:
    def test_empty_army(self, realm):
        assert combat.military_power(realm) == 0

    def test_raw_troops(self, garrison):
        garrison.troops[Unit.KNIGHT] = 1
        assert combat.military_power(garrison) == pytest.approx(145)

    def test_all_modifiers(self, realm):
        realm.troops[Unit.LANCER] = 2
        realm.troops[Unit.KNIGHT] = 1
        realm.upgrades.weapons = 1
        realm.upgrades.armor = 1
        realm.unlocked.update({Tech.IRON_WEAPONS, Tech.STONE_WALLS})
        realm.policies.add(Policy.MILITARY_TRAINING)
        realm.stance = Stance.AGGRESSIVE
        realm.buildings[Building.WALL] = 1
        expected = 65 * 1.25 * 1.1 * 1.2 + 150
        assert combat.military_power(realm) == pytest.approx(expected)

    def test_walls_alone(self, realm):
        realm.buildings[Building.WALL] = 2
        assert combat.military_power(realm) == 200


class TestCosts:
    def test_blacksmith_discount(self, realm):
        realm.buildings[Building.BLACKSMITH] = 2
        assert combat.unit_cost(realm, Unit.LANCER) == {
            Resource.PLANKS: 9, Resource.IRON_INGOTS: 4,
            Resource.BREAD: 18, Resource.GOLD: 9, 'pop': 1,
        }

    def test_discount_capped(self, realm):
        realm.buildings[Building.BLACKSMITH] = 20
        assert combat.blacksmith_discount(realm) == 0.5

    @pytest.mark.parametrize("level, ingots, gold", [(0, 50, 100), (1, 75, 150), (2, 112, 225)])
    def test_upgrade_cost(self, level, ingots, gold):
        assert combat.upgrade_cost(level) == {Resource.IRON_INGOTS: ingots, Resource.GOLD: gold}


# ─────────────────────────────────────────────────────
# Recruit / dismiss / upgrade
# ─────────────────────────────────────────────────────

class TestRecruit:
    def test_needs_barracks(self, realm):
        result = execute(realm, Recruit(Unit.LANCER))
        assert result.reason is Rejection.MISSING_PREREQUISITE_BUILDING

    def test_knights_need_stable(self, garrison):
        result = execute(garrison, Recruit(Unit.KNIGHT))
        assert result.reason is Rejection.MISSING_PREREQUISITE_BUILDING

    def test_needs_spare_citizens(self, garrison):
        garrison.population = 2
        set_stock(garrison, iron_ingots=100)
        result = execute(garrison, Recruit(Unit.LANCER))
        assert result.reason is Rejection.INSUFFICIENT_POPULATION

    def test_needs_materials(self, garrison):
        result = execute(garrison, Recruit(Unit.LANCER))
        assert result.reason is Rejection.INSUFFICIENT_RESOURCES
        assert garrison.troops[Unit.LANCER] == 10

    def test_success(self, garrison):
        set_stock(garrison, iron_ingots=10)
        result = execute(garrison, Recruit(Unit.LANCER))
        assert result.ok
        assert garrison.troops[Unit.LANCER] == 11
        assert garrison.population == 4
        assert garrison.stock(Resource.PLANKS) == 190
        assert garrison.stock(Resource.IRON_INGOTS) == 5
        assert garrison.stock(Resource.BREAD) == 280
        assert garrison.stock(Resource.GOLD) == 140


class TestDismiss:
    def test_nothing_to_dismiss(self, realm):
        result = execute(realm, Dismiss(Unit.ARCHER))
        assert result.reason is Rejection.INVALID_TARGET

    def test_soldier_returns_home(self, garrison):
        execute(garrison, Dismiss(Unit.LANCER))
        assert garrison.troops[Unit.LANCER] == 9
        assert garrison.population == 6

    def test_return_capped_by_housing(self, realm):
        realm.troops[Unit.KNIGHT] = 1
        realm.population = max_population(realm) - 1
        combat.dismiss(realm, Unit.KNIGHT)
        assert realm.population == max_population(realm)

    def test_never_reduces_population(self, realm):
        realm.troops[Unit.LANCER] = 1
        realm.population = max_population(realm) + 4
        combat.dismiss(realm, Unit.LANCER)
        assert realm.population == max_population(realm) + 4


class TestUpgrade:
    def test_forge_weapons(self, realm):
        set_stock(realm, iron_ingots=200, gold=1000)
        result = execute(realm, Upgrade('weapons'))
        assert result.ok
        assert realm.upgrades.weapons == 1
        assert realm.stock(Resource.IRON_INGOTS) == 150
        assert realm.stock(Resource.GOLD) == 900
        execute(realm, Upgrade('weapons'))
        assert realm.stock(Resource.IRON_INGOTS) == 75

    def test_unaffordable(self, realm):
        result = execute(realm, Upgrade('armor'))
        assert result.reason is Rejection.INSUFFICIENT_RESOURCES
        assert realm.upgrades.armor == 0

    def test_unknown_kind(self, realm):
        with pytest.raises(ValueError):
            combat.upgrade(realm, 'shields')


# ─────────────────────────────────────────────────────
# Expeditions
# ─────────────────────────────────────────────────────

class TestAttack:
    def test_dispatch_declares_war_and_schedules(self, garrison, weakest):
        garrison.tick = 10
        result = execute(garrison, Attack('n0', 'raid'))
        assert result.ok
        assert weakest.relation is Relation.WAR
        assert weakest.relation_score == -100
        (effect,) = garrison.agenda.pending()
        assert effect.due_tick == 10 + config.MARCH_DELAY_TICKS
        assert result.events[0].detail['arrives'] == 12

    def test_no_army(self, realm):
        result = execute(realm, Attack('n0', 'raid'))
        assert result.reason is Rejection.INSUFFICIENT_RESOURCES
        assert len(realm.agenda) == 0

    def test_vassal_is_invalid(self, garrison, weakest):
        weakest.relation = Relation.VASSAL
        result = execute(garrison, Attack('n0', 'conquer'))
        assert result.reason is Rejection.INVALID_TARGET

    def test_unknown_neighbour(self, garrison):
        result = execute(garrison, Attack('n42', 'raid'))
        assert result.reason is Rejection.INVALID_TARGET

    def test_unknown_mode(self, garrison):
        with pytest.raises(ValueError):
            combat.attack(garrison, 'n0', 'pillage')

    def test_route_stays_open(self, garrison, weakest):
        weakest.route_active = True
        combat.attack(garrison, 'n0', 'raid')
        assert weakest.route_active


class TestResolution:
    def _resolve(self, state, scripted, *draws):
        (effect,) = state.agenda.pop_due(state.tick + config.MARCH_DELAY_TICKS)
        scripted(state, *draws)
        events = []
        effect.action(state, state.tick, events)
        return events

    def test_raid_loots_wealth_snapshot(self, garrison, weakest, scripted):
        combat.attack(garrison, 'n0', 'raid')
        events = self._resolve(garrison, scripted, 0.0, 0.5)
        assert events[0].kind is EventKind.BATTLE_WON
        assert events[0].detail['loot'] == 150
        assert weakest.wealth == 350
        assert garrison.stock(Resource.GOLD) == 300
        assert weakest.relation is Relation.WAR

    def test_conquest_makes_vassal(self, garrison, weakest, scripted):
        combat.attack(garrison, 'n0', 'conquer')
        self._resolve(garrison, scripted, 0.0, 0.5)
        assert weakest.relation is Relation.VASSAL
        assert weakest.relation_score == 100
        assert weakest.military_power == 0

    def test_defeat_thins_the_ranks(self, garrison, scripted):
        strongest = garrison.neighbor('n7')
        garrison.troops[Unit.ARCHER] = 3
        combat.attack(garrison, 'n7', 'conquer')
        events = self._resolve(garrison, scripted, 0.0, 1.0)
        assert events[0].kind is EventKind.BATTLE_LOST
        assert garrison.troops[Unit.LANCER] == 7
        assert garrison.troops[Unit.ARCHER] == 2
        assert strongest.relation is Relation.WAR

    def test_defender_drawn_before_attacker(self, garrison, weakest, scripted):
        combat.attack(garrison, 'n0', 'raid')
        events = self._resolve(garrison, scripted, 0.0, 0.5)
        assert events[0].detail['defence_roll'] == pytest.approx(45.0)
        assert events[0].detail['attack_roll'] == pytest.approx(100.0)

    def test_full_intel_narrows_defence_roll(self, garrison, weakest, scripted):
        weakest.intel_level = 2
        combat.attack(garrison, 'n0', 'raid')
        events = self._resolve(garrison, scripted, 1.0, 0.5)
        assert events[0].detail['defence_roll'] == pytest.approx(50 * 1.1)

    def test_no_intel_keeps_wide_defence_roll(self, garrison, weakest, scripted):
        weakest.intel_level = 0
        combat.attack(garrison, 'n0', 'raid')
        events = self._resolve(garrison, scripted, 1.0, 0.5)
        assert events[0].detail['defence_roll'] == pytest.approx(50 * 1.4)

    def test_resolves_through_step_after_march(self, garrison, weakest):
        combat.attack(garrison, 'n0', 'conquer')
        first = step(garrison)
        second = step(garrison)
        assert weakest.relation is Relation.WAR
        assert not any(e.kind is EventKind.BATTLE_WON for e in first.events + second.events)
        third = step(garrison)
        assert third.events[0].kind is EventKind.BATTLE_WON
        assert weakest.relation is Relation.VASSAL

    def test_shutdown_drops_marching_army(self, garrison, weakest):
        combat.attack(garrison, 'n0', 'raid')
        shutdown(garrison)
        assert len(garrison.agenda) == 0
        for _ in range(4):
            step(garrison)
        assert weakest.wealth == 500
        assert weakest.relation is Relation.WAR
