"""
test_view.py — pytest suite for stronghold.view
===============================================
Covers: intel-gated neighbour rows, invasion risk and its label,
advisories, and RealmView's snapshot semantics.
"""

import json

import pytest

from conftest import set_stock
from stronghold import view
from stronghold.technology import start_research
from stronghold.view import RealmView
from stronghold.world import Relation, Tech, Unit


@pytest.fixture
def quiet(realm):
    for n in realm.neighbors:
        n.relation = Relation.NEUTRAL
    return realm


class TestObservedPower:
    def test_unscouted_estimate(self, realm):
        n = realm.neighbor('n1')
        assert view.observed_power(n) == pytest.approx(170 * 0.8)

    def test_scouted_truth(self, realm):
        n = realm.neighbor('n1')
        n.intel_level = 2
        assert view.observed_power(n) == 170


class TestInvasionRisk:
    def test_no_threats(self, quiet):
        assert view.invasion_risk(quiet) == 0

    def test_hostile_neighbour(self, quiet):
        quiet.neighbor('n1').relation = Relation.HOSTILE
        # 136 observed vs 0 power: capped
        assert view.invasion_risk(quiet) == 100

    def test_army_lowers_risk(self, quiet):
        quiet.neighbor('n0').relation = Relation.WAR
        quiet.neighbor('n0').intel_level = 2
        quiet.troops[Unit.LANCER] = 9
        assert view.invasion_risk(quiet) == 27

    @pytest.mark.parametrize("risk, label", [
        (0, 'Low'), (20, 'Low'), (21, 'Moderate'), (41, 'High'), (75, 'High'), (76, 'Critical'),
    ])
    def test_labels(self, risk, label):
        assert view.risk_label(risk) == label


class TestAdvisories:
    def test_peaceful(self, quiet):
        assert view.advisories(quiet) == ['The realm is at peace.']

    def test_every_warning(self, quiet):
        set_stock(quiet, bread=50)
        quiet.happiness = 10
        quiet.neighbor('n3').relation = Relation.WAR
        quiet.research_points = 100
        start_research(quiet, Tech.CROP_ROTATION)
        notes = view.advisories(quiet)
        assert len(notes) == 4
        assert notes[-1] == 'Research under way: Crop Rotation.'


class TestRealmView:
    def test_hidden_until_scouted(self, realm):
        rows = {r['id']: r for r in RealmView(realm).neighbors}
        assert rows['n2']['power'] is None
        assert rows['n2']['wealth'] is None
        realm.neighbor('n2').intel_level = 2
        rows = {r['id']: r for r in RealmView(realm).neighbors}
        assert rows['n2']['power'] == 290
        assert rows['n2']['wealth'] == 900

    def test_snapshot_does_not_follow_state(self, realm):
        snap = RealmView(realm)
        set_stock(realm, gold=9999)
        realm.population = 12
        assert snap.resources['gold'] == 150
        assert snap.population == 5

    def test_returned_containers_are_copies(self, realm):
        snap = RealmView(realm)
        snap.resources['gold'] = 0
        snap.neighbors[0]['name'] = 'x'
        assert snap.resources['gold'] == 150
        assert snap.neighbors[0]['name'] != 'x'

    def test_as_dict_is_json_ready(self, realm):
        realm.research_points = 100
        start_research(realm, Tech.URBAN_PLANNING)
        data = RealmView(realm).as_dict()
        decoded = json.loads(json.dumps(data))
        assert decoded['research']['name'] == 'Urban Planning'
        assert decoded['max_population'] == 15
        assert set(decoded['prices']) == {
            'raw_wood', 'raw_stone', 'iron_ore', 'wheat',
            'planks', 'blocks', 'iron_ingots', 'bread',
        }
