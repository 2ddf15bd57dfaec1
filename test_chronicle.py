"""
test_chronicle.py — pytest suite for stronghold.chronicle
=========================================================
Covers: event formatting for every kind, the bounded history, rejected
command lines, and the LogTee terminal filter.
"""

import io

import pytest

from stronghold.chronicle import (
    DANGER, SUCCESS, WARNING, Chronicle, LogTee, format_event,
)
from stronghold.commands import Construct, execute
from stronghold.events import Event, EventKind
from stronghold.world import Building

# One detail dict that satisfies every formatter
_DETAIL = {
    'tech': 'crop_rotation', 'progress': 15, 'building': 'lumber_hut', 'level': 2,
    'unit': 'knight', 'count': 3, 'kind': 'weapons', 'stance': 'aggressive',
    'from': 'neutral', 'to': 'friendly', 'policy': 'forced_labor', 'active': True,
    'side': 'buy', 'amount': 10, 'resource': 'planks', 'gold': 60.0,
    'rising': ['bread'], 'falling': [], 'neighbor': 'n0', 'name': 'Hill Fort',
    'direction': 'import', 'score': -20, 'mode': 'raid', 'loot': 150,
    'population': 6, 'cause': 'famine', 'shortfall': 1.5,
}


class TestFormatEvent:
    @pytest.mark.parametrize("kind", list(EventKind))
    def test_every_kind_has_a_line(self, kind):
        entry = format_event(Event(kind, 7, dict(_DETAIL)))
        assert entry.tick == 7
        assert entry.text.startswith('Tick 0007: ')
        assert len(entry.text) > len('Tick 0007: ')

    def test_discovery_wording(self):
        entry = format_event(Event(EventKind.RESEARCH_COMPLETED, 120, {'tech': 'crop_rotation'}))
        assert entry.text == 'Tick 0120: 💡 TECH DISCOVERED: Crop Rotation'
        assert entry.severity == SUCCESS

    def test_conquest_and_raid_differ(self):
        raid = format_event(Event(EventKind.BATTLE_WON, 1, dict(_DETAIL)))
        conquest = format_event(Event(EventKind.BATTLE_WON, 1, dict(_DETAIL, mode='conquer')))
        assert 'took 150 gold' in raid.text
        assert 'vassal' in conquest.text

    def test_war_is_danger(self):
        entry = format_event(Event(EventKind.WAR_DECLARED, 3, {'neighbor': 'n1', 'name': 'Storm Peak'}))
        assert entry.severity == DANGER
        assert 'WAR DECLARED on Storm Peak' in entry.text


class TestChronicle:
    def test_bounded_history(self):
        chron = Chronicle(maxlen=3, echo=False)
        for t in range(5):
            chron.record(Event(EventKind.STARVATION, t))
        assert len(chron.entries) == 3
        assert chron.entries[0].tick == 2

    def test_tail(self):
        chron = Chronicle(echo=False)
        for t in range(4):
            chron.record(Event(EventKind.STARVATION, t))
        tail = chron.tail(2)
        assert len(tail) == 2
        assert tail[-1].startswith('Tick 0003')

    def test_echo_prints(self, capsys):
        chron = Chronicle()
        chron.record(Event(EventKind.STARVATION, 9))
        assert 'Tick 0009' in capsys.readouterr().out

    def test_rejected_command(self, realm):
        chron = Chronicle(echo=False)
        result = execute(realm, Construct(Building.CATHEDRAL))
        (entry,) = chron.record_result(result, 4)
        assert entry.severity == WARNING
        assert entry.text.startswith("Tick 0004: ⚠ Construct(building='cathedral') rejected: short of")

    def test_accepted_command_logs_its_events(self, realm):
        chron = Chronicle(echo=False)
        realm.buildings[Building.HOUSE] = 0
        result = execute(realm, Construct(Building.HOUSE))
        (entry,) = chron.record_result(result, 0)
        assert 'House built (level 1)' in entry.text


class TestLogTee:
    def test_filters_terminal_but_logs_everything(self):
        log, real = io.StringIO(), io.StringIO()
        tee = LogTee(log, real)
        tee.write('Tick 0001: 👶 population grows to 6\n')
        tee.write('Tick 0002: 🔥 WAR DECLARED on Mist Vale\n')
        assert 'grows' in log.getvalue()
        assert 'grows' not in real.getvalue()
        assert 'WAR DECLARED' in real.getvalue()

    def test_partial_lines_buffered(self):
        log, real = io.StringIO(), io.StringIO()
        tee = LogTee(log, real)
        tee.write('FINAL ')
        assert real.getvalue() == ''
        tee.write('REPORT\n')
        assert real.getvalue() == 'FINAL REPORT\n'

    def test_passthrough(self):
        log, real = io.StringIO(), io.StringIO()
        tee = LogTee(log, real)
        tee.passthrough = True
        tee.write('anything\n')
        assert real.getvalue() == 'anything\n'
