import pytest

from nimp.midi import MidiInputGenerator

CONFIG = """<?xml version="1.0"?>
<MIDI_SETTINGS deviceId="made-up-device">
  <MAIN_MIDI_MAP>
    <MIDI_MAP midiId="7" nodeName="ikeda" param="pNColumns"
              inputMinValue="0" inputMaxValue="127" paramMinValue="1" paramMaxValue="20"/>
    <MIDI_MAP midiId="7" nodeName="glitch" param="dq"
              inputMinValue="0" inputMaxValue="127" paramMinValue="5" paramMaxValue="60"/>
  </MAIN_MIDI_MAP>
  <MAIN_MIDI_MAP>
    <MIDI_MAP midiId="7" nodeName="mixer" param="opacity"
              inputMinValue="0" inputMaxValue="127" paramMinValue="0" paramMaxValue="255"/>
  </MAIN_MIDI_MAP>
  <MAIN_MIDI_MAP>
    <MIDI_MAP midiId="9" nodeName="video" param="speed"/>
  </MAIN_MIDI_MAP>
</MIDI_SETTINGS>
"""


@pytest.fixture
def generator(tmp_path):
    (tmp_path / "paramGen_midi.xml").write_text(CONFIG)
    gen = MidiInputGenerator("midi", "Oxygen 25", tmp_path)
    gen.setup()
    return gen


def _drain(gen):
    messages = []
    while (msg := gen.next_message()) is not None:
        messages.append(msg)
    return messages


def test_setup_loads_banks(generator):
    assert len(generator.midi_maps) == 3
    assert generator.active_midi_map == 0
    assert generator.threaded is False


def test_control_maps_to_all_targets_in_order(generator):
    generator.new_midi_message(7, 127)
    messages = _drain(generator)
    assert [(m.image_input_name, m.name, m.int_val) for m in messages] == [
        ("ikeda", "pNColumns", 20),
        ("glitch", "dq", 60),
    ]


def test_minimum_input_gives_param_minimum(generator):
    generator.new_midi_message(7, 0)
    assert [m.int_val for m in _drain(generator)] == [1, 5]


def test_unmapped_control_queues_nothing(generator):
    generator.new_midi_message(9, 100)
    assert generator.next_message() is None
    assert generator.last_message == (9, 100)


def test_next_key_switches_bank(generator):
    generator.key_pressed(ord("m"))
    assert generator.active_midi_map == 1
    generator.new_midi_message(7, 127)
    messages = _drain(generator)
    assert [(m.image_input_name, m.int_val) for m in messages] == [("mixer", 255)]


def test_next_wraps_to_first(generator):
    for _ in range(3):
        generator.next_midi_map()
    assert generator.active_midi_map == 0


def test_previous_wraps_to_last(generator):
    generator.key_pressed("n")
    assert generator.active_midi_map == 2


def test_other_keys_are_ignored(generator):
    generator.key_pressed(ord("x"))
    generator.key_pressed("left")
    assert generator.active_midi_map == 0


def test_process_input_queues_nothing(generator):
    generator.process_input()
    assert generator.next_message() is None


def test_message_without_config_raises(tmp_path):
    gen = MidiInputGenerator("missing", "Oxygen 25", tmp_path)
    assert gen.setup_from_xml() is True
    with pytest.raises(IndexError):
        gen.new_midi_message(7, 10)


def test_bank_switching_without_config_stays_at_zero(tmp_path):
    gen = MidiInputGenerator("missing", "Oxygen 25", tmp_path)
    gen.next_midi_map()
    gen.prev_midi_map()
    assert gen.active_midi_map == 0