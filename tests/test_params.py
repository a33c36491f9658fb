import time

import pytest

from nimp.params import Param, ParamInputGenerator, map_range


class RecordingGenerator(ParamInputGenerator):
    def __init__(self, name="rec", threaded=False):
        super().__init__(name, threaded)
        self.setup_calls = 0
        self.process_calls = 0

    def setup_from_xml(self):
        self.setup_calls += 1
        return True

    def process_input(self):
        self.process_calls += 1
        self.store_message(Param("node", "p", self.process_calls))


def _drain(gen):
    return list(iter(gen.next_message, None))


def test_map_range_endpoints():
    assert map_range(0, 0, 127, 0, 10) == 0
    assert map_range(127, 0, 127, 0, 10) == 10


def test_map_range_reversed_output():
    assert map_range(0, 0, 127, 50, 3) == 50
    assert map_range(127, 0, 127, 50, 3) == 3


def test_map_range_monotonic_and_unclamped():
    values = [map_range(v, 0, 127, 0, 1000) for v in range(-10, 140)]
    assert values == sorted(values)
    assert values[0] < 0
    assert values[-1] > 1000


def test_map_range_degenerate_input_range():
    assert map_range(5, 3, 3, 7, 9) == 7


def test_base_class_is_abstract():
    with pytest.raises(TypeError):
        ParamInputGenerator("x", False)


def test_messages_come_out_in_order():
    gen = RecordingGenerator()
    params = [Param("a", "x", 1), Param("b", "y", 2), Param("c", "z", 3)]
    for p in params:
        gen.store_message(p)
    assert _drain(gen) == params
    assert gen.next_message() is None


def test_overflow_drops_oldest():
    gen = RecordingGenerator()
    for i in range(20):
        gen.store_message(Param("n", "p", i))
    drained = _drain(gen)
    assert len(drained) == 11
    assert drained[0].int_val == 9
    assert drained[-1].int_val == 19


def test_clear_messages():
    gen = RecordingGenerator()
    gen.store_message(Param("n", "p", 1))
    gen.clear_messages()
    assert gen.next_message() is None


def test_setup_configures():
    gen = RecordingGenerator()
    assert gen.configured is False
    ParamInputGenerator.setup(gen)
    assert gen.configured is True
    assert gen.setup_calls == 1
    assert gen.sampling_ms == 33


def test_start_without_thread_does_nothing():
    gen = RecordingGenerator(threaded=False)
    ParamInputGenerator.setup(gen)
    ParamInputGenerator.start(gen)
    assert gen.running is False
    assert gen.process_calls == 0
    assert ParamInputGenerator.next_message(gen) is None


def test_start_requires_setup():
    gen = RecordingGenerator(threaded=True)
    ParamInputGenerator.start(gen)
    assert gen.running is False
    assert gen.process_calls == 0
    assert ParamInputGenerator.next_message(gen) is None


def test_threaded_generator_produces_and_clears_on_stop():
    gen = RecordingGenerator(threaded=True)
    ParamInputGenerator.setup(gen)
    ParamInputGenerator.start(gen)
    try:
        deadline = time.monotonic() + 5.0
        first = None
        while first is None and time.monotonic() < deadline:
            first = ParamInputGenerator.next_message(gen)
            time.sleep(0.005)
        assert first is not None and first.name == "p"
        assert gen.running is True
    finally:
        ParamInputGenerator.stop(gen)
    assert gen.running is False
    assert ParamInputGenerator.next_message(gen) is None