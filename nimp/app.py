"""The application core: generators, node views, key handling and the message loop."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, Union

from nimp.audio import AudioInputGenerator, AudioListenerInput
from nimp.midi import MidiInputGenerator
from nimp.params import Param, ParamInputGenerator
from nimp.settings import (
    DEFAULT_SETTINGS_FILE,
    AppSettings,
    InputGeneratorType,
    SettingsError,
    load_settings,
)

logger = logging.getLogger(__name__)

WINDOW_TITLE = "n.imp"
WINDOW_SIZE = (1600, 900)
FRAME_RATE = 30
BUFFER_SIZE = 256
SAMPLE_RATE = 44100

KEY_LEFT = 0x64 | 0x100
KEY_RIGHT = 0x66 | 0x100
FULL_SCREEN_KEY = ord("f")

# At most this many further messages are taken from one generator in one update,
# after the first.
_MAX_EXTRA_PARAMS_PER_UPDATE = 5

_DIGIT_VIEWS = {ord(str(digit)): (digit - 1) % 10 for digit in range(10)}

PathLike = Union[str, Path]
ParamHandler = Callable[[Param], None]


def build_generators(settings: AppSettings, config_dir: Optional[PathLike] = None) -> list[ParamInputGenerator]:
    """Create the parameter input generators the settings describe, in document order.

    OSC generators have no implementation here and are left out.
    """
    generators: list[ParamInputGenerator] = []
    for config in settings.input_generators:
        if config.type is InputGeneratorType.MIDI:
            generators.append(MidiInputGenerator(config.name, config.midi_device_name, config_dir))
        elif config.type is InputGeneratorType.FFT:
            generators.append(AudioInputGenerator(config.name, config_dir))
        else:
            logger.warning("input generator %r of type %s is not available", config.name, config.type.value)
    return generators


class App:
    """Holds the loaded node views and the generators that drive node parameters."""

    def __init__(self, settings: AppSettings, generators: Optional[Sequence[ParamInputGenerator]] = None) -> None:
        self.settings = settings
        self.node_views = list(settings.node_views)
        self.generators = list(generators) if generators is not None else []
        self.audio_listeners = [g for g in self.generators if isinstance(g, AudioListenerInput)]
        self.current_viewer = 0
        self.full_screen = False
        self.buffer_counter = 0

    def setup(self) -> None:
        """Configure and start every generator, then show the first node view."""
        for generator in self.generators:
            generator.setup()
        for generator in self.generators:
            generator.start()
        self.set_current_viewer(0)
        self.buffer_counter = 0

    def audio_in(self, samples: Sequence[float]) -> int:
        """Split interleaved stereo samples and offer them to every audio listener.

        Returns how many listeners accepted the buffer.
        """
        pairs = len(samples) // 2
        left = list(samples[0 : 2 * pairs : 2])
        right = list(samples[1 : 2 * pairs : 2])
        accepted = sum(1 for listener in self.audio_listeners if listener.fill_new_data(left, right))
        self.buffer_counter += 1
        return accepted

    def update(self, nodes: Mapping[str, ParamHandler]) -> list[Param]:
        """Deliver queued parameter messages to the nodes they name.

        Takes a bounded number of messages from each generator; messages for
        unknown nodes are discarded. Returns the delivered messages in order.
        """
        delivered: list[Param] = []
        for generator in self.generators:
            taken = 0
            while taken <= _MAX_EXTRA_PARAMS_PER_UPDATE:
                param = generator.next_message()
                if param is None:
                    break
                handler = nodes.get(param.image_input_name)
                if handler is not None:
                    handler(param)
                    delivered.append(param)
                taken += 1
        return delivered

    def status_line(self) -> str:
        """Position of the current node view and the navigation hint."""
        return f"  ({self.current_viewer + 1}/{len(self.node_views)})    switch layers <- ->"

    def key_pressed(self, key: Union[int, str]) -> bool:
        """Handle view navigation and full screen, then pass the key to every generator.

        Returns True when the key has a function in the application itself.
        """
        if isinstance(key, str):
            if len(key) != 1:
                raise ValueError(f"not a single key: {key!r}")
            key = ord(key)

        handled = True
        if key == KEY_LEFT:
            self.previous_viewer()
        elif key == KEY_RIGHT:
            self.next_viewer()
        elif key in _DIGIT_VIEWS:
            self.set_current_viewer(_DIGIT_VIEWS[key])
        elif key == FULL_SCREEN_KEY:
            self.full_screen = not self.full_screen
        else:
            handled = False
            logger.info("key function not available")

        for generator in self.generators:
            generator.key_pressed(key)
        return handled

    def next_viewer(self) -> None:
        """Show the next node view, wrapping to the first."""
        if self.node_views:
            self.set_current_viewer((self.current_viewer + 1) % len(self.node_views))

    def previous_viewer(self) -> None:
        """Show the previous node view, wrapping to the last."""
        if self.node_views:
            index = len(self.node_views) - 1 if self.current_viewer == 0 else self.current_viewer - 1
            self.set_current_viewer(index)

    def set_current_viewer(self, index: int) -> bool:
        """Show the node view at ``index``; returns False when there is none."""
        if 0 <= index < len(self.node_views):
            self.current_viewer = index
            return True
        logger.info("chosen viewer not available")
        return False


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load the settings, set the application up and report what was loaded."""
    parser = argparse.ArgumentParser(prog="nimp", description="Node-based live image mixer.")
    parser.add_argument("settings", nargs="?", default=DEFAULT_SETTINGS_FILE, help="application settings file")
    parser.add_argument("--config-dir", default=None, help="directory of the generator settings files")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except SettingsError as exc:
        print(f"ERROR LOADING XML: {exc}")
        return 1

    config_dir = args.config_dir if args.config_dir is not None else Path(args.settings).resolve().parent
    app = App(settings, build_generators(settings, config_dir))
    app.setup()
    try:
        print(WINDOW_TITLE)
        for position, view in enumerate(app.node_views, start=1):
            names = ", ".join(node.name for node in view.nodes)
            print(f"view {position}: {view.name} [{names}]")
        for generator in app.generators:
            print(f"generator: {generator.generator_name}")
        print(app.status_line())
    finally:
        for generator in app.generators:
            generator.stop()
    return 0