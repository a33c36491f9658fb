"""Parameter generator driven by MIDI control changes."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from nimp.mappings import MidiMap, parse_midi_maps
from nimp.params import Param, ParamInputGenerator, map_range

PathLike = Union[str, Path]

NEXT_MAP_KEY = ord("m")
PREVIOUS_MAP_KEY = ord("n")


class MidiInputGenerator(ParamInputGenerator):
    """Maps incoming MIDI control values onto node parameters.

    Mappings come in banks; one bank is active at a time and the keys
    ``m`` and ``n`` step forwards and backwards through them.
    """

    def __init__(self, name: str, device_name: str = "Oxygen 25", config_dir: Optional[PathLike] = None) -> None:
        super().__init__(name, threaded=False)
        self.device_name = device_name
        self.config_dir = Path(config_dir) if config_dir is not None else Path.cwd()
        self.midi_maps: list[dict[int, list[MidiMap]]] = []
        self.active_midi_map = 0
        self.last_message: Optional[tuple[int, int]] = None

    @property
    def config_path(self) -> Path:
        """Location of this generator's settings file."""
        return self.config_dir / f"paramGen_{self.generator_name}.xml"

    def process_input(self) -> None:
        """Messages arrive through :meth:`new_midi_message`; nothing to poll."""

    def setup_from_xml(self) -> bool:
        """Load the mapping banks, if the settings file exists, and activate the first."""
        if self.config_path.is_file():
            self.midi_maps = parse_midi_maps(self.config_path.read_text())
            self.active_midi_map = 0
        return True

    def new_midi_message(self, control: int, value: int) -> None:
        """Queue one message for every mapping of ``control`` in the active bank.

        Raises IndexError when no mapping bank is loaded.
        """
        self.last_message = (control, value)
        bank = self.midi_maps[self.active_midi_map]
        for mapping in bank.get(control, []):
            mapped = map_range(
                value,
                mapping.input_min_value,
                mapping.input_max_value,
                mapping.param_min_value,
                mapping.param_max_value,
            )
            self.store_message(Param(image_input_name=mapping.node_id, name=mapping.param_id, int_val=int(mapped)))

    def key_pressed(self, key: Union[int, str]) -> None:
        """Switch mapping banks with ``m`` (next) and ``n`` (previous)."""
        if isinstance(key, str):
            if len(key) != 1:
                return
            key = ord(key)
        if key == NEXT_MAP_KEY:
            self.next_midi_map()
        elif key == PREVIOUS_MAP_KEY:
            self.prev_midi_map()

    def next_midi_map(self) -> None:
        """Activate the next bank, wrapping to the first."""
        if not self.midi_maps:
            return
        self.active_midi_map = (self.active_midi_map + 1) % len(self.midi_maps)

    def prev_midi_map(self) -> None:
        """Activate the previous bank, wrapping to the last."""
        if not self.midi_maps:
            return
        self.active_midi_map = (self.active_midi_map - 1) % len(self.midi_maps)