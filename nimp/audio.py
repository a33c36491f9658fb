"""Parameter generators driven by live audio input."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Union

from nimp.fft import SpectrumAnalyzer
from nimp.mappings import AudioMap, parse_audio_maps
from nimp.params import Param, ParamInputGenerator, map_range

BUFFER_SIZE = 256
MAX_MAGNITUDE = 50.0

PathLike = Union[str, Path]


class AudioListenerInput(ParamInputGenerator):
    """Threaded generator that receives audio buffers handed over from the audio callback.

    A buffer is accepted only while no unprocessed buffer is pending; the worker
    thread consumes it and then releases it with :meth:`dispose_data`.
    """

    def __init__(self, name: str, config_dir: Optional[PathLike] = None) -> None:
        super().__init__(name, threaded=True)
        self.config_dir = Path(config_dir) if config_dir is not None else Path.cwd()
        self.left: Optional[list[float]] = None
        self.right: Optional[list[float]] = None
        self.buffer_len = 0
        self.has_new_data = False
        self.data_processed = False

    def process_input(self) -> None:
        """A plain listener does nothing with the audio it receives."""

    def setup_from_xml(self) -> bool:
        """A plain listener has no configuration to load."""
        return True

    def fill_new_data(self, left: Sequence[float], right: Sequence[float]) -> bool:
        """Hand over a stereo buffer; returns False when a previous one is still pending."""
        with self.lock:
            if self.has_new_data:
                return False
            self.left = [float(v) for v in left]
            self.right = [float(v) for v in right]
            self.buffer_len = len(self.left)
            self.has_new_data = True
            self.data_processed = False
            return True

    def dispose_data(self) -> None:
        """Release the pending buffer so a new one can be accepted."""
        with self.lock:
            self.left = None
            self.right = None
            self.buffer_len = 0
            self.has_new_data = False
            self.data_processed = False


class AudioInputGenerator(AudioListenerInput):
    """Turns the spectrum of incoming audio into parameter messages."""

    def __init__(self, name: str, config_dir: Optional[PathLike] = None) -> None:
        super().__init__(name, config_dir)
        self.audio_map: list[AudioMap] = []
        self._analyzer = SpectrumAnalyzer()

    @property
    def config_path(self) -> Path:
        """Location of this generator's settings file."""
        return self.config_dir / f"paramGen_{self.generator_name}.xml"

    def setup_from_xml(self) -> bool:
        """Load the band-to-parameter mappings, if the settings file exists."""
        self.audio_map = []
        if self.config_path.is_file():
            self.audio_map = parse_audio_maps(self.config_path.read_text())
        with self.lock:
            self.has_new_data = False
            self.data_processed = False
        return True

    def process_input(self) -> None:
        """Analyse the pending left channel and queue one message per mapping."""
        with self.lock:
            if not self.has_new_data or self.data_processed or self.left is None:
                return
            window_size = len(self.left)
            spectrum = self._analyzer.power_spectrum(self.left, 0, window_size // 2, window_size)
            magnitude = spectrum.magnitude
            for mapping in self.audio_map:
                band = mapping.band
                level = magnitude[band] if 0 <= band < len(magnitude) else 0.0
                level = min(level, MAX_MAGNITUDE)
                if 0 <= band < len(magnitude):
                    magnitude[band] = level
                value = map_range(
                    level,
                    mapping.input_min_value,
                    mapping.input_max_value,
                    mapping.param_min_value,
                    mapping.param_max_value,
                )
                self.store_message(
                    Param(image_input_name=mapping.node_id, name=mapping.param_id, int_val=int(value))
                )
            self.dispose_data()