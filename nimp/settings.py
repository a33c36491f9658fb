"""Reading the application settings document: inputs, layers, mixers, views and generators."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Union

DEFAULT_SETTINGS_FILE = "appSettings.xml"

_PROLOG = re.compile(r"^\s*<\?xml[^>]*\?>")
_INT = re.compile(r"\s*([+-]?\d+)")
_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

PathLike = Union[str, Path]
Options = dict[str, Union[bool, int, float, str]]


class SettingsError(ValueError):
    """The settings document is missing, malformed or inconsistent."""


class InputType(Enum):
    """Kinds of image sources."""

    VIDEO = "VIDEO"
    CAM = "CAM"
    IMAGE = "IMAGE"
    PARTICLE = "PARTICLE"


class VisualLayerType(Enum):
    """Kinds of image-processing layers."""

    IKEDA = "IKEDA"
    GLITCH_1 = "GLITCH_1"
    GLITCH_2 = "GLITCH_2"
    IMAGE_PROCESSOR = "IMAGE_PROCESSOR"


class MixerType(Enum):
    """Kinds of mixers combining several nodes."""

    SIMPLE_BLEND = "SIMPLE_BLEND"
    MASK = "MASK"
    MULTI_CHANNEL = "MULTI_CHANNEL"


class InputGeneratorType(Enum):
    """Kinds of parameter input generators."""

    MIDI = "MIDI"
    FFT = "FFT"
    OSC = "OSC"


@dataclass
class InputConfig:
    """An image source node."""

    name: str
    type: InputType
    videos: list[str] = field(default_factory=list)
    assets: list[tuple[str, str]] = field(default_factory=list)
    options: Options = field(default_factory=dict)


@dataclass
class VisualLayerConfig:
    """A processing layer fed by one other node."""

    name: str
    type: VisualLayerType
    input_source: str
    options: Options = field(default_factory=dict)


@dataclass
class MixerConfig:
    """A mixer fed by several other nodes."""

    name: str
    type: MixerType
    input_sources: list[str] = field(default_factory=list)
    options: Options = field(default_factory=dict)


@dataclass
class NodeConfig:
    """Placement of one node inside a node view."""

    name: str
    x: int = 20
    y: int = 20
    gui_x: int = 20
    gui_y: int = 20
    gui_width: int = 120
    image_scale: float = 1.0


@dataclass
class NodeViewConfig:
    """A named screen showing a selection of nodes."""

    name: str
    nodes: list[NodeConfig] = field(default_factory=list)


@dataclass
class InputGenConfig:
    """A parameter input generator."""

    name: str
    type: InputGeneratorType
    midi_device_name: str = "Oxygen 25"


@dataclass
class ServerConfig:
    """Publication of one node's image under an export name."""

    input_name: str = "mainMix"
    export_name: str = "syphon1"


NodeSettings = Union[InputConfig, VisualLayerConfig, MixerConfig]


@dataclass
class AppSettings:
    """Everything the settings document describes."""

    inputs: list[InputConfig] = field(default_factory=list)
    visual_layers: list[VisualLayerConfig] = field(default_factory=list)
    mixers: list[MixerConfig] = field(default_factory=list)
    node_views: list[NodeViewConfig] = field(default_factory=list)
    input_generators: list[InputGenConfig] = field(default_factory=list)
    servers: list[ServerConfig] = field(default_factory=list)

    def all_nodes(self) -> list[NodeSettings]:
        """Inputs, then visual layers, then mixers, in document order."""
        return [*self.inputs, *self.visual_layers, *self.mixers]

    @property
    def nodes(self) -> dict[str, NodeSettings]:
        """Nodes by name; when names repeat, the first node keeps the name."""
        by_name: dict[str, NodeSettings] = {}
        for node in self.all_nodes():
            by_name.setdefault(node.name, node)
        return by_name


def _to_int(text: str) -> int:
    match = _INT.match(text)
    return int(match.group(1)) if match else 0


def _to_float(text: str) -> float:
    match = _FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def _to_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    match = _INT.match(lowered)
    return bool(match) and int(match.group(1)) == 1


Converter = Callable[[str], Union[bool, int, float]]
_OptionSpec = tuple[str, str, Converter, str]

_IMAGE_OPTIONS: tuple[_OptionSpec, ...] = (
    ("bpm", "bpm", _to_float, "120"),
    ("bpm_multiplier", "multiplier_divider", _to_int, "32"),
    ("is_playing", "isPlaying", _to_bool, "true"),
    ("is_palindrom_loop", "palindrom", _to_bool, "true"),
    ("is_match_bpm_to_sequence_length", "matchBPMtoSequence", _to_bool, "false"),
)

_PARTICLE_OPTIONS: tuple[_OptionSpec, ...] = (
    ("is_clear_bg", "isClearBg", _to_bool, "true"),
    ("alpha_particles", "alphaParticles", _to_float, "0.4"),
    ("auto_gen_particle", "autoGenParticle", _to_bool, "false"),
    ("auto_gen_amount", "autoGenAmount", _to_float, "0.0"),
    ("unity_scale", "unityScale", _to_bool, "false"),
    ("min_radius", "minRadius", _to_float, "4"),
    ("max_radius", "maxRadius", _to_float, "10"),
    ("min_lifetime", "minLifetime", _to_float, "0"),
    ("max_lifetime", "maxLifetime", _to_float, "0"),
)

_IKEDA_OPTIONS: tuple[_OptionSpec, ...] = (
    ("is_canny", "isCanny", _to_bool, "true"),
    ("is_threshold", "isThreshold", _to_bool, "true"),
    ("is_columns", "isColumns", _to_bool, "true"),
    ("is_invert", "isInvert", _to_bool, "true"),
    ("n_columns", "pNColumns", _to_int, "4"),
    ("canny_x", "pCannyX", _to_int, "12"),
    ("canny_y", "pCannyY", _to_int, "12"),
    ("threshold", "pThreshold", _to_int, "12"),
)

_GLITCH_FLAGS = (
    "do_CONVERGENCE", "do_GLOW", "do_SHAKER", "do_CUTSLIDER", "do_TWIST",
    "do_OUTLINE", "do_NOISE", "do_SLITSCAN", "do_SWELL", "do_INVERT",
    "do_CR_HIGHCONTRAST", "do_CR_BLUERAISE", "do_CR_REDRAISE", "do_CR_GREENRAISE",
    "do_CR_BLUEINVERT", "do_CR_REDINVERT", "do_CR_GREENINVERT",
)
_GLITCH_OPTIONS: tuple[_OptionSpec, ...] = tuple(
    (flag.lower(), flag, _to_bool, "false") for flag in _GLITCH_FLAGS
)

_GLITCH_ALT_OPTIONS: tuple[_OptionSpec, ...] = (
    ("dq", "dq", _to_int, "20"),
    ("qn", "qn", _to_int, "40"),
    ("dht", "dht", _to_int, "80"),
)

_BLEND_OPTIONS: tuple[_OptionSpec, ...] = (
    ("selector_left", "selectorLeft", _to_int, "0"),
    ("selector_right", "selectorRight", _to_int, "0"),
    ("blend_mode", "blendmode", _to_int, "0"),
    ("opacity", "opacity", _to_float, "0"),
)


def _read_options(element: ET.Element, specs: tuple[_OptionSpec, ...]) -> Options:
    return {key: convert(element.get(attr, default)) for key, attr, convert, default in specs}


def _single(parent: ET.Element, tag: str, message: str) -> ET.Element:
    found = parent.findall(tag)
    if len(found) != 1:
        raise SettingsError(message)
    return found[0]


def _parse_document(text: str) -> ET.Element:
    body = _PROLOG.sub("", text, count=1)
    try:
        return ET.fromstring(f"<document>{body}</document>")
    except ET.ParseError as exc:
        raise SettingsError("file not loaded!") from exc


def _parse_input(element: ET.Element) -> InputConfig:
    name = element.get("name", "default")
    try:
        kind = InputType(element.get("type", "CAM"))
    except ValueError:
        raise SettingsError("unknown input type!") from None

    config = InputConfig(name=name, type=kind)
    if kind is InputType.VIDEO:
        config.videos = [video.get("path", "default") for video in element.findall("VIDEO")]
        if not config.videos:
            raise SettingsError("no videos to be loaded!")
    elif kind is InputType.CAM:
        config.options = {"camera_id": element.get("id", "default")}
    elif kind is InputType.IMAGE:
        path = element.get("path", "none")
        if path == "none":
            config.assets = [
                (asset.get("name", "default"), asset.get("path", "default"))
                for asset in element.findall("ASSET")
            ]
            if not config.assets:
                raise SettingsError("no videos to be loaded!")
        else:
            config.assets = [(name, path)]
        config.options = _read_options(element, _IMAGE_OPTIONS)
    else:
        config.options = _read_options(element, _PARTICLE_OPTIONS)
    return config


_LAYER_OPTIONS = {
    VisualLayerType.IKEDA: _IKEDA_OPTIONS,
    VisualLayerType.GLITCH_1: _GLITCH_OPTIONS,
    VisualLayerType.GLITCH_2: _GLITCH_ALT_OPTIONS,
    VisualLayerType.IMAGE_PROCESSOR: (),
}


def _parse_layer(element: ET.Element) -> VisualLayerConfig:
    try:
        kind = VisualLayerType(element.get("type", "IKEDA"))
    except ValueError:
        raise SettingsError("unknown visual layer type!") from None
    return VisualLayerConfig(
        name=element.get("name", "default"),
        type=kind,
        input_source=element.get("inputSource", "default"),
        options=_read_options(element, _LAYER_OPTIONS[kind]),
    )


def _parse_mixer(element: ET.Element, position: int, known: set[str]) -> MixerConfig:
    try:
        kind = MixerType(element.get("type", "SIMPLE_BLEND"))
    except ValueError:
        raise SettingsError("unknown mixer type!") from None

    sources = element.findall("INPUT_SOURCE")
    config = MixerConfig(
        name=element.get("name", "default"),
        type=kind,
        input_sources=[source.get("name", "default") for source in sources],
    )
    if kind is MixerType.SIMPLE_BLEND:
        config.options = _read_options(element, _BLEND_OPTIONS)
    elif kind is MixerType.MULTI_CHANNEL:
        # The channel is read from the input source at the mixer's own position.
        channel = sources[position].get("selChannel", "0") if position < len(sources) else "0"
        config.options = {"sel_channel": _to_int(channel)}
        if any(source not in known for source in config.input_sources):
            raise SettingsError("node not found!")
    return config


def _parse_node(element: ET.Element) -> NodeConfig:
    return NodeConfig(
        name=element.get("name", "default"),
        x=_to_int(element.get("x", "20")),
        y=_to_int(element.get("y", "20")),
        gui_x=_to_int(element.get("guiX", "20")),
        gui_y=_to_int(element.get("guiY", "20")),
        gui_width=_to_int(element.get("guiWidth", "120")),
        image_scale=_to_float(element.get("imageScale", "1")),
    )


def _parse_generator(element: ET.Element) -> InputGenConfig:
    try:
        kind = InputGeneratorType(element.get("type", "MIDI"))
    except ValueError:
        raise SettingsError("unknown input generator type!") from None
    return InputGenConfig(
        name=element.get("name", "default"),
        type=kind,
        midi_device_name=element.get("midiDeviceName", "Oxygen 25"),
    )


def parse_settings(text: str) -> AppSettings:
    """Parse a settings document; raises SettingsError where it cannot be used."""
    root = _parse_document(text)
    main = _single(root, "MAIN_SETTINGS", "missing MAIN_SETTINGS tag!")
    block = _single(main, "SETTINGS", "missing SETTINGS tag!")
    result = AppSettings()
    known: set[str] = set()

    inputs = _single(block, "INPUTS", "inputs tag missing")
    for element in inputs.findall("INPUT"):
        config = _parse_input(element)
        result.inputs.append(config)
        known.add(config.name)

    layers = _single(block, "VISUAL_LAYERS", "visual layers tag missing")
    for element in layers.findall("VISUAL_LAYER"):
        layer = _parse_layer(element)
        result.visual_layers.append(layer)
        known.add(layer.name)

    mixer_blocks = block.findall("MIXERS")
    if len(mixer_blocks) == 1:
        for position, element in enumerate(mixer_blocks[0].findall("MIXER")):
            mixer = _parse_mixer(element, position, known)
            result.mixers.append(mixer)
            known.add(mixer.name)

    views = _single(main, "NODE_VIEWS", "missing NODE_VIEWS tag!")
    for view_element in views.findall("NODE_VIEW"):
        view = NodeViewConfig(name=view_element.get("name", "default"))
        for node_element in view_element.findall("NODE"):
            node = _parse_node(node_element)
            if node.name not in known:
                raise SettingsError("node not found!")
            view.nodes.append(node)
        result.node_views.append(view)

    generators = _single(main, "PARAM_INPUT_GENERATORS", "missing PARAM_INPUT_GENERATORS tag!")
    result.input_generators = [_parse_generator(e) for e in generators.findall("INPUT_GEN")]

    servers = _single(main, "SYPHON_SERVERS", "missing SYPHON_SERVERS tag!")
    for element in servers.findall("SERVER"):
        server = ServerConfig(
            input_name=element.get("inputName", "mainMix"),
            export_name=element.get("exportName", "syphon1"),
        )
        if server.input_name not in known:
            raise SettingsError("node not found!")
        result.servers.append(server)

    return result


def load_settings(path: PathLike = DEFAULT_SETTINGS_FILE) -> AppSettings:
    """Read and parse the settings file at ``path``."""
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise SettingsError("file not loaded!") from exc
    return parse_settings(text)