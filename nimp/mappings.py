"""Mappings from audio bands and MIDI controls to node parameters."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum

_PROLOG = re.compile(r"^\s*<\?xml[^>]*\?>")
_INT = re.compile(r"\s*([+-]?\d+)")
_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class AudioFeature(Enum):
    """Audio features a mapping can follow."""

    VOLUME = 0
    PITCH = 1


@dataclass
class AudioMap:
    """Maps the magnitude of one spectrum band onto a node parameter."""

    band: int = 1
    node_id: str = ""
    param_id: str = ""
    input_min_value: float = 0.0
    input_max_value: float = 127.0
    param_min_value: int = 0
    param_max_value: int = 127


@dataclass
class MidiMap:
    """Maps one MIDI control onto a node parameter."""

    control: int = 0
    node_id: str = ""
    param_id: str = ""
    input_min_value: int = 0
    input_max_value: int = 127
    param_min_value: int = 0
    param_max_value: int = 127


def _to_int(text: str) -> int:
    match = _INT.match(text)
    return int(match.group(1)) if match else 0


def _to_float(text: str) -> float:
    match = _FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def _parse_document(text: str) -> ET.Element:
    body = _PROLOG.sub("", text, count=1)
    try:
        return ET.fromstring(f"<document>{body}</document>")
    except ET.ParseError as exc:
        raise ValueError(f"malformed settings document: {exc}") from exc


def parse_audio_maps(text: str) -> list[AudioMap]:
    """Read the AUDIO_MAP entries of an FFT_SETTINGS document."""
    settings = _parse_document(text).find("FFT_SETTINGS")
    if settings is None:
        return []
    return [
        AudioMap(
            band=_to_int(entry.get("band", "1")),
            node_id=entry.get("nodeName", ""),
            param_id=entry.get("param", ""),
            input_min_value=float(_to_int(entry.get("inputMinValue", "0"))),
            input_max_value=float(_to_int(entry.get("inputMaxValue", "127"))),
            param_min_value=_to_int(entry.get("paramMinValue", "0")),
            param_max_value=_to_int(entry.get("paramMaxValue", "127")),
        )
        for entry in settings.findall("AUDIO_MAP")
    ]


def parse_midi_maps(text: str) -> list[dict[int, list[MidiMap]]]:
    """Read the MAIN_MIDI_MAP banks of a MIDI_SETTINGS document.

    Each bank maps a control number to its mappings in document order.
    """
    settings = _parse_document(text).find("MIDI_SETTINGS")
    if settings is None:
        return []
    banks: list[dict[int, list[MidiMap]]] = []
    for bank_element in settings.findall("MAIN_MIDI_MAP"):
        bank: dict[int, list[MidiMap]] = {}
        for entry in bank_element.findall("MIDI_MAP"):
            mapping = MidiMap(
                control=_to_int(entry.get("midiId", "0")),
                node_id=entry.get("nodeName", ""),
                param_id=entry.get("param", ""),
                input_min_value=_to_int(entry.get("inputMinValue", "0")),
                input_max_value=_to_int(entry.get("inputMaxValue", "127")),
                param_min_value=_to_int(entry.get("paramMinValue", "0")),
                param_max_value=_to_int(entry.get("paramMaxValue", "127")),
            )
            bank.setdefault(mapping.control, []).append(mapping)
        banks.append(bank)
    return banks