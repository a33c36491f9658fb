"""Control core of a node-based live visuals engine: scene settings, parameter generators, FFT and particles."""

__version__ = "0.1.0"

__all__ = [
    "app",
    "audio",
    "fft",
    "mappings",
    "midi",
    "params",
    "particle",
    "particle_system",
    "settings",
]