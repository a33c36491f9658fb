[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nimp"
version = "0.1.0"
description = "Control core of a node-based live visuals engine: XML scene settings, MIDI/FFT parameter generators, an FFT toolkit and a flocking particle system"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "visuals",
    "vjing",
    "fft",
    "midi",
    "particles",
    "flocking",
    "node graph",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nimp = "nimp.app:main"

[tool.hatch.build.targets.wheel]
packages = ["nimp"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
