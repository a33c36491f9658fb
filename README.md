# nimp

`nimp` is the control core of a node-based live visuals engine. It reads a
scene description from XML, builds the parameter input generators that drive
the scene (MIDI mappings and audio FFT analysis), routes the parameters they
produce to named nodes, and offers a flocking particle system and a small FFT
toolkit to feed visuals from sound. It depends on nothing outside the
standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## The `nimp` command

```
nimp [settings] [--config-dir DIR]
```

`settings` is the scene settings file (default `appSettings.xml`).
`--config-dir` is the directory holding the generator settings files
`paramGen_<name>.xml`; by default it is the directory of the settings file.

The command loads the scene, creates and sets up its parameter generators,
prints the node views with the nodes each one shows, the names of the
generators and the status line of the first view, then stops the generators
and exits with status 0. If the scene cannot be loaded it prints
`ERROR LOADING XML: <reason>` and exits with status 1.

## Scene settings

`nimp.settings.parse_settings` turns the XML text of a scene into an
`AppSettings` value; `load_settings` does the same from a file path. A broken
or incomplete scene raises `SettingsError` (a `ValueError`) whose message names
the problem: an unreadable file, a missing `MAIN_SETTINGS`, `SETTINGS`,
`INPUTS`, `VISUAL_LAYERS`, `NODE_VIEWS`, `PARAM_INPUT_GENERATORS` or
`SYPHON_SERVERS` section, an unknown input, layer, mixer or generator type, a
video input without videos, or a reference to a node that does not exist. The
`MIXERS` section may be left out.

```python
from nimp.settings import SettingsError, load_settings

try:
    settings = load_settings("appSettings.xml")
except SettingsError as err:
    print(f"cannot load scene: {err}")
```

The kinds of scene elements are the enums `InputType`, `VisualLayerType`,
`MixerType` and `InputGeneratorType`; the records are `InputConfig`,
`VisualLayerConfig`, `MixerConfig`, `NodeViewConfig`, `NodeConfig`,
`InputGenConfig` and `ServerConfig`. Type-specific attributes (bpm, glitch
flags, blend options and so on) are collected in each record's `options`
dictionary. `AppSettings.all_nodes()` lists inputs, layers and mixers in
document order and `AppSettings.nodes` indexes them by name.

## The application core

`nimp.app.build_generators(settings, config_dir)` creates a
`MidiInputGenerator` or `AudioInputGenerator` for each generator in the
scene. `nimp.app.App` holds the node views and generators:

- `setup()` configures and starts the generators and selects the first view;
- `audio_in(samples)` splits interleaved stereo samples and offers them to
  every audio generator, returning how many accepted them;
- `update(nodes)` takes queued messages from each generator (at most six per
  generator per call) and hands each to the callable registered for its node
  name in `nodes`; messages for unknown nodes are dropped;
- `key_pressed(key)` steps through views with the arrow key codes
  `KEY_LEFT` / `KEY_RIGHT`, jumps to a view with `1`–`9` and `0`, toggles the
  `full_screen` flag with `f`, and passes every key on to the generators;
- `next_viewer()`, `previous_viewer()`, `set_current_viewer(index)` and
  `status_line()` manage and describe the current view.

## Parameter generators

Each generator is a `nimp.params.ParamInputGenerator`. It keeps a short queue
of `Param` messages addressed to a node (when more than ten are waiting the
oldest is dropped); `next_message` hands them out one by one. Threaded
generators run `process_input` on a worker thread between `start()` and
`stop()`. Values are scaled from the input range to the parameter range with
`map_range`.

- `nimp.midi.MidiInputGenerator` maps controller numbers to node parameters
  through switchable mapping banks read from `paramGen_<name>.xml`. Control
  changes are delivered by calling `new_midi_message(control, value)`; the keys
  `m` and `n` select the next and previous bank.
- `nimp.audio.AudioInputGenerator` receives stereo buffers through
  `fill_new_data`, analyses the left channel with a Hanning-windowed FFT and
  maps band magnitudes (capped at 50) to parameters.

Mappings are described by `nimp.mappings.MidiMap` and `AudioMap`, and can be
read directly with `parse_midi_maps` and `parse_audio_maps`.

## FFT toolkit

`nimp.fft` provides a complex `fft`, `real_fft`, `power_spectrum`, the
rectangular, Bartlett, Hamming and Hanning windows (`apply_window`,
`window_func_name`, `num_window_funcs`) and a `SpectrumAnalyzer` whose
`power_spectrum` returns magnitude, phase, power and average power of a
windowed block as a `Spectrum`, and whose `inverse_power_spectrum`
overlap-adds a resynthesised window into an output buffer.

```python
import math
from nimp.fft import SpectrumAnalyzer

samples = [math.sin(2 * math.pi * 8 * i / 256) for i in range(256)]
spectrum = SpectrumAnalyzer().power_spectrum(samples, 0, 128, 256)
```

## Particles

`nimp.particle_system.ParticleSystem` keeps a set of `nimp.particle.Particle`
objects that flock (separation, alignment, cohesion), feel damping, bounce off
the walls of their area and expire after their lifetime. External forces can
be applied to the whole system with `add_force`, `add_repulsion_force` and
`add_attraction_force`, or through a `ParticleForce` and its `apply_to`
method. `draw()` returns `(x, y, radius, alpha)` for every particle.

```python
from nimp.particle_system import ParticleSystem

system = ParticleSystem(50, width=640, height=480, min_size=4, max_size=10)
for _ in range(30):
    system.update()
circles = system.draw()
```

## What the package does not do

- It opens no window and renders nothing: image inputs (video, camera, image
  lists, particles), visual layers and mixers are read from the scene as
  configuration only, and no image processing or blending takes place.
- It does not publish images to other applications; `SYPHON_SERVERS` entries
  are checked and kept as `ServerConfig` records only.
- It does not open MIDI devices or capture audio; MIDI messages and audio
  buffers must be fed in by the caller.
- `OSC` generators are accepted in the scene but not created; they are left
  out with a warning.
- The `nimp` command is not interactive: it reports the loaded scene and exits.