# mimicry

A tempo-synced multi-tap delay. Every tap runs through its own
phase-vocoder pitch shifter, and the shifted signal is what goes into
that tap's delay line, so feedback keeps shifting the pitch on each repeat.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Processing audio

`mimicry.processor.MimicProcessor` holds 16 delay heads. Each head `n` has
three parameters:

- `rhythmGain<n>` — the level of the tap in the wet signal (0 to 1, default 0)
- `pitchShift<n>` — the pitch shift in whole semitones (-24 to 24, default 0)
- `feedback<n>` — how much of the tap is added back to the input (0 to 1, default 0)

Head `n` is delayed by `n` subdivisions of a beat, capped at ten seconds.
The subdivision is `1 / division` of a beat (`division` is 1 to 16,
default 8). The tempo is the `bpm` parameter (30 to 200, default 120),
or, when `tempoSync` is on, the `host_bpm` passed to `process_block`
(120 if that is `None`). `mix` (default 0.5) sets the dry/wet balance.

```python
import numpy as np
from mimicry.processor import MimicProcessor

proc = MimicProcessor()
proc.prepare_to_play(48000.0, 512)
proc.set_parameter("rhythmGain1", 0.8)
proc.set_parameter("pitchShift1", 7)
proc.set_parameter("feedback1", 0.3)
proc.set_parameter("mix", 0.5)

block = np.zeros((1, 512), dtype=np.float32)
block[0, 0] = 1.0
proc.process_block(block, host_bpm=None)  # processes the block in place and returns it
```

`process_block` accepts a one-dimensional array or a `(channels, samples)`
array and processes only the first channel; a non-array input is copied
into a new float32 array. It raises `RuntimeError` if `prepare_to_play`
has not been called and `ValueError` if the block is longer than the size
given to `prepare_to_play`. `set_parameter` clamps values to the
parameter's range and raises `KeyError` for an unknown name;
`parameter(name)` reads a value back. `create_parameter_layout()` lists
every parameter as a `ParameterSpec`.

There is also an `outputGain` parameter; it is stored and saved with the
state, and `format_output_gain` gives its display text, but it is not
applied to the audio.

Only mono in and mono out is supported; see `is_layout_supported`.

`MimicProcessor(exact_phase=True)` makes the pitch shifters use exact
trigonometry instead of the polynomial approximations.

### Saving settings

```python
data = proc.state_bytes()
other = MimicProcessor()
loaded = other.load_state(data)  # True if the data was a saved state
```

`get_state_xml()` returns the same state as an `xml.etree.ElementTree`
element. `load_state` ignores data that is not a saved state and returns
`False` for it.

## Building blocks

- `mimicry.vocoder.MultiPhaseVocoder` — a set of pitch shifters fed from a
  single input stream. Call `push_sample` once per input sample, then
  `next_sample(i)` for each shifter. `set_pitch_shift_semitones(i, n)` sets
  the shift of shifter `i`; `delay()` returns the analysis hop size in
  samples. An out-of-range shifter index raises `IndexError`.
- `mimicry.phase` — the phase-correction step of the vocoder
  (`phase_correct` and `phase_correct_reference`), together with
  `normalize_angle`, `cos_approx` and `sin_approx`.
- `mimicry.delay.DelayLine` — a mono delay line with linear interpolation
  and a settable maximum delay.
- `mimicry.delay.MultiHeadDelayLine` — a circular buffer read by several
  heads, each with its own delay and gain; setting a head's delay again
  glides it over half a second instead of jumping.
- `mimicry.util.samples_per_subdivision` — converts a tempo and a note value
  into a whole number of samples.
- `mimicry.display` — the text shown by the controls (`value_to_percent`,
  `value_to_signed_int`, `mix_value_to_string`, `output_gain_to_string`),
  the choices of the division selector (`division_choices`), the colour
  constants, and `TempoDisplay`, which tracks whether the tempo readout
  shows the tempo or `snc`.

## What this package does not do

It does not open audio devices or read and write audio files, it is not
loadable as a plugin in a host, and it has no graphical editor: the
`mimicry.display` module only produces the text such an editor would show.
You supply sample blocks to `MimicProcessor.process_block` yourself.