"""The mimicry effect: tempo-synced delay taps, each with its own pitch shift and feedback."""

import math
import struct
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np

from mimicry.delay import DelayLine
from mimicry.util import samples_per_subdivision
from mimicry.vocoder import MultiPhaseVocoder

NUM_DELAY_LINES = 16
MIN_TEMPO = 30.0
MAX_TEMPO = 200.0
DEFAULT_SYNC_TEMPO = 120.0
MAX_DELAY_SECONDS = 10

STATE_TAG = "Mimicry"
STATE_VERSION = 1
_XML_MAGIC = 0x21324356
_XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'


class ParameterKind(Enum):
    FLOAT = "float"
    INT = "int"
    BOOL = "bool"


@dataclass(frozen=True)
class ParameterSpec:
    """Description of one automatable parameter."""

    id: str
    name: str
    kind: ParameterKind
    minimum: float
    maximum: float
    default: float
    interval: float = 0.0
    skew: float = 1.0
    to_text: Optional[Callable[[float, int], str]] = None

    def constrain(self, value: float) -> float:
        """Return ``value`` limited to the range and snapped to a legal value."""
        value = float(value)
        if self.kind is ParameterKind.BOOL:
            return 1.0 if value >= 0.5 else 0.0
        value = min(max(value, self.minimum), self.maximum)
        if self.kind is ParameterKind.INT:
            return float(round(value))
        if self.interval > 0:
            steps = math.floor((value - self.minimum) / self.interval + 0.5)
            value = min(max(self.minimum + self.interval * steps, self.minimum), self.maximum)
        return value

    def text(self, value: float, length: int = 1024) -> str:
        """Render ``value`` as display text of at most ``length`` characters."""
        if self.to_text is not None:
            return self.to_text(value, length)
        return str(value)[: max(length, 0)]


def format_output_gain(value: float, length: int) -> str:
    """Display text for the output gain: one decimal place in dB, or ``-inf``."""
    text = "-inf" if value <= -60.0 else f"{value:.1f} dB"
    return text[: max(length, 0)]


def create_parameter_layout() -> list[ParameterSpec]:
    """Return every parameter of the effect in registration order."""
    specs = [
        ParameterSpec("bpm", "BPM", ParameterKind.FLOAT, MIN_TEMPO, MAX_TEMPO, 120.0),
        ParameterSpec("tempoSync", "Tempo Sync", ParameterKind.BOOL, 0.0, 1.0, 0.0),
        ParameterSpec("mix", "Mix", ParameterKind.FLOAT, 0.0, 1.0, 0.5),
        ParameterSpec("division", "Division", ParameterKind.INT, 1.0, 16.0, 8.0, interval=1.0),
        ParameterSpec(
            "outputGain",
            "Output Gain",
            ParameterKind.FLOAT,
            0.0,
            1.0,
            0.75,
            interval=0.0001,
            skew=0.3,
            to_text=format_output_gain,
        ),
    ]
    for i in range(NUM_DELAY_LINES):
        specs.append(
            ParameterSpec(
                f"rhythmGain{i}", f"Rhythm Gain {i}", ParameterKind.FLOAT, 0.0, 1.0, 0.0, interval=0.0001, skew=1.3
            )
        )
        specs.append(
            ParameterSpec(f"pitchShift{i}", f"Pitch Shift {i}", ParameterKind.INT, -24.0, 24.0, 0.0, interval=1.0)
        )
        specs.append(ParameterSpec(f"feedback{i}", f"Feedback {i}", ParameterKind.FLOAT, 0.0, 1.0, 0.0))
    return specs


def is_layout_supported(input_channels: int, output_channels: int) -> bool:
    """Only mono in and mono out is supported."""
    return input_channels == 1 and input_channels == output_channels


class MimicProcessor:
    """Mono delay effect whose taps are spaced by a tempo subdivision and pitch shifted."""

    name = "mimicry"
    accepts_midi = False
    produces_midi = False
    is_midi_effect = False
    tail_length_seconds = 0.0

    def __init__(self, exact_phase: bool = False):
        self.layout = create_parameter_layout()
        self._specs = {spec.id: spec for spec in self.layout}
        self._values = {spec.id: float(spec.default) for spec in self.layout}
        self._delay_lines = [DelayLine() for _ in range(NUM_DELAY_LINES)]
        self._pitch_shifters = MultiPhaseVocoder(NUM_DELAY_LINES, exact_phase=exact_phase)
        self._sample_rate: Optional[float] = None
        self._block_size = 0
        self._max_delay = 0

    @property
    def sample_rate(self) -> Optional[float]:
        """Sample rate given to :meth:`prepare_to_play`, or ``None`` before it."""
        return self._sample_rate

    def parameter(self, name: str) -> float:
        """Return the current plain value of a parameter."""
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"unknown parameter {name!r}") from None

    def set_parameter(self, name: str, value: float) -> None:
        """Set a parameter, limiting the value to its legal range."""
        try:
            spec = self._specs[name]
        except KeyError:
            raise KeyError(f"unknown parameter {name!r}") from None
        self._values[name] = spec.constrain(value)

    def prepare_to_play(self, sample_rate: float, samples_per_block: int) -> None:
        """Allocate the delay lines for up to ten seconds of delay at ``sample_rate``."""
        if sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {sample_rate}")
        if samples_per_block < 0:
            raise ValueError(f"block size must not be negative, got {samples_per_block}")
        self._sample_rate = float(sample_rate)
        self._block_size = int(samples_per_block)
        self._max_delay = int(MAX_DELAY_SECONDS * sample_rate)
        for line in self._delay_lines:
            line.reset()
            line.set_maximum_delay(self._max_delay)

    def _effective_bpm(self, host_bpm: Optional[float]) -> float:
        if self._values["tempoSync"] > 0.5:
            return DEFAULT_SYNC_TEMPO if host_bpm is None else float(host_bpm)
        return self._values["bpm"]

    def process_block(self, buffer, host_bpm: Optional[float] = None):
        """Process the first channel of ``buffer`` in place and return the buffer.

        ``buffer`` is a mono array or a (channels, samples) array; other inputs are
        copied into a new float32 array. ``host_bpm`` is the host tempo used while
        tempo sync is on.
        """
        if self._sample_rate is None:
            raise RuntimeError("prepare_to_play must be called before process_block")
        block = buffer if isinstance(buffer, np.ndarray) else np.array(buffer, dtype=np.float32)
        if block.ndim not in (1, 2):
            raise ValueError(f"buffer must be one- or two-dimensional, got {block.ndim} dimensions")
        if block.ndim == 2 and block.shape[0] == 0:
            return block
        channel = block if block.ndim == 1 else block[0]
        if len(channel) > self._block_size:
            raise ValueError(f"block of {len(channel)} samples exceeds the prepared size {self._block_size}")

        mix = self._values["mix"]
        division = self._values["division"]
        spacing = samples_per_subdivision(self._effective_bpm(host_bpm), self._sample_rate, 1.0 / division)

        for index, line in enumerate(self._delay_lines):
            line.set_delay(float(min(index * spacing, self._max_delay)))
            semitones = int(self._values[f"pitchShift{index}"])
            self._pitch_shifters.set_pitch_shift_semitones(index, float(semitones))

        gains = [self._values[f"rhythmGain{i}"] for i in range(NUM_DELAY_LINES)]
        feedbacks = [self._values[f"feedback{i}"] for i in range(NUM_DELAY_LINES)]
        shifters = self._pitch_shifters

        for position, raw in enumerate(channel.tolist()):
            popped = [line.pop_sample() for line in self._delay_lines]
            with_feedback = raw + sum(sample * amount for sample, amount in zip(popped, feedbacks))
            shifters.push_sample(with_feedback)

            summed = 0.0
            for head, (line, delayed, gain) in enumerate(zip(self._delay_lines, popped, gains)):
                line.push_sample(shifters.next_sample(head))
                summed += delayed * gain

            channel[position] = (1.0 - mix) * with_feedback + mix * summed
        return block

    def get_state_xml(self) -> ET.Element:
        """Return the parameter state as an XML element."""
        root = ET.Element(STATE_TAG)
        for spec in self.layout:
            ET.SubElement(root, "PARAM", id=spec.id, value=repr(self._values[spec.id]))
        root.set("version", str(STATE_VERSION))
        return root

    def state_bytes(self) -> bytes:
        """Serialise the parameter state as a binary blob wrapping the XML text."""
        body = (_XML_HEADER + ET.tostring(self.get_state_xml(), encoding="unicode")).encode("utf-8")
        return struct.pack("<II", _XML_MAGIC, len(body)) + body + b"\0"

    def load_state(self, data) -> bool:
        """Restore parameters from :meth:`state_bytes` output.

        Data that is not a saved state of this effect is ignored; the return value
        says whether anything was loaded.
        """
        data = bytes(data)
        if len(data) <= 8:
            return False
        magic, length = struct.unpack_from("<II", data)
        if magic != _XML_MAGIC:
            return False
        text = data[8 : 8 + min(length, len(data) - 8)].split(b"\0", 1)[0]
        try:
            root = ET.fromstring(text)
        except ET.ParseError:
            return False
        if root.tag != STATE_TAG:
            return False
        for child in root.findall("PARAM"):
            spec = self._specs.get(child.get("id", ""))
            if spec is None:
                continue
            try:
                value = float(child.get("value", ""))
            except ValueError:
                continue
            self._values[spec.id] = spec.constrain(value)
        return True