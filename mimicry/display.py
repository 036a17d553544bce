"""Text shown by the editor: knob value strings, division choices and the tempo readout."""

import math
from typing import Callable

PRIMARY_COLOR = (0x00, 0xFF, 0x90)
DIVIDER_COLOR = (0x45, 0x4F, 0x52)
BG_GRADIENT_COLOR_1 = (0x33, 0x33, 0x33)
BG_GRADIENT_COLOR_2 = (0x16, 0x16, 0x16)
DELAY_CONTROLLER_BG_GRADIENT_1 = (0x10, 0x10, 0x10)
DELAY_CONTROLLER_BG_GRADIENT_2 = (0x1F, 0x1F, 0x1F)

SYNC_TEXT = "snc"
INITIAL_TEMPO_TEXT = "120"
BACKGROUND_TEXT = "000"


def _format_double(value: float) -> str:
    value = float(value)
    if not math.isfinite(value):
        return str(value)
    text = format(value, ".15g")
    if "." not in text and "e" not in text:
        text += ".0"
    return text


def value_to_percent(value: float) -> str:
    """Render a 0..1 value as a percentage, e.g. for the feedback knob."""
    return _format_double(value * 100.0) + "%"


def value_to_signed_int(value: float) -> str:
    """Render a value rounded to an integer, with a leading ``+`` when positive."""
    prefix = "+" if value > 0.0 else ""
    return prefix + str(round(value))


def mix_value_to_string(value: float) -> str:
    """Display text of the dry/wet knob."""
    return value_to_percent(value)


def output_gain_to_string(value: float) -> str:
    """Display text of the output gain knob."""
    return _format_double(value)


def division_choices(start: float, end: float, interval: float) -> list[tuple[int, str]]:
    """Return ``(item id, label)`` pairs for the note-division selector, ids counting from 1."""
    step = int(interval)
    if step <= 0:
        raise ValueError(f"interval must be at least 1, got {interval}")
    last = int(end)
    return [
        (item_id, f"1 / {division}")
        for item_id, division in enumerate(range(int(start), last + 1, step), start=1)
    ]


class TempoDisplay:
    """The digital tempo readout: shows the tempo, or ``snc`` while synced to the host."""

    def __init__(self, bpm_source: Callable[[], float]):
        self._bpm_source = bpm_source
        self.text = INITIAL_TEMPO_TEXT
        self.background_text = BACKGROUND_TEXT
        self.sync_active = False

    def set_text(self, text: str) -> None:
        """Replace the displayed text."""
        self.text = str(text)

    def slider_value_changed(self, value: float) -> None:
        """Show a new tempo knob value unless tempo sync is on."""
        if not self.sync_active:
            self.set_text(str(int(value)))

    def tempo_sync_changed(self, sync_active: bool) -> None:
        """Switch between the sync marker and the current tempo."""
        self.sync_active = bool(sync_active)
        if self.sync_active:
            self.set_text(SYNC_TEXT)
        else:
            self.set_text(str(int(self._bpm_source())))

    def parameter_changed(self, parameter_id: str, value: float) -> None:
        """React to a change of the ``tempoSync`` or ``bpm`` parameter."""
        if parameter_id == "tempoSync":
            self.tempo_sync_changed(value > 0.5)
        if parameter_id == "bpm" and not self.sync_active:
            self.set_text(str(int(value)))