"""Tempo-synced multi-tap delay with per-tap phase-vocoder pitch shifting."""

__version__ = "0.1.0"