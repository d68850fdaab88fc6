"""
cadence.extract - Amplitude metering for recorded audio.

Turns a waveform into the RMS and peak windows the analyzers consume.
"""

from __future__ import annotations
