"""
cadence.analyze - Delivery analysis.

Amplitude statistics from metering windows (pauses, spikes, rhythm,
stability) and optional transcript analysis (clarity, pacing,
confidence, tone).
"""

from __future__ import annotations
