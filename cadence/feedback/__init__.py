"""
cadence.feedback - Scores, insights and coaching notes.

Blends audio statistics with optional transcript analysis into four
0-100 scores, then reduces them to two notes and one focus.
"""

from __future__ import annotations
