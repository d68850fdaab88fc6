"""
Cadence - delivery coaching for rehearsed speech.

Turns a finished recording into a delivery report through a short
pipeline: amplitude metrics → delivery statistics → optional on-device
transcript analysis → blended scores → two coaching notes and one
focus for the next attempt.
"""

__version__ = "0.1.0"
