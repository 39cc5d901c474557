"""
GymTrack Core - local-first data layer for a gym tracking app.

Workouts, body data, goals and templates live in an on-device cache and are
mirrored to one of several interchangeable remote backends.
"""

__version__ = "0.1.0"
