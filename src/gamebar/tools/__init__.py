"""Command-line entry points and small debugging helpers.

:mod:`report` exposes the ``gamebar-report`` CLI (session analysis, sensor
detection and log history); :mod:`debug` holds opt-in timing hooks.
"""
