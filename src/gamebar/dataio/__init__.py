"""Data input/output helpers for session logs.

Utility modules here keep disk-level concerns isolated from the analytics:
- :mod:`session_log` parses overlay log lines into typed rows.
- :mod:`csv_writer` buffers and exports rows in the same layout.
- :mod:`file_paths` names session logs and lists the log history.
"""
