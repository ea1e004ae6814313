"""Configuration helpers: application paths, analyzer settings and the
static sysfs/log layout tables.

- :mod:`app_config` holds :class:`AppPaths` and the YAML-backed
  :class:`AnalyzerSettings`.
- :mod:`sysfs_paths` lists the candidate sensor nodes probed at runtime.
- :mod:`log_format` codifies the session log columns and sentinels.
"""
