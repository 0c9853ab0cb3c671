"""
Unified configuration entrypoint.

Prefer importing `SETTINGS` or `get_settings` from `config.settings`.
"""
