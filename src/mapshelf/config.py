"""
Settings shim.

The canonical config lives in the root `config/` package:
  - `config/public_config.py` (non-sensitive defaults, env / `.env`)
  - `config/settings.py` exposes `get_settings()` and `SETTINGS`

Package code imports `from mapshelf.config import get_settings`.
"""

from __future__ import annotations

from config.settings import ConfigError as ConfigError
from config.settings import Settings as Settings
from config.settings import get_settings as get_settings
from config.settings import get_safe_config_report as get_safe_config_report
