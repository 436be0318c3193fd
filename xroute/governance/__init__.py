"""
xroute governance

Provides:
  - ProtocolSettings / SettingsState  (settings.py)
"""

from .settings import ProtocolSettings, SettingsState

__all__ = [
    "ProtocolSettings",
    "SettingsState",
]
