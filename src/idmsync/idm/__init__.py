"""IDM config endpoint access."""

from .client import IdmConfigClient

__all__ = ["IdmConfigClient"]
