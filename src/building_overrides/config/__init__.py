"""Configuration loading."""

from .loader import AppConfig, AuditSettings, load_config

__all__ = ["AppConfig", "AuditSettings", "load_config"]
