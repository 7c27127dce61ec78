"""Lightweight configuration package exports."""

from __future__ import annotations

from .settings import LoggingSettings, ProblemSettings, get_settings, load_settings


__all__ = ["LoggingSettings", "ProblemSettings", "get_settings", "load_settings"]
