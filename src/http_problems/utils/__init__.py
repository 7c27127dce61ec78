"""Utility modules shared by the problem detail helpers."""

from .logging import JsonFormatter, configure_logging, get_logger


__all__ = ["JsonFormatter", "configure_logging", "get_logger"]
