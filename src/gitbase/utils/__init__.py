"""Shared utilities for gitbase."""

from ._logging import create_logger

__all__ = ["create_logger"]
