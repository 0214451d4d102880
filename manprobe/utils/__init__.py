"""Utility modules for the manprobe CLI."""

from . import which

__all__ = ['which']
