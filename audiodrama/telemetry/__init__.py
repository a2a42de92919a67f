"""Run logging for CLI-observable production activity."""

from .logger import RunLogger

__all__ = ["RunLogger"]
