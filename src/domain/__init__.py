"""Replay domain modules."""

from domain.common import Replay, Replay1v1, Replay2v2
from domain.protocol import GameMode, Outcome

__all__ = ["GameMode", "Outcome", "Replay", "Replay1v1", "Replay2v2"]
