"""Ballot Client - Python client for an on-chain ballot contract."""

__version__ = "1.0.0"

from .ballot import BallotService
from .ballot.errors import get_user_friendly_error

__all__ = ["BallotService", "get_user_friendly_error"]
