"""Ballot state reconciliation and transaction lifecycle."""

from .models import (
    IntentKind,
    Proposal,
    SessionIdentity,
    SessionMode,
    TransactionIntent,
    TransactionState,
    ViewModel,
    VoterRecord,
)
from .service import BallotService

__all__ = [
    "BallotService",
    "IntentKind",
    "Proposal",
    "SessionIdentity",
    "SessionMode",
    "TransactionIntent",
    "TransactionState",
    "ViewModel",
    "VoterRecord",
]
