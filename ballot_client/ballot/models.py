"""
Type definitions for the ballot view state.

Everything the presentation layer renders is a frozen value built from the
latest raw reads; nothing here is patched in place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from eth_utils import is_address, to_checksum_address

from ballot_client.contracts.types import RawProposal, RawVoterRecord

# =============================================================================
# ENUMS
# =============================================================================


class SessionMode(Enum):
    """What the client can do with the current session identity."""

    DISCONNECTED = "disconnected"  # No account or no chain yet
    READY = "ready"  # Supported chain, reads enabled
    UNSUPPORTED_CHAIN = "unsupported_chain"  # Degraded mode, reads disabled


class IntentKind(Enum):
    """Which mutating action the user last started."""

    NONE = "none"
    VOTING = "voting"
    DELEGATING = "delegating"
    GRANTING_RIGHT = "granting_right"


class TransactionState(Enum):
    """Lifecycle of the single in-flight mutating call."""

    IDLE = "idle"
    SUBMITTING = "submitting"  # Waiting for the wallet to return a hash
    AWAITING_CHAIN_CONFIRMATION = "awaiting_chain_confirmation"
    SETTLED_SUCCESS = "settled_success"
    SETTLED_FAILURE = "settled_failure"

    @property
    def is_in_flight(self) -> bool:
        return self in (
            TransactionState.SUBMITTING,
            TransactionState.AWAITING_CHAIN_CONFIRMATION,
        )

    @property
    def is_settled(self) -> bool:
        return self in (
            TransactionState.SETTLED_SUCCESS,
            TransactionState.SETTLED_FAILURE,
        )


class ErrorCategory(Enum):
    """Buckets the ErrorClassifier sorts raw failures into."""

    CONTRACT_REVERT_WITH_REASON = "contract_revert_with_reason"
    CONTRACT_REVERT_NAMED = "contract_revert_named"
    USER_DECLINED = "user_declined"
    NETWORK_FAILURE = "network_failure"
    UNCLASSIFIED_SHORT = "unclassified_short"
    UNCLASSIFIED_LONG = "unclassified_long"  # Replaced by the generic message


# =============================================================================
# SESSION
# =============================================================================


@dataclass(frozen=True)
class SessionIdentity:
    """The (account, chain) pair every derived value belongs to."""

    account: Optional[str] = None
    chain_id: Optional[int] = None

    @classmethod
    def create(
        cls, account: Optional[str] = None, chain_id: Optional[int] = None
    ) -> "SessionIdentity":
        """Normalize the account so equal addresses compare equal."""
        if account and is_address(account):
            account = to_checksum_address(account)
        return cls(account=account or None, chain_id=chain_id)

    @property
    def is_connected(self) -> bool:
        return self.account is not None and self.chain_id is not None


# =============================================================================
# VIEW MODEL
# =============================================================================


@dataclass(frozen=True)
class Proposal:
    """One decoded proposal slot."""

    name: str
    vote_count: int
    index: int


@dataclass(frozen=True)
class VoterRecord:
    """Decoded `voters(account)` entry."""

    weight: int
    has_voted: bool
    delegate: Optional[str] = None
    chosen_proposal_index: Optional[int] = None

    @property
    def has_right_to_vote(self) -> bool:
        return self.weight > 0

    @property
    def voted_by_delegation(self) -> bool:
        return self.has_voted and self.delegate is not None


@dataclass(frozen=True)
class ViewModel:
    """
    Snapshot rendered by the presentation layer.

    Attributes:
        proposals: Decoded proposals ordered by slot index
        voter: Record for the active account, if read
        winner: Current leader's name, if the contract reports one
        is_chairperson: Active account is the contract's chairperson
        mode: Session mode; UNSUPPORTED_CHAIN disables reads
        warning: Degraded-mode notice for the user
        is_loading: Connected, reads in flight and no proposals yet
    """

    proposals: Tuple[Proposal, ...] = ()
    voter: Optional[VoterRecord] = None
    winner: Optional[str] = None
    is_chairperson: bool = False
    mode: SessionMode = SessionMode.DISCONNECTED
    warning: Optional[str] = None
    is_loading: bool = False

    @classmethod
    def empty(
        cls,
        mode: SessionMode = SessionMode.DISCONNECTED,
        warning: Optional[str] = None,
    ) -> "ViewModel":
        return cls(mode=mode, warning=warning)

    @property
    def has_voted(self) -> bool:
        return self.voter is not None and self.voter.has_voted

    @property
    def voting_weight(self) -> int:
        return self.voter.weight if self.voter else 0

    @property
    def has_right_to_vote(self) -> bool:
        return self.voter is not None and self.voter.has_right_to_vote

    @property
    def delegate_status(self) -> Optional[str]:
        if self.voter is None or self.voter.delegate is None:
            return None
        return f"Delegated to {self.voter.delegate}"

    @property
    def vote_status(self) -> Optional[str]:
        """Where the active account's vote went, delegation first."""
        if not self.has_voted:
            return None
        if self.voter.voted_by_delegation:
            return f"Your vote was delegated to {self.voter.delegate}"
        chosen = self.proposal_at(self.voter.chosen_proposal_index)
        if chosen is not None:
            return f"You voted for {chosen.name}"
        return "You have voted"

    def proposal_at(self, index: Optional[int]) -> Optional[Proposal]:
        if index is None:
            return None
        for proposal in self.proposals:
            if proposal.index == index:
                return proposal
        return None


# =============================================================================
# RAW READS
# =============================================================================

# Prefix of the RawReadSet.pending markers; each pass reading the proposal
# slots adds its own "proposals#<n>" marker and removes it when done
PROPOSALS_PENDING_KEY = "proposals"


@dataclass
class RawReadSet:
    """
    Latest raw reads for one session identity.

    Owned by BallotService. Each field is filled independently as reads
    resolve; a missing key or None means absent or still pending.
    """

    identity: SessionIdentity = field(default_factory=SessionIdentity)
    proposals: Dict[int, RawProposal] = field(default_factory=dict)
    voter: Optional[RawVoterRecord] = None
    winner: Optional[bytes] = None
    chairperson: Optional[str] = None
    pending: FrozenSet[str] = frozenset()

    @property
    def proposals_pending(self) -> bool:
        """True while any pass is still reading the proposal slots."""
        return any(
            key.split("#")[0] == PROPOSALS_PENDING_KEY for key in self.pending
        )


# =============================================================================
# TRANSACTIONS
# =============================================================================


@dataclass(frozen=True)
class TransactionIntent:
    """Tagged variant describing the action being labelled."""

    kind: IntentKind = IntentKind.NONE
    proposal_index: Optional[int] = None
    target: Optional[str] = None

    @classmethod
    def none(cls) -> "TransactionIntent":
        return cls()

    @classmethod
    def voting(cls, proposal_index: int) -> "TransactionIntent":
        return cls(kind=IntentKind.VOTING, proposal_index=proposal_index)

    @classmethod
    def delegating(cls, target: str) -> "TransactionIntent":
        return cls(kind=IntentKind.DELEGATING, target=target)

    @classmethod
    def granting_right(cls, target: str) -> "TransactionIntent":
        return cls(kind=IntentKind.GRANTING_RIGHT, target=target)


@dataclass(frozen=True)
class ClassifiedError:
    """A raw failure reduced to what the user is shown."""

    category: ErrorCategory
    message: str
    raw_message: Optional[str] = None


@dataclass(frozen=True)
class TransactionStatus:
    """What the presentation layer sees of the TransactionCoordinator."""

    state: TransactionState
    intent: TransactionIntent
    error: Optional[ClassifiedError] = None
    tx_hash: Optional[str] = None
    label: Optional[str] = None
    title: Optional[str] = None
    disabled: bool = False
