"""
TransactionCoordinator - the single in-flight mutating call.

State machine:

    IDLE -> SUBMITTING -> AWAITING_CHAIN_CONFIRMATION -> SETTLED_SUCCESS
                 \\                    \\
                  +--------------------+-> SETTLED_FAILURE

A settled state stays visible until the next action passes its
preconditions; only then does the coordinator go back through IDLE.
Failed preconditions are silent no-ops: no call, no error, no state change.
Requests made while a call is in flight are ignored.

A call that outlives its session keeps the in-flight slot until it settles,
but nothing about it is shown to the new session and its outcome is dropped.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from ballot_client.ballot.errors import classify_error
from ballot_client.ballot.models import (
    ClassifiedError,
    IntentKind,
    SessionIdentity,
    TransactionIntent,
    TransactionState,
    TransactionStatus,
    ViewModel,
)
from ballot_client.contracts.writer import BallotWriter
from ballot_client.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ActionContext:
    """What the coordinator needs to know to check preconditions."""

    identity: SessionIdentity
    contract_address: Optional[str]
    view: ViewModel


@dataclass
class ActionInputs:
    """Transient text inputs tied to an intent; cleared on success."""

    delegate_address: str = ""
    grant_address: str = ""


_LABELS: Dict[Tuple[IntentKind, TransactionState], str] = {
    (IntentKind.VOTING, TransactionState.SUBMITTING): "Confirming vote...",
    (IntentKind.VOTING, TransactionState.AWAITING_CHAIN_CONFIRMATION): "Voting...",
    (IntentKind.VOTING, TransactionState.SETTLED_SUCCESS): "Thanks for voting!",
    (IntentKind.DELEGATING, TransactionState.SUBMITTING): "Confirming delegation...",
    (IntentKind.DELEGATING, TransactionState.AWAITING_CHAIN_CONFIRMATION): "Delegating...",
    (IntentKind.DELEGATING, TransactionState.SETTLED_SUCCESS): "Delegation complete!",
    (IntentKind.GRANTING_RIGHT, TransactionState.SUBMITTING): "Confirming voting right...",
    (IntentKind.GRANTING_RIGHT, TransactionState.AWAITING_CHAIN_CONFIRMATION): "Granting voting right...",
    (IntentKind.GRANTING_RIGHT, TransactionState.SETTLED_SUCCESS): "Voting right granted!",
}

_FAILURE_TITLES = {
    IntentKind.VOTING: "Vote failed",
    IntentKind.DELEGATING: "Delegation failed",
    IntentKind.GRANTING_RIGHT: "Grant failed",
}


class TransactionCoordinator:
    """
    Drives vote / delegate / grant-right calls through their lifecycle.

    Args:
        context: Returns the current session, contract and view snapshot
        writer: Returns the writer for the current session, None if no signer
        on_success: Called with the settled intent after a successful call
        classifier: Maps a raw failure to a ClassifiedError
    """

    def __init__(
        self,
        context: Callable[[], ActionContext],
        writer: Callable[[], Optional[BallotWriter]],
        on_success: Optional[Callable[[TransactionIntent], Any]] = None,
        classifier: Callable[[Any], ClassifiedError] = classify_error,
    ):
        self._context = context
        self._writer = writer
        self._on_success = on_success
        self._classifier = classifier

        self.state = TransactionState.IDLE
        self.intent = TransactionIntent.none()
        self.error: Optional[ClassifiedError] = None
        self.tx_hash: Optional[str] = None
        self.inputs = ActionInputs()
        self._completed = IntentKind.NONE
        self._session = 0
        self._call_session = 0

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def vote(self, index: int) -> bool:
        """Vote for a proposal slot. Returns True if a call was issued."""
        return await self._run(
            TransactionIntent.voting(index),
            lambda writer: writer.submit_vote(index),
        )

    async def delegate(self, address: Optional[str] = None) -> bool:
        """Delegate to `address`, or to the delegate input when omitted."""
        target = (address if address is not None else self.inputs.delegate_address).strip()
        return await self._run(
            TransactionIntent.delegating(target),
            lambda writer: writer.submit_delegate(target),
        )

    async def grant_right(self, address: Optional[str] = None) -> bool:
        """Give `address` the right to vote (chairperson only)."""
        target = (address if address is not None else self.inputs.grant_address).strip()
        return await self._run(
            TransactionIntent.granting_right(target),
            lambda writer: writer.submit_grant_right(target),
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self.state.is_in_flight

    @property
    def status(self) -> TransactionStatus:
        context = self._context()
        if self.is_busy and self._outlived_session():
            # Still blocks new calls, but belongs to the previous session
            return TransactionStatus(
                state=self.state, intent=TransactionIntent.none(), disabled=True
            )
        return TransactionStatus(
            state=self.state,
            intent=self.intent,
            error=self.error,
            tx_hash=self.tx_hash,
            label=self._label(),
            title=self._title(),
            disabled=self.is_busy or not context.identity.is_connected,
        )

    def reset(self) -> None:
        """
        Forget everything tied to the previous session.

        A settled outcome is cleared at once. An in-flight call is left to
        finish, and its outcome is discarded when it settles.
        """
        self._session += 1
        if self.is_busy:
            return
        self.state = TransactionState.IDLE
        self.intent = TransactionIntent.none()
        self.error = None
        self.tx_hash = None
        self._completed = IntentKind.NONE

    def preconditions_met(
        self, intent: TransactionIntent, context: ActionContext
    ) -> bool:
        """UI affordance guards; the contract does the real validation."""
        if not context.identity.is_connected or not context.contract_address:
            return False

        view = context.view
        if intent.kind == IntentKind.VOTING:
            voter = view.voter
            return (
                voter is not None
                and not voter.has_voted
                and voter.weight > 0
                and intent.proposal_index is not None
                and intent.proposal_index >= 0
            )
        if intent.kind == IntentKind.DELEGATING:
            return bool(intent.target)
        if intent.kind == IntentKind.GRANTING_RIGHT:
            return view.is_chairperson and bool(intent.target)
        return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _run(
        self,
        intent: TransactionIntent,
        submit: Callable[[BallotWriter], Awaitable[str]],
    ) -> bool:
        if self.is_busy:
            logger.debug(
                f"Ignoring {intent.kind.value}: {self.intent.kind.value} in flight"
            )
            return False

        if not self.preconditions_met(intent, self._context()):
            return False

        writer = self._writer()
        if writer is None:
            return False

        self._start(intent)

        try:
            tx_hash = await submit(writer)
        except Exception as e:
            self._settle_failure(e)
            return True

        if self._outlived_session():
            self._discard()
            return True

        self.tx_hash = tx_hash
        self._transition(TransactionState.AWAITING_CHAIN_CONFIRMATION)

        try:
            confirmation = await writer.await_confirmation(tx_hash)
        except Exception as e:
            self._settle_failure(e)
            return True

        if not confirmation.success:
            self._settle_failure(confirmation.error)
            return True

        self._settle_success()
        return True

    def _start(self, intent: TransactionIntent) -> None:
        # A new attempt supersedes whatever settled before it
        self._transition(TransactionState.IDLE)
        self.error = None
        self.tx_hash = None
        self._completed = IntentKind.NONE
        self.intent = intent
        self._call_session = self._session
        self._transition(TransactionState.SUBMITTING)

    def _outlived_session(self) -> bool:
        return self._call_session != self._session

    def _discard(self) -> None:
        logger.info(
            f"Dropping {self.intent.kind.value} outcome: session changed while in flight"
        )
        self.intent = TransactionIntent.none()
        self.error = None
        self.tx_hash = None
        self._completed = IntentKind.NONE
        self._transition(TransactionState.IDLE)

    def _settle_success(self) -> None:
        if self._outlived_session():
            self._discard()
            return
        settled = self.intent
        self._completed = settled.kind
        self.intent = TransactionIntent.none()
        if settled.kind == IntentKind.DELEGATING:
            self.inputs.delegate_address = ""
        elif settled.kind == IntentKind.GRANTING_RIGHT:
            self.inputs.grant_address = ""
        self._transition(TransactionState.SETTLED_SUCCESS)

        if self._on_success is not None:
            self._on_success(settled)

    def _settle_failure(self, raw_error: Any) -> None:
        if self._outlived_session():
            self._discard()
            return
        self.error = self._classifier(raw_error)
        logger.warning(
            f"{self.intent.kind.value} failed: {self.error.message} "
            f"(raw: {self.error.raw_message})"
        )
        self._transition(TransactionState.SETTLED_FAILURE)

    def _transition(self, state: TransactionState) -> None:
        if state != self.state:
            logger.info(
                f"Transaction {self.state.value} -> {state.value} "
                f"[{self.intent.kind.value}]"
            )
        self.state = state

    def _label(self) -> Optional[str]:
        if self.state == TransactionState.SETTLED_FAILURE:
            return self.error.message if self.error else None
        kind = (
            self._completed
            if self.state == TransactionState.SETTLED_SUCCESS
            else self.intent.kind
        )
        return _LABELS.get((kind, self.state))

    def _title(self) -> Optional[str]:
        if self.state != TransactionState.SETTLED_FAILURE:
            return None
        return _FAILURE_TITLES.get(self.intent.kind)
