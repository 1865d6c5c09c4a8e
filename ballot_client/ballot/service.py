"""
BallotService - the UI-facing owner of the ballot snapshot.

This service wires the reconciliation pieces together:
1. SessionResetGuard clears everything when the account or chain changes
2. RefetchOrchestrator fills the raw read set from the contract
3. ViewModelAssembler projects the raw read set into the published ViewModel
4. TransactionCoordinator runs vote / delegate / grant-right calls and asks
   for a refetch once one settles successfully

The presentation layer only reads `view` and `transaction` and calls the
action methods; it never mutates state directly.
"""

from typing import Callable, Dict, Optional, Tuple

from ballot_client.ballot.assembler import ViewModelAssembler
from ballot_client.ballot.guard import SessionResetGuard
from ballot_client.ballot.models import (
    RawReadSet,
    SessionIdentity,
    TransactionIntent,
    TransactionStatus,
    ViewModel,
)
from ballot_client.ballot.refetch import RefetchOrchestrator
from ballot_client.ballot.transactions import (
    ActionContext,
    ActionInputs,
    TransactionCoordinator,
)
from ballot_client.contracts.reader import BallotReader, build_reader
from ballot_client.contracts.writer import (
    ApproveCallback,
    BallotWriter,
    build_writer,
)
from ballot_client.shared.constants import GlobalConstants
from ballot_client.shared.exceptions import ConfigurationException
from ballot_client.shared.logging import get_logger
from ballot_client.shared.results import RefetchSummary

logger = get_logger(__name__)

ReaderFactory = Callable[[int, Optional[str]], Optional[BallotReader]]
WriterFactory = Callable[[int, Optional[str]], Optional[BallotWriter]]


class BallotService:
    """
    Session-scoped ballot client.

    Args:
        reader_factory: Builds a reader for (chain_id, contract_address)
        writer_factory: Builds a writer for (chain_id, contract_address);
            None keeps the service read-only
        address_resolver: Ballot address for a chain id
    """

    def __init__(
        self,
        reader_factory: ReaderFactory = build_reader,
        writer_factory: Optional[WriterFactory] = None,
        address_resolver: Callable[
            [Optional[int]], Optional[str]
        ] = GlobalConstants.get_contract_address,
    ):
        self._reader_factory = reader_factory
        self._writer_factory = writer_factory
        self._address_resolver = address_resolver
        self._readers: Dict[Tuple[int, str], BallotReader] = {}
        self._writers: Dict[Tuple[int, str], BallotWriter] = {}

        self.assembler = ViewModelAssembler()
        self._reads = RawReadSet()
        self.view = ViewModel.empty()

        self.guard = SessionResetGuard(on_reset=self._reset)
        self.refetcher = RefetchOrchestrator(
            guard=self.guard,
            reader=self._reader,
            reads=lambda: self._reads,
            publish=self._publish,
        )
        self.coordinator = TransactionCoordinator(
            context=self._action_context,
            writer=self._writer,
            on_success=self._on_settled,
        )

    @classmethod
    def with_signer(
        cls,
        private_key: Optional[str] = GlobalConstants.PRIVATE_KEY,
        approve: Optional[ApproveCallback] = None,
    ) -> "BallotService":
        """Service whose writes are signed with a local key."""

        def writer_factory(chain_id: int, address: Optional[str]):
            return build_writer(
                chain_id, address, private_key=private_key, approve=approve
            )

        return cls(writer_factory=writer_factory)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def identity(self) -> SessionIdentity:
        return self.guard.identity

    @property
    def contract_address(self) -> Optional[str]:
        return self._address_resolver(self.identity.chain_id)

    @property
    def reads_enabled(self) -> bool:
        return GlobalConstants.is_supported_chain(
            self.identity.chain_id
        ) and bool(self.contract_address)

    def connect(
        self, account: Optional[str], chain_id: Optional[int]
    ) -> bool:
        """Report the wallet's account and chain. True if the session changed."""
        return self.guard.observe(account, chain_id)

    def disconnect(self) -> bool:
        return self.guard.observe(None, None)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def refresh(self) -> RefetchSummary:
        """Passive read pass; failures are logged and the last snapshot kept."""
        return await self.refetcher.refetch(reason="refresh")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    @property
    def inputs(self) -> ActionInputs:
        return self.coordinator.inputs

    @property
    def transaction(self) -> TransactionStatus:
        return self.coordinator.status

    async def vote(self, index: int) -> bool:
        return await self.coordinator.vote(index)

    async def delegate(self, address: Optional[str] = None) -> bool:
        return await self.coordinator.delegate(address)

    async def grant_right(self, address: Optional[str] = None) -> bool:
        return await self.coordinator.grant_right(address)

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _reset(self, identity: SessionIdentity) -> None:
        self._reads = RawReadSet(identity=identity)
        self.view = self.assembler.assemble(self._reads)
        self.coordinator.reset()

    def _publish(self) -> None:
        self.view = self.assembler.assemble(self._reads)

    def _on_settled(self, intent: TransactionIntent) -> None:
        logger.info(f"{intent.kind.value} settled, refetching ballot state")
        self.refetcher.schedule(reason="settlement")

    def _action_context(self) -> ActionContext:
        return ActionContext(
            identity=self.identity,
            contract_address=self.contract_address,
            view=self.view,
        )

    def _reader(self) -> Optional[BallotReader]:
        if not self.reads_enabled:
            return None
        key = (self.identity.chain_id, self.contract_address)
        if key not in self._readers:
            reader = self._reader_factory(*key)
            if reader is None:
                return None
            self._readers[key] = reader
        return self._readers[key]

    def _writer(self) -> Optional[BallotWriter]:
        if self._writer_factory is None or not self.reads_enabled:
            return None
        key = (self.identity.chain_id, self.contract_address)
        if key not in self._writers:
            writer = self._writer_factory(*key)
            if writer is None:
                return None
            self._writers[key] = writer

        writer = self._writers[key]
        try:
            sender = writer.sender
        except ConfigurationException:
            return None
        # Only sign for the account the session is showing
        if sender.lower() != (self.identity.account or "").lower():
            return None
        return writer
