"""
Write side of the ballot contract.

The wallet is a local signing account attached to the Web3Service. Before
anything is signed, an optional `approve` callback is asked; refusing
raises UserRejectedRequestError exactly as a browser wallet would.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Optional

from eth_utils import to_checksum_address

from ballot_client.shared.constants import BallotConstants, GlobalConstants
from ballot_client.shared.exceptions import (
    ConfigurationException,
    TransactionFailedError,
    UserRejectedRequestError,
)
from ballot_client.shared.logging import get_logger
from ballot_client.shared.services.web3_service import Web3Service

logger = get_logger(__name__)

# (description of the call, sender address) -> approved?
ApproveCallback = Callable[[str, str], bool]


@dataclass
class ConfirmationResult:
    """Outcome of waiting for a transaction to be mined."""

    success: bool
    tx_hash: str
    block_number: Optional[int] = None
    error: Optional[Exception] = None


class BallotWriter:
    """
    Contract writer for one ballot deployment.

    Attributes:
        web3_service: Connection with a signing account attached
        contract_address: Ballot contract address
        approve: Asked before every signature; None approves everything
        timeout: Seconds to wait for a receipt
    """

    def __init__(
        self,
        web3_service: Web3Service,
        contract_address: str,
        approve: Optional[ApproveCallback] = None,
        timeout: float = GlobalConstants.TX_TIMEOUT,
    ):
        self.web3_service = web3_service
        self.contract_address = contract_address
        self.approve = approve
        self.timeout = timeout
        self._contract = web3_service.get_contract(
            contract_address, BallotConstants.ABI_NAME
        )

    @property
    def sender(self) -> str:
        account = self.web3_service.account
        if account is None:
            raise ConfigurationException(
                "No signing account attached; set BALLOT_PRIVATE_KEY"
            )
        return account.address

    async def submit_vote(self, index: int) -> str:
        return await self._send(
            f"vote for proposal #{index}",
            self._contract.functions.vote(index),
        )

    async def submit_delegate(self, target: str) -> str:
        target = to_checksum_address(target)
        return await self._send(
            f"delegate your vote to {target}",
            self._contract.functions.delegate(target),
        )

    async def submit_grant_right(self, target: str) -> str:
        target = to_checksum_address(target)
        return await self._send(
            f"give {target} the right to vote",
            self._contract.functions.giveRightToVote(target),
        )

    async def await_confirmation(self, tx_hash: str) -> ConfirmationResult:
        """Wait for the receipt; never raises, failures come back in the result."""
        loop = asyncio.get_running_loop()
        w3 = self.web3_service.w3
        try:
            receipt = await loop.run_in_executor(
                None,
                lambda: w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self.timeout
                ),
            )
        except Exception as e:
            return ConfirmationResult(success=False, tx_hash=tx_hash, error=e)

        block_number = receipt.get("blockNumber")
        if receipt.get("status") != 1:
            return ConfirmationResult(
                success=False,
                tx_hash=tx_hash,
                block_number=block_number,
                error=TransactionFailedError(
                    f"Transaction {tx_hash} reverted in block {block_number}",
                    tx_hash=tx_hash,
                ),
            )
        return ConfirmationResult(
            success=True, tx_hash=tx_hash, block_number=block_number
        )

    async def _send(self, description: str, function: Any) -> str:
        sender = self.sender
        if self.approve is not None and not self.approve(description, sender):
            raise UserRejectedRequestError()

        loop = asyncio.get_running_loop()
        tx_hash = await loop.run_in_executor(
            None, lambda: function.transact({"from": sender})
        )
        tx_hash_hex = _to_hex(tx_hash)
        logger.info(f"Sent transaction to {description}: {tx_hash_hex}")
        return tx_hash_hex


def _to_hex(tx_hash: Any) -> str:
    if isinstance(tx_hash, (bytes, bytearray)):
        text = bytes(tx_hash).hex()
        return text if text.startswith("0x") else f"0x{text}"
    return str(tx_hash)


def build_writer(
    chain_id: int,
    contract_address: Optional[str],
    private_key: Optional[str] = GlobalConstants.PRIVATE_KEY,
    approve: Optional[ApproveCallback] = None,
    service_factory: Callable[[int], Web3Service] = Web3Service.get_instance,
) -> Optional[BallotWriter]:
    """Writer for a chain, or None without a ballot or a signing key."""
    if not contract_address or not private_key:
        return None
    web3_service = service_factory(chain_id)
    web3_service.attach_signer(private_key)
    return BallotWriter(web3_service, contract_address, approve=approve)
