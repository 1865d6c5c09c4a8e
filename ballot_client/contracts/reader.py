"""
Read side of the ballot contract.

Every call runs the blocking web3 `call()` in the default executor so the
event loop stays free, and goes through the read layer retry policy.
Failures surface as BallotReadException once retries are exhausted.
"""

import asyncio
from typing import Any, Callable, Optional

from eth_utils import to_checksum_address

from ballot_client.contracts.types import RawProposal, RawVoterRecord
from ballot_client.shared.constants import BallotConstants
from ballot_client.shared.exceptions import BallotReadException
from ballot_client.shared.logging import get_logger
from ballot_client.shared.retry import RPC_RETRY_CONFIG, RetryConfig
from ballot_client.shared.services.web3_service import Web3Service

logger = get_logger(__name__)


class BallotReader:
    """
    Contract reader for one ballot deployment.

    Attributes:
        web3_service: Connection for the chain the ballot lives on
        contract_address: Ballot contract address
        retry_config: Retry policy applied to each read
    """

    def __init__(
        self,
        web3_service: Web3Service,
        contract_address: str,
        retry_config: RetryConfig = RPC_RETRY_CONFIG,
    ):
        self.web3_service = web3_service
        self.contract_address = contract_address
        self.retry_config = retry_config
        self._contract = web3_service.get_contract(
            contract_address, BallotConstants.ABI_NAME
        )

    @property
    def chain_id(self) -> int:
        return self.web3_service.chain_id

    async def read_proposal(self, index: int) -> RawProposal:
        """`proposals(index)` as a raw name/tally pair."""
        name, vote_count = await self._call(
            f"proposals({index})", self._contract.functions.proposals(index)
        )
        return RawProposal(name=name, vote_count=vote_count)

    async def read_voter_record(self, address: str) -> RawVoterRecord:
        """`voters(address)` as a raw record."""
        weight, voted, delegate, vote = await self._call(
            "voters",
            self._contract.functions.voters(to_checksum_address(address)),
        )
        return RawVoterRecord(
            weight=weight, voted=voted, delegate=delegate, vote=vote
        )

    async def read_winner_name(self) -> bytes:
        return await self._call(
            "winnerName", self._contract.functions.winnerName()
        )

    async def read_chairperson(self) -> str:
        return await self._call(
            "chairperson", self._contract.functions.chairperson()
        )

    async def _call(self, name: str, function: Any) -> Any:
        loop = asyncio.get_running_loop()

        async def run_call() -> Any:
            return await loop.run_in_executor(None, function.call)

        try:
            return await self.retry_config.run(run_call, operation_name=name)
        except Exception as e:
            logger.debug(
                f"Read {name} failed on chain {self.chain_id}: {e}"
            )
            raise BallotReadException(
                f"Failed to read {name} from {self.contract_address}: {e}"
            ) from e


def build_reader(
    chain_id: int,
    contract_address: Optional[str],
    service_factory: Callable[[int], Web3Service] = Web3Service.get_instance,
) -> Optional[BallotReader]:
    """Reader for a chain, or None when no ballot is configured there."""
    if not contract_address:
        return None
    return BallotReader(service_factory(chain_id), contract_address)
