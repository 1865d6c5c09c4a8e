"""
Web3 Service module for talking to the chains the ballot is deployed on.

This module provides a Web3Service class that manages one connection per
chain, caches contract instances, and optionally attaches a local signing
account so that contract writes are signed before being sent.
"""

from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import (
    ExtraDataToPOAMiddleware,
    SignAndSendRawMiddlewareBuilder,
)

from ballot_client.shared.constants import GlobalConstants
from ballot_client.shared.services.resource_manager import resource_manager


class Web3Service:
    """
    A service class for managing Web3 connections and interactions.

    One instance exists per chain id; use `get_instance` rather than the
    constructor so that contract caches are shared.
    """

    _instances: Dict[int, "Web3Service"] = {}

    def __init__(
        self,
        chain_id: int,
        rpc_url: str,
    ):
        """
        Initialize the Web3Service.

        Args:
            chain_id (int): The chain ID to use.
            rpc_url (str): The RPC URL to use.
        """
        self.chain_id = chain_id
        self.w3 = self._initialize_web3(rpc_url)
        self.account: Optional[LocalAccount] = None
        self._contract_cache: Dict[Any, Any] = {}

    def _initialize_web3(self, rpc_url: str) -> Web3:
        """Initialize Web3 instance with middleware if needed"""
        w3 = Web3(Web3.HTTPProvider(rpc_url))

        # Base and Celo blocks carry extra data longer than 32 bytes
        if self.chain_id != 1:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        return w3

    @classmethod
    def get_instance(cls, chain_id: int) -> "Web3Service":
        """Get or create a Web3Service instance for a specific chain"""
        if chain_id not in cls._instances:
            rpc_url = GlobalConstants.get_rpc_url(chain_id)
            cls._instances[chain_id] = cls(chain_id, rpc_url)

        return cls._instances[chain_id]

    def attach_signer(self, private_key: str) -> str:
        """Sign outgoing transactions with a local key; returns its address"""
        account: LocalAccount = Account.from_key(private_key)
        if self.account is None or self.account.address != account.address:
            self.w3.middleware_onion.inject(
                SignAndSendRawMiddlewareBuilder.build(account), layer=0
            )
            self.w3.eth.default_account = account.address
            self.account = account
        return account.address

    def get_contract(self, address: str, abi_name: str) -> Any:
        """Get a contract instance for a given address and ABI name"""
        key = (address.lower(), abi_name)
        if key not in self._contract_cache:
            abi = resource_manager.load_abi(abi_name)
            self._contract_cache[key] = self.w3.eth.contract(
                address=Web3.to_checksum_address(address.lower()), abi=abi
            )
        return self._contract_cache[key]

