"""All constants for the project"""

import os
from typing import Dict, Optional

from dotenv import load_dotenv

from ballot_client.shared.exceptions import ConfigurationException

load_dotenv()

BASE_CHAIN_ID = 8453
CELO_CHAIN_ID = 42220

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class BallotConstants:
    """Ballot contract layout and user-facing wording"""

    # Proposals are read slot by slot; the contract is deployed with four
    PROPOSAL_SLOTS = 4

    ABI_NAME = "ballot"

    UNSUPPORTED_CHAIN_WARNING = "Please switch to Base or Celo"

    # Named custom errors with a plain-language message
    KNOWN_ERROR_MESSAGES = {
        "AlreadyVoted": "You have already voted!",
    }

    MAX_ERROR_MESSAGE_LENGTH = 100
    GENERIC_TRANSACTION_ERROR = (
        "Transaction failed. Please check your wallet for details."
    )
    USER_DECLINED_MESSAGE = "You cancelled the request."
    NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
    UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
    EMPTY_ERROR_MESSAGE = "Something went wrong."


class GlobalConstants:
    """Global class constants for the project"""

    CHAIN_NAMES = {
        BASE_CHAIN_ID: "Base",
        CELO_CHAIN_ID: "Celo",
    }

    SUPPORTED_CHAIN_IDS = frozenset(CHAIN_NAMES)

    CHAIN_ID_TO_RPC = {
        BASE_CHAIN_ID: os.getenv("BASE_MAINNET_RPC_URL")
        or "https://mainnet.base.org",
        CELO_CHAIN_ID: os.getenv("CELO_MAINNET_RPC_URL")
        or "https://forno.celo.org",
    }

    BALLOT_ADDRESSES: Dict[int, Optional[str]] = {
        BASE_CHAIN_ID: os.getenv("BALLOT_ADDRESS_BASE") or None,
        CELO_CHAIN_ID: os.getenv("BALLOT_ADDRESS_CELO") or None,
    }

    DEFAULT_CHAIN_ID = int(os.getenv("BALLOT_CHAIN_ID", str(BASE_CHAIN_ID)))

    PRIVATE_KEY = os.getenv("BALLOT_PRIVATE_KEY") or None

    TX_TIMEOUT = float(os.getenv("BALLOT_TX_TIMEOUT", "120"))
    POLL_INTERVAL = float(os.getenv("BALLOT_POLL_INTERVAL", "12"))

    @staticmethod
    def is_supported_chain(chain_id: Optional[int]) -> bool:
        return chain_id is not None and chain_id in GlobalConstants.SUPPORTED_CHAIN_IDS

    @staticmethod
    def get_rpc_url(chain_id: int) -> str:
        """Get RPC URL for specified chain"""
        chain_id = int(chain_id)
        if chain_id not in GlobalConstants.CHAIN_ID_TO_RPC:
            raise ConfigurationException(f"Chain ID {chain_id} not supported")

        rpc_url = GlobalConstants.CHAIN_ID_TO_RPC[chain_id]
        if not rpc_url:
            raise ConfigurationException(f"RPC URL not set for chain {chain_id}")

        return rpc_url

    @staticmethod
    def get_contract_address(chain_id: Optional[int]) -> Optional[str]:
        """Ballot contract for a chain, or None when none is deployed there"""
        if chain_id is None:
            return None
        return GlobalConstants.BALLOT_ADDRESSES.get(int(chain_id))
