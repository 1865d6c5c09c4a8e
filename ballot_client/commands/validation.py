from eth_utils import is_address, to_checksum_address

from ballot_client.shared.constants import BallotConstants, GlobalConstants


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_chain_id(chain_id: int) -> None:
    """Validate chain ID"""
    if not GlobalConstants.is_supported_chain(chain_id):
        supported = sorted(GlobalConstants.SUPPORTED_CHAIN_IDS)
        raise ValueError(
            f"Invalid chain_id: {chain_id}. Must be one of {supported}"
        )


def validate_proposal_index(index: int) -> int:
    """Validate a proposal slot index"""
    if not 0 <= index < BallotConstants.PROPOSAL_SLOTS:
        raise ValueError(
            f"Invalid proposal index: {index}. "
            f"Must be between 0 and {BallotConstants.PROPOSAL_SLOTS - 1}"
        )
    return index
