"""
Decoders from raw ballot reads to display models.

Names are stored on chain as right-padded bytes32; they are trimmed of
trailing zero bytes and read as UTF-8. Anything that does not fit raises
ProposalDecodeException so the caller can drop that one item.
"""

from typing import Any, Optional, Union

from eth_utils import is_address, is_hex, to_bytes, to_checksum_address

from ballot_client.ballot.models import Proposal, VoterRecord
from ballot_client.contracts.types import RawProposal, RawVoterRecord
from ballot_client.shared.constants import ZERO_ADDRESS
from ballot_client.shared.exceptions import ProposalDecodeException

BYTES32_LENGTH = 32


def decode_fixed_bytes(value: Union[bytes, bytearray, str]) -> str:
    """
    Decode a right-padded fixed-length byte string into text.

    Accepts raw bytes (including HexBytes) or a 0x-prefixed hex string.
    A payload of only zero bytes decodes to "".
    """
    if isinstance(value, str):
        if not is_hex(value):
            raise ProposalDecodeException(f"Not a hex string: {value!r}")
        value = to_bytes(hexstr=value)
    if not isinstance(value, (bytes, bytearray)):
        raise ProposalDecodeException(
            f"Expected bytes, got {type(value).__name__}"
        )
    if len(value) > BYTES32_LENGTH:
        raise ProposalDecodeException(
            f"Name is {len(value)} bytes, expected at most {BYTES32_LENGTH}"
        )

    try:
        return bytes(value).rstrip(b"\x00").decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProposalDecodeException(f"Name is not valid UTF-8: {e}")


def decode_proposal(index: int, raw: RawProposal) -> Proposal:
    """Decode one `proposals(index)` read; the slot position becomes the index."""
    try:
        name_bytes = raw["name"]
        vote_count = raw["vote_count"]
    except (KeyError, TypeError) as e:
        raise ProposalDecodeException(
            f"Malformed proposal payload: {e}", index=index
        )

    if isinstance(vote_count, bool) or not isinstance(vote_count, int):
        raise ProposalDecodeException(
            f"Vote count is not an integer: {vote_count!r}", index=index
        )
    if vote_count < 0:
        raise ProposalDecodeException(
            f"Vote count is negative: {vote_count}", index=index
        )

    try:
        name = decode_fixed_bytes(name_bytes)
    except ProposalDecodeException as e:
        raise ProposalDecodeException(e.message, index=index)

    return Proposal(name=name, vote_count=vote_count, index=index)


def decode_voter_record(raw: RawVoterRecord) -> VoterRecord:
    """
    Decode a `voters(account)` read.

    The contract reports the zero address when there is no delegate, and a
    meaningful `vote` only for direct votes.
    """
    delegate = _optional_address(raw.get("delegate"))
    has_voted = bool(raw.get("voted", False))
    chosen: Optional[int] = None
    if has_voted and delegate is None:
        chosen = int(raw.get("vote", 0))

    return VoterRecord(
        weight=int(raw.get("weight", 0)),
        has_voted=has_voted,
        delegate=delegate,
        chosen_proposal_index=chosen,
    )


def decode_winner_name(raw: Any) -> Optional[str]:
    """An empty name means the contract has no leader yet."""
    if raw is None:
        return None
    name = decode_fixed_bytes(raw)
    return name or None


def _optional_address(value: Any) -> Optional[str]:
    if not value or not isinstance(value, str) or not is_address(value):
        return None
    if value.lower() == ZERO_ADDRESS:
        return None
    return to_checksum_address(value)
