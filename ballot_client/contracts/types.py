"""
Raw read payloads returned by the ballot contract.

These are kept exactly as the contract hands them back (fixed-size byte
names, integer tallies); decoding into display models happens later.
"""

from typing import TypedDict


class RawProposal(TypedDict):
    """`proposals(uint256)` -> (bytes32 name, uint256 voteCount)"""

    name: bytes
    vote_count: int


class RawVoterRecord(TypedDict):
    """`voters(address)` -> (uint256 weight, bool voted, address delegate, uint256 vote)"""

    weight: int
    voted: bool
    delegate: str
    vote: int
