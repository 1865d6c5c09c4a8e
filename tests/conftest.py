"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

from typing import Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_utils import to_checksum_address

from ballot_client.contracts.types import RawProposal, RawVoterRecord

BASE = 8453
CELO = 42220


def name_bytes(name: str) -> bytes:
    """Right-pad a name to bytes32 the way the contract stores it."""
    return name.encode("utf-8").ljust(32, b"\x00")


@pytest.fixture
def bytes32() -> Callable[[str], bytes]:
    """Encoder for contract-style names."""
    return name_bytes


@pytest.fixture
def sample_account() -> str:
    """Sample voter account for tests."""
    return to_checksum_address("0x52f541764e6e90eebc5c21ff570de0e2d63766b6")


@pytest.fixture
def other_account() -> str:
    """A second account, for session switches."""
    return to_checksum_address("0x7e1444ba99dcdffe8fbdb42c02fb0da4aaace4d5")


@pytest.fixture
def sample_contract_address() -> str:
    """Sample ballot contract address for tests."""
    return to_checksum_address("0x000000073d065fc33a3050c2d4a8e82ee5c5c25a")


@pytest.fixture
def delegate_address() -> str:
    """Sample delegate address for tests."""
    return to_checksum_address("0xd533a949740bb3306d119cc777fa900ba034cd52")


@pytest.fixture
def raw_proposals() -> Dict[int, RawProposal]:
    """The four proposal slots as the contract returns them."""
    return {
        0: RawProposal(name=name_bytes("Alice"), vote_count=3),
        1: RawProposal(name=name_bytes("Bob"), vote_count=5),
        2: RawProposal(name=name_bytes("Carol"), vote_count=0),
        3: RawProposal(name=name_bytes("Dave"), vote_count=1),
    }


@pytest.fixture
def raw_voter() -> RawVoterRecord:
    """A voter with one vote who has not voted yet."""
    return RawVoterRecord(
        weight=1,
        voted=False,
        delegate="0x0000000000000000000000000000000000000000",
        vote=0,
    )


@pytest.fixture
def mock_reader(raw_proposals, raw_voter, sample_account) -> MagicMock:
    """BallotReader double answering every read immediately."""
    reader = MagicMock()
    reader.read_proposal = AsyncMock(side_effect=lambda i: raw_proposals[i])
    reader.read_winner_name = AsyncMock(return_value=name_bytes("Bob"))
    reader.read_voter_record = AsyncMock(return_value=raw_voter)
    reader.read_chairperson = AsyncMock(return_value=sample_account)
    return reader


@pytest.fixture
def mock_writer(sample_account) -> MagicMock:
    """BallotWriter double whose calls all succeed."""
    from ballot_client.contracts.writer import ConfirmationResult

    tx_hash = "0x" + "ab" * 32
    writer = MagicMock()
    writer.sender = sample_account
    writer.submit_vote = AsyncMock(return_value=tx_hash)
    writer.submit_delegate = AsyncMock(return_value=tx_hash)
    writer.submit_grant_right = AsyncMock(return_value=tx_hash)
    writer.await_confirmation = AsyncMock(
        return_value=ConfirmationResult(
            success=True, tx_hash=tx_hash, block_number=100
        )
    )
    return writer


@pytest.fixture
def address_resolver(sample_contract_address) -> Callable:
    """Ballot deployed on both supported chains."""

    def resolve(chain_id):
        if chain_id in (BASE, CELO):
            return sample_contract_address
        return None

    return resolve


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
