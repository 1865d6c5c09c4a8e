"""
Unit tests for RefetchOrchestrator.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from ballot_client.ballot.guard import SessionResetGuard
from ballot_client.ballot.models import RawReadSet, SessionIdentity
from ballot_client.ballot.refetch import RefetchOrchestrator
from ballot_client.shared.exceptions import BallotReadException

BASE = 8453


class Harness:
    """Owns the raw read set the way BallotService does."""

    def __init__(self, reader, account):
        self.reader = reader
        self.reads = RawReadSet()
        self.published = []
        self.guard = SessionResetGuard(on_reset=self._reset)
        self.guard.observe(account, BASE)
        self.refetcher = RefetchOrchestrator(
            guard=self.guard,
            reader=lambda: self.reader,
            reads=lambda: self.reads,
            publish=self._publish,
        )

    def _reset(self, identity):
        self.reads = RawReadSet(identity=identity)

    def _publish(self):
        self.published.append(
            (
                dict(self.reads.proposals),
                self.reads.winner,
                self.reads.proposals_pending,
            )
        )


@pytest.fixture
def harness(mock_reader, sample_account):
    return Harness(mock_reader, sample_account)


class TestRefetch:
    @pytest.mark.asyncio
    async def test_reads_every_slot_winner_voter_and_chair(
        self, harness, mock_reader, sample_account, raw_proposals
    ):
        summary = await harness.refetcher.refetch()

        assert [c.args[0] for c in mock_reader.read_proposal.call_args_list] == [
            0, 1, 2, 3,
        ]
        mock_reader.read_winner_name.assert_awaited_once()
        mock_reader.read_voter_record.assert_awaited_once_with(
            harness.guard.identity.account
        )
        mock_reader.read_chairperson.assert_awaited_once()

        assert summary.reads_requested == 7
        assert summary.reads_applied == 7
        assert harness.reads.proposals == raw_proposals
        assert harness.reads.chairperson == sample_account
        assert harness.reads.proposals_pending is False

    @pytest.mark.asyncio
    async def test_voter_skipped_without_account(self, mock_reader):
        harness = Harness(mock_reader, None)

        summary = await harness.refetcher.refetch()

        mock_reader.read_voter_record.assert_not_called()
        assert summary.reads_requested == 6

    @pytest.mark.asyncio
    async def test_chairperson_can_be_skipped(self, harness, mock_reader):
        await harness.refetcher.refetch(include_chairperson=False)
        mock_reader.read_chairperson.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_reader_is_noop(self, harness):
        harness.reader = None
        summary = await harness.refetcher.refetch()
        assert summary.reads_requested == 0
        assert harness.published == []

    @pytest.mark.asyncio
    async def test_first_load_publishes_loading_state(self, harness):
        await harness.refetcher.refetch()

        first_proposals, _, first_pending = harness.published[0]
        assert first_proposals == {}
        assert first_pending is True

        last_proposals, _, last_pending = harness.published[-1]
        assert len(last_proposals) == 4
        assert last_pending is False

    @pytest.mark.asyncio
    async def test_later_pass_publishes_once_at_the_end(self, harness):
        """The previous snapshot stays published until the pass completes."""
        await harness.refetcher.refetch()
        harness.published.clear()

        await harness.refetcher.refetch()

        assert len(harness.published) == 1

    @pytest.mark.asyncio
    async def test_failed_read_keeps_previous_value(
        self, harness, mock_reader, bytes32
    ):
        await harness.refetcher.refetch()
        mock_reader.read_winner_name = AsyncMock(
            side_effect=BallotReadException("rpc timeout")
        )
        mock_reader.read_proposal = AsyncMock(
            side_effect=lambda i: {"name": bytes32("New"), "vote_count": 9}
        )

        summary = await harness.refetcher.refetch()

        assert summary.reads_failed == 1
        assert summary.errors[0].context["read"] == "winner"
        assert harness.reads.winner == bytes32("Bob")
        assert harness.reads.proposals[0]["vote_count"] == 9

    @pytest.mark.asyncio
    async def test_stale_reads_are_discarded(
        self, harness, mock_reader, other_account
    ):
        release = asyncio.Event()
        original = mock_reader.read_proposal.side_effect

        async def slow_proposal(index):
            await release.wait()
            return original(index)

        mock_reader.read_proposal = AsyncMock(side_effect=slow_proposal)

        task = asyncio.create_task(harness.refetcher.refetch())
        await asyncio.sleep(0)

        harness.guard.observe(other_account, BASE)
        published_before = len(harness.published)
        release.set()
        summary = await task

        assert summary.reads_applied == 0
        assert summary.reads_discarded == summary.reads_requested
        assert harness.reads.proposals == {}
        assert harness.reads.identity == SessionIdentity.create(other_account, BASE)
        assert len(harness.published) == published_before

    @pytest.mark.asyncio
    async def test_overlapping_passes_keep_loading_until_last_finishes(
        self, harness, mock_reader
    ):
        """A pass that ends early must not clear the loading state of another."""
        release = asyncio.Event()
        original = mock_reader.read_proposal.side_effect
        calls = []

        async def read_proposal(index):
            calls.append(index)
            if len(calls) <= 4:
                raise BallotReadException("rpc timeout")
            await release.wait()
            return original(index)

        mock_reader.read_proposal = AsyncMock(side_effect=read_proposal)

        first = asyncio.create_task(harness.refetcher.refetch())
        await asyncio.sleep(0)
        second = asyncio.create_task(harness.refetcher.refetch())
        await first

        assert harness.reads.proposals == {}
        assert harness.reads.proposals_pending is True

        release.set()
        await second

        assert len(harness.reads.proposals) == 4
        assert harness.reads.proposals_pending is False


class TestSchedule:
    @pytest.mark.asyncio
    async def test_schedule_runs_in_background(self, harness, mock_reader):
        task = harness.refetcher.schedule(reason="settlement")
        assert task is not None

        await harness.refetcher.wait_idle()

        assert task.done()
        assert task.result().reason == "settlement"
        assert mock_reader.read_proposal.await_count == 4

    @pytest.mark.asyncio
    async def test_wait_idle_without_tasks(self, harness):
        await harness.refetcher.wait_idle()
