"""
RefetchOrchestrator - re-reads ballot state and republishes the snapshot.

All reads of a pass are issued at once and applied independently as they
resolve. A read that fails leaves the previous raw value in place; a read
that resolves after the session identity changed is discarded. The
published snapshot is only replaced once the whole pass has finished.
"""

import asyncio
import itertools
from typing import Any, Awaitable, Callable, Optional, Set

from ballot_client.ballot.guard import SessionResetGuard
from ballot_client.ballot.models import PROPOSALS_PENDING_KEY, RawReadSet
from ballot_client.contracts.reader import BallotReader
from ballot_client.shared.constants import BallotConstants
from ballot_client.shared.logging import get_logger
from ballot_client.shared.results import (
    ErrorSeverity,
    ProcessingError,
    RefetchSummary,
)

logger = get_logger(__name__)


class RefetchOrchestrator:
    """
    Runs read passes for the current session.

    Args:
        guard: Source of the current identity and generation
        reader: Returns the reader for the current session, None when reads are disabled
        reads: Returns the raw read set owned by the service
        publish: Rebuilds and publishes the snapshot from the raw read set
    """

    def __init__(
        self,
        guard: SessionResetGuard,
        reader: Callable[[], Optional[BallotReader]],
        reads: Callable[[], RawReadSet],
        publish: Callable[[], None],
    ):
        self._guard = guard
        self._reader = reader
        self._reads = reads
        self._publish = publish
        self._tasks: Set[asyncio.Task] = set()
        self._pass_ids = itertools.count(1)

    def schedule(self, reason: str = "settlement") -> Optional[asyncio.Task]:
        """Start a pass in the background; the caller does not wait for it."""
        task = asyncio.get_running_loop().create_task(self.refetch(reason))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait for background passes started by `schedule`."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def refetch(
        self, reason: str = "refresh", include_chairperson: bool = True
    ) -> RefetchSummary:
        summary = RefetchSummary(reason=reason)
        reader = self._reader()
        if reader is None:
            return summary

        identity = self._guard.identity
        generation = self._guard.generation
        reads = self._reads()

        jobs = []
        for index in range(BallotConstants.PROPOSAL_SLOTS):
            jobs.append(
                (f"proposal:{index}", reader.read_proposal(index), _slot_setter(reads, index))
            )
        jobs.append(("winner", reader.read_winner_name(), _field_setter(reads, "winner")))
        if identity.account:
            jobs.append(
                ("voter", reader.read_voter_record(identity.account), _field_setter(reads, "voter"))
            )
        if include_chairperson:
            jobs.append(
                ("chairperson", reader.read_chairperson(), _field_setter(reads, "chairperson"))
            )

        summary.reads_requested = len(jobs)
        marker = f"{PROPOSALS_PENDING_KEY}#{next(self._pass_ids)}"
        reads.pending = reads.pending | {marker}
        if not reads.proposals:
            # First load: let the view show a loading state
            self._publish()

        await asyncio.gather(
            *(
                self._apply(name, read, setter, generation, summary)
                for name, read, setter in jobs
            )
        )

        if not self._guard.is_current(generation):
            logger.debug(
                f"Refetch ({reason}) finished for a superseded session, "
                f"{summary.reads_discarded} reads discarded"
            )
            return summary

        reads.pending = reads.pending - {marker}
        self._publish()
        return summary

    async def _apply(
        self,
        name: str,
        read: Awaitable[Any],
        setter: Callable[[Any], None],
        generation: int,
        summary: RefetchSummary,
    ) -> None:
        try:
            value = await read
        except Exception as e:
            summary.reads_failed += 1
            summary.add_error(
                ProcessingError(
                    source="refetch",
                    message=f"Read {name} failed: {e}",
                    severity=ErrorSeverity.WARNING,
                    context={"read": name, "reason": summary.reason},
                    exception=e,
                )
            )
            logger.warning(f"Read {name} failed, keeping previous value: {e}")
            return

        if not self._guard.is_current(generation):
            summary.reads_discarded += 1
            logger.debug(f"Discarding stale read {name}")
            return

        setter(value)
        summary.reads_applied += 1


def _slot_setter(reads: RawReadSet, index: int) -> Callable[[Any], None]:
    def apply(value: Any) -> None:
        reads.proposals[index] = value

    return apply


def _field_setter(reads: RawReadSet, name: str) -> Callable[[Any], None]:
    def apply(value: Any) -> None:
        setattr(reads, name, value)

    return apply
