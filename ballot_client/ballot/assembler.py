"""
ViewModelAssembler - pure projection from raw reads to the ViewModel.

Reads arrive independently and in any order, so assembly never assumes a
complete set: each proposal slot is decoded on its own and a slot that
fails to decode is left out rather than failing the whole list.
"""

from typing import List, Mapping, Optional, Tuple

from ballot_client.ballot.models import (
    Proposal,
    RawReadSet,
    SessionIdentity,
    SessionMode,
    ViewModel,
    VoterRecord,
)
from ballot_client.ballot.decoding import (
    decode_proposal,
    decode_voter_record,
    decode_winner_name,
)
from ballot_client.contracts.types import RawProposal
from ballot_client.shared.constants import BallotConstants, GlobalConstants
from ballot_client.shared.exceptions import ProposalDecodeException
from ballot_client.shared.logging import get_logger
from ballot_client.shared.results import ErrorSeverity, ProcessingError, Result

logger = get_logger(__name__)


def session_mode(identity: SessionIdentity) -> SessionMode:
    """Degraded mode only applies once a chain is known and unsupported."""
    if identity.chain_id is None:
        return SessionMode.DISCONNECTED
    if not GlobalConstants.is_supported_chain(identity.chain_id):
        return SessionMode.UNSUPPORTED_CHAIN
    if identity.account is None:
        return SessionMode.DISCONNECTED
    return SessionMode.READY


class ViewModelAssembler:
    """Builds ViewModel snapshots; holds no state of its own."""

    def decode_proposals(
        self, raw_proposals: Mapping[int, Optional[RawProposal]]
    ) -> Result[Tuple[Proposal, ...]]:
        """
        Decode every present slot, in ascending slot order.

        Returns a partial result when some slots were dropped; the dropped
        slots are recorded as errors.
        """
        proposals: List[Proposal] = []
        errors: List[ProcessingError] = []

        for index in sorted(raw_proposals):
            raw = raw_proposals[index]
            if raw is None:
                continue
            try:
                proposals.append(decode_proposal(index, raw))
            except ProposalDecodeException as e:
                errors.append(
                    ProcessingError(
                        source="proposal_decode",
                        message=f"Dropped proposal #{index}: {e.message}",
                        severity=ErrorSeverity.ERROR,
                        context={"index": index},
                        exception=e,
                    )
                )

        if errors:
            return Result.partial_success(data=tuple(proposals), errors=errors)
        return Result.ok(tuple(proposals))

    def decode_winner(self, raw_winner) -> Optional[str]:
        try:
            return decode_winner_name(raw_winner)
        except ProposalDecodeException as e:
            logger.warning(f"Ignoring undecodable winner name: {e.message}")
            return None

    def decode_voter(self, raw_voter) -> Optional[VoterRecord]:
        if raw_voter is None:
            return None
        try:
            return decode_voter_record(raw_voter)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring malformed voter record: {e}")
            return None

    @staticmethod
    def is_chairperson(
        chairperson: Optional[str], account: Optional[str]
    ) -> bool:
        if not chairperson or not account:
            return False
        return chairperson.lower() == account.lower()

    def assemble(self, reads: RawReadSet) -> ViewModel:
        """Project a raw read set into a ViewModel. Same input, equal output."""
        identity = reads.identity
        mode = session_mode(identity)

        if mode == SessionMode.UNSUPPORTED_CHAIN:
            return ViewModel.empty(
                mode=mode, warning=BallotConstants.UNSUPPORTED_CHAIN_WARNING
            )

        decoded = self.decode_proposals(reads.proposals)
        for error in decoded.errors:
            logger.warning(error.message)
        proposals = decoded.data or ()

        return ViewModel(
            proposals=proposals,
            voter=self.decode_voter(reads.voter) if identity.account else None,
            winner=self.decode_winner(reads.winner),
            is_chairperson=self.is_chairperson(
                reads.chairperson, identity.account
            ),
            mode=mode,
            is_loading=(
                identity.is_connected
                and not proposals
                and reads.proposals_pending
            ),
        )
