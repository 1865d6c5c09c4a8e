"""
SessionResetGuard - invalidates derived state when the session changes.

The (account, chain) pair is compared by value. On a change the reset
callback runs synchronously, before control returns to the event loop, so
no read resolved for the old identity can be rendered under the new one.
Each change bumps a generation counter that in-flight reads check before
writing their result.
"""

from typing import Callable, Optional

from ballot_client.ballot.models import SessionIdentity
from ballot_client.shared.logging import get_logger

logger = get_logger(__name__)


class SessionResetGuard:
    """
    Tracks the active session identity.

    Attributes:
        identity: Current (account, chain) pair
        generation: Incremented on every identity change
        connection_prompt_open: Whether the connection picker is showing
    """

    def __init__(
        self,
        on_reset: Optional[Callable[[SessionIdentity], None]] = None,
        identity: Optional[SessionIdentity] = None,
    ):
        self._on_reset = on_reset
        self.identity = identity or SessionIdentity()
        self.generation = 0
        self.connection_prompt_open = False

    def observe(
        self, account: Optional[str], chain_id: Optional[int]
    ) -> bool:
        """Record the identity reported by the wallet. True if it changed."""
        identity = SessionIdentity.create(account, chain_id)
        if identity == self.identity:
            return False

        logger.info(
            f"Session changed: {self.identity.account}@{self.identity.chain_id}"
            f" -> {identity.account}@{identity.chain_id}"
        )
        self.identity = identity
        self.generation += 1
        # The user finished connecting somewhere else
        self.connection_prompt_open = False

        if self._on_reset is not None:
            self._on_reset(identity)
        return True

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def open_connection_prompt(self) -> None:
        self.connection_prompt_open = True

    def close_connection_prompt(self) -> None:
        self.connection_prompt_open = False
