"""
Exception hierarchy for the Ballot client.

Exception Categories:
- RetryableException: Transient failures that may succeed on retry (RPC, network)
- NonRetryableException: Permanent failures that won't benefit from retry (bad data)
- ConfigurationException: Startup/config errors that prevent operation

Wallet and chain failures raised by the write path are plain exceptions the
ErrorClassifier knows how to label:
- UserRejectedRequestError: the signer declined the request
- TransactionFailedError: the transaction was mined but reverted
"""

from typing import Optional


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on retry.

    Use for transient failures like:
    - RPC timeouts
    - Rate limiting
    - Temporary network issues
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Malformed contract payloads
    - Missing required data
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are missing
    - A chain has no RPC URL configured
    """

    pass


class BallotReadException(RetryableException):
    """
    Exception for failed contract reads.

    Inherits from RetryableException because read failures are
    usually RPC hiccups that resolve on the next attempt.
    """

    pass


class ProposalDecodeException(NonRetryableException):
    """
    Exception for a proposal slot whose payload cannot be decoded.

    The slot is dropped from the assembled list; the exception never
    reaches the user.
    """

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class UserRejectedRequestError(Exception):
    """The wallet (signer) declined to sign or send the transaction."""

    def __init__(self, message: str = "User rejected the request."):
        super().__init__(message)
        self.message = message


class TransactionFailedError(Exception):
    """A submitted transaction was mined with a failing status."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tx_hash = tx_hash
