"""
Unit tests for user-facing error classification.

Each rule is checked on its own, then the ordering between rules.
"""

from unittest.mock import patch

import pytest
from eth_utils import encode_hex, function_signature_to_4byte_selector
from web3.exceptions import (
    ContractCustomError,
    ContractLogicError,
    ContractPanicError,
)

from ballot_client.ballot.errors import classify_error, get_user_friendly_error
from ballot_client.ballot.models import ErrorCategory
from ballot_client.shared.exceptions import (
    TransactionFailedError,
    UserRejectedRequestError,
)

GENERIC = "Transaction failed. Please check your wallet for details."


def selector(signature: str) -> str:
    return encode_hex(function_signature_to_4byte_selector(signature))


class ShortMessageError(Exception):
    """Wallet-library style error with a terse summary."""

    def __init__(self, message: str, short_message: str):
        super().__init__(message)
        self.message = message
        self.short_message = short_message


class TestContractReverts:
    """Reverts with a reason string or a named custom error."""

    def test_revert_with_reason(self):
        error = ContractLogicError("execution reverted: insufficient weight")
        assert get_user_friendly_error(error) == (
            "Contract Error: insufficient weight"
        )

    def test_revert_with_reason_category(self):
        error = ContractLogicError("execution reverted: Has no right to vote")
        classified = classify_error(error)
        assert classified.category == ErrorCategory.CONTRACT_REVERT_WITH_REASON
        assert classified.message == "Contract Error: Has no right to vote"

    def test_panic_uses_its_message(self):
        error = ContractPanicError("Panic error 0x32: Array index out of bounds")
        assert get_user_friendly_error(error) == (
            "Contract Error: Panic error 0x32: Array index out of bounds"
        )

    def test_known_named_error(self):
        data = selector("AlreadyVoted()")
        error = ContractCustomError(data, data=data)
        classified = classify_error(error)
        assert classified.category == ErrorCategory.CONTRACT_REVERT_NAMED
        assert classified.message == "You have already voted!"

    def test_named_error_data_as_rpc_dict(self):
        data = selector("AlreadyVoted()")
        error = ContractCustomError(data, data={"data": data})
        assert get_user_friendly_error(error) == "You have already voted!"

    def test_unknown_named_error(self):
        data = selector("NotChairperson()")
        error = ContractCustomError(data, data=data)
        with patch(
            "ballot_client.ballot.errors._error_selectors",
            return_value={data: "NotChairperson"},
        ):
            assert get_user_friendly_error(error) == "Error: NotChairperson"

    def test_revert_found_through_cause_chain(self):
        """A wrapped revert is still recognised."""
        try:
            try:
                raise ContractLogicError("execution reverted: Self-delegation is disallowed.")
            except ContractLogicError as e:
                raise RuntimeError("send failed") from e
        except RuntimeError as wrapped:
            message = get_user_friendly_error(wrapped)

        assert message == "Contract Error: Self-delegation is disallowed."

    def test_bare_revert_falls_through(self):
        """No reason and no error data: short message is shown as is."""
        error = ContractLogicError("execution reverted")
        classified = classify_error(error)
        assert classified.category == ErrorCategory.UNCLASSIFIED_SHORT
        assert classified.message == "execution reverted"


class TestUserDeclined:
    """The signer refusing the request."""

    def test_user_rejected_exception(self):
        assert get_user_friendly_error(UserRejectedRequestError()) == (
            "You cancelled the request."
        )

    def test_user_rejected_by_type_name(self):
        class UserRejectedRequestError(Exception):
            pass

        assert get_user_friendly_error(UserRejectedRequestError("nope")) == (
            "You cancelled the request."
        )

    def test_user_rejected_in_message(self):
        error = Exception("MetaMask Tx Signature: User rejected the transaction.")
        assert get_user_friendly_error(error) == "You cancelled the request."

    def test_rpc_code_4001(self):
        error = ValueError({"code": 4001, "message": "request denied"})
        classified = classify_error(error)
        assert classified.category == ErrorCategory.USER_DECLINED


class TestNetworkFailure:
    def test_network_in_message(self):
        error = ConnectionError("Network request failed")
        assert get_user_friendly_error(error) == (
            "Network error. Please check your connection."
        )

    def test_network_match_is_case_insensitive(self):
        error = Exception("NETWORK unreachable")
        assert classify_error(error).category == ErrorCategory.NETWORK_FAILURE


class TestFallback:
    """Unclassified errors: shown verbatim unless too long."""

    def test_short_message_is_preferred(self):
        error = ShortMessageError(
            message="Some very detailed explanation " * 10,
            short_message="Gas estimation failed",
        )
        assert get_user_friendly_error(error) == "Gas estimation failed"

    def test_message_under_limit_is_unchanged(self):
        text = "x" * 80
        assert get_user_friendly_error(Exception(text)) == text

    def test_message_at_limit_is_unchanged(self):
        text = "y" * 100
        assert get_user_friendly_error(Exception(text)) == text

    def test_message_one_over_limit_is_replaced(self):
        classified = classify_error(Exception("x" * 101))
        assert classified.category == ErrorCategory.UNCLASSIFIED_LONG
        assert classified.message == GENERIC

    def test_message_over_limit_is_replaced(self):
        classified = classify_error(Exception("z" * 150))
        assert classified.category == ErrorCategory.UNCLASSIFIED_LONG
        assert classified.message == GENERIC
        assert classified.raw_message == "z" * 150

    def test_failed_receipt_is_generic(self):
        """Mined-but-reverted transactions carry a long technical message."""
        error = TransactionFailedError(
            f"Transaction 0x{'ab' * 32} reverted in block 123456",
            tx_hash=f"0x{'ab' * 32}",
        )
        assert get_user_friendly_error(error) == GENERIC

    def test_empty_message(self):
        assert get_user_friendly_error(Exception()) == "Something went wrong."

    def test_none(self):
        assert get_user_friendly_error(None) == "An unknown error occurred."

    @pytest.mark.parametrize("raw", ["plain string failure", 42])
    def test_non_exception_values(self, raw):
        """Whatever the wallet hands back, a string comes out."""
        assert get_user_friendly_error(raw) == str(raw)


class TestRuleOrder:
    def test_revert_wins_over_network_text(self):
        error = ContractLogicError("execution reverted: network paused")
        assert get_user_friendly_error(error) == "Contract Error: network paused"

    def test_user_rejection_wins_over_network_text(self):
        error = Exception("User rejected the request on network 8453")
        assert get_user_friendly_error(error) == "You cancelled the request."
