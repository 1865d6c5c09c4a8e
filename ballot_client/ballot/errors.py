"""
User-facing error classification.

Turns whatever the wallet, the RPC transport or the contract raised into a
single display string. Rules are checked in a fixed order and the first
match wins:

1. Contract revert with a reason string  -> "Contract Error: <reason>"
2. Contract revert with a named error    -> known sentence or "Error: <name>"
3. Signer declined the request           -> "You cancelled the request."
4. Transport failure ("network" in text) -> "Network error. ..."
5. Anything else: the short message, else the message; longer than 100
   characters is replaced by a generic sentence.
"""

from functools import lru_cache
from typing import Any, Dict, Iterator, Optional

from eth_utils import encode_hex, function_signature_to_4byte_selector
from web3.exceptions import ContractLogicError, ContractPanicError

from ballot_client.ballot.models import ClassifiedError, ErrorCategory
from ballot_client.shared.constants import BallotConstants
from ballot_client.shared.exceptions import UserRejectedRequestError
from ballot_client.shared.services.resource_manager import resource_manager

REVERT_PREFIX = "execution reverted"
USER_REJECTED_TEXT = "User rejected"
USER_REJECTED_RPC_CODE = 4001


def classify_error(error: Any) -> ClassifiedError:
    """Classify a raw failure. Total: never raises, whatever it is given."""
    if error is None:
        return ClassifiedError(
            category=ErrorCategory.UNCLASSIFIED_SHORT,
            message=BallotConstants.UNKNOWN_ERROR_MESSAGE,
        )

    raw_message = _message_of(error)

    revert = _find_revert(error)
    if revert is not None:
        reason = _revert_reason(revert)
        if reason:
            return ClassifiedError(
                category=ErrorCategory.CONTRACT_REVERT_WITH_REASON,
                message=f"Contract Error: {reason}",
                raw_message=raw_message,
            )
        error_name = _revert_error_name(revert)
        if error_name:
            known = BallotConstants.KNOWN_ERROR_MESSAGES.get(error_name)
            return ClassifiedError(
                category=ErrorCategory.CONTRACT_REVERT_NAMED,
                message=known or f"Error: {error_name}",
                raw_message=raw_message,
            )

    if _is_user_rejection(error):
        return ClassifiedError(
            category=ErrorCategory.USER_DECLINED,
            message=BallotConstants.USER_DECLINED_MESSAGE,
            raw_message=raw_message,
        )

    if raw_message and "network" in raw_message.lower():
        return ClassifiedError(
            category=ErrorCategory.NETWORK_FAILURE,
            message=BallotConstants.NETWORK_ERROR_MESSAGE,
            raw_message=raw_message,
        )

    short_message = getattr(error, "short_message", None)
    message = (
        (short_message if isinstance(short_message, str) else None)
        or raw_message
        or BallotConstants.EMPTY_ERROR_MESSAGE
    )
    if len(message) > BallotConstants.MAX_ERROR_MESSAGE_LENGTH:
        return ClassifiedError(
            category=ErrorCategory.UNCLASSIFIED_LONG,
            message=BallotConstants.GENERIC_TRANSACTION_ERROR,
            raw_message=raw_message,
        )
    return ClassifiedError(
        category=ErrorCategory.UNCLASSIFIED_SHORT,
        message=message,
        raw_message=raw_message,
    )


def get_user_friendly_error(error: Any) -> str:
    return classify_error(error).message


# =============================================================================
# HELPERS
# =============================================================================


def _walk(error: BaseException) -> Iterator[BaseException]:
    """The error followed by its causes, outermost first."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _find_revert(error: Any) -> Optional[ContractLogicError]:
    if not isinstance(error, BaseException):
        return None
    for candidate in _walk(error):
        if isinstance(candidate, ContractLogicError):
            return candidate
    return None


def _revert_reason(revert: ContractLogicError) -> Optional[str]:
    message = _message_of(revert) or ""
    if message.startswith(REVERT_PREFIX):
        reason = message[len(REVERT_PREFIX):].lstrip(":").strip()
        return reason or None
    if isinstance(revert, ContractPanicError):
        return message or None
    return None


def _revert_error_name(revert: ContractLogicError) -> Optional[str]:
    data = revert.data
    if isinstance(data, dict):
        data = data.get("data")
    if not isinstance(data, str) or len(data) < 10:
        return None
    return _error_selectors().get(data[:10].lower())


@lru_cache(maxsize=None)
def _error_selectors() -> Dict[str, str]:
    """4-byte selector -> custom error name, from the ballot ABI."""
    selectors = {}
    for entry in resource_manager.load_abi(BallotConstants.ABI_NAME):
        if entry.get("type") != "error":
            continue
        types = ",".join(item["type"] for item in entry.get("inputs", []))
        signature = f"{entry['name']}({types})"
        selector = encode_hex(function_signature_to_4byte_selector(signature))
        selectors[selector.lower()] = entry["name"]
    return selectors


def _is_user_rejection(error: Any) -> bool:
    candidates = _walk(error) if isinstance(error, BaseException) else [error]
    for candidate in candidates:
        if isinstance(candidate, UserRejectedRequestError):
            return True
        if type(candidate).__name__ == "UserRejectedRequestError":
            return True
        if USER_REJECTED_TEXT in (_message_of(candidate) or ""):
            return True
        if _rpc_error_code(candidate) == USER_REJECTED_RPC_CODE:
            return True
    return False


def _rpc_error_code(error: Any) -> Optional[int]:
    response = getattr(error, "rpc_response", None)
    if isinstance(response, dict) and isinstance(response.get("error"), dict):
        return response["error"].get("code")
    args = getattr(error, "args", ())
    if args and isinstance(args[0], dict):
        return args[0].get("code")
    return None


def _message_of(error: Any) -> Optional[str]:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, str):
        return error or None
    args = getattr(error, "args", ())
    if args and isinstance(args[0], dict) and args[0].get("message"):
        return str(args[0]["message"])
    text = str(error)
    return text or None
