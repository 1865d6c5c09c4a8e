#!/usr/bin/env python3
"""
Command-line client for the ballot contract.

Examples:
  - Read state
    ballot status --chain-id 8453 --account 0x...
    ballot status --chain-id 42220 --json --output ballot.json

  - Transactions (signed with BALLOT_PRIVATE_KEY)
    ballot vote --chain-id 8453 --index 2
    ballot delegate --chain-id 8453 --to 0x...
    ballot grant-right --chain-id 8453 --to 0x... --yes

  - Follow the ballot
    ballot watch --chain-id 8453 --interval 12
"""

import argparse
import asyncio
from typing import List, Optional

from eth_account import Account
from rich.prompt import Confirm

from ballot_client.ballot import BallotService
from ballot_client.commands.helpers import handle_command_error
from ballot_client.commands.validation import (
    validate_chain_id,
    validate_eth_address,
    validate_proposal_index,
)
from ballot_client.contracts.writer import ApproveCallback
from ballot_client.shared.constants import GlobalConstants
from ballot_client.shared.exceptions import ConfigurationException
from ballot_client.shared.logging import set_log_level
from ballot_client.shared.results import RefetchSummary
from ballot_client.utils.formatters import (
    console,
    format_address,
    generate_timestamped_filename,
    print_transaction,
    print_view,
    save_json_output,
    view_to_dict,
)


def _signer_address() -> str:
    if not GlobalConstants.PRIVATE_KEY:
        raise ConfigurationException(
            "BALLOT_PRIVATE_KEY must be set to send transactions"
        )
    return Account.from_key(GlobalConstants.PRIVATE_KEY).address


def _resolve_account(args: argparse.Namespace) -> Optional[str]:
    """--account wins; otherwise the signing key's address, if any."""
    if getattr(args, "account", None):
        return validate_eth_address(args.account, "account")
    if GlobalConstants.PRIVATE_KEY:
        return _signer_address()
    return None


def _prompt_approve(description: str, sender: str) -> bool:
    return Confirm.ask(
        f"Sign a transaction from {format_address(sender)} to {description}?",
        default=False,
    )


def _approve_callback(args: argparse.Namespace) -> Optional[ApproveCallback]:
    return None if args.yes else _prompt_approve


def _emit_view(
    service: BallotService,
    args: argparse.Namespace,
    summary: Optional[RefetchSummary] = None,
) -> None:
    if args.json:
        data = view_to_dict(service.view, service.identity)
        if summary is not None:
            data["refetch"] = summary.to_dict()
        filename = args.output or generate_timestamped_filename("ballot")
        save_json_output(data, filename)
        return
    print_view(service.view, service.identity)


def cmd_status(args: argparse.Namespace) -> None:
    async def run():
        service = BallotService()
        service.connect(_resolve_account(args), args.chain_id)
        summary = await service.refresh()
        if summary.reads_failed:
            console.print(
                f"[yellow]{summary.reads_failed} read(s) failed; "
                "showing what was available[/yellow]"
            )
        _emit_view(service, args, summary)

    # Unsupported chains are allowed here; the view carries the warning
    asyncio.run(run())


async def _transact(args: argparse.Namespace, action: str, *params) -> None:
    service = BallotService.with_signer(
        GlobalConstants.PRIVATE_KEY, approve=_approve_callback(args)
    )
    service.connect(_signer_address(), args.chain_id)
    await service.refresh()

    if service.view.warning:
        console.print(f"[yellow]{service.view.warning}[/yellow]")
        return

    issued = await getattr(service, action)(*params)
    if not issued:
        console.print(
            f"[yellow]Nothing sent:[/yellow] {action.replace('_', ' ')} "
            "is not available for this account right now"
        )
        print_view(service.view, service.identity)
        return

    # The post-settlement refetch runs in the background
    await service.refetcher.wait_idle()
    print_transaction(service.transaction)
    _emit_view(service, args)


def cmd_vote(args: argparse.Namespace) -> None:
    validate_chain_id(args.chain_id)
    index = validate_proposal_index(args.index)
    asyncio.run(_transact(args, "vote", index))


def cmd_delegate(args: argparse.Namespace) -> None:
    validate_chain_id(args.chain_id)
    target = validate_eth_address(args.to, "to")
    asyncio.run(_transact(args, "delegate", target))


def cmd_grant_right(args: argparse.Namespace) -> None:
    validate_chain_id(args.chain_id)
    target = validate_eth_address(args.to, "to")
    asyncio.run(_transact(args, "grant_right", target))


def cmd_watch(args: argparse.Namespace) -> None:
    async def run():
        service = BallotService()
        service.connect(_resolve_account(args), args.chain_id)
        last = None
        while True:
            await service.refresh()
            if service.view != last:
                last = service.view
                console.rule()
                print_view(service.view, service.identity)
            await asyncio.sleep(args.interval)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--chain-id",
        type=int,
        default=GlobalConstants.DEFAULT_CHAIN_ID,
        help="Chain ID (8453 Base, 42220 Celo)",
    )
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--output", type=str, help="Output filename")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log debug output"
    )


def _add_signing(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Sign without asking for confirmation",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ballot", description="Ballot contract client"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # status
    p_status = sub.add_parser("status", help="Show proposals and voter state")
    _add_common(p_status)
    p_status.add_argument("--account", type=str, help="Account to inspect")
    p_status.set_defaults(func=cmd_status)

    # vote
    p_vote = sub.add_parser("vote", help="Vote for a proposal")
    _add_common(p_vote)
    _add_signing(p_vote)
    p_vote.add_argument("--index", type=int, required=True)
    p_vote.set_defaults(func=cmd_vote)

    # delegate
    p_del = sub.add_parser("delegate", help="Delegate your vote")
    _add_common(p_del)
    _add_signing(p_del)
    p_del.add_argument("--to", type=str, required=True)
    p_del.set_defaults(func=cmd_delegate)

    # grant-right
    p_grant = sub.add_parser(
        "grant-right", help="Give an address the right to vote (chairperson)"
    )
    _add_common(p_grant)
    _add_signing(p_grant)
    p_grant.add_argument("--to", type=str, required=True)
    p_grant.set_defaults(func=cmd_grant_right)

    # watch
    p_watch = sub.add_parser("watch", help="Poll the ballot and print changes")
    _add_common(p_watch)
    p_watch.add_argument("--account", type=str, help="Account to inspect")
    p_watch.add_argument(
        "--interval",
        type=float,
        default=GlobalConstants.POLL_INTERVAL,
        help="Seconds between refreshes",
    )
    p_watch.set_defaults(func=cmd_watch)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_log_level("DEBUG")
    try:
        args.func(args)
    except (ValueError, ConfigurationException) as e:
        handle_command_error(e)


if __name__ == "__main__":
    main()
