"""Shared formatting and file utilities for commands."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ballot_client.ballot.models import (
    SessionIdentity,
    TransactionState,
    TransactionStatus,
    ViewModel,
)
from ballot_client.shared.constants import GlobalConstants

# Shared console instance
console = Console()


def format_address(address: Optional[str], length: int = 10) -> str:
    """
    Format an Ethereum address to show first and last characters.

    Args:
        address: Ethereum address
        length: Total visible characters (default: 10)

    Returns:
        Formatted address like "0x1234...5678"
    """
    if not address:
        return "N/A"
    if len(address) <= length:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_chain(chain_id: Optional[int]) -> str:
    if chain_id is None:
        return "N/A"
    name = GlobalConstants.CHAIN_NAMES.get(chain_id)
    return f"{name} ({chain_id})" if name else str(chain_id)


def save_json_output(
    data: Dict[str, Any],
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')
        print_path: Whether to print the saved file path

    Returns:
        Full path to saved file
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filepath = output_path / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def generate_timestamped_filename(prefix: str, extension: str = "json") -> str:
    """
    Generate a filename with timestamp.

    Returns:
        Filename like "prefix_20240315_123456.json"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{extension}"


def view_to_dict(
    view: ViewModel, identity: Optional[SessionIdentity] = None
) -> Dict[str, Any]:
    """JSON-serializable form of a ViewModel snapshot."""
    voter = None
    if view.voter is not None:
        voter = {
            "weight": view.voter.weight,
            "has_voted": view.voter.has_voted,
            "delegate": view.voter.delegate,
            "chosen_proposal_index": view.voter.chosen_proposal_index,
        }

    data: Dict[str, Any] = {
        "mode": view.mode.value,
        "warning": view.warning,
        "is_loading": view.is_loading,
        "proposals": [
            {
                "index": proposal.index,
                "name": proposal.name,
                "vote_count": proposal.vote_count,
            }
            for proposal in view.proposals
        ],
        "winner": view.winner,
        "is_chairperson": view.is_chairperson,
        "voter": voter,
        "vote_status": view.vote_status,
        "delegate_status": view.delegate_status,
    }
    if identity is not None:
        data["account"] = identity.account
        data["chain_id"] = identity.chain_id
    return data


def create_proposals_table(view: ViewModel) -> Table:
    """
    Create a Rich table listing the decoded proposals.

    The current winner is highlighted; the voter's own choice is marked.
    """
    table = Table(
        show_header=True,
        header_style="bold cyan",
        show_lines=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("#", width=4, justify="right")
    table.add_column("Proposal", width=32)
    table.add_column("Votes", width=10, justify="right")
    table.add_column("", width=12)

    chosen = view.voter.chosen_proposal_index if view.voter else None
    for proposal in view.proposals:
        marks = []
        if view.winner is not None and proposal.name == view.winner:
            marks.append("[bold green]leading[/bold green]")
        if chosen == proposal.index:
            marks.append("[cyan]your vote[/cyan]")
        table.add_row(
            str(proposal.index),
            proposal.name or "[dim](unnamed)[/dim]",
            str(proposal.vote_count),
            " ".join(marks),
        )
    return table


def print_view(view: ViewModel, identity: SessionIdentity) -> None:
    """Render a ViewModel snapshot to the shared console."""
    console.print(
        f"[bold]Account:[/bold] {format_address(identity.account)}  "
        f"[bold]Chain:[/bold] {format_chain(identity.chain_id)}"
    )

    if view.warning:
        console.print(Panel(view.warning, style="yellow"))
        return

    if view.is_loading:
        console.print("[dim]Loading proposals...[/dim]")
        return

    if not view.proposals:
        console.print("[yellow]No proposals found[/yellow]")
    else:
        console.print(create_proposals_table(view))

    if view.winner is not None:
        console.print(f"[bold]Winner:[/bold] {view.winner}")

    if view.voter is not None:
        console.print(f"[bold]Voting weight:[/bold] {view.voting_weight}")
        if view.vote_status:
            console.print(f"[green]{view.vote_status}[/green]")
        elif not view.has_right_to_vote:
            console.print("[yellow]You do not have the right to vote[/yellow]")
    if view.is_chairperson:
        console.print("[magenta]You are the chairperson[/magenta]")


def print_transaction(status: TransactionStatus) -> None:
    """Render the outcome of a vote / delegate / grant-right call."""
    if status.state == TransactionState.SETTLED_FAILURE:
        title = status.title or "Transaction failed"
        console.print(f"[red]{title}:[/red] {status.label}")
    elif status.state == TransactionState.SETTLED_SUCCESS:
        console.print(f"[green]{status.label}[/green]")
    elif status.label:
        console.print(f"[cyan]{status.label}[/cyan]")

    if status.tx_hash:
        console.print(f"[dim]Transaction: {status.tx_hash}[/dim]")
