"""
Ballot Client - Dashboard

A single page application for following a ballot, voting, delegating and,
for the chairperson, giving other accounts the right to vote.
"""

import asyncio

import pandas as pd
import streamlit as st
from eth_account import Account
from eth_utils.address import is_address

# Add parent directory to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ballot_client.ballot import BallotService
from ballot_client.ballot.models import TransactionState
from ballot_client.shared.constants import GlobalConstants


# Page configuration
st.set_page_config(
    page_title="Ballot",
    page_icon="🗳️",
    layout="wide"
)


def _new_service() -> BallotService:
    if GlobalConstants.PRIVATE_KEY:
        return BallotService.with_signer(GlobalConstants.PRIVATE_KEY)
    return BallotService()


# Initialize session state
if "ballot_service" not in st.session_state:
    st.session_state.ballot_service = _new_service()


async def run_action(service: BallotService, action: str, *params) -> bool:
    """Run one transaction and the refetch that follows it."""
    issued = await getattr(service, action)(*params)
    await service.refetcher.wait_idle()
    return issued


def signer_address():
    if not GlobalConstants.PRIVATE_KEY:
        return None
    return Account.from_key(GlobalConstants.PRIVATE_KEY).address


def render_connection(service: BallotService):
    """Sidebar wallet panel; the dialog closes on any account or chain change."""
    st.sidebar.header("Wallet")
    identity = service.identity

    if identity.is_connected:
        st.sidebar.markdown(f"**Account:** `{identity.account}`")
        name = GlobalConstants.CHAIN_NAMES.get(identity.chain_id, "Unsupported")
        st.sidebar.markdown(f"**Chain:** {name} ({identity.chain_id})")
        if st.sidebar.button("Disconnect", use_container_width=True):
            service.disconnect()
            st.rerun()

    if st.sidebar.button(
        "🔌 Connect Wallet" if not identity.is_connected else "🔁 Switch",
        use_container_width=True,
    ):
        service.guard.open_connection_prompt()

    if not service.guard.connection_prompt_open:
        return

    with st.sidebar.form("connect"):
        account = st.text_input(
            "Account",
            value=identity.account or signer_address() or "",
            placeholder="0x...",
        )
        chain = st.selectbox(
            "Chain",
            [("Base", 8453), ("Celo", 42220), ("Other", None)],
            format_func=lambda x: x[0],
        )
        other_chain = st.number_input("Other chain ID", min_value=1, value=1)
        submitted = st.form_submit_button("Connect")

    if submitted:
        if not is_address(account):
            st.sidebar.error("Invalid Ethereum address")
            return
        chain_id = chain[1] if chain[1] else int(other_chain)
        if not service.connect(account, chain_id):
            service.guard.close_connection_prompt()
        st.rerun()


def render_proposals(service: BallotService):
    view = service.view
    status = service.transaction

    st.subheader("📊 Proposals")
    if view.is_loading:
        st.info("Loading proposals...")
        return
    if not view.proposals:
        st.info("No proposals found.")
        return

    proposals_df = pd.DataFrame(
        [
            {"#": p.index, "Proposal": p.name, "Votes": p.vote_count}
            for p in view.proposals
        ]
    )
    st.dataframe(proposals_df, use_container_width=True, hide_index=True)

    if view.winner is not None:
        st.metric("Winning Proposal", view.winner)

    can_vote = (
        view.voter is not None
        and not view.has_voted
        and view.has_right_to_vote
    )
    cols = st.columns(len(view.proposals))
    for col, proposal in zip(cols, view.proposals):
        with col:
            if st.button(
                f"Vote: {proposal.name or proposal.index}",
                key=f"vote_{proposal.index}",
                use_container_width=True,
                disabled=status.disabled or not can_vote,
            ):
                asyncio.run(run_action(service, "vote", proposal.index))
                st.rerun()


def render_voter(service: BallotService):
    view = service.view
    status = service.transaction

    st.subheader("🧾 Your Ballot")
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Voting Weight", view.voting_weight)
    with col2:
        st.metric("Voted", "Yes" if view.has_voted else "No")

    if view.vote_status:
        st.success(view.vote_status)
    elif view.voter is not None and not view.has_right_to_vote:
        st.warning("You do not have the right to vote yet.")

    if not view.has_voted:
        service.inputs.delegate_address = st.text_input(
            "Delegate to",
            value=service.inputs.delegate_address,
            placeholder="0x...",
        )
        if st.button("🤝 Delegate", disabled=status.disabled):
            asyncio.run(run_action(service, "delegate"))
            st.rerun()

    if view.is_chairperson:
        st.subheader("🪪 Chairperson")
        service.inputs.grant_address = st.text_input(
            "Give right to vote",
            value=service.inputs.grant_address,
            placeholder="0x...",
        )
        if st.button("✅ Grant Right", disabled=status.disabled):
            asyncio.run(run_action(service, "grant_right"))
            st.rerun()


def render_transaction(service: BallotService):
    status = service.transaction
    if status.state == TransactionState.SETTLED_FAILURE:
        st.error(f"**{status.title}:** {status.label}")
    elif status.state == TransactionState.SETTLED_SUCCESS:
        st.success(status.label)
    elif status.label:
        st.info(status.label)

    if status.tx_hash:
        st.caption(f"Transaction: `{status.tx_hash}`")


def main():
    service: BallotService = st.session_state.ballot_service

    # Header
    st.title("🗳️ Ballot")
    st.markdown("Follow the ballot, vote, and delegate your voting right")

    render_connection(service)

    if service.view.warning or not service.reads_enabled:
        if service.view.warning:
            st.warning(service.view.warning)
        elif service.identity.chain_id is not None:
            st.info("No ballot contract configured for this chain.")
        else:
            st.info("Connect a wallet to see the ballot.")
        return

    # Any interaction reruns the page, which refreshes the reads
    st.button("🔄 Refresh")

    with st.spinner("Reading ballot..."):
        summary = asyncio.run(service.refresh())
    if summary.reads_failed:
        st.caption(f"{summary.reads_failed} read(s) failed; showing last known values")

    render_transaction(service)

    col1, col2 = st.columns([3, 2])
    with col1:
        render_proposals(service)
    with col2:
        render_voter(service)


if __name__ == "__main__":
    main()
