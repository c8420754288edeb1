"""
Streamlit Frontend for BizBalance

The dashboard a business owner keeps open while updating their numbers.

DESIGN PRINCIPLES:
1. Every keystroke-level edit goes through the session, never around it
2. Numbers shown are always recomputed from the current state
3. Bad input shows up as zero, never as an error page
4. The AI panel is optional and says so when it is not configured
"""

import asyncio
from decimal import Decimal

import streamlit as st

from bizbalance.calculations import OTHER_BANK
from bizbalance.models.finance import AccountType, CollectionName, RecordPatch
from bizbalance.orchestrator import (
    MISSING_KEY_NOTICE,
    DashboardSession,
    InsightController,
    InsightStatus,
    create_app_components,
)
from bizbalance.reporting import amount_text, build_distribution_figure, format_currency


# Page configuration
st.set_page_config(
    page_title="BizBalance",
    page_icon="📈",
    layout="wide",
)

st.markdown("""
<style>
    .bne-card {
        padding: 24px;
        background: linear-gradient(135deg, #0f172a, #1e293b);
        color: #f8fafc;
        border-radius: 16px;
        margin-bottom: 10px;
    }
    .bne-value {
        font-size: 2.6em;
        font-weight: bold;
        font-family: monospace;
    }
    .formula-pill {
        font-size: 0.75em;
        padding: 2px 8px;
        border-radius: 999px;
        background-color: #334155;
        font-family: monospace;
    }
    .positive { color: #34d399; font-weight: bold; }
    .negative { color: #fb7185; font-weight: bold; }
</style>
""", unsafe_allow_html=True)

MODE_LABELS = {False: "Standard (Add)", True: "Strict (Subtract)"}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_file_storage=True)
    except Exception as e:
        st.error(f"Local storage unavailable, changes will not be saved: {e}")
        return create_app_components(use_file_storage=False)


def signed_class(value: Decimal) -> str:
    return "positive" if value >= 0 else "negative"


def main():
    """Main application entry point."""
    session, insight, persister = get_components()

    render_header(session)
    render_summary_cards(session)

    if persister.last_error:
        st.warning(f"Your last change could not be saved: {persister.last_error}")

    st.markdown("---")

    col1, col2, col3 = st.columns(3)
    with col1:
        render_bank_accounts(session)
        render_line_items(session, CollectionName.CREDIT_CARDS)
    with col2:
        render_line_items(session, CollectionName.ACCOUNTS_RECEIVABLE)
        render_line_items(session, CollectionName.ACCOUNTS_PAYABLE)
    with col3:
        render_chart(session)
        render_insight_panel(session, insight)


def render_header(session: DashboardSession):
    left, right = st.columns([3, 2])
    with left:
        st.title("📈 BizBalance")
        st.caption("Real-time Business Net Exact (BNE) Calculator")
    with right:
        mode = st.radio(
            "Formula Mode",
            options=[False, True],
            index=1 if session.use_strict_formula else 0,
            format_func=lambda strict: MODE_LABELS[strict],
            horizontal=True,
        )
        session.set_strict_formula(mode)


def render_summary_cards(session: DashboardSession):
    calc = session.calculations

    main_col, bank_col, stats_col = st.columns([2, 1, 1])

    with main_col:
        st.markdown(f"""
        <div class="bne-card">
            <div>Business Net Exact (BNE) <span class="formula-pill">{calc.bne_formula}</span></div>
            <div class="bne-value">{format_currency(calc.bne)}</div>
            <div>
                Net Receivables (AR-AP):
                <span class="{signed_class(calc.net_receivables)}">{format_currency(calc.net_receivables)}</span>
                &nbsp;|&nbsp;
                Net Cash (B-C):
                <span class="{signed_class(calc.net_bank)}">{format_currency(calc.net_bank)}</span>
            </div>
        </div>
        """, unsafe_allow_html=True)

    with bank_col:
        st.markdown("**Liquid Assets (B)**")
        st.subheader(format_currency(calc.total_bank))
        for name, amount in calc.bank_breakdown.items():
            st.caption(f"{name} Total: {format_currency(amount)}")

    with stats_col:
        st.markdown("**Quick Stats**")
        st.markdown(f"Total AP: **{format_currency(calc.total_ap)}**")
        st.markdown(f"Total Credit: **{format_currency(calc.total_credit)}**")
        st.markdown(f"Total AR: **{format_currency(calc.total_ar)}**")


# =============================================================================
# EDITORS
# =============================================================================

def _on_field_change(session, collection, record_id, key, patch_builder):
    session.update_record(collection, record_id, patch_builder(st.session_state[key]))


def render_line_items(session: DashboardSession, collection: CollectionName):
    """Editor for AR, AP or credit cards."""
    records = session.data.records(collection)
    calc = session.calculations

    totals = {
        CollectionName.ACCOUNTS_RECEIVABLE: calc.total_ar,
        CollectionName.ACCOUNTS_PAYABLE: calc.total_ap,
        CollectionName.CREDIT_CARDS: calc.total_credit,
    }

    with st.container(border=True):
        head, value = st.columns([3, 2])
        head.markdown(f"#### {collection.label}")
        value.markdown(f"#### {format_currency(totals[collection])}")

        for record in records:
            name_key = f"{collection.value}-{record.id}-name"
            amount_key = f"{collection.value}-{record.id}-amount"

            c1, c2, c3 = st.columns([3, 2, 1])
            c1.text_input(
                "Description",
                value=record.name,
                key=name_key,
                placeholder="Description",
                label_visibility="collapsed",
                on_change=_on_field_change,
                args=(session, collection, record.id, name_key, RecordPatch.set_name),
            )
            c2.text_input(
                "Amount ($)",
                value=amount_text(record.amount),
                key=amount_key,
                placeholder="0.00",
                label_visibility="collapsed",
                on_change=_on_field_change,
                args=(session, collection, record.id, amount_key, RecordPatch.set_amount),
            )
            c3.button(
                "🗑️",
                key=f"{collection.value}-{record.id}-remove",
                on_click=session.remove_record,
                args=(collection, record.id),
            )

        st.button(
            "➕ Add Item",
            key=f"{collection.value}-add",
            on_click=session.add_record,
            args=(collection,),
        )


def render_bank_accounts(session: DashboardSession):
    """Editor for bank accounts."""
    collection = CollectionName.BANK_ACCOUNTS
    accounts = session.data.bank_accounts
    account_types = list(AccountType)

    with st.container(border=True):
        head, value = st.columns([3, 2])
        head.markdown("#### 🏦 Bank Accounts")
        value.markdown(f"#### {format_currency(session.calculations.total_bank)}")

        for account in accounts:
            bank_key = f"bank-{account.id}-bank-name"
            type_key = f"bank-{account.id}-type"
            amount_key = f"bank-{account.id}-amount"

            st.text_input(
                "Bank Name",
                value=account.bank_name,
                key=bank_key,
                placeholder=f"Bank Name (e.g. Bank 1), blank groups under {OTHER_BANK}",
                on_change=_on_field_change,
                args=(session, collection, account.id, bank_key, RecordPatch.set_bank_name),
            )
            c1, c2, c3 = st.columns([2, 2, 1])
            c1.selectbox(
                "Type",
                options=account_types,
                index=account_types.index(account.type),
                format_func=lambda t: t.value,
                key=type_key,
                label_visibility="collapsed",
                on_change=_on_field_change,
                args=(session, collection, account.id, type_key, RecordPatch.set_type),
            )
            c2.text_input(
                "Amount ($)",
                value=amount_text(account.amount),
                key=amount_key,
                placeholder="0.00",
                label_visibility="collapsed",
                on_change=_on_field_change,
                args=(session, collection, account.id, amount_key, RecordPatch.set_amount),
            )
            c3.button(
                "🗑️",
                key=f"bank-{account.id}-remove",
                on_click=session.remove_record,
                args=(collection, account.id),
            )

        st.button(
            "➕ Add Bank Account",
            key="bank-add",
            on_click=session.add_record,
            args=(collection,),
        )


# =============================================================================
# ANALYTICS
# =============================================================================

def render_chart(session: DashboardSession):
    with st.container(border=True):
        st.markdown("#### 🐷 Distribution")
        st.plotly_chart(
            build_distribution_figure(session.calculations),
            use_container_width=True,
        )


def render_insight_panel(session: DashboardSession, insight: InsightController):
    with st.container(border=True):
        st.markdown("#### 🧠 AI Financial Insight")

        clicked = st.button(
            "Generate insight",
            key="insight-generate",
            disabled=insight.is_generating,
        )

        if clicked:
            if not insight.is_available:
                st.error(MISSING_KEY_NOTICE)
            else:
                with st.spinner("Analyzing financial data..."):
                    status = run_async(insight.request_insight(session.calculations))
                if status == InsightStatus.BUSY:
                    st.info("An insight is already being generated.")

        if insight.insight_text:
            st.markdown(insight.insight_text)
        else:
            st.caption(
                "Click the button to generate a liquidity and solvency "
                "analysis based on your current inputs."
            )


if __name__ == "__main__":
    main()
