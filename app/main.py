"""
Streamlit Frontend for PocketFin

DESIGN PRINCIPLES:
1. Every screen is recomputed from the full ledger on each rerun
2. Receipt scans only prefill the form - the user presses Save
3. Clear error messages; a failed call never changes the ledger

Pages: Dashboard, Accounts, Transactions, Analytics, Advisor.
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from pocketfin.config import get_settings
from pocketfin.formatting import (
    format_currency,
    format_date,
    format_installment_progress,
    format_signed,
)
from pocketfin.ledger import cashflow_series, per_installment_from_total, search_transactions
from pocketfin.models import Category, ChatMessage, InstallmentPlan, TransactionType, to_cents
from pocketfin.orchestrator import (
    AdvisorError,
    AdvisorFlow,
    AnalysisError,
    LedgerService,
    ReceiptScanFlow,
    create_app_components,
)
from pocketfin.services.storage import StoreError
from pocketfin.validation import LedgerValidationError, TransactionValidator


st.set_page_config(
    page_title="PocketFin",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

CURRENCY = get_settings().app.currency_symbol


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
        return create_app_components()
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_ai=False)


def money(value: Decimal) -> str:
    return format_currency(value, CURRENCY)


def main():
    """Main application entry point."""
    ledger, receipt_flow, advisor_flow = get_components()

    st.sidebar.title("💰 PocketFin")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🏦 Accounts", "🧾 Transactions", "📈 Analytics", "💬 Advisor"],
        index=0,
    )

    try:
        if page == "📊 Dashboard":
            render_dashboard_page(ledger)
        elif page == "🏦 Accounts":
            render_accounts_page(ledger)
        elif page == "🧾 Transactions":
            render_transactions_page(ledger, receipt_flow)
        elif page == "📈 Analytics":
            render_analytics_page(ledger)
        elif page == "💬 Advisor":
            render_advisor_page(advisor_flow)
    except StoreError as e:
        st.error(f"Could not reach your ledger: {e}")


def render_dashboard_page(ledger: LedgerService):
    """Stat cards, cash-flow chart and the latest transactions."""
    st.title("📊 Financial Overview")
    stats = run_async(ledger.financial_stats())

    col1, col2, col3 = st.columns(3)
    col1.metric("Net Worth", money(stats.net_worth))
    col2.metric("Total Income", money(stats.total_income))
    col3.metric("Total Expenses", money(stats.total_expenses))

    st.subheader("Recent cash flow")
    series = cashflow_series(stats.recent_transactions)
    if series:
        st.bar_chart(
            {
                "date": [format_date(day) for day, _ in series],
                "amount": [float(amount) for _, amount in series],
            },
            x="date",
            y="amount",
        )

    st.subheader("Latest transactions")
    for t in stats.recent_transactions:
        st.markdown(
            f"**{t.merchant}** · {t.category.value} · {format_date(t.date)} "
            f"· {format_signed(t, CURRENCY)}"
        )


def render_accounts_page(ledger: LedgerService):
    """Per-bank balance, month expenses and active installments."""
    st.title("🏦 My Accounts")
    st.markdown("Balances and installment purchases per bank.")

    projections = run_async(ledger.account_projections(date.today()))
    columns = st.columns(3)
    for index, (account, projection) in enumerate(projections):
        with columns[index % 3]:
            st.markdown(
                f"<div style='background:{account.color};color:white;padding:16px;"
                f"border-radius:10px'><b>{account.name}</b><br/>"
                f"Current balance<br/><span style='font-size:1.6em'>"
                f"{money(projection.current_balance)}</span></div>",
                unsafe_allow_html=True,
            )
            st.markdown(f"Spent this month: **{money(projection.current_month_expenses)}**")
            st.caption("Active installments")
            if not projection.active_installments:
                st.write("No active installments.")
            for installment in projection.active_installments:
                st.write(
                    f"{installment.description}: "
                    f"{format_installment_progress(installment, CURRENCY)}"
                )

    st.markdown("---")
    with st.form("add_bank_account"):
        st.subheader("Add bank account")
        name = st.text_input("Name")
        color = st.color_picker("Color", value="#64748b")
        initial_balance = st.number_input("Initial balance", value=0.0, step=0.01, format="%.2f")
        if st.form_submit_button("Add account"):
            try:
                run_async(ledger.add_bank_account(
                    name=name,
                    color=color,
                    initial_balance=to_cents(Decimal(str(initial_balance))),
                ))
                st.success(f"Account {name} added.")
                st.rerun()
            except ValidationError as e:
                st.error(f"Please check the account details: {e.errors()[0]['msg']}")


def render_transactions_page(ledger: LedgerService, receipt_flow):
    """List, search, add (single or installments), scan and delete."""
    st.title("🧾 Transactions")

    if "prefill" not in st.session_state:
        st.session_state.prefill = None

    accounts = run_async(ledger.list_bank_accounts())
    transactions = run_async(ledger.list_transactions())

    # Receipt scan - only fills the form below
    if receipt_flow is not None:
        with st.expander("📷 Scan a receipt"):
            uploaded = st.file_uploader(
                "Receipt photo",
                type=get_settings().app.supported_formats_list,
            )
            if uploaded and st.button("Analyze receipt"):
                with st.spinner("Reading the receipt..."):
                    try:
                        st.session_state.prefill = run_async(receipt_flow.scan(
                            uploaded.getvalue(),
                            filename=uploaded.name,
                            mime_type=uploaded.type,
                        ))
                        st.success("Receipt read. Review the form and save.")
                    except AnalysisError as e:
                        st.error(f"Could not analyze the receipt: {e}")

    prefill = st.session_state.prefill
    render_transaction_form(ledger, accounts, prefill)

    st.markdown("---")
    query = st.text_input("🔍 Search by merchant or category")
    for t in search_transactions(transactions, query):
        col1, col2 = st.columns([6, 1])
        badge = f" · installment {t.installment.current}/{t.installment.total}" if t.installment else ""
        col1.markdown(
            f"**{t.merchant}** · {t.category.value} · {format_date(t.date)} "
            f"· {format_signed(t, CURRENCY)}{badge}"
        )
        if col2.button("🗑️", key=f"delete-{t.id}"):
            run_async(ledger.delete_transaction(t.id))
            st.rerun()


def show_save_notice():
    """Success and validator warnings from the last save, kept across the rerun."""
    notice = st.session_state.pop("save_notice", None)
    if not notice:
        return
    message, result = notice
    st.success(message)
    if result.warnings:
        st.warning(TransactionValidator.get_user_friendly_summary(result))


def render_transaction_form(ledger: LedgerService, accounts, prefill):
    st.subheader("New transaction")
    show_save_notice()
    if not accounts:
        st.info("Add a bank account first.")
        return

    categories = list(Category)
    is_installment = st.checkbox("Installment purchase")
    prefill_amount = float(prefill.amount) if prefill and prefill.amount else 0.0

    with st.form("add_transaction"):
        col1, col2 = st.columns(2)
        with col1:
            merchant = st.text_input("Description", value=(prefill.merchant if prefill and prefill.merchant else ""))
            kind = st.selectbox(
                "Type",
                options=list(TransactionType),
                format_func=lambda x: x.value.title(),
                disabled=is_installment,
            )
            category = st.selectbox(
                "Category",
                options=categories,
                index=categories.index(prefill.category) if prefill else 0,
                format_func=lambda x: x.value,
            )
        with col2:
            entry_date = st.date_input("Date", value=(prefill.date if prefill and prefill.date else date.today()))
            account = st.selectbox("Bank account", options=accounts, format_func=lambda a: a.name)
            if is_installment:
                count = st.number_input("Installments", min_value=2, max_value=360, value=2, step=1)
                total = st.number_input(
                    "Purchase total",
                    min_value=0.0,
                    value=prefill_amount,
                    step=0.01,
                    format="%.2f",
                    help="Leave the installment value at zero to split the total evenly.",
                )
                per_installment = st.number_input("Installment value", min_value=0.0, step=0.01, format="%.2f")
            else:
                amount = st.number_input(
                    "Amount",
                    min_value=0.0,
                    value=prefill_amount,
                    step=0.01,
                    format="%.2f",
                )

        submitted = st.form_submit_button("Save")

    if not submitted:
        return

    try:
        if is_installment:
            total_value = to_cents(Decimal(str(total))) if total > 0 else None
            if per_installment == 0 and total_value is not None:
                per_value = per_installment_from_total(total_value, int(count))
            else:
                per_value = to_cents(Decimal(str(per_installment)))
            plan = InstallmentPlan(
                start_date=entry_date,
                merchant_base=merchant,
                installment_count=int(count),
                per_installment_amount=per_value,
                total_amount=total_value,
                category=category,
                bank_id=account.id,
            )
            _, result = run_async(ledger.add_installment_purchase(plan))
            message = f"{plan.installment_count} installments of {money(per_value)} saved."
        else:
            _, result = run_async(ledger.add_transaction(
                merchant=merchant,
                amount=to_cents(Decimal(str(amount))),
                date=entry_date,
                type=kind,
                category=category,
                bank_id=account.id,
            ))
            message = "Transaction saved."
        st.session_state.save_notice = (message, result)
        st.session_state.prefill = None
        st.rerun()
    except LedgerValidationError as e:
        st.error(str(e))
    except ValidationError as e:
        st.error(f"Please check the form: {e.errors()[0]['msg']}")


def render_analytics_page(ledger: LedgerService):
    """Expense breakdown per category."""
    st.title("📈 Analytics")
    stats = run_async(ledger.financial_stats())

    if not stats.expenses_by_category:
        st.info("No expenses recorded yet.")
        return

    st.bar_chart(
        {
            "category": [entry.category.value for entry in stats.expenses_by_category],
            "total": [float(entry.total_value) for entry in stats.expenses_by_category],
        },
        x="category",
        y="total",
    )
    for entry in stats.expenses_by_category:
        share = entry.total_value / stats.total_expenses * 100
        st.markdown(
            f"<span style='color:{entry.color}'>●</span> {entry.category.value}: "
            f"{money(entry.total_value)} ({share:.1f}%)",
            unsafe_allow_html=True,
        )


def render_advisor_page(advisor_flow: AdvisorFlow):
    """Chat with the advisor about recent transactions."""
    st.title("💬 Financial Advisor")

    if advisor_flow is None:
        st.warning("The advisor needs a Gemini API key (GEMINI_API_KEY).")
        return

    if "chat" not in st.session_state:
        st.session_state.chat = [
            ChatMessage(role="model", text="Hi! Ask me anything about your spending."),
        ]

    for message in st.session_state.chat:
        with st.chat_message("assistant" if message.role == "model" else "user"):
            st.markdown(message.text)

    question = st.chat_input("Ask a question")
    if not question:
        return

    st.session_state.chat.append(ChatMessage(role="user", text=question))
    try:
        answer = run_async(advisor_flow.ask(question))
    except AdvisorError:
        answer = (
            "Sorry, I'm having trouble reaching my financial brain right now. "
            "Please try again later."
        )
    st.session_state.chat.append(ChatMessage(role="model", text=answer))
    st.rerun()


if __name__ == "__main__":
    main()
