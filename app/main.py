"""
Streamlit Frontend for the Velam Fund Ledger

This is the screen the fund's treasurer keeps open during collection day.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every figure is re-read from the ledger after every change
3. Clear error messages in simple language
4. Visual feedback for all operations

The view role (admin / read-only) only hides edit controls. It is NOT an
access-control boundary: anyone with the data files can change them.
"""

from datetime import date
from decimal import Decimal

import streamlit as st

from velam.config import get_settings, validate_all_settings
from velam.ledger import LedgerAggregator, LedgerStore
from velam.models.entry import EntryKind, ExpenseType
from velam.orchestrator import create_app_components
from velam.services.storage import StorageError
from velam.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Velam Fund",
    page_icon="🐑",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_components() -> tuple[LedgerStore, LedgerAggregator]:
    """Get or create the ledger components (cached for the server's lifetime)."""
    return create_app_components()


def money(amount: Decimal) -> str:
    symbol = get_settings().fund.currency_symbol
    return f"{symbol}{amount:,.2f}"


def run_action(action, success_message: str) -> None:
    """Run a ledger mutation and report the outcome."""
    try:
        action()
    except ValidationError as e:
        for issue in e.issues:
            st.error(f"{issue.field}: {issue.message}")
        return
    except StorageError as e:
        # The change is recorded in memory; only the save failed
        st.warning(f"Saved in this session, but writing to storage failed: {e}")
        return
    st.success(success_message)
    st.rerun()


def is_admin() -> bool:
    return st.session_state.get("role", "Admin") == "Admin"


def main():
    """Main application entry point."""
    store, aggregator = get_components()

    st.sidebar.title("🐑 Velam Fund")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💰 Contributions", "🤝 Loans", "🧾 Expenses", "📅 Monthly Report", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.radio("View as:", ["Admin", "Read-only"], key="role")

    if page == "📊 Dashboard":
        render_dashboard(aggregator)
    elif page == "💰 Contributions":
        render_contributions_page(store, aggregator)
    elif page == "🤝 Loans":
        render_loans_page(store, aggregator)
    elif page == "🧾 Expenses":
        render_expenses_page(store, aggregator)
    elif page == "📅 Monthly Report":
        render_monthly_report(aggregator)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_dashboard(aggregator: LedgerAggregator):
    st.title("📊 Dashboard")
    totals = aggregator.dashboard()

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Contributions", money(totals.total_contributions))
    col2.metric("Total Interest", money(totals.total_interest))
    col3.metric("Available Balance", money(totals.available_balance))

    col1, col2, col3 = st.columns(3)
    col1.metric("Loans Given", money(totals.total_loans_given))
    col2.metric("Loans Returned", money(totals.total_loans_returned))
    col3.metric("Expenses", money(totals.total_expenses))

    st.markdown("### Money in per month")
    bars = aggregator.chart_series()
    if not bars:
        st.info("No data to display")
    else:
        st.bar_chart(
            {
                "month": [bar.month for bar in bars],
                "total": [float(bar.total) for bar in bars],
            },
            x="month",
            y="total",
        )


def render_entry_actions(store: LedgerStore, kind: EntryKind, entry) -> None:
    """Delete button for one entry (admins only)."""
    if st.button("🗑️ Delete", key=f"delete-{kind.value}-{entry.id}"):
        run_action(lambda: store.delete_entry(kind, entry.id), "Deleted")


def render_contributions_page(store: LedgerStore, aggregator: LedgerAggregator):
    st.title("💰 Contributions")
    fund = get_settings().fund

    if is_admin():
        with st.form("contribution_form", clear_on_submit=True):
            entry_date = st.date_input("Date", value=date.today())
            person_name = st.text_input("Member name")
            amount = st.number_input(
                "Amount (₹)",
                value=float(fund.default_contribution),
                min_value=0.0,
                step=50.0,
            )
            if st.form_submit_button("➕ Add Contribution", type="primary"):
                run_action(
                    lambda: store.add_contribution(entry_date, person_name, str(amount)),
                    "✅ Contribution added!",
                )

    contributions = aggregator.entries_newest_first(EntryKind.CONTRIBUTION)
    if not contributions:
        st.info("No contributions yet")
        return

    for c in contributions:
        with st.expander(f"{c.entry_date} · {c.person_name} · {money(c.amount)}"):
            st.markdown(f"**Month:** {c.month}")
            if is_admin():
                with st.form(f"edit-contribution-{c.id}"):
                    new_date = st.date_input("Date", value=c.entry_date)
                    new_name = st.text_input("Member name", value=c.person_name)
                    new_amount = st.number_input("Amount (₹)", value=float(c.amount), min_value=0.0)
                    if st.form_submit_button("💾 Save"):
                        run_action(
                            lambda: store.update_entry(EntryKind.CONTRIBUTION, c.id, {
                                "date": new_date,
                                "personName": new_name,
                                "amount": str(new_amount),
                            }),
                            "✅ Updated!",
                        )
                render_entry_actions(store, EntryKind.CONTRIBUTION, c)


def render_loans_page(store: LedgerStore, aggregator: LedgerAggregator):
    st.title("🤝 Loans")

    if is_admin():
        with st.form("loan_form", clear_on_submit=True):
            entry_date = st.date_input("Date", value=date.today())
            person_name = st.text_input("Borrower name")
            principal = st.number_input("Principal (₹)", min_value=0.0, step=100.0)
            interest = st.number_input("Interest (₹)", min_value=0.0, step=10.0)
            if st.form_submit_button("➕ Add Loan", type="primary"):
                run_action(
                    lambda: store.add_loan(entry_date, person_name, str(principal), str(interest)),
                    "✅ Loan added!",
                )

    st.markdown("### 🏆 Top Borrowers")
    ranks = aggregator.top_borrowers()
    if not ranks:
        st.markdown("No borrowers yet")
    for position, rank in enumerate(ranks, start=1):
        st.markdown(f"{position}. {rank.name} - **{rank.count}** times")

    st.markdown("---")
    loans = aggregator.entries_newest_first(EntryKind.LOAN)
    if not loans:
        st.info("No loans yet")
        return

    for loan in loans:
        badge = "🟢 Returned" if loan.is_returned else "🟠 Active"
        with st.expander(
            f"{loan.entry_date} · {loan.person_name} · {money(loan.principal)} + {money(loan.interest)} · {badge}"
        ):
            if loan.returned_date:
                st.markdown(f"**Returned on:** {loan.returned_date}")
            if not is_admin():
                continue
            if not loan.is_returned and st.button("↩️ Mark Returned", key=f"return-{loan.id}"):
                run_action(lambda: store.mark_loan_returned(loan.id), "✅ Loan returned")
            with st.form(f"edit-loan-{loan.id}"):
                new_date = st.date_input("Date", value=loan.entry_date)
                new_name = st.text_input("Borrower name", value=loan.person_name)
                new_principal = st.number_input("Principal (₹)", value=float(loan.principal), min_value=0.0)
                new_interest = st.number_input("Interest (₹)", value=float(loan.interest), min_value=0.0)
                if st.form_submit_button("💾 Save"):
                    run_action(
                        lambda: store.update_entry(EntryKind.LOAN, loan.id, {
                            "date": new_date,
                            "personName": new_name,
                            "principal": str(new_principal),
                            "interest": str(new_interest),
                        }),
                        "✅ Updated!",
                    )
            render_entry_actions(store, EntryKind.LOAN, loan)


def render_expenses_page(store: LedgerStore, aggregator: LedgerAggregator):
    st.title("🧾 Expenses")
    expense_types = list(ExpenseType)

    if is_admin():
        with st.form("expense_form", clear_on_submit=True):
            entry_date = st.date_input("Date", value=date.today())
            expense_type = st.selectbox(
                "Type",
                options=expense_types,
                format_func=lambda t: t.value,
            )
            description = st.text_input("Description")
            amount = st.number_input("Amount (₹)", min_value=0.0, step=100.0)
            if st.form_submit_button("➕ Add Expense", type="primary"):
                run_action(
                    lambda: store.add_expense(entry_date, expense_type, description, str(amount)),
                    "✅ Expense added!",
                )

    expenses = aggregator.entries_newest_first(EntryKind.EXPENSE)
    if not expenses:
        st.info("No expenses yet")
        return

    for e in expenses:
        with st.expander(f"{e.entry_date} · {e.expense_type.value} · {e.description} · {money(e.amount)}"):
            if not is_admin():
                continue
            with st.form(f"edit-expense-{e.id}"):
                new_date = st.date_input("Date", value=e.entry_date)
                new_type = st.selectbox(
                    "Type",
                    options=expense_types,
                    index=expense_types.index(e.expense_type),
                    format_func=lambda t: t.value,
                )
                new_description = st.text_input("Description", value=e.description)
                new_amount = st.number_input("Amount (₹)", value=float(e.amount), min_value=0.0)
                if st.form_submit_button("💾 Save"):
                    run_action(
                        lambda: store.update_entry(EntryKind.EXPENSE, e.id, {
                            "date": new_date,
                            "type": new_type,
                            "description": new_description,
                            "amount": str(new_amount),
                        }),
                        "✅ Updated!",
                    )
            render_entry_actions(store, EntryKind.EXPENSE, e)


def render_monthly_report(aggregator: LedgerAggregator):
    st.title("📅 Monthly Report")
    summary = aggregator.monthly_summary()

    if not summary:
        st.info("No data available")
        return

    st.table([
        {
            "Month": s.month,
            "Contributions": money(s.contributions),
            "Loans Given": money(s.loans_given),
            "Loans Returned": money(s.loans_returned),
            "Interest": money(s.interest),
            "Expenses": money(s.expenses),
        }
        for s in summary
    ])


def render_settings_page():
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()

    sections = [
        ("Storage", "storage"),
        ("Google Sheets", "google_sheets"),
        ("Fund rules", "fund"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    fund = get_settings().fund
    st.markdown("---")
    st.markdown("### Fund rules")
    st.markdown(f"- Members: **{fund.total_members}**")
    st.markdown(f"- Monthly contribution: **{money(fund.default_contribution)}**")
    st.markdown(f"- First month contribution: **{money(fund.first_month_contribution)}**")
    st.markdown(f"- Full month's collection: **{money(fund.expected_monthly_collection)}**")
    st.markdown(
        "To change these, set the `VELAM_FUND_*` variables in your `.env` file."
    )


if __name__ == "__main__":
    main()
