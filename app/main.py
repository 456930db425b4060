"""
Streamlit Frontend for the Cash Book

This is the interface the owners use daily to keep the apartment's
cash book, reservations and planned expenses.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Visual feedback for all operations
4. Every amount is shown in the currency of its own year

The login is kept as an explicit Session in st.session_state. Nothing
below the login form renders until that session is authenticated.
"""

import asyncio
from datetime import date

import streamlit as st

from src.audit import configure_logging
from src.auth import AuthenticationError, Authenticator, Session, require_authenticated
from src.config import get_settings
from src.ledger import currency_for, format_amount, format_currency_totals
from src.models.ledger import (
    BookingSource,
    EntryType,
    Granularity,
    UpcomingExpenseType,
)
from src.orchestrator import (
    BookingsFlow,
    CashBookFlow,
    UpcomingExpensesFlow,
    create_app_components,
    describe_store_error,
)
from src.queries import InvalidRangeError
from src.services.storage import NotFoundError, StorageError
from src.validation import FormValidationError, FormValidator


# Page configuration
st.set_page_config(
    page_title="Cash Book",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

MONTHS = [
    "Януари", "Февруари", "Март", "Април", "Май", "Юни",
    "Юли", "Август", "Септември", "Октомври", "Ноември", "Декември",
]


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
    configure_logging(get_settings().app.log_level)
    return create_app_components(use_storage=True)


def show_form_error(error: FormValidationError) -> None:
    st.error(FormValidator().get_user_friendly_summary(error.result))


def show_warnings(result) -> None:
    if result.warnings:
        st.warning(FormValidator().get_user_friendly_summary(result))


def main():
    """Main application entry point."""
    try:
        cash_book, bookings, upcoming, authenticator = get_components()
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        st.info("See `.env.example` for the required variables.")
        st.stop()

    if "session" not in st.session_state:
        st.session_state.session = Session.anonymous()

    try:
        session = require_authenticated(st.session_state.session)
    except AuthenticationError:
        render_login_page(authenticator)
        return

    # Sidebar navigation
    st.sidebar.title("📒 Cash Book")
    st.sidebar.caption(f"Logged in as {session.username}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Dashboard", "📒 Cash Book", "📊 Statistics", "🛏️ Bookings", "🗓️ Upcoming Expenses", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        st.session_state.session = authenticator.logout(session)
        st.rerun()

    # Route to appropriate page
    try:
        if page == "🏠 Dashboard":
            render_dashboard_page(cash_book, bookings, upcoming)
        elif page == "📒 Cash Book":
            render_cash_book_page(cash_book)
        elif page == "📊 Statistics":
            render_statistics_page(cash_book)
        elif page == "🛏️ Bookings":
            render_bookings_page(bookings)
        elif page == "🗓️ Upcoming Expenses":
            render_upcoming_page(upcoming)
        elif page == "⚙️ Settings":
            render_settings_page(cash_book)
    except NotFoundError as e:
        st.warning(describe_store_error(e))
        st.info("Reload the page to see the current data.")
    except StorageError as e:
        st.error(describe_store_error(e))
        st.info("Reload the page to try again.")


def render_login_page(authenticator: Authenticator):
    """Render the login form."""
    st.title("🔐 Login")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        try:
            st.session_state.session = authenticator.login(username, password)
        except AuthenticationError as e:
            st.error(str(e))
        else:
            st.rerun()


def render_dashboard_page(
    cash_book: CashBookFlow,
    bookings: BookingsFlow,
    upcoming: UpcomingExpensesFlow,
):
    """Render the overview page."""
    st.title("🏠 Dashboard")
    today = date.today()

    summary = run_async(cash_book.yearly_summary(today.year))
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_amount(summary.total_income, summary.year))
    col2.metric("Expense", format_amount(summary.total_expense, summary.year))
    col3.metric("Profit", format_amount(summary.profit, summary.year))

    st.markdown("---")
    left, right = st.columns(2)

    with left:
        st.subheader("🛏️ Bookings")
        booking_summary = run_async(bookings.summary(today))
        if not booking_summary.current and not booking_summary.upcoming:
            st.info("No open bookings.")
        for booking in booking_summary.current:
            st.markdown(
                f"**Now:** {booking.source.value} · {booking.description} "
                f"({booking.start_date} → {booking.end_date})"
            )
        for booking in booking_summary.upcoming:
            st.markdown(
                f"{booking.source.value} · {booking.description} "
                f"({booking.start_date} → {booking.end_date})"
            )

    with right:
        st.subheader("🗓️ Upcoming Expenses")
        expense_summary = run_async(upcoming.summary())
        for expense in expense_summary.expenses:
            st.markdown(
                f"{expense.date} · {expense.description} · "
                f"{format_amount(expense.amount, expense.date.year)}"
            )
        st.markdown(f"**Total:** {format_currency_totals(expense_summary.totals)}")


def render_cash_book_page(cash_book: CashBookFlow):
    """Render the cash book: new entry form, entries and monthly report."""
    st.title("📒 Cash Book")

    with st.form("new_entry", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            entry_date = st.date_input("Date", value=date.today())
            entry_type = st.selectbox(
                "Type",
                options=list(EntryType),
                format_func=lambda t: t.value,
            )
        with col2:
            amount = st.text_input("Amount", placeholder="e.g. 12,50")
            description = st.text_input("Description")
        submitted = st.form_submit_button("💾 Add", type="primary")

    if submitted:
        try:
            _, result = run_async(
                cash_book.add_entry(entry_type, amount, description, entry_date)
            )
        except FormValidationError as e:
            show_form_error(e)
        else:
            st.success("Entry saved.")
            show_warnings(result)

    st.markdown("---")
    st.subheader("Monthly report")

    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        month = st.selectbox(
            "Month",
            options=list(range(1, 13)),
            index=today.month - 1,
            format_func=lambda m: MONTHS[m - 1],
        )
    with col2:
        year = st.text_input("Year", value=str(today.year))

    try:
        report = run_async(cash_book.monthly_report(month, year))
    except InvalidRangeError as e:
        st.error(str(e))
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_amount(report.total_income, report.year))
    col2.metric("Expense", format_amount(report.total_expense, report.year))
    col3.metric("Balance", format_amount(report.balance, report.year))

    if not report.entries:
        st.info("No entries for this month.")
        return

    for entry in report.entries:
        cols = st.columns([2, 2, 2, 5, 1])
        cols[0].write(entry.date.isoformat())
        cols[1].write(entry.type.value)
        cols[2].write(format_amount(entry.amount, entry.date.year))
        cols[3].write(entry.description)
        if cols[4].button("🗑️", key=f"delete_entry_{entry.id}"):
            run_async(cash_book.delete_entry(entry.id))
            st.rerun()


def render_statistics_page(cash_book: CashBookFlow):
    """Render the charts and the top expense categories."""
    st.title("📊 Statistics")

    years = run_async(cash_book.available_years())
    if not years:
        st.info("No entries yet.")
        return

    year = st.selectbox("Year", options=years)
    unit = currency_for(year).value

    st.subheader(f"Top categories ({unit})")
    for category in run_async(cash_book.top_categories(year)):
        st.progress(
            min(category.percentage / 100, 1.0),
            text=f"{category.category}: {format_amount(category.amount, year)} ({category.percentage:.1f}%)",
        )

    st.subheader(f"Cumulative income and expense ({unit})")
    granularity = st.radio(
        "Group by",
        options=[Granularity.DAY, Granularity.MONTH],
        format_func=lambda g: g.value.title(),
        horizontal=True,
    )
    col1, col2 = st.columns(2)
    with col1:
        series = run_async(cash_book.cumulative_series(year, granularity))
        st.line_chart(
            {
                "Period": series.labels,
                "Income": [float(v) for v in series.income],
                "Expense": [float(v) for v in series.expense],
            },
            x="Period",
            y=["Income", "Expense"],
        )
    with col2:
        daily = run_async(cash_book.daily_totals(year))
        st.caption(f"Income and expense per day ({unit})")
        st.bar_chart(
            {
                "Day": list(daily),
                "Income": [float(t.income) for t in daily.values()],
                "Expense": [float(t.expense) for t in daily.values()],
            },
            x="Day",
            y=["Income", "Expense"],
        )

    st.subheader(f"Monthly balance ({unit})")
    balance = run_async(cash_book.balance_by_month(year))
    st.bar_chart(
        {"Month": list(balance), "Balance": [float(v) for v in balance.values()]},
        x="Month",
        y="Balance",
    )

    with st.expander("Expenses by description"):
        distribution = run_async(cash_book.expense_distribution(year))
        for description, amount in sorted(distribution.items(), key=lambda i: i[1], reverse=True):
            st.write(f"{description}: {format_amount(amount, year)}")


def render_bookings_page(bookings: BookingsFlow):
    """Render the reservations table."""
    st.title("🛏️ Bookings")

    with st.form("new_booking", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            source = st.selectbox(
                "Source",
                options=list(BookingSource),
                format_func=lambda s: s.value,
            )
            description = st.text_input("Description")
        with col2:
            start_date = st.date_input("Start date", value=date.today())
            end_date = st.date_input("End date", value=date.today())
        submitted = st.form_submit_button("💾 Add", type="primary")

    if submitted:
        try:
            run_async(bookings.add_booking(source, description, start_date, end_date))
        except FormValidationError as e:
            show_form_error(e)
        else:
            st.success("Booking saved.")

    if "bookings_page" not in st.session_state:
        st.session_state.bookings_page = run_async(bookings.initial_page())

    rows, pages = run_async(bookings.page(st.session_state.bookings_page))
    if not rows:
        st.info("No bookings yet.")

    for booking in rows:
        cols = st.columns([2, 4, 2, 2, 1, 1])
        cols[0].write(booking.source.value)
        cols[1].write(booking.description)
        cols[2].write(booking.start_date.isoformat())
        cols[3].write(f"{booking.end_date.isoformat()} ({booking.nights} nights)")
        if cols[4].button("✅" if booking.completed else "⬜", key=f"toggle_{booking.id}"):
            run_async(bookings.toggle_completed(booking.id))
            st.rerun()
        if cols[5].button("🗑️", key=f"delete_booking_{booking.id}"):
            run_async(bookings.delete_booking(booking.id))
            st.rerun()

    prev_col, label_col, next_col = st.columns([1, 2, 1])
    if prev_col.button("◀", disabled=st.session_state.bookings_page <= 1):
        st.session_state.bookings_page -= 1
        st.rerun()
    label_col.markdown(f"Page {st.session_state.bookings_page} of {pages}")
    if next_col.button("▶", disabled=st.session_state.bookings_page >= pages):
        st.session_state.bookings_page += 1
        st.rerun()


def render_upcoming_page(upcoming: UpcomingExpensesFlow):
    """Render planned expenses with the copy-to-cash-book action."""
    st.title("🗓️ Upcoming Expenses")

    with st.form("new_upcoming", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            expense_date = st.date_input("Date", value=date.today())
            expense_type = st.selectbox(
                "Type",
                options=list(UpcomingExpenseType),
                format_func=lambda t: t.value,
            )
        with col2:
            amount = st.text_input("Amount")
            description = st.text_input("Description")
        submitted = st.form_submit_button("💾 Add", type="primary")

    if submitted:
        try:
            _, result = run_async(
                upcoming.add_expense(expense_date, description, amount, expense_type)
            )
        except FormValidationError as e:
            show_form_error(e)
        else:
            st.success("Planned expense saved.")
            show_warnings(result)

    type_filter = st.radio(
        "Show",
        options=[None] + list(UpcomingExpenseType),
        format_func=lambda t: "All" if t is None else t.value,
        horizontal=True,
    )

    expenses = run_async(upcoming.list_expenses(type_filter))
    for expense in expenses:
        cols = st.columns([2, 4, 2, 2, 1, 1])
        cols[0].write(expense.date.isoformat())
        cols[1].write(expense.description)
        cols[2].write(format_amount(expense.amount, expense.date.year))
        cols[3].write(expense.type.value)
        if cols[4].button("📒", key=f"copy_{expense.id}", help="Copy to cash book"):
            run_async(upcoming.copy_to_cash_book(expense.id))
            st.success(f"'{expense.description}' added to the cash book.")
        if cols[5].button("🗑️", key=f"delete_upcoming_{expense.id}"):
            run_async(upcoming.delete_expense(expense.id))
            st.rerun()

    if expenses:
        with st.expander("✏️ Edit a planned expense"):
            selected = st.selectbox(
                "Expense",
                options=expenses,
                format_func=lambda e: f"{e.date} · {e.description}",
            )
            with st.form(f"edit_{selected.id}"):
                new_date = st.date_input("Date", value=selected.date)
                new_description = st.text_input("Description", value=selected.description)
                new_amount = st.text_input("Amount", value=str(selected.amount))
                new_type = st.selectbox(
                    "Type",
                    options=list(UpcomingExpenseType),
                    index=list(UpcomingExpenseType).index(selected.type),
                    format_func=lambda t: t.value,
                )
                if st.form_submit_button("💾 Save"):
                    try:
                        run_async(upcoming.update_expense(
                            selected.id, new_date, new_description, new_amount, new_type
                        ))
                    except FormValidationError as e:
                        show_form_error(e)
                    else:
                        st.rerun()

    totals = run_async(upcoming.totals(type_filter))
    st.markdown(f"**Total:** {format_currency_totals(totals)}")


def render_settings_page(cash_book: CashBookFlow):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    # Check services
    from src.config import validate_all_settings

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Login", "auth"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Recent activity")
    history = cash_book.audit_logger.history
    if not history:
        st.info("Nothing recorded in this session yet.")
    for event in reversed(history[-20:]):
        st.caption(f"{event.timestamp:%Y-%m-%d %H:%M:%S} · {event.description}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your credentials. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
