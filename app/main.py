"""
Streamlit Frontend for the Offering Ledger

This is the screen the assembly treasurer uses during the week and at
the final settlement.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every form submits exactly one kind of change
3. Clear error messages in simple language
4. Totals are always recomputed from the ledger, never typed in
5. Nothing is deleted without an explicit confirmation

The UI never edits the document directly. It builds commands and hands
them to the LedgerStore; rejected commands come back as messages.
"""

import asyncio

import streamlit as st

from offering_ledger.aggregation import (
    attendance_total,
    counting_total,
    day_income_total,
    is_time_valid,
)
from offering_ledger.config import validate_all_settings
from offering_ledger.errors import MutationError
from offering_ledger.models import (
    DAYS,
    DENOMINATIONS,
    TIMES,
    BankRecordType,
    ExpenseBook,
    ReconciliationStatus,
)
from offering_ledger.mutations import (
    AddBankRecord,
    AddCategory,
    AddDetail,
    DeleteCategory,
    EditDetail,
    RemoveBankRecord,
    RemoveDetail,
    RenameCategory,
    ResetReportOverrides,
    SetReportOverride,
    UpdateAttendance,
    UpdateCounting,
    UpdateManualCount,
)
from offering_ledger.orchestrator import LedgerStore, ReportFlow, create_app_components
from offering_ledger.services import DocumentImportError
from offering_ledger.validation import LedgerValidator, coerce_digits


# Page configuration
st.set_page_config(
    page_title="Offering Ledger",
    page_icon="⛪",
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
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


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
    return create_app_components(use_storage=True)


def won(amount: int) -> str:
    return f"₩{amount:,}"


def submit(store: LedgerStore, *commands) -> bool:
    """Dispatch commands in order; stop and show the message on rejection."""
    for command in commands:
        try:
            store.dispatch(command)
        except MutationError as e:
            st.error(f"❌ {e}")
            return False
    return True


def main():
    """Main application entry point."""
    store, report_flow = get_components()

    # Sidebar navigation
    st.sidebar.title("⛪ Offering Ledger")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "💵 Counting",
            "🧾 Expenses",
            "👛 Personal Expenses",
            "📄 Report",
            "⚖️ Reconciliation",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    summary = report_flow.summary()
    st.sidebar.metric("Total offering", won(summary.total_offering))
    st.sidebar.metric("Balance", won(summary.net_book_balance))
    st.sidebar.caption(
        f"Last updated: {store.document.last_updated.astimezone():%Y-%m-%d %H:%M}"
    )
    if store.last_save_error:
        st.sidebar.warning(f"⚠️ Last save failed: {store.last_save_error}")

    # Route to appropriate page
    if page == "💵 Counting":
        render_counting_page(store)
    elif page == "🧾 Expenses":
        render_book_page(store, ExpenseBook.INSTITUTIONAL)
    elif page == "👛 Personal Expenses":
        render_book_page(store, ExpenseBook.PERSONAL)
    elif page == "📄 Report":
        render_report_page(store, report_flow)
    elif page == "⚖️ Reconciliation":
        render_reconciliation_page(store, report_flow)
    elif page == "⚙️ Settings":
        render_settings_page(store)


def render_counting_page(store: LedgerStore):
    """Cash count and attendance per service."""
    st.title("💵 Offering Count")

    document = store.document
    day = st.radio("Day", [d.value for d in DAYS], horizontal=True)
    st.markdown(
        f'<div class="big-number">{won(day_income_total(document, day))}</div>',
        unsafe_allow_html=True,
    )

    for time in TIMES:
        if not is_time_valid(day, time):
            continue

        slot = document.counting.get(day, {}).get(time.value, {})
        with st.form(f"count-{day}-{time.value}"):
            st.markdown(
                f"### {time.value} · {won(counting_total(document, day, time))}"
            )
            columns = st.columns(len(DENOMINATIONS) + 1)
            quantities = {}
            for column, denomination in zip(columns, DENOMINATIONS):
                quantities[denomination] = column.number_input(
                    won(denomination),
                    min_value=0,
                    step=1,
                    value=int(slot.get(denomination, 0)),
                    key=f"qty-{day}-{time.value}-{denomination}",
                )
            headcount = columns[-1].number_input(
                "Attendance",
                min_value=0,
                step=1,
                value=attendance_total(document, day, time),
                key=f"att-{day}-{time.value}",
            )

            if st.form_submit_button("💾 Save count"):
                commands = [
                    UpdateCounting(day=day, time=time.value, denomination=d, value=q)
                    for d, q in quantities.items()
                    if q != slot.get(d, 0)
                ]
                if headcount != attendance_total(document, day, time):
                    commands.append(
                        UpdateAttendance(day=day, time=time.value, value=headcount)
                    )
                if submit(store, *commands):
                    st.rerun()


def _line_label(line) -> str:
    label = f"{line.display_name} · {won(line.amount)}"
    if line.is_withdrawal_marker:
        return f"🏦 {line.display_name}"
    if line.is_linked:
        label += " 🔗"
    if line.is_synced:
        label += f" ↪ {line.linked_category}"
    if line.entry_date:
        label = f"{line.entry_date:%m.%d}  {label}"
    return label


def render_book_page(store: LedgerStore, book: ExpenseBook):
    """Categories and detail lines of one expense book."""
    personal = book == ExpenseBook.PERSONAL
    st.title("👛 Personal Expenses" if personal else "🧾 Institutional Expenses")

    document = store.document
    amounts = document.amounts(book)
    st.markdown(
        f'<div class="big-number">{won(sum(amounts.values()))}</div>',
        unsafe_allow_html=True,
    )
    if personal:
        st.caption(
            "Lines can be mirrored into an institutional category. "
            "Mirrored lines (🔗) can only be changed from here."
        )

    with st.form(f"add-category-{book.value}", clear_on_submit=True):
        name = st.text_input("New category")
        if st.form_submit_button("➕ Add category"):
            if submit(store, AddCategory(book=book, name=name)):
                st.rerun()

    sync_options = ["(don't mirror)"] + list(document.expenses)

    for category, total in amounts.items():
        lines = document.details(book).get(category, [])
        with st.expander(f"{category} · {won(total)} ({len(lines)})"):
            for line in lines:
                col1, col2 = st.columns([5, 1])
                col1.write(_line_label(line))
                if col2.button("🗑️", key=f"del-{book.value}-{line.id}"):
                    if submit(store, RemoveDetail(
                        book=book, category=category, detail_id=line.id,
                    )):
                        st.rerun()

            with st.form(f"add-line-{book.value}-{category}", clear_on_submit=True):
                col1, col2 = st.columns([3, 2])
                line_name = col1.text_input("What for", key=f"ln-{book.value}-{category}")
                amount = col2.text_input("Amount", key=f"la-{book.value}-{category}")
                sync = None
                if personal:
                    choice = st.selectbox(
                        "Mirror into", sync_options, key=f"ls-{category}"
                    )
                    sync = None if choice == sync_options[0] else choice
                if st.form_submit_button("➕ Add line"):
                    if submit(store, AddDetail(
                        book=book,
                        category=category,
                        name=line_name,
                        amount=amount,
                        sync_category=sync,
                    )):
                        st.rerun()

            editable = [line for line in lines if not line.is_withdrawal_marker]
            if editable:
                with st.form(f"edit-line-{book.value}-{category}"):
                    target = st.selectbox(
                        "Edit line",
                        editable,
                        format_func=_line_label,
                        key=f"es-{book.value}-{category}",
                    )
                    col1, col2 = st.columns([3, 2])
                    new_name = col1.text_input("New name", key=f"en-{book.value}-{category}")
                    new_amount = col2.text_input("New amount", key=f"ea-{book.value}-{category}")
                    sync = None
                    disconnect = False
                    if personal:
                        choice = st.selectbox(
                            "Mirror into", sync_options, key=f"esy-{category}"
                        )
                        sync = None if choice == sync_options[0] else choice
                        disconnect = st.checkbox(
                            "Stop mirroring", key=f"edc-{category}"
                        )
                    if st.form_submit_button("✏️ Update line"):
                        if submit(store, EditDetail(
                            book=book,
                            category=category,
                            detail_id=target.id,
                            name=new_name or target.name,
                            amount=new_amount if new_amount else target.amount,
                            sync_category=sync,
                            disconnect=disconnect,
                        )):
                            st.rerun()

            col1, col2 = st.columns([3, 1])
            renamed = col1.text_input(
                "Rename category", value=category, key=f"rn-{book.value}-{category}"
            )
            if col2.button("✏️ Rename", key=f"rnb-{book.value}-{category}"):
                if submit(store, RenameCategory(
                    book=book, old_name=category, new_name=renamed,
                )):
                    st.rerun()

            confirm = st.checkbox(
                "I want to delete this category and all its lines",
                key=f"dc-{book.value}-{category}",
            )
            if st.button("🗑️ Delete category", key=f"dcb-{book.value}-{category}",
                         disabled=not confirm):
                if submit(store, DeleteCategory(book=book, name=category)):
                    st.rerun()


def render_report_page(store: LedgerStore, report_flow: ReportFlow):
    """Canonical report, editable presentation copy and narrative summary."""
    st.title(f"📄 {report_flow.settings.report_title}")

    canonical_tab, editable_tab, narrative_tab = st.tabs(
        ["Settlement report", "Presentation copy", "Narrative summary"]
    )

    with canonical_tab:
        rows, totals = report_flow.canonical()
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Income", won(totals.income))
        col2.metric("Expenses", won(totals.expenses))
        col3.metric("Balance", won(totals.net_balance))
        col4.metric("Attendance", f"{totals.attendance or 0:,}")
        st.table([
            {
                "Category": row.display_name,
                "Amount": won(row.amount),
                "Details": ", ".join(row.detail_names),
            }
            for row in rows
        ])

    with editable_tab:
        rows, totals = report_flow.editable()
        st.caption("Changes here only affect this copy, never the books.")
        with st.form("report-overrides"):
            edits = {}
            for row in rows:
                col1, col2 = st.columns([3, 2])
                edits[row.category] = (
                    col1.text_input(
                        row.category, value=row.display_name, key=f"ro-n-{row.category}"
                    ),
                    col2.text_input(
                        "Amount", value=f"{row.amount:,}", key=f"ro-a-{row.category}"
                    ),
                    row,
                )
            if st.form_submit_button("💾 Save presentation copy"):
                commands = []
                for category, (name, amount, row) in edits.items():
                    if name == row.display_name and amount == f"{row.amount:,}":
                        continue
                    # Values equal to the books mean "inherit"
                    commands.append(SetReportOverride(
                        category=category,
                        name=None if name.strip() == category else name,
                        amount=(
                            None if coerce_digits(amount) == row.canonical_amount
                            else amount
                        ),
                    ))
                if submit(store, *commands):
                    st.rerun()

        col1, col2, col3 = st.columns(3)
        col1.metric("Income", won(totals.income))
        col2.metric("Expenses", won(totals.expenses))
        col3.metric("Balance", won(totals.net_balance))

        if st.button("↩️ Reset presentation copy"):
            if submit(store, ResetReportOverrides()):
                st.rerun()

    with narrative_tab:
        if st.button("✨ Generate summary", type="primary"):
            with st.spinner("Writing the summary..."):
                st.session_state.narrative = run_async(report_flow.narrative())
        if st.session_state.get("narrative"):
            st.markdown(st.session_state.narrative)


def render_reconciliation_page(store: LedgerStore, report_flow: ReportFlow):
    """Manual cash recount, bank records and the settlement check."""
    st.title("⚖️ Reconciliation")

    document = store.document
    summary = report_flow.summary()

    col1, col2, col3 = st.columns(3)
    col1.metric("Book balance", won(summary.net_book_balance))
    col2.metric("Cash + bank", won(summary.physical_cash_total))
    col3.metric("Difference", won(summary.reconciliation_difference))

    if summary.reconciliation_status == ReconciliationStatus.SETTLED:
        st.markdown(
            '<div class="success-box"><h3>✅ Settled</h3>'
            "<p>Cash and bank match the books.</p></div>",
            unsafe_allow_html=True,
        )
    elif summary.reconciliation_status == ReconciliationStatus.SURPLUS:
        st.markdown(
            f'<div class="warning-box"><h3>⚠️ Surplus of '
            f"{won(summary.reconciliation_difference)}</h3>"
            "<p>There is more money than the books account for.</p></div>",
            unsafe_allow_html=True,
        )
    else:
        st.markdown(
            f'<div class="error-box"><h3>❌ Shortage of '
            f"{won(-summary.reconciliation_difference)}</h3>"
            "<p>There is less money than the books account for.</p></div>",
            unsafe_allow_html=True,
        )

    st.markdown("### 💴 Cash on hand")
    with st.form("manual-count"):
        columns = st.columns(len(DENOMINATIONS))
        quantities = {}
        for column, denomination in zip(columns, DENOMINATIONS):
            quantities[denomination] = column.number_input(
                won(denomination),
                min_value=0,
                step=1,
                value=int(document.manual_count.get(denomination, 0)),
                key=f"manual-{denomination}",
            )
        st.caption(f"Counted: {won(summary.manual_cash_total)}")
        if st.form_submit_button("💾 Save cash count"):
            if submit(store, *[
                UpdateManualCount(denomination=d, value=q)
                for d, q in quantities.items()
                if q != document.manual_count.get(d, 0)
            ]):
                st.rerun()

    st.markdown(f"### 🏦 Bank · {won(summary.bank_net)}")
    for record in document.bank_records:
        col1, col2 = st.columns([5, 1])
        sign = "−" if record.type == BankRecordType.WITHDRAW else "+"
        when = f"{record.entry_date:%m.%d}  " if record.entry_date else ""
        col1.write(f"{when}{record.name} · {sign}{won(record.amount)}")
        if col2.button("🗑️", key=f"bank-del-{record.id}"):
            if submit(store, RemoveBankRecord(record_id=record.id)):
                st.rerun()

    with st.form("add-bank-record", clear_on_submit=True):
        record_type = st.radio(
            "Type",
            [BankRecordType.DEPOSIT, BankRecordType.WITHDRAW],
            format_func=lambda t: "Deposit" if t == BankRecordType.DEPOSIT else "Withdrawal",
            horizontal=True,
        )
        personal_options = ["(none)"] + list(document.personal_expenses)
        settles = st.selectbox(
            "Withdrawal settles personal category",
            personal_options,
            help="Uses the category's total as the amount",
        )
        col1, col2 = st.columns([3, 2])
        name = col1.text_input("Description")
        amount = col2.text_input("Amount")
        if st.form_submit_button("➕ Add bank record"):
            personal_category = None if settles == personal_options[0] else settles
            if submit(store, AddBankRecord(
                name=name,
                amount=amount,
                type=record_type,
                personal_category=personal_category,
            )):
                st.rerun()


def render_settings_page(store: LedgerStore):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")
    status = validate_all_settings()

    services = [
        ("Gemini (Narrative summary)", "gemini"),
        ("Local storage", "storage"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Ready")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### 📤 Export")
    filename = st.text_input("File name", placeholder="church_finance_YYYY-MM-DD")
    name, payload = store.export_payload(filename)
    st.download_button(
        "⬇️ Download ledger",
        data=payload,
        file_name=name,
        mime="application/json",
        on_click=store.record_export,
        args=(name, len(payload)),
    )

    st.markdown("### 📥 Import")
    uploaded = st.file_uploader("Ledger file", type=["json"])
    if uploaded and st.button("📥 Replace ledger with this file"):
        try:
            result = store.import_from(uploaded.getvalue(), filename=uploaded.name)
        except DocumentImportError as e:
            st.error(f"❌ {e}")
        else:
            st.success(f"✅ Imported {uploaded.name}")
            st.text(LedgerValidator().get_user_friendly_summary(result))

    st.markdown("### 🧹 Reset")
    confirm = st.checkbox("I understand every entry will be erased")
    if st.button("🧹 Reset all data", disabled=not confirm):
        store.reset()
        st.session_state.pop("narrative", None)
        st.rerun()

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
