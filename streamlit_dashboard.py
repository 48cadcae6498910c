"""
Library Circulation Dashboard
Displays loan activity, overdue loans, stock levels and the circulation log using Streamlit
"""

import streamlit as st
import re
from pathlib import Path

import reports
from database_models import DEFAULT_DB_PATH, create_database, get_session_factory
from library_cli import DEFAULT_LOG_PATH

st.set_page_config(
    page_title="Library Circulation Dashboard",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("📚 Library Circulation Dashboard")
st.markdown("---")


# Helper functions
@st.cache_resource
def get_session_factory_for(db_path):
    if not Path(db_path).exists():
        return None
    return get_session_factory(create_database(db_path))


@st.cache_data(ttl=60)
def load_reports(db_path):
    Session = get_session_factory_for(db_path)
    if Session is None:
        return None
    with Session() as session:
        return {
            'popular': reports.popular_books(session, 10),
            'active': reports.active_loans(session),
            'overdue': reports.overdue_report(session),
            'stock': reports.stock_status(session),
            'members': reports.member_statistics(session),
        }


def read_log_file(log_path=DEFAULT_LOG_PATH):
    if Path(log_path).exists():
        with open(log_path, 'r') as f:
            return f.readlines()
    return None


def parse_log_for_metrics(logs):
    metrics = {
        'loans_issued': 0,
        'returns_processed': 0,
        'overdue_returns': 0,
        'suspension_days_applied': 0,
        'loans_rejected': 0,
        'returns_rejected': 0,
        'storage_errors': 0
    }

    for line in logs:
        # use regex to search through log lines for the circulation events and update the totals
        if "Loan processed successfully" in line:
            metrics['loans_issued'] += 1

        if "Return processed successfully" in line:
            metrics['returns_processed'] += 1

        if "days overdue. Suspension period" in line:
            metrics['overdue_returns'] += 1
            match = re.search(r'Suspension period: (\d+) days', line)
            if match:
                metrics['suspension_days_applied'] += int(match.group(1))

        if "Loan rejected" in line:
            metrics['loans_rejected'] += 1

        if "Return rejected" in line:
            metrics['returns_rejected'] += 1

        if "Database error while" in line:
            metrics['storage_errors'] += 1

    return metrics


# main dashboard
db_path = st.sidebar.text_input("Database path", value=DEFAULT_DB_PATH)
log_path = st.sidebar.text_input("Log file", value=DEFAULT_LOG_PATH)

data = load_reports(db_path)
logs = read_log_file(log_path)

if data is None:
    st.error("Database not found. Please create it by running the menu first:")
    st.code("python library_cli.py", language="bash")
else:
    # Section 1: Circulation Summary
    st.header("📊 Circulation Summary")

    stock = data['stock']
    col1, col2, col3 = st.columns(3)

    with col1:
        st.subheader("Books")
        st.metric("Titles", len(stock))
        st.metric("Copies", int(stock['quantity'].sum()) if len(stock) > 0 else 0)
        st.metric("Copies on Loan", int(stock['on_loan'].sum()) if len(stock) > 0 else 0)

    with col2:
        st.subheader("Members")
        st.metric("Registered Members", data['members']['total_members'])
        st.metric("Members with Overdue Loans", data['members']['overdue_members'])

    with col3:
        st.subheader("Loans")
        st.metric("Active Loans", len(data['active']))
        st.metric("Overdue Loans", len(data['overdue']))

    # Section 2: Overdue Loans
    st.markdown("---")
    st.header("⏰ Overdue Loans")

    overdue = data['overdue']
    if len(overdue) > 0:
        col1, col2 = st.columns(2)
        with col1:
            st.metric("Max Days Overdue", int(overdue['overdue_days'].max()))
        with col2:
            st.metric("Max Suspension (days)", int(overdue['suspension_days'].max()))
        st.dataframe(overdue, use_container_width=True)
    else:
        st.info("✅ No overdue loans found!")

    # Section 3: Popular Books and Stock
    st.markdown("---")
    st.header("📈 Popular Books & Stock")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Top 10 Popular Books")
        popular = data['popular']
        if len(popular) > 0:
            st.bar_chart(popular.set_index('title')['loan_count'])
            st.dataframe(popular, use_container_width=True)
        else:
            st.info("No books in the catalog yet.")

    with col2:
        st.subheader("Stock Status")
        st.dataframe(stock, use_container_width=True)

# Section 4: Circulation Log
st.markdown("---")
st.header("🔍 Circulation Log")

if logs is None:
    st.warning(f"Log file not found: {log_path}")
else:
    metrics = parse_log_for_metrics(logs)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Loans Issued", metrics['loans_issued'])
        st.metric("Loans Rejected", metrics['loans_rejected'])
    with col2:
        st.metric("Returns Processed", metrics['returns_processed'])
        st.metric("Returns Rejected", metrics['returns_rejected'])
    with col3:
        st.metric("Overdue Returns", metrics['overdue_returns'])
    with col4:
        st.metric("Suspension Days Applied", metrics['suspension_days_applied'])
        st.metric("Storage Errors", metrics['storage_errors'])

    # Create tabs for different log views
    tab1, tab2, tab3 = st.tabs(["Full Log", "Errors Only", "Warnings Only"])

    with tab1:
        st.subheader("Complete Circulation Log")
        log_text = "".join(logs)
        st.text_area(
            "Full log output",
            value=log_text,
            height=400,
            disabled=True,
            key="full_log"
        )

    with tab2:
        st.subheader("Errors")
        error_logs = [line for line in logs if " - ERROR - " in line]
        if error_logs:
            st.text_area(
                "Error logs",
                value="".join(error_logs),
                height=300,
                disabled=True,
                key="error_log"
            )
        else:
            st.info("✅ No errors found!")

    with tab3:
        st.subheader("Warnings (rejections and overdue returns)")
        warning_logs = [line for line in logs if " - WARNING - " in line]
        if warning_logs:
            st.text_area(
                "Warning logs",
                value="".join(warning_logs),
                height=300,
                disabled=True,
                key="warning_log"
            )
        else:
            st.info("✅ No warnings found!")

# Footer
st.markdown("---")
st.markdown("""
### 📌 About This Dashboard

This dashboard summarises the library circulation database and its log. It shows:

- **Circulation Summary:** Stock, members and active loans
- **Overdue Loans:** Days overdue and the suspension each loan would earn on return (2 days per overdue day)
- **Popular Books & Stock:** Loan counts per title and copies on the shelf
- **Audit Trail:** Loans, returns and rejections recorded in `library_circulation.log`

Run `python library_cli.py` to issue loans and process returns.
""")
