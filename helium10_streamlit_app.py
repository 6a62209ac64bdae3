#!/usr/bin/env python3
"""
Streamlit UI for the Helium 10 brand revenue runner.
Works exactly like the terminal version: the same runner fills in the CSV,
this page only starts it and shows the progress table.
"""

import os
import tempfile
import threading
import time

import streamlit as st

from helium10_revenue_fetcher import FetchConfig
from helium10_row_store import RowState, load_rows, rows_to_frame
from helium10_session_runner import run_revenue_session

WORKING_DIR = os.path.join(tempfile.gettempdir(), "helium10_revenue")


def display_progress_table(csv_path: str):
    """Display the brand table with per-state metrics"""
    rows = load_rows(csv_path)
    if not rows:
        st.info("No brands loaded yet")
        return

    st.dataframe(rows_to_frame(rows), use_container_width=True)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Total", len(rows))
    with col2:
        st.metric("Revenue Found", sum(1 for row in rows if row.state == RowState.RESOLVED))
    with col3:
        st.metric("Errors", sum(1 for row in rows if row.state == RowState.FAILED))
    with col4:
        st.metric("Remaining", sum(1 for row in rows if row.state == RowState.UNPROCESSED))


def run_in_background(config: FetchConfig, retry_errors: bool):
    """Run the revenue session in a background thread"""
    try:
        print(f"🚀 Starting revenue run for: {config.csv_path}")
        summary = run_revenue_session(config, retry_errors=retry_errors)
        print(f"✅ Run finished ({summary.searched} brands searched)")
    except Exception as e:
        print(f"❌ Run error: {e}")
        import traceback
        traceback.print_exc()


def main():
    st.title("💰 Helium 10 Brand Revenue")
    st.markdown("Fills the Revenue column of a brands CSV from Helium 10 Black Box")
    st.markdown("---")

    config = FetchConfig.from_env()

    # Configuration Section
    st.header("📋 Configuration")
    col1, col2 = st.columns(2)
    with col1:
        config.headless = st.checkbox("Headless Mode", value=config.headless, help="Run browser in background")
        retry_errors = st.checkbox("Retry Errors", value=False,
                                   help="Search brands marked 'Error retrieving revenue' again")
    with col2:
        config.settle_seconds = st.number_input("Settle delay (seconds)", min_value=0.0,
                                                value=float(config.settle_seconds))
        config.result_timeout_seconds = st.number_input("Result timeout (seconds)", min_value=1.0,
                                                        value=float(config.result_timeout_seconds))

    # File Upload Section
    st.header("📁 Input")
    uploaded_file = st.file_uploader("Choose CSV file", type=["csv"],
                                     help="CSV with Brand, Revenue and Note columns")
    if uploaded_file is not None:
        os.makedirs(WORKING_DIR, exist_ok=True)
        csv_path = os.path.join(WORKING_DIR, uploaded_file.name)
        # Keep the working copy once a run has started so progress is not overwritten
        if not st.session_state.get("runner_started"):
            with open(csv_path, "wb") as f:
                f.write(uploaded_file.getvalue())
        config.csv_path = csv_path
    else:
        config.csv_path = st.text_input("Or CSV path", value=config.csv_path)

    # Helium 10 Authentication Check
    st.header("🔐 Helium 10 Session")
    auth_ready = os.path.exists(config.storage_state_path)
    if auth_ready:
        st.success(f"✅ Stored session found: {config.storage_state_path}")
    else:
        st.warning("⚠️ No stored session found")
        st.markdown("Run `python helium10_session_runner.py --setup` in a terminal, "
                    "log into Helium 10 and close the browser window.")
        if st.button("🔄 Check Session", type="secondary"):
            st.rerun()

    st.markdown("---")

    if "runner_started" not in st.session_state:
        st.session_state.runner_started = False
    if "runner_thread" not in st.session_state:
        st.session_state.runner_thread = None

    can_start = auth_ready and os.path.exists(config.csv_path)
    if not can_start:
        st.warning("⚠️ A stored session and a CSV file are required to start")

    st.header("🚀 Execute")
    if not st.session_state.runner_started:
        if st.button("▶️ Start Processing", type="primary", use_container_width=True, disabled=not can_start):
            st.session_state.runner_thread = threading.Thread(
                target=run_in_background,
                args=(config, retry_errors),
            )
            st.session_state.runner_thread.start()
            st.session_state.runner_started = True
            st.session_state.runner_csv = config.csv_path
            st.rerun()
    else:
        csv_path = st.session_state.get("runner_csv", config.csv_path)
        is_running = (st.session_state.runner_thread and
                      st.session_state.runner_thread.is_alive())

        st.subheader("📊 Progress Table")
        display_progress_table(csv_path)

        if is_running:
            st.info("⏳ Processing in progress... Check terminal for detailed logs.")
            time.sleep(2)
            st.rerun()
        else:
            st.success("✅ Processing completed!")
            if os.path.exists(csv_path):
                with open(csv_path, "rb") as f:
                    st.download_button(
                        "📥 Download Results CSV",
                        data=f.read(),
                        file_name=os.path.basename(csv_path),
                        mime="text/csv",
                        type="primary",
                        use_container_width=True,
                    )
            if st.button("🔄 Process New File", type="secondary"):
                st.session_state.runner_started = False
                st.session_state.runner_thread = None
                st.rerun()
        return

    if os.path.exists(config.csv_path):
        st.subheader("📊 Current CSV")
        display_progress_table(config.csv_path)


if __name__ == "__main__":
    main()
