from typing import cast

import streamlit as st
from streamlit.runtime.uploaded_file_manager import UploadedFile

from src.inventory_lib import (
    CommandResult,
    InventorySession,
    JsonFileStore,
    decode_upload,
    default_store_path,
    filter_lines,
    lines_to_table,
    next_sort,
    sort_lines,
)
from src.inventory_lib.constants import COLUMN_LABELS, SORT_FIELDS

ACTIONS = ["Import CSV", "Combine CSV", "Load BOM", "Combine BOM"]

st.set_page_config(page_title="LCSC Inventory Manager", page_icon="📦", layout="wide")

st.title("📦 LCSC Inventory Manager")
st.markdown("""
**Track your LCSC parts and check BOMs against them.**

Import your LCSC order exports, load one or more BOMs, and see what you are
short of before you build. Applying a BOM only touches the working copy; the
original stays saved until you clear it.
""")

# Session bootstrap
if "session" not in st.session_state:
    store = JsonFileStore(default_store_path())
    st.session_state.session = InventorySession.from_store(store)
if "flash" not in st.session_state:
    st.session_state.flash = []
if "pending_confirm" not in st.session_state:
    st.session_state.pending_confirm = None
if "sort_field" not in st.session_state:
    st.session_state.sort_field = None
    st.session_state.sort_asc = True
if "upload_nonce" not in st.session_state:
    st.session_state.upload_nonce = 0

session = cast(InventorySession, st.session_state.session)


def notify(result: CommandResult) -> None:
    st.session_state.flash.append(result)


def run_command(command: str) -> None:
    notify(getattr(session, command)())


def request_command(command: str) -> None:
    """Runs a command, or parks it until the user confirms."""
    if session.requires_confirmation(command):
        st.session_state.pending_confirm = command
    else:
        run_command(command)


def confirm_command() -> None:
    command = st.session_state.pending_confirm
    st.session_state.pending_confirm = None
    if command:
        run_command(command)


def cancel_command() -> None:
    st.session_state.pending_confirm = None


def process_input() -> None:
    """Dispatches the pasted or uploaded CSV to the selected action."""
    action = st.session_state.action
    file_name = None

    if st.session_state.input_method == "Paste Text":
        text = st.session_state.get("csv_text", "")
    else:
        upload_key = f"upload_{st.session_state.upload_nonce}"
        f = cast(UploadedFile | None, st.session_state.get(upload_key))
        if f is None:
            notify({"level": "info", "message": "Choose a CSV file first."})
            return
        text = decode_upload(f.getvalue())
        file_name = f.name

    if not text.strip():
        notify({"level": "info", "message": "Nothing to import."})
        return

    if action in ("Import CSV", "Combine CSV"):
        result = session.import_inventory(
            text, file_name=file_name, combine=action == "Combine CSV"
        )
    else:
        result = session.load_bom(text, combine=action == "Combine BOM")

    notify(result)
    st.session_state.csv_text = ""
    st.session_state.upload_nonce += 1


def toggle_sort(field: str) -> None:
    st.session_state.sort_field, st.session_state.sort_asc = next_sort(
        st.session_state.sort_field, st.session_state.sort_asc, field
    )


def set_usage() -> None:
    notify(
        session.edit_pending_quantity(
            st.session_state.usage_part, st.session_state.usage_qty
        )
    )


# Messages from the previous interaction
for msg in st.session_state.flash:
    if msg["level"] == "warning":
        st.warning(msg["message"], icon="⚠️")
    elif msg["level"] == "info":
        st.info(msg["message"])
    else:
        st.success(msg["message"])
st.session_state.flash = []

# Confirmation gate for destructive commands
if st.session_state.pending_confirm:
    with st.container(border=True):
        st.warning(session.confirmation_prompt(st.session_state.pending_confirm))
        c1, c2 = st.columns(2)
        c1.button("Confirm", key="confirm_yes", type="primary", on_click=confirm_command)
        c2.button("Cancel", key="confirm_no", on_click=cancel_command)

st.divider()
st.subheader("1. Load Data")

c1, c2 = st.columns([1, 2])
c1.radio("Action", ACTIONS, key="action")
c1.radio("Input Method", ["Upload File", "Paste Text"], key="input_method", horizontal=True)

if st.session_state.input_method == "Paste Text":
    c2.text_area(
        "CSV Text",
        height=150,
        key="csv_text",
        placeholder="Paste CSV content with its header row...",
    )
else:
    c2.file_uploader(
        "Upload CSV", type=["csv"], key=f"upload_{st.session_state.upload_nonce}"
    )

st.button("Process", key="process", type="primary", on_click=process_input)

st.divider()
st.subheader("2. Reconcile")

c1, c2, c3, c4, c5 = st.columns(5)

export = session.export()
if export["data"] is not None:
    c1.download_button(
        "Export CSV",
        data=export["data"],
        file_name=export["file_name"],
        mime="text/csv",
        key="export",
        on_click=notify,
        args=(export["result"],),
    )
else:
    c1.button("Export CSV", key="export_empty", on_click=notify, args=(export["result"],))

c2.button(
    "Apply BOM",
    key="apply_bom",
    type="primary" if session.has_unapplied_changes else "secondary",
    on_click=request_command,
    args=("apply_bom",),
)
c3.button("Clear BOM", key="clear_bom", on_click=request_command, args=("clear_bom",))
c4.button("Clear All", key="clear_all", on_click=request_command, args=("clear_all",))
if session.is_modified_from_storage:
    c5.button(
        "Reload Original",
        key="reload_original",
        on_click=request_command,
        args=("reload_original",),
    )

multiplier = st.number_input(
    "Build Multiplier",
    min_value=1,
    value=session.multiplier,
    step=1,
    key="multiplier_input",
    help="How many builds the loaded BOM usage is for.",
)
if multiplier != session.multiplier:
    session.set_multiplier(multiplier)

if session.is_modified_from_storage:
    st.warning("BOM Applied (Not Saved). The stored original is untouched.")

findings = session.findings
if findings:
    with st.expander(f"⚠️ {len(findings)} BOM issues", expanded=True):
        for finding in findings:
            st.error(finding["reason"])
elif session.has_unapplied_changes:
    st.success("✅ Every BOM part is in stock.")

with st.container():
    c1, c2, c3 = st.columns(3)
    c1.metric("Unique Parts", len(session.inventory))
    c2.metric("Inventory Value", f"${session.total_value:,.2f}")
    c3.metric(f"Usage Cost (×{session.multiplier})", f"${session.usage_cost:,.2f}")

st.divider()
st.subheader(f"3. Inventory: {session.file_name}")

if len(session.inventory) == 0:
    st.info("No inventory yet. Import an LCSC order export to get started.")
else:
    st.text_input("Search", key="search_query", placeholder="Part, manufacturer, description...")

    sort_cols = st.columns(len(SORT_FIELDS))
    for col, field in zip(sort_cols, SORT_FIELDS):
        label = COLUMN_LABELS[field]
        if st.session_state.sort_field == field:
            label += " ▲" if st.session_state.sort_asc else " ▼"
        col.button(label, key=f"sort_{field}", on_click=toggle_sort, args=(field,))

    view = sort_lines(
        session.inventory.lines(),
        st.session_state.sort_field,
        st.session_state.sort_asc,
    )
    view = filter_lines(view, st.session_state.get("search_query", ""))

    st.dataframe(lines_to_table(view), use_container_width=True, hide_index=True)

    with st.form("usage_form"):
        st.caption("Override the BOM usage of a single part.")
        c1, c2 = st.columns([3, 1])
        c1.selectbox("Part", list(session.inventory.keys()), key="usage_part")
        c2.number_input("Used Qty", min_value=0, step=1, key="usage_qty")
        st.form_submit_button("Set Usage", on_click=set_usage)
