from datetime import date

import pandas as pd
import streamlit as st

from config import RELAY_BASE_URL, SESSION_STORAGE_PATH
from frontend.relay_client import RelayClient, RelayClientError
from frontend.session_manager import JsonFileStorage, SessionError, SessionIdentifierManager
from frontend.workflows import (
    EvaluationError,
    WorkflowError,
    compare_documents,
    generate_contract,
    in_flight,
    mark_in_flight,
    review_contract,
)
from services.review_service import (
    approve_change,
    build_comparison_report,
    generated_document_filename,
    refer_change,
    report_filename,
)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

st.set_page_config(
    page_title="Contract Workbench",
    layout="wide"
)

# ========================
# SESSION
# ========================
relay = RelayClient(RELAY_BASE_URL)
sessions = SessionIdentifierManager(relay, JsonFileStorage(SESSION_STORAGE_PATH))

if "session_id" not in st.session_state:
    try:
        st.session_state.session_id = sessions.acquire()
        st.session_state.session_error = None
    except SessionError as e:
        st.session_state.session_id = None
        st.session_state.session_error = str(e)

for key, default in [
    ("templates", None),
    ("generated", None),
    ("evaluation", []),
    ("changes", []),
    ("analyzing", False),
    ("comparing", False),
    ("review_error", None),
    ("compare_error", None),
]:
    if key not in st.session_state:
        st.session_state[key] = default


def reset_workflow_state():
    st.session_state.generated = None
    st.session_state.evaluation = []
    st.session_state.changes = []


# ========================
# SIDEBAR
# ========================
st.sidebar.title("Contract Workbench")
workflow = st.sidebar.radio("Workflow", ["Generate", "Review", "Compare"])

st.sidebar.caption(f"Session: {st.session_state.session_id or '—'}")
if st.session_state.session_error:
    st.sidebar.error(st.session_state.session_error)

if st.sidebar.button("New session"):
    # acquire() on the next run sees the flag and mints a fresh id
    sessions.request_new_session()
    del st.session_state["session_id"]
    reset_workflow_state()
    st.rerun()

if st.session_state.session_id:
    try:
        uploads = relay.session_uploads(st.session_state.session_id)
    except RelayClientError:
        uploads = None
    if uploads:
        st.sidebar.markdown(
            f"Reference: `{uploads.get('reference_file') or '—'}`  \n"
            f"Review: `{uploads.get('review_file') or '—'}`"
        )

# Templates are shared by every workflow
if st.session_state.templates is None:
    try:
        st.session_state.templates = relay.list_templates()
    except RelayClientError as e:
        st.session_state.templates = []
        st.error(f"Templates fetch error: {e.message}")

template_ids = [t.id for t in st.session_state.templates]
template_names = {t.id: t.name for t in st.session_state.templates}


# 1. GENERATE
if workflow == "Generate":
    st.header("Generate Contract")

    with st.form("generate_form"):
        template_type = st.selectbox("Template", template_ids, format_func=lambda t: template_names.get(t, t))
        enterprise_name = st.text_input("Enterprise Name")
        client_name = st.text_input("Client Name")
        effective_date = st.date_input("Effective Date", value=date.today())
        valid_duration = st.number_input("Valid Duration (years)", min_value=0, value=1, step=1)
        notice_period = st.number_input("Notice Period (months)", min_value=0, value=1, step=1)
        submitted = st.form_submit_button("Generate Contract")

    if submitted:
        form = {
            "template_type": template_type or "",
            "enterprise_name": enterprise_name,
            "client_name": client_name,
            "effective_date": effective_date.isoformat(),
            "valid_duration": str(valid_duration),
            "notice_period": str(notice_period),
        }
        with st.spinner("Generating contract..."):
            try:
                content = generate_contract(relay, st.session_state.session_id, form)
                st.session_state.generated = (
                    generated_document_filename(form["template_type"], client_name),
                    content,
                )
                st.success("Contract generated successfully!")
            except (WorkflowError, RelayClientError) as e:
                st.error(getattr(e, "message", str(e)))

    if st.session_state.generated:
        name, content = st.session_state.generated
        st.download_button("Download contract", data=content, file_name=name, mime=DOCX_MIME)

    if st.session_state.session_id and st.button("Check session status"):
        try:
            st.json(relay.session_status(st.session_state.session_id))
        except RelayClientError as e:
            st.error(e.message)


# 2. REVIEW
elif workflow == "Review":
    st.header("Review Contract")

    uploaded_file = st.file_uploader("Upload contract for review", type=["docx", "pdf"])
    contract_type = st.selectbox("Contract type", template_ids, format_func=lambda t: template_names.get(t, t))

    st.button(
        "Analyze",
        disabled=st.session_state.analyzing,
        on_click=mark_in_flight,
        args=(st.session_state, "analyzing"),
    )

    if st.session_state.analyzing:
        st.session_state.review_error = None
        with in_flight(st.session_state, "analyzing"), st.spinner("Evaluating contract..."):
            try:
                document = (uploaded_file.name, uploaded_file.getvalue()) if uploaded_file else None
                st.session_state.evaluation = review_contract(
                    relay, st.session_state.session_id, document, contract_type
                )
            except EvaluationError as e:
                st.session_state.review_error = (
                    "Failed to evaluate the contract after multiple attempts. "
                    f"Please try again or contact support. ({e})"
                )
            except WorkflowError as e:
                st.session_state.review_error = str(e)
            except RelayClientError as e:
                st.session_state.review_error = e.message
        # rerun so the button renders enabled again
        st.rerun()

    if st.session_state.review_error:
        st.error(st.session_state.review_error)

    if st.session_state.evaluation:
        icons = {"good": "✅", "warning": "⚠️", "critical": "❌"}
        for item in st.session_state.evaluation:
            with st.expander(f"{icons[item.status]} {item.question}"):
                st.write(item.answer)


# 3. COMPARE
else:
    st.header("Compare Contracts")

    col1, col2 = st.columns(2)
    with col1:
        original_file = st.file_uploader("Original document", type=["docx", "pdf"], key="original")
    with col2:
        compare_file = st.file_uploader("Document to compare", type=["docx", "pdf"], key="compare")
    selected_template = st.selectbox(
        "Template of the compare document", template_ids, format_func=lambda t: template_names.get(t, t)
    )

    st.button(
        "Compare Documents",
        disabled=st.session_state.comparing,
        on_click=mark_in_flight,
        args=(st.session_state, "comparing"),
    )

    if st.session_state.comparing:
        st.session_state.changes = []
        st.session_state.compare_error = None
        with in_flight(st.session_state, "comparing"), st.spinner("Comparing documents..."):
            try:
                session_id, changes = compare_documents(
                    relay,
                    sessions,
                    (original_file.name, original_file.getvalue()) if original_file else None,
                    (compare_file.name, compare_file.getvalue()) if compare_file else None,
                    selected_template,
                )
                st.session_state.session_id = session_id
                st.session_state.changes = changes
            except WorkflowError as e:
                st.session_state.compare_error = str(e)
            except (RelayClientError, SessionError) as e:
                st.session_state.compare_error = getattr(e, "message", str(e))
        st.rerun()

    if st.session_state.compare_error:
        st.error(st.session_state.compare_error)

    changes = st.session_state.changes
    if changes:
        st.subheader(f"Changes ({len(changes)})")
        st.dataframe(
            pd.DataFrame([
                {"#": c.index, "Type": c.type, "Status": c.status, "Summary": c.summary}
                for c in changes
            ]),
            use_container_width=True,
        )

        for change in changes:
            with st.expander(f"Change #{change.index} · {change.type} · {change.status}"):
                cols = st.columns(2)
                cols[0].markdown("**Original**")
                cols[0].write(change.old_text or "—")
                cols[1].markdown("**Revised**")
                cols[1].write(change.new_text or "—")
                st.markdown("**Summary**")
                st.write(change.summary)
                st.markdown("**Legal Opinion**")
                st.write(change.legal_opinion)

                if change.status == "pending":
                    remarks = st.text_area("Remarks", key=f"remarks_{change.id}")
                    a, r = st.columns(2)
                    if a.button("Approve", key=f"approve_{change.id}"):
                        approve_change(changes, change.id)
                        st.rerun()
                    if r.button("Refer", key=f"refer_{change.id}"):
                        refer_change(changes, change.id, remarks or None)
                        st.rerun()
                elif change.remarks:
                    st.caption(f"Remarks: {change.remarks}")

        st.download_button(
            "Save changes",
            data=build_comparison_report(changes),
            file_name=report_filename(),
            mime="text/plain",
        )
