"""
streamlit_app.py — Web UI for AutoSolver.

Sidebar  : API key, provider choice, question bank and source uploads,
           start / compile / reset controls.
Main area: pipeline status, progress, the agent log and a live preview of
           every question and its answer.
"""

import sys
import os

# Ensure the project root is on the Python path so `autosolver.*` imports
# work when running via `streamlit run ui/streamlit_app.py`.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import streamlit as st
from autosolver.config import configure_logging
from autosolver.exporter import DOCUMENT_FILENAME
from autosolver.generator import Provider
from autosolver.models import LogStage, PipelineState, QuestionStatus
from autosolver.pipeline import Pipeline

configure_logging()

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
UPLOAD_TYPES = ["docx", "txt", "pdf"]

STATE_BADGES = {
    PipelineState.IDLE: "⚪",
    PipelineState.READING_FILES: "📖",
    PipelineState.ANALYZING_QUESTIONS: "🔍",
    PipelineState.SOLVING: "🧠",
    PipelineState.COMPILING: "🖋️",
    PipelineState.COMPLETED: "✅",
    PipelineState.ERROR: "❌",
}

STAGE_ICONS = {
    LogStage.READER: "📖",
    LogStage.ANALYST: "🔍",
    LogStage.SOLVER: "🧠",
    LogStage.WRITER: "🖋️",
    LogStage.SYSTEM: "💻",
}

# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------
if "pipeline" not in st.session_state:
    pipeline = Pipeline()
    pipeline.check_local_provider()
    st.session_state.pipeline = pipeline
    st.session_state.upload_gen = 0
    st.session_state.document = None
    st.session_state.running = False

pipeline: Pipeline = st.session_state.pipeline
running = st.session_state.running

# A run whose script pass was torn down without reaching its cleanup.
if not running and pipeline.is_busy:
    pipeline.abort()

gen = st.session_state.upload_gen
qb_key = f"qb_upload_{gen}"
src_key = f"src_upload_{gen}"


def _on_question_bank_change():
    uploaded = st.session_state.get(qb_key)
    if uploaded is None:
        pipeline.clear_question_bank()
    else:
        pipeline.set_question_bank(uploaded.name, uploaded.getvalue())


def _on_sources_change():
    uploaded = st.session_state.get(src_key) or []
    pipeline.set_source_files((f.name, f.getvalue()) for f in uploaded)


# ---------------------------------------------------------------------------
# Rendering helpers (also used as the pipeline listener during a run)
# ---------------------------------------------------------------------------

def render_status(p: Pipeline) -> None:
    badge = STATE_BADGES[p.state]
    st.markdown(f"**STATUS:** {badge} `{p.state.value}`  |  **Provider:** {p.provider.label}")
    if p.state is PipelineState.ERROR and p.last_error is not None:
        st.error(f"Critical Error: {p.last_error}")


def render_progress(p: Pipeline) -> None:
    progress = p.progress
    if progress.total:
        st.progress(progress.fraction, text=f"Progress: {progress.current} / {progress.total}")
    if progress.elapsed is not None and p.state is PipelineState.COMPLETED:
        st.caption(f"Finished in {progress.elapsed:.1f}s")


def render_logs(p: Pipeline) -> None:
    st.markdown("#### 🖥️ Agent Log")
    if not p.logs:
        st.caption("Waiting for initialization...")
        return
    lines = [
        f"{entry.clock}  {STAGE_ICONS[entry.stage]} {entry.stage.value.upper():<8} {entry.message}"
        for entry in p.logs
    ]
    st.code("\n".join(lines), language=None)


def render_questions(p: Pipeline) -> None:
    st.markdown("#### 👁️ Live Preview")
    if not p.questions:
        st.info("Upload documents to generate a preview.")
        return
    for idx, question in enumerate(p.questions, start=1):
        with st.container(border=True):
            st.markdown(f"**Q{idx}.** {question.text}")
            if question.status is QuestionStatus.SOLVING:
                st.markdown("⏳ _Generating answer from notes..._")
            elif question.status is QuestionStatus.DONE:
                st.write(question.answer)


# ---------------------------------------------------------------------------
# Page configuration
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="AutoSolver AI",
    page_icon="🤖",
    layout="wide",
)

st.title("🤖 AutoSolver AI")
st.caption("Upload a question bank and your notes; every question gets answered from the notes.")

status_slot = st.empty()
progress_slot = st.empty()
left, right = st.columns([4, 8])
with left:
    log_slot = st.empty()
with right:
    preview_slot = st.empty()


def redraw(p: Pipeline) -> None:
    with status_slot.container():
        render_status(p)
    with progress_slot.container():
        render_progress(p)
    with log_slot.container():
        render_logs(p)
    with preview_slot.container():
        render_questions(p)


# ---------------------------------------------------------------------------
# Sidebar — credentials, provider, uploads & controls
# ---------------------------------------------------------------------------
with st.sidebar:
    st.header("🔑 Access")
    api_key = st.text_input(
        "Gemini API key",
        type="password",
        placeholder="AIzaSy...",
        help="Overrides GEMINI_API_KEY from the environment for this session.",
        disabled=running,
    )
    pipeline.api_key = api_key.strip() or None

    options = [Provider.CLOUD]
    if pipeline.local_available:
        options.append(Provider.LOCAL)
    choice = st.radio(
        "Model provider",
        options,
        index=options.index(pipeline.provider) if pipeline.provider in options else 0,
        format_func=lambda p: p.label,
        disabled=running or pipeline.state not in (PipelineState.IDLE, PipelineState.COMPLETED),
    )
    if choice != pipeline.provider:
        pipeline.set_provider(choice)
    if not pipeline.local_available:
        st.caption("Local model offline. Start Ollama and reload to enable it.")

    st.divider()
    st.header("📁 Input Documents")
    idle = pipeline.state is PipelineState.IDLE
    st.file_uploader(
        "Question Bank (.docx/.txt/.pdf)",
        type=UPLOAD_TYPES,
        accept_multiple_files=False,
        key=qb_key,
        on_change=_on_question_bank_change,
        disabled=running or not idle,
    )
    st.file_uploader(
        "Source Notes (.docx/.txt/.pdf)",
        type=UPLOAD_TYPES,
        accept_multiple_files=True,
        key=src_key,
        on_change=_on_sources_change,
        disabled=running or not idle,
    )

    st.divider()
    if idle:
        if st.button(
            "🚀 Start Processing",
            use_container_width=True,
            disabled=running or not pipeline.can_start(),
        ):
            st.session_state.running = True
            st.rerun()
    elif pipeline.state is PipelineState.COMPLETED:
        if st.button("🖋️ Compile Solved Doc", use_container_width=True):
            st.session_state.document = pipeline.download()
        if st.session_state.document:
            st.download_button(
                "⬇️ Download Solved Doc",
                data=st.session_state.document,
                file_name=DOCUMENT_FILENAME,
                mime=DOCX_MIME,
                use_container_width=True,
            )

    if pipeline.state in (PipelineState.COMPLETED, PipelineState.ERROR):
        if st.button("🔄 Reset", use_container_width=True):
            pipeline.reset()
            st.session_state.upload_gen += 1
            st.session_state.document = None
            st.rerun()

    st.divider()
    st.markdown(
        "**How it works**\n"
        "1. Upload a question bank and one or more source notes.\n"
        "2. The **Analyst** splits the question bank into questions.\n"
        "3. The **Solver** answers each one from your notes.\n"
        "4. The **Writer** compiles everything into a Word document."
    )

# ---------------------------------------------------------------------------
# Main area — status, log & preview
# ---------------------------------------------------------------------------
redraw(pipeline)

# The run happens on a pass where every sidebar widget is disabled; an
# interrupted pass still leaves the pipeline out of its busy states.
if running:
    pipeline.listener = redraw
    try:
        pipeline.start()
    finally:
        pipeline.listener = None
        st.session_state.running = False
        pipeline.abort()
    st.rerun()
