#!/usr/bin/env python
"""
Streamlit Web UI for the hybrid PDF to DOCX converter.

Run with:
    streamlit run src/hybrid_docx/app.py

Features:
- Upload a PDF
- Conversion with a per-page progress indicator
- Preview of reconstructed paragraphs and tables
- Download of the DOCX and the structure JSON
"""

import sys
from pathlib import Path

# Add src directory to path for imports when running as script
_src_dir = Path(__file__).parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import html
import json
import logging
import tempfile
from typing import Optional

import streamlit as st

logger = logging.getLogger("hybrid_docx.app")


# Page config must be first Streamlit command
st.set_page_config(
    page_title="Hybrid PDF to DOCX",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="expanded"
)


def load_css():
    """Load custom CSS styles."""
    st.markdown("""
    <style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #1E88E5;
        text-align: center;
        margin-bottom: 1rem;
    }
    .sub-header {
        font-size: 1.2rem;
        color: #888;
        text-align: center;
        margin-bottom: 2rem;
    }
    .rtl-block {
        direction: rtl;
        text-align: right;
    }
    </style>
    """, unsafe_allow_html=True)


def init_session_state():
    """Initialize session state variables."""
    if "document" not in st.session_state:
        st.session_state.document = None
    if "docx_bytes" not in st.session_state:
        st.session_state.docx_bytes = None
    if "docx_name" not in st.session_state:
        st.session_state.docx_name = None


@st.cache_data(ttl=300)  # Cache for 5 minutes
def check_tesseract() -> dict:
    """Check whether Tesseract and its language packs are available."""
    try:
        import pytesseract
        version = str(pytesseract.get_tesseract_version())
        languages = pytesseract.get_languages(config="")
        return {"available": True, "version": version, "languages": languages, "error": None}
    except Exception as e:
        return {"available": False, "version": None, "languages": [], "error": str(e)[:80]}


def render_sidebar() -> dict:
    """Render sidebar with settings."""
    from hybrid_docx.config import OCRConfig

    st.sidebar.header("⚙️ Settings")
    tesseract = check_tesseract()

    st.sidebar.subheader("OCR")
    use_ocr = st.sidebar.checkbox(
        "OCR embedded images",
        value=tesseract["available"],
        disabled=not tesseract["available"],
        help="Recognize text in scanned images embedded in the PDF"
    )
    languages = st.sidebar.text_input(
        "Languages",
        value=OCRConfig().languages,
        help="Tesseract language set, e.g. ara+eng"
    )

    with st.sidebar.expander("Engine Status", expanded=False):
        if tesseract["available"]:
            st.markdown(f"**Tesseract** {tesseract['version']}")
            st.caption(", ".join(tesseract["languages"]) or "no language packs")
        else:
            st.markdown("**Tesseract** unavailable")
            st.caption(tesseract["error"])

    return {"use_ocr": use_ocr, "languages": languages}


def process_document(uploaded_file, settings: dict) -> Optional[dict]:
    """Convert the uploaded PDF; stores the DOCX bytes in the session."""
    from hybrid_docx.config import get_config
    from hybrid_docx.utils.assembler import DocumentAssembler
    from hybrid_docx.utils.jobs import output_name_for

    config = get_config()
    config.ocr.enabled = settings["use_ocr"]
    if settings["languages"]:
        config.ocr.languages = settings["languages"]

    progress_bar = st.progress(0, text="Starting...")

    def on_progress(percent: int):
        progress_bar.progress(percent, text=f"Converting... {percent}%")

    try:
        with tempfile.TemporaryDirectory(prefix="hybrid_docx_") as temp_dir:
            temp_dir = Path(temp_dir)
            input_path = temp_dir / Path(uploaded_file.name).name
            with open(input_path, "wb") as f:
                f.write(uploaded_file.getbuffer())

            output_name = output_name_for(uploaded_file.name)
            output_path = temp_dir / output_name

            document = DocumentAssembler(config).convert(input_path, output_path, on_progress)
            st.session_state.docx_bytes = output_path.read_bytes()
            st.session_state.docx_name = output_name

        progress_bar.progress(100, text="Completed successfully!")
        return document.to_dict()

    except Exception as e:
        logger.error(f"Conversion failed: {e}", exc_info=True)
        st.error(f"❌ Conversion failed: {e}")
        return None


def render_metrics(doc: dict):
    """Render document metrics."""
    pages = doc.get("pages", [])
    elements = [e for page in pages for e in page.get("elements", [])]
    cols = st.columns(5)

    with cols[0]:
        st.metric("Pages", len(pages))
    with cols[1]:
        st.metric("Paragraphs", sum(1 for e in elements if e.get("type") == "paragraph"))
    with cols[2]:
        st.metric("Tables", sum(1 for e in elements if e.get("type") == "table"))
    with cols[3]:
        st.metric("OCR Items", sum(page.get("ocr_items", 0) for page in pages))
    with cols[4]:
        st.metric("Time", f"{doc.get('processing_time', 0):.1f}s")


def paragraph_html(element: dict) -> Optional[str]:
    """
    HTML for paragraphs that need it (RTL or centred), else None.

    Document text is escaped; only the wrapper markup is rendered as HTML.
    """
    text = html.escape(element.get("text", ""))
    if element.get("bidirectional"):
        return f'<div class="rtl-block">{text}</div>'
    if element.get("alignment") == "center":
        return f"<div style='text-align:center'><b>{text}</b></div>"
    return None


def render_page_content(page: dict):
    """Render the reconstructed elements of a single page."""
    elements = page.get("elements", [])
    if not any(e.get("text") or e.get("type") == "table" for e in elements):
        st.info("No text reconstructed on this page.")
        return

    for element in elements:
        if element.get("type") == "table":
            rows = element.get("struct", {}).get("rows", [])
            st.caption(f"📋 **Table** ({element.get('num_rows', 0)} x {element.get('num_cols', 0)})")
            if rows and len(rows) > 1:
                import pandas as pd
                st.dataframe(pd.DataFrame(rows), use_container_width=True)
            elif element.get("markdown"):
                st.markdown(element["markdown"])

        elif element.get("text"):
            block = paragraph_html(element)
            if block is not None:
                st.markdown(block, unsafe_allow_html=True)
            else:
                st.text(element["text"])


def main():
    """Main application."""
    load_css()
    init_session_state()

    # Header
    st.markdown('<h1 class="main-header">📄 Hybrid PDF to DOCX</h1>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Rebuild paragraphs and tables from PDF text and scanned images</p>',
        unsafe_allow_html=True
    )

    settings = render_sidebar()

    st.markdown("---")

    uploaded_file = st.file_uploader(
        "Upload a PDF",
        type=["pdf"],
        help="Digital, scanned or mixed PDF documents"
    )

    if uploaded_file:
        col1, col2 = st.columns([2, 1])

        with col1:
            st.info(f"📁 **{uploaded_file.name}** ({uploaded_file.size / 1024:.1f} KB)")

        with col2:
            convert_btn = st.button(
                "🚀 Convert",
                use_container_width=True,
                type="primary"
            )

        if convert_btn:
            result = process_document(uploaded_file, settings)
            if result:
                st.session_state.document = result
                st.success("✅ Document converted successfully!")

    # Display results
    if st.session_state.document:
        doc = st.session_state.document

        st.markdown("---")
        st.subheader("📊 Conversion Metrics")
        render_metrics(doc)

        st.markdown("---")
        tabs = st.tabs(["📖 Content", "📄 Raw JSON"])

        with tabs[0]:
            pages = doc.get("pages", [])
            if len(pages) > 1:
                page_num = st.selectbox(
                    "Select page",
                    range(1, len(pages) + 1),
                    format_func=lambda x: f"Page {x}"
                )
                render_page_content(pages[page_num - 1])
            elif pages:
                render_page_content(pages[0])
            else:
                st.info("No content extracted")

        with tabs[1]:
            st.json(doc)

        st.markdown("---")
        st.subheader("📥 Downloads")
        col1, col2 = st.columns(2)

        with col1:
            if st.session_state.docx_bytes:
                st.download_button(
                    "Download DOCX",
                    data=st.session_state.docx_bytes,
                    file_name=st.session_state.docx_name,
                    mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                    use_container_width=True
                )

        with col2:
            st.download_button(
                "Download JSON",
                data=json.dumps(doc, indent=2, ensure_ascii=False),
                file_name=Path(st.session_state.docx_name or "document").stem + ".json",
                mime="application/json",
                use_container_width=True
            )

    # Footer
    st.markdown("---")
    st.markdown(
        """
        <div style="text-align: center; color: #666; font-size: 0.8rem;">
            Hybrid PDF to DOCX v1.0 |
            Built with Streamlit, PyMuPDF, OpenCV and Tesseract
        </div>
        """,
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
