"""
ShopBot Streamlit App - retrieval debug console

Run with: streamlit run app.py

Architecture:
- This file: Streamlit UI only (inbound boundary + envelope viewer)
- core/orchestrator.py: detection -> routing -> fusion
- handlers/: per-intent retrieval procedures
- core/: models, matching, indexes, logging
- catalog_loader.py: seed data loading
"""

import os
import uuid

import streamlit as st

from catalog_loader import build_stores, get_catalog_statistics
from config.settings import RetrievalConfig
from core.context import IntentType
from core.orchestrator import EmptyQueryError, build_pipeline
from core.structured_logging import get_logger, setup_logging


# =============================================================================
# CONFIGURATION
# =============================================================================

DEBUG_MODE = True  # Show intent and applied filters under each answer

DATA_DIR = os.environ.get("SHOPBOT_DATA_DIR", "data")

# Initialize structured logging
setup_logging(
    log_dir="logs",
    console_level=20,  # INFO
    file_level=10,     # DEBUG
    enable_console=True,
    enable_file=True,
    enable_csv=True,
    enable_error_log=True,
)
app_logger = get_logger("app")

# Streamlit page config
st.set_page_config(
    page_title="ShopBot - Retrieval Console",
    page_icon="🛒",
    layout="wide"
)


# =============================================================================
# COMPONENT INITIALIZATION
# =============================================================================

@st.cache_resource
def load_pipeline(data_dir: str):
    """Load seed data and wire the pipeline (cached)."""
    try:
        catalog, orders, users = build_stores(
            os.path.join(data_dir, "sample_products.json"),
            os.path.join(data_dir, "sample_orders.json"),
            os.path.join(data_dir, "sample_users.json"),
        )
    except FileNotFoundError as e:
        return None, {}, f"File not found: {e}"
    except ValueError as e:
        return None, {}, f"Error loading seed data: {e}"

    stats = get_catalog_statistics(catalog.list_all())
    pipeline = build_pipeline(catalog, orders, users, config=RetrievalConfig.from_env())
    app_logger.info("Pipeline ready", extra={"event": "app_ready", "products": stats['total']})
    return pipeline, stats, None


# =============================================================================
# MAIN UI
# =============================================================================

def main():
    st.title("🛒 ShopBot - Retrieval Console")
    st.markdown("*Intent detection, adaptive routing and context fusion*")

    pipeline, stats, error = load_pipeline(DATA_DIR)
    if error:
        st.error(error)
        st.info(f"Please ensure the sample_*.json files are in '{DATA_DIR}'")
        st.stop()

    if "session_id" not in st.session_state:
        st.session_state.session_id = f"session_{uuid.uuid4().hex[:12]}"
        st.session_state.history = []

    # Sidebar: catalog and caller
    with st.sidebar:
        st.header("📦 Catalog")
        st.metric("Total Products", stats['total'])
        with st.expander("📊 Categories"):
            for cat, count in sorted(stats['by_category'].items()):
                st.write(f"• **{cat}:** {count}")

        st.markdown("---")
        st.header("👤 Caller")
        user_id = st.text_input("Signed-in user id", value="", help="Leave empty for an anonymous caller")
        hint = st.selectbox("Intent hint", ["(detect)"] + [t.value for t in IntentType])

        st.markdown("---")
        st.write(f"**Session ID:** `{st.session_state.session_id}`")
        if st.button("🔄 New Session"):
            st.session_state.session_id = f"session_{uuid.uuid4().hex[:12]}"
            st.session_state.history = []
            st.rerun()

    # History
    for query, envelope in st.session_state.history:
        with st.chat_message("user"):
            st.markdown(query)
        with st.chat_message("assistant"):
            st.json(envelope, expanded=False)

    prompt = st.chat_input("Ask about products, orders or your account")
    if prompt is None:
        return

    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        try:
            fused = pipeline.answer(
                prompt,
                intent_hint=None if hint == "(detect)" else hint,
                user_id=user_id.strip() or None,
                session_id=st.session_state.session_id,
            )
        except EmptyQueryError:
            st.warning("Please type a question.")
            return

        envelope = fused.to_dict()
        if DEBUG_MODE:
            meta = envelope['metadata']
            st.write(
                f"**Intent:** {envelope['intent']} ({meta.get('confidence', 0):.2f}) → "
                f"**Route:** {envelope['route']} · **Items:** {len(envelope['items'])}"
            )
            if meta.get('message'):
                st.info(meta['message'])
        st.json(envelope)

    st.session_state.history.append((prompt, envelope))


if __name__ == "__main__":
    main()
