"""
Financials Comparison Tool - Streamlit Application
Upload two CSV files and let an LLM align their rows side-by-side.
"""
import streamlit as st

from comparison_export import downloads
from config import Config, configure_logging
from csv_comparator import CSVComparator
from csv_normalizer import decode_csv_bytes
from llm_client import ProviderSelection

configure_logging()

# Page configuration
st.set_page_config(
    page_title="Financials Comparison Tool",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for styling
st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Outfit:wght@300;400;500;600;700&display=swap');

    .stApp {
        background: linear-gradient(180deg, #0f0f1a 0%, #1a1a2e 50%, #16213e 100%);
    }

    .main .block-container {
        padding-top: 2rem;
        padding-bottom: 2rem;
        max-width: 1400px;
    }

    h1, h2, h3, h4, p, span, div, label {
        font-family: 'Outfit', sans-serif !important;
    }

    .main-header {
        text-align: center;
        padding: 2rem 0;
        margin-bottom: 2rem;
    }

    .main-header h1 {
        font-size: 3rem;
        font-weight: 700;
        background: linear-gradient(135deg, #667eea 0%, #764ba2 50%, #f093fb 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        background-clip: text;
        margin-bottom: 0.5rem;
    }

    .main-header p {
        color: rgba(255, 255, 255, 0.6);
        font-size: 1.1rem;
        font-weight: 300;
    }

    .upload-card {
        background: rgba(255, 255, 255, 0.03);
        border: 1px solid rgba(255, 255, 255, 0.08);
        border-radius: 16px;
        padding: 1.5rem;
        margin-bottom: 1rem;
    }

    .upload-card h3 {
        color: #fff;
        font-size: 1.1rem;
        font-weight: 500;
    }

    .stButton > button {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border: none;
        border-radius: 12px;
        padding: 0.75rem 2rem;
        font-weight: 600;
        width: 100%;
    }

    .stButton > button:disabled {
        opacity: 0.5;
        cursor: not-allowed;
    }

    .stDownloadButton > button {
        background: linear-gradient(135deg, #11998e 0%, #38ef7d 100%);
        color: white;
        border: none;
        border-radius: 12px;
        padding: 0.75rem 2rem;
        font-weight: 600;
        width: 100%;
    }

    .stDataFrame {
        border-radius: 12px;
        overflow: hidden;
    }

    [data-testid="stSidebar"] {
        background: linear-gradient(180deg, #0f0f1a 0%, #1a1a2e 100%);
        border-right: 1px solid rgba(255, 255, 255, 0.05);
    }
</style>
""", unsafe_allow_html=True)


def get_comparator() -> CSVComparator:
    """One comparator per browser session."""
    if "comparator" not in st.session_state:
        st.session_state.comparator = CSVComparator()
    return st.session_state.comparator


def render_header():
    """Render the main header."""
    st.markdown("""
    <div class="main-header">
        <h1>📊 Financials Comparison Tool</h1>
        <p>Upload two spreadsheets and let AI line up their rows side-by-side</p>
    </div>
    """, unsafe_allow_html=True)


def render_sidebar(processing: bool) -> tuple[ProviderSelection, str]:
    """Render provider, model and API key controls. Returns the selection and credential."""
    with st.sidebar:
        st.markdown("### ⚙️ Configuration")

        providers = Config.providers()
        default_provider = Config.DEFAULT_PROVIDER if Config.DEFAULT_PROVIDER in providers else providers[0]
        provider = st.selectbox(
            "AI Provider",
            providers,
            index=providers.index(default_provider),
            format_func=lambda p: Config.PROVIDER_LABELS[p],
            key="provider",
            disabled=processing,
        )

        # Reset the model to the provider's first option whenever the provider changes
        if st.session_state.get("model_provider") != provider:
            st.session_state.model_provider = provider
            models = Config.models_for(provider)
            if provider == Config.DEFAULT_PROVIDER and Config.DEFAULT_MODEL in models:
                st.session_state.model = Config.DEFAULT_MODEL
            else:
                st.session_state.model = Config.default_model_for(provider)
            st.session_state.api_key = Config.prefill_api_key(provider, st.session_state.get("api_key", ""))

        model = st.selectbox(
            "Model",
            Config.models_for(provider),
            format_func=lambda m: Config.model_label(provider, m),
            key="model",
            disabled=processing,
        )

        is_valid, message = Config.validate_selection(provider, model)
        if not is_valid:
            st.error(f"⚠️ {message}")

        api_key = st.text_input(
            f"{provider.upper()} API Key",
            type="password",
            placeholder=f"Enter your {provider.upper()} API key",
            key="api_key",
            disabled=processing,
        )

        st.markdown("---")
        st.markdown("### 📁 Files")
        st.markdown(f"Recommended max file size: **{Config.MAX_FILE_SIZE_MB} MB**")
        st.caption("Cells are split on commas; quoted fields containing commas are not supported.")

    return ProviderSelection(provider, model), api_key


def handle_upload(comparator: CSVComparator, slot: int, uploaded) -> None:
    """Normalize a newly picked file into its slot."""
    if uploaded is None:
        return
    marker = f"loaded_file_{slot}"
    if st.session_state.get(marker) == uploaded.file_id:
        return
    comparator.load_file(slot, decode_csv_bytes(uploaded.getvalue()))
    st.session_state[marker] = uploaded.file_id


def render_uploads(comparator: CSVComparator):
    """Render the two CSV uploaders."""
    col1, col2 = st.columns(2)

    with col1:
        st.markdown("""
        <div class="upload-card">
            <h3>📂 First CSV File</h3>
        </div>
        """, unsafe_allow_html=True)
        first_file = st.file_uploader(
            "Upload first CSV",
            type=[t.lstrip(".") for t in Config.SUPPORTED_CSV_TYPES],
            key="csv_first",
        )
        handle_upload(comparator, 1, first_file)

    with col2:
        st.markdown("""
        <div class="upload-card">
            <h3>📂 Second CSV File</h3>
        </div>
        """, unsafe_allow_html=True)
        second_file = st.file_uploader(
            "Upload second CSV",
            type=[t.lstrip(".") for t in Config.SUPPORTED_CSV_TYPES],
            key="csv_second",
        )
        handle_upload(comparator, 2, second_file)


def render_result(comparator: CSVComparator):
    """Render the model's aligned table and the download buttons."""
    state = comparator.state
    if state.raw_result is None or state.processing:
        return

    st.markdown("### 📥 Download Comparison Result")
    download_buttons = downloads(state.first, state.second, state.raw_result, state.result)
    columns = st.columns(len(download_buttons))
    for column, button in zip(columns, download_buttons):
        with column:
            st.download_button(**button)

    st.markdown("### 👀 Comparison")
    st.dataframe(state.result.to_dataframe(), hide_index=True)


def render_originals(comparator: CSVComparator):
    """Render the two uploaded tables side-by-side."""
    state = comparator.state
    first_rows = len(state.first.rows) if state.first else 0
    second_rows = len(state.second.rows) if state.second else 0
    if not first_rows and not second_rows:
        return

    st.markdown("### 🗂️ Uploaded Files")
    first_df, second_df = comparator.side_by_side()
    col1, col2 = st.columns(2)
    with col1:
        st.dataframe(first_df, hide_index=True)
    with col2:
        st.dataframe(second_df, hide_index=True)


def main():
    """Main application entry point."""
    comparator = get_comparator()

    render_header()
    selection, api_key = render_sidebar(comparator.state.processing)

    render_uploads(comparator)

    if comparator.state.error_message:
        st.error(comparator.state.error_message)

    st.markdown("")

    if st.button(
        "🔍 Process Financials",
        key="process",
        disabled=comparator.state.processing,
    ):
        with st.spinner("🔄 Processing..."):
            comparator.process(selection, api_key)
        st.rerun()

    render_result(comparator)
    render_originals(comparator)

    # Footer
    st.markdown("---")
    st.markdown(
        "<p style='text-align: center; color: rgba(255,255,255,0.4); font-size: 0.85rem;'>"
        f"Financials Comparison Tool • {selection.label} / {Config.model_label(selection.provider, selection.model)}"
        "</p>",
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
