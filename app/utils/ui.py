
import streamlit as st

def inject_custom_css():
    """Injects custom CSS for better styling."""
    st.markdown("""
<style>
    :root {
        --primary-color: #4F8BF9;
        --secondary-color: #2E3B55;
    }

    .main-header {
        font-size: 2.5rem;
        font-weight: 800;
        color: var(--primary-color);
        margin-bottom: 0rem;
    }

    .sub-header {
        font-size: 1.25rem;
        color: var(--secondary-color);
        margin-bottom: 2rem;
    }

    [data-testid="stMetric"] {
        background-color: white;
        padding: 1rem;
        border-radius: 0.5rem;
        border: 1px solid #eee;
        box-shadow: 0 1px 2px rgba(0,0,0,0.05);
    }
</style>
""", unsafe_allow_html=True)

def render_header():
    """Renders the main application header."""
    st.markdown('<h1 class="main-header">📈 ECOD Workbench</h1>', unsafe_allow_html=True)
    st.markdown('<div class="sub-header">Parameter-free outlier detection with empirical cumulative distributions.</div>', unsafe_allow_html=True)

def show_quick_start():
    with st.expander("📚 Quick Start Guide"):
        st.markdown("""
        ### Getting Started

        1. **Upload Data**: CSV, Parquet or MAT file with your dataset
        2. **Map Columns**: Select features and an optional label column
        3. **Fit**: ECOD ranks every feature and sums the tail log-probabilities
        4. **Inspect**: Score distribution, ranked scores, feature contributions
        5. **Score new data**: Upload a second file, scored against the training ECDFs

        ### Tips
        - Non-numeric columns are dropped; encode categoricals beforehand
        - Scores assume independent features, so correlated features are double counted
        - Normalization does not change the scores, ECOD is rank based
        """)
