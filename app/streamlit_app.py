
import numpy as np
import pandas as pd
import streamlit as st
import plotly.express as px
import plotly.graph_objects as go
import os, sys
import warnings

# Add project root to sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path: sys.path.insert(0, ROOT)

# Core imports
from ecodlab.datasets.io import select_numeric
from ecodlab.methods.ecod import fit, predict, RETAIN_THRESHOLD
from ecodlab.methods.errors import ECODError
from ecodlab.methods.threshold import Auto, Fixed, Percentile, resolve_threshold
from ecodlab.reporting.outliers import get_outliers, feature_contributions, top_anomalies
from ecodlab.reporting.summary import score_summary
from ecodlab.evaluate.metrics import evaluate_scores, confusion_table
from ecodlab.evaluate.cv import cv_transductive_scores

# App Utils imports
import app.utils.ui as ui
import app.utils.data as app_data

# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

st.set_page_config(page_title="ECOD Workbench", layout="wide", initial_sidebar_state="expanded")

ui.inject_custom_css()
ui.render_header()

# Sidebar
with st.sidebar:
    st.header("⚙️ Configuration")
    normalize = st.checkbox("Standardize features before scoring", value=False,
                            help="Scores are rank based and do not change; only the stored tail probabilities' feature space does.")
    retain_threshold = st.number_input("Keep training data up to N rows", 0, 10_000_000, RETAIN_THRESHOLD, step=1000)

    st.subheader("Outlier threshold")
    thr_mode = st.radio("Mode", ["Auto (95th percentile)", "Percentile", "Fixed score"], index=0)
    if thr_mode == "Percentile":
        threshold = Percentile(st.slider("Percentile", 0.50, 0.999, 0.95, 0.001))
    elif thr_mode == "Fixed score":
        threshold = Fixed(st.number_input("Score cutoff", min_value=0.0, value=10.0))
    else:
        threshold = Auto()

    st.divider()
    st.header("📊 Quick Stats")
    stats_placeholder = st.empty()

tab_data, tab_analysis, tab_deep_dive = st.tabs(["📂 Data", "🚀 Analysis", "🔍 Deep Dives"])

# -----------------------------------------------------------------------------
# TAB 1: Data
# -----------------------------------------------------------------------------
with tab_data:
    col_up, col_map = st.columns([1, 2])

    with col_up:
        uploaded = st.file_uploader("Upload Dataset (CSV, Parquet, MAT)", type=["csv", "parquet", "mat"])
        if not uploaded:
            st.info("👆 Upload a dataset to begin.")
            ui.show_quick_start()
            st.stop()

    try:
        df = app_data.load_uploaded(uploaded.read(), uploaded.name)
    except Exception as e:
        st.error(f"❌ Failed to read file: {e}")
        st.stop()

    with col_map:
        st.subheader("🗂️ Map Schema")
        cols = list(df.columns)
        label_options = ["(none)"] + cols
        label_default_idx = 0
        for idx, name in enumerate(label_options[1:], start=1):
            if str(name).lower() in ["label", "class", "target", "y", "is_outlier"]:
                label_default_idx = idx
                break
        label_col = st.selectbox("Label column (optional, 1 = anomaly)", label_options, index=label_default_idx)
        default_feats = [c for c in cols if c != label_col]
        feature_cols = st.multiselect("Feature columns", cols, default=default_feats)
        if label_col != "(none)" and label_col in feature_cols:
            feature_cols = [c for c in feature_cols if c != label_col]
            st.info("ℹ️ Removed label from features.")

    if not feature_cols:
        st.warning("⚠️ Select at least one feature column.")
        st.stop()

    with st.expander("⚡ Performance Options"):
        st.caption(f"📊 Current dataset size: **{len(df):,}** rows")
        if len(df) > 1000 and st.checkbox("Enable downsampling", value=False):
            n_max = st.slider("Max rows to use", 500, len(df), min(10000, len(df)), step=500)
            df = app_data.downsample_dataframe(df, n_max).reset_index(drop=True)
            st.info(f"⚠️ Using {len(df):,} rows.")

    X_df, y = app_data.split_features(df, feature_cols, None if label_col == "(none)" else label_col)

    with stats_placeholder.container():
        st.metric("Rows", f"{len(X_df):,}")
        st.metric("Features", f"{X_df.shape[1]}")
        if y is not None:
            st.metric("Anomaly Rate", f"{np.sum(y) / len(y) * 100:.2f}%")

    with st.expander("📋 Data Preview & Statistics", expanded=False):
        t1, t2 = st.tabs(["Sample Data", "Statistics"])
        with t1:
            st.dataframe(df.head(10), width="stretch")
        with t2:
            st.dataframe(df.describe(), width="stretch")

# -----------------------------------------------------------------------------
# TAB 2: Analysis
# -----------------------------------------------------------------------------
with tab_analysis:
    if st.button("🚀 Fit ECOD", type="primary", use_container_width=True):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                model = fit(X_df, normalize=normalize, retain_threshold=int(retain_threshold))
            except ECODError as e:
                st.error(f"❌ {e}")
                st.stop()
        for w in caught:
            st.warning(f"⚠️ {w.message}")
        st.session_state["model"] = model
        st.session_state["X_ref"] = select_numeric(X_df)[0]
        st.session_state["y_true"] = y

    if "model" not in st.session_state:
        st.info("Fit the model to see results.")
    else:
        model = st.session_state["model"]
        y_ref = st.session_state.get("y_true")
        scores = np.asarray(model.scores)
        thr = resolve_threshold(threshold, scores)
        mask = get_outliers(model, threshold)

        summary = score_summary(model)
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Samples", model.n_samples)
        c2.metric("Features", model.n_features)
        c3.metric("Outliers", int(mask.sum()))
        c4.metric("Threshold", f"{thr:.3f}")
        st.dataframe(pd.DataFrame([summary]).round(3), width="stretch")

        c_hist, c_rank = st.columns(2)
        with c_hist:
            fig = px.histogram(pd.DataFrame({"Score": scores}), x="Score", nbins=30,
                               title="Distribution of Anomaly Scores")
            fig.add_vline(x=thr, line_dash="dash", line_color="red", annotation_text=f"Threshold ({thr:.2f})")
            st.plotly_chart(fig, width="stretch")
        with c_rank:
            sorted_scores = np.sort(scores)
            fig = go.Figure(go.Bar(
                x=np.arange(1, len(sorted_scores) + 1), y=sorted_scores,
                marker_color=np.where(sorted_scores > thr, "red", "blue"),
            ))
            fig.add_hline(y=thr, line_dash="dash", line_color="red")
            fig.update_layout(title=f"Ranked Anomaly Scores (n={int(mask.sum())} outliers)",
                              xaxis_title="Rank", yaxis_title="Anomaly Score")
            st.plotly_chart(fig, width="stretch")

        st.subheader("🚩 Outliers")
        idx = get_outliers(model, threshold, return_indices=True)
        out_df = st.session_state["X_ref"].iloc[idx].copy()
        out_df.insert(0, "score", scores[idx])
        out_df.insert(0, "sample", idx + 1)
        st.dataframe(out_df.sort_values("score", ascending=False), width="stretch")
        st.download_button("Download scores (CSV)",
                           pd.DataFrame({"sample": np.arange(1, model.n_samples + 1), "score": scores,
                                         "is_outlier": mask}).to_csv(index=False),
                           file_name="ecod_scores.csv")

        if y_ref is not None:
            st.subheader("🏆 Evaluation against labels")
            metrics = evaluate_scores(y_ref, scores, threshold)
            st.dataframe(pd.DataFrame([metrics]).round(4), width="stretch")
            cm = confusion_table(y_ref, scores, threshold)
            fig_cm = go.Figure(data=go.Heatmap(
                z=cm.values, x=list(cm.columns), y=list(cm.index),
                text=cm.values, texttemplate="%{text}", colorscale="Blues",
            ))
            st.plotly_chart(fig_cm, width="stretch")

            c1, c2 = st.columns(2)
            max_splits = max(2, min(20, len(st.session_state["X_ref"])))
            n_splits = c1.number_input("KFold splits", 2, max_splits, min(5, max_splits))
            random_state = c2.number_input("Random state", value=42)
            if st.button("Run transductive CV"):
                progress = st.progress(0)
                done = {"n": 0}

                def step(n=1):
                    done["n"] += n
                    progress.progress(min(1.0, done["n"] / n_splits))

                try:
                    oof, aps = cv_transductive_scores(st.session_state["X_ref"], y_ref, n_splits=int(n_splits),
                                                      random_state=int(random_state), normalize=normalize,
                                                      progress_cb=step)
                except ECODError as e:
                    st.error(f"❌ {e}")
                else:
                    st.metric("AP (mean over folds)", f"{np.nanmean(aps):.4f}", help=f"std {np.nanstd(aps):.4f}")
                    st.bar_chart(pd.DataFrame({"AP": aps}, index=[f"fold {i + 1}" for i in range(len(aps))]))

# -----------------------------------------------------------------------------
# TAB 3: Deep Dives
# -----------------------------------------------------------------------------
with tab_deep_dive:
    if "model" not in st.session_state:
        st.info("Fit the model first to inspect it.")
    else:
        model = st.session_state["model"]
        t_contrib, t_heat, t_new = st.tabs(["Feature Contributions", "Contribution Heatmap", "Score New Data"])

        with t_contrib:
            default_id = int(top_anomalies(model, 1)["sample"].iloc[0])
            sample_id = st.number_input("Sample (1-based)", 1, model.n_samples, default_id)
            contrib = feature_contributions(model, int(sample_id))
            st.caption(f"Score: {model.scores[int(sample_id) - 1]:.3f}")
            fig = px.bar(contrib, x="feature", y="contribution", hover_data=["tail_probability"],
                         title=f"Feature Contributions of Sample {int(sample_id)}")
            st.plotly_chart(fig, width="stretch")
            st.dataframe(contrib.round(4), width="stretch")

        with t_heat:
            top_n = st.slider("Top samples", 1, min(50, model.n_samples), min(10, model.n_samples))
            top = top_anomalies(model, top_n)
            heat = pd.DataFrame(model.contributions()[top["sample"].to_numpy() - 1],
                                columns=list(model.feature_names),
                                index=[f"Sample {i}" for i in top["sample"]])
            fig = px.imshow(heat, aspect="auto", color_continuous_scale="YlOrRd",
                            title=f"Feature Contributions (Top {top_n} Outliers)")
            st.plotly_chart(fig, width="stretch")

        with t_new:
            new_file = st.file_uploader("Upload new samples (same feature columns)", type=["csv", "parquet", "mat"],
                                        key="new_data")
            if new_file is not None:
                new_df = app_data.load_uploaded(new_file.read(), new_file.name)
                X_ref = st.session_state["X_ref"]
                missing = [c for c in X_ref.columns if c not in new_df.columns]
                if missing:
                    st.error(f"❌ Missing columns in new data: {', '.join(map(str, missing))}")
                else:
                    try:
                        new_scores = predict(model, new_df[list(X_ref.columns)], X_ref)
                    except ECODError as e:
                        st.error(f"❌ {e}")
                    else:
                        new_thr = resolve_threshold(threshold, model.scores)
                        df_cmp = pd.concat([
                            pd.DataFrame({"Score": model.scores, "Set": "Train"}),
                            pd.DataFrame({"Score": new_scores, "Set": "New"}),
                        ])
                        st.plotly_chart(px.box(df_cmp, x="Set", y="Score", color="Set",
                                               title="Anomaly Scores: Train vs New"), width="stretch")
                        res = new_df.copy()
                        res.insert(0, "is_outlier", new_scores > new_thr)
                        res.insert(0, "score", new_scores)
                        st.dataframe(res, width="stretch")
