
import streamlit as st
import pandas as pd

from ecodlab.datasets.io import load_table


def downsample_dataframe(df: pd.DataFrame, n_max: int, random_state: int = 42) -> pd.DataFrame:
    if len(df) <= n_max:
        return df
    return df.sample(n=n_max, random_state=random_state)


@st.cache_data(show_spinner=False)
def load_uploaded(file_bytes, file_name):
    """Cached table loading (csv / parquet / mat)"""
    return load_table(file_bytes, file_name)


def split_features(df: pd.DataFrame, feature_cols, label_col):
    X_df = df[feature_cols].copy()
    if label_col is not None and label_col in df.columns:
        y = df[label_col].astype(int).to_numpy()
    else:
        y = None
    return X_df, y
