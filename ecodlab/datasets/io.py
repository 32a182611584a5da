from __future__ import annotations
import io
import logging
from typing import Dict, List, Tuple

import h5py
import numpy as np
import pandas as pd
import scipy.io

from ..methods.base import NUMERIC_KINDS
from ..methods.errors import InvalidInputError

logger = logging.getLogger(__name__)


def select_numeric(df: pd.DataFrame) -> Tuple[pd.DataFrame, List[str]]:
    """Split off the non-numeric columns of ``df``.

    Works positionally so duplicated column names do not break the dtype check.
    Returns the numeric sub-frame and the names of the dropped columns.
    """
    keep = [i for i, dt in enumerate(df.dtypes) if dt.kind in NUMERIC_KINDS]
    dropped = [str(c) for i, c in enumerate(df.columns) if i not in keep]
    return df.iloc[:, keep], dropped


def unique_names(names) -> List[str]:
    """Stringify and de-duplicate column names: x, x -> x, x.1"""
    seen = {}
    out = []
    for raw in names:
        name = str(raw)
        if name in seen:
            seen[name] += 1
            candidate = f"{name}.{seen[name]}"
            while candidate in seen:
                seen[name] += 1
                candidate = f"{name}.{seen[name]}"
            name = candidate
        seen.setdefault(name, 0)
        out.append(name)
    return out


MAT_DATA_KEYS = ("X", "data", "features")
MAT_LABEL_KEYS = ("y", "label", "labels", "ground_truth")


def _mat_arrays(file_bytes: bytes) -> Dict[str, np.ndarray]:
    """Named arrays of a .mat payload; v7.3 files are read as HDF5."""
    try:
        mat = scipy.io.loadmat(io.BytesIO(file_bytes))
    except (ValueError, NotImplementedError):
        try:
            with h5py.File(io.BytesIO(file_bytes), "r") as f:
                # HDF5 stores MATLAB matrices transposed
                return {k: np.array(v).T for k, v in f.items() if isinstance(v, h5py.Dataset)}
        except OSError as exc:
            raise InvalidInputError("not a readable .mat file (neither MATLAB 5 nor HDF5)") from exc
    return {k: v for k, v in mat.items() if not k.startswith("__") and isinstance(v, np.ndarray)}


def _read_mat_to_df(file_bytes: bytes) -> pd.DataFrame:
    arrays = _mat_arrays(file_bytes)
    matrices = {k: v for k, v in arrays.items() if v.ndim == 2}
    key = next((k for k in MAT_DATA_KEYS if k in matrices), None)
    if key is None and matrices:
        key = max(matrices, key=lambda k: matrices[k].size)
    if key is None:
        raise InvalidInputError(f".mat file holds no 2-D array (keys: {sorted(arrays)})")
    X = matrices[key]
    logger.info("using .mat variable %r (%d x %d) as the data matrix", key, X.shape[0], X.shape[1])

    df = pd.DataFrame(X, columns=[f"V{j + 1}" for j in range(X.shape[1])])
    label_key = next((k for k in MAT_LABEL_KEYS if k in arrays and k != key), None)
    if label_key is not None:
        y = arrays[label_key].ravel()
        if len(y) == len(df):
            df["label"] = y
        else:
            logger.warning("ignoring .mat labels %r: %d values for %d rows", label_key, len(y), len(df))
    return df


def load_table(file_bytes: bytes, file_name: str) -> pd.DataFrame:
    """Read a csv (default), parquet or .mat payload into a DataFrame."""
    name = file_name.lower()
    if name.endswith(".parquet"):
        df = pd.read_parquet(io.BytesIO(file_bytes))
    elif name.endswith(".mat"):
        df = _read_mat_to_df(file_bytes)
    else:
        df = pd.read_csv(io.BytesIO(file_bytes))
    logger.debug("loaded %s: %d rows x %d columns", file_name, df.shape[0], df.shape[1])
    return df
