from __future__ import annotations

import pandas as pd

from ..models.import_batch import ImportBatch

"""Tabular preview of a batch before it is committed."""

__all__ = [
    "records_frame",
    "errors_frame",
    "render_preview",
]


def records_frame(batch: ImportBatch) -> pd.DataFrame:
    """Valid records as a DataFrame indexed by file line number.

    Columns follow the header order of the file (unknown columns excluded).
    """
    columns = [c for c in batch.columns if c not in batch.ignored_columns]
    df = pd.DataFrame(
        [r.values for r in batch.records],
        index=pd.Index([r.row_number for r in batch.records], name="row"),
        columns=columns,
    )
    return df


def errors_frame(batch: ImportBatch) -> pd.DataFrame:
    return pd.DataFrame(
        [(e.row, e.error_type, e.message) for e in batch.errors],
        columns=["row", "error_type", "message"],
    )


def render_preview(batch: ImportBatch, limit: int = 5) -> str:
    if not batch.records:
        return "(no valid records)"
    df = records_frame(batch).head(limit)
    # keep the preview narrow: drop columns that are empty in every shown row
    df = df.loc[:, (df != "").any(axis=0)]
    return df.to_string()
