"""
Stacking of heterogeneous feature rows into uniform tables.

Features of one type carry different qualifiers; stacking builds a single
DataFrame over the union of their columns, filling logical columns with
False and every other missing value with ``pd.NA``.
"""

import logging
import warnings
from collections.abc import Iterable
from typing import Any

import pandas as pd

from ..exceptions import GenBankWarning
from ..models import CORE_COLUMNS, GROUP_ID_COLUMN, RowGroup

logger = logging.getLogger(__name__)

XREF_COLUMN = "db_xref"
TRANSLATION_COLUMN = "translation"


def empty_table(extra_columns: Iterable[str] = ()) -> pd.DataFrame:
    """Feature table with no rows and the standard leading columns."""
    columns = CORE_COLUMNS + [c for c in extra_columns if c not in CORE_COLUMNS]
    return pd.DataFrame(columns=columns).astype({"start": "int64", "end": "int64"})


def first_value(series: pd.Series) -> pd.Series:
    """Reduce list values (repeated qualifiers) to their first occurrence."""
    return series.map(lambda value: value[0] if isinstance(value, list) and value else value)


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return list(value)
    if value is None or value is pd.NA:
        return []
    return [value]


def stack_features(groups: list[RowGroup], fill_logical: bool = True) -> pd.DataFrame:
    """
    Stack the row groups of same-typed features into one table.

    Args:
        groups: One row group per feature, in file order
        fill_logical: Fill missing values of flag columns with False

    Returns:
        DataFrame with the core columns first, then qualifier columns in the
        order they were first seen, then ``group_id`` (1-based feature
        ordinal shared by all rows of a joined location).
    """
    if not groups:
        return empty_table([GROUP_ID_COLUMN])

    columns: list[str] = []
    seen: set[str] = set()
    logical: set[str] = set()
    xref_is_list = any(
        isinstance(row.get(XREF_COLUMN), list) for rows in groups for row in rows
    )

    records = []
    for group_id, rows in enumerate(groups, start=1):
        for row in rows:
            for name, value in row.items():
                if name not in seen:
                    seen.add(name)
                    columns.append(name)
                if isinstance(value, bool):
                    logical.add(name)
            record = dict(row)
            record[GROUP_ID_COLUMN] = group_id
            records.append(record)

    ordered = CORE_COLUMNS + [c for c in columns if c not in CORE_COLUMNS] + [GROUP_ID_COLUMN]
    for record in records:
        if xref_is_list:
            record[XREF_COLUMN] = _as_list(record.get(XREF_COLUMN))
        for name in ordered:
            if name not in record:
                record[name] = False if fill_logical and name in logical else pd.NA

    table = pd.DataFrame.from_records(records, columns=ordered)
    table = table.astype({"start": "int64", "end": "int64"})

    if TRANSLATION_COLUMN in table.columns:
        missing = table[TRANSLATION_COLUMN].isna()
        if missing.any():
            warnings.warn(
                f"Translation product seems to be missing for {int(missing.sum())} of "
                f"{len(table)} {table['type'].iloc[0]} annotations. Setting to ''",
                GenBankWarning,
                stacklevel=2,
            )
            table[TRANSLATION_COLUMN] = table[TRANSLATION_COLUMN].where(~missing, "")

    return table


def drop_group_id(table: pd.DataFrame) -> pd.DataFrame:
    return table.drop(columns=[GROUP_ID_COLUMN], errors="ignore")
