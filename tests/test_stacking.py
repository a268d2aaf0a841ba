import pandas as pd
import pytest

from genbank_annot.annotation.stacking import drop_group_id, empty_table, stack_features
from genbank_annot.exceptions import GenBankWarning
from genbank_annot.models import CORE_COLUMNS


def row(start, end, kind="CDS", strand="+", **qualifiers):
    return {
        "chromosome": "chr1",
        "start": start,
        "end": end,
        "strand": strand,
        "loctype": "normal",
        "type": kind,
        **qualifiers,
    }


class TestStackFeatures:
    def test_empty(self):
        table = stack_features([])
        assert table.empty
        assert list(table.columns) == CORE_COLUMNS + ["group_id"]

    def test_column_union_in_first_seen_order(self):
        table = stack_features(
            [[row(1, 10, gene="a")], [row(20, 30, product="p", gene="b")]]
        )
        assert list(table.columns) == CORE_COLUMNS + ["gene", "product", "group_id"]
        assert pd.isna(table.loc[0, "product"])

    def test_missing_flag_is_false(self):
        table = stack_features([[row(1, 10, pseudo=True)], [row(20, 30)]])
        assert table["pseudo"].tolist() == [True, False]

    def test_missing_flag_left_missing_when_not_filled(self):
        table = stack_features([[row(1, 10, pseudo=True)], [row(20, 30)]], fill_logical=False)
        assert pd.isna(table.loc[1, "pseudo"])

    def test_missing_string_distinct_from_empty(self):
        table = stack_features([[row(1, 10, note="")], [row(20, 30)]])
        assert table.loc[0, "note"] == ""
        assert pd.isna(table.loc[1, "note"])

    def test_group_id_shared_by_segments(self):
        table = stack_features([[row(1, 10), row(20, 30)], [row(40, 50)]])
        assert table["group_id"].tolist() == [1, 1, 2]

    def test_repeated_xref_becomes_list_column(self):
        table = stack_features(
            [
                [row(1, 10, db_xref=["GI:1", "UniProt:Q1"])],
                [row(20, 30, db_xref="GI:2")],
                [row(40, 50)],
            ]
        )
        assert table["db_xref"].tolist() == [["GI:1", "UniProt:Q1"], ["GI:2"], []]

    def test_single_xref_stays_scalar(self):
        table = stack_features([[row(1, 10, db_xref="GI:1")]])
        assert table.loc[0, "db_xref"] == "GI:1"

    def test_missing_translation_filled(self):
        with pytest.warns(GenBankWarning, match="missing for 1 of 2"):
            table = stack_features([[row(1, 10, translation="MK")], [row(20, 30)]])
        assert table["translation"].tolist() == ["MK", ""]

    def test_integer_coordinates(self):
        table = stack_features([[row(1, 10)]])
        assert table["start"].dtype == "int64"


class TestHelpers:
    def test_empty_table_columns(self):
        assert list(empty_table(["gene_id", "type"]).columns) == CORE_COLUMNS + ["gene_id"]

    def test_drop_group_id(self):
        table = drop_group_id(stack_features([[row(1, 10)]]))
        assert "group_id" not in table.columns
