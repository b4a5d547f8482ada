import numpy as np
import pytest

from backend.errors import MappingConflictError
from backend.merger import validate_correspondences
from backend.reviewer import TABLE_COLUMNS, mappings_to_table, table_to_mappings


def test_table_round_trip(email_mapping):
    df = mappings_to_table([email_mapping])

    assert list(df.columns) == TABLE_COLUMNS
    assert df.iloc[0]["Übernehmen"]
    assert table_to_mappings(df) == [email_mapping]


def test_empty_proposal_gives_empty_table():
    df = mappings_to_table([])

    assert list(df.columns) == TABLE_COLUMNS
    assert table_to_mappings(df) == []


def test_unchecked_rows_are_skipped(email_mapping):
    df = mappings_to_table([email_mapping])
    df.loc[0, "Übernehmen"] = False

    assert table_to_mappings(df) == []


@pytest.mark.parametrize("cleared", [None, np.nan])
def test_cleared_merged_name_is_empty(dataset_a, dataset_b, email_mapping, cleared):
    """A cleared cell must not turn into the column name 'nan'."""
    df = mappings_to_table([email_mapping])
    df["Name im Ergebnis"] = df["Name im Ergebnis"].astype(object)
    df.loc[0, "Name im Ergebnis"] = cleared
    df.loc[0, "Begründung"] = cleared

    accepted = table_to_mappings(df)

    assert accepted[0].merged_name == ""
    assert accepted[0].rationale == ""
    with pytest.raises(MappingConflictError, match="empty merged name"):
        validate_correspondences(dataset_a, dataset_b, accepted)


def test_edited_merged_name_is_stripped(email_mapping):
    df = mappings_to_table([email_mapping])
    df.loc[0, "Name im Ergebnis"] = "  e_mail "

    assert table_to_mappings(df)[0].merged_name == "e_mail"
