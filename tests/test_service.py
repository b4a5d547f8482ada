import pytest

from backend.errors import InputValidationError, MappingConflictError, OracleError
from backend.service import analyze_columns_request, merge_files_request, parse_merge_payload


def test_analyze_request_returns_wire_format(merge_payload, stub_oracle):
    result = analyze_columns_request(merge_payload, stub_oracle)

    assert result == {
        "mappings": [{
            "column1": "email", "column2": "e-mail", "confidence": 0.9,
            "reason": "synonym", "mergedName": "email",
        }],
        "unmatchedColumns1": ["name"],
        "unmatchedColumns2": ["age"],
    }
    call = stub_oracle.calls[0]
    assert call["columns_a"] == ["email", "name"]
    assert call["columns_b"] == ["e-mail", "age"]
    assert call["sample_a"] == [{"email": "a@x.com", "name": "Ann"}]
    assert call["name_a"] == "customers.csv"


@pytest.mark.parametrize("payload", [
    {},
    None,
    {"file1": {"headers": ["a"]}},
    {"file1": {"headers": ["a"]}, "file2": {"name": "b.csv"}},
    {"file1": {"headers": "a,b"}, "file2": {"headers": ["b"]}},
])
def test_analyze_request_rejects_missing_columns(payload, stub_oracle):
    with pytest.raises(InputValidationError):
        analyze_columns_request(payload, stub_oracle)
    assert stub_oracle.calls == []


def test_analyze_request_wraps_oracle_failure(merge_payload, failing_oracle):
    with pytest.raises(OracleError):
        analyze_columns_request(merge_payload, failing_oracle)


def test_merge_request_returns_wire_format(merge_payload):
    result = merge_files_request(merge_payload)

    assert result["headers"] == ["name", "email", "age"]
    assert result["data"] == [
        {"name": "Ann", "email": "a@x.com", "age": None},
        {"name": None, "email": "b@x.com", "age": 30},
    ]
    assert result["rowCount"] == 2
    assert result["sourceFiles"] == ["customers.csv", "leads.xlsx"]
    assert result["mappings"] == merge_payload["mappings"]


def test_merge_request_ignores_stale_row_count(merge_payload):
    merge_payload["file1"]["rowCount"] = 99
    assert merge_files_request(merge_payload)["rowCount"] == 2


def test_merge_request_requires_both_files(merge_payload):
    del merge_payload["file2"]
    with pytest.raises(InputValidationError, match="Both files are required"):
        merge_files_request(merge_payload)


@pytest.mark.parametrize("mappings", [None, {"column1": "email"}, "email"])
def test_merge_request_requires_mapping_list(merge_payload, mappings):
    merge_payload["mappings"] = mappings
    with pytest.raises(InputValidationError, match="Mappings must be an array"):
        merge_files_request(merge_payload)


def test_merge_request_rejects_incomplete_mapping(merge_payload):
    merge_payload["mappings"] = [{"column1": "email", "column2": "e-mail"}]
    with pytest.raises(InputValidationError, match="mergedName"):
        merge_files_request(merge_payload)


def test_merge_request_rejects_conflicting_mappings(merge_payload):
    merge_payload["mappings"][0]["mergedName"] = "name"
    with pytest.raises(MappingConflictError):
        merge_files_request(merge_payload)


def test_parse_merge_payload_defaults(merge_payload):
    merge_payload["mappings"] = [{"column1": "email", "column2": "e-mail", "mergedName": "email"}]
    del merge_payload["file2"]["data"]

    dataset_a, dataset_b, correspondences = parse_merge_payload(merge_payload)

    assert dataset_b.rows == []
    assert correspondences[0].confidence == 1.0
    assert correspondences[0].rationale == ""


def test_analyze_request_without_oracle(merge_payload):
    with pytest.raises(InputValidationError, match="Both files are required"):
        analyze_columns_request({}, None)
    with pytest.raises(OracleError, match="OPENAI_API_KEY"):
        analyze_columns_request(merge_payload, None)
