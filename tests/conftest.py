import json
import pytest
from unittest.mock import Mock

from backend.models import Correspondence, MappingProposal, TabularDataset


@pytest.fixture
def dataset_a():
    """Customer list as parsed from the first file."""
    return TabularDataset(
        name="customers.csv",
        columns=["email", "name"],
        rows=[{"email": "a@x.com", "name": "Ann"}],
    )


@pytest.fixture
def dataset_b():
    """Lead list as parsed from the second file."""
    return TabularDataset(
        name="leads.xlsx",
        columns=["e-mail", "age"],
        rows=[{"e-mail": "b@x.com", "age": 30}],
    )


@pytest.fixture
def email_mapping():
    return Correspondence(
        column_a="email",
        column_b="e-mail",
        merged_name="email",
        confidence=0.9,
        rationale="synonym",
    )


def _chat_response(content):
    """Shape of client.chat.completions.create(...) with one choice."""
    message = Mock()
    message.content = content if isinstance(content, str) else json.dumps(content)
    choice = Mock()
    choice.message = message
    response = Mock()
    response.choices = [choice]
    return response


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI client answering with one email mapping."""
    client = Mock()
    client.api_key = "test-key"
    client.chat.completions.create.return_value = _chat_response({
        "mappings": [
            {"column1": "email", "column2": "e-mail", "confidence": 0.95,
             "reason": "Same data, different spelling", "mergedName": "email"}
        ],
        "unmatchedColumns1": ["name"],
        "unmatchedColumns2": ["age"],
    })
    return client


class StubOracle:
    """Records calls and returns a fixed proposal."""

    def __init__(self, proposal=None, error=None):
        self.proposal = proposal or MappingProposal()
        self.error = error
        self.calls = []

    def propose_mappings(self, columns_a, columns_b, sample_a=None, sample_b=None, name_a="File 1", name_b="File 2"):
        self.calls.append({
            "columns_a": columns_a, "columns_b": columns_b,
            "sample_a": sample_a, "sample_b": sample_b,
            "name_a": name_a, "name_b": name_b,
        })
        if self.error:
            raise self.error
        return self.proposal


@pytest.fixture
def stub_oracle(email_mapping):
    return StubOracle(MappingProposal(
        correspondences=[email_mapping],
        unmatched_a=["name"],
        unmatched_b=["age"],
    ))


@pytest.fixture
def make_chat_response():
    return _chat_response


@pytest.fixture
def failing_oracle():
    return StubOracle(error=RuntimeError("connection reset"))


def _file_payload(dataset):
    payload = dataset.to_dict()
    payload["sampleData"] = dataset.rows[:3]
    return payload


@pytest.fixture
def merge_payload(dataset_a, dataset_b, email_mapping):
    """Request body of the merge operation as sent by the UI."""
    return {
        "file1": _file_payload(dataset_a),
        "file2": _file_payload(dataset_b),
        "mappings": [email_mapping.to_dict()],
    }
