"""Tests for MODEL_CONFIG in app.py."""
import ast
import os
import pytest

from backend.analyzer import DEFAULT_MODEL


def _extract_assignment(name):
    """Extract a literal assignment from app.py using AST parsing.

    This avoids importing app.py, which would trigger Streamlit UI calls.
    """
    app_path = os.path.join(os.path.dirname(__file__), "..", "app.py")
    with open(app_path, "r", encoding="utf-8") as f:
        source = f.read()

    tree = ast.parse(source)
    for node in ast.walk(tree):
        if isinstance(node, ast.Assign):
            for target in node.targets:
                if isinstance(target, ast.Name) and target.id == name:
                    return ast.literal_eval(node.value)
    raise AssertionError(f"{name} not found in app.py")


@pytest.fixture
def model_config():
    return _extract_assignment("MODEL_CONFIG")


def test_model_config_exists(model_config):
    """Test that MODEL_CONFIG exists in app.py."""
    assert isinstance(model_config, dict)
    assert len(model_config) > 0


def test_model_config_entries_have_desc_and_cost(model_config):
    for model_key, info in model_config.items():
        assert isinstance(info["desc"], str), f"Missing desc for {model_key}"
        assert isinstance(info["cost"], str), f"Missing cost for {model_key}"


def test_default_model_is_first_option(model_config):
    """The selectbox uses index=0, which should be the backend default."""
    assert list(model_config)[0] == DEFAULT_MODEL


def test_max_files_is_two():
    assert _extract_assignment("MAX_FILES") == 2
