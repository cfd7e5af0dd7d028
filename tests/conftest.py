"""
tests/conftest.py
Shared fixtures for the rapier test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import logging
import pathlib
from typing import Any, Dict, Iterator

import pytest
import yaml

from rapier.models import GenerationConfig, SchemaDefinition


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.yaml"


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_rapier_logger() -> Iterator[None]:
    """cli_main() installs a non-propagating handler; undo it after each test."""
    yield
    rapier_logger = logging.getLogger("rapier")
    rapier_logger.handlers.clear()
    rapier_logger.propagate = True
    rapier_logger.setLevel(logging.NOTSET)
    logging.disable(logging.NOTSET)


# ---------------------------------------------------------------------------
# Raw schema data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_schema_dict() -> Dict[str, Any]:
    """Load the reference schema_example.yaml once per session and return as dict."""
    assert SCHEMA_EXAMPLE_PATH.exists(), (
        f"Reference schema not found at {SCHEMA_EXAMPLE_PATH}. "
        "Make sure schema_example.yaml is in the project root."
    )
    with open(SCHEMA_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def schema_dict(raw_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_schema_dict)


@pytest.fixture()
def schema_yaml_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the schema dict to a temporary YAML file and return its path."""
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(schema_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Minimal / edge-case schema fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_schema_dict() -> Dict[str, Any]:
    """One struct and one zero-parameter method."""
    return {
        "types": {
            "User": {
                "fields": {
                    "id": "Int64",
                    "first_name": "String",
                    "username": "String?",
                },
            },
        },
        "methods": {
            "getMe": {"parameters": {}, "result": "User"},
        },
    }


@pytest.fixture()
def minimal_schema(minimal_schema_dict: Dict[str, Any]) -> SchemaDefinition:
    return SchemaDefinition.model_validate(minimal_schema_dict)


@pytest.fixture()
def example_schema(schema_dict: Dict[str, Any]) -> SchemaDefinition:
    return SchemaDefinition.model_validate(
        {"types": schema_dict["types"], "methods": schema_dict["methods"]}
    )


@pytest.fixture()
def config() -> GenerationConfig:
    return GenerationConfig()


@pytest.fixture()
def lenient_config() -> GenerationConfig:
    return GenerationConfig(strict=False)


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """A not-yet-existing output directory under tmp_path."""
    return tmp_path / "Sources"
