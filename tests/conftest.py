import json
import pytest

from pathlib import Path

from data import SHIPPING_SPEC


@pytest.fixture
def spec_file(tmp_path) -> Path:
    """A JSON specification file declaring a simple option set and one with a compound option"""
    path = tmp_path / "options.json"
    path.write_text(json.dumps([{"enum": "Color", "options": ["red", "blue", "green"]}, SHIPPING_SPEC]))
    return path


@pytest.fixture
def shipping_spec_file(tmp_path) -> Path:
    path = tmp_path / "shipping.json"
    path.write_text(json.dumps(SHIPPING_SPEC))
    return path
