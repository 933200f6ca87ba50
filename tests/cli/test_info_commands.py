"""Tests for the informational CLI commands."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

from hydroplan.schema import HydroComponentType

REPO_ROOT = Path(__file__).resolve().parents[2]


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=REPO_ROOT,
        timeout=30,
    )


@pytest.mark.unit
def test_components_grouped_by_category():
    """components lists every category with its codes."""
    result = _run("components")
    assert result.returncode == 0
    output = result.stdout + result.stderr
    assert "monitoring:" in output
    assert "WATER_PUMP" in output
    assert "CHERRY_TOMATOES" in output


@pytest.mark.unit
def test_components_json_export():
    """components --json prints one entry per matrix code."""
    result = _run("components", "--json")
    assert result.returncode == 0
    entries = json.loads(result.stdout)
    assert [entry["code"] for entry in entries] == [
        int(code) for code in HydroComponentType
    ]
    assert entries[0]["category"] == "empty"


@pytest.mark.unit
def test_plants_lists_catalog():
    """plants prints the default catalog."""
    result = _run("plants")
    assert result.returncode == 0
    assert "Lettuce" in result.stdout + result.stderr


@pytest.mark.unit
def test_unknown_command_fails():
    """An unknown command exits with status 1."""
    assert _run("nope").returncode == 1
