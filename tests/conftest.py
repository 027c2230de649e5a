"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
fixtures available to all test files.
"""

from pathlib import Path

import pytest

from graphstep.engine import StepController, StepMode
from graphstep.graph import Graph
from graphstep.graph.presets import disconnected_sample_graph, sample_graph


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def graph() -> Graph:
    """Four-node sample graph: 0-1 (4), 0-2 (1), 2-1 (2), 1-3 (5), 2-3 (8)."""
    return sample_graph()


@pytest.fixture
def disconnected_graph() -> Graph:
    """Sample graph plus an isolated node 4, selected as the end."""
    return disconnected_sample_graph()


@pytest.fixture
def manual_controller() -> StepController:
    """Controller that blocks at every step until advanced."""
    return StepController(mode=StepMode.MANUAL)


@pytest.fixture
def fast_controller() -> StepController:
    """Auto controller with the shortest allowed pacing."""
    return StepController(mode=StepMode.AUTO, pacing_ms=10)
