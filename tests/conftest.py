"""Shared fixtures for the quality loop test suite."""

from pathlib import Path

import pytest

from recycling_loop import LoopConfig

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture
def normal_batch():
    """The batch the default comparison starts from."""
    return [10000.0, 0.0, 0.0, 0.0, 0.0]


@pytest.fixture
def no_modules_config():
    """No quality or productivity anywhere, legendary is the desired quality."""
    return LoopConfig()


@pytest.fixture
def uncommon_config():
    """Two-quality loop (normal -> uncommon) with 10% quality in the assembler only."""
    return LoopConfig(production_quality=0.1, max_item_tier=1)


@pytest.fixture
def strategy_comparison_file():
    return EXAMPLES_DIR / "strategy_comparison.json"
