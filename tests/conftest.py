"""Pytest configuration and shared fixtures."""

import pytest
import sys
from itertools import count
from pathlib   import Path

# Add the source directory to the Python path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir / "src"))


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the innovation tracker and the agent ID generator before every test."""
    from evobrain.genotype.innovation_tracker import InnovationTracker
    from evobrain.phenotype.agent import Agent

    Agent._id_generator = count(0)

    InnovationTracker._next_innovation_number = None
    InnovationTracker._next_node_id = None
    InnovationTracker._innovation_numbers = {}
    InnovationTracker._split_IDs = {}

    yield


@pytest.fixture
def config():
    """Default configuration: 2 inputs, 3 outputs, at most 10 hidden nodes."""
    from evobrain.run.config import Config
    return Config()


@pytest.fixture
def pursuer_config():
    """Configuration admitting the hand-built odor world pursuer."""
    from evobrain.run.config import Config
    config = Config()
    config.min_connection_strength = -100.0
    config.max_connection_strength = 100.0
    return config


@pytest.fixture
def pursuer_genome_dict():
    """
    A controller steering toward the smell: the stronger sensor drives the turn
    toward its own side, while a constant bias keeps the mouse moving forward.

    Inputs:  0 = left sensor, 1 = right sensor
    Outputs: 2 = move straight, 3 = turn left, 4 = turn right
    """
    return {
        "rule": "linear",
        "nodes": [
            {"id": 0, "type": "input"},
            {"id": 1, "type": "input"},
            {"id": 2, "type": "output", "bias": 0.5},
            {"id": 3, "type": "output", "bias": 0.0},
            {"id": 4, "type": "output", "bias": 0.0},
        ],
        "connections": [
            {"from": 0, "to": 3, "strength":  100.0},
            {"from": 0, "to": 4, "strength": -100.0},
            {"from": 1, "to": 3, "strength": -100.0},
            {"from": 1, "to": 4, "strength":  100.0},
        ]
    }
