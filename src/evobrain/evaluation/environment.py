"""
evobrain Environment Module

This module defines the Environment Protocol: what a world must provide for
an agent's network to be evaluated in it. The evaluator only ever talks to
this interface; OdorWorld is one implementation.

Classes:
    Environment: Protocol of the worlds agents are evaluated in
"""

import numpy as np
from typing import Any, Protocol, runtime_checkable

@runtime_checkable
class Environment(Protocol):
    """
    Interface of the environments used for fitness evaluation.

    An environment holds one controlled entity ('agent') and one entity to
    reach ('target'). The agent perceives the world through 'num_sensors'
    sensors and acts on it through 'num_actuators' actuators; the values are
    exchanged as arrays, ordered as the input and output neuron groups of the
    network they are coupled to.
    """

    num_sensors  : int
    num_actuators: int
    agent        : Any
    target       : Any

    def read_sensors(self, entity: Any) -> np.ndarray:
        """Current value of every sensor of 'entity'."""
        ...

    def write_actuators(self, entity: Any, values: np.ndarray) -> None:
        """Set the actuators of 'entity'; they take effect on the next 'update()'."""
        ...

    def is_in_radius(self, a: Any, b: Any, radius: float) -> bool:
        """Whether the centers of entities 'a' and 'b' are at most 'radius' apart."""
        ...

    def random_position(self) -> tuple[float, float]:
        """A position drawn uniformly within the world, from the environment's own generator."""
        ...

    def relocate(self, entity: Any, x: float, y: float) -> None:
        ...

    def update(self) -> None:
        """Advance the world one step."""
        ...
