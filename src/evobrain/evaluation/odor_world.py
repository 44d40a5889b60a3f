"""
evobrain Odor World Module

A minimal two-dimensional world in which a mouse searches for cheese by smell.

Coordinates follow the mathematical convention: x grows to the right, y grows
upwards, headings are in degrees, 0 pointing along +x and growing counterclockwise.

Classes:
    Entity:    A point-like object of the world with a position and a heading
    OdorWorld: Rectangular world with a mouse (two smell sensors, three effectors) and a cheese
"""

import math
import numpy as np
from dataclasses import dataclass

@dataclass
class Entity:
    """
    An object of the world.

    Attributes:
        label:   Name of the entity
        x, y:    Position of the center
        heading: Direction the entity faces, in degrees
    """
    label  : str
    x      : float
    y      : float
    heading: float = 0.0

    def distance_to(self, other: 'Entity') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

class OdorWorld:
    """
    A rectangular world with a mouse (the agent) and a piece of cheese (the target).

    The cheese emits a smell whose intensity decreases linearly with distance,
    from 1 at the source down to 0 at 'dispersion'. The mouse has two object
    sensors, placed 'sensor_distance' away from its center at 'sensor_angle'
    degrees to the left and to the right of its heading; each reads the smell
    intensity at its own location.

    The mouse has three effectors, in this order:
     + move straight: advance by 'move_amount' times the effector value
     + turn left:     rotate counterclockwise by 'turn_amount' times the effector value (degrees)
     + turn right:    rotate clockwise by 'turn_amount' times the effector value (degrees)
    Negative effector values count as 0. The mouse never leaves the world.

    Public Attributes:
        agent:  The mouse
        target: The cheese

    Public Methods:
        read_sensors(entity), write_actuators(entity, values), update()
        is_in_radius(a, b, radius), random_position(), relocate(entity, x, y)
    """

    num_sensors  : int = 2
    num_actuators: int = 3

    def __init__(self,
                 width          : float                      = 400.0,
                 height         : float                      = 400.0,
                 agent_position : tuple[float, float]        = (300.0, 300.0),
                 target_position: tuple[float, float]        = (100.0, 100.0),
                 dispersion     : float                      = 600.0,
                 sensor_angle   : float                      = 45.0,
                 sensor_distance: float                      = 20.0,
                 move_amount    : float                      = 2.0,
                 turn_amount    : float                      = 1.0,
                 rng            : np.random.Generator | None = None):
        """
        Parameters:
            width, height:   Size of the world
            agent_position:  Initial position of the mouse (heading 0)
            target_position: Initial position of the cheese
            dispersion:      Distance at which the smell of the cheese vanishes
            sensor_angle:    Angle between the heading and each sensor, in degrees
            sensor_distance: Distance between the center of the mouse and each sensor
            move_amount:     Distance covered per unit of the move straight effector
            turn_amount:     Degrees turned per unit of a turning effector
            rng:             Generator used to draw random positions
        """
        self.width          : float               = width
        self.height         : float               = height
        self.dispersion     : float               = dispersion
        self.sensor_angle   : float               = sensor_angle
        self.sensor_distance: float               = sensor_distance
        self.move_amount    : float               = move_amount
        self.turn_amount    : float               = turn_amount
        self._rng           : np.random.Generator = rng if rng is not None else np.random.default_rng()

        self.agent : Entity = Entity("mouse",  *agent_position)
        self.target: Entity = Entity("cheese", *target_position)
        self._effectors: np.ndarray = np.zeros(self.num_actuators)

    def smell_at(self, x: float, y: float) -> float:
        """Intensity of the smell of the target at position (x, y)."""
        distance = math.hypot(x - self.target.x, y - self.target.y)
        return max(0.0, 1.0 - distance / self.dispersion)

    def sensor_positions(self, entity: Entity) -> list[tuple[float, float]]:
        """Positions of the left and right sensors of 'entity'."""
        positions = []
        for offset in (self.sensor_angle, -self.sensor_angle):
            angle = math.radians(entity.heading + offset)
            positions.append((entity.x + self.sensor_distance * math.cos(angle),
                              entity.y + self.sensor_distance * math.sin(angle)))
        return positions

    def read_sensors(self, entity: Entity) -> np.ndarray:
        return np.array([self.smell_at(x, y) for x, y in self.sensor_positions(entity)])

    def write_actuators(self, entity: Entity, values) -> None:
        if entity is not self.agent:
            raise ValueError(f"Entity '{entity.label}' has no effectors")
        values = np.asarray(values, dtype=float)
        if values.shape != (self.num_actuators,):
            raise ValueError(f"Expected {self.num_actuators} effector values, got {values.shape}")
        self._effectors = np.maximum(values, 0.0)

    def update(self) -> None:
        """Apply the effector values to the mouse: turn first, then move."""
        straight, left, right = self._effectors
        agent = self.agent
        agent.heading = (agent.heading + self.turn_amount * (left - right)) % 360.0

        angle = math.radians(agent.heading)
        self.relocate(agent,
                      agent.x + self.move_amount * straight * math.cos(angle),
                      agent.y + self.move_amount * straight * math.sin(angle))

    def is_in_radius(self, a: Entity, b: Entity, radius: float) -> bool:
        return a.distance_to(b) <= radius

    def random_position(self) -> tuple[float, float]:
        return (float(self._rng.uniform(0.0, self.width)), float(self._rng.uniform(0.0, self.height)))

    def relocate(self, entity: Entity, x: float, y: float) -> None:
        """Move 'entity' to (x, y), clamped to the bounds of the world."""
        entity.x = min(self.width,  max(0.0, x))
        entity.y = min(self.height, max(0.0, y))

    def __repr__(self):
        return f"OdorWorld({self.width}x{self.height}, agent={self.agent}, target={self.target})"
