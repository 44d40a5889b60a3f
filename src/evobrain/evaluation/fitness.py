"""
evobrain Fitness Module

This module implements the FitnessEvaluator class, which scores a network by
letting it drive the agent of a freshly built environment for a fixed number
of moves.

Classes:
    FitnessEvaluator: Bounded rollout of a network in an environment
"""

import logging
import numpy as np
from typing import Callable, TYPE_CHECKING

from evobrain.errors                  import CouplingMismatchError, UnstableComputationError
from evobrain.evaluation.environment import Environment
from evobrain.evaluation.odor_world  import OdorWorld
from evobrain.run.config             import Config

if TYPE_CHECKING:
    from evobrain.phenotype import Network, NeuronGroup

logger = logging.getLogger(__name__)

class FitnessEvaluator:
    """
    Scores a network by the number of targets its agent reaches in 'max_moves' moves.

    At every move:
     + the agent's sensor values are written into the (clamped) input neurons
     + the network is advanced one step
     + the output activations are written to the agent's actuators
     + the environment is advanced one step
     + if the agent is at most 'target_radius' away from the target, the fitness grows by 1
       and the target is moved to a random position

    The sensors are coupled to the "inputs" group and the actuators to the "outputs"
    group, by ordinal index. A rollout in which the network produces a non-finite
    value ends immediately with fitness 0.

    The environment is created anew by every evaluation and discarded afterwards.

    Public Methods:
        evaluate(phenotype, seed): Run a rollout and return the fitness
    """

    def __init__(self,
                 config             : Config,
                 environment_factory: Callable[..., Environment] = OdorWorld):
        """
        Parameters:
            config:              Stores configuration parameters ('max_moves', 'target_radius')
            environment_factory: Builds an environment; called with a keyword argument 'rng'
        """
        self._config             : Config                     = config
        self._environment_factory: Callable[..., Environment] = environment_factory

    @staticmethod
    def check_coupling(environment: Environment, inputs: 'NeuronGroup', outputs: 'NeuronGroup') -> None:
        """
        Raises:
            CouplingMismatchError: if the sensor or actuator count differs from the
                                   size of the input or output group
        """
        if environment.num_sensors != len(inputs):
            raise CouplingMismatchError(f"{environment.num_sensors} sensors cannot be coupled "
                                        f"to {len(inputs)} input neurons")
        if environment.num_actuators != len(outputs):
            raise CouplingMismatchError(f"{environment.num_actuators} actuators cannot be coupled "
                                        f"to {len(outputs)} output neurons")

    def evaluate(self, phenotype: 'Network', seed: int | None = None) -> float:
        """
        Run one rollout of 'phenotype' and return its fitness.

        Parameters:
            phenotype: The network driving the agent (its state is advanced by the rollout)
            seed:      Seed of the environment's generator

        Returns:
            the number of targets reached

        Raises:
            CouplingMismatchError: if the network cannot be coupled to the environment
        """
        environment = self._environment_factory(rng=np.random.default_rng(seed))
        inputs      = phenotype.get_group("inputs")
        outputs     = phenotype.get_group("outputs")
        self.check_coupling(environment, inputs, outputs)

        agent  = environment.agent
        radius = self._config.target_radius
        score  = 0.0

        for move in range(self._config.max_moves):
            inputs.activations = environment.read_sensors(agent)
            try:
                phenotype.update()
            except UnstableComputationError as e:
                logger.warning("Rollout stopped at move %d: %s; fitness set to 0", move, e)
                return 0.0
            environment.write_actuators(agent, outputs.activations)
            environment.update()

            if environment.is_in_radius(agent, environment.target, radius):
                score += 1
                environment.relocate(environment.target, *environment.random_position())

        return score

    def __call__(self, phenotype: 'Network', seed: int | None = None) -> float:
        return self.evaluate(phenotype, seed)
