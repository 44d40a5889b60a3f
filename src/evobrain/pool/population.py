"""
evobrain Population Module

This module implements the Population class: the collection of agents
evolving together, and the generational steps applied to it.

Classes:
    Population: Fixed-capacity population with truncation selection and elitism
"""

import logging
import math
import numpy as np
from joblib import Parallel, delayed
from typing import Callable, TYPE_CHECKING

from evobrain.phenotype  import Agent
from evobrain.run.config import Config

if TYPE_CHECKING:
    from evobrain.phenotype import Network

logger = logging.getLogger(__name__)

# An evaluation function maps a freshly decoded network and a seed to a fitness
EvaluateFunction = Callable[['Network', int], float]

class Population:
    """
    A population of 'population_size' evolving agents.

    One generation consists of evaluating every agent ('compute_new_fitness') and
    then replacing the worst agents by offspring of the survivors ('replenish').
    Selection is by truncation: a fraction 'elimination_ratio' of the agents,
    the worst ones, is removed each generation. The best 'elitism' agents survive
    unchanged; since an agent keeps its evaluation seed for life, the best fitness
    never decreases under a deterministic evaluator.

    All random decisions of the population are drawn from its own generator,
    seeded with the configured 'seed'.

    Public Attributes:
        agents:     List of all agents of the current generation
        generation: Number of completed replenishments

    Public Methods:
        populate(prototype):                  Fill the population from a prototype agent
        compute_new_fitness(evaluate, jobs):  Evaluate every agent, return the best fitness
        replenish():                          Remove the worst agents and refill with offspring
        get_fittest_agent():                  Return the agent with highest fitness
    """

    def __init__(self, config: Config):
        """
        Parameters:
            config: Stores configuration parameters

        Raises:
            ConfigurationError: if the configuration is inconsistent
        """
        config.validate()

        self._config    : Config              = config
        self._rng       : np.random.Generator = np.random.default_rng(config.seed)
        self.agents     : list[Agent]         = []
        self.generation : int                 = 0

    @property
    def size(self) -> int:
        return len(self.agents)

    def populate(self, prototype: Agent) -> None:
        """
        Fill the population with 'population_size' agents derived from 'prototype'.

        The first agent carries an unmutated copy of the prototype's genome; every
        other agent carries a mutated copy.
        """
        self.agents = [Agent(prototype.genome.copy(seed=self._new_seed()), seed=self._new_seed())]
        while len(self.agents) < self._config.population_size:
            genome = prototype.genome.copy(seed=self._new_seed())
            genome.mutate()
            self.agents.append(Agent(genome, seed=self._new_seed()))
        self.generation = 0

    def _new_seed(self) -> int:
        return int(self._rng.integers(2**63))

    def compute_new_fitness(self, evaluate: EvaluateFunction, num_jobs: int = 1) -> float:
        """
        Evaluate the fitness of every agent and return the highest fitness.

        Every agent gets a freshly decoded network, evaluated with the agent's own
        seed. The method returns only once every agent has been evaluated.

        Parameters:
            evaluate: Function mapping (network, seed) to a fitness
            num_jobs: Number of parallel processes for fitness evaluation
                      1 = serial (no parallelization)
                     -1 = use all available CPU cores
                     >1 = use specified number of processes

        Returns:
            the highest fitness of the population
        """
        networks = [agent.decode() for agent in self.agents]

        if num_jobs == 1:
            fitness_all = [evaluate(network, agent.seed) for network, agent in zip(networks, self.agents)]
        else:
            fitness_all = Parallel(num_jobs)(delayed(evaluate)(network, agent.seed)
                                             for network, agent in zip(networks, self.agents))

        for agent, fitness in zip(self.agents, fitness_all):
            agent.fitness = fitness

        return max(fitness_all)

    def get_fittest_agent(self) -> Agent | None:
        """
        Find and return the agent with the highest fitness in the population.

        Returns:
            The agent with the highest fitness value, or None if the population
            is empty or the fitness of the agents has not been calculated yet
        """
        if not self.agents:
            return None

        # 'max' raises a TypeError if called on a list that contains 'None'
        try:
            return max(self.agents, key=lambda agent: agent.fitness)
        except TypeError:
            return None

    def replenish(self) -> None:
        """
        Replace the worst agents by offspring of the survivors.

        Steps:
         + sort the agents by decreasing fitness (ties keep the current order)
         + remove the floor(N * elimination_ratio) worst agents, always keeping at least one
         + keep the survivors; the best 'elitism' of them are never altered
         + refill up to N: with probability 'crossover_probability' the mutated child
           of two random survivors, otherwise a mutated clone of a random survivor
         + advance the generation counter

        Assumes the fitness of every agent has been computed.
        """
        N = self._config.population_size
        ranked = sorted(self.agents, key=lambda agent: agent.fitness, reverse=True)

        num_removed = min(math.floor(len(ranked) * self._config.elimination_ratio), len(ranked) - 1)
        num_kept    = max(len(ranked) - num_removed, self._config.elitism)
        survivors   = ranked[:max(1, num_kept)]

        offspring = []
        while len(survivors) + len(offspring) < N:
            parent = survivors[int(self._rng.integers(len(survivors)))]
            if len(survivors) > 1 and self._rng.random() < self._config.crossover_probability:
                other = survivors[int(self._rng.integers(len(survivors)))]
                child = parent.mate(other)
            else:
                child = parent.clone()
                child.mutate()
            offspring.append(child)

        self.agents = survivors[:N] + offspring
        self.generation += 1

        logger.debug("Generation %d: kept %d agents, created %d",
                     self.generation, len(survivors), len(offspring))

    def __str__(self):
        return '\n'.join(str(agent) for agent in self.agents)
