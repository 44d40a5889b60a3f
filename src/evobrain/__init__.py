"""
evobrain - Evolving neural controllers for embodied agents.

This package evolves the topology and parameters of recurrent neural networks
with a genetic algorithm. Every candidate network drives an agent through a
bounded rollout in a small 2-D world; the number of targets it reaches is its
fitness.

Main components:
- rules:      Neuron and synapse update rules
- genotype:   Genetic encoding (genomes, genes, innovation tracking)
- phenotype:  Executable networks, weight matrices, connection strategies, agents
- pool:       Population and generational replenishment
- evaluation: Environments and fitness evaluation
- run:        Configuration and the evolutionary loop

Example:
    >>> from evobrain import Config, Evolution
    >>> config = Config("config.ini")
    >>> best_agent = Evolution(config).run()
"""

__version__ = "0.1.0"

from evobrain.run.config          import Config
from evobrain.errors              import (EvoBrainError, ConfigurationError, CouplingMismatchError,
                                          GenomeDecodeError, UnstableComputationError)
from evobrain.genotype            import Genome
from evobrain.phenotype           import Agent, Network
from evobrain.pool                import Population
from evobrain.evaluation          import FitnessEvaluator, OdorWorld
from evobrain.run.evolution       import Evolution

__all__ = [
    "Agent",
    "Config",
    "ConfigurationError",
    "CouplingMismatchError",
    "EvoBrainError",
    "Evolution",
    "FitnessEvaluator",
    "Genome",
    "GenomeDecodeError",
    "Network",
    "OdorWorld",
    "Population",
    "UnstableComputationError",
]
