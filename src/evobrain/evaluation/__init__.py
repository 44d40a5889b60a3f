"""
evobrain Evaluation Package

Modules:
    environment: Environment protocol
    odor_world:  OdorWorld, a small 2-D world with a mouse and a cheese
    fitness:     FitnessEvaluator, the bounded rollout turning a network into a fitness
"""

from evobrain.evaluation.environment import Environment
from evobrain.evaluation.fitness     import FitnessEvaluator
from evobrain.evaluation.odor_world  import Entity, OdorWorld

__all__ = ['Entity',
           'Environment',
           'FitnessEvaluator',
           'OdorWorld']
