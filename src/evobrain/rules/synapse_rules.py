"""
Synapse Update Rules Module

This module implements the learning rules a synapse can follow. A synapse owns
one rule instance; once per network step the rule receives the synapse's
current strength and the previous step's (committed) activations of its source
and target neurons, and returns the new, unclipped strength. Clipping to the
synapse bounds is the synapse's job.

Classes:
    StaticRule:           No learning
    HebbianRule:          Plain Hebbian learning
    HebbianThresholdRule: Hebbian learning gated by an (optionally sliding) output threshold
"""

import copy
from dataclasses import dataclass
from typing      import ClassVar, Union

@dataclass
class StaticRule:
    """The strength never changes."""
    name: ClassVar[str] = "static"

    def update(self, strength: float, pre: float, post: float) -> float:
        return strength

    def deep_copy(self) -> 'StaticRule':
        return StaticRule()

@dataclass
class HebbianRule:
    """dw = learning_rate * pre * post"""
    name: ClassVar[str] = "hebbian"

    learning_rate: float = 0.1

    def update(self, strength: float, pre: float, post: float) -> float:
        return strength + self.learning_rate * pre * post

    def deep_copy(self) -> 'HebbianRule':
        return copy.copy(self)

@dataclass
class HebbianThresholdRule:
    """
    Hebbian learning gated by an output threshold:

        dw = learning_rate * pre * post * (post - output_threshold)

    When 'use_sliding_output_threshold' is set, the threshold first moves toward the
    square of the post-synaptic activation:

        output_threshold += output_threshold_momentum * (post^2 - output_threshold)

    The threshold is part of the rule's state, so every synapse needs its own instance.
    """
    name: ClassVar[str] = "hebbian_threshold"

    learning_rate               : float = 0.1
    output_threshold            : float = 0.5
    output_threshold_momentum   : float = 0.1
    use_sliding_output_threshold: bool  = False

    def update(self, strength: float, pre: float, post: float) -> float:
        if self.use_sliding_output_threshold:
            self.output_threshold += self.output_threshold_momentum * (post * post - self.output_threshold)
        return strength + self.learning_rate * pre * post * (post - self.output_threshold)

    def deep_copy(self) -> 'HebbianThresholdRule':
        return copy.copy(self)

SynapseRule = Union[StaticRule, HebbianRule, HebbianThresholdRule]

synapse_rules = {
    "static"           : StaticRule,
    "hebbian"          : HebbianRule,
    "hebbian_threshold": HebbianThresholdRule
    }
