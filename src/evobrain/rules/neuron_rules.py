"""
Neuron Update Rules Module

This module implements the closed set of update rules a neuron can follow.
Each rule is a small dataclass carrying its own parameters; a neuron owns one
rule instance and the network calls 'update()' once per step to obtain the
neuron's buffered (not yet committed) activation.

Every rule shares the same interface:
    update(activation, weighted_input) -> buffered activation
    clip(value)                        -> value clamped into [lower_bound, upper_bound]
                                          (identity when clipping is disabled)
    perturb(rng, stdev)                -> stochastically change the rule parameters
    deep_copy()                        -> independent instance with identical parameters
                                          (including the state of its noise generator)

Classes:
    LinearRule:      Linear neuron, optionally noisy and clipped (differentiable)
    DecayRule:       Accumulating neuron decaying toward a baseline
    NakaRushtonRule: Leaky integrator of a Naka-Rushton saturating response
    BinaryRule:      Two-valued threshold neuron
    ThreeValueRule:  Three-valued threshold neuron
"""

import copy
import numpy as np
from dataclasses import dataclass, field
from typing      import ClassVar, Union

def clip_value(value: float, lower_bound: float, upper_bound: float) -> float:
    """Clamp 'value' into [lower_bound, upper_bound]."""
    if value > upper_bound:
        return upper_bound
    if value < lower_bound:
        return lower_bound
    return value

@dataclass
class LinearRule:
    """
    A standard linear neuron: slope * (weighted_input + bias).

    If 'add_noise' is set, zero-centered Gaussian noise drawn from the rule's own
    generator is added before clipping.
    """
    name: ClassVar[str] = "linear"

    slope      : float = 1.0
    bias       : float = 0.0
    clipping   : bool  = True
    lower_bound: float = -1.0
    upper_bound: float = 1.0
    add_noise  : bool  = False
    noise_stdev: float = 0.1
    rng        : np.random.Generator = field(default_factory=np.random.default_rng, repr=False, compare=False)

    def update(self, activation: float, weighted_input: float) -> float:
        val = self.slope * (weighted_input + self.bias)
        if self.add_noise:
            val += self.rng.normal(0.0, self.noise_stdev)
        return self.clip(val)

    def clip(self, value: float) -> float:
        return clip_value(value, self.lower_bound, self.upper_bound) if self.clipping else value

    def derivative(self, value: float) -> float:
        """Derivative of the rule at 'value': the slope inside the bounds, 0 outside."""
        if value >= self.upper_bound or value <= self.lower_bound:
            return 0.0
        return self.slope

    def perturb(self, rng: np.random.Generator, stdev: float) -> None:
        self.slope = float(self.slope + rng.normal(0.0, stdev))

    def deep_copy(self) -> 'LinearRule':
        return copy.deepcopy(self)

@dataclass
class DecayRule:
    """
    A neuron which accumulates its weighted input and, at each step, decays toward
    'baseline' by a fraction of its distance from it.
    """
    name: ClassVar[str] = "decay"

    decay_fraction: float = 0.1
    baseline      : float = 0.0
    bias          : float = 0.0
    clipping      : bool  = True
    lower_bound   : float = -1.0
    upper_bound   : float = 1.0

    def update(self, activation: float, weighted_input: float) -> float:
        val   = activation + weighted_input + self.bias
        decay = self.decay_fraction * abs(val - self.baseline)
        if val > self.baseline:
            val = max(self.baseline, val - decay)
        elif val < self.baseline:
            val = min(self.baseline, val + decay)
        return self.clip(val)

    def clip(self, value: float) -> float:
        return clip_value(value, self.lower_bound, self.upper_bound) if self.clipping else value

    def perturb(self, rng: np.random.Generator, stdev: float) -> None:
        self.decay_fraction = clip_value(float(self.decay_fraction + rng.normal(0.0, stdev)), 0.0, 1.0)

    def deep_copy(self) -> 'DecayRule':
        return copy.deepcopy(self)

@dataclass
class NakaRushtonRule:
    """
    A continuous-time neuron relaxing toward the Naka-Rushton response of its input:

        s        = max_value * x^N / (sigma^N + x^N)   if x > 0 else 0
        a(t + 1) = a(t) + time_step / time_constant * (s - a(t))

    where x = weighted_input + bias, N = 'steepness' and sigma = 'semi_saturation'.
    """
    name: ClassVar[str] = "naka_rushton"

    max_value      : float = 1.0
    steepness      : float = 2.0
    semi_saturation: float = 0.5
    time_constant  : float = 1.0
    time_step      : float = 0.1
    bias           : float = 0.0
    clipping       : bool  = True
    lower_bound    : float = -1.0
    upper_bound    : float = 1.0

    def update(self, activation: float, weighted_input: float) -> float:
        x = weighted_input + self.bias
        if x > 0:
            xn = x ** self.steepness
            s  = self.max_value * xn / (self.semi_saturation ** self.steepness + xn)
        else:
            s = 0.0
        val = activation + self.time_step / self.time_constant * (s - activation)
        return self.clip(val)

    def clip(self, value: float) -> float:
        return clip_value(value, self.lower_bound, self.upper_bound) if self.clipping else value

    def perturb(self, rng: np.random.Generator, stdev: float) -> None:
        self.semi_saturation = max(1e-3, float(self.semi_saturation + rng.normal(0.0, stdev)))
        self.steepness       = max(1e-3, float(self.steepness       + rng.normal(0.0, stdev)))

    def deep_copy(self) -> 'NakaRushtonRule':
        return copy.deepcopy(self)

@dataclass
class BinaryRule:
    """
    A threshold neuron taking the value 'upper_bound' when weighted_input + bias
    exceeds 'threshold', and 'lower_bound' otherwise.
    """
    name: ClassVar[str] = "binary"

    threshold  : float = 0.5
    bias       : float = 0.0
    clipping   : bool  = True
    lower_bound: float = 0.0
    upper_bound: float = 1.0

    def update(self, activation: float, weighted_input: float) -> float:
        return self.upper_bound if weighted_input + self.bias > self.threshold else self.lower_bound

    def clip(self, value: float) -> float:
        return clip_value(value, self.lower_bound, self.upper_bound) if self.clipping else value

    def perturb(self, rng: np.random.Generator, stdev: float) -> None:
        self.threshold = float(self.threshold + rng.normal(0.0, stdev))

    def deep_copy(self) -> 'BinaryRule':
        return copy.deepcopy(self)

@dataclass
class ThreeValueRule:
    """
    A step neuron with three levels:
        lower_bound  if weighted_input + bias < lower_threshold
        upper_bound  if weighted_input + bias > upper_threshold
        middle_value otherwise
    """
    name: ClassVar[str] = "three_value"

    lower_threshold: float = 0.0
    upper_threshold: float = 1.0
    middle_value   : float = 0.0
    bias           : float = 0.0
    clipping       : bool  = True
    lower_bound    : float = -1.0
    upper_bound    : float = 1.0

    def update(self, activation: float, weighted_input: float) -> float:
        x = weighted_input + self.bias
        if x < self.lower_threshold:
            return self.lower_bound
        if x > self.upper_threshold:
            return self.upper_bound
        return self.clip(self.middle_value)

    def clip(self, value: float) -> float:
        return clip_value(value, self.lower_bound, self.upper_bound) if self.clipping else value

    def perturb(self, rng: np.random.Generator, stdev: float) -> None:
        a = float(self.lower_threshold + rng.normal(0.0, stdev))
        b = float(self.upper_threshold + rng.normal(0.0, stdev))
        self.lower_threshold, self.upper_threshold = min(a, b), max(a, b)

    def deep_copy(self) -> 'ThreeValueRule':
        return copy.deepcopy(self)

NeuronRule = Union[LinearRule, DecayRule, NakaRushtonRule, BinaryRule, ThreeValueRule]

neuron_rules = {
    "linear"      : LinearRule,
    "decay"       : DecayRule,
    "naka_rushton": NakaRushtonRule,
    "binary"      : BinaryRule,
    "three_value" : ThreeValueRule
    }

# 3-letter identifiers for each neuron rule
neuron_rule_codes = {
    "linear"      : "LIN",
    "decay"       : "DCY",
    "naka_rushton": "NKR",
    "binary"      : "BIN",
    "three_value" : "TRI"
    }

def make_neuron_rule(name       : str,
                     lower_bound: float,
                     upper_bound: float,
                     rng        : np.random.Generator | None = None) -> NeuronRule:
    """
    Create a neuron rule with default parameters and the given activation bounds.

    Parameters:
        name:        Name of the rule (a key of 'neuron_rules')
        lower_bound: Lowest activation the neuron may take
        upper_bound: Highest activation the neuron may take
        rng:         Generator seeding the rule's noise generator (LinearRule only)

    Returns:
        A new rule instance
    """
    if name not in neuron_rules:
        raise KeyError(f"Unknown neuron update rule '{name}'")

    rule = neuron_rules[name](lower_bound=lower_bound, upper_bound=upper_bound)
    if isinstance(rule, LinearRule) and rng is not None:
        rule.rng = np.random.default_rng(int(rng.integers(2**63)))
    return rule
