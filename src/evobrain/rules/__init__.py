"""
Update Rules Package

This package provides the update rules followed by neurons and synapses.

Exported:
    neuron_rules:       Dictionary mapping neuron rule names to rule classes
    neuron_rule_codes:  Dictionary mapping neuron rule names to 3-letter codes
    make_neuron_rule:   Create a neuron rule with given activation bounds
    synapse_rules:      Dictionary mapping synapse rule names to rule classes
    Neuron rules:       LinearRule, DecayRule, NakaRushtonRule, BinaryRule, ThreeValueRule
    Synapse rules:      StaticRule, HebbianRule, HebbianThresholdRule
"""

from evobrain.rules.neuron_rules import (
    NeuronRule,
    LinearRule,
    DecayRule,
    NakaRushtonRule,
    BinaryRule,
    ThreeValueRule,
    clip_value,
    make_neuron_rule,
    neuron_rules,
    neuron_rule_codes
)
from evobrain.rules.synapse_rules import (
    SynapseRule,
    StaticRule,
    HebbianRule,
    HebbianThresholdRule,
    synapse_rules
)

__all__ = [
    'NeuronRule',
    'LinearRule',
    'DecayRule',
    'NakaRushtonRule',
    'BinaryRule',
    'ThreeValueRule',
    'clip_value',
    'make_neuron_rule',
    'neuron_rules',
    'neuron_rule_codes',
    'SynapseRule',
    'StaticRule',
    'HebbianRule',
    'HebbianThresholdRule',
    'synapse_rules'
]
