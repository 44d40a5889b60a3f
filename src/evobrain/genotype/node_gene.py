"""
evobrain Node Gene Module.

This module implements the NodeGene class and NodeType enumeration.

Classes:
    NodeType: Enumeration for node types (INPUT, HIDDEN, OUTPUT)
    NodeGene: Gene encoding a single neuron and its update rule
"""

import numpy as np
from enum import Enum

from evobrain.rules      import LinearRule, NeuronRule, make_neuron_rule, neuron_rule_codes
from evobrain.run.config import Config

class NodeType(Enum):
    """
    Role of a node in the network.
    """
    INPUT  = "I"
    HIDDEN = "H"
    OUTPUT = "O"

class NodeGene:
    """
    A gene describing a neuron.

    The gene owns an update rule instance (with its own parameters, bias included);
    decoding deep-copies that instance into the neuron, so neurons of different
    networks never share a rule. Input nodes always follow an identity LinearRule:
    their activation is set from outside.

    Public Attributes:
        id:   Unique identifier for this node
        type: Type of node (INPUT, HIDDEN, or OUTPUT)
        rule: The neuron update rule

    Public Properties:
        bias:      The bias of the update rule
        rule_name: The name of the update rule

    Public Methods:
        mutate(rng): Stochastically mutate the bias and the update rule
        copy():      Independent copy of the gene
    """

    def __init__(self,
                 node_id  : int,
                 node_type: NodeType,
                 config   : Config,
                 rule     : NeuronRule          | None = None,
                 rng      : np.random.Generator | None = None):
        """
        Initialize a node gene.
        If 'rule' is not specified, a rule is drawn at random from the allowed update
        rules (hidden/output nodes) with a small random bias, using 'rng'.

        Parameters:
            node_id:   Unique identifier for this node
            node_type: Type of node (INPUT, HIDDEN, or OUTPUT)
            config:    Stores configuration parameters
            rule:      The neuron update rule
            rng:       Generator used to draw the rule and the bias
        """
        self._config: Config   = config
        self.id     : int      = node_id
        self.type   : NodeType = node_type

        if rule is None:
            if node_type == NodeType.INPUT:
                rule = LinearRule(clipping=False,
                                  lower_bound=config.min_neuron_activation,
                                  upper_bound=config.max_neuron_activation)
            else:
                if rng is None:
                    raise ValueError(f"Node {node_id}: a generator is needed to draw a random update rule")
                name = config.allowed_update_rules[int(rng.integers(len(config.allowed_update_rules)))]
                rule = make_neuron_rule(name, config.min_neuron_activation, config.max_neuron_activation, rng)
                rule.bias = self._clip_bias(rng.normal(0.0, config.bias_perturb_strength))
        self.rule: NeuronRule = rule

    @property
    def bias(self) -> float:
        return self.rule.bias

    @bias.setter
    def bias(self, value: float) -> None:
        self.rule.bias = value

    @property
    def rule_name(self) -> str:
        return self.rule.name

    def _clip_bias(self, bias: float) -> float:
        max_bias = self._config.node_max_bias
        return float(min(max_bias, max(-max_bias, bias)))

    def mutate(self, rng: np.random.Generator) -> None:
        """
        Maybe change the bias, the update rule or its parameters.

        Three independent mutations may occur:
         + the bias is perturbed by a Gaussian amount (and kept within the bias bounds)
         + the update rule is replaced by a different allowed rule (the bias is kept)
         + the parameters of the update rule are perturbed
        Input nodes are never mutated.
        """
        if self.type == NodeType.INPUT:
            return

        if rng.random() < self._config.bias_perturb_prob:
            self.bias = self._clip_bias(self.bias + rng.normal(0.0, self._config.bias_perturb_strength))

        if rng.random() < self._config.rule_mutate_prob:
            # the replacement is always a different rule
            available = [r for r in self._config.allowed_update_rules if r != self.rule_name]
            if available:
                bias = self.bias
                name = available[int(rng.integers(len(available)))]
                self.rule = make_neuron_rule(name,
                                             self._config.min_neuron_activation,
                                             self._config.max_neuron_activation,
                                             rng)
                self.bias = bias

        if rng.random() < self._config.rule_perturb_prob:
            self.rule.perturb(rng, self._config.rule_perturb_strength)

    def copy(self) -> 'NodeGene':
        return NodeGene(self.id, self.type, self._config, rule=self.rule.deep_copy())

    def __repr__(self):
        return (f"NodeGene(node_id={self.id:+03d}, node_type=NodeType.{self.type.name:6s},"
                f"rule={self.rule!r})")

    def __str__(self):
        if self.type == NodeType.INPUT:
            return f"[{self.type.value}{self.id}]"
        else:
            rule_code = neuron_rule_codes.get(self.rule_name, "???")
            return f"[{self.type.value}{self.id},{rule_code},b={self.bias:.2f}]"
