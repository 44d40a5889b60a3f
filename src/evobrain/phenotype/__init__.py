"""
evobrain Phenotype Package

This package implements the phenotype: the executable network decoded from a
genome, the dense layer/weight-matrix connectivity that may be attached to it,
the connection strategies wiring collections of neurons, and the Agent tying a
genome to its network and fitness.

Modules:
    network:       Neuron, Synapse, NeuronGroup and Network classes
    weight_matrix: NeuronArray and WeightMatrix classes
    connections:   OneToOne, AllToAll and Sparse connection strategies
    agent:         Evolved agent combining genome, network, and fitness

Exported Classes:
    Agent:        A member of the population
    Network:      The executable network
    Neuron:       A node holding an activation and an update rule
    NeuronArray:  A vector-valued layer
    NeuronGroup:  An ordered, labelled collection of neurons
    Synapse:      A weighted connection between two neurons
    WeightMatrix: A dense matrix connecting two layers or groups
    OneToOne, AllToAll, Sparse: Connection strategies
"""

from evobrain.phenotype.agent         import Agent
from evobrain.phenotype.connections   import AllToAll, OneToOne, Sparse, X_ORDER, Y_ORDER, DECLARATION_ORDER
from evobrain.phenotype.network       import Network, Neuron, NeuronGroup, Synapse
from evobrain.phenotype.weight_matrix import NeuronArray, WeightMatrix

__all__ = ['Agent',
           'AllToAll',
           'DECLARATION_ORDER',
           'Network',
           'Neuron',
           'NeuronArray',
           'NeuronGroup',
           'OneToOne',
           'Sparse',
           'Synapse',
           'WeightMatrix',
           'X_ORDER',
           'Y_ORDER']
