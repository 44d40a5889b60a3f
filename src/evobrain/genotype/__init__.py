"""
evobrain Genotype Package

This package implements the genetic encoding of the evolved networks.

A genome holds node genes (a neuron with its update rule and bias) and connection
genes (a synapse strength, tagged with a global innovation number).

Modules:
    node_gene:          NodeType enumeration and NodeGene class
    connection_gene:    ConnectionGene class
    genome:             Genome class
    innovation_tracker: InnovationTracker class

Exported Classes:
    NodeType:          Enumeration for node types (INPUT, HIDDEN, OUTPUT)
    NodeGene:          Gene encoding a single neuron
    ConnectionGene:    Gene encoding a weighted connection between nodes
    Genome:            Complete genome describing a network
    InnovationTracker: Global tracker for innovation numbers and node IDs
"""

from evobrain.genotype.connection_gene    import ConnectionGene
from evobrain.genotype.genome             import Genome
from evobrain.genotype.innovation_tracker import InnovationTracker
from evobrain.genotype.node_gene          import NodeType, NodeGene

__all__ = ['ConnectionGene',
           'Genome',
           'InnovationTracker',
           'NodeGene',
           'NodeType']
