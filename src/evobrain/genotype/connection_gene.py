"""
evobrain Connection Gene Module

This module implements the ConnectionGene class.

Classes:
    ConnectionGene: Gene encoding a synapse between two nodes
"""

import copy
import numpy as np

from evobrain.run.config import Config

class ConnectionGene:
    """
    A gene describing a synapse between two nodes.

    Connection genes are uniquely identified by their innovation number, the
    historical marker aligning genes of two genomes during crossover. Disabled
    connections are kept in the genome but not decoded into synapses.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the target node
        strength:   Strength of the synapse
        enabled:    Whether this connection is decoded into a synapse
        innovation: Global innovation number uniquely identifying this connection

    Public Methods:
        mutate(rng): Stochastically mutate the connection strength
        copy():      Independent copy of the gene
    """

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 strength  : float,
                 innovation: int,
                 config    : Config,
                 enabled   : bool = True):
        self.node_in   : int    = node_in
        self.node_out  : int    = node_out
        self.strength  : float  = strength
        self.enabled   : bool   = enabled
        self.innovation: int    = innovation
        self._config   : Config = config

    def mutate(self, rng: np.random.Generator) -> None:
        """
        Maybe change the connection strength.

        The strength is either perturbed by a Gaussian amount or replaced by a
        uniformly drawn value; in both cases it stays within the strength bounds.
        """
        perturb_prob = self._config.strength_perturb_prob
        replace_prob = self._config.strength_replace_prob
        lower        = self._config.min_connection_strength
        upper        = self._config.max_connection_strength

        r = rng.random()
        if r < perturb_prob:
            new_strength  = self.strength + rng.normal(0.0, self._config.strength_perturb_strength)
            self.strength = float(min(upper, max(lower, new_strength)))

        elif r < perturb_prob + replace_prob:
            self.strength = float(rng.uniform(lower, upper))

    def copy(self) -> 'ConnectionGene':
        return copy.copy(self)

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d},"
                f"strength={self.strength:+.6f}, enabled={self.enabled}, innovation={self.innovation:03d})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.strength:+.02f}]"
        return s
