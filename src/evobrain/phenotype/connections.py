"""
evobrain Connection Strategies Module

This module implements connection strategies: algorithms generating the synapses
between two collections of neurons of a network according to a topology policy.
Every synapse created by a strategy is a copy of the strategy's base synapse
(its template), so strength, bounds and learning rule are shared by value and
never by reference.

Orderings decide which neuron comes first when a strategy needs the neurons in
a sequence; they are plain sort keys.

Classes:
    OneToOne: Connect the i-th source neuron to the i-th target neuron
    AllToAll: Connect every source neuron to every target neuron
    Sparse:   Connect each source/target pair with a given probability

Orderings:
    X_ORDER, Y_ORDER, DECLARATION_ORDER
"""

import numpy as np
from typing import Callable, Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from evobrain.phenotype.network import Network, Neuron, Synapse

def X_ORDER(neuron: 'Neuron') -> float:
    return neuron.x

def Y_ORDER(neuron: 'Neuron') -> float:
    return neuron.y

def DECLARATION_ORDER(neuron: 'Neuron') -> int:
    return neuron.id

def _default_template() -> 'Synapse':
    from evobrain.phenotype.network import Synapse
    return Synapse(strength=1.0, frozen=True)

class OneToOne:
    """
    Connect each source neuron to a single target neuron.

    Both collections are sorted with the same ordering, then the i-th source is
    paired with the i-th target, stopping at the end of the shorter collection.
    With 'bidirectional' set, the reverse synapse is created for every pair too,
    so m sources and n targets yield min(m, n) synapses, or 2 * min(m, n).
    """

    def __init__(self,
                 base_synapse : 'Synapse | None'               = None,
                 bidirectional: bool                           = False,
                 ordering     : Callable[['Neuron'], float]    = Y_ORDER):
        """
        Parameters:
            base_synapse:  Template of the created synapses (a frozen unit synapse by default)
            bidirectional: Whether to also connect each target back to its source
            ordering:      Sort key used to order both collections
        """
        self.base_synapse  = base_synapse if base_synapse is not None else _default_template()
        self.bidirectional = bidirectional
        self.ordering      = ordering

    def connect(self,
                network: 'Network',
                sources: Iterable['Neuron'],
                targets: Iterable['Neuron']) -> list[int]:
        """
        Create the synapses in 'network'.

        Returns:
            the handles of the new synapses
        """
        sorted_sources = sorted(sources, key=self.ordering)
        sorted_targets = sorted(targets, key=self.ordering)

        handles = []
        for source, target in zip(sorted_sources, sorted_targets):
            handles.append(network.add_synapse(self.base_synapse.copy(source.id, target.id)))
            if self.bidirectional:
                handles.append(network.add_synapse(self.base_synapse.copy(target.id, source.id)))
        return handles

    def __str__(self):
        return "One to one"

class AllToAll:
    """
    Connect every source neuron to every target neuron.
    When the two collections overlap, self-connections are created only if allowed.
    """

    def __init__(self, base_synapse: 'Synapse | None' = None, allow_self_connection: bool = False):
        self.base_synapse          = base_synapse if base_synapse is not None else _default_template()
        self.allow_self_connection = allow_self_connection

    def connect(self,
                network: 'Network',
                sources: Iterable['Neuron'],
                targets: Iterable['Neuron']) -> list[int]:
        targets = list(targets)
        handles = []
        for source in sources:
            for target in targets:
                if source.id == target.id and not self.allow_self_connection:
                    continue
                handles.append(network.add_synapse(self.base_synapse.copy(source.id, target.id)))
        return handles

    def __str__(self):
        return "All to all"

class Sparse:
    """
    Connect each source/target pair independently with probability 'connection_probability'.
    """

    def __init__(self,
                 connection_probability: float,
                 rng                   : np.random.Generator,
                 base_synapse          : 'Synapse | None' = None,
                 allow_self_connection : bool             = False):
        if not 0.0 <= connection_probability <= 1.0:
            raise ValueError(f"connection_probability must lie in [0, 1], got {connection_probability}")
        self.connection_probability = connection_probability
        self.base_synapse           = base_synapse if base_synapse is not None else _default_template()
        self.allow_self_connection  = allow_self_connection
        self._rng                   = rng

    def connect(self,
                network: 'Network',
                sources: Iterable['Neuron'],
                targets: Iterable['Neuron']) -> list[int]:
        targets = list(targets)
        handles = []
        for source in sources:
            for target in targets:
                if source.id == target.id and not self.allow_self_connection:
                    continue
                if self._rng.random() < self.connection_probability:
                    handles.append(network.add_synapse(self.base_synapse.copy(source.id, target.id)))
        return handles

    def __str__(self):
        return f"Sparse (p={self.connection_probability})"
