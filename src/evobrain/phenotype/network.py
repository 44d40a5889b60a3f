"""
evobrain Network Module

This module implements the phenotype: the executable network decoded from a genome.
A network owns two arenas, one of neurons and one of synapses, each keyed by stable
integer handles. Synapses refer to their endpoints by handle and never own them;
removing a neuron removes every synapse referring to it. Neurons may be organized
in labelled groups, and vector-valued layers (NeuronArray) may be connected to
groups or to each other by weight matrices.

Classes:
    Neuron:      A node holding an activation and an update rule
    Synapse:     A weighted, possibly learning, connection between two neurons
    NeuronGroup: An ordered, labelled collection of neurons of one network
    Network:     The executable network, advanced one step at a time by 'update()'
"""

import logging
import math
import numpy as np
from collections import defaultdict
from typing      import Iterable, Optional

from evobrain.errors                  import UnstableComputationError
from evobrain.phenotype.weight_matrix import NeuronArray, WeightMatrix
from evobrain.rules                   import LinearRule, NeuronRule, StaticRule, SynapseRule, clip_value

logger = logging.getLogger(__name__)

class Neuron:
    """
    A neuron of a network.

    The neuron's update rule computes its next activation from its current activation
    and its weighted input; the network stores that value in 'buffer' and commits it to
    'activation' only after every neuron has been updated. A clamped neuron keeps its
    activation (it is set from outside, e.g. by a sensor).

    Public Attributes:
        id:         Handle assigned by the owning network (None until added)
        rule:       The neuron update rule
        activation: The committed activation
        buffer:     The activation computed during the current step
        label:      Optional name
        x, y:       Position, used to order neurons when connecting them
        clamped:    Whether the network leaves the activation unchanged
    """

    def __init__(self,
                 rule      : NeuronRule | None = None,
                 activation: float              = 0.0,
                 label     : str   | None       = None,
                 x         : float              = 0.0,
                 y         : float              = 0.0,
                 clamped   : bool               = False):
        self.id        : Optional[int] = None
        self.rule      : NeuronRule    = rule if rule is not None else LinearRule()
        self.activation: float         = activation
        self.buffer    : float         = activation
        self.label     : Optional[str] = label
        self.x         : float         = x
        self.y         : float         = y
        self.clamped   : bool          = clamped

    def __repr__(self):
        return f"Neuron(id={self.id}, rule={self.rule.name}, activation={self.activation:+.4f})"

class Synapse:
    """
    A directed connection between two neurons, identified by their handles.

    The strength is clipped into [lower_bound, upper_bound] whenever the synapse
    rule changes it. A frozen synapse does not learn.

    Public Attributes:
        id:          Handle assigned by the owning network (None until added)
        source:      Handle of the source neuron
        target:      Handle of the target neuron
        strength:    The synapse weight
        rule:        The synapse update (learning) rule
        lower_bound: Lowest allowed strength
        upper_bound: Highest allowed strength
        frozen:      Whether the strength is kept fixed

    Public Methods:
        clip(value):            Clamp a strength into the synapse bounds
        copy(source, target):   Duplicate this synapse between two other neurons
    """

    def __init__(self,
                 source     : int | None         = None,
                 target     : int | None         = None,
                 strength   : float              = 1.0,
                 rule       : SynapseRule | None = None,
                 lower_bound: float              = -10.0,
                 upper_bound: float              = 10.0,
                 frozen     : bool               = False):
        self.id         : Optional[int] = None
        self.source     : Optional[int] = source
        self.target     : Optional[int] = target
        self.strength   : float         = strength
        self.rule       : SynapseRule   = rule if rule is not None else StaticRule()
        self.lower_bound: float         = lower_bound
        self.upper_bound: float         = upper_bound
        self.frozen     : bool          = frozen

    def clip(self, value: float) -> float:
        return clip_value(value, self.lower_bound, self.upper_bound)

    def copy(self, source: int | None = None, target: int | None = None) -> 'Synapse':
        """
        Create a synapse with the same strength, bounds and (deep-copied) rule,
        connecting 'source' to 'target'.
        """
        return Synapse(source, target, self.strength, self.rule.deep_copy(),
                       self.lower_bound, self.upper_bound, self.frozen)

    def __repr__(self):
        return (f"Synapse(id={self.id}, {self.source}=>{self.target}, "
                f"strength={self.strength:+.4f}, rule={self.rule.name})")

class NeuronGroup:
    """
    An ordered collection of neurons of a network.

    Neurons are addressable by ordinal index, so that external couplers can wire
    sensor i or actuator j to a fixed neuron. A group can also be the source or the
    target of weight matrices.
    """

    def __init__(self, network: 'Network', label: str, handles: Iterable[int]):
        self.label            : str                = label
        self.handles          : list[int]          = list(handles)
        self.incoming_matrices: list[WeightMatrix] = []
        self.outgoing_matrices: list[WeightMatrix] = []
        self._network         : 'Network'          = network

    def __len__(self):
        return len(self.handles)

    def __getitem__(self, index: int) -> Neuron:
        return self._network.neuron(self.handles[index])

    def __iter__(self):
        return (self._network.neuron(h) for h in self.handles)

    @property
    def activations(self) -> np.ndarray:
        return np.array([self._network.neuron(h).activation for h in self.handles], dtype=float)

    @activations.setter
    def activations(self, values) -> None:
        """Set (and immediately commit) the activation of each neuron in the group."""
        if len(values) != len(self.handles):
            raise ValueError(f"Expected {len(self.handles)} values, got {len(values)}")
        for h, value in zip(self.handles, values):
            neuron = self._network.neuron(h)
            neuron.activation = float(value)
            neuron.buffer     = float(value)

    def __repr__(self):
        return f"NeuronGroup(label={self.label!r}, size={len(self)})"

class Network:
    """
    An executable network of neurons, synapses, layers and weight matrices.

    The network advances in discrete steps. Each step follows a two-phase
    discipline: all new values (neuron activations, layer activations and
    synapse strengths) are computed from the activations committed at the end of
    the previous step and stored in buffers; only then are all buffers committed.
    The order in which neurons and synapses are visited therefore never changes
    the result of a step.

    Public Properties:
        neurons:  List of all neurons
        synapses: List of all synapses
        groups:   Dictionary mapping group labels to NeuronGroup objects
        layers:   List of all NeuronArray layers
        matrices: List of all weight matrices

    Public Methods:
        add_neuron(neuron), remove_neuron(handle), neuron(handle)
        add_synapse(synapse), remove_synapse(handle), synapse(handle)
        add_group(label, handles), get_group(label)
        add_layer(layer), remove_layer(layer), resize_layer(layer, size)
        add_weight_matrix(source, target, rng), remove_weight_matrix(matrix)
        weighted_inputs(): Weighted input of every neuron, from committed activations
        update():          Advance the network one step
    """

    def __init__(self):
        self._neurons        : dict[int, Neuron]      = {}   # handle => neuron
        self._synapses       : dict[int, Synapse]     = {}   # handle => synapse
        self._groups         : dict[str, NeuronGroup] = {}   # label  => group
        self._layers         : list[NeuronArray]      = []
        self._matrices       : list[WeightMatrix]     = []
        self._next_neuron_id : int                    = 0
        self._next_synapse_id: int                    = 0
        self.time_step       : int                    = 0

    # ------------------------------------------------------------------
    # Neurons and synapses

    @property
    def neurons(self) -> list[Neuron]:
        return list(self._neurons.values())

    @property
    def synapses(self) -> list[Synapse]:
        return list(self._synapses.values())

    def neuron(self, handle: int) -> Neuron:
        return self._neurons[handle]

    def synapse(self, handle: int) -> Synapse:
        return self._synapses[handle]

    def add_neuron(self, neuron: Neuron) -> int:
        """Add a neuron to the network and return its handle."""
        neuron.id = self._next_neuron_id
        self._next_neuron_id += 1
        self._neurons[neuron.id] = neuron
        return neuron.id

    def add_synapse(self, synapse: Synapse) -> int:
        """
        Add a synapse to the network and return its handle.

        Raises:
            KeyError: If either endpoint is not a neuron of this network
        """
        for endpoint in (synapse.source, synapse.target):
            if endpoint not in self._neurons:
                raise KeyError(f"Synapse endpoint {endpoint} is not a neuron of this network")
        synapse.id = self._next_synapse_id
        self._next_synapse_id += 1
        self._synapses[synapse.id] = synapse
        return synapse.id

    def remove_synapse(self, handle: int) -> None:
        del self._synapses[handle]

    def remove_neuron(self, handle: int) -> None:
        """
        Remove a neuron, every synapse starting or ending at it, and its
        membership in any group.
        """
        if handle not in self._neurons:
            raise KeyError(f"Neuron with handle {handle} does not exist in the network")

        dangling = [s.id for s in self._synapses.values() if s.source == handle or s.target == handle]
        for synapse_id in dangling:
            self.remove_synapse(synapse_id)
        logger.debug("Removing neuron %d and %d attached synapses", handle, len(dangling))

        for group in self._groups.values():
            if handle in group.handles:
                group.handles.remove(handle)
                self._rebuild_matrices(group)

        del self._neurons[handle]

    # ------------------------------------------------------------------
    # Groups, layers and weight matrices

    @property
    def groups(self) -> dict[str, NeuronGroup]:
        return dict(self._groups)

    @property
    def layers(self) -> list[NeuronArray]:
        return list(self._layers)

    @property
    def matrices(self) -> list[WeightMatrix]:
        return list(self._matrices)

    def add_group(self, label: str, handles: Iterable[int]) -> NeuronGroup:
        if label in self._groups:
            raise ValueError(f"A group labelled '{label}' already exists")
        group = NeuronGroup(self, label, handles)
        self._groups[label] = group
        return group

    def get_group(self, label: str) -> NeuronGroup:
        return self._groups[label]

    def add_layer(self, layer: NeuronArray) -> NeuronArray:
        self._layers.append(layer)
        return layer

    def remove_layer(self, layer: NeuronArray) -> None:
        """Remove a layer together with every weight matrix attached to it."""
        for matrix in layer.incoming_matrices + layer.outgoing_matrices:
            self.remove_weight_matrix(matrix)
        self._layers.remove(layer)

    def resize_layer(self, layer: NeuronArray, size: int) -> None:
        """Change the size of a layer and rebuild the weight matrices attached to it."""
        layer.resize(size)
        self._rebuild_matrices(layer)

    def add_weight_matrix(self,
                          source: NeuronArray | NeuronGroup,
                          target: NeuronArray | NeuronGroup,
                          rng   : np.random.Generator | None = None) -> WeightMatrix:
        """
        Connect two connectables (layers or neuron groups) with a dense weight matrix.
        The matrix starts as an identity block if the source is a neuron group and as
        a Gaussian random matrix otherwise.
        """
        matrix = WeightMatrix(source, target, rng=rng, diagonal=isinstance(source, NeuronGroup))
        self._matrices.append(matrix)
        return matrix

    def remove_weight_matrix(self, matrix: WeightMatrix) -> None:
        matrix.detach()
        self._matrices.remove(matrix)

    def _rebuild_matrices(self, connectable: NeuronArray | NeuronGroup) -> None:
        for matrix in connectable.incoming_matrices + connectable.outgoing_matrices:
            matrix.rebuild()

    # ------------------------------------------------------------------
    # Execution

    def weighted_inputs(self) -> dict[int, float]:
        """
        Compute the weighted input of every neuron from the committed activations
        (synapses and weight matrices targeting neuron groups).

        Returns:
            Dictionary mapping neuron handles to their weighted input
        """
        inputs: dict[int, float] = defaultdict(float)
        for synapse in self._synapses.values():
            inputs[synapse.target] += synapse.strength * self._neurons[synapse.source].activation

        for matrix in self._matrices:
            if isinstance(matrix.target, NeuronGroup):
                for handle, value in zip(matrix.target.handles, matrix.weights_times_source()):
                    inputs[handle] += value
        return inputs

    def update(self) -> None:
        """
        Advance the network one step.

        Phase 1 computes every new neuron activation, layer activation and synapse
        strength into buffers, reading only the activations committed by the previous
        step. Learning rules with state of their own (a sliding output threshold) are
        run on copies. Phase 2 commits all buffers and rule copies.

        Raises:
            UnstableComputationError: if any new value is not finite or overflows;
                                      nothing is committed
        """
        # Phase 1: compute
        inputs = self.weighted_inputs()
        strength_buffers: dict[int, tuple[float, SynapseRule]] = {}
        try:
            for neuron in self._neurons.values():
                if neuron.clamped:
                    neuron.buffer = neuron.activation
                else:
                    neuron.buffer = neuron.rule.update(neuron.activation, inputs.get(neuron.id, 0.0))

            layer_buffers = [layer.compute_buffer() for layer in self._layers]

            for synapse in self._synapses.values():
                if synapse.frozen:
                    continue
                pre  = self._neurons[synapse.source].activation
                post = self._neurons[synapse.target].activation
                rule = synapse.rule.deep_copy()
                strength_buffers[synapse.id] = (synapse.clip(rule.update(synapse.strength, pre, post)), rule)
        except OverflowError as e:
            raise UnstableComputationError(f"Overflow at time step {self.time_step}: {e}") from e

        self._check_finite({sid: strength for sid, (strength, _) in strength_buffers.items()}, layer_buffers)

        # Phase 2: commit
        for neuron in self._neurons.values():
            neuron.activation = neuron.buffer
        for synapse_id, (strength, rule) in strength_buffers.items():
            self._synapses[synapse_id].strength = strength
            self._synapses[synapse_id].rule     = rule
        for layer, buffer in zip(self._layers, layer_buffers):
            layer.activations = buffer

        self.time_step += 1

    def _check_finite(self, strength_buffers: dict[int, float], layer_buffers: list[np.ndarray]) -> None:
        for neuron in self._neurons.values():
            if not math.isfinite(neuron.buffer):
                raise UnstableComputationError(f"Neuron {neuron.id} activation became {neuron.buffer}")
        for synapse_id, strength in strength_buffers.items():
            if not math.isfinite(strength):
                raise UnstableComputationError(f"Synapse {synapse_id} strength became {strength}")
        for layer, buffer in zip(self._layers, layer_buffers):
            if not np.all(np.isfinite(buffer)):
                raise UnstableComputationError(f"Layer {layer.label} activations are not finite")

    def __str__(self):
        neurons_str  = "\n".join(f"  {neuron!r}"  for neuron  in self._neurons.values())
        synapses_str = "\n".join(f"  {synapse!r}" for synapse in self._synapses.values())
        return f"{neurons_str}\n\n{synapses_str}"
