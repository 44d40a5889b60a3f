"""
evobrain Weight Matrix Module

This module implements dense, layer-to-layer connectivity, independent of the
neuron/synapse graph. A "connectable" is anything exposing an activation vector
('activations') and the lists of weight matrices entering and leaving it
('incoming_matrices', 'outgoing_matrices'): a NeuronArray layer or a NeuronGroup.

Classes:
    NeuronArray:  A vector-valued layer of activations
    WeightMatrix: A dense matrix connecting a source connectable to a target connectable
"""

import numpy as np
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from evobrain.phenotype.network import NeuronGroup

class NeuronArray:
    """
    A layer holding a vector of activations.

    At each network step the new activations are the sum of the products of the
    incoming weight matrices with their sources (clipped when 'clipping' is set).
    """

    def __init__(self,
                 size       : int,
                 label      : str | None = None,
                 clipping   : bool       = False,
                 lower_bound: float      = -1.0,
                 upper_bound: float      = 1.0):
        self.label            : str | None         = label
        self.activations      : np.ndarray         = np.zeros(size)
        self.clipping         : bool               = clipping
        self.lower_bound      : float              = lower_bound
        self.upper_bound      : float              = upper_bound
        self.incoming_matrices: list['WeightMatrix'] = []
        self.outgoing_matrices: list['WeightMatrix'] = []

    def __len__(self):
        return len(self.activations)

    @property
    def weighted_inputs(self) -> np.ndarray:
        """Sum of the products of every incoming matrix with its source activations."""
        total = np.zeros(len(self))
        for matrix in self.incoming_matrices:
            total += matrix.weights_times_source()
        return total

    def compute_buffer(self) -> np.ndarray:
        """The activations for the next step (not committed)."""
        buffer = self.weighted_inputs
        if self.clipping:
            buffer = np.clip(buffer, self.lower_bound, self.upper_bound)
        return buffer

    def resize(self, size: int) -> None:
        """
        Change the number of activations, keeping the leading ones.
        Matrices attached to the layer must be rebuilt afterwards
        (Network.resize_layer does both).
        """
        activations = np.zeros(size)
        n = min(size, len(self.activations))
        activations[:n] = self.activations[:n]
        self.activations = activations

    def __repr__(self):
        return f"NeuronArray(label={self.label!r}, size={len(self)})"

Connectable = Union[NeuronArray, 'NeuronGroup']

class WeightMatrix:
    """
    A dense weight matrix connecting a source connectable to a target connectable.

    The matrix has one row per source activation and one column per target
    activation; its dimensions always match the lengths of the two endpoints.

    Public Attributes:
        source:    The source connectable
        target:    The target connectable
        increment: Amount added/subtracted by increment_weights()/decrement_weights()
        use_curve: Display hint (drawn as a curve), ignored by the computation

    Public Properties:
        matrix:  The weight matrix itself (rows = source, columns = target)
        weights: The entries flattened in row-major order

    Public Methods:
        randomize(), diagonalize(), clear(), increment_weights(), decrement_weights()
        set_weights(values):    Overwrite entries in row-major order
        weights_times_source(): Product of the source activations with the matrix
        rebuild():              Re-create the matrix after an endpoint changed size
        detach():               Disconnect the matrix from its endpoints
    """

    def __init__(self,
                 source   : Connectable,
                 target   : Connectable,
                 rng      : np.random.Generator | None = None,
                 diagonal : bool                       = False,
                 increment: float                      = 0.1):
        """
        Parameters:
            source:    The source connectable
            target:    The target connectable
            rng:       Generator used to draw random weights
            diagonal:  Initialize as an identity block (adapter between a neuron group and
                       a layer) rather than as a Gaussian random matrix
            increment: Step used by increment_weights()/decrement_weights()
        """
        self.source   : Connectable         = source
        self.target   : Connectable         = target
        self.increment: float               = increment
        self.use_curve: bool                = False
        self._rng     : np.random.Generator = rng if rng is not None else np.random.default_rng()
        self._diagonal: bool                = diagonal

        source.outgoing_matrices.append(self)
        target.incoming_matrices.append(self)

        if diagonal:
            self.diagonalize()
        else:
            self.randomize()

    @property
    def shape(self) -> tuple[int, int]:
        """The shape required by the current sizes of the endpoints."""
        return (len(self.source.activations), len(self.target.activations))

    @property
    def matrix(self) -> np.ndarray:
        return self._matrix

    @property
    def weights(self) -> np.ndarray:
        return self._matrix.flatten()

    def set_weights(self, values) -> None:
        """
        Overwrite matrix entries in row-major order. Only the first
        min(matrix size, len(values)) entries are written.
        """
        n = min(self._matrix.size, len(values))
        self._matrix.flat[:n] = np.asarray(values, dtype=float)[:n]

    def randomize(self) -> None:
        """Redraw every entry from a Gaussian distribution with mean 0 and variance 1."""
        self._matrix = self._rng.normal(0.0, 1.0, self.shape)

    def clear(self) -> None:
        """Set all entries to 0."""
        self._matrix = np.zeros(self.shape)

    def diagonalize(self) -> None:
        """Zero the matrix, then set a min(rows, columns) identity block."""
        self._matrix = np.eye(*self.shape)

    def increment_weights(self) -> None:
        """Add 'increment' to every entry."""
        self._matrix += self.increment

    def decrement_weights(self) -> None:
        """Subtract 'increment' from every entry."""
        self._matrix -= self.increment

    def weights_times_source(self) -> np.ndarray:
        """
        Returns:
            the product of the source activations with the matrix (one value per target activation)
        """
        return np.asarray(self.source.activations, dtype=float) @ self._matrix

    def apply(self) -> np.ndarray:
        return self.weights_times_source()

    def rebuild(self) -> None:
        """
        Re-create the matrix with the current endpoint sizes.
        Entries that still fit are kept; new entries follow the initialization policy.
        """
        rows, cols = self.shape
        old = self._matrix
        if self._diagonal:
            self.diagonalize()
        else:
            self.randomize()
        r, c = min(rows, old.shape[0]), min(cols, old.shape[1])
        self._matrix[:r, :c] = old[:r, :c]

    def detach(self) -> None:
        """Remove the matrix from the matrix lists of both endpoints."""
        if self in self.source.outgoing_matrices:
            self.source.outgoing_matrices.remove(self)
        if self in self.target.incoming_matrices:
            self.target.incoming_matrices.remove(self)

    def __repr__(self):
        rows, cols = self._matrix.shape
        return f"WeightMatrix({rows}x{cols}, {self.source!r} => {self.target!r})"
