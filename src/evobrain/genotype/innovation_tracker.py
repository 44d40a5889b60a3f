"""
evobrain Innovation Tracker Module

This module implements the InnovationTracker class.

Classes:
    InnovationTracker: Global registry of connection innovation numbers and node IDs
"""

from itertools import count
from typing    import TYPE_CHECKING

if TYPE_CHECKING:
    from evobrain.genotype.connection_gene import ConnectionGene
    from evobrain.genotype.genome          import Genome
    from evobrain.run.config               import Config

class InnovationTracker:
    """
    Tracks structural changes across all genomes of a run.

    The same structural change gets the same innovation number (for connections)
    and ID (for nodes) in every genome, which is what lets crossover align the
    genes of two parents. Numbers are handed out in order, so they depend only on
    the sequence of mutations, never on a random generator.

    The tracker is (re)initialized by 'initialize()' at the start of each run.
    """

    _next_innovation_number = None
    _next_node_id           = None

    # (node_in, node_out) -> innovation number
    _innovation_numbers: dict[tuple[int, int], int] = {}

    # innovation number of a split connection -> (new node ID, innovation in, innovation out)
    _split_IDs: dict[int, tuple[int, int, int]] = {}

    @classmethod
    def initialize(cls, config: 'Config'):
        """
        Reset the tracker. Node IDs below num_inputs + num_outputs are reserved
        for input and output nodes.

        Parameters:
            config: Stores configuration parameters
        """
        cls._next_innovation_number = count(0)
        cls._next_node_id           = count(config.num_inputs + config.num_outputs)
        cls._innovation_numbers     = {}
        cls._split_IDs              = {}

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._next_innovation_number is not None

    @classmethod
    def get_innovation_number(cls, node_in: int, node_out: int) -> int:
        """
        Get the innovation number of the connection 'node_in' => 'node_out',
        assigning a new one the first time this connection is seen.
        """
        key = (node_in, node_out)
        if key not in cls._innovation_numbers:
            cls._innovation_numbers[key] = next(cls._next_innovation_number)
        return cls._innovation_numbers[key]

    @classmethod
    def new_node_id(cls) -> int:
        """Get the ID of a hidden node which is not the result of a connection split."""
        return next(cls._next_node_id)

    @staticmethod
    def _skip_past(counter: count, value: int) -> count:
        while True:
            next_value = next(counter)
            if next_value > value:
                return count(next_value)

    @classmethod
    def reserve_node_id(cls, node_id: int) -> None:
        """
        Make sure 'node_id' will never be handed out again (used when genomes
        are built from a description rather than through mutation).
        """
        cls._next_node_id = cls._skip_past(cls._next_node_id, node_id)

    @classmethod
    def register_genome(cls, genome: 'Genome') -> None:
        """
        Record the connections and hidden nodes of a genome created before the
        tracker was (re)initialized, so that new structures never reuse its numbers.
        """
        for conn in genome.conn_genes.values():
            cls._innovation_numbers[(conn.node_in, conn.node_out)] = conn.innovation
        if genome.conn_genes:
            cls._next_innovation_number = cls._skip_past(cls._next_innovation_number, max(genome.conn_genes))
        if genome.hidden_nodes:
            cls.reserve_node_id(max(node.id for node in genome.hidden_nodes))

    @classmethod
    def get_split_IDs(cls, conn_to_split: 'ConnectionGene') -> tuple[int, int, int]:
        """
        Numbers produced by inserting a hidden node into 'conn_to_split', as
        (hidden node ID, innovation of source -> hidden, innovation of hidden -> target).
        Any genome splitting the same connection receives the same triple.
        """
        key = conn_to_split.innovation
        if key not in cls._split_IDs:
            new_node_id = next(cls._next_node_id)
            innov1      = cls.get_innovation_number(conn_to_split.node_in, new_node_id)
            innov2      = cls.get_innovation_number(new_node_id, conn_to_split.node_out)
            cls._split_IDs[key] = (new_node_id, innov1, innov2)
        return cls._split_IDs[key]
