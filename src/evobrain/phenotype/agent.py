"""
evobrain Agent Module

This module implements the Agent class, representing a member of the
evolving population.

Classes:
    Agent: An evolved agent with genome, lazily decoded network, and fitness
"""

from itertools import count
from typing    import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from evobrain.genotype           import Genome
    from evobrain.phenotype.network  import Network

class Agent:
    """
    A member of the population.

    An agent is a thin wrapper around a genome, to which it adds a unique ID,
    a fitness and an evaluation seed. The network the genome describes (the
    phenotype) is decoded on first use; 'decode()' builds a fresh one, which is
    what an evaluation needs since running a network changes its state.

    The evaluation seed is fixed for the life of the agent, so an agent that
    survives unchanged into the next generation gets the same fitness again
    from a deterministic evaluator.

    Public Attributes:
        ID:      Globally unique identifier for this agent
        fitness: Fitness score (None until evaluated)
        seed:    Seed of the environment the agent is evaluated in

    Public Properties:
        genome:    The agent's genome
        phenotype: The decoded network (decoded on first access)

    Public Methods:
        decode():    Decode a fresh phenotype from the genome
        clone():     Create a genetic copy of this agent
        mutate():    Mutate the genome in place
        mate(other): Reproduce with another agent via crossover and mutation
    """

    _id_generator = count(0)

    def __init__(self, genome: 'Genome', seed: int | None = None):
        """
        Parameters:
            genome: The Genome encoding the network that powers this agent
            seed:   Evaluation seed; drawn from the genome's generator if not given
        """
        self.ID        : int                 = next(Agent._id_generator)
        self.fitness   : Optional[float]     = None
        self.seed      : int                 = seed if seed is not None else int(genome.rng.integers(2**63))
        self._genome   : 'Genome'            = genome
        self._phenotype: Optional['Network'] = None

    @property
    def genome(self) -> 'Genome':
        return self._genome

    @property
    def phenotype(self) -> 'Network':
        if self._phenotype is None:
            self._phenotype = self._genome.decode()
        return self._phenotype

    def decode(self) -> 'Network':
        """
        Decode a fresh network from the genome, replacing the cached one.

        Raises:
            GenomeDecodeError: if the genome is not legal
        """
        self._phenotype = self._genome.decode()
        return self._phenotype

    def clone(self) -> 'Agent':
        """
        Create a new Agent from a copy of the current genome.
        """
        return Agent(self._genome.copy())

    def mutate(self) -> None:
        """
        Mutate the genome; the phenotype and fitness become stale.
        """
        self._genome.mutate()
        self._phenotype = None
        self.fitness    = None

    def mate(self, other: 'Agent') -> 'Agent':
        """
        Create a new Agent by mating with another Agent: the offspring genome is
        the crossover of the two genomes, then mutated.

        Parameters:
            other: the Agent with whom this Agent is mating

        Returns:
            the offspring resulting from the mating process
        """
        fitter_genome = self.genome if self.fitness >= other.fitness else other.genome
        genome_child  = self.genome.crossover(other.genome, fitter_genome)
        genome_child.mutate()
        return Agent(genome_child)

    def __str__(self):
        fitness = "n/a" if self.fitness is None else f"{self.fitness:.4f}"
        return f"ID={self.ID}, fitness={fitness}\n{self.genome}"

    def __repr__(self):
        return f"Agent(ID={self.ID}, fitness={self.fitness})"
