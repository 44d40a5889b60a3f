"""
evobrain Evolution Module

This module implements the Evolution class, which drives one run of the
evolutionary algorithm.

Classes:
    Evolution: Generational loop with early termination and progress reporting
"""

import logging
from typing import Callable, TYPE_CHECKING

from evobrain.evaluation                  import FitnessEvaluator
from evobrain.genotype                    import Genome, InnovationTracker
from evobrain.phenotype                   import Agent
from evobrain.pool                        import Population
from evobrain.run.config                  import Config

if TYPE_CHECKING:
    from evobrain.phenotype import Network

logger = logging.getLogger(__name__)

class Evolution:
    """
    One run of the evolutionary algorithm.

    The population is evolved for at most 'max_iterations' generations. Each
    generation, every agent is evaluated; the run stops as soon as the best
    fitness of a generation exceeds the fitness threshold ('fitness_threshold',
    or 'max_moves / 50' when unset), otherwise the population is replenished.

    The configuration is validated before the run and frozen while it lasts.

    Subclasses can override:
    - _report_progress(): Report after each generation
    - _final_report():    Report at the end of the run
    - _terminate(best):   Custom termination logic

    Public Attributes:
        population:           The evolving population (None before the first run)
        best_fitness_history: Best fitness of each evaluated generation
        failed:               Whether the run ended without reaching the threshold

    Public Methods:
        run(num_jobs): Execute a complete run and return the fittest agent

    Parallelization of fitness evaluation for agents:
        num_jobs=1:  Serial evaluation (no parallelization)
        num_jobs>1:  Use specified number of parallel processes
        num_jobs=-1: Use all available CPU cores
    """

    def __init__(self,
                 config         : Config,
                 evaluate       : Callable[['Network', int], float] | None = None,
                 prototype      : Agent | None                            = None,
                 suppress_output: bool                                    = False):
        """
        Parameters:
            config:          Configuration parameters
            evaluate:        Function mapping (network, seed) to a fitness;
                             an odor world FitnessEvaluator by default
            prototype:       Agent the population is derived from; by default an
                             agent with a new genome seeded with the configured seed
            suppress_output: If True, suppress progress and final reports
        """
        self._config         : Config                            = config
        self._evaluate       : Callable[['Network', int], float] = evaluate if evaluate is not None \
                                                                   else FitnessEvaluator(config)
        self._prototype      : Agent | None                      = prototype
        self._suppress_output: bool                              = suppress_output
        self.population      : Population | None                 = None
        self.best_fitness_history: list[float]                   = []
        self.failed          : bool                              = True

    def run(self, num_jobs: int = 1) -> Agent:
        """
        Run the evolutionary algorithm until the terminate condition is met.

        Parameters:
            num_jobs: Number of parallel processes for fitness evaluation of agents

        Returns:
            the fittest agent of the last evaluated generation

        Raises:
            ConfigurationError: if the configuration is inconsistent
        """
        self._config.validate()
        self._reset()

        self._config.freeze()
        try:
            prototype = self._prototype
            if prototype is None:
                prototype = Agent(Genome(self._config, seed=self._config.seed))

            self.population = Population(self._config)
            self.population.populate(prototype)

            for iteration in range(self._config.max_iterations):
                best_fitness = self.population.compute_new_fitness(self._evaluate, num_jobs)
                self.best_fitness_history.append(best_fitness)

                if not self._suppress_output:
                    self._report_progress()

                if self._terminate(best_fitness):
                    break

                # the last generation stays evaluated
                if iteration < self._config.max_iterations - 1:
                    self.population.replenish()
        finally:
            self._config.unfreeze()

        if not self._suppress_output:
            self._final_report()

        return self.population.get_fittest_agent()

    def _reset(self):
        """
        Reset the run state. Innovation numbers of a supplied prototype are
        registered again, since they predate the reset.
        """
        InnovationTracker.initialize(self._config)
        if self._prototype is not None:
            InnovationTracker.register_genome(self._prototype.genome)
        self.best_fitness_history = []
        self.failed = True

    def _terminate(self, best_fitness: float) -> bool:
        """
        Returns:
            True if the best fitness of the generation exceeds the threshold
        """
        if best_fitness > self._config.effective_fitness_threshold:
            self.failed = False
            return True
        return False

    def _report_progress(self):
        generation = self.population.generation
        logger.info("%d, fitness = %s", generation, self.best_fitness_history[-1])

    def _final_report(self):
        fittest = self.population.get_fittest_agent()
        if self.failed:
            logger.info("No agent exceeded fitness %s after %d generations",
                        self._config.effective_fitness_threshold, len(self.best_fitness_history))
        else:
            logger.info("Fitness %s reached in generation %d",
                        self.best_fitness_history[-1], self.population.generation)
        logger.info("Fittest agent:\n%s", fittest)
