"""
Unit tests for the Population class.
"""

import pytest

from evobrain.errors     import ConfigurationError
from evobrain.evaluation import FitnessEvaluator
from evobrain.genotype   import Genome
from evobrain.phenotype  import Agent
from evobrain.pool       import Population


def _count_synapses(network, seed):
    """Deterministic stand-in fitness: the number of synapses of the network."""
    return float(len(network.synapses))


@pytest.fixture
def population(config):
    config.population_size = 10
    config.seed = 0
    population = Population(config)
    population.populate(Agent(Genome(config, seed=0)))
    return population


# ============================================================================
# Test Populate
# ============================================================================

class TestPopulate:

    def test_size(self, population, config):
        assert population.size == config.population_size
        assert population.generation == 0

    def test_first_agent_is_unmutated(self, config):
        config.population_size = 4
        prototype = Agent(Genome(config, seed=0))
        population = Population(config)
        population.populate(prototype)
        assert population.agents[0].genome.to_dict() == prototype.genome.to_dict()

    def test_all_agents_valid(self, population):
        assert all(agent.genome.is_valid() for agent in population.agents)

    def test_inconsistent_config_rejected(self, config):
        config.min_connection_strength = 3.0
        config.max_connection_strength = 1.0
        with pytest.raises(ConfigurationError):
            Population(config)

    def test_same_seed_same_population(self, config):
        config.population_size = 5
        config.seed = 3
        prototype = Agent(Genome(config, seed=0))

        population1 = Population(config)
        population1.populate(prototype)
        snapshot = [agent.genome.to_dict() for agent in population1.agents]
        seeds    = [agent.seed for agent in population1.agents]

        population2 = Population(config)
        population2.populate(prototype)

        assert [agent.seed for agent in population2.agents] == seeds
        assert population2.agents[0].genome.to_dict() == snapshot[0]


# ============================================================================
# Test Fitness
# ============================================================================

class TestFitness:

    def test_fittest_before_evaluation(self, population):
        assert population.get_fittest_agent() is None

    def test_fittest_of_empty_population(self, config):
        assert Population(config).get_fittest_agent() is None

    def test_compute_new_fitness(self, population):
        best = population.compute_new_fitness(_count_synapses)
        assert best == max(agent.fitness for agent in population.agents)
        assert population.get_fittest_agent().fitness == best

    def test_evaluation_gets_agent_seed(self, population):
        seen = []
        population.compute_new_fitness(lambda network, seed: seen.append(seed) or 0.0)
        assert seen == [agent.seed for agent in population.agents]

    def test_parallel_matches_serial(self, config):
        config.population_size = 4
        config.max_moves = 50
        config.seed = 1
        population = Population(config)
        population.populate(Agent(Genome(config, seed=0)))
        evaluator = FitnessEvaluator(config)

        population.compute_new_fitness(evaluator, num_jobs=1)
        serial = [agent.fitness for agent in population.agents]
        population.compute_new_fitness(evaluator, num_jobs=2)
        parallel = [agent.fitness for agent in population.agents]

        assert parallel == serial


# ============================================================================
# Test Replenish
# ============================================================================

class TestReplenish:

    @pytest.mark.parametrize("ratio", [0.0, 0.1, 0.5, 0.9, 0.99])
    def test_size_is_kept(self, population, config, ratio):
        config.elimination_ratio = ratio
        population.compute_new_fitness(_count_synapses)
        population.replenish()
        assert population.size == config.population_size

    def test_generation_advances(self, population):
        for _ in range(3):
            population.compute_new_fitness(_count_synapses)
            population.replenish()
        assert population.generation == 3

    def test_elite_survives(self, population, config):
        config.elimination_ratio = 0.9
        for agent, fitness in zip(population.agents, range(config.population_size)):
            agent.fitness = float(fitness)
        best = population.agents[-1]
        genome = best.genome.to_dict()

        population.replenish()

        assert population.agents[0] is best
        assert best.genome.to_dict() == genome

    def test_at_least_one_survivor(self, population, config):
        config.elimination_ratio = 0.99
        config.elitism = 0
        for agent in population.agents:
            agent.fitness = 1.0
        first = population.agents[0]

        population.replenish()

        assert population.agents[0] is first
        assert all(agent.fitness is None for agent in population.agents[1:])

    def test_survivors_are_the_fittest(self, population, config):
        config.elimination_ratio = 0.5
        for i, agent in enumerate(population.agents):
            agent.fitness = float(i)
        top = sorted(population.agents, key=lambda a: a.fitness, reverse=True)[:5]

        population.replenish()

        assert population.agents[:5] == top
        assert all(agent.ID not in {a.ID for a in top} for agent in population.agents[5:])

    def test_crossover_offspring(self, population, config):
        config.crossover_probability = 1.0
        population.compute_new_fitness(_count_synapses)
        population.replenish()
        assert population.size == config.population_size
        assert all(agent.genome.is_valid() for agent in population.agents)

    def test_best_fitness_never_decreases(self, population):
        history = []
        for _ in range(5):
            history.append(population.compute_new_fitness(_count_synapses))
            population.replenish()
        assert history == sorted(history)
