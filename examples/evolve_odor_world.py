"""
Odor World Pursuit

This module evolves the controller of a mouse living in a 400x400 odor world.
The mouse starts at (300, 300) facing east and smells a piece of cheese placed
at (100, 100) through two sensors, 45 degrees to the left and to the right of
its heading. The network has 2 inputs (the sensors) and 3 outputs coupled to
the effectors: move straight, turn left, turn right.

Fitness Function:
    The number of times the mouse gets within 28 pixels of the cheese in 500
    moves. Each time it does, the cheese respawns at a random location.

    The run stops once the best fitness exceeds the threshold
    (max_moves / 50 = 10 by default) or after 150 generations.

Classes:
    EvolutionOdorWorld: Evolution reporting the structure of the best controller

Usage:
    python examples/evolve_odor_world.py
    python examples/evolve_odor_world.py --config examples/config_odor_world.ini --jobs -1
"""

import argparse
import logging
from pathlib import Path

from evobrain.run.config    import Config
from evobrain.run.evolution import Evolution

logger = logging.getLogger("evolve_odor_world")

class EvolutionOdorWorld(Evolution):
    """
    Evolution of an odor world pursuer, reporting the size of the fittest
    network along with the best fitness of each generation.
    """

    def _report_progress(self):
        fittest = self.population.get_fittest_agent()
        genome  = fittest.genome
        enabled = sum(1 for conn in genome.conn_genes.values() if conn.enabled)
        logger.info("%3d, fitness = %5.1f  (hidden nodes: %d, enabled connections: %d)",
                    self.population.generation, fittest.fitness, len(genome.hidden_nodes), enabled)

    def _final_report(self):
        fittest = self.population.get_fittest_agent()
        if self.failed:
            logger.info("Threshold not reached; best fitness %.1f", fittest.fitness)
        else:
            logger.info("Threshold reached after %d generations", len(self.best_fitness_history))
        logger.info("Fittest genome:\n%s", fittest.genome)
        logger.info("Fittest network:\n%s", fittest.decode())

def main():
    parser = argparse.ArgumentParser(description="Evolve a mouse that pursues cheese in an odor world")
    parser.add_argument("--config", default=str(Path(__file__).parent / "config_odor_world.ini"),
                        help="INI configuration file")
    parser.add_argument("--jobs", type=int, default=1,
                        help="parallel processes for fitness evaluation (-1: all cores)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    config = Config(args.config)
    EvolutionOdorWorld(config).run(num_jobs=args.jobs)

if __name__ == "__main__":
    main()
