"""
evobrain Config Module

This module implements the Config class, which holds every parameter consumed by
the genome, the population, the evolutionary loop and the fitness evaluator.

Classes:
    Config: Configuration parameters, read from an INI file or set programmatically
"""

import configparser
import os

from evobrain.errors import ConfigurationError
from evobrain.rules  import neuron_rules, synapse_rules

class Config:
    """
    Configuration parameters for an evolutionary run.

    A Config is created either empty (all parameters take their default value and can
    be changed by plain attribute assignment) or from an INI file, whose values
    override the defaults. 'validate()' checks the parameters for consistency and
    'freeze()' makes the object read-only for the duration of a run.
    """

    @staticmethod
    def _parse_update_rules(raw_options):
        """
        Parse allowed_update_rules from string to list.

        Parameters:
            raw_options: Either "all", a comma-separated list, or already a list

        Returns:
            List of neuron update rule names
        """
        if isinstance(raw_options, (list, tuple, set)):
            parsed = list(raw_options)
        elif raw_options == 'all':
            return list(neuron_rules.keys())
        else:
            parsed = [opt.strip() for opt in raw_options.split(',') if opt.strip()]

        for opt in parsed:
            if opt not in neuron_rules:
                raise ConfigurationError(f"Invalid update rule '{opt}' in allowed_update_rules")
        return parsed

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config with default values, then override them with the
        values found in an INI file (if one is given).

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, the default values are kept.
        """
        object.__setattr__(self, '_frozen', False)

        # [GENOME]

        # The number of input neurons (one per environment sensor)
        # and output neurons (one per environment actuator).
        self.num_inputs  = 2
        self.num_outputs = 3

        # Whether a neuron may be connected to itself.
        self.allow_self_connection = True

        # The maximum number of hidden neurons in a network.
        self.max_nodes = 10

        # The range allowed for synapse strengths.
        self.min_connection_strength = -0.5
        self.max_connection_strength = 2.0

        # Neuron biases lie in [-node_max_bias, node_max_bias].
        self.node_max_bias = 2.0

        # The range of neuron activations (bounds of every neuron update rule).
        self.min_neuron_activation = -1.0
        self.max_neuron_activation = 4.0

        # Which neuron update rules may be used by hidden and output neurons.
        # Options: "all", or comma-separated list of rule names
        self.allowed_update_rules = list(neuron_rules.keys())

        # The update rule of the synapses decoded from the genome.
        self.synapse_rule = "static"

        # Initial connectivity of the prototype genome.
        # Allowed values:
        #   "one-input" - one random input neuron is connected to all output neurons
        #   "full"      - all input neurons are connected to all output neurons
        self.initial_cxn_policy = "one-input"

        # [MUTATION]

        # Probabilities of perturbing (adding Gaussian noise to) or replacing
        # a synapse strength, and the standard deviation of the perturbation.
        self.strength_perturb_prob     = 0.8
        self.strength_replace_prob     = 0.1
        self.strength_perturb_strength = 0.5

        # Same for neuron biases.
        self.bias_perturb_prob     = 0.5
        self.bias_perturb_strength = 0.2

        # Probability of switching a neuron to a different allowed update rule, and
        # probability/strength of perturbing the parameters of its current rule.
        self.rule_mutate_prob      = 0.05
        self.rule_perturb_prob     = 0.1
        self.rule_perturb_strength = 0.1

        # Structural mutations.
        self.node_add_probability           = 0.2
        self.connection_add_probability     = 0.5
        self.connection_delete_probability  = 0.05
        self.connection_enable_probability  = 0.01
        self.connection_disable_probability = 0.01

        # How many times an illegal mutation is retried (with a smaller
        # perturbation) before the genome is left unchanged.
        self.mutation_retries = 5

        # [POPULATION]

        # The number of agents in each generation.
        self.population_size = 50

        # The fraction of lowest-fitness agents removed at each generation.
        self.elimination_ratio = 0.5

        # The number of fittest agents copied unchanged into the next generation.
        self.elitism = 1

        # The probability that a replacement agent is the child of two survivors
        # (otherwise it is a mutated clone of one survivor).
        self.crossover_probability = 0.0

        # Seed of the population's random generator (None for a random seed).
        self.seed = None

        # [TERMINATION]

        # The maximum number of generations.
        self.max_iterations = 150

        # The run stops once the best fitness of a generation exceeds this value.
        # If None, 'max_moves / 50' is used.
        self.fitness_threshold = None

        # [EVALUATION]

        # The number of steps of a rollout.
        self.max_moves = 500

        # Distance below which the agent collects the target.
        self.target_radius = 28.0

        if config_file is None:
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Helper function to safely parse values; missing values keep their default
        def get_value(section, key, value_type):
            default = getattr(self, key)
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                return default
            except ValueError as e:
                raise ConfigurationError(f"Bad value for '{key}' in section [{section}]: {e}") from e

        schema = {
            'GENOME': [('num_inputs', int), ('num_outputs', int), ('allow_self_connection', bool),
                       ('max_nodes', int), ('min_connection_strength', float),
                       ('max_connection_strength', float), ('node_max_bias', float),
                       ('min_neuron_activation', float), ('max_neuron_activation', float),
                       ('allowed_update_rules', str), ('synapse_rule', str),
                       ('initial_cxn_policy', str)],
            'MUTATION': [('strength_perturb_prob', float), ('strength_replace_prob', float),
                         ('strength_perturb_strength', float), ('bias_perturb_prob', float),
                         ('bias_perturb_strength', float), ('rule_mutate_prob', float),
                         ('rule_perturb_prob', float), ('rule_perturb_strength', float),
                         ('node_add_probability', float), ('connection_add_probability', float),
                         ('connection_delete_probability', float),
                         ('connection_enable_probability', float),
                         ('connection_disable_probability', float), ('mutation_retries', int)],
            'POPULATION': [('population_size', int), ('elimination_ratio', float), ('elitism', int),
                           ('crossover_probability', float), ('seed', int)],
            'TERMINATION': [('max_iterations', int), ('fitness_threshold', float)],
            'EVALUATION': [('max_moves', int), ('target_radius', float)],
        }
        for section, entries in schema.items():
            for key, value_type in entries:
                setattr(self, key, get_value(section, key, value_type))

    @property
    def effective_fitness_threshold(self) -> float:
        """The early-stop threshold, falling back to 'max_moves / 50' when unset."""
        if self.fitness_threshold is None:
            return self.max_moves / 50
        return self.fitness_threshold

    def validate(self) -> None:
        """
        Check that the parameters are consistent.

        Raises:
            ConfigurationError: at the first inconsistency found
        """
        def require(condition: bool, message: str):
            if not condition:
                raise ConfigurationError(message)

        require(self.num_inputs  is not None and self.num_inputs  > 0, f"num_inputs must be positive, got {self.num_inputs}")
        require(self.num_outputs is not None and self.num_outputs > 0, f"num_outputs must be positive, got {self.num_outputs}")
        require(self.max_nodes   is not None and self.max_nodes  >= 0, f"max_nodes must be non-negative, got {self.max_nodes}")
        require(self.max_connection_strength >= self.min_connection_strength,
                "max_connection_strength must not be smaller than min_connection_strength")
        require(self.max_neuron_activation >= self.min_neuron_activation,
                "max_neuron_activation must not be smaller than min_neuron_activation")
        require(self.node_max_bias >= 0, f"node_max_bias must be non-negative, got {self.node_max_bias}")
        require(len(self.allowed_update_rules) > 0, "allowed_update_rules must not be empty")
        require(self.synapse_rule in synapse_rules, f"Unknown synapse rule '{self.synapse_rule}'")
        require(self.initial_cxn_policy in ("one-input", "full"),
                f"Bad initial connection policy '{self.initial_cxn_policy}'")

        for name in ('strength_perturb_prob', 'strength_replace_prob', 'bias_perturb_prob',
                     'rule_mutate_prob', 'rule_perturb_prob', 'node_add_probability',
                     'connection_add_probability', 'connection_delete_probability',
                     'connection_enable_probability', 'connection_disable_probability',
                     'crossover_probability'):
            value = getattr(self, name)
            require(0.0 <= value <= 1.0, f"{name} must lie in [0, 1], got {value}")
        require(self.mutation_retries >= 0, "mutation_retries must be non-negative")

        require(self.population_size is not None and self.population_size > 0,
                f"population_size must be positive, got {self.population_size}")
        require(0.0 <= self.elimination_ratio < 1.0,
                f"elimination_ratio must lie in [0, 1), got {self.elimination_ratio}")
        require(0 <= self.elitism <= self.population_size,
                f"elitism must lie in [0, population_size], got {self.elitism}")
        require(self.max_iterations is not None and self.max_iterations > 0,
                f"max_iterations must be positive, got {self.max_iterations}")
        require(self.max_moves is not None and self.max_moves > 0,
                f"max_moves must be positive, got {self.max_moves}")
        require(self.target_radius > 0, f"target_radius must be positive, got {self.target_radius}")

    def freeze(self) -> None:
        """Make the configuration read-only (done for the duration of a run)."""
        object.__setattr__(self, '_frozen', True)

    def unfreeze(self) -> None:
        object.__setattr__(self, '_frozen', False)

    def __setattr__(self, name, value):
        """
        Override 'setattr' to reject changes while the configuration is frozen, and
        to automatically parse allowed_update_rules when set. This allows users to
        write config.allowed_update_rules = "linear, binary".
        """
        if self._frozen:
            raise ConfigurationError(f"Cannot set '{name}': configuration is frozen during a run")
        if name == 'allowed_update_rules':
            value = self._parse_update_rules(value)
        super().__setattr__(name, value)
