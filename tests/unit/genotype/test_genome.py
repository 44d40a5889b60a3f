"""
Unit tests for the Genome class: construction, validation, decoding, mutation,
crossover and (de)serialization.
"""

import pytest
from unittest.mock import patch

from evobrain.errors                      import ConfigurationError, GenomeDecodeError
from evobrain.genotype                    import Genome, InnovationTracker, NodeType
from evobrain.rules                       import DecayRule, LinearRule


def _hidden_genome_dict():
    """2 inputs, 3 outputs, one hidden decay node between input 0 and output 2."""
    return {
        "rule": "linear",
        "nodes": [
            {"id": 0, "type": "input"},
            {"id": 1, "type": "input"},
            {"id": 2, "type": "output", "bias": 0.1},
            {"id": 3, "type": "output"},
            {"id": 4, "type": "output"},
            {"id": 5, "type": "hidden", "rule": "decay", "bias": -0.2, "params": {"decay_fraction": 0.3}},
        ],
        "connections": [
            {"from": 0, "to": 5, "strength": 0.5},
            {"from": 5, "to": 2, "strength": 1.5},
            {"from": 1, "to": 3, "strength": 0.2, "enabled": False},
        ]
    }


# ============================================================================
# Test Construction
# ============================================================================

class TestConstruction:

    def test_one_input_policy(self, config):
        genome = Genome(config, seed=0)

        assert len(genome.input_nodes)  == 2
        assert len(genome.output_nodes) == 3
        assert genome.hidden_nodes == []
        assert len(genome.conn_genes) == 3
        assert sorted(conn.node_out for conn in genome.conn_genes.values()) == [2, 3, 4]
        assert all(conn.node_in in (0, 1) for conn in genome.conn_genes.values())

    def test_full_policy(self, config):
        config.initial_cxn_policy = "full"
        genome = Genome(config, seed=0)
        assert len(genome.conn_genes) == 6

    def test_initial_strengths_within_bounds(self, config):
        genome = Genome(config, seed=3)
        for conn in genome.conn_genes.values():
            assert config.min_connection_strength <= conn.strength <= config.max_connection_strength

    def test_initial_genome_is_valid(self, config):
        for seed in range(10):
            assert Genome(config, seed=seed).is_valid()

    def test_same_seed_same_genome(self, config):
        assert Genome(config, seed=11).to_dict() == Genome(config, seed=11).to_dict()

    def test_input_nodes_are_linear(self, config):
        genome = Genome(config, seed=0)
        assert all(isinstance(node.rule, LinearRule) for node in genome.input_nodes)

    def test_output_rules_are_allowed(self, config):
        config.allowed_update_rules = "decay"
        genome = Genome(config, seed=0)
        assert all(isinstance(node.rule, DecayRule) for node in genome.output_nodes)

    def test_innovation_numbers_shared(self, config):
        config.initial_cxn_policy = "full"
        genome1 = Genome(config, seed=0)
        genome2 = Genome(config, seed=1)
        assert set(genome1.conn_genes) == set(genome2.conn_genes)

    @pytest.mark.parametrize("name, value", [
        ("num_inputs",              0),
        ("min_connection_strength", 20.0),
        ("initial_cxn_policy",      "none"),
    ])
    def test_inconsistent_config_rejected(self, config, name, value):
        setattr(config, name, value)
        with pytest.raises(ConfigurationError):
            Genome(config, seed=0)
        with pytest.raises(ConfigurationError):
            Genome.from_dict(_hidden_genome_dict(), config)


# ============================================================================
# Test Validation and Decoding
# ============================================================================

class TestValidation:

    def test_too_many_hidden_nodes(self, config):
        config.max_nodes = 0
        genome = Genome.from_dict(_hidden_genome_dict(), config)
        with pytest.raises(GenomeDecodeError):
            genome.validate()

    def test_strength_out_of_bounds(self, config):
        genome = Genome.from_dict(_hidden_genome_dict(), config)
        next(iter(genome.conn_genes.values())).strength = config.max_connection_strength + 1.0
        with pytest.raises(GenomeDecodeError):
            genome.decode()

    def test_forbidden_self_connection(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["connections"].append({"from": 5, "to": 5, "strength": 0.1})

        assert Genome.from_dict(genome_dict, config).is_valid()

        config.allow_self_connection = False
        with pytest.raises(GenomeDecodeError):
            Genome.from_dict(genome_dict, config).validate()

    def test_connection_into_input(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["connections"].append({"from": 5, "to": 1, "strength": 0.1})
        with pytest.raises(GenomeDecodeError):
            Genome.from_dict(genome_dict, config).validate()

    def test_missing_node(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["connections"].append({"from": 0, "to": 9, "strength": 0.1})
        with pytest.raises(GenomeDecodeError):
            Genome.from_dict(genome_dict, config).validate()

    def test_rule_not_allowed(self, config):
        config.allowed_update_rules = "linear"
        with pytest.raises(GenomeDecodeError):
            Genome.from_dict(_hidden_genome_dict(), config).validate()

    def test_bias_out_of_bounds(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["nodes"][2]["bias"] = config.node_max_bias + 0.5
        with pytest.raises(GenomeDecodeError):
            Genome.from_dict(genome_dict, config).validate()

    def test_no_path(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["connections"][1]["enabled"] = False
        with pytest.raises(GenomeDecodeError):
            Genome.from_dict(genome_dict, config).validate()

    def test_path_through_cycle(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["connections"].append({"from": 2, "to": 5, "strength": 0.1})
        assert Genome.from_dict(genome_dict, config).is_valid()


class TestDecode:

    def test_groups(self, config):
        network = Genome.from_dict(_hidden_genome_dict(), config).decode()

        assert len(network.get_group("inputs"))  == 2
        assert len(network.get_group("hidden"))  == 1
        assert len(network.get_group("outputs")) == 3
        assert all(neuron.clamped for neuron in network.get_group("inputs"))
        assert not any(neuron.clamped for neuron in network.get_group("outputs"))

    def test_disabled_connections_not_decoded(self, config):
        network = Genome.from_dict(_hidden_genome_dict(), config).decode()
        assert len(network.synapses) == 2

    def test_synapse_endpoints(self, config):
        network = Genome.from_dict(_hidden_genome_dict(), config).decode()
        hidden  = network.get_group("hidden")[0]
        output  = network.get_group("outputs")[0]

        strengths = {(s.source, s.target): s.strength for s in network.synapses}

        assert strengths[(network.get_group("inputs")[0].id, hidden.id)] == 0.5
        assert strengths[(hidden.id, output.id)] == 1.5

    def test_static_synapses_are_frozen(self, config):
        network = Genome.from_dict(_hidden_genome_dict(), config).decode()
        assert all(synapse.frozen for synapse in network.synapses)

    def test_learning_synapses(self, config):
        config.synapse_rule = "hebbian"
        network = Genome.from_dict(_hidden_genome_dict(), config).decode()
        assert not any(synapse.frozen for synapse in network.synapses)
        assert all(synapse.upper_bound == config.max_connection_strength for synapse in network.synapses)

    def test_rules_are_copied(self, config):
        genome = Genome.from_dict(_hidden_genome_dict(), config)
        network1, network2 = genome.decode(), genome.decode()
        hidden_rule = network1.get_group("hidden")[0].rule

        assert hidden_rule == genome.node_genes[5].rule
        assert hidden_rule is not genome.node_genes[5].rule
        assert hidden_rule is not network2.get_group("hidden")[0].rule

    def test_decoded_network_runs(self, config):
        network = Genome.from_dict(_hidden_genome_dict(), config).decode()
        network.get_group("inputs").activations = [1.0, 0.0]
        network.update()
        network.update()
        assert network.get_group("outputs")[0].activation != 0.0


# ============================================================================
# Test Serialization
# ============================================================================

class TestSerialization:

    def test_from_dict(self, config):
        genome = Genome.from_dict(_hidden_genome_dict(), config)
        hidden = genome.node_genes[5]

        assert hidden.type == NodeType.HIDDEN
        assert hidden.rule.decay_fraction == 0.3
        assert hidden.bias == -0.2
        assert genome.node_genes[2].rule_name == "linear"
        assert sum(1 for conn in genome.conn_genes.values() if not conn.enabled) == 1

    def test_to_dict_round_trip(self, config):
        genome = Genome.from_dict(_hidden_genome_dict(), config)
        assert Genome.from_dict(genome.to_dict(), config).to_dict() == genome.to_dict()

    def test_reserves_hidden_ids(self, config):
        Genome.from_dict(_hidden_genome_dict(), config)
        assert InnovationTracker.new_node_id() == 6

    def test_bad_input_numbering(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["nodes"][1]["id"] = 7
        with pytest.raises(ValueError):
            Genome.from_dict(genome_dict, config)

    def test_hidden_id_too_low(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["nodes"].append({"id": 4, "type": "hidden"})
        with pytest.raises(ValueError):
            Genome.from_dict(genome_dict, config)

    def test_missing_rule(self, config):
        genome_dict = _hidden_genome_dict()
        del genome_dict["rule"]
        with pytest.raises(ValueError):
            Genome.from_dict(genome_dict, config)

    def test_unknown_rule_parameter(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["nodes"][5]["params"] = {"half_life": 3.0}
        with pytest.raises(ValueError):
            Genome.from_dict(genome_dict, config)


# ============================================================================
# Test Mutation
# ============================================================================

class TestMutation:

    def test_mutation_keeps_genome_valid(self, config):
        genome = Genome(config, seed=5)
        for _ in range(100):
            genome.mutate()
            assert genome.is_valid()

    def test_hidden_node_limit(self, config):
        config.max_nodes = 1
        config.node_add_probability = 1.0
        genome = Genome(config, seed=2)
        for _ in range(30):
            genome.mutate()
            assert len(genome.hidden_nodes) <= 1
            assert genome.is_valid()

    def test_strengths_stay_in_bounds(self, config):
        config.strength_perturb_prob = 1.0
        config.strength_perturb_strength = 10.0
        genome = Genome(config, seed=4)
        for _ in range(20):
            genome.mutate()
        for conn in genome.conn_genes.values():
            assert config.min_connection_strength <= conn.strength <= config.max_connection_strength

    def test_unchanged_when_every_attempt_fails(self, config):
        """A genome without any input-output path cannot be repaired by parameter mutations."""
        for name in ("node_add_probability", "connection_add_probability", "connection_delete_probability",
                     "connection_enable_probability", "connection_disable_probability"):
            setattr(config, name, 0.0)
        config.bias_perturb_prob = 1.0

        genome_dict = _hidden_genome_dict()
        genome_dict["connections"] = []
        genome = Genome.from_dict(genome_dict, config, seed=0)
        before = genome.to_dict()

        genome.mutate()

        assert genome.to_dict() == before

    def test_same_seed_same_mutations(self, config):
        genome1, genome2 = Genome(config, seed=8), Genome(config, seed=8)
        for _ in range(10):
            genome1.mutate()

        # replay the same mutations from the same tracker state
        InnovationTracker.initialize(config)
        InnovationTracker.register_genome(genome2)
        for _ in range(10):
            genome2.mutate()
        assert genome1.to_dict() == genome2.to_dict()

    def test_split_connection(self, config):
        genome = Genome.from_dict(_hidden_genome_dict(), config, seed=0)
        conn = next(c for c in genome.conn_genes.values() if (c.node_in, c.node_out) == (5, 2))

        genome._split_connection(conn)

        new_id, innov1, innov2 = InnovationTracker.get_split_IDs(conn)
        assert not conn.enabled
        assert genome.node_genes[new_id].type == NodeType.HIDDEN
        assert genome.conn_genes[innov1].strength == 1.0
        assert genome.conn_genes[innov2].strength == 1.5

    def test_delete_connection_removes_orphan(self, config):
        genome_dict = _hidden_genome_dict()
        genome_dict["connections"] = [{"from": 0, "to": 5, "strength": 0.5},
                                      {"from": 1, "to": 2, "strength": 0.5}]
        genome = Genome.from_dict(genome_dict, config, seed=0)
        genome.conn_genes = {innov: conn for innov, conn in genome.conn_genes.items() if conn.node_out == 5}

        genome._mutate_delete_connection()

        assert genome.conn_genes == {}
        assert 5 not in genome.node_genes


# ============================================================================
# Test Copy, Crossover and Distance
# ============================================================================

class TestCrossover:

    def test_copy_is_independent(self, config):
        genome = Genome.from_dict(_hidden_genome_dict(), config)
        duplicate = genome.copy(seed=1)

        next(iter(duplicate.conn_genes.values())).strength = 0.0
        duplicate.node_genes[5].bias = 1.0

        assert genome.to_dict() != duplicate.to_dict()
        assert genome.node_genes[5].bias == -0.2

    def test_offspring_is_valid(self, config):
        config.initial_cxn_policy = "full"
        parent1, parent2 = Genome(config, seed=1), Genome(config, seed=2)
        for _ in range(5):
            parent1.mutate()
            parent2.mutate()

        child = parent1.crossover(parent2, parent1)

        assert child.is_valid()
        assert set(child.conn_genes) <= set(parent1.conn_genes) | set(parent2.conn_genes)

    def test_excess_genes_from_fitter_parent(self, config):
        genome_dict = _hidden_genome_dict()
        parent1 = Genome.from_dict(genome_dict, config, seed=0)
        genome_dict["connections"].append({"from": 1, "to": 4, "strength": 0.7})
        parent2 = Genome.from_dict(genome_dict, config, seed=1)

        extra = InnovationTracker.get_innovation_number(1, 4)

        assert extra not in parent1.crossover(parent2, parent1).conn_genes
        assert extra in parent1.crossover(parent2, parent2).conn_genes

    def test_invalid_offspring_falls_back_to_fitter_parent(self, config):
        parent1 = Genome(config, seed=1)
        parent2 = Genome(config, seed=2)

        with patch.object(Genome, "validate", side_effect=GenomeDecodeError("illegal")):
            child = parent1.crossover(parent2, parent2)

        assert child is not parent2
        assert child.to_dict() == parent2.to_dict()

    def test_str(self, config):
        text = str(Genome.from_dict(_hidden_genome_dict(), config))
        assert "[H5,DCY,b=-0.20]" in text
        assert "Conns:" in text
