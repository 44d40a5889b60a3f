"""
evobrain Genome Module

This module implements the Genome class: the heritable description of a
network, and its decoding into an executable network.

Classes:
    Genome: Node and connection genes describing a network, with mutation and crossover
"""

import logging
import numpy as np
from dataclasses import fields
from typing      import Any

from evobrain.errors                      import GenomeDecodeError
from evobrain.genotype.connection_gene    import ConnectionGene
from evobrain.genotype.innovation_tracker import InnovationTracker
from evobrain.genotype.node_gene          import NodeType, NodeGene
from evobrain.phenotype.network           import Network, Neuron, Synapse
from evobrain.rules                       import NeuronRule, make_neuron_rule, synapse_rules
from evobrain.run.config                  import Config

logger = logging.getLogger(__name__)

# Rule fields not carried by 'to_dict()': the bounds come from the configuration,
# the bias is serialized on its own and generators are reseeded on construction.
_UNSERIALIZED_RULE_FIELDS = ("bias", "lower_bound", "upper_bound", "rng")

# Vertical position of each neuron group in the decoded network
_GROUP_ROWS = {"inputs": 0.0, "hidden": 100.0, "outputs": 200.0}

class Genome:
    """
    A genome: a collection of node genes and connection genes describing a network.

    Unlike a feed-forward NEAT genome, the described networks may be recurrent
    (self-connections included, when the configuration allows them): every
    connection is evaluated from the activations of the previous step.

    Every genome owns a seeded numpy generator, used by all its random decisions
    (initial wiring, mutation, crossover); two genomes built from the same
    configuration and seed are identical and evolve identically.

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Output nodes: [num_inputs, num_inputs + num_outputs)
        - Hidden nodes: [num_inputs + num_outputs, ...)

    Attributes:
        node_genes: Dictionary mapping node IDs to NodeGene objects
        conn_genes: Dictionary mapping innovation numbers to ConnectionGene objects

    Public Properties:
        config:       The configuration holding the bounds of the genome
        rng:          The genome's random generator
        input_nodes:  List of all input node genes
        output_nodes: List of all output node genes
        hidden_nodes: List of all hidden node genes

    Public Methods:
        validate():                      Raise GenomeDecodeError unless the genome is legal
        decode():                        Build the executable network described by the genome
        mutate():                        Stochastically mutate the genome (always leaving it legal)
        crossover(other, fitter_parent): Create offspring by crossing this genome with another
        copy(seed):                      Independent copy with a fresh generator
        to_dict():                       Convert genome to dictionary representation

    Class Methods:
        from_dict(genome_dict, config, seed): Create a genome from a dictionary description
    """

    def __init__(self, config: Config, seed: int | None = None):
        """
        Initialize a genome with input and output nodes only, wired according
        to the configured initial connection policy:
         + "one-input": every output node is connected to one randomly chosen input node
         + "full":      every input node is connected to every output node

        Parameters:
            config: Stores configuration parameters
            seed:   Seed of the genome's random generator

        Raises:
            ConfigurationError: if the configuration is inconsistent
        """
        config.validate()

        self._config: Config              = config
        self._rng   : np.random.Generator = np.random.default_rng(seed)

        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene

        if not InnovationTracker.is_initialized():
            InnovationTracker.initialize(config)

        for node_id in range(config.num_inputs):
            self.node_genes[node_id] = NodeGene(node_id, NodeType.INPUT, config)

        for i in range(config.num_outputs):
            node_id = config.num_inputs + i
            self.node_genes[node_id] = NodeGene(node_id, NodeType.OUTPUT, config, rng=self._rng)

        if config.initial_cxn_policy == "one-input":
            self._connect_one_input()
        elif config.initial_cxn_policy == "full":
            self._connect_full()

    @classmethod
    def _empty(cls, config: Config, rng: np.random.Generator) -> 'Genome':
        genome = cls.__new__(cls)
        genome._config    = config
        genome._rng       = rng
        genome.node_genes = {}
        genome.conn_genes = {}
        return genome

    @classmethod
    def from_dict(cls, genome_dict: dict, config: Config, seed: int | None = None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        Dictionary format:
            {
                "rule": "linear",  # Optional default rule of hidden/output nodes
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "output", "bias": 1.0},
                    {"id": 2, "type": "hidden", "bias": 0.5, "rule": "decay",
                     "params": {"decay_fraction": 0.2}}
                ],
                "connections": [
                    {"from": 0, "to": 2, "strength":  0.5, "enabled": true},
                    {"from": 2, "to": 1, "strength":  1.5}
                ]
            }

        The activation bounds of every rule come from 'config'. The description is
        NOT validated against the configured bounds: 'decode()' does that.

        Parameters:
            genome_dict: Dictionary describing the genome structure
            config:      Stores configuration parameters
            seed:        Seed of the genome's random generator

        Returns:
            A new Genome object with the specified structure

        Raises:
            ValueError:         If the node numbering does not match the configuration,
                                or if a node has no rule or an unknown rule parameter
            KeyError:           If required fields are missing from the dictionary
            ConfigurationError: If the configuration is inconsistent
        """
        config.validate()

        nodes_data   = genome_dict["nodes"]
        input_nodes  = [n for n in nodes_data if n["type"] == "input"]
        output_nodes = [n for n in nodes_data if n["type"] == "output"]
        hidden_nodes = [n for n in nodes_data if n["type"] == "hidden"]
        cls._validate_node_numbering(input_nodes, output_nodes, hidden_nodes,
                                     config.num_inputs, config.num_outputs)

        if not InnovationTracker.is_initialized():
            InnovationTracker.initialize(config)

        genome = cls._empty(config, np.random.default_rng(seed))

        for node_data in input_nodes:
            genome.node_genes[node_data["id"]] = NodeGene(node_data["id"], NodeType.INPUT, config)

        for node_type, group in ((NodeType.HIDDEN, hidden_nodes), (NodeType.OUTPUT, output_nodes)):
            for node_data in group:
                node_id = node_data["id"]
                if "rule" in node_data:
                    rule_name = node_data["rule"]
                elif "rule" in genome_dict:
                    rule_name = genome_dict["rule"]
                else:
                    raise ValueError(f"No update rule specified for node {node_id}")

                rule = genome._make_rule(rule_name, node_data.get("params", {}), node_id)
                rule.bias = node_data.get("bias", 0.0)
                genome.node_genes[node_id] = NodeGene(node_id, node_type, config, rule=rule)

        if hidden_nodes:
            InnovationTracker.reserve_node_id(max(n["id"] for n in hidden_nodes))

        for conn_data in genome_dict.get("connections", []):
            node_in    = conn_data["from"]
            node_out   = conn_data["to"]
            innovation = InnovationTracker.get_innovation_number(node_in, node_out)
            genome.conn_genes[innovation] = ConnectionGene(node_in, node_out, conn_data["strength"],
                                                           innovation, config,
                                                           enabled=conn_data.get("enabled", True))
        return genome

    def _make_rule(self, name: str, params: dict[str, Any], node_id: int) -> NeuronRule:
        rule = make_neuron_rule(name,
                                self._config.min_neuron_activation,
                                self._config.max_neuron_activation,
                                self._rng)
        allowed = {f.name for f in fields(rule)} - set(_UNSERIALIZED_RULE_FIELDS)
        for key, value in params.items():
            if key not in allowed:
                raise ValueError(f"Node {node_id}: rule '{name}' has no parameter '{key}'")
            setattr(rule, key, value)
        return rule

    def to_dict(self) -> dict:
        """
        Convert the genome to a dictionary representation.
        This is the inverse operation of from_dict().
        """
        nodes = []
        for node in sorted(self.input_nodes, key=lambda n: n.id):
            nodes.append({"id": node.id, "type": "input"})

        for node_type, group in (("output", self.output_nodes), ("hidden", self.hidden_nodes)):
            for node in sorted(group, key=lambda n: n.id):
                params = {f.name: getattr(node.rule, f.name) for f in fields(node.rule)
                          if f.name not in _UNSERIALIZED_RULE_FIELDS}
                nodes.append({
                    "id"    : node.id,
                    "type"  : node_type,
                    "rule"  : node.rule_name,
                    "bias"  : node.bias,
                    "params": params
                })

        connections = []
        for conn in sorted(self.conn_genes.values(), key=lambda c: c.innovation):
            connections.append({
                "from"    : conn.node_in,
                "to"      : conn.node_out,
                "strength": conn.strength,
                "enabled" : conn.enabled
            })

        return {"nodes": nodes, "connections": connections}

    @staticmethod
    def _validate_node_numbering(input_nodes : list,
                                 output_nodes: list,
                                 hidden_nodes: list,
                                 num_inputs  : int,
                                 num_outputs : int) -> None:
        input_ids = sorted(n["id"] for n in input_nodes)
        expected_input_ids = list(range(num_inputs))
        if input_ids != expected_input_ids:
            raise ValueError(f"Input nodes must be numbered {expected_input_ids}, got {input_ids}")

        output_ids = sorted(n["id"] for n in output_nodes)
        expected_output_ids = list(range(num_inputs, num_inputs + num_outputs))
        if output_ids != expected_output_ids:
            raise ValueError(f"Output nodes must be numbered {expected_output_ids}, got {output_ids}")

        hidden_ids = [n["id"] for n in hidden_nodes]
        for hid in hidden_ids:
            if hid < num_inputs + num_outputs:
                raise ValueError(f"Hidden node {hid} has ID below minimum {num_inputs + num_outputs}")
        if len(hidden_ids) != len(set(hidden_ids)):
            raise ValueError("Duplicate node IDs found in node list")

    @property
    def config(self) -> Config:
        return self._config

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.OUTPUT]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    # ------------------------------------------------------------------
    # Initial wiring

    def _add_connection(self, node_in: int, node_out: int, strength: float) -> ConnectionGene:
        innovation = InnovationTracker.get_innovation_number(node_in, node_out)
        conn = ConnectionGene(node_in, node_out, strength, innovation, self._config)
        self.conn_genes[innovation] = conn
        return conn

    def _random_strength(self) -> float:
        return float(self._rng.uniform(self._config.min_connection_strength,
                                       self._config.max_connection_strength))

    def _connect_one_input(self) -> None:
        input_ids = sorted(node.id for node in self.input_nodes)
        for node in sorted(self.output_nodes, key=lambda n: n.id):
            node_in = input_ids[int(self._rng.integers(len(input_ids)))]
            self._add_connection(node_in, node.id, self._random_strength())

    def _connect_full(self) -> None:
        for node_in in sorted(node.id for node in self.input_nodes):
            for node_out in sorted(node.id for node in self.output_nodes):
                self._add_connection(node_in, node_out, self._random_strength())

    # ------------------------------------------------------------------
    # Validation and decoding

    def validate(self) -> None:
        """
        Check that the genome describes a legal network.

        Raises:
            GenomeDecodeError: if there are more hidden nodes than 'max_nodes', a
                connection strength is out of bounds, a self-connection exists while
                not allowed, a connection references a missing node or ends at an
                input node, a rule is not allowed, a bias exceeds 'node_max_bias',
                or no enabled path links an input node to an output node
        """
        config = self._config

        num_hidden = len(self.hidden_nodes)
        if num_hidden > config.max_nodes:
            raise GenomeDecodeError(f"{num_hidden} hidden nodes exceed the maximum of {config.max_nodes}")

        for node in self.node_genes.values():
            if node.type == NodeType.INPUT:
                continue
            if node.rule_name not in config.allowed_update_rules:
                raise GenomeDecodeError(f"Node {node.id}: update rule '{node.rule_name}' is not allowed")
            if abs(node.bias) > config.node_max_bias:
                raise GenomeDecodeError(f"Node {node.id}: bias {node.bias} exceeds {config.node_max_bias}")

        for conn in self.conn_genes.values():
            for node_id in (conn.node_in, conn.node_out):
                if node_id not in self.node_genes:
                    raise GenomeDecodeError(f"Connection {conn.innovation} references missing node {node_id}")
            if self.node_genes[conn.node_out].type == NodeType.INPUT:
                raise GenomeDecodeError(f"Connection {conn.innovation} ends at input node {conn.node_out}")
            if conn.node_in == conn.node_out and not config.allow_self_connection:
                raise GenomeDecodeError(f"Connection {conn.innovation} is a forbidden self-connection")
            if not config.min_connection_strength <= conn.strength <= config.max_connection_strength:
                raise GenomeDecodeError(f"Connection {conn.innovation}: strength {conn.strength} out of "
                                        f"[{config.min_connection_strength}, {config.max_connection_strength}]")

        if not self._inputs_reach_outputs():
            raise GenomeDecodeError("No enabled path links the input nodes to the output nodes")

    def is_valid(self) -> bool:
        try:
            self.validate()
        except GenomeDecodeError:
            return False
        return True

    def _inputs_reach_outputs(self) -> bool:
        """Forward search from all input nodes along enabled connections."""
        adjacency: dict[int, list[int]] = {}
        for conn in self.conn_genes.values():
            if conn.enabled:
                adjacency.setdefault(conn.node_in, []).append(conn.node_out)

        output_ids = {node.id for node in self.output_nodes}
        reachable  = set()
        stack      = [node.id for node in self.input_nodes]
        while stack:
            current = stack.pop()
            if current in output_ids:
                return True
            if current in reachable:
                continue
            reachable.add(current)
            stack.extend(adjacency.get(current, []))
        return False

    def decode(self) -> Network:
        """
        Build the network described by the genome.

        The network has three neuron groups: "inputs" (clamped, one per input node),
        "outputs" (one per output node) and "hidden", each ordered by node ID, and
        one synapse per enabled connection gene. Every neuron gets a deep copy of
        its gene's rule, so decoding twice gives two identical, independent networks.

        Returns:
            the decoded network

        Raises:
            GenomeDecodeError: if the genome is not legal (see 'validate()')
        """
        self.validate()

        network = Network()
        handles: dict[int, int] = {}  # node ID => neuron handle

        for label, nodes in (("inputs",  self.input_nodes),
                             ("hidden",  self.hidden_nodes),
                             ("outputs", self.output_nodes)):
            group_handles = []
            for i, node in enumerate(sorted(nodes, key=lambda n: n.id)):
                neuron = Neuron(rule    = node.rule.deep_copy(),
                                label   = f"{label}_{i}",
                                x       = 100.0 * i,
                                y       = _GROUP_ROWS[label],
                                clamped = node.type == NodeType.INPUT)
                handles[node.id] = network.add_neuron(neuron)
                group_handles.append(handles[node.id])
            network.add_group(label, group_handles)

        synapse_rule = synapse_rules[self._config.synapse_rule]
        for conn in sorted(self.conn_genes.values(), key=lambda c: c.innovation):
            if not conn.enabled:
                continue
            network.add_synapse(Synapse(handles[conn.node_in],
                                        handles[conn.node_out],
                                        conn.strength,
                                        synapse_rule(),
                                        lower_bound = self._config.min_connection_strength,
                                        upper_bound = self._config.max_connection_strength,
                                        frozen      = self._config.synapse_rule == "static"))
        return network

    # ------------------------------------------------------------------
    # Copying and crossover

    def copy(self, seed: int | None = None) -> 'Genome':
        """
        Create an independent copy of this genome.

        The copy shares the configuration but gets a fresh generator: seeded with
        'seed' if given, otherwise with a seed drawn from this genome's generator.
        """
        if seed is None:
            seed = int(self._rng.integers(2**63))
        duplicate = Genome._empty(self._config, np.random.default_rng(seed))
        duplicate.node_genes = {nid: node.copy() for nid, node in self.node_genes.items()}
        duplicate.conn_genes = {innov: conn.copy() for innov, conn in self.conn_genes.items()}
        return duplicate

    def crossover(self, other: 'Genome', fitter_parent: 'Genome') -> 'Genome':
        """
        Breed an offspring from this genome and another, aligning connection genes
        by innovation number: a gene present in both parents comes from either
        one at random, a gene present in one parent only is kept when that
        parent is the fitter one.

        If the offspring is not a legal genome, a copy of the fitter parent is
        returned instead.

        Parameters:
            other:         second parent
            fitter_parent: the fitter of the two parents ('self' or 'other')

        Returns:
            the offspring genome
        """
        rng = self._rng
        offspring = Genome._empty(self._config, np.random.default_rng(int(rng.integers(2**63))))

        innovs_self  = set(self.conn_genes)
        innovs_other = set(other.conn_genes)

        matching_innovs   = innovs_self  & innovs_other
        only_self_innovs  = innovs_self  - innovs_other
        only_other_innovs = innovs_other - innovs_self

        # Sorted so that the sequence of random draws does not depend on set ordering
        for innov in sorted(matching_innovs):
            conn_gene = (self.conn_genes if rng.random() < 0.5 else other.conn_genes)[innov].copy()

            # Parents disagreeing on the enabled status: 75% chance of being enabled
            if self.conn_genes[innov].enabled != other.conn_genes[innov].enabled:
                conn_gene.enabled = rng.random() < 0.75

            offspring.conn_genes[innov] = conn_gene

        unshared = only_self_innovs if fitter_parent is self else only_other_innovs
        for innov in sorted(unshared):
            offspring.conn_genes[innov] = fitter_parent.conn_genes[innov].copy()

        # Nodes: the ends of the inherited connections, plus all input and output nodes
        node_ids = set(range(self._config.num_inputs + self._config.num_outputs))
        for conn_gene in offspring.conn_genes.values():
            node_ids.update((conn_gene.node_in, conn_gene.node_out))

        for nid in sorted(node_ids):
            candidates = [parent.node_genes[nid] for parent in (self, other) if nid in parent.node_genes]
            if not candidates:
                raise RuntimeError(f"Neither parent carries node {nid}")
            pick = int(rng.integers(len(candidates))) if len(candidates) == 2 else 0
            offspring.node_genes[nid] = candidates[pick].copy()

        try:
            offspring.validate()
        except GenomeDecodeError as e:
            logger.debug("Crossover produced an illegal genome (%s); copying the fitter parent", e)
            return fitter_parent.copy(seed=int(rng.integers(2**63)))
        return offspring

    # ------------------------------------------------------------------
    # Mutation

    def mutate(self) -> None:
        """
        Stochastically mutate the genome, leaving it legal.

        The first attempt applies every structural mutation independently with its
        own probability, followed by the parameter mutations. If the result is not
        a legal genome (see 'validate()'), the genome is restored and the mutation
        retried with a smaller perturbation: a single structural mutation at a
        time, and on the last retry parameter mutations only. If every one of the
        'mutation_retries' retries fails, the genome is left unchanged.
        """
        retries = self._config.mutation_retries
        saved_nodes, saved_conns = self._snapshot()

        for attempt in range(retries + 1):
            if attempt == 0:
                self._mutate_structure(single=False)
            elif attempt < retries:
                self._mutate_structure(single=True)
            self._mutate_parameters()

            try:
                self.validate()
                return
            except GenomeDecodeError as e:
                logger.debug("Mutation attempt %d rejected: %s", attempt, e)
                self.node_genes = {nid: node.copy() for nid, node in saved_nodes.items()}
                self.conn_genes = {innov: conn.copy() for innov, conn in saved_conns.items()}

        logger.debug("All %d mutation attempts rejected; genome left unchanged", retries + 1)

    def _snapshot(self) -> tuple[dict[int, NodeGene], dict[int, ConnectionGene]]:
        return ({nid: node.copy() for nid, node in self.node_genes.items()},
                {innov: conn.copy() for innov, conn in self.conn_genes.items()})

    def _mutate_structure(self, single: bool) -> None:
        """
        Apply structural mutations (mutations that change the network graph).
        With 'single' set, at most one structural mutation is applied, chosen
        with probability proportional to its configured probability.
        """
        config = self._config
        mutations = [(config.node_add_probability,           self._mutate_add_node),
                     (config.connection_add_probability,     self._mutate_add_connection),
                     (config.connection_delete_probability,  self._mutate_delete_connection),
                     (config.connection_enable_probability,  self._mutate_enable_connection),
                     (config.connection_disable_probability, self._mutate_disable_connection)]

        if single:
            normalizer = sum(probability for probability, _ in mutations)
            if normalizer > 0:
                r = self._rng.random() * normalizer
                for probability, mutation in mutations:
                    if r < probability:
                        mutation()
                        break
                    r -= probability
        else:
            selected = [mutation for probability, mutation in mutations if self._rng.random() < probability]
            for mutation in selected:
                mutation()

    def _mutate_parameters(self) -> None:
        for innov in sorted(self.conn_genes):
            self.conn_genes[innov].mutate(self._rng)
        for nid in sorted(self.node_genes):
            self.node_genes[nid].mutate(self._rng)

    def _mutate_add_node(self) -> None:
        """
        Add a hidden node, either by splitting an enabled connection (NEAT) or, with
        equal probability or when no enabled connection exists, as a free node wired
        to one random source and one random target. The hidden node limit is not
        checked here: an excess is caught by validation.
        """
        enabled_conn_genes = [self.conn_genes[i] for i in sorted(self.conn_genes) if self.conn_genes[i].enabled]
        if not enabled_conn_genes or self._rng.random() < 0.5:
            self._add_free_node()
        else:
            self._split_connection(enabled_conn_genes[int(self._rng.integers(len(enabled_conn_genes)))])

    def _split_connection(self, split_conn_gene: ConnectionGene) -> None:
        new_node_id, innov1, innov2 = InnovationTracker.get_split_IDs(split_conn_gene)

        present = [new_node_id in self.node_genes, innov1 in self.conn_genes, innov2 in self.conn_genes]

        # Only part of the split structure was inherited: leave the genome alone
        if any(present) and not all(present):
            return
        already_split = all(present)

        split_conn_gene.enabled = False
        if not already_split:
            self.node_genes[new_node_id] = NodeGene(new_node_id, NodeType.HIDDEN, self._config, rng=self._rng)

            # source -> new node (strength 1), new node -> target (old strength)
            strength_in = min(self._config.max_connection_strength,
                              max(self._config.min_connection_strength, 1.0))
            self.conn_genes[innov1] = ConnectionGene(split_conn_gene.node_in, new_node_id,
                                                     strength_in, innov1, self._config)
            self.conn_genes[innov2] = ConnectionGene(new_node_id, split_conn_gene.node_out,
                                                     split_conn_gene.strength, innov2, self._config)
        else:
            self.conn_genes[innov1].enabled = True
            self.conn_genes[innov2].enabled = True

    def _add_free_node(self) -> None:
        sources = sorted(node.id for node in self.node_genes.values() if node.type != NodeType.OUTPUT)
        targets = sorted(node.id for node in self.node_genes.values() if node.type != NodeType.INPUT)

        new_node_id = InnovationTracker.new_node_id()
        self.node_genes[new_node_id] = NodeGene(new_node_id, NodeType.HIDDEN, self._config, rng=self._rng)
        self._add_connection(sources[int(self._rng.integers(len(sources)))], new_node_id, self._random_strength())
        self._add_connection(new_node_id, targets[int(self._rng.integers(len(targets)))], self._random_strength())

    def _mutate_add_connection(self) -> None:
        """
        Wire two random existing nodes together. Rejected draws (a target that is an
        input node, an existing pair, a self-loop when those are disallowed) are
        retried up to 20 times; cycles are fine.
        """
        existing = {(conn.node_in, conn.node_out) for conn in self.conn_genes.values()}
        node_ids        = sorted(self.node_genes)

        NUM_ATTEMPTS = 20
        for _ in range(NUM_ATTEMPTS):
            node_in  = node_ids[int(self._rng.integers(len(node_ids)))]
            node_out = node_ids[int(self._rng.integers(len(node_ids)))]

            if self.node_genes[node_out].type == NodeType.INPUT:
                continue
            if node_in == node_out and not self._config.allow_self_connection:
                continue
            if (node_in, node_out) in existing:
                continue

            self._add_connection(node_in, node_out, self._random_strength())
            break

    def _pick_connection(self, enabled: bool | None = None) -> ConnectionGene | None:
        candidates = [self.conn_genes[i] for i in sorted(self.conn_genes)
                      if enabled is None or self.conn_genes[i].enabled == enabled]
        if not candidates:
            return None
        return candidates[int(self._rng.integers(len(candidates)))]

    def _mutate_delete_connection(self) -> None:
        """
        Remove one connection gene, enabled or not, and any hidden node it leaves isolated.
        """
        conn = self._pick_connection()
        if conn is None:
            return
        del self.conn_genes[conn.innovation]

        for node_id in (conn.node_in, conn.node_out):
            node = self.node_genes.get(node_id)
            if node is not None and node.type == NodeType.HIDDEN and \
               not any(node_id in (c.node_in, c.node_out) for c in self.conn_genes.values()):
                del self.node_genes[node_id]

    def _mutate_enable_connection(self) -> None:
        conn = self._pick_connection(enabled=False)
        if conn is not None:
            conn.enabled = True

    def _mutate_disable_connection(self) -> None:
        conn = self._pick_connection(enabled=True)
        if conn is not None:
            conn.enabled = False

    def __str__(self):
        node_genes_str  = ''.join(str(node) for node in self.input_nodes)
        node_genes_str += ''.join(str(node) for node in self.hidden_nodes)
        node_genes_str += ''.join(str(node) for node in self.output_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        return f"Nodes: {node_genes_str}\nConns: {conn_genes_str}"
