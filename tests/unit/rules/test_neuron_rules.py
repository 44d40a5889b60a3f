"""
Unit tests for the neuron update rules.
"""

import numpy as np
import pytest

from evobrain.rules import (BinaryRule, DecayRule, LinearRule, NakaRushtonRule, ThreeValueRule,
                            clip_value, make_neuron_rule, neuron_rule_codes, neuron_rules)


# ============================================================================
# Test Clipping
# ============================================================================

class TestClipping:
    """Every rule with clipping enabled stays within its bounds."""

    INPUTS = [-1e6, -50.0, -1.0, -0.3, 0.0, 0.2, 0.7, 1.0, 3.0, 1e6]

    @pytest.mark.parametrize("name", list(neuron_rules))
    def test_update_within_bounds(self, name):
        rule = make_neuron_rule(name, -1.0, 4.0, np.random.default_rng(0))
        for activation in (-1.0, 0.0, 4.0):
            for weighted_input in self.INPUTS:
                value = rule.update(activation, weighted_input)
                assert -1.0 <= value <= 4.0

    @pytest.mark.parametrize("name", list(neuron_rules))
    def test_clip_within_bounds(self, name):
        rule = make_neuron_rule(name, -2.0, 3.0)
        for value in self.INPUTS:
            assert -2.0 <= rule.clip(value) <= 3.0

    def test_clip_disabled(self):
        rule = LinearRule(clipping=False)
        assert rule.update(0.0, 25.0) == 25.0
        assert rule.clip(-25.0) == -25.0

    def test_clip_value(self):
        assert clip_value(5.0, -1.0, 1.0) == 1.0
        assert clip_value(-5.0, -1.0, 1.0) == -1.0
        assert clip_value(0.5, -1.0, 1.0) == 0.5


# ============================================================================
# Test Individual Rules
# ============================================================================

class TestLinearRule:

    def test_slope_and_bias(self):
        rule = LinearRule(slope=2.0, bias=0.25, lower_bound=-10.0, upper_bound=10.0)
        assert rule.update(0.0, 1.0) == pytest.approx(2.5)

    def test_ignores_previous_activation(self):
        rule = LinearRule()
        assert rule.update(0.9, 0.1) == pytest.approx(0.1)

    def test_derivative(self):
        rule = LinearRule(slope=3.0)
        assert rule.derivative(0.0) == 3.0
        assert rule.derivative(1.0) == 0.0
        assert rule.derivative(-1.5) == 0.0

    def test_noise_is_reproducible(self):
        rule1 = LinearRule(add_noise=True, rng=np.random.default_rng(7), clipping=False)
        rule2 = LinearRule(add_noise=True, rng=np.random.default_rng(7), clipping=False)
        values1 = [rule1.update(0.0, 0.0) for _ in range(5)]
        values2 = [rule2.update(0.0, 0.0) for _ in range(5)]
        assert values1 == values2
        assert any(v != 0.0 for v in values1)

    def test_deep_copy_does_not_share_generator(self):
        rule = LinearRule(add_noise=True, rng=np.random.default_rng(3), clipping=False)
        duplicate = rule.deep_copy()
        assert duplicate.rng is not rule.rng
        assert duplicate.update(0.0, 0.0) == rule.update(0.0, 0.0)


class TestDecayRule:

    def test_decays_toward_baseline(self):
        rule = DecayRule(decay_fraction=0.5, baseline=0.0)
        assert rule.update(0.8, 0.0) == pytest.approx(0.4)
        assert rule.update(-0.8, 0.0) == pytest.approx(-0.4)

    def test_accumulates_input(self):
        rule = DecayRule(decay_fraction=0.0)
        assert rule.update(0.2, 0.3) == pytest.approx(0.5)

    def test_never_crosses_baseline(self):
        rule = DecayRule(decay_fraction=1.0, baseline=0.1)
        assert rule.update(0.9, 0.0) == pytest.approx(0.1)


class TestNakaRushtonRule:

    def test_relaxes_toward_response(self):
        rule = NakaRushtonRule(max_value=1.0, steepness=2.0, semi_saturation=0.5,
                               time_constant=1.0, time_step=0.1)
        # x = 0.5 => s = 0.25 / (0.25 + 0.25) = 0.5
        assert rule.update(0.0, 0.5) == pytest.approx(0.05)

    def test_non_positive_input_decays(self):
        rule = NakaRushtonRule(time_step=0.5)
        assert rule.update(0.8, -1.0) == pytest.approx(0.4)


class TestStepRules:

    def test_binary(self):
        rule = BinaryRule(threshold=0.5, lower_bound=0.0, upper_bound=1.0)
        assert rule.update(0.0, 0.6) == 1.0
        assert rule.update(0.0, 0.5) == 0.0

    def test_binary_bias(self):
        rule = BinaryRule(threshold=0.5, bias=0.2)
        assert rule.update(0.0, 0.4) == 1.0

    def test_three_value(self):
        rule = ThreeValueRule(lower_threshold=0.0, upper_threshold=1.0, middle_value=0.5)
        assert rule.update(0.0, -0.1) == -1.0
        assert rule.update(0.0,  0.5) ==  0.5
        assert rule.update(0.0,  1.1) ==  1.0


# ============================================================================
# Test Registry
# ============================================================================

class TestRegistry:

    def test_every_rule_has_a_code(self):
        assert set(neuron_rule_codes) == set(neuron_rules)
        assert all(len(code) == 3 for code in neuron_rule_codes.values())

    def test_names_match_registry(self):
        for name, rule_class in neuron_rules.items():
            assert rule_class.name == name

    def test_make_neuron_rule_sets_bounds(self):
        rule = make_neuron_rule("decay", -1.0, 4.0)
        assert isinstance(rule, DecayRule)
        assert (rule.lower_bound, rule.upper_bound) == (-1.0, 4.0)

    def test_make_neuron_rule_unknown_name(self):
        with pytest.raises(KeyError):
            make_neuron_rule("sigmoid", -1.0, 1.0)

    @pytest.mark.parametrize("name", list(neuron_rules))
    def test_perturb_changes_parameters(self, name):
        rule = make_neuron_rule(name, -1.0, 4.0)
        before = rule.deep_copy()
        rule.perturb(np.random.default_rng(1), 0.5)
        assert rule != before
