"""
Tests for balance tables and Rules overrides
"""

import pytest

from balance import DEFAULT_RULES, Rules


class TestTables:
    def test_difficulties_and_archetypes(self):
        assert set(DEFAULT_RULES.difficulties) == {'easy', 'normal', 'hard', 'nightmare'}
        assert set(DEFAULT_RULES.archetypes) == {'startup', 'bigtech', 'academic'}

    def test_rarity_drop_rates_sum_to_one(self):
        assert sum(r.drop_rate for r in DEFAULT_RULES.rarities.values()) == pytest.approx(1.0)

    def test_exam_scenarios(self):
        scenarios = DEFAULT_RULES.exam_scenarios
        assert len(scenarios) == 9
        assert all(1 <= len(s.focus_dimensions) <= 2 for s in scenarios)

    def test_equipment_levels(self):
        for kind in ('gpu', 'storage', 'network', 'cooling'):
            levels = DEFAULT_RULES.equipment_levels[kind]
            assert [lvl.level for lvl in levels] == [1, 2, 3, 4]
            assert levels[0].upgrade_cost == 0
        assert DEFAULT_RULES.equipment_level('storage', 3).bonus == 1500

    def test_conditional_events_most_severe_first(self):
        triggers = [e.legal_risk_trigger for e in DEFAULT_RULES.conditional_events]
        assert triggers == sorted(triggers, reverse=True)


class TestOverrides:
    def test_override_returns_copy(self):
        rules = DEFAULT_RULES.with_overrides(exam_interval=3)
        assert rules.exam_interval == 3
        assert DEFAULT_RULES.exam_interval == 5
        assert isinstance(rules, Rules)

    def test_rules_are_frozen(self):
        with pytest.raises(Exception):
            DEFAULT_RULES.exam_interval = 1

    def test_unknown_override(self):
        with pytest.raises(TypeError):
            DEFAULT_RULES.with_overrides(cheat_mode=True)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
