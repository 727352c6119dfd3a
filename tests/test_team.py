"""
Tests for hiring, levelling, salaries and trait bonuses
"""

import random

import pytest

from balance import DEFAULT_RULES
from errors import IneligibleOperation
from state import GameState, Resources, Dimensions, TeamMember, BaseStats
import team


class FixedRoll(random.Random):
    """Random whose random() always returns the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def member(member_id='m1', rarity='common', traits=(), level=1, experience=0,
           hiring_cost=600, salary=200):
    return TeamMember(
        id=member_id, name='Ada', rarity=rarity, base_stats=BaseStats(5, 5, 5),
        traits=traits, level=level, experience=experience,
        hiring_cost=hiring_cost, salary=salary,
    )


class TestCandidates:
    """Test candidate generation."""

    @pytest.mark.parametrize('roll,expected', [
        (0.01, 'legendary'),
        (0.10, 'epic'),
        (0.30, 'rare'),
        (0.90, 'common'),
    ])
    def test_rarity_roll(self, roll, expected):
        assert team.determine_rarity(FixedRoll(roll)) == expected

    def test_member_matches_rarity(self):
        rng = random.Random(5)
        state = GameState(difficulty='normal')
        for _ in range(40):
            candidate = team.generate_member(state, rng)
            config = DEFAULT_RULES.rarities[candidate.rarity]
            low, high = config.stat_range
            for value in (candidate.base_stats.compute_contribution,
                          candidate.base_stats.data_efficiency,
                          candidate.base_stats.maintenance_skill):
                assert low <= value <= high
            assert len(candidate.traits) == config.trait_slots
            assert len(set(candidate.traits)) == len(candidate.traits)
            assert candidate.hiring_cost == config.base_hiring_cost
            assert candidate.salary == config.base_salary
            assert candidate.level == 1

    def test_pool_size(self):
        pool = team.generate_hiring_pool(GameState(), random.Random(1))
        assert len(pool) == DEFAULT_RULES.hiring_pool_size
        assert len({m.id for m in pool}) == len(pool)

    def test_random_traits_exclude(self):
        drawn = team.random_traits(3, random.Random(2), exclude=('efficiency', 'cost_control'))
        assert len(drawn) == 3
        assert 'efficiency' not in drawn
        assert 'cost_control' not in drawn


class TestHireFire:
    """Test hiring and firing in place."""

    def test_hire(self):
        state = GameState(resources=Resources(budget=1000))
        state.hiring_pool = [member(hiring_cost=600)]
        hired = team.hire_member(state, 'm1')
        assert hired.id == 'm1'
        assert state.resources.budget == 400
        assert len(state.team) == 1
        assert state.hiring_pool == []

    def test_hire_unaffordable(self):
        state = GameState(resources=Resources(budget=1000))
        state.hiring_pool = [member(rarity='rare', hiring_cost=1200)]
        before = state.to_dict()
        with pytest.raises(IneligibleOperation):
            team.hire_member(state, 'm1')
        assert state.to_dict() == before

    def test_hire_missing_candidate(self):
        with pytest.raises(IneligibleOperation):
            team.hire_member(GameState(resources=Resources(budget=10000)), 'ghost')

    def test_team_cap(self):
        state = GameState(resources=Resources(budget=10000))
        state.team = [member(member_id=f"t{i}") for i in range(5)]
        state.hiring_pool = [member(member_id='new')]
        with pytest.raises(IneligibleOperation):
            team.hire_member(state, 'new')

    def test_fire_refund(self):
        state = GameState(resources=Resources(budget=0))
        state.team = [member(hiring_cost=2500)]
        fired, refund = team.fire_member(state, 'm1')
        assert fired.id == 'm1'
        assert refund == 750
        assert state.resources.budget == 750


class TestExperience:
    """Test levels, trait unlocks and salary growth."""

    @pytest.mark.parametrize('experience,level', [
        (0, 1), (79, 1), (80, 2), (399, 3), (4000, 10), (99999, 10),
    ])
    def test_calculate_level(self, experience, level):
        assert team.calculate_level(experience) == level

    def test_level_up_raises_salary(self):
        m = member()
        level_up = team.add_experience(m, 80, random.Random(0))
        assert level_up.old_level == 1
        assert level_up.new_level == 2
        assert m.level == 2
        assert m.salary == 220

    def test_no_level_up(self):
        m = member()
        assert team.add_experience(m, 10, random.Random(0)) is None
        assert m.experience == 10

    def test_even_level_unlocks_trait(self):
        rules = DEFAULT_RULES.with_overrides(trait_unlock_chance=1.0)
        m = member()
        level_up = team.add_experience(m, 80, random.Random(0), rules)
        assert len(m.traits) == 1
        assert level_up.new_traits == list(m.traits)

    def test_no_unlock_when_chance_zero(self):
        rules = DEFAULT_RULES.with_overrides(trait_unlock_chance=0.0)
        m = member()
        team.add_experience(m, 4000, random.Random(0), rules)
        assert m.level == 10
        assert m.traits == ()

    def test_trait_slots_capped(self):
        rules = DEFAULT_RULES.with_overrides(trait_unlock_chance=1.0)
        m = member(traits=('efficiency', 'cost_control', 'architect'))
        team.add_experience(m, 4000, random.Random(0), rules)
        assert len(m.traits) == 3

    def test_experience_to_all(self):
        state = GameState()
        state.team = [member('a'), member('b', experience=70)]
        level_ups = team.add_experience_to_all(state, 20, random.Random(0))
        assert [lu.member_id for lu in level_ups] == ['b']
        assert state.team[0].experience == 20


class TestSalaries:
    """Test payroll and layoffs."""

    def test_payroll(self):
        state = GameState(resources=Resources(budget=1000))
        state.team = [member('a'), member('b')]
        result = team.pay_salaries(state, random.Random(0))
        assert result.paid == 400
        assert result.laid_off == []
        assert state.resources.budget == 600

    def test_layoff_until_affordable(self):
        state = GameState(resources=Resources(budget=250))
        state.team = [member('a'), member('b')]
        result = team.pay_salaries(state, random.Random(0))
        assert len(result.laid_off) == 1
        assert len(state.team) == 1
        assert result.paid == 200
        assert state.resources.budget == 50

    def test_everyone_laid_off(self):
        state = GameState(resources=Resources(budget=-100))
        state.team = [member('a'), member('b')]
        result = team.pay_salaries(state, random.Random(0))
        assert state.team == []
        assert result.paid == 0
        assert state.resources.budget == -100


class TestBonuses:
    """Trait bonuses are recomputed from the current team."""

    def test_dimension_bonus(self):
        state = GameState(dimensions=Dimensions(algorithm=20))
        state.team = [member(traits=('algorithm_expert',))]
        assert team.effective_dimensions(state)['algorithm'] == 28

    def test_bonus_scales_with_level(self):
        state = GameState(dimensions=Dimensions(algorithm=20))
        state.team = [member(traits=('algorithm_expert',), level=2)]
        assert team.effective_dimensions(state)['algorithm'] == 28

        state.team = [member(traits=('algorithm_expert',), level=3)]
        assert team.effective_dimensions(state)['algorithm'] == 29

    def test_effective_dimension_capped(self):
        state = GameState(dimensions=Dimensions(stability=95))
        state.team = [member(traits=('architect',))]
        assert team.effective_dimensions(state)['stability'] == 100

    def test_base_dimensions_untouched(self):
        state = GameState()
        state.team = [member(traits=('fullstack',))]
        team.effective_dimensions(state)
        assert state.dimensions.algorithm == 20

    def test_compute_bonus_folded_into_compute_max(self):
        state = GameState(resources=Resources(compute_max=4))
        state.team = [member(traits=('efficiency',))]

        assert team.sync_compute_bonus(state) == 1
        assert state.resources.compute_max == 5
        assert state.resources.compute_bonus == 1

        # A second sync with the same team is a no-op
        assert team.sync_compute_bonus(state) == 0
        assert state.resources.compute_max == 5

    def test_bonus_gone_after_member_leaves(self):
        state = GameState(resources=Resources(compute_max=4, compute_points=4))
        state.team = [member(traits=('efficiency',))]
        team.sync_compute_bonus(state)
        state.resources.compute_points = 5

        team.fire_member(state, 'm1')

        assert state.resources.compute_max == 4
        assert state.resources.compute_bonus == 0
        assert state.resources.compute_points == 4

    def test_layoff_drops_compute_bonus(self):
        state = GameState(resources=Resources(budget=100, compute_max=4))
        state.team = [member(traits=('efficiency',), salary=200)]
        team.sync_compute_bonus(state)

        result = team.pay_salaries(state, random.Random(0))

        assert len(result.laid_off) == 1
        assert state.resources.compute_max == 4
        assert state.resources.compute_bonus == 0

    def test_compute_bonus_respects_ceiling(self):
        state = GameState(resources=Resources(compute_max=10))
        state.team = [member(traits=('efficiency',))]

        assert team.sync_compute_bonus(state) == 0
        assert state.resources.compute_max == 10
        assert state.resources.compute_bonus == 0

    def test_data_bonus(self):
        state = GameState()
        state.team = [member(traits=('data_mining',))]
        assert team.calculate_team_bonuses(state).data_bonus == pytest.approx(0.15)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
