"""
Tests for the operation catalog and eligibility checks
"""

import pytest

from errors import UnknownOperation, IneligibleOperation
from operations import (
    Cost, Operation, ALL_OPERATIONS, OPERATIONS_BY_ID, OPERATIONS_BY_CATEGORY,
    OPERATION_CATEGORIES, DATA_OPERATIONS, TRAINING_OPERATIONS, MAINTENANCE_OPERATIONS,
    DIMENSION_OPERATIONS, PREMIUM_OPERATIONS, TEAM_OPERATIONS, SIDE_JOB_OPERATIONS,
    get_operation, operations_in_category, available_operations,
)
from effects import fixed
from state import GameState, Resources, Dimensions, TeamMember, BaseStats


def member_with(*traits, level=1, member_id='m1'):
    return TeamMember(
        id=member_id, name='Linus', rarity='epic', base_stats=BaseStats(9, 9, 9),
        traits=traits, level=level, hiring_cost=2500, salary=550,
    )


def rich_state(**resources):
    values = dict(budget=100000, compute_points=10, compute_max=10, dirty_data=500, golden_data=400)
    values.update(resources)
    return GameState(resources=Resources(**values))


class TestCatalog:
    """Test catalog completeness."""

    def test_twenty_nine_operations(self):
        assert len(ALL_OPERATIONS) == 29
        assert len(OPERATIONS_BY_ID) == 29

    def test_categories_cover_catalog(self):
        union = set()
        for group in (DATA_OPERATIONS, TRAINING_OPERATIONS, MAINTENANCE_OPERATIONS,
                      DIMENSION_OPERATIONS, PREMIUM_OPERATIONS, TEAM_OPERATIONS,
                      SIDE_JOB_OPERATIONS):
            union.update(op.id for op in group)
        assert union == set(OPERATIONS_BY_ID)

    def test_each_operation_in_one_category(self):
        for category, group in OPERATIONS_BY_CATEGORY.items():
            assert category in OPERATION_CATEGORIES
            for op in group:
                assert op.category == category

    def test_category_sizes(self):
        assert len(DATA_OPERATIONS) == 5
        assert len(TRAINING_OPERATIONS) == 6
        assert len(MAINTENANCE_OPERATIONS) == 5
        assert len(DIMENSION_OPERATIONS) == 4
        assert len(PREMIUM_OPERATIONS) == 3
        assert len(TEAM_OPERATIONS) == 1
        assert len(SIDE_JOB_OPERATIONS) == 5

    def test_side_jobs_flagged(self):
        assert all(op.side_job for op in SIDE_JOB_OPERATIONS)
        assert not any(op.side_job for op in ALL_OPERATIONS if op.category != 'side_job')

    def test_only_consultant_asks_for_dimension(self):
        asking = [op.id for op in ALL_OPERATIONS if op.requires_dimension_choice]
        assert asking == ['hire_consultant']

    def test_lookup(self):
        assert get_operation('web_crawl').name == 'Web Crawl'
        assert operations_in_category('team')[0].id == 'team_training'
        assert operations_in_category('nonsense') == ()

    def test_unknown_lookup(self):
        with pytest.raises(UnknownOperation):
            get_operation('teleport')
        with pytest.raises(IneligibleOperation):
            get_operation('teleport')


class TestRecords:
    """Test Cost and Operation validation."""

    def test_negative_cost_rejected(self):
        with pytest.raises(ValueError):
            Cost(budget=-1)
        with pytest.raises(ValueError):
            Cost(golden_data=-10)

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            Operation('x', 'X', 'magic', '', Cost(), fixed(entropy=1))

    def test_operations_are_immutable(self):
        with pytest.raises(Exception):
            get_operation('sgd').name = 'Renamed'


class TestEligibility:
    """Test can_execute and its reasons."""

    def test_affordable(self):
        assert get_operation('web_crawl').can_execute(rich_state())

    def test_each_cost_checked(self):
        op = get_operation('transfer_learning')
        assert not op.can_execute(rich_state(budget=799))
        assert not op.can_execute(rich_state(compute_points=1))
        assert not op.can_execute(rich_state(golden_data=24))

    def test_reasons_listed(self):
        reasons = get_operation('transfer_learning').unmet_requirements(rich_state(budget=0, compute_points=0))
        assert len(reasons) == 2

    def test_can_execute_does_not_mutate(self):
        state = rich_state(budget=10)
        before = state.to_dict()
        get_operation('distillation').can_execute(state)
        assert state.to_dict() == before

    def test_side_job_cap(self):
        state = rich_state()
        state.progress.side_jobs_this_turn = 2
        assert not get_operation('freelance').can_execute(state)

    def test_server_upgrade_needs_headroom(self):
        op = get_operation('server_upgrade')
        assert op.can_execute(rich_state(compute_max=7))
        assert not op.can_execute(rich_state(compute_max=8))

    def test_team_training_needs_team(self):
        state = rich_state()
        assert not get_operation('team_training').can_execute(state)
        state.team.append(member_with())
        assert get_operation('team_training').can_execute(state)

    def test_consulting_requirement(self):
        state = rich_state()
        state.dimensions = Dimensions(algorithm=50)
        state.reputation = 29
        assert not get_operation('tech_consulting').can_execute(state)
        state.reputation = 30
        assert get_operation('tech_consulting').can_execute(state)

    def test_consulting_counts_trait_bonus(self):
        state = rich_state()
        state.dimensions = Dimensions(algorithm=45)
        state.reputation = 40
        state.team.append(member_with('algorithm_expert'))
        assert get_operation('tech_consulting').can_execute(state)

    def test_blog_requirement(self):
        state = rich_state()
        state.reputation = 50
        assert not get_operation('tech_blog').can_execute(state)
        state.dimensions = Dimensions(user_experience=60)
        assert get_operation('tech_blog').can_execute(state)

    def test_available_operations_empty_when_over(self):
        state = rich_state()
        state.game_status = 'game_over'
        assert available_operations(state) == []


class TestCostReduction:
    """cost_control lowers budget costs, capped at 50%."""

    def test_trait_reduces_budget_cost(self):
        state = rich_state()
        state.team.append(member_with('cost_control'))
        op = get_operation('distillation')
        assert op.budget_cost(state) < op.cost.budget

    def test_reduction_capped(self):
        state = rich_state()
        state.team = [member_with('cost_control', level=10, member_id=f"m{i}") for i in range(5)]
        assert get_operation('web_crawl').budget_cost(state) == 75

    def test_free_operations_stay_free(self):
        state = rich_state()
        state.team.append(member_with('cost_control'))
        assert get_operation('sgd').budget_cost(state) == 0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
