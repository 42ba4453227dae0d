"""
Sibling positions stay contiguous (1..n) through insert, delete and move.
"""
import pytest

from core.exceptions import NotFoundError, ValidationError
from repositories import WorkoutExerciseRepository, WorkoutRepository, WorkoutSetRepository
from services.workout import WorkoutDraft, WorkoutExerciseDraft


def _workout_order(service, user_id, plan):
    return [(w.name, w.index) for w in service.list_workouts(user_id, plan.id, plan.current_cycle_id)]


def _set_indexes(service, user_id, tree):
    return [(s.id, s.index) for s in service.list_workout_sets(user_id, tree.plan, tree.cycle, tree.workout, tree.we)]


@pytest.fixture
def three_workouts(service, user_id, plan):
    cycle_id = plan.current_cycle_id
    return [service.create_workout(user_id, plan.id, cycle_id, name) for name in ("A", "B", "C")]


class TestWorkoutPositions:
    def test_workouts_are_appended(self, service, user_id, plan, three_workouts):
        assert _workout_order(service, user_id, plan) == [("A", 1), ("B", 2), ("C", 3)]

    def test_insert_shifts_later_siblings(self, service, user_id, plan, three_workouts):
        service.create_workout(user_id, plan.id, plan.current_cycle_id, "Z", index=2)
        assert _workout_order(service, user_id, plan) == [("A", 1), ("Z", 2), ("B", 3), ("C", 4)]

    @pytest.mark.parametrize("index", [0, -1, 99])
    def test_out_of_range_index_appends(self, service, user_id, plan, three_workouts, index):
        workout = service.create_workout(user_id, plan.id, plan.current_cycle_id, "Z", index=index)
        assert workout.index == 4

    def test_delete_closes_gap(self, service, user_id, plan, three_workouts):
        service.delete_workout(user_id, plan.id, plan.current_cycle_id, three_workouts[0].id)
        assert _workout_order(service, user_id, plan) == [("B", 1), ("C", 2)]

    def test_move_down_and_up(self, service, user_id, plan, three_workouts):
        cycle_id = plan.current_cycle_id
        moved = service.move_workout(user_id, plan.id, cycle_id, three_workouts[0].id, "down")
        assert moved.index == 2
        assert _workout_order(service, user_id, plan) == [("B", 1), ("A", 2), ("C", 3)]

        service.move_workout(user_id, plan.id, cycle_id, three_workouts[2].id, "up")
        assert _workout_order(service, user_id, plan) == [("B", 1), ("C", 2), ("A", 3)]

    def test_move_first_up_is_invalid(self, service, user_id, plan, three_workouts):
        with pytest.raises(ValidationError):
            service.move_workout(user_id, plan.id, plan.current_cycle_id, three_workouts[0].id, "up")

    def test_move_last_down_has_no_neighbor(self, service, user_id, plan, three_workouts):
        with pytest.raises(NotFoundError):
            service.move_workout(user_id, plan.id, plan.current_cycle_id, three_workouts[2].id, "down")
        assert _workout_order(service, user_id, plan) == [("A", 1), ("B", 2), ("C", 3)]

    def test_unknown_direction(self, service, user_id, plan, three_workouts):
        with pytest.raises(ValidationError):
            service.move_workout(user_id, plan.id, plan.current_cycle_id, three_workouts[0].id, "left")

    def test_batch_create_appends_with_exercises(self, service, user_id, plan, three_workouts, individual_exercise):
        created = service.create_multiple_workouts(
            user_id,
            plan.id,
            plan.current_cycle_id,
            [
                WorkoutDraft(name="D", exercises=[WorkoutExerciseDraft(individual_exercise.id, 2)]),
                WorkoutDraft(name="E"),
            ],
        )

        assert [(w.name, w.index) for w in created] == [("D", 4), ("E", 5)]
        assert [len(we.workout_sets) for we in created[0].workout_exercises] == [2]
        assert created[1].workout_exercises == []

    def test_batch_create_validates_before_writing(self, service, user_id, plan, individual_exercise):
        with pytest.raises(ValidationError):
            service.create_multiple_workouts(
                user_id,
                plan.id,
                plan.current_cycle_id,
                [
                    WorkoutDraft(name="ok"),
                    WorkoutDraft(name="bad", exercises=[WorkoutExerciseDraft(individual_exercise.id, 0)]),
                ],
            )
        assert service.list_workouts(user_id, plan.id, plan.current_cycle_id) == []


class TestExercisePositions:
    def test_insert_exercise_first(self, service, user_id, tree):
        inserted = service.create_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.ie, 1, index=1)

        exercises = service.list_workout_exercises(user_id, tree.plan, tree.cycle, tree.workout)
        assert [(we.id, we.index) for we in exercises] == [(inserted.id, 1), (tree.we, 2)]

    def test_move_exercise(self, service, user_id, tree):
        second = service.create_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.ie, 1)

        moved = service.move_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, second.id, "up")

        assert moved.index == 1
        assert service.get_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we).index == 2

    def test_delete_exercise_closes_gap(self, service, user_id, tree):
        second = service.create_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.ie, 1)

        service.delete_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we)

        exercises = service.list_workout_exercises(user_id, tree.plan, tree.cycle, tree.workout)
        assert [(we.id, we.index) for we in exercises] == [(second.id, 1)]

    def test_replace_keeps_position(self, service, user_id, catalog, muscle_group, tree):
        squat = catalog.create_exercise("Squat", muscle_group_id=muscle_group.id)
        squat_ie = service.get_or_create_individual_exercise(user_id, exercise_id=squat.id)
        service.create_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.ie, 1)

        replaced = service.replace_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we, squat_ie.id, 4)

        assert replaced.index == 1
        assert replaced.individual_exercise_id == squat_ie.id
        assert [s.index for s in replaced.workout_sets] == [1, 2, 3, 4]
        with pytest.raises(NotFoundError):
            service.get_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we)

    @pytest.mark.parametrize("sets_qt", [0, -2, 21])
    def test_sets_quantity_bounds(self, service, user_id, tree, sets_qt):
        with pytest.raises(ValidationError):
            service.create_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.ie, sets_qt)


class TestSetPositions:
    def test_sets_are_created_in_order(self, service, user_id, tree):
        assert [index for _, index in _set_indexes(service, user_id, tree)] == [1, 2, 3]

    def test_append_set(self, service, user_id, tree):
        created = service.create_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, weight=40.0, reps=12)

        assert created.index == 4
        assert (created.weight, created.reps) == (40.0, 12)
        assert created.pending

    def test_insert_set_shifts_later_siblings(self, service, user_id, tree):
        created = service.create_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, index=1)

        assert _set_indexes(service, user_id, tree) == [
            (created.id, 1),
            (tree.sets[0], 2),
            (tree.sets[1], 3),
            (tree.sets[2], 4),
        ]

    def test_delete_middle_set(self, service, user_id, tree):
        service.delete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[1])
        assert _set_indexes(service, user_id, tree) == [(tree.sets[0], 1), (tree.sets[2], 2)]

    def test_move_set(self, service, user_id, tree):
        service.move_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], "down")
        assert _set_indexes(service, user_id, tree) == [(tree.sets[1], 1), (tree.sets[0], 2), (tree.sets[2], 3)]

    def test_move_last_set_down(self, service, user_id, tree):
        with pytest.raises(NotFoundError):
            service.move_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[2], "down")

    def test_negative_values_are_rejected(self, service, user_id, tree):
        with pytest.raises(ValidationError):
            service.update_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], weight=-1)
        with pytest.raises(ValidationError):
            service.create_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, reps=-3)


class TestIndexedRepositories:
    def test_parent_column_resolves_on_each_repository(self, uow):
        assert WorkoutRepository(uow).parent_column.key == "workout_cycle_id"
        assert WorkoutExerciseRepository(uow).parent_column.key == "workout_id"
        assert WorkoutSetRepository(uow).parent_column.key == "workout_exercise_id"

    def test_index_and_status_queries_by_parent(self, uow, tree):
        sets = WorkoutSetRepository(uow)

        def run():
            return sets.get_max_index(tree.we), sets.count_statuses(tree.we), sets.count_total(tree.we)

        assert uow.do(run) == (3, (3, 3, 0), 3)

    def test_first_workout_of_a_plan_gets_index_one(self, service, user_id):
        plan = service.create_workout_plan(user_id, "Fresh")
        workout = service.create_workout(user_id, plan.id, plan.current_cycle_id, "Day 1", index=0)
        assert workout.index == 1
