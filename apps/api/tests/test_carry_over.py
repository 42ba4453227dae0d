"""
Carry-over: new sets are pre-filled from the individual exercise's most
recently completed workout exercise.
"""
import pytest

from core.exceptions import ValidationError
from services.workout import PreviousSet


LOGGED = [(50.0, 10), (60.0, 8), (70.0, 6)]


def _log_and_complete(service, user_id, tree, values=LOGGED):
    for set_id, (weight, reps) in zip(tree.sets, values):
        service.update_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, set_id, weight=weight, reps=reps)
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, set_id, True)


def _last_completed(service, user_id, tree):
    return service.get_individual_exercise(user_id, tree.ie).last_completed_workout_exercise_id


class TestCarryOverValues:
    def test_first_exercise_has_no_previous_values(self, service, user_id, tree):
        we = service.get_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we)
        assert all(s.previous_weight is None and s.previous_reps is None for s in we.workout_sets)

    def test_completion_records_last_completed_exercise(self, service, user_id, tree):
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], True)
        assert _last_completed(service, user_id, tree) == tree.we

    def test_new_exercise_copies_positions_and_repeats_last(self, service, user_id, tree):
        _log_and_complete(service, user_id, tree)
        workout = service.create_workout(user_id, tree.plan, tree.cycle, "Push day 2")

        we = service.create_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, tree.ie, 4)

        assert [(s.previous_weight, s.previous_reps) for s in we.workout_sets] == [
            (50.0, 10),
            (60.0, 8),
            (70.0, 6),
            (70.0, 6),
        ]
        assert all(s.weight is None for s in we.workout_sets)

    def test_added_set_takes_previous_at_its_position(self, service, user_id, tree):
        _log_and_complete(service, user_id, tree)
        workout = service.create_workout(user_id, tree.plan, tree.cycle, "Push day 2")
        we = service.create_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, tree.ie, 1)

        added = service.create_workout_set(user_id, tree.plan, tree.cycle, workout.id, we.id)

        assert added.index == 2
        assert (added.previous_weight, added.previous_reps) == (60.0, 8)

    def test_completing_next_exercise_links_chain(self, service, user_id, tree):
        _log_and_complete(service, user_id, tree)
        workout = service.create_workout(user_id, tree.plan, tree.cycle, "Push day 2")
        we = service.create_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, tree.ie, 2)

        completed = service.complete_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, we.id, True)

        assert completed.previous_exercise_id == tree.we
        assert _last_completed(service, user_id, tree) == we.id


class TestGetPreviousSets:
    def test_values_for_requested_quantity(self, service, user_id, tree):
        _log_and_complete(service, user_id, tree)

        previous = service.get_previous_sets(user_id, tree.ie, 2)

        assert previous == [PreviousSet(weight=50.0, reps=10), PreviousSet(weight=60.0, reps=8)]

    def test_no_history_is_empty(self, service, user_id, tree):
        assert service.get_previous_sets(user_id, tree.ie, 3) == []

    def test_unknown_or_foreign_exercise_is_empty(self, service, user_id, other_user_id, tree):
        _log_and_complete(service, user_id, tree)

        assert service.get_previous_sets(user_id, 9999, 3) == []
        assert service.get_previous_sets(other_user_id, tree.ie, 3) == []

    def test_quantity_is_validated(self, service, user_id, tree):
        with pytest.raises(ValidationError):
            service.get_previous_sets(user_id, tree.ie, 0)


class TestCarryOverRewiring:
    def test_deleting_latest_exercise_restores_its_source(self, service, user_id, tree):
        _log_and_complete(service, user_id, tree)
        workout = service.create_workout(user_id, tree.plan, tree.cycle, "Push day 2")
        we = service.create_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, tree.ie, 2)
        service.complete_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, we.id, True)

        service.delete_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, we.id)

        assert _last_completed(service, user_id, tree) == tree.we

    def test_deleting_only_history_clears_pointer(self, service, user_id, tree):
        _log_and_complete(service, user_id, tree)

        service.delete_workout(user_id, tree.plan, tree.cycle, tree.workout)

        assert _last_completed(service, user_id, tree) is None
        assert service.get_previous_sets(user_id, tree.ie, 3) == []

    def test_deleting_older_exercise_keeps_pointer(self, service, user_id, tree):
        _log_and_complete(service, user_id, tree)
        workout = service.create_workout(user_id, tree.plan, tree.cycle, "Push day 2")
        we = service.create_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, tree.ie, 2)
        service.complete_workout_exercise(user_id, tree.plan, tree.cycle, workout.id, we.id, True)

        service.delete_workout(user_id, tree.plan, tree.cycle, tree.workout)

        assert _last_completed(service, user_id, tree) == we.id
