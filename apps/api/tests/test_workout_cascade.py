"""
Completion cascade: set -> workout exercise -> workout -> cycle.

Parent flags are re-derived from child counts after every change:
completed when at least one child exists and none is pending, skipped when
additionally every child is skipped.
"""
import pytest

from domain_events import EVENT_WORKOUT_COMPLETED, WorkoutSetStatusChanged
from models import HandlerLog
from services.workout import resolve_completion
from workout_helpers import complete_all_sets


def _naive(value):
    return value.replace(tzinfo=None) if value is not None else None


def _exercise(service, user_id, tree):
    return service.get_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we)


def _workout(service, user_id, tree):
    return service.get_workout(user_id, tree.plan, tree.cycle, tree.workout)


def _cycle(service, user_id, tree):
    return service.get_workout_cycle(user_id, tree.plan, tree.cycle)


class TestResolveCompletion:
    @pytest.mark.parametrize(
        "total,pending,skipped,expected",
        [
            (0, 0, 0, (False, False)),
            (3, 1, 0, (False, False)),
            (3, 0, 0, (True, False)),
            (3, 0, 1, (True, False)),
            (3, 0, 3, (True, True)),
            (3, 1, 2, (False, False)),
        ],
    )
    def test_flags_from_counts(self, total, pending, skipped, expected):
        assert resolve_completion(total, pending, skipped) == expected


class TestSetCompletion:
    def test_single_set_leaves_parents_pending(self, service, user_id, tree):
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], True)

        we = _exercise(service, user_id, tree)
        assert [s.completed for s in we.workout_sets] == [True, False, False]
        assert we.completed is False
        assert _workout(service, user_id, tree).completed is False
        assert _cycle(service, user_id, tree).completed is False

    def test_all_sets_complete_every_ancestor(self, service, user_id, tree, clock):
        complete_all_sets(service, user_id, tree)

        we = _exercise(service, user_id, tree)
        workout = _workout(service, user_id, tree)
        cycle = _cycle(service, user_id, tree)
        assert (we.completed, we.skipped) == (True, False)
        assert (workout.completed, workout.skipped) == (True, False)
        assert _naive(workout.date) == _naive(clock.now)
        assert (cycle.completed, cycle.skipped) == (True, False)

    def test_completion_stores_energy_summary(self, service, user_id, tree):
        # 3 x (60 kg x 8) at the default 70 kg / 30 years
        complete_all_sets(service, user_id, tree)

        workout = _workout(service, user_id, tree)
        assert workout.estimated_calories == pytest.approx(26.9)
        assert workout.estimated_active_min == pytest.approx(1.2)
        assert workout.estimated_rest_min == pytest.approx(5.3)

    def test_skipping_every_set_skips_the_chain(self, service, user_id, tree):
        for set_id in tree.sets:
            service.complete_workout_set(
                user_id, tree.plan, tree.cycle, tree.workout, tree.we, set_id, False, skipped=True
            )

        we = _exercise(service, user_id, tree)
        workout = _workout(service, user_id, tree)
        cycle = _cycle(service, user_id, tree)
        assert (we.completed, we.skipped) == (True, True)
        assert (workout.completed, workout.skipped) == (True, True)
        assert (cycle.completed, cycle.skipped) == (True, True)
        assert workout.estimated_calories == 0.0

    def test_mixed_skipped_and_completed_is_not_skipped(self, service, user_id, tree):
        service.complete_workout_set(
            user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], False, skipped=True
        )
        for set_id in tree.sets[1:]:
            service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, set_id, True)

        we = _exercise(service, user_id, tree)
        assert (we.completed, we.skipped) == (True, False)
        assert _workout(service, user_id, tree).skipped is False

    def test_completed_wins_over_skipped(self, service, user_id, tree):
        workout_set = service.complete_workout_set(
            user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], True, skipped=True
        )
        assert (workout_set.completed, workout_set.skipped) == (True, False)

    def test_reopening_a_set_reopens_the_chain(self, service, user_id, tree, clock):
        complete_all_sets(service, user_id, tree)
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[1], False)

        we = _exercise(service, user_id, tree)
        workout = _workout(service, user_id, tree)
        assert (we.completed, we.skipped) == (False, False)
        assert (workout.completed, workout.skipped) == (False, False)
        assert _naive(workout.date) == _naive(clock.now)
        assert _cycle(service, user_id, tree).completed is False

    def test_deleting_last_pending_set_completes_exercise(self, service, user_id, tree):
        for set_id in tree.sets[:2]:
            service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, set_id, True)
        service.delete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[2])

        assert _exercise(service, user_id, tree).completed is True
        assert _workout(service, user_id, tree).completed is True

    def test_new_exercise_reopens_completed_workout(self, service, user_id, tree):
        complete_all_sets(service, user_id, tree)
        service.create_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.ie, 2)

        assert _workout(service, user_id, tree).completed is False
        assert _cycle(service, user_id, tree).completed is False

    def test_second_pending_workout_keeps_cycle_open(self, service, user_id, tree):
        service.create_workout(user_id, tree.plan, tree.cycle, "Pull day")
        complete_all_sets(service, user_id, tree)

        assert _workout(service, user_id, tree).completed is True
        assert _cycle(service, user_id, tree).completed is False


class TestExerciseCompletion:
    def test_completing_exercise_completes_all_sets(self, service, user_id, tree):
        we = service.complete_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we, True)

        assert all(s.completed for s in we.workout_sets)
        assert we.completed is True
        assert _workout(service, user_id, tree).completed is True

    def test_skipping_exercise_keeps_completed_sets(self, service, user_id, tree):
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], True)
        we = service.complete_workout_exercise(
            user_id, tree.plan, tree.cycle, tree.workout, tree.we, False, skipped=True
        )

        assert [(s.completed, s.skipped) for s in we.workout_sets] == [(True, False), (False, True), (False, True)]
        assert (we.completed, we.skipped) == (True, False)

    def test_reopening_exercise_resets_all_sets(self, service, user_id, tree):
        service.complete_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we, True)
        we = service.complete_workout_exercise(user_id, tree.plan, tree.cycle, tree.workout, tree.we, False)

        assert all(s.pending for s in we.workout_sets)
        assert we.completed is False
        assert _workout(service, user_id, tree).completed is False


class TestWorkoutCompletion:
    def test_complete_workout_returns_calories(self, service, user_id, tree):
        for set_id in tree.sets:
            service.update_workout_set(
                user_id, tree.plan, tree.cycle, tree.workout, tree.we, set_id, weight=60.0, reps=8
            )

        workout, calories = service.complete_workout(user_id, tree.plan, tree.cycle, tree.workout, True)

        assert workout.completed is True
        assert calories == pytest.approx(26.9)
        assert all(s.completed for we in workout.workout_exercises for s in we.workout_sets)

    def test_skip_workout_skips_only_pending(self, service, user_id, tree):
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], True)

        workout, _ = service.complete_workout(user_id, tree.plan, tree.cycle, tree.workout, False, skipped=True)

        sets = workout.workout_exercises[0].workout_sets
        assert [(s.completed, s.skipped) for s in sets] == [(True, False), (False, True), (False, True)]
        assert (workout.completed, workout.skipped) == (True, False)

    def test_reopen_workout_resets_everything(self, service, user_id, tree):
        service.complete_workout(user_id, tree.plan, tree.cycle, tree.workout, True)

        workout, calories = service.complete_workout(user_id, tree.plan, tree.cycle, tree.workout, False)

        assert calories == 0.0
        assert workout.completed is False
        assert all(s.pending for we in workout.workout_exercises for s in we.workout_sets)
        assert all(not we.completed for we in workout.workout_exercises)

    def test_empty_workout_cannot_complete(self, service, user_id, plan):
        workout = service.create_workout(user_id, plan.id, plan.current_cycle_id, "Rest day")

        workout, calories = service.complete_workout(user_id, plan.id, plan.current_cycle_id, workout.id, True)

        assert (workout.completed, workout.skipped) == (False, False)
        assert calories == 0.0


class TestCompletionEvents:
    def test_workout_completed_published_once_per_transition(self, container, service, user_id, tree):
        received = []
        container.bus.subscribe(EVENT_WORKOUT_COMPLETED, received.append)

        complete_all_sets(service, user_id, tree)
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], True)

        assert len(received) == 1
        assert received[0].workout_id == tree.workout
        assert received[0].first is True

    def test_recompletion_is_not_first(self, container, service, user_id, tree):
        received = []
        container.bus.subscribe(EVENT_WORKOUT_COMPLETED, received.append)

        complete_all_sets(service, user_id, tree)
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], False)
        service.complete_workout_set(user_id, tree.plan, tree.cycle, tree.workout, tree.we, tree.sets[0], True)

        assert [e.first for e in received] == [True, False]

    def test_summary_handler_ignores_redelivery(self, container, service, user_id, uow, tree):
        received = []
        container.bus.subscribe(EVENT_WORKOUT_COMPLETED, received.append)
        complete_all_sets(service, user_id, tree)

        container.bus.publish(received[0])
        container.bus.publish(received[0])

        rows = uow.do(lambda: uow.session.query(HandlerLog).all())
        assert [(r.handler_name, r.entity_key) for r in rows] == [("workout.summary", received[0].event_id)]

    def test_replaying_status_event_is_idempotent(self, container, service, user_id, uow, tree):
        complete_all_sets(service, user_id, tree)
        event = WorkoutSetStatusChanged(
            user_id=user_id,
            plan_id=tree.plan,
            cycle_id=tree.cycle,
            workout_id=tree.workout,
            workout_exercise_id=tree.we,
            completed=True,
        )

        uow.do(lambda: container.dispatcher.dispatch([event, event]))

        we = _exercise(service, user_id, tree)
        workout = _workout(service, user_id, tree)
        assert (we.completed, we.skipped) == (True, False)
        assert (workout.completed, workout.skipped) == (True, False)
        assert _cycle(service, user_id, tree).completed is True
