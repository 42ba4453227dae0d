"""
Service wiring.

Built once per process (API startup, test fixture): both event
registries are filled here and never written afterwards.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import sessionmaker

from core.config import settings
from core.events import DomainEventDispatcher, EventBus
from core.unit_of_work import UnitOfWork
from domain_events import EVENT_WORKOUT_COMPLETED, WorkoutCompleted
from services.exercise_catalog import ExerciseCatalogService
from services.workout import CompletionCascade, WorkoutService, WorkoutSummaryService, try_process

logger = logging.getLogger(__name__)

SUMMARY_HANDLER = "workout.summary"


@dataclass
class ServiceContainer:
    uow: UnitOfWork
    dispatcher: DomainEventDispatcher
    bus: EventBus
    summary: WorkoutSummaryService
    workouts: WorkoutService
    catalog: ExerciseCatalogService


def build_container(session_factory: sessionmaker, clock=None, max_sets_per_exercise: Optional[int] = None) -> ServiceContainer:
    dispatcher = DomainEventDispatcher()
    bus = EventBus()
    uow = UnitOfWork(session_factory)
    uow.set_publisher(bus.publish)

    summary = WorkoutSummaryService(
        uow,
        default_weight_kg=settings.DEFAULT_USER_WEIGHT_KG,
        default_age=settings.DEFAULT_USER_AGE,
    )
    CompletionCascade(uow, dispatcher, summary).register()

    def on_workout_completed(event: WorkoutCompleted) -> None:
        try_process(
            uow,
            SUMMARY_HANDLER,
            event.event_type,
            event.event_id,
            lambda: summary.calculate(event.user_id, event.workout_id),
        )

    bus.subscribe(EVENT_WORKOUT_COMPLETED, on_workout_completed)

    workouts = WorkoutService(
        uow,
        dispatcher,
        summary,
        max_sets_per_exercise=max_sets_per_exercise or settings.MAX_SETS_PER_EXERCISE,
        clock=clock,
    )
    logger.debug("Service container built")
    return ServiceContainer(
        uow=uow,
        dispatcher=dispatcher,
        bus=bus,
        summary=summary,
        workouts=workouts,
        catalog=ExerciseCatalogService(uow),
    )


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency: the container built at startup."""
    return request.app.state.container


def get_workout_service(request: Request) -> WorkoutService:
    return get_container(request).workouts


def get_catalog_service(request: Request) -> ExerciseCatalogService:
    return get_container(request).catalog
