"""
Unit of work: scoped transactional context propagation.

A transaction is stashed in a ContextVar so repositories pick up the open
session without it being threaded through every call. Each request worker
(thread or task) sees only its own transaction.

    uow.do(fn)              always opens a new transaction; nesting is fatal
    uow.do_if_not_in_tx(fn) joins the ambient transaction when there is one

Events collected with ``accumulate`` during the transaction are handed to
the publisher only after a successful commit. A rollback discards them.
"""
import logging
from contextvars import ContextVar
from typing import Callable, Iterable, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import (
    APIException,
    ConflictError,
    InfrastructureError,
    NestedTransactionError,
    PreconditionError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Transaction:
    """Per-transaction state: the session and the event accumulator."""

    def __init__(self, session: Session):
        self.session = session
        self._events: List = []

    def add_events(self, events: Iterable) -> None:
        self._events.extend(events)

    def drain(self) -> List:
        events, self._events = self._events, []
        return events


_current_tx: ContextVar[Optional[Transaction]] = ContextVar("current_tx", default=None)


def current_transaction() -> Optional[Transaction]:
    return _current_tx.get()


class UnitOfWork:
    def __init__(
        self,
        session_factory: sessionmaker,
        publish: Optional[Callable[..., None]] = None,
    ):
        self._session_factory = session_factory
        self._publish = publish

    def set_publisher(self, publish: Callable[..., None]) -> None:
        self._publish = publish

    @property
    def session(self) -> Session:
        tx = _current_tx.get()
        if tx is None:
            raise PreconditionError("no active unit of work")
        return tx.session

    def in_transaction(self) -> bool:
        return _current_tx.get() is not None

    def accumulate(self, events: Iterable) -> None:
        tx = _current_tx.get()
        if tx is None:
            raise PreconditionError("no active unit of work")
        tx.add_events(events)

    def do(self, fn: Callable[[], T]) -> T:
        if _current_tx.get() is not None:
            raise NestedTransactionError()

        session = self._session_factory()
        tx = Transaction(session)
        token = _current_tx.set(tx)
        try:
            result = fn()
            session.commit()
        except APIException:
            session.rollback()
            raise
        except IntegrityError as e:
            session.rollback()
            logger.info(f"Transaction rolled back on integrity error: {e.orig}")
            raise ConflictError("resource conflicts with an existing record") from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database transaction error: {e}", exc_info=True)
            raise InfrastructureError() from e
        except BaseException:
            session.rollback()
            raise
        finally:
            _current_tx.reset(token)
            session.close()

        events = tx.drain()
        if events and self._publish is not None:
            self._publish(*events)
        return result

    def do_if_not_in_tx(self, fn: Callable[[], T]) -> T:
        if _current_tx.get() is not None:
            return fn()
        return self.do(fn)
