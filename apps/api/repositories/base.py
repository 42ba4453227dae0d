"""
Shared repository plumbing.

Repositories never open transactions; they read the session from the active
unit of work. Every write flushes immediately, and every read refreshes
identity-map rows (``populate_existing``) so that bulk UPDATE statements
issued earlier in the same transaction are always visible.
"""
from typing import Any, Optional, Tuple

from sqlalchemy import case, func
from sqlalchemy.orm import Query, Session

from core.exceptions import NotFoundError
from core.unit_of_work import UnitOfWork


class BaseRepository:
    model: Any = None
    resource: str = "Resource"

    def __init__(self, uow: UnitOfWork):
        self._uow = uow

    @property
    def db(self) -> Session:
        return self._uow.session

    def _query(self, *entities) -> Query:
        return self.db.query(*(entities or (self.model,))).populate_existing()

    def _one(self, query: Query, identifier: Any = None):
        row = query.one_or_none()
        if row is None:
            raise NotFoundError(self.resource, identifier)
        return row

    def _ensure(self, scope, identifier: Any = None) -> None:
        if not self.db.query(scope.exists()).scalar():
            raise NotFoundError(self.resource, identifier)

    def exists(self, row_id: int) -> bool:
        return bool(self.db.query(self.model.id).filter(self.model.id == row_id).first())

    def _update_by_id(self, row_id: int, values: dict) -> None:
        updated = (
            self.db.query(self.model)
            .filter(self.model.id == row_id)
            .update(values, synchronize_session=False)
        )
        if updated == 0:
            raise NotFoundError(self.resource, row_id)

    def _delete_by_id(self, row_id: int) -> None:
        deleted = (
            self.db.query(self.model)
            .filter(self.model.id == row_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            raise NotFoundError(self.resource, row_id)

    def add(self, row):
        self.db.add(row)
        self.db.flush()
        return row

    def save(self, row):
        self.db.flush()
        return row

    def remove(self, row) -> None:
        self.db.delete(row)
        self.db.flush()


class IndexedRepositoryMixin:
    """
    Contiguous ``index`` maintenance for children of a single parent.

    Subclasses set ``parent_attr`` to the name of the foreign key attribute
    naming the parent (cycle for workouts, workout for exercises, exercise
    for sets). Mapped attributes are descriptors, so only the name is kept
    on the class and the column is resolved against ``model``.
    """

    parent_attr: str = ""

    @property
    def parent_column(self):
        return getattr(self.model, self.parent_attr)

    def get_max_index(self, parent_id: int) -> int:
        value = (
            self.db.query(func.coalesce(func.max(self.model.index), 0))
            .filter(self.parent_column == parent_id)
            .scalar()
        )
        return int(value or 0)

    def increment_indexes_after(self, parent_id: int, index: int) -> None:
        """Shift every sibling at or after ``index`` one slot down."""
        self.db.query(self.model).filter(
            self.parent_column == parent_id,
            self.model.index >= index,
        ).update({self.model.index: self.model.index + 1}, synchronize_session=False)

    def decrement_indexes_after(self, parent_id: int, index: int) -> None:
        """Close the gap left by a deleted sibling."""
        self.db.query(self.model).filter(
            self.parent_column == parent_id,
            self.model.index > index,
        ).update({self.model.index: self.model.index - 1}, synchronize_session=False)

    def swap_by_index(self, parent_id: int, index_a: int, index_b: int) -> Tuple[int, int]:
        """
        Swap the positions of the two siblings at ``index_a`` and ``index_b``.

        Both rows are locked lowest id first, then swapped with a single
        CASE update. Raises NotFoundError when either slot is empty.
        """
        rows = (
            self.db.query(self.model.id, self.model.index)
            .filter(
                self.parent_column == parent_id,
                self.model.index.in_([index_a, index_b]),
            )
            .order_by(self.model.id.asc())
            .with_for_update()
            .all()
        )
        if len(rows) != 2 or rows[0].index == rows[1].index:
            raise NotFoundError(self.resource, f"index {index_b}")

        by_index = {row.index: row.id for row in rows}
        id_a, id_b = by_index[index_a], by_index[index_b]
        self.db.query(self.model).filter(self.model.id.in_([id_a, id_b])).update(
            {
                self.model.index: case(
                    (self.model.id == id_a, index_b),
                    (self.model.id == id_b, index_a),
                    else_=self.model.index,
                )
            },
            synchronize_session=False,
        )
        return id_a, id_b

    def count_statuses(self, parent_id: int) -> Tuple[int, int, int]:
        """Return ``(total, pending, skipped)`` for the children of ``parent_id``."""
        pending_expr = func.sum(
            case(((self.model.completed.is_(False)) & (self.model.skipped.is_(False)), 1), else_=0)
        )
        skipped_expr = func.sum(case((self.model.skipped.is_(True), 1), else_=0))
        total, pending, skipped = (
            self.db.query(func.count(self.model.id), pending_expr, skipped_expr)
            .filter(self.parent_column == parent_id)
            .one()
        )
        return int(total or 0), int(pending or 0), int(skipped or 0)

    def count_total(self, parent_id: int) -> int:
        return int(
            self.db.query(func.count(self.model.id)).filter(self.parent_column == parent_id).scalar() or 0
        )

    def resolve_insert_index(self, parent_id: int, index: Optional[int]) -> int:
        """
        Position for a new child.

        Without an explicit index (or with one below 1) the child is appended.
        An explicit index is clamped to ``max + 1`` and the siblings at or after
        it are shifted to make room.
        """
        max_index = self.get_max_index(parent_id)
        if index is None or index < 1 or index > max_index:
            return max_index + 1
        self.increment_indexes_after(parent_id, index)
        return index
