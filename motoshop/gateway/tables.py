"""
Tabular storage on the platform's Postgres, reached through SQLAlchemy.

Every method is one request/response round trip: a session is opened,
the statement runs, the session closes. Rows come back as plain dicts so
nothing outlives its session.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple
import logging

from sqlalchemy import delete, func, or_, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from motoshop.core.errors import GatewayError, NotFoundError

logger = logging.getLogger(__name__)


class OrderBy(NamedTuple):
    column: str
    descending: bool = False
    nulls_last: bool = False


# (search text, columns to ILIKE-match against, OR'ed together)
SearchFilter = Tuple[str, Sequence[str]]


class TableStore:
    """Select / insert / update / delete against the platform tables."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            message = str(getattr(e, "orig", None) or e)
            logger.warning(f"Table call failed: {message}")
            raise GatewayError(message) from e
        finally:
            db.close()

    @staticmethod
    def _where(model, eq=None, search: Optional[SearchFilter] = None, gte=None) -> list:
        clauses = []
        for column, value in (eq or {}).items():
            clauses.append(getattr(model, column) == value)
        if search and search[0]:
            pattern = f"%{search[0]}%"
            clauses.append(or_(*[getattr(model, c).ilike(pattern) for c in search[1]]))
        for column, value in (gte or {}).items():
            clauses.append(getattr(model, column) >= value)
        return clauses

    def select(
        self,
        model,
        *,
        columns: Optional[Sequence[str]] = None,
        eq: Optional[Dict[str, Any]] = None,
        search: Optional[SearchFilter] = None,
        gte: Optional[Dict[str, Any]] = None,
        order_by: Sequence[OrderBy] = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Select rows, optionally projected to ``columns``, filtered, ordered and ranged."""
        if columns:
            selected = [getattr(model, c) for c in columns]
        else:
            selected = list(model.__table__.columns)
        stmt = select(*selected).where(*self._where(model, eq, search, gte))
        for order in order_by:
            column = getattr(model, order.column)
            clause = column.desc() if order.descending else column.asc()
            if order.nulls_last:
                clause = clause.nulls_last()
            stmt = stmt.order_by(clause)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        with self._session() as db:
            return [dict(row) for row in db.execute(stmt).mappings().all()]

    def get(self, model, row_id: Any, *, eq: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        rows = self.select(model, eq={"id": row_id, **(eq or {})}, limit=1)
        if not rows:
            raise NotFoundError(f"{model.__tablename__} row {row_id} not found")
        return rows[0]

    def count(
        self,
        model,
        *,
        eq: Optional[Dict[str, Any]] = None,
        search: Optional[SearchFilter] = None,
        gte: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Exact row count for the given filters."""
        stmt = select(func.count()).select_from(model).where(*self._where(model, eq, search, gte))
        with self._session() as db:
            return db.execute(stmt).scalar_one()

    def distinct(self, model, column: str, *, eq: Optional[Dict[str, Any]] = None) -> List[Any]:
        """Distinct non-null values of ``column``, ascending."""
        col = getattr(model, column)
        stmt = (
            select(col).distinct()
            .where(col.is_not(None), *self._where(model, eq))
            .order_by(col)
        )
        with self._session() as db:
            return list(db.execute(stmt).scalars().all())

    def insert(self, model, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        with self._session() as db:
            row = model(**values)
            db.add(row)
            db.commit()
            db.refresh(row)
            return {c.key: getattr(row, c.key) for c in model.__table__.columns}

    def update(
        self,
        model,
        row_id: Any,
        values: Dict[str, Any],
        *,
        eq: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Update one row by id. ``eq`` narrows the match (e.g. to the owner)."""
        stmt = (
            update(model)
            .where(model.id == row_id, *self._where(model, eq))
            .values(**values)
        )
        with self._session() as db:
            result = db.execute(stmt)
            db.commit()
            if result.rowcount == 0:
                raise NotFoundError(f"{model.__tablename__} row {row_id} not found")
        return self.get(model, row_id)

    def delete(self, model, row_id: Any, *, eq: Optional[Dict[str, Any]] = None) -> None:
        stmt = delete(model).where(model.id == row_id, *self._where(model, eq))
        with self._session() as db:
            result = db.execute(stmt)
            db.commit()
            if result.rowcount == 0:
                raise NotFoundError(f"{model.__tablename__} row {row_id} not found")

    def rpc(self, function_name: str) -> List[Dict[str, Any]]:
        """Call a set-returning server procedure and return its rows."""
        if not function_name.isidentifier():
            raise ValueError(f"Invalid procedure name: {function_name}")
        stmt = text(f"SELECT * FROM {function_name}()")
        with self._session() as db:
            return [dict(row) for row in db.execute(stmt).mappings().all()]

    def ping(self) -> None:
        """Round trip used by the health check."""
        with self._session() as db:
            db.execute(text("SELECT 1"))
