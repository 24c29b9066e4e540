"""
Repository layer for transportation orders.
Provides a lookup interface keyed by truck id, backed either by a database
or by an in-memory dict.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from .models import TransportationOrder
from .schemas import AppConfig


logger = logging.getLogger(__name__)


class DuplicateOrderError(ValueError):
    """An order id is already held by another truck."""

    def __init__(self, message: str, toid: Optional[str] = None):
        self.toid = toid
        super().__init__(message)


class OrderRepository(ABC):
    """Lookup abstraction over order records, keyed by truck id."""

    @abstractmethod
    def find_all(self) -> List[TransportationOrder]:
        """Return every stored order."""

    @abstractmethod
    def find_by_id(self, truck: str) -> Optional[TransportationOrder]:
        """Return the order for a truck, or None if there is none."""

    @abstractmethod
    def save(self, order: TransportationOrder) -> TransportationOrder:
        """
        Insert an order, replacing any existing one for the same truck.

        Raises DuplicateOrderError if another truck already holds its toid.
        """

    @abstractmethod
    def save_all(self, orders: Iterable[TransportationOrder]) -> int:
        """Save several orders, all or none; returns how many were saved."""

    @abstractmethod
    def replace_all(self, orders: Iterable[TransportationOrder]) -> Tuple[int, int]:
        """
        Swap the whole store for the given orders, all or none.

        Returns (orders removed, orders saved). On failure the previous
        contents are left in place.
        """

    @abstractmethod
    def count(self) -> int:
        """Number of stored orders."""

    @abstractmethod
    def delete_all(self) -> int:
        """Remove every order; returns how many were removed."""

    def health_check(self) -> bool:
        return True


class DatabaseRepository(OrderRepository):
    """SQLModel-backed order repository."""

    def __init__(self, config: AppConfig):
        """Initialize database connection."""
        self.config = config
        url = config.database.url
        engine_kwargs = {"echo": config.database.echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory databases live in a single connection
            if url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **engine_kwargs)

    def create_tables(self) -> None:
        """Create all database tables."""
        SQLModel.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get database session."""
        return Session(self.engine)

    def find_all(self) -> List[TransportationOrder]:
        with self.get_session() as session:
            return list(session.exec(select(TransportationOrder)).all())

    def find_by_id(self, truck: str) -> Optional[TransportationOrder]:
        with self.get_session() as session:
            return session.get(TransportationOrder, truck)

    def save(self, order: TransportationOrder) -> TransportationOrder:
        with self.get_session() as session:
            try:
                merged = session.merge(order)
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateOrderError(f"Order {order.toid} rejected: {e.orig}", order.toid) from e
            session.refresh(merged)
            return merged

    def save_all(self, orders: Iterable[TransportationOrder]) -> int:
        """Save several orders in one transaction."""
        saved = 0
        with self.get_session() as session:
            try:
                for order in orders:
                    session.merge(order)
                    saved += 1
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateOrderError(f"Orders rejected: {e.orig}") from e
        return saved

    def replace_all(self, orders: Iterable[TransportationOrder]) -> Tuple[int, int]:
        """Delete and reload the table in one transaction."""
        saved = 0
        with self.get_session() as session:
            try:
                deleted_count = session.exec(delete(TransportationOrder)).rowcount
                for order in orders:
                    session.merge(order)
                    saved += 1
                session.commit()
            except IntegrityError as e:
                session.rollback()
                raise DuplicateOrderError(f"Orders rejected: {e.orig}") from e
        return deleted_count, saved

    def count(self) -> int:
        with self.get_session() as session:
            return session.exec(
                select(func.count()).select_from(TransportationOrder)
            ).one()

    def delete_all(self) -> int:
        with self.get_session() as session:
            deleted_count = session.exec(delete(TransportationOrder)).rowcount
            session.commit()
            return deleted_count

    def health_check(self) -> bool:
        """Check if database is accessible."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {e}")
            return False


class InMemoryRepository(OrderRepository):
    """Dict-backed order repository, used for tests and fixture-only runs."""

    def __init__(self, orders: Optional[Iterable[TransportationOrder]] = None):
        self._orders: Dict[str, TransportationOrder] = {}
        if orders:
            self.save_all(orders)

    def find_all(self) -> List[TransportationOrder]:
        return list(self._orders.values())

    def find_by_id(self, truck: str) -> Optional[TransportationOrder]:
        return self._orders.get(truck)

    @staticmethod
    def _put(orders: Dict[str, TransportationOrder], order: TransportationOrder) -> None:
        for held in orders.values():
            if held.toid == order.toid and held.truck != order.truck:
                raise DuplicateOrderError(
                    f"Order {order.toid} already belongs to truck {held.truck}", order.toid
                )
        orders[order.truck] = order

    def save(self, order: TransportationOrder) -> TransportationOrder:
        self._put(self._orders, order)
        return order

    def save_all(self, orders: Iterable[TransportationOrder]) -> int:
        staged = dict(self._orders)
        saved = 0
        for order in orders:
            self._put(staged, order)
            saved += 1
        self._orders = staged
        return saved

    def replace_all(self, orders: Iterable[TransportationOrder]) -> Tuple[int, int]:
        staged: Dict[str, TransportationOrder] = {}
        saved = 0
        for order in orders:
            self._put(staged, order)
            saved += 1
        deleted_count = len(self._orders)
        self._orders = staged
        return deleted_count, saved

    def count(self) -> int:
        return len(self._orders)

    def delete_all(self) -> int:
        deleted_count = len(self._orders)
        self._orders.clear()
        return deleted_count
