"""Relational unit of work on SQLAlchemy Core.

Works with any SQLAlchemy URL; SQLite is the default.  On SQLite the
pysqlite driver's own transaction handling is switched off so that
write scopes start with ``BEGIN IMMEDIATE`` (writers queue up on the
busy timeout instead of failing with a lock upgrade error) and foreign
keys are enforced.  On PostgreSQL the guarded updates take row locks.

Ingredient amounts are stored as integer units of 10**-4 so the guarded
stock update compares and subtracts exactly on every dialect; SQLite has
no decimal type and would do it in floating point.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from cafe.domain.exceptions import InfrastructureError
from cafe.domain.model.value_objects import AMOUNT_PLACES, normalize_amount
from cafe.domain.repository.unit_of_work import TransactionalScope, UnitOfWork


def to_units(amount: Decimal | int) -> int:
    units = Decimal(amount).scaleb(AMOUNT_PLACES)
    if units != units.to_integral_value():
        raise ValueError(f"{amount} has more than {AMOUNT_PLACES} decimal places")
    return int(units)


class FixedPoint(sa.types.TypeDecorator):
    """Decimal amount kept as a BIGINT count of 10**-4 units."""

    impl = sa.BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else to_units(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return normalize_amount(Decimal(value).scaleb(-AMOUNT_PLACES))


metadata = sa.MetaData()

menu_items = sa.Table(
    "menu_items",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("description", sa.Text, nullable=False, default=""),
    sa.Column("price", sa.Numeric(10, 2), nullable=False),
    sa.Column("currency", sa.String(3), nullable=False, default="USD"),
    sa.CheckConstraint("price > 0", name="ck_menu_items_price_positive"),
)

inventory = sa.Table(
    "inventory",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("name", sa.String(255), nullable=False),
    sa.Column("quantity", FixedPoint, nullable=False),
    sa.Column("unit", sa.String(32), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
)

menu_item_ingredients = sa.Table(
    "menu_item_ingredients",
    metadata,
    sa.Column(
        "product_id",
        sa.Integer,
        sa.ForeignKey("menu_items.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    sa.Column(
        "ingredient_id",
        sa.Integer,
        sa.ForeignKey("inventory.id"),
        primary_key=True,
    ),
    sa.Column("position", sa.Integer, nullable=False),
    sa.Column("quantity", FixedPoint, nullable=False),
)

orders = sa.Table(
    "orders",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("customer_name", sa.String(255), nullable=False),
    sa.Column("status", sa.String(16), nullable=False),
    sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
    sa.Column("currency", sa.String(3), nullable=False, default="USD"),
    sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    sa.Column("idempotency_key", sa.String(128), nullable=True, unique=True),
)

# product_id is not a foreign key: orders outlive the menu items they name.
order_items = sa.Table(
    "order_items",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column(
        "order_id",
        sa.Integer,
        sa.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    sa.Column("position", sa.Integer, nullable=False),
    sa.Column("product_id", sa.Integer, nullable=False),
    sa.Column("product_name", sa.String(255), nullable=False),
    sa.Column("quantity", sa.Integer, nullable=False),
    sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
    sa.Column("recipe", sa.JSON, nullable=False),
)


class SqlScope(TransactionalScope):

    def __init__(self, connection: Connection) -> None:
        self.connection = connection
        try:
            self._transaction = connection.begin()
        except BaseException:
            connection.close()
            raise

    def commit(self) -> None:
        try:
            self._transaction.commit()
        finally:
            self.connection.close()

    def rollback(self) -> None:
        try:
            if self._transaction.is_active:
                self._transaction.rollback()
        finally:
            self.connection.close()


class SqlDatabase(UnitOfWork):

    def __init__(self, url: str, echo: bool = False, busy_timeout: float = 30.0) -> None:
        connect_args: dict = {}
        if url.startswith("sqlite"):
            connect_args["timeout"] = busy_timeout
        self.engine: Engine = sa.create_engine(url, echo=echo, connect_args=connect_args)
        if self.engine.dialect.name == "sqlite":
            _configure_sqlite(self.engine)

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    # --- UnitOfWork interface -------------------------------------------------

    def begin(self) -> SqlScope:
        connection = self.engine.connect().execution_options(cafe_write=True)
        return SqlScope(connection)

    # --- Helpers for the repositories -----------------------------------------

    @contextmanager
    def read(self) -> Iterator[Connection]:
        try:
            with self.engine.connect() as connection:
                yield connection
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Database read failed: {exc}") from exc

    @contextmanager
    def write(self) -> Iterator[Connection]:
        """Short write outside the order flow (menu/inventory commands).

        Driver errors come out as InfrastructureError; a failed commit is
        flagged ``outcome_unknown``.
        """
        try:
            scope = self.begin()
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Failed to start transaction: {exc}") from exc
        try:
            yield scope.connection
        except SQLAlchemyError as exc:
            scope.rollback()
            raise InfrastructureError(f"Database write failed: {exc}") from exc
        except BaseException:
            scope.rollback()
            raise
        try:
            scope.commit()
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Commit failed: {exc}", outcome_unknown=True) from exc

    @staticmethod
    def connection_of(scope: TransactionalScope) -> Connection:
        if not isinstance(scope, SqlScope):
            raise TypeError(f"Expected a SqlScope, got {type(scope).__name__}")
        return scope.connection


def utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _configure_sqlite(engine: Engine) -> None:

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let the "begin" hook below emit BEGIN instead of pysqlite.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get("cafe_write"):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")
