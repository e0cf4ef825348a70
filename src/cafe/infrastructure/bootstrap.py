"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from cafe.application.fulfillment_engine import OrderFulfillmentEngine
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.menu_catalog import MenuCatalog
from cafe.domain.repository.order_store import OrderStore
from cafe.domain.repository.unit_of_work import UnitOfWork
from cafe.infrastructure.config import Settings
from cafe.infrastructure.persistence.json_inventory_ledger import JsonInventoryLedger
from cafe.infrastructure.persistence.json_menu_catalog import JsonMenuCatalog
from cafe.infrastructure.persistence.json_order_store import JsonOrderStore
from cafe.infrastructure.persistence.json_store import JsonDocumentStore
from cafe.infrastructure.persistence.sql_database import SqlDatabase
from cafe.infrastructure.persistence.sql_inventory_ledger import SqlInventoryLedger
from cafe.infrastructure.persistence.sql_menu_catalog import SqlMenuCatalog
from cafe.infrastructure.persistence.sql_order_store import SqlOrderStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Container:
    menu: MenuCatalog
    inventory: InventoryLedger
    orders: OrderStore
    unit_of_work: UnitOfWork
    engine: OrderFulfillmentEngine


def build_container(settings: Settings) -> Container:
    if settings.storage == "sql":
        database = SqlDatabase(settings.resolved_database_url)
        if database.engine.dialect.name == "sqlite":
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        database.create_schema()
        menu: MenuCatalog = SqlMenuCatalog(database)
        inventory: InventoryLedger = SqlInventoryLedger(database)
        orders: OrderStore = SqlOrderStore(database)
        unit_of_work: UnitOfWork = database
    else:
        store = JsonDocumentStore(settings.json_path)
        menu = JsonMenuCatalog(store)
        inventory = JsonInventoryLedger(store)
        orders = JsonOrderStore(store)
        unit_of_work = store

    logger.debug("Storage ready", storage=settings.storage)
    return Container(
        menu=menu,
        inventory=inventory,
        orders=orders,
        unit_of_work=unit_of_work,
        engine=OrderFulfillmentEngine(menu, inventory, orders, unit_of_work),
    )
