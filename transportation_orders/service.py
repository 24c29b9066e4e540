"""
Service layer for transportation orders.
Owns configuration, logging setup and the repository used by the API and CLI.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from sqlalchemy.exc import SQLAlchemyError

from .loader import OrderFileError, iter_order_lines, read_orders
from .models import TransportationOrder
from .repo import DatabaseRepository, DuplicateOrderError, OrderRepository
from .schemas import AppConfig, ImportStatsResponse, Settings


logger = logging.getLogger(__name__)


class OrderNotFoundError(LookupError):
    """No order is stored for the requested truck."""

    def __init__(self, truck: str):
        self.truck = truck
        super().__init__(f"No transportation order found for truck {truck}")


def load_config(config_path: Union[str, Path], settings: Optional[Settings] = None) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    path = Path(config_path)
    if path.exists():
        try:
            with open(path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
            config = AppConfig(**config_data)
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise
    else:
        logger.warning(f"Configuration file {path} not found, using defaults")
        config = AppConfig()

    if settings and settings.database_url:
        config.database.url = settings.database_url
    return config


class TransportationOrderService:
    """Read access to transportation orders plus bulk loading."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        repo: Optional[OrderRepository] = None,
    ):
        """Initialize service with configuration and an optional repository."""
        self.config = config or AppConfig()
        self._setup_logging()

        if repo is None:
            db_repo = DatabaseRepository(self.config)
            db_repo.create_tables()
            repo = db_repo
        self.repo = repo

        if self.config.data.load_on_startup:
            self._initialize_seed_data()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TransportationOrderService":
        """Build a service from environment settings and the YAML file they name."""
        settings = settings or Settings()
        return cls(load_config(settings.config_path, settings))

    def _setup_logging(self) -> None:
        """Setup logging configuration."""
        level = getattr(logging, self.config.logging.level)
        logging.basicConfig(
            level=level,
            format=self.config.logging.format
        )
        logging.getLogger().setLevel(level)

    def _initialize_seed_data(self) -> None:
        """Load the seed file when the store is still empty."""
        seed_file = self.config.data.seed_file
        if not seed_file:
            logger.warning("load_on_startup is set but no seed_file is configured")
            return
        if self.repo.count() > 0:
            logger.info("Order store already populated, skipping seed data")
            return

        orders = read_orders(seed_file)
        saved = self.repo.save_all(orders)
        logger.info(f"Seed data initialized: {saved} orders from {seed_file}")

    def list_orders(self) -> List[TransportationOrder]:
        """Get all orders."""
        return self.repo.find_all()

    def get_order(self, truck: str) -> TransportationOrder:
        """Get the order assigned to a truck."""
        order = self.repo.find_by_id(truck)
        if order is None:
            raise OrderNotFoundError(truck)
        return order

    def import_orders(
        self,
        path: Union[str, Path],
        clear_existing: bool = False,
    ) -> ImportStatsResponse:
        """
        Bulk load orders from an NDJSON file.

        Args:
            path: File with one order object per line
            clear_existing: Remove stored orders before loading

        Returns:
            Import statistics; invalid lines are reported, not saved
        """
        stats = ImportStatsResponse()

        orders = []
        for line_number, result in iter_order_lines(path):
            stats.lines_read += 1
            if isinstance(result, OrderFileError):
                logger.warning(f"Skipping invalid line {line_number}: {result.reason}")
                stats.errors.append(str(result))
                continue
            orders.append(result)

        try:
            if clear_existing:
                stats.orders_deleted, stats.orders_saved = self.repo.replace_all(orders)
                logger.info(f"Cleared {stats.orders_deleted} existing orders")
            else:
                stats.orders_saved = self.repo.save_all(orders)
        except (DuplicateOrderError, SQLAlchemyError) as e:
            logger.error(f"Saving orders from {path} failed: {e}")
            raise

        logger.info(f"Imported {stats.orders_saved} orders from {path}")
        return stats

    def health_check(self) -> Dict[str, Any]:
        """Perform health check on the order store."""
        connected = self.repo.health_check()
        return {
            "status": "healthy" if connected else "degraded",
            "database_connected": connected,
            "orders": self.repo.count() if connected else 0,
            "timestamp": datetime.now().isoformat()
        }
