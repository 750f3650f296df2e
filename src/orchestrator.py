"""
Shop Orchestrator.

Wires storage, locale formatters and the product catalog together and
enforces the load-before-serve initialization order.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Optional

from src.models.rating import Rating
from src.registry.catalog import ProductCatalog
from src.utils.locale_formatter import FormatterRegistry
from src.utils.storage import StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)


class ShopOrchestrator:
    """
    Builds the catalog and its collaborators.

    Initialization order:
    1. Storage directories → 2. Locale bundles → 3. Catalog
    → 4. load_all_data() (in start()) → serve
    """

    def __init__(
        self,
        data_dir=settings.DATA_DIR,
        reports_dir=settings.REPORTS_DIR,
        temp_dir=settings.TEMP_DIR,
        locales_dir=settings.LOCALES_DIR
    ):
        """
        Initialize components. The catalog stays empty until start().

        Args:
            data_dir: Directory with product/review records
            reports_dir: Directory for product reports
            temp_dir: Directory for dump snapshots
            locales_dir: Directory with locale resource bundles
        """
        logger.info("Initializing catalog components...")

        self.storage = StorageManager(data_dir, reports_dir, temp_dir)
        self.formatters = FormatterRegistry(locales_dir)
        self.catalog = ProductCatalog(self.storage, self.formatters)
        self.started = False

    def start(self) -> ProductCatalog:
        """
        Load persisted data and return the catalog ready to serve.

        Raises:
            RuntimeError: If the data directory could not be read
        """
        loaded = self.catalog.load_all_data()
        if loaded is None:
            raise RuntimeError(f"Could not load catalog data from {self.storage.data_dir}")

        self.started = True
        logger.info(f"Catalog ready with {loaded} products")
        return self.catalog

    def run_demo(self, locale: str = settings.DEFAULT_LOCALE, client: str = "demo") -> Optional[Path]:
        """
        Create a product, review it and write its report.

        Returns:
            Path of the final report
        """
        if not self.started:
            self.start()

        tea = self.catalog.create_product(101, "Tea", Decimal("1.99"), Rating.NOT_RATED)
        if tea is None:
            logger.error("Demo failed: could not create product 101")
            return None
        self.catalog.print_product_report(tea.id, locale, client)
        self.catalog.review_product(tea.id, Rating.FOUR_STAR, "Nice hot cup of tea")
        report = self.catalog.print_product_report(tea.id, locale, client)

        logger.info(f"Demo complete, report written to {report}")
        return report
