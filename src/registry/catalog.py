"""
Product Catalog - Single source of truth for products and their reviews.

Manages product creation, reviews, derived ratings, localized queries and
persistence of the whole catalog.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from src.models.product import Product
from src.models.rating import Rating
from src.models.review import Review
from src.utils.locale_formatter import FormatterRegistry, LocaleFormatter
from src.utils.records import (
    RecordParseError,
    format_product,
    format_review,
    parse_product,
    parse_review,
)
from src.utils.rwlock import ReadWriteLock
from src.utils.storage import StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)

Identity = Tuple[int, str]


@dataclass
class CatalogEntry:
    """Current product snapshot plus its full review history."""
    product: Product
    reviews: List[Review] = field(default_factory=list)


class ProductCatalog:
    """
    Thread-safe catalog keyed by product identity (id, name).

    Every entry pairs the latest product snapshot with its reviews. A review
    replaces the snapshot in place, so the identity key never changes and
    readers never see a product disappear while it is being re-rated.

    Mutators hold the write lock, queries hold the read lock. The lock is not
    reentrant, so public methods never call each other while holding it.

    Initialization order: construct, then call load_all_data() before
    serving any other call. load_all_data(), save_all_data(), dump_data()
    and restore_data() are maintenance operations; run them while no other
    thread is mutating the catalog. Loading and restoring lock only the
    final in-memory swap, so concurrent mutations made while files are read
    are overwritten.
    """

    def __init__(
        self,
        storage: StorageManager,
        formatters: FormatterRegistry,
        separator: str = settings.RECORD_SEPARATOR
    ):
        """
        Initialize an empty catalog.

        Args:
            storage: File access for records, reports and snapshots
            formatters: Locale formatters used by queries and reports
            separator: Field separator of product/review records
        """
        self.storage = storage
        self.formatters = formatters
        self.separator = separator
        self._entries: Dict[Identity, CatalogEntry] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_product(
        self,
        product_id: int,
        name: str,
        price,
        rating: Rating = Rating.NOT_RATED,
        best_before: Optional[date] = None
    ) -> Optional[Product]:
        """
        Add a product unless one with the same (id, name) already exists.
        Idempotent: an existing entry and its reviews are left untouched.

        Args:
            product_id: Caller-supplied numeric id
            name: Product name
            price: Non-negative price (Decimal, or anything with decimal text)
            rating: Initial rating
            best_before: Makes the product FOOD when given, DRINK otherwise

        Returns:
            The created or pre-existing Product, or None if arguments are invalid
        """
        with self._lock.write_locked():
            try:
                if best_before is not None:
                    product = Product.food(product_id, name, price, rating, best_before)
                else:
                    product = Product.drink(product_id, name, price, rating)
            except ValueError as e:
                logger.info(f"Error adding product {product_id}: {e}")
                return None

            existing = self._entries.get(product.identity)
            if existing is not None:
                logger.debug(f"Product {product.identity} already exists")
                return existing.product

            self._entries[product.identity] = CatalogEntry(product)
            logger.info(f"Created product {product_id} - '{name}'")
            return product

    def review_product(self, product_id: int, rating: Rating, comments: str) -> Optional[Product]:
        """
        Add a review and recompute the product's rating.

        The new rating is the mean of all review ordinals rounded half-up.

        Returns:
            The re-rated Product, or None if the id is unknown or the review is invalid
        """
        try:
            review = Review(rating, comments)
        except ValueError as e:
            logger.info(f"Error reviewing product {product_id}: {e}")
            return None

        with self._lock.write_locked():
            entry = self._find_entry(product_id)
            if entry is None:
                logger.info(f"Product with id {product_id} not found")
                return None

            entry.reviews.append(review)
            entry.product = entry.product.apply_rating(Rating.average_of(r.rating for r in entry.reviews))
            logger.debug(
                f"Reviewed product {product_id}: {len(entry.reviews)} reviews, "
                f"rating {entry.product.rating.name}"
            )
            return entry.product

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def find_product(self, product_id: int) -> Optional[Product]:
        """
        Find a product by id. The first match wins if several names share an id.

        Returns:
            Product, or None if not found
        """
        with self._lock.read_locked():
            entry = self._find_entry(product_id)
            if entry is None:
                logger.info(f"Product with id {product_id} not found")
                return None
            return entry.product

    def get_reviews(self, product_id: int) -> List[Review]:
        """Return a copy of a product's reviews (empty if the id is unknown)."""
        with self._lock.read_locked():
            entry = self._find_entry(product_id)
            return list(entry.reviews) if entry else []

    def products(self) -> List[Product]:
        """Return the current product snapshots."""
        with self._lock.read_locked():
            return [entry.product for entry in self._entries.values()]

    def supported_locales(self) -> List[str]:
        return self.formatters.supported_locales()

    def format_products(
        self,
        predicate: Optional[Callable[[Product], bool]] = None,
        sort_key: Optional[Callable[[Product], Any]] = None,
        reverse: bool = False,
        locale: Optional[str] = None
    ) -> str:
        """
        Render the selected products, one line each.

        Args:
            predicate: Keeps products for which it returns True (all if None)
            sort_key: Sort key (by id if None)
            reverse: Sort descending
            locale: Locale tag; unknown tags use the default locale

        Returns:
            Rendered lines joined with newlines
        """
        formatter = self.formatters.get(locale)
        with self._lock.read_locked():
            selected = [
                entry.product for entry in self._entries.values()
                if predicate is None or predicate(entry.product)
            ]
            selected.sort(key=sort_key or (lambda p: p.id), reverse=reverse)
            return "\n".join(formatter.format_product(p) for p in selected)

    def print_products(
        self,
        predicate: Optional[Callable[[Product], bool]] = None,
        sort_key: Optional[Callable[[Product], Any]] = None,
        reverse: bool = False,
        locale: Optional[str] = None
    ) -> None:
        print(self.format_products(predicate, sort_key, reverse, locale))

    def get_discounts(self, locale: Optional[str] = None) -> Dict[str, str]:
        """
        Sum discounts per rating tier.

        Returns:
            Star display -> total discount formatted as localized currency
        """
        formatter = self.formatters.get(locale)
        with self._lock.read_locked():
            products = [entry.product for entry in self._entries.values()]

        frame = pd.DataFrame({
            "stars": [p.rating.stars for p in products],
            "discount": pd.Series([p.discount for p in products], dtype=object),
        })
        totals = frame.groupby("stars")["discount"].sum()

        return {
            stars: formatter.format_money(Decimal(total))
            for stars, total in totals.items()
        }

    def print_product_report(self, product_id: int, locale: Optional[str], client: str) -> Optional[Path]:
        """
        Write a localized report of a product and its reviews.

        Only the lookup is locked; rendering and the file write run after
        the lock is released.

        Args:
            product_id: Product to report on
            locale: Locale tag
            client: Client tag, part of the report file name

        Returns:
            Path of the report, or None if the product is unknown or the write failed
        """
        with self._lock.read_locked():
            entry = self._find_entry(product_id)
            if entry is not None:
                product, reviews = entry.product, list(entry.reviews)

        if entry is None:
            logger.info(f"Product with id {product_id} not found")
            return None

        text = self._render_report(product, reviews, self.formatters.get(locale))
        try:
            return self.storage.write_report(product.id, client, text)
        except OSError as e:
            logger.error(f"Error printing product report {e}", exc_info=True)
            return None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load_all_data(self) -> Optional[int]:
        """
        Rebuild the catalog from the data directory.

        Unreadable or malformed product files and review lines are skipped.
        If two files share an identity, the first one (by file name) wins.

        Returns:
            Number of products loaded, or None if the directory could not be read
            (the catalog is left unchanged)
        """
        try:
            files = self.storage.list_product_files()
        except OSError as e:
            logger.error(f"Error loading data {e}", exc_info=True)
            return None

        entries: Dict[Identity, CatalogEntry] = {}
        for path in files:
            product = self._load_product(path)
            if product is None:
                continue
            if product.identity in entries:
                logger.warning(f"Duplicate product {product.identity} in {path.name}, skipping")
                continue
            entries[product.identity] = CatalogEntry(product, self._load_reviews(product))

        with self._lock.write_locked():
            self._entries = entries

        logger.info(f"Loaded {len(entries)} products from {self.storage.data_dir}")
        return len(entries)

    def save_all_data(self) -> Optional[int]:
        """
        Write every product and its reviews back to the data directory.

        Returns:
            Number of products saved, or None if a write failed
        """
        with self._lock.read_locked():
            snapshot = [(e.product, list(e.reviews)) for e in self._entries.values()]

        saved = 0
        for product, reviews in snapshot:
            try:
                product_line = format_product(product, self.separator)
            except ValueError as e:
                logger.warning(f"Cannot save product {product.id}: {e}")
                continue
            review_lines = [format_review(r, self.separator) for r in reviews]
            try:
                self.storage.save_product_records(product.id, product_line, review_lines)
            except OSError as e:
                logger.error(f"Error saving data {e}", exc_info=True)
                return None
            saved += 1

        logger.info(f"Saved {saved} products to {self.storage.data_dir}")
        return saved

    def dump_data(self) -> Optional[Path]:
        """
        Archive the whole catalog to a snapshot file and clear it.

        Runs entirely under the write lock so no mutation is lost between
        the snapshot and the reset.

        Returns:
            Snapshot path, or None if writing failed (the catalog is kept)
        """
        with self._lock.write_locked():
            payload = {
                "version": settings.SNAPSHOT_VERSION,
                "created": datetime.now().isoformat(),
                "entries": [
                    {
                        "product": entry.product.to_dict(),
                        "reviews": [r.to_dict() for r in entry.reviews],
                    }
                    for entry in self._entries.values()
                ],
            }
            try:
                path = self.storage.write_snapshot(payload)
            except OSError as e:
                logger.error(f"Error dumping data {e}", exc_info=True)
                return None
            self._entries = {}

        logger.info(f"Dumped {len(payload['entries'])} products to {path}")
        return path

    def restore_data(self) -> bool:
        """
        Replace the catalog with the most recent snapshot, then delete it.

        Returns:
            True if a snapshot was restored
        """
        try:
            path = self.storage.find_snapshot()
            if path is None:
                logger.warning(f"No snapshot found in {self.storage.temp_dir}")
                return False
            payload = self.storage.read_snapshot(path)
            entries = self._decode_snapshot(payload)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error restoring data {e}", exc_info=True)
            return False

        with self._lock.write_locked():
            self._entries = entries

        try:
            self.storage.remove_snapshot(path)
        except OSError as e:
            logger.error(f"Restored snapshot {path} could not be removed: {e}")

        logger.info(f"Restored {len(entries)} products from {path}")
        return True

    # ------------------------------------------------------------------
    # Helpers (callers hold the lock where noted)
    # ------------------------------------------------------------------
    def _find_entry(self, product_id: int) -> Optional[CatalogEntry]:
        """Linear scan by id. Caller holds the lock."""
        for entry in self._entries.values():
            if entry.product.id == product_id:
                return entry
        return None

    @staticmethod
    def _render_report(product: Product, reviews: List[Review], formatter: LocaleFormatter) -> str:
        lines = [formatter.format_product(product)]
        if reviews:
            lines.extend(formatter.format_review(r) for r in sorted(reviews, reverse=True))
        else:
            lines.append(formatter.get_text("no_reviews"))
        return "".join(line + "\n" for line in lines)

    def _load_product(self, path: Path) -> Optional[Product]:
        try:
            line = self.storage.read_product_line(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error loading product {e}")
            return None
        if line is None:
            logger.warning(f"Empty product file {path.name}")
            return None

        try:
            return parse_product(line, self.separator)
        except RecordParseError as e:
            logger.warning(f"Error parsing product {e}")
            return None

    def _load_reviews(self, product: Product) -> List[Review]:
        try:
            lines = self.storage.read_review_lines(product.id)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error loading reviews {e}")
            return []
        if lines is None:
            return []

        reviews = []
        for line in lines:
            try:
                reviews.append(parse_review(line, self.separator))
            except RecordParseError as e:
                logger.warning(f"Error parsing review {e}")
        return reviews

    @staticmethod
    def _decode_snapshot(payload: Dict) -> Dict[Identity, CatalogEntry]:
        entries: Dict[Identity, CatalogEntry] = {}
        for item in payload["entries"]:
            product = Product.from_dict(item["product"])
            reviews = [Review.from_dict(r) for r in item.get("reviews", [])]
            entries[product.identity] = CatalogEntry(product, reviews)
        return entries
