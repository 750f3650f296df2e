"""
Storage utility.

File I/O helpers for product records, review records, reports and
catalog snapshots.
"""

import json
import os
import logging
from pathlib import Path
from typing import Dict, List, Optional
from datetime import datetime

import config.settings as settings

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Manages file I/O for the catalog.

    Handles:
    - Product records (data/product{id}.txt, first line is the record)
    - Review records (data/reviews{id}.txt, one record per line)
    - Reports (reports/product{id}_report_{client}.txt)
    - Snapshots (temp/catalog_{timestamp}.snapshot)
    """

    def __init__(
        self,
        data_dir,
        reports_dir,
        temp_dir,
        product_prefix: str = settings.PRODUCT_FILE_PREFIX,
        product_template: str = settings.PRODUCT_FILE_TEMPLATE,
        reviews_template: str = settings.REVIEWS_FILE_TEMPLATE,
        report_template: str = settings.REPORT_FILE_TEMPLATE,
        snapshot_template: str = settings.SNAPSHOT_FILE_TEMPLATE,
        snapshot_suffix: str = settings.SNAPSHOT_SUFFIX
    ):
        """
        Initialize storage manager.

        Args:
            data_dir: Directory holding product and review records
            reports_dir: Directory receiving rendered reports
            temp_dir: Directory receiving snapshots
        """
        self.data_dir = Path(data_dir)
        self.reports_dir = Path(reports_dir)
        self.temp_dir = Path(temp_dir)
        self.product_prefix = product_prefix
        self.product_template = product_template
        self.reviews_template = reviews_template
        self.report_template = report_template
        self.snapshot_template = snapshot_template
        self.snapshot_suffix = snapshot_suffix

        # Create directories if they don't exist
        for directory in (self.data_dir, self.reports_dir, self.temp_dir):
            directory.mkdir(parents=True, exist_ok=True)

        logger.info(
            f"Initialized StorageManager with data_dir={self.data_dir}, "
            f"reports_dir={self.reports_dir}, temp_dir={self.temp_dir}"
        )

    # ------------------------------------------------------------------
    # Product and review records
    # ------------------------------------------------------------------
    def list_product_files(self) -> List[Path]:
        """
        Get all product record files in the data directory.

        Returns:
            Paths sorted by file name

        Raises:
            OSError: If the data directory cannot be listed
        """
        return sorted(
            path for path in self.data_dir.iterdir()
            if path.is_file()
            and path.name.startswith(self.product_prefix)
            and not path.name.endswith(".partial")
        )

    def read_product_line(self, path: Path) -> Optional[str]:
        """
        Read the record line of a product file.

        Returns:
            First line, or None if the file is empty

        Raises:
            OSError: If the file cannot be read
        """
        with open(path, 'r', encoding='utf-8') as f:
            line = f.readline()
        return line.rstrip("\r\n") or None

    def reviews_path(self, product_id: int) -> Path:
        return self.data_dir / self.reviews_template.format(id=product_id)

    def product_path(self, product_id: int) -> Path:
        return self.data_dir / self.product_template.format(id=product_id)

    def read_review_lines(self, product_id: int) -> Optional[List[str]]:
        """
        Read review records for a product.

        Returns:
            Non-blank lines, or None if the reviews file doesn't exist

        Raises:
            OSError: If the file exists but cannot be read
        """
        filepath = self.reviews_path(product_id)

        if not filepath.exists():
            logger.debug(f"No reviews file for product {product_id}")
            return None

        with open(filepath, 'r', encoding='utf-8') as f:
            return [line.rstrip("\r\n") for line in f if line.strip()]

    def save_product_records(self, product_id: int, product_line: str, review_lines: List[str]) -> None:
        """
        Save one product record and its review records.

        A product without reviews has its reviews file removed.
        """
        try:
            self._write_text(self.product_path(product_id), product_line + "\n")
            reviews_file = self.reviews_path(product_id)
            if review_lines:
                self._write_text(reviews_file, "".join(line + "\n" for line in review_lines))
            elif reviews_file.exists():
                reviews_file.unlink()
            logger.debug(f"Saved product {product_id} with {len(review_lines)} reviews")
        except OSError as e:
            logger.error(f"Failed to save records for product {product_id}: {e}")
            raise

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    def write_report(self, product_id: int, client: str, text: str) -> Path:
        """
        Write a rendered product report.

        Args:
            product_id: Product the report describes
            client: Client tag, part of the file name
            text: Fully formatted report text

        Returns:
            Path of the written report
        """
        filepath = self.reports_dir / self.report_template.format(id=product_id, client=client)

        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(text)
            logger.info(f"Saved report for product {product_id} to {filepath}")
        except OSError as e:
            logger.error(f"Failed to save report for product {product_id}: {e}")
            raise

        return filepath

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def write_snapshot(self, payload: Dict) -> Path:
        """
        Write a whole-catalog snapshot to a timestamp-named file.

        An existing snapshot is never replaced: if the name is taken the
        timestamp is bumped until it is free, so names keep their order.

        Returns:
            Path of the snapshot
        """
        timestamp = int(datetime.now().timestamp() * 1000)
        filepath = self.temp_dir / self.snapshot_template.format(timestamp=timestamp)
        while filepath.exists():
            timestamp += 1
            filepath = self.temp_dir / self.snapshot_template.format(timestamp=timestamp)

        try:
            self._write_text(filepath, json.dumps(payload, indent=2, ensure_ascii=False))
            logger.info(f"Saved snapshot to {filepath}")
        except OSError as e:
            logger.error(f"Failed to save snapshot: {e}")
            raise

        return filepath

    def find_snapshot(self) -> Optional[Path]:
        """
        Find the most recent snapshot in the temp directory.

        Returns:
            Path, or None if there is no snapshot
        """
        snapshots = [
            path for path in self.temp_dir.iterdir()
            if path.is_file() and path.name.endswith(self.snapshot_suffix)
        ]
        if not snapshots:
            return None
        return max(snapshots, key=lambda p: (p.stat().st_mtime, p.name))

    def read_snapshot(self, filepath: Path) -> Dict:
        """
        Load a snapshot.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the content is not a JSON object
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            payload = json.load(f)
        if not isinstance(payload, dict):
            raise ValueError(f"Snapshot {filepath} is not a JSON object")
        logger.debug(f"Loaded snapshot {filepath}")
        return payload

    def remove_snapshot(self, filepath: Path) -> None:
        filepath.unlink()
        logger.info(f"Consumed snapshot {filepath}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _write_text(filepath: Path, text: str) -> None:
        # Atomic write: write to temp file, then rename
        temp_path = filepath.with_name(filepath.name + ".partial")
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                f.write(text)
            os.replace(temp_path, filepath)
        finally:
            if temp_path.exists():
                temp_path.unlink()
