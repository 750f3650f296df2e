"""
Configuration settings for the catalog manager.

Centralized configuration for directories, record formats and locales.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("CATALOG_DATA_DIR", PROJECT_ROOT / "data"))
REPORTS_DIR = Path(os.getenv("CATALOG_REPORTS_DIR", PROJECT_ROOT / "reports"))
TEMP_DIR = Path(os.getenv("CATALOG_TEMP_DIR", PROJECT_ROOT / "temp"))
LOCALES_DIR = Path(__file__).parent / "locales"

# Data file naming
PRODUCT_FILE_PREFIX = "product"
PRODUCT_FILE_TEMPLATE = "product{id}.txt"
REVIEWS_FILE_TEMPLATE = "reviews{id}.txt"
REPORT_FILE_TEMPLATE = "product{id}_report_{client}.txt"

# Snapshots (dump/restore)
SNAPSHOT_FILE_TEMPLATE = "catalog_{timestamp}.snapshot"
SNAPSHOT_SUFFIX = ".snapshot"
SNAPSHOT_VERSION = 1

# Record format
RECORD_SEPARATOR = ","

# Locales
DEFAULT_LOCALE = "en-GB"
LOCALE_CURRENCIES = {
    "en-GB": "GBP",
    "en-US": "USD",
    "fr-FR": "EUR",
    "ru-RU": "RUB",
    "zh-CN": "CNY",
}

# Logging
LOG_LEVEL = os.getenv("CATALOG_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "catalog.log"
