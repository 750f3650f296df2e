"""
Locale formatter.

Renders products and reviews into localized display text using per-locale
resource bundles (config/locales/<tag>.json) and Babel for money and dates.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from babel.dates import format_date
from babel.numbers import format_currency

from src.models.product import Product, ProductKind
from src.models.review import Review
import config.settings as settings

logger = logging.getLogger(__name__)

# Resource key holding the type label of each product kind
KIND_LABEL_KEYS = {
    ProductKind.FOOD: "food",
    ProductKind.DRINK: "drink",
}

REQUIRED_KEYS = ("product", "review", "no_reviews", *KIND_LABEL_KEYS.values())


class LocaleFormatter:
    """
    Formats catalog values for one locale.
    """

    def __init__(self, tag: str, resources: Mapping[str, str], currency: str):
        """
        Args:
            tag: BCP 47 language tag, e.g. "en-GB"
            resources: Message templates and labels for the locale
            currency: ISO 4217 currency code used for money values
        """
        missing = [key for key in REQUIRED_KEYS if key not in resources]
        if missing:
            raise ValueError(f"Resources for {tag} are missing keys: {missing}")

        self.tag = tag
        self.currency = currency
        self.babel_locale = tag.replace("-", "_")
        self._resources = dict(resources)

    def format_money(self, amount: Union[Decimal, float]) -> str:
        return format_currency(amount, self.currency, locale=self.babel_locale)

    def format_date(self, value: date) -> str:
        return format_date(value, format="short", locale=self.babel_locale)

    def get_text(self, key: str) -> str:
        return self._resources[key]

    def format_product(self, product: Product) -> str:
        return self._resources["product"].format(
            name=product.name,
            price=self.format_money(product.price),
            stars=product.rating.stars,
            best_before=self.format_date(product.effective_best_before()),
            type=self._resources[KIND_LABEL_KEYS[product.kind]]
        )

    def format_review(self, review: Review) -> str:
        return self._resources["review"].format(
            stars=review.rating.stars,
            comments=review.comments
        )


class FormatterRegistry:
    """
    Holds one LocaleFormatter per supported locale tag.

    Unknown tags resolve to the default locale.
    """

    def __init__(
        self,
        locales_dir: Union[str, Path] = settings.LOCALES_DIR,
        currencies: Optional[Dict[str, str]] = None,
        default_tag: str = settings.DEFAULT_LOCALE
    ):
        """
        Load resource bundles for every supported locale.

        Args:
            locales_dir: Directory with one <tag>.json bundle per locale
            currencies: Locale tag -> currency code
            default_tag: Fallback locale tag

        Raises:
            OSError: If a resource bundle is missing
            ValueError: If a resource bundle is malformed
        """
        currencies = currencies or settings.LOCALE_CURRENCIES
        if default_tag not in currencies:
            raise ValueError(f"Default locale {default_tag} is not supported")

        self.default_tag = default_tag
        self._formatters: Dict[str, LocaleFormatter] = {}

        for tag, currency in currencies.items():
            bundle = Path(locales_dir) / f"{tag}.json"
            with open(bundle, 'r', encoding='utf-8') as f:
                resources = json.load(f)
            self._formatters[tag] = LocaleFormatter(tag, resources, currency)

        logger.info(f"Loaded {len(self._formatters)} locales: {', '.join(self._formatters)}")

    def get(self, tag: Optional[str]) -> LocaleFormatter:
        formatter = self._formatters.get(tag)
        if formatter is None:
            logger.debug(f"Unsupported locale {tag!r}, using {self.default_tag}")
            formatter = self._formatters[self.default_tag]
        return formatter

    def supported_locales(self) -> List[str]:
        return sorted(self._formatters)
