"""
Record codec.

Encodes and decodes the positional, line-oriented product and review
records kept in the data directory:

    D,101,Tea,1.99,4
    F,103,Cake,3.99,0,2024-06-01
    4,Nice hot cup of tea
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from src.models.product import Product, ProductKind
from src.models.rating import Rating
from src.models.review import Review
import config.settings as settings

logger = logging.getLogger(__name__)

_DRINK_FIELDS = 5
_FOOD_FIELDS = 6


class RecordParseError(ValueError):
    """Raised when a single product or review record cannot be decoded."""


def _parse_int(text: str, what: str, line: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise RecordParseError(f"Invalid {what} {text!r} in record {line!r}")


def _parse_rating(text: str, line: str) -> Rating:
    ordinal = _parse_int(text, "rating", line)
    try:
        return Rating.from_ordinal(ordinal)
    except ValueError as e:
        raise RecordParseError(f"{e} in record {line!r}")


def parse_product(line: str, separator: str = settings.RECORD_SEPARATOR) -> Optional[Product]:
    """
    Decode a product record.

    Args:
        line: Record text (type, id, name, price, rating[, best_before])
        separator: Field separator

    Returns:
        Product, or None if the type discriminator is unknown

    Raises:
        RecordParseError: If a field is missing or malformed
    """
    line = line.rstrip("\r\n")
    values = line.split(separator)

    try:
        kind = ProductKind(values[0].strip())
    except ValueError:
        logger.debug(f"Ignoring record with unknown product type: {line!r}")
        return None

    expected = _FOOD_FIELDS if kind.is_perishable else _DRINK_FIELDS
    if len(values) != expected:
        raise RecordParseError(
            f"Expected {expected} fields for type {kind.value}, got {len(values)} in record {line!r}"
        )

    product_id = _parse_int(values[1], "id", line)
    name = values[2]
    try:
        price = Decimal(values[3].strip())
    except InvalidOperation:
        raise RecordParseError(f"Invalid price {values[3]!r} in record {line!r}")
    rating = _parse_rating(values[4], line)

    best_before = None
    if kind.is_perishable:
        try:
            best_before = date.fromisoformat(values[5].strip())
        except ValueError:
            raise RecordParseError(f"Invalid best-before date {values[5]!r} in record {line!r}")

    try:
        return Product(product_id, name, price, rating, kind, best_before)
    except ValueError as e:
        raise RecordParseError(f"{e} in record {line!r}")


def parse_review(line: str, separator: str = settings.RECORD_SEPARATOR) -> Review:
    """
    Decode a review record. Comments may themselves contain the separator.

    Raises:
        RecordParseError: If the record has no rating field or it is malformed
    """
    line = line.rstrip("\r\n")
    values = line.split(separator, 1)
    if len(values) != 2:
        raise RecordParseError(f"Expected rating and comments in record {line!r}")
    return Review(_parse_rating(values[0], line), values[1])


def format_product(product: Product, separator: str = settings.RECORD_SEPARATOR) -> str:
    """Encode a product record (without line terminator)."""
    if separator in product.name:
        raise ValueError(f"Product name {product.name!r} cannot contain {separator!r}")
    if "\r" in product.name or "\n" in product.name:
        raise ValueError(f"Product name {product.name!r} cannot contain a line break")
    values = [
        product.kind.value,
        str(product.id),
        product.name,
        str(product.price),
        str(product.rating.ordinal),
    ]
    if product.kind.is_perishable:
        values.append(product.best_before.isoformat())
    return separator.join(values)


def format_review(review: Review, separator: str = settings.RECORD_SEPARATOR) -> str:
    """Encode a review record (without line terminator). Line breaks become spaces."""
    comments = " ".join(review.comments.splitlines())
    return f"{review.rating.ordinal}{separator}{comments}"
