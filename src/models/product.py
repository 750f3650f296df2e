"""
Product data model.

A catalog product is either FOOD (perishable, carries a best-before date)
or DRINK (non-perishable, best before is always "today").
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Tuple

from src.models.rating import Rating

# Discount rate is 10%
DISCOUNT_RATE = Decimal("0.1")


class ProductKind(Enum):
    """Closed set of product kinds. Values are the record discriminators."""
    DRINK = "D"
    FOOD = "F"

    @property
    def is_perishable(self) -> bool:
        return self is ProductKind.FOOD


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid price: {value!r}")
    try:
        # Floats go through their shortest repr so 1.99 stays 1.99
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid price: {value!r}")


@dataclass(frozen=True)
class Product:
    """
    Immutable catalog product.

    Equality and hashing use only (id, name); price, rating, kind and
    best-before are ignored so a re-rated product still matches its
    original identity.
    """
    id: int
    name: str
    price: Decimal = field(compare=False)
    rating: Rating = field(default=Rating.NOT_RATED, compare=False)
    kind: ProductKind = field(default=ProductKind.DRINK, compare=False)
    best_before: Optional[date] = field(default=None, compare=False)

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise ValueError(f"Invalid product id: {self.id!r}")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError(f"Invalid product name: {self.name!r}")

        price = _to_decimal(self.price)
        if not price.is_finite() or price < 0:
            raise ValueError(f"Invalid price: {self.price}. Must be non-negative")
        object.__setattr__(self, "price", price)

        if not isinstance(self.rating, Rating):
            raise ValueError(f"Invalid rating: {self.rating!r}")
        if not isinstance(self.kind, ProductKind):
            raise ValueError(f"Invalid product kind: {self.kind!r}")

        if self.kind.is_perishable:
            if not isinstance(self.best_before, date):
                raise ValueError(f"Food product {self.id} requires a best-before date")
        elif self.best_before is not None:
            raise ValueError(f"Drink product {self.id} cannot carry a best-before date")

    @classmethod
    def food(cls, id: int, name: str, price, rating: Rating, best_before: date) -> "Product":
        return cls(id, name, price, rating, ProductKind.FOOD, best_before)

    @classmethod
    def drink(cls, id: int, name: str, price, rating: Rating = Rating.NOT_RATED) -> "Product":
        return cls(id, name, price, rating, ProductKind.DRINK)

    @property
    def identity(self) -> Tuple[int, str]:
        return (self.id, self.name)

    @property
    def discount(self) -> Decimal:
        """
        Discount based on price and DISCOUNT_RATE.

        Returns:
            Decimal rounded half-up to 2 places
        """
        return (self.price * DISCOUNT_RATE).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def effective_best_before(self) -> date:
        """Stored date for FOOD; today's date for DRINK."""
        if self.kind.is_perishable:
            return self.best_before
        return date.today()

    def apply_rating(self, new_rating: Rating) -> "Product":
        """Return a copy of this product with the rating replaced."""
        return replace(self, rating=new_rating)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "rating": self.rating.ordinal,
            "best_before": self.best_before.isoformat() if self.best_before else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """Create Product from JSON dict."""
        best_before = data.get("best_before")
        return cls(
            id=data["id"],
            name=data["name"],
            price=data["price"],
            rating=Rating.from_ordinal(data.get("rating", 0)),
            kind=ProductKind(data["kind"]),
            best_before=date.fromisoformat(best_before) if best_before else None
        )

    def __str__(self) -> str:
        return (
            f"{self.id}, {self.name}, {self.price}, {self.discount}, "
            f"{self.rating.stars}, {self.effective_best_before()}"
        )
