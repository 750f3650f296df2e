"""
Rating data model.

Discrete 0-5 star scale shared by products and reviews.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import IntEnum
from typing import Iterable


class Rating(IntEnum):
    """
    Star rating. The integer value is the ordinal used in data records.
    """
    NOT_RATED = 0
    ONE_STAR = 1
    TWO_STAR = 2
    THREE_STAR = 3
    FOUR_STAR = 4
    FIVE_STAR = 5

    @property
    def ordinal(self) -> int:
        return int(self.value)

    @property
    def stars(self) -> str:
        """Star glyphs for display, empty for NOT_RATED."""
        return "★" * self.value

    @classmethod
    def from_ordinal(cls, ordinal: int) -> "Rating":
        """
        Convert an integer ordinal to a Rating.

        Raises:
            ValueError: If ordinal is outside 0-5
        """
        if isinstance(ordinal, bool) or not isinstance(ordinal, int):
            raise ValueError(f"Invalid rating ordinal: {ordinal!r}")
        if not (0 <= ordinal <= 5):
            raise ValueError(f"Invalid rating ordinal: {ordinal}. Must be 0-5")
        return cls(ordinal)

    @classmethod
    def average_of(cls, ratings: Iterable["Rating"]) -> "Rating":
        """
        Round the mean of the ordinals half-up to the nearest Rating.

        An empty iterable averages to NOT_RATED.
        """
        ordinals = [r.ordinal for r in ratings]
        if not ordinals:
            return cls.NOT_RATED
        mean = Decimal(sum(ordinals)) / Decimal(len(ordinals))
        return cls(int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))
