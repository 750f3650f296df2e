"""
Review data model.

Represents a single consumer review of a catalog product.
"""

from dataclasses import dataclass

from src.models.rating import Rating


@dataclass(frozen=True, order=True)
class Review:
    """
    Immutable review. Ordered by rating first, then comments.
    """
    rating: Rating
    comments: str = ""

    def __post_init__(self):
        # Validate rating
        if not isinstance(self.rating, Rating):
            raise ValueError(f"Invalid rating: {self.rating!r}. Must be a Rating")
        if not isinstance(self.comments, str):
            raise ValueError(f"Invalid comments: {self.comments!r}")

    def to_dict(self) -> dict:
        return {"rating": self.rating.ordinal, "comments": self.comments}

    @classmethod
    def from_dict(cls, data: dict) -> "Review":
        """Create Review from JSON dict."""
        return cls(
            rating=Rating.from_ordinal(data["rating"]),
            comments=data.get("comments", "")
        )
