"""
Budget targets.

A budget applies to exactly one thing: an expense category or a savings bucket.
Callers build a Target once and pass it around instead of two nullable ids.
"""

from dataclasses import dataclass
from typing import Optional

from sugih.errors import ValidationError

CATEGORY = "category"
SAVINGS_BUCKET = "savings_bucket"


@dataclass(frozen=True)
class Target:
    kind: str
    id: str

    @classmethod
    def category(cls, category_id: str) -> "Target":
        return cls.from_ids(category_id=category_id)

    @classmethod
    def savings_bucket(cls, bucket_id: str) -> "Target":
        return cls.from_ids(savings_bucket_id=bucket_id)

    @classmethod
    def from_ids(cls, category_id: Optional[str] = None, savings_bucket_id: Optional[str] = None) -> "Target":
        category_id = (category_id or "").strip()
        savings_bucket_id = (savings_bucket_id or "").strip()
        if category_id and savings_bucket_id:
            raise ValidationError(
                "Cannot specify both categoryId and savingsBucketId.",
                {"target": ["Choose either a category or a savings bucket."]},
            )
        if not category_id and not savings_bucket_id:
            raise ValidationError(
                "Must specify either categoryId or savingsBucketId.",
                {"target": ["A category or a savings bucket is required."]},
            )
        if category_id:
            return cls(CATEGORY, category_id)
        return cls(SAVINGS_BUCKET, savings_bucket_id)

    @classmethod
    def of_budget(cls, budget) -> "Target":
        if budget.category_id:
            return cls(CATEGORY, budget.category_id)
        return cls(SAVINGS_BUCKET, budget.savings_bucket_id)

    @property
    def is_category(self) -> bool:
        return self.kind == CATEGORY

    def lookup(self) -> dict:
        """ORM filter kwargs selecting budgets for this target."""
        if self.is_category:
            return {"category_id": self.id}
        return {"savings_bucket_id": self.id}

    def model_fields(self) -> dict:
        if self.is_category:
            return {"category_id": self.id, "savings_bucket_id": None}
        return {"category_id": None, "savings_bucket_id": self.id}
