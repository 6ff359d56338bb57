"""
Copy one month's active budgets into another month.

Targets that already have an active budget in the destination are skipped,
so running the same copy twice creates nothing the second time. Sources are
carried over as they are, even when their category or bucket has since been
archived.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from django.db import DEFAULT_DB_ALIAS, transaction

from sugih.errors import ConflictError, NotFoundError, ValidationError
from sugih.months import month_label, parse_month
from sugih.services.budgets import BudgetBook

logger = logging.getLogger(__name__)


@dataclass
class CopyResult:
    created: List = field(default_factory=list)
    skipped: List[dict] = field(default_factory=list)


def _skipped_entry(budget):
    target = budget.target
    return {"targetId": target.id, "targetType": target.kind, "targetName": budget.target_name}


class BudgetCopier:
    def __init__(self, using=DEFAULT_DB_ALIAS, book=None):
        self.using = using
        self.book = book or BudgetBook(using=using)

    def copy(self, from_month, to_month) -> CopyResult:
        from_month = parse_month(from_month)
        to_month = parse_month(to_month)
        if from_month == to_month:
            raise ValidationError(
                "Source and destination months must differ.",
                {"toMonth": ["Choose a different month."]},
            )

        sources = self.book.list_budgets(month=from_month, include_archived=False)
        if not sources:
            raise NotFoundError(f"No budgets found for {month_label(from_month)}.")

        result = CopyResult()
        with transaction.atomic(using=self.using):
            for source in sources:
                if self.book.active_budget_exists(to_month, source.target):
                    result.skipped.append(_skipped_entry(source))
                    continue
                try:
                    budget = self.book.insert_budget(to_month, source.target, source.amount_idr, note=source.note)
                except ConflictError:
                    # Someone else created it between the check and the insert.
                    result.skipped.append(_skipped_entry(source))
                    continue
                result.created.append(budget)

        logger.info(
            "Copied budgets %s -> %s: %d created, %d skipped",
            from_month,
            to_month,
            len(result.created),
            len(result.skipped),
        )
        return result
