"""
Best-effort bulk budget mutations.

Each id goes through the same single-item BudgetBook call a direct request
would use, inside its own savepoint. A failure is recorded and the batch
carries on.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, transaction

from sugih.errors import LedgerError, ValidationError
from sugih.services.budgets import BudgetBook

logger = logging.getLogger(__name__)


@dataclass
class BulkResult:
    action: str
    processed_count: int = 0
    failed_ids: List[str] = field(default_factory=list)

    COUNT_KEYS = {
        "delete": "deletedCount",
        "archive": "archivedCount",
        "restore": "restoredCount",
    }

    @property
    def partial(self) -> bool:
        return bool(self.failed_ids)

    def as_dict(self):
        return {self.COUNT_KEYS[self.action]: self.processed_count, "failedIds": self.failed_ids}


def _unique_ids(ids):
    seen = set()
    ordered = []
    for budget_id in ids:
        if budget_id not in seen:
            seen.add(budget_id)
            ordered.append(budget_id)
    return ordered


class BulkBudgetMutator:
    def __init__(self, using=DEFAULT_DB_ALIAS, book=None, max_ids=None):
        self.using = using
        self.book = book or BudgetBook(using=using)
        self.max_ids = settings.SUGIH_BULK_MAX_IDS if max_ids is None else max_ids

    def _validate_batch(self, ids):
        if ids is None:
            ids = []
        if not isinstance(ids, (list, tuple)) or not all(isinstance(budget_id, str) and budget_id for budget_id in ids):
            raise ValidationError("Budget ids must be a list of strings.", {"ids": ["Provide a list of budget ids."]})
        ids = _unique_ids(ids)
        if not ids:
            raise ValidationError("No budget ids provided.", {"ids": ["Provide at least one budget id."]})
        if len(ids) > self.max_ids:
            raise ValidationError(
                f"Too many budget ids; the limit is {self.max_ids}.",
                {"ids": [f"Provide at most {self.max_ids} ids."]},
            )
        return ids

    def _run(self, action, operation, ids) -> BulkResult:
        ids = self._validate_batch(ids)
        result = BulkResult(action=action)
        for budget_id in ids:
            try:
                with transaction.atomic(using=self.using):
                    operation(budget_id)
            except LedgerError as exc:
                logger.warning("Bulk %s skipped budget %s: %s", action, budget_id, exc.kind)
                result.failed_ids.append(budget_id)
            else:
                result.processed_count += 1
        logger.info("Bulk %s: %d processed, %d failed", action, result.processed_count, len(result.failed_ids))
        return result

    def delete(self, ids) -> BulkResult:
        return self._run("delete", self.book.delete_budget, ids)

    def archive(self, ids) -> BulkResult:
        return self._run("archive", self.book.archive_budget, ids)

    def restore(self, ids) -> BulkResult:
        return self._run("restore", self.book.restore_budget, ids)
