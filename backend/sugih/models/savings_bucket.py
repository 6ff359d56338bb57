from django.db import models

from .base import LedgerModel


class SavingsBucket(LedgerModel):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    archived = models.BooleanField(default=False)

    class Meta:
        db_table = "savings_buckets"
        ordering = ["name"]

    def delete(self, using=None, keep_parents=False):
        if self.postings.exists():
            raise models.ProtectedError("Cannot delete savings bucket with transactions; archive it instead.", {self})
        return super().delete(using=using, keep_parents=keep_parents)

    def __str__(self):
        return self.name
