from uuid import uuid4

from django.db import models


def new_id():
    return str(uuid4())


class LedgerModel(models.Model):
    """
    Shared columns. Ids are opaque text so callers never depend on their shape.
    """

    id = models.CharField(primary_key=True, max_length=36, default=new_id, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
