"""
Append-only persistence for ledger history.

Stock entries, stock movements and section consumptions are facts: once
written they are never updated or deleted. Corrections are new rows.
"""
from django.db import models

from core_backend.exceptions import ImmutableRecordError


class AppendOnlyQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ImmutableRecordError(self.model(), "updated")

    def delete(self):
        raise ImmutableRecordError(self.model(), "deleted")


class AppendOnlyModel(models.Model):
    """Abstract model whose rows can be inserted but never changed."""

    objects = models.Manager.from_queryset(AppendOnlyQuerySet)()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(self, "updated")
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        raise ImmutableRecordError(self, "deleted")
