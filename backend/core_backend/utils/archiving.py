"""
Archiving for catalog rows.

Suppliers, raw materials, sections and recipes are referenced by append-only
ledger history, so they are never removed: archiving clears ``is_active``
and stamps who did it and when. ``objects`` only sees active rows;
``all_objects`` sees every row and is what services use to resolve ids
found in history.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def archive(self, archived_by=None):
        """Archive every row in the queryset with a single UPDATE; returns the row count."""
        changes = {"is_active": False, "archived_at": timezone.now()}
        if archived_by is not None:
            changes["archived_by"] = archived_by
        return self.update(**changes)

    def unarchive(self):
        return self.update(is_active=True, archived_at=None, archived_by=None)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager of archivable models: archived rows are invisible."""

    def get_queryset(self):
        return super().get_queryset().active()


class SoftDeleteMixin(models.Model):
    """
    Abstract base for catalog models that are archived instead of deleted.

    ``delete()`` archives the row. Catalog rows are PROTECTed by the ledger,
    so there is no hard-delete path.
    """

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Cleared when the record is archived.",
    )
    archived_at = models.DateTimeField(null=True, blank=True)
    archived_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(app_label)s_%(class)s_archived",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager.from_queryset(SoftDeleteQuerySet)()

    class Meta:
        abstract = True

    def archive(self, archived_by=None):
        self.is_active = False
        self.archived_at = timezone.now()
        if archived_by is not None:
            self.archived_by = archived_by
        self.save(update_fields=["is_active", "archived_at", "archived_by"])

    def unarchive(self):
        self.is_active = True
        self.archived_at = None
        self.archived_by = None
        self.save(update_fields=["is_active", "archived_at", "archived_by"])

    def delete(self, using=None, keep_parents=False):
        self.archive()
