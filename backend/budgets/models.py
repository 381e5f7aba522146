from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils.archiving import SoftDeleteMixin
from materials.models import MaterialCategory


class BudgetPeriod(models.TextChoices):
    WEEKLY = "WEEKLY", _("Weekly")
    MONTHLY = "MONTHLY", _("Monthly")
    QUARTERLY = "QUARTERLY", _("Quarterly")
    YEARLY = "YEARLY", _("Yearly")


class Budget(SoftDeleteMixin):
    """
    Spending plan for a date range, split into per-category allocations.

    Actual spending is always computed from purchase orders; nothing spent
    is stored on the budget.
    """
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    period_type = models.CharField(max_length=20, choices=BudgetPeriod.choices, default=BudgetPeriod.MONTHLY)
    start_date = models.DateField()
    end_date = models.DateField()
    total_budget = models.DecimalField(max_digits=16, decimal_places=4)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_budgets",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Budget")
        verbose_name_plural = _("Budgets")
        ordering = ["-start_date"]
        indexes = [
            models.Index(fields=["period_type", "end_date"], name="budget_period_end_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(end_date__gte=models.F("start_date")), name="budget_dates_ordered"),
            models.CheckConstraint(condition=models.Q(total_budget__gt=0), name="budget_total_positive"),
        ]

    def __str__(self):
        return f"{self.name} ({self.start_date} - {self.end_date})"


class BudgetAllocation(models.Model):
    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name="allocations")
    category = models.CharField(max_length=20, choices=MaterialCategory.choices)
    allocated_amount = models.DecimalField(max_digits=16, decimal_places=4)
    notes = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = _("Budget Allocation")
        verbose_name_plural = _("Budget Allocations")
        ordering = ["category"]
        constraints = [
            models.UniqueConstraint(fields=["budget", "category"], name="unique_budget_category"),
            models.CheckConstraint(condition=models.Q(allocated_amount__gte=0), name="allocation_amount_non_negative"),
        ]

    def __str__(self):
        return f"{self.budget.name}: {self.category} {self.allocated_amount}"
