from rest_framework import serializers

from core_backend.base import ActorSerializerMixin, BaseModelSerializer
from materials.models import MaterialCategory
from .models import Budget, BudgetAllocation, BudgetPeriod
from .services import BudgetTracker


class BudgetAllocationSerializer(BaseModelSerializer):
    category = serializers.ChoiceField(choices=MaterialCategory.choices)

    class Meta:
        model = BudgetAllocation
        fields = ["id", "category", "allocated_amount", "notes"]
        read_only_fields = ["id"]


class BudgetSerializer(ActorSerializerMixin, BaseModelSerializer):
    """
    Budgets with their allocations. Creation goes through BudgetTracker so
    allocations are checked against the total; after that only the name and
    description can change.
    """
    period_type = serializers.ChoiceField(choices=BudgetPeriod.choices)
    allocations = BudgetAllocationSerializer(many=True)
    created_by_username = serializers.CharField(source="created_by.username", read_only=True)

    class Meta:
        model = Budget
        fields = [
            "id",
            "name",
            "description",
            "period_type",
            "start_date",
            "end_date",
            "total_budget",
            "allocations",
            "is_active",
            "created_by",
            "created_by_username",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "is_active", "created_by", "created_at", "updated_at"]
        select_related_fields = ["created_by"]
        prefetch_related_fields = ["allocations"]

    def create(self, validated_data):
        return BudgetTracker().create_budget(
            name=validated_data["name"],
            period_type=validated_data["period_type"],
            start_date=validated_data["start_date"],
            end_date=validated_data["end_date"],
            total_budget=validated_data["total_budget"],
            allocations=validated_data.get("allocations", []),
            created_by=self.get_actor(),
            description=validated_data.get("description", ""),
        )

    def update(self, instance, validated_data):
        changed = sorted(
            field for field in ("period_type", "start_date", "end_date", "total_budget")
            if field in validated_data and validated_data[field] != getattr(instance, field)
        )
        if "allocations" in validated_data:
            current = {(a.category, a.allocated_amount) for a in instance.allocations.all()}
            requested = {(a["category"], a["allocated_amount"]) for a in validated_data["allocations"]}
            if current != requested:
                changed.append("allocations")
        if changed:
            raise serializers.ValidationError(
                {field: "Cannot be changed once the budget exists; create a new budget instead." for field in changed}
            )
        for field in ("name", "description"):
            if field in validated_data:
                setattr(instance, field, validated_data[field])
        instance.save()
        return instance
