"""
Cost analytics: what stock costs to buy, what it is worth once used, and
where money is lost to waste, overstock and supplier pricing.

Figures come from stock entries, section consumption, waste movements,
current stock levels and purchase orders. Everything is computed at full
precision; money is rounded to cents and percentages to two places only
in the returned dicts.
"""
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from statistics import mean, pstdev
import logging

from django.conf import settings
from django.db.models import Count, Max, Sum
from django.utils import timezone

from budgets.services import Priority, Trend
from core_backend.exceptions import ValidationError
from inventory.models import MovementType, StockEntry, StockMovement
from inventory.services import StockLedger
from materials.models import MaterialCategory, RawMaterial, Supplier
from measurements.services import UnitConversionService
from purchasing.models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus
from purchasing.services import PurchaseOrderWorkflow
from sections.models import ConsumptionReason, SectionConsumption, SectionInventory
from .inventory_reports import validate_days

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
UNIT_COST = Decimal("0.000001")
DAYS_PER_YEAR = Decimal("365")

WASTE_MOVEMENTS = [MovementType.EXPIRED, MovementType.DAMAGED]
WASTE_REASONS = [ConsumptionReason.WASTE, ConsumptionReason.SPOILAGE]
PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def _setting(name, default) -> Decimal:
    return Decimal(str(getattr(settings, name, default)))


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


def _unit_cost(value) -> Decimal:
    return Decimal(value or 0).quantize(UNIT_COST, rounding=ROUND_HALF_UP)


def _percent(part, whole) -> Decimal:
    if not whole:
        return ZERO.quantize(CENT)
    return (Decimal(part) / Decimal(whole) * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def _ratio(part, whole) -> Decimal:
    if not whole:
        return ZERO.quantize(CENT)
    return (Decimal(part) / Decimal(whole)).quantize(CENT, rounding=ROUND_HALF_UP)


def _week_start(day):
    return day - timedelta(days=day.weekday())


def _supplier_label(entry) -> str:
    if entry.supplier is not None:
        return entry.supplier.name
    return entry.supplier_name or "Unknown supplier"


class CostAnalyticsService:
    """Cost, waste and supplier analytics for the food-cost dashboard."""

    def __init__(self):
        self._conversion = UnitConversionService()
        self._holding_costs = {}

    def _holding_cost(self, material) -> Decimal:
        """Effective cost of one holding unit, looked up once per material."""
        if material.pk not in self._holding_costs:
            self._holding_costs[material.pk] = self._conversion.effective_unit_cost(material).value
        return self._holding_costs[material.pk]

    @staticmethod
    def _validate_category(category):
        if category and category not in MaterialCategory.values:
            raise ValidationError(
                f"Unknown material category {category!r}",
                field="category",
                details={"allowed": list(MaterialCategory.values)},
            )
        return category or None

    @staticmethod
    def _window(days):
        return timezone.localdate() - timedelta(days=days), timezone.now() - timedelta(days=days)

    @staticmethod
    def _date_range(since_date):
        return {"start": str(since_date), "end": str(timezone.localdate())}

    @staticmethod
    def _entries(since_date, category=None):
        entries = StockEntry.objects.filter(received_date__gte=since_date).select_related("material", "supplier")
        if category:
            entries = entries.filter(material__category=category)
        return entries.order_by("received_date", "created_at")

    def _consumptions(self, since, category=None):
        """(consumption, value) pairs, valued at the effective holding-unit cost."""
        queryset = SectionConsumption.objects.filter(consumed_at__gte=since).select_related("material")
        if category:
            queryset = queryset.filter(material__category=category)
        return [
            (consumption, consumption.quantity * self._holding_cost(consumption.material))
            for consumption in queryset.order_by("consumed_at", "pk")
        ]

    @staticmethod
    def _ledger_waste(since, category=None):
        """
        (movement, value) pairs for EXPIRED and DAMAGED movements.

        A movement tied to a stock entry is valued at that entry's unit
        cost, otherwise at the material's current unit cost.
        """
        queryset = StockMovement.objects.filter(
            movement_type__in=WASTE_MOVEMENTS, created_at__gte=since
        ).select_related("material", "stock_entry")
        if category:
            queryset = queryset.filter(material__category=category)
        rows = []
        for movement in queryset.order_by("created_at", "pk"):
            unit_cost = movement.stock_entry.unit_cost if movement.stock_entry else movement.material.unit_cost
            rows.append((movement, movement.quantity * unit_cost))
        return rows

    def _inventory_values(self, category=None) -> dict:
        """Current value of every active material, ledger and section holdings together."""
        materials = RawMaterial.objects.order_by("name")
        if category:
            materials = materials.filter(category=category)
        materials = list(materials)

        values = {}
        for material, level in zip(materials, StockLedger.compute_stock_levels(materials)):
            ledger_quantity = max(level.available_units_quantity, ZERO)
            values[material.pk] = {
                "material": material,
                "ledger_quantity": ledger_quantity,
                "value": ledger_quantity * material.unit_cost,
            }
        for holding in SectionInventory.objects.filter(material_id__in=list(values)).select_related("material"):
            values[holding.material_id]["value"] += holding.quantity * self._holding_cost(holding.material)
        return values

    @staticmethod
    def _cost_summary(row, days) -> dict:
        purchase = row["purchase_cost"]
        consumption = row["consumption_cost"]
        waste = row["waste_cost"]
        inventory = row["inventory_value"]
        return {
            "purchase_cost": _money(purchase),
            "consumption_cost": _money(consumption),
            "waste_cost": _money(waste),
            "inventory_value": _money(inventory),
            "food_cost_percent": _percent(consumption, purchase),
            "waste_percent": _percent(waste, purchase),
            "cost_efficiency_percent": _percent(consumption, consumption + waste),
            "inventory_turnover": _ratio(consumption * DAYS_PER_YEAR / days, inventory),
        }

    def cost_overview(self, days=30, category=None) -> dict:
        """
        Purchase, consumption and waste cost over the last ``days`` days.

        - food cost %: consumption cost over purchase cost
        - waste %: waste cost over purchase cost
        - cost efficiency %: share of consumed value that was not wasted
        - inventory turnover: consumption cost over current inventory
          value, annualised

        Waste is ledger EXPIRED/DAMAGED movements plus section consumption
        recorded as waste or spoilage.
        """
        days = validate_days(days)
        category = self._validate_category(category)
        since_date, since = self._window(days)

        categories = defaultdict(lambda: {
            "purchase_cost": ZERO,
            "consumption_cost": ZERO,
            "waste_cost": ZERO,
            "inventory_value": ZERO,
        })

        for entry in self._entries(since_date, category):
            categories[entry.material.category]["purchase_cost"] += entry.quantity * entry.unit_cost

        section_waste = ZERO
        for consumption, value in self._consumptions(since, category):
            row = categories[consumption.material.category]
            if consumption.reason in WASTE_REASONS:
                row["waste_cost"] += value
                section_waste += value
            else:
                row["consumption_cost"] += value

        ledger_waste = ZERO
        waste_by_type = defaultdict(lambda: {"movements": 0, "value": ZERO})
        for movement, value in self._ledger_waste(since, category):
            categories[movement.material.category]["waste_cost"] += value
            ledger_waste += value
            waste_by_type[movement.movement_type]["movements"] += 1
            waste_by_type[movement.movement_type]["value"] += value

        for row in self._inventory_values(category).values():
            categories[row["material"].category]["inventory_value"] += row["value"]

        totals = {
            key: sum((row[key] for row in categories.values()), ZERO)
            for key in ("purchase_cost", "consumption_cost", "waste_cost", "inventory_value")
        }
        breakdown = [
            {"category": name, **self._cost_summary(row, days)}
            for name, row in categories.items()
        ]
        breakdown.sort(key=lambda row: (-row["purchase_cost"], row["category"]))

        return {
            "period_days": days,
            "date_range": self._date_range(since_date),
            "category": category,
            "summary": self._cost_summary(totals, days),
            "waste": {
                "ledger_value": _money(ledger_waste),
                "section_value": _money(section_waste),
                "by_movement_type": [
                    {"movement_type": name, "movements": data["movements"], "value": _money(data["value"])}
                    for name, data in sorted(waste_by_type.items())
                ],
            },
            "categories": breakdown,
        }

    def supplier_cost_analysis(self, days=90) -> dict:
        """
        What each supplier was paid and where a cheaper supplier exists.

        Price consistency is 100 minus the coefficient of variation of a
        supplier's unit costs, per material and then averaged. An
        opportunity is a material bought from several suppliers where the
        most-used one is not the cheapest; savings are the price gap times
        the quantity bought from the most-used supplier.
        """
        days = validate_days(days)
        since_date, _ = self._window(days)

        suppliers = {}
        purchases = defaultdict(dict)
        for entry in self._entries(since_date):
            label = _supplier_label(entry)
            cost = entry.quantity * entry.unit_cost

            supplier = suppliers.get(label)
            if supplier is None:
                supplier = suppliers[label] = {
                    "supplier_id": entry.supplier_id,
                    "supplier_name": label,
                    "total_cost": ZERO,
                    "entries": 0,
                    "categories": set(),
                    "prices": defaultdict(list),
                    "last_received": None,
                }
            supplier["total_cost"] += cost
            supplier["entries"] += 1
            supplier["categories"].add(entry.material.category)
            supplier["prices"][entry.material_id].append(entry.unit_cost)
            supplier["last_received"] = entry.received_date

            bought = purchases[entry.material_id].setdefault(label, {
                "material": entry.material,
                "quantity": ZERO,
                "cost": ZERO,
            })
            bought["quantity"] += entry.quantity
            bought["cost"] += cost

        scorecards = []
        for supplier in suppliers.values():
            consistency = [
                max(ZERO, HUNDRED - pstdev(prices) / mean(prices) * HUNDRED) if mean(prices) > 0 else ZERO
                for prices in supplier["prices"].values()
            ]
            scorecards.append({
                "supplier_id": supplier["supplier_id"],
                "supplier_name": supplier["supplier_name"],
                "total_cost": _money(supplier["total_cost"]),
                "entries": supplier["entries"],
                "average_entry_value": _money(supplier["total_cost"] / supplier["entries"]),
                "material_count": len(supplier["prices"]),
                "categories": sorted(supplier["categories"]),
                "last_received": supplier["last_received"],
                "price_consistency": _money(mean(consistency)),
            })
        scorecards.sort(key=lambda row: (-row["total_cost"], row["supplier_name"]))

        opportunities = []
        for by_supplier in purchases.values():
            if len(by_supplier) < 2:
                continue
            averages = {label: bought["cost"] / bought["quantity"] for label, bought in by_supplier.items()}
            current = max(by_supplier, key=lambda label: (by_supplier[label]["quantity"], label))
            cheapest = min(averages, key=lambda label: (averages[label], label))
            difference = averages[current] - averages[cheapest]
            if difference <= 0:
                continue

            material = by_supplier[current]["material"]
            savings = difference * by_supplier[current]["quantity"]
            opportunities.append({
                "material_id": material.pk,
                "material_name": material.name,
                "unit": material.unit,
                "current_supplier": current,
                "current_unit_cost": _unit_cost(averages[current]),
                "cheapest_supplier": cheapest,
                "cheapest_unit_cost": _unit_cost(averages[cheapest]),
                "quantity": by_supplier[current]["quantity"],
                "potential_savings": _money(savings),
                "annual_savings": _money(savings * DAYS_PER_YEAR / days),
                "savings_percent": _percent(difference, averages[current]),
            })
        opportunities.sort(key=lambda row: (-row["potential_savings"], row["material_name"]))

        return {
            "period_days": days,
            "date_range": self._date_range(since_date),
            "suppliers": scorecards,
            "opportunities": opportunities,
            "summary": {
                "supplier_count": len(scorecards),
                "total_cost": sum((row["total_cost"] for row in scorecards), ZERO),
                "opportunity_count": len(opportunities),
                "total_potential_savings": sum((row["potential_savings"] for row in opportunities), ZERO),
            },
        }

    def supplier_performance(self, supplier_id, days=90) -> dict:
        """
        Order history of one supplier over the last ``days`` days.

        Drafts and cancelled orders are left out. On-time rate counts
        received orders delivered on or before their expected date, among
        those that had one; fill rate is quantity received over quantity
        ordered.

        Raises:
            ValidationError: If the supplier does not exist.
        """
        days = validate_days(days)
        supplier = Supplier.all_objects.filter(pk=supplier_id).first()
        if supplier is None:
            raise ValidationError(f"Supplier {supplier_id} does not exist", field="supplier")
        since_date, _ = self._window(days)

        orders = list(
            PurchaseOrder.objects.filter(supplier=supplier, order_date__gte=since_date)
            .exclude(status__in=[PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.CANCELLED])
            .order_by("-order_date", "-created_at")
        )
        total_value = sum((order.total_amount for order in orders), ZERO)
        received = [o for o in orders if o.status == PurchaseOrderStatus.RECEIVED and o.received_date]
        scheduled = [o for o in received if o.expected_date]
        on_time = sum(1 for o in scheduled if o.received_date <= o.expected_date)
        lead_times = [(o.received_date - o.order_date).days for o in received]
        quantities = PurchaseOrderItem.objects.filter(order__in=orders).aggregate(
            ordered=Sum("quantity_ordered"), received=Sum("quantity_received")
        )

        return {
            "supplier_id": supplier.pk,
            "supplier_name": supplier.name,
            "period_days": days,
            "metrics": {
                "total_orders": len(orders),
                "total_value": _money(total_value),
                "average_order_value": _money(total_value / len(orders)) if orders else _money(0),
                "received_orders": len(received),
                "open_orders": sum(1 for o in orders if o.status in PurchaseOrderWorkflow.OPEN_STATUSES),
                "on_time_rate": _percent(on_time, len(scheduled)),
                "fill_rate": _percent(quantities["received"] or 0, quantities["ordered"] or 0),
                "average_lead_time_days": _ratio(sum(lead_times), len(lead_times)) if lead_times else None,
            },
            "recent_orders": [
                {
                    "id": str(order.pk),
                    "po_number": order.po_number,
                    "order_date": order.order_date,
                    "expected_date": order.expected_date,
                    "received_date": order.received_date,
                    "status": order.status,
                    "total_amount": _money(order.total_amount),
                }
                for order in orders[:5]
            ],
        }

    def supplier_comparison(self, material_id, days=180) -> dict:
        """
        Prices paid to each supplier of one material, cheapest first.

        Savings compare each supplier's weighted average unit cost with the
        material's current unit cost.

        Raises:
            ValidationError: If the material does not exist.
        """
        days = validate_days(days)
        material = RawMaterial.all_objects.filter(pk=material_id).first()
        if material is None:
            raise ValidationError(f"Raw material {material_id} does not exist", field="material")
        since_date, _ = self._window(days)

        rows = {}
        for entry in self._entries(since_date).filter(material=material):
            label = _supplier_label(entry)
            row = rows.setdefault(label, {
                "supplier_id": entry.supplier_id,
                "quantity": ZERO,
                "cost": ZERO,
                "entries": 0,
            })
            row["quantity"] += entry.quantity
            row["cost"] += entry.quantity * entry.unit_cost
            row["entries"] += 1
            row["last_unit_cost"] = entry.unit_cost
            row["last_received"] = entry.received_date

        current_cost = material.unit_cost
        suppliers = []
        for label, row in rows.items():
            average = row["cost"] / row["quantity"]
            suppliers.append({
                "supplier_id": row["supplier_id"],
                "supplier_name": label,
                "is_current_supplier": row["supplier_id"] is not None and row["supplier_id"] == material.supplier_id,
                "average_unit_cost": _unit_cost(average),
                "last_unit_cost": row["last_unit_cost"],
                "last_received": row["last_received"],
                "quantity": row["quantity"],
                "entries": row["entries"],
                "savings_vs_current": _unit_cost(current_cost - average),
                "savings_percent": _percent(current_cost - average, current_cost),
            })
        suppliers.sort(key=lambda row: (row["average_unit_cost"], row["supplier_name"]))

        averages = [row["average_unit_cost"] for row in suppliers]
        return {
            "material_id": material.pk,
            "material_name": material.name,
            "unit": material.unit,
            "current_unit_cost": current_cost,
            "period_days": days,
            "suppliers": suppliers,
            "summary": {
                "supplier_count": len(suppliers),
                "lowest_unit_cost": min(averages) if averages else None,
                "highest_unit_cost": max(averages) if averages else None,
                "average_unit_cost": _unit_cost(mean(averages)) if averages else None,
                "potential_savings_per_unit": _unit_cost(max(current_cost - min(averages), ZERO)) if averages else None,
            },
        }

    @staticmethod
    def _trend_analysis(costs) -> dict:
        """Direction, volatility and a naive forecast from the last four weeks of purchases."""
        recent = costs[-4:]
        if len(recent) < 2:
            return {
                "direction": Trend.STABLE,
                "volatility_percent": ZERO.quantize(CENT),
                "next_week_forecast": _money(recent[0] if recent else 0),
                "weeks_analyzed": len(recent),
            }

        average = mean(recent)
        if recent[-1] > recent[0]:
            direction = Trend.INCREASING
        elif recent[-1] < recent[0]:
            direction = Trend.DECREASING
        else:
            direction = Trend.STABLE
        return {
            "direction": direction,
            "volatility_percent": _percent(pstdev(recent), average),
            "next_week_forecast": _money(average),
            "weeks_analyzed": len(recent),
        }

    def cost_trends(self, days=90) -> dict:
        """Weekly purchase, consumption and waste cost, weeks starting on Monday."""
        days = validate_days(days)
        since_date, since = self._window(days)

        weeks = defaultdict(lambda: {
            "purchase_cost": ZERO,
            "entries": 0,
            "consumption_cost": ZERO,
            "waste_cost": ZERO,
        })
        for entry in self._entries(since_date):
            week = weeks[_week_start(entry.received_date)]
            week["purchase_cost"] += entry.quantity * entry.unit_cost
            week["entries"] += 1
        for consumption, value in self._consumptions(since):
            week = weeks[_week_start(timezone.localtime(consumption.consumed_at).date())]
            if consumption.reason in WASTE_REASONS:
                week["waste_cost"] += value
            else:
                week["consumption_cost"] += value
        for movement, value in self._ledger_waste(since):
            weeks[_week_start(timezone.localtime(movement.created_at).date())]["waste_cost"] += value

        weekly = []
        for week_start in sorted(weeks):
            data = weeks[week_start]
            weekly.append({
                "week_start": week_start,
                "purchase_cost": _money(data["purchase_cost"]),
                "consumption_cost": _money(data["consumption_cost"]),
                "waste_cost": _money(data["waste_cost"]),
                "entries": data["entries"],
                "average_entry_value": _money(data["purchase_cost"] / data["entries"]) if data["entries"] else _money(0),
                "purchase_to_consumption": _ratio(data["purchase_cost"], data["consumption_cost"]),
            })

        return {
            "period_days": days,
            "date_range": self._date_range(since_date),
            "weeks": weekly,
            "analysis": self._trend_analysis([weeks[week_start]["purchase_cost"] for week_start in sorted(weeks)]),
        }

    def _overstock_items(self) -> list:
        ratio = _setting("COST_OVERSTOCK_RATIO", "1.2")
        items = []

        materials = list(RawMaterial.objects.order_by("name"))
        for material, level in zip(materials, StockLedger.compute_stock_levels(materials)):
            available = level.available_units_quantity
            if level.max_level > 0 and available > level.max_level * ratio:
                excess = available - level.max_level
                items.append({
                    "material_id": material.pk,
                    "material_name": material.name,
                    "section_id": None,
                    "location": "ledger",
                    "quantity": available,
                    "max_level": level.max_level,
                    "excess_quantity": excess,
                    "unit": material.unit,
                    "excess_value": _money(excess * material.unit_cost),
                })

        holdings = SectionInventory.objects.filter(
            max_level__gt=0, material__is_active=True
        ).select_related("material", "section")
        for holding in holdings.order_by("pk"):
            if holding.quantity > holding.max_level * ratio:
                material = holding.material
                excess = holding.quantity - holding.max_level
                items.append({
                    "material_id": material.pk,
                    "material_name": material.name,
                    "section_id": holding.section_id,
                    "location": holding.section.name,
                    "quantity": holding.quantity,
                    "max_level": holding.max_level,
                    "excess_quantity": excess,
                    "unit": str(self._conversion.holding_unit(material)),
                    "excess_value": _money(excess * self._holding_cost(material)),
                })

        items.sort(key=lambda item: (-item["excess_value"], item["material_name"]))
        return items

    def _slow_moving_items(self, since) -> list:
        min_value = _setting("COST_SLOW_MOVING_MIN_VALUE", "100")
        min_uses = int(_setting("COST_SLOW_MOVING_MIN_USES", "5"))
        idle_days = int(_setting("COST_SLOW_MOVING_IDLE_DAYS", "15"))

        usage = {
            row["material_id"]: row
            for row in SectionConsumption.objects.filter(consumed_at__gte=since)
            .exclude(reason__in=WASTE_REASONS)
            .order_by()
            .values("material_id")
            .annotate(uses=Count("id"), last_used=Max("consumed_at"))
        }

        now = timezone.now()
        items = []
        for material_id, row in self._inventory_values().items():
            if row["value"] <= min_value:
                continue
            stats = usage.get(material_id)
            uses = stats["uses"] if stats else 0
            days_idle = (now - stats["last_used"]).days if stats else None
            if uses >= min_uses and days_idle is not None and days_idle <= idle_days:
                continue
            material = row["material"]
            items.append({
                "material_id": material_id,
                "material_name": material.name,
                "category": material.category,
                "stock_value": _money(row["value"]),
                "uses": uses,
                "days_idle": days_idle,
                "action": "Reduce order quantities" if uses else "Review menu use or stop stocking",
            })

        items.sort(key=lambda item: (-item["stock_value"], item["material_name"]))
        return items

    def optimization_recommendations(self, days=30) -> dict:
        """
        Threshold-driven suggestions for cutting food cost.

        OVERSTOCK_ALERT and WASTE_REDUCTION are HIGH priority,
        SUPPLIER_OPTIMIZATION and SLOW_MOVING_INVENTORY MEDIUM. Within a
        priority, larger impact comes first.
        """
        days = validate_days(days)
        _, since = self._window(days)
        recommendations = []

        overstock = self._overstock_items()
        if overstock:
            excess_value = sum((item["excess_value"] for item in overstock), ZERO)
            recommendations.append({
                "type": "OVERSTOCK_ALERT",
                "priority": Priority.HIGH,
                "message": (
                    f"{len(overstock)} item(s) are well above their maximum level, "
                    f"holding {excess_value} in excess stock"
                ),
                "impact": excess_value,
                "items": overstock[:10],
            })

        opportunities = self.supplier_cost_analysis(days)["opportunities"][:8]
        if opportunities:
            savings = sum((row["potential_savings"] for row in opportunities), ZERO)
            annual = sum((row["annual_savings"] for row in opportunities), ZERO)
            recommendations.append({
                "type": "SUPPLIER_OPTIMIZATION",
                "priority": Priority.MEDIUM,
                "message": (
                    f"Buying {len(opportunities)} material(s) from their cheapest supplier would have saved "
                    f"{savings} over {days} days ({annual} a year)"
                ),
                "impact": annual,
                "items": opportunities,
            })

        slow_moving = self._slow_moving_items(since)
        if slow_moving:
            tied_up = sum((item["stock_value"] for item in slow_moving), ZERO)
            recommendations.append({
                "type": "SLOW_MOVING_INVENTORY",
                "priority": Priority.MEDIUM,
                "message": f"{len(slow_moving)} slow-moving item(s) tie up {tied_up} in stock",
                "impact": tied_up,
                "items": slow_moving[:12],
            })

        overview = self.cost_overview(days)
        waste_cost = overview["summary"]["waste_cost"]
        if waste_cost > 0:
            recommendations.append({
                "type": "WASTE_REDUCTION",
                "priority": Priority.HIGH,
                "message": (
                    f"{waste_cost} was lost to waste in the last {days} days "
                    f"({overview['summary']['waste_percent']}% of purchases)"
                ),
                "impact": waste_cost,
                "items": sorted(
                    (
                        {"category": row["category"], "waste_cost": row["waste_cost"], "waste_percent": row["waste_percent"]}
                        for row in overview["categories"]
                        if row["waste_cost"] > 0
                    ),
                    key=lambda row: (-row["waste_cost"], row["category"]),
                ),
            })

        recommendations.sort(key=lambda r: (PRIORITY_ORDER[r["priority"]], -r["impact"]))
        logger.info(f"Built {len(recommendations)} cost recommendation(s) over {days} days")
        return {
            "period_days": days,
            "recommendations": recommendations,
            "summary": {
                "total": len(recommendations),
                "high_priority": sum(1 for r in recommendations if r["priority"] == Priority.HIGH),
                "medium_priority": sum(1 for r in recommendations if r["priority"] == Priority.MEDIUM),
                "low_priority": sum(1 for r in recommendations if r["priority"] == Priority.LOW),
                "total_impact": sum((r["impact"] for r in recommendations), ZERO),
            },
        }
