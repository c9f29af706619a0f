"""Central kitchen production plans and their per-item details."""

from tortoise import fields
from ...common.models import TimestampMixin


class ProductionPlan(TimestampMixin):
    id = fields.IntField(primary_key=True)
    chain_id = fields.IntField(db_index=True)
    start_date = fields.DateField()
    end_date = fields.DateField(null=True)
    status = fields.CharField(max_length=50, default="draft")  # draft, in_progress, completed

    details: fields.ReverseRelation["ProductionDetail"]

    def __str__(self):
        return f"Plan {self.id} starting {self.start_date} ({self.status})"

    class Meta:
        table = "production_plans"
        ordering = ["start_date"]


class ProductionDetail(TimestampMixin):
    id = fields.IntField(primary_key=True)
    quantity_planned = fields.DecimalField(max_digits=12, decimal_places=3, default=0)
    quantity_produced = fields.DecimalField(max_digits=12, decimal_places=3, default=0)
    status = fields.CharField(max_length=50, default="pending")
    started_at = fields.DatetimeField(null=True)
    completed_at = fields.DatetimeField(null=True)

    plan: fields.ForeignKeyRelation[ProductionPlan] = fields.ForeignKeyField(
        "models.ProductionPlan", related_name="details", on_delete=fields.CASCADE
    )
    item: fields.ForeignKeyRelation["Item"] = fields.ForeignKeyField(
        "models.Item", related_name="production_details", on_delete=fields.RESTRICT
    )

    class Meta:
        table = "production_details"
