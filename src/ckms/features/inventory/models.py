"""Data models for inventory management: catalog items, per-store stock and stock alerts."""

from tortoise import fields
from ...common.models import TimestampMixin


class Item(TimestampMixin):
    id = fields.IntField(primary_key=True)
    chain_id = fields.IntField(db_index=True)
    name = fields.CharField(max_length=255)
    unit = fields.CharField(max_length=20, default="unit")

    inventory: fields.ReverseRelation["Inventory"]
    production_details: fields.ReverseRelation["ProductionDetail"]

    def __str__(self):
        return self.name

    class Meta:
        table = "items"


class Inventory(TimestampMixin):
    id = fields.IntField(primary_key=True)
    quantity = fields.DecimalField(max_digits=12, decimal_places=3, default=0)
    min_stock_level = fields.DecimalField(max_digits=12, decimal_places=3, null=True)
    max_stock_level = fields.DecimalField(max_digits=12, decimal_places=3, null=True)

    store: fields.ForeignKeyRelation["Store"] = fields.ForeignKeyField(
        "models.Store", related_name="inventory", on_delete=fields.CASCADE
    )
    item: fields.ForeignKeyRelation[Item] = fields.ForeignKeyField(
        "models.Item", related_name="inventory", on_delete=fields.CASCADE
    )

    def __str__(self):
        return f"Item {self.item_id} @ Store {self.store_id}: {self.quantity}"

    class Meta:
        table = "inventory"
        unique_together = (("store", "item"),)


class Alert(TimestampMixin):
    id = fields.IntField(primary_key=True)
    alert_type = fields.CharField(max_length=50)  # low_stock, out_of_stock, ...
    message = fields.TextField(null=True)
    is_resolved = fields.BooleanField(default=False)

    store: fields.ForeignKeyRelation["Store"] = fields.ForeignKeyField(
        "models.Store", related_name="alerts", on_delete=fields.CASCADE
    )
    item: fields.ForeignKeyRelation[Item] = fields.ForeignKeyField(
        "models.Item", related_name="alerts", on_delete=fields.SET_NULL, null=True
    )

    class Meta:
        table = "alerts"
