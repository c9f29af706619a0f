from enum import Enum

from tortoise import fields
from ...common.models import TimestampMixin


class OrderStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    IN_PRODUCTION = "in_production"
    READY = "ready"
    IN_DELIVERY = "in_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ShipmentStatus(str, Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    FAILED = "failed"


class Order(TimestampMixin):
    id = fields.IntField(primary_key=True)
    chain_id = fields.IntField(db_index=True)
    status = fields.CharEnumField(OrderStatus, max_length=20, default=OrderStatus.DRAFT)
    total_amount = fields.DecimalField(max_digits=12, decimal_places=2, null=True)
    requested_date = fields.DateField(null=True)
    notes = fields.TextField(null=True)

    store: fields.ForeignKeyRelation["Store"] = fields.ForeignKeyField(
        "models.Store", related_name="orders", on_delete=fields.RESTRICT
    )

    shipments: fields.ReverseRelation["Shipment"]

    def __str__(self):
        return f"Order {self.id} - Status: {self.status}"

    class Meta:
        table = "orders"
        ordering = ["created_at"]


class Shipment(TimestampMixin):
    id = fields.IntField(primary_key=True)
    status = fields.CharEnumField(ShipmentStatus, max_length=20, default=ShipmentStatus.PENDING)
    shipped_date = fields.DatetimeField(null=True)
    delivered_date = fields.DatetimeField(null=True)

    order: fields.ForeignKeyRelation[Order] = fields.ForeignKeyField(
        "models.Order", related_name="shipments", on_delete=fields.CASCADE
    )

    def __str__(self):
        return f"Shipment {self.id} for Order {self.order_id} - Status: {self.status}"

    class Meta:
        table = "shipments"
