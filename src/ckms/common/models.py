"""Models module for the app.

This module contains the common database models shared by the CKMS features.
It includes a TimestampMixin class that provides created_at and updated_at
fields for models."""

from tortoise import fields, models


class TimestampMixin(models.Model):
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        abstract = True
