# PATH: apps/core/models/base.py
"""
Shared abstract base models (TimestampModel, BaseModel).
"""
from django.db import models


class TimestampModel(models.Model):
    """created_at / updated_at are recorded automatically."""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BaseModel(TimestampModel):
    class Meta:
        abstract = True
