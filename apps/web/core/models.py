"""
Core models - Users and shared model bases.

Every other model records when it was created and last updated via
TimeStampedModel.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Custom user model.

    The same account type is used by customers and restaurant owners;
    ownership is expressed by Restaurant.owner.
    """

    contact = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=500, blank=True)
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        return self.username


class TimeStampedModel(models.Model):
    """
    Abstract base with created/updated timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
