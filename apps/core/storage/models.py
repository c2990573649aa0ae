from django.db import models

from apps.core.utils.managers import StoredValueManager


class StoredValue(models.Model):
    """One JSON document per key; the whole collection is rewritten on every save."""

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    objects = StoredValueManager()

    class Meta:
        ordering = ['key']

    def __str__(self):
        return self.key
