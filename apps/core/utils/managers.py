from django.db import models


class StoredValueQuerySet(models.QuerySet):
    def owned_by(self, prefix):
        return self.filter(key__startswith=prefix)


class StoredValueManager(models.Manager):
    def get_queryset(self):
        return StoredValueQuerySet(self.model, using=self._db)

    def owned_by(self, prefix):
        return self.get_queryset().owned_by(prefix)
