from __future__ import annotations

from typing import Iterable

from .models import StoredValue


class DatabaseStore:
    """Key-value store backed by the ``StoredValue`` table.

    Values are opaque strings; callers serialise and parse them. Database errors
    are not caught here.
    """

    def get(self, key: str) -> str | None:
        row = StoredValue.objects.filter(key=key).only('value').first()
        return row.value if row else None

    def set(self, key: str, value: str) -> None:
        StoredValue.objects.update_or_create(key=key, defaults={'value': value})

    def delete(self, keys: Iterable[str]) -> int:
        deleted, _ = StoredValue.objects.filter(key__in=list(keys)).delete()
        return deleted

    def keys(self, prefix: str = '') -> list[str]:
        return list(StoredValue.objects.owned_by(prefix).values_list('key', flat=True))
