from __future__ import annotations

import json
import logging
from dataclasses import replace

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.records import SchoolSettings, Theme
from apps.core.storage.repository import Collection, decode_document, encode_value

logger = logging.getLogger(__name__)

BACKUP_COLLECTIONS = (
    Collection.STUDENTS,
    Collection.TEACHERS,
    Collection.FEES,
    Collection.EXPENSES,
    Collection.ATTENDANCE,
    Collection.GRADES,
    Collection.ACTIVITIES,
    Collection.SETTINGS,
    Collection.ANNOUNCEMENT,
)


def backup_filename(today) -> str:
    return f'schoolbook_backup_{today}.json'


def export_snapshot(repository, now=None) -> dict:
    """Every owned collection plus a timestamp and format version, ready for ``json.dumps``."""
    now = now or timezone.now()
    snapshot = {
        collection.value: encode_value(collection, repository.get(collection))
        for collection in BACKUP_COLLECTIONS
    }
    snapshot['timestamp'] = now.isoformat()
    snapshot['appVersion'] = getattr(settings, 'SCHOOLBOOK_BACKUP_APP_VERSION', '1.4')
    return snapshot


def dump_snapshot(repository, now=None) -> str:
    return json.dumps(export_snapshot(repository, now=now), indent=2)


def _load(data):
    if isinstance(data, (bytes, bytearray)):
        data = data.decode('utf-8')
    if isinstance(data, str):
        data = json.loads(data)
    return data


def restore_snapshot(repository, data) -> bool:
    """Overwrite each collection present in ``data``; absent or null keys are left alone.

    An empty announcement counts as absent. ``data`` may be a dict or JSON text.
    Returns False, writing nothing, when the input is not a JSON object or a
    present collection does not parse.
    """
    try:
        data = _load(data)
    except ValueError as exc:
        logger.warning('Failed to restore data: %s', exc)
        return False
    if not isinstance(data, dict):
        logger.warning('Failed to restore data: backup is not a JSON object.')
        return False

    decoded = {}
    for collection in BACKUP_COLLECTIONS:
        document = data.get(collection.value)
        if document is None or (collection is Collection.ANNOUNCEMENT and document == ''):
            continue
        try:
            decoded[collection] = decode_document(collection, document)
        except (TypeError, ValueError) as exc:
            logger.warning('Failed to restore data: %s is invalid (%s).', collection.value, exc)
            return False

    with transaction.atomic():
        for collection, value in decoded.items():
            repository.set(collection, value)
    logger.info('Restored %s collections from backup.', len(decoded))
    return True


def factory_reset(repository) -> int:
    return repository.clear_all()


def update_school_settings(repository, **changes) -> SchoolSettings:
    current = repository.school_settings()
    if 'theme' in changes:
        try:
            changes['theme'] = Theme(changes['theme'])
        except ValueError:
            raise ValidationError(f"Unknown theme: {changes['theme']}.")
    for list_field in ('subjects', 'fee_types'):
        if list_field in changes:
            changes[list_field] = [item.strip() for item in changes[list_field] if item and item.strip()]
    try:
        updated = replace(current, **changes)
    except TypeError as exc:
        raise ValidationError(str(exc))
    repository.save_school_settings(updated)
    return updated


def update_announcement(repository, text) -> str:
    repository.save_announcement(text)
    return text
