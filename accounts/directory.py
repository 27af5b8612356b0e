"""
Flat JSON copy of the user directory.

When ``USER_DIRECTORY_FILE`` is set, the whole user list is written to that
file after every registration and successful login. The file is an array of
user records whose ``password_hash`` holds the base64 salt||key blob.

Writes go to a temporary file beside the target and are moved into place with
``os.replace``, so readers always see a complete file.
"""
import json
import logging
import os
import tempfile
from pathlib import Path

from django.conf import settings
from django.db import transaction
from django.utils.dateparse import parse_datetime

from .hashers import blob_from_encoded, encoded_from_blob
from .models import User

logger = logging.getLogger(__name__)


def directory_path():
    path = getattr(settings, 'USER_DIRECTORY_FILE', '')
    return Path(path) if path else None


def user_to_record(user: User) -> dict:
    return {
        'id': user.pk,
        'first_name': user.first_name,
        'last_name': user.last_name,
        'email': user.email,
        'password_hash': blob_from_encoded(user.password),
        'role': user.role,
        'is_active': user.is_active,
        'created_at': user.date_joined.isoformat() if user.date_joined else None,
        'last_login_at': user.last_login.isoformat() if user.last_login else None,
    }


def export_users(path) -> int:
    """Write every user to ``path``. Returns the number of records written."""
    path = Path(path)
    records = [user_to_record(user) for user in User.objects.order_by('pk')]
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f'.{path.name}.', suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as handle:
            json.dump(records, handle, indent=2)
        os.replace(tmp_name, path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.info(f"User directory written to {path} ({len(records)} users)")
    return len(records)


def sync_directory():
    """Rewrite the configured directory file, if any."""
    path = directory_path()
    if path is None:
        return
    export_users(path)


def load_records(path) -> list:
    with open(path, encoding='utf-8') as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError("User directory file must contain a JSON array")
    return data


@transaction.atomic
def import_users(path) -> tuple:
    """
    Create or update users from a directory file.

    Users are matched by email (case-insensitive). Stored password blobs are
    kept as-is so existing passwords keep working.

    Returns:
        (created, updated) counts.
    """
    created = updated = 0
    for record in load_records(path):
        email = (record.get('email') or '').strip()
        if not email:
            logger.warning("Skipping directory record without an email")
            continue

        user = User.objects.get_by_email(email)
        is_new = user is None
        if is_new:
            user = User(username=email.lower(), email=email)

        user.first_name = record.get('first_name', '')
        user.last_name = record.get('last_name', '')
        user.role = record.get('role') or User.ROLE_USER
        user.is_active = record.get('is_active', True)
        if record.get('password_hash'):
            user.password = encoded_from_blob(record['password_hash'])
        else:
            user.set_unusable_password()
        if record.get('created_at'):
            user.date_joined = parse_datetime(record['created_at']) or user.date_joined
        if record.get('last_login_at'):
            user.last_login = parse_datetime(record['last_login_at'])
        user.save()

        if is_new:
            created += 1
        else:
            updated += 1

    logger.info(f"Imported user directory from {path}: {created} created, {updated} updated")
    return created, updated
