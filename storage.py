"""
Object storage gateway for proof uploads and catalog images.

Talks to Cloudflare R2 through its S3-compatible API. The gateway is built
from an explicit StorageSettings value; when any credential is missing it
disables itself and every put() returns None instead of failing at startup.
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from errors import StorageUnavailable

logger = logging.getLogger(__name__)

REQUIRED_SETTINGS = (
    'R2_ACCOUNT_ID',
    'R2_ACCESS_KEY_ID',
    'R2_SECRET_ACCESS_KEY',
    'R2_BUCKET_NAME',
    'R2_PUBLIC_BASE_URL',
)


class StorageSettings:
    """Connection settings for the object store. Disabled unless complete."""

    def __init__(self, account_id=None, access_key_id=None, secret_access_key=None,
                 bucket_name=None, public_base_url=None):
        self.account_id = account_id
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.bucket_name = bucket_name
        self.public_base_url = public_base_url.rstrip('/') if public_base_url else public_base_url

    @classmethod
    def from_config(cls, config):
        """Build settings from a Flask config (or any mapping)."""
        return cls(
            account_id=config.get('R2_ACCOUNT_ID'),
            access_key_id=config.get('R2_ACCESS_KEY_ID'),
            secret_access_key=config.get('R2_SECRET_ACCESS_KEY'),
            bucket_name=config.get('R2_BUCKET_NAME'),
            public_base_url=config.get('R2_PUBLIC_BASE_URL'),
        )

    @property
    def enabled(self):
        return all([
            self.account_id,
            self.access_key_id,
            self.secret_access_key,
            self.bucket_name,
            self.public_base_url,
        ])

    @property
    def endpoint_url(self):
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    def missing(self):
        """Names of the config keys that are not set."""
        values = {
            'R2_ACCOUNT_ID': self.account_id,
            'R2_ACCESS_KEY_ID': self.access_key_id,
            'R2_SECRET_ACCESS_KEY': self.secret_access_key,
            'R2_BUCKET_NAME': self.bucket_name,
            'R2_PUBLIC_BASE_URL': self.public_base_url,
        }
        return [name for name in REQUIRED_SETTINGS if not values[name]]


class ObjectStorageGateway:
    """
    Stores bytes under a key and returns the public URL.

    put() returns None when the gateway is disabled and raises
    StorageUnavailable when a configured write fails. Callers treat both as
    expected outcomes.
    """

    def __init__(self, settings, client=None):
        self.settings = settings
        self._client = client

    @property
    def enabled(self):
        return self.settings.enabled

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                's3',
                region_name='auto',
                endpoint_url=self.settings.endpoint_url,
                aws_access_key_id=self.settings.access_key_id,
                aws_secret_access_key=self.settings.secret_access_key,
            )
        return self._client

    def public_url(self, key):
        return f"{self.settings.public_base_url}/{self.settings.bucket_name}/{key}"

    def put(self, data, key, mimetype=None):
        if not self.enabled:
            logger.warning(f"Object storage disabled, not storing {key}")
            return None

        extra = {'ContentType': mimetype} if mimetype else {}
        try:
            self.client.put_object(
                Bucket=self.settings.bucket_name,
                Key=key,
                Body=data,
                **extra
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Object storage write failed for {key}: {e}")
            raise StorageUnavailable('The file could not be stored. Please try again later.') from e

        return self.public_url(key)


def init_storage(app):
    """Create the gateway from app config and register it on the app."""
    settings = StorageSettings.from_config(app.config)
    if not settings.enabled:
        app.logger.warning(
            f"Object storage disabled, missing settings: {', '.join(settings.missing())}"
        )
    gateway = ObjectStorageGateway(settings)
    app.extensions['object_storage'] = gateway
    return gateway


def get_storage_gateway():
    """Return the gateway registered on the current app."""
    from flask import current_app
    return current_app.extensions['object_storage']
