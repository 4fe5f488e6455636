'''
    MediaConfig gathers everything the media components need (storage root, URL prefixes,
    accepted types) into one object handed to their constructors.

    get_media_config() builds it from django.conf.settings once and caches it.
    The cache is dropped whenever Django reports a settings change (override_settings in tests).
'''

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

from .models import AcceptedTypeTable

DEFAULTS = {
    'MEDIA_URL_PREFIX': '/api/media/',
    'UPLOAD_URL': '/api/upload',
    'UPLOAD_FIELD': 'uploaded_file',
    'ACCEPTED_TYPES': None,  # None -> models.DEFAULT_ACCEPTED_TYPES
}


def _leading_slash(url):
    return url if url.startswith('/') else '/' + url


@dataclass(frozen=True)
class MediaConfig:
    storage_root: Path
    media_url_prefix: str = DEFAULTS['MEDIA_URL_PREFIX']
    upload_url: str = DEFAULTS['UPLOAD_URL']
    upload_field: str = DEFAULTS['UPLOAD_FIELD']
    accepted_types: AcceptedTypeTable = field(default_factory=AcceptedTypeTable)

    def __post_init__(self):
        # media prefix always looks like "/api/media/"
        prefix = _leading_slash(self.media_url_prefix.rstrip('/') + '/')
        object.__setattr__(self, 'media_url_prefix', prefix)
        object.__setattr__(self, 'upload_url', _leading_slash(self.upload_url))
        object.__setattr__(self, 'storage_root', Path(self.storage_root))

    def media_url_for(self, relative_name):
        return self.media_url_prefix + relative_name.lstrip('/')

    @classmethod
    def from_settings(cls):
        options = {**DEFAULTS, **getattr(settings, 'MEDIA_SERVER', {})}
        return cls(
            storage_root=Path(settings.MEDIA_ROOT),
            media_url_prefix=options['MEDIA_URL_PREFIX'],
            upload_url=options['UPLOAD_URL'],
            upload_field=options['UPLOAD_FIELD'],
            accepted_types=AcceptedTypeTable(options['ACCEPTED_TYPES']),
        )


@lru_cache(maxsize=None)
def get_media_config():
    return MediaConfig.from_settings()


@receiver(setting_changed)
def _reset_media_config(*, setting, **kwargs):
    if setting in ('MEDIA_ROOT', 'MEDIA_SERVER'):
        get_media_config.cache_clear()
