'''
    Domain objects of the media server. Nothing here is a Django model:
    the filesystem is the only store, and every StoredEntry is derived from a stat call
    when a request needs it.

    StoredEntry: one node (file or directory) under the storage root.
    AcceptedTypeTable: whitelist of image types, extension <-> MIME type.
'''

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.core.exceptions import ImproperlyConfigured

# mimetype reported for directories
DIRECTORY_MIMETYPE = "DIRECTORY"

DEFAULT_ACCEPTED_TYPES = {
    'png': 'image/png',
    'jpg': 'image/jpeg',
    'gif': 'image/gif',
    'webp': 'image/webp',
}


@dataclass(frozen=True)
class StoredEntry:
    """
    Ephemeral descriptor of a filesystem node, as exposed by the read API.

    - size is only meaningful for files; directories carry None.
    - extension is lowercase without the dot, with jpeg aliased to jpg; directories carry None.
    """
    name: str
    is_directory: bool
    size: Optional[int]
    modified_time: datetime
    mimetype: str
    extension: Optional[str]


class AcceptedTypeTable:
    """
    Bidirectional map between image extensions and their MIME types.
    Built once from configuration; each side must be unique.
    """

    def __init__(self, types=None):
        types = DEFAULT_ACCEPTED_TYPES if types is None else types
        self._by_extension = {}
        self._by_mimetype = {}
        for extension, mimetype in types.items():
            extension = extension.lower().lstrip('.')
            mimetype = mimetype.lower()
            if extension in self._by_extension or mimetype in self._by_mimetype:
                raise ImproperlyConfigured(
                    f"Accepted types must be a one-to-one mapping, duplicate entry: {extension} -> {mimetype}"
                )
            self._by_extension[extension] = mimetype
            self._by_mimetype[mimetype] = extension

    def mimetype_for(self, extension):
        if not extension:
            return None
        return self._by_extension.get(extension.lower().lstrip('.'))

    def extension_for(self, mimetype):
        if not mimetype:
            return None
        return self._by_mimetype.get(mimetype.lower())

    def __contains__(self, extension):
        return self.mimetype_for(extension) is not None

    def __iter__(self):
        return iter(self._by_extension.items())

    def __len__(self):
        return len(self._by_extension)

    def __repr__(self):
        return f"AcceptedTypeTable({self._by_extension!r})"
