"""MIME type and canonical extension lookup for paths under the storage root."""

import logging
import mimetypes
import os
import stat
from typing import NamedTuple, Optional

from .models import DIRECTORY_MIMETYPE, AcceptedTypeTable

logger = logging.getLogger(__name__)

FALLBACK_MIMETYPE = 'text/plain'

# Older interpreters ship a MIME database without webp.
mimetypes.add_type('image/webp', '.webp')


class MimeInfo(NamedTuple):
    mimetype: str
    extension: Optional[str]


def normalize_extension(extension):
    if not extension:
        return None
    extension = extension.lower().lstrip('.')
    return 'jpg' if extension == 'jpeg' else extension


def is_directory(path):
    """
    Existence + type check: False when the path does not exist.
    Any other filesystem failure (permissions, I/O) propagates.
    """
    try:
        st = os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return False
    return stat.S_ISDIR(st.st_mode)


class MimeResolver:
    """
    Maps a path to (mimetype, extension). Never raises: anything it cannot
    classify is either a DIRECTORY or falls back to text/plain.
    """

    def __init__(self, accepted_types=None):
        self.accepted_types = AcceptedTypeTable() if accepted_types is None else accepted_types

    def canonical_extension(self, mimetype):
        extension = self.accepted_types.extension_for(mimetype)
        if extension is None:
            extension = mimetypes.guess_extension(mimetype)
        return normalize_extension(extension)

    def resolve(self, path, is_dir=None) -> MimeInfo:
        mimetype, _encoding = mimetypes.guess_type(os.fspath(path))
        if mimetype is None:
            if is_dir is None:
                try:
                    is_dir = is_directory(path)
                except OSError as exc:
                    logger.debug("Could not stat %s while resolving its type: %s", path, exc)
                    is_dir = False
            if is_dir:
                return MimeInfo(DIRECTORY_MIMETYPE, None)
            mimetype = FALLBACK_MIMETYPE
        return MimeInfo(mimetype, self.canonical_extension(mimetype))
