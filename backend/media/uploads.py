'''
    Write side of the media server.

    UploadAcceptancePolicy decides, before any byte is written, whether an upload is an accepted
    image type and which filename it gets on disk (the original name, plus the canonical
    extension when it is missing).

    UploadStore runs the policy and performs the write in the same call, so a rejected upload
    can never end up half-saved. Writes go through Django's FileSystemStorage rooted at the
    storage root.
'''

import logging
import os
from dataclasses import dataclass
from typing import Optional

from django.core.files.storage import FileSystemStorage

from .exceptions import UploadRejected

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadDecision:
    accepted: bool
    storage_filename: Optional[str] = None
    extension: Optional[str] = None


REJECTED = UploadDecision(accepted=False)


class UploadAcceptancePolicy:
    def __init__(self, accepted_types):
        self.accepted_types = accepted_types

    def accept(self, advertised_mimetype, original_filename) -> UploadDecision:
        extension = self.accepted_types.extension_for(advertised_mimetype)
        # only the last path component of a client supplied name is ever used
        filename = os.path.basename((original_filename or '').replace('\\', '/'))
        if extension is None or not filename:
            return REJECTED

        suffix = '.' + extension
        # case-insensitive: photo.PNG is kept as is, never stored as photo.PNG.png
        if not filename.lower().endswith(suffix):
            filename += suffix
        return UploadDecision(accepted=True, storage_filename=filename, extension=extension)

    def ensure_accepted(self, advertised_mimetype, original_filename) -> UploadDecision:
        decision = self.accept(advertised_mimetype, original_filename)
        if not decision.accepted:
            raise UploadRejected(mimetype=advertised_mimetype)
        return decision


class UploadStore:
    def __init__(self, config, policy=None):
        self.config = config
        self.policy = policy or UploadAcceptancePolicy(config.accepted_types)
        self.storage = FileSystemStorage(location=str(config.storage_root))

    def save(self, uploaded_file) -> str:
        """
        Validate and persist an uploaded file, returning the name it was stored under.
        Raises UploadRejected (nothing written) when the file is missing or not an accepted image.
        """
        if uploaded_file is None:
            raise UploadRejected()

        mimetype = getattr(uploaded_file, 'content_type', '') or ''
        decision = self.policy.ensure_accepted(mimetype, uploaded_file.name)

        # FileSystemStorage picks an alternative name instead of overwriting an existing file
        stored_name = self.storage.save(decision.storage_filename, uploaded_file)
        logger.info("Stored upload %r (%s) as %s", uploaded_file.name, mimetype, stored_name)
        return stored_name
