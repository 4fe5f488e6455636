'''
    Read side of the media server.

    FileInfoBuilder stats one path and describes it as a StoredEntry.
    DirectoryListingService decides whether a NormalizedPath is a directory or a file:
        - directory -> one StoredEntry per immediate child (no type filtering)
        - file      -> exactly one StoredEntry, only if its extension is an accepted image type
    Anything missing, unsafe, or not allowed raises MediaNotFound.
'''

import logging
import os
import stat
from collections.abc import Sequence
from datetime import datetime, timezone

from .exceptions import MediaNotFound
from .mime import MimeResolver
from .models import StoredEntry
from .paths import is_within

logger = logging.getLogger(__name__)


class FileInfoBuilder:
    def __init__(self, resolver=None):
        self.resolver = resolver or MimeResolver()

    def build(self, absolute_path) -> StoredEntry:
        try:
            st = os.stat(absolute_path)
        except (FileNotFoundError, NotADirectoryError):
            raise MediaNotFound(f"{absolute_path} does not exist")
        return self.from_stat(absolute_path, st)

    def from_stat(self, absolute_path, st) -> StoredEntry:
        is_dir = stat.S_ISDIR(st.st_mode)
        mime = self.resolver.resolve(absolute_path, is_dir=is_dir)
        return StoredEntry(
            name=os.path.basename(os.fspath(absolute_path).rstrip(os.sep)),
            is_directory=is_dir,
            size=None if is_dir else st.st_size,
            modified_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            mimetype=mime.mimetype,
            extension=mime.extension,
        )


class Listing(Sequence):
    """Entries found for one path, plus whether that path was a directory."""

    def __init__(self, entries, is_directory):
        self.entries = list(entries)
        self.is_directory = is_directory

    def __getitem__(self, index):
        return self.entries[index]

    def __len__(self):
        return len(self.entries)

    def __repr__(self):
        kind = "directory" if self.is_directory else "file"
        return f"<Listing {kind} entries={len(self.entries)}>"


class DirectoryListingService:
    """
    Stateless per call; safe to share between concurrent requests.
    Directory children come back in filesystem enumeration order, which is
    neither sorted nor guaranteed stable across platforms.
    """

    def __init__(self, config, builder=None):
        self.config = config
        self.accepted_types = config.accepted_types
        self.builder = builder or FileInfoBuilder(MimeResolver(config.accepted_types))

    def _stat_target(self, target):
        try:
            return os.stat(target)
        except (FileNotFoundError, NotADirectoryError):
            raise MediaNotFound(f"{target} does not exist")

    def list(self, normalized_path) -> Listing:
        target = normalized_path.resolve_under(self.config.storage_root)
        st = self._stat_target(target)

        if stat.S_ISDIR(st.st_mode):
            return Listing(self._list_children(target), is_directory=True)

        if not stat.S_ISREG(st.st_mode):
            # sockets, fifos, devices: present but not something we serve
            raise MediaNotFound(f"{target} is neither a regular file nor a directory")

        entry = self.builder.from_stat(target, st)
        # TODO: answer 415 instead of 404 for existing files of a disallowed type once clients handle it
        if entry.extension not in self.accepted_types:
            raise MediaNotFound(f"{target} is not an accepted media type")
        return Listing([entry], is_directory=False)

    def _list_children(self, directory):
        root = self.config.storage_root.resolve()
        entries = []
        with os.scandir(directory) as it:
            for child in it:
                # links pointing out of the storage root are never followed
                if child.is_symlink() and not is_within(child.path, root):
                    logger.debug("Skipping %s: links outside the storage root", child.path)
                    continue
                try:
                    entries.append(self.builder.build(child.path))
                except MediaNotFound:
                    logger.debug("%s vanished while listing %s", child.name, directory)
        return entries
