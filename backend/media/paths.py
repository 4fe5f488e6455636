"""Turns an inbound media URL into a root-relative path that cannot escape the storage root."""

from dataclasses import dataclass
from pathlib import Path

from .exceptions import UnsafePathError


def is_within(path, root):
    """True when path, with symlinks resolved, sits inside the already resolved root."""
    try:
        Path(path).resolve().relative_to(root)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class NormalizedPath:
    """
    Root-relative path. Empty for the storage root itself, otherwise always
    ending in a single "/", e.g. "mocks/venice/" or "mocks/castle.jpg/".
    """
    value: str = ''

    def __str__(self):
        return self.value

    @property
    def is_root(self):
        return not self.value

    @property
    def segments(self):
        return tuple(part for part in self.value.split('/') if part)

    def resolve_under(self, root) -> Path:
        """
        Absolute location under root. Symlinks are resolved and the result must
        still sit inside root, otherwise the path is treated as unsafe.
        """
        root = Path(root).resolve()
        candidate = root.joinpath(*self.segments).resolve()
        if not is_within(candidate, root):
            raise UnsafePathError("Path resolves outside the storage root", self.value)
        return candidate


class PathSafetyNormalizer:
    def __init__(self, media_url_prefix='/api/media/'):
        self.prefix = media_url_prefix.rstrip('/') + '/'

    def strip_prefix(self, raw_path):
        if raw_path == self.prefix.rstrip('/'):
            return ''
        if not raw_path.startswith(self.prefix):
            raise UnsafePathError(f"Path is not under {self.prefix}", raw_path)
        return raw_path[len(self.prefix):]

    def normalize(self, raw_path) -> NormalizedPath:
        return self.normalize_relative(self.strip_prefix(raw_path), raw_path)

    def normalize_relative(self, remainder, raw_path=None) -> NormalizedPath:
        """Same checks as normalize(), for a path that is already relative to the storage root."""
        raw_path = remainder if raw_path is None else raw_path
        if '\0' in remainder:
            raise UnsafePathError("Path contains a null byte", raw_path)

        segments = []
        for part in remainder.replace('\\', '/').split('/'):
            if part in ('', '.'):
                continue
            if part == '..':
                raise UnsafePathError("Path contains a parent directory segment", raw_path)
            segments.append(part)

        if not segments:
            return NormalizedPath('')
        return NormalizedPath('/'.join(segments) + '/')
