'''
    Error kinds raised by the media engine.

    MediaNotFound (and UnsafePathError) become a 404 with an empty body at the view layer.
    UploadRejected becomes a 422 carrying UPLOAD_REJECTED_MESSAGE.
    Any other OSError is not wrapped here: it propagates and Django turns it into a 500.
'''

UPLOAD_REJECTED_MESSAGE = "The uploaded file must be an image"


class MediaError(Exception):
    """Base class for media engine errors."""


class MediaNotFound(MediaError):
    """The requested path does not exist, or is not something we expose."""


class UnsafePathError(MediaNotFound):
    # Traversal attempts answer exactly like a missing file.
    def __init__(self, message, raw_path):
        super().__init__(message)
        self.raw_path = raw_path


class UploadRejected(MediaError):
    def __init__(self, mimetype=None, message=UPLOAD_REJECTED_MESSAGE):
        super().__init__(message)
        self.mimetype = mimetype
        self.message = message
