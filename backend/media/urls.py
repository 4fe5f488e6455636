"""
App-level URL routing for the media API.

Both routes are taken from settings.MEDIA_SERVER (see media.config):
- /api/media[/<path>]   [GET]   -> MediaListView (directory listing or single file info)
- /api/upload           [POST]  -> UploadView   (multipart `uploaded_file`)

The media route matches the prefix with or without a trailing slash and anything below it;
the view itself strips the prefix and validates the rest.
"""
import re

from django.urls import re_path

from .config import MediaConfig
from .views import MediaListView, UploadView

_config = MediaConfig.from_settings()
_media_prefix = re.escape(_config.media_url_prefix.strip('/'))
_upload_url = re.escape(_config.upload_url.strip('/'))

urlpatterns = [
    # (?s) so a %0A in the path still reaches the view and gets its empty 404
    re_path(rf'(?s)^{_media_prefix}(?:/.*)?\Z', MediaListView.as_view(), name='media-list'),
    re_path(rf'^{_upload_url}/?$', UploadView.as_view(), name='media-upload'),
]
