"""
Project-level URL routing.

- /api/media/..., /api/upload : media API, delegated to the `media` app.
- /uploads/<path> : raw stored files from MEDIA_ROOT, in development only (DEBUG).
"""
import re

from django.conf import settings
from django.urls import include, path, re_path

from media.views import serve_stored_file

# The media app owns its full paths (prefixes come from settings.MEDIA_SERVER),
# so it is included at the project root.
urlpatterns = [
    path('', include('media.urls')),
]

# Same role as django.conf.urls.static.static(), behind the storage root check.
if settings.DEBUG:
    urlpatterns += [
        re_path(rf'(?s)^{re.escape(settings.MEDIA_URL.lstrip("/"))}(?P<path>.*)\Z', serve_stored_file),
    ]
