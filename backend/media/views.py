import logging

from django.http import Http404
from django.views.static import serve
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from .config import get_media_config
from .exceptions import MediaNotFound, UnsafePathError, UploadRejected
from .listing import DirectoryListingService
from .paths import PathSafetyNormalizer
from .serializers import StoredEntrySerializer
from .uploads import UploadStore

logger = logging.getLogger(__name__)


class MediaListView(APIView):
    # Read API. Everything after the media prefix is a path under the storage root.
    # Example calls:
    # GET /api/media/              -> [ {...}, {...} ]   (root directory)
    # GET /api/media/mocks         -> [ {...}, ... ]     (same as mocks/)
    # GET /api/media/mocks/a.jpg   -> {...}              (single image)
    # Missing paths, traversal attempts and non-image files answer 404 with an empty body.

    def get(self, request, *args, **kwargs):
        config = get_media_config()
        normalizer = PathSafetyNormalizer(config.media_url_prefix)
        service = DirectoryListingService(config)

        logger.info("Listing media path %s", request.path_info)
        try:
            listing = service.list(normalizer.normalize(request.path_info))
        except MediaNotFound as exc:
            logger.info("Media path %s not found: %s", request.path_info, exc)
            return Response(status=status.HTTP_404_NOT_FOUND)

        # a directory is always an array (possibly empty); a single file is one object
        if listing.is_directory:
            serializer = StoredEntrySerializer(listing, many=True)
        else:
            serializer = StoredEntrySerializer(listing[0])
        return Response(serializer.data)


class UploadView(APIView):
    # POST /api/upload with a multipart `uploaded_file` field.
    # 201 (empty body, Location -> the new entry's media URL) or 422 when the file is missing
    # or is not one of the accepted image types. Rejected files are never written.
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request, *args, **kwargs):
        config = get_media_config()
        store = UploadStore(config)

        file_obj = request.FILES.get(config.upload_field)
        try:
            stored_name = store.save(file_obj)
        except UploadRejected as exc:
            logger.info(
                "Rejected upload %r with type %r",
                getattr(file_obj, 'name', None), exc.mimetype,
            )
            return Response({'error': exc.message}, status=status.HTTP_422_UNPROCESSABLE_ENTITY)

        headers = {'Location': config.media_url_for(stored_name)}
        return Response(status=status.HTTP_201_CREATED, headers=headers)


def serve_stored_file(request, path):
    # Raw bytes under MEDIA_URL (development only, see core/urls.py).
    # The resolved location must sit inside the storage root; links leaving it answer 404.
    config = get_media_config()
    normalizer = PathSafetyNormalizer(config.media_url_prefix)
    try:
        target = normalizer.normalize_relative(path).resolve_under(config.storage_root)
    except UnsafePathError as exc:
        logger.info("Refusing to serve %s: %s", path, exc)
        raise Http404("File not found")
    return serve(request, target.name, document_root=str(target.parent))
