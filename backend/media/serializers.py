'''
     Serializes a StoredEntry into the read API's JSON shape: {name, size, mtime, mimetype, extension}.
     NOTE: StoredEntry is a plain dataclass built from a stat call, not a model, so this is a plain
     Serializer and every field is output-only.
     `mtime` is rendered as an ISO 8601 UTC timestamp.
'''

from rest_framework import serializers


class StoredEntrySerializer(serializers.Serializer):
    name = serializers.CharField(read_only=True)
    size = serializers.IntegerField(read_only=True, allow_null=True)
    # modified_time on the entry, exposed under the original API's `mtime` key
    mtime = serializers.DateTimeField(source='modified_time', read_only=True)
    mimetype = serializers.CharField(read_only=True)
    extension = serializers.CharField(read_only=True, allow_null=True)
