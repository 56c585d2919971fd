# apps/creatives/storage.py
import os
import uuid

from django.core.files.storage import default_storage

ALLOWED_CONTENT_TYPES = {
    'image/jpeg', 'image/png', 'image/gif', 'image/webp',
    'video/mp4', 'video/webm', 'text/html',
}
MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class CreativeUploadError(Exception):
    pass


class CreativeStorage:
    """Stores creative assets on the configured default storage (GCS when deployed)."""

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def blob_name(self, advertiser_id, creative_id, filename):
        extension = os.path.splitext(filename)[1].lower()
        return f"creatives/advertiser_{advertiser_id}/creative_{creative_id}/{uuid.uuid4().hex}{extension}"

    def upload_creative(self, uploaded_file, advertiser_id, creative_id):
        if uploaded_file.content_type not in ALLOWED_CONTENT_TYPES:
            raise CreativeUploadError(f"Unsupported file type: {uploaded_file.content_type}")
        if uploaded_file.size > MAX_UPLOAD_BYTES:
            raise CreativeUploadError('File is too large')

        name = self.storage.save(
            self.blob_name(advertiser_id, creative_id, uploaded_file.name),
            uploaded_file,
        )
        return self.storage.url(name)
