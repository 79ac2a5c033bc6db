# ABOUTME: Storage service for GCS integration.
# ABOUTME: Publishes framed audio summaries to the public bucket.

import structlog
from google.cloud import storage

log = structlog.get_logger()


class StorageService:
    """Service for storing audio artifacts in GCS."""

    def __init__(self, bucket_name: str | None = None, client: storage.Client | None = None):
        """Initialize storage service.

        Args:
            bucket_name: GCS bucket name. If None, GCS is disabled.
            client: Optional preconfigured client (mainly for tests).
        """
        self.bucket_name = bucket_name
        self._client: storage.Client | None = None
        self._bucket: storage.Bucket | None = None

        if bucket_name:
            try:
                self._client = client or storage.Client()
                self._bucket = self._client.bucket(bucket_name)
                log.info("gcs_storage_initialized", bucket=bucket_name)
            except Exception as e:
                log.warning("gcs_storage_init_failed", error=str(e))
                self._client = None
                self._bucket = None

    @property
    def is_enabled(self) -> bool:
        """Check if GCS storage is enabled and working."""
        return self._bucket is not None

    def upload_bytes(
        self,
        data: bytes,
        gcs_path: str,
        content_type: str = "application/octet-stream",
        cache_control: str | None = None,
    ) -> str | None:
        """Upload binary content to GCS, overwriting any existing object.

        Args:
            data: Bytes to upload.
            gcs_path: Destination path in GCS (e.g., "sarcastic_summaries/TBW.wav").
            content_type: MIME type of the content.
            cache_control: Cache-Control metadata for public reads.

        Returns:
            GCS URI if successful, None otherwise.
        """
        if not self.is_enabled:
            log.warning("gcs_upload_skipped_disabled", path=gcs_path)
            return None

        try:
            blob = self._bucket.blob(gcs_path)
            if cache_control:
                blob.cache_control = cache_control
            blob.upload_from_string(data, content_type=content_type)
            uri = f"gs://{self.bucket_name}/{gcs_path}"
            log.info("content_uploaded_to_gcs", gcs=uri, size=len(data))
            return uri
        except Exception as e:
            log.error("gcs_upload_failed", error=str(e), path=gcs_path)
            return None
