"""Thin client for the external media host (an S3 bucket).

Uploads raw bytes and hands back a durable public URL. Storage internals
(resizing, transcoding, deletion policies) stay on the host's side.
"""
import asyncio
import logging
import mimetypes
import uuid
from io import BytesIO
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

PROFILE_FOLDER = "profiles"
POST_FOLDER = "posts"


class MediaUploadError(Exception):
    """The media host rejected or failed an upload."""


def _extension(filename: str | None, content_type: str | None) -> str:
    if filename and "." in filename:
        return "." + filename.rsplit(".", 1)[1].lower()
    return mimetypes.guess_extension(content_type or "") or ""


class MediaUploader:
    def __init__(self, bucket: str, url_prefix: str, client=None):
        self.bucket = bucket
        self.url_prefix = url_prefix.rstrip("/")
        self._client = client

    @property
    def client(self):
        # Created lazily so the app starts without AWS credentials configured
        if self._client is None:
            self._client = boto3.client(
                "s3",
                aws_access_key_id=settings.AWS_ACCESS_KEY or None,
                aws_secret_access_key=settings.AWS_SECRET_KEY or None,
                region_name=settings.S3_REGION,
            )
        return self._client

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    async def upload(
        self,
        content: bytes,
        folder: str,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        if not self.bucket:
            raise MediaUploadError("S3_BUCKET_NAME is not configured")

        key = f"{folder}/{uuid.uuid4()}{_extension(filename, content_type)}"
        extra_args = {"ContentType": content_type} if content_type else {}
        try:
            # boto3 is blocking; keep it off the event loop
            await asyncio.to_thread(
                self.client.upload_fileobj,
                BytesIO(content),
                self.bucket,
                key,
                ExtraArgs=extra_args,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload of {key} to bucket {self.bucket} failed: {e}")
            raise MediaUploadError(str(e)) from e

        logger.info(f"Uploaded {len(content)} bytes to {key}")
        return self.url_for(key)


_uploader: MediaUploader | None = None


def get_media_uploader() -> MediaUploader:
    global _uploader
    if _uploader is None:
        _uploader = MediaUploader(settings.S3_BUCKET_NAME, settings.media_url_prefix)
    return _uploader
