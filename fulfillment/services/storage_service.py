# fulfillment/services/storage_service.py
"""
S3-compatible object storage for invoice artifacts.
Works with AWS S3, Cloudflare R2 and MinIO (custom endpoint).
"""
import mimetypes
from dataclasses import dataclass
from pathlib import Path

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from fulfillment.utils.settings import (
    S3_ACCESS_KEY,
    S3_BUCKET,
    S3_ENDPOINT,
    S3_REGION,
    S3_SECRET_KEY,
)
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class UploadResult:
    url: str
    key: str


class ObjectStorage:
    def __init__(self, bucket: str | None = None, client=None):
        self.bucket = bucket or S3_BUCKET
        self._client = client

    @property
    def client(self):
        """Lazy-load S3 client."""
        if self._client is None:
            client_kwargs = {
                "service_name": "s3",
                "region_name": S3_REGION,
                "config": Config(signature_version="s3v4", retries={"max_attempts": 3, "mode": "standard"}),
            }
            if S3_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = S3_ACCESS_KEY
                client_kwargs["aws_secret_access_key"] = S3_SECRET_KEY
            if S3_ENDPOINT:
                client_kwargs["endpoint_url"] = S3_ENDPOINT
            self._client = boto3.client(**client_kwargs)
        return self._client

    def public_url(self, key: str) -> str:
        if S3_ENDPOINT:
            return f"{S3_ENDPOINT.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{S3_REGION}.amazonaws.com/{key}"

    def upload(self, local_path: str | Path, key: str) -> UploadResult:
        """Upload pliku pod staly klucz - ponowny upload nadpisuje obiekt."""
        content_type = mimetypes.guess_type(str(local_path))[0] or "application/octet-stream"
        self.client.upload_file(
            str(local_path),
            self.bucket,
            key,
            ExtraArgs={"ContentType": content_type},
        )
        url = self.public_url(key)
        logger.info(f"Uploaded {local_path} to s3://{self.bucket}/{key}")
        return UploadResult(url=url, key=key)

    def delete(self, key: str) -> bool:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.warning(f"Delete s3://{self.bucket}/{key} failed: {code}")
            return False
        logger.info(f"Deleted s3://{self.bucket}/{key}")
        return True
