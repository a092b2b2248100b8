import logging
import mimetypes
import re
import time
from dataclasses import dataclass
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from slugify import slugify

from yelpcamp.errors import ExternalServiceFailure, ValidationFailure

logger = logging.getLogger(__name__)

ALLOWED_IMAGE = re.compile(r"\.(jpg|jpeg|png|gif)$", re.IGNORECASE)
KEY_PREFIX = "campgrounds"


@dataclass(frozen=True)
class StoredImage:
    url: str
    image_id: str


def check_image_filename(filename):
    if not filename or not ALLOWED_IMAGE.search(filename):
        raise ValidationFailure("Only image files are allowed!")


def make_image_key(filename: str) -> str:
    p = Path(filename)
    stem = slugify(p.stem) or "image"
    ext = p.suffix.lower()
    return f"{KEY_PREFIX}/{int(time.time() * 1000)}-{stem}{ext}"


def detect_content_type(filename: str, fallback: str = "application/octet-stream") -> str:
    ctype, _ = mimetypes.guess_type(filename)
    return ctype or fallback


class S3ImageStore:
    def __init__(self, bucket, region="us-east-1", client=None):
        assert bucket, "S3 bucket not found."
        self.bucket = bucket
        self.region = region
        self.s3 = client or boto3.client("s3", region_name=region)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def upload(self, fileobj, filename, content_type=None) -> StoredImage:
        check_image_filename(filename)
        key = make_image_key(filename)
        extra = {"ContentType": content_type or detect_content_type(filename)}
        try:
            fileobj.seek(0)
            self.s3.upload_fileobj(Fileobj=fileobj, Bucket=self.bucket, Key=key, ExtraArgs=extra)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Image upload failed for {filename}: {e}")
            raise ExternalServiceFailure(str(e)) from e
        logger.info(f"Uploaded image {key}")
        return StoredImage(url=self.public_url(key), image_id=key)

    def destroy(self, image_id) -> None:
        if not image_id:
            return
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=image_id)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Image delete failed for {image_id}: {e}")
            raise ExternalServiceFailure(str(e)) from e
        logger.info(f"Deleted image {image_id}")
