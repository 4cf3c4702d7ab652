"""
S3 Utilities — Client Init • Key Building • Upload • Public URL
===============================================================

Purpose
-------
Small helper module for storing chat attachments in Amazon S3:
- Initialize an S3 client with Signature V4
- Sanitize file names and build object keys (`{chat_id}/{uuid}.{ext}`)
- Upload a file object with its content type
- Build the public URL of a stored object

Configuration (from `saver_backend.database.config.config.settings`)
--------------------------------------------------------------------
- AWS_ACCESS_KEY : Access key ID
- AWS_SECRET_KEY : Secret access key
- REGION         : AWS region (e.g., "eu-central-1")
- BUCKET_NAME    : Target S3 bucket

Security Notes
--------------
- Credentials are never logged.
- Public URLs assume the bucket (or the `chat_files` prefix) is readable, as
  attachments are shown inline in the chat.
"""

import os
import re
import uuid
from typing import BinaryIO

import boto3, botocore
from saver_backend.database.config.config import settings


def get_client():
    """
    Initialize and return a low-level S3 client configured for Signature V4.

    Uses:
        - settings.AWS_ACCESS_KEY
        - settings.AWS_SECRET_KEY
        - settings.REGION

    Returns:
        botocore.client.S3: An S3 client ready for object operations.
    """
    s3_client = boto3.client('s3',
                             aws_access_key_id=settings.AWS_ACCESS_KEY,
                             aws_secret_access_key=settings.AWS_SECRET_KEY,
                             region_name=settings.REGION,
                             config=botocore.config.Config(signature_version="s3v4"),)
    return s3_client


def sanitize_file_name(file_name: str) -> str:
    """Drop non-ASCII characters; fall back to "file" when nothing is left."""
    cleaned = re.sub(r"[^\x00-\x7F]", "", file_name or "").strip()
    return cleaned or "file"


def build_object_key(chat_id, file_name: str) -> str:
    """
    Object key for an attachment: `{chat_id}/{uuid4}.{ext}`.

    The extension is taken from the sanitized name; names without one get a
    bare uuid.
    """
    _, ext = os.path.splitext(sanitize_file_name(file_name))
    return f"{chat_id}/{uuid.uuid4()}{ext.lower()}"


def upload(fileobj: BinaryIO, key: str, content_type: str, s3_client) -> None:
    """
    Upload a file object to S3.

    Args:
        fileobj (BinaryIO): Readable binary stream (e.g. `UploadFile.file`).
        key (str): Object key (destination path/name in the bucket).
        content_type (str): MIME type stored on the object.
        s3_client (botocore.client.S3): Client returned by `get_client()`.

    Raises:
        botocore.exceptions.ClientError: Propagated to the caller.
    """
    fileobj.seek(0)
    s3_client.upload_fileobj(
        fileobj, settings.BUCKET_NAME, key,
        ExtraArgs={"ContentType": content_type or "application/octet-stream"}
    )


def public_url(key: str) -> str:
    """Virtual-hosted–style URL of an object in the configured bucket."""
    return f"https://{settings.BUCKET_NAME}.s3.{settings.REGION}.amazonaws.com/{key}"
