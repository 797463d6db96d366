"""
S3 operations for uploaded form files.

This module builds download links for files attached to form submissions,
either as time-limited presigned URLs or as public URLs.
"""

import logging
import os
import re

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Configure S3 client with timeouts to prevent infinite hangs
s3_config = Config(
    retries={
        'max_attempts': 0,  # botocore counts retries, 0 = single attempt
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=60
)

# Initialize S3 client at module level (thread-safe, reused across invocations)
s3_client = boto3.client('s3', config=s3_config)

# Configuration from environment
FILES_BUCKET = os.environ.get('FILES_S3_BUCKET', '')
FILES_PUBLIC_DOMAIN = os.environ.get('FILES_PUBLIC_DOMAIN', '')
FILES_KEY_PREFIX = os.environ.get('FILES_KEY_PREFIX', 'forms/')
URL_EXPIRY_SECONDS = int(os.environ.get('FILES_URL_EXPIRY_SECONDS', '86400'))


def sanitize_key(value: str) -> str:
    """
    Sanitize a file name or path segment for use in S3 object keys.

    Args:
        value: String to sanitize

    Returns:
        Sanitized string safe for S3 keys and URLs
    """
    result = value.strip().lstrip('/')

    # Parent directory references are never allowed
    result = result.replace('..', '_')

    result = re.sub(r'[\\#?&%]', '_', result)

    # Remove any remaining control characters
    result = re.sub(r'[\x00-\x1f\x7f]', '', result)

    return result


def file_key(form_id: str, filename: str) -> str:
    """
    Build the object key of a submitted file.

    Example:
        >>> file_key("42", "cv.pdf")
        'forms/42/submissions/cv.pdf'
    """
    return f"{FILES_KEY_PREFIX}{sanitize_key(form_id)}/submissions/{sanitize_key(filename)}"


def generate_file_url(key: str, signed: bool = True) -> str:
    """
    Build a download URL for an uploaded file.

    Args:
        key: S3 object key
        signed: Return a presigned, expiring URL (default) instead of a
                public URL on FILES_PUBLIC_DOMAIN

    Returns:
        str: Download URL

    Raises:
        ValueError: If the bucket (signed) or public domain (unsigned) is not
                    configured, or presigning fails
    """
    if not signed:
        if not FILES_PUBLIC_DOMAIN:
            raise ValueError("FILES_PUBLIC_DOMAIN environment variable not set")
        return f"https://{FILES_PUBLIC_DOMAIN}/{key}"

    if not FILES_BUCKET:
        raise ValueError("FILES_S3_BUCKET environment variable not set")

    try:
        url = s3_client.generate_presigned_url(
            'get_object',
            Params={'Bucket': FILES_BUCKET, 'Key': key},
            ExpiresIn=URL_EXPIRY_SECONDS
        )
    except ClientError as e:
        logger.error(f"Failed to presign s3://{FILES_BUCKET}/{key}: {e}")
        raise ValueError(f"Failed to generate signed URL for {key}: {str(e)}")

    logger.debug(f"Presigned file URL for s3://{FILES_BUCKET}/{key} (expires in {URL_EXPIRY_SECONDS}s)")
    return url
