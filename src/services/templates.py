"""
Email template management.

This module loads email templates with the following priority:
1. S3 override (optional, for runtime updates without redeploy)
2. Local filesystem (templates/ directory packaged with Lambda)

Templates are cached in memory for warm Lambda invocations with TTL.
"""

import logging
import os
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import FormattedField, OutboundMessage

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = int(os.environ.get('TEMPLATE_CACHE_TTL', '300'))

# {template_name: (template_content, loaded_at)}
_template_cache: Dict[str, Tuple[str, float]] = {}

s3_config = Config(
    retries={
        'max_attempts': 0,  # botocore counts retries, 0 = single attempt
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=30
)

s3_client = boto3.client('s3', config=s3_config)

TEMPLATE_BUCKET = os.environ.get('TEMPLATE_BUCKET')
TEMPLATE_KEY_PREFIX = os.environ.get('TEMPLATE_KEY_PREFIX', 'templates/')
TEMPLATE_EXTENSION = '.md'

# src/services/templates.py -> src/templates/
TEMPLATES_DIR = Path(__file__).parent.parent / 'templates'


def _read_override(template_name: str) -> Optional[str]:
    """Template override from TEMPLATE_BUCKET, or None when there is none."""
    if not TEMPLATE_BUCKET:
        return None

    key = f"{TEMPLATE_KEY_PREFIX}{template_name}{TEMPLATE_EXTENSION}"
    try:
        response = s3_client.get_object(Bucket=TEMPLATE_BUCKET, Key=key)
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        logger.info(f"No template override at s3://{TEMPLATE_BUCKET}/{key} ({error_code})")
        return None

    logger.info(f"Using template override s3://{TEMPLATE_BUCKET}/{key}")
    return response['Body'].read().decode('utf-8')


def _read_packaged(template_name: str) -> str:
    """
    Template shipped in src/templates/.

    Raises:
        ValueError: If no such template is packaged
    """
    path = TEMPLATES_DIR / f"{template_name}{TEMPLATE_EXTENSION}"
    try:
        return path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.error(f"Template not found: {path}")
        raise ValueError(f"Template '{template_name}' not found in S3 or {TEMPLATES_DIR}")


def load_template(template_name: str) -> str:
    """
    Load an email template, preferring the S3 override over the packaged file.

    Results are cached for CACHE_TTL_SECONDS.

    Raises:
        ValueError: If template not found
    """
    now = time.time()
    cached = _template_cache.get(template_name)
    if cached is not None and now - cached[1] < CACHE_TTL_SECONDS:
        return cached[0]

    content = _read_override(template_name)
    if content is None:
        content = _read_packaged(template_name)

    _template_cache[template_name] = (content, now)
    return content


def render_template(template: str, **variables) -> str:
    """
    Render template with variables.

    Uses str.format() placeholders. Values are inserted as-is, so submitted
    content such as "{name}" is never interpreted.

    Raises:
        ValueError: If a variable used by the template is missing

    Example:
        >>> render_template("Hello {name}", name="Alice")
        'Hello Alice'
    """
    try:
        return template.format(**variables)
    except KeyError as e:
        missing_var = str(e).strip("'")
        logger.error(f"Missing variable in email template: {missing_var}")
        raise ValueError(f"Missing required variable in template: {missing_var}")


def format_fields(fields: List[FormattedField]) -> str:
    """Render formatted fields as a markdown block."""
    if not fields:
        return "_No answers submitted._"
    return "\n\n".join(f"**{field.label}**\n{field.value}" for field in fields)


def render_message(message: OutboundMessage) -> str:
    """
    Render the body of an outbound message from its template data.

    Args:
        message: Message built by the notification

    Returns:
        str: Markdown email body
    """
    template = load_template(message.template_name)
    form = message.template_data.get('form')

    return render_template(
        template,
        app_name=message.from_name,
        form_title=form.title if form is not None else '',
        fields=format_fields(message.fields)
    )


def clear_cache() -> None:
    """Clear the template cache."""
    _template_cache.clear()
    logger.info("Template cache cleared")
