"""
Mail queue integration.

Hands rendered notification emails to the outbound mail queue (Amazon SQS).
Delivery, ordering and retries are the queue consumer's responsibility.

Usage:
    from integrations import mail_queue

    failed = mail_queue.enqueue_messages([(message, "owner@example.com", body)])
"""

import json
import logging
import os
from typing import List, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import OutboundMessage

logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class ConfigurationError(Exception):
    """Raised when module configuration is invalid or missing."""
    pass


class QueueNotFoundException(Exception):
    """Raised when the configured mail queue does not exist."""
    pass


class ThrottlingException(Exception):
    """Raised when SQS requests are throttled."""
    pass


# ============================================================================
# Module-Level Configuration and Initialization
# ============================================================================

def _read_queue_url() -> str:
    """
    Read and validate MAIL_QUEUE_URL from environment variables.

    Raises:
        ConfigurationError: If MAIL_QUEUE_URL is missing or invalid
    """
    queue_url = os.environ.get('MAIL_QUEUE_URL')

    if not queue_url:
        raise ConfigurationError(
            "MAIL_QUEUE_URL environment variable is required but not set. "
            "Please configure this in your SAM template or Lambda environment."
        )

    if not queue_url.startswith('https://'):
        raise ConfigurationError(
            f"MAIL_QUEUE_URL has invalid format. "
            f"Expected an https:// SQS queue URL, got: '{queue_url[:50]}...'"
        )

    logger.info(f"Mail queue configured: {queue_url}")
    return queue_url


def _initialize_sqs_client():
    """Initialize boto3 SQS client with timeout configuration."""
    client_config = Config(
        retries={
            'max_attempts': 0,  # no client retries, the Lambda batch is retried instead
            'mode': 'standard'
        },
        connect_timeout=5,
        read_timeout=10
    )

    region = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-west-2'))

    client = boto3.client('sqs', region_name=region, config=client_config)
    logger.info(f"SQS client initialized: region={region}")
    return client


# Initialize at module import time (reused across invocations)
try:
    MAIL_QUEUE_URL = _read_queue_url()
    sqs_client = _initialize_sqs_client()
except ConfigurationError as e:
    logger.error(f"Module initialization failed: {e}")
    raise


# ============================================================================
# Queue Operations
# ============================================================================

# SQS SendMessageBatch accepts at most 10 entries
MAX_BATCH_SIZE = 10

# (message, recipient, rendered body)
MailEntry = Tuple[OutboundMessage, str, str]


def build_payload(message: OutboundMessage, to: str, body: str) -> dict:
    """
    Build the JSON payload consumed by the mail sender.

    Args:
        message: Outbound message
        to: Recipient address
        body: Rendered markdown body

    Returns:
        dict payload
    """
    payload = message.to_dict()
    payload['to'] = to
    payload['body'] = body
    return payload


def _raise_for_client_error(e: ClientError) -> None:
    """Map AWS errors to domain-specific exceptions, re-raising the rest."""
    error_code = e.response.get('Error', {}).get('Code', 'Unknown')
    error_message = e.response.get('Error', {}).get('Message', str(e))

    if error_code in ('AWS.SimpleQueueService.NonExistentQueue', 'QueueDoesNotExist'):
        logger.error(f"Mail queue not found: {MAIL_QUEUE_URL}, error={error_message}")
        raise QueueNotFoundException(f"Mail queue not found: {MAIL_QUEUE_URL}. Error: {error_message}")
    elif error_code in ('ThrottlingException', 'RequestThrottled'):
        logger.error(f"Request throttled: {error_message}")
        raise ThrottlingException(f"Request throttled by SQS: {error_message}")

    logger.error(f"Failed to enqueue mail: error_code={error_code}, error_message={error_message}")
    raise e


def enqueue_messages(entries: List[MailEntry]) -> List[str]:
    """
    Send rendered emails to the mail queue in batches.

    A failure of the first batch call raises, since nothing has been queued
    yet. Once some emails are queued, later failures are returned instead so
    the caller never retries emails that already went out.

    Args:
        entries: (message, recipient, body) tuples

    Returns:
        List[str]: Recipients whose email was not queued

    Raises:
        QueueNotFoundException: If the queue does not exist
        ThrottlingException: If SQS throttles the request
        ClientError: For other AWS service errors
    """
    failed = []

    for start in range(0, len(entries), MAX_BATCH_SIZE):
        chunk = entries[start:start + MAX_BATCH_SIZE]
        batch = [
            {
                'Id': str(start + offset),
                'MessageBody': json.dumps(build_payload(message, to, body)),
                'MessageAttributes': {
                    'mailer': {'DataType': 'String', 'StringValue': message.mailer}
                },
            }
            for offset, (message, to, body) in enumerate(chunk)
        ]

        try:
            response = sqs_client.send_message_batch(QueueUrl=MAIL_QUEUE_URL, Entries=batch)
        except ClientError as e:
            if start == 0:
                _raise_for_client_error(e)
            logger.error(f"Batch send failed after partial delivery: {e}")
            failed.extend(to for _, to, _ in chunk)
            continue

        for entry in response.get('Failed', []):
            to = entries[int(entry['Id'])][1]
            logger.error(
                f"Mail queue rejected email to {to}: "
                f"code={entry.get('Code')}, message={entry.get('Message')}"
            )
            failed.append(to)

        logger.info(
            f"Queued {len(response.get('Successful', []))}/{len(chunk)} email(s) "
            f"on {MAIL_QUEUE_URL}"
        )

    return failed
