"""
AWS Lambda handler for form submission notifications delivered through SQS.

Thin orchestration layer that delegates to NotificationProcessor.
Policy: records that queued no email are reported back to SQS so the queue retries them
(and eventually dead-letters them). Partially delivered records are not
retried, so recipients never get duplicates. Errors logged to CloudWatch.
"""

import logging
from typing import Dict, Any

from domain.notification_processor import NotificationProcessor

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

# Initialize processor once at module level (reused across invocations)
notification_processor = NotificationProcessor()


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Process form submission records from SQS.

    Args:
        event: Lambda event with SQS records
        context: Lambda context

    Returns:
        Dict with batchItemFailures listing records to retry
    """
    records = event.get('Records', [])
    logger.info(f"Processing batch of {len(records)} submission(s)")

    results = []
    for record in records:
        result = notification_processor.process_record(record)
        results.append(result)

        if result.success:
            logger.info(f"✓ Processed message {result.message_id}: {result.messages_queued} email(s) queued")
        else:
            logger.warning(
                f"⚠ Failed message {result.message_id}: {result.error_message}"
            )

    failures = [r for r in results if not r.success]
    retries = [r for r in failures if r.should_retry]
    queued = sum(r.messages_queued for r in results)
    logger.info(
        f"Batch processing complete: {len(results)} submission(s), "
        f"{queued} email(s) queued, {len(failures)} failure(s), {len(retries)} retried"
    )

    return {
        "batchItemFailures": [
            {"itemIdentifier": r.message_id} for r in retries
        ]
    }
