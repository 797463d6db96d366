"""
Form submission notification pipeline - core business logic.

This module handles the processing of one queued form submission:
1. Parse the submission record from SQS
2. Resolve the notification recipients
3. Build the notification email for each recipient
4. Render the email template
5. Hand each email to the mail queue

All errors are caught and returned as ProcessingResult with success=False.
No exceptions propagate out of the public methods.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import (
    FormDefinition,
    IntegrationSettings,
    MailSettings,
    Notifiable,
    ProcessingResult,
    SubmissionEvent,
)
from .notification import FormSubmissionNotification, MAIL_CHANNEL
from services import config as config_service
from services import templates as template_service
from integrations import mail_queue
from integrations.mail_queue import MailEntry

logger = logging.getLogger(__name__)

DEFAULT_MAILER = 'smtp'


class NotificationProcessor:
    """
    Sends form submission notifications for queued submission records.

    Args:
        settings: Mail configuration (defaults to environment variables)
        notification_factory: Builds the notification (event, integration_data,
                              mailer, settings)
    """

    def __init__(
        self,
        settings: Optional[MailSettings] = None,
        notification_factory: Callable[..., FormSubmissionNotification] = FormSubmissionNotification
    ):
        self.settings = settings or config_service.load_mail_settings()
        self._notification_factory = notification_factory

    def process_record(self, record: Dict[str, Any]) -> ProcessingResult:
        """
        Process a single SQS record containing a form submission.

        Args:
            record: SQS record dict

        Returns:
            ProcessingResult with success=True or success=False (errors logged)
        """
        message_id = record.get('messageId', 'UNKNOWN')
        logger.info(f"Processing SQS message: {message_id}")

        try:
            event, integration_data, mailer = self._parse_record(record)
            logger.info(f"Parsed: form={event.form.title!r}, mailer={mailer}")

            recipients = self._get_recipients(integration_data)
            if not recipients:
                logger.warning(f"No valid notification recipients for form {event.form.title!r}")
                return ProcessingResult(success=True, message_id=message_id)

            notification = self._notification_factory(event, integration_data, mailer, self.settings)

            # Build and render everything before queueing anything
            entries = [
                self.prepare(notification, Notifiable(routes={MAIL_CHANNEL: recipient}))
                for recipient in recipients
            ]

            failed = mail_queue.enqueue_messages(entries)
            queued = len(entries) - len(failed)

            if failed:
                return ProcessingResult(
                    success=False,
                    message_id=message_id,
                    messages_queued=queued,
                    failed_recipients=failed,
                    error_message=f"Mail queue rejected {len(failed)}/{len(entries)} email(s): {', '.join(failed)}"
                )

            return ProcessingResult(
                success=True,
                message_id=message_id,
                messages_queued=queued
            )

        except Exception as e:
            logger.error(f"Failed to process {message_id}: {e}", exc_info=True)

            return ProcessingResult(
                success=False,
                message_id=message_id,
                error_message=str(e)
            )

    def prepare(self, notification: FormSubmissionNotification, notifiable: Notifiable) -> MailEntry:
        """
        Build and render a notification for one recipient.

        Returns:
            (message, recipient, body) ready for the mail queue
        """
        if MAIL_CHANNEL not in notification.via(notifiable):
            raise ValueError(f"Notification does not support the {MAIL_CHANNEL} channel")

        message = notification.to_mail(notifiable)
        body = template_service.render_message(message)

        return message, notifiable.route_for(MAIL_CHANNEL), body

    def _parse_record(self, record: Dict[str, Any]) -> Tuple[SubmissionEvent, IntegrationSettings, str]:
        """
        Parse SQS record into a submission event and integration settings.

        Handles both direct SQS and SNS-wrapped messages.

        Raises:
            ValueError: If the message structure is invalid
            json.JSONDecodeError: If JSON parsing fails
        """
        body = json.loads(record['body'])

        if body.get('Type') == 'Notification' and 'Message' in body:
            logger.info("Unwrapping SNS message (SNS -> SQS)")
            body = json.loads(body['Message'])

        if 'form' not in body:
            raise ValueError("Submission message missing 'form' field")

        integration = body.get('integration') or {}

        event = SubmissionEvent(
            form=FormDefinition.from_dict(body['form']),
            data=body.get('data') or {}
        )
        integration_data = IntegrationSettings.from_dict(integration.get('settings'))
        mailer = integration.get('mailer') or DEFAULT_MAILER

        return event, integration_data, mailer

    @staticmethod
    def _get_recipients(integration_data: IntegrationSettings) -> List[str]:
        recipients = []
        for email in integration_data.notification_emails:
            if FormSubmissionNotification.validate_email(email):
                if email not in recipients:
                    recipients.append(email)
            else:
                logger.warning(f"Skipping invalid notification email: {email!r}")
        return recipients
