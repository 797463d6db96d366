"""
Email notification sent to form owners when a form is submitted.

Builds an OutboundMessage from a submission: picks the sender and reply-to
addresses, formats the submitted fields and names the email template.
"""

import logging
import time
from typing import Callable, List, Optional

from .models import (
    IntegrationSettings,
    MailSettings,
    Notifiable,
    OutboundMessage,
    SubmissionEvent,
)
from services import email as email_service
from services.formatter import FormSubmissionFormatter

logger = logging.getLogger(__name__)

MAIL_CHANNEL = 'mail'
TEMPLATE_NAME = 'form-submission-notification'

FormatterFactory = Callable[..., FormSubmissionFormatter]


class FormSubmissionNotification:
    """
    Notification for a single form submission.

    Args:
        event: The submission (form definition and submitted data)
        integration_data: Optional sender / reply-to overrides
        mailer: Outbound mail channel to deliver through
        settings: Application mail configuration
        formatter_factory: Builds the field formatter (form, data)
        clock: Returns the current unix time, used to tag hosted sender addresses
    """

    def __init__(
        self,
        event: SubmissionEvent,
        integration_data: Optional[IntegrationSettings],
        mailer: str,
        settings: MailSettings,
        formatter_factory: FormatterFactory = FormSubmissionFormatter,
        clock: Callable[[], float] = time.time
    ):
        self.event = event
        self.integration_data = integration_data or IntegrationSettings()
        self.mailer = mailer
        self.settings = settings
        self._formatter_factory = formatter_factory
        self._clock = clock

    def via(self, notifiable: Optional[Notifiable] = None) -> List[str]:
        """Delivery channels: always mail."""
        return [MAIL_CHANNEL]

    channels = via

    def to_mail(self, notifiable: Notifiable) -> OutboundMessage:
        """
        Build the email for a recipient.

        Args:
            notifiable: Recipient; its mail route is the last reply-to fallback

        Returns:
            OutboundMessage ready for the mail queue
        """
        formatter = (
            self._formatter_factory(self.event.form, self.event.data)
            .show_hidden_fields()
            .create_links()
            .output_strings_only()
            .use_signed_url_for_files()
        )
        fields = formatter.get_fields_with_value()

        return OutboundMessage(
            mailer=self.mailer,
            reply_to=self._get_reply_to_email(notifiable.route_for(MAIL_CHANNEL)),
            from_address=self._get_from_email(),
            from_name=self.settings.app_name,
            subject=f'New form submission for "{self.event.form.title}"',
            template_name=TEMPLATE_NAME,
            template_data={
                'fields': fields,
                'form': self.event.form,
            }
        )

    build = to_mail

    def _get_from_email(self) -> str:
        if self.settings.self_hosted:
            from_email = self.integration_data.notification_from_email
            if from_email and self.validate_email(from_email):
                return from_email
            return self.settings.default_from_address

        # Hosted: never let form owners set the sender, tag ours instead
        return email_service.plus_address(
            self.settings.default_from_address,
            str(int(self._clock()))
        )

    def _get_reply_to_email(self, default: Optional[str]) -> Optional[str]:
        reply_to = self.integration_data.notification_reply_to
        if reply_to and self.validate_email(reply_to):
            return reply_to

        return self._get_respondent_email() or default

    def _get_respondent_email(self) -> Optional[str]:
        # Only use the respondent's address when the form has exactly one email field
        email_fields = [
            field_def for field_def in self.event.form.properties
            if not field_def.hidden and field_def.type == 'email'
        ]
        if len(email_fields) != 1:
            if email_fields:
                logger.debug(
                    f"Form '{self.event.form.title}' has {len(email_fields)} email fields, "
                    f"not using respondent email as reply-to"
                )
            return None

        email = self.event.data.get(email_fields[0].id)
        if email is not None and self.validate_email(email):
            return email

        return None

    @staticmethod
    def validate_email(email) -> bool:
        return email_service.validate_email(email)
