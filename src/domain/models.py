"""
Data models for form submission notifications.

These type-safe data structures define clear contracts between components.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class FieldDefinition:
    """
    A single form field (property) definition.

    Attributes:
        id: Field identifier, used as key in submitted data
        type: Field type (e.g., "text", "email", "files", "nf-text")
        name: Display label
        hidden: Whether the field is hidden from respondents
        metadata: Remaining display metadata (left untouched)
    """
    id: str
    type: str
    name: str = ''
    hidden: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FieldDefinition':
        """Build from the JSON shape stored with the form."""
        known = {'id', 'type', 'name', 'hidden'}
        return cls(
            id=str(data['id']),
            type=data.get('type', ''),
            name=data.get('name', ''),
            hidden=bool(data.get('hidden') or False),
            metadata={k: v for k, v in data.items() if k not in known}
        )

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass
class FormDefinition:
    """
    Form definition.

    Attributes:
        title: Form title
        properties: Ordered field definitions
        id: Form identifier (optional)
        slug: Form slug (optional)
    """
    title: str
    properties: List[FieldDefinition] = field(default_factory=list)
    id: Optional[str] = None
    slug: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FormDefinition':
        form_id = data.get('id')
        return cls(
            title=data.get('title', ''),
            properties=[FieldDefinition.from_dict(p) for p in data.get('properties', [])],
            id=str(form_id) if form_id is not None else None,
            slug=data.get('slug')
        )


@dataclass(frozen=True)
class SubmissionEvent:
    """
    A form submission: the form plus submitted values keyed by field id.
    """
    form: FormDefinition
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IntegrationSettings:
    """
    Per-integration notification settings.

    Attributes:
        notification_from_email: Sender override (self-hosted only)
        notification_reply_to: Reply-To override
        notification_emails: Recipients of the notification
    """
    notification_from_email: Optional[str] = None
    notification_reply_to: Optional[str] = None
    notification_emails: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'IntegrationSettings':
        data = data or {}
        emails = data.get('notification_emails') or []
        if isinstance(emails, str):
            # Stored as a newline separated textarea value
            emails = emails.replace(',', '\n').split('\n')
        return cls(
            notification_from_email=data.get('notification_from_email'),
            notification_reply_to=data.get('notification_reply_to'),
            notification_emails=[e.strip() for e in emails if e and e.strip()]
        )


@dataclass
class Notifiable:
    """Recipient descriptor exposing routes per channel."""
    routes: Dict[str, str] = field(default_factory=dict)

    def route_for(self, channel: str) -> Optional[str]:
        return self.routes.get(channel)


@dataclass
class FormattedField:
    """A field label and its display value."""
    label: str
    value: str
    field_id: str = ''
    field_type: str = ''

    def to_dict(self) -> Dict[str, str]:
        return {'label': self.label, 'value': self.value}


@dataclass(frozen=True)
class MailSettings:
    """
    Application mail configuration injected into notifications.

    Attributes:
        app_name: Display name used for the From header
        default_from_address: Globally configured From address
        self_hosted: Whether the operator controls its own sending identity
    """
    app_name: str
    default_from_address: str
    self_hosted: bool = False


@dataclass
class OutboundMessage:
    """
    Fully specified email ready for the mail queue.

    Attributes:
        mailer: Outbound mail channel/transport identifier
        reply_to: Reply-To address
        from_address: From address
        from_name: From display name
        subject: Subject line
        template_name: Email template identifier
        template_data: Variables for the template (fields, form)
    """
    mailer: str
    reply_to: str
    from_address: str
    from_name: str
    subject: str
    template_name: str
    template_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def from_(self) -> Tuple[str, str]:
        """Sender as (address, display name)."""
        return self.from_address, self.from_name

    @property
    def fields(self) -> List[FormattedField]:
        return self.template_data.get('fields', [])

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation (without the template data)."""
        return {
            'mailer': self.mailer,
            'reply_to': self.reply_to,
            'from': {'address': self.from_address, 'name': self.from_name},
            'subject': self.subject,
            'template': self.template_name,
        }


@dataclass
class ProcessingResult:
    """
    Result of processing one queued form submission.

    Attributes:
        success: Whether processing succeeded
        message_id: SQS message identifier
        messages_queued: Number of notification emails handed to the mail queue
        failed_recipients: Recipients whose email could not be queued
        error_message: Error description (if processing failed)
    """
    success: bool
    message_id: str
    messages_queued: int = 0
    failed_recipients: List[str] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def should_retry(self) -> bool:
        """Retry only when nothing was queued, otherwise recipients get duplicates."""
        return not self.success and self.messages_queued == 0

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"ProcessingResult(success=True, message_id={self.message_id}, queued={self.messages_queued})"
        else:
            return f"ProcessingResult(success=False, message_id={self.message_id}, error={self.error_message})"
