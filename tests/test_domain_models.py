"""
Tests for domain models (data structures).
"""

import dataclasses
import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import (
    FieldDefinition,
    FormDefinition,
    FormattedField,
    IntegrationSettings,
    Notifiable,
    OutboundMessage,
    ProcessingResult,
    SubmissionEvent,
)


class TestFormDefinition:
    """Test form and field parsing."""

    def test_from_dict(self):
        form = FormDefinition.from_dict({
            'id': 7,
            'title': 'Contact Us',
            'slug': 'contact-us',
            'properties': [
                {'id': 'email', 'type': 'email', 'name': 'Email', 'required': True},
                {'id': 'secret', 'type': 'text', 'hidden': True},
            ]
        })

        assert form.id == '7'
        assert form.title == 'Contact Us'
        assert form.slug == 'contact-us'
        assert [p.id for p in form.properties] == ['email', 'secret']
        assert form.properties[0].metadata == {'required': True}
        assert form.properties[0].hidden is False
        assert form.properties[1].hidden is True

    def test_hidden_null_is_visible(self):
        field_def = FieldDefinition.from_dict({'id': 'a', 'type': 'email', 'hidden': None})

        assert field_def.hidden is False

    def test_submission_event_is_immutable(self):
        event = SubmissionEvent(form=FormDefinition(title='t'), data={})

        with pytest.raises(dataclasses.FrozenInstanceError):
            event.data = {'x': 1}


class TestIntegrationSettings:
    """Test integration settings parsing."""

    def test_from_dict_with_list(self):
        settings = IntegrationSettings.from_dict({
            'notification_emails': ['a@example.com', ' b@example.com '],
            'notification_reply_to': 'reply@example.com',
            'notification_from_email': 'from@example.com',
        })

        assert settings.notification_emails == ['a@example.com', 'b@example.com']
        assert settings.notification_reply_to == 'reply@example.com'
        assert settings.notification_from_email == 'from@example.com'

    def test_from_dict_with_text(self):
        settings = IntegrationSettings.from_dict({'notification_emails': 'a@example.com\n\nb@example.com, c@example.com'})

        assert settings.notification_emails == ['a@example.com', 'b@example.com', 'c@example.com']

    def test_from_none(self):
        settings = IntegrationSettings.from_dict(None)

        assert settings.notification_emails == []
        assert settings.notification_reply_to is None
        assert settings.notification_from_email is None


class TestOutboundMessage:
    """Test OutboundMessage dataclass."""

    def test_from_and_serialization(self):
        message = OutboundMessage(
            mailer='smtp',
            reply_to='r@example.com',
            from_address='f@example.com',
            from_name='Forms',
            subject='New form submission for "Contact Us"',
            template_name='form-submission-notification',
            template_data={'fields': [FormattedField(label='Name', value='Ada')]}
        )

        assert message.from_ == ('f@example.com', 'Forms')
        assert message.fields[0].to_dict() == {'label': 'Name', 'value': 'Ada'}
        assert message.to_dict()['from'] == {'address': 'f@example.com', 'name': 'Forms'}


class TestNotifiable:

    def test_route_for(self):
        notifiable = Notifiable(routes={'mail': 'owner@example.com'})

        assert notifiable.route_for('mail') == 'owner@example.com'
        assert notifiable.route_for('slack') is None


class TestProcessingResult:
    """Test ProcessingResult dataclass."""

    def test_success_repr(self):
        result = ProcessingResult(success=True, message_id='msg-1', messages_queued=2)

        assert repr(result) == 'ProcessingResult(success=True, message_id=msg-1, queued=2)'

    def test_failure_repr(self):
        result = ProcessingResult(success=False, message_id='msg-1', error_message='boom')

        assert 'error=boom' in repr(result)
