"""
Tests for email template management service.
"""

import pytest
from unittest.mock import patch, MagicMock
from botocore.exceptions import ClientError
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.models import FormDefinition, FormattedField, OutboundMessage
from services import templates


@pytest.fixture(autouse=True)
def clear_template_cache():
    templates.clear_cache()
    yield
    templates.clear_cache()


class TestReadPackaged:
    """Test reading templates shipped with the code."""

    def test_packaged_template_exists(self):
        result = templates._read_packaged('form-submission-notification')

        assert '{form_title}' in result
        assert '{fields}' in result

    def test_missing_template(self):
        with pytest.raises(ValueError, match="Template 'missing' not found"):
            templates._read_packaged('missing')


class TestReadOverride:
    """Test reading template overrides from S3."""

    @patch('services.templates.TEMPLATE_BUCKET', 'test-bucket')
    @patch('services.templates.TEMPLATE_KEY_PREFIX', 'templates/')
    @patch('services.templates.s3_client')
    def test_override_found(self, mock_s3):
        mock_s3.get_object.return_value = {
            'Body': MagicMock(read=lambda: b'Template from S3')
        }

        result = templates._read_override('form-submission-notification')

        assert result == 'Template from S3'
        mock_s3.get_object.assert_called_once_with(
            Bucket='test-bucket',
            Key='templates/form-submission-notification.md'
        )

    @patch('services.templates.TEMPLATE_BUCKET', 'test-bucket')
    @patch('services.templates.s3_client')
    def test_override_missing(self, mock_s3):
        mock_s3.get_object.side_effect = ClientError(
            {'Error': {'Code': 'NoSuchKey', 'Message': 'Not found'}},
            'GetObject'
        )

        assert templates._read_override('form-submission-notification') is None

    @patch('services.templates.TEMPLATE_BUCKET', None)
    @patch('services.templates.s3_client')
    def test_no_bucket_configured(self, mock_s3):
        assert templates._read_override('form-submission-notification') is None
        mock_s3.get_object.assert_not_called()


class TestLoadTemplate:
    """Test load_template with caching and fallback."""

    @patch('services.templates._read_override', return_value='From S3')
    @patch('services.templates._read_packaged')
    def test_override_preferred(self, mock_packaged, mock_override):
        assert templates.load_template('form-submission-notification') == 'From S3'
        mock_packaged.assert_not_called()

    @patch('services.templates._read_override', return_value=None)
    @patch('services.templates._read_packaged', return_value='Packaged')
    def test_fallback_to_packaged(self, mock_packaged, mock_override):
        assert templates.load_template('form-submission-notification') == 'Packaged'

    @patch('services.templates._read_override', return_value=None)
    @patch('services.templates._read_packaged', return_value='Cached')
    def test_cached_between_calls(self, mock_packaged, mock_override):
        templates.load_template('form-submission-notification')
        templates.load_template('form-submission-notification')

        mock_packaged.assert_called_once()

    @patch('services.templates.CACHE_TTL_SECONDS', 300)
    @patch('services.templates.time.time')
    @patch('services.templates._read_override', return_value=None)
    @patch('services.templates._read_packaged')
    def test_cache_expires(self, mock_packaged, mock_override, mock_time):
        mock_packaged.side_effect = ['v1', 'v2']

        mock_time.return_value = 1000.0
        assert templates.load_template('form-submission-notification') == 'v1'

        mock_time.return_value = 1400.0
        assert templates.load_template('form-submission-notification') == 'v2'


class TestRenderTemplate:
    """Test variable substitution."""

    def test_render(self):
        assert templates.render_template("Hello {name}", name="Alice") == "Hello Alice"

    def test_braces_in_values_are_kept_verbatim(self):
        result = templates.render_template("Value: {value}", value="{secret} and {{x}}")

        assert result == "Value: {secret} and {{x}}"

    def test_missing_variable(self):
        with pytest.raises(ValueError, match="Missing required variable in template: title"):
            templates.render_template("Hello {title}")


class TestRenderMessage:
    """Test rendering an outbound message body."""

    def _message(self, fields):
        return OutboundMessage(
            mailer='smtp',
            reply_to='owner@example.com',
            from_address='hello@example.com',
            from_name='Forms',
            subject='New form submission for "Contact Us"',
            template_name='form-submission-notification',
            template_data={'fields': fields, 'form': FormDefinition(title='Contact Us')}
        )

    @patch('services.templates.TEMPLATE_BUCKET', None)
    def test_render_message(self):
        body = templates.render_message(self._message([
            FormattedField(label='Name', value='Ada'),
            FormattedField(label='Message', value='Hi {there}'),
        ]))

        assert 'Your form "Contact Us" has a new submission.' in body
        assert '**Name**\nAda' in body
        assert '**Message**\nHi {there}' in body
        assert body.rstrip().endswith('Forms')

    @patch('services.templates.TEMPLATE_BUCKET', None)
    def test_render_message_without_fields(self):
        body = templates.render_message(self._message([]))

        assert '_No answers submitted._' in body
