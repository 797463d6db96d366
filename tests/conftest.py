"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('MAIL_QUEUE_URL', 'https://sqs.us-west-2.amazonaws.com/123456789012/mail-queue-test')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('AWS_ACCESS_KEY_ID', 'testing')
os.environ.setdefault('AWS_SECRET_ACCESS_KEY', 'testing')
os.environ.setdefault('APP_NAME', 'Forms')
os.environ.setdefault('MAIL_FROM_ADDRESS', 'hello@example.com')
os.environ.setdefault('ENVIRONMENT', 'test')


@pytest.fixture
def contact_form():
    """Form with a single visible email field."""
    from domain.models import FormDefinition
    return FormDefinition.from_dict({
        'id': '42',
        'title': 'Contact Us',
        'properties': [
            {'id': 'name', 'type': 'text', 'name': 'Name'},
            {'id': 'email', 'type': 'email', 'name': 'Email'},
            {'id': 'message', 'type': 'text', 'name': 'Message'},
        ]
    })


@pytest.fixture
def hosted_settings():
    from domain.models import MailSettings
    return MailSettings(app_name='Forms', default_from_address='hello@example.com', self_hosted=False)


@pytest.fixture
def self_hosted_settings():
    from domain.models import MailSettings
    return MailSettings(app_name='Forms', default_from_address='hello@example.com', self_hosted=True)
