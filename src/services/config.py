"""
Application mail configuration.

Reads mail settings from environment variables and returns them as an
immutable MailSettings value that is passed into notifications explicitly.
"""

import logging
import os
from typing import Mapping, Optional

from domain.models import MailSettings

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = 'Forms'
DEFAULT_FROM_ADDRESS = 'notifications@example.com'

_TRUTHY = {'1', 'true', 'yes', 'on'}


def _parse_bool(value: Optional[str]) -> bool:
    return (value or '').strip().lower() in _TRUTHY


def load_mail_settings(environ: Optional[Mapping[str, str]] = None) -> MailSettings:
    """
    Build MailSettings from environment variables.

    Variables:
        APP_NAME: Display name for the From header
        MAIL_FROM_ADDRESS: Default From address
        SELF_HOSTED: "true"/"1" when the operator controls its own mail identity

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        MailSettings
    """
    environ = os.environ if environ is None else environ

    settings = MailSettings(
        app_name=environ.get('APP_NAME', DEFAULT_APP_NAME),
        default_from_address=environ.get('MAIL_FROM_ADDRESS', DEFAULT_FROM_ADDRESS),
        self_hosted=_parse_bool(environ.get('SELF_HOSTED'))
    )
    logger.info(
        f"Mail settings loaded: app_name={settings.app_name}, "
        f"from={settings.default_from_address}, self_hosted={settings.self_hosted}"
    )
    return settings
