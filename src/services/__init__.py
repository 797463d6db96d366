"""
Service functions for form submission notifications.

This package contains reusable service functions for email address handling,
configuration, submission formatting, file URLs and email templates.
"""

__all__ = ['config', 'email', 'formatter', 's3', 'templates']
