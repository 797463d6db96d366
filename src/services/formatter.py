"""
Form submission formatting.

Turns raw submitted values into display strings, one per form field, for use
in notification emails.
"""

import html
import logging
from typing import Any, Callable, Dict, List, Optional

from domain.models import FieldDefinition, FormattedField, FormDefinition
from services import s3 as s3_service

logger = logging.getLogger(__name__)

# Layout blocks (text, headings, page breaks...) carry no submitted value
LAYOUT_TYPE_PREFIX = 'nf-'

UrlResolver = Callable[[str, bool], str]


class FormSubmissionFormatter:
    """
    Builder-style formatter for submitted form data.

    Example:
        >>> fields = (FormSubmissionFormatter(form, data)
        ...           .show_hidden_fields()
        ...           .output_strings_only()
        ...           .get_fields_with_value())
    """

    def __init__(
        self,
        form: FormDefinition,
        data: Dict[str, Any],
        url_resolver: Optional[UrlResolver] = None
    ):
        self.form = form
        self.data = data or {}
        self._url_resolver = url_resolver or self._default_url_resolver
        self._show_hidden = False
        self._create_links = False
        self._strings_only = False
        self._signed_urls = False

    def show_hidden_fields(self) -> 'FormSubmissionFormatter':
        self._show_hidden = True
        return self

    def create_links(self) -> 'FormSubmissionFormatter':
        self._create_links = True
        return self

    def output_strings_only(self) -> 'FormSubmissionFormatter':
        self._strings_only = True
        return self

    def use_signed_url_for_files(self) -> 'FormSubmissionFormatter':
        self._signed_urls = True
        return self

    def get_fields_with_value(self) -> List[FormattedField]:
        """
        Format every field that has a submitted value, in form order.

        Returns:
            List of FormattedField
        """
        fields = []
        for field_def in self.form.properties:
            if field_def.type.startswith(LAYOUT_TYPE_PREFIX):
                continue
            if field_def.hidden and not self._show_hidden:
                continue

            value = self.data.get(field_def.id)
            if _is_empty(value):
                continue

            fields.append(FormattedField(
                label=field_def.label,
                value=self._format_value(field_def, value),
                field_id=field_def.id,
                field_type=field_def.type
            ))

        logger.debug(f"Formatted {len(fields)} field(s) for form '{self.form.title}'")
        return fields

    def _format_value(self, field_def: FieldDefinition, value: Any) -> Any:
        if field_def.type == 'checkbox':
            return 'Yes' if value else 'No'

        if field_def.type == 'files':
            files = value if isinstance(value, list) else [value]
            value = [self._file_url(str(f)) for f in files if f]
            if self._create_links:
                value = [_link(url, url) for url in value]

        elif field_def.type == 'url' and self._create_links:
            value = _link(str(value), str(value))

        elif field_def.type == 'email' and self._create_links:
            value = _link(f"mailto:{value}", str(value))

        elif field_def.type == 'date' and isinstance(value, list) and len(value) == 2:
            value = f"{value[0]} - {value[1]}"

        if not self._strings_only:
            return value

        if isinstance(value, list):
            return ', '.join(str(v) for v in value)
        if isinstance(value, bool):
            return 'Yes' if value else 'No'
        return str(value)

    def _file_url(self, filename: str) -> str:
        if filename.startswith(('http://', 'https://')):
            return filename
        key = s3_service.file_key(self.form.id or 'unknown', filename)
        return self._url_resolver(key, self._signed_urls)

    @staticmethod
    def _default_url_resolver(key: str, signed: bool) -> str:
        return s3_service.generate_file_url(key, signed=signed)


def _is_empty(value: Any) -> bool:
    return value is None or value == '' or value == []


def _link(href: str, text: str) -> str:
    return f'<a href="{html.escape(href, quote=True)}">{html.escape(text)}</a>'
