# core/template_engine.py
"""
Email Template Engine for contact form notifications
Renders Jinja2 templates with autoescaping, sanitizes the HTML with bleach,
inlines CSS for email clients and derives a plain text alternative
"""

import re
import logging
from typing import Dict, Optional, Any
from dataclasses import dataclass
from datetime import datetime

from jinja2 import Environment, StrictUndefined, select_autoescape
from jinja2.exceptions import TemplateError
from markupsafe import Markup, escape
import bleach
from bleach.css_sanitizer import CSSSanitizer
import premailer
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class TemplateRenderingError(Exception):
    """Raised when an email template cannot be rendered"""
    pass


@dataclass
class RenderedEmail:
    """Result of rendering one email template"""
    subject: str
    html: str
    text: str


class EmailTemplateEngine:
    """
    Template engine for transactional emails

    User-supplied values are escaped by Jinja2 and the rendered document is
    passed through a bleach allow-list before CSS inlining.
    """

    EMAIL_SAFE_TAGS = [
        'p', 'br', 'strong', 'em', 'b', 'i', 'u', 'small',
        'h1', 'h2', 'h3', 'h4',
        'ul', 'ol', 'li', 'a', 'hr',
        'table', 'thead', 'tbody', 'tr', 'td', 'th',
        'div', 'span', 'blockquote',
    ]

    EMAIL_SAFE_ATTRIBUTES = {
        '*': ['class', 'style', 'title'],
        'a': ['href', 'title'],
        'table': ['border', 'cellpadding', 'cellspacing', 'width', 'align'],
        'td': ['colspan', 'rowspan', 'width', 'align', 'valign'],
        'th': ['colspan', 'rowspan', 'width', 'align', 'valign'],
    }

    EMAIL_SAFE_PROTOCOLS = ['http', 'https', 'mailto']

    def __init__(self, enable_css_inlining: bool = True):
        self.enable_css_inlining = enable_css_inlining

        self.env = Environment(
            autoescape=select_autoescape(['html', 'xml'], default_for_string=True),
            undefined=StrictUndefined,  # Fail on undefined variables
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters['email_safe'] = self._email_safe_filter
        self.env.filters['datetime'] = self._datetime_filter

        self.css_sanitizer = CSSSanitizer(
            allowed_css_properties=[
                'color', 'background-color', 'background',
                'font-family', 'font-size', 'font-weight', 'font-style',
                'text-align', 'text-decoration',
                'margin', 'margin-top', 'margin-bottom',
                'padding', 'padding-top', 'padding-bottom',
                'border', 'border-top', 'border-bottom', 'border-left',
                'width', 'max-width', 'line-height',
            ],
        )

        self.html_cleaner = bleach.Cleaner(
            tags=self.EMAIL_SAFE_TAGS,
            attributes=self.EMAIL_SAFE_ATTRIBUTES,
            protocols=self.EMAIL_SAFE_PROTOCOLS,
            css_sanitizer=self.css_sanitizer,
            strip=True,  # Strip disallowed tags instead of escaping
            strip_comments=True,
        )

    def render(self,
               subject_template: str,
               html_template: str,
               variables: Dict[str, Any]) -> RenderedEmail:
        """
        Render subject and body templates

        Raises:
            TemplateRenderingError: on syntax errors or missing variables
        """
        start_time = datetime.now()

        try:
            subject = self.env.from_string(subject_template).render(**variables)
            rendered_html = self.env.from_string(html_template).render(**variables)
        except TemplateError as e:
            raise TemplateRenderingError(f"Template rendering failed: {e}") from e

        rendered_html = self.html_cleaner.clean(rendered_html)

        if self.enable_css_inlining:
            rendered_html = self._inline_css(rendered_html)

        render_time_ms = (datetime.now() - start_time).total_seconds() * 1000
        logger.debug(f"Template rendered in {render_time_ms:.2f}ms")

        return RenderedEmail(
            # Header values must stay on one line
            subject=' '.join(str(Markup(subject).unescape()).split()),
            html=rendered_html,
            text=self.html_to_text(rendered_html),
        )

    def _inline_css(self, html_content: str) -> str:
        try:
            p = premailer.Premailer(
                html_content,
                remove_classes=False,
                keep_style_tags=False,
                strip_important=False,
                disable_validation=True,
                external_styles=None,  # Never fetch remote stylesheets
            )
            return p.transform()
        except Exception as e:
            logger.warning(f"CSS inlining failed: {str(e)}")
            return html_content

    def html_to_text(self, html_content: str) -> str:
        """
        Convert HTML to plain text for the multipart alternative
        """
        if not html_content:
            return ""

        soup = BeautifulSoup(html_content, 'html.parser')

        for tag in soup.find_all(['style', 'head']):
            tag.decompose()

        for br in soup.find_all('br'):
            br.replace_with('\n')

        for block in soup.find_all(['p', 'h1', 'h2', 'h3', 'h4', 'div']):
            block.insert_after('\n\n')

        for hr in soup.find_all('hr'):
            hr.replace_with('\n' + '-' * 40 + '\n')

        for link in soup.find_all('a', href=True):
            link_text = link.get_text()
            href = link['href']
            if href.startswith('mailto:'):
                href = href[len('mailto:'):]
            if href != link_text:
                link.replace_with(f"{link_text} ({href})")

        text = soup.get_text()

        text = re.sub(r'[ \t]+', ' ', text)
        text = re.sub(r' *\n *', '\n', text)
        text = re.sub(r'\n{3,}', '\n\n', text)
        return text.strip()

    @staticmethod
    def _email_safe_filter(value: Any) -> Markup:
        """Escape a value and keep its line breaks"""
        escaped = escape(str(value))
        return Markup(escaped.replace('\n', Markup('<br>')))

    @staticmethod
    def _datetime_filter(value: Optional[str]) -> str:
        if not value:
            return 'N/A'
        try:
            parsed = datetime.fromisoformat(value)
        except (TypeError, ValueError):
            return str(value)
        return parsed.strftime('%Y-%m-%d %H:%M:%S %Z').strip()
