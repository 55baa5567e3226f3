"""Jinja2 renderer for the built-in email templates."""

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from driverdesk.core.logging import get_logger

logger = get_logger(__name__)

INVITATION_SUBJECT = "You're invited to join {{ company_name }} as a driver"

INVITATION_HTML = """\
<p>Hi {{ first_name }},</p>
<p>{{ company_name }} has invited you to join their driver team.</p>
<p><a href="{{ onboarding_url }}">Complete your onboarding</a></p>
<p>This invitation expires on {{ expires_at }}.</p>
<p>If you were not expecting this invitation you can ignore this email.</p>
"""

INVITATION_TEXT = """\
Hi {{ first_name }},

{{ company_name }} has invited you to join their driver team.

Complete your onboarding: {{ onboarding_url }}

This invitation expires on {{ expires_at }}.
"""

CREDENTIALS_SUBJECT = "Your {{ company_name }} driver account"

CREDENTIALS_HTML = """\
<p>Hi {{ first_name }},</p>
<p>An account has been created for you at {{ company_name }}.</p>
<p>Email: <strong>{{ email }}</strong><br>
Temporary password: <strong>{{ temporary_password }}</strong></p>
<p><a href="{{ login_url }}">Sign in</a> and change your password to finish onboarding.</p>
"""

CREDENTIALS_TEXT = """\
Hi {{ first_name }},

An account has been created for you at {{ company_name }}.

Email: {{ email }}
Temporary password: {{ temporary_password }}

Sign in at {{ login_url }} and change your password to finish onboarding.
"""


class TemplateRenderer:
    """Sandboxed, autoescaping Jinja2 renderer.

    Missing variables raise instead of rendering as empty strings.
    """

    def __init__(self) -> None:
        self.env = SandboxedEnvironment(
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        # Subjects and plain-text bodies are not HTML
        self.text_env = SandboxedEnvironment(
            autoescape=False,
            undefined=StrictUndefined,
        )

    def render(self, template_string: str, variables: dict, html: bool = True) -> str:
        """Render a template string with variables.

        Args:
            template_string: Jinja2 template string.
            variables: Variables to substitute.
            html: Whether to HTML-escape substituted values.

        Returns:
            Rendered template string.

        Raises:
            TemplateError: If the template is invalid or a variable is missing.
        """
        env = self.env if html else self.text_env
        try:
            return env.from_string(template_string).render(**variables)
        except TemplateError as e:
            logger.error("Template rendering failed", error=str(e))
            raise

    def render_message(
        self,
        subject: str,
        html_body: str,
        text_body: str,
        variables: dict,
    ) -> tuple[str, str, str]:
        """Render subject, HTML body and text body of one message."""
        return (
            self.render(subject, variables, html=False),
            self.render(html_body, variables),
            self.render(text_body, variables, html=False),
        )


_template_renderer: TemplateRenderer | None = None


def get_template_renderer() -> TemplateRenderer:
    """Get the global template renderer instance."""
    global _template_renderer
    if _template_renderer is None:
        _template_renderer = TemplateRenderer()
    return _template_renderer
