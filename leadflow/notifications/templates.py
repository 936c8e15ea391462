"""
leadflow/notifications/templates.py - New-lead alert rendering.

Builds the email (HTML + plain-text fallback) and the SMS body sent to a
practice when a lead comes in.
"""

from dataclasses import dataclass
from html import escape

from leadflow.notifications.events import LeadNotificationEvent

TEMPERATURE_LABELS = {
    "hot": "(HOT)",
    "warm": "(Warm)",
    "cold": "(Cold)",
}


@dataclass
class RenderedEmail:
    """Final email ready to be sent - subject, HTML body, plain-text body."""
    subject: str
    html_body: str
    plain_body: str


def _detail_lines(event: LeadNotificationEvent) -> list[str]:
    lines = [f"Name: {event.display_name}"]
    if event.phone:
        lines.append(f"Phone: {event.phone}")
    if event.email:
        lines.append(f"Email: {event.email}")
    lines.append(f"Source: {event.source}")
    lines.append(f"Temperature: {event.temperature} (score {event.score})")
    return lines


def render_lead_sms(event: LeadNotificationEvent) -> str:
    """Short text alert; Twilio splits anything over 160 chars itself."""
    label = TEMPERATURE_LABELS.get(event.temperature.lower(), "")
    lines = [f"New Lead Alert {label}".strip(), ""]
    lines.extend(line for line in _detail_lines(event) if not line.startswith("Temperature"))
    lines.append("")
    lines.append(f"Log in to {event.organization_name} dashboard to view details.")
    return "\n".join(lines)


def render_lead_email(event: LeadNotificationEvent, dashboard_url: str) -> RenderedEmail:
    """
    Render the new-lead alert email.

    Args:
        event:         Lead snapshot taken at intake.
        dashboard_url: Deep link to the lead in the client dashboard.

    Returns:
        RenderedEmail with subject, HTML body, and plain-text body.
    """
    label = TEMPERATURE_LABELS.get(event.temperature.lower(), "")
    subject = f"New lead {label}: {event.display_name}" if label else f"New lead: {event.display_name}"

    details = _detail_lines(event)
    plain_body = "\n".join(
        [f"A new lead just came in for {event.organization_name}.", ""]
        + details
        + ["", f"View the lead: {dashboard_url}"]
    )

    paragraphs = "\n".join(f"<p>{escape(line)}</p>" for line in details)

    html_body = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(subject)}</title>
  <style>
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
      font-size: 15px;
      line-height: 1.6;
      color: #1a1a1a;
      background: #ffffff;
      margin: 0;
      padding: 0;
    }}
    .container {{
      max-width: 600px;
      margin: 40px auto;
      padding: 0 24px;
    }}
    p {{
      margin: 0 0 8px 0;
    }}
    .cta {{
      display: inline-block;
      margin-top: 24px;
      padding: 10px 18px;
      background: #2563eb;
      color: #ffffff;
      border-radius: 6px;
      text-decoration: none;
    }}
  </style>
</head>
<body>
  <div class="container">
    <h2>New lead for {escape(event.organization_name)}</h2>
    {paragraphs}
    <a class="cta" href="{escape(dashboard_url)}">View lead</a>
  </div>
</body>
</html>"""

    return RenderedEmail(subject=subject, html_body=html_body, plain_body=plain_body)
