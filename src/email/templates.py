"""Email templates for learning path messages.

Each renderer returns ``(subject, plain_text, html)``.
"""

from datetime import datetime
from html import escape


BASE_TEMPLATE = """
<!DOCTYPE html>
<html lang="id">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="margin: 0; padding: 0; background-color: #F8FAFC; font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif;">
  <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
    <tr>
      <td align="center" style="padding: 40px 20px;">
        <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background-color: #FFFFFF; border-radius: 12px; max-width: 600px;">
          <tr>
            <td style="padding: 40px;">
              <h1 style="margin: 0 0 16px; font-size: 22px; color: #0F172A;">{title}</h1>
              {content}
            </td>
          </tr>
          <tr>
            <td style="padding: 20px 40px; background-color: #F1F5F9; border-radius: 0 0 12px 12px;">
              <p style="margin: 0; font-size: 12px; color: #64748B; text-align: center;">
                &copy; {year} Tim LearnPath. Email ini dikirim otomatis, mohon tidak membalas.
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""

PARAGRAPH = '<p style="margin: 0 0 16px; font-size: 16px; color: #334155; line-height: 1.6;">{text}</p>'


def _render(title: str, paragraphs: list[str]) -> str:
    content = "\n".join(PARAGRAPH.format(text=escape(p)) for p in paragraphs)
    return BASE_TEMPLATE.format(
        title=escape(title), content=content, year=datetime.now().year
    )


def _plain(user_name: str, body: str) -> str:
    return f"Halo {user_name},\n\n{body}\n\nSalam,\nTim LearnPath"


def render_path_enrolled(user_name: str, path_title: str) -> tuple[str, str, str]:
    """Render the path enrollment confirmation."""
    subject = f"Pendaftaran Learning Path: {path_title}"
    body = f'Anda telah terdaftar di learning path "{path_title}".'
    html = _render(subject, [f"Halo {user_name},", body])
    return subject, _plain(user_name, body), html


def render_path_completed(user_name: str, path_title: str) -> tuple[str, str, str]:
    """Render the path completion congratulation."""
    subject = f"Learning Path Selesai: {path_title}"
    body = (
        f'Selamat! Anda telah menyelesaikan seluruh kursus di learning path "{path_title}". '
        "Sertifikat Anda sudah tersedia di portal."
    )
    html = _render(subject, [f"Halo {user_name},", body])
    return subject, _plain(user_name, body), html
