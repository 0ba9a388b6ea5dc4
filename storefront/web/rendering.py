"""Jinja2 rendering for the storefront pages."""

import re
from pathlib import Path
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

TEMPLATES_DIR = Path(__file__).parent / "templates"

NAV_LINKS = [
    {"path": "/", "label": "Home"},
    {"path": "/portfolio", "label": "Portfolio"},
    {"path": "/pricing", "label": "Pricing"},
    {"path": "/reviews", "label": "Reviews"},
    {"path": "/terms", "label": "Terms"},
]


def highlight(text: str, word: str) -> Markup:
    """Wrap every case-insensitive occurrence of `word` in a highlight span."""
    text = text or ""
    if not word:
        return escape(text)
    parts = re.split(f"({re.escape(word)})", text, flags=re.IGNORECASE)
    return Markup("").join(
        Markup('<span class="highlight">{}</span>').format(part)
        if part.lower() == word.lower()
        else escape(part)
        for part in parts
    )


def stars(rating: int) -> str:
    rating = max(0, min(int(rating or 0), 5))
    return "★" * rating + "☆" * (5 - rating)


_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)
_env.filters["highlight"] = highlight
_env.filters["stars"] = stars


def render(request: Request, template_name: str, status_code: int = 200, **context) -> HTMLResponse:
    """Render a page template with the shared layout context."""
    settings = request.app.state.settings
    user = context.get("user")
    base_context = {
        "request": request,
        "path": request.url.path,
        "nav_links": NAV_LINKS,
        "notice": request.query_params.get("notice"),
        "notice_level": request.query_params.get("level", "info"),
        "discord_url": settings.discord_url,
        "watch": [],
        "is_admin": request.app.state.auth.is_admin(user),
    }
    base_context.update(context)
    html = _env.get_template(template_name).render(**base_context)
    return HTMLResponse(html, status_code=status_code)


def redirect_with_notice(url: str, message: str, level: str = "success", **params) -> RedirectResponse:
    """303 back to `url`, carrying a one-off notification in the query string."""
    query = urlencode({**params, "notice": message, "level": level})
    separator = "&" if "?" in url else "?"
    return RedirectResponse(f"{url}{separator}{query}", status_code=303)
