"""ASGI entrypoint for the Sonaverse CMS.

Use this in uvicorn/gunicorn:  sonaverse_cms.asgi:app
"""

from __future__ import annotations

from sonaverse_cms.main import build_app

app = build_app()
