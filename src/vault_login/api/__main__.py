"""
vault_login.api.__main__

Entrypoint for running the FastAPI application via `python -m vault_login.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from vault_login.api.app import create_app
from vault_login.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        proxy_headers=settings.trust_forwarded_for,
    )


if __name__ == "__main__":
    main()
