# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Run the API server with uvicorn.

Example:
    $ API_PORT=8080 python -m academy_lms
"""

import uvicorn

from academy_lms.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "academy_lms.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=1 if settings.api.reload else settings.api.workers,
        reload=settings.api.reload,
        proxy_headers=True,
        forwarded_allow_ips=settings.api.forwarded_allow_ips,
        log_config=None,
    )


if __name__ == "__main__":
    main()
