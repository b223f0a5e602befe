from __future__ import annotations

import uvicorn

from pos_terminal.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "pos_terminal.bootstrap:create_asgi_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
