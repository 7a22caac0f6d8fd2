"""Run the upload server with uvicorn."""

import uvicorn

from upload_server.core.config import settings


def main() -> None:
    uvicorn.run(
        "upload_server.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
        log_level=settings.app.log_level.lower(),
        proxy_headers=True,
    )


if __name__ == "__main__":
    main()
