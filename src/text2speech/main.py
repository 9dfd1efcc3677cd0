"""CLI entrypoint for running the FastAPI app with uvicorn."""

from __future__ import annotations

from typing import Optional

import uvicorn

from .config import get_settings


def serve(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the ASGI server."""

    settings = get_settings()
    uvicorn.run(
        "text2speech.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=False,
    )


def main() -> None:
    serve()


if __name__ == "__main__":  # pragma: no cover - manual invocation
    main()
