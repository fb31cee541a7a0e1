"""blogapi entrypoint.

Run with:
  python -m blogapi
"""

import uvicorn

from blogapi.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "blogapi.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    main()
