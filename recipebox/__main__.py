"""
Run the RecipeBox server: `python -m recipebox`.

Binds to BACKEND_HOST:BACKEND_PORT (default 0.0.0.0:8080).
"""

import uvicorn

from recipebox.config import settings


def main() -> None:
    uvicorn.run(
        "recipebox.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
