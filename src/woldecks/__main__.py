"""Woldecks entrypoint.

Run with:
  python -m woldecks
"""

import os
import uvicorn

from woldecks.config import configure_logging, load_settings


def main() -> None:
    host = os.getenv("WOLDECKS_HOST", "127.0.0.1")
    port = int(os.getenv("WOLDECKS_PORT", "3000"))
    reload = os.getenv("WOLDECKS_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    # Fails fast on missing secrets before the server starts.
    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run("woldecks.app:create_app", factory=True, host=host, port=port, reload=reload)


if __name__ == "__main__":
    main()
