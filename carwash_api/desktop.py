"""
Desktop launcher: serve the API locally and open it in the system browser.

Usage:
  carwash-desktop
  python -m carwash_api.desktop
"""

from __future__ import annotations

import logging
import socket
import threading
import time
import webbrowser

import httpx
import uvicorn

from carwash_api.core.logging import configure_logging
from carwash_api.core.settings import get_app_settings

logger = logging.getLogger(__name__)

HEALTH_TIMEOUT_SECONDS = 30.0


def _free_port(host: str) -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def _wait_until_healthy(base_url: str, timeout: float = HEALTH_TIMEOUT_SECONDS) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            response = httpx.get(f"{base_url}/api/health", timeout=2.0)
            if response.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(0.25)
    return False


# PUBLIC_INTERFACE
def main() -> None:
    """
    Start uvicorn in a background thread, wait for the health check and open the browser.

    Migrations and seeding run through the app's startup hook. Blocks until Ctrl+C.
    """
    settings = get_app_settings()
    configure_logging(settings.LOG_LEVEL)

    host = settings.DESKTOP_HOST
    port = settings.DESKTOP_PORT or _free_port(host)
    base_url = f"http://{host}:{port}"

    config = uvicorn.Config("carwash_api.api.main:app", host=host, port=port, log_level=settings.LOG_LEVEL.lower())
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, name="carwash-api", daemon=True)
    thread.start()

    if not _wait_until_healthy(base_url):
        server.should_exit = True
        thread.join(timeout=5)
        raise SystemExit(f"API did not become healthy at {base_url}")

    logger.info("Car wash API running at %s", base_url)
    if settings.DESKTOP_OPEN_BROWSER:
        webbrowser.open(f"{base_url}/docs")

    try:
        while thread.is_alive():
            thread.join(timeout=0.5)
    except KeyboardInterrupt:
        logger.info("Shutting down")
        server.should_exit = True
        thread.join(timeout=10)


if __name__ == "__main__":
    main()
