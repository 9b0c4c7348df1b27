import httpx

from config.settings import Settings


def build_camera_client(settings: Settings) -> httpx.Client:
    return httpx.Client(timeout=settings.http_timeout_seconds, follow_redirects=True)


def build_home_assistant_client(settings: Settings) -> httpx.Client:
    return httpx.Client(timeout=settings.http_timeout_seconds)
