import logging

import httpx

from app.timer.config import ClientSettings
from app.timer.state import TaskSnapshot

logger = logging.getLogger("app.timer.reporter")

ACCESS_COOKIE = "access_token"


def make_client(settings: ClientSettings) -> httpx.Client:
    cookies = {}
    if settings.ACCESS_TOKEN:
        cookies[ACCESS_COOKIE] = settings.ACCESS_TOKEN
    return httpx.Client(
        base_url=settings.API_URL,
        cookies=cookies,
        timeout=settings.REQUEST_TIMEOUT,
    )


def fetch_task(client: httpx.Client, task_id: str) -> TaskSnapshot:
    resp = client.get(f"/tasks/{task_id}")
    resp.raise_for_status()
    return TaskSnapshot.from_api(resp.json())


class ApiProgressReporter:
    """Sends "one pomodoro done" to the API. Failures are logged, not raised."""

    def __init__(self, client: httpx.Client):
        self._client = client

    def report_completed(self, task_id: str) -> TaskSnapshot | None:
        try:
            resp = self._client.patch(f"/tasks/{task_id}/progress")
            resp.raise_for_status()
            return TaskSnapshot.from_api(resp.json())
        except (httpx.HTTPError, ValueError, KeyError) as e:
            # ValueError: body is not JSON, KeyError: not a task
            logger.warning("Failed to sync progress for task %s: %r", task_id, e)
            return None
