# docrelay/services/conversion_client.py
"""
Client for the remote office-to-PDF conversion API.

Workflow (one task per file):
1. POST {start_task_url}                      -> {server, task, token}
2. POST https://{server}/v1/upload (multipart) -> {server_filename}
3. POST https://{server}/v1/process (JSON)     -> processing result
4. GET  https://{server}/v1/download/{task}    -> converted PDF bytes

Steps 2-4 authenticate with the task's bearer token.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import requests

from docrelay.services.exceptions import UpstreamCallFailedError

# Module logger
logger = logging.getLogger(__name__)

OFFICE_PDF_TOOL = "officepdf"
DEFAULT_TIMEOUT = 120


@dataclass(frozen=True)
class ConversionTask:
    """A started conversion task"""
    server: str
    task: str
    token: str

    @property
    def base_url(self) -> str:
        return f"https://{self.server}/v1"

    @property
    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def _error_detail(response: Optional[requests.Response]) -> Optional[str]:
    """Pull error.message out of a JSON error body, if there is one."""
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return None


class ConversionClient:
    """
    Synchronous client; one instance can be shared across requests
    (each convert() call uses its own task).
    """

    service_name = "conversion"

    def __init__(
        self,
        start_task_url: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.start_task_url = start_task_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, url: str, step: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.HTTPError as e:
            detail = _error_detail(e.response) or str(e)
            raise UpstreamCallFailedError(self.service_name, f"{step} failed: {detail}") from e
        except requests.RequestException as e:
            raise UpstreamCallFailedError(self.service_name, f"{step} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: requests.Response, step: str, *keys: str) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamCallFailedError("conversion", f"{step} returned invalid JSON") from e
        if not isinstance(body, dict):
            raise UpstreamCallFailedError("conversion", f"{step} returned unexpected payload")
        missing = [k for k in keys if not body.get(k)]
        if missing:
            raise UpstreamCallFailedError(
                "conversion", f"{step} response is missing {', '.join(missing)}"
            )
        return body

    def start_task(self) -> ConversionTask:
        response = self._request("POST", self.start_task_url, "start task")
        body = self._json(response, "start task", "server", "task", "token")
        logger.debug("Started conversion task %s on %s", body["task"], body["server"])
        return ConversionTask(server=body["server"], task=body["task"], token=body["token"])

    def upload(self, task: ConversionTask, file_path: Path, file_name: str) -> str:
        """Upload the source file; returns the server-side filename."""
        with open(file_path, "rb") as f:
            response = self._request(
                "POST",
                f"{task.base_url}/upload",
                "upload",
                data={"task": task.task},
                files={"file": (file_name, f)},
                headers=task.auth_headers,
            )
        body = self._json(response, "upload", "server_filename")
        return body["server_filename"]

    def process(
        self,
        task: ConversionTask,
        server_filename: str,
        file_name: str,
        tool: str = OFFICE_PDF_TOOL,
    ) -> None:
        self._request(
            "POST",
            f"{task.base_url}/process",
            "process",
            json={
                "task": task.task,
                "tool": tool,
                "files": [{"server_filename": server_filename, "filename": file_name}],
            },
            headers=task.auth_headers,
        )

    def download(self, task: ConversionTask) -> bytes:
        response = self._request(
            "GET",
            f"{task.base_url}/download/{task.task}",
            "download",
            headers=task.auth_headers,
        )
        return response.content

    def convert(self, file_path: Path, file_name: Optional[str] = None) -> bytes:
        """
        Run the whole workflow for one file.

        Args:
            file_path: Local file to convert
            file_name: Original filename (defaults to file_path.name)

        Returns:
            Converted PDF bytes

        Raises:
            UpstreamCallFailedError: any step failed
        """
        file_name = file_name or file_path.name
        task = self.start_task()
        server_filename = self.upload(task, file_path, file_name)
        self.process(task, server_filename, file_name)
        pdf_bytes = self.download(task)
        logger.info("Converted %s via %s (%d bytes)", file_name, task.server, len(pdf_bytes))
        return pdf_bytes
