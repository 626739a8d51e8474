"""Anonymous image upload to imgur."""

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests

from .config import IMGUR_UPLOAD_URL
from .errors import UploadError

log = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """Outcome of a successful upload; link may be missing."""

    link: Optional[str] = None
    data: dict = field(default_factory=dict)


class ImgurClient:
    """Uploads images with an imgur application client id."""

    def __init__(self, client_id: str, url: str = IMGUR_UPLOAD_URL, timeout: float = 60):
        self.client_id = client_id
        self.url = url
        self.timeout = timeout

    def upload(self, image: bytes, filename: str = "screenshot.png") -> UploadResult:
        """Upload raw image bytes.

        Returns:
            UploadResult with the public link, if the service returned one

        Raises:
            UploadError: On network failure, an HTTP error or a rejected upload
        """
        try:
            resp = requests.post(
                self.url,
                headers={"Authorization": f"Client-ID {self.client_id}"},
                files={"image": (filename, image, "image/png")},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UploadError(f"Upload failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError:
            payload = {}

        if not resp.ok or payload.get("success") is False:
            raise UploadError(f"Upload rejected (HTTP {resp.status_code}): {_error_message(payload)}")

        data = payload.get("data") or {}
        if not isinstance(data, dict):
            data = {}
        link = data.get("link") or None
        log.debug("Upload finished, link=%s", link)
        return UploadResult(link=link, data=data)


def _error_message(payload: dict) -> str:
    data = payload.get("data")
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            error = error.get("message")
        if error:
            return str(error)
    return "no details"
