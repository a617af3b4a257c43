"""Client for the remote report database."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from . import __version__
from .config import DEFAULT_DATABASE_URL, DEFAULT_TIMEOUT, GLCapsConfig
from .errors import RemoteUnavailable

logger = logging.getLogger(__name__)

UPLOAD_OK = "res_uploaded"


@dataclass(frozen=True)
class UploadOutcome:
    uploaded: bool
    message: str


@dataclass(frozen=True)
class RemoteReportInfo:
    """One database entry for a device."""

    report_id: int
    version: str
    operating_system: str

    def __str__(self) -> str:
        return f"{self.version} ({self.operating_system})"


class RemoteReportStore(Protocol):
    def exists(self, fingerprint: str) -> tuple[bool, Optional[int]]:
        ...

    def fetch(self, report_id: int) -> bytes:
        ...

    def upload(self, document: bytes) -> UploadOutcome:
        ...


class HttpReportStore:
    """Report database reached over HTTP."""

    def __init__(
        self,
        base_url: str = DEFAULT_DATABASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the database scripts.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"User-Agent": f"glcaps/{__version__}"},
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: GLCapsConfig) -> "HttpReportStore":
        return cls(base_url=config.database_url, timeout=config.timeout)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "HttpReportStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("%s %s failed: HTTP %d", method, path, e.response.status_code)
            raise RemoteUnavailable(
                f"{path} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise RemoteUnavailable(f"{path}: {e}") from e
        return response

    def report_url(self, report_id: int) -> str:
        """Browser URL of a report page."""
        return f"{self.base_url}/gl_generatereport.php?reportID={report_id}"

    def exists(self, fingerprint: str) -> tuple[bool, Optional[int]]:
        """Check whether a report with this description is present.

        The server answers with the report id, or ``-1`` when absent.
        """
        response = self._request(
            "GET", "/gl_checkreport.php", params={"description": fingerprint}
        )
        text = response.text.strip()
        try:
            report_id = int(text) if text else -1
        except ValueError:
            raise RemoteUnavailable(f"Unexpected answer from gl_checkreport: {text!r}")
        if report_id < 0:
            return False, None
        return True, report_id

    def fetch(self, report_id: int) -> bytes:
        """Download the report document for ``report_id``."""
        response = self._request(
            "GET", "/gl_getreport.php", params={"reportID": report_id}
        )
        return response.content

    def upload(self, document: bytes) -> UploadOutcome:
        """Submit a serialized report."""
        response = self._request(
            "POST",
            "/gl_uploadreport.php",
            files={"data": ("glcaps_report.xml", document, "application/xml")},
        )
        message = response.text.strip()
        if message != UPLOAD_OK:
            logger.warning("Upload rejected: %s", message)
        return UploadOutcome(uploaded=message == UPLOAD_OK, message=message)

    def list_devices(self) -> list[str]:
        """Names of all devices with reports, one per line in the response."""
        response = self._request("GET", "/gl_getdevices.php")
        return [line.strip() for line in response.text.splitlines() if line.strip()]

    def list_device_reports(self, device: str) -> list[RemoteReportInfo]:
        """Reports submitted for ``device``.

        The response is ``<reports><report id="" version="" os=""/>...</reports>``.
        """
        response = self._request(
            "GET", "/gl_getdevicereports.php", params={"device": device}
        )
        try:
            root = ET.fromstring(response.content)
        except ET.ParseError as e:
            raise RemoteUnavailable(f"Invalid device report list: {e}") from e

        reports = []
        for elem in root.findall("report"):
            try:
                report_id = int(elem.get("id", ""))
            except ValueError:
                logger.warning("Skipping report entry without id for %s", device)
                continue
            reports.append(
                RemoteReportInfo(
                    report_id=report_id,
                    version=elem.get("version", ""),
                    operating_system=elem.get("os", ""),
                )
            )
        return reports
