"""Configuration for glcaps."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CATALOG = "capslist.xml"
DEFAULT_DATABASE_URL = "http://delphigl.de/glcapsviewer"
DEFAULT_TIMEOUT = 30.0


@dataclass
class GLCapsConfig:
    """Settings for a report pass and the remote database client."""

    catalog_path: Path = Path(DEFAULT_CATALOG)
    database_url: str = DEFAULT_DATABASE_URL
    timeout: float = DEFAULT_TIMEOUT
    submitter: str = ""

    @classmethod
    def from_env(cls, catalog_path: Optional[str] = None) -> "GLCapsConfig":
        """Build a config from ``GLCAPS_*`` environment variables.

        Args:
            catalog_path: Overrides GLCAPS_CATALOG when given.
        """
        timeout_str = os.getenv("GLCAPS_TIMEOUT")
        try:
            timeout = float(timeout_str) if timeout_str else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"GLCAPS_TIMEOUT must be a number, got {timeout_str!r}")

        return cls(
            catalog_path=Path(
                catalog_path or os.getenv("GLCAPS_CATALOG") or DEFAULT_CATALOG
            ),
            database_url=os.getenv("GLCAPS_DATABASE_URL") or DEFAULT_DATABASE_URL,
            timeout=timeout,
            submitter=os.getenv("GLCAPS_SUBMITTER", ""),
        )
