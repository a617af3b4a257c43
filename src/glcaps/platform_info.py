"""Operating system identification."""

import platform
from typing import Optional


def read_operating_system(system: Optional[str] = None, release: Optional[str] = None) -> str:
    """Short name of the operating system, e.g. ``"Windows 10"`` or ``"Linux"``."""
    if system is None:
        system = platform.system()
        if release is None:
            release = platform.mac_ver()[0] if system == "Darwin" else platform.release()

    if system == "Windows":
        return f"Windows {release}" if release else "Windows (unknown)"
    if system == "Darwin":
        return f"macOS {release}" if release else "macOS"
    return system or "unknown"
