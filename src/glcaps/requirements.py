"""Evaluation of capability group requirements."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from .types import Requirement

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")


class FeatureOracle(Protocol):
    """Answers extension (and optionally version) support questions.

    Oracles that can compare versions also provide
    ``is_version_at_least(version: str) -> bool``.
    """

    def is_extension_supported(self, name: str) -> bool:
        ...


@dataclass(frozen=True)
class RequirementResult:
    supported: bool
    version_check_skipped: bool = False


def parse_version(version_str: str) -> tuple[int, int]:
    """Extract ``(major, minor)`` from a version string.

    Handles driver strings like ``"4.6.0 NVIDIA 535.54"`` and
    ``"OpenGL ES 3.2 Mesa 23.1"``.
    """
    match = _VERSION_RE.search(version_str)
    if match is None:
        raise ValueError(f"No version number in {version_str!r}")
    return int(match.group(1)), int(match.group(2))


class ExtensionSetOracle:
    """Oracle backed by the extension lists and version string of a context."""

    def __init__(
        self,
        extensions: Iterable[str] = (),
        os_extensions: Iterable[str] = (),
        gl_version: Optional[str] = None,
    ) -> None:
        # Standard and platform extensions are one logical set
        self.extensions = set(extensions) | set(os_extensions)
        self.gl_version = None
        if gl_version:
            try:
                self.gl_version = parse_version(gl_version)
            except ValueError:
                logger.warning("Unparseable GL version string: %r", gl_version)

    def is_extension_supported(self, name: str) -> bool:
        return name in self.extensions

    def is_version_at_least(self, version: str) -> bool:
        if self.gl_version is None:
            return False
        return self.gl_version >= parse_version(version)


def evaluate_requirement(
    requirement: Requirement, oracle: FeatureOracle
) -> RequirementResult:
    """Decide whether a group with ``requirement`` should be queried."""
    if requirement.is_unconditional:
        return RequirementResult(supported=True)

    supported = True
    if requirement.extension:
        supported = oracle.is_extension_supported(requirement.extension)

    if requirement.version:
        check_version = getattr(oracle, "is_version_at_least", None)
        if check_version is None:
            logger.warning(
                "Oracle cannot compare versions, requirement %s not checked",
                requirement.version,
            )
            return RequirementResult(supported=supported, version_check_skipped=True)
        supported = supported and check_version(requirement.version)

    return RequirementResult(supported=supported)
