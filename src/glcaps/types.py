"""Data types for capability catalogs and reports."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Hidden group holding the driver metadata strings
IMPLEMENTATION_GROUP = "implementation"


class CapabilityKind(Enum):
    """How a capability value is queried and decoded."""

    INTEGER_VECTOR = "glint"
    STRING_VALUE = "glstring"

    @classmethod
    def from_token(cls, token: str) -> "CapabilityKind":
        """Map a catalog ``type`` attribute to a kind."""
        for kind in cls:
            if kind.value == token:
                return kind
        raise ValueError(f"Unknown capability type: {token!r}")


@dataclass(frozen=True)
class CapabilityDefinition:
    """Represents one queryable capability from the catalog."""

    name: str  # "GL_MAX_TEXTURE_SIZE"
    enum: int  # 0x0D33
    kind: CapabilityKind
    components: int = 1  # ignored for STRING_VALUE


@dataclass(frozen=True)
class Requirement:
    """Gating condition of a capability group."""

    extension: str = ""  # "GL_ARB_tessellation_shader"
    version: str = ""  # "4.0"

    @property
    def is_unconditional(self) -> bool:
        return not self.extension and not self.version


@dataclass
class CapabilityValue:
    """Decoded value of a capability; ``ok`` is False for typed fallbacks."""

    value: str
    ok: bool = True


@dataclass
class CapabilityGroup:
    """A named category of capabilities and its observed values."""

    name: str
    requirement: Requirement = field(default_factory=Requirement)
    definitions: list[CapabilityDefinition] = field(default_factory=list)
    supported: bool = True
    visible: bool = True
    version_check_skipped: bool = False
    capabilities: dict[str, CapabilityValue] = field(default_factory=dict)

    def record(self, name: str, value: CapabilityValue) -> None:
        """Store the value for ``name``, replacing any earlier value."""
        self.capabilities[name] = value

    def values(self) -> dict[str, str]:
        return {name: cap.value for name, cap in self.capabilities.items()}


@dataclass
class Catalog:
    """Ordered capability groups as declared in a catalog document."""

    groups: list[CapabilityGroup] = field(default_factory=list)
    source: Optional[str] = None

    def group_names(self) -> list[str]:
        return [group.name for group in self.groups]

    def __iter__(self):
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)


@dataclass
class Implementation:
    """Driver metadata reported for the current context."""

    vendor: str = ""  # "NVIDIA Corporation"
    renderer: str = ""  # "NVIDIA GeForce RTX 3080/PCIe/SSE2"
    version: str = ""  # "4.6.0 NVIDIA 535.54.03"
    shading_language_version: str = ""  # "4.60 NVIDIA"
    operating_system: str = ""  # "Windows 10"

    @property
    def description(self) -> str:
        """Fingerprint used to look up existing reports."""
        return f"{self.vendor} {self.renderer} {self.version} ({self.operating_system})"


@dataclass
class Report:
    """Result of one capability query pass."""

    implementation: Implementation
    context_type: str = "default"  # "default", "core", "es2" or "regular"
    extensions: list[str] = field(default_factory=list)
    os_extensions: list[str] = field(default_factory=list)  # WGL/GLX
    submitter: str = ""
    groups: list[CapabilityGroup] = field(default_factory=list)

    @property
    def description(self) -> str:
        return self.implementation.description

    @property
    def extension_count(self) -> int:
        return len(self.extensions) + len(self.os_extensions)

    def has_extension(self, name: str) -> bool:
        return name in self.extensions or name in self.os_extensions

    def visible_groups(self) -> list[CapabilityGroup]:
        return [group for group in self.groups if group.visible]

    def group(self, name: str) -> Optional[CapabilityGroup]:
        for group in self.groups:
            if group.name == name:
                return group
        return None
