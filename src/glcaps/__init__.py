"""glcaps - OpenGL capability catalog engine and report tooling."""

__version__ = "1.0.0"

from .catalog import load_catalog, parse_catalog, serialize_catalog
from .config import GLCapsConfig
from .dedup import DedupResult, find_existing_report
from .errors import (
    CapabilityQueryFailed,
    GLCapsError,
    MalformedCatalog,
    MalformedReport,
    RemoteUnavailable,
    ReportSerializationError,
)
from .query import StaticValueProvider, ValueProvider, populate_group, run_catalog
from .remote import HttpReportStore, RemoteReportStore
from .report import assemble_report, generate_report
from .requirements import ExtensionSetOracle, FeatureOracle, evaluate_requirement
from .serializer import ReportView, deserialize_report, serialize_report
from .types import (
    CapabilityDefinition,
    CapabilityGroup,
    CapabilityKind,
    CapabilityValue,
    Catalog,
    Implementation,
    Report,
    Requirement,
)

__all__ = [
    "CapabilityDefinition",
    "CapabilityGroup",
    "CapabilityKind",
    "CapabilityQueryFailed",
    "CapabilityValue",
    "Catalog",
    "DedupResult",
    "ExtensionSetOracle",
    "FeatureOracle",
    "GLCapsConfig",
    "GLCapsError",
    "HttpReportStore",
    "Implementation",
    "MalformedCatalog",
    "MalformedReport",
    "RemoteReportStore",
    "RemoteUnavailable",
    "Report",
    "ReportSerializationError",
    "ReportView",
    "Requirement",
    "StaticValueProvider",
    "ValueProvider",
    "assemble_report",
    "deserialize_report",
    "evaluate_requirement",
    "find_existing_report",
    "generate_report",
    "load_catalog",
    "parse_catalog",
    "populate_group",
    "run_catalog",
    "serialize_catalog",
    "serialize_report",
]
