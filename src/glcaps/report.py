"""Report assembly."""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .catalog import load_catalog
from .config import GLCapsConfig
from .query import ValueProvider, query_capability, run_catalog
from .requirements import ExtensionSetOracle, FeatureOracle
from .types import (
    IMPLEMENTATION_GROUP,
    CapabilityDefinition,
    CapabilityGroup,
    CapabilityKind,
    CapabilityValue,
    Catalog,
    Implementation,
    Report,
)

logger = logging.getLogger(__name__)

GL_VENDOR = 0x1F00
GL_RENDERER = 0x1F01
GL_VERSION = 0x1F02
GL_EXTENSIONS = 0x1F03
GL_SHADING_LANGUAGE_VERSION = 0x8B8C

CONTEXT_TYPES = ("default", "core", "es2", "regular")


def make_description(implementation: Implementation) -> str:
    """``"{vendor} {renderer} {version} ({os})"``, the dedup fingerprint."""
    return implementation.description


def implementation_group(implementation: Implementation) -> CapabilityGroup:
    """Hidden group carrying the raw metadata strings.

    Exported with the other capabilities so report files keep their layout.
    """
    entries = [
        ("GL_VENDOR", GL_VENDOR, implementation.vendor),
        ("GL_RENDERER", GL_RENDERER, implementation.renderer),
        ("GL_VERSION", GL_VERSION, implementation.version),
        (
            "GL_SHADING_LANGUAGE_VERSION",
            GL_SHADING_LANGUAGE_VERSION,
            implementation.shading_language_version,
        ),
    ]
    group = CapabilityGroup(name=IMPLEMENTATION_GROUP, supported=True, visible=False)
    for name, enum, value in entries:
        group.definitions.append(
            CapabilityDefinition(name=name, enum=enum, kind=CapabilityKind.STRING_VALUE)
        )
        group.record(name, CapabilityValue(value))
    return group


def _read_string(provider: ValueProvider, name: str, key: int) -> CapabilityValue:
    definition = CapabilityDefinition(name=name, enum=key, kind=CapabilityKind.STRING_VALUE)
    return query_capability(definition, provider)


def read_implementation(provider: ValueProvider, operating_system: str) -> Implementation:
    """Query the driver metadata strings, failed reads give empty strings."""

    def read(name: str, key: int) -> str:
        result = _read_string(provider, name, key)
        if not result.ok:
            logger.warning("Could not read %s", name)
        return result.value

    return Implementation(
        vendor=read("GL_VENDOR", GL_VENDOR),
        renderer=read("GL_RENDERER", GL_RENDERER),
        version=read("GL_VERSION", GL_VERSION),
        shading_language_version=read(
            "GL_SHADING_LANGUAGE_VERSION", GL_SHADING_LANGUAGE_VERSION
        ),
        operating_system=operating_system,
    )


def split_extensions(text: Optional[str]) -> list[str]:
    """Split a space separated extension string, keeping driver order."""
    if not text:
        return []
    return [name for name in text.split(" ") if name]


def read_extensions(provider: ValueProvider) -> list[str]:
    result = _read_string(provider, "GL_EXTENSIONS", GL_EXTENSIONS)
    if not result.ok:
        logger.warning("Could not read GL_EXTENSIONS")
        return []
    return split_extensions(result.value)


def assemble_report(
    implementation: Implementation,
    groups: Iterable[CapabilityGroup],
    extensions: Iterable[str] = (),
    os_extensions: Iterable[str] = (),
    context_type: str = "default",
    submitter: str = "",
) -> Report:
    """Combine metadata, extensions and populated groups into a report."""
    if context_type not in CONTEXT_TYPES:
        raise ValueError(f"Unknown context type: {context_type!r}")
    return Report(
        implementation=implementation,
        context_type=context_type,
        extensions=list(extensions),
        os_extensions=list(os_extensions),
        submitter=submitter,
        groups=[implementation_group(implementation), *groups],
    )


def generate_report(
    catalog: Union[Catalog, GLCapsConfig, str, Path],
    provider: ValueProvider,
    operating_system: str,
    os_extensions: Iterable[str] = (),
    context_type: str = "default",
    submitter: str = "",
    oracle: Optional[FeatureOracle] = None,
) -> Report:
    """Run a full capability pass and return the assembled report.

    ``catalog`` may be a parsed catalog, a config, or a path; paths are
    loaded fresh on every call.
    """
    if isinstance(catalog, GLCapsConfig):
        catalog = catalog.catalog_path
    if not isinstance(catalog, Catalog):
        catalog = load_catalog(catalog)

    implementation = read_implementation(provider, operating_system)
    extensions = read_extensions(provider)
    os_extensions = list(os_extensions)
    if oracle is None:
        oracle = ExtensionSetOracle(extensions, os_extensions, implementation.version)

    logger.info("Generating report for %s", implementation.description)
    groups = run_catalog(catalog, provider, oracle)
    report = assemble_report(
        implementation,
        groups,
        extensions=extensions,
        os_extensions=os_extensions,
        context_type=context_type,
        submitter=submitter,
    )
    logger.info(
        "Report has %d extensions and %d capability groups",
        report.extension_count,
        len(report.groups),
    )
    return report
