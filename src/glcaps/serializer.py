"""Report documents: export, upload and fetched-report parsing.

Layout of a serialized report::

    <report>
        <fileversion>3.0</fileversion>
        <appversion>...</appversion>
        <description>vendor renderer version (os)</description>
        <contexttype>default</contexttype>
        <date>2015-06-01 12:00:00</date>
        <submitter/>
        <os>Windows 10</os>
        <implementation>...</implementation>
        <extensions count="N"><extension>GL_...</extension>...</extensions>
        <caps><GL_MAX_TEXTURE_SIZE id="GL_MAX_TEXTURE_SIZE"><value>16384</value></GL_MAX_TEXTURE_SIZE>...</caps>
        <categories><category name="..." supported="true" visible="true"/>...</categories>
    </report>

Only standard extensions get ``extension`` children, platform extensions are
included in ``count`` alone. Readers of the database format expect that.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from . import __version__
from .errors import MalformedReport, ReportSerializationError
from .types import Report

logger = logging.getLogger(__name__)

FILE_VERSION = "3.0"
APP_VERSION = f"glcaps {__version__}"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REPORT_ROOTS = ("report", "implementationinfo")

# (element, label, Implementation attribute)
IMPLEMENTATION_FIELDS = [
    ("operatingsystem", "Operating system", "operating_system"),
    ("vendor", "Vendor", "vendor"),
    ("renderer", "Renderer", "renderer"),
    ("version", "OpenGL version", "version"),
    ("shadinglanguageversion", "Shading language version", "shading_language_version"),
]

# caps entries that mirror implementation metadata in older documents
_IMPLEMENTATION_CAPS = {
    "GL_VENDOR": "vendor",
    "GL_RENDERER": "renderer",
    "GL_VERSION": "version",
    "GL_SHADING_LANGUAGE_VERSION": "shadinglanguageversion",
}

_XML_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")


def _text_element(parent: ET.Element, tag: str, text: str) -> ET.Element:
    elem = ET.SubElement(parent, tag)
    elem.text = text
    return elem


def serialize_report(report: Report, now: Optional[datetime] = None) -> bytes:
    """Serialize ``report`` to the canonical report document."""
    now = now or datetime.now()
    impl = report.implementation

    root = ET.Element("report")
    _text_element(root, "fileversion", FILE_VERSION)
    _text_element(root, "appversion", APP_VERSION)
    _text_element(root, "description", report.description)
    _text_element(root, "contexttype", report.context_type)
    _text_element(root, "date", now.strftime(DATE_FORMAT))
    _text_element(root, "submitter", report.submitter or "")
    _text_element(root, "os", impl.operating_system)

    impl_elem = ET.SubElement(root, "implementation")
    for tag, _, attr in IMPLEMENTATION_FIELDS:
        _text_element(impl_elem, tag, getattr(impl, attr))

    ext_elem = ET.SubElement(root, "extensions", count=str(report.extension_count))
    for name in report.extensions:
        _text_element(ext_elem, "extension", name)

    caps_elem = ET.SubElement(root, "caps")
    for group in report.groups:
        for name, cap in group.capabilities.items():
            if not _XML_NAME_RE.match(name):
                raise ReportSerializationError(
                    f"Capability identifier {name!r} in group {group.name!r} "
                    "is not a valid element name"
                )
            cap_elem = ET.SubElement(caps_elem, name, id=name)
            _text_element(cap_elem, "value", cap.value)

    categories_elem = ET.SubElement(root, "categories")
    for group in report.groups:
        category_elem = ET.SubElement(
            categories_elem,
            "category",
            name=group.name,
            supported="true" if group.supported else "false",
            visible="true" if group.visible else "false",
        )
        if group.version_check_skipped:
            category_elem.set("versioncheckskipped", "true")

    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def write_report(report: Report, path: Union[str, Path]) -> Path:
    """Export ``report`` to ``path``."""
    path = Path(path)
    path.write_bytes(serialize_report(report))
    logger.info("Report written to %s", path)
    return path


@dataclass
class ReportView:
    """Fields extracted from a serialized report."""

    implementation: dict[str, str] = field(default_factory=dict)
    extensions: list[str] = field(default_factory=list)
    extension_count: int = 0
    capabilities: dict[str, str] = field(default_factory=dict)
    groups: dict[str, bool] = field(default_factory=dict)  # name -> supported
    version_check_skipped: list[str] = field(default_factory=list)
    description: str = ""
    context_type: str = ""
    submitter: str = ""
    date: str = ""
    file_version: str = ""

    def implementation_rows(self) -> list[tuple[str, str]]:
        """``(label, value)`` pairs in display order."""
        rows = []
        for tag, label, _ in IMPLEMENTATION_FIELDS:
            if tag in self.implementation:
                rows.append((label, self.implementation[tag]))
        for tag, value in self.implementation.items():
            if tag not in {t for t, _, _ in IMPLEMENTATION_FIELDS}:
                rows.append((tag, value))
        return rows


def _child_text(root: ET.Element, tag: str) -> str:
    elem = root.find(tag)
    if elem is None or elem.text is None:
        return ""
    return elem.text


def _read_implementation(root: ET.Element, capabilities: dict[str, str]) -> dict[str, str]:
    impl_elem = root.find("implementation")
    if impl_elem is not None:
        return {child.tag: child.text or "" for child in impl_elem}

    # Older documents only carry the metadata as caps entries
    implementation = {
        tag: capabilities[cap] for cap, tag in _IMPLEMENTATION_CAPS.items() if cap in capabilities
    }
    if not implementation:
        raise MalformedReport("Report has no 'implementation' element")
    os_name = root.find("os")
    if os_name is not None:
        implementation = {"operatingsystem": os_name.text or "", **implementation}
    return implementation


def deserialize_report(data: Union[bytes, str]) -> ReportView:
    """Extract the displayable parts of a report document."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise MalformedReport(f"Invalid XML: {e}")

    if root.tag not in REPORT_ROOTS:
        raise MalformedReport(f"Root element must be 'report', found {root.tag!r}")

    ext_elem = root.find("extensions")
    if ext_elem is None:
        raise MalformedReport("Report has no 'extensions' element")
    extensions = [child.text or "" for child in ext_elem if child.tag == "extension"]
    count_str = ext_elem.get("count")
    try:
        extension_count = int(count_str) if count_str is not None else len(extensions)
    except ValueError:
        raise MalformedReport(f"Invalid extension count {count_str!r}")

    capabilities = {}
    caps_elem = root.find("caps")
    if caps_elem is not None:
        for cap_elem in caps_elem:
            name = cap_elem.get("id", cap_elem.tag)
            value_elem = cap_elem.find("value")
            capabilities[name] = (
                value_elem.text or "" if value_elem is not None else ""
            )

    groups = {}
    version_check_skipped = []
    categories_elem = root.find("categories")
    if categories_elem is not None:
        for category_elem in categories_elem.findall("category"):
            name = category_elem.get("name", "")
            groups[name] = category_elem.get("supported", "true") == "true"
            if category_elem.get("versioncheckskipped") == "true":
                version_check_skipped.append(name)

    view = ReportView(
        implementation=_read_implementation(root, capabilities),
        extensions=extensions,
        extension_count=extension_count,
        capabilities=capabilities,
        groups=groups,
        version_check_skipped=version_check_skipped,
        description=_child_text(root, "description"),
        context_type=_child_text(root, "contexttype"),
        submitter=_child_text(root, "submitter"),
        date=_child_text(root, "date"),
        file_version=_child_text(root, "fileversion"),
    )
    logger.debug(
        "Read report %r: %d extensions, %d caps",
        view.description,
        view.extension_count,
        len(view.capabilities),
    )
    return view


def set_submitter(data: Union[bytes, str], submitter: str) -> bytes:
    """Return ``data`` with its ``submitter`` element replaced."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise MalformedReport(f"Invalid XML: {e}")
    if root.tag not in REPORT_ROOTS:
        raise MalformedReport(f"Root element must be 'report', found {root.tag!r}")

    elem = root.find("submitter")
    if elem is None:
        elem = ET.SubElement(root, "submitter")
    elem.text = submitter
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)
