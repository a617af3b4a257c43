"""Capability catalog parsing.

The catalog is an XML document of the form::

    <categories>
        <category name="Textures">
            <requirements extension="" version=""/>
            <cap name="GL_MAX_TEXTURE_SIZE" type="glint" components="0x1" enum="0x0D33"/>
        </category>
    </categories>

Both ``components`` and ``enum`` are hexadecimal, older catalog files depend
on that encoding for ``components`` even though it is a plain count.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Union

from .errors import MalformedCatalog
from .requirements import parse_version
from .types import (
    IMPLEMENTATION_GROUP,
    CapabilityDefinition,
    CapabilityGroup,
    CapabilityKind,
    Catalog,
    Requirement,
)

logger = logging.getLogger(__name__)

CAP_ATTRIBUTES = ("name", "type", "components", "enum")


def parse_hex(value_str: str, where: str) -> int:
    """Parse a hexadecimal catalog attribute (with or without ``0x``)."""
    text = value_str.strip()
    if text.lower().startswith("0x"):
        text = text[2:]
    try:
        value = int(text, 16)
    except ValueError:
        raise MalformedCatalog(f"Invalid hexadecimal value {value_str!r}", where)
    if value < 0:
        raise MalformedCatalog(f"Negative value {value_str!r}", where)
    return value


def _require(elem: ET.Element, attribute: str, where: str) -> str:
    value = elem.get(attribute)
    if value is None:
        raise MalformedCatalog(f"Missing attribute '{attribute}'", where)
    return value


def parse_requirement(category_elem: ET.Element, where: str) -> Requirement:
    """Parse the single ``requirements`` child of a category."""
    requirement_elems = category_elem.findall("requirements")
    if len(requirement_elems) != 1:
        raise MalformedCatalog(
            f"Expected one 'requirements' element, found {len(requirement_elems)}",
            where,
        )
    elem = requirement_elems[0]
    req_where = f"{where}/requirements"
    requirement = Requirement(
        extension=_require(elem, "extension", req_where).strip(),
        version=_require(elem, "version", req_where).strip(),
    )
    if requirement.version:
        try:
            parse_version(requirement.version)
        except ValueError as e:
            raise MalformedCatalog(str(e), req_where)
    return requirement


def parse_cap(cap_elem: ET.Element, where: str) -> CapabilityDefinition:
    """Parse a ``cap`` element into a definition."""
    name = cap_elem.get("name")
    cap_where = f"{where}/cap[@name='{name}']" if name else f"{where}/cap"
    attrs = {attr: _require(cap_elem, attr, cap_where) for attr in CAP_ATTRIBUTES}

    if not attrs["name"]:
        raise MalformedCatalog("Empty capability name", cap_where)

    try:
        kind = CapabilityKind.from_token(attrs["type"])
    except ValueError as e:
        raise MalformedCatalog(str(e), cap_where)

    components = parse_hex(attrs["components"], cap_where)
    if components < 1:
        raise MalformedCatalog("Capability must have at least one component", cap_where)

    return CapabilityDefinition(
        name=attrs["name"],
        enum=parse_hex(attrs["enum"], cap_where),
        kind=kind,
        components=components,
    )


def parse_category(category_elem: ET.Element, index: int) -> CapabilityGroup:
    """Parse one ``category`` element into an unpopulated group."""
    name = category_elem.get("name")
    if name is None:
        raise MalformedCatalog("Missing attribute 'name'", f"category[{index}]")
    where = f"category[@name='{name}']"
    if name == IMPLEMENTATION_GROUP:
        raise MalformedCatalog(f"Group name {name!r} is reserved", where)

    requirement = parse_requirement(category_elem, where)

    definitions: list[CapabilityDefinition] = []
    seen: set[str] = set()
    for cap_elem in category_elem.findall("cap"):
        definition = parse_cap(cap_elem, where)
        if definition.name in seen:
            raise MalformedCatalog(
                f"Duplicate capability {definition.name!r}", where
            )
        seen.add(definition.name)
        definitions.append(definition)

    return CapabilityGroup(name=name, requirement=requirement, definitions=definitions)


def parse_catalog(data: Union[bytes, str], source: Optional[str] = None) -> Catalog:
    """Parse a catalog document. No partial catalog is ever returned."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise MalformedCatalog(f"Invalid XML: {e}", source)

    if root.tag != "categories":
        raise MalformedCatalog(
            f"Root element must be 'categories', found {root.tag!r}", source
        )

    groups = [
        parse_category(category_elem, index)
        for index, category_elem in enumerate(root.findall("category"))
    ]
    logger.debug(
        "Parsed %d capability groups (%d caps) from %s",
        len(groups),
        sum(len(group.definitions) for group in groups),
        source or "<memory>",
    )
    return Catalog(groups=groups, source=source)


def load_catalog(path: Union[str, Path]) -> Catalog:
    """Read and parse the catalog at ``path``.

    The file is re-read on every call, capabilities can differ between
    passes (for example after switching context type).
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise MalformedCatalog(f"Cannot read catalog: {e}", str(path))
    return parse_catalog(data, source=str(path))


def serialize_catalog(catalog: Catalog) -> bytes:
    """Write a catalog back to its document format, keeping declaration order."""
    root = ET.Element("categories")
    for group in catalog.groups:
        category_elem = ET.SubElement(root, "category", name=group.name)
        ET.SubElement(
            category_elem,
            "requirements",
            extension=group.requirement.extension,
            version=group.requirement.version,
        )
        for definition in group.definitions:
            cap_elem = ET.SubElement(category_elem, "cap")
            cap_elem.set("name", definition.name)
            cap_elem.set("type", definition.kind.value)
            cap_elem.set("components", f"0x{definition.components:X}")
            cap_elem.set("enum", f"0x{definition.enum:04X}")
    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)
