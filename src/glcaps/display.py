"""Plain text rendering of reports."""

from .serializer import ReportView
from .types import Report

INDENT = "  "
NOT_SUPPORTED = "Not supported"
VERSION_NOT_CHECKED = "Version requirement not checked"


def _table(rows: list[tuple[str, str]], width: int = 40) -> list[str]:
    return [f"{label:<{width}} {value}".rstrip() for label, value in rows]


def format_report(report: Report) -> str:
    """Render implementation details, visible groups and extensions."""
    impl = report.implementation
    lines = [report.description, "", "Implementation details"]
    lines += _table(
        [
            (f"{INDENT}Operating system", impl.operating_system),
            (f"{INDENT}Vendor", impl.vendor),
            (f"{INDENT}Renderer", impl.renderer),
            (f"{INDENT}OpenGL version", impl.version),
            (f"{INDENT}Shading language version", impl.shading_language_version),
        ]
    )

    lines += ["", "Implementation capabilities"]
    for group in report.visible_groups():
        lines.append(f"{INDENT}{group.name}")
        if not group.supported:
            lines.append(f"{INDENT * 2}{NOT_SUPPORTED}")
            continue
        if group.version_check_skipped:
            lines.append(
                f"{INDENT * 2}{VERSION_NOT_CHECKED} ({group.requirement.version})"
            )
        lines += _table(
            [(f"{INDENT * 2}{name}", value) for name, value in group.values().items()]
        )

    lines += ["", f"OpenGL extensions ({len(report.extensions)})"]
    lines += [f"{INDENT}{name}" for name in report.extensions]
    lines += ["", f"OS specific extensions ({len(report.os_extensions)})"]
    lines += [f"{INDENT}{name}" for name in report.os_extensions]
    return "\n".join(lines) + "\n"


def format_report_view(view: ReportView) -> str:
    """Render a report read back from a document."""
    lines = [view.description or "(no description)", ""]
    lines += _table(view.implementation_rows())

    unsupported = [name for name, supported in view.groups.items() if not supported]
    if unsupported:
        lines += ["", "Unsupported groups"]
        lines += [f"{INDENT}{name}" for name in unsupported]

    if view.version_check_skipped:
        lines += ["", "Groups with unchecked version requirements"]
        lines += [f"{INDENT}{name}" for name in view.version_check_skipped]

    lines += ["", f"Capabilities ({len(view.capabilities)})"]
    lines += _table([(f"{INDENT}{name}", value) for name, value in view.capabilities.items()])

    lines += ["", f"Extensions ({view.extension_count})"]
    lines += [f"{INDENT}{name}" for name in view.extensions]
    return "\n".join(lines) + "\n"
