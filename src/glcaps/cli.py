"""Command line interface for glcaps."""

import argparse
import logging
import sys
from pathlib import Path

from .catalog import load_catalog
from .config import GLCapsConfig
from .dedup import find_existing_report
from .display import format_report_view
from .errors import GLCapsError
from .remote import HttpReportStore
from .serializer import deserialize_report, set_submitter

logger = logging.getLogger(__name__)


def cmd_catalog(args: argparse.Namespace, config: GLCapsConfig) -> int:
    catalog = load_catalog(config.catalog_path)
    print(f"{config.catalog_path}: {len(catalog)} capability groups")
    for group in catalog:
        requirement = group.requirement
        conditions = []
        if requirement.extension:
            conditions.append(f"extension {requirement.extension}")
        if requirement.version:
            conditions.append(f"version {requirement.version}")
        condition = ", ".join(conditions) or "always"
        print(f"  {group.name} ({len(group.definitions)} caps, {condition})")
        if args.caps:
            for definition in group.definitions:
                print(
                    f"    {definition.name} 0x{definition.enum:04X} "
                    f"{definition.kind.value} x{definition.components}"
                )
    return 0


def cmd_show(args: argparse.Namespace, config: GLCapsConfig) -> int:
    view = deserialize_report(args.report.read_bytes())
    print(format_report_view(view), end="")
    return 0


def cmd_check(args: argparse.Namespace, config: GLCapsConfig) -> int:
    if args.description:
        fingerprint = args.description
    else:
        fingerprint = deserialize_report(args.report.read_bytes()).description

    with HttpReportStore.from_config(config) as store:
        result = find_existing_report(fingerprint, store)
        if result.present:
            print(f"Device already present in database: {store.report_url(result.report_id)}")
        else:
            print("Device not yet present in database")
    return 0 if result.present else 2


def cmd_fetch(args: argparse.Namespace, config: GLCapsConfig) -> int:
    with HttpReportStore.from_config(config) as store:
        document = store.fetch(args.report_id)

    if args.output:
        args.output.write_bytes(document)
        print(f"Report {args.report_id} written to {args.output}")
    else:
        print(format_report_view(deserialize_report(document)), end="")
    return 0


def cmd_upload(args: argparse.Namespace, config: GLCapsConfig) -> int:
    document = args.report.read_bytes()
    view = deserialize_report(document)

    with HttpReportStore.from_config(config) as store:
        result = find_existing_report(view.description, store)
        if result.present:
            print("A report for this device and OpenGL version is already present:")
            print(f"  {store.report_url(result.report_id)}")
            return 0

        submitter = args.submitter if args.submitter is not None else config.submitter
        if submitter:
            document = set_submitter(document, submitter)

        outcome = store.upload(document)

    if outcome.uploaded:
        print("Your report has been uploaded to the database!")
        return 0
    print(f"Upload failed: {outcome.message}")
    return 1


def cmd_devices(args: argparse.Namespace, config: GLCapsConfig) -> int:
    with HttpReportStore.from_config(config) as store:
        for device in store.list_devices():
            print(device)
    return 0


def cmd_reports(args: argparse.Namespace, config: GLCapsConfig) -> int:
    with HttpReportStore.from_config(config) as store:
        for info in store.list_device_reports(args.device):
            print(f"{info.report_id}\t{info}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="OpenGL capability reports")
    parser.add_argument(
        "--catalog", type=Path, help="Capability catalog (default: $GLCAPS_CATALOG or capslist.xml)"
    )
    parser.add_argument("--database-url", help="Report database URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    catalog_parser = subparsers.add_parser("catalog", help="List catalog groups")
    catalog_parser.add_argument("--caps", action="store_true", help="List capabilities too")
    catalog_parser.set_defaults(func=cmd_catalog)

    show_parser = subparsers.add_parser("show", help="Display an exported report")
    show_parser.add_argument("report", type=Path)
    show_parser.set_defaults(func=cmd_show)

    check_parser = subparsers.add_parser("check", help="Check if a report is in the database")
    check_group = check_parser.add_mutually_exclusive_group(required=True)
    check_group.add_argument("--report", type=Path, help="Exported report file")
    check_group.add_argument("--description", help="Report description")
    check_parser.set_defaults(func=cmd_check)

    fetch_parser = subparsers.add_parser("fetch", help="Download a report")
    fetch_parser.add_argument("report_id", type=int)
    fetch_parser.add_argument("-o", "--output", type=Path, help="Save to file")
    fetch_parser.set_defaults(func=cmd_fetch)

    upload_parser = subparsers.add_parser("upload", help="Upload an exported report")
    upload_parser.add_argument("report", type=Path)
    upload_parser.add_argument("--submitter", help="Your name/nick")
    upload_parser.set_defaults(func=cmd_upload)

    devices_parser = subparsers.add_parser("devices", help="List devices in the database")
    devices_parser.set_defaults(func=cmd_devices)

    reports_parser = subparsers.add_parser("reports", help="List reports for a device")
    reports_parser.add_argument("device")
    reports_parser.set_defaults(func=cmd_reports)

    return parser


def main(argv=None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    config = GLCapsConfig.from_env(catalog_path=args.catalog)
    if args.database_url:
        config.database_url = args.database_url

    try:
        sys.exit(args.func(args, config))
    except (GLCapsError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
