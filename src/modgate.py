"""ModGate - mod discovery, version selection and load-order resolver

    Raises:
        SystemExit: always, with an ExitCodes value

    Returns:
        int: Exit code
"""
import csv
import sys
import logging
import json

from constants import ExitCodes
from common.errors import (
    CyclicDependency,
    IncompatiblePackages,
    InvalidModList,
    MalformedManifest,
    MissingDependency,
    ModGateError,
)
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from cli_config import apply_resolver_overrides, load_config
from args import parse_args
from localisation import load_locale
from resolution.pipeline import resolve

_EXIT_CODES = [
    (IncompatiblePackages, ExitCodes.INCOMPATIBLE_PACKAGES),
    (CyclicDependency, ExitCodes.CYCLIC_DEPENDENCY),
    (MissingDependency, ExitCodes.MISSING_DEPENDENCY),
    (MalformedManifest, ExitCodes.MALFORMED_PACKAGE),
    (InvalidModList, ExitCodes.FILE_ERROR),
]


def exit_code_for(error):
    """Map a resolver error to its exit code."""
    for cls, code in _EXIT_CODES:
        if isinstance(error, cls):
            return code
    return ExitCodes.FILE_ERROR


def order_rows(order):
    """Flatten a load order into export rows."""
    rows = []
    for position, package in enumerate(order, start=1):
        rows.append({
            "position": position,
            "name": package.name,
            "version": str(package.version) if package.version else None,
            "storage": package.kind.value if package.kind else "bundled",
            "path": package.variant.path if package.variant else None,
            "dependencies": [str(r) for r in package.relations],
        })
    return rows


def export_csv(order, path):
    """Exports the load order to a CSV file.

    Args:
        order (ResolvedLoadOrder): Resolved load order.
        path (str): File path to export the CSV.
    """
    headers = ["Position", "Package Name", "Version", "Storage", "Path", "Dependencies"]
    rows = [headers]
    for row in order_rows(order):
        rows.append([
            row["position"],
            row["name"],
            row["version"] or "",
            row["storage"],
            row["path"] or "",
            "; ".join(row["dependencies"]),
        ])
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.writer(file)
            export.writerows(rows)
        logging.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        logging.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_json(order, path):
    """Exports the load order to a JSON file.

    Args:
        order (ResolvedLoadOrder): Resolved load order.
        path (str): File path to export the JSON.
    """
    data = {
        "loadOrder": order_rows(order),
        "settingsPath": order.settings_path,
        "warnings": list(order.warnings),
    }
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(data, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def _output_format(args):
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT.lower()
    if args.OUTPUT.lower().endswith(".csv"):
        return "csv"
    return "json"


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    configure_logging(level=args.LOG_LEVEL, log_file=args.LOG_FILE)
    if args.QUIET and not args.LOG_FILE:
        logging.getLogger().setLevel(logging.CRITICAL)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        load_config(args)
        apply_resolver_overrides(args)
    except (OSError, ValueError) as e:
        logging.error("Invalid configuration: %s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    try:
        order = resolve(args.MODS_DIR, mod_list_path=args.MOD_LIST)
    except ModGateError as e:
        logging.error("Resolution failed: %s", e)
        sys.exit(exit_code_for(e).value)
    except OSError as e:
        logging.error("Cannot read mods directory %s: %s", args.MODS_DIR, e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if not args.QUIET:
        for position, name in enumerate(order.names(), start=1):
            print(f"{position:>4}  {name}")

    if args.LOCALE:
        locale = load_locale(order, args.LOCALE)
        logging.info("Assembled %d locale entries for '%s'", len(locale), args.LOCALE)

    # OUTPUT
    if getattr(args, "OUTPUT", None):
        if _output_format(args) == "csv":
            export_csv(order, args.OUTPUT)
        else:
            export_json(order, args.OUTPUT)

    order.close()

    if order.warnings:
        logging.warning("%d warning(s) during resolution.", len(order.warnings))
        if args.ERROR_ON_WARNINGS:
            logging.error("Warnings present, exiting with non-zero status code.")
            sys.exit(ExitCodes.EXIT_WARNINGS.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome="success")
        )
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
