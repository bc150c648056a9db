"""Argument parsing functionality for ModGate."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="modgate",
        description=(
            "ModGate - Mod discovery, version selection and load-order resolver"
        ),
        add_help=True,
    )

    parser.add_argument("-d", "--mods-dir",
                        dest="MODS_DIR",
                        help="Directory holding the mods, mod-list.json and mod-settings.dat",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-m", "--mod-list",
                        dest="MOD_LIST",
                        help="Path to an activation list (default: <mods-dir>/mod-list.json)",
                        action="store", type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=Constants.EXPORT_FORMATS)

    parser.add_argument("-j", "--workers",
                        dest="WORKERS",
                        help="Threads used to read manifests during discovery (default: 1)",
                        action="store",
                        type=int)
    parser.add_argument("--strict",
                        dest="STRICT",
                        help="Fail when a required dependency is missing or a version constraint is not met.",
                        action="store_true")
    parser.add_argument("--implicit-base",
                        dest="IMPLICIT_BASE",
                        help="Treat manifests without a dependency list as depending on the base package.",
                        action="store_true")
    parser.add_argument("--locale",
                        dest="LOCALE",
                        help="Also assemble locale data for this language (e.g. en)",
                        action="store",
                        type=str)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if packages were skipped.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    # Config file (general)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
