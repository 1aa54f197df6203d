# CLI argument parsing for Tarslayer

import argparse
import sys


DEFAULT_OUTPUT_DIR = "./carved"
DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="List and pull files out of tar archives without unpacking them."
    )
    source = p.add_mutually_exclusive_group()
    source.add_argument(
        "--tar", "-t",
        dest="tar_path",
        help="Path of the tar archive to read ('-' for stdin)",
    )
    source.add_argument(
        "--url", "-u",
        dest="url",
        help="http(s) URL of a tar archive to download",
    )
    p.add_argument(
        "--list", "-L",
        dest="list_entries",
        action="store_true",
        help="List the archive entries",
    )
    p.add_argument(
        "--simple-output",
        action="store_true",
        help="Use simple output format instead of ls -la style",
    )
    p.add_argument(
        "--table",
        action="store_true",
        help="Render the listing as a table",
    )
    p.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print the listing as JSON",
    )
    p.add_argument(
        "--cat", "-c",
        dest="cat_file",
        help="Print a file from the archive as text (e.g., etc/os-release)",
    )
    p.add_argument(
        "--extract", "-x",
        dest="extract_file",
        help="Extract a single file from the archive to --output-dir",
    )
    p.add_argument(
        "--output-dir", "-o",
        dest="output_dir",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for extracted files (default: {DEFAULT_OUTPUT_DIR})",
    )
    p.add_argument(
        "--log-file", "-l",
        dest="log_file",
        help="Path to save a complete log of output",
    )
    p.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress detailed progress output",
    )
    p.add_argument(
        "--api", "-A",
        action="store_true",
        help=f"Start the API server (uvicorn on {DEFAULT_API_HOST}:{DEFAULT_API_PORT})",
    )
    return p


def parse_args(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    # Show help if no mode selected
    if not any([args.list_entries, args.cat_file, args.extract_file, args.api]):
        p.print_help()
        sys.exit(0)
    if not args.api and not (args.tar_path or args.url):
        p.error("one of --tar or --url is required")
    return args
