#  Tarslayer main CLI with listing, cat, extract and API modes
import json
import sys
from pathlib import Path

import requests
from rich.console import Console

from tarslayer.modules.cli import parse_args, DEFAULT_API_HOST, DEFAULT_API_PORT
from tarslayer.modules.keepers import (
    TarReader,
    NotFound,
    Tee,
    build_listing_table,
    display_listing,
    download_tar,
    read_local_tar,
)


def extract_and_save(reader: TarReader, name: str, output_dir: str) -> str:
    """
    Write one archived file below `output_dir`, keeping its archive path.

    Returns the path where the file was saved.
    """
    content = reader.get_file_bytes(name)

    base = Path(output_dir).resolve()
    output_path = (base / name.lstrip("/")).resolve()
    if base not in output_path.parents:
        raise ValueError(f"Refusing to write outside {base}: {name}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(content)

    return str(output_path)


def load_reader(args) -> TarReader:
    if args.url:
        data = download_tar(args.url, verbose=not args.quiet)
    else:
        data = read_local_tar(args.tar_path)

    reader = TarReader.from_bytes(data)
    if not args.quiet:
        print(f"[*] Indexed {len(reader)} entries from {reader.buffer_size:,} bytes", file=sys.stderr)
    return reader


def run(args) -> int:
    try:
        reader = load_reader(args)
    except requests.RequestException as e:
        print(f"[!] Error: failed to download archive: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[!] Error: failed to read archive: {e}", file=sys.stderr)
        return 1

    try:
        # --- list mode ---
        if args.list_entries:
            if args.as_json:
                print(json.dumps([info.to_dict() for info in reader.file_infos], indent=2))
            elif args.table:
                Console().print(build_listing_table(reader.file_infos))
            else:
                display_listing(reader.file_infos, reader.buffer_size, show_permissions=not args.simple_output)

        # --- cat mode: print one file as text ---
        if args.cat_file:
            sys.stdout.write(reader.get_text_file(args.cat_file))
            sys.stdout.flush()

        # --- extract mode: write one file to disk ---
        if args.extract_file:
            saved_path = extract_and_save(reader, args.extract_file, args.output_dir)
            if not args.quiet:
                print(f"[*] Saved {args.extract_file} to {saved_path}", file=sys.stderr)

    except NotFound as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1

    return 0


def main(argv=None):
    args = parse_args(argv)

    # --- API server mode ---
    if args.api:
        import uvicorn
        print(f"[*] Starting API server on http://{DEFAULT_API_HOST}:{DEFAULT_API_PORT}/docs")
        uvicorn.run("tarslayer.modules.api.api:app", host=DEFAULT_API_HOST, port=DEFAULT_API_PORT)
        return 0

    if not args.log_file:
        return run(args)

    # tee output to the log file for the duration of this run
    original_stdout, original_stderr = sys.stdout, sys.stderr
    with open(args.log_file, "w", encoding="utf-8") as log_f:
        sys.stdout = Tee(original_stdout, log_f)
        sys.stderr = Tee(original_stderr, log_f)
        try:
            return run(args)
        finally:
            sys.stdout, sys.stderr = original_stdout, original_stderr


if __name__ == "__main__":
    sys.exit(main())
