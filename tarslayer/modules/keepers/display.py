# display.py
# Console output for archive listings

from typing import Iterable

from rich.table import Table
from rich.text import Text

from tarslayer.modules.finders.tar_parser import FileEntry
from tarslayer.modules.formatters import human_readable_size, mode_to_string


# split output to file and stdout
class Tee:
    """Duplicate stdout/stderr to a file and the console."""
    def __init__(self, *files):
        self.files = files
    def write(self, data):
        for f in self.files:
            f.write(data)
    def flush(self):
        for f in self.files:
            f.flush()


#----- Tar format entry
def format_entry_line(entry: FileEntry, show_permissions: bool = True) -> str:
    """
    Format a FileEntry for display, similar to ls -la output.

    Args:
        entry: FileEntry from the archive index
        show_permissions: Whether to show full ls -la style output

    Returns:
        Formatted string for display
    """
    if show_permissions:
        # Full ls -la style: drwxr-xr-x  root/root     0  1.2 KB  filename
        perms = mode_to_string(entry.permission_bits, entry.type)
        owner = f"{entry.user or entry.uid}/{entry.group or entry.gid}"
        size_str = human_readable_size(entry.size).rjust(8)
        name_display = entry.name + ("/" if entry.is_dir and not entry.name.endswith("/") else "")
        return f"  {perms}  {owner:<17} {size_str}  {name_display}"
    else:
        # Simple format
        if entry.is_dir:
            return f"  [DIR]  {entry.name.rstrip('/')}/"
        elif entry.is_symlink:
            return f"  [LINK] {entry.name}"
        else:
            size_str = human_readable_size(entry.size)
            return f"  [FILE] {entry.name} ({size_str})"


def build_listing_table(entries: Iterable[FileEntry], title: str = "") -> Table:
    """Build a rich table with one row per archive entry."""
    table = Table(title=title or None, show_lines=False)
    table.add_column("Mode", no_wrap=True)
    table.add_column("Owner", no_wrap=True)
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Offset", justify="right", no_wrap=True)
    table.add_column("Name")

    for entry in entries:
        name = Text(entry.name)
        if entry.is_dir:
            name.stylize("bold blue")
        elif entry.is_symlink:
            name.stylize("cyan")

        table.add_row(
            mode_to_string(entry.permission_bits, entry.type),
            f"{entry.user or entry.uid}/{entry.group or entry.gid}",
            human_readable_size(entry.size),
            str(entry.header_offset),
            name,
        )

    return table


def display_listing(entries: Iterable[FileEntry], buffer_size: int, show_permissions: bool = True):
    """Print the entries of an archive, preceded by a short summary."""
    entries = list(entries)
    total = sum(entry.size for entry in entries)

    print(f"\n  [Stats] Archive size: {human_readable_size(buffer_size)}")
    print(f"  [Stats] Entries found: {len(entries)} ({human_readable_size(total)} of content)")

    print("\n  Archive contents:\n")

    for entry in entries:
        print(format_entry_line(entry, show_permissions=show_permissions))
