import io
import tarfile

import pytest


BLOCK = 512


def make_header(
    name,
    size=0,
    type_flag=b"0",
    uid=0,
    gid=0,
    mode=0o644,
    user="",
    group="",
    size_field=None,
    uid_field=None,
):
    """Build a single ustar header block. `*_field` overrides the raw field bytes."""
    block = bytearray(BLOCK)

    raw_name = name.encode("utf-8")[:100]
    block[0:len(raw_name)] = raw_name
    block[100:108] = f"{mode:07o}\0".encode()
    block[108:116] = uid_field if uid_field is not None else f"{uid:07o}\0".encode()
    block[116:124] = f"{gid:07o}\0".encode()
    block[124:136] = size_field if size_field is not None else f"{size:011o}\0".encode()
    block[156:157] = type_flag
    block[257:263] = b"ustar\0"
    block[263:265] = b"00"

    raw_user = user.encode("utf-8")[:32]
    block[265:265 + len(raw_user)] = raw_user
    raw_group = group.encode("utf-8")[:32]
    block[297:297 + len(raw_group)] = raw_group

    return bytes(block)


def pad(content):
    remainder = len(content) % BLOCK
    return content + (b"\0" * (BLOCK - remainder) if remainder else b"")


def make_tar(*files, trailer=True):
    """
    Build an archive from (name, content) or (name, content, header_kwargs) tuples.
    Ends with the usual two zero blocks unless `trailer` is False.
    """
    data = b""
    for item in files:
        name, content = item[0], item[1]
        kwargs = item[2] if len(item) > 2 else {}
        data += make_header(name, size=len(content), **kwargs)
        data += pad(content)
    if trailer:
        data += b"\0" * (2 * BLOCK)
    return data


def make_stdlib_tar(members):
    """Build an archive with the tarfile module from (TarInfo, content) pairs."""
    out = io.BytesIO()
    with tarfile.open(fileobj=out, mode="w", format=tarfile.USTAR_FORMAT) as tar:
        for info, content in members:
            if content is None:
                tar.addfile(info)
            else:
                info.size = len(content)
                tar.addfile(info, io.BytesIO(content))
    return out.getvalue()


@pytest.fixture
def hello_tar():
    return make_tar(("hello.txt", b"world"))


@pytest.fixture
def sample_tar():
    return make_tar(
        ("docs/", b"", {"type_flag": b"5", "mode": 0o755}),
        ("docs/readme.md", b"# Readme\n", {"uid": 1000, "gid": 1000, "user": "alice", "group": "staff"}),
        ("empty.txt", b""),
        ("data.bin", bytes(range(256)) * 3),
        ("notes.txt", "café ☕\n".encode("utf-8")),
    )
