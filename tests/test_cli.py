import json
import sys
from unittest.mock import MagicMock, patch

import pytest
import requests

import tarslayer.main as main_mod
import tarslayer.modules.keepers.sources as sources_mod
from tarslayer.main import main
from tarslayer.modules.cli import parse_args

from conftest import make_tar


@pytest.fixture
def tar_path(tmp_path, sample_tar):
    path = tmp_path / "sample.tar"
    path.write_bytes(sample_tar)
    return path


class TestParseArgs:
    def test_no_mode_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args([])

        assert exc_info.value.code == 0
        assert "usage" in capsys.readouterr().out

    def test_source_required(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--list"])
        assert exc_info.value.code == 2

    def test_sources_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse_args(["--tar", "a.tar", "--url", "https://example.com/a.tar", "--list"])

    def test_defaults(self):
        args = parse_args(["--tar", "a.tar", "--cat", "hello.txt"])

        assert args.tar_path == "a.tar"
        assert args.cat_file == "hello.txt"
        assert args.output_dir == "./carved"
        assert not args.list_entries


class TestMain:
    def test_list(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--list", "--quiet"]) == 0

        out = capsys.readouterr().out
        assert "Entries found: 5" in out
        assert "drwxr-xr-x" in out
        assert "alice/staff" in out
        assert "docs/readme.md" in out

    def test_list_simple(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--list", "--simple-output", "-q"]) == 0
        assert "  [FILE] empty.txt (0.0 B)" in capsys.readouterr().out

    def test_list_json(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--list", "--json", "-q"]) == 0

        listing = json.loads(capsys.readouterr().out)
        assert [item["name"] for item in listing][:2] == ["docs/", "docs/readme.md"]

    def test_list_table(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--list", "--table", "-q"]) == 0
        assert "notes.txt" in capsys.readouterr().out

    def test_progress_goes_to_stderr(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--cat", "empty.txt"]) == 0
        assert "[*] Indexed 5 entries" in capsys.readouterr().err

    def test_cat(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--cat", "notes.txt", "-q"]) == 0
        assert capsys.readouterr().out == "café ☕\n"

    def test_cat_missing_file(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--cat", "nope.txt", "-q"]) == 1
        assert "[!] Error: File not found: nope.txt" in capsys.readouterr().err

    def test_extract(self, tar_path, tmp_path):
        out_dir = tmp_path / "out"

        assert main(["--tar", str(tar_path), "-x", "docs/readme.md", "-o", str(out_dir), "-q"]) == 0
        assert (out_dir / "docs" / "readme.md").read_bytes() == b"# Readme\n"

    def test_extract_refuses_to_escape_output_dir(self, tmp_path, capsys):
        path = tmp_path / "evil.tar"
        path.write_bytes(make_tar(("../evil.txt", b"boom")))
        out_dir = tmp_path / "out"

        assert main(["--tar", str(path), "-x", "../evil.txt", "-o", str(out_dir), "-q"]) == 1
        assert not (tmp_path / "evil.txt").exists()
        assert "Refusing to write outside" in capsys.readouterr().err

    def test_missing_archive(self, tmp_path, capsys):
        assert main(["--tar", str(tmp_path / "missing.tar"), "--list"]) == 1
        assert "failed to read archive" in capsys.readouterr().err

    def test_url(self, sample_tar, capsys):
        with patch.object(main_mod, "download_tar", return_value=sample_tar) as mock_download:
            assert main(["--url", "https://example.com/a.tar", "--cat", "docs/readme.md", "-q"]) == 0

        mock_download.assert_called_once_with("https://example.com/a.tar", verbose=False)
        assert capsys.readouterr().out == "# Readme\n"

    def test_url_download_failure(self, capsys):
        with patch.object(main_mod, "download_tar", side_effect=requests.ConnectionError("refused")):
            assert main(["--url", "https://example.com/a.tar", "--list"]) == 1

        assert "failed to download archive" in capsys.readouterr().err

    def test_url_cat_keeps_stdout_clean(self, sample_tar, capsys):
        resp = MagicMock()
        resp.content = sample_tar
        with patch.object(sources_mod.requests, "get", return_value=resp):
            assert main(["--url", "https://example.com/a.tar", "--cat", "docs/readme.md"]) == 0

        captured = capsys.readouterr()
        assert captured.out == "# Readme\n"
        assert "[*] Downloading https://example.com/a.tar" in captured.err

    def test_cat_missing_file_leaves_stdout_empty(self, tar_path, capsys):
        assert main(["--tar", str(tar_path), "--cat", "nope.txt", "-q"]) == 1
        assert capsys.readouterr().out == ""

    def test_log_file_is_closed_and_streams_restored(self, tar_path, tmp_path, capsys):
        log_path = tmp_path / "run.log"
        stdout_before, stderr_before = sys.stdout, sys.stderr

        assert main(["--tar", str(tar_path), "--list", "-q", "--log-file", str(log_path)]) == 0

        assert sys.stdout is stdout_before
        assert sys.stderr is stderr_before
        assert "Entries found: 5" in log_path.read_text(encoding="utf-8")
        assert "Entries found: 5" in capsys.readouterr().out

    def test_log_file_restores_streams_on_error(self, tar_path, tmp_path, capsys):
        log_path = tmp_path / "run.log"
        stdout_before = sys.stdout

        assert main(["--tar", str(tar_path), "--cat", "nope.txt", "-q", "-l", str(log_path)]) == 1

        assert sys.stdout is stdout_before
        assert "File not found: nope.txt" in log_path.read_text(encoding="utf-8")
