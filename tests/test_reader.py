"""Tests for nginx_digest/reader.py"""

import gzip
import logging
import os

import pytest

from conftest import combined_line
from nginx_digest.parser import compile_format
from nginx_digest.reader import FileScanError, expand_paths, read_text, scan, scan_file


class TestExpandPaths:
    def test_plain_paths_kept_in_order(self, tmp_path):
        paths = [str(tmp_path / "b.log"), str(tmp_path / "a.log")]
        assert expand_paths(paths) == paths

    def test_missing_plain_path_kept(self):
        assert expand_paths(["/nonexistent/access.log"]) == ["/nonexistent/access.log"]

    def test_glob_sorted(self, tmp_path):
        for name in ("access.log.2", "access.log.1", "error.log"):
            (tmp_path / name).write_text("x\n")
        result = expand_paths([os.path.join(tmp_path, "access.log.*")])
        assert result == [str(tmp_path / "access.log.1"), str(tmp_path / "access.log.2")]

    def test_deduplication(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_text("x\n")
        assert expand_paths([str(f), os.path.join(tmp_path, "*.log")]) == [str(f)]

    def test_empty_glob_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="nginx_digest.reader"):
            assert expand_paths([os.path.join(tmp_path, "*.zzz")]) == []
        assert "No log files match" in caplog.text


class TestReadText:
    def test_plain(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_text("one\ntwo\n")
        assert read_text(str(f)) == "one\ntwo\n"

    def test_gzip(self, tmp_path):
        f = tmp_path / "access.log.1.gz"
        with gzip.open(f, "wt", encoding="utf-8") as fh:
            fh.write("compressed line\n")
        assert read_text(str(f)) == "compressed line\n"

    def test_invalid_utf8_replaced(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_bytes(b"GET /caf\xe9\n")
        assert read_text(str(f)).startswith("GET /caf")

    def test_missing_raises(self):
        with pytest.raises(FileScanError) as info:
            read_text("/nonexistent/access.log")
        assert info.value.path == "/nonexistent/access.log"
        assert isinstance(info.value.cause, FileNotFoundError)

    def test_corrupt_gzip_raises(self, tmp_path):
        f = tmp_path / "broken.gz"
        f.write_bytes(b"not gzip data")
        with pytest.raises(FileScanError):
            read_text(str(f))


class TestScanFile:
    def test_keeps_only_error_statuses(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_text("500 /a\n200 /b\nabc /c\n404 /d\n- /e\n")
        entries = scan_file(compile_format("$status $request"), str(f))
        assert entries == [
            {"status": "500", "request": "/a"},
            {"status": "404", "request": "/d"},
        ]

    def test_range_boundaries(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_text("399 /a\n400 /b\n599 /c\n600 /d\n")
        entries = scan_file(compile_format("$status $request"), str(f))
        assert [e["status"] for e in entries] == ["400", "599"]

    def test_entries_without_status_dropped(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_text("500 /a\n")
        assert scan_file(compile_format("$code $request"), str(f)) == []

    def test_non_matching_lines_skipped(self, write_log, combined_pattern):
        path = write_log("access.log", [
            "garbage",
            combined_line(status="502"),
            "",
        ])
        entries = scan_file(combined_pattern, path)
        assert len(entries) == 1
        assert entries[0]["status"] == "502"

    def test_unicode_line_separators_stay_in_line(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_text('500 "GET /a\u2028b"\n404 "GET /c\x85d"\n', encoding="utf-8")
        entries = scan_file(compile_format('$status "$request"'), str(f))
        assert [e["request"] for e in entries] == ["GET /a\u2028b", "GET /c\x85d"]

    def test_crlf_line_endings(self, tmp_path):
        f = tmp_path / "access.log"
        f.write_bytes(b"500 /a\r\n502 /b\r\n")
        entries = scan_file(compile_format("$status $request"), str(f))
        assert [e["request"] for e in entries] == ["/a", "/b"]


class TestScan:
    def test_file_then_line_order(self, write_log, combined_pattern):
        first = write_log("b.log", [combined_line(request="GET /b1"), combined_line(request="GET /b2")])
        second = write_log("a.log", [combined_line(request="GET /a1")])
        entries = scan(combined_pattern, [first, second])
        assert [e["request"] for e in entries] == ["GET /b1", "GET /b2", "GET /a1"]

    def test_unreadable_file_isolated(self, write_log, combined_pattern, caplog):
        good = write_log("access.log", [combined_line(request="GET /ok", status="503")])
        with caplog.at_level(logging.ERROR, logger="nginx_digest.reader"):
            entries = scan(combined_pattern, ["/nonexistent/access.log", good])
        assert [e["request"] for e in entries] == ["GET /ok"]
        assert "/nonexistent/access.log" in caplog.text

    def test_no_deduplication(self, write_log, combined_pattern):
        line = combined_line()
        path = write_log("access.log", [line, line])
        assert len(scan(combined_pattern, [path])) == 2

    def test_corrupt_gzip_body_isolated(self, tmp_path, caplog):
        data = gzip.compress(b"500 /broken\n" * 500)
        body = bytes(b ^ 0xFF for b in data[10:60])
        broken = tmp_path / "access.log.1.gz"
        broken.write_bytes(data[:10] + body + data[60:])
        good = tmp_path / "access.log"
        good.write_text("500 /ok\n")
        with caplog.at_level(logging.ERROR, logger="nginx_digest.reader"):
            entries = scan(compile_format("$status $request"), [str(broken), str(good)])
        assert entries == [{"status": "500", "request": "/ok"}]
        assert "access.log.1.gz" in caplog.text

    def test_sample_log(self, sample_log, combined_pattern):
        entries = scan(combined_pattern, [sample_log])
        assert len(entries) == 10
        assert all(400 <= int(e["status"]) < 600 for e in entries)
