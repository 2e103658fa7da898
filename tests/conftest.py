"""Shared pytest fixtures for the nginx-digest test suite."""

import os

import pytest

from nginx_digest.parser import compile_format

ROOT = os.path.join(os.path.dirname(__file__), "..")

COMBINED_FORMAT = (
    '$remote_addr - $remote_user [$time_local] "$request" '
    '$status $body_bytes_sent "$http_referer" "$http_user_agent"'
)


def combined_line(request="GET / HTTP/1.1", status="500", time_local="25/Jun/2014:06:26:42 +0200",
                  remote_addr="10.0.0.1", user_agent="Mozilla/5.0") -> str:
    return (
        f'{remote_addr} - - [{time_local}] "{request}" {status} 12 "-" "{user_agent}"'
    )


@pytest.fixture()
def combined_pattern():
    return compile_format(COMBINED_FORMAT)


@pytest.fixture()
def sample_log() -> str:
    return os.path.abspath(os.path.join(ROOT, "logs", "sample_access.log"))


@pytest.fixture()
def write_log(tmp_path):
    """Return a helper that writes lines to a log file under tmp_path."""
    def _write(name, lines):
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return str(path)
    return _write
