import re
from pathlib import Path

import pytest

from raildev.https_proxy import get_existing_certs
from raildev.output import print_code_service_summary

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


@pytest.fixture
def plain(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")


def _https(use_443):
    return get_existing_certs("proj", Path("/tmp/certs"), use_443)


def test_summary_without_ports(plain, capsys):
    print_code_service_summary("web", "npm start", Path("/app"), 7, None, None, None)
    lines = capsys.readouterr().out.split("\n")
    assert lines[0] == "web"
    assert "npm start" in lines[1]
    assert str(Path("/app")) in lines[2]
    assert "7" in lines[3]
    assert lines[4:] == ["", ""]
    assert not any("Networking" in line for line in lines)


def test_summary_without_https(plain, capsys):
    print_code_service_summary("web", "npm start", Path("/app"), 2, 3000, 41000, None)
    out = capsys.readouterr().out
    assert "Networking" in out
    assert "http://localhost:3000" in out
    assert "https://" not in out


def test_summary_https_port_443_uses_slug(plain, capsys):
    print_code_service_summary("My API", "npm start", Path("/app"), 2, 3000, 41000, _https(True))
    out = capsys.readouterr().out
    assert "https://my-api.proj.railway.localhost" in out
    assert "41000" not in out


def test_summary_https_fallback_uses_proxy_port(plain, capsys):
    print_code_service_summary("My API", "npm start", Path("/app"), 2, 3000, 41000, _https(False))
    out = capsys.readouterr().out
    assert "https://proj.railway.localhost:41000" in out
    assert "Private" in out and "Public" in out


def test_summary_needs_both_ports(plain, capsys):
    print_code_service_summary("web", "run", Path("/app"), 1, 3000, None, _https(True))
    assert "Networking" not in capsys.readouterr().out


def test_colored_output_strips_to_plain(monkeypatch, capsys):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CLICOLOR", raising=False)
    print_code_service_summary("web", "run", Path("/app"), 1, 3000, 41000, None)
    colored = capsys.readouterr().out
    monkeypatch.setenv("NO_COLOR", "1")
    print_code_service_summary("web", "run", Path("/app"), 1, 3000, 41000, None)
    plain_out = capsys.readouterr().out
    assert "\x1b[" in colored
    assert _ANSI.sub("", colored) == plain_out