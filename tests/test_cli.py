from __future__ import annotations

import pytest
from unity_http_server import cli


@pytest.fixture
def served(monkeypatch):
    calls = []

    def fake_run(app, **kwargs):
        calls.append((app, kwargs))

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return calls


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--help"])
    assert excinfo.value.code == 0
    assert "Unity Web builds" in capsys.readouterr().out


def test_missing_build_directory(tmp_path, served, capsys):
    code = cli.main([str(tmp_path / "nope")])

    assert code == 1
    assert "does not exist" in capsys.readouterr().err
    assert served == []


def test_malformed_locator(served, capsys):
    code = cli.main(["gs:///no-bucket"])

    assert code == 1
    assert "Invalid storage locator" in capsys.readouterr().err
    assert served == []


def test_starts_server_with_arguments(tmp_path, served):
    code = cli.main([str(tmp_path), "-p", "3000", "-a", "0.0.0.0"])

    assert code == 0
    assert len(served) == 1
    _, kwargs = served[0]
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 3000


def test_defaults(monkeypatch, tmp_path, served):
    monkeypatch.chdir(tmp_path)

    assert cli.main([]) == 0
    _, kwargs = served[0]
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 8080


def test_remote_locator_starts(served):
    assert cli.main(["gs://unity-builds/web", "--port", "9000"]) == 0
    _, kwargs = served[0]
    assert kwargs["port"] == 9000
