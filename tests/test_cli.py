import json
from pathlib import Path

from conftest import make_list, make_token
from tokenlist_checker.cli import EXIT_LOAD_ERROR, EXIT_OK, EXIT_VIOLATIONS, main
from tokenlist_checker.domain.models import ProbeResult
from tokenlist_checker.domain.results import SUCCESS_MESSAGE
from tokenlist_checker.infrastructure.probing.http_probe import HttpLogoProbe


def write_json(path: Path, payload) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_clean_first_submission(tmp_path: Path, capsys):
    candidate = write_json(tmp_path / "list.json", make_list())

    code = main([str(candidate), "--no-history", "--skip-logo-check"])

    assert code == EXIT_OK
    assert SUCCESS_MESSAGE in capsys.readouterr().out


def test_version_not_incremented(tmp_path: Path, capsys):
    candidate = write_json(tmp_path / "list.json", make_list(version=(1, 0, 0)))
    previous = write_json(tmp_path / "previous.json", make_list(version=(1, 0, 0)))

    code = main([str(candidate), "--previous", str(previous), "--skip-logo-check"])

    assert code == EXIT_VIOLATIONS
    err = capsys.readouterr().err
    assert "[VersionViolation]" in err
    assert "1 violation(s)" in err


def test_collect_all_with_csv_report(tmp_path: Path, capsys):
    document = make_list([make_token("FOO", chain_id=1)], name="Other")
    candidate = write_json(tmp_path / "list.json", document)

    code = main([str(candidate), "--no-history", "--skip-logo-check", "--all", "--format", "csv"])

    assert code == EXIT_VIOLATIONS
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "kind,message,chain_id,address,symbol,path"
    assert [line.split(",")[0] for line in lines[1:]] == ["ImmutableFieldViolation", "ChainIdViolation"]


def test_policy_override(tmp_path: Path):
    candidate = write_json(tmp_path / "list.json", make_list([make_token("FOO", chain_id=1)]))
    policy = write_json(tmp_path / "policy.json", {"chainIds": [1]})

    code = main([str(candidate), "--no-history", "--skip-logo-check", "--policy", str(policy)])

    assert code == EXIT_OK


def test_missing_candidate_is_load_error(tmp_path: Path, capsys):
    code = main([str(tmp_path / "absent.json"), "--no-history", "--skip-logo-check"])

    assert code == EXIT_LOAD_ERROR
    assert capsys.readouterr().err.startswith("Error: Could not load")


def test_missing_previous_file_is_load_error(tmp_path: Path):
    candidate = write_json(tmp_path / "list.json", make_list())

    code = main([str(candidate), "--previous", str(tmp_path / "absent.json"), "--skip-logo-check"])

    assert code == EXIT_LOAD_ERROR


def test_logo_sessions_closed_after_run(tmp_path: Path, monkeypatch):
    candidate = write_json(tmp_path / "list.json", make_list())
    closed = []
    monkeypatch.setattr(HttpLogoProbe, "check", lambda self, uri: ProbeResult(uri=uri, reachable=True, status_code=200))
    monkeypatch.setattr(HttpLogoProbe, "close", lambda self: closed.append(self))

    code = main([str(candidate), "--no-history"])

    assert code == EXIT_OK
    assert len(closed) == 1
