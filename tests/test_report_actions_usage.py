"""End-to-end: settings → traversal → CSV file, through the CLI entry point."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest
import respx
from httpx import Response

from actions_usage.config import ReportSettings
from actions_usage.errors import GitHubAPIError
from actions_usage.services.report_service import build_report, report_file_name, window_start
from scripts import report_actions_usage

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_window_start_and_file_name() -> None:
    since = window_start(5, NOW)

    assert since == datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)
    assert report_file_name("acme", since) == "gh-action-usage-acme-2026-10-14.csv"


def test_window_start_naive_now_is_utc() -> None:
    assert window_start(1, datetime(2026, 10, 19)).tzinfo == timezone.utc


def test_build_report_modes(acme_provider) -> None:
    agg, since = build_report(ReportSettings(org="acme"), provider=acme_provider, now=NOW)
    raw, _ = build_report(ReportSettings(org="acme", mode="raw"), provider=acme_provider, now=NOW)

    assert agg == "widget,7,ci,2,3000,1500\n"
    assert raw == "widget,7,ci,101,1000,2000,0\nwidget,7,ci,102,0,0,0\n"
    assert since == window_start(5, NOW)


def test_cli_writes_default_file(acme_provider, monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)

    code = report_actions_usage.main(["--org", "acme", "--num-days", "30"], provider=acme_provider, now=NOW)

    assert code == 0
    files = list(tmp_path.glob("gh-action-usage-acme-*.csv"))
    assert len(files) == 1
    assert files[0].read_text(encoding="utf-8") == "widget,7,ci,2,3000,1500\n"


def test_cli_raw_to_explicit_output(acme_provider, tmp_path) -> None:
    out = tmp_path / "usage.csv"

    code = report_actions_usage.main(
        ["--org", "acme", "--num-days", "30", "--mode", "raw", "--workers", "2", "--output", str(out)],
        provider=acme_provider,
        now=NOW,
    )

    assert code == 0
    assert out.read_text(encoding="utf-8").splitlines() == [
        "widget,7,ci,101,1000,2000,0",
        "widget,7,ci,102,0,0,0",
    ]


def test_cli_stdout(acme_provider, capsys) -> None:
    code = report_actions_usage.main(["--org", "acme", "--num-days", "30", "--output", "-"], provider=acme_provider, now=NOW)

    assert code == 0
    assert capsys.readouterr().out == "widget,7,ci,2,3000,1500\n"


def test_cli_public_flag_finds_no_private_repos(acme_provider, capsys) -> None:
    code = report_actions_usage.main(["--org", "acme", "--public", "--output", "-"], provider=acme_provider, now=NOW)

    assert code == 0
    assert capsys.readouterr().out == ""


def test_cli_fatal_error_writes_nothing(acme_provider, monkeypatch, tmp_path, caplog) -> None:
    monkeypatch.chdir(tmp_path)
    acme_provider.failures[("list_workflows", "widget")] = GitHubAPIError("server exploded", status_code=500)

    with caplog.at_level(logging.ERROR):
        code = report_actions_usage.main(["--org", "acme", "--num-days", "30"], provider=acme_provider, now=NOW)

    assert code == 1
    assert list(tmp_path.iterdir()) == []
    assert "server exploded" in caplog.text


def test_cli_missing_org_is_config_error(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert report_actions_usage.main([]) == 2


@respx.mock
def test_cli_against_mocked_github(monkeypatch, tmp_path) -> None:
    """Full run through GitHubSourceProvider with the acme fixture served over HTTP."""
    monkeypatch.chdir(tmp_path)
    api = "https://api.github.com"
    respx.get(f"{api}/orgs/acme/repos").mock(
        return_value=Response(200, json=[{"name": "widget", "private": True}, {"name": "docs", "private": True}])
    )
    respx.get(f"{api}/repos/acme/widget/actions/workflows").mock(
        return_value=Response(200, json={"total_count": 1, "workflows": [{"id": 7, "name": "ci"}]})
    )
    respx.get(f"{api}/repos/acme/docs/actions/workflows").mock(return_value=Response(404, json={}))
    respx.get(f"{api}/repos/acme/widget/actions/workflows/7/runs").mock(
        return_value=Response(
            200,
            json={
                "total_count": 2,
                "workflow_runs": [
                    {"id": 101, "created_at": "2099-01-01T00:00:00Z"},
                    {"id": 102, "created_at": "2099-01-02T00:00:00Z"},
                ],
            },
        )
    )
    respx.get(f"{api}/repos/acme/widget/actions/runs/101/timing").mock(
        return_value=Response(
            200,
            json={
                "billable": {"MACOS": {"total_ms": 1000, "jobs": 1}, "UBUNTU": {"total_ms": 2000, "jobs": 1}},
                "run_duration_ms": 3000,
            },
        )
    )
    respx.get(f"{api}/repos/acme/widget/actions/runs/102/timing").mock(return_value=Response(404, json={}))

    code = report_actions_usage.main(["--org", "acme", "--api-token", "tok", "--output", "out.csv"])

    assert code == 0
    assert (tmp_path / "out.csv").read_text(encoding="utf-8") == "widget,7,ci,2,3000,1500\n"


def test_cli_output_keeps_lf_line_endings(acme_provider, tmp_path) -> None:
    out = tmp_path / "usage.csv"

    code = report_actions_usage.main(
        ["--org", "acme", "--num-days", "30", "--mode", "raw", "--output", str(out)], provider=acme_provider, now=NOW
    )

    assert code == 0
    data = out.read_bytes()
    assert data == b"widget,7,ci,101,1000,2000,0\nwidget,7,ci,102,0,0,0\n"
    assert b"\r\n" not in data


@pytest.mark.parametrize(
    "runs_payload",
    [
        {"total_count": 1, "workflow_runs": [{"id": 101}]},
        {"total_count": 1150, "workflow_runs": [{"id": i, "created_at": "2099-01-01T00:00:00Z"} for i in range(100)]},
    ],
    ids=["run-missing-created-at", "runs-beyond-page-cap"],
)
def test_cli_bad_run_listing_exits_with_error(runs_payload, monkeypatch, tmp_path, caplog) -> None:
    monkeypatch.chdir(tmp_path)
    api = "https://api.github.com"
    with respx.mock:
        respx.get(f"{api}/orgs/acme/repos").mock(return_value=Response(200, json=[{"name": "widget", "private": True}]))
        respx.get(f"{api}/repos/acme/widget/actions/workflows").mock(
            return_value=Response(200, json={"total_count": 1, "workflows": [{"id": 7, "name": "ci"}]})
        )
        respx.get(f"{api}/repos/acme/widget/actions/workflows/7/runs").mock(
            return_value=Response(200, json=runs_payload)
        )

        with caplog.at_level(logging.ERROR):
            code = report_actions_usage.main(
                ["--org", "acme", "--api-token", "tok", "--max-pages", "2", "--output", "out.csv"], now=NOW
            )

    assert code == 1
    assert list(tmp_path.iterdir()) == []
    assert "failed to retrieve usage data" in caplog.text
