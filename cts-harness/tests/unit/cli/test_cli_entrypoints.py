from __future__ import annotations

from pathlib import Path

import pytest

from cts_harness.cli import report_results, resolve_run
from cts_harness.result import SessionResult, TestOutcome, TestStatus


def _layout(tmp_path: Path) -> tuple[Path, Path]:
    cases = tmp_path / "testcases"
    plans = tmp_path / "plans"
    cases.mkdir()
    plans.mkdir()
    (plans / "CTS.xml").write_text(
        '<TestPlan><Entry uri="android.app"/><Entry uri="android.os"/></TestPlan>',
        encoding="utf-8",
    )
    (plans / "Java.xml").write_text('<TestPlan><Entry uri="java.io"/></TestPlan>', encoding="utf-8")
    return cases, plans


def test_resolve_plan_from_flags(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cases, plans = _layout(tmp_path)

    rc = resolve_run.main(
        [
            "--plan",
            "CTS",
            "--exclude-package",
            "android.os",
            "--test-cases-path",
            str(cases),
            "--test-plans-path",
            str(plans),
        ]
    )

    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["android.app"]


def test_resolve_from_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cases, _plans = _layout(tmp_path)
    config = tmp_path / "run.yaml"
    config.write_text(
        "packages: [android.app, android.text, android.os]\n"
        "exclude_packages: [android.text]\n"
        "test_cases_path: testcases\n",
        encoding="utf-8",
    )

    rc = resolve_run.main(["--config", str(config), "--exclude-package", "android.os"])

    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["android.app"]
    assert cases.is_dir()


def test_resolve_reports_ambiguous_selection(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cases, plans = _layout(tmp_path)

    rc = resolve_run.main(
        ["--plan", "CTS", "--package", "android.app", "--test-cases-path", str(cases)]
    )

    assert rc == 2
    assert "Only one of a --plan or --package" in capsys.readouterr().err


def test_list_plans(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _cases, plans = _layout(tmp_path)

    rc = resolve_run.main(["--list-plans", "--test-plans-path", str(plans)])

    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["CTS", "Java"]


def _write_session(path: Path) -> None:
    session = SessionResult(plan_name="CTS")
    pkg = session.get_or_create_package("android.app")
    pkg.insert_test("android.app.cts.ActivityTest", "testOk", TestOutcome(TestStatus.PASS))
    pkg.insert_test("android.app.cts.ActivityTest", "testBad", TestOutcome(TestStatus.FAIL))
    session.write(path)


def test_report_lists_failures(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "testResult.xml"
    _write_session(path)

    rc = report_results.main([str(path)])

    assert rc == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == (
        "plan=CTS packages=1 pass=1 failed=1 error=0 timeout=0 notExecuted=0"
    )
    assert lines[1:] == ["android.app\tandroid.app.cts.ActivityTest#testBad"]


def test_report_with_other_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "testResult.xml"
    _write_session(path)

    rc = report_results.main([str(path), "--status", "pass"])

    assert rc == 0
    assert capsys.readouterr().out.splitlines()[1:] == [
        "android.app\tandroid.app.cts.ActivityTest#testOk"
    ]


def test_report_rejects_malformed_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "testResult.xml"
    path.write_text("<TestPlan/>", encoding="utf-8")

    assert report_results.main([str(path)]) == 2
    assert "Expected TestResult tag" in capsys.readouterr().err


def test_report_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert report_results.main([str(tmp_path / "missing.xml")]) == 2
    assert "result file not found" in capsys.readouterr().err


def test_report_rejects_non_well_formed_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "testResult.xml"
    path.write_text('<TestResult testPlan="CTS"><TestPackage name="p"><<', encoding="utf-8")

    assert report_results.main([str(path)]) == 2
    assert "invalid XML" in capsys.readouterr().err


def test_report_summary_only(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "testResult.xml"
    _write_session(path)

    assert report_results.main([str(path), "--summary-only"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "plan=CTS packages=1 pass=1 failed=1 error=0 timeout=0 notExecuted=0"
    ]
