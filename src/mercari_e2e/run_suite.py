#!/usr/bin/env python3

import argparse
import csv
import html
import json
import os
import zipfile
from datetime import datetime
from pathlib import Path

import pytest

from .config import BROWSERS, get_settings, reset_settings
from .reporter import FAILED, PASSED, SKIPPED, TIMED_OUT, CaseResult, RunReporter


def write_html_report(results_json: dict, html_path: Path):
    tests = results_json.get("tests", [])
    passed = sum(1 for r in tests if r.get("status") == PASSED)
    failed = sum(1 for r in tests if r.get("status") in (FAILED, TIMED_OUT))
    skipped = sum(1 for r in tests if r.get("status") == SKIPPED)
    total = len(tests)

    report = f"""
<html><head><meta charset="utf-8"><title>Mercari UI Test Report</title>
<style>
body {{ font-family: Arial, sans-serif; padding: 20px; }}
.summary {{ margin-bottom: 16px; }}
.pass {{ color: #0a7b44; }}
.fail {{ color: #b00020; }}
.skip {{ color: #8a6d00; }}
pre {{ background: #f6f8fa; padding: 12px; border-radius: 6px; overflow: auto; }}
</style>
</head><body>
  <h1>Mercari UI Test Report</h1>
  <div class="summary">
    <strong>Total:</strong> {total} &nbsp; <strong class="pass">Passed:</strong> {passed} &nbsp;
    <strong class="fail">Failed:</strong> {failed} &nbsp; <strong class="skip">Skipped:</strong> {skipped}
  </div>
  <hr />
  {''.join(render_test_result(tr, html_path.parent) for tr in tests)}
</body></html>
"""
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(report)


def render_test_result(test_result: dict, base_dir: Path | None = None) -> str:
    status = test_result.get("status", "unknown")
    status_class = {PASSED: "pass", SKIPPED: "skip"}.get(status, "fail")
    title = html.escape(test_result.get("title", "Unnamed Test"))
    nodeid = html.escape(test_result.get("nodeid", ""))
    error = test_result.get("error") or ""
    error_block = f"<pre>{html.escape(error)}</pre>" if error else ""
    screenshot = test_result.get("screenshot") or ""
    if screenshot and base_dir is not None:
        screenshot = Path(os.path.relpath(screenshot, base_dir)).as_posix()
    img_tag = (
        f"<div><img src=\"{html.escape(screenshot)}\" style=\"max-width: 100%; border: 1px solid #ddd;\" /></div>"
        if screenshot
        else ""
    )
    return f"""
  <section>
    <h3 class="{status_class}">{title}: {status.upper()}</h3>
    <div><code>{nodeid}</code> ({test_result.get('duration', 0)}s)</div>
    {error_block}
    {img_tag}
  </section>
  <hr />
"""


def archive_files(zip_path: Path, files: list[Path], root: Path | None = None):
    with zipfile.ZipFile(zip_path, "w") as zf:
        for f in files:
            if f.exists():
                arcname = f.relative_to(root) if root and f.is_relative_to(root) else f.name
                zf.write(f, arcname=arcname)


def log_to_csv(log_path: Path, timestamp: str, summary: dict, artifacts: dict):
    csv_exists = log_path.exists()
    with open(log_path, "a", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        if not csv_exists:
            writer.writerow(["Timestamp", "Total", "Passed", "Failed", "Skipped", "Results", "Report", "Archive"])
        writer.writerow([
            timestamp,
            summary.get("total", 0),
            summary.get(PASSED, 0),
            summary.get(FAILED, 0) + summary.get(TIMED_OUT, 0),
            summary.get(SKIPPED, 0),
            str(artifacts.get("results")),
            str(artifacts.get("report")),
            str(artifacts.get("archive")),
        ])


def build_pytest_args(args: argparse.Namespace) -> list[str]:
    pytest_args = list(args.paths or ["tests/specs"])
    pytest_args.append("--e2e-live")
    if args.headful:
        pytest_args.append("--e2e-headed")
    if args.browser:
        pytest_args += ["--e2e-browser", args.browser]
    if args.tag:
        pytest_args += ["-m", args.tag]
    if args.k:
        pytest_args += ["-k", args.k]
    pytest_args.append("-v" if args.verbose else "-q")
    return pytest_args


def results_payload(records: list[CaseResult], exit_code: int, base_url: str) -> dict:
    return {
        "base_url": base_url,
        "exit_code": int(exit_code),
        "tests": [r.to_dict() for r in records],
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Mercari UI specs and collect a report")
    parser.add_argument("paths", nargs="*", help="Spec files or directories (default: tests/specs)")
    parser.add_argument("--base-url", help="Base URL under test (overrides URL)")
    parser.add_argument("--headful", action="store_true", help="Run browser headful for debugging")
    parser.add_argument("--browser", choices=BROWSERS, help="Browser engine")
    parser.add_argument("--tag", choices=["smoke", "reg"], help="Only run specs with this marker")
    parser.add_argument("-k", help="pytest -k expression")
    parser.add_argument("--output-dir", default="data/runs", help="Where run directories are created")
    parser.add_argument("--verbose", action="store_true", help="Verbose pytest output")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if args.base_url:
        os.environ["URL"] = args.base_url
        reset_settings()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = Path(args.output_dir) / f"run_{timestamp}"
    run_dir.mkdir(parents=True, exist_ok=True)
    screenshots_dir = run_dir / "screenshots"
    os.environ["E2E_SCREENSHOT_DIR"] = str(screenshots_dir)
    reset_settings()

    reporter = RunReporter()
    print("🏃 Running specs with Playwright...")
    exit_code = pytest.main(build_pytest_args(args), plugins=[reporter])

    results_json = results_payload(reporter.records, exit_code, get_settings().base_url)
    results_path = run_dir / "results.json"
    with open(results_path, "w", encoding="utf-8") as f:
        json.dump(results_json, f, indent=2, ensure_ascii=False)
    print(f"📊 Results written: {results_path}")

    report_path = run_dir / "report.html"
    write_html_report(results_json, report_path)
    print(f"📝 HTML report: {report_path}")

    archive_path = run_dir / "archive.zip"
    screenshots = sorted(screenshots_dir.glob("*.png")) if screenshots_dir.exists() else []
    archive_files(archive_path, [results_path, report_path, *screenshots], root=run_dir)
    print(f"📦 Archive: {archive_path}")

    artifacts = {"results": results_path, "report": report_path, "archive": archive_path}
    summary = reporter.summary()
    log_to_csv(run_dir / "run_log.csv", timestamp, summary, artifacts)

    if summary["total"]:
        print(
            f"✅ Done. Total: {summary['total']}, Passed: {summary[PASSED]}, "
            f"Failed: {summary[FAILED] + summary[TIMED_OUT]}, Skipped: {summary[SKIPPED]}"
        )
    else:
        print("✅ Done. No tests executed.")
    return int(exit_code)


if __name__ == "__main__":
    raise SystemExit(main())
