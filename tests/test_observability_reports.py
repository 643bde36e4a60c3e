import io
import json
from pathlib import Path

import cbor2

from npmdeps.observability import StructuredLogger
from npmdeps.report import FetchedPackage, FetchReport


def _report() -> FetchReport:
    return FetchReport(
        packages=(
            FetchedPackage(package="node_modules/b", url="https://x/b.tgz", integrity="sha512-b", size=2),
            FetchedPackage(package="node_modules/a", url="https://x/a.tgz", integrity="sha512-a", size=1),
        ),
        skipped=("node_modules/z", "node_modules/linked"),
        lockfile_version=3,
    )


def test_report_json_and_cbor_are_stable_across_completion_order() -> None:
    first = _report()
    second = FetchReport(
        packages=tuple(reversed(first.packages)),
        skipped=tuple(reversed(first.skipped)),
        lockfile_version=3,
    )

    assert first.to_json() == second.to_json()
    assert first.to_cbor() == second.to_cbor()
    payload = json.loads(first.to_json())
    assert [item["package"] for item in payload["packages"]] == ["node_modules/a", "node_modules/b"]
    assert payload["skipped"] == ["node_modules/linked", "node_modules/z"]


def test_report_write_picks_format_from_suffix(tmp_path: Path) -> None:
    report = _report()

    json_path = report.write(tmp_path / "out" / "report.json")
    cbor_path = report.write(tmp_path / "out" / "report.cbor")

    assert json.loads(json_path.read_text(encoding="utf-8"))["lockfile_version"] == 3
    assert cbor2.loads(cbor_path.read_bytes())["schema_version"] == 1
    assert report.fetched("node_modules/a") is not None
    assert report.fetched("node_modules/missing") is None


def test_structured_logger_echoes_and_exports_records(tmp_path: Path) -> None:
    stream = io.StringIO()
    logger = StructuredLogger(stream=stream)

    logger.log(operation="fetch", package="node_modules/a", message="node_modules/a")
    logger.log(operation="read_lockfile", message="lockfile version: 3")

    assert stream.getvalue().splitlines() == ["node_modules/a", "lockfile version: 3"]
    assert len(logger.records_for_package("node_modules/a")) == 1

    path = logger.to_json_lines(tmp_path / "logs" / "run.jsonl")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["operation"] for line in lines] == ["fetch", "read_lockfile"]
