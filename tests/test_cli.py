from collections.abc import Callable
from pathlib import Path
from typing import Any

import cbor2
import pytest

from npmdeps.cli import main

MakeTarball = Callable[[str, bytes], Any]
WriteLockfile = Callable[[dict[str, Any]], Path]


def test_missing_lockfile_argument_prints_usage(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1

    out = capsys.readouterr().out
    assert "usage:" in out
    assert "Prefetches npm dependencies" in out


def test_populates_explicit_output_directory(
    tmp_path: Path,
    make_tarball: MakeTarball,
    write_lockfile: WriteLockfile,
    capsys: pytest.CaptureFixture[str],
) -> None:
    tarball = make_tarball("a.tgz", b"cli package")
    lock_path = write_lockfile(
        {
            "lockfileVersion": 2,
            "packages": {"node_modules/a": {"resolved": tarball.url, "integrity": tarball.integrity}},
        }
    )
    out = tmp_path / "out"

    assert main([str(lock_path), str(out)]) == 0

    err = capsys.readouterr().err
    assert "lockfile version: 2" in err
    assert "node_modules/a" in err
    assert (out / "package-lock.json").read_bytes() == lock_path.read_bytes()
    assert (out / "_cacache" / "content-v2" / "sha512").is_dir()


def test_temporary_output_directory_is_hashed(
    write_lockfile: WriteLockfile,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    hashed: list[Path] = []

    def fake_hash(path: str | Path) -> str:
        hashed.append(Path(path))
        assert (Path(path) / "package-lock.json").exists()
        return "sha256-fakehash"

    monkeypatch.setattr("npmdeps.cli.hash_path", fake_hash)
    lock_path = write_lockfile({"lockfileVersion": 3, "packages": {}})

    assert main([str(lock_path)]) == 0

    assert capsys.readouterr().out.strip() == "sha256-fakehash"
    assert len(hashed) == 1
    assert not hashed[0].exists()


def test_unsupported_lockfile_version_exits_non_zero(
    tmp_path: Path,
    write_lockfile: WriteLockfile,
    capsys: pytest.CaptureFixture[str],
) -> None:
    lock_path = write_lockfile({"lockfileVersion": 99})

    assert main([str(lock_path), str(tmp_path / "out")]) == 1

    err = capsys.readouterr().err
    assert "error: Unsupported lockfile version 99" in err
    assert not (tmp_path / "out").exists()


def test_failing_package_is_named_in_diagnostic(
    tmp_path: Path,
    write_lockfile: WriteLockfile,
    capsys: pytest.CaptureFixture[str],
) -> None:
    missing = (tmp_path / "gone.tgz").as_uri()
    lock_path = write_lockfile(
        {"lockfileVersion": 3, "packages": {"node_modules/gone": {"resolved": missing}}}
    )

    assert main([str(lock_path), str(tmp_path / "out")]) == 1

    err = capsys.readouterr().err
    assert "error: Failed to download package tarball." in err
    assert "package: node_modules/gone" in err


def test_report_is_written_as_cbor(
    tmp_path: Path,
    make_tarball: MakeTarball,
    write_lockfile: WriteLockfile,
) -> None:
    tarball = make_tarball("a.tgz", b"reported")
    lock_path = write_lockfile(
        {"lockfileVersion": 3, "packages": {"node_modules/a": {"resolved": tarball.url}}}
    )
    report_path = tmp_path / "reports" / "run.cbor"

    assert main([str(lock_path), str(tmp_path / "out"), "--report", str(report_path)]) == 0

    decoded = cbor2.loads(report_path.read_bytes())
    assert decoded["lockfile_version"] == 3
    assert decoded["packages"][0]["package"] == "node_modules/a"
    assert decoded["packages"][0]["integrity"] == tarball.integrity


def test_invalid_jobs_value_is_reported(
    tmp_path: Path,
    write_lockfile: WriteLockfile,
    capsys: pytest.CaptureFixture[str],
) -> None:
    lock_path = write_lockfile({"lockfileVersion": 3, "packages": {}})

    assert main([str(lock_path), str(tmp_path / "out"), "--jobs", "0"]) == 1

    assert "max_workers" in capsys.readouterr().err
