from __future__ import annotations

import subprocess
import sys
from pathlib import Path

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "tools" / "depcheck.py"


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, str(SCRIPT_PATH), *args],
        capture_output=True,
        text=True,
        check=False,
    )


def test_depcheck_fails_on_forbidden_import(tmp_path: Path) -> None:
    domain_dir = tmp_path / "domain"
    domain_dir.mkdir(parents=True, exist_ok=True)

    violating_file = domain_dir / "rates.py"
    violating_file.write_text("import redis\nfrom decimal import Decimal\n", encoding="utf-8")

    result = _run("--layer", "domain", "--path", str(domain_dir))

    combined_output = f"{result.stdout}\n{result.stderr}"
    assert result.returncode != 0
    assert "redis" in combined_output
    assert str(violating_file) in combined_output
    assert "decimal" not in combined_output


def test_application_layer_may_use_pydantic_but_not_transport(tmp_path: Path) -> None:
    application_dir = tmp_path / "application"
    application_dir.mkdir(parents=True, exist_ok=True)
    (application_dir / "dto.py").write_text("from pydantic import BaseModel\n", encoding="utf-8")
    (application_dir / "client.py").write_text("import requests.adapters\n", encoding="utf-8")

    result = _run("--layer", "application", "--path", str(application_dir))

    assert result.returncode != 0
    assert "requests.adapters" in result.stdout
    assert "pydantic" not in result.stdout


def test_depcheck_passes_on_source_tree() -> None:
    result = _run()

    assert result.returncode == 0, result.stdout
    assert "depcheck passed" in result.stdout
