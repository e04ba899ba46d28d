from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

SRC_ROOT = Path(__file__).resolve().parents[1] / "src" / "tpo"

# Pricing rules must stay importable without any framework, store or transport.
DOMAIN_FORBIDDEN = frozenset(
    {
        "fastapi",
        "starlette",
        "pydantic",
        "redis",
        "requests",
        "httpx",
        "opentelemetry",
        "prometheus_client",
        "tpo.api",
        "tpo.application",
        "tpo.infrastructure",
    }
)

# Use cases talk to collaborators and storage through ports only.
APPLICATION_FORBIDDEN = frozenset(
    {
        "fastapi",
        "starlette",
        "redis",
        "requests",
        "httpx",
        "tpo.api",
        "tpo.infrastructure",
    }
)

LAYER_POLICIES: dict[str, frozenset[str]] = {
    "domain": DOMAIN_FORBIDDEN,
    "application": APPLICATION_FORBIDDEN,
}


@dataclass(frozen=True)
class Violation:
    file_path: Path
    line: int
    module: str
    layer: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from sorted(root.rglob("*.py"))


def _matches(module: str, forbidden: frozenset[str]) -> bool:
    return any(module == item or module.startswith(f"{item}.") for item in forbidden)


def _imported_modules(tree: ast.AST) -> Iterable[tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.lineno, node.module


def _scan_file(file_path: Path, layer: str) -> list[Violation]:
    forbidden = LAYER_POLICIES[layer]
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    return [
        Violation(file_path=file_path, line=line, module=module, layer=layer)
        for line, module in _imported_modules(tree)
        if _matches(module, forbidden)
    ]


def find_violations(paths: Sequence[Path], layer: str = "domain") -> list[Violation]:
    violations: list[Violation] = []
    for path in paths:
        for file_path in _python_files(path):
            violations.extend(_scan_file(file_path, layer))
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Layer import policy check for src/tpo.")
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Path to scan (repeatable). Defaults to the package directory of each --layer.",
    )
    parser.add_argument(
        "--layer",
        action="append",
        choices=sorted(LAYER_POLICIES),
        default=[],
        help="Policy to apply (repeatable). Defaults to every layer.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    layers = args.layer or sorted(LAYER_POLICIES)

    violations: list[Violation] = []
    for layer in layers:
        scan_paths = [Path(item) for item in args.path] if args.path else [SRC_ROOT / layer]
        violations.extend(find_violations(scan_paths, layer))

    if not violations:
        print("depcheck passed")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"[{violation.layer}] {violation.file_path}:{violation.line} -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
