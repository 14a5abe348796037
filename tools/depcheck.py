from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "src" / "floorops"

_FRAMEWORKS = (
    "fastapi",
    "starlette",
    "sqlalchemy",
    "alembic",
    "redis",
    "httpx",
    "requests",
)

# Layer name -> import prefixes it must never reach.
LAYER_RULES: dict[str, tuple[str, ...]] = {
    "domain": _FRAMEWORKS
    + (
        "pydantic",
        "opentelemetry",
        "prometheus_client",
        "floorops.application",
        "floorops.infrastructure",
        "floorops.api",
        "floorops.tools",
    ),
    "application": _FRAMEWORKS
    + (
        "floorops.infrastructure",
        "floorops.api",
        "floorops.tools",
    ),
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


def _matches_forbidden(module: str, forbidden_modules: Sequence[str]) -> bool:
    for forbidden in forbidden_modules:
        if module == forbidden or module.startswith(f"{forbidden}."):
            return True
    return False


def _imported_modules(tree: ast.AST) -> Iterable[tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.lineno, node.module


def _scan_file(file_path: Path, layer: str) -> list[Violation]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    forbidden_modules = LAYER_RULES[layer]
    return [
        Violation(file_path=file_path, line=line, module=module, layer=layer)
        for line, module in _imported_modules(tree)
        if _matches_forbidden(module, forbidden_modules)
    ]


def find_violations(
    package_root: Path = PACKAGE_ROOT,
    layers: Sequence[str] | None = None,
) -> list[Violation]:
    violations: list[Violation] = []
    for layer in layers or sorted(LAYER_RULES):
        for file_path in _python_files(package_root / layer):
            violations.extend(_scan_file(file_path, layer))
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Layer dependency check for src/floorops (domain and application)."
    )
    parser.add_argument(
        "--root",
        default=str(PACKAGE_ROOT),
        help="Package root holding the layer directories. Defaults to src/floorops.",
    )
    parser.add_argument(
        "--layer",
        action="append",
        choices=sorted(LAYER_RULES),
        default=[],
        help="Layer to scan (repeatable). Defaults to every layer with rules.",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    violations = find_violations(Path(args.root), args.layer or None)
    if not violations:
        print("depcheck passed")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"[{violation.layer}] {violation.file_path}:{violation.line} -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
