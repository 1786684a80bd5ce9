"""Verify layer import boundaries and provide a simple dependency report."""

from __future__ import annotations

import ast
from collections import defaultdict
from pathlib import Path
from typing import Iterable

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
LIBRARY_PACKAGES = ("core", "db", "index", "tags", "utils")
QT_ALLOWED = {"core.pipeline.scheduler"}


def _iter_python_files(root: Path) -> Iterable[Path]:
    for path in sorted(root.rglob("*.py")):
        yield path


def _module_name_from_path(root: Path, path: Path, package_prefix: str) -> str:
    relative = path.relative_to(root)
    parts = list(relative.with_suffix("").parts)
    if not parts:
        return package_prefix
    if parts[-1] == "__init__":
        parts.pop()
    return ".".join([package_prefix, *parts])


def _collect_imports(path: Path) -> set[str]:
    source = path.read_text(encoding="utf-8")
    tree = ast.parse(source, filename=str(path))
    imports: set[str] = set()

    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.add(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                continue
            module = node.module or ""
            if module:
                imports.add(module)
    return imports


def _build_import_graph(root: Path, package_prefix: str) -> dict[str, set[str]]:
    graph: dict[str, set[str]] = {}
    for path in _iter_python_files(root):
        module_name = _module_name_from_path(root, path, package_prefix)
        graph[module_name] = _collect_imports(path)
    return graph


def test_library_layers_do_not_depend_on_app() -> None:
    offenders: dict[str, set[str]] = defaultdict(set)

    for package in LIBRARY_PACKAGES:
        modules = _build_import_graph(SRC_DIR / package, package)
        print(f"[import-graph] {package}")
        for module, deps in sorted(modules.items()):
            formatted = ", ".join(sorted(deps)) if deps else "(no imports)"
            print(f"  {module} -> {formatted}")

            app_deps = {dep for dep in deps if dep.split(".")[0] == "app"}
            if app_deps:
                offenders[package].add(f"{module}: {sorted(app_deps)}")
            qt_deps = {dep for dep in deps if dep.split(".")[0] == "PyQt6"}
            if qt_deps and module not in QT_ALLOWED:
                offenders[package].add(f"{module}: {sorted(qt_deps)}")

    assert not offenders, "library layers must not import app or Qt: " + "; ".join(
        f"{scope} -> {sorted(dep)}" for scope, dep in offenders.items()
    )
