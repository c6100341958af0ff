"""
Import-boundary enforcement for the three packages.

1. Engine purity   -- rewards_engines/** may import only the kernel domain
                      and logging, never db, models, services, selectors or
                      configuration.
2. Domain purity   -- rewards_kernel/domain/** never imports SQLAlchemy or
                      any persistence layer.
3. Config direction -- the kernel and the engines never import
                      rewards_config; configuration reaches them through
                      bridges.
4. No wall clock   -- engines do not read the clock or the environment.

All scanning is done via AST.
"""

import ast
import glob
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[str]:
    return sorted(glob.glob(f"{ROOT / package}/**/*.py", recursive=True))


def _extract_imports(filepath: str) -> list[tuple[int, str]]:
    tree = ast.parse(Path(filepath).read_text(encoding="utf-8"), filename=filepath)
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found = []
    for path in _python_files(package):
        for lineno, module in _extract_imports(path):
            if _matches_any(module, forbidden):
                found.append(f"{Path(path).relative_to(ROOT)}:{lineno} imports {module}")
    return found


class TestEnginePurity:

    FORBIDDEN = (
        "sqlalchemy",
        "rewards_config",
        "rewards_kernel.db",
        "rewards_kernel.models",
        "rewards_kernel.services",
        "rewards_kernel.selectors",
    )

    def test_engines_exist(self):
        assert _python_files("rewards_engines")

    def test_engines_do_not_import_io_layers(self):
        assert _violations("rewards_engines", self.FORBIDDEN) == []

    def test_engines_do_not_read_clock_or_environment(self):
        banned = {"datetime.now", "datetime.utcnow", "date.today", "os.environ", "os.getenv"}
        found = []
        for path in _python_files("rewards_engines"):
            tree = ast.parse(Path(path).read_text(encoding="utf-8"))
            for node in ast.walk(tree):
                if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
                    name = f"{node.value.id}.{node.attr}"
                    if name in banned:
                        found.append(f"{Path(path).name}:{node.lineno} {name}")
        assert found == []


class TestDomainPurity:

    def test_domain_has_no_persistence_imports(self):
        forbidden = (
            "sqlalchemy",
            "rewards_kernel.db",
            "rewards_kernel.models",
            "rewards_kernel.services",
            "rewards_kernel.selectors",
        )
        assert _violations("rewards_kernel/domain", forbidden) == []


class TestConfigDirection:

    def test_kernel_never_imports_config_or_engines(self):
        assert _violations("rewards_kernel", ("rewards_config", "rewards_engines")) == []
