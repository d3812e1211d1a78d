"""
Architecture enforcement tests.

Resolution, classification, advice and reporting are pure: only adapters
and the probe talk to the network, and only the CLI touches the process
environment.
"""
import ast
from pathlib import Path

import pytest

PACKAGE = Path(__file__).resolve().parent.parent / "vajra"

PURE_MODULES = ["resolver.py", "classifier.py", "advisor.py", "report.py", "migration.py"]
NETWORK_LIBS = {"httpx", "huggingface_hub"}


def _imported_roots(path: Path) -> set[str]:
    tree = ast.parse(path.read_text())
    roots = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            roots.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            roots.add(node.module.split(".")[0])
    return roots


class TestLayerBoundaries:
    @pytest.mark.parametrize("module", PURE_MODULES)
    def test_pure_modules_do_not_import_http_clients(self, module):
        roots = _imported_roots(PACKAGE / module)
        assert not roots & NETWORK_LIBS, f"{module} imports {roots & NETWORK_LIBS}"

    def test_adapters_do_not_read_environment(self):
        """Adapters get credentials from VajraConfig only."""
        for path in (PACKAGE / "adapters").glob("*.py"):
            source = path.read_text()
            assert "os.environ" not in source, f"{path.name} reads os.environ"
            assert "getenv" not in source, f"{path.name} calls getenv"

    def test_only_config_writes_env_files(self):
        for path in PACKAGE.rglob("*.py"):
            if path.name == "config.py":
                continue
            tree = ast.parse(path.read_text())
            for node in ast.walk(tree):
                if isinstance(node, ast.ImportFrom) and node.module == "dotenv":
                    names = {alias.name for alias in node.names}
                    assert "set_key" not in names, (
                        f"{path.name} writes .env directly (line {node.lineno})"
                    )
