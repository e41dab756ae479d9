from pathlib import Path
import subprocess
import textwrap
from typing import List

import pytest
from typer.testing import CliRunner

from docpages.config import settings
from docpages.util import process


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    for name in ("CARGO", "WASM_PACK", "DOCPAGES_LOG_LEVEL", "DOCPAGES_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    settings.get_settings.cache_clear()
    yield
    settings.get_settings.cache_clear()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    A minimal checkout: a crate root plus the acid-web example with its index.html.
    """
    root = tmp_path / "acid"
    example = root / "examples" / "acid-web"
    example.mkdir(parents=True)
    (root / "Cargo.toml").write_text('[package]\nname = "acid"\n', encoding="utf-8")
    (example / "index.html").write_text("<html><body>acid web</body></html>\n", encoding="utf-8")
    return root


@pytest.fixture
def sample_config(project: Path) -> Path:
    config_text = textwrap.dedent(
        """
        crate = "acid"
        nojekyll = true

        [[example]]
        name = "acid-web"
        path = "examples/acid-web"
        """
    ).strip()
    path = project / "docpages.toml"
    path.write_text(config_text + "\n", encoding="utf-8")
    return path


class FakeTools:
    """
    Stand-in for cargo and wasm-pack that produces the files the real tools would.
    """

    def __init__(self) -> None:
        self.calls: List[tuple[list, Path]] = []
        self.failing: set[str] = set()
        self.produce_docs = True

    def __call__(self, argv, cwd=None, check=False, timeout=None):
        argv = list(argv)
        cwd = Path(cwd)
        self.calls.append((argv, cwd))
        tool = Path(argv[0]).name
        if tool in self.failing:
            return subprocess.CompletedProcess(argv, 101)
        if tool == "cargo" and self.produce_docs:
            crate_docs = cwd / "target" / "doc" / "acid"
            crate_docs.mkdir(parents=True, exist_ok=True)
            (crate_docs / "index.html").write_text("<html>acid docs</html>", encoding="utf-8")
            (cwd / "target" / "doc" / "search-index.js").write_text("var x;", encoding="utf-8")
        if tool == "wasm-pack":
            out_dir = Path(argv[argv.index("--out-dir") + 1])
            out_dir.mkdir(parents=True, exist_ok=True)
            (out_dir / "acid_web.js").write_text("export default init;", encoding="utf-8")
            (out_dir / "acid_web_bg.wasm").write_bytes(b"\0asm")
            (out_dir / ".gitignore").write_text("*\n", encoding="utf-8")
        return subprocess.CompletedProcess(argv, 0)

    def tools_run(self) -> List[str]:
        return [Path(argv[0]).name for argv, _ in self.calls]


@pytest.fixture
def fake_tools(monkeypatch: pytest.MonkeyPatch) -> FakeTools:
    fake = FakeTools()
    monkeypatch.setattr(process, "resolve_executable", lambda name, step=None: name)
    monkeypatch.setattr(process.subprocess, "run", fake)
    return fake
