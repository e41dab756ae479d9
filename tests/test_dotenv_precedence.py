import os

from docpages.config import settings


def test_project_dotenv_overrides_environment(tmp_path, monkeypatch) -> None:
    project_dir = tmp_path / "project"
    project_env = project_dir / ".env"

    project_dir.mkdir()
    project_env.write_text("WASM_PACK=/opt/wasm-pack/bin/wasm-pack\n", encoding="utf-8")

    monkeypatch.chdir(project_dir)
    monkeypatch.setenv("WASM_PACK", "env-value")

    settings._load_dotenv()

    assert os.getenv("WASM_PACK") == "/opt/wasm-pack/bin/wasm-pack"
    assert settings.get_settings().wasm_pack == "/opt/wasm-pack/bin/wasm-pack"


def test_settings_defaults_without_environment() -> None:
    loaded = settings.get_settings()

    assert loaded.cargo == "cargo"
    assert loaded.wasm_pack == "wasm-pack"
    assert loaded.config_path is None
