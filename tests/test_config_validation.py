from pathlib import Path
import logging
import textwrap

import pytest

from docpages.config import BuildConfig, ConfigError, ExampleConfig, default_config, load_config
from docpages.config.models import render_config_toml


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "docpages.toml"
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_defaults_document_acid_with_web_example(tmp_path: Path) -> None:
    config = default_config(tmp_path)

    assert config.docs_path == tmp_path.resolve() / "docs"
    assert config.doc_output_path == tmp_path.resolve() / "target" / "doc"
    assert config.redirect_target == "./acid/index.html"
    example = config.find_example("acid-web")
    assert config.example_path(example) == tmp_path.resolve() / "examples" / "acid-web"
    assert config.example_out_path(example) == tmp_path.resolve() / "docs" / "acid" / "web-impl"
    assert example.static_files == ["index.html"]
    assert example.target == "web"


def test_project_root_resolves_against_config_directory(tmp_path: Path) -> None:
    nested = tmp_path / "tools"
    nested.mkdir()
    path = _write_config(
        nested,
        """
        project_root = ".."
        crate = "vm"
        """,
    )

    config = load_config(path)

    assert config.root_path == tmp_path.resolve()
    assert config.redirect_target == "./vm/index.html"


def test_example_blocks_are_collected(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        [[example]]
        name = "acid-web"
        path = "examples/acid-web"
        release = true

        [[example]]
        name = "acid-node"
        path = "examples/acid-node"
        target = "nodejs"
        out_dir = "acid/node-impl"
        """,
    )

    config = load_config(path)

    assert [example.name for example in config.examples] == ["acid-web", "acid-node"]
    node = config.find_example("ACID-NODE")
    assert config.example_out_path(node) == tmp_path.resolve() / "docs" / "acid" / "node-impl"


def test_rejects_plural_example_blocks(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        [[examples]]
        name = "acid-web"
        path = "examples/acid-web"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "[[example]]" in str(exc.value)


def test_rejects_unknown_keys(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        crate = "acid"
        unexpected = "nope"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "extra" in str(exc.value).lower()


@pytest.mark.parametrize("docs_dir", ["/tmp/docs", "../docs", "."])
def test_rejects_docs_dir_outside_project(tmp_path: Path, docs_dir: str) -> None:
    path = _write_config(tmp_path, f'docs_dir = "{docs_dir}"')

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "docs_dir" in str(exc.value)


def test_rejects_overlapping_output_and_docs(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        docs_dir = "target"
        doc_output = "target/doc"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "overlap" in str(exc.value)


def test_rejects_duplicate_example_names() -> None:
    with pytest.raises(ValueError):
        BuildConfig(
            examples=[
                ExampleConfig(name="web", path=Path("examples/a")),
                ExampleConfig(name="Web", path=Path("examples/b")),
            ]
        )


def test_rejects_invalid_pack_target(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
        [[example]]
        name = "acid-web"
        path = "examples/acid-web"
        target = "browser"
        """,
    )

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "target" in str(exc.value)


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    path = _write_config(tmp_path, 'crate = "acid')

    with pytest.raises(ConfigError) as exc:
        load_config(path)

    assert "Invalid TOML" in str(exc.value)


def test_missing_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.toml")


def test_unknown_example_lookup_lists_configured(tmp_path: Path) -> None:
    config = default_config(tmp_path)

    with pytest.raises(ConfigError) as exc:
        config.find_example("nope")

    assert "acid-web" in str(exc.value)


def test_warns_on_missing_example_directory(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write_config(
        tmp_path,
        """
        [[example]]
        name = "ghost"
        path = "examples/ghost"
        """,
    )

    caplog.set_level(logging.WARNING)
    load_config(path)

    assert "missing directory" in caplog.text


def test_hash_is_stable_and_sensitive(tmp_path: Path) -> None:
    first = default_config(tmp_path)
    second = default_config(tmp_path)
    changed = first.model_copy(update={"nojekyll": True})

    assert first.hash == second.hash
    assert first.hash != changed.hash


def test_rendered_config_loads_back(tmp_path: Path) -> None:
    original = default_config(tmp_path)
    path = tmp_path / "docpages.toml"
    path.write_text(render_config_toml(original), encoding="utf-8")

    loaded = load_config(path)

    assert loaded.redirect_target == original.redirect_target
    assert loaded.example_out_path(loaded.examples[0]) == original.example_out_path(original.examples[0])


def test_rendered_config_keeps_every_option(tmp_path: Path) -> None:
    original = BuildConfig(
        project_root=tmp_path,
        doc_args=["--document-private-items"],
        timeout_seconds=600,
        examples=[
            ExampleConfig(
                name="acid-web",
                path=Path("examples/acid-web"),
                release=False,
                pack_args=["--", "--features", "web"],
                keep_gitignore=True,
            )
        ],
    )
    path = tmp_path / "docpages.toml"
    path.write_text(render_config_toml(original), encoding="utf-8")

    loaded = load_config(path)

    assert loaded.doc_args == ["--document-private-items"]
    assert loaded.timeout_seconds == 600
    example = loaded.examples[0]
    assert example.release is False
    assert example.pack_args == ["--", "--features", "web"]
    assert example.keep_gitignore is True


def test_default_redirect_uses_rustdoc_directory_name() -> None:
    config = BuildConfig(crate="my-crate")

    assert config.redirect_target == "./my_crate/index.html"
    assert BuildConfig(crate="my-crate", redirect="./x.html").redirect_target == "./x.html"
