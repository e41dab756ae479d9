"""
Pydantic models for validating and hashing docpages build configuration files.
"""

from __future__ import annotations

import hashlib
import json
import logging
import tomllib
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "docpages.toml"
DEFAULT_CRATE = "acid"
DEFAULT_EXAMPLE_SUBDIR = "web-impl"

PackTarget = Literal["web", "bundler", "nodejs", "no-modules", "deno"]


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def _check_relative(value: Path, label: str) -> Path:
    """Reject absolute paths, empty paths, and paths climbing out with '..'."""
    path = Path(value)
    if path.is_absolute():
        raise ValueError(f"{label} must be relative to the project root, got {path}")
    if ".." in path.parts:
        raise ValueError(f"{label} must not contain '..': {path}")
    if str(path) in ("", "."):
        raise ValueError(f"{label} must name a subdirectory, not the project root itself")
    return path


class ExampleConfig(BaseModel):
    """
    A web-assembly example crate packaged into the docs tree.

    Attributes:
        name: Identifier used in step names and `--example` filters.
        path: Crate directory, relative to the project root.
        out_dir: Output directory relative to the docs directory
            (defaults to `<crate>/web-impl`).
        static_files: Files copied from the crate directory into `out_dir`
            before packaging.
        target: wasm-pack `--target` platform.
        release: True for `--release`, False for `--dev`, unset for the tool default.
        pack_args: Extra arguments appended to the wasm-pack command.
        keep_gitignore: Keep the `.gitignore` wasm-pack drops into the output.
    """
    name: str
    path: Path
    out_dir: Optional[Path] = None
    static_files: List[str] = Field(default_factory=lambda: ["index.html"])
    target: PackTarget = "web"
    release: Optional[bool] = None
    pack_args: List[str] = Field(default_factory=list)
    keep_gitignore: bool = False

    model_config = {
        "extra": "forbid",
    }

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("example name must not be empty")
        return value

    @field_validator("path")
    @classmethod
    def _path_relative(cls, value: Path) -> Path:
        return _check_relative(value, "example path")

    @field_validator("out_dir")
    @classmethod
    def _out_dir_relative(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return _check_relative(value, "example out_dir")

    @field_validator("static_files")
    @classmethod
    def _static_files_relative(cls, value: List[str]) -> List[str]:
        for item in value:
            _check_relative(Path(item), "static file")
        return value


class BuildConfig(BaseModel):
    """
    Top-level configuration for a documentation build.

    Attributes:
        project_root: Directory every other path is relative to.
        crate: Name of the documented crate; drives the default redirect and example output.
        docs_dir: Published site directory (replaced on every build).
        doc_output: Where the doc generator leaves its output.
        no_deps: Pass `--no-deps` to the doc generator.
        doc_args: Extra arguments for the doc generator.
        redirect: Relative URL the root `index.html` redirects to.
        nojekyll: Write a `.nojekyll` marker for GitHub Pages.
        timeout_seconds: Abort a tool that runs longer than this.
        examples: Web-assembly examples packaged into the docs tree.
    """
    project_root: Path = Path(".")
    crate: str = DEFAULT_CRATE
    docs_dir: Path = Path("docs")
    doc_output: Path = Path("target/doc")
    no_deps: bool = True
    doc_args: List[str] = Field(default_factory=list)
    redirect: Optional[str] = None
    nojekyll: bool = False
    timeout_seconds: Optional[int] = Field(default=None, gt=0)
    examples: List[ExampleConfig] = Field(default_factory=list)

    model_config = {
        "extra": "forbid",
    }

    @field_validator("docs_dir", "doc_output")
    @classmethod
    def _paths_relative(cls, value: Path, info) -> Path:
        return _check_relative(value, info.field_name)

    @field_validator("crate")
    @classmethod
    def _crate_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("crate must not be empty")
        return value

    @model_validator(mode="after")
    def _check_examples(self) -> "BuildConfig":
        seen: set[str] = set()
        for example in self.examples:
            key = example.name.lower()
            if key in seen:
                raise ValueError(f"duplicate example name '{example.name}'")
            seen.add(key)
        docs, output = Path(self.docs_dir), Path(self.doc_output)
        if docs == output or docs in output.parents or output in docs.parents:
            raise ValueError("docs_dir and doc_output must not overlap")
        return self

    @property
    def redirect_target(self) -> str:
        # rustdoc writes hyphenated crate names with underscores.
        return self.redirect or f"./{self.crate.replace('-', '_')}/index.html"

    @property
    def root_path(self) -> Path:
        return Path(self.project_root).expanduser().resolve()

    @property
    def docs_path(self) -> Path:
        return self.root_path / self.docs_dir

    @property
    def doc_output_path(self) -> Path:
        return self.root_path / self.doc_output

    def example_path(self, example: ExampleConfig) -> Path:
        return self.root_path / example.path

    def example_out_path(self, example: ExampleConfig) -> Path:
        relative = example.out_dir or Path(self.crate) / DEFAULT_EXAMPLE_SUBDIR
        return self.docs_path / relative

    def find_example(self, name: str) -> ExampleConfig:
        for example in self.examples:
            if example.name.lower() == name.lower():
                return example
        known = ", ".join(example.name for example in self.examples) or "none"
        raise ConfigError(f"Unknown example '{name}' (configured: {known})")

    @property
    def hash(self) -> str:
        """
        Deterministic hash of the normalized config, used to detect changes.
        """
        payload = self.model_dump(mode="json", round_trip=True)
        payload["project_root"] = str(self.root_path)
        blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
        return hashlib.sha256(blob).hexdigest()


def default_config(root: Path | str = ".") -> BuildConfig:
    """
    Default build: document the `acid` crate and package `examples/acid-web`
    into `docs/acid/web-impl`.
    """
    return BuildConfig(
        project_root=Path(root).expanduser().resolve(),
        examples=[ExampleConfig(name="acid-web", path=Path("examples/acid-web"))],
    )


def load_config(path: Path | str) -> BuildConfig:
    """
    Load and validate a TOML config file into a BuildConfig instance.

    A relative (or missing) `project_root` is resolved against the directory
    holding the config file.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as handle:
            raw_data: Dict[str, Any] = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in configuration file: {exc}") from exc

    raw_data = _normalize_toml_schema(raw_data)

    root = Path(raw_data.get("project_root", ".")).expanduser()
    if not root.is_absolute():
        root = config_path.parent / root
    raw_data["project_root"] = root.resolve()

    try:
        config = BuildConfig.model_validate(raw_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    _warn_on_missing_examples(config)
    return config


def _normalize_toml_schema(data: Any) -> Dict[str, Any]:
    """
    Accept singular `[[example]]` table arrays and map them to `examples`.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a TOML table/object.")
    if "examples" in data:
        raise ConfigError("Use [[example]] blocks (singular) instead of [[examples]].")

    normalized = dict(data)
    normalized["examples"] = _coerce_table_array(normalized.pop("example", None), "example")
    return normalized


def _coerce_table_array(value: Any, label: str) -> list[dict]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        if not all(isinstance(item, dict) for item in value):
            raise ConfigError(f"Each [[{label}]] entry must be a table/object.")
        return value
    raise ConfigError(f"Invalid [{label}] block; expected a table or array of tables.")


def _warn_on_missing_examples(config: BuildConfig) -> None:
    for example in config.examples:
        crate_dir = config.example_path(example)
        if not crate_dir.is_dir():
            logger.warning("Example '%s' references missing directory %s", example.name, crate_dir)


def render_config_toml(config: BuildConfig) -> str:
    """
    Serialize a config back to the TOML layout `load_config` accepts.

    `project_root` is left out so the file stays valid wherever it is moved.
    """
    lines = [
        f'crate = {json.dumps(config.crate)}',
        f'docs_dir = {json.dumps(PurePosixPath(config.docs_dir).as_posix())}',
        f'doc_output = {json.dumps(PurePosixPath(config.doc_output).as_posix())}',
        f"no_deps = {_toml_bool(config.no_deps)}",
        f"doc_args = {json.dumps(config.doc_args)}",
        f'redirect = {json.dumps(config.redirect_target)}',
        f"nojekyll = {_toml_bool(config.nojekyll)}",
    ]
    if config.timeout_seconds is not None:
        lines.append(f"timeout_seconds = {config.timeout_seconds}")
    for example in config.examples:
        out_dir = example.out_dir or Path(config.crate) / DEFAULT_EXAMPLE_SUBDIR
        lines.extend(
            [
                "",
                "[[example]]",
                f"name = {json.dumps(example.name)}",
                f"path = {json.dumps(PurePosixPath(example.path).as_posix())}",
                f"out_dir = {json.dumps(PurePosixPath(out_dir).as_posix())}",
                f"static_files = {json.dumps(example.static_files)}",
                f"target = {json.dumps(example.target)}",
                f"pack_args = {json.dumps(example.pack_args)}",
                f"keep_gitignore = {_toml_bool(example.keep_gitignore)}",
            ]
        )
        if example.release is not None:
            lines.append(f"release = {_toml_bool(example.release)}")
    return "\n".join(lines) + "\n"


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"
