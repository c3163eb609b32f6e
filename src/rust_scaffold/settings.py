import os

from pydantic import BaseModel, Field, field_validator

from rust_scaffold.core.classifier import DEFAULT_FEATURE
from rust_scaffold.core.scaffold import DEFAULT_FORMATS, KNOWN_FORMATS
from rust_scaffold.models import GenerationMode, SerializationFormat

ENV_PREFIX = "RUST_SCAFFOLD_"

SOURCE_EXTENSIONS = frozenset({".rs"})
AGGREGATOR_FILENAMES = frozenset({"lib.rs", "mod.rs"})
SKIPPED_DIRECTORIES = frozenset({"target"})


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


class Settings(BaseModel):
    """Tunables for one run; CLI options override the ``RUST_SCAFFOLD_*`` environment."""

    workers: int = Field(default=4, ge=1)
    mode: GenerationMode = GenerationMode.DEFAULT
    export_path: str | None = None
    feature: str = DEFAULT_FEATURE
    formats: tuple[SerializationFormat, ...] = DEFAULT_FORMATS
    dry_run: bool = False

    @field_validator("export_path")
    @classmethod
    def _strip_export_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip(":")
        return value or None

    @classmethod
    def from_env(cls, **overrides: object) -> "Settings":
        """Settings from the environment, with non-``None`` ``overrides`` taking precedence."""
        values: dict[str, object] = {}
        if (workers := _env("WORKERS")) is not None:
            values["workers"] = workers
        if (mode := _env("MODE")) is not None:
            values["mode"] = mode
        if (export_path := _env("EXPORT_PATH")) is not None:
            values["export_path"] = export_path
        if (feature := _env("FEATURE")) is not None:
            values["feature"] = feature
        if (formats := _env("FORMATS")) is not None:
            values["formats"] = parse_formats(formats)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(values)


def parse_formats(names: str) -> tuple[SerializationFormat, ...]:
    """Turn a comma-separated list such as ``bincode,serde_json`` into formats."""
    selected: list[SerializationFormat] = []
    for raw in names.split(","):
        name = raw.strip().lower()
        if not name:
            continue
        if name not in KNOWN_FORMATS:
            raise ValueError(f"Unsupported serialization format '{raw.strip()}'. Supported: {sorted(KNOWN_FORMATS)}")
        if KNOWN_FORMATS[name] not in selected:
            selected.append(KNOWN_FORMATS[name])
    if not selected:
        raise ValueError("At least one serialization format is required.")
    return tuple(selected)
