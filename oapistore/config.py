"""Code generator configuration: option types, YAML decoding and flag helpers."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any

_Decoder = Callable[[Any, bool, str], Any]


class ConfigError(ValueError):
    """Raised when a configuration or a command-line option is invalid."""


def _mapping(data: Any, where: str) -> Mapping[Any, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{where}: expected a mapping, got {type(data).__name__}")
    return data


def _as_bool(value: Any, strict: bool, where: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: cannot use {value!r} as a boolean")
    return value


def _as_str(value: Any, strict: bool, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ConfigError(f"{where}: cannot use {value!r} as a string")
    return str(value)


def _as_int(value: Any, strict: bool, where: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: cannot use {value!r} as an integer")
    return value


def _as_str_list(value: Any, strict: bool, where: str) -> list[str] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError(f"{where}: expected a list, got {type(value).__name__}")
    return [_as_str(item, strict, f"{where}[{i}]") for i, item in enumerate(value)]


def _as_str_map(value: Any, strict: bool, where: str) -> dict[str, str] | None:
    if value is None:
        return None
    data = _mapping(value, where)
    return {
        _as_str(k, strict, where): _as_str(v, strict, f"{where}.{k}")
        for k, v in data.items()
    }


def _list_or_empty(value: Any, strict: bool, where: str) -> list[str]:
    return _as_str_list(value, strict, where) or []


def _map_or_empty(value: Any, strict: bool, where: str) -> dict[str, str]:
    return _as_str_map(value, strict, where) or {}


def _yaml(key: str, decode: _Decoder, omitempty: bool = True) -> dict[str, Any]:
    return {"yaml": key, "decode": decode, "omitempty": omitempty}


def _nested(cls: type) -> _Decoder:
    return lambda value, strict, where: _decode(cls, value, strict, where)


def _decode(cls: type, data: Any, strict: bool, where: str) -> Any:
    data = _mapping(data, where)
    specs = {f.metadata["yaml"]: f for f in fields(cls) if "yaml" in f.metadata}
    if strict:
        for key in data:
            if key not in specs:
                raise ConfigError(f"{where}: field {key} not found in {cls.__name__}")
    kwargs = {
        specs[key].name: specs[key].metadata["decode"](value, strict, f"{where}.{key}")
        for key, value in data.items()
        if key in specs
    }
    return cls(**kwargs)


def _encode(obj: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(obj):
        key = f.metadata.get("yaml")
        if key is None:
            continue
        value = getattr(obj, f.name)
        if is_dataclass(value):
            value = _encode(value)
        elif isinstance(value, list):
            value = list(value)
        elif isinstance(value, dict):
            value = dict(value)
        if f.metadata.get("omitempty", True) and not value:
            continue
        out[key] = value
    return out


@dataclass
class GenerateOptions:
    """Which pieces of code to generate."""

    iris_server: bool = field(default=False, metadata=_yaml("iris-server", _as_bool))
    chi_server: bool = field(default=False, metadata=_yaml("chi-server", _as_bool))
    fiber_server: bool = field(default=False, metadata=_yaml("fiber-server", _as_bool))
    echo_server: bool = field(default=False, metadata=_yaml("echo-server", _as_bool))
    gin_server: bool = field(default=False, metadata=_yaml("gin-server", _as_bool))
    gorilla_server: bool = field(
        default=False, metadata=_yaml("gorilla-server", _as_bool)
    )
    strict: bool = field(default=False, metadata=_yaml("strict-server", _as_bool))
    client: bool = field(default=False, metadata=_yaml("client", _as_bool))
    models: bool = field(default=False, metadata=_yaml("models", _as_bool))
    embedded_spec: bool = field(
        default=False, metadata=_yaml("embedded-spec", _as_bool)
    )


@dataclass
class OutputOptions:
    """Options that shape the generated output."""

    skip_fmt: bool = field(default=False, metadata=_yaml("skip-fmt", _as_bool))
    skip_prune: bool = field(default=False, metadata=_yaml("skip-prune", _as_bool))
    include_tags: list[str] = field(
        default_factory=list, metadata=_yaml("include-tags", _list_or_empty)
    )
    exclude_tags: list[str] = field(
        default_factory=list, metadata=_yaml("exclude-tags", _list_or_empty)
    )
    user_templates: dict[str, str] = field(
        default_factory=dict, metadata=_yaml("user-templates", _map_or_empty)
    )
    exclude_schemas: list[str] = field(
        default_factory=list, metadata=_yaml("exclude-schemas", _list_or_empty)
    )
    response_type_suffix: str = field(
        default="", metadata=_yaml("response-type-suffix", _as_str)
    )
    initialism_overrides: bool = field(
        default=False, metadata=_yaml("initialism-overrides", _as_bool)
    )


@dataclass
class CompatibilityOptions:
    """Switches that keep older generator behaviour."""

    circular_reference_limit: int = field(
        default=0, metadata=_yaml("circular-reference-limit", _as_int)
    )


@dataclass
class Configuration:
    """The full generator configuration, including where to write the output."""

    package_name: str = field(
        default="", metadata=_yaml("package", _as_str, omitempty=False)
    )
    generate: GenerateOptions = field(
        default_factory=GenerateOptions,
        metadata=_yaml("generate", _nested(GenerateOptions)),
    )
    compatibility: CompatibilityOptions = field(
        default_factory=CompatibilityOptions,
        metadata=_yaml("compatibility", _nested(CompatibilityOptions)),
    )
    output_options: OutputOptions = field(
        default_factory=OutputOptions,
        metadata=_yaml("output-options", _nested(OutputOptions)),
    )
    import_mapping: dict[str, str] = field(
        default_factory=dict, metadata=_yaml("import-mapping", _map_or_empty)
    )
    output_file: str = field(default="", metadata=_yaml("output", _as_str))
    no_vcs_version_override: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML form of the configuration, leaving out empty values."""
        return _encode(self)

    @classmethod
    def from_dict(cls, data: Any, strict: bool = False) -> Configuration:
        """Build a configuration from parsed YAML.

        With ``strict`` an unknown key raises ConfigError; otherwise it is
        ignored. Values of the wrong type always raise ConfigError.
        """
        return _decode(cls, data, strict, "configuration")


@dataclass
class OldConfiguration:
    """The deprecated flat configuration format.

    List and mapping fields stay ``None`` when the file does not set them,
    so that command-line flags can fill them in later.
    """

    package_name: str = field(default="", metadata=_yaml("package", _as_str))
    generate_targets: list[str] | None = field(
        default=None, metadata=_yaml("generate", _as_str_list)
    )
    output_file: str = field(default="", metadata=_yaml("output", _as_str))
    include_tags: list[str] | None = field(
        default=None, metadata=_yaml("include-tags", _as_str_list)
    )
    exclude_tags: list[str] | None = field(
        default=None, metadata=_yaml("exclude-tags", _as_str_list)
    )
    templates_dir: str = field(default="", metadata=_yaml("templates", _as_str))
    import_mapping: dict[str, str] | None = field(
        default=None, metadata=_yaml("import-mapping", _as_str_map)
    )
    exclude_schemas: list[str] | None = field(
        default=None, metadata=_yaml("exclude-schemas", _as_str_list)
    )
    response_type_suffix: str = field(
        default="", metadata=_yaml("response-type-suffix", _as_str)
    )
    compatibility: CompatibilityOptions = field(
        default_factory=CompatibilityOptions,
        metadata=_yaml("compatibility", _nested(CompatibilityOptions)),
    )

    @classmethod
    def from_dict(cls, data: Any, strict: bool = False) -> OldConfiguration:
        """Build an old-style configuration from parsed YAML."""
        return _decode(cls, data, strict, "old configuration")


def parse_command_line_list(text: str) -> list[str]:
    """Split a comma-separated list, trimming spaces and dropping empty items."""
    return [item.strip() for item in text.split(",") if item.strip()]


def _split_outside_quotes(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        if char == sep and not in_quotes:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def parse_command_line_map(text: str) -> dict[str, str]:
    """Parse ``key:value,key:value`` into a dict.

    Separators inside double quotes are not split on, and surrounding
    quotes are removed from keys and values.
    """
    result: dict[str, str] = {}
    for item in _split_outside_quotes(text, ","):
        pair = _split_outside_quotes(item, ":")
        if len(pair) != 2:
            raise ConfigError(f"expected key:value, got :{item}")
        key, value = (part.strip('"') for part in pair)
        result[key] = value
    return result


_TARGETS: dict[str, str] = {
    "iris": "iris_server",
    "iris-server": "iris_server",
    "chi-server": "chi_server",
    "chi": "chi_server",
    "fiber-server": "fiber_server",
    "fiber": "fiber_server",
    "server": "echo_server",
    "echo-server": "echo_server",
    "echo": "echo_server",
    "gin": "gin_server",
    "gin-server": "gin_server",
    "gorilla": "gorilla_server",
    "gorilla-server": "gorilla_server",
    "strict-server": "strict",
    "client": "client",
    "types": "models",
    "models": "models",
    "spec": "embedded_spec",
    "embedded-spec": "embedded_spec",
}


def generation_targets(config: Configuration, targets: Iterable[str]) -> Configuration:
    """Replace the configuration's generate options with the named targets.

    ``skip-fmt`` and ``skip-prune`` set output options instead. An unknown
    target raises ConfigError and leaves the generate options unchanged.
    """
    opts = GenerateOptions()
    for target in targets:
        if target in _TARGETS:
            setattr(opts, _TARGETS[target], True)
        elif target == "skip-fmt":
            config.output_options.skip_fmt = True
        elif target == "skip-prune":
            config.output_options.skip_prune = True
        else:
            raise ConfigError(f"unknown generate option {target!r}")
    config.generate = opts
    return config


def load_template_overrides(templates_dir: str | os.PathLike[str] | None) -> dict[str, str]:
    """Read every file under a directory into a dict keyed by relative path.

    Paths in subdirectories are joined with ``/``. An empty directory name
    yields an empty dict; an unreadable directory raises OSError.
    """
    templates: dict[str, str] = {}
    if not templates_dir:
        return templates
    with os.scandir(templates_dir) as entries:
        items = sorted(entries, key=lambda entry: entry.name)
    for entry in items:
        if entry.is_dir():
            for sub_path, content in load_template_overrides(entry.path).items():
                templates[f"{entry.name}/{sub_path}"] = content
            continue
        with open(entry.path, encoding="utf-8") as handle:
            templates[entry.name] = handle.read()
    return templates