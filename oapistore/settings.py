"""Command-line front end for the code generator configuration.

Reads flags and an optional YAML configuration file, works out whether
the file uses the deprecated flat format or the current one, and merges
the two into a single resolved Configuration.
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import re
import subprocess
import sys
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import yaml

from oapistore.config import (
    ConfigError,
    Configuration,
    GenerateOptions,
    OldConfiguration,
    generation_targets,
    load_template_overrides,
    parse_command_line_list,
    parse_command_line_map,
)

DEFAULT_GENERATE = "types,client,server,spec"

# Set at packaging time when no version control information is available.
NO_VCS_VERSION_OVERRIDE = ""

_DEPRECATED_FLAGS = frozenset(
    {
        "include_tags",
        "exclude_tags",
        "import_mapping",
        "exclude_schemas",
        "response_type_suffix",
        "alias_types",
    }
)


@dataclass
class Flags:
    """Parsed command-line flags.

    ``visited`` holds the names of the flags that were given explicitly.
    """

    output_file: str = ""
    config_file: str = ""
    old_config_style: bool = False
    output_config: bool = False
    print_version: bool = False
    package_name: str = ""
    print_usage: bool = False
    generate: str = DEFAULT_GENERATE
    templates_dir: str = ""
    include_tags: str = ""
    exclude_tags: str = ""
    import_mapping: str = ""
    exclude_schemas: str = ""
    response_type_suffix: str = ""
    alias_types: bool = False
    initialism_overrides: bool = False
    spec_paths: list[str] = field(default_factory=list)
    visited: frozenset[str] = frozenset()

    @property
    def spec_path(self) -> str:
        """The first positional argument, or an empty string."""
        return self.spec_paths[0] if self.spec_paths else ""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oapistore-codegen", add_help=False, allow_abbrev=False
    )
    suppress = argparse.SUPPRESS

    def string(name: str, dest: str, text: str) -> None:
        names = [f"-{name}"] if len(name) == 1 else [f"-{name}", f"--{name}"]
        parser.add_argument(*names, dest=dest, default=suppress, help=text)

    def boolean(names: list[str], dest: str, text: str) -> None:
        parser.add_argument(
            *names, dest=dest, action="store_true", default=suppress, help=text
        )

    string("o", "output_file", "Where to output generated code, stdout is default.")
    boolean(
        ["-old-config-style", "--old-config-style"],
        "old_config_style",
        "Whether to use the older style config file format.",
    )
    boolean(
        ["-output-config", "--output-config"],
        "output_config",
        "When true, outputs a configuration file using current settings.",
    )
    string("config", "config_file", "A YAML config file that controls generator behavior.")
    boolean(["-version", "--version"], "print_version", "When specified, print version and exit.")
    string("package", "package_name", "The package name for generated code.")
    boolean(["-help", "--help", "-h"], "print_usage", "Show this help and exit.")
    string(
        "generate",
        "generate",
        'Comma-separated list of code to generate; valid options: "types", "client", '
        '"chi-server", "server", "gin", "gorilla", "spec", "skip-fmt", "skip-prune", '
        '"fiber", "iris".',
    )
    string("include-tags", "include_tags", "Only include operations with the given tags.")
    string("exclude-tags", "exclude_tags", "Exclude operations tagged with the given tags.")
    string("templates", "templates_dir", "Path to directory containing user templates.")
    string("import-mapping", "import_mapping", "A dict from external reference to package path.")
    string("exclude-schemas", "exclude_schemas", "Comma separated schemas to exclude.")
    string("response-type-suffix", "response_type_suffix", "The suffix used for responses types.")
    boolean(["-alias-types", "--alias-types"], "alias_types", "Alias type declarations if possible.")
    boolean(
        ["-initialism-overrides", "--initialism-overrides"],
        "initialism_overrides",
        "Use initialism overrides.",
    )
    parser.add_argument("spec_paths", nargs="*", metavar="SPEC")
    return parser


def parse_flags(argv: list[str] | None = None) -> Flags:
    """Parse command-line arguments into Flags."""
    namespace = vars(_build_parser().parse_args(argv))
    spec_paths = list(namespace.pop("spec_paths", []))
    return Flags(**namespace, spec_paths=spec_paths, visited=frozenset(namespace))


def _strict_error(cls: Any, config_text: str) -> Exception | None:
    try:
        cls.from_dict(yaml.safe_load(config_text), strict=True)
    except (yaml.YAMLError, ConfigError) as exc:
        return exc
    return None


def detect_config_style(config_text: str | None, flags: Flags) -> bool:
    """Return True when the deprecated flat configuration format is in use.

    The explicit flag decides first; then a file that parses strictly as
    only one of the two formats; otherwise the presence of a deprecated flag.
    """
    if flags.old_config_style:
        return True
    if config_text is not None:
        old_error = _strict_error(OldConfiguration, config_text)
        new_error = _strict_error(Configuration, config_text)
        if old_error is not None and new_error is None:
            return False
        if old_error is None and new_error is not None:
            return True
        if old_error is not None and new_error is not None:
            raise ConfigError(
                "error parsing configuration style as old version or new version\n\n"
                f"error when parsing using old config version:\n{old_error}\n\n"
                f"error when parsing using new config version:\n{new_error}"
            )
    return bool(flags.visited & _DEPRECATED_FLAGS)


def update_config_from_flags(config: Configuration, flags: Flags) -> Configuration:
    """Override a loaded configuration with flag values and return it."""
    if flags.package_name:
        config.package_name = flags.package_name
    if flags.generate != DEFAULT_GENERATE:
        generation_targets(config, parse_command_line_list(flags.generate))
    if flags.include_tags:
        config.output_options.include_tags = parse_command_line_list(flags.include_tags)
    if flags.exclude_tags:
        config.output_options.exclude_tags = parse_command_line_list(flags.exclude_tags)
    if flags.templates_dir:
        try:
            templates = load_template_overrides(flags.templates_dir)
        except OSError as exc:
            raise ConfigError(f'load templates from "{flags.templates_dir}": {exc}') from exc
        config.output_options.user_templates = templates
    if flags.import_mapping:
        config.import_mapping = parse_command_line_map(flags.import_mapping)
    if flags.exclude_schemas:
        config.output_options.exclude_schemas = parse_command_line_list(
            flags.exclude_schemas
        )
    if flags.response_type_suffix:
        config.output_options.response_type_suffix = flags.response_type_suffix
    if flags.alias_types:
        raise ConfigError("--alias-types isn't supported any more")
    if not config.output_file:
        config.output_file = flags.output_file
    config.output_options.initialism_overrides = flags.initialism_overrides
    return config


def update_old_config_from_flags(
    old_config: OldConfiguration, flags: Flags
) -> OldConfiguration:
    """Fill the unset fields of an old-style configuration from flags.

    Values from the file win over flag values.
    """
    cfg = dataclasses.replace(old_config)
    if not cfg.package_name:
        cfg.package_name = flags.package_name
    if cfg.generate_targets is None:
        cfg.generate_targets = parse_command_line_list(flags.generate)
    if cfg.include_tags is None:
        cfg.include_tags = parse_command_line_list(flags.include_tags)
    if cfg.exclude_tags is None:
        cfg.exclude_tags = parse_command_line_list(flags.exclude_tags)
    if not cfg.templates_dir:
        cfg.templates_dir = flags.templates_dir
    if cfg.import_mapping is None and flags.import_mapping:
        try:
            cfg.import_mapping = parse_command_line_map(flags.import_mapping)
        except ConfigError as exc:
            raise ConfigError(f"error parsing import-mapping: {exc}") from exc
    if cfg.exclude_schemas is None:
        cfg.exclude_schemas = parse_command_line_list(flags.exclude_schemas)
    if not cfg.output_file:
        cfg.output_file = flags.output_file
    return cfg


def new_config_from_old_config(
    old_config: OldConfiguration, flags: Flags
) -> Configuration:
    """Translate an old-style configuration, with flags applied, to the new form."""
    cfg = update_old_config_from_flags(old_config, flags)
    config = Configuration(package_name=cfg.package_name)
    config.output_options.response_type_suffix = flags.response_type_suffix
    generation_targets(config, cfg.generate_targets or [])
    config.output_options.include_tags = list(cfg.include_tags or [])
    config.output_options.exclude_tags = list(cfg.exclude_tags or [])
    config.output_options.exclude_schemas = list(cfg.exclude_schemas or [])
    try:
        config.output_options.user_templates = load_template_overrides(cfg.templates_dir)
    except OSError as exc:
        raise ConfigError(f"error loading template overrides: {exc}") from exc
    config.import_mapping = dict(cfg.import_mapping or {})
    config.compatibility = dataclasses.replace(cfg.compatibility)
    config.output_file = cfg.output_file
    return config


def _read_config_file(path: str) -> str:
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.read()
    except OSError as exc:
        raise ConfigError(f"error reading config file '{path}': {exc}") from exc


def _load_yaml(text: str, path: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"error parsing'{path}' as YAML: {exc}") from exc


def _to_camel_case(text: str) -> str:
    parts = re.split(r"[^0-9A-Za-z]+", text)
    return "".join(part[:1].upper() + part[1:] for part in parts)


def _lowercase_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _detect_package_name(config: Configuration, spec_path: str) -> None:
    if config.package_name:
        return
    if config.output_file:
        directory = os.path.dirname(config.package_name) or "."
        try:
            result = subprocess.run(
                ["go", "list", "-f", "{{.Name}}", directory],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ConfigError(
                f'detect package name for "{directory}" output: "": {exc}'
            ) from exc
        output = result.stdout
        if result.returncode == 0:
            config.package_name = output.strip()
            return
        ignorable = "expected 'package', found 'EOF'" in output or output.startswith(
            "no Go files in"
        )
        if not ignorable:
            raise ConfigError(
                f'detect package name for "{directory}" output: {output!r}: '
                f"exit status {result.returncode}"
            )
    base = os.path.basename(spec_path) if spec_path else "."
    config.package_name = _lowercase_first(_to_camel_case(base.split(".")[0]))


def resolve_configuration(flags: Flags) -> Configuration:
    """Combine the configuration file and the flags into one Configuration."""
    config_text = _read_config_file(flags.config_file) if flags.config_file else None
    old_style = detect_config_style(config_text, flags)

    if not old_style:
        if config_text is not None:
            data = _load_yaml(config_text, flags.config_file)
            try:
                config = Configuration.from_dict(data)
            except ConfigError as exc:
                raise ConfigError(
                    f"error parsing'{flags.config_file}' as YAML: {exc}"
                ) from exc
        else:
            config = Configuration(
                generate=GenerateOptions(
                    echo_server=True, client=True, models=True, embedded_spec=True
                ),
                output_file=flags.output_file,
            )
        try:
            update_config_from_flags(config, flags)
        except ConfigError as exc:
            raise ConfigError(f"error processing flags: {exc}") from exc
    else:
        old_config = OldConfiguration()
        if config_text is not None:
            data = _load_yaml(config_text, flags.config_file)
            try:
                old_config = OldConfiguration.from_dict(data)
            except ConfigError as exc:
                raise ConfigError(
                    f"error parsing'{flags.config_file}' as YAML: {exc}"
                ) from exc
        config = new_config_from_old_config(old_config, flags)

    _detect_package_name(config, flags.spec_path)
    return config


def _config_yaml(config: Configuration) -> str:
    return yaml.safe_dump(config.to_dict(), sort_keys=False, default_flow_style=False)


def main(argv: list[str] | None = None) -> int:
    """Resolve the generator configuration for a spec file.

    With ``-output-config`` the configuration is printed and nothing else
    happens. Otherwise the spec is loaded to check it is readable, and the
    resolved configuration is written to the output file, or to stdout.
    """
    parser = _build_parser()
    flags = parse_flags(argv)

    if flags.print_usage:
        sys.stdout.write(parser.format_help())
        return 0

    if flags.print_version:
        try:
            current = version("oapistore")
        except PackageNotFoundError:
            print("error reading build info", file=sys.stderr)
            return 1
        print("oapistore/codegen")
        print(NO_VCS_VERSION_OVERRIDE or current)
        return 0

    if len(flags.spec_paths) < 1:
        sys.stderr.write("Please specify a path to a OpenAPI 3.0 spec file\n")
        return 1
    if len(flags.spec_paths) > 1:
        sys.stderr.write(
            "Only one OpenAPI 3.0 spec file is accepted and it must be the last CLI argument\n"
        )
        return 1

    try:
        config = resolve_configuration(flags)
    except ConfigError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    if flags.output_config:
        sys.stdout.write(_config_yaml(config))
        return 0

    try:
        with open(flags.spec_path, encoding="utf-8") as handle:
            yaml.safe_load(handle)
    except (OSError, yaml.YAMLError) as exc:
        sys.stderr.write(f"error loading swagger spec in {flags.spec_path}\n: {exc}")
        return 1

    if NO_VCS_VERSION_OVERRIDE:
        config.no_vcs_version_override = NO_VCS_VERSION_OVERRIDE

    text = _config_yaml(config)
    if config.output_file:
        try:
            with open(config.output_file, "w", encoding="utf-8") as handle:
                handle.write(text)
        except OSError as exc:
            sys.stderr.write(f"error writing generated code to file: {exc}\n")
            return 1
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())