import pytest

from oapistore.config import (
    CompatibilityOptions,
    ConfigError,
    Configuration,
    GenerateOptions,
    OldConfiguration,
    OutputOptions,
    generation_targets,
    load_template_overrides,
    parse_command_line_list,
    parse_command_line_map,
)


def test_parse_command_line_list_trims_and_drops_empty():
    assert parse_command_line_list(" types , client,,spec ") == ["types", "client", "spec"]


def test_parse_command_line_list_empty():
    assert parse_command_line_list("") == []


def test_parse_command_line_map_simple():
    result = parse_command_line_map("a.yaml:pkg/a,b.yaml:pkg/b")
    assert result == {"a.yaml": "pkg/a", "b.yaml": "pkg/b"}


def test_parse_command_line_map_quoted_separators():
    result = parse_command_line_map('"https://example.com/a.yaml":"pkg/a,b"')
    assert result == {"https://example.com/a.yaml": "pkg/a,b"}


def test_parse_command_line_map_rejects_missing_colon():
    with pytest.raises(ConfigError):
        parse_command_line_map("novalue")


def test_parse_command_line_map_rejects_empty():
    with pytest.raises(ConfigError):
        parse_command_line_map("")


def test_generation_targets_default_flag_list():
    config = Configuration()
    result = generation_targets(config, parse_command_line_list("types,client,server,spec"))
    assert result is config
    assert config.generate == GenerateOptions(
        echo_server=True, client=True, models=True, embedded_spec=True
    )


@pytest.mark.parametrize(
    "target, attribute",
    [
        ("iris", "iris_server"),
        ("chi-server", "chi_server"),
        ("fiber", "fiber_server"),
        ("echo", "echo_server"),
        ("gin-server", "gin_server"),
        ("gorilla", "gorilla_server"),
        ("strict-server", "strict"),
        ("models", "models"),
        ("embedded-spec", "embedded_spec"),
    ],
)
def test_generation_targets_aliases(target, attribute):
    config = Configuration()
    generation_targets(config, [target])
    assert getattr(config.generate, attribute) is True


def test_generation_targets_replaces_previous_options():
    config = Configuration(generate=GenerateOptions(client=True))
    generation_targets(config, ["gin"])
    assert config.generate == GenerateOptions(gin_server=True)


def test_generation_targets_skip_flags_set_output_options():
    config = Configuration()
    generation_targets(config, ["skip-fmt", "skip-prune"])
    assert config.output_options.skip_fmt is True
    assert config.output_options.skip_prune is True
    assert config.generate == GenerateOptions()


def test_generation_targets_unknown_keeps_generate():
    config = Configuration(generate=GenerateOptions(client=True))
    with pytest.raises(ConfigError, match="bogus"):
        generation_targets(config, ["models", "bogus"])
    assert config.generate == GenerateOptions(client=True)


def test_load_template_overrides_empty_name():
    assert load_template_overrides("") == {}


def test_load_template_overrides_recursive(tmp_path):
    (tmp_path / "typedef.tmpl").write_text("//blah\n//blah", encoding="utf-8")
    sub = tmp_path / "echo"
    sub.mkdir()
    (sub / "echo-wrappers.tmpl").write_text("wrappers", encoding="utf-8")
    templates = load_template_overrides(str(tmp_path))
    assert templates == {
        "typedef.tmpl": "//blah\n//blah",
        "echo/echo-wrappers.tmpl": "wrappers",
    }


def test_load_template_overrides_missing_dir(tmp_path):
    with pytest.raises(OSError):
        load_template_overrides(str(tmp_path / "missing"))


def test_configuration_from_dict_reads_fields():
    data = {
        "package": "api",
        "generate": {"echo-server": True, "models": True},
        "output-options": {"include-tags": ["a", "b"], "skip-prune": True},
        "compatibility": {"circular-reference-limit": 5},
        "import-mapping": {"parent.yaml": "pkg/parent"},
        "output": "out.gen.go",
    }
    config = Configuration.from_dict(data, strict=True)
    assert config.package_name == "api"
    assert config.generate == GenerateOptions(echo_server=True, models=True)
    assert config.output_options.include_tags == ["a", "b"]
    assert config.output_options.skip_prune is True
    assert config.compatibility == CompatibilityOptions(circular_reference_limit=5)
    assert config.import_mapping == {"parent.yaml": "pkg/parent"}
    assert config.output_file == "out.gen.go"


def test_configuration_round_trip():
    config = Configuration(
        package_name="api",
        generate=GenerateOptions(client=True, strict=True),
        output_options=OutputOptions(
            exclude_schemas=["Pet"], user_templates={"typedef.tmpl": "//blah"}
        ),
        import_mapping={"x.yaml": "pkg/x"},
        output_file="api.gen.go",
    )
    assert Configuration.from_dict(config.to_dict(), strict=True) == config


def test_configuration_to_dict_omits_empty_values():
    assert Configuration(package_name="api").to_dict() == {"package": "api"}


def test_configuration_strict_rejects_unknown_key():
    with pytest.raises(ConfigError):
        Configuration.from_dict({"package": "api", "include-tags": ["a"]}, strict=True)


def test_configuration_lenient_ignores_unknown_key():
    config = Configuration.from_dict({"package": "api", "include-tags": ["a"]})
    assert config == Configuration(package_name="api")


def test_configuration_strict_rejects_unknown_nested_key():
    with pytest.raises(ConfigError):
        Configuration.from_dict({"generate": {"rocket": True}}, strict=True)


def test_configuration_rejects_wrong_type():
    with pytest.raises(ConfigError):
        Configuration.from_dict({"generate": {"client": "yes"}})


def test_configuration_from_none_is_default():
    assert Configuration.from_dict(None) == Configuration()


def test_old_configuration_keeps_unset_lists_none():
    old = OldConfiguration.from_dict({"package": "api", "include-tags": []}, strict=True)
    assert old.package_name == "api"
    assert old.include_tags == []
    assert old.exclude_tags is None
    assert old.generate_targets is None
    assert old.import_mapping is None


def test_old_configuration_reads_fields():
    data = {
        "package": "api",
        "generate": ["types", "client"],
        "output": "out.go",
        "templates": "tmpl",
        "import-mapping": {"a.yaml": "pkg/a"},
        "response-type-suffix": "Resp",
        "compatibility": {"circular-reference-limit": 3},
    }
    old = OldConfiguration.from_dict(data, strict=True)
    assert old.generate_targets == ["types", "client"]
    assert old.output_file == "out.go"
    assert old.templates_dir == "tmpl"
    assert old.import_mapping == {"a.yaml": "pkg/a"}
    assert old.response_type_suffix == "Resp"
    assert old.compatibility.circular_reference_limit == 3


def test_old_configuration_strict_rejects_new_style_keys():
    with pytest.raises(ConfigError):
        OldConfiguration.from_dict({"package": "api", "output-options": {}}, strict=True)


def test_new_configuration_strict_rejects_old_style_keys():
    with pytest.raises(ConfigError):
        Configuration.from_dict({"package": "api", "templates": "dir"}, strict=True)


def test_old_configuration_rejects_non_mapping():
    with pytest.raises(ConfigError):
        OldConfiguration.from_dict(["package"])