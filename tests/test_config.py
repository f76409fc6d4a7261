"""Tests for TOML configuration."""

import pytest

from symir.config import (
    OutputConfig,
    SymirConfig,
    configure_logging_from,
    find_config_file,
    generate_default_config,
    init_config,
    load_config,
)
from symir.logging import LogLevel, get_logger


class TestDefaults:
    def test_default_values(self):
        config = SymirConfig()
        assert config.solver.timeout_ms == 10000
        assert config.translation.assume_distinct_objects is False
        assert config.output.log_level == "normal"

    def test_to_dict(self):
        assert SymirConfig().to_dict() == {
            "solver": {"timeout_ms": 10000},
            "translation": {"assume_distinct_objects": False},
            "output": {"color": True, "verbose": False, "log_level": "normal"},
        }

    def test_to_toml_sections(self):
        text = generate_default_config()
        assert "[tool.symir.solver]" in text
        assert "assume_distinct_objects = false" in text
        assert 'log_level = "normal"' in text


class TestLoading:
    def test_round_trip(self, tmp_path):
        config = SymirConfig()
        config.solver.timeout_ms = 250
        config.translation.assume_distinct_objects = True
        config.output.log_level = "debug"
        path = tmp_path / "symir.toml"
        path.write_text(config.to_toml(), encoding="utf-8")
        loaded = load_config(path)
        assert loaded.to_dict() == config.to_dict()
        assert loaded.config_file == path
        assert loaded.project_root == tmp_path

    def test_plain_tables(self, tmp_path):
        path = tmp_path / ".symir.toml"
        path.write_text("[solver]\ntimeout_ms = 42\n", encoding="utf-8")
        assert load_config(path).solver.timeout_ms == 42

    def test_pyproject_section(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text(
            '[project]\nname = "demo"\n\n[tool.symir.translation]\nassume_distinct_objects = true\n',
            encoding="utf-8",
        )
        assert load_config(path).translation.assume_distinct_objects is True

    def test_find_walks_up(self, tmp_path):
        (tmp_path / "symir.toml").write_text("", encoding="utf-8")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / "symir.toml").resolve()

    def test_broken_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "symir.toml"
        path.write_text("[solver\n", encoding="utf-8")
        assert load_config(path).to_dict() == SymirConfig().to_dict()

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.toml").config_file is None


class TestInit:
    def test_init_writes_default_file(self, tmp_path):
        path = init_config(tmp_path)
        assert path.name == "symir.toml"
        assert load_config(path).to_dict() == SymirConfig().to_dict()

    def test_init_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)


class TestOutputLevel:
    def test_level_names(self):
        assert OutputConfig(log_level="trace").level() is LogLevel.TRACE
        assert OutputConfig(log_level="quiet").level() is LogLevel.QUIET

    def test_verbose_raises_normal_level(self):
        assert OutputConfig(verbose=True).level() is LogLevel.VERBOSE
        assert OutputConfig(verbose=True, log_level="debug").level() is LogLevel.DEBUG

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            OutputConfig(log_level="loud").level()

    def test_configure_logging_from(self):
        config = SymirConfig()
        config.output.log_level = "debug"
        logger = configure_logging_from(config)
        assert get_logger() is logger
        assert logger.level is LogLevel.DEBUG
