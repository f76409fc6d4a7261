"""Configuration system for symir.
Supports TOML configuration files with project-level and user-level settings.
"""
from __future__ import annotations
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from symir.logging import LogLevel, SymirLogger, configure_logging, get_logger
CONFIG_FILES = [
    "symir.toml",
    ".symir.toml",
    "pyproject.toml",
]
@dataclass
class SolverConfig:
    """Configuration for solver queries."""
    timeout_ms: int = 10000
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timeout_ms": self.timeout_ms,
        }
@dataclass
class TranslationConfig:
    """Configuration for expression translation."""
    assume_distinct_objects: bool = False
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "assume_distinct_objects": self.assume_distinct_objects,
        }
@dataclass
class OutputConfig:
    """Configuration for log output."""
    color: bool = True
    verbose: bool = False
    log_level: str = "normal"
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "color": self.color,
            "verbose": self.verbose,
            "log_level": self.log_level,
        }
    def level(self) -> LogLevel:
        """Effective log level; ``verbose`` raises a normal level to VERBOSE."""
        level = LogLevel.from_name(self.log_level)
        if self.verbose and level < LogLevel.VERBOSE:
            return LogLevel.VERBOSE
        return level
@dataclass
class SymirConfig:
    """Main configuration for symir."""
    solver: SolverConfig = field(default_factory=SolverConfig)
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    project_root: Path | None = None
    config_file: Path | None = None
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "solver": self.solver.to_dict(),
            "translation": self.translation.to_dict(),
            "output": self.output.to_dict(),
        }
    def to_toml(self) -> str:
        """Generate TOML configuration string."""
        lines = ["[tool.symir]", ""]
        for section, values in self.to_dict().items():
            lines.append(f"[tool.symir.{section}]")
            for key, value in values.items():
                if isinstance(value, bool):
                    lines.append(f"{key} = {str(value).lower()}")
                elif isinstance(value, str):
                    lines.append(f'{key} = "{value}"')
                else:
                    lines.append(f"{key} = {value}")
            lines.append("")
        return "\n".join(lines)
def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file by walking up directory tree."""
    if start_dir is None:
        start_dir = Path.cwd()
    current = start_dir.resolve()
    while current != current.parent:
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists():
                return config_path
        current = current.parent
    home = Path.home()
    for config_name in [".symir.toml", "symir.toml"]:
        config_path = home / config_name
        if config_path.exists():
            return config_path
    return None
def load_config(
    config_path: Path | None = None,
    start_dir: Path | None = None,
) -> SymirConfig:
    """Load configuration from file or use defaults.
    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching for config
    Returns:
        Loaded configuration
    """
    config = SymirConfig()
    if config_path is None:
        config_path = find_config_file(start_dir)
    if config_path is None or not config_path.exists():
        return config
    config.config_file = config_path
    config.project_root = config_path.parent
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        get_logger().warning(f"Failed to parse config file {config_path}: {e}")
        return config
    if config_path.name == "pyproject.toml":
        symir_data = data.get("tool", {}).get("symir", {})
    else:
        symir_data = data.get("tool", {}).get("symir", data)
    _apply_config(config, symir_data)
    return config
def _apply_config(config: SymirConfig, data: dict[str, Any]) -> None:
    """Apply configuration data to config object."""
    if "solver" in data:
        sol_data = data["solver"]
        if "timeout_ms" in sol_data:
            config.solver.timeout_ms = int(sol_data["timeout_ms"])
    if "translation" in data:
        tr_data = data["translation"]
        if "assume_distinct_objects" in tr_data:
            config.translation.assume_distinct_objects = bool(tr_data["assume_distinct_objects"])
    if "output" in data:
        out_data = data["output"]
        for key in ["color", "verbose", "log_level"]:
            if key in out_data:
                setattr(config.output, key, out_data[key])
def configure_logging_from(config: SymirConfig) -> SymirLogger:
    """Install a global logger built from the output settings."""
    return configure_logging(level=config.output.level(), color=config.output.color)
def generate_default_config() -> str:
    """Generate default configuration file content."""
    config = SymirConfig()
    return config.to_toml()
def init_config(directory: Path | None = None) -> Path:
    """Initialize a new configuration file in the given directory.
    Args:
        directory: Directory to create config in (default: current)
    Returns:
        Path to created config file
    """
    if directory is None:
        directory = Path.cwd()
    config_path = directory / "symir.toml"
    if config_path.exists():
        raise FileExistsError(f"Config file already exists: {config_path}")
    content = generate_default_config()
    config_path.write_text(content, encoding="utf-8")
    return config_path
__all__ = [
    "SymirConfig",
    "SolverConfig",
    "TranslationConfig",
    "OutputConfig",
    "load_config",
    "find_config_file",
    "configure_logging_from",
    "generate_default_config",
    "init_config",
]
