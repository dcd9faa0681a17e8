"""
Configuration system for SliceWise

Provides configuration management with support for files and environment variables.
Includes validation, default value handling, and configuration merging.
"""

import os
import json
import yaml
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class DetectionAlgorithm(Enum):
    """Community detection algorithm used to seed service boundaries."""

    LABEL_PROPAGATION = "label_propagation"
    LOUVAIN = "louvain"


class HubFiltering(Enum):
    """Hub-node filtering applied before community detection."""

    NONE = "none"
    DEGREE = "degree"
    PACKAGE = "package"
    COMBINED = "combined"


class HubStrategy(Enum):
    """How filtered hub nodes are put back after community detection."""

    STRONGEST_COUPLING = "strongest_coupling"
    SHARED_SERVICE = "shared_service"


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value, using default")
        return None


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value, using default")
        return None


class ConfigurationManager:
    """Manages configuration loading, validation, and merging."""

    DEFAULT_CONFIG_PATHS = [
        "slicewise.json",
        "slicewise.yaml",
        "slicewise.yml",
        ".slicewise.json",
        ".slicewise.yaml",
        ".slicewise.yml",
        os.path.expanduser("~/.slicewise.json"),
        os.path.expanduser("~/.slicewise.yaml"),
    ]

    @staticmethod
    def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
        """Find the first existing configuration file."""
        paths = search_paths or ConfigurationManager.DEFAULT_CONFIG_PATHS

        for path in paths:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def load_env_config() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        # Source settings
        sources: Dict[str, Any] = {}
        max_file_size = _env_int("SLICEWISE_MAX_FILE_SIZE")
        if max_file_size is not None:
            sources["max_file_size"] = max_file_size

        if os.getenv("SLICEWISE_INCLUDE_PATTERNS"):
            sources["include_patterns"] = os.getenv("SLICEWISE_INCLUDE_PATTERNS").split(",")

        if os.getenv("SLICEWISE_EXCLUDE_PATTERNS"):
            sources["exclude_patterns"] = os.getenv("SLICEWISE_EXCLUDE_PATTERNS").split(",")

        if sources:
            config["sources"] = sources

        # Detection settings
        detection: Dict[str, Any] = {}
        if os.getenv("SLICEWISE_ALGORITHM"):
            algorithm = os.getenv("SLICEWISE_ALGORITHM").lower()
            if algorithm in [a.value for a in DetectionAlgorithm]:
                detection["algorithm"] = algorithm
            else:
                logger.warning("Invalid SLICEWISE_ALGORITHM value, using default")

        max_iterations = _env_int("SLICEWISE_MAX_ITERATIONS")
        if max_iterations is not None:
            detection["max_iterations"] = max_iterations

        min_size = _env_int("SLICEWISE_MIN_COMMUNITY_SIZE")
        if min_size is not None:
            detection["min_community_size"] = min_size

        target = _env_int("SLICEWISE_TARGET_SERVICE_COUNT")
        if target is not None:
            detection["target_service_count"] = target

        if os.getenv("SLICEWISE_HUB_FILTERING"):
            hub_filtering = os.getenv("SLICEWISE_HUB_FILTERING").lower()
            if hub_filtering in [h.value for h in HubFiltering]:
                detection["hub_filtering"] = hub_filtering
            else:
                logger.warning("Invalid SLICEWISE_HUB_FILTERING value, using default")

        hub_percentile = _env_float("SLICEWISE_HUB_PERCENTILE")
        if hub_percentile is not None:
            detection["hub_percentile"] = hub_percentile

        if os.getenv("SLICEWISE_HUB_STRATEGY"):
            strategy = os.getenv("SLICEWISE_HUB_STRATEGY").lower()
            if strategy in [s.value for s in HubStrategy]:
                detection["hub_strategy"] = strategy
            else:
                logger.warning("Invalid SLICEWISE_HUB_STRATEGY value, using default")

        if detection:
            config["detection"] = detection

        # Output settings
        output: Dict[str, Any] = {}
        if os.getenv("SLICEWISE_OUTPUT_FORMAT"):
            output["format"] = os.getenv("SLICEWISE_OUTPUT_FORMAT").lower()

        if output:
            config["output"] = output

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge multiple configuration dictionaries, with later ones taking precedence."""
        result: Dict[str, Any] = {}

        for config in configs:
            if not config:
                continue

            for key, value in config.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = ConfigurationManager.merge_configs(result[key], value)
                else:
                    result[key] = value

        return result

    @staticmethod
    def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
        """Return a configuration section, treating an empty one as ``{}``."""
        section = config_data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"'{name}' section must be a mapping, got {type(section).__name__}"
            )
        return section

    @staticmethod
    def _check_positive_int(section: Dict[str, Any], key: str) -> None:
        if key not in section:
            return
        value = section[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"{key} must be an integer, got {type(value).__name__}")
        if value <= 0:
            raise ConfigurationError(f"{key} must be positive")

    @staticmethod
    def validate_config(config_data: Dict[str, Any]) -> None:
        """Validate configuration data."""
        # Validate source settings
        sources = ConfigurationManager._section(config_data, "sources")
        ConfigurationManager._check_positive_int(sources, "max_file_size")

        for key in ("include_patterns", "exclude_patterns"):
            if key not in sources:
                continue
            patterns = sources[key]
            if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
                raise ConfigurationError(f"{key} must be a list of glob patterns")

        # Validate detection settings
        detection = ConfigurationManager._section(config_data, "detection")
        ConfigurationManager._check_positive_int(detection, "max_iterations")
        ConfigurationManager._check_positive_int(detection, "min_community_size")

        if detection.get("target_service_count") is not None:
            ConfigurationManager._check_positive_int(detection, "target_service_count")

        if "algorithm" in detection:
            valid = [a.value for a in DetectionAlgorithm]
            if detection["algorithm"] not in valid:
                raise ConfigurationError(f"algorithm must be one of: {valid}")

        if "louvain_resolution" in detection:
            resolution = detection["louvain_resolution"]
            if (
                isinstance(resolution, bool)
                or not isinstance(resolution, (int, float))
                or resolution <= 0
            ):
                raise ConfigurationError("louvain_resolution must be a positive number")

        if "seed" in detection:
            seed = detection["seed"]
            if isinstance(seed, bool) or not isinstance(seed, int):
                raise ConfigurationError("seed must be an integer")

        if "hub_filtering" in detection:
            valid = [h.value for h in HubFiltering]
            if detection["hub_filtering"] not in valid:
                raise ConfigurationError(f"hub_filtering must be one of: {valid}")

        if "hub_percentile" in detection:
            percentile = detection["hub_percentile"]
            if (
                isinstance(percentile, bool)
                or not isinstance(percentile, (int, float))
                or not (0 < percentile <= 1)
            ):
                raise ConfigurationError("hub_percentile must be in (0, 1]")

        if "hub_strategy" in detection:
            valid = [s.value for s in HubStrategy]
            if detection["hub_strategy"] not in valid:
                raise ConfigurationError(f"hub_strategy must be one of: {valid}")

        # Validate output settings
        output = ConfigurationManager._section(config_data, "output")

        if "format" in output and output["format"] not in ["text", "json", "yaml"]:
            raise ConfigurationError("output format must be one of: ['text', 'json', 'yaml']")

        ConfigurationManager._check_positive_int(output, "max_classes_listed")


@dataclass
class SourceConfig:
    """Configuration for source discovery and parsing."""

    max_file_size: int = 1024 * 1024  # 1MB
    include_patterns: List[str] = field(default_factory=lambda: ["**/*.py"])
    exclude_patterns: List[str] = field(
        default_factory=lambda: [
            "**/test_*.py",
            "**/*_test.py",
            "**/tests/**",
            "**/__pycache__/**",
            "**/.*/**",
            "**/build/**",
            "**/dist/**",
            "**/venv/**",
        ]
    )


@dataclass
class DetectionConfig:
    """Configuration for community detection and boundary refinement."""

    algorithm: DetectionAlgorithm = DetectionAlgorithm.LABEL_PROPAGATION
    max_iterations: int = 100
    min_community_size: int = 20
    target_service_count: Optional[int] = None
    hub_filtering: HubFiltering = HubFiltering.NONE
    hub_percentile: float = 0.90
    hub_strategy: HubStrategy = HubStrategy.STRONGEST_COUPLING
    louvain_resolution: float = 1.0
    seed: int = 42


@dataclass
class OutputConfig:
    """Configuration for report output."""

    format: str = "text"
    max_classes_listed: int = 10


@dataclass
class SliceWiseConfig:
    """Main configuration class for SliceWise."""

    source_settings: SourceConfig = field(default_factory=SourceConfig)
    detection_settings: DetectionConfig = field(default_factory=DetectionConfig)
    output_settings: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def default(cls) -> "SliceWiseConfig":
        """Create default configuration."""
        return cls()

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        use_env: bool = True,
        validate: bool = True,
    ) -> "SliceWiseConfig":
        """
        Load configuration from multiple sources with precedence:
        1. Default values
        2. Configuration file
        3. Environment variables (if use_env=True)

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            use_env: Whether to load environment variables
            validate: Whether to validate the configuration
        """
        configs_to_merge = []

        # Load from file
        file_config: Dict[str, Any] = {}
        if config_path:
            file_config = ConfigurationManager.load_config_file(config_path)
        else:
            found_config = ConfigurationManager.find_config_file()
            if found_config:
                file_config = ConfigurationManager.load_config_file(found_config)
                logger.info(f"Loaded configuration from: {found_config}")

        configs_to_merge.append(file_config)

        if use_env:
            configs_to_merge.append(ConfigurationManager.load_env_config())

        merged_config = ConfigurationManager.merge_configs(*configs_to_merge)

        if validate:
            ConfigurationManager.validate_config(merged_config)

        return cls.from_dict(merged_config)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SliceWiseConfig":
        """Build a configuration from a (merged) dictionary, ignoring unknown keys."""
        source_config = SourceConfig()
        for key, value in (data.get("sources") or {}).items():
            if hasattr(source_config, key):
                setattr(source_config, key, value)

        detection_config = DetectionConfig()
        for key, value in (data.get("detection") or {}).items():
            if not hasattr(detection_config, key):
                continue
            if key == "algorithm" and isinstance(value, str):
                value = DetectionAlgorithm(value)
            elif key == "hub_filtering" and isinstance(value, str):
                value = HubFiltering(value)
            elif key == "hub_strategy" and isinstance(value, str):
                value = HubStrategy(value)
            setattr(detection_config, key, value)

        output_config = OutputConfig()
        for key, value in (data.get("output") or {}).items():
            if hasattr(output_config, key):
                setattr(output_config, key, value)

        return cls(
            source_settings=source_config,
            detection_settings=detection_config,
            output_settings=output_config,
        )

    @classmethod
    def from_file(cls, config_path: str) -> "SliceWiseConfig":
        """Load configuration from a JSON or YAML file only."""
        return cls.load(config_path=config_path, use_env=False)

    @classmethod
    def from_env(cls) -> "SliceWiseConfig":
        """Load configuration from environment variables."""
        return cls.load(config_path=None, use_env=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "sources": asdict(self.source_settings),
            "detection": {
                **asdict(self.detection_settings),
                "algorithm": self.detection_settings.algorithm.value,
                "hub_filtering": self.detection_settings.hub_filtering.value,
                "hub_strategy": self.detection_settings.hub_strategy.value,
            },
            "output": asdict(self.output_settings),
        }

    def to_file(self, config_path: str, format: str = "json") -> None:
        """
        Save configuration to file.

        Args:
            config_path: Path to save configuration
            format: File format ('json' or 'yaml')
        """
        config_data = self.to_dict()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                if format.lower() == "yaml":
                    yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config_data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration file: {e}") from e

    def validate(self) -> None:
        """Validate the current configuration."""
        ConfigurationManager.validate_config(self.to_dict())

    def get_config_summary(self) -> str:
        """Get a human-readable summary of the configuration."""
        detection = self.detection_settings
        target = detection.target_service_count
        return f"""SliceWise Configuration Summary:
Sources:
  - Max file size: {self.source_settings.max_file_size} bytes
  - Include patterns: {len(self.source_settings.include_patterns)} patterns
  - Exclude patterns: {len(self.source_settings.exclude_patterns)} patterns

Detection:
  - Algorithm: {detection.algorithm.value}
  - Max iterations: {detection.max_iterations}
  - Min community size: {detection.min_community_size}
  - Target service count: {target if target is not None else "auto"}
  - Hub filtering: {detection.hub_filtering.value}
  - Hub percentile: {detection.hub_percentile}
  - Hub strategy: {detection.hub_strategy.value}
  - Louvain resolution: {detection.louvain_resolution}
  - Seed: {detection.seed}

Output:
  - Format: {self.output_settings.format}
  - Max classes listed: {self.output_settings.max_classes_listed}
"""


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> SliceWiseConfig:
    """
    Load configuration from file and/or environment variables.

    Args:
        config_path: Path to configuration file
        use_env: Whether to load environment variables

    Returns:
        SliceWiseConfig: Loaded configuration
    """
    return SliceWiseConfig.load(config_path=config_path, use_env=use_env)
