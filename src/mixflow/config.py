"""
Configuration management for mixflow.

Loads and validates TOML config against strict bounds.
All tunable parameters are bounded and validated at load time.
"""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional
import toml
import logging

from .analyze.camelot import Strictness
from .generate.scoring import ScoringParams

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when config validation fails."""
    pass


class Config:
    """Configuration loader and validator."""

    # Numeric bounds (min, max); None means validated by CHOICES or type only
    PARAM_BOUNDS = {
        "scoring": {
            "key_weight": (0.0, 1.0),
            "bpm_tolerance": (1, 12),
            "half_double_enabled": None,
            "strictness": None,
        },
        "sequencing": {
            "seed_sample_size": (2, 500),
            "lookahead_sample_size": (1, 200),
        },
        "matches": {
            "limit": (1, 100),
            "bpm_band": (1, 20),
        },
    }

    CHOICES = {
        "scoring": {
            "strictness": tuple(s.value for s in Strictness),
            "half_double_enabled": (True, False),
        },
    }

    DEFAULT_CONFIG = {
        "config_version": "1.0",
        "scoring": {
            "key_weight": 0.65,
            "bpm_tolerance": 6,
            "half_double_enabled": True,
            "strictness": "Normal",
        },
        "sequencing": {
            "seed_sample_size": 50,
            "lookahead_sample_size": 20,
        },
        "matches": {
            "limit": 10,
            "bpm_band": 4,
        },
    }

    def __init__(self, config_dict: Dict[str, Any]):
        """Initialize config from dictionary."""
        self.data = config_dict
        self._validate()

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load config from TOML file.

        Args:
            config_path: Path to mixflow.toml. If None, uses MIXFLOW_CONFIG_PATH env var
                        or defaults to configs/mixflow.toml.

        Returns:
            Config instance.

        Raises:
            ConfigError: If config is invalid.
        """
        if config_path is None:
            config_path = os.getenv("MIXFLOW_CONFIG_PATH", "configs/mixflow.toml")

        config_path = Path(config_path)

        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}. Using defaults.")
            return cls(copy.deepcopy(cls.DEFAULT_CONFIG))

        try:
            config_dict = toml.load(config_path)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}")

        logger.info(f"Loaded config from {config_path}")
        return cls(config_dict)

    def _validate(self) -> None:
        """
        Validate all config parameters against bounds and choices.

        Raises:
            ConfigError: If any parameter is out of bounds.
        """
        for section, params in self.PARAM_BOUNDS.items():
            if section not in self.data:
                logger.warning(f"Missing config section: {section}. Using defaults.")
                self.data[section] = copy.deepcopy(self.DEFAULT_CONFIG.get(section, {}))
                continue

            section_data = self.data[section]

            for param in params:
                if param not in section_data:
                    default_val = self.DEFAULT_CONFIG.get(section, {}).get(param)
                    if default_val is not None:
                        logger.warning(f"Missing param {section}.{param}. Using default: {default_val}")
                        section_data[param] = default_val
                    continue

                self.check_param(section, param, section_data[param])

        logger.info("✅ Config validation passed")

    @classmethod
    def check_param(cls, section: str, param: str, value: Any) -> None:
        """
        Validate one parameter value against its choices or bounds.

        Raises:
            ConfigError: If the value is not allowed.
        """
        choices = cls.CHOICES.get(section, {}).get(param)
        if choices is not None:
            # bool is an int subclass: compare type as well as value
            if not any(value == c and type(value) is type(c) for c in choices):
                raise ConfigError(
                    f"Parameter {section}.{param}={value!r} not one of {list(choices)}"
                )
            return

        bounds = cls.PARAM_BOUNDS.get(section, {}).get(param)
        if bounds is None:
            return

        # Handle numeric ranges
        min_val, max_val = bounds
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Parameter {section}.{param}={value!r} is not a number")
        if not (min_val <= value <= max_val):
            raise ConfigError(
                f"Parameter {section}.{param}={value} out of bounds "
                f"[{min_val}, {max_val}]"
            )

    def get(self, section: str, param: str, default: Any = None) -> Any:
        """Get a config parameter safely."""
        return self.data.get(section, {}).get(param, default)

    def __getitem__(self, section: str) -> Dict[str, Any]:
        """Allow dict-like access: config["scoring"]"""
        return self.data.get(section, {})

    def scoring_params(self) -> ScoringParams:
        """Build a fresh ScoringParams from the [scoring] section."""
        scoring = self["scoring"]
        return ScoringParams(
            key_weight=float(scoring["key_weight"]),
            bpm_tolerance=float(scoring["bpm_tolerance"]),
            half_double_enabled=scoring["half_double_enabled"],
            strictness=Strictness(scoring["strictness"]),
        )

    def __repr__(self) -> str:
        version = self.data.get('config_version', 'unknown')
        return f"Config(version={version})"
