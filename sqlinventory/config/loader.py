"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any, List, Optional

from .models import InventoryConfig


class ConfigLoader:
    """Load and validate inventory configuration and target lists."""

    @staticmethod
    def load_from_file(config_path: Optional[str]) -> InventoryConfig:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file, or None for defaults

        Returns:
            InventoryConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
        """
        if config_path is None:
            return InventoryConfig()

        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        # Substitute environment variables
        raw_config = ConfigLoader._substitute_env_vars(raw_config)

        # Validate with Pydantic
        return InventoryConfig(**raw_config)

    @staticmethod
    def load_targets_file(targets_path: str) -> List[str]:
        """
        Read one target per line, skipping blank lines and '#' comments.

        Args:
            targets_path: Path to a plain-text server list

        Returns:
            List[str]: Targets in file order

        Raises:
            FileNotFoundError: If the file doesn't exist
            OSError: If the file can't be read
        """
        path = Path(targets_path)
        if not path.exists():
            raise FileNotFoundError(f"Target list not found: {targets_path}")

        targets = []
        for line in path.read_text(encoding='utf-8-sig').splitlines():
            entry = line.split('#', 1)[0].strip()
            if entry:
                targets.append(entry)
        return targets

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
