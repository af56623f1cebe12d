"""Configuration loader for prbackport."""

import numbers
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from prbackport.errors import BackportError


class ConfigLoader:
    """Loads and type-checks the YAML file holding CLI defaults."""

    # key -> (expected kind, null allowed)
    KEY_TYPES = {
        "origin_remote": ("str", False),
        "upstream_remote": ("str", False),
        "forge_host": ("str", False),
        "api_url": ("str", False),
        "assignee": ("str", True),
        "pr_template": ("str", True),
        "log_file": ("str", True),
        "web": ("bool", False),
        "verbose": ("bool", False),
        "request_timeout": ("number", False),
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise BackportError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise BackportError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise BackportError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(str(key) for key in set(parsed.keys()) - set(self.KEY_TYPES))
        if unknown:
            raise BackportError(f"Unknown configuration keys: {', '.join(unknown)}")

        errors = [
            message
            for message in (self._check(key, value) for key, value in sorted(parsed.items()))
            if message
        ]
        if errors:
            raise BackportError(f"Invalid values in config file '{config_path}': {'; '.join(errors)}")

        return parsed

    def _check(self, key: str, value: Any) -> Optional[str]:
        kind, nullable = self.KEY_TYPES[key]
        if value is None:
            return None if nullable else f"`{key}` must not be empty"

        if kind == "bool":
            if not isinstance(value, bool):
                return f"`{key}` must be true or false, got {value!r}"
        elif kind == "number":
            # bool is an int subclass; `request_timeout: yes` is not a number
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                return f"`{key}` must be a number, got {value!r}"
            if value <= 0:
                return f"`{key}` must be greater than zero, got {value!r}"
        elif not isinstance(value, str) or not value.strip():
            return f"`{key}` must be a non-empty string, got {value!r}"
        return None
