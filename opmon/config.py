"""
OpMon data source configuration.

Priority (highest first):
1. Command line arguments
2. YAML config file
3. Environment (OPMON_URL, OPMON_TIMEOUT, OPMON_LOG_LEVEL; .env is honoured)
4. Defaults
"""

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from .static import DEFAULT_ENDPOINT

logger = logging.getLogger("opmon.config")

ENV_KEYS = {
    "url": "OPMON_URL",
    "timeout": "OPMON_TIMEOUT",
    "log_level": "OPMON_LOG_LEVEL",
}


class DatasourceConfig(BaseModel):
    url: str = "http://127.0.0.1"
    endpoint: str = DEFAULT_ENDPOINT
    timeout: int = 10
    log_level: str = "INFO"
    verify_tls: bool = True

    @property
    def base_url(self) -> str:
        """Connector URL that resource names are appended to."""
        return f"{self.url.rstrip('/')}{self.endpoint}"

    @classmethod
    def from_env(cls) -> Dict[str, Any]:
        """Config values present in the environment."""
        load_dotenv()
        return {key: os.environ[env] for key, env in ENV_KEYS.items() if os.environ.get(env)}

    @classmethod
    def from_file(cls, config_path: Path) -> "DatasourceConfig":
        """Load configuration from YAML file, layered over the environment."""
        data = cls.from_env()

        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}, using defaults")
            return cls(**data)

        with open(config_path, "r") as f:
            data.update(yaml.safe_load(f) or {})
        logger.debug(f"Loaded config from {config_path}: {data}")
        return cls(**data)

    def override_with_args(self, args: argparse.Namespace) -> "DatasourceConfig":
        """Override config with command line arguments if provided"""
        # Only override if explicitly provided - preserves config file values
        self.url = args.url if getattr(args, "url", None) is not None else self.url
        self.timeout = args.timeout if getattr(args, "timeout", None) is not None else self.timeout
        self.log_level = args.log_level if getattr(args, "log_level", None) is not None else self.log_level
        return self
