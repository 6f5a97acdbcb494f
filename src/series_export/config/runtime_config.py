"""
Runtime configuration - reads config/export_runtime.yaml

Responsibilities:
- API endpoint, timeouts, batch size, branding and output paths
- environment variable overrides (SERIES_EXPORT_ prefix)
- typed access to every option
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class ApiConfig(BaseModel):
    """Admin REST API"""

    base_url: str = "http://localhost:8080/api/v1"
    token: str | None = None
    timeout_sec: float = 30.0


class AssetConfig(BaseModel):
    """Image fetching"""

    batch_size: int = 5
    fetch_timeout_sec: float = 15.0
    branding_url: str | None = "http://localhost:3000/logo.png"


class BrandingConfig(BaseModel):
    """Page header branding"""

    name: str = "Grafikarsa"
    tagline: str = "Katalog Portofolio Digital"


class VerificationConfig(BaseModel):
    """Verification (QR) codes"""

    profile_url_template: str = "https://grafikarsa.com/{username}"
    qr_size: float = 40.0


class OutputConfig(BaseModel):
    """Delivered files"""

    output_dir: Path = Path("exports")


class LoggingConfig(BaseModel):
    """Logging"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: Path = Path("logs/series_export.log")


class RuntimeConfig(BaseSettings):
    """Runtime configuration (environment variables override defaults)"""

    api: ApiConfig = Field(default_factory=ApiConfig)
    assets: AssetConfig = Field(default_factory=AssetConfig)
    branding: BrandingConfig = Field(default_factory=BrandingConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "SERIES_EXPORT_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """Load configuration from a YAML file (missing file -> defaults)"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            api=ApiConfig(**cls._extract(runtime_opts, "api")),
            assets=AssetConfig(**cls._extract(runtime_opts, "assets")),
            branding=BrandingConfig(**cls._extract(runtime_opts, "branding")),
            verification=VerificationConfig(**cls._extract(runtime_opts, "verification")),
            output=OutputConfig(**cls._extract(runtime_opts, "output")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """Flatten one section ({default: x} entries become x)"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """Relative paths are resolved against the config file's directory"""
        if not self.output.output_dir.is_absolute():
            self.output.output_dir = (base_dir / self.output.output_dir).resolve()
        if not self.logging.log_file.is_absolute():
            self.logging.log_file = (base_dir / self.logging.log_file).resolve()

    def ensure_dirs(self) -> None:
        """Create the output directory if needed"""
        self.output.output_dir.mkdir(parents=True, exist_ok=True)


_config: RuntimeConfig | None = None

DEFAULT_CONFIG_PATH = Path("config/export_runtime.yaml")


def get_config() -> RuntimeConfig:
    """Global configuration (lazily loaded)"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """Reload the global configuration"""
    global _config
    _config = RuntimeConfig.from_yaml(yaml_path or DEFAULT_CONFIG_PATH)
    return _config
