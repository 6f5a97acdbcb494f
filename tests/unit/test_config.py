"""
Configuration loading unit tests
"""

from datetime import datetime
from pathlib import Path

import pytest

from series_export.config import LayoutSpec, RuntimeConfig, SpecLoader


class TestSpecLoader:
    """Layout spec loader"""

    def test_load_layout(self, layout: LayoutSpec):
        """Packaged layout parses"""
        assert layout.schema_version == "1.0"
        assert layout.page.size == "A4"

    def test_limits(self, layout: LayoutSpec):
        """Truncation limits"""
        assert layout.limits.text_max_chars == 200
        assert layout.limits.ellipsis == "..."
        assert layout.limits.table_max_rows == 3

    def test_load_cached(self):
        """Same object on repeated loads"""
        assert SpecLoader.load() is SpecLoader.load()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            SpecLoader.load(tmp_path / "missing.yaml")

    def test_format_date_indonesian_months(self, layout: LayoutSpec):
        """id-ID short month names"""
        assert layout.format_date(datetime(2024, 1, 5)) == "5 Jan 2024"
        assert layout.format_date(datetime(2024, 8, 17)) == "17 Agu 2024"

    def test_footer_label(self, layout: LayoutSpec):
        footer = layout.labels.footer.format(page_number=1, total_pages=2)
        assert footer == "Halaman 1 dari 2"


class TestRuntimeConfig:
    """Runtime configuration"""

    def test_defaults(self):
        """Defaults without a config file"""
        config = RuntimeConfig()
        assert config.assets.batch_size == 5
        assert config.verification.profile_url_template == "https://grafikarsa.com/{username}"
        assert config.branding.name == "Grafikarsa"

    def test_missing_yaml_gives_defaults(self, tmp_path: Path):
        config = RuntimeConfig.from_yaml(tmp_path / "nope.yaml")
        assert config.assets.batch_size == 5

    def test_from_yaml(self, tmp_path: Path):
        """{default: x} entries are flattened, relative paths resolved"""
        path = tmp_path / "runtime.yaml"
        path.write_text(
            "runtime_options:\n"
            "  api:\n"
            "    base_url:\n"
            "      default: https://api.test/v1\n"
            "  assets:\n"
            "    batch_size: 2\n"
            "  output:\n"
            "    output_dir:\n"
            "      default: out\n",
            encoding="utf-8",
        )
        config = RuntimeConfig.from_yaml(path)
        assert config.api.base_url == "https://api.test/v1"
        assert config.assets.batch_size == 2
        assert config.output.output_dir == (tmp_path / "out").resolve()

    def test_env_override(self, monkeypatch):
        """SERIES_EXPORT_ environment variables override defaults"""
        monkeypatch.setenv("SERIES_EXPORT_ASSETS__BATCH_SIZE", "3")
        assert RuntimeConfig().assets.batch_size == 3

    def test_ensure_dirs(self, runtime_config: RuntimeConfig):
        runtime_config.ensure_dirs()
        assert runtime_config.output.output_dir.is_dir()
