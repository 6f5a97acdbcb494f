"""
Command line unit tests
"""

import pytest

from conftest import FakeExportApi
from series_export import cli
from series_export.models import ExportPreview


class ContextApi(FakeExportApi):
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None


@pytest.fixture
def fake_api(monkeypatch):
    def _install(api: ContextApi) -> ContextApi:
        monkeypatch.setattr(cli, "SeriesExportApi", lambda config=None: api)
        return api
    return _install


class TestCli:
    """series-export entry point"""

    def test_preview_only(self, fake_api, tmp_path, capsys):
        api = fake_api(ContextApi(preview=ExportPreview(portfolio_count=4, user_count=3, estimated_pages=4)))

        code = cli.main(["--series-id", "s1", "--jurusan", "j1", "--preview-only",
                         "--config", str(tmp_path / "none.yaml")])

        out = capsys.readouterr().out
        assert code == 0
        assert "4 portofolio" in out
        assert "Dari 3 siswa" in out
        assert api.dataset_calls == []

    def test_zero_portfolios_refused(self, fake_api, tmp_path, capsys):
        api = fake_api(ContextApi(preview=ExportPreview(portfolio_count=0)))

        code = cli.main(["--series-id", "s1", "--config", str(tmp_path / "none.yaml")])

        assert code == 1
        assert "Tidak ada portofolio" in capsys.readouterr().out
        assert api.dataset_calls == []

    def test_missing_series_id(self):
        with pytest.raises(SystemExit):
            cli.main([])
