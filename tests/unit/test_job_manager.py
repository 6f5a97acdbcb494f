"""
Job manager unit tests
"""

import pytest

from conftest import FakeExportApi, FakeRenderer, RecordingNotifier
from series_export.assets import AssetMaterializer
from series_export.delivery import FileDelivery
from series_export.models import ExportScope, JobStatus
from series_export.pipeline import ExportJobManager, ExportPipeline


@pytest.fixture
def manager() -> ExportJobManager:
    return ExportJobManager()


class TestExportJobManager:
    """Job bookkeeping"""

    def test_create_job(self, manager):
        job = manager.create_job("s1", ExportScope(jurusan_id="j1"))
        assert job.status == JobStatus.QUEUED
        assert manager.get_job(job.job_id) is job
        assert manager.get_cancel_token(job.job_id) is not None

    def test_unknown_job(self, manager):
        assert manager.get_job("nope") is None
        assert not manager.cancel_job("nope")

    def test_cancel_queued_job(self, manager):
        job = manager.create_job("s1")
        assert manager.cancel_job(job.job_id)
        assert job.status == JobStatus.CANCELLED
        assert manager.get_cancel_token(job.job_id).cancelled

    def test_cancel_running_job(self, manager):
        """Running job: token tripped, status decided by the pipeline"""
        job = manager.create_job("s1")
        job.mark_running()
        assert manager.cancel_job(job.job_id)
        assert job.status == JobStatus.RUNNING
        assert manager.get_cancel_token(job.job_id).cancelled

    def test_cancel_finished_job(self, manager):
        job = manager.create_job("s1")
        job.mark_succeeded()
        assert not manager.cancel_job(job.job_id)

    def test_list_jobs(self, manager):
        first = manager.create_job("s1")
        manager.create_job("s2")
        first.mark_failed("x")

        assert len(manager.list_jobs()) == 2
        assert manager.list_jobs(status=JobStatus.FAILED) == [first]
        assert len(manager.list_jobs(limit=1)) == 1


@pytest.mark.anyio
class TestRunJob:
    """Running jobs through a pipeline"""

    async def test_run_job(self, manager, demo_day_dataset, runtime_config, asset_server, tmp_path):
        api = FakeExportApi(demo_day_dataset)
        job = manager.create_job("series-1", ExportScope(kelas_id="k1"))

        async with asset_server.client() as client:
            pipeline = ExportPipeline(
                api,
                materializer=AssetMaterializer(client, runtime_config),
                renderer=FakeRenderer(),
                delivery=FileDelivery(tmp_path, config=runtime_config),
                notifier=RecordingNotifier(),
                config=runtime_config,
            )
            result = await manager.run_job(pipeline, job.job_id)

        assert result is job
        assert job.status == JobStatus.SUCCEEDED
        assert api.dataset_calls == [ExportScope(kelas_id="k1")]

    async def test_cancelled_job_not_run(self, manager, runtime_config):
        api = FakeExportApi()
        pipeline = ExportPipeline(api, renderer=FakeRenderer(), config=runtime_config)
        job = manager.create_job("series-1")
        manager.cancel_job(job.job_id)

        await manager.run_job(pipeline, job.job_id)

        assert job.status == JobStatus.CANCELLED
        assert api.dataset_calls == []
