"""
Pipeline executor - drives one export run through its stages

Responsibilities:
1. run the stages in order, one at a time (explicit state machine)
2. emit monotonic progress events with stage labels
3. fatal errors (dataset fetch, empty dataset, render, delivery) -> error state
4. per-item failures (images, codes) -> job flags only
5. allocate fresh caches for every run
6. exactly one success or failure notification per run

Test points:
- test_full_run_reaches_done
- test_empty_dataset_aborts_before_fetching_images
- test_thumbnail_404_still_done
- test_progress_monotonic
- test_cancel_between_stages
- test_render_failure_writes_no_file
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date

import anyio

from ..assets import AssetMaterializer
from ..cancel import CancelToken
from ..codes import VerificationCodeGenerator
from ..compose import DocumentComposer
from ..config import RuntimeConfig, get_config
from ..delivery import FileDelivery, build_export_filename
from ..interfaces import (
    EmptyDatasetError,
    ExportCancelled,
    ExportNotAllowedError,
    IDocumentRenderer,
    IExportApi,
    IFileSaver,
    INotifier,
    RenderError,
    SeriesExportError,
)
from ..models import (
    CachedImage,
    CodeCache,
    ExportDataset,
    ExportJob,
    ExportScope,
    ImageCache,
    Page,
)
from ..render import PDFRenderer
from ..scope import ExportScopeSelector
from .notifier import LoggingNotifier
from .stages import DONE_STAGE, EXPORT_STAGES, PipelineStage, ProgressEvent, StageEnum

logger = logging.getLogger(__name__)

ProgressListener = Callable[[ProgressEvent], None]

EMPTY_DATASET_MESSAGE = "Tidak ada portofolio untuk di-export"
FAILURE_MESSAGE = "Gagal membuat PDF"
CANCELLED_MESSAGE = "Export dibatalkan"


@dataclass
class RunContext:
    """State of one run; created fresh by every ExportPipeline.run()"""
    job: ExportJob
    token: CancelToken
    dataset: ExportDataset | None = None
    usernames: list[str] = field(default_factory=list)
    codes: CodeCache = field(default_factory=CodeCache)
    branding: CachedImage | None = None
    images: ImageCache = field(default_factory=ImageCache)
    pages: list[Page] = field(default_factory=list)


class ExportPipeline:
    """Series export executor"""

    def __init__(
        self,
        api: IExportApi,
        *,
        materializer: AssetMaterializer | None = None,
        code_generator: VerificationCodeGenerator | None = None,
        composer: DocumentComposer | None = None,
        renderer: IDocumentRenderer | None = None,
        delivery: IFileSaver | None = None,
        notifier: INotifier | None = None,
        config: RuntimeConfig | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.config = config or get_config()
        self.api = api
        self.materializer = materializer or AssetMaterializer(config=self.config)
        self.code_generator = code_generator or VerificationCodeGenerator(config=self.config)
        self.composer = composer or DocumentComposer(config=self.config)
        self.renderer = renderer or PDFRenderer(config=self.config)
        self.delivery = delivery or FileDelivery(config=self.config)
        self.notifier = notifier or LoggingNotifier()
        self.today = today
        self._listeners: list[ProgressListener] = []

        self._handlers: dict[StageEnum, Callable[[RunContext, PipelineStage], Awaitable[None]]] = {
            StageEnum.FETCHING_DATASET: self._stage_fetch_dataset,
            StageEnum.GENERATING_CODES: self._stage_generate_codes,
            StageEnum.FETCHING_BRANDING_ASSET: self._stage_fetch_branding,
            StageEnum.MATERIALIZING_IMAGES: self._stage_materialize_images,
            StageEnum.COMPOSING_DOCUMENT: self._stage_compose,
            StageEnum.FINALIZING: self._stage_finalize,
        }

    def add_listener(self, listener: ProgressListener) -> None:
        """Observe progress events of every run"""
        self._listeners.append(listener)

    async def run_from_selector(
        self,
        selector: ExportScopeSelector,
        *,
        job: ExportJob | None = None,
        cancel_token: CancelToken | None = None,
    ) -> ExportJob:
        """Start a run for the selector's scope; refused when its preview has nothing to export"""
        if not selector.can_start:
            raise ExportNotAllowedError(
                f"Series {selector.series_id}: no portfolios for scope {selector.scope.to_params()}"
            )
        return await self.run(selector.series_id, selector.scope, job=job, cancel_token=cancel_token)

    async def run(
        self,
        series_id: str,
        scope: ExportScope | None = None,
        *,
        job: ExportJob | None = None,
        cancel_token: CancelToken | None = None,
    ) -> ExportJob:
        """
        Run the export

        Fatal failures do not raise; they end in job.status == FAILED
        (or CANCELLED) with one failure notification. Unexpected
        exceptions are reported the same way and then re-raised.
        """
        scope = scope or ExportScope()
        job = job or ExportJob(job_id=str(uuid.uuid4()), series_id=series_id, scope=scope)
        ctx = RunContext(job=job, token=cancel_token or CancelToken())

        job.mark_running()
        logger.info(f"[{job.job_id}] Export started: series={series_id} scope={scope.to_params()}")

        try:
            for stage in EXPORT_STAGES:
                ctx.token.raise_if_cancelled()
                await self._execute_stage(ctx, stage)

        except ExportCancelled as e:
            logger.warning(f"[{job.job_id}] Export cancelled: {e}")
            job.mark_cancelled()
            self._fail(ctx, CANCELLED_MESSAGE)
            return job

        except EmptyDatasetError as e:
            job.mark_failed(str(e))
            self._fail(ctx, EMPTY_DATASET_MESSAGE)
            return job

        except SeriesExportError as e:
            job.mark_failed(str(e))
            self._fail(ctx, f"{FAILURE_MESSAGE}: {e}")
            return job

        except Exception as e:
            logger.exception(f"[{job.job_id}] Export crashed")
            job.mark_failed(str(e))
            self._fail(ctx, FAILURE_MESSAGE)
            raise

        job.mark_succeeded()
        self._emit(ctx, DONE_STAGE.stage, DONE_STAGE.progress_start, DONE_STAGE.label)
        logger.info(f"[{job.job_id}] Export finished: {job.output_path}")
        self.notifier.success(job)
        return job

    async def _execute_stage(self, ctx: RunContext, stage: PipelineStage) -> None:
        """Enter one stage and run its handler"""
        job = ctx.job
        logger.info(f"[{job.job_id}] Stage start: {stage.name}")
        self._emit(ctx, stage.stage, stage.progress_start, stage.label)

        try:
            await self._handlers[stage.stage](ctx, stage)
        except SeriesExportError as e:
            logger.error(f"[{job.job_id}] Stage failed {stage.name}: {e}")
            job.add_flag(f"stage_failed:{stage.name}")
            raise

    # ========================================================================
    # Stages
    # ========================================================================

    async def _stage_fetch_dataset(self, ctx: RunContext, stage: PipelineStage) -> None:
        """Fetch the dataset; empty counts as failure"""
        job = ctx.job
        dataset = await self.api.get_export_dataset(job.series_id, job.scope)
        if dataset.is_empty:
            raise EmptyDatasetError(f"Series {job.series_id}: dataset has no portfolios")

        ctx.dataset = dataset
        ctx.usernames = dataset.distinct_usernames()
        self._emit(
            ctx,
            stage.stage,
            stage.progress_end,
            f"Memproses {len(dataset.portfolios)} portofolio...",
            {"portfolios": len(dataset.portfolios), "users": len(ctx.usernames)},
        )

    async def _stage_generate_codes(self, ctx: RunContext, stage: PipelineStage) -> None:
        job = ctx.job
        ctx.codes = await self.code_generator.generate(
            ctx.usernames,
            on_missing=lambda username: job.add_flag(f"code_missing:{username}"),
        )
        self._emit(ctx, stage.stage, stage.progress_end, stage.label, {"codes": len(ctx.codes)})

    async def _stage_fetch_branding(self, ctx: RunContext, stage: PipelineStage) -> None:
        ctx.branding = await self.materializer.fetch_branding()
        if ctx.branding is None and self.config.assets.branding_url:
            ctx.job.add_flag("branding_missing")

    async def _stage_materialize_images(self, ctx: RunContext, stage: PipelineStage) -> None:
        job = ctx.job

        def on_batch(done: int, total: int) -> None:
            self._emit(
                ctx,
                stage.stage,
                stage.interpolate(done, total),
                stage.label,
                {"image_batches_done": done, "image_batches_total": total},
            )

        # the branding asset already counts as fetched for this run
        branding_url = self.materializer.config.assets.branding_url
        prefetched = {branding_url: ctx.branding} if branding_url else {}

        ctx.images = await self.materializer.materialize(
            ctx.dataset,
            cancel_token=ctx.token,
            on_missing=lambda url: job.add_flag(f"image_missing:{url}"),
            on_batch=on_batch,
            prefetched=prefetched,
        )
        job.progress.details["images"] = len(ctx.images)

    async def _stage_compose(self, ctx: RunContext, stage: PipelineStage) -> None:
        ctx.pages = self.composer.compose(ctx.dataset, ctx.images, ctx.codes)
        self._emit(ctx, stage.stage, stage.progress_end, stage.label, {"pages": len(ctx.pages)})

    async def _stage_finalize(self, ctx: RunContext, stage: PipelineStage) -> None:
        """Render, name and deliver the document"""
        job = ctx.job
        dataset = ctx.dataset

        try:
            document = await anyio.to_thread.run_sync(
                self.renderer.render, ctx.pages, dataset.series, ctx.branding
            )
        except SeriesExportError:
            raise
        except Exception as e:
            raise RenderError(f"Rendering failed: {e}") from e

        filename = build_export_filename(dataset.series.nama, ctx.usernames, self.today())
        job.output_path = self.delivery.save(document, filename)
        job.filename = filename

    # ========================================================================
    # Progress
    # ========================================================================

    def _emit(
        self,
        ctx: RunContext,
        stage: StageEnum,
        percent: int,
        label: str,
        details: dict[str, int | str] | None = None,
    ) -> None:
        """Update job progress and notify listeners; percent never decreases, 100 only when done"""
        progress = ctx.job.progress
        ceiling = 100 if stage == StageEnum.DONE else 99
        percent = max(progress.percent, min(percent, ceiling))

        progress.stage = stage.value
        progress.percent = percent
        progress.message = label
        if details:
            progress.details.update(details)

        event = ProgressEvent(stage=stage, percent=percent, label=label, details=dict(details or {}))
        for listener in self._listeners:
            listener(event)

    def _fail(self, ctx: RunContext, message: str) -> None:
        self._emit(ctx, StageEnum.ERROR, ctx.job.progress.percent, message)
        self.notifier.failure(ctx.job, message)
