"""
Command line entry point - preview and export one series

    series-export --series-id <id> [--jurusan <id>] [--kelas <id>] [--out-dir exports]
"""

from __future__ import annotations

import argparse
from pathlib import Path

import anyio

from .api import SeriesExportApi
from .config import RuntimeConfig, get_config, reload_config
from .delivery import FileDelivery
from .logging_setup import setup_logging
from .models import ExportJob, JobStatus
from .pipeline import ExportJobManager, ExportPipeline, ProgressEvent
from .scope import ExportScopeSelector


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export the published portfolios of a series to one PDF."
    )
    parser.add_argument("--series-id", required=True, help="series to export")
    parser.add_argument("--jurusan", default="", help="major filter (default: all)")
    parser.add_argument("--kelas", default="", help="class filter (default: all)")
    parser.add_argument("--out-dir", default="", help="output directory (default: from config)")
    parser.add_argument("--config", default="", help="runtime config YAML")
    parser.add_argument(
        "--preview-only",
        action="store_true",
        help="print the expected export size and stop",
    )
    return parser.parse_args(argv)


def _print_progress(event: ProgressEvent) -> None:
    print(f"[{event.percent:3d}%] {event.label}")


async def _run(args: argparse.Namespace, config: RuntimeConfig) -> int:
    async with SeriesExportApi(config=config) as api:
        selector = ExportScopeSelector(api, args.series_id)
        if args.jurusan:
            await selector.select_jurusan(args.jurusan)
        if args.kelas:
            await selector.select_kelas(args.kelas)
        if not args.jurusan and not args.kelas:
            await selector.refresh_preview()

        preview = selector.preview
        if preview is None:
            print("Preview tidak tersedia")
            return 1

        print(f"{preview.portfolio_count} portofolio")
        print(f"Dari {preview.user_count} siswa")
        print(f"Estimasi ~{preview.estimated_pages} halaman")

        if not selector.can_start:
            print("Tidak ada portofolio published yang sesuai filter")
            return 1
        if args.preview_only:
            return 0

        delivery = FileDelivery(Path(args.out_dir) if args.out_dir else None, config=config)
        pipeline = ExportPipeline(api, delivery=delivery, config=config)
        pipeline.add_listener(_print_progress)

        manager = ExportJobManager()
        job: ExportJob = manager.create_job(selector.series_id, selector.scope)
        job = await manager.run_job(pipeline, job.job_id)

    if job.status != JobStatus.SUCCEEDED:
        for error in job.errors:
            print(f"ERROR {error}")
        return 1

    print(f"PDF berhasil di-download: {job.output_path}")
    for flag in job.flags:
        print(f"WARN {flag}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = reload_config(args.config) if args.config else get_config()
    setup_logging(config)
    return anyio.run(_run, args, config)


if __name__ == "__main__":
    raise SystemExit(main())
