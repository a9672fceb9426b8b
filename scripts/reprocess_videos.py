#!/usr/bin/env python3
"""
Operations script to rerun sensitivity analysis.

Runs the pipeline in this process and waits for each run to finish, so it
works without the API server. Live sessions connected to the API only see
the events when the realtime provider is ``redis``.

Usage:
    python scripts/reprocess_videos.py VIDEO_ID [VIDEO_ID ...]
    python scripts/reprocess_videos.py --failed [--limit N] [--dry-run]

Options:
    --failed    Reprocess every video whose last run failed
    --limit     Maximum number of failed videos to pick up (default 100)
    --dry-run   List the videos that would be reprocessed
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.api.dependencies import build_pipeline_services  # noqa: E402
from src.commons.settings.loader import get_settings  # noqa: E402
from src.domain.exceptions import (  # noqa: E402
    PipelineRunError,
    VideoNotFoundException,
)
from src.domain.models.video import ProcessingStatus  # noqa: E402
from src.infrastructure.factory import InfrastructureFactory  # noqa: E402


@dataclass
class ReprocessArgs:
    """Parsed command line arguments."""

    video_ids: list[str]
    failed: bool
    limit: int
    dry_run: bool


def parse_args(argv: list[str] | None = None) -> ReprocessArgs:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Rerun sensitivity analysis for videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("video_ids", nargs="*", help="Video ids to reprocess")
    parser.add_argument(
        "--failed",
        action="store_true",
        help="Reprocess every video whose last run failed",
    )
    parser.add_argument("--limit", type=int, default=100, help="Max failed videos")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List what would be reprocessed without running anything",
    )
    args = parser.parse_args(argv)

    if not args.video_ids and not args.failed:
        parser.error("give at least one video id or --failed")

    return ReprocessArgs(
        video_ids=args.video_ids,
        failed=args.failed,
        limit=args.limit,
        dry_run=args.dry_run,
    )


async def find_failed(factory: InfrastructureFactory, limit: int) -> list[str]:
    """Ids of videos whose last run failed, oldest update first."""
    docs = await factory.get_document_db().find(
        factory.settings.document_db.collections.videos,
        {"processing_status": ProcessingStatus.FAILED.value},
        limit=limit,
        sort=[("updated_at", 1)],
    )
    return [doc["id"] for doc in docs]


async def reprocess(args: ReprocessArgs) -> list[str]:
    """Reprocess the selected videos one after another.

    Returns:
        Error descriptions, empty when every run completed.
    """
    factory = InfrastructureFactory(get_settings())
    errors: list[str] = []
    try:
        video_ids = list(args.video_ids)
        if args.failed:
            video_ids.extend(await find_failed(factory, args.limit))

        print(f"Videos selected: {len(video_ids)}")
        if args.dry_run:
            for video_id in video_ids:
                print(f"  [DRY-RUN] Would reprocess {video_id}")
            return errors

        services = build_pipeline_services(factory)
        for video_id in video_ids:
            try:
                await services.record_store.reset_for_reprocess(video_id)
                result = await services.orchestrator.run(video_id)
            except (VideoNotFoundException, PipelineRunError) as e:
                errors.append(f"{video_id}: {e}")
                print(f"  {video_id}: FAILED ({e})")
                continue

            if result is None:
                print(f"  {video_id}: superseded by another run")
            else:
                print(
                    f"  {video_id}: {result.status.value} "
                    f"({result.confidence:.2f}, {result.analysis_method.value})"
                )
    finally:
        await factory.close_all()

    return errors


def main() -> None:
    """Main entry point."""
    args = parse_args()
    errors = asyncio.run(reprocess(args))

    if errors:
        print(f"Completed with {len(errors)} error(s)")
        sys.exit(1)
    print("Reprocessing completed successfully")


if __name__ == "__main__":
    main()
