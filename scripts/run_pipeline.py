#!/usr/bin/env python
"""Ingest a book and generate a chapter list from retrieved context.

Usage:
    python scripts/run_pipeline.py                       # Default book from config
    python scripts/run_pipeline.py --book path/to/book.txt
    python scripts/run_pipeline.py --ingest-only --verbose
"""
import argparse
import asyncio
import sys
from pathlib import Path
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bookrag import config
from bookrag.errors import BookRagError
from bookrag.pipeline import GenerationPipeline
from bookrag.rag.vector_store import init_global_store
import structlog

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


class ProgressReporter:
    """Simple progress reporter for CLI."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.start_time = None

    def start(self, message: str):
        self.start_time = datetime.now()
        print(f"\n{'=' * 60}")
        print(f"  {message}")
        print(f"{'=' * 60}\n")

    def update(self, current: int, total: int, chapter):
        percentage = (current / total) * 100 if total > 0 else 0
        bar_length = 40
        filled = int(bar_length * current / total) if total > 0 else 0
        bar = "█" * filled + "░" * (bar_length - filled)

        print(
            f"\r  [{bar}] {percentage:5.1f}% ({current}/{total}) {chapter.title[:30]:<30}",
            end="",
            flush=True,
        )

        if self.verbose:
            print()

    def finish(self, stats: dict):
        print("\n")
        elapsed_seconds = (datetime.now() - self.start_time).total_seconds()

        print(f"{'=' * 60}")
        print(f"  Ingestion Complete!")
        print(f"{'=' * 60}\n")
        print(f"  📖 Chapters processed:   {stats['chapters_processed']}")
        print(f"  📝 Chunks prepared:      {stats['chunks_prepared']}")
        print(f"  💾 Chunks stored:        {stats['chunks_stored']}")
        print(f"  🧹 Chunks filtered:      {stats['chunks_filtered']}")
        print(f"  ✂️  Chunks truncated:     {stats['chunks_truncated']}")
        print(f"  ⚠️  Chunks skipped:       {stats['chunks_skipped']}")
        print(f"  ⏱️  Time elapsed:         {elapsed_seconds:.1f}s")

        if stats["chunks_skipped"] > 0:
            print(f"\n⚠️  Warning: {stats['chunks_skipped']} chunk(s) could not be stored.")
            print(f"   Check logs for details.")

        print(f"\n{'=' * 60}\n")


async def main():
    """Main entry point for the pipeline script."""
    parser = argparse.ArgumentParser(
        description="Ingest a book and generate from retrieved context",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--book",
        type=Path,
        default=None,
        help=f"Extracted book text (default: {config.BOOK_PATH})",
    )

    parser.add_argument(
        "--query",
        default=None,
        help="Retrieval query (default from config)",
    )

    parser.add_argument(
        "--no-clean",
        action="store_true",
        help="Skip short-line cleanup before chapter splitting",
    )

    parser.add_argument(
        "--ingest-only",
        action="store_true",
        help="Stop after ingestion",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show verbose progress output",
    )

    args = parser.parse_args()

    progress = ProgressReporter(verbose=args.verbose)

    try:
        print("\n📋 Configuration:")
        print(f"   Book:             {args.book or config.BOOK_PATH}")
        print(f"   Embedding model:  {config.EMBEDDING_MODEL}")
        print(f"   Chat model:       {config.CHAT_MODEL}")
        print(f"   Chunk budget:     {config.CHUNK_MAX_TOKENS} tokens")
        print(f"   Chunk overlap:    {config.CHUNK_OVERLAP_TOKENS} tokens")
        print(f"   Top-K retrieval:  {config.RETRIEVAL_TOP_K}")

        store = init_global_store()
        pipeline = GenerationPipeline(vector_store=store)

        progress.start("Ingesting Book")
        stats = await pipeline.ingest_book(
            args.book,
            clean=not args.no_clean,
            progress_callback=progress.update,
        )
        progress.finish(stats)

        if args.ingest_only:
            return

        if len(store) == 0:
            print("❌ Error: no chunks were indexed, nothing to retrieve.\n")
            sys.exit(1)

        result = await pipeline.generate_chapter_list(args.query)
        print(result)

    except KeyboardInterrupt:
        print("\n\n⚠️  Cancelled by user.\n")
        sys.exit(1)

    except FileNotFoundError as e:
        print(f"\n❌ Error: {e}\n")
        sys.exit(1)

    except BookRagError as e:
        print(f"\n❌ Error: {e}\n")
        logger.error("pipeline_script_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
