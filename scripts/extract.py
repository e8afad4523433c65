#!/usr/bin/env python
"""Extract investment fields from a pitch deck's text.

Usage:
    python scripts/extract.py deck.txt                      # Summary output
    python scripts/extract.py deck.txt --json               # Full JSON result
    python scripts/extract.py deck.txt --pdf-url gs://bucket/decks/acme.pdf
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from pitchdeck import config
from pitchdeck.errors import DocumentError, PipelineTimeout
from pitchdeck.llm_client import GeminiClient
from pitchdeck.locator import resolve_locator
from pitchdeck.rag.models import RECORD_FIELDS
from pitchdeck.rag.pipeline import ExtractionPipeline
import structlog

logger = structlog.get_logger()


def print_summary(result: dict) -> None:
    """Print a readable summary of a serialized result."""
    print(f"\n{'=' * 60}")
    print(f"  Extraction {result['extractionId']}")
    print(f"{'=' * 60}\n")
    print(f"  Confidence:       {result['confidence']}")
    print(f"  Source:           {result['source']}")
    print(f"  Retrieval mode:   {result['retrievalMode']}")
    print(f"  Chunks:           {result['retrievedChunks']}/{result['chunkCount']} retrieved")
    print(f"  Processing time:  {result['processingTime']} ms\n")

    for name in RECORD_FIELDS:
        print(f"  {name:22} {result['data'][name]}")

    if result.get("aiError"):
        print(f"\n⚠️  AI error: {result['aiError']}")
        for step in result.get("nextSteps", []):
            print(f"   - {step}")

    print(f"\n{'=' * 60}\n")


async def main():
    """Main entry point for extract script."""
    parser = argparse.ArgumentParser(
        description="Extract structured fields from pitch-deck text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/extract.py deck.txt
  python scripts/extract.py deck.txt --json
  python scripts/extract.py deck.txt --chunk-size 500 --top-k 8
        """,
    )

    parser.add_argument("text_file", type=Path, help="File with the deck's extracted text")
    parser.add_argument(
        "--pdf-url",
        default=None,
        help="Document locator (validated before processing)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help=f"Chunk size in characters (default: {config.CHUNK_SIZE})",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=None,
        help=f"Chunks to retrieve (default: {config.RETRIEVAL_TOP_K})",
    )
    parser.add_argument("--json", action="store_true", help="Print the full JSON result")

    args = parser.parse_args()

    try:
        document_id = str(args.text_file)
        if args.pdf_url:
            document_id = resolve_locator(args.pdf_url).path

        text = args.text_file.read_text(encoding="utf-8")

        client = GeminiClient()
        pipeline = ExtractionPipeline(
            client,
            client,
            chunk_size=args.chunk_size,
            top_k=args.top_k,
        )

        result = (await pipeline.run(text, document_id=document_id)).to_response()

        if args.json:
            print(json.dumps(result, indent=2, ensure_ascii=False))
        else:
            print_summary(result)

    except KeyboardInterrupt:
        print("\n\n⚠️  Extraction cancelled by user.\n")
        sys.exit(1)

    except (FileNotFoundError, DocumentError, PipelineTimeout) as e:
        print(f"\n❌ Error: {e}\n")
        sys.exit(1)

    except Exception as e:
        print(f"\n❌ Error: {e}\n")
        logger.error("extract_script_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
