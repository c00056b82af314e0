#!/usr/bin/env python
"""Ask questions about a PDF from the terminal.

Usage:
    python scripts/ask.py manual.pdf                          # Interactive session
    python scripts/ask.py manual.pdf -q "What is covered?"    # One-shot question
    python scripts/ask.py manual.pdf -q "..." -q "..." --json # Several, as JSON
"""
import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

import httpx
import structlog

from docqa import config
from docqa.errors import DocQAError
from docqa.logging_config import configure_logging
from docqa.rag.answer import Answer
from docqa.service import DocumentQA

logger = structlog.get_logger()


def print_answer(answer: Answer, show_evidence: bool = True):
    """Render an answer with its confidence and evidence."""
    print(f"\n💬 {answer.text}\n")
    print(f"   Confidence: {answer.confidence:.0%}")

    if show_evidence and answer.evidence:
        print(f"   Evidence ({len(answer.evidence)} passage(s)):")
        for i, passage in enumerate(answer.evidence, 1):
            preview = passage.text if len(passage.text) <= 160 else passage.text[:160] + "..."
            print(f"     [{i}] {preview}")
    print()


async def check_models(qa: DocumentQA):
    """Warn when the configured models are not pulled in Ollama."""
    try:
        available = await qa.client.list_models()
    except httpx.HTTPError:
        print(f"⚠️  Could not reach Ollama at {qa.client.base_url}")
        return

    for model in (qa.gateway.model, qa.generator.model):
        if not any(name == model or name.split(":")[0] == model for name in available):
            print(f"⚠️  Model '{model}' not found in Ollama. Try: ollama pull {model}")


async def main():
    """Main entry point for the ask script."""
    parser = argparse.ArgumentParser(
        description="Answer questions about a PDF document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("pdf", type=Path, help="PDF document to ingest")

    parser.add_argument(
        "--question",
        "-q",
        action="append",
        default=[],
        help="Question to ask (repeatable). Omit for an interactive session.",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print answers as JSON lines",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging",
    )

    args = parser.parse_args()

    configure_logging(level="DEBUG" if args.verbose else "WARNING")

    if not args.pdf.exists():
        print(f"\n❌ Error: file not found: {args.pdf}\n")
        sys.exit(1)

    if not args.json:
        print("\n📋 Configuration:")
        print(f"   Chat model:       {config.CHAT_MODEL}")
        print(f"   Embedding model:  {config.EMBEDDING_MODEL}")
        print(f"   Chunk size:       {config.MAX_CHUNK_CHARS} chars")
        print(f"   Top-K retrieval:  {config.RETRIEVAL_TOP_K}")

    try:
        async with DocumentQA() as qa:
            if not args.json:
                await check_models(qa)

            start = datetime.now()
            result = await qa.ingest(args.pdf.read_bytes(), "application/pdf")
            elapsed = (datetime.now() - start).total_seconds()

            if not args.json:
                print(
                    f"\n✅ Indexed {result.chunk_count} passage(s) from "
                    f"{result.page_count} page(s) in {elapsed:.1f}s\n"
                )

            if args.question:
                for question in args.question:
                    answer = await qa.answer(question)
                    if args.json:
                        print(json.dumps({"question": question, **answer.to_dict()}))
                    else:
                        print(f"❓ {question}")
                        print_answer(answer)
                return

            while True:
                try:
                    question = input("❓ ").strip()
                except EOFError:
                    break
                if not question:
                    continue
                if question.lower() in {"exit", "quit"}:
                    break
                print_answer(await qa.answer(question))

    except KeyboardInterrupt:
        print("\n\n⚠️  Cancelled by user.\n")
        sys.exit(1)

    except DocQAError as e:
        print(f"\n❌ Could not process request: {e}\n")
        logger.error("ask_script_failed", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
