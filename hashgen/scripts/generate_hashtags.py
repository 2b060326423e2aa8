"""Generate hashtags for a piece of text from the command line.

The script runs the same engine call and normalisation pipeline as the
``POST /hashtags`` endpoint and prints the result as JSON. Set
``HASHGEN_LLM_PROVIDER=local`` (or pass ``--provider local``) to run without an
Ollama server; hashtags are then derived from the text alone.
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from hashgen.models.errors import HashtagGenerationError
from hashgen.models.hashtag import DEFAULT_MODEL, GenerationRequest
from hashgen.services.engine import create_engine
from hashgen.services.pipeline import HashtagPipeline


LOGGER = logging.getLogger("hashgen.cli")


def _configure_logging() -> None:
    level_name = os.getenv("HASHGEN_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate hashtags for a piece of text.")
    parser.add_argument("--text", required=True, help="Topic text to generate hashtags for.")
    parser.add_argument("--count", type=int, default=10, help="Number of hashtags (1-30, default 10).")
    parser.add_argument(
        "--model",
        default=os.getenv("HASHGEN_DEFAULT_MODEL") or DEFAULT_MODEL,
        help="Ollama model identifier (default from HASHGEN_DEFAULT_MODEL).",
    )
    parser.add_argument(
        "--provider",
        choices=["ollama", "local"],
        default=None,
        help="Engine provider (default from HASHGEN_LLM_PROVIDER or 'ollama').",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    _configure_logging()
    args = _parse_args(argv)

    try:
        request = GenerationRequest(source_text=args.text.strip(), requested_count=args.count, model=args.model)
    except ValueError as exc:
        LOGGER.error("Invalid request: %s", exc)
        return 2
    if not request.source_text:
        LOGGER.error("Invalid request: text must not be empty.")
        return 2

    engine = create_engine(args.provider)
    try:
        payload = engine.generate(request.source_text, count=request.requested_count, model=request.model)
        result = HashtagPipeline().run(request, payload)
    except HashtagGenerationError as exc:
        LOGGER.error("Hashtag generation failed: %s", exc)
        return 1

    print(json.dumps(result.as_dict(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
