#!/usr/bin/env python
"""Check that the extractor can run here: interpreter, packages, config and Gemini access."""
import asyncio
import importlib
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

REQUIRED_PACKAGES = ("quart", "httpx", "numpy", "pydantic", "tenacity", "structlog")

MARKS = {"ok": "\033[92m✓\033[0m", "fail": "\033[91m✗\033[0m", "note": "\033[94mℹ\033[0m"}


def report(kind: str, message: str) -> None:
    print(f"{MARKS[kind]} {message}")


def heading(title: str) -> None:
    print(f"\n== {title} ==")


def check_interpreter() -> list:
    heading("Interpreter")
    version = ".".join(str(part) for part in sys.version_info[:3])
    if sys.version_info < (3, 11):
        report("fail", f"Python {version} found, 3.11+ needed for asyncio.timeout")
        return ["Python too old"]
    report("ok", f"Python {version}")
    return []


def check_packages() -> list:
    heading("Packages")
    problems = []
    for name in REQUIRED_PACKAGES:
        try:
            importlib.import_module(name)
        except ImportError as e:
            report("fail", f"{name}: {e}")
            problems.append(f"Missing package: {name}")
        else:
            report("ok", name)
    return problems


def check_config(config) -> list:
    heading("Configuration")
    report("note", f"chat={config.CHAT_MODEL} embed={config.EMBEDDING_MODEL}/{config.EMBEDDING_DIMENSION}d")
    report("note", f"chunks={config.CHUNK_SIZE} chars, top_k={config.RETRIEVAL_TOP_K}, timeout={config.PIPELINE_TIMEOUT}s")
    if config.STORAGE_BUCKET is None:
        report("note", "STORAGE_BUCKET unset, gs:// locators are not bucket-checked")

    if not config.GEMINI_API_KEY:
        report("fail", "GEMINI_API_KEY is not set")
        return ["Missing GEMINI_API_KEY"]
    report("ok", "GEMINI_API_KEY is set")
    return []


async def check_gemini(config) -> list:
    from pitchdeck.errors import CapabilityError
    from pitchdeck.llm_client import GeminiClient

    heading("Gemini")
    client = GeminiClient()
    problems = []
    try:
        available = await client.list_models()
        for model in (config.CHAT_MODEL, config.EMBEDDING_MODEL):
            if model in available:
                report("ok", f"model {model} available")
            else:
                report("fail", f"model {model} not visible to this key")
                problems.append(f"Missing model: {model}")

        vector = await client.embed_content("setup check")
    except CapabilityError as e:
        report("fail", f"{type(e).__name__}: {e}")
        return problems + [f"Gemini error: {e}"]

    if len(vector) != config.EMBEDDING_DIMENSION:
        report("fail", f"embedding has {len(vector)} dims, expected {config.EMBEDDING_DIMENSION}")
        problems.append("Embedding dimension mismatch")
    else:
        report("ok", f"embedding call returned {len(vector)} dims")
    return problems


async def main() -> int:
    problems = check_interpreter() + check_packages()
    if problems:
        return summarize(problems)

    from pitchdeck import config

    problems += check_config(config)
    if config.GEMINI_API_KEY:
        problems += await check_gemini(config)
    return summarize(problems)


def summarize(problems: list) -> int:
    heading("Result")
    if not problems:
        report("ok", "ready to extract")
        return 0
    for problem in problems:
        report("fail", problem)
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
