#!/usr/bin/env python
"""Validate setup - check dependencies, configuration and the Ollama backend."""
import sys
import asyncio
from pathlib import Path

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"

def print_success(msg):
    print(f"{GREEN}✓{RESET} {msg}")

def print_error(msg):
    print(f"{RED}✗{RESET} {msg}")

def print_info(msg):
    print(f"{BLUE}ℹ{RESET} {msg}")

def print_warning(msg):
    print(f"{YELLOW}⚠{RESET} {msg}")

def print_section(title):
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}{title:^60}{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

async def main():
    print_section("bookrag - Setup Validation")

    errors = []
    warnings = []

    # 1. Import core dependencies
    print_section("1. Core Dependencies")

    dependencies = [
        ("httpx", "HTTP client"),
        ("numpy", "Vector math"),
        ("pydantic", "Data validation"),
        ("structlog", "Structured logging"),
    ]

    for module_name, description in dependencies:
        try:
            __import__(module_name)
            print_success(f"{description:30} ({module_name})")
        except ImportError as e:
            print_error(f"{description:30} ({module_name}) - {e}")
            errors.append(f"Missing: {module_name}")

    # 2. Test configuration
    print_section("2. Configuration")

    try:
        sys.path.insert(0, str(Path(__file__).parent.parent))
        from bookrag import config
        from bookrag.llm_client import OllamaClient

        print_success(f"Config loaded successfully")
        print_info(f"  Chat model: {config.CHAT_MODEL}")
        print_info(f"  Embedding model: {config.EMBEDDING_MODEL}")
        print_info(f"  Ollama URL: {config.OLLAMA_BASE_URL}")
        print_info(f"  Chunk budget: {config.CHUNK_MAX_TOKENS} tokens "
                   f"(overlap {config.CHUNK_OVERLAP_TOKENS})")

        if config.CHUNK_OVERLAP_TOKENS >= config.CHUNK_MAX_TOKENS:
            print_warning("Chunk overlap >= chunk budget; hard splits will not overlap")
            warnings.append("Overlap not smaller than chunk budget")

        if config.BOOK_PATH.exists():
            print_success(f"Book found: {config.BOOK_PATH}")
        else:
            print_warning(f"Book missing: {config.BOOK_PATH} (pass --book to run_pipeline.py)")
            warnings.append("Default book missing")

    except Exception as e:
        print_error(f"Failed to load config: {e}")
        errors.append("Config loading failed")
        return errors, warnings

    # 3. Test Ollama connection
    print_section("3. Ollama Service")

    import httpx
    from bookrag.errors import EmbeddingBackendError

    client = OllamaClient()
    reachable = False

    try:
        models = set(await client.list_models())
        reachable = True

        print_success(f"Ollama service running at {config.OLLAMA_BASE_URL}")
        print_info(f"Found {len(models)} models installed")

        # Ollama lists untagged pulls as "<name>:latest"
        for label, model in (("Chat", config.CHAT_MODEL), ("Embedding", config.EMBEDDING_MODEL)):
            if model in models or f"{model}:latest" in models:
                print_success(f"{label} model available: {model}")
            else:
                print_error(f"{label} model missing: {model}")
                print_info(f"  Run: ollama pull {model}")
                errors.append(f"Missing {label.lower()} model: {model}")

    except httpx.ConnectError:
        print_error("Cannot connect to Ollama service")
        print_info(f"  Make sure Ollama is running: ollama serve")
        errors.append("Ollama not running")
    except httpx.HTTPError as e:
        print_error(f"Ollama check failed: {e}")
        errors.append(f"Ollama error: {e}")

    # 4. Test embedding API
    if reachable:
        print_section("4. Embedding API Test")

        try:
            vector = await client.embed("test")
            print_success(f"Embedding API working (dimension: {len(vector)})")
        except EmbeddingBackendError as e:
            print_error(f"Embedding API test failed: {e}")
            errors.append(f"API test failed: {e}")

    # 5. Summary
    print_section("Summary")

    if not errors:
        print_success(f"All checks passed! ✨")
        print_info(f"  Next step: python scripts/run_pipeline.py --book <extracted.txt>")
    else:
        print_error(f"Found {len(errors)} error(s):")
        for i, error in enumerate(errors, 1):
            print(f"  {i}. {error}")

    if warnings:
        print_warning(f"\nFound {len(warnings)} warning(s):")
        for i, warning in enumerate(warnings, 1):
            print(f"  {i}. {warning}")

    print()
    return errors, warnings

if __name__ == "__main__":
    errors, warnings = asyncio.run(main())
    sys.exit(1 if errors else 0)
