#!/usr/bin/env python3
"""CLI for generating a single image through the fal.ai adapter.

Usage:
    # Text-to-image
    python -m cli.generate_image --model flux/krea --param prompt="a red fox" --param steps=28

    # Edit an existing image (resolves to the /edit endpoint)
    python -m cli.generate_image --model bytedance/seedream/v4 \\
        --param prompt="make it winter" --image-url https://example.com/fox.png

    # Only show the endpoint and input that would be sent
    python -m cli.generate_image --model nano-banana --param prompt="a cat" --dry-run
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

# Add src to path for imports
src_path = Path(__file__).parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from rich.console import Console
from rich.table import Table

from models.errors import ProviderRuntimeError
from models.image_generation import ImageGenerationRequest
from services.image_generation_service import FalImageService, build_input, resolve_endpoint
from utils.config import load_config, validate_config
from utils.logging import setup_logging


console = Console()


def parse_param(raw: str) -> tuple[str, Any]:
    """Parse ``key=value``; values are read as JSON when possible."""
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Expected key=value, got '{raw}'")
    key, value = raw.split("=", 1)
    try:
        return key.strip(), json.loads(value)
    except json.JSONDecodeError:
        return key.strip(), value


def build_request(args: argparse.Namespace) -> ImageGenerationRequest:
    params = dict(args.param or [])
    if args.image_url:
        params["imageUrls"] = list(args.image_url)
    return ImageGenerationRequest(model=args.model, params=params)


def show_dry_run(request: ImageGenerationRequest) -> None:
    console.print(f"[bold]Endpoint:[/bold] {resolve_endpoint(request.model, request.has_image_urls)}")
    console.print_json(json.dumps(build_input(request.model, request.params)))


def show_result(result: dict) -> None:
    table = Table(title="Generated image")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in result.items():
        table.add_row(key, str(value))
    console.print(table)


async def run(request: ImageGenerationRequest, config: dict) -> dict:
    service = FalImageService(
        api_key=config.get("fal_api_key", ""),
        client_options={
            "queue_url": config["fal_queue_url"],
            "poll_interval": config["fal_poll_interval"],
            "max_poll_attempts": config["fal_max_poll_attempts"],
            "timeout": config["fal_request_timeout"],
        },
    )
    try:
        with console.status(f"Generating with {request.model}..."):
            result = await service.generate(request)
        return result.to_dict()
    finally:
        await service.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate an image with fal.ai")
    parser.add_argument("--model", required=True, help="Model id, with or without the fal-ai/ prefix")
    parser.add_argument(
        "--param",
        action="append",
        type=parse_param,
        metavar="KEY=VALUE",
        help="Canonical generation parameter (repeatable)",
    )
    parser.add_argument("--image-url", action="append", help="Input image URL (repeatable)")
    parser.add_argument("--dry-run", action="store_true", help="Print endpoint and input without calling fal.ai")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    config = load_config()
    setup_logging(args.log_level or config["log_level"], json_output=config["log_json"])

    request = build_request(args)

    if args.dry_run:
        show_dry_run(request)
        return 0

    errors = validate_config(config)
    if errors:
        console.print("[red]✗ Configuration errors:[/red]")
        for error in errors:
            console.print(f"[red]  - {error}[/red]")
        return 1

    try:
        result = asyncio.run(run(request, config))
    except ProviderRuntimeError as e:
        console.print(f"[red]✗ {e}[/red]")
        return 1

    show_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
