"""
Product API - command line client

Entry point for managing catalog products from the terminal.

Usage:
    python main.py upload-image <url|data-url|path>
    python main.py add-product <product.json>
    python main.py list [productType] [limit] [offset] [--inactive]
    python main.py delete <friendlyId>

Examples:
    python main.py upload-image https://example.com/image.jpg
    python main.py upload-image ./photos/account.webp
    python main.py list auto,manual,inventory 20 40
    python main.py delete 1001

Configuration:
    Set PRODUCT_API_KEY (and optionally PRODUCT_API_BASE_URL) or use
    config.yaml. See config.py.

Verbose Output:
    Control with PRODUCT_API_VERBOSE or console.verbose in config.yaml:
    - 0/off: No request logs
    - 1/light: One line per request/response (default)
    - 2/deep: Full request/response log blocks
"""

import asyncio
import json
import logging
import os
import sys

from utils.console import console

logger = logging.getLogger(__name__)

USAGE = "Usage: python main.py [upload-image|add-product|list|delete] ..."


def _configure_logging():
    """Send log records to stderr with timestamps."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))

    # Suppress noisy library loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.INFO)


def main(argv: list[str] = None) -> int:
    """Main entry point. Returns the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        console.system(USAGE)
        return 1

    command, args = argv[0], argv[1:]
    commands = {
        "upload-image": upload_image,
        "add-product": add_product,
        "list": list_products,
        "delete": delete_product,
    }
    if command not in commands:
        console.error(f"Unknown command: {command}")
        console.system(USAGE)
        return 1

    from config import get_verbose_level, load_config
    from product_api import ProductApi, ValidationError

    config = load_config()

    # Env var takes precedence over config
    if not os.environ.get("PRODUCT_API_VERBOSE"):
        console.set_verbose(get_verbose_level(config))

    try:
        api = ProductApi.from_config(config)
        console.attach(api)
        logger.debug("Running %s against %s", command, api.base_url)
        result = asyncio.run(commands[command](api, args))
    except ValidationError as e:
        console.error(str(e))
        return 1
    except (OSError, json.JSONDecodeError) as e:
        console.error(f"Could not read input: {e}")
        return 1
    except ValueError as e:
        # Bad configuration, e.g. a base_url that is not an absolute http(s) URL
        console.error(f"Invalid request: {e}")
        return 1

    if result.success:
        print(json.dumps(result.data, indent=2, ensure_ascii=False))
        return 0

    console.error(result.message)
    return 1


# =============================================================================
# Commands
# =============================================================================


def _usage_error(message: str):
    from product_api import ValidationError
    raise ValidationError(message)


def _field(result, name: str):
    """Read a field from a dict payload; None for non-dict payloads."""
    return result.data.get(name) if isinstance(result.data, dict) else None


async def upload_image(api, args: list[str]):
    """upload-image <url|data-url|path>"""
    from product_api import ImageUpload

    if len(args) != 1:
        _usage_error("upload-image takes exactly one image URL, data URL or file path")
    result = await api.upload_image(ImageUpload.from_source(args[0]))
    if result.success:
        console.success(f"Image uploaded: {_field(result, 'imagePath')}")
    return result


async def add_product(api, args: list[str]):
    """add-product <product.json>"""
    if len(args) != 1:
        _usage_error("add-product takes exactly one JSON file")
    with open(args[0], encoding="utf-8") as f:
        product = json.load(f)
    result = await api.add_product(product)
    if result.success:
        console.success("Product added/updated")
    return result


async def list_products(api, args: list[str]):
    """list [productType] [limit] [offset] [--inactive]"""
    is_active = "--inactive" not in args
    positional = [a for a in args if a != "--inactive"]
    if len(positional) > 3:
        _usage_error("list takes at most productType, limit and offset")

    kwargs = {"is_active": is_active}
    if positional:
        kwargs["product_type"] = positional[0]
    try:
        if len(positional) > 1:
            kwargs["limit"] = int(positional[1])
        if len(positional) > 2:
            kwargs["offset"] = int(positional[2])
    except ValueError:
        _usage_error("limit and offset must be integers")

    result = await api.get_products(**kwargs)
    if result.success:
        console.success(f"{_field(result, 'count')} of {_field(result, 'total')} products")
    return result


async def delete_product(api, args: list[str]):
    """delete <friendlyId>"""
    if len(args) != 1:
        _usage_error("delete takes exactly one friendly ID")
    result = await api.delete_product(args[0])
    if result.success:
        console.success(f"Product {args[0]} deleted")
    return result


def _run():
    _configure_logging()
    sys.exit(main())


if __name__ == "__main__":
    _run()
