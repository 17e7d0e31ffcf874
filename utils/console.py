"""
Console Output Styling for the product API client

Renders the client's request/response/error events on stderr.

Verbose Levels:
    - OFF (0): Nothing
    - LIGHT (1): One line per request, response and error [default]
    - DEEP (2): Full log blocks (headers, query parameters, bodies)

Configuration:
    - Environment: PRODUCT_API_VERBOSE=0|1|2 or off|light|deep
    - Config file: console.verbose (see config.py)
    - Runtime: console.set_verbose(level)

Colors:
    - Requests: Cyan
    - Responses: Green
    - Errors: Red
    - Full log blocks: Dim gray
"""

import json
import os
import sys
from enum import IntEnum
from typing import Any

from product_api.http_utils import mask_headers


class VerboseLevel(IntEnum):
    """Verbose output levels."""
    OFF = 0
    LIGHT = 1
    DEEP = 2


def parse_verbose_level(value: str | int | VerboseLevel) -> VerboseLevel:
    """Parse a verbose level from string, int, or VerboseLevel.

    Args:
        value: String ("off", "light", "deep", "0", "1", "2"),
               int (0-2), or VerboseLevel enum.

    Returns:
        VerboseLevel enum value. Unknown strings map to OFF.

    Examples:
        parse_verbose_level("off") -> VerboseLevel.OFF
        parse_verbose_level("1") -> VerboseLevel.LIGHT
        parse_verbose_level(2) -> VerboseLevel.DEEP
    """
    if isinstance(value, VerboseLevel):
        return value

    if isinstance(value, int):
        return VerboseLevel(min(max(value, 0), 2))

    level_str = str(value).lower().strip()

    level_map = {
        # OFF
        "0": VerboseLevel.OFF,
        "off": VerboseLevel.OFF,
        "none": VerboseLevel.OFF,
        "false": VerboseLevel.OFF,
        # LIGHT
        "1": VerboseLevel.LIGHT,
        "light": VerboseLevel.LIGHT,
        "on": VerboseLevel.LIGHT,
        "true": VerboseLevel.LIGHT,
        # DEEP
        "2": VerboseLevel.DEEP,
        "deep": VerboseLevel.DEEP,
        "full": VerboseLevel.DEEP,
        "all": VerboseLevel.DEEP,
    }

    return level_map.get(level_str, VerboseLevel.OFF)


# ANSI color codes
class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    BRIGHT_BLACK = "\033[90m"


def _supports_color() -> bool:
    """Check if the terminal supports color output."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("PRODUCT_API_NO_COLOR"):
        return False

    if os.environ.get("FORCE_COLOR"):
        return True

    if not hasattr(sys.stderr, "isatty") or not sys.stderr.isatty():
        return False

    if os.environ.get("TERM") == "dumb":
        return False

    return True


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


class Console:
    """
    Styled stderr output for request logs and CLI messages.

    Singleton-ish: import and use the `console` instance.

    Example:
        from utils.console import console

        api = ProductApi(api_key)
        console.attach(api)
        console.set_verbose("deep")
    """

    def __init__(self):
        self._verbose_level = self._load_verbose_level()
        self._use_color = _supports_color()

    def _load_verbose_level(self) -> VerboseLevel:
        """Load verbose level from environment. Defaults to LIGHT."""
        return parse_verbose_level(os.environ.get("PRODUCT_API_VERBOSE", "1"))

    def set_verbose(self, level: VerboseLevel | int | str):
        self._verbose_level = parse_verbose_level(level)

    def get_verbose(self) -> VerboseLevel:
        return self._verbose_level

    def _colorize(self, text: str, *codes: str) -> str:
        """Apply color codes to text if color is supported."""
        if not self._use_color:
            return text
        return f"{''.join(codes)}{text}{Colors.RESET}"

    def _print(self, text: str):
        print(text, file=sys.stderr, flush=True)

    # -------------------------------------------------------------------------
    # CLI messages
    # -------------------------------------------------------------------------

    def banner(self, text: str, width: int = 40):
        """Print a banner/header."""
        self._print(self._colorize(text, Colors.BOLD, Colors.BLUE))
        self._print(self._colorize("=" * width, Colors.DIM, Colors.BLUE))

    def system(self, text: str):
        """Print system message (info, status)."""
        self._print(self._colorize(text, Colors.BLUE))

    def error(self, text: str):
        self._print(self._colorize(f"Error: {text}", Colors.BOLD, Colors.RED))

    def success(self, text: str):
        self._print(self._colorize(text, Colors.GREEN))

    def warning(self, text: str):
        self._print(self._colorize(f"Warning: {text}", Colors.YELLOW))

    # -------------------------------------------------------------------------
    # Request log events
    # -------------------------------------------------------------------------

    def attach(self, emitter):
        """Subscribe the log renderers to an EventEmitter (e.g. a ProductApi)."""
        emitter.on("request_log", self.request_log)
        emitter.on("response_log", self.response_log)
        emitter.on("error_log", self.error_log)
        return emitter

    def detach(self, emitter):
        emitter.off("request_log", self.request_log)
        emitter.off("response_log", self.response_log)
        emitter.off("error_log", self.error_log)

    def request_log(self, event: dict[str, Any]):
        """Render a request_log event."""
        if self._verbose_level == VerboseLevel.OFF:
            return
        if self._verbose_level == VerboseLevel.LIGHT:
            self._print(self._colorize(f"  [request] {event.get('method')} {event.get('url')}", Colors.CYAN))
            return

        lines = [
            "========== Request Log ==========",
            f"[{event.get('timestamp')}] {event.get('method')} {event.get('url')}",
            "--- Request Headers ---",
            _to_json(mask_headers(event.get("headers") or {})),
        ]
        if event.get("params"):
            lines += ["--- Query Parameters ---", _to_json(event["params"])]
        if "body" in event:
            lines += ["--- Request Body ---", _to_json(event["body"])]
        lines.append("==============================")
        self._block(lines, Colors.CYAN)

    def response_log(self, event: dict[str, Any]):
        """Render a response_log event."""
        if self._verbose_level == VerboseLevel.OFF:
            return
        size_kb = f"{(event.get('size_bytes') or 0) / 1024:.2f} KB"
        if self._verbose_level == VerboseLevel.LIGHT:
            self._print(self._colorize(
                f"  [response] {event.get('status')} in {event.get('duration_ms')}ms ({size_kb})",
                Colors.GREEN,
            ))
            return

        self._block([
            "========== Response Log ==========",
            f"[{event.get('timestamp')}] Response Time: {event.get('duration_ms')}ms",
            f"Status Code: {event.get('status')}",
            f"Response Size: {size_kb}",
            "--- Response Data ---",
            _to_json(event.get("data")),
            "==================================",
        ], Colors.GREEN)

    def error_log(self, event: dict[str, Any]):
        """Render an error_log event."""
        if self._verbose_level == VerboseLevel.OFF:
            return
        kind = event.get("kind")
        status = event.get("status")
        if self._verbose_level == VerboseLevel.LIGHT:
            label = f"{kind} {status}" if status is not None else kind
            self._print(self._colorize(
                f"  [error] {label} in {event.get('duration_ms')}ms: {event.get('message')}",
                Colors.RED,
            ))
            return

        lines = [
            "========== Error Log ==========",
            f"[{event.get('timestamp')}] Request Failed after {event.get('duration_ms')}ms",
        ]
        if kind == "server":
            lines += [
                f"Status Code: {status}",
                "--- Error Response ---",
                _to_json(event.get("error")),
            ]
        elif kind == "network":
            lines += [
                "No response received from server",
                f"Error: {event.get('message')}",
            ]
        else:
            lines.append(f"Request setup error: {event.get('message')}")
        lines.append("============================")
        self._block(lines, Colors.RED)

    def _block(self, lines: list[str], color: str):
        header, *body = lines
        self._print("")
        self._print(self._colorize(header, Colors.BOLD, color))
        for line in body:
            self._print(self._colorize(line, Colors.DIM, Colors.BRIGHT_BLACK))
        self._print("")


# Global console instance
console = Console()
