"""Startup diagnostics for the terminal.

Configuration echo, the route table, and the provider-state help block
printed before the server starts listening. Respects TTY detection: no
ANSI codes when piped or redirected.

Example output::

    ── contractmock ────────────────────────────────────────────

      Port         30080 (from environment)
      Contracts    pacts
      Routes       5 routes · 8 variants · 3 states

      GET     /api/v1/orders          2 variants
      ...

      Provider state management
        -> set state     POST /api/mock-server/state {"state": "state_name"}
        ...

      Available provider states
        - "orders exist"

    ─────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

from contractmock.server.control import RESET_PATH, STATE_PATH

if TYPE_CHECKING:
    from contractmock.config import MockConfig
    from contractmock.routing.table import RouteTable
    from contractmock.state import StateRegistry

_W = 65


def _use_color(stream: object | None = None) -> bool:
    """True if the output stream supports ANSI color."""
    s = stream or sys.stderr
    try:
        return s.isatty()  # type: ignore[union-attr]
    except Exception:
        return False


class _Palette:
    """ANSI escape sequences, empty strings when color is disabled."""

    __slots__ = ("bold", "cyan", "dim", "green", "reset", "yellow")

    def __init__(self, *, enabled: bool) -> None:
        if enabled:
            self.reset = "\033[0m"
            self.bold = "\033[1m"
            self.dim = "\033[2m"
            self.green = "\033[32m"
            self.yellow = "\033[33m"
            self.cyan = "\033[36m"
        else:
            self.reset = ""
            self.bold = ""
            self.dim = ""
            self.green = ""
            self.yellow = ""
            self.cyan = ""


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def format_config(config: MockConfig, c: _Palette) -> list[str]:
    """Configuration echo, noting which values came from the environment."""

    def source(field_name: str) -> str:
        if field_name in config.env_sources:
            return f" {c.dim}(from environment){c.reset}"
        return ""

    lines = [
        f"  {c.dim}Host{c.reset}         {config.host}{source('host')}",
        f"  {c.dim}Port{c.reset}         {config.port}{source('port')}",
        f"  {c.dim}Contracts{c.reset}    {config.pacts_dir}{source('pacts_dir')}",
    ]
    if config.custom_routes is not None:
        lines.append(
            f"  {c.dim}Custom{c.reset}       {config.custom_routes}{source('custom_routes')}"
        )
    return lines


def format_routes(table: RouteTable, c: _Palette) -> list[str]:
    """One line per route key with its variant count and states."""
    lines: list[str] = []
    width = max((len(key.path) for key in table), default=0)
    for key, variants in table.items():
        states = [s for v in variants for s in v.states]
        detail = _plural(len(variants), "variant")
        if states:
            detail += f" {c.dim}[{', '.join(dict.fromkeys(states))}]{c.reset}"
        lines.append(
            f"  {c.cyan}{key.method.value:<7}{c.reset} {key.path:<{width}}  {detail}"
        )
    return lines


def format_state_help(registry: StateRegistry, c: _Palette) -> list[str]:
    """The control-endpoint cheat sheet plus every known state name."""
    lines = [
        f"  {c.bold}Provider state management{c.reset}",
        f'    -> set state     POST {STATE_PATH} {{"state": "state_name"}}',
        f'    -> set multiple  POST {STATE_PATH} {{"states": ["state1", "state2"]}}',
        f'    -> limit scope   POST {STATE_PATH} {{"state": "state_name", "path": "/api/path"}}',
        f"    -> reset         POST {RESET_PATH}",
    ]
    available = registry.list_available()
    if available:
        lines.append("")
        lines.append(f"  {c.bold}Available provider states{c.reset}")
        lines.extend(f'    - "{name}"' for name in available)
    return lines


def format_banner(
    config: MockConfig,
    table: RouteTable,
    registry: StateRegistry,
    *,
    color: bool | None = None,
) -> str:
    """The full startup banner.

    Args:
        color: Force color on/off.  ``None`` auto-detects from stderr.
    """
    use = color if color is not None else _use_color()
    c = _Palette(enabled=use)

    title_text = "contractmock"
    pad = _W - len(title_text) - 4
    lines = [
        f"  {c.dim}──{c.reset} {c.bold}{title_text}{c.reset} "
        f"{c.dim}{'─' * max(pad, 1)}{c.reset}",
        "",
        *format_config(config, c),
    ]

    sep = f" {c.dim}·{c.reset} "
    stats = sep.join(
        [
            _plural(len(table), "route"),
            _plural(table.variant_count, "variant"),
            _plural(len(registry), "state"),
        ]
    )
    lines.append(f"  {c.dim}Routes{c.reset}       {stats}")
    lines.append("")

    if len(table):
        lines.extend(format_routes(table, c))
    else:
        lines.append(f"  {c.yellow}▲{c.reset}  No routes loaded")
    lines.append("")

    lines.extend(format_state_help(registry, c))
    lines.append("")
    lines.append(
        f"  {c.green}{c.bold}✓{c.reset}  "
        f"Listening on {c.bold}http://{config.host}:{config.port}{c.reset}"
    )
    lines.append("")
    lines.append(f"  {c.dim}{'─' * _W}{c.reset}")
    lines.append("")
    return "\n".join(lines)


def print_banner(
    config: MockConfig,
    table: RouteTable,
    registry: StateRegistry,
    stream: TextIO | None = None,
) -> None:
    out = stream or sys.stderr
    out.write(format_banner(config, table, registry, color=_use_color(out)))
    out.flush()


def format_route_listing(
    table: RouteTable,
    registry: StateRegistry,
    *,
    color: bool | None = None,
) -> str:
    """Routes plus the state help block, without the config echo."""
    c = _Palette(enabled=color if color is not None else _use_color(sys.stdout))
    return "\n".join([*format_routes(table, c), "", *format_state_help(registry, c)])
