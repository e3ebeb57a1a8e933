"""Command-line entry point (``github``).

Runs the same capabilities as the REST API, starts the API server, and
checks a running server's health the way the container probe does.
Supports the capabilities, describe, invoke, serve, health and config commands.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from github import __version__
from github.core.config import Settings, get_settings
from github.core.errors import GitHubError
from github.core.logging_config import LOG_LEVELS, get_logger, setup_logging
from github.service import CapabilityService

logger = get_logger(__name__)

HEALTH_TIMEOUT_SECONDS = 3.0
APP_PATH = "github.interfaces.rest:app"


def _build_service(settings: Settings) -> CapabilityService:
    return CapabilityService.from_settings(settings)


def _print_json(data: Any, *, compact: bool = False) -> None:
    if compact:
        print(json.dumps(data, separators=(",", ":"), default=str))
    else:
        print(json.dumps(data, indent=2, default=str))


def _parse_key_values(pairs: Sequence[str]) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected key=value, got {pair!r}")
        parsed[key.strip()] = value
    return parsed


def _collect_args(args_json: Optional[str], pairs: Sequence[str]) -> Dict[str, Any]:
    collected: Dict[str, Any] = {}
    if args_json:
        loaded = json.loads(args_json)
        if not isinstance(loaded, dict):
            raise ValueError("--args-json must be a JSON object")
        collected.update(loaded)
    # key=value pairs win over the JSON payload
    collected.update(_parse_key_values(pairs))
    return collected


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


def cmd_capabilities(settings: Settings, *, as_json: bool) -> int:
    service = _build_service(settings)
    try:
        described = service.describe()
    finally:
        asyncio.run(service.close())

    if as_json:
        _print_json(described)
        return 0
    width = max((len(item["name"]) for item in described), default=0)
    for item in described:
        mode = "read" if item["read_only"] else "write"
        note = "" if item["enabled"] else "  (disabled: read-only server)"
        print(f"{item['name']:<{width}}  {mode:<5}  {item['description']}{note}")
    return 0


def cmd_describe(settings: Settings, name: str) -> int:
    service = _build_service(settings)
    try:
        spec = service.get_spec(name)
    finally:
        asyncio.run(service.close())

    print(f"{spec.name}: {spec.description}")
    print(f"mode: {'read-only' if spec.read_only else 'mutating'}")
    if not spec.params:
        print("arguments: none")
        return 0
    print("arguments:")
    for p in spec.params:
        flags: List[str] = [p.type.value, "required" if p.required else "optional"]
        if p.default is not None:
            flags.append(f"default={p.default}")
        if p.choices:
            flags.append(f"choices={'|'.join(p.choices)}")
        if p.minimum is not None:
            flags.append(f"min={p.minimum}")
        if p.maximum is not None:
            flags.append(f"max={p.maximum}")
        print(f"  {p.name} ({', '.join(flags)}): {p.description}")
    return 0


async def _invoke(settings: Settings, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
    service = _build_service(settings)
    try:
        result = await service.invoke(name, args)
    finally:
        await service.close()
    return result.output


def cmd_invoke(settings: Settings, name: str, args: Dict[str, Any], *, compact: bool) -> int:
    output = asyncio.run(_invoke(settings, name, args))
    _print_json(output, compact=compact)
    return 0


def cmd_serve(
    settings: Settings,
    *,
    host: Optional[str],
    port: Optional[int],
    workers: Optional[int],
    reload: bool,
    log_level: Optional[str] = None,
) -> int:
    import uvicorn

    bind_host = host or settings.api_host
    bind_port = port or settings.api_port
    worker_count = 1 if reload else (workers or settings.api_workers)
    logger.info(f"Serving {APP_PATH} on {bind_host}:{bind_port} with {worker_count} worker(s)")
    uvicorn.run(
        APP_PATH,
        host=bind_host,
        port=bind_port,
        workers=worker_count,
        reload=reload,
        log_level=(log_level or settings.log_level).lower(),
    )
    return 0


def cmd_health(settings: Settings, *, url: Optional[str]) -> int:
    target = url or f"http://127.0.0.1:{settings.api_port}/health"
    try:
        r = httpx.get(target, timeout=HEALTH_TIMEOUT_SECONDS)
    except httpx.HTTPError as e:
        print(f"unhealthy: {target}: {e}", file=sys.stderr)
        return 1
    if r.is_success:
        print(f"healthy: {target} -> {r.status_code}")
        return 0
    print(f"unhealthy: {target} -> {r.status_code}", file=sys.stderr)
    return 1


def cmd_config(settings: Settings) -> int:
    _print_json(settings.masked_dump())
    return 0


# ----------------------------------------------------------------------
# Parser
# ----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="github",
        description=f"GitHub capability server v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  github capabilities
  github describe issue.list
  github invoke repo.get -a repo=octocat/hello-world
  github invoke issue.create --args-json '{"repo": "me/app", "title": "Bug"}'
  github serve --port 8000
  github health

Configuration comes from GITHUB_* environment variables or a .env file.
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=LOG_LEVELS,
        help="Override GITHUB_LOG_LEVEL",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    caps_parser = subparsers.add_parser("capabilities", help="List available capabilities")
    caps_parser.add_argument("--json", action="store_true", dest="as_json", help="Print as JSON")

    describe_parser = subparsers.add_parser("describe", help="Show the arguments of a capability")
    describe_parser.add_argument("name", help="Capability name, e.g. repo.get")

    invoke_parser = subparsers.add_parser("invoke", help="Run a capability and print its output")
    invoke_parser.add_argument("name", help="Capability name, e.g. repo.get")
    invoke_parser.add_argument(
        "-a",
        "--arg",
        action="append",
        default=[],
        dest="pairs",
        metavar="KEY=VALUE",
        help="Capability argument (repeatable)",
    )
    invoke_parser.add_argument("--args-json", default=None, help="Capability arguments as a JSON object")
    invoke_parser.add_argument("--compact", action="store_true", help="Print JSON on one line")

    serve_parser = subparsers.add_parser("serve", help="Run the REST API server")
    serve_parser.add_argument("--host", default=None, help="Bind address (default GITHUB_API_HOST)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default GITHUB_API_PORT)")
    serve_parser.add_argument("--workers", type=int, default=None, help="Worker processes (default GITHUB_API_WORKERS)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    health_parser = subparsers.add_parser("health", help="Probe a running server's /health endpoint")
    health_parser.add_argument("--url", default=None, help="Health URL (default http://127.0.0.1:$GITHUB_API_PORT/health)")

    subparsers.add_parser("config", help="Print the effective configuration")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 2

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"error: invalid configuration:\n{e}", file=sys.stderr)
        return 2
    setup_logging(log_level=args.log_level or settings.log_level, log_format=settings.log_format)

    try:
        if args.command == "capabilities":
            return cmd_capabilities(settings, as_json=args.as_json)
        if args.command == "describe":
            return cmd_describe(settings, args.name)
        if args.command == "invoke":
            try:
                cap_args = _collect_args(args.args_json, args.pairs)
            except ValueError as e:
                parser.error(str(e))
            return cmd_invoke(settings, args.name, cap_args, compact=args.compact)
        if args.command == "serve":
            return cmd_serve(
                settings,
                host=args.host,
                port=args.port,
                workers=args.workers,
                reload=args.reload,
                log_level=args.log_level,
            )
        if args.command == "health":
            return cmd_health(settings, url=args.url)
        if args.command == "config":
            return cmd_config(settings)
    except GitHubError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    parser.error(f"unknown command {args.command!r}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
