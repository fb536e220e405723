"""Command line front end for resolving and installing Node.js releases."""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from pathlib import Path

from . import __version__
from .config import load_config
from .errors import ProvisionError
from .logging_setup import configure_logging
from .plugin import NodePlugin, run_lifecycle
from .target import artifact_url, auxiliary_urls


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="node-provisioner", description="Provision a Node.js runtime")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--node-version", dest="selector", help="Exact version, 'lts' or 'latest' (default: $NODE_VERSION)"
    )
    parser.add_argument("--dest", help="Install directory (default: $NODE_INSTALL_DIR)")
    parser.add_argument("--log-file", help="Also write JSON logs to this file")
    parser.add_argument("--quiet", action="store_true", help="No console log output")

    sub = parser.add_subparsers(dest="command", required=True)

    install = sub.add_parser("install", help="Resolve, download, verify and unpack")
    install.add_argument("--no-verify", action="store_true", help="Skip SHASUMS256 verification")

    resolve = sub.add_parser("resolve", help="Resolve a selector against the release catalog")
    resolve.add_argument("selector_arg", metavar="SELECTOR", nargs="?", help="Selector to resolve")

    sub.add_parser("urls", help="Print artifact and auxiliary URLs for the target")
    sub.add_parser("status", help="Report whether the target is already installed")
    sub.add_parser("uninstall", help="Remove the installed runtime")
    return parser


def _plugin(args: argparse.Namespace) -> NodePlugin:
    cfg = load_config()
    if args.selector:
        cfg = replace(cfg, version=args.selector)
    if args.dest:
        cfg = replace(cfg, install_dir=Path(args.dest).expanduser())
    if getattr(args, "no_verify", False):
        cfg = replace(cfg, verify_checksums=False)
    return NodePlugin(cfg)


def cmd_install(plugin: NodePlugin, _args: argparse.Namespace) -> int:
    report = run_lifecycle(plugin)
    result = plugin.last_result
    _print_json({
        "completed": report.completed,
        "failed_step": report.failed_step,
        "error": str(report.error) if report.error else None,
        "runtime_dir": result.runtime_dir if result else None,
        "skipped": result.skipped if result else False,
    })
    return 0 if report.ok else 1


def cmd_resolve(plugin: NodePlugin, args: argparse.Namespace) -> int:
    entry = plugin.resolve_release(args.selector_arg)
    _print_json(entry.to_json())
    return 0


def cmd_urls(plugin: NodePlugin, _args: argparse.Namespace) -> int:
    descriptor = plugin.descriptor()
    _print_json({
        "version": descriptor.version,
        "os": descriptor.os_name,
        "arch": descriptor.arch,
        "artifact": artifact_url(descriptor, plugin.config.dist_url),
        "auxiliary": auxiliary_urls(descriptor, plugin.config.dist_url),
    })
    return 0


def cmd_status(plugin: NodePlugin, _args: argparse.Namespace) -> int:
    descriptor = plugin.descriptor()
    _print_json({
        "version": descriptor.version,
        "install_dir": plugin.config.install_dir,
        "installed": plugin.already_installed(),
    })
    return 0


def cmd_uninstall(plugin: NodePlugin, _args: argparse.Namespace) -> int:
    _print_json({"removed": plugin.uninstall()})
    return 0


_COMMANDS = {
    "install": cmd_install,
    "resolve": cmd_resolve,
    "urls": cmd_urls,
    "status": cmd_status,
    "uninstall": cmd_uninstall,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(console=not args.quiet, log_file=Path(args.log_file) if args.log_file else None)

    try:
        return _COMMANDS[args.command](_plugin(args), args)
    except ProvisionError as exc:
        _print_json({"error": type(exc).__name__, "message": str(exc)})
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
