"""Command-line entry point for retrovoid.

This module provides:
- Command-line argument parsing
- Application initialization and dependency injection
- One handler per subcommand (scan, platforms, info, launch, enrich)
"""

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog

from retrovoid.models import AppConfig, ScanPath
from retrovoid.services.catalog import CatalogStore
from retrovoid.services.config import ConfigurationService
from retrovoid.services.errors import (
    AppError,
    CatalogUnavailableError,
    ConfigurationError,
    get_error_service,
)
from retrovoid.services.http_client import HttpClientService
from retrovoid.services.igdb import IgdbClient
from retrovoid.services.launcher import GameLauncherService
from retrovoid.services.logging import setup_logging
from retrovoid.services.metadata import MetadataService
from retrovoid.services.scanner import LibraryScannerService


log = structlog.stdlib.get_logger()

VERSION = "0.1.0"


class ApplicationContext:
    """Container for application services and state.

    Services are created on first use, so a command only opens what it needs.
    """

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize the application context.

        Args:
            config_path: Path to configuration file
        """
        self._config_path: Path | None = config_path

        # Services (initialized lazily)
        self._config_service: ConfigurationService | None = None
        self._catalog: CatalogStore | None = None
        self._scanner: LibraryScannerService | None = None
        self._launcher: GameLauncherService | None = None

        self._config: AppConfig | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def catalog(self) -> CatalogStore:
        if self._catalog is None:
            self._catalog = CatalogStore(self.config.catalog_path)
        return self._catalog

    @property
    def scanner(self) -> LibraryScannerService:
        if self._scanner is None:
            self._scanner = LibraryScannerService(
                self.catalog,
                default_playlist_platform=self.config.default_playlist_platform,
            )
        return self._scanner

    @property
    def launcher(self) -> GameLauncherService:
        if self._launcher is None:
            self._launcher = GameLauncherService(self.catalog)
        return self._launcher

    def create_metadata_service(self, http_client: HttpClientService) -> MetadataService:
        """Build the metadata service around an open HTTP client.

        Raises:
            ConfigurationError: If IGDB credentials are not configured
        """
        client_id = self.config.igdb_client_id
        client_secret = self.config.igdb_client_secret
        if not (client_id and client_secret):
            raise ConfigurationError(
                "IGDB credentials are not configured.",
                setting="igdb_client_id",
                expected="IGDB_CLIENT_ID and IGDB_CLIENT_SECRET, or both keys in the config file",
            )
        return MetadataService(self.catalog, IgdbClient(http_client, client_id, client_secret))


def parse_scan_path(value: str) -> ScanPath:
    """Parse ``PATH`` or ``PATH=PLATFORM`` into a scan root.

    The split happens at the last ``=`` so paths containing ``=`` still work
    when a platform is given.
    """
    path, sep, platform = value.rpartition("=")
    if not sep or not path or not platform:
        return ScanPath(path=value)
    return ScanPath(path=path, platform_override=platform)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retrovoid",
        description="Scan ROM folders into a game catalog and launch them with emulators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  retrovoid scan ~/roms                     Scan a folder, detecting platforms
  retrovoid scan ~/roms/psx=ps1 ~/roms/md   Pin the first folder to PlayStation
  retrovoid info "~/roms/Chrono Trigger (USA).sfc"
        """,
    )

    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/retrovoid/config.json)",
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level (default: from config, else INFO)",
    )
    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: console only)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan folders and import new games")
    _ = scan.add_argument(
        "paths",
        nargs="+",
        type=parse_scan_path,
        metavar="PATH[=PLATFORM]",
        help="Folder to scan, optionally pinned to a platform id",
    )

    _ = subparsers.add_parser("platforms", help="List platforms and the extensions they claim")

    info = subparsers.add_parser("info", help="Show the title and platform detected for one file")
    _ = info.add_argument("path", type=Path)

    launch = subparsers.add_parser("launch", help="Launch a game and record its play time until the emulator exits")
    _ = launch.add_argument("game_id")

    enrich = subparsers.add_parser("enrich", help="Fill in game metadata from IGDB")
    _ = enrich.add_argument(
        "game_ids",
        nargs="*",
        metavar="GAME_ID",
        help="Games to enrich (default: every game without a description)",
    )

    return parser


def cmd_scan(context: ApplicationContext, paths: list[ScanPath]) -> int:
    result = context.scanner.scan_library(paths)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_platforms(context: ApplicationContext) -> int:
    for platform in context.catalog.get_all_platforms():
        extensions = " ".join(platform.file_extensions) or "-"
        print(f"{platform.id:<14} {platform.display_name:<28} {extensions}")
    return 0


def cmd_info(context: ApplicationContext, path: Path) -> int:
    info = context.scanner.get_rom_info(path)
    if info is None:
        print(f"Not a recognized ROM: {path}", file=sys.stderr)
        return 1

    title, platform_id = info
    print(json.dumps({"title": title, "platformId": platform_id}, ensure_ascii=False))
    return 0


def cmd_launch(context: ApplicationContext, game_id: str) -> int:
    result = context.launcher.launch_game(game_id)
    if not result.success:
        print(f"Launch failed: {result.error}", file=sys.stderr)
        return 1

    print(f"Started process {result.pid}", flush=True)

    # The session lives in this process, so stay until the emulator exits
    exit_code = context.launcher.wait_for_game(game_id)
    print(f"Emulator exited with code {exit_code}")
    return 0


async def cmd_enrich(context: ApplicationContext, game_ids: list[str]) -> int:
    async with HttpClientService(rate_limit_delay=context.config.request_delay) as http_client:
        service = context.create_metadata_service(http_client)
        result = await service.scrape_library_metadata(game_ids or None)

    print(json.dumps(
        {
            "total": result.total,
            "successful": result.successful,
            "failed": result.failed,
            "errors": result.errors,
        },
        indent=2,
        ensure_ascii=False,
    ))
    return 0 if result.failed == 0 else 1


def run_command(context: ApplicationContext, args: argparse.Namespace) -> int:
    """Dispatch a parsed command line to its handler.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if args.command == "scan":
        return cmd_scan(context, args.paths)
    if args.command == "platforms":
        return cmd_platforms(context)
    if args.command == "info":
        return cmd_info(context, args.path)
    if args.command == "launch":
        return cmd_launch(context, args.game_id)
    if args.command == "enrich":
        return asyncio.run(cmd_enrich(context, args.game_ids))
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    context = ApplicationContext(config_path=args.config)

    # Configure before the config file is read so its warnings are captured,
    # then again once the configured level is known
    log_level = args.log_level or "INFO"
    _ = setup_logging(log_level=log_level, log_dir=args.log_dir)
    if args.log_level is None and context.config.log_level != log_level:
        log_level = context.config.log_level
        _ = setup_logging(log_level=log_level, log_dir=args.log_dir)

    log.info("Starting retrovoid", version=VERSION, command=args.command, log_level=log_level)

    error_service = get_error_service()
    try:
        exit_code = run_command(context, args)

    except KeyboardInterrupt:
        log.info("Interrupted by user")
        exit_code = 130  # Standard exit code for SIGINT

    except CatalogUnavailableError as e:
        friendly = error_service.handle_error(e, operation=args.command, component="catalog")
        print(error_service.create_user_message(friendly), file=sys.stderr)
        exit_code = 1

    except AppError as e:
        friendly = error_service.handle_error(e, operation=args.command, component="cli")
        print(error_service.create_user_message(friendly), file=sys.stderr)
        exit_code = 1

    log.info("Exiting", exit_code=exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
