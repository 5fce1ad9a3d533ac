# cricket_collector/main.py

import argparse
import logging
import platform
import sys
import time

import distro

from cricket_collector import __version__
from cricket_collector.agent.scheduler import Scheduler
from cricket_collector.config import ConfigError, Settings, resolve

logger = logging.getLogger("cricket_collector")


def configure_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    # Keep third-party request logging out of debug output
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv=None):
    """
    Main entrypoint for the Cricket collector.
    Parses command-line arguments and starts the requested action.
    """
    parser = argparse.ArgumentParser(description="Cricket Monitor performance collector")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- 'run' command ---
    run_parser = subparsers.add_parser("run", help="Collect and submit metrics on an interval")
    run_parser.set_defaults(func=run_collector)

    # --- 'once' command ---
    once_parser = subparsers.add_parser(
        "once", help="Collect and submit a single snapshot, then exit"
    )
    once_parser.set_defaults(func=run_once)

    parser.set_defaults(func=run_collector)
    args = parser.parse_args(argv)

    try:
        settings = resolve()
    except ConfigError as e:
        configure_logging()
        logger.critical(str(e))
        sys.exit(1)

    configure_logging(settings.debug)
    log_banner(settings)

    args.settings = settings
    sys.exit(args.func(args))


def log_banner(settings: Settings):
    os_name = platform.system()
    logger.info(f"Starting Cricket Performance Collector v{__version__}")
    if os_name == "Linux":
        logger.info(f"Operating System: {os_name} ({distro.id() or 'unknown'})")
    else:
        logger.info(f"Operating System: {os_name} ({platform.release()})")
    logger.info(f"API URL: {settings.api_base_url}")
    logger.info(f"Server Name: {settings.server_name}")
    logger.info(f"Collection Interval: {settings.collect_interval} seconds")


def run_collector(args) -> int:
    """
    Starts the scheduler and keeps the main thread alive until interrupted.
    """
    scheduler = Scheduler(args.settings)
    scheduler.start()

    try:
        while True:
            time.sleep(10)
    except KeyboardInterrupt:
        logger.info("Shutdown signal received. Stopping collector...")
    finally:
        # An in-flight cycle is bounded by the request timeout
        scheduler.stop(timeout=5)
    return 0


def run_once(args) -> int:
    scheduler = Scheduler(args.settings)
    result = scheduler.run_cycle()
    return 0 if result is not None and result.ok else 1


if __name__ == "__main__":
    main()
