"""Command-line interface for autovideo."""

import logging
import argparse
import os
import sys
from pathlib import Path
from typing import Any, Dict

import coloredlogs
from dotenv import load_dotenv

from core.bus.message_bus import MessageBus
from core.config.config_loader import ConfigLoader, ConfigurationError
from core.interfaces.events import MessageType
from core.interfaces.source import SourceError
from core.models.caps import CapsParseError
from core.models.config import AutoVideoConfig, LoggingConfig
from core.models.state import State, StateChangeReturn
from core.registry.plugin_registry import ProviderRegistry
from modules.detect.auto_source import AutoVideoSource
from modules.detect.selector import SourceSelector

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure the root logger.

    Args:
        config: Logging configuration
        verbose: Force DEBUG level
    """
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper(), logging.INFO)

    if config.console_colors:
        coloredlogs.install(level=level, fmt=LOG_FORMAT)
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    if config.log_to_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def load_config(args) -> Dict[str, Any]:
    """Load configuration from --config, AUTOVIDEO_CONFIG or defaults.

    Raises:
        ConfigurationError: If the config file is missing or invalid
    """
    config_loader = ConfigLoader()
    config_path = args.config or os.environ.get("AUTOVIDEO_CONFIG")
    if config_path:
        config = config_loader.load_from_file(config_path)
    else:
        config = config_loader.load_defaults()

    if args.filter_caps is not None:
        config["detect"]["filter_caps"] = args.filter_caps or None
    return config


def register_plugins(settings: AutoVideoConfig) -> ProviderRegistry:
    """Register the auto source and the built-in providers.

    The plugin modules register on import, so they are imported only once
    logging is configured. The built-in providers are then registered again
    with the configured source settings and rank overrides.
    """
    # Import plugins to register providers
    import modules.detect.plugin  # noqa: F401
    from modules.sources import plugin as sources_plugin

    return sources_plugin.register(settings.sources, settings.rank_overrides)


def create_auto_source(settings: AutoVideoConfig) -> AutoVideoSource:
    """Create an auto source from typed configuration."""
    return AutoVideoSource(
        settings.detect.name,
        config={"filter-caps": settings.detect.caps},
        classes=settings.detect.classes,
        min_rank=settings.detect.min_rank
    )


def _print_messages(bus: MessageBus) -> None:
    for message in bus.drain(MessageType.ERROR) + bus.drain(MessageType.WARNING):
        print(f"  {message}")


def cmd_inspect(args, settings: AutoVideoConfig) -> int:
    """List registered providers and the candidates detection would try.

    Args:
        args: Parsed command-line arguments
        settings: Typed configuration
    """
    registry = ProviderRegistry()

    print("Registered providers:")
    for descriptor in sorted(registry.list_sources(), key=lambda d: d.name):
        print(f"  {descriptor.name:<16} {descriptor.klass:<14} rank {descriptor.rank:<4} {descriptor.description}")

    selector = SourceSelector(
        settings.detect.name,
        filter_caps=settings.detect.caps,
        classes=settings.detect.classes,
        min_rank=settings.detect.min_rank
    )
    candidates = selector.candidates()
    print(f"\nCandidates (filter caps: {settings.detect.caps}):")
    if not candidates:
        print("  none")
    for i, descriptor in enumerate(candidates, start=1):
        print(f"  {i}. {descriptor.name} (rank {descriptor.rank})")
    return 0


def cmd_detect(args, settings: AutoVideoConfig) -> int:
    """Run detection once and report the chosen source.

    Args:
        args: Parsed command-line arguments
        settings: Typed configuration
    """
    source = create_auto_source(settings)
    bus = MessageBus("autovideo-cli")
    source.set_bus(bus)

    try:
        if source.set_state(State.READY) == StateChangeReturn.FAILURE:
            print("Detection failed:")
            _print_messages(bus)
            return 1

        outcome = source.last_outcome
        print(f"Chosen source: {source.kid.name}")
        print(f"Tried: {', '.join(outcome.tried) or 'nothing'}")
        print(f"Fallback: {'yes' if outcome.used_fallback else 'no'}")
        print(f"Caps: {source.get_caps()}")
        if outcome.diagnostic is not None:
            print(f"Diagnostic: {outcome.diagnostic}")
        return 0
    finally:
        source.release()


def cmd_grab(args, settings: AutoVideoConfig) -> int:
    """Detect a source, pull one frame and save it.

    Args:
        args: Parsed command-line arguments
        settings: Typed configuration
    """
    source = create_auto_source(settings)
    bus = MessageBus("autovideo-cli")
    source.set_bus(bus)

    try:
        if source.set_state(State.PLAYING) == StateChangeReturn.FAILURE:
            print("Could not start a video source:")
            _print_messages(bus)
            return 1

        frame = source.src_port.pull()
        output = Path(args.output)
        if frame.image is not None:
            frame.image.save(output)
        else:
            output.write_bytes(frame.data)
        print(f"Saved frame {frame.sequence} from {source.kid.name} ({frame.caps}) to {output}")
        return 0
    except SourceError as e:
        logger.error(f"Failed to grab frame: {e}")
        return 1
    finally:
        source.release()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="autovideo - Automatic video source detection",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Global options
    parser.add_argument(
        "--config",
        help="Path to configuration file (default: $AUTOVIDEO_CONFIG)"
    )
    parser.add_argument(
        "--filter-caps",
        help="Caps candidates must support (empty string = no filter)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    # Subcommands
    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command"
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="List providers and detection candidates"
    )
    inspect_parser.set_defaults(func=cmd_inspect)

    detect_parser = subparsers.add_parser(
        "detect",
        help="Detect the best video source"
    )
    detect_parser.set_defaults(func=cmd_detect)

    grab_parser = subparsers.add_parser(
        "grab",
        help="Grab one frame from the detected source"
    )
    grab_parser.add_argument(
        "-o", "--output",
        default="frame.png",
        help="Output file (default: frame.png)"
    )
    grab_parser.set_defaults(func=cmd_grab)

    args = parser.parse_args()

    if not hasattr(args, 'func'):
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    # Default logging until the configured settings are known
    setup_logging(LoggingConfig(), args.verbose)

    try:
        settings = AutoVideoConfig.from_dict(load_config(args))
    except (ConfigurationError, CapsParseError, ValueError, TypeError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(settings.logging, args.verbose)
    register_plugins(settings)
    sys.exit(args.func(args, settings))


if __name__ == "__main__":
    main()
