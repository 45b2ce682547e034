"""Composition root and command-line entry point.

Background schedulers (the evening task around 18:00 and the observation
check after 08:00) call the same entry points as interactive use:

    python -m src.runner predict --date 2026-10-20 --signal signal.json
    python -m src.runner verify --date 2026-10-20 --observed observed.json
    python -m src.runner history --limit 14 --summary
    python -m src.runner purge
"""

import argparse
import sys
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path

from pydantic import ValidationError

from src.lifecycle.clock import Clock, SystemClock
from src.lifecycle.state_manager import PredictionStateManager, WeatherSignalProvider
from src.predictor.analyzer import KatabaticAnalyzer
from src.shared.config.logging import configure_logging, get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.db import DatabaseManager, get_repositories
from src.shared.errors import KatabaticError, SignalUnavailableError
from src.shared.models.weather import ObservedSignal, WeatherSignal
from src.tracking.tracker import PredictionTracker

logger = get_logger(__name__)


class FileSignalProvider:
    """Weather signal provider backed by a JSON document on disk."""

    def __init__(self, path: Path | None) -> None:
        self.path = path

    def fetch_signal(self, target_date: date) -> WeatherSignal:
        """Load the signal document.

        Raises:
            SignalUnavailableError: If no file is configured or it cannot be parsed
        """
        details = {"target_date": target_date.isoformat(), "path": str(self.path)}
        if self.path is None:
            raise SignalUnavailableError("No weather signal file configured", details=details)
        try:
            return WeatherSignal.model_validate_json(self.path.read_text())
        except OSError as e:
            raise SignalUnavailableError(f"Cannot read weather signal: {e}", details=details) from e
        except ValidationError as e:
            raise SignalUnavailableError(f"Invalid weather signal: {e}", details=details) from e


@dataclass
class Services:
    """Long-lived components wired over one database."""

    settings: Settings
    db: DatabaseManager
    clock: Clock
    analyzer: KatabaticAnalyzer
    tracker: PredictionTracker
    state_manager: PredictionStateManager


def build_services(
    settings: Settings | None = None,
    db: DatabaseManager | None = None,
    signal_provider: WeatherSignalProvider | None = None,
    clock: Clock | None = None,
) -> Services:
    """Construct the analyzer, tracker and state manager once.

    Args:
        settings: Settings (global settings if None)
        db: Database manager (created from settings if None)
        signal_provider: Weather input source (no-file provider if None)
        clock: Time source (system clock in the reporting timezone if None)

    Returns:
        Wired services; the database schema is created if missing
    """
    settings = settings or get_settings()
    db = db or DatabaseManager(settings.database_url)
    db.create_schema()
    clock = clock or SystemClock(settings.timezone)

    lifecycle_repo, verification_repo, log_repo = get_repositories(db)
    analyzer = KatabaticAnalyzer(settings=settings)
    tracker = PredictionTracker(lifecycle_repo, verification_repo, log_repo, clock, settings)
    state_manager = PredictionStateManager(
        lifecycle_repo,
        analyzer,
        signal_provider or FileSignalProvider(None),
        clock,
        settings=settings,
        recorder=tracker,
    )
    return Services(
        settings=settings,
        db=db,
        clock=clock,
        analyzer=analyzer,
        tracker=tracker,
        state_manager=state_manager,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Katabatic dawn patrol predictor")
    commands = parser.add_subparsers(dest="command", required=True)

    predict = commands.add_parser("predict", help="Serve the prediction for a date")
    predict.add_argument("--date", type=date.fromisoformat, help="Target date (default: tomorrow)")
    predict.add_argument("--signal", type=Path, help="WeatherSignal JSON file")

    state = commands.add_parser("state", help="Show the lifecycle record for a date")
    state.add_argument("--date", type=date.fromisoformat, help="Target date (default: tomorrow)")

    verify = commands.add_parser("verify", help="Verify a date against observations")
    verify.add_argument("--date", type=date.fromisoformat, help="Target date (default: today)")
    verify.add_argument("--observed", type=Path, required=True, help="ObservedSignal JSON file")

    history = commands.add_parser("history", help="Show recent verification records")
    history.add_argument("--limit", type=int, default=30)
    history.add_argument("--summary", action="store_true", help="Print the accuracy summary")

    purge = commands.add_parser("purge", help="Delete records beyond retention")
    purge.add_argument("--days", type=int, help="Retention override in days")

    return parser


def run(args: argparse.Namespace, services: Services) -> int:
    """Execute a parsed command against wired services.

    Returns:
        Process exit code
    """
    today = services.clock.now().date()

    if args.command == "predict":
        prediction = services.state_manager.request_prediction(args.date or today + timedelta(days=1))
        print(prediction.model_dump_json(indent=2))
    elif args.command == "state":
        record = services.state_manager.get_current_state(args.date or today + timedelta(days=1))
        print(record.model_dump_json(indent=2))
    elif args.command == "verify":
        observed = ObservedSignal.model_validate_json(args.observed.read_text())
        record = services.tracker.verify(args.date or today, observed)
        if record is None:
            print("No locked prediction to verify.", file=sys.stderr)
            return 2
        print(record.model_dump_json(indent=2))
    elif args.command == "history":
        if args.summary:
            print(services.tracker.get_accuracy_summary(args.limit).model_dump_json(indent=2))
        else:
            for record in services.tracker.get_accuracy_history(args.limit):
                print(record.model_dump_json())
    elif args.command == "purge":
        deleted = services.state_manager.purge_stale(args.days)
        deleted += services.tracker.purge_stale(args.days)
        print(f"Purged {deleted} record(s).")
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging()

    signal_path = getattr(args, "signal", None)
    services = build_services(signal_provider=FileSignalProvider(signal_path))
    try:
        return run(args, services)
    except (KatabaticError, OSError, ValidationError) as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return 1
    finally:
        services.db.close()


if __name__ == "__main__":
    sys.exit(main())
