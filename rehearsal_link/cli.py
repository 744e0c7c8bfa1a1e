"""
Rehearsal Link command line.

Usage:
    rehearsal-link analyze take1.wav
    rehearsal-link analyze take1.wav --json --normalize rms
    rehearsal-link export take1.wav talk.wav --type conversation
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from tqdm import tqdm

from .common.logging import (
    setup_logging,
    suppress_audio_warnings,
    format_time_range,
    format_duration,
    format_percent,
)
from .core.audio import AudioLoader, NORMALIZATION_METHODS, SoundFilePCMSource, normalize_source
from .core.config import Config, get_settings
from .core.errors import RehearsalLinkError
from .core.models import SegmentType
from .modules.analysis import AnalysisSession, AnalysisStatus
from .modules.segments import export_segments_from_config, select_export_segments

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 2


class StageProgress:
    """tqdm bar fed by the pipeline's (stage, progress, message) callback."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._bar: Optional[tqdm] = None
        self._stage: Optional[str] = None

    def __call__(self, stage: str, progress: float, message: str = "") -> None:
        if not self.enabled:
            return
        if stage != self._stage:
            self.close()
            self._stage = stage
            self._bar = tqdm(total=100, desc=message or stage, unit="%", leave=False)
        self._bar.n = min(100, int(progress * 100))
        self._bar.refresh()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rehearsal-link',
        description='Split rehearsal recordings into performance, conversation and silence',
    )
    parser.add_argument('--config', type=str, default=None,
                        help='YAML file overriding the default configuration')
    parser.add_argument('--log-level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: LOG_LEVEL or INFO)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    analyze = subparsers.add_parser('analyze', help='Print the segment timeline')
    _add_analysis_arguments(analyze)
    analyze.add_argument('--json', action='store_true',
                         help='Print segments, waveform and summary as JSON')

    export = subparsers.add_parser('export', help='Write selected segments to an audio file')
    _add_analysis_arguments(export)
    export.add_argument('output', type=str, help='Output audio file')
    export.add_argument('--type', dest='types', action='append',
                        choices=[t.value for t in SegmentType],
                        help='Segment type to export (repeatable; default: all)')

    return parser


def _add_analysis_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('audio', type=str, help='Audio file to analyze')
    parser.add_argument('--normalize', choices=NORMALIZATION_METHODS, default=None,
                        help='Normalize loudness before analysis')
    parser.add_argument('--target-db', type=float, default=None,
                        help='Normalization target in dBFS')
    parser.add_argument('--min-duration', type=float, default=None,
                        help='Minimum segment duration in seconds')
    parser.add_argument('--waveform-samples', type=int, default=None,
                        help='Number of waveform (min, max) pairs')
    parser.add_argument('--no-progress', action='store_true',
                        help='Disable progress bars')


def load_config(args: argparse.Namespace) -> Config:
    """Config from --config (or REHEARSAL_LINK_CONFIG) plus CLI overrides."""
    config = Config(args.config or get_settings().config_path)
    if args.min_duration is not None:
        config.set('smoothing.min_duration', args.min_duration)
    if args.waveform_samples is not None:
        config.set('waveform.target_sample_count', args.waveform_samples)
    return config


def run_analysis(args: argparse.Namespace, config: Config):
    """Open, optionally normalize and analyze the input. Returns (source, outcome, segments)."""
    source = AudioLoader.from_config(config).open(args.audio)

    if args.normalize:
        normalized = normalize_source(
            source,
            method=args.normalize,
            target_db=args.target_db,
            max_gain=config.get('normalization.max_gain', 1000.0),
        )
        if isinstance(source, SoundFilePCMSource):
            source.close()
        source = normalized

    progress = StageProgress(enabled=not args.no_progress)
    try:
        with AnalysisSession.from_config(config, max_workers=get_settings().analysis_workers) as session:
            outcome = session.analyze(source, progress_callback=progress)
            segments = session.store.segments
    finally:
        progress.close()

    return source, outcome, segments


def print_timeline(snapshot, segments) -> None:
    print(f"{snapshot.source_name}  ({format_duration(snapshot.duration_sec)})")
    print("=" * 50)
    for segment in segments:
        print(
            f"{format_time_range(segment.start_time, segment.end_time)}  "
            f"{segment.type.display_name:<13} {format_duration(segment.duration)}"
        )

    print()
    total = snapshot.duration_sec or 1.0
    for type_name, seconds in snapshot.type_durations().items():
        print(f"{type_name:<13} {format_duration(seconds):>10}  {format_percent(seconds / total)}")


def cmd_analyze(args: argparse.Namespace, config: Config) -> int:
    source, outcome, segments = run_analysis(args, config)
    try:
        code = _check_outcome(outcome)
        if code != EXIT_OK:
            return code

        snapshot = outcome.snapshot.with_segments(segments)
        if args.json:
            print(snapshot.to_json())
        else:
            print_timeline(snapshot, segments)
        return EXIT_OK
    finally:
        if isinstance(source, SoundFilePCMSource):
            source.close()


def cmd_export(args: argparse.Namespace, config: Config) -> int:
    source, outcome, segments = run_analysis(args, config)
    try:
        code = _check_outcome(outcome)
        if code != EXIT_OK:
            return code

        selected = select_export_segments(segments, args.types)
        path = export_segments_from_config(source, segments, args.output, config, types=args.types)
        print(f"Exported {len(selected)} segments to {path}")
        return EXIT_OK
    finally:
        if isinstance(source, SoundFilePCMSource):
            source.close()


def configure_logging(args: argparse.Namespace, config: Config) -> None:
    """CLI flag, then environment (LOG_*), then the logging config section."""
    settings = get_settings()
    level = args.log_level
    if level is None and getattr(args, 'json', False):
        level = 'WARNING'
    if level is None and 'LOG_LEVEL' not in os.environ:
        level = config.get('logging.level')

    setup_logging(
        level=level,
        log_file=settings.log_file or config.get('logging.log_file'),
        json_format=settings.log_json or bool(config.get('logging.json', False)),
    )


def _check_outcome(outcome) -> int:
    if outcome is None or outcome.status == AnalysisStatus.CANCELLED:
        print("Analysis cancelled", file=sys.stderr)
        return EXIT_CANCELLED
    if outcome.status == AnalysisStatus.FAILED:
        print(f"Analysis failed: {outcome.error_message}", file=sys.stderr)
        return EXIT_FAILED
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(Path.cwd() / ".env")

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except RehearsalLinkError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILED

    configure_logging(args, config)
    suppress_audio_warnings()

    try:
        if args.command == 'analyze':
            return cmd_analyze(args, config)
        return cmd_export(args, config)
    except RehearsalLinkError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        return EXIT_CANCELLED


if __name__ == '__main__':
    sys.exit(main())
