"""
Contour - pitch contour extraction CLI

Invoked as 'contour' after installation.

Example usage:
    # Contour of a native-speaker reference
    contour path/to/reference.wav

    # Only 40s-70s of a long recording, exported as JSON
    contour --start 40 --end 70 --output contour.json path/to/lecture.mp3

    # Reference plus the learner's own recording
    contour --recording my_take.wav path/to/reference.wav
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional

from contour.core.display import fit_pitch_axis
from contour.core.manager import PitchDataManager, create_pitch_manager
from contour.core.models import PitchSeries
from contour.core.result_writer import create_result_writer
from contour.utils.config import load_config
from contour.utils.errors import ContourError
from contour.utils.logging import setup_logging


def print_summary(label: str, series: PitchSeries, duration: Optional[float] = None,
                  progressive: Optional[bool] = None) -> None:
    """Print a short description of one contour to the console."""
    print("\n" + "=" * 60)
    print(f"SOURCE: {label}")
    print("=" * 60)
    if duration is not None:
        print(f"Duration: {duration:.2f}s")
    if progressive is not None:
        print(f"Mode: {'progressive' if progressive else 'whole-file'}")
    print(f"Frames: {len(series)}")
    print(f"Voiced: {series.voiced_ratio:.1%}")

    voiced = series.voiced_values()
    if voiced:
        print(f"Pitch: {min(voiced):.1f}-{max(voiced):.1f} Hz "
              f"(mean {sum(voiced) / len(voiced):.1f} Hz)")
    axis = fit_pitch_axis(series)
    if axis:
        print(f"Axis Range: {axis[0]:.0f}-{axis[1]:.0f} Hz")
    print("-" * 60)


async def collect_contour(
    manager: PitchDataManager,
    start: float,
    end: float,
    view_duration: float
) -> PitchSeries:
    """
    Walk [start, end] one view at a time, the way a scrolling chart would.

    Each view is loaded and queried before moving on, so long sources
    never hold more than the cache window in memory.
    """
    if not manager.is_in_progressive_mode():
        return manager.get_pitch_data_for_time_range(start, end)

    result = PitchSeries()
    view_start = start
    while view_start < end:
        view_end = min(view_start + view_duration, end)
        await manager.load_segments_for_time_range(view_start, view_end)
        view = manager.get_pitch_data_for_time_range(view_start, view_end)

        # Views share their boundary instant; skip frames already taken
        if result.times and view.times:
            skip = 0
            while skip < len(view.times) and view.times[skip] <= result.times[-1]:
                skip += 1
            view = PitchSeries(view.times[skip:], view.pitches[skip:])
        result.extend(view)
        view_start = view_end

    return result


async def run(args: argparse.Namespace, config: dict) -> int:
    manager = create_pitch_manager(config)
    try:
        await manager.initialize(args.audio_file)

        duration = manager.get_total_duration()
        start = max(0.0, args.start)
        end = duration if args.end is None else min(args.end, duration)
        if end < start:
            print(f"Error: --end ({end}) is before --start ({start})", file=sys.stderr)
            return 1

        results: Dict[str, PitchSeries] = {}
        results[str(args.audio_file)] = await collect_contour(
            manager, start, end, manager.config.segment_duration
        )
        print_summary(
            args.audio_file.name,
            results[str(args.audio_file)],
            duration=duration,
            progressive=manager.is_in_progressive_mode()
        )

        if args.recording is not None:
            recording = await manager.extract_recording(args.recording)
            results[str(args.recording)] = recording
            print_summary(args.recording.name, recording)

        if args.output:
            writer = create_result_writer(args.format)
            writer.write(results, args.output)
            print(f"\nResults saved to: {args.output}")

        return 0

    except ContourError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        manager.shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contour",
        description="Extract pitch contours from speech recordings"
    )
    parser.add_argument(
        "audio_file",
        type=Path,
        help="Reference audio file to analyze"
    )
    parser.add_argument(
        "--start",
        type=float,
        default=0.0,
        help="Start of the analyzed window in seconds (default: 0)"
    )
    parser.add_argument(
        "--end",
        type=float,
        default=None,
        help="End of the analyzed window in seconds (default: end of file)"
    )
    parser.add_argument(
        "--recording",
        type=Path,
        default=None,
        help="Learner recording to analyze alongside the reference"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the contour(s) to this file"
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default=None,
        help="Output format (default: from --output suffix, else text)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(str(args.config) if args.config else None)
    except ContourError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log_config = config.get("logging", {})
    setup_logging(
        level="DEBUG" if args.verbose else log_config.get("level", "INFO"),
        log_format=log_config.get("format", "text"),
        colored=True,
        console_enabled=True
    )

    if args.format is None:
        args.format = "json" if args.output and args.output.suffix.lower() == ".json" else "text"

    return asyncio.run(run(args, config))


if __name__ == "__main__":
    sys.exit(main())
