#!/usr/bin/env python
"""
Ambient Looper - Main Entry Point

Refines coarse loop points in an ambient recording, stitches an inaudible
seam and saves either a single seamless loop or an extended version that
repeats it to a target duration.
"""
import argparse
import logging
import sys
import traceback
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from audio_processor import SeamlessLooper
from fs import FS
from logging_manager import LoggingManager
from loop_tiler import MAX_PRODUCT_DURATION, MIN_PRODUCT_DURATION
from models import ExportMode, LoopPoints, ProcessResult

console = Console()


def parse_arguments(fs: FS, argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Create a seamlessly looping version of an ambient recording.",
        epilog=(
            f"Example usage: python main.py --audio {fs.sound_input_folder / 'rain.wav'} "
            "--start 2.5 --end 14 --mode extended --target 600"
        ),
    )
    parser.add_argument(
        "--audio",
        type=str,
        required=True,
        help="Input audio file, either a path or a name inside the input folder",
    )
    parser.add_argument(
        "--start",
        type=float,
        default=0.0,
        help="Coarse loop start in seconds (default: 0)",
    )
    parser.add_argument(
        "--end",
        type=float,
        default=None,
        help="Coarse loop end in seconds (default: end of the file)",
    )
    parser.add_argument(
        "--crossfade",
        type=float,
        default=0.05,
        help="Requested crossfade in seconds; adapted to the material (default: 0.05)",
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=[mode.value for mode in ExportMode],
        default=ExportMode.SINGLE.value,
        help="Export one seamless loop or an extended repetition (default: single)",
    )
    parser.add_argument(
        "--target",
        type=float,
        default=None,
        help="Target duration in seconds for extended mode",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file name inside the output folder (default: derived from the input)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log file verbosity (default: INFO)",
    )
    args = parser.parse_args(argv)
    if args.mode == ExportMode.EXTENDED.value and args.target is None:
        parser.error("--target is required with --mode extended")
    return args


def print_result(loop_points: LoopPoints, result: ProcessResult) -> None:
    optimized = result.loop_points
    table = Table(title="Loop Points")
    table.add_column("", style="cyan", no_wrap=True)
    table.add_column("Requested", justify="right", style="magenta")
    table.add_column("Optimized", justify="right", style="green")
    table.add_row("Start (s)", f"{loop_points.start:.4f}", f"{optimized.start:.4f}")
    table.add_row("End (s)", f"{loop_points.end:.4f}", f"{optimized.end:.4f}")
    table.add_row("Samples", "", f"{optimized.start_sample} - {optimized.end_sample}")
    table.add_row("Crossfade (ms)", "", f"{optimized.crossfade_duration * 1000:.1f}")
    console.print(table)
    console.print(f"[bold blue]Saved:[/bold blue] {result.audio_path} ({result.looped_audio.duration:.2f}s)")


def run(args: argparse.Namespace, fs: FS) -> ProcessResult:
    looper = SeamlessLooper(args.audio, fs)
    loop_points = LoopPoints(
        start=args.start,
        end=args.end if args.end is not None else looper.buffer.duration,
    )
    mode = ExportMode(args.mode)
    if mode is ExportMode.EXTENDED and not MIN_PRODUCT_DURATION <= args.target <= MAX_PRODUCT_DURATION:
        logging.warning(
            f"Target duration {args.target:.1f}s is outside the usual "
            f"{MIN_PRODUCT_DURATION:.0f}-{MAX_PRODUCT_DURATION:.0f}s range"
        )
        console.print(f"[bold yellow]Target duration {args.target:.1f}s is outside 1-60 minutes.[/bold yellow]")

    result = looper.process_and_save(
        mode=mode,
        target_duration_sec=args.target,
        output_file=args.output,
        loop_points=loop_points,
        crossfade_duration=args.crossfade,
    )
    print_result(loop_points, result)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.

    Sets up logging, then runs one export.

    Returns:
        Process exit status
    """
    fs = FS()
    args = parse_arguments(fs, argv)

    logging_manager = LoggingManager(fs.logs_folder / "app.log")
    logging_manager.setup(level=getattr(logging, args.log_level))

    try:
        run(args, fs)
        return 0
    except Exception as e:
        logging.error(f"Unhandled exception: {e}")
        logging.error(traceback.format_exc())
        console.print(f"[bold red]Error: {e}[/bold red]")
        return 1
    finally:
        logging_manager.shutdown()


if __name__ == "__main__":
    sys.exit(main())
