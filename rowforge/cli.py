"""Command-line entry point."""

import argparse
import logging
import time
from pathlib import Path
from typing import Optional, Sequence

from .cohort import Cohort, CohortError, get_platform_info
from .logging_config import setup_logging
from .output import save_image
from .renderer import RenderSettings
from .scenes import cornell_box
from .timing import TimingLog
from .tonemapping import to_ldr

logger = logging.getLogger(__name__)


def samples_per_subpixel(total: int) -> int:
    """Convert a per-pixel sample count to the per-sub-pixel count (2x2 grid)."""
    if total <= 0:
        raise ValueError(f"Sample count must be positive, got {total}")
    return max(1, total // 4)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rowforge',
        description='RowForge - A distributed Monte Carlo path tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --width 256 --height 256 --samples 16
  python main.py --workers 8 --samples 400 --output cornell.ppm
  python main.py --workers 0 --output cornell.png --no-timing
        '''
    )

    parser.add_argument('--width', type=int, default=512, help='Image width (default: 512)')
    parser.add_argument('--height', type=int, default=512, help='Image height (default: 512)')
    parser.add_argument('--samples', type=int, default=4,
                        help='Samples per pixel, split over 2x2 sub-pixels (default: 4)')
    parser.add_argument('--workers', type=int, default=1,
                        help='Number of worker processes (0=auto, default: 1)')
    parser.add_argument('--output', type=str, default='image.ppm', help='Output filename')
    parser.add_argument('--log-dir', type=str, default='Data', help='Directory for timing logs')
    parser.add_argument('--tag', type=str, default='parallel', help='Run tag for the timing log name')
    parser.add_argument('--no-timing', action='store_true', help='Do not write a timing log')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', type=str, default=None, help='Also write log messages to this file')
    parser.add_argument('--info', action='store_true', help='Show platform info and exit')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    if args.info:
        info = get_platform_info()
        print("RowForge Platform Info:")
        print(f"  System: {info['system']}")
        print(f"  Machine: {info['machine']}")
        print(f"  Node: {info['node']}")
        print(f"  Python: {info['python_version']}")
        print(f"  CPU Cores: {info['cpu_count']}")
        return 0

    try:
        settings = RenderSettings(
            width=args.width,
            height=args.height,
            samples_per_subpixel=samples_per_subpixel(args.samples),
            workers=args.workers
        )
    except ValueError as exc:
        parser.error(str(exc))

    print("=" * 60)
    print("RowForge Path Tracer")
    print("=" * 60)
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_subpixel * 4} per pixel")
    print(f"  Workers: {settings.workers}")

    timing = None if args.no_timing else TimingLog(args.log_dir, args.tag)

    scene = cornell_box()
    cohort = Cohort(scene, settings)

    start_time = time.perf_counter()
    try:
        image = cohort.render()
    except CohortError as exc:
        logger.error(f"Render aborted: {exc}", exc_info=True)
        return 1

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_image(to_ldr(image, settings.gamma), output_path)

    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    if timing is not None:
        timing.record(settings.width, settings.height, settings.samples_per_subpixel * 4,
                      settings.workers, elapsed_ms)
        logger.info(f"Timing appended to {timing.path}")

    print(f"\nRender completed in {elapsed_ms / 1000:.2f} seconds")
    print(f"Saved to: {output_path}")
    return 0
