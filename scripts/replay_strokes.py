#!/usr/bin/env python3
"""Replay a scripted stroke session and export both grid views.

Drives an AmslerGrid from a stroke_script.v1 event file (pointer
down/move/up plus integrate/reset commands), then renders the distorted
and undistorted (reflected) views and dumps the stored warps for
inspection.

Usage:
    python scripts/replay_strokes.py --script configs/strokes/demo_wavy.yaml \\
                                     --output outputs/demo_wavy
    python scripts/replay_strokes.py --config configs/amsler_grid_v1.yaml \\
                                     --script session.yaml --output out/ --divisions 10 --log_level DEBUG

Outputs:
    <output_dir>/
        grid_distorted.png     warps as traced
        grid_undistorted.png   warps reflected about their baselines
        distortions.yaml       every stored warp, shadowed entries flagged

The dump is write-only; nothing reads it back into a grid.
"""

import argparse
import logging
import sys
from typing import Any, Dict, Optional

from src.amsler_grid.grid import AmslerGrid
from src.amsler_grid.replay import apply_events
from src.grid_renderer import raster
from src.utils import fs, logging_config, validators

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "configs/amsler_grid_v1.yaml"


def log_distortions(lines) -> None:
    """Default on_distortion_change handler: one summary line per change."""
    keys = ', '.join(f"{line.axis.value[0]}{line.index}" for line in lines)
    logger.info(f"Distortions ({len(lines)}): {keys or 'none'}")


def replay_main(
    script_path: str,
    output_dir: str,
    config_path: str = DEFAULT_CONFIG,
    *,
    config: Optional[validators.AmslerConfigV1] = None,
    divisions: Optional[int] = None,
) -> Dict[str, Any]:
    """Replay ``script_path`` on a fresh grid and write outputs.

    Parameters
    ----------
    script_path : str
        stroke_script.v1 YAML file
    output_dir : str
        Directory for frames and the inspection dump (created if missing)
    config_path : str
        amsler_grid.v1 YAML file, read only when ``config`` is None
    config : AmslerConfigV1, optional
        Already loaded config
    divisions : int, optional
        Override for the config's grid divisions

    Returns
    -------
    Dict[str, Any]
        - distorted_path, undistorted_path, distortions_path: str
        - num_events: int
        - num_distortions: int (stored entries, shadowed ones included)

    Raises
    ------
    FileNotFoundError
        Missing config or script
    ValueError
        Invalid config or script (ConfigError included)
    """
    cfg = config if config is not None else validators.load_grid_config(config_path)
    script = validators.load_stroke_script(script_path)

    grid = AmslerGrid.from_settings(cfg, on_distortion_change=log_distortions,
                                    source=str(config_path), divisions=divisions)
    num_events = apply_events(grid, script.events)

    out = fs.ensure_dir(output_dir)
    distorted_path = out / "grid_distorted.png"
    undistorted_path = out / "grid_undistorted.png"
    distortions_path = out / "distortions.yaml"

    antialias = cfg.style.antialias
    raster.save_frame(grid.render(inverse=False), distorted_path, antialias=antialias)
    raster.save_frame(grid.render(inverse=True), undistorted_path, antialias=antialias)

    fs.atomic_yaml_dump({
        'grid': {
            'width': grid.config.width,
            'height': grid.config.height,
            'divisions': grid.config.divisions,
        },
        'distortions': grid.store.to_records(),
    }, distortions_path)

    return {
        'distorted_path': str(distorted_path),
        'undistorted_path': str(undistorted_path),
        'distortions_path': str(distortions_path),
        'num_events': num_events,
        'num_distortions': len(grid.distortions),
    }


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replay a scripted Amsler grid session",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--script', type=str, required=True,
                        help='stroke_script.v1 YAML file')
    parser.add_argument('--output', type=str, required=True,
                        help='Output directory')
    parser.add_argument('--config', type=str, default=DEFAULT_CONFIG,
                        help=f'Grid config (default: {DEFAULT_CONFIG})')
    parser.add_argument('--divisions', type=int, default=None,
                        help='Override the config grid divisions')
    parser.add_argument('--log_level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Override the config log level')
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)

    try:
        cfg = validators.load_grid_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        # No usable logging section; fall back to console defaults
        logging_config.setup_logging(log_level=args.log_level or "INFO",
                                     context={'app': 'replay'})
        logger.error(str(e))
        return 1

    logging_config.setup_logging(
        log_level=args.log_level or cfg.logging.log_level,
        log_file=cfg.logging.log_file,
        json=cfg.logging.json_format,
        color=cfg.logging.color,
        context={'app': 'replay'},
    )

    try:
        result = replay_main(args.script, args.output, config_path=args.config,
                             config=cfg, divisions=args.divisions)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    print(f"Replayed {result['num_events']} events, "
          f"{result['num_distortions']} warps stored → {args.output}")
    return 0


if __name__ == "__main__":
    exit_code = main()
    logging_config.shutdown()
    sys.exit(exit_code)
