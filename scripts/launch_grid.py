#!/usr/bin/env python3
"""Interactive Amsler grid in an OpenCV window.

Draw with the left mouse button where grid lines look bent, then press
``n`` to integrate the stroke into the nearest grid line.

Keys:
    n        Next: integrate the current (or last) stroke
    r        Reset: clear all strokes and warps
    i        Toggle distorted / undistorted view
    s        Save the current view as PNG under --output
    q, ESC   Quit

Usage:
    python scripts/launch_grid.py
    python scripts/launch_grid.py --config configs/amsler_grid_v1.yaml --output outputs/session
"""

import argparse
import logging
import sys
import time
from pathlib import Path

import cv2

from src.amsler_grid.grid import AmslerGrid, ConfigError
from src.grid_renderer import raster
from src.utils import logging_config, validators

logger = logging.getLogger(__name__)

WINDOW = "Amsler Grid"
KEY_ESC = 27


class GridWindow:
    """Binds an AmslerGrid to an OpenCV window and redraws on demand."""

    def __init__(self, grid: AmslerGrid, output_dir: Path, antialias: bool = True):
        self.grid = grid
        self.output_dir = output_dir
        self.antialias = antialias
        self.inverse = grid.inverse
        self.dirty = True

    def on_mouse(self, event, x, y, flags, param) -> None:
        if event == cv2.EVENT_LBUTTONDOWN:
            self.grid.pointer_down(x, y)
        elif event == cv2.EVENT_MOUSEMOVE:
            if not self.grid.drawing:
                return
            self.grid.pointer_move(x, y)
        elif event == cv2.EVENT_LBUTTONUP:
            self.grid.pointer_up()
        else:
            return
        self.dirty = True

    def redraw(self) -> None:
        canvas = raster.draw_frame(self.grid.render(inverse=self.inverse),
                                   antialias=self.antialias)
        cv2.imshow(WINDOW, cv2.cvtColor(canvas, cv2.COLOR_RGB2BGR))
        self.dirty = False

    def save(self) -> None:
        view = "undistorted" if self.inverse else "distorted"
        path = self.output_dir / f"grid_{view}_{time.strftime('%Y%m%d-%H%M%S')}.png"
        raster.save_frame(self.grid.render(inverse=self.inverse), path,
                          antialias=self.antialias)

    def handle_key(self, key: int) -> bool:
        """Apply a key press; returns False when the window should close."""
        if key in (ord('q'), KEY_ESC):
            return False
        if key == ord('n'):
            self.grid.integrate_stroke()
        elif key == ord('r'):
            self.grid.reset_grid()
        elif key == ord('i'):
            self.inverse = not self.inverse
            logging_config.push_context(view="undistorted" if self.inverse else "distorted")
            logger.info(f"Switched to {'undistorted' if self.inverse else 'distorted'} view")
        elif key == ord('s'):
            self.save()
            return True
        else:
            return True
        self.dirty = True
        return True

    def run(self) -> None:
        cv2.namedWindow(WINDOW, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(WINDOW, self.on_mouse)
        try:
            while True:
                if self.dirty:
                    self.redraw()
                key = cv2.waitKey(20) & 0xFF
                if key != 0xFF and not self.handle_key(key):
                    break
        finally:
            cv2.destroyAllWindows()


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Interactive Amsler grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", "-c", type=str, default="configs/amsler_grid_v1.yaml",
                        help="Grid config path")
    parser.add_argument("--output", "-o", type=str, default="outputs/session",
                        help="Directory for saved frames")
    parser.add_argument("--divisions", type=int, default=None,
                        help="Override the config grid divisions")
    args = parser.parse_args()

    try:
        cfg = validators.load_grid_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logging_config.setup_logging(context={"app": "grid"})
        logger.error(str(e))
        return 1

    logging_config.setup_logging(
        log_level=cfg.logging.log_level,
        log_file=cfg.logging.log_file,
        json=cfg.logging.json_format,
        color=cfg.logging.color,
        context={"app": "grid"},
    )

    def log_distortions(lines) -> None:
        logger.info(f"Distortions: {len(lines)} stored")

    try:
        grid = AmslerGrid.from_settings(cfg, on_distortion_change=log_distortions,
                                        source=args.config, divisions=args.divisions)
    except ConfigError as e:
        logger.error(str(e))
        return 1
    window = GridWindow(grid, Path(args.output), antialias=cfg.style.antialias)

    print(__doc__.split("Usage:")[0].strip())
    window.run()
    logging_config.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
