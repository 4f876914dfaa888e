#!/usr/bin/env python
"""Render a Tajimi postcard animation cycle to a numbered SVG sequence."""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import tajimi_motion


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--seed', type=int, default=None,
                        help="random seed (default: fresh randomness)")
    parser.add_argument('--frames', type=int, default=None,
                        help="number of frames to write (default: one full cycle)")
    parser.add_argument('--step', type=int, default=1,
                        help="frames to advance between written files")
    parser.add_argument('--width', type=int, default=540)
    parser.add_argument('--height', type=int, default=540)
    parser.add_argument('--cols', type=int, default=2, help="window grid columns")
    parser.add_argument('--out-dir', type=Path, default=Path('.'))
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    session = tajimi_motion.AnimationSession({
        'postal_width': args.width,
        'postal_height': args.height,
        'window_grid_cols': args.cols,
    }, seed=args.seed)
    step = max(args.step, 1)
    total = args.frames if args.frames is not None else session.timeline.cycle_length // step

    stamp = datetime.now().strftime('%Y%m%d-%H%M%S')
    args.out_dir.mkdir(parents=True, exist_ok=True)
    print(f"Rendering {total} frames ({len(session.tajimi.buildings)} buildings)")

    for index in range(total):
        frame = session.seek(index * step)
        path = args.out_dir / f"tajimi-{stamp}-{index:04d}.svg"
        path.write_text(session.render())
        sys.stdout.write(f"\r  Frame {frame} -> {path.name} ({100 * (index + 1) // total}%)")
        sys.stdout.flush()

    print(f"\n  Done! Saved to {args.out_dir}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
