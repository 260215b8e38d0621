#!/usr/bin/env python3
"""Workshop showroom — render a GLB lift + car scene to frames / MP4."""

import argparse
import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from showroom.modules.m1_scene_description import PROFILES, get_profile
from showroom.session import Session, SessionConfig
from showroom.shared import constants as C
from showroom.shared.colors import parse_color
from showroom.shared.scene_graph import Surface


def _args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Render a 3D automotive workshop/showroom scene",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python main.py workshop --frames 120 --output outputs/workshop.mp4\n"
            "  python main.py showroom --paint '#1f4fa8' --stills-dir outputs/stills\n"
            "  python main.py showroom-animated --frames 240 --orbit 0.5\n"
        ),
    )
    p.add_argument("profile", nargs="?", default="showroom", choices=sorted(PROFILES))
    p.add_argument("--assets-dir", default=C.DEFAULT_ASSETS_DIR)
    p.add_argument("--frames", type=int, default=90)
    p.add_argument("--fps", type=int, default=C.DEFAULT_FPS)
    p.add_argument("--width", type=int, default=C.DEFAULT_WIDTH)
    p.add_argument("--height", type=int, default=C.DEFAULT_HEIGHT)
    p.add_argument("--paint", default=None, help="Car paint colour (#RRGGBB)")
    p.add_argument("--palette", type=int, default=None, help="Paint palette index")
    p.add_argument("--orbit", type=float, default=0.0,
                   help="Pointer drag in pixels applied every frame (turntable)")
    p.add_argument("--output", default=os.path.join(C.DEFAULT_OUTPUT_DIR, "showroom.mp4"))
    p.add_argument("--stills-dir", default=None)
    p.add_argument("--realtime", action="store_true", help="Pace frames at --fps")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args()

    if args.paint is not None:
        try:
            parse_color(args.paint)
        except ValueError as e:
            p.error(f"--paint: {e}")
    if args.palette is not None:
        palette = get_profile(args.profile, args.assets_dir).palette
        if not palette:
            p.error(f"--palette: profile '{args.profile}' has no paint palette")
        if not 0 <= args.palette < len(palette):
            p.error(f"--palette must be in 0..{len(palette) - 1}")
    return args


async def _run(session: Session, args: argparse.Namespace) -> int:
    def paint(_results=None):
        if args.paint:
            session.bridge.on_color_select(C.PAINT_TARGET, args.paint)
        elif args.palette is not None:
            session.bridge.on_palette_select(args.palette)

    if not session.build():
        return 0
    session.loader.on_all_settled = paint
    if args.orbit:
        loop_task = asyncio.ensure_future(session.run(args.frames))
        while not loop_task.done():
            session.bridge.on_pointer_drag(args.orbit, 0.0)
            await asyncio.sleep(1.0 / args.fps)
        return loop_task.result()
    return await session.run(args.frames)


def main() -> None:
    args = _args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s  %(levelname)-8s  %(message)s",
                        datefmt="%H:%M:%S")

    config = SessionConfig(fps=args.fps, realtime=args.realtime,
                           video_path=args.output, stills_dir=args.stills_dir)
    session = Session(get_profile(args.profile, args.assets_dir),
                      Surface(args.width, args.height), config)
    try:
        frames = asyncio.run(_run(session, args))
    finally:
        session.close()

    if session.surface.status_text:
        print(session.surface.status_text, file=sys.stderr)
        sys.exit(1)
    print(f"\nframes → {frames}")
    print(f"video  → {args.output}")
    for result in session.results:
        status = "ok" if result.ok else f"FAILED ({result.error.cause})"
        print(f"asset {result.descriptor.name:<6}: {status}")


if __name__ == "__main__":
    main()
