"""Command-line tool for Mindtree maps.

Usage:
  mindtree show [--file map.json]
  mindtree layout [--file map.json]
  mindtree render --out map.png [--file map.json] [--scale 2]
  mindtree import map.json
  mindtree export --out map.json

Without --file the commands act on the stored session in the data directory
(~/.local/share/mindtree, or $MINDTREE_DATA_DIR).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from mindtree.model import outline, iter_nodes
from mindtree.render import MindMapRenderer
from mindtree.sanitize import ImportValidationError
from mindtree.session import EditorSession, RestoreError
from mindtree.storage import (
    load_settings, load_session, save_session, import_file, export_tree,
)

logger = logging.getLogger(__name__)


def _open_session(args: argparse.Namespace) -> EditorSession:
    settings = load_settings()
    if args.file:
        session = EditorSession(settings=settings)
        import_file(session, Path(args.file))
        return session
    return load_session(settings=settings, strict=True)


def _cmd_show(args: argparse.Namespace) -> int:
    session = _open_session(args)
    for line in outline(session.tree, session.selected_id):
        print(line)
    return 0


def _cmd_layout(args: argparse.Namespace) -> int:
    session = _open_session(args)
    renderer = MindMapRenderer(font=session.settings.font)
    layout = renderer.layout(session.tree)
    for node, depth in iter_nodes(session.tree):
        box = layout.boxes[node.id]
        print(
            f"{'  ' * depth}#{node.id} {node.label!r}: "
            f"x={box.x:.1f} y={box.y:.1f} width={box.width:.1f} height={box.total_height:.1f}"
        )
    return 0


def _cmd_render(args: argparse.Namespace) -> int:
    session = _open_session(args)
    renderer = MindMapRenderer(font=session.settings.font)
    out = Path(args.out).expanduser()
    renderer.export_png(session.tree, str(out), scale=args.scale, selected_id=session.selected_id)
    print(f"Wrote image: {out.resolve()}")
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    session = load_session(settings=load_settings())
    tree = import_file(session, Path(args.path))
    path = save_session(session)
    count = sum(1 for _ in iter_nodes(tree))
    print(f"Imported {count} node(s) into {path}")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    session = load_session(settings=load_settings(), strict=True)
    out = export_tree(session, Path(args.out))
    print(f"Wrote map: {out.resolve()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="mindtree")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_show = sub.add_parser("show", help="Print the map as an outline")
    p_show.add_argument("--file", help="Read a map JSON file instead of the stored session")
    p_show.set_defaults(func=_cmd_show)

    p_lay = sub.add_parser("layout", help="Print computed node geometry")
    p_lay.add_argument("--file", help="Read a map JSON file instead of the stored session")
    p_lay.set_defaults(func=_cmd_layout)

    p_ren = sub.add_parser("render", help="Render the map to PNG")
    p_ren.add_argument("--out", required=True, help="Output .png path")
    p_ren.add_argument("--file", help="Read a map JSON file instead of the stored session")
    p_ren.add_argument("--scale", type=float, default=2.0, help="Pixel scale (default 2)")
    p_ren.set_defaults(func=_cmd_render)

    p_imp = sub.add_parser("import", help="Replace the stored map with a JSON file")
    p_imp.add_argument("path", help="Map JSON file")
    p_imp.set_defaults(func=_cmd_import)

    p_exp = sub.add_parser("export", help="Write the stored map as JSON")
    p_exp.add_argument("--out", required=True, help="Output .json path")
    p_exp.set_defaults(func=_cmd_export)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return int(args.func(args))
    except (ImportValidationError, RestoreError) as exc:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        sys.stderr.write(f"failed to load file: {exc}\n")
        return 1
    except OSError as exc:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        sys.stderr.write(f"mindtree {args.cmd}: {exc}\n")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
