from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

from .config import load_config, load_data
from .engine import Handlebars
from .errors import HbsUserError
from .io import FileTemplateLoader
from .template.types import TagType
from .version import tool_version

DEBUG_ENV = "HBS_DEBUG"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hbs",
        description="Handlebars-style template renderer",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument(
            "--config",
            type=Path,
            help="hbs.yaml or a directory containing it (default: current directory)",
        )
        sp.add_argument(
            "--dir",
            type=Path,
            help="template root; overrides templates.base_dir",
        )

    sp_render = sub.add_parser("render", help="Render a template to stdout")
    sp_render.add_argument("name", help="template location relative to the template root")
    sp_render.add_argument("--data", type=Path, help="YAML or JSON file with the model")
    add_common(sp_render)

    sp_inspect = sub.add_parser("inspect", help="Sections, variables and references of a template (JSON)")
    sp_inspect.add_argument("name", help="template location relative to the template root")
    add_common(sp_inspect)

    sp_list = sub.add_parser("list", help="Template names visible to the loader")
    sp_list.add_argument(
        "--exclude",
        action="append",
        metavar="PATTERN",
        default=[],
        help="gitwildmatch pattern to skip (repeatable)",
    )
    add_common(sp_list)

    return p


def _setup_logging() -> None:
    level = logging.DEBUG if os.environ.get(DEBUG_ENV) else logging.WARNING
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")


def _engine(ns: argparse.Namespace) -> Handlebars:
    cfg = load_config(ns.config)
    if ns.dir is not None:
        cfg.templates.base_dir = str(ns.dir)
    return Handlebars.from_config(cfg)


def _inspect(engine: Handlebars, name: str) -> Dict[str, Any]:
    template = engine.compile(name)
    return {
        "template": template.name,
        "sections": template.collect(TagType.SECTION),
        "variables": template.collect(TagType.VAR, TagType.AMP_VAR, TagType.TRIPLE_VAR),
        "references": template.collect_reference_parameters(),
    }


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging()

    try:
        engine = _engine(ns)

        if ns.cmd == "render":
            model = load_data(ns.data) if ns.data is not None else {}
            engine.render(ns.name, model, sys.stdout)
            return 0

        if ns.cmd == "inspect":
            sys.stdout.write(json.dumps(_inspect(engine, ns.name), ensure_ascii=False, indent=2) + "\n")
            return 0

        if ns.cmd == "list":
            loader = engine.loader
            if not isinstance(loader, FileTemplateLoader):
                raise ValueError("Template listing needs a file loader")
            for name in loader.list_templates(ns.exclude):
                sys.stdout.write(name + "\n")
            return 0

    except HbsUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2
    except ValueError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
