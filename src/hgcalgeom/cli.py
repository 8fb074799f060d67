from __future__ import annotations

import argparse
import logging
import sys

from dbetto import utils
from pyg4ometry import config as meshconfig
from pygeomtools import visualization, write_pygeom

from . import _version, core

log = logging.getLogger(__name__)


def dump_gdml_cli(argv: list[str] | None = None) -> None:
    args, config = _parse_cli_args(argv)

    logging.basicConfig()
    if args.verbose:
        logging.getLogger("hgcalgeom").setLevel(logging.DEBUG)
    if args.debug:
        logging.root.setLevel(logging.DEBUG)

    vis_scene = {}
    if isinstance(args.visualize, str):
        vis_scene = utils.load_dict(args.visualize)
        if vis_scene.get("fine_mesh", False):
            meshconfig.setGlobalMeshSliceAndStack(100)

    registry, result = core.construct_with_result(
        config=config,
        layout=args.layout,
        parent_name=args.parent_name,
    )

    if args.check_overlaps:
        msg = "checking for overlaps"
        log.info(msg)
        registry.worldVolume.checkOverlaps(recursive=True)

    # commit auxvals, and write to GDML file if requested.
    if args.filename is not None:
        log.info("exporting GDML geometry to %s", args.filename)
    write_pygeom(registry, args.filename)

    if args.vis_macro_file:
        visualization.generate_color_macro(registry, args.vis_macro_file)

    if args.visualize:
        log.info("visualizing...")
        from pygeomtools import viewer

        viewer.visualize(registry, vis_scene)

    if args.strict and result.has_errors:
        n_errors = sum(d.severity == "error" for d in result.diagnostics)
        log.error("layer stack errors found in %d module(s)", n_errors)
        sys.exit(1)


def _parse_cli_args(argv: list[str] | None = None) -> tuple[argparse.Namespace, dict]:
    parser = argparse.ArgumentParser(
        prog="pygeom-hgcal",
        description="%(prog)s command line interface",
    )

    # global options
    parser.add_argument(
        "--version",
        action="version",
        help="""Print %(prog)s version and exit""",
        version=_version.__version__,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="""Increase the program verbosity""",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="""Increase the program verbosity to maximum""",
    )
    parser.add_argument(
        "--visualize",
        "-V",
        nargs="?",
        const=True,
        help="""Open a VTK visualization of the generated geometry (with optional scene file)""",
    )
    parser.add_argument(
        "--vis-macro-file",
        action="store",
        help="""Filename to write a Geant4 macro file containing visualization attributes""",
    )
    parser.add_argument(
        "--check-overlaps",
        action="store_true",
        help="""Check for overlaps with pyg4ometry (note: this might not be accurate)""",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="""Exit with an error code if the layers of any module are thicker than the module""",
    )

    # options for geometry generation.
    #
    # geometry options can also be specified in the config file, so the "default" argument of the argparse
    # options cannot be used - we need to distinguish between an unspecified option and an explicitly set
    # default option.
    geom_opts = parser.add_argument_group("geometry options")
    layout_default = "grid"
    geom_opts.add_argument(
        "--layout",
        action="store",
        choices=sorted(core.LAYOUTS),
        help=f"""Select how the module variants are placed in the world volume. (default: {layout_default})""",
    )
    geom_opts.add_argument(
        "--parent-name",
        action="store",
        help="""Override the name prefix of all constructed volumes.""",
    )
    geom_opts.add_argument(
        "--config",
        action="store",
        help="""Select a config file to read geometry config from.""",
    )

    parser.add_argument(
        "filename",
        default=None,
        nargs="?",
        help="""File name for the output GDML geometry.""",
    )

    args = parser.parse_args(argv)

    config = {}
    if args.config is not None:
        config = utils.load_dict(args.config)

    # also load geometry options from config file.
    _config_or_cli_arg(args, config, "layout", layout_default)
    _config_or_cli_arg(args, config, "parent_name", None)

    if args.layout not in core.LAYOUTS:
        msg = f"invalid layout {args.layout}"
        raise ValueError(msg)

    if not args.visualize and args.filename == "":
        parser.error("no output file and no visualization specified")
    if args.vis_macro_file and args.filename == "":
        parser.error("writing macro file(s) without gdml file is not possible")

    return args, config


def _config_or_cli_arg(args: argparse.Namespace, config: dict, name: str, default) -> None:
    """Fallback of cli args, to config file, and to default value (in this order)."""
    val_cfg = config.get(name)
    val_attrs = getattr(args, name, None)
    val = val_cfg if val_attrs is None else val_attrs
    val = default if val is None else val
    setattr(args, name, val)
