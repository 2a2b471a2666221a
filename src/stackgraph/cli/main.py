"""Stackgraph.

Usage:
  stackgraph [options] init
  stackgraph [options] names
  stackgraph [options] graph [--dot]
  stackgraph [options] synth [--out=DIR]
  stackgraph --version
  stackgraph -h | --help

Commands:
  init   Create a skeleton stackgraph.toml here.
  names  Show the resource names for this stack.
  graph  Show resources in dependency order.
  synth  Write the Terraform configuration for this stack.

Options:
  --version       Show version.
  -h, --help      Show this screen.
  -q, --quiet     Be quiet.
  -v, --verbose   Be verbose.
  -V, --vverbose  Be very verbose.
  --no-colours    Disable colours in CLI output.

  --config=CONFIG  Config file to use  [default: stackgraph.toml]
  --stack=STACK    Stack name (otherwise $STACKGRAPH_STACK, or "dev")

  --dot      Print the graph in Graphviz DOT format
  --out=DIR  Output directory  [default: tf_stack]
"""

import logging
import sys
import time
from functools import wraps
from pathlib import Path

from docopt import docopt

from .. import __version__, config
from ..cloud.aws import AccountResolver
from ..exceptions import UnexpectedError, UserResolvableError
from ..stack import build_from_config
from . import interface as ui
from .interface import TICK, dim, exit_bug, exit_problem, good, neutral, primary, spin

LOG = logging.getLogger(__name__)


def timed(fn):
    """Time execution of fn and print it"""

    @wraps(fn)
    def _wrapped(args, **kwargs):
        start = time.time()
        fn(args, **kwargs)
        end = time.time()
        if not args["--quiet"]:
            sys.stderr.write(str(dim(f"\n-- {end-start:.1f}s\n")))

    return _wrapped


def need_cfg(fn):
    """Exec fn with config"""

    @wraps(fn)
    def _wrapped(args):
        cfg = config.load(args)
        return fn(args, cfg=cfg)

    return _wrapped


def _no_identity():
    raise UnexpectedError("The deployer identity is not needed for this command")


def _offline_resolver() -> AccountResolver:
    """A resolver for commands which never read identity-derived values"""
    return AccountResolver(lookup=_no_identity)


def _init(args):
    filename = config.create_skeleton()
    print("\n" + TICK + " Created " + str(good(filename)))
    print("\nDone. Ready for `stackgraph synth`.")


@need_cfg
def _names(args, cfg):
    graph = build_from_config(cfg, _offline_resolver())
    ui.info(dim(f"Stack {cfg.stack} of project {cfg.project.name}\n"))
    rows = [[node.kind, node.name] for node in graph.nodes]
    print(ui.table(["Kind", "Name"], rows, alignment=["l", "l"]))


@need_cfg
def _graph(args, cfg):
    graph = build_from_config(cfg, _offline_resolver())

    if args["--dot"]:
        from ..visualise import make_graph

        print(make_graph(graph).source)
        return

    rows = [
        [idx, node.address, "\n".join(d.address for d in graph.dependencies(node))]
        for idx, node in enumerate(graph.topological_order())
    ]
    print(ui.table(["#", "Resource", "Depends on"], rows, alignment=["r", "l", "l"]))


@need_cfg
def _synth(args, cfg):
    from ..synth import gen_iac

    graph = build_from_config(cfg)
    out_dir = Path(args["--out"])

    with spin("Resolving deployer identity") as sp:
        manifest = graph.finalise()
        sp.ok(TICK)

    files = gen_iac(manifest, out_dir)
    for filename in files:
        ui.info(TICK + " Wrote " + str(good(filename)))

    ui.info("\nOutputs (after apply):")
    for name, output in manifest.outputs.items():
        ui.info(f"  {neutral(name)} = {primary(output['value'])}")

    ui.info(f"\nDone. Run {out_dir / 'deploy.sh'} to apply.")


@timed
def dispatch(args):
    if args["init"]:
        _init(args)
    elif args["names"]:
        _names(args)
    elif args["graph"]:
        _graph(args)
    elif args["synth"]:
        _synth(args)
    else:
        exit_problem("Invalid command line.", __doc__)


def main():
    args = docopt(__doc__, version=__version__)
    ui.init(args)
    LOG.debug("CLI args: %s", args)

    try:
        dispatch(args)
    except UserResolvableError as exc:
        exit_problem(exc.msg, exc.suggested_fix)
    except UnexpectedError as exc:
        exit_bug(str(exc))


if __name__ == "__main__":
    main()
