"""
Command line interface.

Examples:
  mini-fem info meshes/truss3.fem
  mini-fem assemble meshes/truss3.fem --out system.npz
  mini-fem solve meshes/truss3.fem --fix 0 2 --csv results.csv
  mini-fem draw meshes/truss3.fem --out truss.png --scale 100
"""

import argparse
import logging
import sys

import numpy as np

from .config import CONFIG
from .errors import FEMError
from .io import load_mesh_file
from .kernel.assemble import assemble_system
from .kernel.solve import solve
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def _cmd_info(args) -> int:
    mesh = load_mesh_file(args.mesh)
    system = assemble_system(mesh)
    for kind, count in mesh.summary().items():
        print(f"{kind:>10}: {count}")
    print(f"{'dofs':>10}: {system.ndof}")
    print(f"{'fixed':>10}: {len(system.fixed)}")
    return 0


def _cmd_assemble(args) -> int:
    mesh = load_mesh_file(args.mesh)
    system = assemble_system(mesh, sparse=args.sparse)
    print(f"Assembled {system.ndof} DOFs ({'sparse' if system.is_sparse else 'dense'})")
    if args.out:
        K = system.K.toarray() if system.is_sparse else system.K
        fixed = np.array(sorted(system.fixed.items()), dtype=float).reshape(-1, 2)
        np.savez(args.out, K=K, F=system.F, fixed=fixed)
        print(f"Saved K, F and fixed DOFs to: {args.out}")
    return 0


def _cmd_solve(args) -> int:
    from .post import element_results, nodal_displacements

    mesh = load_mesh_file(args.mesh)
    system = assemble_system(mesh, sparse=args.sparse)
    extra = []
    for node_id in args.fix or []:
        extra.extend(system.dofs.node_dofs(node_id))
    solution = solve(system, extra_fixed=extra)

    print("Nodal displacements:")
    for node_id, values in nodal_displacements(mesh, solution.d).items():
        comps = "  ".join(f"{k}={v: .6e}" for k, v in values.items())
        print(f"  node {node_id}: {comps}")

    table = element_results(mesh, solution.d)
    print()
    print(table.to_string(index=False))
    if args.csv:
        table.to_csv(args.csv, index=False)
        print(f"\nElement results saved to: {args.csv}")
    return 0


def _cmd_draw(args) -> int:
    import matplotlib
    matplotlib.use("Agg")
    from .viz import plot_mesh

    mesh = load_mesh_file(args.mesh)
    d = None
    if args.deformed:
        system = assemble_system(mesh)
        extra = []
        for node_id in args.fix or []:
            extra.extend(system.dofs.node_dofs(node_id))
        d = solve(system, extra_fixed=extra).d
    plot_mesh(mesh, d=d, scale=args.scale, outpath=args.out, title=args.mesh)
    print(f"Saved drawing to: {args.out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mini-fem",
        description="Read, assemble and solve linear finite-element meshes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__[__doc__.index("Examples:"):],
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', default=None, help='Also write the log to this file')

    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('info', help='Print entity counts and DOF total')
    p.add_argument('mesh', help='Mesh file')
    p.set_defaults(func=_cmd_info)

    p = sub.add_parser('assemble', help='Assemble K and F')
    p.add_argument('mesh', help='Mesh file')
    p.add_argument('--sparse', action='store_true', default=None, help='Assemble K as a sparse matrix')
    p.add_argument('--out', default=None, help='Save K, F and fixed DOFs to this .npz file')
    p.set_defaults(func=_cmd_assemble)

    p = sub.add_parser('solve', help='Assemble and solve, print displacements and element forces')
    p.add_argument('mesh', help='Mesh file')
    p.add_argument('--fix', type=int, nargs='*', metavar='NODE', help='Fix all DOFs of these nodes')
    p.add_argument('--sparse', action='store_true', default=None, help='Use the sparse solver')
    p.add_argument('--csv', default=None, help='Save element results to this CSV file')
    p.set_defaults(func=_cmd_solve)

    p = sub.add_parser('draw', help='Draw the mesh with matplotlib')
    p.add_argument('mesh', help='Mesh file')
    p.add_argument('--out', required=True, help='Image file (.png, .pdf, .svg)')
    p.add_argument('--deformed', action='store_true', help='Solve and overlay the deformed shape')
    p.add_argument('--fix', type=int, nargs='*', metavar='NODE', help='Fix all DOFs of these nodes')
    p.add_argument('--scale', type=float, default=1.0, help='Deformation scale factor (default: 1.0)')
    p.set_defaults(func=_cmd_draw)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else CONFIG.log_level, args.log_file)

    try:
        return args.func(args)
    except FEMError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    except OSError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
