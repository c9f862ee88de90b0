#!python

__doc__ = """
This script finds the primitive cell of the structure in the given file
(any format readable by ASE).

USAGE:
>>> find_primitive_cell.py <structure_file> [--symprec 1e-5] [-o primitive.cif]

It prints the primitive lattice, how many primitive cells are contained
in the original one, the tolerance actually used and, for each atom, the
atom of the primitive cell it corresponds to.
If an output file is given, the primitive cell is saved there (with ASE).
"""

import argparse
import sys

import numpy as np
import ase.io

import primcell.Structure
import primcell.Primitive
import primcell.Settings
from primcell.Errors import PrimitiveCellNotFound


def main(argv = None):
    parser = argparse.ArgumentParser(description = "Find the primitive cell of a crystal structure.")
    parser.add_argument("filename", help = "The structure file (any ASE format)")
    parser.add_argument("--symprec", type = float, default = primcell.Settings.__SYMPREC__,
                        help = "The tolerance on the atomic positions")
    parser.add_argument("--angle-tolerance", type = float, default = primcell.Settings.__ANGLE_TOLERANCE__,
                        help = "The angle tolerance (negative to use only symprec)")
    parser.add_argument("-o", "--output", default = None,
                        help = "Save the primitive cell in this file")
    parser.add_argument("-v", "--verbose", action = "store_true",
                        help = "Print the progress of the search")
    args = parser.parse_args(argv)

    struct = primcell.Structure.Structure()
    struct.read_generic_file(args.filename)

    try:
        prim = primcell.Primitive.get_primitive(struct, args.symprec, args.angle_tolerance,
                                                verbose = args.verbose)
    except PrimitiveCellNotFound as error:
        print(error, file = sys.stderr)
        return 1

    print("Primitive lattice:")
    print(np.array2string(prim.cell.unit_cell, precision = 8, suppress_small = True))
    print("Number of atoms: {} -> {}".format(struct.N_atoms, prim.cell.N_atoms))
    print("Multiplicity: {}".format(prim.get_multiplicity()))
    print("Tolerance: {:.8g}".format(prim.tolerance))
    print("Mapping: {}".format(" ".join(str(x) for x in prim.mapping_table)))

    if args.output is not None:
        ase.io.write(args.output, prim.cell.get_ase_atoms())
        print("Primitive cell saved in {}".format(args.output))

    return 0


if __name__ == "__main__":
    sys.exit(main())
