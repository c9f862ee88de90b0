# -*- coding: utf-8 -*-
"""
PRIMITIVE CELL SEARCH
=====================

Given a structure, that may be a supercell of a smaller one, find the
primitive cell: the smallest cell that generates the same crystal.

The primitive lattice vectors are searched among the pure translations
of the structure. The volume of the primitive cell must be exactly
the volume of the original cell divided by the number of pure translations.
When this is not possible the tolerance is reduced and the pure translations
are checked again.

Example
-------

    import primcell.Structure
    import primcell.Primitive

    struct = primcell.Structure.Structure()
    struct.read_generic_file("POSCAR")
    prim = primcell.Primitive.get_primitive(struct, symprec = 1e-5)
    print(prim.cell.unit_cell, prim.mapping_table)
"""
import numpy as np

import warnings

import primcell.Methods as Methods
import primcell.Settings as Settings
import primcell.symmetries as SYM
from primcell.Structure import Structure
from primcell.Errors import PrimitiveCellError, NoConsistentBasis, PrimitiveCellNotFound


__all__ = ["Primitive", "get_primitive", "get_cell_with_smallest_lattice",
           "get_primitive_cell", "get_primitive_lattice_vectors_iterative",
           "get_primitive_lattice_vectors", "find_lattice_vector_triple",
           "clean_primitive_lattice", "get_translation_candidates"]


class Primitive:
    def __init__(self, cell, mapping_table, t_mat, tolerance, angle_tolerance):
        """
        PRIMITIVE CELL RESULT
        =====================

        The result of the primitive cell search.
        The mapping_table and t_mat arrays are read only.
        A ValueError is raised if the mapping table points outside the cell.

        Parameters
        ----------
            cell : Structure
                The primitive cell (Delaunay reduced lattice)
            mapping_table : ndarray of int
                mapping_table[i] is the atom of cell corresponding to the i-th
                atom of the original structure
            t_mat : ndarray (3x3)
                cell.unit_cell = t_mat.dot(original_unit_cell)
            tolerance : float
                The tolerance used to find the cell
            angle_tolerance : float
                The angle tolerance (negative if not used)
        """

        mapping_table = np.array(mapping_table, dtype = np.intc)
        if np.any(mapping_table < 0) or np.any(mapping_table >= cell.N_atoms):
            raise ValueError("Error, the mapping table must be inside [0, {})".format(cell.N_atoms))

        # The result is read only
        mapping_table.setflags(write = False)
        t_mat = np.array(t_mat, dtype = np.float64)
        t_mat.setflags(write = False)

        self.cell = cell
        self.mapping_table = mapping_table
        self.t_mat = t_mat
        self.size = len(mapping_table)
        self.tolerance = tolerance
        self.angle_tolerance = angle_tolerance

    def get_multiplicity(self):
        """
        How many primitive cells are contained in the original structure.
        """
        return self.size // self.cell.N_atoms


def get_primitive(structure, symprec = Settings.__SYMPREC__,
                  angle_tolerance = Settings.__ANGLE_TOLERANCE__, verbose = False):
    """
    GET THE PRIMITIVE CELL
    ======================

    Find the primitive cell of the structure.
    If the search fails the tolerance is reduced (multiplied by 0.95)
    and the search starts again, up to 20 times.

    Parameters
    ----------
        - structure : Structure
            The structure, it is not modified.
        - symprec : float
            The tolerance on the atomic positions
        - angle_tolerance : float
            The angle tolerance (negative to use only symprec)
        - verbose : bool
            If true print the progress of the search

    Results
    -------
        - primitive : Primitive
            The primitive cell with the mapping of the atoms.
            primitive.tolerance is the tolerance actually used.
    """

    structure.check_consistency()

    tolerance = symprec
    last_error = None
    for attempt in range(Settings.NUM_ATTEMPT):
        if verbose:
            print("get_primitive (attempt = {}, tolerance = {:.8g})".format(attempt, tolerance))

        try:
            pure_trans = SYM.get_pure_translations(structure, tolerance, angle_tolerance)

            if len(pure_trans) == 1:
                cell = get_cell_with_smallest_lattice(structure, tolerance)
                mapping_table = np.arange(structure.N_atoms, dtype = np.intc)
            else:
                cell, mapping_table = get_primitive_cell(structure, pure_trans, tolerance,
                                                         angle_tolerance, verbose)
        except PrimitiveCellError as error:
            last_error = error
            if verbose:
                print("Primitive cell could not be found: {}".format(error))
        else:
            t_mat = cell.unit_cell.dot(np.linalg.inv(structure.unit_cell))
            return Primitive(cell, mapping_table, t_mat, tolerance, angle_tolerance)

        tolerance *= Settings.REDUCE_RATE
        if verbose:
            print("Reduce tolerance to {:.8g}".format(tolerance))

    raise PrimitiveCellNotFound("Error, the primitive cell could not be found after {} attempts (last tolerance = {:.8g})".format(Settings.NUM_ATTEMPT, tolerance)) from last_error


def get_cell_with_smallest_lattice(structure, symprec):
    """
    The structure is already primitive: only reduce its lattice
    and bring the atoms inside the new cell.
    """

    min_lat = SYM.delaunay_reduce(structure.unit_cell, symprec)

    # Crystal coordinates in the reduced lattice
    trans_mat = structure.unit_cell.dot(np.linalg.inv(min_lat))
    new_cryst = Methods.wrap_to_unit(structure.get_crystal_coords().dot(trans_mat))

    smallest_cell = Structure(structure.N_atoms)
    smallest_cell.atoms = [atm for atm in structure.atoms]
    smallest_cell.unit_cell = min_lat
    smallest_cell.has_unit_cell = True
    smallest_cell.set_crystal_coords(new_cryst)

    return smallest_cell


def get_primitive_cell(structure, pure_trans, symprec,
                       angle_tolerance = Settings.__ANGLE_TOLERANCE__, verbose = False):
    """
    Build the primitive cell from the pure translations.

    Results
    -------
        - primitive_cell : Structure
            The primitive cell (Delaunay reduced)
        - mapping_table : ndarray of int
            The atom of primitive_cell for each atom of structure
    """

    # Primitive lattice vectors are searched.
    # To be consistent, sometimes the tolerance is decreased iteratively.
    prim_lat, multi = get_primitive_lattice_vectors_iterative(structure, pure_trans, symprec,
                                                              angle_tolerance, verbose)

    if verbose:
        print("Primitive lattice found with {} pure translations".format(multi))

    smallest_lat = SYM.delaunay_reduce(prim_lat, symprec)

    # Fit atoms into new primitive cell
    return structure.trim_cell(smallest_lat, symprec, verbose)


def get_primitive_lattice_vectors_iterative(structure, pure_trans, symprec,
                                            angle_tolerance = Settings.__ANGLE_TOLERANCE__,
                                            verbose = False):
    """
    ITERATIVE SEARCH OF THE LATTICE VECTORS
    =======================================

    Search three vectors among the pure translations that generate a lattice
    whose volume is the original one divided by the number of translations.
    If they cannot be found, the translations are checked again with
    the current tolerance and the tolerance is reduced, up to 20 times.

    Parameters
    ----------
        - structure : Structure
        - pure_trans : ndarray(size = (n_trans, 3))
            The pure translations, the first one is the identity.
        - symprec : float
            The starting tolerance
        - angle_tolerance : float
        - verbose : bool

    Results
    -------
        - prim_lattice : ndarray(size = (3,3))
            The primitive lattice (prim_lattice[i,:] is the i-th vector)
        - multi : int
            The number of pure translations used to find it
    """

    tolerance = symprec
    pure_trans_reduced = np.array(pure_trans, dtype = np.float64)

    for attempt in range(Settings.NUM_ATTEMPT):
        multi = pure_trans_reduced.shape[0]
        vectors = get_translation_candidates(pure_trans_reduced)

        # Lattice of primitive cell is found among pure translation vectors
        try:
            prim_lattice = get_primitive_lattice_vectors(vectors, structure, tolerance)
        except NoConsistentBasis:
            pass
        else:
            return prim_lattice, multi

        pure_trans_reduced = SYM.reduce_pure_translations(structure, pure_trans_reduced,
                                                          tolerance, angle_tolerance)

        if verbose:
            print("Tolerance is reduced to {:.8g} ({}), num_pure_trans = {}".format(tolerance, attempt,
                                                                                    pure_trans_reduced.shape[0]))

        tolerance *= Settings.REDUCE_RATE

    raise NoConsistentBasis("Error, the primitive lattice vectors could not be found after {} attempts.".format(Settings.NUM_ATTEMPT))


def get_translation_candidates(pure_trans):
    """
    The trial primitive lattice vectors: the pure translations
    (without the identity) and the lattice vectors of the original cell.
    """

    multi = len(pure_trans)

    vectors = np.zeros((multi + 2, 3), dtype = np.float64)
    vectors[:multi - 1, :] = pure_trans[1:, :]
    vectors[multi - 1:, :] = np.eye(3)

    return vectors


def find_lattice_vector_triple(vectors, unit_cell, symprec):
    """
    Find the first triple of vectors (i < j < k) that spans a cell whose
    volume is the volume of unit_cell divided by len(vectors) - 2.

    Parameters
    ----------
        - vectors : ndarray(size = (n_vectors, 3))
            The candidate vectors in crystal coordinates
        - unit_cell : ndarray(size = (3,3))
        - symprec : float
            Smaller volumes are discarded

    Results
    -------
        - triple : tuple of int
            The indices (i, j, k) of the triple
    """

    size = len(vectors)
    initial_volume = np.abs(np.linalg.det(unit_cell))

    # check volumes of all possible lattices, find the first one with the right volume
    for i in range(size):
        for j in range(i + 1, size):
            for k in range(j + 1, size):
                tmp_lattice = Methods.cryst_to_cart(unit_cell, vectors[[i, j, k], :])
                volume = np.abs(np.linalg.det(tmp_lattice))
                if volume > symprec:
                    if Methods.round_to_int(initial_volume / volume) == size - 2:
                        return i, j, k

    raise NoConsistentBasis("Error, primitive lattice vectors could not be found among {} candidates.".format(size))


def get_primitive_lattice_vectors(vectors, structure, symprec):
    """
    Get the primitive lattice from the candidate vectors
    (see find_lattice_vector_triple and clean_primitive_lattice).

    Results
    -------
        - prim_lattice : ndarray(size = (3,3))
    """

    i, j, k = find_lattice_vector_triple(vectors, structure.unit_cell, symprec)
    return clean_primitive_lattice(vectors[[i, j, k], :], structure.unit_cell, len(vectors) - 2)


def clean_primitive_lattice(min_vectors, unit_cell, multi):
    """
    CLEAN THE PRIMITIVE LATTICE
    ===========================

    The original lattice vectors, written in the basis of the primitive ones,
    must have integer components. They are rounded, and the primitive vectors
    are obtained back from them, to remove the numerical noise.
    If the rounded matrix has not the right determinant the vectors are kept as they are.

    Parameters
    ----------
        - min_vectors : ndarray(size = (3,3))
            The primitive vectors in crystal coordinates (one per row)
        - unit_cell : ndarray(size = (3,3))
            The original lattice
        - multi : int
            The number of primitive cells in the original one

    Results
    -------
        - prim_lattice : ndarray(size = (3,3))
            The primitive lattice in cartesian coordinates
    """

    relative_lattice = np.array(min_vectors, dtype = np.float64)

    inv_mat_int = Methods.round_to_int(np.linalg.inv(relative_lattice))
    if abs(Methods.get_integer_determinant(inv_mat_int)) == multi:
        relative_lattice = np.linalg.inv(inv_mat_int.astype(np.float64))
    else:
        warnings.warn("Primitive lattice cleaning is incomplete (expected {} primitive cells).".format(multi))

    return relative_lattice.dot(unit_cell)
