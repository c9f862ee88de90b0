# -*- coding: utf-8 -*-
"""
The Structure class: a periodic crystal, its lattice and its atoms.
"""
import numpy as np

import ase
import ase.io

import primcell.Methods as Methods
import primcell.Settings as Settings
from primcell.Errors import ReductionFailed


__all__ = ["Structure"]


class Structure:
    def __init__(self, nat=0):
        """
        A periodic structure of nat atoms.

        Parameters
        ----------
            nat : int
                The number of atoms. Coordinates are set to zero and the
                unit cell must be initialized before any symmetry analysis.
        """
        self.N_atoms = nat
        # Coordinates are always express in chartesian axis
        self.coords = np.zeros((self.N_atoms, 3), dtype = np.float64)
        self.atoms = ["H"] * nat
        self.unit_cell = np.zeros((3,3))
        self.has_unit_cell = False

    def get_volume(self):
        """
        Returns the volume of the unit cell
        """
        ERR_MSG = """
Error, to compute the volume the structure must have a unit cell initialized:
(i.e. the has_unit_cell attribute must be True)."""

        assert self.has_unit_cell, ERR_MSG

        return np.abs(np.linalg.det(self.unit_cell))

    def check_consistency(self):
        """
        Check that the structure can be used for the symmetry analysis.
        A ValueError is raised if the unit cell is missing or singular,
        or if the atomic labels do not match the coordinates.
        """
        if not self.has_unit_cell:
            raise ValueError("Error, the structure must have a unit cell.")

        if np.shape(self.unit_cell) != (3,3):
            raise ValueError("Error, the unit cell must be a 3x3 matrix, got {}".format(np.shape(self.unit_cell)))

        if self.get_volume() < Settings.__EPSILON__:
            raise ValueError("Error, the unit cell vectors are linearly dependent.")

        if np.shape(self.coords) != (self.N_atoms, 3):
            raise ValueError("Error, coords must have shape ({}, 3), got {}".format(self.N_atoms, np.shape(self.coords)))

        if len(self.atoms) != self.N_atoms:
            raise ValueError("Error, {} atomic labels for {} atoms.".format(len(self.atoms), self.N_atoms))

        if self.N_atoms == 0:
            raise ValueError("Error, the structure has no atoms.")

    def generate_from_ase_atoms(self, atoms):
        """
        This subroutines generate the current structure
        from the ASE Atoms object

        Parameters
        ----------
            atoms : the ASE Atoms object
        """

        self.unit_cell = np.array(atoms.get_cell(), dtype = np.float64)
        self.has_unit_cell = True
        self.atoms = atoms.get_chemical_symbols()
        self.N_atoms = len(self.atoms)
        self.coords = atoms.positions.copy()

    def read_generic_file(self, filename):
        """
        This reader use ASE to parse the input and build the appropriate structure.
        Any ASE accepted file is welcome.
        """

        atoms = ase.io.read(filename)
        self.generate_from_ase_atoms(atoms)

    def get_ase_atoms(self):
        """
        This method returns the ase atoms structure.

        Results
        -------
            - atoms : ase.Atoms()
                  The ase.Atoms class containing the self structure.
        """

        atm = ase.Atoms(self.atoms, positions = self.coords)

        if self.has_unit_cell:
            atm.set_cell(self.unit_cell)
            atm.pbc[:] = True

        return atm

    def copy(self):
        """
        This method simply returns a copy of the current structure

        Results
        -------
            - aux : Structure
                A copy of the self structure.
        """

        aux = Structure()
        aux.N_atoms = self.N_atoms
        aux.coords = self.coords.copy()
        aux.atoms = [atm for atm in self.atoms]
        aux.unit_cell = self.unit_cell.copy()
        aux.has_unit_cell = self.has_unit_cell
        return aux

    def get_atomic_types(self):
        """
        Get an array of integer, starting from 1, for each atom of the structure,
        so that two equal atoms share the same index.

        Result
        ------
            ityp : ndarray dtype=(numpy.intc)
                The type array
        """

        ityp = []
        types = {}
        for atm in self.atoms:
            if atm not in types:
                types[atm] = len(types) + 1
            ityp.append(types[atm])

        return np.array(ityp, dtype = np.intc)

    def get_crystal_coords(self):
        """
        Get the atomic positions in crystal coordinates (fractions of the unit cell vectors)

        Results
        -------
            - cryst : ndarray(size = (N_atoms, 3))
        """
        if not self.has_unit_cell:
            raise ValueError("Error, crystal coordinates require the unit cell.")

        return Methods.cart_to_cryst(self.unit_cell, self.coords)

    def set_crystal_coords(self, cryst):
        """
        Set the atomic positions from crystal coordinates.
        The unit cell must already be initialized.
        """
        if not self.has_unit_cell:
            raise ValueError("Error, crystal coordinates require the unit cell.")

        cryst = np.array(cryst, dtype = np.float64).reshape((self.N_atoms, 3))
        self.coords = Methods.cryst_to_cart(self.unit_cell, cryst)

    def get_spglib_cell(self):
        """
        Return the (lattice, positions, numbers) tuple used by spglib.
        """
        return (self.unit_cell.copy(), self.get_crystal_coords(), self.get_atomic_types())

    def fix_coords_in_unit_cell(self):
        """
        This method fix the coordinates of the structure inside
        the unit cell. It works only if the structure has
        predefined unit cell.
        """

        if not self.has_unit_cell:
            raise ValueError("Error, try to fix the coordinates without the unit cell")

        for i in range(self.N_atoms):
            self.coords[i,:] = Methods.put_into_cell(self.unit_cell, self.coords[i,:])

    def generate_supercell(self, dim, get_itau = False):
        """
        This method generate a supercell of specified dimension, replicating the system
        on the n-th neighbours unit cells.

        Parameters
        ----------
            - dim : list, size(3), integer
                  A list that specifies the number of cells for each dimension.
            - get_itau : bool
                If true also the itau order is returned in output (python convention).

        Results
        -------
            - supercell : Structure
                  This structure is the supercell of the system.
            - itau : ndarray of int (only if get_itau)
                  For each atom of the supercell the index of the atom of the unit cell.
        """

        if len(dim) != 3:
            raise ValueError("ERROR, dim must have 3 integers.")

        if not self.has_unit_cell:
            raise ValueError("ERROR, the specified system has not the unit cell.")

        total_dim = np.prod(dim)

        new_N_atoms = self.N_atoms * total_dim
        new_coords = np.zeros( (new_N_atoms, 3))
        atoms = [None] * new_N_atoms
        itau = np.zeros(new_N_atoms, dtype = np.intc)

        for i_z in range(dim[2]):
            for i_y in range(dim[1]):
                for i_x in range(dim[0]):
                    basis_index = self.N_atoms * (i_x + dim[0] * i_y + dim[0]*dim[1] * i_z)
                    for i_atm in range(self.N_atoms):
                        new_coords[basis_index + i_atm, :] = self.coords[i_atm, :] + \
                                                             i_z * self.unit_cell[2, :] + \
                                                             i_y * self.unit_cell[1, :] + \
                                                             i_x * self.unit_cell[0, :]
                        atoms[i_atm + basis_index] = self.atoms[i_atm]
                        itau[i_atm + basis_index] = i_atm

        supercell = Structure()
        supercell.coords = new_coords
        supercell.N_atoms = new_N_atoms
        supercell.atoms = atoms
        supercell.has_unit_cell = True

        for i in range(3):
            supercell.unit_cell[i, :] = self.unit_cell[i,:] * dim[i]

        if get_itau:
            return supercell, itau
        return supercell

    def trim_cell(self, trimmed_lattice, symprec = Settings.__SYMPREC__, verbose = False):
        """
        TRIM THE CELL
        =============

        Fold the atoms of this structure inside a smaller cell.
        The atoms that fall on the same site are merged into one atom,
        whose position is the average of the merged ones.

        Parameters
        ----------
            - trimmed_lattice : ndarray(size = (3,3))
                The smaller cell, trimmed_lattice[i,:] is the i-th vector.
                It must be a sublattice of index N_atoms / new N_atoms of this unit cell.
            - symprec : float
                The tolerance to consider two atoms on the same site
            - verbose : bool
                If true print the tolerance changes

        Results
        -------
            - trimmed : Structure
                The structure in the smaller cell
            - mapping_table : ndarray(size = N_atoms, dtype = np.intc)
                For each atom of this structure, the index of its atom in trimmed.
        """

        self.check_consistency()
        trimmed_lattice = np.array(trimmed_lattice, dtype = np.float64)

        trimmed_volume = np.abs(np.linalg.det(trimmed_lattice))
        if trimmed_volume < Settings.__EPSILON__:
            raise ReductionFailed("Error, the trimmed lattice is singular.")

        ratio = int(Methods.round_to_int(self.get_volume() / trimmed_volume))
        if ratio < 1 or self.N_atoms % ratio != 0:
            raise ReductionFailed("Error, {} atoms cannot be divided in a cell {} times smaller.".format(self.N_atoms, ratio))

        # Get the crystal coordinates with respect to the trimmed lattice
        trans_mat = self.unit_cell.dot(np.linalg.inv(trimmed_lattice))
        positions = Methods.wrap_to_unit(self.get_crystal_coords().dot(trans_mat))

        overlap_table = Methods.get_overlap_table(positions, self.get_atomic_types(),
                                                  trimmed_lattice, ratio, symprec, verbose)

        new_nat = self.N_atoms // ratio
        trimmed = Structure(new_nat)
        trimmed.unit_cell = trimmed_lattice
        trimmed.has_unit_cell = True

        mapping_table = np.zeros(self.N_atoms, dtype = np.intc)
        new_coords = np.zeros((new_nat, 3), dtype = np.float64)
        index = 0
        for i in range(self.N_atoms):
            if overlap_table[i] != i:
                continue

            # Average the overlapping atoms around the first one
            members = np.where(overlap_table == i)[0]
            first = Methods.cryst_to_cart(trimmed_lattice, positions[i, :])
            shifts = [Methods.get_closest_vector(trimmed_lattice, Methods.cryst_to_cart(trimmed_lattice, positions[j, :]) - first)
                      for j in members]
            new_coords[index, :] = first + np.mean(shifts, axis = 0)
            trimmed.atoms[index] = self.atoms[i]
            mapping_table[members] = index
            index += 1

        trimmed.coords = new_coords
        trimmed.fix_coords_in_unit_cell()
        return trimmed, mapping_table

    def get_primitive_cell(self, symprec = Settings.__SYMPREC__,
                           angle_tolerance = Settings.__ANGLE_TOLERANCE__,
                           return_mapping = False, verbose = False):
        """
        PRIMITIVE CELL
        ==============

        Get the structure in its primitive cell (the smallest cell that
        generates the same crystal), with a Delaunay reduced lattice.

        Parameters
        ----------
            - symprec : float
                The tolerance on the atomic positions.
                It can be reduced during the search if it is too loose.
            - angle_tolerance : float
                The angle tolerance (negative to use only symprec)
            - return_mapping : bool
                If true also the mapping of each atom of this structure into
                the primitive cell is returned.
            - verbose : bool
                Print the progress of the search

        Results
        -------
            - primitive : Structure
                The primitive cell
            - mapping_table : ndarray of int (only if return_mapping)
        """
        import primcell.Primitive as Primitive

        prim = Primitive.get_primitive(self, symprec, angle_tolerance, verbose = verbose)
        if return_mapping:
            return prim.cell.copy(), prim.mapping_table.copy()
        return prim.cell.copy()
