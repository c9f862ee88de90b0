# -*- coding: utf-8 -*-
"""
Build supercells (and a conventional cell) of known primitive structures,
then check that the primitive cell is found back.
"""
import numpy as np
import pytest

import primcell as PC
import primcell.Structure
import primcell.Primitive
import primcell.Methods
import primcell.symmetries


A_NACL = 5.64
A_CU = 3.61


def get_nacl_primitive():
    struct = PC.Structure.Structure(2)
    struct.atoms = ["Na", "Cl"]
    struct.unit_cell = .5 * A_NACL * np.array([[0, 1, 1], [1, 0, 1], [1, 1, 0]], dtype = np.float64)
    struct.has_unit_cell = True
    struct.set_crystal_coords([[0, 0, 0], [.5, .5, .5]])
    return struct


def get_cu_conventional():
    struct = PC.Structure.Structure(4)
    struct.atoms = ["Cu"] * 4
    struct.unit_cell = np.eye(3) * A_CU
    struct.has_unit_cell = True
    struct.set_crystal_coords([[0, 0, 0], [0, .5, .5], [.5, 0, .5], [.5, .5, 0]])
    return struct


def check_primitive(struct, prim, multi):
    # Mapping range
    assert np.all(prim.mapping_table >= 0)
    assert np.all(prim.mapping_table < prim.cell.N_atoms)
    assert len(prim.mapping_table) == struct.N_atoms

    # Volume / multiplicity law
    ratio = PC.Methods.round_to_int(struct.get_volume() / prim.cell.get_volume())
    assert ratio == multi
    assert prim.get_multiplicity() == multi
    assert prim.cell.N_atoms * multi == struct.N_atoms

    # Transform consistency
    assert np.allclose(prim.t_mat.dot(struct.unit_cell), prim.cell.unit_cell, atol = prim.tolerance)

    # The original lattice is a superlattice of the primitive one
    inv_t = np.linalg.inv(prim.t_mat)
    assert np.allclose(inv_t, np.floor(inv_t + .5), atol = 1e-6)

    # Each atom is mapped on an atom of the same species
    for i in range(struct.N_atoms):
        assert struct.atoms[i] == prim.cell.atoms[prim.mapping_table[i]]


def test_nacl_supercell():
    unit_cell = get_nacl_primitive()
    supercell, itau = unit_cell.generate_supercell((2,2,1), get_itau = True)

    pure_trans = PC.symmetries.get_pure_translations(supercell, 1e-5)
    assert len(pure_trans) == 4

    prim = PC.Primitive.get_primitive(supercell, symprec = 1e-5)
    check_primitive(supercell, prim, 4)

    assert prim.cell.get_volume() == pytest.approx(unit_cell.get_volume())

    # The first atoms of the supercell are those of the unit cell,
    # so the mapping is equal to itau
    assert np.all(prim.mapping_table == itau)

    # Na and Cl are half lattice parameter apart
    dist = PC.Methods.get_min_dist_into_cell(prim.cell.unit_cell, prim.cell.coords[0,:], prim.cell.coords[1,:])
    assert dist == pytest.approx(.5 * A_NACL, abs = 1e-6)


def test_cu_conventional():
    struct = get_cu_conventional()

    prim = PC.Primitive.get_primitive(struct, symprec = 1e-5)
    check_primitive(struct, prim, 4)

    assert np.all(prim.mapping_table == 0)
    assert prim.cell.get_volume() == pytest.approx(A_CU**3 / 4)

    # The fcc primitive vectors connect nearest neighbours
    lengths = np.sqrt(np.sum(prim.cell.unit_cell**2, axis = 1))
    assert np.allclose(lengths, A_CU / np.sqrt(2))


def test_noisy_supercell():
    np.random.seed(0)

    unit_cell = get_nacl_primitive()
    supercell, itau = unit_cell.generate_supercell((2,2,2), get_itau = True)
    supercell.coords += np.random.normal(0, 1e-5, supercell.coords.shape)

    prim = PC.Primitive.get_primitive(supercell, symprec = 1e-3)
    check_primitive(supercell, prim, 8)

    # Mapping consistent with the supercell replicas
    for i in range(supercell.N_atoms):
        for j in range(supercell.N_atoms):
            assert (prim.mapping_table[i] == prim.mapping_table[j]) == (itau[i] == itau[j])


def test_already_primitive():
    unit_cell = get_nacl_primitive()

    prim = PC.Primitive.get_primitive(unit_cell, symprec = 1e-5)
    check_primitive(unit_cell, prim, 1)
    assert np.all(prim.mapping_table == [0, 1])


if __name__ == "__main__":
    test_nacl_supercell()
    test_cu_conventional()
    test_noisy_supercell()
    test_already_primitive()
