# -*- coding: utf-8 -*-
"""
Fold the atoms of a structure inside a smaller cell.
"""
import numpy as np
import pytest

import primcell as PC
import primcell.Structure
import primcell.Methods
from primcell.Errors import ReductionFailed


BCC_PRIMITIVE = np.array([[1, 1, 1], [1, -1, -1], [-1, 1, -1]], dtype = np.float64)


def get_cubic_structure(positions, atoms):
    struct = PC.Structure.Structure(len(atoms))
    struct.atoms = list(atoms)
    struct.unit_cell = np.eye(3) * 2
    struct.has_unit_cell = True
    struct.set_crystal_coords(positions)
    return struct


def test_trim_bcc():
    struct = get_cubic_structure([[0, 0, 0], [.5, .5, .5]], ["Fe", "Fe"])

    trimmed, mapping = struct.trim_cell(BCC_PRIMITIVE, 1e-5)

    assert trimmed.N_atoms == 1
    assert trimmed.atoms == ["Fe"]
    assert np.all(mapping == [0, 0])
    assert np.allclose(trimmed.unit_cell, BCC_PRIMITIVE)
    assert np.max(np.abs(PC.Methods.get_min_image(trimmed.get_crystal_coords()))) < 1e-10


def test_trim_averages_positions():
    shift = 1e-4
    struct = get_cubic_structure([[0, 0, 0], [.5 + shift, .5, .5]], ["Fe", "Fe"])

    trimmed, mapping = struct.trim_cell(BCC_PRIMITIVE, 1e-3)

    # The atom is in the middle of the two folded positions
    expected = np.array([shift, 0, 0])
    dist = PC.Methods.get_min_dist_into_cell(trimmed.unit_cell, trimmed.coords[0,:], expected)
    assert dist < 1e-8


def test_trim_two_species():
    struct = get_cubic_structure([[0, 0, 0], [.5, .5, .5], [.25, .25, .25], [.75, .75, .75]],
                                 ["Fe", "Fe", "Al", "Al"])

    trimmed, mapping = struct.trim_cell(BCC_PRIMITIVE, 1e-5)

    assert trimmed.N_atoms == 2
    assert trimmed.atoms == ["Fe", "Al"]
    assert np.all(mapping == [0, 0, 1, 1])


def test_trim_not_divisible():
    struct = get_cubic_structure([[0, 0, 0], [.5, .5, .5], [.25, .25, .25]], ["Fe", "Fe", "Al"])

    with pytest.raises(ReductionFailed):
        struct.trim_cell(BCC_PRIMITIVE, 1e-5)


def test_trim_inconsistent_groups():
    # The second atom is not on a bcc site
    struct = get_cubic_structure([[0, 0, 0], [.3, .3, .3]], ["Fe", "Fe"])

    with pytest.raises(ReductionFailed):
        struct.trim_cell(BCC_PRIMITIVE, 1e-5)


def test_trim_skewed_across_boundary():
    # Two copies of the same atom, slightly displaced on opposite
    # sides of the origin of a skewed cell
    skewed = np.array([[1, 0, 0], [.9, 1, 0], [0, 0, 1]], dtype = np.float64)
    struct = PC.Structure.Structure(2)
    struct.atoms = ["Si", "Si"]
    struct.unit_cell = skewed.copy()
    struct.unit_cell[0, :] *= 2
    struct.has_unit_cell = True
    struct.coords = np.array([[-1e-3, 0, 0], [1 + 1e-3, 0, 0]])

    trimmed, mapping = struct.trim_cell(skewed, 1e-2)

    assert trimmed.N_atoms == 1
    assert np.all(mapping == [0, 0])
    assert PC.Methods.get_min_dist_into_cell(skewed, trimmed.coords[0, :], np.zeros(3)) < 1e-8

    cryst = trimmed.get_crystal_coords()
    assert np.all(cryst > -1e-10) and np.all(cryst < 1)


def test_overlap_table_reduces_tolerance():
    # With a too large tolerance all the four atoms overlap,
    # the tolerance must be reduced to get groups of two
    positions = np.array([[0, 0, 0], [1e-3, 0, 0], [.02, 0, 0], [.02 + 1e-3, 0, 0]])
    types = np.array([1, 1, 1, 1])
    unit_cell = np.eye(3)

    table = PC.Methods.get_overlap_table(positions, types, unit_cell, 2, 0.0215)
    assert np.all(table == [0, 0, 2, 2])


if __name__ == "__main__":
    test_trim_bcc()
    test_trim_averages_positions()
    test_trim_two_species()
    test_trim_not_divisible()
    test_trim_inconsistent_groups()
    test_trim_skewed_across_boundary()
    test_overlap_table_reduces_tolerance()
