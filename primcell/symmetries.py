# -*- coding: utf-8 -*-
"""
Symmetry collaborators of the primitive cell search.

The pure translations (symmetry operations with identity rotation) and the
Delaunay reduction of the lattice are obtained from spglib.
Translations are always in crystal coordinates, one per row, and the
identity (the zero vector) is always the first one.
"""
import numpy as np

import spglib
from spglib.error import SpglibError

import primcell.Methods as Methods
import primcell.Settings as Settings
from primcell.Errors import NoTranslationsFound, ReductionFailed


__all__ = ["GetSymmetriesFromSPGLIB", "get_pure_translations",
           "reduce_pure_translations", "check_translation", "delaunay_reduce"]


def GetSymmetriesFromSPGLIB(spglib_sym):
    """
    CONVERT THE SYMMETRIES
    ======================

    This module comvert the symmetry fynction from the spglib format.


    Parameters
    ----------
        spglib_sym : dict
            Result of spglib.get_symmetry( ... ) function

    Returns
    -------
        symmetries : list
            A list of 3x4 matrices containing the symmetry operation
            (the last column is the fractional translation)
    """

    # Check if the type is correct
    if not "translations" in spglib_sym:
        raise ValueError("Error, your symmetry dict has no 'translations' key.")

    if not "rotations" in spglib_sym:
        raise ValueError("Error, your symmetry dict has no 'rotations' key.")

    out_sym = []
    n_sym = np.shape(spglib_sym["translations"])[0]

    translations = spglib_sym["translations"]
    rotations = spglib_sym["rotations"]

    for i in range(n_sym):
        sym = np.zeros((3,4))
        sym[:,:3] = rotations[i, :, :]
        sym[:, 3] = translations[i,:]
        out_sym.append(sym)

    return out_sym


def _is_lattice_vector(unit_cell, translation, symprec):
    # The translation is the identity modulo a lattice vector
    cart = Methods.cryst_to_cart(unit_cell, Methods.get_min_image(translation))
    return np.sqrt(cart.dot(cart)) < symprec


def _sort_translations(unit_cell, translations, symprec):
    """
    Wrap the translations in [0, 1), drop the duplicates and put the identity first.
    """
    unique = [np.zeros(3, dtype = np.float64)]
    found_identity = False

    for trans in translations:
        if _is_lattice_vector(unit_cell, trans, symprec):
            found_identity = True
            continue

        new_trans = Methods.wrap_to_unit(trans)
        is_new = True
        for other in unique:
            if Methods.get_min_dist_into_cell(unit_cell, Methods.cryst_to_cart(unit_cell, new_trans),
                                              Methods.cryst_to_cart(unit_cell, other)) < symprec:
                is_new = False
                break
        if is_new:
            unique.append(new_trans)

    return np.array(unique), found_identity


def get_pure_translations(structure, symprec, angle_tolerance = Settings.__ANGLE_TOLERANCE__):
    """
    PURE TRANSLATIONS
    =================

    Find the translations that map the structure onto itself.
    They are the symmetry operations found by spglib with the identity rotation.

    Parameters
    ----------
        - structure : Structure
            The structure (with unit cell)
        - symprec : float
            The tolerance on the atomic positions
        - angle_tolerance : float
            The angle tolerance passed to spglib (negative for the spglib default)

    Results
    -------
        - pure_trans : ndarray(size = (n_trans, 3))
            The pure translations in crystal coordinates.
            pure_trans[0, :] is the identity.
    """

    structure.check_consistency()

    try:
        spg_syms = spglib.get_symmetry(structure.get_spglib_cell(), symprec = symprec,
                                       angle_tolerance = angle_tolerance)
    except SpglibError as error:
        raise NoTranslationsFound("Error, spglib could not find the symmetries with symprec = {}: {}".format(symprec, error)) from error

    if spg_syms is None:
        raise NoTranslationsFound("Error, spglib could not find the symmetries with symprec = {}".format(symprec))

    symmetries = GetSymmetriesFromSPGLIB(spg_syms)

    I = np.eye(3)
    translations = [sym[:, 3] for sym in symmetries if np.sum((sym[:, :3] - I)**2) < 0.5]

    pure_trans, found_identity = _sort_translations(structure.unit_cell, translations, symprec)
    if not found_identity:
        raise NoTranslationsFound("Error, the identity is not among the symmetries found with symprec = {}".format(symprec))

    return pure_trans


def check_translation(structure, translation, symprec):
    """
    Check if the translation maps each atom of the structure on
    an atom of the same type, within the tolerance.

    Parameters
    ----------
        - structure : Structure
        - translation : ndarray(size = 3)
            The translation in crystal coordinates
        - symprec : float
            The tolerance on the distance between atoms (cartesian)

    Results
    -------
        - check : bool
    """

    cryst = structure.get_crystal_coords()
    types = structure.get_atomic_types()

    new_cryst = cryst + translation
    cryst_dist = Methods.get_min_image(new_cryst[:, np.newaxis, :] - cryst[np.newaxis, :, :])
    distances = np.sqrt(np.sum(cryst_dist.dot(structure.unit_cell)**2, axis = 2))

    overlap = (distances < symprec) & (types[:, np.newaxis] == types[np.newaxis, :])
    return bool(np.all(np.any(overlap, axis = 1)))


def reduce_pure_translations(structure, pure_trans, symprec, angle_tolerance = Settings.__ANGLE_TOLERANCE__):
    """
    REDUCE THE PURE TRANSLATIONS
    ============================

    Check again the pure translations with the given tolerance,
    and discard those that do not map the structure onto itself
    (usually found with a too loose tolerance).

    The angle_tolerance is accepted to match get_pure_translations,
    it has no effect as pure translations have no rotation.

    Parameters
    ----------
        - structure : Structure
        - pure_trans : ndarray(size = (n_trans, 3))
            The translations to be checked (crystal coordinates)
        - symprec : float
            The tolerance on the atomic positions

    Results
    -------
        - pure_trans_reduced : ndarray(size = (n_reduced, 3))
            The translations that survived, the identity is the first one.
    """

    structure.check_consistency()

    pure_trans = np.asarray(pure_trans, dtype = np.float64)
    if pure_trans.ndim != 2 or pure_trans.shape[0] == 0 or pure_trans.shape[1] != 3:
        raise NoTranslationsFound("Error, no translations to be reduced (shape {})".format(pure_trans.shape))

    good_trans = [trans for trans in pure_trans if check_translation(structure, trans, symprec)]

    pure_trans_reduced, found_identity = _sort_translations(structure.unit_cell, good_trans, symprec)
    if not found_identity:
        raise NoTranslationsFound("Error, the identity has been lost reducing the translations.")

    return pure_trans_reduced


def delaunay_reduce(unit_cell, symprec):
    """
    Delaunay reduction of the lattice (spglib).

    Parameters
    ----------
        - unit_cell : ndarray(size = (3,3))
            unit_cell[i,:] is the i-th lattice vector
        - symprec : float
            The tolerance of the reduction

    Results
    -------
        - reduced_cell : ndarray(size = (3,3))
            The reduced lattice, with the same volume.
    """

    try:
        reduced_cell = spglib.delaunay_reduce(np.array(unit_cell, dtype = np.float64), eps = symprec)
    except SpglibError as error:
        raise ReductionFailed("Error, the Delaunay reduction failed with symprec = {}: {}".format(symprec, error)) from error

    if reduced_cell is None:
        raise ReductionFailed("Error, the Delaunay reduction failed with symprec = {}".format(symprec))

    reduced_cell = np.array(reduced_cell, dtype = np.float64)
    if np.abs(np.linalg.det(reduced_cell)) < Settings.__EPSILON__:
        raise ReductionFailed("Error, the Delaunay reduction returned a singular lattice.")

    return reduced_cell
