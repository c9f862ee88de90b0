# -*- coding: utf-8 -*-
"""
Linear algebra utilities on lattices and crystal coordinates.

All the lattices follow the same convention: the i-th lattice vector
is unit_cell[i, :].
"""
import numpy as np

import primcell.Settings as Settings
from primcell.Errors import ReductionFailed


__all__ = ["covariant_coordinates", "cryst_to_cart", "cart_to_cryst",
           "put_into_cell", "get_min_dist_into_cell", "get_closest_vector",
           "wrap_to_unit", "get_min_image", "round_to_int",
           "get_integer_determinant", "get_overlap_table"]


def covariant_coordinates(basis, vectors):
    """
    Covariant Coordinates
    =====================

    This method returns the covariant coordinates of the given vector in the chosen basis.
    Covariant coordinates are the coordinates expressed as:
        .. math::

            \\vec v = \\sum_i \\alpha_i \\vec e_i


    where :math:`\\vec e_i` are the basis vectors. Note: the :math:`\\alpha_i` are not the
    projection of the vector :math:`\\vec v` on :math:`\\vec e_i` if the basis is not orthogonal.


    Parameters
    ----------
        - basis : ndarray(size = (N,N))
            The basis. each :math:`\\vec e_i` is a row.
        - vector : ndarray(size = (N_vectors, N))
            The vectors expressed in cartesian coordinates.
            It coould be just one ndarray(size=N)

    Results
    -------
        - cov_vector : Nx float
            The :math:`\\alpha_i` values.

    """

    metric_tensor = basis.dot(basis.T)
    imt = np.linalg.inv(metric_tensor)

    contra_vect = vectors.dot(basis.T)
    return contra_vect.dot(imt)


def cryst_to_cart(unit_cell, cryst_vectors):
    """
    Convert a vector from crystalline to cartesian.
    Many vectors counld be pased toghether, in that case the last axis must be the one with the vector.

    Parameters
    ----------
        unit_cell : ndarray((3,3))
            The unit cell vectors.
            The i-th cell vector is unit_cell[i, :]
        cryst_vectors : ndarray((N_vectors, 3)) or ndarray(3)
            The vector(s) in crystalline coordinates that you want to
            transform in cartesian coordinates

    Results
    -------
        cart_vectors : ndarray((N_vectors, 3)) or ndarray(3)
            The vector(s) in cartesian coordinates
    """

    return cryst_vectors.dot(unit_cell)


def cart_to_cryst(unit_cell, cart_vectors):
    """
    Convert a vector from cartesian to crystalline.
    Many vectors counld be pased toghether, in that case the last axis must be the one with the vector.

    Parameters
    ----------
        unit_cell : ndarray((3,3))
            The unit cell vectors.
            The i-th cell vector is unit_cell[i, :]
        cart_vectors : ndarray((N_vectors, 3)) or ndarray(3)
            The vector(s) in cartesian coordinates that you want to
            transform in crystalline coordinates

    Results
    -------
        cryst_vectors : ndarray((N_vectors, 3)) or ndarray(3)
            The vector(s) in crystalline coordinates
    """
    return covariant_coordinates(unit_cell, cart_vectors)


def put_into_cell(cell, vector):
    """
    This function take the given vector and gives as output the corresponding
    one inside the specified cell.

    Parameters
    ----------
        - cell : double, 3x3 matrix
              The unit cell, a 3x3 matrix whose rows specifies the cell vectors
        - vector : double, 3 elements ndarray
              The vector to be shifted into the unit cell.

    Results
    -------
        - new_vector : double, 3 elements ndarray
              The corresponding vector into the unit cell
    """

    # Check if the system has unit cell
    if np.abs(np.linalg.det(cell)) < Settings.__EPSILON__:
        ERROR_MSG = """
    Error, the structure has no unit cell (or vectors are linearly dependent).
    """
        raise ValueError(ERROR_MSG)

    # Put the vector inside the unit cell
    # To do this, just obtain the covariant vector coordinates.
    covect = wrap_to_unit(covariant_coordinates(cell, vector))

    # Go back
    return cryst_to_cart(cell, covect)


def wrap_to_unit(values):
    """
    Bring each crystal coordinate inside the [0, 1) interval.

    Parameters
    ----------
        - values : float or ndarray
            The crystal coordinates (any shape).

    Results
    -------
        - wrapped : ndarray
            The same coordinates, modulo 1.
    """
    values = np.asarray(values, dtype = np.float64)
    wrapped = values - np.floor(values)

    # Tiny negative numbers give 1 (or almost 1) after the floor
    return np.where(wrapped > 1 - Settings.__EPSILON__, 0., wrapped)


def get_min_image(cryst_distance):
    """
    Return the periodic image of a crystal distance closest to zero,
    component by component (each component inside [-0.5, 0.5]).
    """
    cryst_distance = np.asarray(cryst_distance, dtype = np.float64)
    return cryst_distance - np.floor(cryst_distance + .5)


def get_min_dist_into_cell(unit_cell, v1, v2):
    """
    This function obtain the minimum distance between two vector, considering the given unit cell


    Parameters
    ----------
        unit_cell : ndarray 3x3
            The unit cell
        v1 : ndarray 3
            Vector 1
        v2 : ndarray 3
            Vector 2

    Results
    -------
        float
            The minimum distance between the two fector inside the given unit cell
    """

    # Get the covariant components and bring the distance as close as possible to zero
    covect_distance = get_min_image(covariant_coordinates(unit_cell, v1 - v2))

    # Compute the distance using the metric tensor
    metric_tensor = unit_cell.dot(unit_cell.T)
    return np.sqrt(covect_distance.dot(metric_tensor.dot(covect_distance)))


def get_closest_vector(unit_cell, v_dist):
    """
    This subroutine computes the periodic replica of v_dist
    that minimizes its modulus.

    Parameters
    ----------
        - unit_cell : ndarray(size = (3,3))
            The unit cell vector, unit_cell[i,:] is the i-th cell vector
        - v_dist : ndarray(size = 3)
            The distance vector that you want to optimize

    Returns
    -------
        - new_v_dist: ndarray(size = 3)
            The replica of v_dist that has the minimum modulus
    """

    # Define the metric tensor
    g = unit_cell.dot(unit_cell.T)
    alphas = covariant_coordinates(unit_cell, v_dist)

    # Define the minimum function
    def min_f(n):
        tmp = g.dot(2 * alphas + n)
        return n.dot(tmp)

    # Get the starting guess for the vector
    n_start = -np.floor(alphas + .5)
    n_min = n_start.copy()
    tot_min = min_f(n_min)

    # Get the supercell shift that minimizes the vector
    for n_x in [-1,0,1]:
        for n_y in [-1,0,1]:
            for n_z in [-1,0,1]:
                n_v = n_start + np.array([n_x, n_y, n_z])
                new_min = min_f(n_v)
                if new_min < tot_min:
                    tot_min = new_min
                    n_min = n_v

    # Get the new vector
    new_v = v_dist + n_min.dot(unit_cell)
    return new_v


def round_to_int(matrix):
    """
    Round each element to the nearest integer (half away from zero).

    Results
    -------
        - int_matrix : ndarray(dtype = np.intc)
    """
    matrix = np.asarray(matrix, dtype = np.float64)
    return np.trunc(matrix + np.copysign(.5, matrix)).astype(np.intc)


def get_integer_determinant(int_matrix):
    """
    Exact determinant of a 3x3 integer matrix.
    """
    m = [[int(x) for x in row] for row in int_matrix]
    return m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1]) \
        + m[0][1] * (m[1][2] * m[2][0] - m[1][0] * m[2][2]) \
        + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])


def get_overlap_table(positions, types, unit_cell, ratio, symprec, verbose = False):
    """
    OVERLAPPING ATOMS
    =================

    Group the atoms that fall on the same site once they are folded
    inside a smaller cell. Two atoms overlap if they have the same type and
    their minimum image distance is below the tolerance.

    Each group must contain exactly ratio atoms (the ratio between the volume of the
    original cell and the one of the smaller cell). If it is not the case the tolerance
    is adjusted: reduced if some group is too large, increased if some group is too small.

    Parameters
    ----------
        - positions : ndarray(size = (N_atoms, 3))
            The crystal coordinates of the atoms in the smaller cell
        - types : ndarray(size = N_atoms, dtype = int)
            The type of each atom
        - unit_cell : ndarray(size = (3,3))
            The smaller cell, unit_cell[i,:] is the i-th vector
        - ratio : int
            The expected number of atoms in each group
        - symprec : float
            The starting tolerance for the overlap
        - verbose : bool
            If true print the tolerance changes

    Results
    -------
        - overlap_table : ndarray(size = N_atoms, dtype = np.intc)
            For each atom, the index of the first atom of its group.
    """

    positions = np.asarray(positions, dtype = np.float64)
    types = np.asarray(types)
    nat = positions.shape[0]

    # Get all the minimum image distances between the atoms
    cryst_dist = get_min_image(positions[:, np.newaxis, :] - positions[np.newaxis, :, :])
    cart_dist = cryst_dist.dot(unit_cell)
    distances = np.sqrt(np.sum(cart_dist**2, axis = 2))
    same_type = types[:, np.newaxis] == types[np.newaxis, :]

    tolerance = symprec
    for attempt in range(Settings.NUM_ATTEMPT):
        overlap = same_type & (distances < tolerance)
        n_overlap = np.sum(overlap, axis = 1)

        if np.all(n_overlap == ratio):
            # The first overlapping atom (argmax picks the first True)
            overlap_table = np.argmax(overlap, axis = 1).astype(np.intc)

            # Each atom of the group must see the same group
            if np.all(overlap[overlap_table, :] == overlap):
                return overlap_table
            tolerance *= Settings.REDUCE_RATE
        elif np.any(n_overlap > ratio):
            tolerance *= Settings.REDUCE_RATE
        else:
            tolerance *= Settings.INCREASE_RATE

        if verbose:
            print("Overlap tolerance changed to {:.8g} (attempt {})".format(tolerance, attempt))

    raise ReductionFailed("Error, the {} atoms cannot be grouped {} by {} in the new cell.".format(nat, ratio, ratio))
