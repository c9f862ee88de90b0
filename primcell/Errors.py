"""
Failure kinds of the primitive cell search.

Each step of the search raises one of these exceptions, the tolerance backoff
loops catch them and retry. Any other exception propagates to the caller.
"""


class PrimitiveCellError(Exception):
    """Base class of all the failures of the primitive cell search."""


class NoTranslationsFound(PrimitiveCellError):
    """The pure translations of the structure could not be found."""


class NoConsistentBasis(PrimitiveCellError):
    """No triple of candidate vectors spans a lattice with the expected volume."""


class ReductionFailed(PrimitiveCellError):
    """The Delaunay reduction or the trimming of the atoms failed."""


class PrimitiveCellNotFound(PrimitiveCellError):
    """All the attempts of the tolerance backoff failed."""
