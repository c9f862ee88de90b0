"""
The initialization of the primcell package.
Import the submodules you need, e.g.

    import primcell as PC
    import primcell.Structure
    import primcell.Primitive
"""


__all__ = ["Structure", "Methods", "symmetries", "Primitive", "Settings", "Errors"]
