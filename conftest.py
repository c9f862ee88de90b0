"""
pytest configuration: the repository root is put in sys.path,
so that the tests run also without installing primcell.
"""
