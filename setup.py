from setuptools import setup


def readme():
    with open("README.md") as f:
        return f.read()


setup( name = "PrimCell",
       version = "1.0",
       description = "Find the primitive cell of periodic crystal structures",
       long_description = readme(),
       long_description_content_type = "text/markdown",
       packages = ["primcell"],
       package_dir = {"primcell": "primcell"},
       install_requires = ["numpy", "ase", "spglib>=2.5"],
       extras_require = {"test": ["pytest"]},
       python_requires = ">=3.7",
       license = "MIT",
       scripts = ["scripts/find_primitive_cell.py"],
       )
