# -*- coding: utf-8 -*-
"""
Run the find_primitive_cell.py script on a bcc structure.
"""
import os
import importlib.util

import numpy as np

import ase
import ase.io


def load_script():
    total_path = os.path.dirname(os.path.abspath(__file__))
    script = os.path.join(total_path, "..", "..", "scripts", "find_primitive_cell.py")

    spec = importlib.util.spec_from_file_location("find_primitive_cell", script)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_find_primitive_script(tmp_path, capsys):
    atoms = ase.Atoms(["Fe", "Fe"], scaled_positions = [[0, 0, 0], [.5, .5, .5]],
                      cell = np.eye(3) * 2.87, pbc = True)
    filename = os.path.join(str(tmp_path), "bcc.xyz")
    output = os.path.join(str(tmp_path), "primitive.xyz")
    ase.io.write(filename, atoms, format = "extxyz")

    script = load_script()
    assert script.main([filename, "--symprec", "1e-5", "-o", output]) == 0

    out = capsys.readouterr().out
    assert "Number of atoms: 2 -> 1" in out
    assert "Multiplicity: 2" in out
    assert "Mapping: 0 0" in out

    prim = ase.io.read(output)
    assert len(prim) == 1
    assert abs(prim.get_volume() - 2.87**3 / 2) < 1e-6
