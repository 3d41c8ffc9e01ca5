# File: tests/test_cli.py
"""
End-to-end runs of the mini-fem command.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from mini_fem.cli import build_parser, main

MESH_DIR = Path(__file__).resolve().parent.parent / "meshes"
TRUSS = str(MESH_DIR / "truss3.fem")
FRAME = str(MESH_DIR / "portal_frame.fem")


@pytest.fixture(autouse=True)
def reset_package_logger():
    """main() installs handlers on the package logger; drop them afterwards."""
    yield
    logger = logging.getLogger("mini_fem")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def test_info(capsys):
    assert main(["info", TRUSS]) == 0
    out = capsys.readouterr().out
    assert "nodes: 3" in out
    assert "dofs: 6" in out
    assert "fixed: 3" in out


def test_assemble_saves_npz(tmp_path, capsys):
    out_file = tmp_path / "system.npz"
    assert main(["assemble", FRAME, "--sparse", "--out", str(out_file)]) == 0
    assert "sparse" in capsys.readouterr().out

    data = np.load(out_file)
    assert data["K"].shape == (12, 12)
    assert data["F"].shape == (12,)
    assert data["fixed"].shape == (6, 2)


def test_solve_writes_csv(tmp_path, capsys):
    csv = tmp_path / "results.csv"
    assert main(["solve", TRUSS, "--csv", str(csv)]) == 0
    out = capsys.readouterr().out
    assert "Nodal displacements:" in out
    assert "node 2:" in out

    table = pd.read_csv(csv)
    assert list(table["element"]) == [0, 1, 2]
    assert table.loc[2, "axial_force"] == pytest.approx(5.0)


def test_solve_with_extra_supports(capsys):
    assert main(["solve", TRUSS, "--fix", "1"]) == 0
    assert "Bar2D" in capsys.readouterr().out


def test_draw(tmp_path):
    out_file = tmp_path / "frame.png"
    assert main(["draw", FRAME, "--out", str(out_file), "--deformed", "--scale", "50"]) == 0
    assert out_file.exists()


def test_fem_error_exit_code(tmp_path, caplog):
    bad = tmp_path / "bad.fem"
    bad.write_text("<Node> 0 2 0 0 <END> <END> <Bar2D> 0 0 1 0 <END> <END>\n")
    assert main(["info", str(bad)]) == 1
    assert "DanglingReferenceError" in caplog.text


def test_singular_system_exit_code(tmp_path):
    """Removing the supports makes the truss a mechanism."""
    text = (MESH_DIR / "truss3.fem").read_text()
    free = tmp_path / "free.fem"
    free.write_text(text.split("<LoadBC>", 1)[0] + "<END>\n")
    assert main(["solve", str(free)]) == 1


def test_load_component_mismatch_exit_code(tmp_path, caplog):
    """A 3-component UDL on a 2D truss is a malformed record, not a crash."""
    text = (MESH_DIR / "truss3.fem").read_text()
    bad = tmp_path / "udl3.fem"
    bad.write_text(text.split("<LoadNode>", 1)[0] + "<LoadUDL> 9 1 0 3 0.0 -1.0 5.0 <END>\n")
    assert main(["info", str(bad)]) == 1
    assert "MalformedRecordError" in caplog.text


def test_fix_unknown_node_exit_code(caplog):
    assert main(["solve", TRUSS, "--fix", "42"]) == 1
    assert "Node 42" in caplog.text


def test_missing_file_exit_code(tmp_path):
    assert main(["info", str(tmp_path / "nope.fem")]) == 2


def test_log_file(tmp_path):
    log_file = tmp_path / "run.log"
    assert main(["-v", "--log-file", str(log_file), "info", TRUSS]) == 0
    text = log_file.read_text()
    assert "Loaded mesh" in text
    assert "DEBUG" in text


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
