"""
intcodekit CLI tests — each subcommand driven through main(argv).
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

import pytest

import intcodekit


def _write(tmp_path, program, name="prog.txt"):
    p = tmp_path / name
    p.write_text(",".join(str(v) for v in program) + "\n", encoding="utf-8")
    return str(p)


def _affine_program(base, grad_x, grad_y, size=100):
    program = [1, 0, 0, 3,
               2, 1, 21, 1,
               2, 2, 22, 2,
               1, 1, 2, 0,
               1, 0, 23, 0,
               99, grad_x, grad_y, base]
    return program + [0] * (size - len(program))


class TestRun:
    def test_run_raw(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 0, 0, 0, 99])
        assert intcodekit.main(["run", path, "--raw"]) == 0
        assert capsys.readouterr().out.strip() == "2"

    def test_run_default_overrides(self, tmp_path, capsys):
        """Default noun=12, verb=2."""
        path = _write(tmp_path, _affine_program(5, 3, 1))
        assert intcodekit.main(["run", path]) == 0
        assert capsys.readouterr().out.strip() == str(5 + 12 * 3 + 2)

    def test_run_explicit_overrides(self, tmp_path, capsys):
        path = _write(tmp_path, _affine_program(5, 3, 1))
        assert intcodekit.main(["run", path, "--noun", "7", "--verb", "9"]) == 0
        assert capsys.readouterr().out.strip() == str(5 + 7 * 3 + 9)

    def test_run_unknown_opcode(self, tmp_path, capsys):
        path = _write(tmp_path, [42, 0, 0, 0, 99])
        assert intcodekit.main(["run", path]) == 1
        assert "Unknown Opcode" in capsys.readouterr().err

    def test_run_step_budget(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 0, 0, 0, 1, 0, 0, 0, 99])
        assert intcodekit.main(["--max-steps", "1", "run", path, "--raw"]) == 1
        assert "Exceeded Step Budget" in capsys.readouterr().err

    def test_run_program_too_short_for_overrides(self, tmp_path, capsys):
        path = _write(tmp_path, [99])
        assert intcodekit.main(["run", path]) == 1
        assert "Machine error at 0: Address Out Of Range" in capsys.readouterr().err

    def test_run_unlimited_steps(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 0, 0, 0, 1, 0, 0, 0, 99])
        assert intcodekit.main(["--max-steps", "0", "run", path, "--raw"]) == 0
        assert capsys.readouterr().out.strip() == "4"

    def test_missing_file(self, tmp_path, capsys):
        assert intcodekit.main(["run", str(tmp_path / "missing.txt")]) == 1
        assert "Input error" in capsys.readouterr().err

    def test_bad_program_text(self, tmp_path, capsys):
        p = tmp_path / "bad.txt"
        p.write_text("1,0,zero,0,99\n", encoding="utf-8")
        assert intcodekit.main(["run", str(p)]) == 1
        assert "invalid integer" in capsys.readouterr().err

    def test_no_command(self, capsys):
        assert intcodekit.main([]) == 1


class TestSolve:
    def test_solve(self, tmp_path, capsys):
        path = _write(tmp_path, _affine_program(337076, 300000, 1))
        target = 337076 + 64 * 300000 + 21
        assert intcodekit.main(["solve", path, "--target", str(target)]) == 0
        assert capsys.readouterr().out.strip() == "noun=64 verb=21 code=6421"

    def test_solve_out_of_bounds_warns(self, tmp_path, capsys, caplog):
        path = _write(tmp_path, _affine_program(0, 1, 1, size=200))
        with caplog.at_level(logging.WARNING, logger="intcodekit"):
            assert intcodekit.main(["solve", path, "--target", "150"]) == 0
        assert "outside [0, 99]" in caplog.text
        assert "noun=150 verb=0" in capsys.readouterr().out

    def test_solve_affine_violation(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 0, 0, 3, 2, 1, 1, 0, 99] + [0] * 91)
        assert intcodekit.main(["solve", path, "--target", "49"]) == 2
        assert "Solver error" in capsys.readouterr().err

    def test_solve_affine_violation_fatal(self, tmp_path):
        path = _write(tmp_path, [1, 0, 0, 3, 2, 1, 1, 0, 99] + [0] * 91)
        with pytest.raises(SystemExit) as exc:
            intcodekit.main(["solve", path, "--target", "49", "--fatal"])
        assert exc.value.code == 2


class TestInspect:
    def test_trace(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50])
        assert intcodekit.main(["trace", path]) == 0
        out = capsys.readouterr().out
        assert "ADD" in out and "MUL" in out
        assert "HALT at 8: answer=3500 (2 steps)" in out
        assert "0008" in out  # memory dump row

    def test_trace_shows_memory_delta(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50])
        assert intcodekit.main(["trace", path, "--no-dump"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].endswith("; [3] 3->70")
        assert lines[1].endswith("; [0] 1->3500")

    def test_trace_no_change(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 5, 5, 5, 99, 0])
        assert intcodekit.main(["trace", path, "--no-dump"]) == 0
        assert "; no change" in capsys.readouterr().out

    def test_trace_program_too_short_for_overrides(self, tmp_path, capsys):
        path = _write(tmp_path, [99])
        assert intcodekit.main(["trace", path, "--noun", "1", "--no-dump"]) == 1
        assert "ADDRESS at 0: Address Out Of Range (0 steps)" in capsys.readouterr().out

    def test_trace_error(self, tmp_path, capsys):
        path = _write(tmp_path, [42, 0, 0, 0])
        assert intcodekit.main(["trace", path, "--no-dump"]) == 1
        assert "ILLEGAL at 0: Unknown Opcode" in capsys.readouterr().out

    def test_disasm(self, tmp_path, capsys):
        path = _write(tmp_path, [1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50])
        assert intcodekit.main(["disasm", path]) == 0
        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 6
        assert "HALT" in lines[2]

    def test_surface(self, tmp_path, capsys):
        path = _write(tmp_path, _affine_program(3, 10, 1))
        assert intcodekit.main(["surface", path, "--width", "3", "--height", "2"]) == 0
        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 3
        assert lines[0].startswith("verb\\noun")
        assert lines[2].split() == ["1", "4", "14", "24"]
