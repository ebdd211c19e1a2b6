import os
import stat

import pytest

from vpc import cli


def run_cli(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


def test_writes_assembly(tmp_path, capsys) -> None:
    src = tmp_path / "prog.vp"
    src.write_text("x = 1\nprint(x)\n", encoding="utf-8")
    out = tmp_path / "prog.asm"
    cli.main([str(src), "-o", str(out)])
    assert "$x resq 1" in out.read_text(encoding="utf-8")
    assert f"Wrote assembly to {out}" in capsys.readouterr().out
    # No temporary files left behind
    assert sorted(p.name for p in tmp_path.iterdir()) == ["prog.asm", "prog.vp"]


def test_entry_and_guard_options(tmp_path) -> None:
    src = tmp_path / "prog.vp"
    src.write_text("x = 4 / 2", encoding="utf-8")
    out = tmp_path / "prog.asm"
    cli.main([str(src), "-o", str(out), "--entry", "main", "--no-div-guard"])
    text = out.read_text(encoding="utf-8")
    assert "global main" in text
    assert "je division_by_zero" not in text


def test_lex_error_reports_character_and_writes_nothing(tmp_path, capsys) -> None:
    src = tmp_path / "bad.vp"
    src.write_text("x = 5 & 3", encoding="utf-8")
    out = tmp_path / "bad.asm"
    assert run_cli([str(src), "-o", str(out)]) == 1
    err = capsys.readouterr().err
    assert f"Lex error in {src}:" in err
    assert "'&'" in err
    assert not out.exists()


def test_failed_compile_keeps_previous_output(tmp_path, capsys) -> None:
    src = tmp_path / "bad.vp"
    src.write_text("if (x == 1) { print(x)", encoding="utf-8")
    out = tmp_path / "bad.asm"
    out.write_text("previous", encoding="utf-8")
    assert run_cli([str(src), "-o", str(out)]) == 1
    assert "Syntax error in" in capsys.readouterr().err
    assert out.read_text(encoding="utf-8") == "previous"


def test_validation_error_and_opt_out(tmp_path, capsys) -> None:
    src = tmp_path / "prog.vp"
    src.write_text("print(y)", encoding="utf-8")
    out = tmp_path / "prog.asm"
    assert run_cli([str(src), "-o", str(out)]) == 1
    assert "Validation error in" in capsys.readouterr().err
    cli.main([str(src), "-o", str(out), "--no-validate"])
    assert out.exists()


def test_warnings_go_to_stderr(tmp_path, capsys) -> None:
    src = tmp_path / "prog.vp"
    src.write_text("x = 1.5", encoding="utf-8")
    cli.main([str(src), "-o", str(tmp_path / "prog.asm")])
    assert "Warning: Numeric literal 1.5 truncated to 1" in capsys.readouterr().err


def test_missing_input(tmp_path, capsys) -> None:
    assert run_cli([str(tmp_path / "nope.vp")]) == 1
    assert "Input file not found" in capsys.readouterr().err


def test_output_mode_follows_umask(tmp_path) -> None:
    src = tmp_path / "prog.vp"
    src.write_text("x = 1", encoding="utf-8")
    out = tmp_path / "prog.asm"
    cli.main([str(src), "-o", str(out)])
    umask = os.umask(0)
    os.umask(umask)
    assert stat.S_IMODE(out.stat().st_mode) == 0o666 & ~umask
