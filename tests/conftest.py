"""
Pytest configuration and fixtures for vpc tests.
"""
import platform
import shutil
import subprocess
import sys

import pytest

from vpc import compiler


def _native_toolchain_available():
    if not sys.platform.startswith("linux") or platform.machine() not in ("x86_64", "AMD64"):
        return False
    return shutil.which("nasm") is not None and shutil.which("ld") is not None


requires_toolchain = pytest.mark.skipif(
    not _native_toolchain_available(),
    reason="needs nasm and ld on x86-64 Linux",
)


@pytest.fixture
def build_and_run(tmp_path):
    """Compile Viper source, assemble and link it, run the executable."""

    def _build_and_run(src, **options):
        asm_path = tmp_path / "output.asm"
        obj_path = tmp_path / "output.o"
        exe_path = tmp_path / "output"
        asm_path.write_text(compiler.compile_source(src, **options).asm, encoding="utf-8")
        for cmd in (
            ["nasm", "-f", "elf64", str(asm_path), "-o", str(obj_path)],
            ["ld", "-m", "elf_x86_64", str(obj_path), "-o", str(exe_path)],
        ):
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
            if result.returncode != 0:
                pytest.fail(f"{cmd[0]} failed:\nSTDOUT: {result.stdout}\nSTDERR: {result.stderr}")
        return subprocess.run([str(exe_path)], capture_output=True, text=True, timeout=10)

    return _build_and_run
