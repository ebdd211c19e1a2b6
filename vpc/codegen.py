"""x86-64 NASM code generation for Viper programs.

The generated program is freestanding: I/O and exit go through Linux
system calls, there is no libc. Every variable lives in a 64-bit slot in
.bss. Expressions evaluate into rax; binary operators save the right
operand on the machine stack and pop it into rbx.
"""
from typing import List, Any

from . import ast
from .errors import CodegenError, UnsupportedOperator


INT64_MAX = 2 ** 63 - 1
INT64_MIN = -2 ** 63

BUFFER_SIZE = 20  # 19 digits and a sign for any int64
ERROR_MESSAGE = "Error: Division by zero"

SYS_WRITE = 1
SYS_EXIT = 60
STDOUT = 1
STDERR = 2
DIV_ZERO_STATUS = 1

# Symbols the emitted program defines besides the variable slots
RUNTIME_SYMBOLS = {
    'buffer',
    'newline',
    'error_message',
    'error_len',
    'division_by_zero',
    'int_to_string',
}


def to_int64(value) -> int:
    """Truncate a literal toward zero, saturating at the signed 64-bit bounds."""
    if value != value:  # NaN
        return 0
    if value >= INT64_MAX:
        return INT64_MAX
    if value <= INT64_MIN:
        return INT64_MIN
    return int(value)


def slot(name: str) -> str:
    """Assembler symbol for a variable's storage slot.

    The ``$`` prefix makes NASM read the name as a plain identifier, so
    variables called ``loop``, ``and`` or ``ds`` do not clash with mnemonics
    or registers.
    """
    return f"${name}"


class CodeGen:
    def __init__(self, entry_symbol: str = "_start", div_zero_guard: bool = True):
        self.entry_symbol = entry_symbol
        self.div_zero_guard = div_zero_guard
        self.lines: List[str] = []
        self.label_counter = 0

    def emit(self, s=""):
        self.lines.append(s)

    def _next_label_id(self) -> int:
        """Post-increment the label counter."""
        label_id = self.label_counter
        self.label_counter += 1
        return label_id

    def emit_header(self, variables: List[str]):
        """Storage sections and the entry point label."""
        indent = "    "
        self.emit("; Generated by vpc")
        self.emit("section .bss")
        for name in variables:
            self.emit(f"{slot(name)} resq 1")
        self.emit(f"buffer resb {BUFFER_SIZE}")
        self.emit("")
        self.emit("section .data")
        self.emit("newline db 0xA")
        self.emit(f'error_message db "{ERROR_MESSAGE}", 0xA')
        self.emit("error_len equ $ - error_message")
        self.emit("")
        self.emit("section .text")
        self.emit(indent + f"global {self.entry_symbol}")
        self.emit(f"{self.entry_symbol}:")

    def emit_footer(self):
        """Normal exit, the division-by-zero handler and the print helper."""
        indent = "    "
        # exit(0)
        self.emit(indent + f"mov rax, {SYS_EXIT}")
        self.emit(indent + "xor rdi, rdi")
        self.emit(indent + "syscall")

        # Only reached through je from a guarded division
        self.emit("division_by_zero:")
        self.emit(indent + f"mov rax, {SYS_WRITE}")
        self.emit(indent + f"mov rdi, {STDERR}")
        self.emit(indent + "mov rsi, error_message")
        self.emit(indent + "mov rdx, error_len")
        self.emit(indent + "syscall")
        self.emit(indent + f"mov rax, {SYS_EXIT}")
        self.emit(indent + f"mov rdi, {DIV_ZERO_STATUS}")
        self.emit(indent + "syscall")

        # int_to_string: rax = value, rcx = buffer start.
        # Digits are written backwards from the end of the buffer; on return
        # rcx points at the first character and the text ends at buffer+20.
        self.emit("int_to_string:")
        self.emit(indent + "mov r8, rax")
        self.emit(indent + f"add rcx, {BUFFER_SIZE}")
        self.emit(indent + "mov rbx, 10")
        self.emit(indent + "test rax, rax")
        self.emit(indent + "jns .digit")
        self.emit(indent + "neg rax")
        self.emit(".digit:")
        self.emit(indent + "xor rdx, rdx")
        self.emit(indent + "div rbx")
        self.emit(indent + "add dl, '0'")
        self.emit(indent + "dec rcx")
        self.emit(indent + "mov [rcx], dl")
        self.emit(indent + "test rax, rax")
        self.emit(indent + "jnz .digit")
        self.emit(indent + "test r8, r8")
        self.emit(indent + "jns .done")
        self.emit(indent + "dec rcx")
        self.emit(indent + "mov byte [rcx], '-'")
        self.emit(".done:")
        self.emit(indent + "ret")

    def generate(self, node: Any):
        """Emit instructions for one statement or expression node."""
        indent = "    "
        if isinstance(node, ast.Assignment):
            self.generate(node.value)
            self.emit(indent + f"mov [{slot(node.variable)}], rax")

        elif isinstance(node, ast.BinaryOp):
            # Right operand is saved on the stack while the left one is computed
            self.generate(node.right)
            self.emit(indent + "push rax")
            self.generate(node.left)
            self.emit(indent + "pop rbx")
            op = node.operator
            if op == '+':
                self.emit(indent + "add rax, rbx")
            elif op == '-':
                self.emit(indent + "sub rax, rbx")
            elif op == '*':
                self.emit(indent + "imul rax, rbx")
            elif op == '/':
                if self.div_zero_guard:
                    self.emit(indent + "cmp rbx, 0")
                    self.emit(indent + "je division_by_zero")
                # Unsigned divide: exact only for non-negative dividends
                self.emit(indent + "xor rdx, rdx")
                self.emit(indent + "div rbx")
            elif op == '==':
                self.emit(indent + "cmp rax, rbx")
                self.emit(indent + "sete al")
                self.emit(indent + "movzx rax, al")
            else:
                raise UnsupportedOperator(op)

        elif isinstance(node, ast.Number):
            self.emit(indent + f"mov rax, {to_int64(node.value)}")

        elif isinstance(node, ast.Variable):
            self.emit(indent + f"mov rax, [{slot(node.name)}]")

        elif isinstance(node, ast.Print):
            self.generate(node.expression)
            self.emit(indent + "mov rcx, buffer")
            self.emit(indent + "call int_to_string")
            self.emit(indent + "mov rdx, buffer")
            self.emit(indent + f"add rdx, {BUFFER_SIZE}")
            self.emit(indent + "sub rdx, rcx")
            self.emit(indent + "mov rsi, rcx")
            self.emit(indent + f"mov rax, {SYS_WRITE}")
            self.emit(indent + f"mov rdi, {STDOUT}")
            self.emit(indent + "syscall")

            self.emit(indent + "mov rsi, newline")
            self.emit(indent + "mov rdx, 1")
            self.emit(indent + f"mov rax, {SYS_WRITE}")
            self.emit(indent + f"mov rdi, {STDOUT}")
            self.emit(indent + "syscall")

        elif isinstance(node, ast.If):
            label_id = self._next_label_id()
            else_label = f"else{label_id}"
            end_label = f"end_if{label_id}"

            self.generate(node.condition)
            self.emit(indent + "cmp rax, 0")
            self.emit(indent + f"je {else_label}")
            for stmt in node.then_branch:
                self.generate(stmt)
            self.emit(indent + f"jmp {end_label}")
            self.emit(f"{else_label}:")
            for stmt in node.else_branch:
                self.generate(stmt)
            self.emit(f"{end_label}:")

        else:
            raise CodegenError(f"Cannot generate code for {type(node).__name__}")

    def gen(self, program: List[Any], variables: List[str]) -> str:
        """Generate the complete assembly text for a program."""
        self.emit_header(variables)
        for stmt in program:
            self.generate(stmt)
        self.emit_footer()
        return "\n".join(self.lines) + "\n"
