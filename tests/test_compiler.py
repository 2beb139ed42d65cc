# =============================================================================
# test_compiler.py - Single-Pass Compiler Tests
# =============================================================================
# Tests for statement parsing, encoding, forward-reference patching and
# diagnostics.
#
# Test coverage includes:
#   - Labels, db and equ definitions
#   - Forward references and in-place patching
#   - Expressions with + and -, and the $ current address
#   - Number bases and invalid numbers
#   - Overload selection (zero-immediate forms)
#   - Duplicate, unresolved and unknown-command diagnostics
#   - Error recovery and memory overflow
# =============================================================================

import pytest
from byteasm.assembler.compiler import Compiler, MEMORY_SIZE
from byteasm.errors import (
    AssemblySyntaxError,
    DuplicateSymbolError,
    InvalidNumberError,
    MemoryOverflowError,
    UndefinedSymbolError,
    UnknownCommandError,
)


def messages(compiler: Compiler) -> list[str]:
    return [e.message for e in compiler.errors]


# =============================================================================
# Basic Programs
# =============================================================================

class TestBasics:
    """Simple programs with no forward references."""

    def test_empty_source(self, compile_source):
        compiler = compile_source("")
        assert compiler.code == b""
        assert compiler.errors == []

    def test_comments_only(self, compile_source):
        compiler = compile_source("; nothing here\n   ; still nothing\n")
        assert compiler.code == b""
        assert compiler.errors == []

    def test_zero_operand_instructions(self, compile_source):
        compiler = compile_source("nop\nhlt\nret")
        assert compiler.code == bytes([0x00, 0x01, 0x02])
        assert compiler.errors == []

    def test_zero_operand_before_comment(self, compile_source):
        compiler = compile_source("ret ; done\nnop")
        assert compiler.code == bytes([0x02, 0x00])
        assert compiler.errors == []

    def test_register_operands_emit_no_bytes(self, compile_source):
        compiler = compile_source("mov a, b\ninc d")
        assert compiler.code == bytes([0x31, 0x73])

    def test_byte_operand(self, compile_source):
        compiler = compile_source("mov a, 42")
        assert compiler.code == bytes([0x24, 42])

    def test_compile_returns_bytes(self):
        assert Compiler("hlt").compile() == b"\x01"

    def test_compile_twice_is_stable(self):
        compiler = Compiler("jmp x\nx: nop")
        first = compiler.compile()
        assert compiler.compile() == first
        assert len(compiler.errors) == 0


# =============================================================================
# Labels and Forward References
# =============================================================================

class TestLabels:
    """Labels resolve to the output offset at their definition."""

    def test_self_jump(self, jump_catalog, compile_source):
        compiler = compile_source("start: jmp start", catalog=jump_catalog)
        assert compiler.code == bytes([0x10, 0x00])
        assert compiler.errors == []

    def test_backward_reference(self, compile_source):
        compiler = compile_source("nop\nloop: inc a\njmp loop")
        assert compiler.code == bytes([0x00, 0x70, 0x10, 0x01])

    def test_forward_reference_patched(self, compile_source):
        compiler = compile_source("jmp end\nnop\nend: hlt")
        assert compiler.code == bytes([0x10, 0x03, 0x00, 0x01])
        assert compiler.errors == []
        assert compiler.pending == []

    def test_label_value_independent_of_order(self, compile_source):
        before = compile_source("nop\nhere: jmp here").code
        after = compile_source("jmp here\nnop\nhere: nop").code
        assert before[2] == 1
        assert after[1] == 3

    def test_multiple_references_to_one_label(self, compile_source):
        compiler = compile_source("jmp x\njz x\nx: hlt")
        assert compiler.code == bytes([0x10, 0x04, 0x11, 0x04, 0x01])

    def test_label_on_its_own_line(self, compile_source):
        compiler = compile_source("nop\ntarget:\n  jmp target")
        assert compiler.symbols == {"target": 1}
        assert compiler.code == bytes([0x00, 0x10, 0x01])

    def test_forward_value_truncated(self, compile_source):
        compiler = compile_source("mov a, big\nbig equ 0x1FF")
        assert compiler.code == bytes([0x24, 0xFF])


# =============================================================================
# Data and Constants
# =============================================================================

class TestDefinitions:
    """db and equ statements."""

    def test_equ_and_db(self, compile_source):
        compiler = compile_source("x equ 5\ny db x+1, x-1")
        assert compiler.code == bytes([0x06, 0x04])
        assert compiler.errors == []
        assert compiler.symbols == {"x": 5, "y": 0}

    def test_equ_emits_nothing(self, compile_source):
        compiler = compile_source("limit equ 200")
        assert compiler.code == b""
        assert compiler.symbols["limit"] == 200

    def test_db_label_at_current_offset(self, compile_source):
        compiler = compile_source("nop\nnop\ntable db 1, 2, 3")
        assert compiler.symbols["table"] == 2
        assert compiler.code == bytes([0, 0, 1, 2, 3])

    def test_db_forward_reference(self, compile_source):
        compiler = compile_source("ptr db target\ntarget: hlt")
        assert compiler.code == bytes([0x01, 0x01])

    def test_db_values_truncated(self, compile_source):
        compiler = compile_source("v db 256+7, 0-1")
        assert compiler.code == bytes([7, 0xFF])

    def test_db_continues_across_lines_after_comma(self, compile_source):
        compiler = compile_source("v db 1,\n      2")
        assert compiler.code == bytes([1, 2])

    def test_equ_forward_chain(self, compile_source):
        """A constant defined from a later constant resolves once it appears."""
        compiler = compile_source("mov a, a2\na2 equ b2 + 1\nb2 equ 10")
        assert compiler.code == bytes([0x24, 11])
        assert compiler.symbols["a2"] == 11
        assert compiler.errors == []

    def test_long_equ_forward_chain(self, compile_source):
        """Hundreds of chained forward constants resolve without nesting."""
        links = 1000
        lines = ["jmp s0"]
        lines += [f"s{i} equ s{i + 1}" for i in range(links)]
        lines.append(f"s{links} equ 7")
        compiler = compile_source("\n".join(lines))
        assert compiler.code == bytes([0x10, 0x07])
        assert compiler.symbols["s0"] == 7
        assert compiler.errors == []

    def test_duplicate_inside_equ_chain(self, compile_source):
        compiler = compile_source("v db a\na equ b\nb equ 3\nb equ 4")
        assert compiler.code == bytes([3])
        assert messages(compiler) == ["label b is already defined"]

    def test_equ_of_label(self, compile_source):
        compiler = compile_source("nop\nhere:\nalias equ here + 2\njmp alias")
        assert compiler.code == bytes([0x00, 0x10, 0x03])


# =============================================================================
# Expressions
# =============================================================================

class TestExpressions:
    """Operands are + / - chains of numbers, symbols and $."""

    def test_left_to_right(self, compile_source):
        compiler = compile_source("v db 10 - 3 + 2")
        assert compiler.code == bytes([9])

    def test_current_address_in_instruction(self, compile_source):
        """$ is the output length before the instruction is emitted."""
        compiler = compile_source("nop\nnop\njmp $")
        assert compiler.code == bytes([0, 0, 0x10, 0x02])

    def test_current_address_in_db(self, compile_source):
        """The data byte is reserved before its expression is read."""
        compiler = compile_source("nop\nv db $")
        assert compiler.code == bytes([0x00, 0x02])

    def test_mixed_forward_and_known(self, compile_source):
        compiler = compile_source("k equ 3\njmp end - k\nnop\nnop\nend: hlt")
        assert compiler.code == bytes([0x10, 0x01, 0, 0, 0x01])

    def test_missing_value_after_operator(self, compile_source):
        compiler = compile_source("mov a, 1 +\nnop")
        assert messages(compiler) == ["unexpected 'nop'"]


# =============================================================================
# Numbers
# =============================================================================

class TestNumbers:
    """Number bases follow the literal's prefix."""

    @pytest.mark.parametrize("literal,value", [
        ("0", 0),
        ("7", 7),
        ("255", 255),
        ("07", 7),
        ("0x1F", 31),
        ("0X1f", 31),
        ("0b101", 5),
        ("0B11", 3),
        ("012", 12),
    ])
    def test_number(self, compile_source, literal, value):
        compiler = compile_source(f"v db {literal}")
        assert compiler.code == bytes([value])
        assert compiler.errors == []

    @pytest.mark.parametrize("literal", ["08", "0x", "0xG1", "0b102", "12h", "0o17"])
    def test_invalid_number(self, compile_source, literal):
        compiler = compile_source(f"v db {literal}")
        assert len(compiler.errors) == 1
        error = compiler.errors[0]
        assert isinstance(error, InvalidNumberError)
        assert error.message == f"invalid number {literal}"
        assert error.position == (0, 5)

    def test_invalid_number_leaves_placeholder(self, compile_source):
        compiler = compile_source("jmp 9z\nhlt")
        assert compiler.code == bytes([0x10, 0x00, 0x01])
        assert messages(compiler) == ["invalid number 9z"]

    def test_oversized_decimal_is_diagnosed(self, compile_source):
        """Literals too long for int() are reported, not raised."""
        literal = "1" * 5000
        compiler = compile_source(f"v db {literal}\nhlt")
        assert compiler.code == bytes([0x00, 0x01])
        assert len(compiler.errors) == 1
        assert isinstance(compiler.errors[0], InvalidNumberError)
        assert compiler.errors[0].position == (0, 5)


# =============================================================================
# Overloads
# =============================================================================

class TestOverloads:
    """First catalog match wins, including zero-immediate forms."""

    def test_literal_zero_selects_zero_form(self, jump_catalog, compile_source):
        compiler = compile_source("ld a, 0", catalog=jump_catalog)
        assert compiler.code == bytes([0x01])

    def test_nonzero_selects_byte_form(self, jump_catalog, compile_source):
        compiler = compile_source("ld a, 3", catalog=jump_catalog)
        assert compiler.code == bytes([0x02, 0x03])

    def test_known_zero_expression_selects_zero_form(self, jump_catalog, compile_source):
        compiler = compile_source("z equ 4\nld a, z - 4", catalog=jump_catalog)
        assert compiler.code == bytes([0x01])

    def test_forward_zero_uses_byte_form(self, jump_catalog, compile_source):
        """Unknown at match time, so the general form is chosen."""
        compiler = compile_source("ld a, z\nz equ 0", catalog=jump_catalog)
        assert compiler.code == bytes([0x02, 0x00])
        assert compiler.errors == []

    def test_default_mov_zero(self, compile_source):
        compiler = compile_source("mov c, 0\nmov c, 1")
        assert compiler.code == bytes([0x22, 0x26, 0x01])

    def test_unknown_command(self, compile_source):
        compiler = compile_source("nop\n  add b, 1\nhlt")
        assert compiler.code == bytes([0x00, 0x01])
        assert len(compiler.errors) == 1
        error = compiler.errors[0]
        assert isinstance(error, UnknownCommandError)
        assert error.message == "unknown command"
        assert error.position == (1, 2)
        assert "add a, byte" in error.hint

    def test_unknown_arity(self, compile_source):
        compiler = compile_source("jmp")
        assert messages(compiler) == ["unknown command"]

    def test_register_in_custom_catalog(self, jump_catalog, compile_source):
        """'b' is not a register in the synthetic catalog."""
        compiler = compile_source("ld a, b\nb equ 6", catalog=jump_catalog)
        assert compiler.code == bytes([0x02, 0x06])


# =============================================================================
# Diagnostics
# =============================================================================

class TestDuplicates:
    """A name can be defined only once; the first value sticks."""

    def test_duplicate_label(self, compile_source):
        compiler = compile_source("x: nop\nx: nop\njmp x")
        assert messages(compiler).count("label x is already defined") == 1
        assert compiler.symbols["x"] == 0
        assert compiler.code == bytes([0x00, 0x00, 0x10, 0x00])

    def test_duplicate_position(self, compile_source):
        compiler = compile_source("x: nop\n  x: nop")
        error = compiler.errors[0]
        assert isinstance(error, DuplicateSymbolError)
        assert error.position == (1, 2)
        assert error.original_location.position == (0, 0)

    def test_forward_reference_uses_first_definition(self, compile_source):
        compiler = compile_source("jmp x\nnop\nx: nop\nx equ 200")
        assert compiler.code == bytes([0x10, 0x03, 0x00, 0x00])
        assert len(compiler.errors) == 1

    def test_duplicate_db_still_emits(self, compile_source):
        compiler = compile_source("t db 1\nt db 2")
        assert compiler.code == bytes([1, 2])
        assert compiler.symbols["t"] == 0
        assert messages(compiler) == ["label t is already defined"]

    def test_predefined_symbol_cannot_be_redefined(self, compile_source):
        compiler = compile_source("port equ 3", symbols={"port": 9})
        assert compiler.symbols["port"] == 9
        assert messages(compiler) == ["label port is already defined"]


class TestUnresolved:
    """References still pending at the end are errors."""

    def test_unresolved(self, compile_source):
        compiler = compile_source("nop\njmp foo")
        assert messages(compiler) == ["unresolved foo"]
        error = compiler.errors[0]
        assert isinstance(error, UndefinedSymbolError)
        assert error.position == (1, 4)
        assert compiler.code == bytes([0x00, 0x10, 0x00])

    def test_unresolved_in_expression(self, compile_source):
        compiler = compile_source("v db 1 + foo")
        assert messages(compiler) == ["unresolved foo"]

    def test_unresolved_hint(self, compile_source):
        compiler = compile_source("loop: nop\njmp lop")
        assert compiler.errors[0].hint == "did you mean 'loop'?"

    def test_predefined_symbol_resolves(self, compile_source):
        compiler = compile_source("out port, a", symbols={"port": 0x40})
        assert compiler.code == bytes([0xA4, 0x40])
        assert compiler.errors == []


class TestSyntaxErrors:
    """Unexpected tokens are reported and the line is skipped."""

    def test_unexpected_statement(self, compile_source):
        compiler = compile_source("42\nhlt")
        assert messages(compiler) == ["unexpected '42'"]
        assert compiler.code == bytes([0x01])

    def test_rest_of_line_skipped(self, compile_source):
        compiler = compile_source(", , ,\nhlt")
        assert len(compiler.errors) == 1
        assert compiler.code == bytes([0x01])

    def test_name_without_definition(self, compile_source):
        compiler = compile_source("foo bar\nhlt")
        error = compiler.errors[0]
        assert isinstance(error, AssemblySyntaxError)
        assert error.message == "unexpected 'bar'"
        assert error.position == (0, 4)
        assert compiler.code == bytes([0x01])

    def test_name_at_end_of_input(self, compile_source):
        compiler = compile_source("foo")
        assert messages(compiler) == ["unexpected <eof>"]

    def test_next_line_kept_after_bad_name(self, compile_source):
        compiler = compile_source("foo\nbar: hlt")
        assert messages(compiler) == ["unexpected 'bar'"]
        assert compiler.symbols == {"bar": 0}
        assert compiler.code == bytes([0x01])

    def test_bad_operand(self, compile_source):
        compiler = compile_source("mov a, ,\nhlt")
        assert messages(compiler) == ["unexpected ','"]
        assert compiler.code == bytes([0x01])

    def test_missing_db_value(self, compile_source):
        """The reserved byte stays in the output."""
        compiler = compile_source("v db 1, :\nhlt")
        assert messages(compiler) == ["unexpected ':'"]
        assert compiler.code == bytes([1, 0, 0x01])

    def test_trailing_garbage_after_zero_operand_instruction(self, compile_source):
        compiler = compile_source("nop #")
        assert messages(compiler) == ["unexpected '#'"]
        assert compiler.code == b""

    def test_errors_in_source_order(self, compile_source):
        compiler = compile_source("jmp nowhere\n42\nadd b, b")
        assert messages(compiler) == [
            "unexpected '42'",
            "unknown command",
            "unresolved nowhere",
        ]

    def test_error_report(self, compile_source):
        compiler = compile_source("jmp nowhere")
        report = compiler.get_error_report()
        assert "<test>:1:5: error: unresolved nowhere" in report
        assert report.endswith("1 error")


# =============================================================================
# Memory Limit
# =============================================================================

class TestMemoryOverflow:
    """Output beyond MEMORY_SIZE is flagged but still returned."""

    def test_exactly_full(self, compile_source):
        compiler = compile_source("nop\n" * MEMORY_SIZE)
        assert len(compiler.code) == MEMORY_SIZE
        assert compiler.errors == []

    def test_overflow(self, compile_source):
        compiler = compile_source("nop\n" * (MEMORY_SIZE + 10))
        assert len(compiler.code) == MEMORY_SIZE + 10
        assert messages(compiler) == ["memory overflow"]
        error = compiler.errors[0]
        assert isinstance(error, MemoryOverflowError)
        assert error.position == (0, 0)

    def test_overflow_reported_last(self, compile_source):
        compiler = compile_source("jmp nowhere\n" + "nop\n" * MEMORY_SIZE)
        assert messages(compiler) == ["unresolved nowhere", "memory overflow"]
