"""
Instruction Catalog
===================

This module defines the instruction set understood by the assembler: the
operand types, the catalog of instruction encodings and the overload
matching rules.

Every instruction is a single opcode byte, optionally followed by one byte
per byte-immediate operand. Register operands and the zero-immediate form
are encoded in the opcode itself and emit nothing extra.

Operand Types
-------------
1. **Register slot** (A, B, C, D): the operand is that exact register
   - Example: inc b -> $71

2. **BYTE**: any expression, embedded as one byte after the opcode
   - Example: mov a, 42 -> $24 $2A

3. **ZERO**: matches a byte expression whose value is known to be 0 when
   the instruction is matched, selecting a shorter encoding
   - Example: mov a, 0 -> $20

Overload Resolution
-------------------
Several entries may share a mnemonic. The first entry (in catalog order)
whose mnemonic, operand count and operand types all match wins. Zero forms
are therefore listed before the general byte form of the same mnemonic.
An operand whose value is still unknown (a forward reference) never
matches ZERO, even if it later resolves to 0.

Default Instruction Set
-----------------------
The default catalog describes a small accumulator machine with four
registers (a, b, c, d) and a 256 byte address space. Arithmetic and logic
always target register a.

| Group     | Forms                                  | Opcodes     |
|-----------|----------------------------------------|-------------|
| Control   | nop, hlt, ret                          | $00-$02     |
| Jumps     | jmp/jz/jnz/jc/jnc/call byte            | $10-$15     |
| Move      | mov r,0 / mov r,byte / mov r,s         | $20-$27,$30 |
| Memory    | ld r,byte / st byte,r                  | $28-$2F     |
| ALU       | add/sub/and/or/xor/cmp a,s / a,byte    | $40-$6D     |
| Unary     | inc/dec/not/shl/shr r                  | $70-$83     |
| Stack     | push r / pop r / push byte             | $90-$98     |
| I/O       | in r,byte / out byte,r                 | $A0-$A7     |
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterable, Iterator, Optional, Sequence

from byteasm.errors import SourceLocation


# =============================================================================
# Operand Types
# =============================================================================

class OperandType(Enum):
    """
    Operand kinds used in instruction signatures.

    ZERO only ever appears in catalog signatures; parsed operands are
    either a register slot or BYTE.
    """
    ZERO = auto()   # Byte-immediate known to be exactly 0
    BYTE = auto()   # Byte-immediate
    A = auto()      # Register a
    B = auto()      # Register b
    C = auto()      # Register c
    D = auto()      # Register d

    def __str__(self) -> str:
        """Return the form used in signatures and hints."""
        if self is OperandType.ZERO:
            return "0"
        if self is OperandType.BYTE:
            return "byte"
        return self.name.lower()


# Register names in slot order
REGISTERS = ("a", "b", "c", "d")

# Reserved words that introduce data and constant definitions
KEYWORDS = frozenset({"db", "equ"})

_A, _B, _C, _D = OperandType.A, OperandType.B, OperandType.C, OperandType.D
_REGS = (_A, _B, _C, _D)
_ZERO = OperandType.ZERO
_BYTE = OperandType.BYTE


# =============================================================================
# Parsed Operand
# =============================================================================

@dataclass
class Operand:
    """
    An operand as parsed by the compiler.

    Attributes:
        location: Where the operand starts in the source
        type: A register slot or OperandType.BYTE
        value: Resolved value of a BYTE operand, None while pending
        patch: Called with the value once a pending operand resolves
    """
    location: SourceLocation
    type: Optional[OperandType] = None
    value: Optional[int] = None
    patch: Optional[Callable[[int], None]] = field(default=None, repr=False)

    def resolve(self, value: int) -> None:
        """Record the operand's value and apply any installed patch."""
        self.value = value
        if self.patch is not None:
            self.patch(value)


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    One encoding of an instruction.

    Attributes:
        mnemonic: Instruction name as written in source
        operands: Ordered operand signature
        opcode: The opcode byte
    """
    mnemonic: str
    operands: tuple[OperandType, ...]
    opcode: int

    def matches(self, mnemonic: str, operands: Sequence[Operand]) -> bool:
        """Check whether parsed operands fit this encoding."""
        if self.mnemonic != mnemonic or len(self.operands) != len(operands):
            return False
        for expected, operand in zip(self.operands, operands):
            if expected is operand.type:
                continue
            if (expected is _ZERO and operand.type is _BYTE
                    and operand.value == 0):
                continue
            return False
        return True

    @property
    def signature(self) -> str:
        """Human-readable form, e.g. 'mov a, byte'."""
        if not self.operands:
            return self.mnemonic
        return f"{self.mnemonic} {', '.join(str(t) for t in self.operands)}"

    def __repr__(self) -> str:
        return f"InstructionInfo({self.signature!r}, opcode=${self.opcode:02X})"


# =============================================================================
# Instruction Catalog
# =============================================================================

class InstructionCatalog:
    """
    An immutable, ordered table of instruction encodings.

    The catalog is built once and handed to the compiler, so tests can
    compile against small synthetic instruction sets.

    Usage:
        catalog = InstructionCatalog([
            InstructionInfo("jmp", (OperandType.BYTE,), 0x10),
        ])
        entry = catalog.match("jmp", operands)
    """

    def __init__(self, entries: Iterable[InstructionInfo],
                 registers: Sequence[str] = REGISTERS):
        """
        Args:
            entries: Encodings in overload priority order
            registers: Register names; each must name an OperandType slot
        """
        self._entries = tuple(entries)
        self._registers = tuple(registers)
        for name in self._registers:
            if name.upper() not in OperandType.__members__ or name.upper() in ("ZERO", "BYTE"):
                raise ValueError(f"'{name}' is not a register slot")
        self._mnemonics = frozenset(entry.mnemonic for entry in self._entries)

    @property
    def entries(self) -> tuple[InstructionInfo, ...]:
        return self._entries

    @property
    def mnemonics(self) -> frozenset[str]:
        return self._mnemonics

    @property
    def registers(self) -> tuple[str, ...]:
        return self._registers

    def register_type(self, name: str) -> OperandType:
        """Map a register name to its operand slot type."""
        return OperandType[name.upper()]

    def match(self, mnemonic: str,
              operands: Sequence[Operand]) -> Optional[InstructionInfo]:
        """
        Find the encoding for an instruction.

        Returns:
            The first matching entry in catalog order, or None
        """
        for entry in self._entries:
            if entry.matches(mnemonic, operands):
                return entry
        return None

    def signatures(self, mnemonic: str) -> list[str]:
        """List the accepted forms of a mnemonic, in priority order."""
        return [e.signature for e in self._entries if e.mnemonic == mnemonic]

    def __iter__(self) -> Iterator[InstructionInfo]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# Default Instruction Set
# =============================================================================
# Order is overload priority: zero forms precede byte forms.
# =============================================================================

_DEFAULT_ENTRIES = (
    # Control
    InstructionInfo("nop", (), 0x00),
    InstructionInfo("hlt", (), 0x01),
    InstructionInfo("ret", (), 0x02),

    # Jumps to an absolute address
    InstructionInfo("jmp", (_BYTE,), 0x10),
    InstructionInfo("jz", (_BYTE,), 0x11),
    InstructionInfo("jnz", (_BYTE,), 0x12),
    InstructionInfo("jc", (_BYTE,), 0x13),
    InstructionInfo("jnc", (_BYTE,), 0x14),
    InstructionInfo("call", (_BYTE,), 0x15),

    # Register loads: clear, immediate, memory, store
    *(InstructionInfo("mov", (r, _ZERO), 0x20 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("mov", (r, _BYTE), 0x24 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("ld", (r, _BYTE), 0x28 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("st", (_BYTE, r), 0x2C + i) for i, r in enumerate(_REGS)),

    # Register to register: $30 + dst * 4 + src
    *(InstructionInfo("mov", (dst, src), 0x30 + d * 4 + s)
      for d, dst in enumerate(_REGS) for s, src in enumerate(_REGS)),

    # Accumulator arithmetic and logic
    *(InstructionInfo("add", (_A, r), 0x40 + i) for i, r in enumerate(_REGS)),
    InstructionInfo("add", (_A, _BYTE), 0x44),
    *(InstructionInfo("sub", (_A, r), 0x48 + i) for i, r in enumerate(_REGS)),
    InstructionInfo("sub", (_A, _BYTE), 0x4C),
    *(InstructionInfo("and", (_A, r), 0x50 + i) for i, r in enumerate(_REGS)),
    InstructionInfo("and", (_A, _BYTE), 0x54),
    *(InstructionInfo("or", (_A, r), 0x58 + i) for i, r in enumerate(_REGS)),
    InstructionInfo("or", (_A, _BYTE), 0x5C),
    *(InstructionInfo("xor", (_A, r), 0x60 + i) for i, r in enumerate(_REGS)),
    InstructionInfo("xor", (_A, _BYTE), 0x64),
    *(InstructionInfo("cmp", (_A, r), 0x68 + i) for i, r in enumerate(_REGS)),
    InstructionInfo("cmp", (_A, _ZERO), 0x6C),     # Test a
    InstructionInfo("cmp", (_A, _BYTE), 0x6D),

    # Single register
    *(InstructionInfo("inc", (r,), 0x70 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("dec", (r,), 0x74 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("not", (r,), 0x78 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("shl", (r,), 0x7C + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("shr", (r,), 0x80 + i) for i, r in enumerate(_REGS)),

    # Stack
    *(InstructionInfo("push", (r,), 0x90 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("pop", (r,), 0x94 + i) for i, r in enumerate(_REGS)),
    InstructionInfo("push", (_BYTE,), 0x98),

    # Ports
    *(InstructionInfo("in", (r, _BYTE), 0xA0 + i) for i, r in enumerate(_REGS)),
    *(InstructionInfo("out", (_BYTE, r), 0xA4 + i) for i, r in enumerate(_REGS)),
)

DEFAULT_CATALOG = InstructionCatalog(_DEFAULT_ENTRIES)
