"""A small word-addressed virtual machine that runs binary images."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import BinaryIO, Callable, TextIO

INITPC = 0x100
CODEMASK = 0x1F
CODESHIFT = 32 - 5
INDEXBIT = 0x04000000
ADDRMASK = 0x03FFFFFF
ADDRSIGN = 0x02000000
MAXCODE = 0x12
IREG = 0x03FFFFFF
OREG = 0x03FFFFFE
CREG = 0x03FFFFFD
DEF_MEMSIZE = 0x8000
WORD = 0xFFFFFFFF

USAGE = "Usage: eniac -m mem -x bin [-i inp] [-o out] [-t deb|-]"


class MachineFailure(Exception):
    """The machine stopped on an error."""

    def __init__(self, message: str, dump: str, pc: int, instructions: int):
        super().__init__(message)
        self.message = message
        self.dump = dump
        self.pc = pc
        self.instructions = instructions


class ImageError(Exception):
    """The binary image could not be loaded."""


class _Abort(Exception):
    pass


class _Halt(Exception):
    pass


def sign_extend(value: int) -> int:
    """Extend a 26-bit address to a 32-bit word."""
    if value & ADDRSIGN:
        value |= ~ADDRMASK
    return value & WORD


def _signed(word: int) -> int:
    word &= WORD
    return word - (1 << 32) if word & 0x80000000 else word


@dataclass(frozen=True)
class _Opcode:
    name: str
    argc: int
    jtype: int
    handler: Callable[["Machine"], None]


class Machine:
    """Memory, registers and the fetch-execute cycle."""

    def __init__(self, memsize=DEF_MEMSIZE, input_stream=None, output_stream=None,
                 console_in=None, console_out=None, trace=None):
        self.memsize = memsize
        self.memory = [0] * memsize
        self.input_stream: BinaryIO | None = input_stream
        self.output_stream: BinaryIO | None = output_stream
        self.console_in: BinaryIO | None = console_in
        self.console_out: BinaryIO | None = console_out
        self.trace: TextIO | None = trace
        self.pc = INITPC
        self.mpc = INITPC
        self.cfg = 0
        self.instructions = 0
        self.code: _Opcode | None = None
        self.ea1: int | None = None
        self.ea2: int | None = None

    def load_image(self, data: bytes) -> tuple[int, int]:
        """Load chunks of (location, count, words); return (words, lwa+1)."""
        words = [int.from_bytes(data[i:i + 4], "big") for i in range(0, len(data) - 3, 4)]
        pos = chunk = maxaddr = nwords = 0
        while pos < len(words):
            loc = words[pos]
            if pos + 1 >= len(words):
                raise ImageError(f"Incomplete image file, chunk {chunk}")
            cnt = words[pos + 1]
            pos += 2
            if cnt == 0:
                continue
            lwa = (loc + cnt) & WORD
            if lwa > self.memsize or lwa <= loc:
                raise ImageError(
                    f"Memory overflow while loading chunk {chunk}\n"
                    f"Loc = {loc:08x}, Cnt = {cnt:08x} ({cnt})")
            maxaddr = max(maxaddr, lwa)
            body = words[pos:pos + cnt]
            self.memory[loc:loc + len(body)] = body
            if len(body) < cnt:
                raise ImageError(
                    f"Image ends prematurely, chunk {chunk}\n"
                    f"Loc = {loc:08x}, Cnt = {cnt:08x} ({cnt}), was {len(body)}")
            pos += cnt
            chunk += 1
            nwords += cnt
        return nwords, maxaddr

    # memory access

    def _read_console(self) -> int:
        data = self.console_in.read(1) if self.console_in is not None else b""
        if not data:
            return WORD
        return sign_extend_byte(data[0])

    def _getmem(self, ea: int) -> int:
        if ea & ADDRSIGN:
            if ea == OREG:
                raise _Abort("ATTEMPT TO READ FROM OUTPUT REGISTER")
            if ea == IREG:
                data = self.input_stream.read(4) if self.input_stream is not None else b""
                if len(data) < 4:
                    raise _Abort("END OF INPUT FILE")
                return int.from_bytes(data, "big")
            if ea == CREG:
                return self._read_console()
        if ea >= self.memsize:
            raise _Abort("FETCH OUTSIDE MEMORY")
        return self.memory[ea]

    def _putmem(self, ea: int, word: int) -> None:
        word &= WORD
        if ea & ADDRSIGN:
            if ea == IREG:
                raise _Abort("ATTEMPT TO WRITE INTO INPUT REGISTER")
            if ea == OREG:
                try:
                    self.output_stream.write(word.to_bytes(4, "big"))
                except (OSError, AttributeError) as exc:
                    raise _Abort("OUTPUT FILE WRITE ERROR") from exc
                return
            if ea == CREG:
                if self.console_out is not None:
                    self.console_out.write(bytes([word & 0xFF]))
                return
        if ea >= self.memsize:
            raise _Abort("STORE OUTSIDE MEMORY")
        self.memory[ea] = word

    def _getea(self) -> int:
        if self.mpc >= self.memsize:
            raise _Abort("SECOND OPERAND OUTSIDE MEMORY")
        word = self._getmem(self.mpc)
        self.mpc += 1
        ea = word & ADDRMASK
        if word & INDEXBIT:
            index_addr = self._getmem(self.mpc) & ADDRMASK
            self.mpc += 1
            ea = (ea + self._getmem(index_addr)) & ADDRMASK
        return ea

    # tracing

    def _describe(self, ea: int) -> str:
        if ea == IREG:
            return "-INPREG-"
        if ea == OREG:
            return "-OUTREG-"
        if ea == CREG:
            return "-CONREG-"
        if ea >= self.memsize:
            return "-OFFRNG-"
        return f"{self.memory[ea]:08x}"

    def dump_instruction(self) -> str:
        """Return the trace line for the current instruction."""
        code = self.code
        if code is None:
            return f"{self.pc:07x} XXXX -------- --------\n"
        ea1, mea1 = "-------", "--------"
        if self.ea1 is not None:
            ea1 = f"{self.ea1:07x}"
            if code.argc > 1:
                mea1 = self._describe(self.ea1)
        if code.argc == 1:
            flag = "-" if code.jtype < 2 and self.cfg != code.jtype else "+"
            return f"{self.pc:07x} {code.name} {ea1} <{flag}>\n"
        ea2, mea2 = "-------", "--------"
        if self.ea2 is not None:
            ea2 = f"{self.ea2:07x}"
            mea2 = self._describe(self.ea2)
        line = f"{self.pc:07x} {code.name} {ea1} {ea2} [{mea1} {mea2}]"
        if code.jtype == 3:
            rel = "<" if self.cfg < 0 else ">" if self.cfg > 0 else "="
            line += f" '{rel}'"
        return line + "\n"

    def _trace(self) -> None:
        if self.trace is not None:
            self.trace.write(self.dump_instruction())

    # execution

    def step(self) -> bool:
        """Execute one instruction; return False when the machine halts."""
        self.mpc = self.pc
        self.code = None
        self.ea1 = self.ea2 = None
        try:
            if self.mpc > self.memsize:
                raise _Abort("PC OUTSIDE MEMORY")
            op = (self._getmem(self.mpc) >> CODESHIFT) & CODEMASK
            if op == 0 or op > MAXCODE:
                raise _Abort("ILLEGAL OPERATION CODE")
            self.code = _OPCODES[op - 1]
            self.ea1 = self._getea()
            if self.code.argc == 2:
                self.ea2 = self._getea()
            self.code.handler(self)
        except _Halt:
            return False
        except _Abort as exc:
            dump = self.dump_instruction()
            if self.trace is not None:
                self.trace.write(f"{exc}\n{dump}")
            raise MachineFailure(str(exc), dump, self.pc, self.instructions) from None
        self.instructions += 1
        return True

    def run(self) -> int:
        """Run until HLT; return the number of instructions executed."""
        while self.step():
            pass
        return self.instructions

    def _binary(self, fn: Callable[[int, int], int]) -> None:
        a = self._getmem(self.ea1)
        b = self._getmem(self.ea2)
        self._putmem(self.ea1, fn(a, b))
        self._trace()
        self.pc = self.mpc

    def _mov(self):
        self._putmem(self.ea1, self._getmem(self.ea2))
        self._trace()
        self.pc = self.mpc

    def _sea(self):
        self._putmem(self.ea1, sign_extend(self.ea2))
        self._trace()
        self.pc = self.mpc

    def _add(self):
        self._binary(lambda a, b: a + b)

    def _sub(self):
        self._binary(lambda a, b: a - b)

    def _mul(self):
        self._binary(lambda a, b: _signed(a) * _signed(b))

    def _div(self):
        self._binary(_divide)

    def _rem(self):
        self._binary(lambda a, b: _signed(a) - _divide(a, b) * _signed(b))

    def _ocs(self):
        a = self._getmem(self.ea1)
        b = self._getmem(self.ea2)
        self._putmem(self.ea1, b)
        self._putmem(self.ea2, a)
        self._trace()
        self.pc = self.mpc

    def _lnd(self):
        self._binary(lambda a, b: a & b)

    def _lor(self):
        self._binary(lambda a, b: a | b)

    def _lxr(self):
        self._binary(lambda a, b: a ^ b)

    def _lsh(self):
        def rotate(a, b):
            b &= 0x1F
            return ((a << b) | (a >> (32 - b))) & WORD
        self._binary(rotate)

    def _cmp(self):
        a = _signed(self._getmem(self.ea1))
        b = _signed(self._getmem(self.ea2))
        self.cfg = -1 if a < b else 0 if a == b else 1
        self._trace()
        self.pc = self.mpc

    def _jmp(self):
        self._trace()
        if self.code.jtype > 1 or self.cfg == self.code.jtype:
            self.pc = self.ea1
        else:
            self.pc = self.mpc

    def _hlt(self):
        raise _Halt()


def sign_extend_byte(value: int) -> int:
    return value | 0xFFFFFF00 if value & 0x80 else value


def _divide(a: int, b: int) -> int:
    a, b = _signed(a), _signed(b)
    if b == 0:
        raise _Abort("DIVISION BY ZERO")
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


_OPCODES = [
    _Opcode("MOVE", 2, 0, Machine._mov),
    _Opcode("ADD ", 2, 0, Machine._add),
    _Opcode("SUB ", 2, 0, Machine._sub),
    _Opcode("MUL ", 2, 0, Machine._mul),
    _Opcode("DIV ", 2, 0, Machine._div),
    _Opcode("REM ", 2, 0, Machine._rem),
    _Opcode("CMP ", 2, 3, Machine._cmp),
    _Opcode("JLT ", 1, -1, Machine._jmp),
    _Opcode("JEQ ", 1, 0, Machine._jmp),
    _Opcode("JGT ", 1, 1, Machine._jmp),
    _Opcode("JMP ", 1, 2, Machine._jmp),
    _Opcode("HLT ", 1, 2, Machine._hlt),
    _Opcode("SEA ", 2, 0, Machine._sea),
    _Opcode("OCS ", 2, 0, Machine._ocs),
    _Opcode("LND ", 2, 0, Machine._lnd),
    _Opcode("LOR ", 2, 1, Machine._lor),
    _Opcode("LXR ", 2, 2, Machine._lxr),
    _Opcode("LSH ", 2, 3, Machine._lsh),
]


def _parse_args(argv: list[str]) -> dict[str, str] | None:
    if len(argv) % 2:
        return None
    opts: dict[str, str] = {}
    for flag, value in zip(argv[::2], argv[1::2]):
        if flag not in ("-m", "-x", "-i", "-o", "-t") or flag in opts:
            return None
        opts[flag] = value
    return opts


def _atoi(text: str) -> int:
    digits = ""
    for ch in text.strip():
        if not ch.isdigit():
            break
        digits += ch
    return int(digits) if digits else 0


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    opts = _parse_args(argv)
    memsize = 0
    if opts is not None and "-m" in opts:
        memsize = _atoi(opts["-m"])
        if memsize == 0:
            opts = None
    if opts is None or "-x" not in opts:
        print(USAGE, file=sys.stderr)
        return 99
    try:
        with open(opts["-x"], "rb") as fh:
            image = fh.read()
    except OSError as exc:
        print(f"Cannot open image file: {exc.strerror}", file=sys.stderr)
        return 99
    machine = Machine(memsize or DEF_MEMSIZE)
    try:
        nwords, maxaddr = machine.load_image(image)
    except ImageError as exc:
        print(exc, file=sys.stderr)
        return 99
    if maxaddr == 0:
        print("Empty program, no run", file=sys.stderr)
        return 0
    print(f"{nwords} words loaded, lwa+1 = {maxaddr:08x}", file=sys.stderr)

    opened = []
    try:
        try:
            machine.input_stream = open(opts["-i"], "rb") if "-i" in opts else sys.stdin.buffer
        except OSError as exc:
            print(f"Cannot open input file: {exc.strerror}", file=sys.stderr)
            return 99
        opened.append(machine.input_stream)
        try:
            machine.output_stream = open(opts["-o"], "wb") if "-o" in opts else sys.stdout.buffer
        except OSError as exc:
            print(f"Cannot open output file: {exc.strerror}", file=sys.stderr)
            return 99
        opened.append(machine.output_stream)
        if "-t" in opts:
            if opts["-t"] == "-":
                machine.trace = sys.stdout
            else:
                try:
                    machine.trace = open(opts["-t"], "w")
                except OSError as exc:
                    print(f"Cannot open trace file: {exc.strerror}", file=sys.stderr)
                    return 99
                opened.append(machine.trace)
        machine.console_in = sys.stdin.buffer
        machine.console_out = sys.stdout.buffer
        try:
            count = machine.run()
            print(f"HALTED AT {machine.pc:08x} AFTER {count} INSTRUCTIONS", file=sys.stderr)
        except MachineFailure as exc:
            print(exc.message, file=sys.stderr)
            sys.stderr.write(exc.dump)
            print(f"ABORTED AT {exc.pc:08x} AFTER {exc.instructions} INSTRUCTIONS",
                  file=sys.stderr)
    finally:
        for stream in opened:
            if stream not in (sys.stdin.buffer, sys.stdout.buffer, sys.stdout):
                stream.close()
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())