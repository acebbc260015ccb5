# oddkit

oddkit is a set of small, self-contained command-line tools. Each tool is also a module that you can use from Python.

## Installation

    pip install .

The package needs only the Python standard library. `oddkit-pty` needs a POSIX system.

## Tools

### `oddkit-eniac`: toy word machine (`oddkit.eniac`)

This tool loads a binary image into a machine with 32-bit words and runs it. The machine has 18 instructions: MOVE, ADD, SUB, MUL, DIV, REM, CMP, JLT, JEQ, JGT, JMP, HLT, SEA, OCS, LND, LOR, LXR and LSH. LSH is a rotate. Three addresses at the top of the address space work as registers:

- the input register reads 32-bit words from the input file;
- the output register writes 32-bit words to the output file;
- the console register reads and writes single bytes on the terminal.

Command form:

    oddkit-eniac [-m words] -x program.bin [-i input.bin] [-o output.bin] [-t trace.txt|-]

- Memory defaults to 32768 words.
- `-t -` sends the instruction trace to standard output.
- An image is a sequence of chunks. Each chunk is `location, count, word...`, and every value is a big-endian 32-bit word.
- Execution starts at address `0x100`.
- When the program halts, or stops on an error, the tool prints the final address and the number of instructions executed to standard error.

From Python, use `Machine`:

- `load_image(data)` returns `(words loaded, lwa+1)`.
- `step()` runs one instruction.
- `run()` runs to the halt and returns the instruction count.
- `dump_instruction()` returns the trace line for the current instruction.

Errors are reported by exceptions:

- `ImageError` is raised for a bad image.
- `MachineFailure` is raised for a runtime error. It carries `message`, `dump`, `pc` and `instructions`.

`sign_extend(value)` extends a 26-bit address to a full word.

### `oddkit-mktape`: tape image maker (`oddkit.mktape`)

This tool wraps a file into records of a fixed size. Each record is framed by little-endian 4-byte length words, and the image ends with two zero markers. The block size must be a multiple of 512 and at most 20000. The tool writes `size // blocksize + 1` records, and the last record is padded with zero bytes.

    oddkit-mktape input 512 output.tap

From Python:

- `tape_records(data, blocksize)` yields the padded records.
- `write_tape(infile, blocksize, outfile)` writes a whole image.
- Both raise `TapeError` for a bad block size.

### `oddkit-cookie`: random fortune (`oddkit.cookie`)

This tool prints a random cookie from a cookie file. A cookie begins on a line that does not start with a space. Its continuation lines start with a space, and the tool strips that leading space when it prints them.

    oddkit-cookie [file-or-env-var ...]

The tool tries the arguments from last to first. It treats each argument first as a file name and then as the name of an environment variable that holds a file name. If none of them works, it tries `/usr/local/lib/cookie.file` and then the file named by the `cookies` environment variable.

From Python:

- `open_cookie_file(names, default, environ)` finds the file by the same rules.
- `pick_cookie(stream, position)` returns the cookie that follows a byte position, or raises `NoCookieError`.

### `oddkit-grep`: regular-expression line filter (`oddkit.grep`)

This tool prints the lines of standard input that match a pattern. The tool takes exactly one argument. If the argument count is wrong, or if the pattern is invalid, it prints nothing.

    oddkit-grep 'pattern' < file

From Python:

- `match(string, pattern)` returns a bool. An invalid pattern never matches.
- `filter_lines(lines, pattern)` yields the matching lines.

### `oddkit-split`: split by bytes or lines (`oddkit.split`)

This tool splits a file into pieces.

    oddkit-split [-a suffix_length] [-b bytes[k|m] | -l lines | -p pattern] [-L pattern] [file [prefix]]

- `-b` splits by byte count.
- `-l`, or the older `-N` form, splits by line count. The default is 1000 lines.
- `-p` starts a new piece at each line that matches the pattern.
- `-L` counts only matching lines toward the line limit.
- A lone `-` reads standard input.
- Output files are named `xaa`, `xab`, … by default. With a prefix they are named `prefixaa`, `prefixab`, ….

From Python:

- `suffix_names(prefix, suffix_length)` yields the file names.
- `split_bytes(stream, byte_count, names)` splits by bytes.
- `split_lines(stream, line_count, names, pattern, count_pattern)` splits by lines.
- The two split functions return the names they created.
- `SplitError.status` holds the tool's exit code.

### `oddkit-csplit`: split by context (`oddkit.csplit`)

This tool splits a file at line numbers or at regular-expression matches.

    oddkit-csplit [-ks] [-f prefix] [-n digits] [-c count] file args ...

Arguments:

- `/re/[offset]` writes a piece that ends at a match.
- `%re%[offset]` skips input up to a match.
- `N` splits before line N.
- `{n}` repeats the argument before it.
- `-c count` requires that many matches before a split.

Options and output:

- Files are named `xx00`, `xx01`, … by default.
- The tool prints each file's size unless you give `-s`.
- If an error occurs, the tool removes the files it created, unless you give `-k`.
- Use `-` as the file name to read standard input.

From Python, use `ContextSplitter` with the methods `run`, `do_lineno`, `do_rexp`, `finish` and `cleanup`. Errors raise `CsplitError`.

### `oddkit-pty`: pseudo-terminal relay (`oddkit.ptyrelay`)

This tool runs a command on a new pseudo-terminal and relays standard input and output to and from it. It exits with the command's exit code.

    oddkit-pty /bin/sh

From Python, `relay(command, stdin_fd, stdout_fd)` does the same with any file descriptors.

## Limitations

- All patterns in `oddkit-grep`, `oddkit-split` and `oddkit-csplit` use Python's `re` syntax, not POSIX extended regular expressions.
- `oddkit-pty` does not search `PATH`. Give the command as a path, for example `/bin/sh` rather than `sh`.
- `oddkit-cookie` picks a cookie by a random byte position, so a long cookie is more likely to be chosen than a short one.
- There is no assembler for the word machine. Images must be built some other way.

## Tests

    pip install .[test]
    pytest