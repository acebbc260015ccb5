"""Small command-line tools: a word machine, tape maker, cookie picker, grep, split, csplit and pty relay."""

__version__ = "0.1.0"