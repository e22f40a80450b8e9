from .reader import FileReadError, iter_rows, read_text, split_line
from .template import render_template, write_template

__all__ = [
    "FileReadError",
    "iter_rows",
    "read_text",
    "split_line",
    "render_template",
    "write_template",
]
