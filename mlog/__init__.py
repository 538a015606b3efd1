"""mlog — capture a command's stdout/stderr into rotated log files."""

__version__ = "0.1.0"
