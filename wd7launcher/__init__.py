"""Win-Debloat7 launcher: ensure PowerShell 7, stage the payload, run it, clean up."""

__version__ = "1.0.0"
