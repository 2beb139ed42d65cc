"""
byteasm Command-Line Interface
==============================

- **byteasm**: assemble a source file to a raw binary

The tool is a Click application with help and consistent exit codes.
"""

__all__ = ["byteasm"]
