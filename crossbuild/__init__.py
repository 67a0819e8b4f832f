"""
crossbuild — cross-compile a Go program for several target platforms.

The version is resolved once from git and stamped into every binary.
See SPEC_FULL.md for the scope contract.
"""

__version__ = "0.1.0"
PACKAGE_NAME = "crossbuild"
REPORT_SCHEMA_VERSION = "0.1"
