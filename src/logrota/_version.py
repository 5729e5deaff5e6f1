"""
Package version, read by hatchling at build time.

Release builds overwrite this value; source checkouts keep the local default.
"""

__version__ = "0.1.0"
