"""
devchain - Local blockchain development environment

Launches a forked chain simulator for a supported network and supplies
deployment toolchain configuration for the default and optimistic-rollup
chains.
"""

__version__ = "0.1.0"
