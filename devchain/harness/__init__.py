"""
devchain.harness - Simulator launch and command-line entry points
"""

from .launcher import ForkLauncher, LaunchResult, LaunchState, launch

__all__ = [
    'ForkLauncher',
    'LaunchResult',
    'LaunchState',
    'launch',
]
