"""
clashpick: interactive node selector for Clash external controllers
Pick proxy group nodes and run delay tests from the terminal
"""

__version__ = "1.2.0"
__author__ = "clashpick contributors"
