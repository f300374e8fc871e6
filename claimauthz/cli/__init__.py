"""
Command line tools for claimauthz.
"""

from .main import main, build_parser, parse_claim

__all__ = ['main', 'build_parser', 'parse_claim']
