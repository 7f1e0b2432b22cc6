"""Site Migration Tool

Converts sites built with other static site generators (Hugo, Eleventy,
MkDocs, Middleman and others) into a Jekyll-style directory layout.
"""

__version__ = '0.1.0'
__author__ = 'Site Migration Team'
__email__ = 'team@example.com'

from .cli import main

__all__ = ['main']
