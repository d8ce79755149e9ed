"""
Shared test infrastructure.

Modules:
- file_utils: creating template trees and config files on disk
"""

from .file_utils import write, write_templates

__all__ = ["write", "write_templates"]
