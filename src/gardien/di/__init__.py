"""
Dependency injection.
"""

from gardien.di.container import GardienContainer

__all__ = ["GardienContainer"]
