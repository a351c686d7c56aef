"""
Dependency injection.
"""

from guichet.di.container import DIContainer, get_container, shutdown_container

__all__ = ["DIContainer", "get_container", "shutdown_container"]
