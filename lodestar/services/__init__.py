# Lodestar Services Package
"""
Host integration services for the Lodestar launcher.

Services talk to the desktop: installed and running applications, and
carrying out the action behind a selected result.
"""

from .actions import ActionDispatcher
from .applications import GioAppRegistry, HostApp, HyprlandClients

__all__ = ["ActionDispatcher", "GioAppRegistry", "HostApp", "HyprlandClients"]
