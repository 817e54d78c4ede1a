"""
infrastructure package

Shared interfaces for the GOAP planner.

Modules:
    - interfaces: capability interfaces for actions, action sets and
      diagnostic sinks
"""

from infrastructure.interfaces import BaseAction, BaseActionSet, DiagnosticSink

__all__ = [
    "BaseAction",
    "BaseActionSet",
    "DiagnosticSink",
]
