"""
This facade exposes the public API for the module package.
"""
from .resolver import GO_MOD, ModuleResolver, parse_go_mod

__all__ = ["GO_MOD", "ModuleResolver", "parse_go_mod"]
