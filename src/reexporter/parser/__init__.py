"""
This facade exposes the public API for the parser module.
"""
from .build import BuildContext
from .go_parser import GoFile, parse_go_source
from .imports import GoImport, assumed_package_name
from .loader import GoPackage, PackageLoader
from .signature import TypeQualifier, parse_function_signature

__all__ = [
    "BuildContext",
    "GoFile",
    "GoImport",
    "GoPackage",
    "PackageLoader",
    "TypeQualifier",
    "assumed_package_name",
    "parse_function_signature",
    "parse_go_source",
]
