"""
extract-sql: translatable string extractor for SQL seed data.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    extract-sql sql/modules/Menu.sql -o locale/sql.pot

Library Usage:
    from pathlib import Path
    from extract_sql import TranslatableRegistry, scan_text

    content = Path("Menu.sql").read_text()
    result = scan_text(content, TranslatableRegistry({"menu_node": ["label"]}))
    catalog_text = result.catalog.serialize()
"""

from .catalog import Catalog, escape_msgid
from .config import ConfigError, ExtractConfig, build_config, build_registry
from .exceptions import ExtractError, ScanFileError
from .models import Location, ScanCursor, ScannerState, ScanWarning, Statement, Transition
from .preprocess import prepare_line, strip_line_comment
from .registry import TranslatableRegistry
from .scanner import ScanResult, decode_literal, scan_file, scan_lines, scan_text, step

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "scan_text",
    "scan_lines",
    "scan_file",
    "step",
    "prepare_line",
    "strip_line_comment",
    "decode_literal",
    "escape_msgid",
    # Data models
    "Catalog",
    "Location",
    "ScanCursor",
    "ScannerState",
    "ScanResult",
    "ScanWarning",
    "Statement",
    "Transition",
    "TranslatableRegistry",
    # Configuration
    "ExtractConfig",
    "build_config",
    "build_registry",
    # Exceptions
    "ConfigError",
    "ExtractError",
    "ScanFileError",
    # Version
    "__version__",
]
