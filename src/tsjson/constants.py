"""Constants shared across tsjson."""

from __future__ import annotations

# Extension appended to extensionless import specifiers
SOURCE_EXTENSION = ".ts"

# Source files considered for conversion
SOURCE_SUFFIXES = frozenset({".ts", ".tsx"})

# Barrel file listing the bindings to convert in index mode
AGGREGATOR_FILE = "index.ts"

OUTPUT_EXTENSION = ".json"

DEFAULT_OUTPUT_FOLDER = "json"

# Relative suffix marking a translation directory
DEFAULT_TARGET_PATH = "translations/en"

DEFAULT_CHECK_PATHS = ("feature-libs", "integration-libs", "projects")

# Directories never descended into while scanning
EXCLUDED_DIRS = frozenset({"node_modules", ".git", "dist"})

# Node types wrapping a value without changing it
TRANSPARENT_WRAPPERS = frozenset(
    {
        "parenthesized_expression",
        "as_expression",
        "satisfies_expression",
        "non_null_expression",
        "type_assertion",
    }
)

DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
