"""Parsers package."""

from .archive import ArchiveExtractor, ArchiveLimitError
from .base import LineParser, StructuredLineParser, assemble_entries
from .detector import FormatDetector, is_binary_content
from .fallback_parser import FallbackLogParser
from .folder_loader import (
    SUPPORTED_EXTENSIONS,
    is_archive,
    is_supported_log_file,
    scan_directory,
    should_skip_extension,
)
from .grouping import ApplicationGrouper, LogGroup, normalize_application_name
from .multi_pattern_parser import MultiPatternLogParser
from .pattern_compiler import CompiledLayout, compile_layout
from .pattern_parser import PatternBasedLogParser
from .regex_parser import ConfigurableLogParser
from .registry import FormatRegistry, build_default_registry, get_default_registry

__all__ = [
    # Parser strategies
    "LineParser",
    "StructuredLineParser",
    "assemble_entries",
    "PatternBasedLogParser",
    "ConfigurableLogParser",
    "MultiPatternLogParser",
    "FallbackLogParser",
    "CompiledLayout",
    "compile_layout",
    # Detection
    "FormatRegistry",
    "build_default_registry",
    "get_default_registry",
    "FormatDetector",
    "is_binary_content",
    # Archives and folders
    "ArchiveExtractor",
    "ArchiveLimitError",
    "SUPPORTED_EXTENSIONS",
    "is_archive",
    "is_supported_log_file",
    "scan_directory",
    "should_skip_extension",
    # Grouping
    "ApplicationGrouper",
    "LogGroup",
    "normalize_application_name",
]
