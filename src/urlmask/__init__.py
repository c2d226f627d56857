"""urlmask — Request URL mask matching.

Match intercepted request URLs against user-declared masks: literal URLs
or paths with wildcards and named parameters, or compiled regular
expressions. All public types are exported from this module for flat
imports:

    from urlmask import match_request_url, coerce_path, HandlerTable
"""

__version__ = "0.1.0"

# Cache
from urlmask._cache import DEFAULT_CACHE_SIZE, PatternCache

# Coercion
from urlmask._coerce import coerce_path

# Pattern compiler
from urlmask._compiler import (
    Key,
    MaskCompilationError,
    MaskError,
    PathMatcher,
    compile_pattern,
    escape_string,
    parse,
    tokens_to_regex,
)

# Config — see urlmask._config for details
from urlmask._config import (
    MAX_MASK_LENGTH,
    MAX_REGEX_PATTERN_LENGTH,
    ConfigParseError,
    HandlerConfig,
    HandlerTableConfig,
    MaskConfig,
    MaskTooLongError,
    PathMaskConfig,
    RegexMaskConfig,
    load_handler_table,
    parse_handler_config,
)

# Handlers
from urlmask._handlers import (
    MAX_HANDLERS,
    HandlerMatch,
    HandlerTable,
    HttpHandler,
    MethodMask,
    TooManyHandlersError,
)

# Matcher
from urlmask._matcher import compile_mask, match_request_url
from urlmask._types import Mask, MatchResult, PathParams

# URL helpers
from urlmask._url import (
    clean_url,
    get_absolute_url,
    get_clean_url,
    is_absolute_url,
    normalize_path,
)

__all__ = [
    # Types
    "Mask",
    "MatchResult",
    "PathParams",
    # Matcher
    "match_request_url",
    "compile_mask",
    # Coercion
    "coerce_path",
    # Pattern compiler
    "Key",
    "PathMatcher",
    "compile_pattern",
    "escape_string",
    "parse",
    "tokens_to_regex",
    # URL helpers
    "clean_url",
    "get_absolute_url",
    "get_clean_url",
    "is_absolute_url",
    "normalize_path",
    # Cache
    "PatternCache",
    "DEFAULT_CACHE_SIZE",
    # Handlers
    "HttpHandler",
    "HandlerMatch",
    "HandlerTable",
    "MethodMask",
    "MAX_HANDLERS",
    # Config
    "HandlerConfig",
    "HandlerTableConfig",
    "MaskConfig",
    "PathMaskConfig",
    "RegexMaskConfig",
    "parse_handler_config",
    "load_handler_table",
    "MAX_MASK_LENGTH",
    "MAX_REGEX_PATTERN_LENGTH",
    # Errors
    "MaskError",
    "MaskCompilationError",
    "MaskTooLongError",
    "TooManyHandlersError",
    "ConfigParseError",
]
