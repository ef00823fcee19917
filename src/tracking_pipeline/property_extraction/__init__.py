"""Property extraction exports."""

from .flattening import flatten, reject_none
from .page_context import PageContext, StaticPageContext, default_page_properties
from .path_access import first_present, get_path, is_empty
from .reserved_keywords import DEFAULT_RESERVED_KEYWORDS, check_reserved_keywords
from .revenue import get_currency, get_revenue
from .trait_extraction import extract_custom_fields, extract_defined_traits, get_data_from_source

__all__ = [
    "DEFAULT_RESERVED_KEYWORDS",
    "PageContext",
    "StaticPageContext",
    "check_reserved_keywords",
    "default_page_properties",
    "extract_custom_fields",
    "extract_defined_traits",
    "first_present",
    "flatten",
    "get_currency",
    "get_data_from_source",
    "get_path",
    "get_revenue",
    "is_empty",
    "reject_none",
]
