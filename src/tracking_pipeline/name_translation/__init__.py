"""Name translation exports."""

from .name_translator import ALL_KEY, to_sdk_names, to_server_names, translate_names

__all__ = ["ALL_KEY", "to_sdk_names", "to_server_names", "translate_names"]
