"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Pipeline configuration template for tracking-pipeline.
# Replace every <REQUIRED> placeholder before running normalize or transform.
# Replace <OPTIONAL> placeholders only when your setup needs them.

transformation:
  # Events are posted to <data_plane_url>/v1/transform.
  data_plane_url: "<REQUIRED>"
  # write_key: "<OPTIONAL>"
  retry_count: 3
  backoff_seconds: [1, 2, 3]
  timeout_seconds: 10

destinations:
  # Destinations configured for the write key (names or objects with a name).
  enabled: []  # e.g. ["GA4", {name: "AM", config: {}}]
  # Destinations whose events need server-side transformation.
  transform: []  # e.g. ["GA4"]

mappings:
  # Source event-name aliases mapped to a destination event name.
  event_names:
    - src: ["product viewed"]
      dest: "view_item"
  # dest may be a list; "items.item_id" writes into one nested item object.
  event_parameters:
    - src: "product_id"
      dest: ["items.item_id"]
  item_parameters:
    - src: "product_id"
      dest: "item_id"
  page_parameters:
    - src: "title"
      dest: "page_title"

names:
  # User-supplied spellings to SDK-canonical destination names.
  common: {}
  # SDK-canonical destination names to server-canonical names.
  client_to_server: {}

# reserved:
#   event_names: ["<OPTIONAL>"]
#   keywords: ["<OPTIONAL>"]
"""


def build_placeholder_configuration() -> str:
    """Build a YAML pipeline configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder pipeline configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Pipeline configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
