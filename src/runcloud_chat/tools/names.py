"""Tool name mapping between the MCP catalog and the completion provider.

The RunCloud catalog names tools with hyphens ("list-servers") while function
names sent to the model use underscores ("list_servers"). Both directions live
here so no call site does its own string substitution.
"""

CATALOG_SEPARATOR = "-"
PROVIDER_SEPARATOR = "_"


def to_provider_name(catalog_name: str) -> str:
    """Convert a catalog tool name to the provider's function-name form."""
    return catalog_name.replace(CATALOG_SEPARATOR, PROVIDER_SEPARATOR)


def to_catalog_name(provider_name: str) -> str:
    """Convert a provider function name back to the catalog's tool name."""
    return provider_name.replace(PROVIDER_SEPARATOR, CATALOG_SEPARATOR)
