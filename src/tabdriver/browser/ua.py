"""User-Agent construction for launched browsers."""

DEFAULT_CHROME_VERSION = "131.0.0.0"

DEFAULT_UA_TEMPLATE = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{version} Safari/537.36"
)


def build_user_agent(chrome_version: str = DEFAULT_CHROME_VERSION, template: str = "") -> str:
    """Build a User-Agent string for the given Chrome version.

    If *template* is empty, uses a standard Windows desktop Chrome template.
    """
    if not template:
        template = DEFAULT_UA_TEMPLATE
    return template.format(version=chrome_version)


def resolve_user_agent(custom: str | None) -> str:
    """Return *custom* if given, else the default realistic UA."""
    return custom or build_user_agent()
