"""Terminal UI helpers.

- questionary for interactive prompts (TTY guard before every prompt)
- click.secho for colored, non-interactive output

Submodules:
- chain: dependency chain display
- packages: catalog package selection
"""

from .chain import (
    display_dependency_chain,
    format_chain_line,
    get_color_for_package,
)
from .packages import (
    format_package_choice,
    select_package_interactive,
)

__all__ = [
    "display_dependency_chain",
    "format_chain_line",
    "get_color_for_package",
    "format_package_choice",
    "select_package_interactive",
]
