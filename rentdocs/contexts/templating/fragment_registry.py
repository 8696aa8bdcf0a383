from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, Template, TemplateError, TemplateNotFound

from rentdocs.contexts.templating.exceptions import TemplateRenderError

FRAGMENTS_PATH = Path(__file__).parent / "fragments"


class FragmentRegistry:
    """
    Registry for loading and caching the authored HTML fragments.

    Fragments are stored in rentdocs/contexts/templating/fragments/{name}.html.jinja
    and use custom delimiters so they never collide with the {{token}} grammar
    of business templates:
    - Variable: <<< var >>>
    - Block: <%% block %%>
    - Comment: <# comment #>
    """

    def __init__(self, fragments_path: Path = None):
        """
        Initialize the fragment registry.

        Args:
            fragments_path: Directory holding *.html.jinja files. Defaults to the
                            fragments/ directory shipped with the package.
        """
        if fragments_path is None:
            fragments_path = FRAGMENTS_PATH

        self.fragments_path = Path(fragments_path)
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(self.fragments_path)),
            variable_start_string="<<<",
            variable_end_string=">>>",
            block_start_string="<%%",
            block_end_string="%%>",
            comment_start_string="<#",
            comment_end_string="#>",
            # Escape HTML in every fragment (ledger descriptions are user text)
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def get_fragment(self, name: str) -> Template:
        """
        Get a fragment by name, loading and caching it if necessary.

        Args:
            name: Fragment name (e.g., 'ledger_lines')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If the fragment file doesn't exist
        """
        if name in self._cache:
            return self._cache[name]

        try:
            template = self.env.get_template(f"{name}.html.jinja")
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Fragment '{name}' not found at {self.get_fragment_path(name)}"
            ) from e

        self._cache[name] = template
        return template

    def render(self, name: str, **values) -> str:
        """
        Render a fragment with the given values.

        Raises:
            TemplateRenderError: If the fragment is missing or fails to render
        """
        try:
            return self.get_fragment(name).render(**values)
        except TemplateError as e:
            raise TemplateRenderError(
                f"Failed to render fragment '{name}'",
                fragment_name=name,
                template_path=self.get_fragment_path(name),
                original_error=e,
            ) from e

    def get_fragment_path(self, name: str) -> Path:
        return self.fragments_path / f"{name}.html.jinja"

    def clear_cache(self):
        """Clear the fragment cache."""
        self._cache.clear()

    def is_cached(self, name: str) -> bool:
        return name in self._cache


_default_registry = None


def get_fragment_registry() -> FragmentRegistry:
    """Shared registry for the packaged fragments."""
    global _default_registry
    if _default_registry is None:
        _default_registry = FragmentRegistry()
    return _default_registry
