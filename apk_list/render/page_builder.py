"""Compose ranked groups into the rendered APK page."""

import logging
from pathlib import Path
from typing import Mapping, Sequence

import jinja2
from fastapi.templating import Jinja2Templates

from apk_list.models import Product, value_score
from apk_list.ranking.categorizer import GROUP_ORDER, Group

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE = "apk.html"
DEFAULT_PRECISION = 2

PLACEHOLDER_PAGE = (
    "<!DOCTYPE html>\n"
    "<html lang=\"sv\">\n"
    "<head><meta charset=\"utf-8\"><title>APK</title></head>\n"
    "<body><p>Listan uppdateras, försök igen om en stund.</p></body>\n"
    "</html>\n"
)


class RenderError(RuntimeError):
    """Raised when the page template cannot be rendered."""
    pass


def format_float(value: float, precision: int = DEFAULT_PRECISION) -> str:
    """Format a number with a fixed number of decimals."""
    return f"{float(value):.{int(precision)}f}"


class PageBuilder:
    """
    Renders the APK page from ranked product groups.

    The template receives ``drinks`` (group display name -> ranked products,
    in page order) and ``precision``, and may use the ``apk`` and
    ``format_float`` filters.
    """

    def __init__(
        self,
        template_dir: str | Path = TEMPLATE_DIR,
        template_name: str = DEFAULT_TEMPLATE,
        precision: int = DEFAULT_PRECISION,
    ):
        self.template_name = template_name
        self.precision = precision
        self.templates = Jinja2Templates(directory=str(template_dir))
        self.templates.env.filters["apk"] = value_score
        self.templates.env.filters["format_float"] = format_float

    def build_context(self, groups: Mapping[Group, Sequence[Product]]) -> dict:
        """Build the template context with groups in fixed page order."""
        drinks = {group.value: list(groups.get(group, ())) for group in GROUP_ORDER}
        return {"drinks": drinks, "precision": self.precision}

    def build(self, groups: Mapping[Group, Sequence[Product]]) -> str:
        """
        Render the page.

        Args:
            groups: Ranked products per group

        Returns:
            Rendered HTML

        Raises:
            RenderError: If the template is missing or fails to render
        """
        context = self.build_context(groups)
        try:
            template = self.templates.get_template(self.template_name)
            return template.render(context)
        except jinja2.TemplateError as e:
            logger.error(f"Failed to render {self.template_name}: {e}")
            raise RenderError(f"{self.template_name}: {e}") from e
