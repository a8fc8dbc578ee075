"""Rendering of command output.

Text and markdown are produced by the Jinja2 templates in the
mainver.templates package, laid out as templates/<format>/<name>.jinja2.
JSON is serialized straight from the data.
"""

from functools import lru_cache
import json
from typing import Any
from jinja2 import Environment, PackageLoader

from .git_utils import short_sha
from .output import OutputFormat


@lru_cache(maxsize=None)
def template_env() -> Environment:
    env = Environment(
        loader=PackageLoader("mainver", "templates"),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["short_sha"] = short_sha
    return env


def render_to_format(
    format: str,
    template_name: str,
    data: Any,
    pretty: bool = True,
    **extra_context: Any,
) -> str:
    """Render data in the requested output format.

    Args:
        format: One of the OutputFormat values.
        template_name: Template used for text and markdown. The data is
            passed to it under the same name.
        data: Object to render. For JSON, its to_dict() is used when it
            has one.
        pretty: Indent JSON output.
        **extra_context: Additional template variables.

    Raises:
        TemplateNotFound: If there is no template for the format.
    """
    if format == OutputFormat.JSON.value:
        payload = data.to_dict() if hasattr(data, "to_dict") else data
        return json.dumps(payload, default=str, indent=2 if pretty else None) + "\n"

    template = template_env().get_template(f"{format}/{template_name}.jinja2")
    return template.render({template_name: data, **extra_context})
