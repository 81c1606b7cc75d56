from datetime import datetime
from typing import List

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from dashboard.device import Device
from dashboard.errors import InternalRenderError

NO_ALIAS = "(no alias)"

_env = Environment(
    loader=PackageLoader("dashboard", "templates"),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def _display_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S %z")


_env.filters["display_time"] = _display_time


def render(devices: List[Device], now: datetime, template: str = "index.html") -> str:
    """Render the dashboard page for ``devices`` as seen at ``now``.

    Any failure here is a bug in the template, never bad data, so it is
    raised as InternalRenderError and left for the caller to crash on.
    """
    try:
        return _env.get_template(template).render(
            devices=devices,
            now=now,
            no_alias=NO_ALIAS,
        )
    except TemplateError as exc:
        raise InternalRenderError(f"failed to render {template}: {exc}") from exc
