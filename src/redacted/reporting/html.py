from __future__ import annotations

from pathlib import Path
from jinja2 import Environment, PackageLoader, select_autoescape
from ..engine.redactor import Redactor

def render_report(redactor: Redactor, source: str = "") -> str:
    env = Environment(
        loader=PackageLoader("redacted.reporting", "templates"),
        autoescape=select_autoescape(["html", "j2"])
    )
    tmpl = env.get_template("report.html.j2")
    spans = redactor.spans()
    hidden = sum(1 for sp in spans if sp.hidden)
    return tmpl.render(source=source, rendered=redactor.render(), spans=spans, hidden=hidden)

def write_report(redactor: Redactor, path: Path, source: str = "") -> None:
    html = render_report(redactor, source)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html)
