import logging
import os
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

if TYPE_CHECKING:
    from .runner import RunResult

# Configure logging
logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
TEMPLATE_NAME = "report.html.j2"


def render_html_report(result: "RunResult", screenshot_src: Optional[str] = None) -> str:
    """
    Renders a run result into a standalone HTML page.

    Args:
        result: Finished RunResult
        screenshot_src: Image path as seen from the report (defaults to the result's path)

    Returns:
        HTML content
    """
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html", "j2"])
    )
    template = env.get_template(TEMPLATE_NAME)

    steps = [s.to_dict() for s in result.steps]
    return template.render(
        report_title="Sign-up Form Run",
        generation_date=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        run=result.to_dict(),
        steps=steps,
        passed=sum(1 for s in steps if s["status"] == "passed"),
        failed=sum(1 for s in steps if s["status"] == "failed"),
        skipped=sum(1 for s in steps if s["status"] == "skipped"),
        screenshot_src=screenshot_src or result.screenshot_path
    )


def write_html_report(result: "RunResult", report_dir: Union[str, Path] = "reports") -> Path:
    """
    Writes the HTML report for a run into `report_dir`.

    The screenshot is linked relative to the report so the folder can be
    moved as a whole. The result itself is left untouched.

    Returns:
        Path to generated HTML file
    """
    report_dir = Path(report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)

    screenshot_src = None
    if result.screenshot_path and os.path.exists(result.screenshot_path):
        screenshot_src = os.path.relpath(result.screenshot_path, report_dir)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_html = report_dir / f"signup_run_{stamp}.html"
    with open(output_html, "w", encoding="utf-8") as f:
        f.write(render_html_report(result, screenshot_src))

    logger.info(f"HTML report generated at: {output_html}")
    return output_html
