"""Plain-text rendering of query results."""

from tabulate import tabulate

from kdmq.errors import InvalidVersionError, TemplateNotFoundError
from kdmq.models.kdm import KDMData
from kdmq.services.query import list_addon_names, resolve_template


def join_lines(items: list[str]) -> str:
    return "\n".join(items)


def section(title: str, items: list[str]) -> str:
    """Header line, blank line, then one item per line."""
    return f"{title}\n\n{join_lines(items)}\n"


def render_table(rows: list[list[str]], headers: list[str] | None = None) -> str:
    """Left-aligned table without borders; headers only when given."""
    if not rows and not headers:
        return ""
    return tabulate(
        rows,
        headers=headers or (),
        tablefmt="plain",
        stralign="left",
        numalign="left",
        disable_numparse=True,
    )


def addon_rows(data: KDMData, k8s_version: str) -> list[list[str]]:
    """One row per add-on: name and template id, or the lookup error."""
    rows = []
    for addon in list_addon_names(data):
        try:
            template_id, _ = resolve_template(data, addon, k8s_version)
        except (TemplateNotFoundError, InvalidVersionError) as e:
            rows.append([addon, str(e)])
            continue
        rows.append([addon, template_id])
    return rows


def addon_diff_rows(data: KDMData, k8s_version1: str, k8s_version2: str) -> list[list[str]]:
    """One row per add-on: template for each version and whether they differ."""
    rows = []
    for addon in list_addon_names(data):
        template1 = _template_or_error(data, addon, k8s_version1)
        template2 = _template_or_error(data, addon, k8s_version2)
        rows.append([addon, template1, template2, "Yes" if template1 != template2 else "No"])
    return rows


def _template_or_error(data: KDMData, addon: str, k8s_version: str) -> str:
    try:
        template_id, _ = resolve_template(data, addon, k8s_version)
    except (TemplateNotFoundError, InvalidVersionError) as e:
        return f"Error: {e}"
    return template_id
