from typing import Any, List, Literal, Optional, Sequence


def format_price(value: float) -> str:
    return f"{value:.2f} €"


def _cell(value: Any) -> str:
    # markdown cells are single line, and pipes would split them
    text = "" if value is None else str(value)
    return text.replace("|", "\\|").replace("\n", "<br>")


def generate_markdown_table(
    headers: Optional[Sequence[Any]],
    rows: Sequence[Sequence[Any]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: Column headers, or None to use the first row as headers.
        rows: Rows of cell values, converted with str().
        aligns: 'l', 'c' or 'r' per column. Defaults to left.

    Returns:
        str: Markdown formatted table, "" when there are no rows.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["l"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(_cell(h) for h in headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines += ["| " + " | ".join(_cell(c) for c in row) + " |" for row in rows]
    return "\n".join(lines)
