import re
from typing import List, Literal, Optional, Tuple

# "Paper x2", "Paper x 2"; only digits count as a quantity
_QTY_SUFFIX = re.compile(r"^(.*\S)\s+x\s*(\d+)$", re.IGNORECASE)


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of values (converted with str).
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines += ["| " + " | ".join(map(str, row)) + " |" for row in rows]
    return "\n".join(lines)


def parse_items(text: str) -> List[Tuple[str, str]]:
    """
    Parse "Pens: 3, Paper x2, Stapler" into [("Pens", "3"), ("Paper", "2"), ("Stapler", "1")].

    Quantities are returned as text; validating them is the caller's job.
    Blank entries are skipped.
    """
    items: List[Tuple[str, str]] = []
    for part in (text or "").split(","):
        part = part.strip()
        if not part:
            continue
        suffix = _QTY_SUFFIX.match(part)
        if ":" in part:
            name, qty = part.rsplit(":", 1)
        elif suffix:
            name, qty = suffix.groups()
        else:
            name, qty = part, "1"
        items.append((name.strip(), qty.strip()))
    return items


def format_items(items) -> str:
    return ", ".join(f"{i.name} x{i.qty}" for i in items)
