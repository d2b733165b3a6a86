"""Update-type color map."""

UPDATE_COLORS: dict[str, str] = {
    "major": "red bold",
    "minor": "yellow",
    "patch": "green",
    "up-to-date": "dim",
    "unknown": "dim",
}


def styled_update_type(update_type: str) -> str:
    color = UPDATE_COLORS.get(update_type, "white")
    return f"[{color}]{update_type}[/{color}]"
