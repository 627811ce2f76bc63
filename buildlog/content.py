"""Plain-text rendering of a build for its generated log file."""

from datetime import datetime
from typing import Iterable, Optional

from .types import Build, NamedRef

SEPARATOR = "====================="
EMPTY = "  (None)"


def _named_section(title: str, refs: Optional[Iterable[NamedRef]]) -> list[str]:
    lines = [f"{title}:"]
    items = sorted(refs or [], key=lambda r: r.name)
    if items:
        lines.extend(f"  - ID: {r.id}, Name: {r.name}" for r in items)
    else:
        lines.append(EMPTY)
    lines.append("")
    return lines


def build_log_content(build: Build, generated_at: Optional[datetime] = None) -> str:
    """
    Render the log text for a build.

    Deterministic for a given ``generated_at``; related entities and
    screenshots are sorted so set ordering never shows up in the output.
    """
    generated_at = generated_at or datetime.now()
    lines = [
        "Minecraft Build Log",
        SEPARATOR,
        f"Generated: {generated_at.replace(microsecond=0).isoformat()}",
        "",
        f"Build ID: {build.id}",
        f"Build Name: {build.name}",
        "",
    ]
    lines += _named_section("Authors", build.authors)
    lines += _named_section("Themes", build.themes)
    lines += _named_section("Colors", build.colors)

    lines.append("Description:")
    description = (build.description or "").strip()
    lines.append(description if description else EMPTY)
    lines.append("")

    lines.append("Screenshots:")
    if build.screenshots:
        lines.extend(f"  - {s}" for s in sorted(build.screenshots))
    else:
        lines.append(EMPTY)
    lines.append("")

    lines.append("Schematic File:")
    if build.schem_file is not None:
        lines.append(f"  Size: {len(build.schem_file)} bytes")
    else:
        lines.append("  (Not present)")
    lines.append("")

    lines += [SEPARATOR, "End of Log", ""]
    return "\n".join(lines)
