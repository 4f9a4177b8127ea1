"""Tabular rendering of the sync report."""
from cdn_registry.domain.entities.run import SyncReport

COLUMNS = ("package", "type", "ref", "action", "status", "detail")


def format_report(report: SyncReport, detail_width: int = 80) -> str:
    """Render one row per source as a fixed-width text table."""
    rows = [
        (
            s.package,
            s.type,
            s.ref or "-",
            s.action,
            s.status.value,
            s.detail if len(s.detail) <= detail_width else s.detail[: detail_width - 3] + "...",
        )
        for s in report.sources
    ]
    widths = [max([len(c)] + [len(r[i]) for r in rows]) for i, c in enumerate(COLUMNS)]
    
    def line(cells) -> str:
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()
    
    out = [line(c.upper() for c in COLUMNS), line("-" * w for w in widths)]
    out.extend(line(r) for r in rows)
    failed = len(report.failed)
    out.append("")
    out.append(f"{len(rows)} sources, {failed} failed, changed={str(report.changed).lower()}")
    return "\n".join(out)
