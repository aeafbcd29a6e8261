from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Tuple

from rich import print
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)

from fieldsched.extract.extractor import ScheduleExtractor, write_json
from fieldsched.ingest.loader import DocumentLoadError

OUTPUT_SUFFIX = ".games.json"


def iter_sources(root: Path, patterns: Tuple[str, ...] = ("*.pdf", "*.json")) -> Iterable[Path]:
    found = set()
    for pattern in patterns:
        for p in root.glob(pattern):
            if p.name.endswith(OUTPUT_SUFFIX):
                continue
            found.add(p)
    return sorted(found)


def output_path_for(src: Path, out_dir: Path) -> Path:
    return out_dir / f"{src.stem}{OUTPUT_SUFFIX}"


def extract_directory(
    src_dir: Path,
    out_dir: Path,
    extractor: ScheduleExtractor,
    *,
    resume: bool = True,
    limit: Optional[int] = None,
    unit_scale: Optional[float] = None,
    show_progress: bool = True,
) -> Tuple[int, int, int]:
    """Returns (processed, skipped, failed)."""
    sources = list(iter_sources(src_dir))
    if limit is not None and limit >= 0:
        sources = sources[:limit]

    processed = 0
    skipped = 0
    failed = 0

    def process(src: Path) -> None:
        nonlocal processed, skipped, failed
        out_path = output_path_for(src, out_dir)
        if resume and out_path.exists():
            skipped += 1
            print(f"[yellow]skip[/yellow] already exists: {out_path.name}")
            return
        try:
            result = extractor.run_file(src, unit_scale)
        except DocumentLoadError as exc:
            failed += 1
            print(f"[red]✗[/red] {src.name}: {exc}")
            return
        write_json(result, out_path)
        processed += 1
        print(f"[green]✓[/green] {src.name} → {out_path.name} ({len(result.games)} games)")

    if show_progress:
        with Progress(
            TextColumn("[bold]Extract[/bold]"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            transient=False,
        ) as progress:
            task = progress.add_task("docs", total=len(sources))
            for src in sources:
                process(src)
                progress.update(task, advance=1)
    else:
        for src in sources:
            process(src)

    return processed, skipped, failed
