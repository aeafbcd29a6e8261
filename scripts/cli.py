from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.logging import RichHandler

# If not installed in editable mode, add repo root to PYTHONPATH
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from fieldsched.config import get_settings
from fieldsched.extract.batch import extract_directory, iter_sources, output_path_for
from fieldsched.extract.catalogue import load_catalogue
from fieldsched.extract.extractor import ScheduleExtractor, write_json
from fieldsched.extract.schema import ScheduleDocument
from fieldsched.ingest.loader import DocumentLoadError
from fieldsched.summarize.summary import check_issues, load_schedule, summarize_schedule

app = typer.Typer(add_completion=False, help="Field schedule extraction (lean CLI)")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, markup=False)],
    )


def _extractor(venues: Optional[Path]) -> ScheduleExtractor:
    cfg = get_settings()
    return ScheduleExtractor(load_catalogue(venues or cfg.venues_file))


@app.command()
def extract(
    src: Path = typer.Argument(
        None, help="PDF, pdf2json JSON dump or directory; defaults to FIELDSCHED_DATA"
    ),
    outdir: Path = typer.Option(
        None, "--outdir", help="Output dir; defaults to <FIELDSCHED_OUTPUT>/games"
    ),
    venues: Path = typer.Option(None, "--venues", help="Venue catalogue YAML"),
):
    """
    Extract games from one document or every document in a directory.
    Precedence: CLI args > env (FIELDSCHED_*) > repo defaults.
    """
    cfg = get_settings()
    effective_src = src or cfg.data_dir
    effective_out = outdir or cfg.output_dir_games

    files = [effective_src] if effective_src.is_file() else list(iter_sources(effective_src))
    if not files:
        typer.secho(f"No documents found in {effective_src}", fg="red")
        raise typer.Exit(1)

    ex = _extractor(venues)
    for p in files:
        try:
            res = ex.run_file(p, cfg.pdf_unit_scale)
        except DocumentLoadError as exc:
            typer.secho(str(exc), fg="red")
            raise typer.Exit(1)
        out_path = write_json(res, output_path_for(p, effective_out))
        print(f"[green]✓[/green] {p.name} → {out_path} ({len(res.games)} games)")
        for msg in res.issues:
            print(f"  [yellow]![/yellow] {msg}")


@app.command()
def batch(
    src_dir: Path = typer.Argument(None, help="Directory; defaults to FIELDSCHED_DATA"),
    outdir: Path = typer.Option(None, "--outdir"),
    venues: Path = typer.Option(None, "--venues", help="Venue catalogue YAML"),
    no_resume: bool = typer.Option(
        False, "--no-resume", help="Re-extract even when output exists"
    ),
    limit: int = typer.Option(None, help="Process at most N documents"),
):
    """Extract a whole directory with a progress bar."""
    cfg = get_settings()
    processed, skipped, failed = extract_directory(
        src_dir or cfg.data_dir,
        outdir or cfg.output_dir_games,
        _extractor(venues),
        resume=not no_resume,
        limit=limit,
        unit_scale=cfg.pdf_unit_scale,
    )
    print(f"processed={processed} skipped={skipped} failed={failed}")
    if failed:
        raise typer.Exit(1)


@app.command("validate")
def validate_file(json_path: Path):
    """Validate a single *.games.json against the schema."""
    data = json.loads(json_path.read_text(encoding="utf-8"))
    ScheduleDocument.model_validate(data)
    print("[green]OK[/green]")


@app.command("validate-dir")
def validate_dir(
    dirpath: Path = typer.Argument(
        None, help="Directory containing .games.json; defaults to output dir"
    ),
):
    """Validate all *.games.json in a directory."""
    cfg = get_settings()
    target = dirpath or cfg.output_dir_games

    files = sorted(target.glob("*.games.json"))
    if not files:
        typer.secho(f"No .games.json files found in {target}", fg="yellow")
        raise typer.Exit(1)
    bad = 0
    for f in files:
        data = json.loads(f.read_text(encoding="utf-8"))
        try:
            ScheduleDocument.model_validate(data)
        except ValidationError as exc:
            bad += 1
            print(f"[red]FAIL[/red] {f.name}: {exc.error_count()} error(s)")
            continue
        print(f"[green]OK[/green] {f.name}")
    if bad:
        raise typer.Exit(1)


@app.command()
def summary(
    games_json: Path,
    remove_no_opponent: bool = typer.Option(
        False, "--remove-no-opponent", help="Drop slots where both teams are empty"
    ),
):
    """Per-field overview of an extracted schedule."""
    s = summarize_schedule(load_schedule(games_json), remove_no_opponent)
    print(
        f"[bold]{s.document_date or 'undated'}[/bold]: "
        f"{s.total_games} games on {s.total_fields} fields"
    )
    for fs in s.field_summaries:
        print(f"\n[bold]{fs.field_name}[/bold]")
        for year, grp in fs.year_groups.items():
            print(f"  {year} ({grp.game_type})")
            for g in grp.games:
                print(f"    {g.time}  {g.team1 or '---'} vs {g.team2 or '---'}")


@app.command()
def issues(games_json: Path):
    """Data-quality checks on an extracted schedule."""
    found, missing = check_issues(load_schedule(games_json))
    if not found:
        print("[green]No issues found[/green]")
        return
    for msg in found:
        print(f"[yellow]![/yellow] {msg}")
    print(f"games missing a team: {missing}")


if __name__ == "__main__":
    app()
