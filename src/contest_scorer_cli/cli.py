from __future__ import annotations

import logging
from pathlib import Path

import typer

from contest_scorer import __version__, load_rules, score_contest

from .loader import load_submissions
from .report import (
    render_counts_table,
    render_detail_table,
    render_results_table,
    write_result_json,
    write_results_csv,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = typer.Typer(help="Contest Scorer CLI")


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)


@app.command()
def score(
    input_dir: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="Directory holding the ADIF logs, one file per callsign.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    rules_path: Path = typer.Option(
        Path("rules.json"),
        "--rules",
        "-r",
        help="Rules file (JSON or YAML), relative to the input directory.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="CSV results path. Defaults to results.csv in the input directory.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print non-competing results, missing and blacklisted callsigns and details.",
    ),
) -> None:
    """Validate, score and rank the contest logs in a directory."""
    resolved_rules = rules_path if rules_path.is_absolute() else input_dir / rules_path
    if not resolved_rules.is_file():
        typer.echo(f"rules file not found: {resolved_rules}", err=True)
        raise typer.Exit(code=1)

    try:
        rules = load_rules(resolved_rules)
    except (OSError, ValueError) as exc:
        typer.echo(f"failed to load rules: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    submissions, failed = load_submissions(input_dir)
    if failed:
        typer.echo(f"skipped {len(failed)} unreadable logs: {', '.join(failed)}", err=True)
    if not submissions:
        typer.echo(f"no ADIF logs found in {input_dir}", err=True)
        raise typer.Exit(code=1)

    result = score_contest(submissions, rules)

    csv_path = output if output is not None else input_dir / "results.csv"
    write_results_csv(csv_path, result)
    json_path = write_result_json(csv_path.with_suffix(".json"), result)

    typer.echo(f"contest: {rules.name}")
    typer.echo(render_results_table(result.results))
    if verbose:
        typer.echo("")
        typer.echo("non-competing:")
        typer.echo(render_results_table(result.non_competing_results))
        typer.echo("")
        typer.echo("missing participants:")
        typer.echo(render_counts_table(result.missing_participants))
        typer.echo("")
        typer.echo("blacklisted callsigns found:")
        typer.echo(render_counts_table(result.blacklisted_callsigns_found))
        for callsign, detail in result.scoring_details.items():
            typer.echo("")
            typer.echo(render_detail_table(callsign, detail))

    typer.echo(
        f"scored {len(submissions)} logs "
        f"(ranked={len(result.results)}, non_competing={len(result.non_competing_results)}, "
        f"csv={csv_path}, json={json_path})"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
