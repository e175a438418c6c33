"""Command-line interface for logfile-bayes.

Three modes share one command:

    logfile-bayes --database=model.json --learn=critical disk array degraded
    logfile-bayes --database=model.json --rate disk array degraded
    logfile-bayes --database=model.json --bookmark=app.bm --logfile=app.log [--explain] [--autolearn]

Tail mode prints ``LABEL<TAB><TAB>text<TAB>{word} {word}`` for each new log
line on stdout. Everything else (explanations, logging, errors) goes to
stderr. Options may also come from ``LOGFILE_BAYES_*`` environment
variables or a ``.env`` file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .bayes import NaiveBayesModel
from .config import ENV_PREFIX, Mode, RunConfig
from .cursor import LogCursor
from .driver import learn, rate_line, tail
from .errors import LogfileBayesError
from .models import LineRating
from .store import load_or_bootstrap, save_model

load_dotenv()

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, package_name="logfile-bayes")
@click.option("--database", type=click.Path(dir_okay=False, path_type=Path),
              envvar=f"{ENV_PREFIX}_DATABASE",
              help="Model file. Created with default vocabulary if missing.")
@click.option("--learn", "learn_as", default=None, metavar="SEVERITY",
              help="Learn TEXT as ignore, warning, normal, minor, major or critical.")
@click.option("--rate/--no-rate", default=True, help="Report the severity TEXT would get.")
@click.option("--bookmark", type=click.Path(dir_okay=False, path_type=Path),
              envvar=f"{ENV_PREFIX}_BOOKMARK",
              help="File holding the last-read offset of --logfile.")
@click.option("--logfile", type=click.Path(dir_okay=False, path_type=Path),
              envvar=f"{ENV_PREFIX}_LOGFILE",
              help="Log file to classify new lines from.")
@click.option("--explain/--no-explain", default=False,
              help="Write per-label and per-word scores to stderr.")
@click.option("--autolearn", is_flag=True, default=False,
              help="Learn each tailed line under the severity it was given.")
@click.option("--model-type", default="frequency", envvar=f"{ENV_PREFIX}_MODEL_TYPE",
              show_default=True, help="Model variant used when creating a new database.")
@click.option("--purge/--no-purge", default=False, envvar=f"{ENV_PREFIX}_PURGE",
              help="New databases discard raw counts after each training.")
@click.option("--log-level", default="WARNING", envvar=f"{ENV_PREFIX}_LOG_LEVEL",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              show_default=True, help="Diagnostic logging level.")
@click.argument("text", nargs=-1)
def main(
    database: Path | None,
    learn_as: str | None,
    rate: bool,
    bookmark: Path | None,
    logfile: Path | None,
    explain: bool,
    autolearn: bool,
    model_type: str,
    purge: bool,
    log_level: str,
    text: tuple[str, ...],
) -> None:
    """Bayesian log file reader.

    Rates lines of text by severity with a Naive Bayes classifier that
    learns from --learn feedback and, optionally, from its own ratings.
    """
    _configure_logging(log_level)
    config = RunConfig(
        database=database,
        learn=learn_as,
        rate=rate,
        bookmark=bookmark,
        logfile=logfile,
        explain=explain,
        autolearn=autolearn,
        model_type=model_type,
        purge=purge,
        text=" ".join(text),
    )

    try:
        run(config.validate())
    except LogfileBayesError as e:
        err_console.print(f"[bold red]Error:[/] {escape(str(e))}")
        sys.exit(1)


def run(config: RunConfig) -> None:
    """Execute one invocation for a validated configuration."""
    model, _ = load_or_bootstrap(config.database, config.model_type, purge=config.purge)

    if config.mode is Mode.TAIL:
        cursor = LogCursor(config.logfile, config.bookmark)

        def emit(rating: LineRating) -> None:
            click.echo(rating.format_line())
            if config.explain:
                _explain_rating(rating)

        report = tail(model, cursor, config.database, autolearn=config.autolearn, on_rating=emit)
        if report.first_run:
            logger.info(f"Bookmark initialised at offset {report.end_offset}; nothing rated")
        return

    if config.mode is Mode.LEARN:
        learn(model, config.severity, config.text)
        save_model(model, config.database)

    if config.mode in (Mode.LEARN, Mode.RATE):
        _render_rating(model, config.text)


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _explain_rating(rating: LineRating) -> None:
    """Write per-label scores and per-word contributions to stderr."""
    for label in sorted(rating.scores):
        err_console.print(f"Score for {escape(label.upper())} is {rating.scores[label]}.")
    for contribution in rating.contributions:
        err_console.print(
            f"  '{escape(contribution.word)}' contributed {contribution.towards(rating.label)}"
        )


def _render_rating(model: NaiveBayesModel, text: str) -> None:
    """Print word-by-word and whole-line scores for ``text``."""
    rating = rate_line(model, text)
    for contribution in rating.contributions:
        for label in sorted(contribution.scores):
            console.print(
                f"     '{escape(contribution.word)}' contributed "
                f"{contribution.scores[label]} to {escape(label)}"
            )
    for label in sorted(rating.scores):
        style = "bold" if label == rating.label else "dim"
        console.print(f"  [{style}]{escape(label)}={rating.scores[label]}[/]")


if __name__ == "__main__":
    main()
