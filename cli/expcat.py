# cli/expcat.py
# Command-line front end for the expense category pipeline.
# - Predict a category for an expense name (predict)
# - Record / inspect user corrections (correct, learned, corrections)
# - Inspect the loaded assets (info)
# - Train the model and write the assets (train)
#
# Examples:
#   python -m cli.expcat predict "Uber to airport"
#   python -m cli.expcat correct "Grocery run" --predicted Other --chosen food
#   python -m cli.expcat learned "grocery run"
#   python -m cli.expcat corrections --limit 20 --json
#   python -m cli.expcat train --data data/expenses.csv --out assets
#
# Exit codes:
#   0 ok
#   2 config/asset error, or a usage error such as a blank expense name
#     (click's own usage exit code; the stderr message tells them apart)
#   3 model unavailable
#   4 correction could not be stored

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import click

from categorizer.service import CategorizerService
from config.settings import Settings, load_settings
from expcat_core.errors import AssetError, ConfigurationError, ModelLoadError
from expcat_utils.logging_setup import setup_logging

LOGGER = logging.getLogger("expcat")

EXIT_CONFIG = 2
EXIT_MODEL = 3
EXIT_STORE = 4


def _settings(ctx: click.Context) -> Settings:
    try:
        return load_settings(ctx.obj["config_path"])
    except ConfigurationError as e:
        click.echo(f"[error] {e}", err=True)
        raise SystemExit(EXIT_CONFIG)


def _service(ctx: click.Context, settings: Optional[Settings] = None) -> CategorizerService:
    """Build the service; use it in a with-block so the correction store is closed."""
    try:
        return CategorizerService.from_settings(settings or _settings(ctx))
    except (AssetError, ConfigurationError) as e:
        click.echo(f"[error] {e}", err=True)
        raise SystemExit(EXIT_CONFIG)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml (default: repo root config.toml).",
)
@click.option("--verbose", is_flag=True, help="Verbose logging.")
@click.option("--quiet", is_flag=True, help="Only warnings and errors.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool, quiet: bool) -> None:
    """Expense category prediction."""
    level = "INFO"
    if quiet:
        level = "WARNING"
    if verbose:
        level = "DEBUG"
    setup_logging(level)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ----------------------------- Predict Command -----------------------------
@cli.command("predict")
@click.argument("text")
@click.option("--skip-learned", is_flag=True, help="Ignore stored corrections.")
@click.option("--json", "output_json", is_flag=True, help="Output result as JSON.")
@click.pass_context
def predict_cmd(ctx: click.Context, text: str, skip_learned: bool, output_json: bool) -> None:
    """Suggest a category for an expense name."""
    if not text.strip():
        raise click.UsageError("Expense name must not be blank.")

    with _service(ctx) as svc:
        suggestion = svc.suggest(text, use_learned=not skip_learned)

    if output_json:
        click.echo(json.dumps({"text": text, **asdict(suggestion)}))
    else:
        conf = (
            f" ({suggestion.confidence:.0%})"
            if suggestion.confidence is not None
            else ""
        )
        click.echo(f"Suggested: {suggestion.category}{conf} [{suggestion.source}]")

    if suggestion.source == "unavailable":
        raise SystemExit(EXIT_MODEL)


# ----------------------------- Correction Commands -----------------------------
@cli.command("correct")
@click.argument("text")
@click.option("--predicted", required=True, help="Category that was suggested.")
@click.option("--chosen", required=True, help="Category the user picked (key or label).")
@click.pass_context
def correct_cmd(ctx: click.Context, text: str, predicted: str, chosen: str) -> None:
    """Remember that TEXT belongs to the chosen category."""
    if not text.strip():
        raise click.UsageError("Expense name must not be blank.")
    if not predicted.strip() or not chosen.strip():
        raise click.UsageError("--predicted and --chosen must not be blank.")
    if predicted.strip().lower() == chosen.strip().lower():
        click.echo("[skip] chosen category matches the suggestion; nothing stored.")
        return

    with _service(ctx) as svc:
        stored = svc.record_choice(text, predicted, chosen)

    if not stored:
        click.echo("[error] correction could not be stored; see log.", err=True)
        raise SystemExit(EXIT_STORE)
    click.echo(f"[learned] '{text.strip()}' -> {chosen}")


@cli.command("learned")
@click.argument("text")
@click.pass_context
def learned_cmd(ctx: click.Context, text: str) -> None:
    """Show the learned category for TEXT, if any."""
    with _service(ctx) as svc:
        category = svc.memory.get_learned_category(text)
    click.echo(category if category else "(none)")


@cli.command("corrections")
@click.option("--limit", type=int, default=20, show_default=True, help="Most recent N records.")
@click.option("--json", "output_json", is_flag=True, help="Output records as JSON.")
@click.pass_context
def corrections_cmd(ctx: click.Context, limit: int, output_json: bool) -> None:
    """List stored corrections, newest last."""
    with _service(ctx) as svc:
        records = svc.memory.corrections()
    shown = records[-limit:] if limit > 0 else records

    if output_json:
        click.echo(
            json.dumps(
                {"total": len(records), "results": [c.to_dict() for c in shown]},
                indent=2,
            )
        )
        return

    if not records:
        click.echo("[corrections] none stored.")
        return
    click.echo(f"[corrections] {len(records)} stored, showing {len(shown)}:")
    for c in shown:
        click.echo(f"  {c.text!r}: {c.predicted_category} -> {c.corrected_category}")


# ----------------------------- Info Command -----------------------------
@cli.command("info")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def info_cmd(ctx: click.Context, output_json: bool) -> None:
    """Show asset paths, vocabulary size, labels and model input spec."""
    settings = _settings(ctx)
    with _service(ctx, settings) as svc:
        clf = svc.classifier
        stored = len(svc.memory)

    model_status = "loaded"
    try:
        clf.load_model()
    except ModelLoadError as e:
        model_status = f"unavailable: {e}"

    spec = clf.handle.input_spec
    info = {
        "vocab_path": str(settings.vocab_path),
        "labels_path": str(settings.labels_path),
        "model_path": str(settings.model_path),
        "vocab_size": len(clf.tokenizer.vocab),
        "labels": clf.labels,
        "label_mapping": clf.label_mapping,
        "model": model_status,
        "input_shape": list(spec.shape) if spec and spec.shape else None,
        "input_kind": spec.kind.value if spec else None,
        "min_confidence": clf.min_confidence,
        "min_gap": clf.min_gap,
        "corrections": stored,
    }

    if output_json:
        click.echo(json.dumps(info, indent=2))
    else:
        for k, v in info.items():
            click.echo(f"{k:<15}: {v}")

    if not clf.is_loaded:
        raise SystemExit(EXIT_MODEL)


# ----------------------------- Train Command -----------------------------
@cli.command("train")
@click.option(
    "--data",
    "data_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="CSV with Description and Category columns (default: built-in samples).",
)
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output folder for vocab.json, labels.json, model.joblib (default: assets_dir).",
)
@click.option("--max-tokens", type=int, default=5000, show_default=True)
@click.option("--hidden", type=int, default=64, show_default=True, help="Hidden layer width.")
@click.option("--seed", type=int, default=42, show_default=True)
@click.pass_context
def train_cmd(
    ctx: click.Context,
    data_path: Optional[Path],
    out_dir: Optional[Path],
    max_tokens: int,
    hidden: int,
    seed: int,
) -> None:
    """Train the classifier and write its assets."""
    from training.trainer import load_training_data, train

    settings = _settings(ctx)
    out = out_dir or settings.assets_dir or settings.model_path.parent

    try:
        df = load_training_data(data_path)
    except ValueError as e:
        click.echo(f"[error] {e}", err=True)
        raise SystemExit(EXIT_CONFIG)

    result = train(
        df,
        out,
        max_tokens=max_tokens,
        hidden=hidden,
        seed=seed,
        aliases=settings.token_aliases,
    )
    click.echo(
        f"[train] {result.samples} samples, vocab {result.vocab_size}, "
        f"{len(result.labels)} labels, train acc {result.train_accuracy:.0%}"
    )
    click.echo(f"[train] wrote {result.vocab_path}, {result.labels_path}, {result.model_path}")


if __name__ == "__main__":
    cli()
