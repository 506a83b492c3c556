# tasks.py
"""
Developer task runner using Invoke.
Run `inv --list` to see tasks.

Key tasks:
  inv train [--data <csv>] [--out assets]
  inv predict --text "Uber to airport"
  inv info
  inv test
  inv clean
"""

from invoke import task
from pathlib import Path
import shutil
import sys


REPO = Path(__file__).parent
ASSETS = REPO / "assets"
DATA = REPO / "data"


def _python():
    """Return the python executable inside the current venv."""
    return sys.executable or "python"


def _cli(c, *args):
    c.run(f'"{_python()}" -m cli.expcat ' + " ".join(args), pty=False)


@task(
    help={
        "data": "CSV with Description,Category columns (default: built-in samples)",
        "out": "Where to write vocab.json, labels.json, model.joblib (default: assets)",
        "hidden": "Hidden layer width (default: 64)",
        "seed": "Random seed (default: 42)",
    }
)
def train(c, data=None, out=str(ASSETS), hidden=64, seed=42):
    """Train the classifier and write its assets."""
    args = ["train", "--out", f'"{out}"', "--hidden", str(hidden), "--seed", str(seed)]
    if data:
        args += ["--data", f'"{data}"']
    _cli(c, *args)


@task(help={"text": "Expense name to classify", "verbose": "Debug logging"})
def predict(c, text, verbose=False):
    """Suggest a category for one expense name."""
    args = ["--verbose"] if verbose else []
    _cli(c, *args, "predict", f'"{text}"')


@task
def info(c):
    """Show asset and model details."""
    _cli(c, "info")


@task
def test(c):
    """Run unit tests with pytest."""
    c.run(f'"{_python()}" -m pytest -q', pty=False)


@task
def clean(c):
    """Delete trained assets and the local corrections database."""
    for d in [ASSETS, DATA]:
        if d.exists():
            shutil.rmtree(d)
            print(f"Removed {d}")
