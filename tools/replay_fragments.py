from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import List

import typer

from cardscan.config import load_scan_config
from cardscan.models import TextFragment, supported_brands
from cardscan.pipeline import ScanPipeline

app = typer.Typer(help="Replay recorded recognition fragments through the scan pipeline")


def load_fragments(path: Path) -> List[TextFragment]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise typer.BadParameter("Fragment dump must be a JSON list")
    fragments: List[TextFragment] = []
    for idx, entry in enumerate(payload):
        try:
            fragments.append(
                TextFragment(
                    text=str(entry["text"]),
                    confidence=float(entry.get("confidence", 1.0)),
                    position=(float(entry.get("x", 0.5)), float(entry.get("y", 0.5))),
                )
            )
        except KeyError as exc:
            raise typer.BadParameter(f"Fragment {idx} is missing {exc}") from exc
        except (TypeError, ValueError, AttributeError) as exc:
            raise typer.BadParameter(f"Fragment {idx} is invalid: {exc}") from exc
    return fragments


@app.command()
def replay(
    file: Path = typer.Argument(..., exists=True, readable=True, help="JSON list of {text, confidence, x, y}"),
    config: Path | None = typer.Option(None, "--config", help="YAML scan configuration"),
    allow_test_cards: bool = typer.Option(False, "--allow-test-cards", help="Accept public test card numbers."),
    threshold: float | None = typer.Option(None, "--threshold", help="Override the confidence threshold."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline stages."),
):
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    scan_config = load_scan_config(config)
    if allow_test_cards:
        scan_config = dataclasses.replace(scan_config, allow_test_cards=True)
    if threshold is not None:
        scan_config = dataclasses.replace(scan_config, confidence_threshold=threshold)
    outcome = ScanPipeline(scan_config).run(load_fragments(file))
    typer.echo(json.dumps(outcome.to_dict(), indent=2))
    if not outcome.ok:
        raise typer.Exit(code=1)


@app.command()
def brands():
    for brand in supported_brands():
        typer.echo(brand.value)


if __name__ == "__main__":
    app()
