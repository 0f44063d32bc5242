#!/usr/bin/env python3
"""
Quote Matcher CLI
Builds a quotation from a pasted request list against a catalog export.
"""

import json
import logging
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .catalog_loader import load_catalog
from .config import MatcherConfig, ScoringPolicy
from .extractor import GeminiItemExtractor, ItemExtractor, SimpleItemExtractor
from .models import MatchClassification
from .quotation import quote_from_text
from .ranker import Ranker
from .scorer import RelevanceScorer, ScoreBreakdown

logger = logging.getLogger(__name__)

console = Console()

STATUS_STYLES = {
    MatchClassification.EXACT: "[green]Exact[/green]",
    MatchClassification.SIMILAR: "[yellow]Similar[/yellow]",
    MatchClassification.NOT_FOUND: "[red]Not found[/red]",
}


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_ranker(config: MatcherConfig) -> Ranker:
    scorer = RelevanceScorer(config=config.scoring)
    return Ranker(scorer=scorer, max_results=config.max_results, max_workers=config.max_workers)


def build_extractor(config: MatcherConfig, use_gemini: bool) -> ItemExtractor:
    if use_gemini:
        if not config.gemini_api_key:
            raise click.UsageError("--use-gemini needs GEMINI_API_KEY to be set")
        return GeminiItemExtractor(api_key=config.gemini_api_key, model=config.gemini_model)
    return SimpleItemExtractor()


def load_config(policy: Optional[str]) -> MatcherConfig:
    config = MatcherConfig.from_env()
    if policy:
        config = config.with_policy(ScoringPolicy.parse(policy))
    return config


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """Match instrument requests against a supply catalog."""
    configure_logging(verbose)


@cli.command()
@click.argument('catalog')
@click.argument('request_file', type=click.File('r', encoding='utf-8'), default='-')
@click.option('--supplier', '-s', help='Only count lines picked from this supplier')
@click.option('--policy', type=click.Choice([p.value for p in ScoringPolicy]), help='Scoring policy')
@click.option('--use-gemini', is_flag=True, help='Extract items with Gemini instead of the rule-based splitter')
@click.option('--output', '-o', type=click.Path(), help='Output JSON file path')
def quote(catalog: str, request_file, supplier: Optional[str], policy: Optional[str],
          use_gemini: bool, output: Optional[str]):
    """Build a quotation for the request list in REQUEST_FILE (stdin by default)."""
    try:
        config = load_config(policy)
        items = load_catalog(catalog)
        if not items:
            logger.warning("Catalog is empty, every line will be reported as not found")

        quotation = quote_from_text(
            request_file.read(),
            items,
            extractor=build_extractor(config, use_gemini),
            ranker=build_ranker(config),
        )
        result = quotation.to_dict(supplier)

        if output:
            with open(output, 'w', encoding='utf-8') as f:
                json.dump(result, f, indent=2, ensure_ascii=False)
            logger.info(f"✅ Results saved to: {output}")

        render_quotation(quotation, supplier)

    except click.UsageError:
        raise
    except Exception as e:
        click.echo(f"Error building quotation: {e}", err=True)
        raise click.Abort()


@cli.command()
@click.argument('catalog')
@click.argument('term')
@click.option('--policy', type=click.Choice([p.value for p in ScoringPolicy]), help='Scoring policy')
@click.option('--explain', is_flag=True, help='Show how each score was built')
def search(catalog: str, term: str, policy: Optional[str], explain: bool):
    """Show the ranked candidates for a single TERM."""
    try:
        config = load_config(policy)
        ranker = build_ranker(config)
        candidates = ranker.rank(load_catalog(catalog), term)
    except Exception as e:
        click.echo(f"Error searching catalog: {e}", err=True)
        raise click.Abort()

    table = Table(title=f"Candidates for '{term}'")
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Code")
    table.add_column("Title")
    table.add_column("Supplier")
    table.add_column("Price", justify="right")
    if explain:
        table.add_column("Breakdown")
    for position, candidate in enumerate(candidates, 1):
        item = candidate.item
        cells = [str(position), f"{candidate.score:.0f}", item.code, item.title,
                 item.supplier, str(item.price) if item.price is not None else "-"]
        if explain:
            cells.append(describe_breakdown(ranker.scorer.explain(item, term)))
        table.add_row(*cells)
    console.print(table)
    if not candidates:
        console.print("[red]No candidates found[/red]")


def describe_breakdown(breakdown: ScoreBreakdown) -> str:
    return (f"complete={breakdown.completeness:.0f} exact={breakdown.exact_title:.0f} "
            f"tokens={breakdown.token_score:.0f} ({breakdown.perfect_matches} perfect) "
            f"anchor={breakdown.anchor_bonus:.0f} accessory=-{breakdown.accessory_penalty:.0f}")


def render_quotation(quotation, supplier: Optional[str]):
    table = Table(title="Quotation" + (f" ({supplier})" if supplier else ""))
    table.add_column("Requested")
    table.add_column("Code")
    table.add_column("Found")
    table.add_column("Supplier")
    table.add_column("Qty", justify="right")
    table.add_column("Unit", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Status")

    for row in quotation.export_rows(supplier):
        table.add_row(row.term, row.code or "-", row.title or "-", row.supplier or "-",
                      str(row.quantity), str(row.unit_price), str(row.line_total),
                      STATUS_STYLES[row.classification])
    console.print(table)

    summary = quotation.summary()
    console.print(Panel.fit(
        f"[bold]Total:[/bold] {quotation.total(supplier):.2f}\n"
        f"{summary.exact} exact, {summary.similar} similar, {summary.not_found} not found",
        border_style="blue",
    ))


if __name__ == '__main__':
    cli()
