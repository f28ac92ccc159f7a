"""CLI interface for authornorm using Click.

Wraps the core engine for interactive terminal use and batch scripts.
"""

import logging
import sys
from pathlib import Path

import click
import orjson

from authornorm.config import DEFAULT_CONFIG_PATH, NormalizerConfig, load_config
from authornorm.core import NameNormalizationEngine
from authornorm.models import Algorithm
from authornorm.parser import NameParser
from authornorm.similarity import initial_compatible, score
from authornorm.variants import VariantGenerator

logger = logging.getLogger(__name__)


def _config_path(config: str | None) -> str | None:
    """Resolve the config option, picking up ./authornorm.yaml if present."""
    if config is None and Path(DEFAULT_CONFIG_PATH).exists():
        return DEFAULT_CONFIG_PATH
    return config


def _get_config(config: str | None) -> NormalizerConfig:
    path = _config_path(config)
    if path is None:
        return NormalizerConfig()
    try:
        return load_config(path)
    except FileNotFoundError:
        click.echo(f"Error: Config file not found: {path}", err=True)
        sys.exit(1)


def _get_engine(config: str | None) -> NameNormalizationEngine:
    """Create a NameNormalizationEngine from a config path.

    Args:
        config: Path to authornorm.yaml, or None for defaults.

    Returns:
        Initialized engine owning its database connection.
    """
    try:
        return NameNormalizationEngine.from_config(_config_path(config))
    except FileNotFoundError:
        click.echo(f"Error: Config file not found: {config}", err=True)
        sys.exit(1)


def _parser(config: NormalizerConfig) -> NameParser:
    return NameParser(
        extra_particles=config.parser.extra_particles,
        extra_suffixes=config.parser.extra_suffixes,
    )


@click.group()
@click.option(
    "-c",
    "--config",
    default=None,
    help=f"Path to config file (default: ./{DEFAULT_CONFIG_PATH} if present).",
    type=click.Path(),
)
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """authornorm -- Author-name normalization for bibliographic libraries."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command()
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def parse(ctx: click.Context, name: str, as_json: bool) -> None:
    """Split a raw name into its components."""
    parsed = _parser(_get_config(ctx.obj["config"])).parse(name)
    if as_json:
        click.echo(
            orjson.dumps(
                parsed.model_dump(mode="json"), option=orjson.OPT_INDENT_2
            ).decode()
        )
        return

    click.echo(f"First name: {parsed.first_name or '-'}")
    click.echo(f"Last name: {parsed.last_name or '-'}")
    click.echo(f"Particles: {' '.join(parsed.particles) or '-'}")
    click.echo(f"Suffix: {parsed.suffix or '-'}")
    click.echo(f"Initials: {' '.join(parsed.initials) or '-'}")


@main.command()
@click.argument("name")
@click.pass_context
def variants(ctx: click.Context, name: str) -> None:
    """List alternate renderings of a name."""
    config = _get_config(ctx.obj["config"])
    generator = VariantGenerator(
        parser=_parser(config), max_variants=config.variants.max_variants
    )
    found = generator.generate_variants(name)
    if not found:
        click.echo("No variants.")
        return
    for v in found:
        click.echo(f"  [{v.kind.value}] {v.text}")


@main.command()
@click.argument("name_a")
@click.argument("name_b")
def compare(name_a: str, name_b: str) -> None:
    """Score two names with every similarity algorithm."""
    for algorithm in Algorithm:
        result = score(name_a, name_b, algorithm)
        click.echo(f"{algorithm.value:<18} {result.value:.3f}")
    click.echo(f"Initial-compatible: {initial_compatible(name_a, name_b)}")


@main.command()
@click.argument("name")
@click.pass_context
def suggest(ctx: click.Context, name: str) -> None:
    """Show ranked normalization suggestions for a name."""
    with _get_engine(ctx.obj["config"]) as engine:
        suggestions = engine.suggest(name)

    if not suggestions:
        click.echo("No suggestions.")
        return
    for s in suggestions:
        kind = f" ({s.kind.value})" if s.kind else ""
        click.echo(f"  {s.score:.3f}  {s.text}  [{s.source.value}{kind}]")


@main.command()
@click.argument("raw")
@click.argument("normalized")
@click.option(
    "--confidence",
    default=1.0,
    type=click.FloatRange(0.0, 1.0),
    help="Confidence of the mapping.",
)
@click.pass_context
def learn(
    ctx: click.Context, raw: str, normalized: str, confidence: float
) -> None:
    """Remember that RAW should be normalized to NORMALIZED."""
    with _get_engine(ctx.obj["config"]) as engine:
        mapping = engine.learning.store_mapping(raw, normalized, confidence)

    if mapping is None:
        click.echo("Error: both names must be non-empty.", err=True)
        sys.exit(1)
    click.echo(f"Learned: {mapping.raw} -> {mapping.normalized}")


@main.command()
@click.argument("raw")
@click.pass_context
def forget(ctx: click.Context, raw: str) -> None:
    """Delete the learned mapping for RAW."""
    with _get_engine(ctx.obj["config"]) as engine:
        removed = engine.learning.remove_mapping(raw)

    if removed:
        click.echo(f"Removed mapping for {raw}")
    else:
        click.echo(f"No mapping for {raw}")


@main.command()
@click.pass_context
def mappings(ctx: click.Context) -> None:
    """List all learned mappings."""
    with _get_engine(ctx.obj["config"]) as engine:
        stored = engine.learning.get_all_mappings()

    if not stored:
        click.echo("No learned mappings.")
        return
    for m in sorted(stored.values(), key=lambda m: m.key):
        click.echo(
            f"  {m.raw} -> {m.normalized} "
            f"(confidence {m.confidence:.2f}, used {m.usage_count}x)"
        )


@main.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show learned-mapping statistics."""
    with _get_engine(ctx.obj["config"]) as engine:
        result = engine.learning.get_statistics()

    click.echo(f"Total mappings: {result.total_mappings}")
    click.echo(f"Total usage: {result.total_usage}")
    click.echo(f"Average usage: {result.average_usage:.2f}")
    click.echo(f"Average confidence: {result.average_confidence:.2f}")


@main.command()
@click.argument("items_json", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def analyze(ctx: click.Context, items_json: str, as_json: bool) -> None:
    """Find likely name variants across a library export.

    ITEMS_JSON holds a list of items (or an object with an "items" list),
    each with a "creators" list of firstName/lastName records.
    """
    data = orjson.loads(Path(items_json).read_bytes())
    items = data.get("items", []) if isinstance(data, dict) else data

    with _get_engine(ctx.obj["config"]) as engine:
        analysis = engine.perform_library_analysis(items)

    if as_json:
        click.echo(
            orjson.dumps(
                analysis.model_dump(mode="json"), option=orjson.OPT_INDENT_2
            ).decode()
        )
        return

    click.echo(f"Total names: {analysis.total_names}")
    click.echo(f"Unique surnames: {analysis.unique_surnames}")

    if analysis.potential_variants:
        click.echo("\nPotential surname variants:")
        for p in analysis.potential_variants:
            click.echo(
                f"  {p.name1} ({p.frequency1}) ~ {p.name2} ({p.frequency2})"
                f"  similarity {p.similarity:.2f} -> {p.recommended}"
            )

    if analysis.given_name_variants:
        click.echo("\nGiven-name variants:")
        for v in analysis.given_name_variants:
            click.echo(
                f"  {v.surname}: {v.given_name1} ({v.frequency1}) ~ "
                f"{v.given_name2} ({v.frequency2}) -> {v.recommended}"
            )


@main.command("export")
@click.argument("path", type=click.Path())
@click.pass_context
def export_mappings(ctx: click.Context, path: str) -> None:
    """Export learned mappings to a JSON file."""
    with _get_engine(ctx.obj["config"]) as engine:
        payload = engine.learning.export_mappings()

    Path(path).write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
    click.echo(f"Exported {len(payload['mappings'])} mappings to {path}")


@main.command("import")
@click.argument("path", type=click.Path(exists=True))
@click.option(
    "--merge",
    is_flag=True,
    help="Keep existing mappings instead of replacing them.",
)
@click.pass_context
def import_mappings(ctx: click.Context, path: str, merge: bool) -> None:
    """Import learned mappings from a JSON export."""
    payload = orjson.loads(Path(path).read_bytes())
    with _get_engine(ctx.obj["config"]) as engine:
        try:
            count = engine.learning.import_mappings(payload, replace=not merge)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    click.echo(f"Imported {count} mappings from {path}")


@main.command()
@click.argument("name_a")
@click.argument("name_b")
@click.option("--scope", default="global", help="Scope of the decision.")
@click.option("--clear", is_flag=True, help="Forget the decision instead.")
@click.pass_context
def distinct(
    ctx: click.Context, name_a: str, name_b: str, scope: str, clear: bool
) -> None:
    """Record that NAME_A and NAME_B are different people."""
    with _get_engine(ctx.obj["config"]) as engine:
        if clear:
            changed = engine.learning.clear_distinct_pair(name_a, name_b, scope)
            verb = "Cleared" if changed else "No record of"
        else:
            changed = engine.learning.record_distinct_pair(
                name_a, name_b, scope
            )
            verb = "Recorded" if changed else "Already recorded"
    click.echo(f"{verb} distinct pair: {name_a} / {name_b}")
