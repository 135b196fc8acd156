"""CLI interface for structfilter."""

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import BaseModel, Field, create_model
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from structfilter.builder import (
    build_from_rules,
    build_multi_search,
    multi_search_condition,
    search_condition,
)
from structfilter.config import FilterSettings, set_settings
from structfilter.exceptions import FilterError
from structfilter.formatters import format_as_json
from structfilter.query import SelectQuery
from structfilter.rules import Condition, Operator, Rule, parse_rule, parse_yaml_rules_file

console = Console()

# Operators whose CLI value is a comma-separated list
_LIST_OPERATORS = (Operator.IN, Operator.DATE_RANGE)


def setup_logging(log_level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_rules(rule_strings: tuple[str, ...], rules_file: Optional[Path], ruleset: str) -> list[Rule]:
    """Collect rules from a YAML file followed by --rule options."""
    rules: list[Rule] = []
    if rules_file is not None:
        rules.extend(parse_yaml_rules_file(rules_file, ruleset))
    rules.extend(parse_rule(rule_string) for rule_string in rule_strings)
    return rules


def _parse_value(rules: list[Rule], name: str, raw: str) -> Any:
    """Split list-valued operators on commas, keep everything else as a string."""
    for rule in rules:
        if rule.name == name and rule.operator in _LIST_OPERATORS:
            return [part.strip() for part in raw.split(",") if part.strip()]
    return raw


def _build_values_model(rules: list[Rule], value_strings: tuple[str, ...]) -> BaseModel:
    """Build a model instance whose serialization names are the --value keys."""
    fields: dict[str, Any] = {}
    for i, value_string in enumerate(value_strings):
        if "=" not in value_string:
            raise click.BadParameter(f"expected 'name=value', got '{value_string}'", param_hint="--value")
        name, raw = value_string.split("=", 1)
        name = name.strip()
        fields[f"field_{i}"] = (Any, Field(default=_parse_value(rules, name, raw.strip()), alias=name))
    model = create_model("CliValues", **fields)
    return model()


def _print_params(params: list[Any]) -> None:
    """Print bound parameters as a table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Value", style="cyan")
    table.add_column("Type", style="dim")
    for i, param in enumerate(params, 1):
        table.add_row(str(i), repr(param), type(param).__name__)
    console.print(table)


def _display_condition(
    condition: Optional[Condition], statement: Optional[tuple[str, list[Any]]]
) -> None:
    """Display a rendered condition on the console."""
    if condition is None:
        console.print("[yellow]No rule produced a predicate; the query is left unchanged.[/yellow]")
    else:
        console.print(f"\n[bold cyan]Condition:[/bold cyan] {condition.clause}")
        _print_params(condition.params)
    if statement is not None:
        sql, params = statement
        console.print(f"[bold cyan]SQL:[/bold cyan] {sql}")
        console.print(f"[dim]{params!r}[/dim]")
    console.print()


def _handle_output(
    condition: Optional[Condition],
    rules: list[Rule],
    query: Optional[SelectQuery],
    output_format: str,
) -> None:
    """Handle formatting and outputting results."""
    statement = query.to_sql() if query is not None else None

    if output_format.lower() == "json":
        print(format_as_json(condition, rules, statement=statement))
    else:
        _display_condition(condition, statement)


def _fail(error: Exception) -> None:
    """Report an error and exit."""
    console.print(f"[bold red]Error:[/bold red] {error}", soft_wrap=True)
    sys.exit(1)


_rule_options = [
    click.option(
        "--rule",
        "rule_strings",
        multiple=True,
        help="Rule as name[:operator[:table=T,use_zero=B]] (repeatable)",
    ),
    click.option(
        "--rules-file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="YAML file with rulesets",
    ),
    click.option(
        "--ruleset",
        type=str,
        default="default",
        help="Ruleset to load from --rules-file (default: default)",
    ),
    click.option(
        "--table",
        type=str,
        default=None,
        help="Also print the SELECT statement against this table",
    ),
    click.option(
        "--format",
        "output_format",
        type=click.Choice(["console", "json"], case_sensitive=False),
        default="console",
        help="Output format (default: console)",
    ),
]


def rule_options(func: Any) -> Any:
    """Attach the shared rule options to a command."""
    for option in reversed(_rule_options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat unknown operators as errors instead of skipping them",
)
def main(log_level: str, strict: bool) -> None:
    """Preview the WHERE conditions built from filter rules."""
    setup_logging(log_level.upper())
    set_settings(FilterSettings(strict_operators=True) if strict else FilterSettings())


@main.command()
@rule_options
@click.option(
    "--value",
    "value_strings",
    multiple=True,
    help="Field value as name=value; comma-separated for in/date_range rules (repeatable)",
)
def render(
    rule_strings: tuple[str, ...],
    rules_file: Optional[Path],
    ruleset: str,
    table: Optional[str],
    output_format: str,
    value_strings: tuple[str, ...],
) -> None:
    """Render rules against field values, joined with AND."""
    try:
        rules = _load_rules(rule_strings, rules_file, ruleset)
        values = _build_values_model(rules, value_strings)
        condition = search_condition(rules, values)
        query = SelectQuery(table).scopes(build_from_rules(rules, values)) if table else None
    except FilterError as e:
        _fail(e)
        return

    _handle_output(condition, rules, query, output_format)


@main.command()
@click.argument("keyword")
@rule_options
def search(
    keyword: str,
    rule_strings: tuple[str, ...],
    rules_file: Optional[Path],
    ruleset: str,
    table: Optional[str],
    output_format: str,
) -> None:
    """Match KEYWORD against every rule, joined with OR."""
    try:
        rules = _load_rules(rule_strings, rules_file, ruleset)
        condition = multi_search_condition(rules, keyword)
        query = SelectQuery(table).scopes(build_multi_search(rules, keyword)) if table else None
    except FilterError as e:
        _fail(e)
        return

    _handle_output(condition, rules, query, output_format)


if __name__ == "__main__":
    main()
