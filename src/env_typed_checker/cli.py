"""CLI entry point for env-typed-checker."""

import logging
import sys
from pathlib import Path

import click

from env_typed_checker.errors import GenerateError, SchemaError
from env_typed_checker.generator.envfile import EnvFileGenerator
from env_typed_checker.report import FORMATS, format_issues, redact_issues, render_docs
from env_typed_checker.sources import build_env, load_schema
from env_typed_checker.validator.runner import run

EXIT_INVALID = 1

schema_option = click.option(
    "--schema",
    "schema_path",
    required=True,
    envvar="ENV_TYPED_CHECKER_SCHEMA",
    type=click.Path(path_type=Path),
    help="Path to the schema file (JSON or YAML).",
)


class CliError(click.ClickException):
    """Usage-level failure (bad schema, refused overwrite); exits with 2."""

    exit_code = 2


def _load(schema_path: Path) -> dict:
    try:
        return load_schema(schema_path)
    except SchemaError as e:
        raise CliError(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Env Typed Checker — validate environment variables against a typed schema.

    Exit codes: 0 = OK, 1 = validation failed, 2 = CLI error.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@schema_option
@click.option("--env-file", type=click.Path(path_type=Path), default=None, help="Env file path (default: .env).")
@click.option("--no-dotenv", is_flag=True, help="Do not load an env file; use the process environment only.")
@click.option("--format", "fmt", default="text", type=click.Choice(FORMATS), help="Report format.")
def check(schema_path: Path, env_file: Path | None, no_dotenv: bool, fmt: str):
    """Validate the environment against a schema."""
    schema = _load(schema_path)
    env = build_env(use_dotenv=not no_dotenv, env_file=env_file)

    result = run(schema, env)
    if result.ok:
        if fmt == "json":
            click.echo(format_issues([], fmt))
        else:
            click.echo("✅ Environment is valid.")
        return

    issues = redact_issues(result.issues, schema, env)
    click.echo(format_issues(issues, fmt), err=fmt == "text")
    sys.exit(EXIT_INVALID)


@main.command()
@schema_option
@click.option("--out", "out_path", default=".env", type=click.Path(path_type=Path), help="Output env file.")
@click.option(
    "--mode",
    default="update",
    type=click.Choice(["update", "create"]),
    help="update appends missing keys; create fails if the file exists.",
)
@click.option("--no-defaults", is_flag=True, help="Write empty placeholders instead of schema defaults.")
@click.option("--comment-types", is_flag=True, help="Add inline comments with type info.")
def generate(schema_path: Path, out_path: Path, mode: str, no_defaults: bool, comment_types: bool):
    """Write missing schema keys into an env file."""
    schema = _load(schema_path)
    gen = EnvFileGenerator(use_defaults=not no_defaults, comment_types=comment_types)
    try:
        result = gen.write(schema, out_path, mode=mode)
    except GenerateError as e:
        raise CliError(str(e)) from e

    if not result.added:
        click.echo("✅ No missing variables. Nothing to generate.")
    elif mode == "create":
        click.echo(f"✅ Created {out_path} with {len(result.added)} variables.")
    else:
        click.echo(f"✅ Updated {out_path}. Added {len(result.added)} missing variables.")


@main.command()
@schema_option
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Write Markdown here instead of stdout.")
def docs(schema_path: Path, output: Path | None):
    """Render a Markdown reference table for a schema."""
    schema = _load(schema_path)
    table = render_docs(schema)
    if output is None:
        click.echo(table, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(table, encoding="utf-8")
    click.echo(f"Docs saved to {output}")
