"""Command-line interface for expressive-text."""

import json
import sys
import logging
from pathlib import Path
from typing import Optional

import click
import yaml

from expressivetext import __version__
from expressivetext.crypto import decrypt_with_aes, encrypt_with_aes
from expressivetext.exceptions import ExpressiveTextError
from expressivetext.locator import TextLocator
from expressivetext.models import MatchSpan, PatternKind
from expressivetext.registry import default_registry, load_registry
from expressivetext.validator import VALIDATION_KINDS, Validator


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _read_text(text: Optional[str], file: Optional[Path]) -> str:
    if text is None and file is None:
        click.echo("Error: Must provide --text or --file", err=True)
        sys.exit(1)

    if file:
        text = file.read_text(encoding="utf-8")
    assert text is not None
    return text


def _echo_spans(spans: list[MatchSpan], output: str) -> None:
    if output == "json":
        click.echo(
            json.dumps(
                {
                    "match_count": len(spans),
                    "matches": [
                        {"start": s.start, "length": s.length, "text": s.text} for s in spans
                    ],
                },
                indent=2,
            )
        )
    else:
        click.echo(f"Found {len(spans)} matches")
        for span in spans:
            click.echo(f"  {span.start}-{span.end} [{span.text}]")


text_option = click.option("--text", "-t", help="Text to search (use --file for file input)")
file_option = click.option(
    "--file",
    "-f",
    type=click.Path(exists=True, path_type=Path),
    help="File to search",
)
output_option = click.option(
    "--output",
    "-o",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format",
)
patterns_option = click.option(
    "--patterns",
    "-p",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file overriding the built-in patterns",
)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """expressive-text: validate, locate and encrypt text."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@main.command()
@click.option("--text", "-t", required=True, help="Text to validate")
@click.option(
    "--kind",
    "-k",
    type=click.Choice(list(VALIDATION_KINDS)),
    required=True,
    help="What the text should be",
)
@patterns_option
def validate(text: str, kind: str, patterns: Optional[Path]) -> None:
    """Validate text as an email, IP, URL, date or number."""
    registry = load_registry(patterns) if patterns else default_registry
    validator = Validator(registry)

    try:
        result = validator.validate(text, kind)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    if result.is_valid:
        click.echo(f"✓ Valid {kind}")
        sys.exit(0)
    click.echo(f"✗ Invalid {kind}")
    sys.exit(1)


@main.command()
@text_option
@file_option
@click.option("--start", "start_marker", required=True, help="Text preceding the match")
@click.option("--end", "end_marker", required=True, help="Text following the match")
@click.option(
    "--recursive/--no-recursive",
    default=True,
    help="Narrow to the last start marker before the end marker",
)
@click.option("--max-steps", type=int, default=1000, help="Narrowing step limit")
@output_option
def between(
    text: Optional[str],
    file: Optional[Path],
    start_marker: str,
    end_marker: str,
    recursive: bool,
    max_steps: int,
    output: str,
) -> None:
    """Extract text between a start and an end marker."""
    content = _read_text(text, file)
    spans = TextLocator(max_narrowing_steps=max_steps).find_between(
        content, start_marker, end_marker, recursive=recursive
    )
    _echo_spans(spans, output)


def _affix_command(
    text: Optional[str],
    file: Optional[Path],
    values: tuple[str, ...],
    case_sensitive: bool,
    starts: bool,
) -> None:
    content = _read_text(text, file)
    locator = TextLocator()
    check = locator.starts_with_any if starts else locator.ends_with_any

    try:
        found = check(content, list(values), ignore_case=not case_sensitive)
    except ExpressiveTextError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    click.echo("true" if found else "false")
    sys.exit(0 if found else 1)


@main.command("starts-with")
@text_option
@file_option
@click.option("--value", "values", multiple=True, help="Prefix to look for (repeatable)")
@click.option("--case-sensitive", is_flag=True, help="Do not ignore case")
def starts_with(
    text: Optional[str], file: Optional[Path], values: tuple[str, ...], case_sensitive: bool
) -> None:
    """Check whether any line starts with one of the values."""
    _affix_command(text, file, values, case_sensitive, starts=True)


@main.command("ends-with")
@text_option
@file_option
@click.option("--value", "values", multiple=True, help="Suffix to look for (repeatable)")
@click.option("--case-sensitive", is_flag=True, help="Do not ignore case")
def ends_with(
    text: Optional[str], file: Optional[Path], values: tuple[str, ...], case_sensitive: bool
) -> None:
    """Check whether any line ends with one of the values."""
    _affix_command(text, file, values, case_sensitive, starts=False)


@main.command()
@text_option
@file_option
@click.argument("words", nargs=-1, required=True)
@output_option
def words(text: Optional[str], file: Optional[Path], words: tuple[str, ...], output: str) -> None:
    """Locate every occurrence of any of WORDS, ignoring case."""
    content = _read_text(text, file)
    _echo_spans(TextLocator.contains_words(content, *words), output)


@main.command()
@click.option("--text", "-t", required=True, help="Text to encrypt")
@click.option(
    "--key",
    "-k",
    required=True,
    envvar="EXPRESSIVE_TEXT_KEY",
    help="Key of 16, 24 or 32 UTF-8 bytes (or set EXPRESSIVE_TEXT_KEY)",
)
def encrypt(text: str, key: str) -> None:
    """Encrypt text with AES; prints base64(iv || ciphertext)."""
    try:
        click.echo(encrypt_with_aes(text, key))
    except ExpressiveTextError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@main.command()
@click.option("--text", "-t", required=True, help="base64 value to decrypt")
@click.option(
    "--key",
    "-k",
    required=True,
    envvar="EXPRESSIVE_TEXT_KEY",
    help="Key used for encryption (or set EXPRESSIVE_TEXT_KEY)",
)
def decrypt(text: str, key: str) -> None:
    """Decrypt the first block of a value produced by encrypt."""
    try:
        click.echo(decrypt_with_aes(text, key))
    except ExpressiveTextError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@main.command()
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to listen on (default 8080)",
)
@click.option(
    "--host",
    "-h",
    default=None,
    help="Host to bind to (default 0.0.0.0)",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (development only)",
)
@click.pass_context
def serve(
    ctx: click.Context,
    port: Optional[int],
    host: Optional[str],
    config: Optional[Path],
    reload: bool,
) -> None:
    """Start HTTP server."""
    try:
        import uvicorn
        from expressivetext.server import create_app
    except ImportError:
        click.echo(
            "Error: Server dependencies not installed. "
            "Install with: pip install expressive-text[server]",
            err=True,
        )
        sys.exit(1)

    # Load config
    config_data = {}
    if config:
        with open(config, "r") as f:
            config_data = yaml.safe_load(f) or {}

    server_config = config_data.get("server", {})
    if port is None:
        port = server_config.get("port", 8080)
    if host is None:
        host = server_config.get("host", "0.0.0.0")

    click.echo(f"Starting server on {host}:{port}")

    app = create_app(config_data)

    uvicorn.run(
        app,
        host=host,
        port=port,
        reload=reload,
        log_level="info" if ctx.obj.get("verbose") else "warning",
    )


@main.command()
@patterns_option
def list_patterns(patterns: Optional[Path]) -> None:
    """List the active patterns."""
    registry = load_registry(patterns) if patterns else default_registry

    click.echo(f"Registry version {registry.version}\n")
    for kind in PatternKind:
        click.echo(f"{kind.value:<6} {registry.get_pattern(kind)}")


if __name__ == "__main__":
    main()
