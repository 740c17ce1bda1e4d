"""Command-line interface for the Bencodex bridge."""

import json
import logging
from typing import BinaryIO

import click

from . import __version__
from .decoder import BencodexDecoder
from .encoder import BencodexEncoder
from .error_handler import EXIT_CODES, ErrorHandler
from .inspector import ValueInspector
from .json_bridge import JSONBridge
from .profiler import PerformanceProfiler
from .types import BencodexError, BinaryEncoding, DecodeOptions, JsonEncodeOptions

logger = logging.getLogger(__name__)


def _fail(ctx: click.Context, error: Exception) -> None:
    """Report ``error`` on stderr and exit with its status."""
    response = ErrorHandler(logger).handle_error(error)
    click.echo(f"❌ Error: {response.message}", err=True)
    if response.location:
        click.echo(f"   at {response.location}", err=True)
    ctx.exit(response.exit_code)


def _decode_input(input_file: BinaryIO, strict: bool, profiler: PerformanceProfiler):
    data = input_file.read()
    decoder = BencodexDecoder(DecodeOptions(strict=strict), logger)
    with profiler.profile_operation("decode_bencodex", len(data)) as session:
        result = decoder.decode_from(data)
        session.record_output(result.consumed)
    if result.consumed < len(data):
        logger.warning(f"Ignoring {len(data) - result.consumed} trailing bytes after the value")
    return result.value


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose (debug) logging on stderr')
def main(verbose: bool):
    """Bencodex bridge - Convert between Bencodex bytes and JSON."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command('to-json')
@click.argument('input_file', type=click.File('rb'), default='-')
@click.option('--base64', '-b', 'use_base64', is_flag=True,
              help='Encode binary as base64 ("b64:") instead of hexadecimal ("0x")')
@click.option('--pretty', '-p', is_flag=True, help='Indent the JSON output')
@click.option('--strict', is_flag=True, help='Reject leading zeros and non-canonical key order')
@click.option('--profile', is_flag=True, help='Print performance metrics on stderr')
@click.pass_context
def to_json(ctx: click.Context, input_file: BinaryIO, use_base64: bool, pretty: bool,
            strict: bool, profile: bool):
    """Decode Bencodex bytes and print them as JSON."""
    profiler = PerformanceProfiler(logger)
    options = JsonEncodeOptions(
        binary_encoding=BinaryEncoding.BASE64 if use_base64 else BinaryEncoding.HEX,
        indent=2 if pretty else None,
    )

    try:
        value = _decode_input(input_file, strict, profiler)
        with profiler.profile_operation("render_json") as session:
            text = JSONBridge(options, logger).to_json(value)
            session.record_output(len(text.encode('utf-8')))
    except (BencodexError, OSError) as e:
        _fail(ctx, e)
        return

    click.echo(text)
    if profile:
        click.echo(profiler.export_metrics("summary"), err=True)


@main.command('from-json')
@click.argument('input_file', type=click.File('rb'), default='-')
@click.option('--output', '-o', type=click.File('wb'), default='-',
              help='Output file for the Bencodex bytes (default: stdout)')
@click.option('--profile', is_flag=True, help='Print performance metrics on stderr')
@click.pass_context
def from_json(ctx: click.Context, input_file: BinaryIO, output: BinaryIO, profile: bool):
    """Read JSON and write the canonical Bencodex bytes."""
    profiler = PerformanceProfiler(logger)

    try:
        text = input_file.read()
        bridge = JSONBridge(logger=logger)
        with profiler.profile_operation("parse_json", len(text)) as session:
            document = bridge.parse_json(text)
            # Memory after parsing, before the value tree is built.
            session.sample()
            value = bridge.from_json(document)
        with profiler.profile_operation("encode_bencodex") as session:
            written = BencodexEncoder(logger).write(value, output)
            output.flush()
            session.record_output(written)
    except (BencodexError, OSError) as e:
        _fail(ctx, e)
        return

    if profile:
        click.echo(profiler.export_metrics("summary"), err=True)


@main.command()
@click.argument('input_file', type=click.File('rb'), default='-')
@click.option('--strict', is_flag=True, help='Reject leading zeros and non-canonical key order')
@click.pass_context
def show(ctx: click.Context, input_file: BinaryIO, strict: bool):
    """Print a human-readable rendering of Bencodex bytes."""
    try:
        value = _decode_input(input_file, strict, PerformanceProfiler(logger))
    except (BencodexError, OSError) as e:
        _fail(ctx, e)
        return

    click.echo(ValueInspector(logger=logger).render(value))


@main.command()
@click.argument('input_file', type=click.File('rb'), default='-')
@click.pass_context
def inspect(ctx: click.Context, input_file: BinaryIO):
    """Print structure statistics of Bencodex bytes as JSON."""
    try:
        value = _decode_input(input_file, False, PerformanceProfiler(logger))
    except (BencodexError, OSError) as e:
        _fail(ctx, e)
        return

    stats = ValueInspector(logger=logger).get_statistics(value)
    click.echo(json.dumps(stats.to_dict(), indent=2))


@main.command()
@click.argument('input_file', type=click.File('rb'), default='-')
@click.option('--json', 'is_json', is_flag=True, help='Validate JSON representation instead of Bencodex bytes')
@click.option('--strict', is_flag=True, help='Reject leading zeros and non-canonical key order')
@click.pass_context
def validate(ctx: click.Context, input_file: BinaryIO, is_json: bool, strict: bool):
    """Check that the input is a well-formed Bencodex (or JSON) document."""
    handler = ErrorHandler(logger)
    try:
        data = input_file.read()
    except OSError as e:
        _fail(ctx, e)
        return

    if is_json:
        result = handler.validate_json_input(data)
    else:
        result = handler.validate_input(data, DecodeOptions(strict=strict))

    for warning in result.warnings:
        click.echo(f"⚠️  {warning}", err=True)

    if result.is_valid:
        click.echo("✅ Input is valid")
        return

    click.echo("❌ Input is invalid:", err=True)
    for error in result.errors:
        location = f" ({error.location})" if error.location else ""
        click.echo(f"   • {error.message}{location}", err=True)
    ctx.exit(EXIT_CODES[result.errors[0].type])


if __name__ == '__main__':
    main()
