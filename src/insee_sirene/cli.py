"""CLI entry point for insee_sirene package."""
from __future__ import annotations

import json
import logging
from typing import Callable, Dict, Tuple

import click
from pydantic import ValidationError

from .client import InseeClient
from .errors import InseeError


def _parse_params(params: Tuple[str, ...]) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for item in params:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--param")
        parsed[key] = value
    return parsed


def _run(ctx: click.Context, call: Callable[[InseeClient], object]) -> object:
    opts = ctx.obj
    try:
        with InseeClient(timeout=opts["timeout"]) as client:
            client.max_retries = opts["retries"]
            client.retry_delay = opts["retry_delay"]
            client.additional_data = opts["params"]
            return call(client)
    except ValidationError as exc:
        raise click.ClickException(
            f"Invalid configuration (set INSEE_CONSUMER_KEY / INSEE_CONSUMER_SECRET): {exc}"
        )
    except InseeError as exc:
        raise click.ClickException(str(exc))


@click.group()
@click.option("--timeout", default=0.0, show_default=True, help="HTTP timeout in seconds (0 = none).")
@click.option("--retries", default=2, show_default=True, type=click.IntRange(min=0), help="Retries on connection errors and 5xx.")
@click.option("--retry-delay", default=500, show_default=True, type=click.IntRange(min=0), help="Delay between retries, in ms.")
@click.option("--param", "-p", "params", multiple=True, metavar="KEY=VALUE", help="Extra query parameter (repeatable).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, timeout: float, retries: int, retry_delay: int, params: Tuple[str, ...], verbose: bool) -> None:
    """INSEE SIRENE lookup command-line tool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = {
        "timeout": timeout,
        "retries": retries,
        "retry_delay": retry_delay,
        "params": _parse_params(params),
    }


@main.command("siren")
@click.argument("number")
@click.pass_context
def siren_cmd(ctx: click.Context, number: str) -> None:
    """Look up a company by SIREN NUMBER (quote it if it contains spaces)."""
    record = _run(ctx, lambda client: client.siren(number))
    click.echo(json.dumps(record, indent=2, ensure_ascii=False))


@main.command("siret")
@click.argument("number")
@click.pass_context
def siret_cmd(ctx: click.Context, number: str) -> None:
    """Look up an establishment by SIRET NUMBER."""
    record = _run(ctx, lambda client: client.siret(number))
    click.echo(json.dumps(record, indent=2, ensure_ascii=False))


@main.command("token")
@click.option("--show", is_flag=True, help="Print the token itself.")
@click.pass_context
def token_cmd(ctx: click.Context, show: bool) -> None:
    """Request a fresh access token."""
    token = _run(ctx, lambda client: client.issuer.issue())
    click.echo(f"Token issued, expires in {token.expires_in}s")
    if show:
        click.echo(token.value)


if __name__ == "__main__":
    main()
