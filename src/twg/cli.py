"""twg command line: sign bodies, check signatures offline, run the gateway.

Thin wrapper around the signing package using click.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import click

from twg.settings import Settings
from twg.signing.hmac import authorization_header
from twg.signing.keys import KeyEncoding, SecretKey, SecretKeyError, decode_secret
from twg.signing.models import RawRequest
from twg.signing.verifier import SignatureVerifier

_ENCODINGS = click.Choice([e.value for e in KeyEncoding])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> NoReturn:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _load_key(secret: str | None, encoding: str | None) -> SecretKey:
    """Resolve the key from options, falling back to TWG_* settings."""
    settings = Settings()
    try:
        return decode_secret(
            secret if secret is not None else settings.shared_secret,
            encoding or settings.secret_encoding,
        )
    except SecretKeyError as exc:
        _error(f"Error: {exc} (pass --secret or set TWG_SHARED_SECRET)")


def _read_body(body: str | None, file: Path | None) -> bytes:
    """Exact bytes to sign: --body as UTF-8, --file verbatim, else stdin."""
    if body is not None and file is not None:
        _error("Error: use either --body or --file, not both")
    if body is not None:
        return body.encode("utf-8")
    if file is not None:
        return file.read_bytes()
    return sys.stdin.buffer.read()


_body_option = click.option("--body", default=None, help="Body text, signed as UTF-8.")
_file_option = click.option(
    "--file",
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the body verbatim from a file.",
)
_secret_option = click.option("--secret", default=None, help="Shared secret (default: TWG_SHARED_SECRET).")
_encoding_option = click.option(
    "--encoding", type=_ENCODINGS, default=None, help="Secret encoding (default: TWG_SECRET_ENCODING)."
)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group()
def cli() -> None:
    """Teams webhook gateway tools."""


@cli.command()
@_body_option
@_file_option
@_secret_option
@_encoding_option
def sign(body: str | None, file: Path | None, secret: str | None, encoding: str | None) -> None:
    """Print the Authorization header Teams would send for a body."""
    key = _load_key(secret, encoding)
    click.echo(f"Authorization: {authorization_header(key, _read_body(body, file))}")


@cli.command()
@click.option("--header", "header", required=True, help="Authorization header value, e.g. 'HMAC abc='.")
@_body_option
@_file_option
@_secret_option
@_encoding_option
def verify(
    header: str,
    body: str | None,
    file: Path | None,
    secret: str | None,
    encoding: str | None,
) -> None:
    """Check a body against an Authorization header. Exit 1 when it does not match."""
    key = _load_key(secret, encoding)
    verifier = SignatureVerifier(key)
    header = header.removeprefix("Authorization:").strip()
    outcome = verifier.verify(RawRequest(body=_read_body(body, file), signature_header=header))
    if not outcome.matched:
        _error("no match")
    click.echo(f"match: {outcome.label}")


@cli.command()
@click.option("--host", default=None, help="Bind address (default: TWG_HOST).")
@click.option("--port", type=int, default=None, help="Port (default: TWG_PORT).")
def serve(host: str | None, port: int | None) -> None:
    """Run the webhook gateway."""
    import uvicorn

    from twg.api.app import create_app

    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
