"""rspamd-client command-line interface."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Annotated, Any, BinaryIO, NoReturn, TypeVar

import typer

from . import __version__
from .client import Client
from .config import ClientConfig, Config, ConfigError, load_config, resolve_config_path
from .errors import RspamdError, is_already_learned_error, is_not_found
from .logging import configure_logging
from .types import CheckRequest, FuzzyRequest, LearnRequest

app = typer.Typer(help="Talk to an rspamd daemon over its HTTP API.")
LOGGER = logging.getLogger(__name__)
T = TypeVar("T")

MessageArgument = Annotated[
    Path,
    typer.Argument(..., help="Path to an RFC822 message, or '-' to read stdin."),
]
QueueIdOption = Annotated[
    str | None,
    typer.Option("-q", "--queue-id", help="Queue-Id header sent with the message."),
]
FlagOption = Annotated[
    int,
    typer.Option("-f", "--flag", help="Fuzzy storage flag."),
]


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config_path: Path | None
    url: str | None = None


@app.callback()
def _rspamd_client(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to config (env RSPAMD_CLIENT_CONFIG or ~/.config/rspamd-client/config.yaml).",
        ),
    ] = None,
    url: Annotated[
        str | None,
        typer.Option("-u", "--url", help="Daemon URL, overriding the configured one."),
    ] = None,
) -> None:
    """Capture global CLI options."""

    resolved = config.expanduser() if config else None
    ctx.obj = CLIState(config_path=resolved, url=url)


@app.command()
def version() -> None:
    """Print the installed version."""

    typer.echo(__version__)


@app.command()
def ping(ctx: typer.Context) -> None:
    """Check that the daemon is alive."""

    with _client(ctx) as client:
        reply = _run(client.ping)
    typer.echo(reply)


@app.command()
def check(
    ctx: typer.Context,
    message: MessageArgument,
    queue_id: QueueIdOption = None,
) -> None:
    """Scan a message and print its score and symbols."""

    with _client(ctx) as client, _open_message(message) as body:
        try:
            result = client.check(CheckRequest(message=body, queue_id=queue_id))
        except RspamdError as exc:
            if is_not_found(exc):
                _fail("Daemon lost track of the message before scanning it; retry later.")
            _fail(str(exc))

    typer.echo(f"Score: {result.score:.2f}")
    typer.echo(f"Action: {result.action or 'n/a'}")
    typer.echo(f"Message-ID: {result.message_id or 'n/a'}")
    if result.symbols:
        typer.echo("Symbols:")
        for symbol in sorted(result.symbols.values(), key=lambda item: (-item.score, item.name)):
            line = f"  {symbol.name}: {symbol.score:.2f}"
            if symbol.description:
                line += f" ({symbol.description})"
            typer.echo(line)


@app.command("learn-spam")
def learn_spam(
    ctx: typer.Context,
    message: MessageArgument,
    queue_id: QueueIdOption = None,
) -> None:
    """Train the Bayesian classifier with a spam sample."""

    _learn(ctx, message, queue_id, label="spam")


@app.command("learn-ham")
def learn_ham(
    ctx: typer.Context,
    message: MessageArgument,
    queue_id: QueueIdOption = None,
) -> None:
    """Train the Bayesian classifier with a ham sample."""

    _learn(ctx, message, queue_id, label="ham")


@app.command("fuzzy-add")
def fuzzy_add(
    ctx: typer.Context,
    message: MessageArgument,
    flag: FlagOption = 1,
    weight: Annotated[int, typer.Option("-w", "--weight", help="Fuzzy hash weight.")] = 1,
) -> None:
    """Add a message to fuzzy storage."""

    with _client(ctx) as client, _open_message(message) as body:
        result = _run(client.fuzzy_add, FuzzyRequest(message=body, flag=flag, weight=weight))
    _report_fuzzy("Added", result.success, result.hashes)


@app.command("fuzzy-del")
def fuzzy_del(
    ctx: typer.Context,
    message: MessageArgument,
    flag: FlagOption = 1,
) -> None:
    """Remove a message from fuzzy storage."""

    with _client(ctx) as client, _open_message(message) as body:
        result = _run(client.fuzzy_del, FuzzyRequest(message=body, flag=flag))
    _report_fuzzy("Removed", result.success, result.hashes)


def _learn(ctx: typer.Context, message: Path, queue_id: str | None, *, label: str) -> None:
    with _client(ctx) as client, _open_message(message) as body:
        request = LearnRequest(message=body, queue_id=queue_id)
        operation = client.learn_spam if label == "spam" else client.learn_ham
        try:
            result = operation(request)
        except RspamdError as exc:
            if is_already_learned_error(exc):
                typer.secho(
                    f"Message already learned as {label}; nothing to do.",
                    fg=typer.colors.YELLOW,
                )
                return
            _fail(str(exc))
    if not result.success:
        _fail(f"Daemon refused to learn message as {label}.")
    typer.echo(f"Learned message as {label}.")


def _report_fuzzy(verb: str, success: bool, hashes: tuple[str, ...]) -> None:
    if not success:
        _fail("Daemon reported failure for fuzzy storage update.")
    typer.echo(f"{verb} {len(hashes)} fuzzy hash(es).")
    for digest in hashes:
        typer.echo(f"  {digest}")


def _run(operation: Callable[..., T], *args: Any) -> T:
    try:
        return operation(*args)
    except RspamdError as exc:
        _fail(str(exc))


@contextmanager
def _client(ctx: typer.Context) -> Iterator[Client]:
    config = _load_config(_state(ctx))
    try:
        configure_logging(config.logging)
    except ConfigError as exc:
        _config_failure(exc)
    LOGGER.debug("Using rspamd daemon at %s", config.client.url)
    with Client.from_config(config.client) as client:
        yield client


@contextmanager
def _open_message(path: Path) -> Iterator[BinaryIO]:
    if str(path) == "-":
        yield sys.stdin.buffer
        return
    message_path = path.expanduser()
    if not message_path.is_file():
        _fail(f"Message file not found: {message_path}")
    with message_path.open("rb") as handle:
        yield handle


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state missing from context.")
    return state


def _load_config(state: CLIState) -> Config:
    try:
        if (
            state.url
            and state.config_path is None
            and not resolve_config_path(None).exists()
        ):
            return Config(client=ClientConfig(url=state.url))
        config = load_config(state.config_path)
        if state.url:
            config = replace(config, client=replace(config.client, url=state.url))
        return config
    except ConfigError as exc:
        _config_failure(exc)


def _config_failure(exc: ConfigError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(2) from exc


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


__all__ = ["app"]
