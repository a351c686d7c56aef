"""
Guichet CLI.

Usage:
    guichet balance
    guichet tokens [--hide-empty]
    guichet airdrop AMOUNT [--to ADDRESS]
    guichet send RECIPIENT AMOUNT
    guichet send-token RECIPIENT MINT AMOUNT
    guichet sign MESSAGE

Global options: --config, --keypair, --rpc-url
"""

import asyncio
import os
import sys
from typing import Awaitable, Callable, TypeVar

import click

from guichet.application.lifecycle_orchestrator import LifecycleOrchestrator
from guichet.config.settings import GuichetConfig, load_config, override_settings
from guichet.di.container import DIContainer
from guichet.domain.entities.action import ActionResult
from guichet.infrastructure.monitoring.logger import setup_logging
from guichet.infrastructure.monitoring.notifier import ConsoleNotifier

T = TypeVar("T")


def _run(
    settings: GuichetConfig,
    action: Callable[[LifecycleOrchestrator], Awaitable[T]],
) -> T:
    """Run one orchestrator call on a fresh container and event loop."""

    async def runner() -> T:
        container = DIContainer(settings=settings, notifier=ConsoleNotifier())
        try:
            return await action(container.orchestrator)
        finally:
            await container.shutdown()

    try:
        return asyncio.run(runner())
    except FileNotFoundError as e:
        click.echo(str(e), err=True)
        sys.exit(1)


def _finish(result: ActionResult) -> None:
    if not result.success:
        sys.exit(1)


@click.group()
@click.option("--config", "-c", default=None, help="Config file (YAML)")
@click.option("--keypair", "-k", default=None, help="Solana keypair JSON file")
@click.option("--rpc-url", default=None, help="Override RPC endpoint")
@click.pass_context
def cli(ctx, config, keypair, rpc_url):
    """Guichet - Solana wallet actions from the command line."""
    if config and os.path.exists(config):
        config = os.path.abspath(config)
    settings = load_config(config)

    updates = {}
    if keypair:
        updates["keypair_path"] = os.path.expanduser(keypair)
    if rpc_url:
        updates["rpc_url"] = rpc_url
    if updates:
        settings = settings.model_copy(update=updates)

    override_settings(settings)
    setup_logging(level=settings.log_level.upper(), json_logs=settings.json_logs)
    ctx.obj = settings


@cli.command()
@click.pass_obj
def balance(settings):
    """Show native SOL balance."""

    async def action(orchestrator: LifecycleOrchestrator):
        await orchestrator.refresh_balance()
        return orchestrator.state

    state = _run(settings, action)
    if state is None or state.balance is None:
        sys.exit(1)
    click.echo(f"{state.owner}: {state.balance_display}")


@cli.command()
@click.option("--hide-empty", is_flag=True, help="Skip zero balances")
@click.pass_obj
def tokens(settings, hide_empty):
    """List SPL token holdings."""

    async def action(orchestrator: LifecycleOrchestrator):
        return await orchestrator.refresh_holdings()

    holdings = _run(settings, action)
    if holdings is None:
        sys.exit(1)

    shown = [h for h in holdings if h.raw_amount or not hide_empty]
    if not shown:
        click.echo("No token holdings")
        return

    for holding in shown:
        click.echo(
            f"{holding.mint}  {holding.display_text}  (decimals: {holding.decimals})"
        )


@cli.command()
@click.argument("amount")
@click.option("--to", "recipient", default=None, help="Recipient (default: wallet)")
@click.pass_obj
def airdrop(settings, amount, recipient):
    """Request an airdrop of AMOUNT SOL (test networks only)."""
    result = _run(
        settings, lambda orchestrator: orchestrator.request_airdrop(amount, recipient)
    )
    _finish(result)


@cli.command()
@click.argument("recipient")
@click.argument("amount")
@click.pass_obj
def send(settings, recipient, amount):
    """Send AMOUNT SOL to RECIPIENT."""
    result = _run(
        settings, lambda orchestrator: orchestrator.send_native(recipient, amount)
    )
    _finish(result)


@cli.command("send-token")
@click.argument("recipient")
@click.argument("mint")
@click.argument("amount")
@click.pass_obj
def send_token(settings, recipient, mint, amount):
    """Send AMOUNT of token MINT to RECIPIENT."""

    async def action(orchestrator: LifecycleOrchestrator):
        await orchestrator.refresh_holdings()
        return await orchestrator.send_token(recipient, mint, amount)

    _finish(_run(settings, action))


@cli.command()
@click.argument("message")
@click.pass_obj
def sign(settings, message):
    """Sign MESSAGE with the wallet and verify the signature."""
    result = _run(settings, lambda orchestrator: orchestrator.sign_message(message))
    if result.success:
        click.echo(result.signed_message.signature_b58)
    _finish(result)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
