"""CLI entry point for snake"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="snake",
    help="Uniform completion client for LLM providers",
    add_completion=False,
)
console = Console()


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def providers():
    """List registered providers and whether they are configured"""
    from snake.config import Config
    from snake.provider.factory import missing_config_keys, providers as list_providers

    config = Config.load()

    table = Table(title="Providers")
    table.add_column("Name", style="cyan")
    table.add_column("Display name")
    table.add_column("Default model")
    table.add_column("Status")

    for metadata in list_providers():
        missing = missing_config_keys(metadata.name, config)
        status = "[green]configured[/green]" if not missing else f"[yellow]missing {', '.join(missing)}[/yellow]"
        table.add_row(metadata.name, metadata.display_name, metadata.default_model, status)

    console.print(table)


@app.command()
def complete(
    message: str = typer.Argument(..., help="Message to send"),
    model: str = typer.Option(
        "claude",
        "--model", "-m",
        help="Model to use (provider/model or alias)",
    ),
    system: str = typer.Option(
        "You are a helpful assistant.",
        "--system", "-s",
        help="System prompt",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and responses"),
):
    """Send a single message and print the reply"""
    from snake.config import ConfigError
    from snake.message import Message
    from snake.provider.errors import ProviderError
    from snake.provider.router import ModelRouter

    _configure_logging(verbose)

    async def run_complete():
        provider = ModelRouter.get_provider(model)
        async with provider:
            return await provider.complete(system, [Message.user().with_text(message)], [])

    try:
        reply, usage = asyncio.run(run_complete())
    except (ConfigError, ProviderError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(reply.text)
    for request in reply.tool_requests:
        console.print(f"[dim]tool request {request.id}: {request.tool_call or request.error}[/dim]")
    console.print(
        f"[dim]{usage.model} · input {usage.usage.input_tokens} · "
        f"output {usage.usage.output_tokens} · total {usage.usage.total_tokens}[/dim]"
    )


def main():
    app()


if __name__ == "__main__":
    main()
