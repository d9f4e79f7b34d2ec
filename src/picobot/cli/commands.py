"""
CLI commands for picobot.

Uses Typer for command-line interface.
"""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

import typer

from picobot import __version__
from picobot.agent import AgentLoop
from picobot.bus import MessageHub
from picobot.channels import ChannelManager
from picobot.config import Config, load_config, onboard as onboard_workspace
from picobot.cron import CronService
from picobot.heartbeat import HeartbeatService
from picobot.memory import FileStore, LLMRanker, MemoryStore
from picobot.providers import ProviderError, create_provider


app = typer.Typer(
    name="picobot",
    help="picobot: a lightweight personal AI assistant gateway",
    no_args_is_help=True,
)
memory_app = typer.Typer(help="Inspect or modify workspace memory files")
app.add_typer(memory_app, name="memory")

logger = logging.getLogger("picobot")


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load_config_or_exit(path: Optional[Path] = None) -> Config:
    """Startup failures are fatal: report and exit before serving anything."""
    try:
        return load_config(path)
    except (OSError, ValueError) as e:
        typer.echo(f"Failed to load config: {e}", err=True)
        raise typer.Exit(code=1)


def _memory_store(config: Config) -> MemoryStore:
    try:
        return MemoryStore(FileStore(config.workspace))
    except OSError as e:
        typer.echo(f"Cannot open workspace {config.workspace}: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def version():
    """Print version."""
    typer.echo(f"picobot v{__version__}")


@app.command()
def onboard(
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Config file to create (default ~/.picobot/config.json)"
    ),
):
    """Create the default config and workspace."""
    try:
        cfg_path, workspace = onboard_workspace(config_path)
    except (OSError, ValueError) as e:
        typer.echo(f"onboard failed: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Wrote config to {cfg_path}")
    typer.echo(f"Initialized workspace at {workspace}")


@app.command()
def status():
    """Show configuration and status."""
    config = _load_config_or_exit()
    defaults = config.agents.defaults
    provider = create_provider(config)

    typer.echo("\n=== picobot Status ===")
    typer.echo(f"Workspace: {config.workspace}")
    typer.echo(f"Provider: {type(provider).__name__}")
    typer.echo(f"Model: {defaults.model or provider.default_model}")
    typer.echo(f"Max tool iterations: {defaults.max_tool_iterations}")
    typer.echo("\nChannels:")

    for channel_name, channel_config in config.channels.model_dump().items():
        enabled = channel_config.get("enabled", False)
        state = "✓ enabled" if enabled else "✗ disabled"
        typer.echo(f"  {channel_name}: {state}")

    typer.echo("")


@app.command()
def agent(
    message: Optional[str] = typer.Option(
        None, "-m", "--message", help="Single message to process"
    ),
    model: Optional[str] = typer.Option(
        None, "-M", "--model", help="Model to use (overrides config/provider default)"
    ),
):
    """Run a single-shot agent query."""
    if not message:
        typer.echo('Specify a message with -m "your message"')
        raise typer.Exit(code=1)

    asyncio.run(_single_message(message, model))


async def _single_message(message: str, model: Optional[str]) -> None:
    """Process a single message and print the response."""
    config = _load_config_or_exit()
    defaults = config.agents.defaults
    provider = create_provider(config)

    try:
        agent_loop = AgentLoop.from_workspace(
            hub=MessageHub(),
            provider=provider,
            workspace=config.workspace,
            model=model or defaults.model or None,
            max_iterations=defaults.max_tool_iterations,
            exec_timeout_s=config.tools.exec_timeout_s,
            memory_top_k=defaults.memory_top_k,
            recent_days=defaults.recent_days,
        )
    except OSError as e:
        typer.echo(f"Cannot open workspace {config.workspace}: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        response = await agent_loop.process_direct(
            message, timeout=float(defaults.request_timeout_s)
        )
    except (ProviderError, asyncio.TimeoutError) as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(response)


@app.command()
def gateway(
    model: Optional[str] = typer.Option(
        None, "-M", "--model", help="Model to use (overrides config/provider default)"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """
    Start the long-running gateway.

    This runs:
    - Message hub routing
    - Agent loop processing inbound messages
    - All enabled channels (Telegram, etc.)
    - Cron scheduler
    - Heartbeat monitor
    """
    _configure_logging(verbose)
    config = _load_config_or_exit()
    asyncio.run(_run_gateway(config, model))


async def _run_gateway(config: Config, model: Optional[str]) -> None:
    """Main gateway coroutine coordinating all services."""
    defaults = config.agents.defaults
    logger.info("Starting picobot gateway (workspace %s)", config.workspace)

    hub = MessageHub(
        inbound_size=config.hub.inbound_size,
        outbound_size=config.hub.outbound_size,
        subscriber_size=config.hub.subscriber_size,
    )
    provider = create_provider(config)
    cron = CronService(hub)

    try:
        agent_loop = AgentLoop.from_workspace(
            hub=hub,
            provider=provider,
            workspace=config.workspace,
            model=model or defaults.model or None,
            max_iterations=defaults.max_tool_iterations,
            cron=cron,
            exec_timeout_s=config.tools.exec_timeout_s,
            memory_top_k=defaults.memory_top_k,
            recent_days=defaults.recent_days,
        )
    except OSError as e:
        typer.echo(f"Cannot open workspace {config.workspace}: {e}", err=True)
        raise typer.Exit(code=1)

    heartbeat = HeartbeatService(
        hub, config.workspace, interval_s=defaults.heartbeat_interval_s
    )

    # Every channel subscribes during init_channel; routing starts in start_all
    channels = ChannelManager(hub)
    if config.channels.telegram.enabled:
        from picobot.channels.telegram import TelegramChannel

        channels.init_channel(
            "telegram", TelegramChannel, config.channels.telegram.model_dump()
        )

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal() -> None:
        logger.info("Shutdown signal received, stopping...")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _handle_signal)

    await channels.start_all()
    agent_task = asyncio.create_task(agent_loop.run(), name="agent-loop")
    await cron.start()
    await heartbeat.start()
    typer.echo(f"picobot gateway running (model {agent_loop.model}); Ctrl+C to stop")

    try:
        await shutdown_event.wait()
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

        # Abort the in-flight turn first so no partial session is written
        agent_task.cancel()
        await asyncio.gather(agent_task, return_exceptions=True)

        await cron.stop()
        await heartbeat.stop()
        await channels.stop_all()
        logger.info("Gateway stopped (%d outbound messages dropped)", hub.dropped)
        typer.echo("Goodbye!")


@memory_app.command("read")
def memory_read(target: str = typer.Argument(..., help="today | long")):
    """Read today's notes or long-term memory."""
    memory = _memory_store(_load_config_or_exit())
    if target == "today":
        typer.echo(memory.read_today())
    elif target == "long":
        typer.echo(memory.read_long_term())
    else:
        typer.echo(f"unknown target: {target}", err=True)
        raise typer.Exit(code=1)


@memory_app.command("append")
def memory_append(
    target: str = typer.Argument(..., help="today | long"),
    content: str = typer.Option(..., "-c", "--content", help="Content to append"),
):
    """Append content to today's notes or long-term memory."""
    memory = _memory_store(_load_config_or_exit())
    if target == "today":
        memory.append_today(content)
        typer.echo("appended to today")
    elif target == "long":
        existing = memory.read_long_term().rstrip()
        memory.write_long_term(f"{existing}\n{content}\n" if existing else f"{content}\n")
        typer.echo("appended to long-term memory")
    else:
        typer.echo(f"unknown target: {target}", err=True)
        raise typer.Exit(code=1)


@memory_app.command("write")
def memory_write(
    target: str = typer.Argument(..., help="long"),
    content: str = typer.Option(..., "-c", "--content", help="Content to write"),
):
    """Overwrite long-term memory."""
    if target != "long":
        typer.echo("write currently only supports 'long'", err=True)
        raise typer.Exit(code=1)
    memory = _memory_store(_load_config_or_exit())
    memory.write_long_term(content)
    typer.echo("wrote long-term memory")


@memory_app.command("recent")
def memory_recent(
    days: int = typer.Option(1, "-d", "--days", help="Number of days to include"),
):
    """Show the last N days' notes."""
    memory = _memory_store(_load_config_or_exit())
    typer.echo(memory.get_recent_notes(days))


@memory_app.command("rank")
def memory_rank(
    query: str = typer.Option(..., "-q", "--query", help="Query to rank memories against"),
    top: int = typer.Option(5, "-k", "--top", help="Number of top memories to show"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Rank today's and long-term memories by relevance to a query."""
    if verbose:
        _configure_logging(verbose=True)
    config = _load_config_or_exit()
    memory = _memory_store(config)
    provider = create_provider(config)
    ranker = LLMRanker(provider, config.agents.defaults.model or provider.default_model)

    ranked = asyncio.run(ranker.rank(query, memory.items(), top))
    for i, item in enumerate(ranked, start=1):
        typer.echo(f"{i}: {item.text} ({item.kind})")


def main() -> None:
    """Entry point for CLI."""
    app()
