"""
statuswatch 命令行入口模块。

提供 CLI 命令：serve（运行 HTTP 服务与后台轮询）、check（执行一轮检查）、
probe（对单个目标做临时检查）。
"""
import asyncio
import json
import logging
import sys

import click

from statuswatch import __version__
from statuswatch.core.config import DEFAULT_GAME_PORT, settings
from statuswatch.monitor import StatusMonitor


@click.group(invoke_without_command=True)
@click.option("--config", "-c", default=None, help="Services file path (.json / .yaml)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config, verbose):
    """statuswatch - 服务状态监控。"""
    ctx.ensure_object(dict)
    ctx.obj["services_file"] = config or settings.services_file
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # 未指定子命令时，显示基本信息
    if ctx.invoked_subcommand is None:
        click.echo(f"statuswatch v{__version__}")
        click.echo(f"Services file: {ctx.obj['services_file']}")
        click.echo("Use --help for available commands")


def _monitor(ctx) -> StatusMonitor:
    return StatusMonitor.from_settings(settings, services_file=ctx.obj["services_file"])


@cli.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", default=None, type=int, help="Bind port")
@click.option("--no-poll", is_flag=True, help="Disable the background poller")
@click.pass_context
def serve(ctx, host, port, no_poll):
    """运行 HTTP API 和后台轮询。"""
    import uvicorn

    from statuswatch.main import create_app

    logger = logging.getLogger("statuswatch")
    cfg = settings.model_copy(update={"poller_enabled": settings.poller_enabled and not no_poll})
    app = create_app(_monitor(ctx), cfg)

    logger.info(f"Starting statuswatch v{__version__}")
    logger.info(f"Services file: {ctx.obj['services_file']}")
    logger.info(f"Poll interval: {cfg.poll_interval}s")
    uvicorn.run(
        app,
        host=host or cfg.host,
        port=port or cfg.port,
        log_level="debug" if ctx.obj["verbose"] else "info",
    )


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON results")
@click.pass_context
def check(ctx, as_json):
    """执行一轮检查；有服务离线时退出码为 1。"""
    monitor = _monitor(ctx)
    results = asyncio.run(monitor.run_check_cycle())

    if as_json:
        click.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
    else:
        if not results:
            click.echo("No services configured")
        for r in results:
            mark = "✅" if r.online else "❌"
            detail = f"{r.response_time_ms}ms" if r.online else (r.error or "offline")
            click.echo(f"{mark} {r.service_id}: {detail}")
        summary = monitor.summary()
        click.echo(f"   {summary.online_services}/{summary.total_services} online ({summary.uptime_percentage}%)")

    if any(not r.online for r in results):
        sys.exit(1)


@cli.group()
def probe():
    """对单个目标做临时检查（JSON 输出）。"""


def _emit(result) -> None:
    click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    if not result.online:
        sys.exit(1)


@probe.command("url")
@click.argument("url")
@click.pass_context
def probe_url(ctx, url):
    """HTTP GET 检查。"""
    _emit(asyncio.run(_monitor(ctx).probe_http(url)))


@probe.command("minecraft")
@click.argument("host")
@click.option("--port", "-p", default=DEFAULT_GAME_PORT, type=click.IntRange(1, 65535), show_default=True)
@click.pass_context
def probe_minecraft(ctx, host, port):
    """Minecraft 服务器检查。"""
    _emit(asyncio.run(_monitor(ctx).probe_game_server(host, port)))


@probe.command("host")
@click.argument("host")
@click.pass_context
def probe_host(ctx, host):
    """主机可达性检查（常见端口 + DNS）。"""
    _emit(asyncio.run(_monitor(ctx).probe_reachability(host)))


@probe.command("port")
@click.argument("host")
@click.argument("port", type=click.IntRange(1, 65535))
@click.pass_context
def probe_port(ctx, host, port):
    """TCP 端口检查。"""
    _emit(asyncio.run(_monitor(ctx).probe_port(host, port)))


def main():
    """CLI 入口函数。"""
    cli()


if __name__ == "__main__":
    main()
