"""
CLI 模块

命令行接口实现。
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import click
import toml
import yaml
from loguru import logger

from launchfetch.events import EventBus
from launchfetch.exceptions import ConfigParseError, LaunchFetchError
from launchfetch.listeners import ProgressListener
from launchfetch.logger import setup_logger
from launchfetch.models import Authorization, LaunchFetchConfig
from launchfetch.orchestrator import LaunchFetch


def load_config(config_path: Optional[str]) -> dict:
    """加载配置文件，未指定时返回空配置"""
    if config_path is None:
        return {}

    path = Path(config_path)
    if not path.exists():
        raise click.ClickException(f"配置文件不存在: {config_path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            return toml.load(config_path)
        elif suffix == ".json":
            return json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (toml.TomlDecodeError, ValueError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"配置文件解析失败: {e}", context={"path": config_path}
        )
    raise click.ClickException(f"不支持的配置文件格式: {suffix}")


async def run_async(
    config: LaunchFetchConfig,
    version: str,
    forge_jar: Optional[str],
    package: Optional[str],
    player: Optional[str],
):
    """异步运行"""
    events = EventBus()
    events.add_listener(ProgressListener())

    launcher = LaunchFetch(config, events=events)
    if package:
        await launcher.extract_package(package)

    authorization = Authorization(name=player) if player else None
    plan = await launcher.prepare(version, forge_jar=forge_jar, authorization=authorization)

    click.echo(f"natives:   {plan.natives_dir}")
    click.echo(f"classpath: {launcher.classpath_string(plan)}")
    click.echo(f"main:      {plan.main_class or ''}")
    click.echo(f"jvm:       {' '.join(plan.jvm_arguments)}")
    click.echo(f"game:      {' '.join(plan.game_arguments)}")


@click.command()
@click.argument("game_version", metavar="VERSION")
@click.option("-c", "--config", "config_path", type=click.Path(exists=True), help="配置文件 (toml/json/yaml)")
@click.option("--root", help="游戏目录")
@click.option("--os", "os_tag", type=click.Choice(["windows", "osx", "linux"]), help="目标系统")
@click.option("--forge-jar", type=click.Path(exists=True), help="Forge jar 路径")
@click.option("--package", help="先解压的客户端包（路径或 URL）")
@click.option("--player", help="玩家名")
@click.option("--dry-run", is_flag=True, help="干运行模式（只验证配置）")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version="0.1.0")
def main(
    game_version: str,
    config_path: Optional[str],
    root: Optional[str],
    os_tag: Optional[str],
    forge_jar: Optional[str],
    package: Optional[str],
    player: Optional[str],
    dry_run: bool,
    debug: bool,
):
    """LaunchFetch - Minecraft 客户端文件同步工具"""
    setup_logger(level="DEBUG" if debug else None)

    try:
        config_dict = load_config(config_path)
        if root:
            config_dict["root"] = root
        if os_tag:
            config_dict["os"] = os_tag
        config = LaunchFetchConfig.from_dict(config_dict)

        if dry_run:
            logger.info("[干运行模式] 配置验证通过")
            logger.info(f"  游戏目录: {config.root}")
            logger.info(f"  目标系统: {config.os}")
            logger.info(f"  最大并发数: {config.network.max_concurrent}")
            logger.info(f"  最大同步轮数: {config.retry.max_passes or '不限'}")
            return

        asyncio.run(run_async(config, game_version, forge_jar, package, player))

    except LaunchFetchError as e:
        logger.error(f"运行失败: {e}")
        raise click.ClickException(str(e))


if __name__ == "__main__":
    main()
