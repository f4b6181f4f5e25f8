"""searchpro CLI 主入口"""

import sys

import click

from searchpro.cli.commands.config import (
    defaults_cmd,
    export_cmd,
    get_cmd,
    reset_cmd,
    set_cmd,
    summary_cmd,
    validate_cmd,
)
from searchpro.core.exceptions import SearchProException
from searchpro.core.logger import LoggerConfig, configure_logger


@click.group()
@click.version_option(version="2.0.1")
@click.option(
    '--verbose',
    is_flag=True,
    help='详细日志输出（调试用）'
)
@click.option(
    '--no-color',
    is_flag=True,
    help='关闭彩色输出'
)
@click.pass_context
def cli(ctx, verbose, no_color):
    """searchpro - Search Pro 配置工具

    命令：
      defaults                     打印出厂默认配置
      validate <file>              校验配置文件
      get <file> <key>             读取配置项
      set <file> <key> <value>     设置配置项
      reset <file> <section>       恢复配置段默认值
      export <file> <out>          导出配置（.js/.json/.yaml）
      summary <file>               按标签页汇总配置

    示例:
      searchpro get search-config.js searchBar.width
      searchpro set config.json animations.enabled true
      searchpro export config.yaml search-config.js
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['no_color'] = no_color
    ctx.obj['formatter_config'] = {'no_color': no_color}

    if verbose:
        configure_logger(LoggerConfig(level="DEBUG", console_output=True))


cli.add_command(defaults_cmd)
cli.add_command(validate_cmd)
cli.add_command(get_cmd)
cli.add_command(set_cmd)
cli.add_command(reset_cmd)
cli.add_command(export_cmd)
cli.add_command(summary_cmd)


def main():
    """CLI 入口点，处理全局异常"""
    try:
        cli()
    except SearchProException as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
