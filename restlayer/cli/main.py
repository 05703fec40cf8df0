from __future__ import annotations

import logging
import pathlib
from typing import List
from typing import Optional

from typer import Context as TyperContext
from typer import Option
from typer import Typer
from typer import echo

import restlayer
from restlayer.cli import config
from restlayer.cli import resources
from restlayer.cli import server
from restlayer.core.context import create_context
from restlayer.logging_config import setup_logging

log = logging.getLogger(__name__)

app = Typer()

app.command('config', short_help="Show current configuration values")(config.config)
app.command('resources', short_help="List resources and sub-resources")(resources.resources)
app.command('run', short_help="Run development server")(server.run)


@app.callback(invoke_without_command=True)
def main(
    ctx: TyperContext,
    option: Optional[List[str]] = Option(None, '-o', '--option', help=(
        "Set configuration option, example: `-o option.name=value`."
    )),
    env_file: Optional[pathlib.Path] = Option(None, '--env-file', help=(
        "Load configuration from a given .env file."
    )),
    version: bool = Option(False, help="Show version number."),
    log_dir: Optional[pathlib.Path] = Option(None, '--log-dir', help=(
        "Write log messages to daily rotated files in a given directory, if "
        "not given, writes logs to STDERR."
    )),
    log_level: Optional[str] = Option('warning', '--log-level', help=(
        "Log level. Possible levels: fatal, error, warning, info, debug. "
        "Default: warning."
    )),
):
    if log_dir:
        setup_logging(str(log_dir), log_level)
    else:
        logging.basicConfig(
            level=logging.getLevelName(log_level.upper()),
            format='%(asctime)s %(levelname)s: %(message)s',
        )

    log.debug("log dir set to: %s", log_dir or 'STDERR')
    log.debug("log level set to: %s", log_level)

    ctx.obj = ctx.obj or create_context(
        'cli',
        args=option,
        envfile=str(env_file) if env_file else None,
    )
    if version:
        echo(restlayer.__version__)
