#!/usr/bin/env python3

import click

from imgsync.log import get_logger
from imgsync.commands.sync import sync_handler


@click.group()
@click.version_option(package_name='imgsync')
@click.option('--confpath', '-c', default='', envvar='IMGSYNC_CONFPATH', show_envvar=True,
              help='Dir or complete path of the config file (defaults to .imgsync.yaml)')
@click.option('--loglevel', '-l', default='info', envvar='IMGSYNC_LOGLEVEL', show_envvar=True,
              help='Log verbosity (defaults to info)')
@click.pass_context
def cli(ctx, confpath, loglevel):
    """imgsync - Sync container images to a target registry.

    Tags are selected from each source repository with multiple selectors
    and filters, then copied when missing from the target.
    """
    ctx.ensure_object(dict)
    ctx.obj['confpath'] = confpath
    ctx.obj['logger'] = get_logger(loglevel)


cli.add_command(sync_handler, name='sync')


def main():
    cli()

if __name__ == "__main__":
    main()
