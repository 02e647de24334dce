import os

import click

from errors import InvalidSiteError
from notifier import get_logger
from store import SiteStore

log = get_logger('cli')

COMMANDS = 'add, list, remove, start, exit'


def get_app(ctx):
    if ctx.obj is None:
        from app import create_app
        ctx.obj = create_app()
    return ctx.obj


@click.group(invoke_without_command=True, help="Monitor HTTP(S) sites and run a command when one stays down.")
@click.pass_context
def main(ctx):
    if ctx.invoked_subcommand is None:
        ctx.invoke(shell)


@main.command('shell', help="Interactive shell: add, list, remove, start, exit.")
@click.pass_context
def shell(ctx):
    app = get_app(ctx)
    with app.app_context():
        run_shell(app)


def run_shell(app):
    store = SiteStore()
    monitor = app.extensions['uptime_monitor']

    click.echo("Website Uptime Checker")
    click.echo(f"Available commands: {COMMANDS}")

    while True:
        command = click.prompt('\nEnter command', default='', show_default=False).strip().lower()
        if command == 'add':
            add_site(store, app.config)
        elif command == 'list':
            list_sites(store)
        elif command == 'remove':
            remove_site(store)
        elif command == 'start':
            monitor.run_forever()
        elif command == 'exit':
            click.echo("Goodbye!")
            break
        else:
            click.echo(f"Unknown command. Available commands: {COMMANDS}")


def add_site(store, config):
    click.echo("\nAdd new site to monitor")
    click.echo("------------------------")
    url = click.prompt("Enter URL (e.g., https://example.com)")
    interval = click.prompt("Check interval in seconds", default=config['DEFAULT_INTERVAL'], type=int)
    threshold = click.prompt("Failure threshold before running command",
                             default=config['DEFAULT_THRESHOLD'], type=int)
    command = click.prompt("Command to run when down (e.g., heroku restart -a myapp)",
                           default='', show_default=False)

    try:
        site = store.add(url=url, interval=interval, threshold=threshold, command=command)
    except InvalidSiteError as e:
        log.error(f"Rejected site {url!r}: {e}")
        click.echo(f"\nError: {e}", err=True)
        return None

    click.echo("\nSite added successfully!")
    click.echo(f"URL: {site.url}")
    click.echo(f"Checking every {site.interval} seconds")
    click.echo(f"Will run command after {site.threshold} failures")
    click.echo(f"Command: {site.command or 'None'}")
    return site


def list_sites(store):
    sites = store.all()
    if not sites:
        click.echo("\nNo sites configured yet. Use 'add' to monitor a site.")
        return sites

    click.echo("\nMonitored Sites")
    click.echo("--------------")
    for index, site in enumerate(sites, start=1):
        click.echo(f"\n{index}. {site.url}")
        click.echo(f"   Check interval: {site.interval} seconds")
        click.echo(f"   Failure threshold: {site.threshold}")
        click.echo(f"   Current failures: {site.failures}")
        click.echo(f"   Command: {site.command or 'None'}")
        click.echo(f"   Last checked: {site.last_checked or 'Never'}")
    return sites


def remove_site(store):
    if not list_sites(store):
        return None
    position = click.prompt("\nEnter the number of the site to remove", type=int)
    site = store.remove_at(position)
    if site is None:
        click.echo("\nInvalid site number", err=True)
        return None
    click.echo(f"\nRemoved: {site.url}")
    return site


@main.command('serve', help="Run the web dashboard with monitoring in the background.")
@click.option('--host', default='0.0.0.0', show_default=True)
@click.option('--port', default=lambda: int(os.environ.get('PORT', 5000)), type=int)
@click.pass_context
def serve(ctx, host, port):
    app = get_app(ctx)
    monitor = app.extensions['uptime_monitor']
    monitor.start_background()
    try:
        app.run(host=host, port=port, debug=False)
    finally:
        monitor.stop()


@main.command('export', help="Write the site list to a sites.json file.")
@click.argument('path', type=click.Path(dir_okay=False), default='sites.json')
@click.pass_context
def export_sites(ctx, path):
    app = get_app(ctx)
    with app.app_context():
        count = SiteStore().export_json(path)
    click.echo(f"Exported {count} sites to {path}")


@main.command('import', help="Add the sites listed in a sites.json file.")
@click.argument('path', type=click.Path(exists=True, dir_okay=False), default='sites.json')
@click.pass_context
def import_sites(ctx, path):
    app = get_app(ctx)
    with app.app_context():
        try:
            sites = SiteStore().import_json(path)
        except (InvalidSiteError, ValueError) as e:
            raise click.ClickException(str(e))
    click.echo(f"Imported {len(sites)} sites from {path}")


if __name__ == '__main__':
    main()
