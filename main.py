#!/usr/bin/env python3
"""Redmine client - Entry point."""
import json
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import click
from colorama import Fore, Style, init

from config import app_config
from redmine_client.api import Redmine, ResourceRegistry
from redmine_client.exceptions import RedmineClientError, ValidationError
from redmine_client.schema.models import IndexDirection

# Initialize colorama
init(autoreset=True)


def print_banner():
    """Print application banner."""
    click.echo(f"{Fore.CYAN}{'=' * 44}")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Redmine Client{Fore.CYAN}                       ║")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}{app_config.redmine_api.base_url:<35}{Fore.CYAN}║")
    click.echo(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    click.echo()


def get_redmine() -> Redmine:
    """Build the API entry point from the current configuration."""
    return Redmine(app_config.redmine_api)


def fail(message: str):
    """Print an error and exit with status 1."""
    click.echo(f"{Fore.RED}❌ {message}", err=True)
    sys.exit(1)


def resolve_resource(name: str) -> str:
    """Resource attribute for a user supplied name, or exit."""
    resource = ResourceRegistry.get_resource(name)
    if resource is None:
        suggestions = ResourceRegistry.suggest_resources(name)
        hint = f" Did you mean: {', '.join(suggestions)}?" if suggestions else ""
        fail(f"Unknown resource '{name}'.{hint}")
    return resource


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """Redmine Client - List and manage Redmine projects and custom fields."""
    level = logging.DEBUG if verbose else getattr(logging, app_config.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("list")
@click.argument("resource")
@click.option("--force", is_flag=True, help="Ignore cached listing")
def list_resource(resource, force):
    """List id/name pairs of a resource (projects, custom_fields)."""
    print_banner()

    api = get_redmine().api(resolve_resource(resource))
    try:
        listing = api.listing(force_update=force, index_by=IndexDirection.ID_TO_NAME)
    except RedmineClientError as e:
        fail(str(e))

    if not listing:
        click.echo(f"{Fore.YELLOW}No {resource} found")
        return

    for resource_id, name in listing.items():
        click.echo(f"{Fore.GREEN}{resource_id:>6}{Style.RESET_ALL}  {name}")

    click.echo(f"\n{Fore.CYAN}TOTAL: {len(listing)}")


@cli.command()
@click.argument("resource")
@click.argument("name")
def find_id(resource, name):
    """Print the id of a resource record by name."""
    api = get_redmine().api(resolve_resource(resource))
    try:
        resource_id = api.get_id_by_name(name)
    except RedmineClientError as e:
        fail(str(e))

    if resource_id is None:
        click.echo(f"{Fore.YELLOW}'{name}' not found in {resource}")
        sys.exit(1)

    click.echo(resource_id)


@cli.command()
@click.argument("project_id")
def show_project(project_id):
    """Show a project with trackers, categories, attachments and relations."""
    try:
        project = get_redmine().projects.show(project_id)
    except RedmineClientError as e:
        fail(str(e))

    click.echo(json.dumps(project, indent=2, ensure_ascii=False))


@cli.command()
@click.option("--name", help="Project name")
@click.option("--identifier", help="Project identifier")
@click.option("--description", help="Project description")
@click.option("--tracker-id", "tracker_ids", type=int, multiple=True, help="Tracker id (repeatable)")
def create_project(name, identifier, description, tracker_ids):
    """Create a project."""
    print_banner()

    params = {
        "name": name,
        "identifier": identifier,
        "description": description,
        "tracker_ids": list(tracker_ids),
    }
    try:
        get_redmine().projects.create(params)
    except ValidationError as e:
        fail(f"{e} (use --name and --identifier)")
    except RedmineClientError as e:
        fail(str(e))

    click.echo(f"{Fore.GREEN}✅ Project '{identifier}' created!")


@cli.command()
def config_api():
    """Set Redmine API credentials for the current session."""
    print_banner()

    click.echo(f"{Fore.YELLOW}Redmine API Configuration")
    click.echo(f"{Fore.YELLOW}{'=' * 30}")

    base_url = click.prompt("API Base URL", default=app_config.redmine_api.base_url)
    api_key = click.prompt("API Key", hide_input=True, default="")

    app_config.redmine_api.base_url = base_url.rstrip("/")
    app_config.redmine_api.api_key = api_key

    click.echo(f"{Fore.GREEN}✅ Configuration applied for this session only")
    click.echo(f"{Fore.YELLOW}Set REDMINE_URL and REDMINE_API_KEY to keep it across runs")


if __name__ == "__main__":
    cli()
