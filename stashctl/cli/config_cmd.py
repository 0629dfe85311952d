"""Config commands for stashctl."""

from __future__ import annotations

from typing import Optional

import click

from stashctl.core.config import CONFIG_FILE, DEFAULT_API_URL, Config
from stashctl.core.exceptions import StashCtlError
from stashctl.core.output import OutputFormat, print_error, print_key_value, print_output, print_success
from stashctl.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from stashctl.core.validation import validate_server_url


def _mask(api_key: Optional[str]) -> str:
    if not api_key:
        return "-"
    return f"{api_key[:4]}..." if len(api_key) > 8 else "****"


def _load_config() -> Config:
    try:
        return Config.load()
    except StashCtlError as e:
        print_error(f"Failed to load config: {e}")
        raise SystemExit(1)


@click.group()
def config() -> None:
    """Manage stashctl configuration."""
    pass


@config.command("init")
@click.option("--url", default=DEFAULT_API_URL, show_default=True, help="Artifact service API URL")
@click.option("--api-key", prompt="API key", hide_input=True, help="Application API key")
@click.option("--profile", default="default", help="Profile name")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(url: str, api_key: str, profile: str, force: bool) -> None:
    """Create configuration file with a new profile.

    Example:
        stashctl config init --api-key $STASH_API_KEY
    """
    try:
        url = validate_server_url(url)
    except StashCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    if CONFIG_FILE.exists():
        cfg = _load_config()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(name=profile, url=url, api_key=api_key.strip() or None)

    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value(
        {
            "profile": profile,
            "url": url,
            "api_key": _mask(api_key.strip()),
        }
    )


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration. API keys are masked."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found. Run 'stashctl config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        details = {}
        for name, p in cfg.profiles.items():
            entry = p.to_dict()
            if "api_key" in entry:
                entry["api_key"] = _mask(entry["api_key"])
            details[name] = entry
        data["profile_details"] = details
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")
    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "api_key": _mask(profile.api_key),
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
                "transfer_timeout": f"{profile.transfer_timeout}s",
            },
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        stashctl config use-context staging
    """
    cfg = _load_config()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")


@config.command("current-context")
def config_current_context() -> None:
    """Show the current active profile."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found.")
        raise SystemExit(1)

    click.echo(cfg.default_profile)


@config.command("add-profile")
@click.argument("name")
@click.option("--url", default=DEFAULT_API_URL, show_default=True, help="Artifact service API URL")
@click.option("--api-key", default=None, help="Application API key")
@click.option(
    "--timeout",
    type=int,
    default=DEFAULT_HTTP_TIMEOUT_SECONDS,
    help="API request timeout in seconds",
)
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    url: str,
    api_key: Optional[str],
    timeout: int,
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        stashctl config add-profile staging --url https://stash.example.org/api/v1
    """
    try:
        url = validate_server_url(url)
    except StashCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    cfg = _load_config()

    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    cfg.add_profile(
        name=name,
        url=url,
        api_key=api_key,
        timeout=timeout,
        verify_ssl=not no_verify_ssl,
    )
    cfg.save()

    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        stashctl config remove-profile staging
    """
    cfg = _load_config()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save()

    print_success(f"Profile '{name}' removed")
