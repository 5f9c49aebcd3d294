"""
ospkg — CLI entrypoint.

Usage:
    ospkg --help
    ospkg detect
    ospkg install YAML::Tiny Term::ANSIColor
    cpanfile-modules | ospkg install --stdin
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from ospkg import __version__
from ospkg.core.config.loader import load_settings
from ospkg.core.errors import OsPackageError
from ospkg.core.observability.logging_config import setup_logging
from ospkg.core.services.ospackage import OsPackage

_RULE = "-" * 75


@click.group()
@click.version_option(version=__version__, prog_name="ospkg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ospkg.yml (default: $OSPKG_CONFIG).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Install Perl modules from OS packages, falling back to CPAN."""
    ctx.ensure_object(dict)

    try:
        settings = load_settings(
            Path(config_path) if config_path else None,
            debug=True if debug else None,
            quiet=True if quiet else None,
        )
    except OsPackageError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    # ── Logging setup (once, at process start) ──────────────────
    level = settings.effective_log_level
    if not settings.debug:
        if verbose:
            level = "INFO"
        elif settings.quiet:
            level = "ERROR"

    setup_logging(level=level, log_file=settings.log_file)
    ctx.obj["settings"] = settings


def _ospackage(ctx: click.Context) -> OsPackage:
    """Build the run context once per invocation."""
    if "ospkg" not in ctx.obj:
        settings = ctx.obj["settings"]
        try:
            ospkg = OsPackage.create(settings)
        except OsPackageError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)

        if not settings.quiet:
            click.secho(f"system detected: {ospkg.sysenv.get('detected')}", fg="green")
            if ospkg.user_env:
                click.echo("using environment settings: (add these to login shell rc script if needed)")
                click.echo(_RULE)
                for name, value in ospkg.user_env.items():
                    click.echo(f"export {name}={value}")
                click.echo(_RULE)
                click.echo()
        ctx.obj["ospkg"] = ospkg
    return ctx.obj["ospkg"]


def _quiet_for_json(ctx: click.Context) -> None:
    """Keep banners out of stdout when it carries JSON."""
    ctx.obj["settings"] = ctx.obj["settings"].model_copy(update={"quiet": True})


def _read_modules(stream) -> list[str]:
    """Module names from a stream: one per line, '#' comments ignored."""
    names: list[str] = []
    for line in stream:
        line = line.split("#", 1)[0].strip()
        if line:
            names.append(line)
    return names


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Show the detected platform, packager and commands."""
    if as_json:
        _quiet_for_json(ctx)
    info = _ospackage(ctx).describe()

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    click.secho(f"\n🖥  {info['detected']}", fg="cyan", bold=True)
    click.echo(f"   os:        {info['os']} {info['kernel']} ({info['machine']})")
    click.echo(f"   platform:  {info['platform']}")
    click.echo(f"   packager:  {info['packager'] or '(none)'}")
    marker = "✓" if info["implemented"] else "✗"
    click.echo(f"   native packages: {marker}")
    if info["perlbase"]:
        click.echo(f"   perl library:    {info['perlbase']}")
    click.echo()
    click.secho("   Commands:", fg="white", bold=True)
    for name, path in info["commands"].items():
        click.echo(f"     • {name:<12} → {path}")
    click.echo()


@cli.command()
@click.argument("pkg")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def find(ctx: click.Context, pkg: str, as_json: bool) -> None:
    """Search the OS repositories for PKG (latest match)."""
    if as_json:
        _quiet_for_json(ctx)
    ospkg = _ospackage(ctx)
    result = ospkg.manage_pkg("find", pkg=pkg) or None

    if as_json:
        click.echo(json.dumps({"pkg": pkg, "found": result}))
    elif result:
        click.echo(result)
    else:
        click.secho(f"{pkg}: not found", fg="yellow")
    if not result:
        sys.exit(1)


@cli.command()
@click.argument("module")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def modpkg(ctx: click.Context, module: str, as_json: bool) -> None:
    """Show the OS package that provides MODULE."""
    if as_json:
        _quiet_for_json(ctx)
    ospkg = _ospackage(ctx)
    result = ospkg.manage_pkg("modpkg", module=module) or None

    if as_json:
        click.echo(json.dumps({"module": module, "package": result}))
    elif result:
        click.echo(result)
    else:
        click.secho(f"{module}: no OS package", fg="yellow")
    if not result:
        sys.exit(1)


@cli.command("pkg-install")
@click.argument("packages", nargs=-1, required=True)
@click.pass_context
def pkg_install(ctx: click.Context, packages: tuple[str, ...]) -> None:
    """Install OS PACKAGES with the native package manager."""
    ospkg = _ospackage(ctx)
    if not ospkg.manage_pkg("implemented"):
        click.secho(f"❌ no package driver for platform {ospkg.platform}", fg="red", err=True)
        sys.exit(1)
    if not ospkg.manage_pkg("install", pkg=list(packages)):
        click.secho(f"❌ install failed: {' '.join(packages)}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.argument("modules", nargs=-1)
@click.option("--stdin", "from_stdin", is_flag=True, help="Also read module names from stdin.")
@click.option(
    "--establish/--no-establish",
    default=True,
    help="Make sure cpan/cpanm exist before installing (default: on).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    modules: tuple[str, ...],
    from_stdin: bool,
    establish: bool,
    as_json: bool,
) -> None:
    """Install Perl MODULES, preferring OS packages."""
    names = list(modules)
    if from_stdin:
        names.extend(_read_modules(click.get_text_stream("stdin")))
    if not names:
        click.secho("❌ no modules given", fg="red", err=True)
        sys.exit(2)

    if as_json:
        _quiet_for_json(ctx)
    ospkg = _ospackage(ctx)
    quiet = ctx.obj["settings"].quiet or as_json

    if establish:
        try:
            ospkg.establish_cpan()
        except OsPackageError as e:
            click.secho(f"⚠️  {e}", fg="yellow", err=True)

    report = ospkg.install_modules(names)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    elif not quiet:
        click.echo()
        for r in report.results:
            if r.status == "failed":
                click.secho(f"   ✗ {r.module}  {r.error}", fg="red")
            elif r.status == "installed":
                via = r.package if r.method == "ospkg" else r.method
                click.secho(f"   ✓ {r.module}  ({via})", fg="green")
            else:
                click.echo(f"   • {r.module}  ({r.status})")
        click.echo()

    if not report.ok:
        sys.exit(1)


@cli.command()
@click.pass_context
def establish(ctx: click.Context) -> None:
    """Make sure cpan or cpanm is available."""
    ospkg = _ospackage(ctx)
    try:
        ok = ospkg.establish_cpan()
    except OsPackageError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
    if not ok:
        click.secho("❌ neither cpan nor cpanm is available", fg="red", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
