#!/usr/bin/env python3
"""Resume Builder - AI-assisted résumé tailoring."""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from backend_client import BackendClient
from config_loader import (
    get_export_dir,
    get_generation_time_scale,
    get_min_input_chars,
    get_retention_months,
    get_storage_path,
    get_usage_limits,
    load_config,
)
from entitlements import get_feature_limits, get_plan_info, is_pro
from local_storage import LocalStorage
from services import (
    AuthenticationError,
    ConfigurationError,
    ExportService,
    GenerationService,
    ResumeBuilderError,
    ValidationError,
    VersionService,
)
from services.models import (
    ExportFormat,
    OutputFormat,
    PhaseStatus,
    ResumeMode,
    UsageFeature,
    Voice,
)
from services.version_service import DEFAULT_TITLE
from stores import AppDataStore, ProfileStore, SettingsStore, UsageTracker

console = Console()


HELP_TEXT = """
Resume Builder - tailor a résumé to a job description with Claude

WORKFLOW:
  1. Pick your style      → builder settings --mode detailed --voice first-person
  2. Generate             → builder generate --resume resume.md --job job.txt
  3. Export               → builder export resume --format docx
  4. Keep a draft         → builder save --title "Payments roles"

COMMANDS:
  generate   Run the seven-phase generation on your résumé and a job posting
  settings   View or change mode, voice, format, table and proofread options
  profile    View or change your display name, job title, north star, headline
  usage      This month's usage against the free-tier limits
  plan       Your plan and feature limits
  export     Write a generated document as md, txt or docx
  save       Save the current inputs and outputs as a draft version
  history    List saved résumés and versions, or restore one (Pro)
  reset      Clear inputs and outputs (settings are kept)
  serve      Start the Resume Builder API server

EXAMPLES:
  builder generate --resume input/resume.md --job input/job.txt
  builder generate --company-signal "Series B fintech, hiring fast"
  builder settings --mode concise --format markdown
  builder profile --headline "Engineering leader who ships"
  builder export cover_letter --format txt
  builder plan --token $ACCESS_TOKEN
  builder history --restore v-3
  builder serve --port 8000
"""


def _setup_logging(config: dict, verbose: bool) -> None:
    level = "DEBUG" if verbose else config.get("logging", {}).get("level", "INFO")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


@click.group(help=HELP_TEXT)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, verbose: bool):
    """Resume Builder - AI-assisted résumé tailoring."""
    ctx.ensure_object(dict)
    config = load_config()
    _setup_logging(config, verbose)

    storage = LocalStorage(get_storage_path(config))
    settings_store = SettingsStore(storage)
    ctx.obj["config"] = config
    ctx.obj["storage"] = storage
    ctx.obj["settings"] = settings_store
    ctx.obj["profile"] = ProfileStore(storage)
    ctx.obj["usage"] = UsageTracker(storage, retention_months=get_retention_months(config))
    ctx.obj["app_data"] = AppDataStore(
        storage,
        generator=GenerationService(config=config).generate,
        settings_store=settings_store,
        time_scale=get_generation_time_scale(config),
        min_input_chars=get_min_input_chars(config),
    )


def _resolve_profile(config: dict, token: str | None):
    """Subscription profile for an access token, None (free) without one."""
    if not token:
        return None
    try:
        backend = BackendClient.from_config(config)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    user = backend.get_user(token)
    return backend.get_profile(str(user.id))


# ============================================================================
# Generation
# ============================================================================


@cli.command()
@click.option("--resume", "resume_path", type=click.Path(exists=True, path_type=Path), help="Résumé file (markdown or text).")
@click.option("--job", "job_path", type=click.Path(exists=True, path_type=Path), help="Job description file.")
@click.option("--company-signal", help="Notes about the company (stage, culture, priorities).")
@click.option("--token", envvar="RESUME_BUILDER_TOKEN", help="Access token; Pro users skip the monthly limit.")
@click.pass_context
def generate(ctx, resume_path: Path | None, job_path: Path | None, company_signal: str | None, token: str | None):
    """Generate a tailored résumé and its deliverables."""
    store: AppDataStore = ctx.obj["app_data"]
    tracker: UsageTracker = ctx.obj["usage"]

    updates = {}
    if resume_path:
        updates["resume_text"] = resume_path.read_text()
    if job_path:
        updates["job_text"] = job_path.read_text()
    if company_signal:
        updates["company_signal"] = company_signal
    if updates:
        store.update_inputs(updates)

    if not store.is_ready_to_generate():
        console.print(
            f"[red]Résumé and job description must each be at least "
            f"{store.min_input_chars} characters.[/red] Use --resume and --job."
        )
        return

    feature = UsageFeature.RESUME_GENERATIONS
    try:
        profile = _resolve_profile(ctx.obj["config"], token)
    except ResumeBuilderError as e:
        console.print(f"[red]{e}[/red]")
        return
    limit = get_usage_limits(ctx.obj["config"]).get(feature.value)
    if not is_pro(profile) and limit is not None and tracker.has_reached_limit(feature, limit):
        console.print(
            f"[yellow]You've used all {limit} free generations this month. "
            f"Upgrade to Pro for unlimited résumés.[/yellow]"
        )
        return
    tracker.increment_usage(feature)

    console.print("\n[bold blue]Generating your résumé...[/bold blue]\n")
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            console=console,
        ) as progress:
            task = progress.add_task("Starting...", total=100)

            def on_change(state):
                gp = state.generation_progress
                active = next((p for p in gp.phases if p.status == PhaseStatus.ACTIVE), None)
                description = active.title if active else "Finishing..."
                progress.update(task, completed=gp.progress, description=description)

            unsubscribe = store.subscribe(on_change)
            try:
                asyncio.run(store.generate_resume())
            finally:
                unsubscribe()
    except ResumeBuilderError as e:
        console.print(f"[red]{e}[/red]")
        return

    _print_outputs(store)


def _print_outputs(store: AppDataStore) -> None:
    outputs = store.outputs
    metadata = outputs.metadata
    subtitle = None
    if metadata:
        subtitle = f"score {metadata.optimization_score}/5 • {metadata.word_count} words"
        if metadata.grammar_score is not None:
            subtitle += f" • grammar {metadata.grammar_score}/100"
    console.print(Panel(store.generated_resume, title="Résumé", subtitle=subtitle))

    if outputs.highlights:
        console.print("\n[bold]Recruiter highlights[/bold]")
        for highlight in outputs.highlights:
            console.print(f"  • {highlight}")

    if outputs.toolkit and outputs.toolkit.skill_gaps:
        console.print("\n[bold]Skill gaps to prepare for[/bold]")
        for gap in outputs.toolkit.skill_gaps:
            console.print(f"  • {gap}")

    console.print("\n[dim]Export with: builder export resume --format md|txt|docx[/dim]")


@cli.command()
@click.pass_context
def reset(ctx):
    """Clear inputs and outputs. Settings are kept."""
    ctx.obj["app_data"].reset()
    console.print("[green]Builder cleared[/green]")


# ============================================================================
# Settings & Profile
# ============================================================================


@cli.command()
@click.option("--mode", type=click.Choice([m.value for m in ResumeMode]))
@click.option("--voice", type=click.Choice([v.value for v in Voice]))
@click.option("--format", "fmt", type=click.Choice([f.value for f in OutputFormat]))
@click.option("--table/--no-table", "include_table", default=None, help="Include a skills table.")
@click.option("--proofread/--no-proofread", default=None, help="Run the grammar pass.")
@click.option("--reset", "reset_settings", is_flag=True, help="Restore the defaults.")
@click.pass_context
def settings(ctx, mode, voice, fmt, include_table, proofread, reset_settings: bool):
    """View or change generation settings."""
    store: SettingsStore = ctx.obj["settings"]

    if reset_settings:
        current = store.reset_settings()
    else:
        updates = {
            "mode": mode,
            "voice": voice,
            "format": fmt,
            "include_table": include_table,
            "proofread": proofread,
        }
        updates = {k: v for k, v in updates.items() if v is not None}
        current = store.update_settings(updates) if updates else store.settings

    table = Table(title="Settings", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Mode", current.mode.value)
    table.add_row("Voice", current.voice.value)
    table.add_row("Format", current.format.value)
    table.add_row("Skills table", "yes" if current.include_table else "no")
    table.add_row("Proofread", "yes" if current.proofread else "no")
    console.print(table)


@cli.command()
@click.option("--display-name")
@click.option("--job-title")
@click.option("--north-star", help="The role you are working towards.")
@click.option("--headline")
@click.option("--reset", "reset_profile", is_flag=True, help="Clear every field.")
@click.pass_context
def profile(ctx, display_name, job_title, north_star, headline, reset_profile: bool):
    """View or change your profile preferences."""
    store: ProfileStore = ctx.obj["profile"]

    if reset_profile:
        current = store.reset_profile()
    else:
        updates = {
            "display_name": display_name,
            "job_title": job_title,
            "north_star": north_star,
            "headline": headline,
        }
        updates = {k: v for k, v in updates.items() if v is not None}
        current = store.update_profile(updates) if updates else store.profile

    console.print(Panel(
        f"[bold]{current.display_name or '(no name)'}[/bold]\n"
        f"{current.job_title or ''}\n\n"
        f"[cyan]Headline:[/cyan] {current.headline or '-'}\n"
        f"[cyan]North star:[/cyan] {current.north_star or '-'}",
        title="Profile",
    ))


# ============================================================================
# Usage & Plan
# ============================================================================


@cli.command()
@click.option("--reset", "reset_usage", is_flag=True, help="Clear this month's counters.")
@click.pass_context
def usage(ctx, reset_usage: bool):
    """This month's usage against the free-tier limits."""
    tracker: UsageTracker = ctx.obj["usage"]
    if reset_usage:
        tracker.reset_monthly_usage()

    limits = get_usage_limits(ctx.obj["config"])
    stats = tracker.get_all_usage_stats()

    table = Table(title="Usage this month")
    table.add_column("Feature", style="cyan")
    table.add_column("Used", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Remaining", justify="right")
    for feature, used in stats.counts.items():
        limit = limits.get(feature)
        if limit is None:
            table.add_row(feature, str(used), "-", "-")
        else:
            remaining = tracker.get_remaining(feature, limit)
            style = "red" if remaining == 0 else "green"
            table.add_row(feature, str(used), str(limit), f"[{style}]{remaining}[/{style}]")
    console.print(table)


@cli.command()
@click.option("--token", envvar="RESUME_BUILDER_TOKEN", help="Access token of the signed-in user.")
@click.pass_context
def plan(ctx, token: str | None):
    """Show your plan and feature limits."""
    try:
        profile = _resolve_profile(ctx.obj["config"], token)
    except ResumeBuilderError as e:
        console.print(f"[red]{e}[/red]")
        return

    info = get_plan_info(profile)
    limits = get_feature_limits(profile)

    def fmt_limit(value):
        return "unlimited" if value is None else str(value)

    console.print(Panel(
        f"[bold]{info.display_name}[/bold] ({info.billing})\n"
        f"Status: {'active' if info.is_active else 'inactive'}\n\n"
        f"Résumés: {fmt_limit(limits.max_resumes)}\n"
        f"Toolkits: {fmt_limit(limits.max_toolkits)}\n"
        f"Version history: {'yes' if limits.has_version_history else 'no'}\n"
        f"Interview toolkit: {'yes' if limits.has_interview_toolkit else 'no'}\n"
        f"Advanced exports: {'yes' if limits.has_advanced_exports else 'no'}",
        title="Plan",
    ))
    if info.needs_upgrade:
        console.print("[dim]Upgrade to Pro for unlimited résumés and DOCX export.[/dim]")


# ============================================================================
# Export
# ============================================================================


@cli.command()
@click.argument(
    "document",
    type=click.Choice(["resume", "cover_letter", "highlights", "kpi_tracker"]),
    default="resume",
)
@click.option("--format", "fmt", type=click.Choice([f.value for f in ExportFormat]), default="md")
@click.option("--output-dir", type=click.Path(path_type=Path), help="Defaults to data/exports.")
@click.option("--token", envvar="RESUME_BUILDER_TOKEN", help="Access token; DOCX needs Pro.")
@click.pass_context
def export(ctx, document: str, fmt: str, output_dir: Path | None, token: str | None):
    """Export a generated document."""
    store: AppDataStore = ctx.obj["app_data"]
    svc = ExportService(output_dir or get_export_dir(ctx.obj["config"]))
    settings = store.settings

    try:
        profile = _resolve_profile(ctx.obj["config"], token)
        path = svc.export(
            store.outputs,
            document,
            ExportFormat(fmt),
            profile=profile,
            settings={"Mode": settings.mode.value, "Voice": settings.voice.value},
            generated_at=store.status.last_generated,
        )
    except ValidationError as e:
        console.print(f"[yellow]{e}[/yellow] Run 'builder generate' first.")
        return
    except ResumeBuilderError as e:
        console.print(f"[red]{e}[/red]")
        return

    console.print(f"[green]Exported to {path}[/green]")


# ============================================================================
# Drafts
# ============================================================================


def _version_session(config: dict, token: str | None):
    """(profile, VersionService) acting as the signed-in user."""
    if not token:
        raise AuthenticationError("Sign in to save résumé drafts (pass --token)")
    try:
        backend = BackendClient.from_config(config)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    backend.set_access_token(token)
    user = backend.get_user(token)
    profile = backend.get_profile(str(user.id))
    return profile, VersionService(config=config, backend=backend)


@cli.command()
@click.option("--title", default=DEFAULT_TITLE, help="Title of a new résumé.")
@click.option("--resume-id", help="Add the draft to an existing résumé.")
@click.option("--token", envvar="RESUME_BUILDER_TOKEN", help="Access token of the signed-in user.")
@click.pass_context
def save(ctx, title: str, resume_id: str | None, token: str | None):
    """Save the current inputs and outputs as a draft version."""
    store: AppDataStore = ctx.obj["app_data"]
    try:
        profile, svc = _version_session(ctx.obj["config"], token)
        version = svc.save_draft(
            profile, store.inputs, store.outputs, store.settings, title=title, resume_id=resume_id
        )
    except ResumeBuilderError as e:
        console.print(f"[red]{e}[/red]")
        return

    console.print(f"[green]Saved version {version.id} of résumé {version.resume_id}[/green]")


@cli.command()
@click.argument("resume_id", required=False)
@click.option("--restore", "version_id", help="Load a saved version into the builder (Pro).")
@click.option("--token", envvar="RESUME_BUILDER_TOKEN", help="Access token of the signed-in user.")
@click.pass_context
def history(ctx, resume_id: str | None, version_id: str | None, token: str | None):
    """List saved résumés, one résumé's versions, or restore a version."""
    store: AppDataStore = ctx.obj["app_data"]
    try:
        profile, svc = _version_session(ctx.obj["config"], token)
        if version_id:
            version = svc.restore_version(profile, version_id)
            step = store.load_toolkit(version.to_toolkit_record())
            console.print(f"[green]Restored version {version.id}[/green]")
            if step is not None:
                console.print(f"[dim]Next missing output: {step.value}[/dim]")
            return

        if resume_id:
            rows = [
                (v.id, (v.created_at or "")[:16].replace("T", " "), v.settings.mode.value if v.settings else "")
                for v in svc.list_versions(profile, resume_id)
            ]
            columns = ("Version", "Saved", "Mode")
        else:
            rows = [
                (r.id, r.title, (r.updated_at or "")[:10])
                for r in svc.list_resumes(profile)
            ]
            columns = ("Résumé", "Title", "Updated")
    except ResumeBuilderError as e:
        console.print(f"[red]{e}[/red]")
        return

    if not rows:
        console.print("[dim]Nothing saved yet. Run 'builder save' after generating.[/dim]")
        return

    table = Table(title="Versions" if resume_id else "Saved résumés")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    console.print(table)


# ============================================================================
# API Server
# ============================================================================


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind host.")
@click.option("--port", default=8000, type=int, help="Bind port.")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes.")
def serve(host, port, reload):
    """Start the Resume Builder API server."""
    import uvicorn
    console.print("\n[bold blue]Starting Resume Builder API server...[/bold blue]")
    console.print(f"[dim]API docs at http://{host}:{port}/docs[/dim]\n")
    uvicorn.run("api.app:create_app", host=host, port=port, reload=reload, factory=True)


if __name__ == "__main__":
    cli()
