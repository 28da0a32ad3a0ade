"""Jobguard CLI -- admin commands for moderation and employer approval."""

import uuid

import click
from rich.console import Console
from rich.table import Table

from jobguard import __version__
from jobguard.config import load_settings
from jobguard.directory.models import Role, User
from jobguard.errors import JobguardError
from jobguard.services import Services, build_services

console = Console()


def _services(ctx: click.Context) -> Services:
    return ctx.obj["services"]


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
@click.option("--data-dir", default=None, help="Override the data directory")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, data_dir: str | None):
    """Jobguard: contact verification and job moderation.

    Inspect the moderation queue, decide flagged jobs, and approve
    employers against the same data directory the API serves.
    """
    settings = load_settings(config_path)
    if data_dir:
        settings.data_dir = data_dir
    ctx.obj = {"services": build_services(settings)}


# ── Users ────────────────────────────────────────────────────────────


@main.command("add-user")
@click.option("--id", "user_id", default=None, help="User id (generated if omitted)")
@click.option("--name", default="")
@click.option("--email", default="")
@click.option("--phone", default="")
@click.option("--role", default="jobseeker", type=click.Choice([r.value for r in Role]))
@click.option("--approved", is_flag=True, help="Mark an employer as approved")
@click.pass_context
def add_user(ctx, user_id, name, email, phone, role, approved):
    """Create a user record."""
    user = User(
        id=user_id or str(uuid.uuid4()),
        name=name,
        email=email,
        phone=phone,
        role=Role(role),
        is_approved=approved,
    )
    _services(ctx).users.create_user(user)
    console.print(f"[green]Created[/] {user.role.value} [cyan]{user.id}[/]")


@main.command("pending-employers")
@click.pass_context
def pending_employers(ctx):
    """List employers awaiting approval."""
    employers = _services(ctx).users.list_pending_employers()
    if not employers:
        console.print("[yellow]No employers awaiting approval.[/]")
        return

    table = Table(title=f"Pending Employers ({len(employers)})")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Created", style="dim")
    for u in employers:
        table.add_row(u.id, u.name, u.email, u.created_at[:19])
    console.print(table)


@main.command("approve-employer")
@click.argument("employer_id")
@click.option("--revoke", is_flag=True, help="Clear approval instead of granting it")
@click.pass_context
def approve_employer(ctx, employer_id: str, revoke: bool):
    """Approve an employer and activate their pending jobs."""
    try:
        activated = _services(ctx).gate.approve_employer(employer_id, approved=not revoke)
    except JobguardError as e:
        raise click.ClickException(e.message) from e

    if revoke:
        console.print(f"[yellow]Approval revoked[/] for {employer_id}")
        return
    console.print(f"[green]Approved[/] {employer_id}; activated {len(activated)} pending job(s)")
    for job in activated:
        console.print(f"  [green]v[/] {job.id}  {job.title}")


# ── Moderation ───────────────────────────────────────────────────────


@main.command()
@click.pass_context
def flagged(ctx):
    """List jobs awaiting a moderation decision."""
    services = _services(ctx)
    jobs = services.gate.flagged_jobs()
    if not jobs:
        console.print("[green]No flagged jobs.[/]")
        return

    table = Table(title=f"Flagged Jobs ({len(jobs)})")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Employer", style="dim")
    table.add_column("Reports", justify="right", style="red")
    for job in sorted(jobs, key=lambda j: j.updated_at, reverse=True):
        table.add_row(job.id, job.title, job.employer_id, str(services.tracker.report_count(job.id)))
    console.print(table)


@main.command()
@click.argument("job_id")
@click.pass_context
def reports(ctx, job_id: str):
    """Show the flag reports recorded against JOB_ID."""
    entries = _services(ctx).tracker.reports_for(job_id)
    if not entries:
        console.print(f"[yellow]No reports for {job_id}.[/]")
        return

    table = Table(title=f"Reports for {job_id}")
    table.add_column("When", style="dim")
    table.add_column("Reporter", style="cyan")
    table.add_column("Reason")
    for r in entries:
        table.add_row(r.created_at[:19], r.reporter_id, r.reason)
    console.print(table)


@main.command()
@click.argument("job_id")
@click.argument("decision", type=click.Choice(["approve", "remove"]))
@click.option("--admin-id", default="cli", help="Recorded as the deciding admin")
@click.pass_context
def decide(ctx, job_id: str, decision: str, admin_id: str):
    """Approve or remove a flagged job."""
    try:
        job = _services(ctx).decisions.decide(job_id, decision, admin_id=admin_id)
    except JobguardError as e:
        raise click.ClickException(e.message) from e
    console.print(f"Job [cyan]{job.id}[/] is now [bold]{job.status.value}[/]")


# ── Verification ─────────────────────────────────────────────────────


@main.command("purge-codes")
@click.pass_context
def purge_codes(ctx):
    """Delete expired verification codes."""
    removed = _services(ctx).codes.purge_expired()
    console.print(f"Removed {removed} expired code(s)")


if __name__ == "__main__":
    main()
