# resume_gate/cli.py
# Operator commands: flask --app resume_gate <command>

import click
from flask import current_app
from flask.cli import with_appcontext
from rich.console import Console
from rich.table import Table

from resume_gate import db
from resume_gate.errors import NotificationError

console = Console()


def _lifecycle():
    return current_app.extensions["resume_gate"]


def requests_table(rows) -> Table:
    table = Table(title="Resume Requests")
    for c in ["ID", "Name", "Email", "Status", "Created (UTC)", "Approved (UTC)"]:
        table.add_column(c)
    for r in rows:
        table.add_row(
            str(r.id), r.name, r.email, r.status,
            r.created_at.strftime("%Y-%m-%d %H:%M:%S") if r.created_at else "",
            r.approved_at.strftime("%Y-%m-%d %H:%M:%S") if r.approved_at else "",
        )
    return table


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create the resume_requests table."""
    db.create_all()
    console.print("[green]Database initialised.[/green]")


@click.command("list-requests")
@click.option("--limit", default=20, show_default=True, help="Number of recent requests to show.")
@with_appcontext
def list_requests_command(limit):
    rows = _lifecycle().store.list_recent(limit)
    if not rows:
        console.print("No requests yet.")
        return
    console.print(requests_table(rows))


@click.command("expire-stale")
@with_appcontext
def expire_stale_command():
    """Expire approvals whose download window has passed."""
    count = _lifecycle().expire_stale()
    console.print(f"Expired {count} request(s).")


@click.command("send-test-email")
@click.option("--to", "to_email", default=None, help="Recipient; defaults to SMTP_USERNAME.")
@with_appcontext
def send_test_email_command(to_email):
    mailer = _lifecycle().mailer
    try:
        console.print("[*] Sending test email...")
        sent_to = mailer.send_test(to_email)
    except NotificationError as exc:
        console.print(f"[red][!] SMTP Error: {exc.message}[/red]")
        raise click.exceptions.Exit(1)
    console.print(f"[+] Success! Test email sent to {sent_to}.")


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(list_requests_command)
    app.cli.add_command(expire_stale_command)
    app.cli.add_command(send_test_email_command)
