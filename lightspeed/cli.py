"""
Command-line interface for Lightspeed.

Main entry point for the lightspeed CLI application.
"""
import asyncio
import shlex
from typing import Optional

import typer
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from lightspeed import __version__
from lightspeed.config import load_config
from lightspeed.console import get_console
from lightspeed.context import resolve_location
from lightspeed.enums import AttachmentType, AuthStatus, Who
from lightspeed.panel import ChatPanel
from lightspeed.session import ChatTurn
from lightspeed.utils import configure_logging, set_verbose_commands
from lightspeed.watch import KubectlResourceProvider


app = typer.Typer(
    name="lightspeed",
    help="Ask OpenShift Lightspeed about the resource you are looking at",
    add_completion=False,
)

console = get_console()

ATTACH_ALIASES = {
    "yaml": AttachmentType.YAML,
    "status": AttachmentType.YAML_STATUS,
}

HELP_TEXT = """[bold]Commands[/bold]
  /navigate PATH        follow a console path, e.g. /k8s/ns/default/pods/nginx
  /attach yaml|status   attach or detach the current resource
  /attachments          list attachments for the next query
  /feedback N up|down [comment]   rate the answer at position N
  /new                  start a new chat
  exit                  leave"""


@app.command()
def version() -> None:
    """Display the version of Lightspeed."""
    typer.echo(f"Lightspeed version {__version__}")


@app.command()
def resolve(
    path: str = typer.Argument(..., help="Console path, e.g. /k8s/ns/default/pods/nginx"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Query string, e.g. alertname=KubePodCrashLooping"),
) -> None:
    """Show the resource a console location points at."""
    descriptor = resolve_location(path, query)
    if descriptor is None:
        console.print("[yellow]No resource in view[/yellow]")
        raise typer.Exit(code=1)

    table = Table(show_header=False)
    table.add_row("Kind", descriptor.kind)
    table.add_row("Name", descriptor.name)
    table.add_row("Namespace", descriptor.namespace or "-")
    console.print(table)


def _print_turn(turn: Optional[ChatTurn], index: int) -> None:
    if turn is None:
        return
    if turn.who != Who.AI:
        return

    console.print(f"\n[bold cyan]🤖 Lightspeed[/bold cyan] [dim]#{index}[/dim]")
    if turn.error:
        console.print(Panel(turn.error, title="Error submitting query", border_style="red"))
        return

    console.print(Markdown(turn.text or ""))
    if turn.is_truncated:
        console.print("[yellow]Conversation history has been truncated to fit within context window.[/yellow]")
    if turn.references:
        console.print("[dim]Referenced docs:[/dim]")
        for reference in turn.references:
            console.print(f"  • [link={reference.docs_url}]{reference.title}[/link]")


def _handle_command(panel: ChatPanel, line: str) -> None:
    args = shlex.split(line[1:])
    if not args:
        return
    command, params = args[0], args[1:]

    if command == "help":
        console.print(HELP_TEXT)
    elif command == "navigate" and params:
        path, _, query = params[0].partition("?")
        descriptor = panel.navigate(path, query)
        console.print(f"[cyan]Viewing: {descriptor.kind + ' ' + descriptor.name if descriptor else 'nothing attachable'}[/cyan]")
    elif command == "attach" and params and params[0] in ATTACH_ALIASES:
        panel.attach_error = None
        attached = panel.toggle_attachment(ATTACH_ALIASES[params[0]])
        if panel.attach_error:
            console.print(f"[red]Failed to attach context: {panel.attach_error}[/red]")
        elif panel.attach_menu() is None:
            console.print("[yellow]Nothing to attach here[/yellow]")
        else:
            console.print(f"[cyan]{'Attached' if attached else 'Detached'} {params[0]}[/cyan]")
    elif command == "attachments":
        for label in panel.attachment_labels():
            console.print(f"  • {label.title} [dim]({label.attachment_type.value}, {label.content_type})[/dim]")
    elif command == "feedback" and len(params) >= 2 and params[0].isdigit() and params[1] in ("up", "down"):
        try:
            feedback = panel.feedback(int(params[0]))
        except (IndexError, ValueError) as e:
            console.print(f"[red]{e}[/red]")
            return
        if params[1] == "up":
            feedback.thumbs_up()
        else:
            feedback.thumbs_down()
        feedback.set_text(" ".join(params[2:]))
        if asyncio.run(panel.submit_feedback(int(params[0]))):
            console.print("[blue]Thank you for your feedback![/blue]")
        else:
            console.print(f"[red]Error submitting feedback: {feedback.state.error}[/red]")
    elif command == "new":
        panel.new_chat()
        console.print("[cyan]Started a new chat[/cyan]")
    else:
        console.print(f"[red]Unknown command: {line}[/red]")


def _chat_loop(panel: ChatPanel) -> None:
    console.print("[i cyan]Ask a question, type '/help' for commands or 'exit' to leave.[/i cyan]")
    if panel.privacy_alert_shown:
        console.print(
            "[dim]Don't share sensitive information. Chat history may be reviewed or used to improve our services.[/dim]"
        )

    while True:
        user_input = Prompt.ask("\n[bold green]👤 You[/bold green]")
        if user_input.strip().lower() in ("exit", "quit"):
            break
        if user_input.strip().startswith("/"):
            _handle_command(panel, user_input.strip())
            continue

        panel.on_query_change(user_input)
        with console.status("Waiting for OpenShift Lightspeed..."):
            turn = asyncio.run(panel.submit())
        if panel.validated == "error":
            console.print("[red]Please enter a question[/red]")
            continue
        _print_turn(turn, len(panel.session.history) - 1)


@app.command()
def chat(
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Console path of the resource in view"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show kubectl commands and their output"),
) -> None:
    """Start an interactive chat with OpenShift Lightspeed."""
    config = load_config()
    configure_logging(config.log_level)
    set_verbose_commands(verbose)

    panel = ChatPanel(
        config,
        watch=KubectlResourceProvider(config),
        auth_status=AuthStatus.AUTHENTICATED,
    )
    if path:
        route, _, query = path.partition("?")
        panel.navigate(route, query)

    _chat_loop(panel)
    console.print("\n[cyan]Bye.[/cyan]\n")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
