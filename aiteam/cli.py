"""CLI and REPL for AI Team."""

import sys
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from aiteam.config import Config
from aiteam.controller import CycleOutcome, CycleResult
from aiteam.errors import AITeamError
from aiteam.models import AgentProfile, ProjectPlanTask
from aiteam.workspace import Workspace

app = typer.Typer(help="AI Team - a tool-using coding agent for your terminal")
console = Console()


class REPL:
    """Interactive REPL for AI Team."""

    def __init__(self, workspace: Workspace):
        """Initialize REPL.

        Args:
            workspace: Wired project workspace
        """
        self.workspace = workspace
        self.controller = workspace.controller
        self.session = workspace.session
        self.running = True

    def start(self) -> None:
        """Start the REPL."""
        agent = self.workspace.profiles.get(self.session.active_agent_id or "")
        console.print(Panel.fit(
            "[bold cyan]AI Team[/bold cyan] - tool-using coding agent\n"
            f"Project: {self.workspace.project_root}\n"
            f"Agent: {agent.display_name if agent else 'none (use /agent new)'}\n"
            "\n"
            "Type /help for commands or /quit to exit",
            border_style="cyan"
        ))

        while self.running:
            try:
                user_input = console.input("[bold cyan]aiteam>[/bold cyan] ").strip()

                if not user_input:
                    continue

                self.handle_input(user_input)

            except KeyboardInterrupt:
                console.print("\n[dim]Use /quit to exit[/dim]")
                continue
            except EOFError:
                break

        console.print("\n[cyan]Goodbye![/cyan]")

    def handle_input(self, user_input: str) -> None:
        """Handle user input (command or prompt).

        Args:
            user_input: User input string
        """
        expired = self.controller.check_review_timeout(self.session)
        if expired:
            self.report(expired)

        if user_input.startswith("/"):
            self.handle_command(user_input)
        else:
            self.run_cycle(lambda on_fragment: self.controller.submit(
                self.session, user_input, on_fragment
            ))

    def handle_command(self, command: str) -> None:
        """Handle slash command.

        Args:
            command: Command string (starting with /)
        """
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1].strip() if len(parts) > 1 else ""

        try:
            if cmd == "/help":
                self.show_help()
            elif cmd == "/quit" or cmd == "/exit":
                self.running = False
            elif cmd == "/agents":
                self.show_agents()
            elif cmd == "/agent":
                if args != "new":
                    console.print("[red]Usage: /agent new[/red]")
                    return
                self.create_agent()
            elif cmd == "/use":
                if not args:
                    console.print("[red]Usage: /use <agent id>[/red]")
                    return
                if self.workspace.profiles.get(args) is None:
                    console.print(f"[red]Unknown agent: {args}[/red]")
                    return
                self.session.active_agent_id = args
                console.print(f"[green]Now talking to {args}[/green]")
            elif cmd == "/open":
                if not args:
                    console.print("[red]Usage: /open <path>[/red]")
                    return
                self.workspace.read_write.read(args)
                self.session.focused_file = args
                console.print(f"[dim]Open file: {args}[/dim]")
            elif cmd == "/close":
                self.session.focused_file = None
                console.print("[dim]No open file[/dim]")
            elif cmd == "/task":
                self.handle_task(args)
            elif cmd == "/accept":
                self.run_cycle(lambda on_fragment: self.controller.accept(self.session, on_fragment))
            elif cmd == "/reject":
                self.run_cycle(lambda on_fragment: self.controller.reject(
                    self.session, args or None, on_fragment
                ))
            elif cmd == "/clear":
                self.workspace.store.clear()
                console.print("[dim]Conversation history cleared[/dim]")
            elif cmd == "/history":
                for turn in self.workspace.store.get_history():
                    console.print(f"[bold]{turn.role.upper()}:[/bold] {turn.content}", markup=False)
            elif cmd == "/tree":
                console.print(self.workspace.project_tree.render(), markup=False)
            elif cmd == "/config":
                config_dict = self.workspace.config.to_dict()
                console.print(Panel(
                    "\n".join(f"{k}: {v}" for k, v in config_dict.items()),
                    title="Configuration",
                    border_style="blue"
                ))
            elif cmd == "/log":
                log_path = self.workspace.logger.get_log_path()
                console.print(f"[dim]Session logs: {log_path}[/dim]")
            else:
                console.print(f"[red]Unknown command: {cmd}[/red]")
                console.print("[dim]Type /help for available commands[/dim]")

        except (AITeamError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")

    def run_cycle(self, step) -> None:
        """Run a controller call, streaming fragments to the terminal."""
        try:
            result = step(lambda fragment: console.print(
                fragment, end="", markup=False, highlight=False
            ))
        except KeyboardInterrupt:
            console.print("\n[yellow]Cancelled; partial reply discarded.[/yellow]")
            return
        except (AITeamError, ValueError) as e:
            console.print(f"[red]{e}[/red]")
            return

        console.print()
        self.report(result)

    def report(self, result: CycleResult) -> None:
        """Show why the cycle stopped."""
        if result.outcome in (CycleOutcome.ERROR, CycleOutcome.LIMIT_REACHED):
            last = self.workspace.store.get_history()[-1]
            console.print(f"[red]{last.content}[/red]", markup=False)
        elif result.outcome is CycleOutcome.CANCELLED:
            console.print("[yellow]Cancelled; partial reply discarded.[/yellow]")
        elif result.outcome is CycleOutcome.COMPLETE:
            console.print("[dim]Done.[/dim]")

    def handle_task(self, args: str) -> None:
        """Handle /task subcommands."""
        store = self.workspace.store
        parts = args.split(maxsplit=1)
        action = parts[0].lower() if parts else "list"
        value = parts[1] if len(parts) > 1 else ""
        tasks = list(store.get_plan())

        if action == "add" and value:
            tasks.append(ProjectPlanTask(id=str(len(tasks) + 1), title=value))
        elif action in ("start", "done") and value:
            if not any(t.id == value for t in tasks):
                console.print(f"[red]Unknown task: {value}[/red]")
                return
            status = "active" if action == "start" else "completed"
            updated = []
            for task in tasks:
                if task.id == value:
                    updated.append(task.model_copy(update={"status": status}))
                elif status == "active" and task.status == "active":
                    # Only one task is active at a time
                    updated.append(task.model_copy(update={"status": "pending"}))
                else:
                    updated.append(task)
            tasks = updated
        elif action != "list":
            console.print("[red]Usage: /task add <title> | start <id> | done <id> | list[/red]")
            return

        store.set_plan(tasks)
        if not tasks:
            console.print("[dim]No tasks.[/dim]")
        for task in tasks:
            console.print(f"  {task.id}. [{task.status}] {task.title}", markup=False)

    def show_agents(self) -> None:
        profiles = self.workspace.profiles.list_profiles()
        if not profiles:
            console.print("[dim]No agents yet. Use /agent new[/dim]")
            return
        for profile in profiles:
            marker = "*" if profile.id == self.session.active_agent_id else " "
            console.print(
                f"{marker} {profile.id}  {profile.display_name} ({profile.role}) "
                f"- {profile.model_identifier}",
                markup=False,
            )

    def create_agent(self) -> None:
        """Prompt for a new agent profile and its API key."""
        config = self.workspace.config
        name = console.input("Agent name: ").strip()
        if not name:
            console.print("[red]Name is required[/red]")
            return
        role = console.input("Role: ").strip()
        model = console.input(f"Model [{config.default_model}]: ").strip() or config.default_model
        system_prompt = console.input("System prompt: ").strip()
        api_key = console.input("API key (stored separately): ", password=True).strip()

        fields = {"system_prompt": system_prompt} if system_prompt else {}
        profile = AgentProfile(
            id=str(int(time.time() * 1000)),
            display_name=name,
            role=role,
            model_identifier=model,
            **fields,
        )
        self.workspace.profiles.save(profile)
        if api_key:
            self.workspace.credentials.set(profile.id, api_key)

        self.session.active_agent_id = profile.id
        console.print(f"[green]Saved agent {name} ({profile.id}) and selected it[/green]")

    def show_help(self) -> None:
        """Show help message."""
        help_text = """
**Available Commands:**

- `/agents` - List agent profiles
- `/agent new` - Create an agent profile and store its API key
- `/use <id>` - Talk to another agent
- `/open <path>` - Send a file's text as open-file context
- `/close` - Stop sending open-file context
- `/task add <title>|start <id>|done <id>|list` - Edit the project plan
- `/accept` - Apply the pending change and continue
- `/reject [reason]` - Decline the pending change
- `/history` - Show the conversation
- `/clear` - Forget the conversation history (the plan is kept)
- `/tree` - Show the project files sent to the model
- `/config` - Show current configuration
- `/log` - Show session log path
- `/help` - Show this help message
- `/quit` - Exit AI Team

Anything else is sent to the active agent. Press Ctrl-C while a reply
is streaming to cancel it.
        """
        console.print(Markdown(help_text))


@app.command()
def main(
    path: Optional[str] = typer.Argument(
        None,
        help="Project path (default: current directory)"
    ),
    agent: Optional[str] = typer.Option(
        None,
        "--agent", "-a",
        help="Agent profile id to start with"
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Report malformed tool directives back to the model"
    ),
) -> None:
    """Start an AI Team interactive session."""
    project_root = Path(path).resolve() if path else Path.cwd()

    if not project_root.exists():
        console.print(f"[red]Error: Path does not exist: {project_root}[/red]")
        sys.exit(1)

    if not project_root.is_dir():
        console.print(f"[red]Error: Path is not a directory: {project_root}[/red]")
        sys.exit(1)

    try:
        config = Config.load(project_root)
    except ValueError as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(1)

    if strict:
        config.strict_parsing = True

    errors = config.validate()
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  - {error}")
        sys.exit(1)

    try:
        workspace = Workspace(project_root, config)
        profiles = workspace.profiles.list_profiles()
    except AITeamError as e:
        console.print(f"[red]Fatal error: {e}[/red]")
        sys.exit(1)

    if agent:
        workspace.session.active_agent_id = agent
    elif profiles:
        workspace.session.active_agent_id = profiles[0].id

    REPL(workspace).start()


if __name__ == "__main__":
    app()
