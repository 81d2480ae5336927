"""Typer CLI for benefit-insights.

Commands
--------
- ``benefit-insights init``     -- interactive first-time setup
- ``benefit-insights start``    -- launch the FastAPI server
- ``benefit-insights status``   -- display current runtime / configuration status
- ``benefit-insights quiz``     -- answer the questionnaire in the terminal
- ``benefit-insights insights`` -- build and show insights for the saved profile
- ``benefit-insights chat``     -- ask follow-up questions about your insights
- ``benefit-insights report``   -- print a plan summary report
- ``benefit-insights reset``    -- delete the saved profile, insights and chat
"""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from benefit_insights.chat_session import ChatController
from benefit_insights.config import (
    DEFAULT_PORT,
    DEFAULT_USER_ID,
    PROVIDERS,
    enrichment_enabled,
    get_base_dir,
    get_port,
    get_priority_limit,
    reload_env,
)
from benefit_insights.defaults import default_profile
from benefit_insights.engine.insights import build_insights
from benefit_insights.engine.quiz import (
    clamp_step,
    current_answer,
    hydrate_profile,
    is_answer_valid,
    questions_for,
    update_form_value,
)
from benefit_insights.engine.report import build_report
from benefit_insights.models.insight import Insight
from benefit_insights.models.quiz import QuizQuestion
from benefit_insights.storage.filesystem import ensure_directories, get_env_path
from benefit_insights.storage.store import UserStore

app = typer.Typer(
    name="benefit-insights",
    help="Benefits questionnaire and personalized insight engine",
    add_completion=False,
)
console = Console()

API_KEY_ENV_MAP: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "bedrock": "AWS_PROFILE",
}

API_KEY_PROMPTS: dict[str, str] = {
    "anthropic": "Enter your Anthropic API key",
    "openai": "Enter your OpenAI API key",
    "bedrock": "Enter your AWS profile name (or press Enter for 'default')",
}

BACK_COMMAND = "back"


def _is_port_in_use(port: int) -> bool:
    """Return True if *port* on localhost is currently accepting connections."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(1)
        return sock.connect_ex(("127.0.0.1", port)) == 0


def _write_env_file(path: Path, enrichment: bool, provider: str, api_key: str, port: int) -> None:
    """Write a minimal .env file for benefit-insights."""
    lines = [
        "# benefit-insights configuration",
        f"BENEFIT_INSIGHTS_PORT={port}",
        f"BENEFIT_INSIGHTS_ENRICHMENT={'on' if enrichment else 'off'}",
    ]
    if enrichment:
        lines.append(f"BENEFIT_INSIGHTS_MODEL_PROVIDER={provider}")
        lines.append(f"{API_KEY_ENV_MAP[provider]}={api_key}")
    lines.append("")
    path.write_text("\n".join(lines), encoding="utf-8")


def _store() -> UserStore:
    ensure_directories()
    return UserStore.on_disk()


# -- init / start / status ------------------------------------------------------

@app.command()
def init() -> None:
    """Create the ~/.benefit-insights/ directory structure and write initial config."""

    console.print(
        Panel(
            "[bold cyan]benefit-insights[/bold cyan] -- first-time setup",
            subtitle="Benefits questionnaire and insight engine",
        )
    )

    base = get_base_dir()

    # 1. Create directories ------------------------------------------------
    console.print("\n[bold]1.[/bold] Creating directory structure ...")
    ensure_directories()
    console.print(f"   [green]✓[/green] {base}")

    # 2. Optional AI enrichment --------------------------------------------
    console.print()
    enrichment = Confirm.ask(
        "[bold]2.[/bold] Enable AI wording enrichment for insights?",
        default=False,
    )

    provider = ""
    api_key = ""
    if enrichment:
        provider = Prompt.ask(
            "   Select a model provider",
            choices=list(PROVIDERS),
            default="anthropic",
        )
        default_value = "default" if provider == "bedrock" else None
        api_key = Prompt.ask(f"   {API_KEY_PROMPTS[provider]}", default=default_value)
        if not api_key:
            console.print("[red]No key provided. Aborting.[/red]")
            raise typer.Exit(code=1)

    # 3. Port ---------------------------------------------------------------
    port_str = Prompt.ask("[bold]3.[/bold] Server port", default=str(DEFAULT_PORT))
    try:
        port = int(port_str)
    except ValueError:
        console.print(f"[red]Invalid port: {port_str}. Using default {DEFAULT_PORT}.[/red]")
        port = DEFAULT_PORT

    # 4. Write .env ---------------------------------------------------------
    env_path = get_env_path()
    _write_env_file(env_path, enrichment, provider, api_key, port)
    console.print(f"\n   [green]✓[/green] Configuration written to [bold]{env_path}[/bold]")

    reload_env()

    console.print(
        Panel(
            f"[bold green]Setup complete![/bold green]\n\n"
            f"  Base dir   : {base}\n"
            f"  Enrichment : {'on (' + provider + ')' if enrichment else 'off'}\n"
            f"  Port       : {port}\n\n"
            f"Run [bold]benefit-insights quiz[/bold] to answer the questionnaire,\n"
            f"or [bold]benefit-insights start[/bold] to launch the server.",
            title="Done",
        )
    )


@app.command()
def start(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int | None = typer.Option(None, help="Override configured port"),
    reload: bool = typer.Option(False, help="Enable auto-reload (development)"),
) -> None:
    """Load configuration and start the benefit-insights server."""

    import uvicorn

    reload_env()

    effective_port = port if port is not None else get_port()

    console.print(
        Panel(
            f"Starting [bold cyan]benefit-insights[/bold cyan] server\n"
            f"  Address : http://{host}:{effective_port}\n"
            f"  Reload  : {'on' if reload else 'off'}",
            title="benefit-insights",
        )
    )

    uvicorn.run(
        "benefit_insights.server:app",
        host=host,
        port=effective_port,
        reload=reload,
    )


@app.command()
def status(user: str = typer.Option(DEFAULT_USER_ID, help="User id")) -> None:
    """Show the current status of benefit-insights."""

    reload_env()

    base = get_base_dir()
    port = get_port()
    store = UserStore.on_disk()

    table = Table(title="benefit-insights status", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Base directory", str(base))
    table.add_row(
        "Configuration",
        "[green]found[/green]" if get_env_path().exists() else "[yellow]defaults -- run benefit-insights init[/yellow]",
    )
    table.add_row(
        "Server",
        f"[green]running[/green] on port {port}"
        if _is_port_in_use(port)
        else f"[yellow]stopped[/yellow] (port {port})",
    )
    table.add_row("Enrichment", "on" if enrichment_enabled() else "off")
    table.add_row("Stored profiles", str(len(store.profiles.keys())))
    table.add_row(
        f"Insights for {user!r}",
        "[green]yes[/green]" if store.insights.get(user) else "[yellow]no[/yellow]",
    )
    table.add_row(f"Chat entries for {user!r}", str(len(store.get_chat(user))))

    console.print()
    console.print(table)
    console.print()


# -- questionnaire --------------------------------------------------------------

def _format_answer(value: Any) -> str:
    if value is None or value == "" or value == []:
        return "-"
    if isinstance(value, list):
        return ", ".join(value)
    return str(value)


def _ask(question: QuizQuestion, current: Any) -> Any:
    """Prompt for one answer; returns BACK_COMMAND to step back."""
    console.print(f"\n[bold]{question.title}[/bold]  [dim]{question.prompt}[/dim]")
    console.print(f"  [dim]current: {_format_answer(current)}[/dim]")

    if question.type == "boolean":
        raw = Prompt.ask("  yes / no", choices=["yes", "no", BACK_COMMAND],
                         default="yes" if current is True else "no" if current is False else None)
        return raw if raw == BACK_COMMAND else raw == "yes"

    if question.type in ("number", "slider"):
        hint = f"{question.min:g}-{question.max:g}" if question.min is not None and question.max is not None else ""
        raw = Prompt.ask(f"  number {hint}".rstrip(), default=None if current is None else str(current))
        if raw == BACK_COMMAND:
            return raw
        try:
            return int(raw)
        except (TypeError, ValueError):
            return None

    if question.type in ("select", "multi-select"):
        values = question.option_values()
        for index, option in enumerate(question.options, 1):
            helper = f" [dim]({option.helper})[/dim]" if option.helper else ""
            console.print(f"  {index}. {option.label}{helper}")
        if question.type == "select":
            default = str(values.index(current) + 1) if current in values else None
            choices = [str(index) for index in range(1, len(values) + 1)] + [BACK_COMMAND]
            raw = Prompt.ask("  choose", choices=choices, default=default, show_choices=False)
            if raw is None or raw == BACK_COMMAND:
                return raw
            return values[int(raw) - 1]
        selected = [str(values.index(value) + 1) for value in current or [] if value in values]
        raw = Prompt.ask("  choose all that apply (e.g. 1,3)", default=",".join(selected))
        if raw == BACK_COMMAND:
            return raw
        picked = []
        for part in raw.split(","):
            part = part.strip()
            if part.isdigit() and 1 <= int(part) <= len(values):
                picked.append(values[int(part) - 1])
        return picked

    raw = Prompt.ask("  answer", default=current or None)
    return raw


@app.command()
def quiz(user: str = typer.Option(DEFAULT_USER_ID, help="User id")) -> None:
    """Answer the questionnaire; the profile is saved after every answer."""

    store = _store()
    profile = hydrate_profile(store.profiles.get(user) or default_profile(user))

    console.print(Panel("Type [bold]back[/bold] at any prompt to revisit the previous question.", title="Questionnaire"))

    step = 0
    while True:
        flow = questions_for(profile)
        step = clamp_step(step, flow)
        question = flow[step]
        value = _ask(question, current_answer(profile, question))

        if value == BACK_COMMAND:
            step = max(0, step - 1)
            continue
        if not is_answer_valid(question, value):
            console.print("  [red]Please provide a valid answer.[/red]")
            continue

        profile = update_form_value(profile, question.id, value)
        store.profiles.set(user, profile)

        if questions_for(profile)[-1].id == question.id:
            break
        step += 1

    insight = build_insights(profile, priority_limit=get_priority_limit())
    store.insights.set(user, insight)
    console.print("\n[green]✓[/green] Questionnaire complete.")
    _print_insight(insight)


# -- insights / chat / reset ----------------------------------------------------

def _print_insight(insight: Insight) -> None:
    console.print(
        Panel(
            f"[bold]{insight.persona}[/bold]\n{insight.statement}\n\n"
            f"Theme: [cyan]{insight.goal_theme}[/cyan] -- {insight.focus_goal}",
            title=f"Insights for {insight.owner_name or 'you'}",
        )
    )

    priorities = Table(title="Priorities", show_header=True)
    priorities.add_column("#", style="dim")
    priorities.add_column("Title", style="bold")
    priorities.add_column("Why")
    for index, priority in enumerate(insight.priorities, 1):
        priorities.add_row(str(index), priority.title, priority.description)
    console.print(priorities)

    timeline = Table(title="Timeline", show_header=True)
    timeline.add_column("When", style="bold")
    timeline.add_column("Action")
    timeline.add_column("Details")
    for entry in insight.timeline:
        timeline.add_row(entry.period, entry.title, entry.description)
    console.print(timeline)

    plans = Table(title="Plan options", show_header=True)
    plans.add_column("Plan", style="bold")
    plans.add_column("Monthly")
    plans.add_column("Risk match")
    plans.add_column("Highlights")
    for plan in insight.plans:
        marker = " *" if plan.plan_id == insight.selected_plan_id else ""
        plans.add_row(plan.plan_name + marker, plan.monthly_cost_estimate, f"{plan.risk_match_score}/100",
                      ", ".join(plan.highlights))
    console.print(plans)

    for resource in insight.resources:
        console.print(f"  • [bold]{resource.title}[/bold] -- {resource.description} [dim]{resource.url}[/dim]")

    if insight.prompts:
        console.print("\nTry asking: " + " | ".join(f"[italic]{p}[/italic]" for p in insight.prompts))


@app.command()
def insights(user: str = typer.Option(DEFAULT_USER_ID, help="User id")) -> None:
    """Rebuild insights from the saved profile and print them."""

    store = _store()
    profile = store.profiles.get(user)
    if profile is None:
        console.print("[red]No saved profile.[/red] Run [bold]benefit-insights quiz[/bold] first.")
        raise typer.Exit(code=1)

    insight = build_insights(profile, priority_limit=get_priority_limit())
    store.insights.set(user, insight)
    _print_insight(insight)


@app.command()
def chat(
    user: str = typer.Option(DEFAULT_USER_ID, help="User id"),
    prompt: str | None = typer.Option(None, help="Open the chat with this question"),
) -> None:
    """Chat about your insights. Send an empty line to quit."""

    store = _store()
    controller = ChatController(store.insights.get(user), store.get_chat(user))
    draft = controller.open_chat(prompt)

    for suggestion in controller.suggested_prompts():
        console.print(f"  [dim]• {suggestion}[/dim]")

    while True:
        message = Prompt.ask("[bold]You[/bold]", default=draft or "")
        draft = ""
        if not message.strip():
            break
        reply = controller.send(message)
        store.chats.set(user, controller.history)
        console.print(f"[bold cyan]Assistant[/bold cyan] {reply}")

    controller.close()


@app.command()
def report(
    user: str = typer.Option(DEFAULT_USER_ID, help="User id"),
    plan: str | None = typer.Option(None, help="Plan id (defaults to the selected plan)"),
    output: Path | None = typer.Option(None, help="Also write the report to this file"),
) -> None:
    """Print a plan summary report for the saved insights."""

    store = _store()
    profile = store.profiles.get(user)
    insight = store.insights.get(user)
    if profile is None or insight is None:
        console.print("[red]No saved insights.[/red] Run [bold]benefit-insights insights[/bold] first.")
        raise typer.Exit(code=1)

    chosen = insight.selected_plan(plan)
    if chosen is None:
        console.print(f"[red]Unknown plan: {plan}[/red]")
        raise typer.Exit(code=1)

    content = build_report(profile, insight, chosen)
    console.print(Panel(content.rstrip(), title=chosen.plan_name))
    if output is not None:
        output.write_text(content, encoding="utf-8")
        console.print(f"[green]✓[/green] Report written to [bold]{output}[/bold]")


@app.command()
def reset(
    user: str = typer.Option(DEFAULT_USER_ID, help="User id"),
    yes: bool = typer.Option(False, "--yes", help="Skip confirmation"),
) -> None:
    """Delete the saved profile, insights and chat history."""

    if not yes and not Confirm.ask(f"Delete all saved data for {user!r}?", default=False):
        raise typer.Exit(code=0)
    removed = UserStore.on_disk().reset(user)
    console.print("[green]Data cleared.[/green]" if removed else "[yellow]Nothing to clear.[/yellow]")


if __name__ == "__main__":
    app()
