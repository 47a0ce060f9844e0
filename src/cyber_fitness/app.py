"""Interactive CLI application."""
import logging
import os
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from cyber_fitness.assessment import Assessment
from cyber_fitness.bank import DEFAULT_BANK_PATH, load_bank
from cyber_fitness.conditions import visible_options
from cyber_fitness.expiration import format_expiration
from cyber_fitness.models import ScaleQuestion
from cyber_fitness.scoring import BADGES, next_level_progress, security_color, security_label
from cyber_fitness.storage import DEFAULT_STATE_PATH, StorageError, clear_snapshot, load_snapshot, save_snapshot

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")
PLATFORMS = ["windows", "mac", "linux", "none"]
MOBILE_PLATFORMS = ["ios", "android", "none"]


class SessionExitRequested(Exception):
    """User asked to leave the current question run."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list) -> int:
    return int(session_prompt(prompt, choices=list(choices) + list(EXIT_WORDS)))


def setup_logging() -> None:
    level = logging.DEBUG if os.environ.get("CYBER_FITNESS_DEBUG") == "1" else logging.WARNING
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Cyber Fitness[/bold]\n[dim]Personal Security Check-up[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("assess", "Answer your open questions"),
        ("today", "Today's quick security task"),
        ("dashboard", "Security score + level"),
        ("gaps", "Security gaps to fix"),
        ("expiring", "Answers that need a refresh"),
        ("device", "Tell us about your devices"),
        ("reset", "Start over"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_question(assessment: Assessment, question):
    """Prompt for one question and return the answer value."""
    console.print(f"[bold]{question.text}[/bold]")
    if question.description:
        console.print(f"[dim]{question.description}[/dim]")
    if isinstance(question, ScaleQuestion):
        choices = [str(n) for n in range(question.min_value, question.max_value + 1)]
        return session_int_prompt(f"Rate {question.min_value}-{question.max_value}", choices)
    options = visible_options(question, assessment.facts)
    if not options:
        return session_prompt("Answer", choices=["yes", "no"] + list(EXIT_WORDS))
    for i, opt in enumerate(options, 1):
        console.print(f"  [cyan]{i})[/cyan] {opt.text or opt.id}")
    picked = session_int_prompt("Your answer", [str(i) for i in range(1, len(options) + 1)])
    option = options[picked - 1]
    if option.feedback:
        console.print(f"[dim]{option.feedback}[/dim]")
    return option.id


def run_assessment(assessment: Assessment, state_path: str, limit: int = 5) -> int:
    """Ask the highest-priority open questions. Returns how many were answered."""
    answered = 0
    for _ in range(limit):
        ranked = assessment.get_ordered_available_questions()
        if not ranked:
            console.print("[green]No open questions. Nice work![/green]")
            break
        item = ranked[0]
        console.print(f"\n[dim]{item.priority.level.upper()} priority[/dim]")
        try:
            value = ask_question(assessment, item.question)
        except SessionExitRequested:
            break
        before = assessment.get_score().overall_score
        assessment.answer_question(item.id, value)
        save_snapshot(assessment.to_snapshot(), state_path)
        answered += 1
        after = assessment.get_score().overall_score
        if after > before:
            console.print(f"[green]+{after - before} points! Score: {after}%[/green]")
    return answered


def cmd_assess(assessment: Assessment, state_path: str):
    console.print("\n[bold]Security Check-up[/bold] [dim](type 'q' to stop)[/dim]")
    run_assessment(assessment, state_path)


def cmd_today(assessment: Assessment, state_path: str):
    task = assessment.get_todays_task()
    if task is None:
        console.print("[yellow]No quick task right now. Try 'assess' instead.[/yellow]")
        return
    console.print(Panel(
        f"{task.question.question.text}\n\n[dim]{task.reason}[/dim]",
        title=f"Today's Task ({task.estimated_time})", border_style="green",
    ))
    try:
        value = ask_question(assessment, task.question.question)
    except SessionExitRequested:
        return
    assessment.answer_question(task.question.id, value)
    save_snapshot(assessment.to_snapshot(), state_path)


def cmd_dashboard(assessment: Assessment):
    result = assessment.get_score()
    score = result.overall_score
    color = security_color(score)
    progress = next_level_progress(score)

    console.print(Panel(
        f"[bold]{result.level.title}[/bold]\n[dim]{result.level.description}[/dim]",
        title="Security Level", border_style="blue",
    ))
    bar_filled = int(score / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  Security Score: [bold]{score}%[/bold] {bar} [{color}]{security_label(score)}[/{color}]")
    if progress["next_level"] is not None:
        console.print(f"  [dim]{progress['points_needed']} points to {progress['next_level'].title}[/dim]\n")

    table = Table(title="Domain Breakdown")
    table.add_column("Domain", style="cyan")
    table.add_column("Score", justify="right")
    titles = {d.id: d.title for d in assessment.bank.domains}
    titles.update({s.id: s.title for s in assessment.bank.suites})
    for domain_id, domain_score in result.domain_scores.items():
        sc_color = security_color(domain_score)
        table.add_row(titles.get(domain_id, domain_id), f"[{sc_color}]{domain_score}%[/{sc_color}]")
    console.print(table)

    console.print(f"\n  Answered: [bold]{result.answered_count}[/bold]  |  "
                  f"Quick wins: [bold]{result.quick_wins_completed}/{result.total_quick_wins}[/bold]  |  "
                  f"Critical issues: [bold]{result.critical_vulnerabilities}[/bold]")
    for badge in assessment.get_earned_badges():
        console.print(f"  [magenta]Badge:[/magenta] {badge} [dim]({BADGES[badge]})[/dim]")
    for text in result.achievements:
        console.print(f"  [green]{text}[/green]")
    unlocked = assessment.get_unlocked_suite_ids()
    if unlocked:
        console.print(f"  [cyan]Unlocked bonus suites:[/cyan] {', '.join(sorted(unlocked))}")


def cmd_gaps(assessment: Assessment):
    gaps = assessment.get_score().security_gaps
    if not gaps:
        console.print("[green]No security gaps detected![/green]")
        return
    table = Table(title="Security Gaps")
    table.add_column("Severity")
    table.add_column("Question")
    table.add_column("Recommendation")
    for gap in gaps:
        style = "red" if gap.severity == "critical" else "yellow"
        table.add_row(f"[{style}]{gap.severity}[/{style}]", gap.description, gap.recommendation)
    console.print(table)


def cmd_expiring(assessment: Assessment):
    now = datetime.now()
    rows = assessment.get_expiring_answers(now, within_days=14)
    if not rows:
        console.print("[green]All your answers are fresh.[/green]")
        return
    table = Table(title="Answers Due for Refresh")
    table.add_column("Question")
    table.add_column("When")
    table.add_column("Why")
    for row in rows:
        table.add_row(row["question_id"], format_expiration(row["expires_at"], now), row["reason"] or "")
    console.print(table)


def cmd_device(assessment: Assessment, state_path: str):
    os_name = Prompt.ask("Computer operating system", choices=PLATFORMS, default="none")
    mobile = Prompt.ask("Phone operating system", choices=MOBILE_PLATFORMS, default="none")
    facts = {}
    if os_name != "none":
        facts["os"] = os_name
    if mobile != "none":
        facts["mobile_os"] = mobile
    if facts:
        assessment.set_device_facts(facts)
        save_snapshot(assessment.to_snapshot(), state_path)
        console.print("[green]Device info saved.[/green]")


def cmd_reset(assessment: Assessment, state_path: str):
    confirm = Prompt.ask("Erase all answers?", choices=["yes", "no"], default="no")
    if confirm == "yes":
        assessment.reset_assessment()
        clear_snapshot(state_path)
        console.print("[yellow]Assessment reset.[/yellow]")


def load_assessment(bank_path: str = DEFAULT_BANK_PATH, state_path: str = DEFAULT_STATE_PATH) -> Assessment:
    bank = load_bank(bank_path)
    try:
        snapshot = load_snapshot(state_path)
        if snapshot is not None:
            return Assessment.from_snapshot(bank, snapshot)
    except (StorageError, KeyError, ValueError) as e:
        console.print(f"[red]Could not restore saved progress: {e}[/red]")
        logger.warning("Starting fresh after failed restore from %s", state_path)
    return Assessment(bank)


def main():
    setup_logging()
    state_path = DEFAULT_STATE_PATH
    assessment = load_assessment(DEFAULT_BANK_PATH, state_path)
    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="assess").strip().lower()
        try:
            if choice == "assess":
                cmd_assess(assessment, state_path)
            elif choice == "today":
                cmd_today(assessment, state_path)
            elif choice == "dashboard":
                cmd_dashboard(assessment)
            elif choice == "gaps":
                cmd_gaps(assessment)
            elif choice == "expiring":
                cmd_expiring(assessment)
            elif choice == "device":
                cmd_device(assessment, state_path)
            elif choice == "reset":
                cmd_reset(assessment, state_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Stay safe out there![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
