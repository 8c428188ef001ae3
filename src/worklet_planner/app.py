"""Interactive CLI application."""
import uuid
from datetime import date

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, IntPrompt, FloatPrompt, Confirm
from rich.markup import escape

from worklet_planner.db import init_db, DEFAULT_DB_PATH
from worklet_planner.logging_config import configure_logging
from worklet_planner.store import (
    get_setting, save_worklet, list_worklets, update_worklet,
)
from worklet_planner.models import Subtask, Worklet, WorkletKind
from worklet_planner.planner import PlanDraft
from worklet_planner.redistribute import redistribute, undo_redistribute, can_redistribute, is_redistributed
from worklet_planner.completion import reconcile_day_completion, reconcile_page_completion
from worklet_planner.dashboard import (
    calc_completion, get_progress_label, get_progress_color,
    get_missed_days, get_work_for_date, get_planner_stats,
)
from worklet_planner.errors import PlannerError

console = Console()

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def show_welcome():
    console.print(Panel(
        "[bold]Worklet Planner[/bold]\n[dim]Deadlines into daily work[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("add", "New assignment or exam"),
        ("list", "All worklets + progress"),
        ("plan", "Day-by-day plan for a worklet"),
        ("today", "What to do today"),
        ("done", "Mark a day done / not done"),
        ("page", "Mark a material page done / not done"),
        ("redistribute", "Move a missed day onto future days"),
        ("undo", "Undo a redistribution"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def pick_worklet(db_path: str) -> Worklet | None:
    worklets = list_worklets(db_path)
    if not worklets:
        console.print("[yellow]No worklets yet. Use 'add' first.[/yellow]")
        return None
    for i, w in enumerate(worklets, 1):
        console.print(f"  [cyan]{i}[/cyan]) {w.name} [dim]({w.kind.value}, due {w.deadline[:10]})[/dim]")
    choice = IntPrompt.ask("Select worklet", choices=[str(i) for i in range(1, len(worklets) + 1)])
    return worklets[choice - 1]


def prompt_subtasks(unit: str) -> list[Subtask]:
    subtasks = []
    while True:
        name = Prompt.ask("Subtask name [dim](blank to finish)[/dim]", default="")
        if not name:
            break
        weight = FloatPrompt.ask(f"Weight in {unit}", default=1.0)
        material_id = Prompt.ask("Material id [dim](optional)[/dim]", default="") or None
        subtasks.append(Subtask(id=str(uuid.uuid4()), name=name, weight=weight, material_id=material_id))
    return subtasks


def prompt_draft(deadline: str) -> PlanDraft:
    draft = PlanDraft()
    lead = IntPrompt.ask("Start how many days before the deadline", default=7)
    include = Confirm.ask("Work on the deadline day", default=True)
    restrict = Confirm.ask("Only specific weekdays", default=False)
    weekdays = [1, 2, 3, 4, 5]
    if restrict:
        legend = " ".join(f"{i}={n}" for i, n in enumerate(WEEKDAY_NAMES))
        raw = Prompt.ask(f"Weekdays ({legend}), comma separated", default="1,2,3,4,5")
        weekdays = sorted({int(x) for x in raw.split(",") if x.strip().isdigit() and int(x) <= 6})
    draft.set_window(
        deadline=deadline, lead_days=lead, include_deadline_day=include,
        restrict_to_weekdays=restrict, selected_weekdays=weekdays,
    )
    if draft.efforts and Confirm.ask("Customize daily effort", default=False):
        for entry in draft.efforts:
            if Confirm.ask(f"  Take {entry['date']} off", default=False):
                draft.toggle_off_day(entry["date"])
                continue
            effort = IntPrompt.ask(f"  Effort for {entry['date']}", default=int(entry["effort"]))
            draft.set_effort(entry["date"], effort)
    return draft


def show_plan(worklet: Worklet) -> None:
    table = Table(title=f"{worklet.name} ({worklet.kind.value})")
    table.add_column("Date", no_wrap=True)
    table.add_column("Work", justify="right", no_wrap=True)
    table.add_column("Task")
    table.add_column("Status")
    today_key = date.today().isoformat()
    for task in worklet.daily_tasks:
        if task.completed:
            status = "[green]Done[/green]"
        elif is_redistributed(task):
            status = "[dim]Moved[/dim]"
        elif task.date < today_key and task.weight_for_day > 0:
            status = "[red]Missed[/red]"
        elif task.date == today_key:
            status = "[cyan]Today[/cyan]"
        else:
            status = ""
        table.add_row(task.date, f"{task.weight_for_day:.1f} {worklet.weight_unit}", escape(task.title), status)
    console.print(table)
    if not worklet.daily_tasks:
        console.print("[dim]No work days in this plan.[/dim]")
    if worklet.undo_state is not None:
        console.print("[yellow]This plan was redistributed. Use 'undo' to restore it.[/yellow]")


def cmd_add(db_path: str):
    kind = Prompt.ask("Type", choices=["assignment", "exam"], default="assignment")
    name = Prompt.ask("Name")
    deadline = Prompt.ask("Deadline (YYYY-MM-DD or YYYY-MM-DDTHH:MM)")
    unit = Prompt.ask("Weight unit", default=get_setting(db_path, "weight_unit", "pages"))
    subtasks = prompt_subtasks(unit)
    draft = prompt_draft(deadline)
    worklet = Worklet(
        id=str(uuid.uuid4()),
        kind=WorkletKind.EXAM if kind == "exam" else WorkletKind.ASSIGNMENT,
        name=name,
        deadline=deadline,
        subtasks=subtasks,
        weight_unit=unit,
    )
    worklet = draft.apply(worklet)
    save_worklet(db_path, worklet)
    console.print(f"[green]Saved {worklet.name} with {len(worklet.daily_tasks)} work days.[/green]")
    show_plan(worklet)


def cmd_list(db_path: str):
    worklets = list_worklets(db_path)
    if not worklets:
        console.print("[yellow]No worklets yet.[/yellow]")
        return
    table = Table(title="Worklets")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Due")
    table.add_column("Progress", justify="right")
    table.add_column("Status")
    for w in worklets:
        score = calc_completion(w)
        color = get_progress_color(score)
        table.add_row(w.name, w.kind.value, w.deadline[:10], f"{score}%", f"[{color}]{get_progress_label(score)}[/{color}]")
    console.print(table)
    stats = get_planner_stats(worklets)
    console.print(f"\n  Days planned: [bold]{stats['days_planned']}[/bold]  |  "
                  f"Done: [bold]{stats['days_completed']}[/bold]  |  "
                  f"Missed: [bold]{stats['days_missed']}[/bold]  |  "
                  f"Redistributed: [bold]{stats['redistributed']}[/bold]")


def cmd_plan(db_path: str):
    worklet = pick_worklet(db_path)
    if worklet:
        show_plan(worklet)


def cmd_today(db_path: str):
    today_key = date.today().isoformat()
    items = get_work_for_date(list_worklets(db_path), today_key)
    if not items:
        console.print("[green]Nothing planned for today.[/green]")
    for item in items:
        mark = "[green]✓[/green]" if item["is_complete"] else "[dim]·[/dim]"
        console.print(f"  {mark} [cyan]{escape(item['worklet'].name)}[/cyan]: {escape(item['description'])}")
    for w in list_worklets(db_path):
        missed = get_missed_days(w)
        if missed:
            console.print(f"  [red]{w.name}: {len(missed)} missed day(s)[/red], use 'redistribute'")


def cmd_done(db_path: str):
    worklet = pick_worklet(db_path)
    if not worklet:
        return
    date_key = Prompt.ask("Date", default=date.today().isoformat())
    task = worklet.find_task(date_key)
    completed = not task.completed if task else True
    updated = update_worklet(db_path, worklet.id, lambda w: reconcile_day_completion(w, date_key, completed))
    if updated is None:
        console.print("[yellow]Worklet not found.[/yellow]")
        return
    state = "done" if completed else "not done"
    console.print(f"[green]{date_key} marked {state}. Progress: {calc_completion(updated)}%[/green]")


def cmd_page(db_path: str):
    worklet = pick_worklet(db_path)
    if not worklet:
        return
    material_id = Prompt.ask("Material id")
    page = IntPrompt.ask("Page")
    completed = page not in worklet.completed_pages.get(material_id, [])
    updated = update_worklet(
        db_path, worklet.id,
        lambda w: reconcile_page_completion(w, material_id, page, completed),
    )
    if updated is None:
        console.print("[yellow]Worklet not found.[/yellow]")
        return
    state = "done" if completed else "not done"
    console.print(f"[green]Page {page} marked {state}. Progress: {calc_completion(updated)}%[/green]")


def cmd_redistribute(db_path: str):
    worklet = pick_worklet(db_path)
    if not worklet:
        return
    missed = [t.date for t in get_missed_days(worklet)]
    today_key = date.today().isoformat()
    if can_redistribute(worklet, today_key):
        missed.append(today_key)
    if not missed:
        console.print("[green]No missed days to redistribute.[/green]")
        return
    date_key = Prompt.ask("Missed day", choices=missed, default=missed[0])
    updated = update_worklet(db_path, worklet.id, lambda w: redistribute(w, date_key))
    if updated is None:
        console.print("[yellow]Worklet not found.[/yellow]")
        return
    console.print(f"[green]Moved {date_key} onto the remaining days.[/green]")
    show_plan(updated)


def cmd_undo(db_path: str):
    worklet = pick_worklet(db_path)
    if not worklet:
        return
    updated = update_worklet(db_path, worklet.id, undo_redistribute)
    if updated is None:
        console.print("[yellow]Worklet not found.[/yellow]")
        return
    console.print("[green]Redistribution undone.[/green]")
    show_plan(updated)


def main():
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    configure_logging(log_level=get_setting(db_path, "log_level", "WARNING"))

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice == "add":
                cmd_add(db_path)
            elif choice == "list":
                cmd_list(db_path)
            elif choice == "plan":
                cmd_plan(db_path)
            elif choice == "today":
                cmd_today(db_path)
            elif choice == "done":
                cmd_done(db_path)
            elif choice == "page":
                cmd_page(db_path)
            elif choice == "redistribute":
                cmd_redistribute(db_path)
            elif choice == "undo":
                cmd_undo(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck with your deadlines![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except PlannerError as e:
            console.print(f"[yellow]{e}[/yellow]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
