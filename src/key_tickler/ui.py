from typing import Optional

from rich.panel import Panel
from rich.table import Table
from rich.live import Live
from rich.markup import escape
from rich.progress_bar import ProgressBar

from key_tickler.state_queue import SingleSlotQueue
from key_tickler.state_snapshot import SearchSnapshot
from key_tickler.utils import printable_key


COLORS = {
    "scanning": "yellow",
    "found": "bold spring_green2",
    "exhausted": "bold red",
    "label": "cyan",
    "preview": "green",
}


def preview_to_string(preview: bytes) -> str:
    """Show printable runs as text and everything else as dim hex escapes."""
    parts = []
    text = ""
    for b in preview:
        if 0x20 <= b < 0x7F:
            text += chr(b)
            continue
        if text:
            parts.append(escape(text))
            text = ""
        parts.append(f"[dim]\\x{b:02x}[/dim]")
    if text:
        parts.append(escape(text))
    return "".join(parts)


def render(state: Optional[SearchSnapshot]):
    """Render the search state snapshot."""
    if state is None:
        return Panel("Waiting for first trial…", title="RC4 Key Search", border_style="dim")

    color = COLORS[state.phase]
    ui_table = Table(
        title=f"Key length {state.key_length} / {state.max_key_length}  |  v{state.state_version}",
        show_header=False,
    )
    ui_table.add_column("Field", justify="right", style=COLORS["label"])
    ui_table.add_column("Value")

    ui_table.add_row("Status", f"[{color}]{state.phase}[/{color}]")
    ui_table.add_row("Candidate", f"[{color}]{printable_key(state.candidate)}[/{color}]")
    ui_table.add_row(
        "Trials",
        f"{state.trials} / {state.trials_total}",
    )
    ui_table.add_row("Progress", ProgressBar(total=max(state.trials_total, 1), completed=state.trials, width=40))
    ui_table.add_row("Elapsed", f"{state.elapsed:.3f}s  ({state.trials_per_second:,.1f} keys/s)")
    preview_color = COLORS["preview"]
    ui_table.add_row("Preview", f"[{preview_color}]{preview_to_string(state.preview)}[/{preview_color}]")

    subtitle = "done" if state.complete else "Ctrl+C to stop"
    return Panel(ui_table, title="RC4 Key Search", subtitle=subtitle, border_style=color)


def ui_loop(state_queue: SingleSlotQueue[SearchSnapshot]) -> None:
    """Loop the UI until the search closes the queue."""
    with Live(render(None), refresh_per_second=30, screen=False) as live:
        while True:
            state = state_queue.get()
            if state is None:
                break
            live.update(render(state))
