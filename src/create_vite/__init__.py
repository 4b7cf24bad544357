#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "typer",
#     "rich",
#     "readchar",
# ]
# ///
"""
create-vite - Scaffold a new Vite project from a local template

Usage:
    create-vite
    create-vite my-app
    create-vite my-app --template vue-ts

Or run as a module:
    python -m create_vite my-app -t react-swc-ts
"""

import os
import sys
import shutil
from pathlib import Path
from typing import Callable, NamedTuple, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.live import Live
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree
from typer.core import TyperCommand

# For cross-platform keyboard input
import readchar


class Variant(NamedTuple):
    name: str
    display: str
    color: str


class Framework(NamedTuple):
    name: str
    display: str
    color: str
    variants: tuple[Variant, ...]


# Constants
FRAMEWORKS: tuple[Framework, ...] = (
    Framework("vanilla", "Vanilla", "yellow", (
        Variant("vanilla-ts", "TypeScript", "blue"),
        Variant("vanilla", "JavaScript", "yellow"),
    )),
    Framework("vue", "Vue", "green", (
        Variant("vue-ts", "TypeScript", "blue"),
        Variant("vue", "JavaScript", "yellow"),
    )),
    Framework("react", "React", "cyan", (
        Variant("react-ts", "TypeScript", "blue"),
        Variant("react-swc-ts", "TypeScript + SWC", "blue"),
        Variant("react", "JavaScript", "yellow"),
        Variant("react-swc", "JavaScript + SWC", "yellow"),
    )),
    Framework("preact", "Preact", "magenta", (
        Variant("preact-ts", "TypeScript", "blue"),
        Variant("preact", "JavaScript", "yellow"),
    )),
    Framework("lit", "Lit", "bright_red", (
        Variant("lit-ts", "TypeScript", "blue"),
        Variant("lit", "JavaScript", "yellow"),
    )),
    Framework("svelte", "Svelte", "red", (
        Variant("svelte-ts", "TypeScript", "blue"),
        Variant("svelte", "JavaScript", "yellow"),
    )),
    Framework("solid", "Solid", "blue", (
        Variant("solid-ts", "TypeScript", "blue"),
        Variant("solid", "JavaScript", "yellow"),
    )),
    Framework("qwik", "Qwik", "bright_blue", (
        Variant("qwik-ts", "TypeScript", "blue"),
        Variant("qwik", "JavaScript", "yellow"),
    )),
)

TEMPLATES: tuple[str, ...] = tuple(v.name for f in FRAMEWORKS for v in f.variants)

DEFAULT_TARGET_DIR = "vite-project"
TEMPLATES_ENV_VAR = "CREATE_VITE_TEMPLATES"

RENAME_FILES = {
    "_gitignore": ".gitignore",
}


def is_known_template(name: str | None) -> bool:
    return bool(name) and name in TEMPLATES


def find_template(name: str) -> Optional[tuple[Framework, Variant]]:
    """Return the (framework, variant) pair owning a template name, or None."""
    for framework in FRAMEWORKS:
        for variant in framework.variants:
            if variant.name == name:
                return framework, variant
    return None


def render_templates_table() -> Table:
    table = Table.grid(padding=(0, 4))
    table.add_column(justify="left")
    table.add_column(justify="left")
    for framework in FRAMEWORKS:
        ts_names = [v.name for v in framework.variants if v.name.endswith("-ts")]
        js_names = [v.name for v in framework.variants if not v.name.endswith("-ts")]
        for ts_name, js_name in zip(ts_names, js_names):
            table.add_row(
                f"[{framework.color}]{ts_name}[/{framework.color}]",
                f"[{framework.color}]{js_name}[/{framework.color}]",
            )
    return table


def format_target_dir(target_dir: str | None) -> str | None:
    """Trim whitespace and trailing slashes; empty results count as absent."""
    if target_dir is None:
        return None
    return target_dir.strip().rstrip("/") or None


class OperationCancelled(Exception):
    """Raised when the user aborts an interactive question."""

    def __init__(self, message: str = "✖ Operation cancelled"):
        super().__init__(message)


STEP_STYLES = {
    # status: (symbol, label style)
    "pending": ("[green dim]○[/green dim]", "bright_black"),
    "running": ("[cyan]○[/cyan]", "white"),
    "done": ("[green]●[/green]", "white"),
    "error": ("[red]●[/red]", "white"),
    "skipped": ("[yellow]○[/yellow]", "white"),
}


class StepTracker:
    """Ordered scaffolding steps, each with a status and an optional detail.

    ``attach_refresh`` registers a callback fired after every change, which
    ``create`` uses to redraw a ``rich.live.Live`` display.
    """

    def __init__(self, title: str):
        self.title = title
        self.steps = []  # dicts: key, label, status, detail
        self._refresh_cb = None

    def attach_refresh(self, cb):
        self._refresh_cb = cb

    def add(self, key: str, label: str):
        if self._find(key) is None:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})
            self._maybe_refresh()

    def start(self, key: str, detail: str = ""):
        self._set(key, "running", detail)

    def complete(self, key: str, detail: str = ""):
        self._set(key, "done", detail)

    def error(self, key: str, detail: str = ""):
        self._set(key, "error", detail)

    def skip(self, key: str, detail: str = ""):
        self._set(key, "skipped", detail)

    def status_of(self, key: str) -> str | None:
        step = self._find(key)
        return step["status"] if step else None

    def _find(self, key: str):
        return next((s for s in self.steps if s["key"] == key), None)

    def _set(self, key: str, status: str, detail: str):
        step = self._find(key)
        if step is None:
            step = {"key": key, "label": key, "status": status, "detail": ""}
            self.steps.append(step)
        step["status"] = status
        if detail:
            step["detail"] = detail
        self._maybe_refresh()

    def _maybe_refresh(self):
        if self._refresh_cb:
            try:
                self._refresh_cb()
            except Exception:
                pass

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{escape(self.title)}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol, style = STEP_STYLES.get(step["status"], (" ", "white"))
            line = f"{symbol} [{style}]{escape(step['label'])}[/{style}]"
            detail = step["detail"].strip()
            if detail:
                line += f" [bright_black]({escape(detail)})[/bright_black]"
            tree.add(line)
        return tree


console = Console()


class Choice(NamedTuple):
    title: str
    value: object


class Question:
    """A single interactive question.

    Questions with ``choices`` are answered from a menu; the others take free
    text, starting from ``initial``. ``on_state`` receives the live value after
    every keystroke of a text question.
    """

    def __init__(
        self,
        name: str,
        message: str,
        *,
        choices: Optional[list[Choice]] = None,
        initial: str = "",
        on_state: Optional[Callable[[str], None]] = None,
    ):
        self.name = name
        self.message = message
        self.choices = choices
        self.initial = initial
        self.on_state = on_state

    def __repr__(self):
        return f"Question({self.name!r})"


class Selection:
    """Accumulates the target directory and template over one run."""

    def __init__(self, target_dir: str | None = None, template: str | None = None):
        self.target_dir_arg = format_target_dir(target_dir)
        self.template_arg = template or None
        self.target_dir = self.target_dir_arg or DEFAULT_TARGET_DIR
        self.framework: Optional[Framework] = None
        self.variant: Optional[str] = None

    def update_target_dir(self, value: str | None):
        self.target_dir = format_target_dir(value) or DEFAULT_TARGET_DIR

    @property
    def template(self) -> str | None:
        return self.variant or self.template_arg

    def resolve(self) -> tuple[str, str]:
        template = self.template
        if not self.target_dir or not template:
            raise ValueError("Selection is incomplete: target directory and template are both required")
        return self.target_dir, template


def get_key():
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key == readchar.key.UP:
        return 'up'
    if key == readchar.key.DOWN:
        return 'down'
    if key in (readchar.key.ENTER, readchar.key.CR, readchar.key.LF):
        return 'enter'
    if key == readchar.key.ESC:
        return 'escape'
    if key == readchar.key.BACKSPACE:
        return 'backspace'
    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


def select_with_arrows(choices: list[Choice], prompt_text: str = "Select an option", default_index: int = 0):
    """
    Interactive selection using arrow keys with Rich Live display.

    Args:
        choices: Ordered choices; titles may carry Rich markup
        prompt_text: Text to show above the options
        default_index: Option highlighted initially

    Returns:
        The value of the selected choice

    Raises:
        OperationCancelled: on Esc or Ctrl+C
    """
    selected_index = default_index if 0 <= default_index < len(choices) else 0

    def create_selection_panel():
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", justify="left", width=3)
        table.add_column(style="white", justify="left")

        for i, choice in enumerate(choices):
            table.add_row("▶" if i == selected_index else " ", choice.title)

        table.add_row("", "")
        table.add_row("", "[dim]Use ↑/↓ to navigate, Enter to select, Esc to cancel[/dim]")

        return Panel(table, title=f"[bold]{prompt_text}[/bold]", border_style="cyan", padding=(1, 2))

    console.print()
    with Live(create_selection_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                raise OperationCancelled()
            if key == 'up':
                selected_index = (selected_index - 1) % len(choices)
            elif key == 'down':
                selected_index = (selected_index + 1) % len(choices)
            elif key == 'enter':
                break
            elif key == 'escape':
                raise OperationCancelled()
            live.update(create_selection_panel(), refresh=True)

    selected = choices[selected_index]
    console.print(f"[green]✔[/green] {prompt_text} {selected.title}")
    return selected.value


def text_with_live_state(prompt_text: str, initial: str = "", on_state: Optional[Callable[[str], None]] = None) -> str:
    """Read a line of text key by key, reporting the live value to ``on_state``.

    An empty submission yields ``initial``.
    """
    buffer = ""

    def create_input_panel():
        line = Text(buffer) if buffer else Text(initial, style="dim")
        return Panel(line, title=f"[bold]{prompt_text}[/bold]", border_style="cyan", padding=(0, 2))

    console.print()
    with Live(create_input_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                raise OperationCancelled()
            if key == 'enter':
                break
            if key == 'escape':
                raise OperationCancelled()
            if key == 'backspace':
                buffer = buffer[:-1]
            elif key in ('up', 'down') or len(key) != 1 or not key.isprintable():
                continue
            else:
                buffer += key
            if on_state:
                on_state(buffer)
            live.update(create_input_panel(), refresh=True)

    value = buffer or initial
    console.print(f"[green]✔[/green] {prompt_text} [cyan]{escape(value)}[/cyan]")
    return value


def terminal_ask(question: Question):
    """Answer a question interactively on the terminal."""
    if question.choices is not None:
        return select_with_arrows(question.choices, question.message)
    return text_with_live_state(question.message, question.initial, question.on_state)


def _project_name_step(selection: Selection):
    if selection.target_dir_arg:
        return None
    return Question(
        "projectName",
        "Project name:",
        initial=DEFAULT_TARGET_DIR,
        on_state=selection.update_target_dir,
    )


def _framework_step(selection: Selection):
    if is_known_template(selection.template_arg):
        return None
    return Question(
        "framework",
        "Select a framework:",
        choices=[Choice(f"[{f.color}]{f.display or f.name}[/{f.color}]", f) for f in FRAMEWORKS],
    )


def _variant_step(selection: Selection):
    framework = selection.framework
    if framework is None or not framework.variants:
        return None
    if len(framework.variants) == 1:
        return framework.variants[0].name
    return Question(
        "variant",
        "Select a variant:",
        choices=[Choice(f"[{v.color}]{v.display or v.name}[/{v.color}]", v.name) for v in framework.variants],
    )


# Ordered (answer name, step) table; each step returns a Question, a resolved value, or None to skip.
PROMPT_STEPS = (
    ("projectName", _project_name_step),
    ("framework", _framework_step),
    ("variant", _variant_step),
)


def run_prompts(selection: Selection, ask: Callable[[Question], object] = terminal_ask, steps=PROMPT_STEPS) -> dict:
    """Fill the gaps in ``selection`` by walking the prompt steps in order.

    Returns the answers keyed by step name. ``OperationCancelled`` raised by
    ``ask`` propagates unchanged.
    """
    answers = {}
    for name, step in steps:
        outcome = step(selection)
        if isinstance(outcome, Question):
            outcome = ask(outcome)
        if outcome is None:
            continue
        answers[name] = outcome
        if name == "projectName":
            selection.update_target_dir(outcome)
        elif name == "framework":
            selection.framework = outcome
        elif name == "variant":
            selection.variant = outcome
    return answers


def default_templates_root() -> Path:
    env_root = os.getenv(TEMPLATES_ENV_VAR, "").strip()
    if env_root:
        return Path(env_root).expanduser()
    return Path(__file__).resolve().parent


def template_dir_for(template: str, templates_root: Path | None = None) -> Path:
    return (templates_root or default_templates_root()) / f"template-{template}"


def copy(src: Path, dest: Path) -> None:
    if src.is_dir():
        copy_dir(src, dest)
    else:
        shutil.copy(src, dest)


def copy_dir(src_dir: Path, dest_dir: Path) -> None:
    dest_dir.mkdir(parents=True, exist_ok=True)
    for child in sorted(src_dir.iterdir()):
        copy(child, dest_dir / child.name)


def materialize_project(
    target_dir: str,
    template: str,
    *,
    cwd: Path | None = None,
    templates_root: Path | None = None,
    tracker: StepTracker | None = None,
) -> Path:
    """Copy ``template-<template>`` into ``<cwd>/<target_dir>`` and return the project root.

    Top-level entries go through RENAME_FILES. Existing files in the destination
    are overwritten, nothing is removed. I/O errors propagate.
    """
    root = (cwd or Path.cwd()) / target_dir
    template_dir = template_dir_for(template, templates_root)

    if tracker:
        tracker.start("template", template)
    if not template_dir.is_dir():
        raise FileNotFoundError(f"Template directory not found: {template_dir}")
    if tracker:
        tracker.complete("template", str(template_dir))
        tracker.start("directory")

    root.mkdir(parents=True, exist_ok=True)
    if tracker:
        tracker.complete("directory", str(root))
        tracker.start("copy")

    entries = sorted(template_dir.iterdir())
    for entry in entries:
        copy(entry, root / RENAME_FILES.get(entry.name, entry.name))

    if tracker:
        if entries:
            tracker.complete("copy", f"{len(entries)} top-level entries")
        else:
            tracker.skip("copy", "template is empty")
    return root


def next_steps(root: Path, cwd: Path | None = None) -> list[str]:
    """Shell commands to print once the project exists."""
    cwd = cwd or Path.cwd()
    lines = []
    if root.resolve() != cwd.resolve():
        cd_project_name = os.path.relpath(root, cwd)
        if " " in cd_project_name:
            cd_project_name = f'"{cd_project_name}"'
        lines.append(f"cd {cd_project_name}")
    lines.append("npm install")
    lines.append("npm run dev")
    return lines


class TemplatesHelpCommand(TyperCommand):
    """Command that lists the available templates after the usual help."""

    def format_help(self, ctx, formatter):
        super().format_help(ctx, formatter)
        console.print("[bold]Available templates:[/bold]")
        console.print(render_templates_table())


app = typer.Typer(
    name="create-vite",
    help="Create a new Vite project in JavaScript or TypeScript.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command(cls=TemplatesHelpCommand, context_settings={"help_option_names": ["-h", "--help"]})
def create(
    directory: Optional[str] = typer.Argument(None, help="Directory to create the project in"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Use a specific template"),
    templates_dir: Optional[Path] = typer.Option(None, "--templates-dir", help=f"Directory holding template-* folders (or set {TEMPLATES_ENV_VAR})"),
    debug: bool = typer.Option(False, "--debug", help="Show diagnostic output when scaffolding fails"),
):
    """
    Create a new Vite project in JavaScript or TypeScript.
    With no arguments, start the CLI in interactive mode.

    Examples:
        create-vite
        create-vite my-app
        create-vite my-app --template vue-ts
    """
    selection = Selection(directory, template)

    try:
        run_prompts(selection, ask=terminal_ask)
    except OperationCancelled as cancelled:
        console.print(f"[red]{cancelled}[/red]")
        return

    target_dir, resolved_template = selection.resolve()
    current_dir = Path.cwd()
    templates_root = templates_dir or default_templates_root()

    setup_lines = [
        "[cyan]Vite Project Setup[/cyan]",
        "",
        f"{'Project':<15} [green]{escape(target_dir)}[/green]",
        f"{'Template':<15} [green]{resolved_template}[/green]",
        f"{'Working Path':<15} [dim]{escape(str(current_dir))}[/dim]",
    ]
    found = find_template(resolved_template)
    if found:
        framework, variant = found
        setup_lines.insert(3, f"{'Framework':<15} [{framework.color}]{framework.display}[/{framework.color}] [dim]({variant.display})[/dim]")
    console.print(Panel("\n".join(setup_lines), border_style="cyan", padding=(1, 2)))

    console.print(f"\nScaffolding project in [cyan]{escape(str(current_dir / target_dir))}[/cyan]...")

    tracker = StepTracker("Scaffold Vite Project")
    for key, label in [
        ("template", "Locate template"),
        ("directory", "Create project directory"),
        ("copy", "Copy template files"),
        ("final", "Finalize"),
    ]:
        tracker.add(key, label)

    with Live(tracker.render(), console=console, refresh_per_second=8, transient=True) as live:
        tracker.attach_refresh(lambda: live.update(tracker.render()))
        try:
            root = materialize_project(
                target_dir,
                resolved_template,
                cwd=current_dir,
                templates_root=templates_root,
                tracker=tracker,
            )
            tracker.complete("final", "project ready")
        except Exception as e:
            for key in ("template", "directory", "copy"):
                if tracker.status_of(key) == "running":
                    tracker.error(key, str(e))
            tracker.error("final", str(e))
            live.stop()
            console.print(tracker.render())
            console.print(Panel(f"Scaffolding failed: {escape(str(e))}", title="Scaffolding Failed", border_style="red"))
            if debug:
                _env_pairs = [
                    ("Python", sys.version.split()[0]),
                    ("Platform", sys.platform),
                    ("CWD", str(current_dir)),
                    ("Templates", str(templates_root)),
                ]
                _label_width = max(len(k) for k, _ in _env_pairs)
                env_lines = [f"{k.ljust(_label_width)} → [bright_black]{escape(v)}[/bright_black]" for k, v in _env_pairs]
                console.print(Panel("\n".join(env_lines), title="Debug Environment", border_style="magenta"))
            raise typer.Exit(1)

    console.print(tracker.render())
    console.print("\n[bold green]Done.[/bold green] Now run:\n")
    for line in next_steps(root, current_dir):
        console.print(f"  {escape(line)}", highlight=False)
    console.print()


def main():
    app()


if __name__ == "__main__":
    main()
