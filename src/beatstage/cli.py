"""BeatStage CLI entry point.

Three commands over the serialized scenario format:

  compile    scenario JSON -> TheaterScript JSON
  reconcile  layered beats + character list -> layered_beat scenario
  template   named template + characters -> one-beat scenario

Typed BeatStage errors are shown as Rich panels, never as tracebacks.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from beatstage.beat.templates import TEMPLATES, build_template
from beatstage.characters import CharacterInfo, Gender
from beatstage.compiler.compile import compile_sequence
from beatstage.errors import BeatStageError
from beatstage.reconcile.converter import to_classic_beats
from beatstage.scenario.loader import (
    encode_scenario,
    load_characters,
    load_layered_beats,
    load_scenario,
)
from beatstage.scenario.schema import BeatScenario, LayeredBeatScenario

app = typer.Typer(
    name="beatstage",
    help="BeatStage: compile theatrical beats into playback-ready scene timelines.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def _input_error(message: str) -> None:
    err_console.print(Panel(message, title="[red]Input Error[/red]", border_style="red"))
    raise typer.Exit(1)


def _stage_error(e: BeatStageError) -> None:
    err_console.print(Panel(str(e), title="[red]Conversion Error[/red]", border_style="red"))
    raise typer.Exit(1)


def _emit(payload: str, output: Optional[Path]) -> None:
    """Write JSON to output when given, else to stdout."""
    if output is None:
        typer.echo(payload)
    else:
        output.write_text(payload, encoding="utf-8")


def _parse_character(value: str) -> CharacterInfo:
    """ID:NAME:GENDER, e.g. a:Alice:FEMALE."""
    parts = value.split(":")
    if len(parts) != 3 or not parts[0] or not parts[1]:
        _input_error(
            f"Bad character: [bold]{value}[/bold]\n"
            f"Expected ID:NAME:GENDER, e.g. a:Alice:FEMALE"
        )
    character_id, name, gender = parts
    try:
        return CharacterInfo(id=character_id, name=name, gender=Gender(gender.upper()))
    except ValueError:
        _input_error(
            f"Unknown gender: [bold]{gender}[/bold]\n"
            f"Valid genders: {', '.join(g.value for g in Gender)}"
        )


@app.command("compile")
def compile_command(
    scenario: Annotated[
        Path,
        typer.Argument(dir_okay=False, resolve_path=True, help="Serialized scenario JSON."),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", dir_okay=False, help="Write the TheaterScript JSON here."),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option("--workers", "-w", min=1, help="Compile beats on this many threads."),
    ] = None,
) -> None:
    """Compile a scenario into a TheaterScript."""
    if not scenario.exists():
        _input_error(
            f"File not found: [bold]{scenario}[/bold]\n"
            f"Check that the path is correct and the file is accessible."
        )
    try:
        loaded = load_scenario(scenario)
        script = compile_sequence(loaded.beats, max_workers=workers)
    except BeatStageError as e:
        _stage_error(e)

    _emit(script.model_dump_json(by_alias=True, indent=2), output)
    if output is not None:
        console.print(Panel(
            f"[bold green]Compiled[/bold green]\n\n"
            f"  Scenario: [dim]{scenario.name}[/dim] ({loaded.type})\n"
            f"  Scenes:   {len(script.scenes)}\n"
            f"  Duration: {script.total_millis / 1000:.1f}s\n"
            f"  Output:   [dim]{output}[/dim]",
            title="[green]Script Ready[/green]",
            border_style="green",
        ))


@app.command("reconcile")
def reconcile_command(
    layered: Annotated[
        Path,
        typer.Argument(dir_okay=False, resolve_path=True, help="JSON array of layered beats."),
    ],
    characters: Annotated[
        Path,
        typer.Option("--characters", "-c", dir_okay=False, resolve_path=True, help="JSON array of characters."),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", dir_okay=False, help="Write the scenario JSON here."),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail on character ids missing from the character list."),
    ] = False,
) -> None:
    """Reconcile layered beats into a layered_beat scenario."""
    for path in (layered, characters):
        if not path.exists():
            _input_error(
                f"File not found: [bold]{path}[/bold]\n"
                f"Check that the path is correct and the file is accessible."
            )
    try:
        directory = load_characters(characters)
        beats = to_classic_beats(load_layered_beats(layered), directory, strict=strict)
    except BeatStageError as e:
        _stage_error(e)

    scenario = LayeredBeatScenario(
        description=f"Reconciled from {layered.name}",
        beats=beats,
        characters=directory,
    )
    _emit(encode_scenario(scenario), output)
    if output is not None:
        console.print(Panel(
            f"[bold green]Reconciled[/bold green]\n\n"
            f"  Beats:      {len(beats)}\n"
            f"  Characters: {len(directory)}\n"
            f"  Output:     [dim]{output}[/dim]",
            title="[green]Scenario Ready[/green]",
            border_style="green",
        ))


@app.command("template")
def template_command(
    name: Annotated[str, typer.Argument(help="Template name, e.g. first_meeting.")],
    beat_id: Annotated[str, typer.Option("--id", help="Beat id (a UUID or ULID).")],
    character: Annotated[
        Optional[list[str]],
        typer.Option("--character", "-c", help="ID:NAME:GENDER; repeat once per character."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", dir_okay=False, help="Write the scenario JSON here."),
    ] = None,
) -> None:
    """Emit a one-beat scenario built from a named template."""
    if name not in TEMPLATES:
        _input_error(
            f"Unknown template: [bold]{name}[/bold]\n"
            f"Valid templates: {', '.join(sorted(TEMPLATES))}"
        )
    cast = [_parse_character(c) for c in character or []]
    try:
        beat = build_template(name, beat_id, cast)
    except ValueError as e:
        _input_error(str(e))

    scenario = BeatScenario(description=beat.description, beats=[beat], characters=cast)
    _emit(encode_scenario(scenario), output)
    if output is not None:
        console.print(f"[green]Template written:[/] [dim]{output}[/dim]")
