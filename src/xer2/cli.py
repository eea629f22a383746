from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import time
from typing import NoReturn

import typer

from .config import ConfigError, GeneratorConfig, load_generator_config, resolve_preset
from .trace import open_trace, trace_event
from .paths import default_runtime_dir
from .source import GeneratorShapeError, Source
from .state import StateCodecError, load_state_file, save_state_file


app = typer.Typer(add_completion=False)
state_app = typer.Typer(add_completion=False)
app.add_typer(state_app, name="state")


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _resolve_config(
    *,
    config_path: Path | None,
    preset: str | None,
    n: int | None,
    gap: int | None,
    seed: int | None,
) -> GeneratorConfig:
    config = load_generator_config(config_path) if config_path is not None else GeneratorConfig()
    if preset is not None:
        shape = resolve_preset(preset)
        config = replace(config, n=shape.n, gap=shape.gap)
    if n is not None:
        config = replace(config, n=int(n))
    if gap is not None:
        config = replace(config, gap=int(gap))
    if seed is not None:
        config = replace(config, seed=int(seed))
    return config


def _format_value(value: int, *, hex_output: bool) -> str:
    if hex_output:
        return f"0x{value:016x}"
    return str(value)


@app.command("generate")
def cmd_generate(
    count: int = typer.Option(10, "--count", "-c", min=0, help="number of values to print"),
    n: int | None = typer.Option(None, "--n", help="state size in words"),
    gap: int | None = typer.Option(None, "--gap", help="distance of feed ahead of tap"),
    seed: int | None = typer.Option(None, "--seed", help="64-bit seed"),
    preset: str | None = typer.Option(None, "--preset", help="named shape, e.g. 607/334"),
    config_path: Path | None = typer.Option(None, "--config", help="TOML file with a [generator] table"),
    int63: bool = typer.Option(False, "--int63", help="print non-negative 63-bit values"),
    hex_output: bool = typer.Option(False, "--hex", help="print values as zero-padded hex"),
    state_in: Path | None = typer.Option(None, "--state-in", help="resume from a saved state file"),
    state_out: Path | None = typer.Option(None, "--state-out", help="save state after generating"),
    trace: bool = typer.Option(False, "--trace", help="write a trace log under <base-dir>/logs"),
    base_dir: Path = typer.Option(
        default_runtime_dir(),
        "--base-dir",
        help="runtime directory for trace logs",
    ),
) -> None:
    """Print values from a xer2 generator."""
    if state_in is not None and any(value is not None for value in (n, gap, seed, preset, config_path)):
        raise typer.BadParameter(
            "--state-in cannot be combined with --n/--gap/--seed/--preset/--config",
            param_hint="--state-in",
        )
    if trace:
        open_trace(base_dir=base_dir, command="generate")

    try:
        if state_in is not None:
            source = load_state_file(state_in)
        else:
            config = _resolve_config(config_path=config_path, preset=preset, n=n, gap=gap, seed=seed)
            source = config.build()
    except FileNotFoundError:
        _fail(f"state file not found: {state_in}")
    except OSError as exc:
        _fail(f"cannot read state file {state_in}: {exc.strerror or exc}")
    except (ConfigError, GeneratorShapeError, StateCodecError) as exc:
        _fail(str(exc))

    trace_event("generate", source=source, count=int(count), int63=bool(int63))
    draw = source.int63 if int63 else source.uint64
    for _ in range(int(count)):
        typer.echo(_format_value(draw(), hex_output=hex_output))

    if state_out is not None:
        try:
            save_state_file(state_out, source)
        except OSError as exc:
            _fail(f"cannot write state file {state_out}: {exc.strerror or exc}")


@app.command("bench")
def cmd_bench(
    n: int = typer.Option(17, "--n", help="state size in words"),
    gap: int = typer.Option(10, "--gap", help="distance of feed ahead of tap"),
    iterations: int = typer.Option(1_000_000, "--iterations", min=1, help="outputs to time"),
) -> None:
    """Time `uint64()` for one generator shape."""
    try:
        source = Source(n, gap)
    except GeneratorShapeError as exc:
        _fail(str(exc))
    step = source.uint64
    start = time.perf_counter_ns()
    for _ in range(int(iterations)):
        step()
    elapsed_ns = time.perf_counter_ns() - start
    per_op = elapsed_ns / int(iterations)
    typer.echo(f"{n}/{gap}: {int(iterations)} outputs  {per_op:.1f} ns/op")


@state_app.command("show")
def cmd_state_show(
    path: Path = typer.Argument(..., help="state file (.json or binary)"),
    limit: int = typer.Option(8, "--limit", min=0, help="words to print (0 = all)"),
) -> None:
    """Print the shape and leading words of a saved state."""
    try:
        source = load_state_file(path)
    except FileNotFoundError:
        _fail(f"state file not found: {path}")
    except OSError as exc:
        _fail(f"cannot read state file {path}: {exc.strerror or exc}")
    except StateCodecError as exc:
        _fail(str(exc))

    words = source.save_state()
    typer.echo(f"n={source.n} gap={source.gap}")
    shown = words if limit == 0 else words[:limit]
    for idx, word in enumerate(shown):
        typer.echo(f"{idx:4d}  0x{word:016x}")
    if len(shown) < len(words):
        typer.echo(f"... {len(words) - len(shown)} more")


def main(argv: list[str] | None = None) -> None:
    app(prog_name="xer2", args=argv)


if __name__ == "__main__":
    main()
