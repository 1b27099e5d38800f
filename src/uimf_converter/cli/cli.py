#!/usr/bin/env python3
"""
uimf_converter.cli.app

Typer-based CLI for converting Agilent IMS .D directories to .UIMF files and
inspecting the results.

Examples
--------
Convert one dataset:

    uimf-convert convert MyDataset /storage/IMS08/2024_1 /work \\
        --converter-dir /opt/AgilentToUimfConverter

Check whether a .uimf file still needs demultiplexing:

    uimf-convert mux-status /storage/IMS08/2024_1/MyDataset/MyDataset.uimf
"""

from __future__ import annotations

import logging
import sys
import traceback
from pathlib import Path

import typer

from uimf_converter.application.results import MultiplexingStatus

app = typer.Typer(
    name="uimf-convert",
    help="Convert Agilent IMS .D directories to .UIMF and inspect UIMF files.",
    no_args_is_help=True,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception raised by the command.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _print_progress(label: str, percent: float) -> None:
    typer.echo(f"{label}: {percent:.1f}%")


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show debug logs and full tracebacks."),
) -> None:
    """Initialize shared CLI state and logging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    dataset: str = typer.Argument(..., help="Dataset name (the .d directory is <dataset>.d)."),
    remote_dir: Path = typer.Argument(
        ...,
        help="Dataset directory on the storage server that holds <dataset>.d.",
    ),
    work_dir: Path = typer.Argument(..., help="Local working directory."),
    converter_dir: Path = typer.Option(
        ...,
        "--converter-dir",
        help="Directory containing AgilentToUimfConverter.exe.",
    ),
    instrument_class: str = typer.Option(
        "IMS_Agilent_TOF_DotD", "--instrument-class", help="Instrument class of the dataset."
    ),
    manager_name: str = typer.Option(
        "CTM", "--manager-name", help="Manager name used for the console output file."
    ),
    max_runtime_minutes: int = typer.Option(
        180, "--max-runtime-minutes", help="Terminate the converter after this many minutes."
    ),
    debug_level: int = typer.Option(4, "--debug-level", help="Debug verbosity (0-5)."),
) -> None:
    """Convert a dataset's .D directory to a .UIMF file and validate it."""
    debug: bool = bool(ctx.obj.get("debug", False))

    settings = {
        "work_dir": work_dir,
        "converter_dir": converter_dir,
        "manager_name": manager_name,
        "debug_level": debug_level,
        "max_runtime_minutes": max_runtime_minutes,
    }
    task = {
        "Dataset": dataset,
        "Instrument_Class": instrument_class,
        "Storage_Vol_External": remote_dir.parent,
        "Storage_Path": "",
        "Directory": remote_dir.name,
    }

    try:
        from uimf_converter.application import convert_dataset

        outcome = convert_dataset(settings, task, on_progress=_print_progress)
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    if outcome.success:
        typer.echo(f"✓ Converted: {dataset}")
        return
    typer.echo(f"✗ Conversion failed: {outcome.closeout_msg}", err=True)
    if outcome.eval_msg:
        typer.echo(f"  {outcome.eval_msg}", err=True)
    raise typer.Exit(code=1)


@app.command("mux-status")
def mux_status_cmd(
    ctx: typer.Context,
    uimf_file: Path = typer.Argument(..., exists=True, readable=True, help="Path to a .uimf file."),
) -> None:
    """Report whether a .UIMF file is multiplexed and its bit width."""
    debug: bool = bool(ctx.obj.get("debug", False))
    try:
        from uimf_converter.encoding import classify_uimf_file

        result = classify_uimf_file(uimf_file)
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    if result.is_multiplexed:
        typer.echo(f"Multiplexed ({result.bit_width}-bit encoding)")
    elif result.status is MultiplexingStatus.ERROR:
        typer.echo(f"✗ Problem determining UIMF file status: {uimf_file}", err=True)
        raise typer.Exit(code=1)
    else:
        typer.echo("Non-Multiplexed")


@app.command("dotd-mux-status")
def dotd_mux_status_cmd(
    dotd_dir: Path = typer.Argument(
        ..., exists=True, file_okay=False, help="Path to an Agilent .D directory."
    ),
) -> None:
    """Report whether an Agilent .D directory still needs demultiplexing."""
    from uimf_converter.encoding import dotd_mux_status

    result = dotd_mux_status(dotd_dir)
    if result.is_multiplexed:
        typer.echo(f"Multiplexed (sequence {result.encoding_sequence})")
    elif result.status is MultiplexingStatus.ERROR:
        typer.echo(f"✗ Unable to read IMSFrameMeth.xml in {dotd_dir}", err=True)
        raise typer.Exit(code=1)
    else:
        typer.echo("Non-Multiplexed")


@app.command("validate")
def validate_cmd(
    uimf_file: Path = typer.Argument(..., help="Path to a .uimf file."),
) -> None:
    """Check that a .UIMF file exists, is large enough and has spectra."""
    from uimf_converter.validate import file_size_to_string, validate_uimf_file

    report = validate_uimf_file(uimf_file)
    if report.valid:
        typer.echo(f"✓ Valid: {uimf_file} ({file_size_to_string(report.size_kb)})")
        return
    typer.echo(f"✗ Invalid: {report.eval_msg}", err=True)
    raise typer.Exit(code=1)


@app.command("doctor")
def doctor_cmd(
    converter_dir: Path | None = typer.Option(
        None, "--converter-dir", help="Directory expected to hold AgilentToUimfConverter.exe."
    ),
) -> None:
    """Print installed toolchain versions and converter availability."""
    import importlib.metadata as metadata

    from uimf_converter.application.options import CONVERTER_EXE_NAME

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in ("pydantic", "typer"):
        try:
            typer.echo(f"{module}: {metadata.version(module)}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    if converter_dir is not None:
        exe = converter_dir / CONVERTER_EXE_NAME
        state = "found" if exe.is_file() else "<not found>"
        typer.echo(f"converter: {exe} {state}")


if __name__ == "__main__":
    app()
