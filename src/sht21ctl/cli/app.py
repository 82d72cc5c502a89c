"""CLI application entry point and command routing for sht21ctl.

This module is the **sole error boundary** for the entire application.
It catches :class:`~sht21ctl.exceptions.Sht21Error`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No protocol logic lives here — all bus work is delegated to the
  :class:`~sht21ctl.core.dispatcher.CommandDispatcher`.
* The bus handle is owned here and released in a ``finally`` block, so
  it is closed exactly once on every exit path.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Callable
from typing import NoReturn

from rich.markup import escape

from sht21ctl.cli import exit_codes
from sht21ctl.cli.console import configure_logging, console, output
from sht21ctl.config import DEFAULT_BUS, Settings
from sht21ctl.core.models import (
    CommandRequest,
    ConfigField,
    MeasurementKind,
    Operation,
    Resolution,
)
from sht21ctl.core.protocols import BusTransport
from sht21ctl.exceptions import ArgumentError, EnvironmentError, Sht21Error
from sht21ctl.version import __version__

PROG = "sht21ctl"

_MEASURE_COMMANDS: dict[str, MeasurementKind] = {
    "readtemp": MeasurementKind.TEMPERATURE,
    "readrh": MeasurementKind.HUMIDITY,
    "readall": MeasurementKind.BOTH,
}

_ON_OFF = ("on", "off")


# ---------------------------------------------------------------------------
# Usage text
# ---------------------------------------------------------------------------

def usage_text(prog: str = PROG) -> str:
    """Return the full usage statement."""
    return "\n".join(
        (
            f"Usage: {prog}  readtemp [-options1]",
            f"Usage: {prog}  readrh [-options1]",
            f"Usage: {prog}  readall [-options1]",
            f"Usage: {prog}  readuser",
            f"Usage: {prog}  writeuser [-options2]",
            f"Usage: {prog}  reset",
            f"Usage: {prog}  doctor",
            "",
            "[-options1]   [-nhm] -> 'no hold master' mode",
            "              [-c]   -> continuous reading mode",
            "[-options2]   [-res mode] -> resolution of measurement",
            "                             -> 1 = rh 12-bit & temp 14 bit (default)",
            "                             -> 2 = rh 8-bit & temp 12 bit",
            "                             -> 3 = rh 10-bit & temp 13 bit",
            "                             -> 4 = rh 11-bit & temp 11 bit",
            "              [-heat mode] -> on-chip heater",
            "                             -> on  = enables heater",
            "                             -> off = disables heater (default)",
            "              [-otp mode]  -> otp reload",
            "                             -> on  = enables otp",
            "                             -> off = disables otp (default)",
            "",
            "global options (before the command): -b/--bus N, -v/--verbose, -V/--version",
        )
    )


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

class _Parser(argparse.ArgumentParser):
    """Argument parser that raises :class:`ArgumentError` instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise ArgumentError(message, hint=usage_text())


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Commands are positional and their options follow them:
    * ``sht21ctl readtemp|readrh|readall [-nhm] [-c]``
    * ``sht21ctl readuser``
    * ``sht21ctl writeuser -res {1-4} | -heat {on,off} | -otp {on,off}``
    * ``sht21ctl reset``, ``sht21ctl usage``, ``sht21ctl doctor``
    """
    parser = _Parser(
        prog=PROG,
        description="Read and configure an SHT-21 humidity/temperature sensor.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-b",
        "--bus",
        type=int,
        default=DEFAULT_BUS,
        help=f"I2C bus index N of /dev/i2c-N (default: {DEFAULT_BUS}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log bus traffic to stderr.",
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="command")

    for name, kind in _MEASURE_COMMANDS.items():
        measure = commands.add_parser(
            name, help=f"Measure {kind.value}.", allow_abbrev=False,
        )
        measure.add_argument(
            "-nhm", dest="no_hold_master", action="store_true",
            help="'no hold master' mode: release the bus and read after a delay.",
        )
        measure.add_argument(
            "-c", dest="continuous", action="store_true",
            help="Continuous reading mode, stop with Ctrl+C.",
        )

    commands.add_parser("readuser", help="Read the user register.")

    write = commands.add_parser(
        "writeuser", help="Change one field of the user register.", allow_abbrev=False,
    )
    field = write.add_mutually_exclusive_group(required=True)
    field.add_argument(
        "-res", dest="resolution", choices=("1", "2", "3", "4"),
        help="Measurement resolution mode.",
    )
    field.add_argument("-heat", dest="heater", choices=_ON_OFF, help="On-chip heater.")
    field.add_argument("-otp", dest="otp_reload", choices=_ON_OFF, help="OTP reload.")

    commands.add_parser("reset", help="Soft-reset the sensor.")
    commands.add_parser("usage", help="Print usage and exit with failure status.")
    commands.add_parser("doctor", help="Run environment diagnostics.")
    return parser


def build_request(args: argparse.Namespace) -> CommandRequest:
    """Translate parsed arguments into a :class:`CommandRequest`."""
    command: str = args.command
    if command in _MEASURE_COMMANDS:
        return CommandRequest(
            operation=Operation.MEASURE,
            measurement_kind=_MEASURE_COMMANDS[command],
            no_hold_master=args.no_hold_master,
            continuous=args.continuous,
        )
    if command == "readuser":
        return CommandRequest(operation=Operation.READ_CONFIG)
    if command == "reset":
        return CommandRequest(operation=Operation.RESET)
    if command == "writeuser":
        if args.resolution is not None:
            return CommandRequest(
                operation=Operation.WRITE_CONFIG,
                config_field=ConfigField.RESOLUTION,
                config_value=Resolution.from_mode(int(args.resolution)),
            )
        if args.heater is not None:
            return CommandRequest(
                operation=Operation.WRITE_CONFIG,
                config_field=ConfigField.HEATER,
                config_value=args.heater == "on",
            )
        return CommandRequest(
            operation=Operation.WRITE_CONFIG,
            config_field=ConfigField.OTP_RELOAD,
            config_value=args.otp_reload == "on",
        )
    raise ArgumentError(f"invalid operation: {command}", hint=usage_text())


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _default_transport() -> BusTransport:
    """Create the smbus2 transport, importing it lazily."""
    try:
        from sht21ctl.infra.i2c_transport import SMBusTransport
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "smbus2 is not installed. Install with: pip install smbus2",
        ) from exc

    return SMBusTransport()


def _handle_request(
    request: CommandRequest,
    settings: Settings,
    transport_factory: Callable[[], BusTransport],
    sleep: Callable[[float], None],
) -> int:
    """Open the bus, run *request* and close the bus again.

    Flow:
    1. Open ``/dev/i2c-N`` and select the sensor address.
    2. Hand the request to the dispatcher, rendering each result.
    3. Close the bus, also when steps 1 or 2 raise.
    """
    from sht21ctl.cli.report import render_result
    from sht21ctl.core.dispatcher import CommandDispatcher

    transport = transport_factory()
    try:
        transport.open(settings.bus)
        transport.select_device(settings.address)
        dispatcher = CommandDispatcher(transport, settings.timing, sleep=sleep)
        dispatcher.run(request, render_result)
    finally:
        transport.close()

    if request.operation is Operation.WRITE_CONFIG:
        console.print("[bold green]User register written.[/bold green]")
    elif request.operation is Operation.RESET:
        output.print("Sensor reset.")
    return exit_codes.SUCCESS


def _handle_usage() -> int:
    """Print the usage statement; always a failure exit."""
    output.print(escape(usage_text()))
    return exit_codes.GENERAL_ERROR


def _handle_doctor(settings: Settings) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from sht21ctl.cli.doctor import run_doctor

    return run_doctor(settings.bus)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: list[str] | None = None,
    *,
    transport_factory: Callable[[], BusTransport] = _default_transport,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run the sht21ctl CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    transport_factory:
        Creates the unopened bus transport.  Tests pass a fake here.
    sleep:
        Blocking sleep used between bus transactions.

    Returns
    -------
    int
        OS process exit code.

    Raises
    ------
    ArgumentError
        For any command-line problem; the transport is never created.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.bus < 0:
        raise ArgumentError(f"invalid bus index: {args.bus}", hint=usage_text())
    settings = Settings(bus=args.bus)

    if args.command == "usage":
        return _handle_usage()
    if args.command == "doctor":
        return _handle_doctor(settings)

    request = build_request(args)
    return _handle_request(request, settings, transport_factory, sleep)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except Sht21Error as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
