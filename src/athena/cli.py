# src/athena/cli.py

"""
Athena - Ancient Numeral Systems

Description:
    Converts a whole number into Roman, Mayan, Babylonian or binary numerals,
    explains every step of the conversion, and generates pattern-recognition
    puzzles (decode the hidden number, continue the sequence).

usage: see athena -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import platform
import random
import sys
import textwrap
import time
import traceback
from importlib.resources import files as pkg_files
from typing import NamedTuple

from colorama import Fore, Style
from colorama import init as colorama_init

import athena.config as CONFIG
from athena import __version__ as _ver
from athena.convert import convert
from athena.display import (
    print_conversion,
    print_profiles_with_descriptions,
    print_puzzle,
    print_system_list,
    screen_header,
    show_effective_settings,
    show_intro_help,
)
from athena.expreval import parse_int_or_expr
from athena.output_manager import OutputManager
from athena.puzzle import Difficulty, PuzzleKind, check_answer, generate_puzzle
from athena.registry import default_registry, get_system, list_systems
from athena.runtime import APPLY, CFG, MAX_OPTIONS
from athena.runtime import current as _rt_current
from athena.transform import parse_numeral
from athena.utility import (
    InvalidInputError,
    NumeralError,
    UserInputError,
    clear_screen,
    flatten_dotted,
    get_terminal_height,
    get_terminal_width,
    typename,
    validate_output_setting,
)
from athena.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

_FALLBACK_SYSTEM = "roman"
_FALLBACK_MAX_VALUE = 10**12
_COMMANDS = {"list", "puzzle", "decode", "init", "where", "active"}


# In memory session history
class HistoryItem(NamedTuple):
    n: int
    system: str
    timestamp: float


_HISTORY: list[HistoryItem] = []


def add_to_history(n: int, system: str) -> None:
    _HISTORY.append(HistoryItem(n=n, system=system, timestamp=time.time()))


def get_history() -> list[HistoryItem]:
    return list(_HISTORY)


def clear_history() -> None:
    _HISTORY.clear()


def _debug(msg: str) -> None:
    if _rt_current().debug:
        print(f"{Fore.LIGHTBLACK_EX}[debug]{Style.RESET_ALL} {msg}", file=sys.stderr)


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not (msg.startswith("Invalid input:") or msg.startswith("Error:")):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _print_invalid_input(e: Exception) -> None:
    msg = str(e)
    prefix = f"{Fore.RED}Invalid input:{Style.RESET_ALL}"
    msg = msg.replace("Invalid input:", prefix, 1) if msg.startswith("Invalid input:") else f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _resolve_inputs(items: list[str]) -> tuple[str | None, int | None]:
    """Return (system, number) based on the first two positionals.

    Rules:
      - If one item parses as int/expr -> number; else -> system
      - If two items:
          * first numeric, second not -> (second, number)
          * first not, second numeric -> (first, number)
          * both numeric -> take the first as number
          * neither numeric -> (first, None)
    """
    if not items:
        return None, None

    if len(items) == 1:
        n = parse_int_or_expr(items[0])
        return (None, n) if n is not None else (items[0], None)

    a, b = items[0], items[1]
    na, nb = parse_int_or_expr(a), parse_int_or_expr(b)

    if na is not None and nb is None:
        return b, na
    if na is None and nb is not None:
        return a, nb
    if na is not None and nb is not None:
        return None, na
    return a, None


def _active_system() -> str:
    return _rt_current().system_id or CFG("BEHAVIOUR.DEFAULT_SYSTEM", _FALLBACK_SYSTEM)


def _check_magnitude(n: int) -> None:
    limit = CFG("BEHAVIOUR.MAX_VALUE", _FALLBACK_MAX_VALUE)
    if n > limit:
        raise UserInputError(f"{n} is larger than BEHAVIOUR.MAX_VALUE ({limit}).")


def _select_profile_name(explicit: str | None) -> str:
    """
    Precedence:
      1) explicit --profile
      2) last used (from workspace)
      3) 'default'
    """
    if explicit:
        return explicit
    last = CONFIG.last_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _load_profile(name: str, explicit: bool) -> str:
    """Load and apply a profile; returns the name actually applied."""
    if not CONFIG.has_profile(name):
        if explicit:
            known = ", ".join(CONFIG.profile_names()) or "(none)"
            raise UserInputError(f"unknown profile '{name}'. Available profiles: {known}")
        _debug(f"profile '{name}' not found, using built-in defaults")
        return "default"

    selected = CONFIG.load_profile(name)
    APPLY(selected)

    if _rt_current().debug:
        _debug(f"active profile: {name}")
        src_path = selected.source
        if src_path:
            _debug(f"profile file: {src_path}")
        flat = flatten_dotted(selected.as_dict())
        if flat:
            print("[debug] profile keys (raw → runtime value/type):", file=sys.stderr)
            for k in sorted(flat.keys(), key=str.lower):
                runtime_val = CFG(k, None)
                print(f"        {k:.<50} {runtime_val!r} ({typename(runtime_val)})", file=sys.stderr)
            print(file=sys.stderr)
    return name


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      list
          List all available numeral systems.

      puzzle [system]
          Play one puzzle. Use --level or --min/--max for the range,
          --kind decode|sequence, --reveal K, --seed S for a repeatable puzzle.

      decode [system] <numeral>
          Read a numeral back into a number, e.g. athena decode roman MCMXCIV

      init
          Create workspace folders and copy packaged sample profiles if missing.

      init overwrite
          Meant for developers. Requires environment variable ATHENA_DEV=1.
          Copies all profiles and the numeral system table into the workspace.

      where
          Show the workspace and package paths.

      active
          Show the active profile.
    """)

    p = argparse.ArgumentParser(
        prog="athena",
        description="Athena — write whole numbers in ancient numeral systems",
        usage=(
            "athena [[system] [integer]] [--profile P] [--output OUTPUT] [--quiet] [--no-trace] [--debug]\n"
            "       athena puzzle [system] [--level L | --min N --max N] [--kind K] [--reveal K] [--seed S]\n"
            "       athena decode [system] <numeral>\n"
            "       athena list | init | where | active\n"
            "       athena -h | --help\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[[system] integer]]",
                   help="optional numeral system followed by an integer to convert, or a command")
    p.add_argument("--profile", default=None, help="Profile to use (default: last used, else 'default')")
    p.add_argument("--output", default=None, help="Append results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output (only write --output)")
    p.add_argument("--no-trace", action="store_true", help="Omit the step-by-step explanation")
    p.add_argument("--no-color", action="store_true", help="Plain output without ANSI colors")
    p.add_argument("--debug", action="store_true", help="Show internal trace info and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    g = p.add_argument_group("puzzle options")
    g.add_argument("--level", default=None, help="Difficulty level: easy, medium, hard (or a profile level)")
    g.add_argument("--min", type=int, default=None, dest="min_value", help="Smallest value in the puzzle")
    g.add_argument("--max", type=int, default=None, dest="max_value", help="Largest value in the puzzle")
    g.add_argument("--reveal", type=int, default=None, help="Number of revealed pairs")
    g.add_argument("--kind", default=None, choices=[k.value for k in PuzzleKind], help="Puzzle kind")
    g.add_argument("--distractors", type=int, default=None, choices=range(MAX_OPTIONS), metavar="N", help="Number of wrong answer options (0-9)")
    g.add_argument("--seed", type=int, default=None, help="Seed for a reproducible puzzle")
    g.add_argument("--show-answer", action="store_true", help="Print the answer instead of asking for it")

    d = p.add_argument_group("decode options")
    d.add_argument("--lenient", action="store_true", help="Accept non-canonical spellings such as IIII")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except (UserInputError, NumeralError) as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug = ("--debug" in (argv if argv is not None else sys.argv)) or _rt_current().debug
        if debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _configure_text_streams() -> None:
    # Respect explicit user choice
    if os.environ.get("PYTHONIOENCODING"):
        return
    try:
        # Only touch redirected output (pipes/files), leave TTY as-is
        if not sys.stdout.isatty():
            enc = (sys.stdout.encoding or "").lower()
            # glyphs need UTF-8: Windows always, POSIX only if clearly unsafe
            if platform.system() == "Windows" or enc in ("", "ascii", "us-ascii"):
                sys.stdout.reconfigure(encoding="utf-8", errors="replace")
                sys.stderr.reconfigure(encoding="utf-8", errors="replace")
    except (AttributeError, OSError, ValueError):
        # streams replaced by a test harness or an IDE
        pass


# ---- puzzle helpers ----
def _puzzle_difficulty(level: str | None, lo: int | None, hi: int | None) -> Difficulty:
    if lo is not None or hi is not None:
        if lo is None or hi is None:
            raise UserInputError("--min and --max must be given together.")
        return Difficulty(lo, hi)
    return Difficulty.preset(level or "easy")


def _read_answer(puzzle, options) -> bool | None:
    """Ask for an answer (letter, number or numeral). None if the user gave up."""
    try:
        raw = input(f"{Fore.LIGHTBLUE_EX}Your answer: {Style.RESET_ALL}").strip()
    except EOFError:
        return None
    if not raw:
        return None
    # Roman C, D, I ... read as numerals before option letters
    if _reads_as_numeral(puzzle, raw):
        return check_answer(puzzle, raw)
    low = raw.lower()
    if len(low) == 1 and "a" <= low <= "z":
        idx = ord(low) - ord("a")
        if idx < len(options):
            return options[idx] == puzzle.answer
    return check_answer(puzzle, raw)


def _reads_as_numeral(puzzle, raw: str) -> bool:
    if puzzle.hidden.withheld != "glyphs":
        return False
    try:
        parse_numeral(raw, puzzle.system_id, strict=True)
    except NumeralError:
        return False
    return True


def _play_puzzle(  # noqa: PLR0913
    system_id: str,
    difficulty: Difficulty,
    *,
    kind: str,
    reveal: int,
    distractors: int,
    rng: random.Random,
    om: OutputManager,
    ask: bool = True,
) -> bool | None:
    sysdef = get_system(system_id)
    puzzle = generate_puzzle(
        sysdef.id, difficulty, reveal,
        kind=kind, distractor_count=distractors, rng=rng,
    )
    options = puzzle.options(rng)
    print_puzzle(puzzle, sysdef, options, om=om)

    result = _read_answer(puzzle, options) if ask else None
    answer = puzzle.hidden
    pos = sysdef.is_positional
    spelled = (" " if pos else "").join(answer.glyphs)

    if result is True:
        om.write(f"{Fore.GREEN}Correct!{Style.RESET_ALL} {answer.value} = {spelled}")
    else:
        if result is False:
            om.write(f"{Fore.RED}Not quite.{Style.RESET_ALL} Hint: {puzzle.hint}")
        om.write(f"Answer: {answer.value} = {spelled}")
    return result


# ---- main ----
def _main_impl(argv=None) -> int:  # noqa: PLR0911, PLR0912, PLR0915

    _configure_text_streams()

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    # Ensure a first-run workspace seed silently
    ensure_workspace_seeded()

    # Choose profile: explicit → last-used → default
    profile_name = _load_profile(_select_profile_name(args.profile), explicit=bool(args.profile))
    if args.debug:
        rt.debug = True

    color = CFG("DISPLAY.COLOR", True) and not args.no_color
    colorama_init(autoreset=True, strip=not color)

    if rt.debug:
        _debug(f"Terminal {get_terminal_width()}x{get_terminal_height()}")
        reg = default_registry()
        _debug(f"numeral systems: {len(reg)} from {reg.source}")

    show_trace = CFG("DISPLAY.SHOW_TRACE", True) and not args.no_trace

    # --- output routing (CLI --output overrides profile OUTPUT_FILE) ---
    try:
        cli_output = validate_output_setting(args.output)
    except ValueError as e:
        print(f"Fatal error in --output: {e}", file=sys.stderr)
        return 1

    def make_output_manager() -> OutputManager:
        # read OUTPUT_FILE from runtime each time so profile switches take effect
        target = cli_output if cli_output is not None else CFG("OUTPUT.OUTPUT_FILE", None)
        try:
            target = validate_output_setting(target)
        except ValueError as e:
            raise UserInputError(f"OUTPUT.OUTPUT_FILE: {e}") from None
        return OutputManager(output_file=target, quiet=args.quiet)

    items = list(args.items)
    command = items[0].lower() if items and items[0].lower() in _COMMANDS else None

    # --- commands ---
    if command == "active":
        print(f"Active profile: {CONFIG.last_profile() or profile_name}")
        return 0

    if command == "init":
        if len(items) == 2 and items[1] == "overwrite":  # noqa: PLR2004
            if os.environ.get("ATHENA_DEV") != "1":
                print("Refusing to overwrite: set ATHENA_DEV=1 to enable developer overwrite.")
                return 2
            ws, copied = seed_workspace(overwrite=True, subsets={"profiles", "data"})
            print(f"Workspace ready at: {ws} (overwrote existing files)")
            print(f"Copied -> profiles: {copied.get('profiles', 0)}, data: {copied.get('data', 0)}")
            return 0

        ws, _, copied = ensure_workspace_seeded()  # copy-if-missing
        print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied.get('profiles', 0)}, data: {copied.get('data', 0)}")
        return 0

    if command == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('athena')}")
        print(f"Systems:   {default_registry().source}")
        return 0

    if command == "list":
        om = make_output_manager()
        try:
            print_system_list(list_systems(), om=om)
        finally:
            om.close()
        return 0

    if command == "decode":
        rest = items[1:]
        if not rest:
            raise UserInputError("usage: athena decode [system] <numeral>")
        if len(rest) >= 2 and rest[0].strip().lower() in default_registry():  # noqa: PLR2004
            system_id, text = rest[0], " ".join(rest[1:])
        else:
            system_id, text = _active_system(), " ".join(rest)
        sysdef = get_system(system_id)
        value = parse_numeral(text, sysdef.id, strict=not args.lenient)
        om = make_output_manager()
        try:
            om.write(f"{text} in {sysdef.name} = {Fore.GREEN}{Style.BRIGHT}{value}{Style.RESET_ALL}")
        finally:
            om.close()
        return 0

    if command == "puzzle":
        system_id = items[1] if len(items) > 1 else _active_system()
        om = make_output_manager()
        try:
            _play_puzzle(
                system_id,
                _puzzle_difficulty(args.level, args.min_value, args.max_value),
                kind=args.kind or CFG("PUZZLE.KIND", PuzzleKind.DECODE.value),
                reveal=args.reveal if args.reveal is not None else CFG("PUZZLE.REVEAL_COUNT", 3),
                distractors=args.distractors if args.distractors is not None else CFG("PUZZLE.DISTRACTORS", 3),
                rng=random.Random(args.seed),
                om=om,
                ask=not (args.show_answer or args.quiet),
            )
        finally:
            om.close()
        return 0

    # --- parse inputs: system + number ---
    system, smart_n = _resolve_inputs(items)
    if system is not None:
        rt.system_id = get_system(system).id

    # --- one-shot number path ---
    if smart_n is not None:
        _check_magnitude(smart_n)
        sysdef = get_system(_active_system())
        result = convert(smart_n, sysdef.id)
        om = make_output_manager()
        try:
            print_conversion(result, sysdef, show_trace=show_trace, om=om)
        finally:
            om.close()
        return 0

    return _repl(profile_name, show_trace, make_output_manager)


# ---- REPL ----
def _repl(profile_name: str, show_trace: bool, make_output_manager) -> int:  # noqa: PLR0912, PLR0915
    rt = _rt_current()
    if not rt.debug:
        clear_screen()
    print(screen_header())

    current_profile = profile_name
    rng = random.Random()
    while True:
        try:
            sysdef = get_system(_active_system())
            prompt = (f"\n{sysdef.name} [{current_profile}] — Enter an integer, command, "
                      f"system or profile (h=Help, q=Quit): ")
            user_input = input(prompt).strip()

            low = user_input.lower()
            if low in {"", "q", "quit"}:
                break

            if low in {"h", "help"}:
                show_intro_help()
                continue

            if low == "list":
                print_system_list(list_systems())
                continue

            if low in {"s", "settings"}:
                show_effective_settings()
                continue

            if low in {"profiles", "list profiles"}:
                print_profiles_with_descriptions()
                continue

            if low in {"hist clear", "history clear"}:
                clear_history()
                print("History cleared.")
                continue

            if low in {"hist", "history"}:
                hist = get_history()
                if not hist:
                    print("History is empty.")
                    continue
                for item in hist:
                    ts = time.strftime("%H:%M:%S", time.localtime(item.timestamp))
                    print(f"{ts}  n={item.n:<15}  system={item.system}")
                continue

            if low.startswith("debug"):
                parts = low.split()
                if len(parts) == 1 or parts[1] == "status":
                    print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
                elif parts[1] == "on":
                    rt.debug = True
                    print("Debug mode enabled for this session.")
                elif parts[1] == "off":
                    rt.debug = False
                    print("Debug mode disabled for this session.")
                else:
                    print("Usage: DEBUG [on|off|status]")
                continue

            if low.startswith("trace"):
                parts = low.split()
                if len(parts) == 2 and parts[1] in {"on", "off"}:  # noqa: PLR2004
                    show_trace = parts[1] == "on"
                    print(f"Trace {'shown' if show_trace else 'hidden'}.")
                else:
                    print("Usage: TRACE [on|off]")
                continue

            if low.startswith("decode "):
                try:
                    value = parse_numeral(user_input[7:], sysdef.id)
                    print(f"{user_input[7:].strip()} = {Fore.GREEN}{Style.BRIGHT}{value}{Style.RESET_ALL}")
                except InvalidInputError as e:
                    _print_invalid_input(e)
                continue

            first = low.split()[0]
            if first in {"p", "puzzle", "seq"}:
                parts = low.split()
                kind = PuzzleKind.SEQUENCE.value if first == "seq" else CFG("PUZZLE.KIND", PuzzleKind.DECODE.value)
                om = make_output_manager()
                try:
                    _play_puzzle(
                        sysdef.id,
                        Difficulty.preset(parts[1] if len(parts) > 1 else "easy"),
                        kind=kind,
                        reveal=CFG("PUZZLE.REVEAL_COUNT", 3),
                        distractors=CFG("PUZZLE.DISTRACTORS", 3),
                        rng=rng,
                        om=om,
                    )
                except NumeralError as e:
                    _print_invalid_input(e)
                finally:
                    om.close()
                continue

            # system switch?
            if low in default_registry():
                rt.system_id = get_system(low).id
                print(f"Numeral system: {get_system(low).name}")
                continue

            # number?
            try:
                n = parse_int_or_expr(user_input)
            except UserInputError as e:
                _print_invalid_input(e)
                continue

            if n is not None:
                om = None
                try:
                    _check_magnitude(n)
                    om = make_output_manager()
                    result = convert(n, sysdef.id)
                    print_conversion(result, sysdef, show_trace=show_trace, om=om)
                    add_to_history(n, sysdef.id)
                except (UserInputError, NumeralError) as e:
                    _print_invalid_input(e)
                finally:
                    if om is not None:
                        om.close()
                continue

            # treat as profile switch
            if CONFIG.has_profile(user_input):
                try:
                    current_profile = _load_profile(user_input, explicit=True)
                    CONFIG.remember_profile(user_input)
                    print(f"Applied profile: {current_profile}")
                except (UserInputError, OSError) as e:
                    print(f"{Fore.RED}Failed to load profile {Style.RESET_ALL}'{user_input}': {e}", file=sys.stderr)
                continue

            print(f"{Fore.RED}Invalid input: {Style.RESET_ALL}'{user_input}'. Type H for help.")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        except Exception as e:
            if rt.debug:
                traceback.print_exc()
            else:
                _print_user_error(f"{e.__class__.__name__}: {e}")
            continue
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
