# src/athena/display.py
from __future__ import annotations

from collections.abc import Sequence

from colorama import Fore, Style

from athena import __version__
from athena.config import last_profile, profile_catalog
from athena.convert import ConversionResult
from athena.fmt import (
    format_additive_sum,
    format_digits,
    format_glyphs,
    format_place_values,
    wrap_after_label,
)
from athena.puzzle import PuzzleDefinition, PuzzleKind, describe_puzzle
from athena.registry import SystemDefinition
from athena.runtime import current as _rt_current
from athena.trace import spell
from athena.utility import flatten_dotted, typename

ALIGN_WIDTH = 14  # label column


def _out(om):
    return om.write if om is not None else print


def _label(text: str) -> str:
    return f"{Fore.LIGHTWHITE_EX}{text:<{ALIGN_WIDTH}}{Style.RESET_ALL}"


def screen_header() -> str:
    return (f"{Fore.YELLOW}{Style.BRIGHT}"
            f"Athena v{__version__} — Ancient Numeral Systems"
            f"{Style.RESET_ALL}")


def print_conversion(
    result: ConversionResult,
    sysdef: SystemDefinition,
    *,
    show_trace: bool = True,
    om=None,
) -> None:
    """
    Pretty print one conversion:
      - glyphs (bright) and the renderer tag
      - raw digits and place-value expansion (positional) or the sum of
        denominations (additive)
      - the numbered step trace
    """
    out = _out(om)
    pos = sysdef.is_positional

    out(f"{Fore.GREEN}{Style.BRIGHT}{result.value}{Style.RESET_ALL} in {sysdef.name} "
        f"({sysdef.region}, {'base ' + str(sysdef.base) if pos else 'additive'}):")
    out(_label("Numeral:") + format_glyphs(result.glyphs, pos))

    if pos:
        out(_label("Digits:") + format_digits(result.values))
        if result.value > 0:
            out(wrap_after_label(_label("Place value:"), format_place_values(result.value, result.values, sysdef.base)))
    elif result.value > 0:
        out(wrap_after_label(_label("Sum:"), f"{format_additive_sum(result.values)} = {result.value}"))

    if _rt_current().debug:
        out(_label("Renderer:") + f"{Fore.LIGHTBLACK_EX}{result.renderer}{Style.RESET_ALL}")

    if not show_trace:
        return

    out("")
    out(f"{Fore.CYAN}How it is done:{Style.RESET_ALL}")
    width = len(str(len(result.trace)))
    for i, line in enumerate(result.trace, start=1):
        out(wrap_after_label(f"  {i:>{width}}. ", line))


def print_system_list(systems: Sequence[SystemDefinition], om=None) -> None:
    out = _out(om)
    out(f"{Fore.YELLOW}Available numeral systems: {len(systems)}{Style.RESET_ALL}")
    out("")
    for s in systems:
        kind = f"positional, base {s.base}" if s.is_positional else "additive"
        limit = f", up to {s.max_value}" if s.max_value is not None else ""
        out(f"  {Fore.GREEN}{s.id:<12}{Style.RESET_ALL} {s.name} ({kind}{limit})")
        if s.description:
            out(wrap_after_label(" " * 15, f"{Fore.LIGHTBLACK_EX}{s.description}{Style.RESET_ALL}"))


def print_puzzle(
    puzzle: PuzzleDefinition,
    sysdef: SystemDefinition,
    options: Sequence[int | tuple[str, ...]],
    om=None,
) -> None:
    """Known pairs, the question and lettered answer options."""
    out = _out(om)
    pos = sysdef.is_positional
    title = "Sequence" if puzzle.kind is PuzzleKind.SEQUENCE else "Decode"

    out(f"{Fore.MAGENTA}{Style.BRIGHT}{title} puzzle — {sysdef.name}{Style.RESET_ALL} "
        f"(range {puzzle.difficulty.min}..{puzzle.difficulty.max})")
    out("")
    width = max(len(str(v)) for v, _ in puzzle.revealed)
    for v, g in puzzle.revealed:
        out(f"  {v:>{width}}  =  {format_glyphs(g, pos)}")
    out("")
    out(describe_puzzle(puzzle))
    for letter, opt in zip("abcdefghij", options):
        shown = spell(opt, pos) if isinstance(opt, tuple) else str(opt)
        out(f"  {Style.BRIGHT}{letter}){Style.RESET_ALL} {shown}")


def show_intro_help(om=None) -> None:
    out = _out(om)
    lines = [
        "",
        f"{Fore.GREEN}Welcome to Athena{Style.RESET_ALL}",
        f"{'-' * 78}",
        f"{Fore.LIGHTWHITE_EX}Write any whole number the way ancient cultures did.{Style.RESET_ALL}",
        "",
        f"{Fore.MAGENTA + Style.BRIGHT}Usage in interactive mode:{Style.RESET_ALL}",
        " • Enter a whole number to convert it into the active numeral system.",
        "   Spaces, underscores, commas and periods are allowed as thousand separators.",
        "   Valid prefixes are: 0b (binary), 0o (octal) and 0x (hexadecimal).",
        "   Simple arithmetic works too: 20*20+1, 2**10, (60*60)-1.",
        "",
        " • Valid commands are:",
        "   <system>            to switch numeral system (see 'list').",
        "   list                to show all numeral systems.",
        "   decode <text>       to read a numeral of the active system back into a number.",
        "   p or puzzle [level] to play a puzzle (levels: easy, medium, hard).",
        "   seq [level]         to play a sequence puzzle.",
        "   trace on|off        to show or hide the step-by-step explanation.",
        "   debug on|off|status to switch debug mode on, off or show current status.",
        "   s or settings       to show the effective settings.",
        "   profiles            to show a list of available profiles.",
        "   hist                to show a history of converted numbers.",
        "   hist clear          to empty the history.",
        "   h or help           to show this help screen.",
        "   q or quit           to quit Athena.",
        "",
        " • Enter a profile name to switch to that profile.",
        "",
        f"{Fore.CYAN}Tips:{Style.RESET_ALL}",
        " • For command-line options, run: athena -h or --help",
        "",
    ]
    out(screen_header())
    for line in lines:
        out(line)


def show_effective_settings() -> None:
    rt = _rt_current()
    flat = flatten_dotted(rt.settings)
    print(f"\n{Fore.YELLOW}Effective settings (profile: {rt.profile_name}){Style.RESET_ALL}")
    if not flat:
        print("  (built-in defaults)")
        return
    for k in sorted(flat, key=str.lower):
        v = flat[k]
        print(f"  {k:.<40} {v!r} ({typename(v)})")


def print_profiles_with_descriptions() -> None:
    pairs = profile_catalog()

    if not pairs:
        print("\nAvailable profiles: (none)")
        return

    current = last_profile()

    lines = []
    for name, desc in pairs:
        mark = "🡆" if current and name == current else " "
        lines.append(f"{mark} {name:13} — {desc}")
    print("\nAvailable profiles:\n  " + "\n  ".join(lines))
