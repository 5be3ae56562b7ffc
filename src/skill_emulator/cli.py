"""skill-emulator CLI — talk to a skill from the command line."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .builder import EmulatorBuilder
from .config import get_settings
from .errors import EmulatorError
from .loader import default_model_path, load_intent_schema_files, load_interaction_model_file
from .model import InteractionModel
from .runner import ScriptRunner
from .script import ScriptLoader
from .validator import ResponseValidator


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="skill-emulator",
        description="Skill Emulator — voice skill request/response test harness",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    # Shared skill options
    skill = argparse.ArgumentParser(add_help=False)
    skill.add_argument(
        "--model",
        type=Path,
        default=settings.interaction_model,
        help="Interaction model JSON (default: ./models/<locale>.json)",
    )
    skill.add_argument("--schema", type=Path, default=None, help="Legacy intent schema JSON")
    skill.add_argument(
        "--utterances",
        type=Path,
        default=None,
        help="Sample utterances for --schema (JSON or text)",
    )
    skill.add_argument(
        "--locale",
        default=settings.locale,
        help=f"Request locale (default: {settings.locale})",
    )

    target = argparse.ArgumentParser(add_help=False)
    target.add_argument(
        "--handler",
        default=settings.handler,
        help="Local handler, 'module.function' or a .py file",
    )
    target.add_argument("--url", default=settings.skill_url, help="Remote skill URL")
    target.add_argument(
        "--timeout",
        type=float,
        default=settings.request_timeout,
        help="Remote request timeout in seconds (default: wait forever)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # ---- match -----------------------------------------------------------
    p_match = sub.add_parser(
        "match",
        parents=[skill],
        help="Show which intent and slots an utterance matches (no skill call)",
    )
    p_match.add_argument("utterance", help="Utterance to match")

    # ---- utter -----------------------------------------------------------
    p_utter = sub.add_parser(
        "utter",
        parents=[skill, target],
        help="Send one or more utterances to the skill, in order",
    )
    p_utter.add_argument("utterances", nargs="+", help="Utterances to send")

    # ---- intend ----------------------------------------------------------
    p_intend = sub.add_parser(
        "intend",
        parents=[skill, target],
        help="Send an intent with slot=value pairs",
    )
    p_intend.add_argument("intent", help="Intent name")
    p_intend.add_argument("slots", nargs="*", help="Slot values as name=value")

    # ---- run -------------------------------------------------------------
    p_run = sub.add_parser(
        "run",
        parents=[skill, target],
        help="Run a conversation script and report the results",
    )
    p_run.add_argument("script", type=Path, help="Conversation script JSON")
    p_run.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Save JSON report to this path",
    )

    return parser


def _load_model(args) -> InteractionModel:
    if args.schema:
        if not args.utterances:
            raise EmulatorError("--schema requires --utterances")
        return load_intent_schema_files(args.schema, args.utterances)
    return load_interaction_model_file(args.model or default_model_path(args.locale))


def _create_emulator(args):
    builder = EmulatorBuilder().locale(args.locale).timeout(args.timeout)
    settings = get_settings()
    if settings.application_id:
        builder.application_id(settings.application_id)
    if args.handler:
        builder.handler(args.handler)
    elif args.url:
        builder.skill_url(args.url)

    if args.schema:
        builder.intent_schema_file(args.schema, args.utterances)
    else:
        builder.interaction_model_file(args.model or default_model_path(args.locale))
    return builder.create()


def _print_response(response) -> None:
    print(f"Prompt   : {response.prompt()}")
    if response.reprompt() is not None:
        print(f"Reprompt : {response.reprompt()}")
    if response.card_title() is not None:
        print(f"Card     : {response.card_title()}")
    for directive in response.directives:
        print(f"Directive: {directive.get('type')}")
    print(f"Ended    : {response.should_end_session}")


def _parse_slots(pairs: List[str]) -> dict:
    slots = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise EmulatorError(f"Slot must be name=value, got: {pair}")
        slots[name] = value
    return slots


async def _run_match(args) -> int:
    model = _load_model(args)
    match = model.utterance(args.utterance)
    print(f"Intent : {match.intent}")
    print(f"Sample : {match.sample.phrase}")
    print(f"Slots  : {json.dumps(match.slots(), ensure_ascii=False)}")
    return 0


async def _run_utter(args) -> int:
    emulator = _create_emulator(args)
    for utterance in args.utterances:
        print(f"> {utterance}")
        response = await emulator.utter(utterance)
        _print_response(response)
    return 0


async def _run_intend(args) -> int:
    emulator = _create_emulator(args)
    response = await emulator.intend(args.intent, _parse_slots(args.slots))
    _print_response(response)
    return 0


async def _run_script(args) -> int:
    emulator = _create_emulator(args)
    script = ScriptLoader().load(args.script)
    runner = ScriptRunner(emulator, ResponseValidator())

    report = await runner.run(script)
    runner.print_report(report)

    if args.report:
        runner.save_report(report, args.report)

    return 0 if report.success else 1


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the skill-emulator CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else get_settings().log_level.upper(),
        format="%(name)s - %(levelname)s - %(message)s",
    )

    handlers = {
        "match": _run_match,
        "utter": _run_utter,
        "intend": _run_intend,
        "run": _run_script,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = asyncio.run(handler(args))
    except (EmulatorError, FileNotFoundError, ValueError) as exc:
        print(f"{args.command} FAILED — {exc}", file=sys.stderr)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
