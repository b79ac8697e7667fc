import argparse
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TextIO

from pydantic import ValidationError

from db_engine import Engine
from db_exceptions import CommandArgumentError, CommandError, UnknownCommandError
from db_settings import LOG_LEVELS, Settings, get_settings

logger = logging.getLogger(__name__)

NULL = "NULL"
NO_TRANSACTION = "NO TRANSACTION"
NO_COMMAND = "No command"


# ======================
# Commands
# ======================

class Verb(Enum):
    SET = "SET"
    GET = "GET"
    UNSET = "UNSET"
    NUMEQUALTO = "NUMEQUALTO"
    BEGIN = "BEGIN"
    ROLLBACK = "ROLLBACK"
    COMMIT = "COMMIT"
    END = "END"


ARITY = {
    Verb.SET: 2,
    Verb.GET: 1,
    Verb.UNSET: 1,
    Verb.NUMEQUALTO: 1,
    Verb.BEGIN: 0,
    Verb.ROLLBACK: 0,
    Verb.COMMIT: 0,
    Verb.END: 0,
}


@dataclass(frozen=True)
class Command:
    verb: Verb
    args: tuple[str, ...] = field(default_factory=tuple)


def parse_command(line: str) -> Optional[Command]:
    """
    Turn one input line into a Command.

    Returns None for a blank line. Raises UnknownCommandError for a verb
    outside the command set and CommandArgumentError when the verb is missing
    arguments. Tokens past the verb's arguments are ignored.
    """
    tokens = line.split()
    if not tokens:
        return None
    name, args = tokens[0], tuple(tokens[1:])
    try:
        verb = Verb(name)
    except ValueError:
        raise UnknownCommandError(name) from None
    arity = ARITY[verb]
    if len(args) < arity:
        raise CommandArgumentError(name, arity, len(args))
    if len(args) > arity:
        logger.debug(f"Ignoring extra arguments to {name}: {args[arity:]}")
    return Command(verb, args[:arity])


# ======================
# Interpreter
# ======================

class EndOfSession(Exception):
    """Raised by execute() when END is read."""
    pass


def execute(engine: Engine, command: Command) -> Optional[str]:
    verb, args = command.verb, command.args
    if verb is Verb.SET:
        engine.set(args[0], args[1])
    elif verb is Verb.GET:
        value = engine.get(args[0])
        return NULL if value is None else value
    elif verb is Verb.UNSET:
        engine.unset(args[0])
    elif verb is Verb.NUMEQUALTO:
        return str(engine.count_equal_to(args[0]))
    elif verb is Verb.BEGIN:
        engine.begin()
    elif verb is Verb.ROLLBACK:
        if not engine.rollback():
            return NO_TRANSACTION
    elif verb is Verb.COMMIT:
        if not engine.commit():
            return NO_TRANSACTION
    elif verb is Verb.END:
        raise EndOfSession()
    else:
        raise AssertionError(f"Unhandled verb {verb}")
    return None


def process_command(engine: Engine, line: str) -> Optional[str]:
    """Run one line against the engine and return the text to print, if any."""
    try:
        command = parse_command(line)
        if command is None:
            return NO_COMMAND
        return execute(engine, command)
    except CommandError as e:
        logger.info(f"Rejected command {line.strip()!r}: {e}")
        return str(e)


def run(engine: Engine, stream: TextIO, out: TextIO = None, settings: Settings = None):
    out = out or sys.stdout
    settings = settings or get_settings()
    interactive = stream.isatty()
    while True:
        if interactive and settings.prompt:
            out.write(settings.prompt)
            out.flush()
        line = stream.readline()
        if not line:
            logger.debug("Input exhausted before END")
            return
        if settings.echo_commands:
            print(f"> {line.rstrip()}", file=out)
        try:
            result = process_command(engine, line)
        except EndOfSession:
            logger.debug("END received")
            return
        if result is not None:
            print(result, file=out)


# ======================
# Entry point
# ======================

def configure_logging(settings: Settings):
    if settings.log_file:
        handler = logging.FileHandler(settings.log_file)
    else:
        handler = logging.StreamHandler(sys.stderr)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format=settings.log_format,
        handlers=[handler],
        force=True,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="simpledb", description="In-memory key-value store with nested transactions."
    )
    parser.add_argument("script", nargs="?", help="file of commands to run (default: stdin)")
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, help="override SIMPLEDB_LOG_LEVEL"
    )
    parser.add_argument("--echo", action="store_true", help="echo each command before its output")
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        parser.error(f"invalid SIMPLEDB_* configuration: {e}")
    updates = {}
    if args.log_level:
        updates["log_level"] = args.log_level
    if args.echo:
        updates["echo_commands"] = True
    if updates:
        settings = settings.model_copy(update=updates)
    configure_logging(settings)

    engine = Engine()
    if args.script:
        with open(args.script, "r") as f:
            run(engine, f, settings=settings)
    else:
        run(engine, sys.stdin, settings=settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
