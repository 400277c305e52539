"""Line-driven console for trying out a Notifier.

Each stdin line ``EVENT [ARG ...]`` becomes ``notify(EVENT, *ARGS)``. An echo
listener is subscribed to the requested events and prints what it receives;
with ``--max-calls`` or ``--ttl`` it unregisters itself.
"""

from __future__ import annotations

import logging
import shlex
import sys
from typing import Any, Callable, TextIO

from handoff.lib.listeners import CallLimitListener, TimedListener
from handoff.lib.logger import configure_logger
from handoff.lib.notifier import Notifier
from handoff.lib.parse_args import ArgsNamespace, parse_args
from handoff.lib.settings_manager import SettingsManager


def make_echo(event: str, out: TextIO) -> Callable[..., None]:
    def echo(*payload: Any) -> None:
        print(f"{event}: {' '.join(str(p) for p in payload)}", file=out, flush=True)

    return echo


def make_listener(args: ArgsNamespace, event: str, out: TextIO) -> Callable[..., Any]:
    echo = make_echo(event, out)
    if args.max_calls is not None:
        return CallLimitListener(echo, max_calls=args.max_calls)
    if args.ttl is not None:
        return TimedListener(echo, ttl=args.ttl)
    return echo


def _exhausted(notifier: Notifier) -> bool:
    if len(notifier):
        return False
    logging.info("All listeners released themselves, stopping")
    return True


def run(notifier: Notifier, lines: TextIO) -> int:
    """Dispatch every line to the notifier until EOF or no listener is left.

    Returns the number of notifications sent.
    """
    sent = 0
    for line in lines:
        # Timed listeners can expire while we wait for input
        if _exhausted(notifier):
            break
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            event, *payload = shlex.split(line)
        except ValueError as e:
            logging.warning(f"Skipping unparsable line << {line} >>: {e}")
            continue
        notifier.notify(event, *payload)
        sent += 1
        if _exhausted(notifier):
            break
    return sent


def main(argv: list[str] | None = None, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    args = parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    log_file = configure_logger(log_level=args.log_level, log_dir=args.log_dir)
    logging.debug(f"Logging to {log_file}")

    settings = SettingsManager(config_file_path=args.config_file_path)
    notifier = Notifier.from_settings(settings)

    for event in args.event:
        notifier.register(event, make_listener(args, event, stdout))
    logging.info(f"Listening for: {', '.join(notifier.events())}")

    try:
        sent = run(notifier, stdin)
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return 130
    finally:
        notifier.unregister_all()

    logging.info(f"Sent {sent} notification(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
