# src/cw_post_message.py
# Usage: CHATWORK_API_TOKEN=... cw-post-message <room_id> <body>

import os
import re
import sys
from typing import Mapping, Optional, Sequence, Tuple

from chatwork import ROOM_ID_MAX, TOKEN_ENV, PostMessageError, post_message

_ROOM_ID_RE = re.compile(r"\+?[0-9]+")


class CliError(Exception):
    pass


class ArgumentError(CliError):
    pass


class TokenEnvironmentError(CliError):
    pass


def usage(prog: str) -> str:
    return f"Usage: {prog} <room_id> <body>"


def parse_args(argv: Sequence[str]) -> Tuple[int, str]:
    """
    argv[0] is the program name. Returns (room_id, body); anything after body is ignored.
    """
    args = list(argv[1:])
    if not args:
        raise ArgumentError("room_id argument missing.")
    raw = args[0]
    if not _ROOM_ID_RE.fullmatch(raw) or int(raw) > ROOM_ID_MAX:
        raise ArgumentError("room_id argument is not a valid number.")
    room_id = int(raw)

    if len(args) < 2:
        raise ArgumentError("body argument missing.")
    return room_id, args[1]


def env_chatwork_token(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    token = env.get(TOKEN_ENV)
    if token is None:
        raise TokenEnvironmentError(f"{TOKEN_ENV} environment variable not present")
    return token


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    argv = sys.argv if argv is None else argv
    prog = argv[0] if argv else "cw-post-message"
    try:
        room_id, body = parse_args(argv)
        token = env_chatwork_token(environ)
        response = post_message(token, room_id, body)
    except ArgumentError as e:
        print(f"error: {e}", file=sys.stderr)
        print(usage(prog), file=sys.stderr)
        return 1
    except (CliError, PostMessageError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(repr(response))
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
