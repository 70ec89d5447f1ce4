# src/chatwork.py
# ChatWork REST API v2: post one message to a room.

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

import requests

API_BASE = "https://api.chatwork.com/v2"
TOKEN_HEADER = "X-ChatWorkToken"
TOKEN_ENV = "CHATWORK_API_TOKEN"
ROOM_ID_MAX = 2**32 - 1


# --- errors ---
class PostMessageError(Exception):
    """Anything that went wrong between building the request and reading the answer."""


class UrlParseError(PostMessageError):
    pass


class TransportError(PostMessageError):
    """Network failure, HTTP failure, or a body we couldn't decode."""


class ApiError(PostMessageError):
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("ChatWork API error: " + "; ".join(self.errors))


# --- response shapes ---
@dataclass(frozen=True)
class ErrorsResponse:
    errors: List[str]


@dataclass(frozen=True)
class MessageIdResponse:
    message_id: str


PostMessageResponse = Union[ErrorsResponse, MessageIdResponse]


@dataclass(frozen=True)
class MessageId:
    message_id: str

    def __repr__(self) -> str:
        return f"MessageId {{ message_id: {_debug_str(self.message_id)} }}"


_ESCAPES = {"\t": "\\t", "\r": "\\r", "\n": "\\n", "\\": "\\\\", '"': '\\"'}


def _debug_str(s: str) -> str:
    # \n-style escapes for the usual suspects, \u{hex} for any other unprintable
    out = []
    for ch in s:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif not ch.isprintable():
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


# --- request builder ---
def post_message_url(room_id: int) -> str:
    if isinstance(room_id, bool) or not isinstance(room_id, int) or not 0 <= room_id <= ROOM_ID_MAX:
        raise UrlParseError(f"room_id {room_id!r} is not an unsigned 32-bit integer")
    url = f"{API_BASE}/rooms/{room_id}/messages"
    prepared = requests.PreparedRequest()
    try:
        prepared.prepare_url(url, None)
    except requests.RequestException as e:
        raise UrlParseError(f"invalid url {url!r}: {e}") from e
    return prepared.url


def chatwork_api_headers(token: str) -> Dict[str, str]:
    return {TOKEN_HEADER: token}


# --- http call ---
def request_chatwork_api(url: str, headers: Mapping[str, str], body: Mapping[str, str],
                         timeout: Optional[float] = None) -> Any:
    """
    POST `body` form-encoded and return the decoded JSON.
    Status is only checked when the body isn't JSON: ChatWork answers
    a bad token with 401 + {"errors": [...]}, and that has to reach the caller as an ApiError.
    """
    try:
        r = requests.post(url, data=body, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"request to {url} failed: {e}") from e
    except UnicodeError as e:
        # http.client sends header values as latin-1
        raise TransportError(f"request to {url} could not be encoded: {e.reason}") from e
    try:
        return r.json()
    except ValueError as e:
        try:
            r.raise_for_status()
        except requests.HTTPError as http_err:
            raise TransportError(f"ChatWork error {r.status_code}: {r.text}") from http_err
        raise TransportError(f"response is not JSON: {e}") from e


# --- response mapping ---
def _is_str_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def decode_post_message_response(obj: Any) -> PostMessageResponse:
    # untagged: first matching shape wins, unknown fields are ignored
    if isinstance(obj, dict):
        if _is_str_list(obj.get("errors")):
            return ErrorsResponse(errors=list(obj["errors"]))
        if isinstance(obj.get("message_id"), str):
            return MessageIdResponse(message_id=obj["message_id"])
    raise TransportError("data did not match any variant of untagged PostMessageResponse")


def into_result(response: PostMessageResponse) -> MessageId:
    if isinstance(response, ErrorsResponse):
        raise ApiError(response.errors)
    return MessageId(message_id=response.message_id)


def post_message(token: str, room_id: int, body: str, timeout: Optional[float] = None) -> MessageId:
    # one attempt, no dedup: calling twice posts twice
    url = post_message_url(room_id)
    headers = chatwork_api_headers(token)
    raw = request_chatwork_api(url, headers, {"body": body}, timeout=timeout)
    return into_result(decode_post_message_response(raw))
