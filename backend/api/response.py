"""
Operation result envelope returned by every API handler.

All endpoints report their outcome with the same compact JSON object:
    {
        "r": 0,             # outcome code (always present)
        "ro": ...,          # payload, omitted when absent
        "em": "...",        # error message, omitted when empty
        "ec": 0             # error code (always present)
    }

Outcome codes are fixed on the wire: 0=success, 1=logic error, 2=failure,
3=authentication error, 4=authorization error.
"""
from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_ENCODER = "api.response.ResultJSONEncoder"

AUTHENTICATION_ERROR_MESSAGE = "Authentication error"
AUTHORIZATION_ERROR_MESSAGE = "Authorization error"

# ec is an unsigned byte on the wire
MAX_ERROR_CODE = 255


class Outcome(IntEnum):
    """How an operation concluded. Values are the wire codes."""

    SUCCESS = 0
    LOGIC_ERROR = 1
    FAILURE = 2
    AUTHENTICATION_ERROR = 3
    AUTHORIZATION_ERROR = 4


class ResultSerializationError(Exception):
    """Raised when an envelope's payload cannot be encoded as JSON."""


class ResultDecodeError(Exception):
    """Raised when wire data does not describe a valid envelope."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

class ResultJSONEncoder(DjangoJSONEncoder):
    """DjangoJSONEncoder that also understands envelopes and dataclasses."""

    def default(self, o):
        if isinstance(o, OperationResult):
            return o.to_dict()
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            # Shallow: nested values go back through the encoder, which keeps
            # its circular-reference check in play.
            return {f.name: getattr(o, f.name) for f in dataclasses.fields(o)}
        return super().default(o)


def _encoder_class() -> type[json.JSONEncoder]:
    return import_string(getattr(settings, "OPERATION_RESULT_JSON_ENCODER", DEFAULT_ENCODER))


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OperationResult:
    """Outcome of a backend operation, ready to be written to a client."""

    outcome: Outcome
    payload: Any = None
    error_message: str = ""
    error_code: int = 0

    def __post_init__(self):
        """Hold construction to what from_dict accepts back off the wire."""
        if isinstance(self.outcome, bool) or not isinstance(self.outcome, int):
            raise TypeError(f"outcome must be an Outcome, got {type(self.outcome).__name__}")
        # Raises ValueError for codes outside the closed set
        object.__setattr__(self, "outcome", Outcome(self.outcome))

        if self.error_message is None:
            object.__setattr__(self, "error_message", "")
        elif not isinstance(self.error_message, str):
            raise TypeError(f"error_message must be a string, got {type(self.error_message).__name__}")

        if isinstance(self.error_code, bool) or not isinstance(self.error_code, int):
            raise TypeError(f"error_code must be an integer, got {type(self.error_code).__name__}")
        if not 0 <= self.error_code <= MAX_ERROR_CODE:
            raise ValueError(f"error_code out of range 0..{MAX_ERROR_CODE}: {self.error_code}")

    @classmethod
    def success(cls, payload: Any = None) -> OperationResult:
        return cls(Outcome.SUCCESS, payload)

    @classmethod
    def failure(cls) -> OperationResult:
        return cls(Outcome.FAILURE)

    @classmethod
    def failure_with_payload(cls, payload: Any) -> OperationResult:
        return cls(Outcome.FAILURE, payload)

    @classmethod
    def logic_error(cls, message: str, payload: Any = None) -> OperationResult:
        """Business rule rejection; payload may carry details such as field errors."""
        return cls(Outcome.LOGIC_ERROR, payload, message)

    @classmethod
    def authentication_error(cls) -> OperationResult:
        return cls(Outcome.AUTHENTICATION_ERROR, error_message=AUTHENTICATION_ERROR_MESSAGE)

    @classmethod
    def authorization_error(cls) -> OperationResult:
        return cls(Outcome.AUTHORIZATION_ERROR, error_message=AUTHORIZATION_ERROR_MESSAGE)

    def is_success(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    # --- Wire form ---

    def to_dict(self) -> dict:
        """Return the wire mapping, dropping an absent payload and an empty message."""
        body = {"r": int(self.outcome)}
        if self.payload is not None:
            body["ro"] = self.payload
        if self.error_message:
            body["em"] = self.error_message
        body["ec"] = self.error_code
        return body

    def serialize(self) -> bytes:
        """Encode the envelope as compact UTF-8 JSON.

        Raises ResultSerializationError when the payload holds something the
        encoder cannot represent (cycles, unsupported types, NaN/Infinity,
        nesting deeper than the interpreter's recursion limit).
        """
        try:
            text = json.dumps(
                self.to_dict(),
                cls=_encoder_class(),
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise ResultSerializationError(str(e)) from e
        return text.encode("utf-8")

    def write_to(self, response: HttpResponse, request=None) -> HttpResponse:
        """Write the encoded envelope into ``response``.

        The body is encoded before anything touches the response, so a
        payload that cannot be encoded never leaves partial JSON behind: the
        response becomes a plain-text 500 carrying the encoder's message.
        The status is otherwise left as the caller set it. ``request`` is
        accepted for handler symmetry and not inspected.
        """
        try:
            body = self.serialize()
        except ResultSerializationError as e:
            logger.error("Failed to serialize %s result", self.outcome.name, exc_info=True)
            response.status_code = 500
            response["Content-Type"] = "text/plain; charset=utf-8"
            response["X-Content-Type-Options"] = "nosniff"
            response.content = f"{e}\n"
            return response

        response.write(body)
        return response

    def as_response(self, request=None) -> HttpResponse:
        """Return a new JSON HttpResponse holding this envelope."""
        return self.write_to(HttpResponse(content_type="application/json"), request)

    # --- Decoding ---

    @classmethod
    def from_dict(cls, data: dict) -> OperationResult:
        """Build an envelope from its wire mapping.

        Raises ResultDecodeError if 'r' is missing or unknown, 'em' is not a
        string, or 'ec' is not an integer in 0..255.
        """
        if not isinstance(data, dict):
            raise ResultDecodeError("Envelope must be a JSON object")
        if "r" not in data:
            raise ResultDecodeError("Missing required field 'r'")

        code = data["r"]
        if isinstance(code, bool) or not isinstance(code, int):
            raise ResultDecodeError(f"'r' must be an integer, got {type(code).__name__}")
        try:
            outcome = Outcome(code)
        except ValueError:
            raise ResultDecodeError(f"Unknown outcome code: {code}") from None

        message = data.get("em", "")
        if message is None:
            message = ""
        if not isinstance(message, str):
            raise ResultDecodeError("'em' must be a string")

        error_code = data.get("ec", 0)
        if isinstance(error_code, bool) or not isinstance(error_code, int):
            raise ResultDecodeError("'ec' must be an integer")
        if not 0 <= error_code <= MAX_ERROR_CODE:
            raise ResultDecodeError(f"'ec' out of range 0..{MAX_ERROR_CODE}: {error_code}")

        return cls(outcome, data.get("ro"), message, error_code)

    @classmethod
    def from_json(cls, raw: str | bytes) -> OperationResult:
        """Parse a JSON document and decode it with from_dict."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise ResultDecodeError(f"Invalid JSON: {e}") from e
        return cls.from_dict(data)
