# Copyright (c) 2018 Yubico AB
# All rights reserved.
#
#   Redistribution and use in source and binary forms, with or
#   without modification, are permitted provided that the following
#   conditions are met:
#
#    1. Redistributions of source code must retain the above copyright
#       notice, this list of conditions and the following disclaimer.
#    2. Redistributions in binary form must reproduce the above
#       copyright notice, this list of conditions and the following
#       disclaimer in the documentation and/or other materials provided
#       with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""
Validation of caller origins against the origins listed in a relying party's
.well-known/webauthn document, following the checks performed by Chromium.

The document lists origins which may use the relying party's ID::

  {"origins": ["https://example.com", "https://example.co.uk"]}

Browsers only consider origins belonging to the first MAX_LABELS distinct eTLD+1
labels of the list. Origins with further labels are never authorized.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Callable, Iterator, List, Optional, Sequence, Set
from urllib.parse import urlsplit

from .labels import extract_label

logger = logging.getLogger(__name__)


MAX_LABELS = 5


@unique
class AuthenticatorStatus(str, Enum):
    """Outcome of validating a caller origin."""

    SUCCESS = "SUCCESS"
    BAD_RELYING_PARTY_ID_JSON_PARSE_ERROR = "BAD_RELYING_PARTY_ID_JSON_PARSE_ERROR"
    BAD_RELYING_PARTY_ID_NO_JSON_MATCH = "BAD_RELYING_PARTY_ID_NO_JSON_MATCH"
    BAD_RELYING_PARTY_ID_NO_JSON_MATCH_HIT_LIMITS = (
        "BAD_RELYING_PARTY_ID_NO_JSON_MATCH_HIT_LIMITS"
    )

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Origin:
    """The scheme and host of an origin.

    The host is kept as written, including any port.
    """

    scheme: str
    host: str

    @classmethod
    def parse(cls, value: str) -> Optional[Origin]:
        """Parses an origin string, returning None if it has no usable host."""
        try:
            url = urlsplit(value)
            # Invalid ports raise ValueError
            url.port
        except ValueError:
            return None
        host = url.netloc.rpartition("@")[2]
        if not host:
            return None
        return cls(url.scheme, host)

    def __str__(self):
        return f"{self.scheme}://{self.host}"


class SeenLabels:
    """Distinct labels, in the order they were first seen."""

    def __init__(self):
        self._members: Set[str] = set()
        self._order: List[str] = []

    def add(self, label: str) -> None:
        if label not in self._members:
            self._members.add(label)
            self._order.append(label)

    def __contains__(self, label) -> bool:
        return label in self._members

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    @property
    def labels(self) -> List[str]:
        return list(self._order)


@dataclass
class LabelCount:
    """Labels found in a .well-known/webauthn document.

    :param url: The URL or file path the document was read from.
    :param unique_labels: The distinct labels found.
    :param count: The number of distinct labels.
    :param exceeds_limit: True if count is larger than MAX_LABELS.
    :param labels_found: The distinct labels, in the order they were found.
    :param error_message: Set instead of the label fields if the document could
        not be read or parsed.
    :param raw_json: The document as read.
    """

    url: str
    unique_labels: Set[str] = field(default_factory=set)
    count: int = 0
    exceeds_limit: bool = False
    labels_found: List[str] = field(default_factory=list)
    error_message: Optional[str] = None
    raw_json: str = ""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON value: {name}")


def load_json(data: bytes) -> Any:
    """Decodes a JSON document, rejecting NaN and Infinity.

    :raises ValueError: If data is not valid JSON.
    """
    try:
        return json.loads(data, parse_constant=_reject_constant)
    except RecursionError:
        raise ValueError("JSON document is nested too deeply")


def parse_origins(data: bytes) -> List[str]:
    """Parses the list of origins from a .well-known/webauthn document.

    :param data: The raw JSON document.
    :return: The origins, in listed order.
    :raises ValueError: If the document is not a JSON object with an "origins"
        array of strings.
    """
    doc = load_json(data)
    if not isinstance(doc, dict):
        raise ValueError(f"Expected a JSON object, got {type(doc).__name__}")
    if doc.get("origins") is None:
        raise ValueError("Missing required key: origins")
    origins = doc["origins"]
    if not isinstance(origins, list):
        raise ValueError("origins must be an array")
    for origin in origins:
        if not isinstance(origin, str):
            raise ValueError(f"origins must only contain strings, got {origin!r}")
    return origins


def _iter_labeled(
    origins: Sequence[str], lookup: Optional[Callable[[str], str]]
) -> Iterator[tuple[Origin, str]]:
    for value in origins:
        origin = Origin.parse(value)
        if origin is None:
            logger.debug(f"Skipping unparseable origin: {value!r}")
            continue
        label = extract_label(origin.host, lookup)
        if label is None:
            logger.debug(f"Skipping origin without label: {value!r}")
            continue
        yield origin, label


def validate_well_known_json(
    caller_origin: str,
    data: bytes,
    lookup: Optional[Callable[[str], str]] = None,
) -> AuthenticatorStatus:
    """Checks if a caller origin is authorized by a .well-known/webauthn document.

    Listed origins are scanned in order. Once MAX_LABELS distinct labels have
    been seen, origins with a new label are ignored, but scanning continues. A
    listed origin matching the scheme and host of the caller authorizes it
    immediately.

    :param caller_origin: The origin making the request.
    :param data: The raw JSON document of the relying party.
    :param lookup: Optional public suffix lookup, see :func:`extract_label`.
    :return: The outcome of the validation.
    """
    try:
        origins = parse_origins(data)
    except ValueError as e:
        logger.debug(f"Invalid .well-known/webauthn document: {e}")
        return AuthenticatorStatus.BAD_RELYING_PARTY_ID_JSON_PARSE_ERROR

    caller = Origin.parse(caller_origin)
    if caller is None:
        logger.debug(f"Unable to parse caller origin: {caller_origin!r}")
        return AuthenticatorStatus.BAD_RELYING_PARTY_ID_NO_JSON_MATCH

    seen = SeenLabels()
    hit_limits = False
    for origin, label in _iter_labeled(origins, lookup):
        if label not in seen:
            if len(seen) >= MAX_LABELS:
                logger.debug(f"Label limit reached, ignoring origin: {origin}")
                hit_limits = True
                continue
            seen.add(label)

        if origin == caller:
            return AuthenticatorStatus.SUCCESS

    if hit_limits:
        return AuthenticatorStatus.BAD_RELYING_PARTY_ID_NO_JSON_MATCH_HIT_LIMITS
    return AuthenticatorStatus.BAD_RELYING_PARTY_ID_NO_JSON_MATCH


def count_labels(
    data: bytes, target: str = "", lookup: Optional[Callable[[str], str]] = None
) -> LabelCount:
    """Counts the distinct labels of all origins in a .well-known/webauthn document.

    Unlike :func:`validate_well_known_json` every label is counted, regardless of
    MAX_LABELS.

    :param data: The raw JSON document.
    :param target: The URL or file path the document was read from.
    :param lookup: Optional public suffix lookup, see :func:`extract_label`.
    :return: The labels found, or an error message if the document is invalid.
    """
    raw_json = data.decode("utf-8", errors="replace")
    try:
        origins = parse_origins(data)
    except ValueError as e:
        return LabelCount(
            url=target, error_message=f"failed to parse JSON: {e}", raw_json=raw_json
        )

    seen = SeenLabels()
    for _, label in _iter_labeled(origins, lookup):
        seen.add(label)

    logger.debug(f"Found {len(seen)} unique labels in {target or 'document'}")
    return LabelCount(
        url=target,
        unique_labels=set(seen),
        count=len(seen),
        exceeds_limit=len(seen) > MAX_LABELS,
        labels_found=seen.labels,
        raw_json=raw_json,
    )
