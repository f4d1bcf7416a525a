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
Reading .well-known/webauthn documents, either from a relying party's web server
or from a local file. The document is handed to :func:`count_labels` along with
where it was read from.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

import httpx

from .validator import LabelCount, count_labels

logger = logging.getLogger(__name__)


WELL_KNOWN_PATH = "/.well-known/webauthn"
MAX_BODY_SIZE = 1 << 18  # 256 KiB
TIMEOUT = 10.0
DEFAULT_DOMAIN = "https://webauthn.io"


class SourceError(Exception):
    """A document could not be read from its source."""


def well_known_url(domain: str) -> str:
    """Gets the URL of the .well-known/webauthn document for a domain.

    :param domain: A domain name, or a URL of the relying party. Domains without
        a http(s) scheme are assumed to use https.
    :return: The URL of the document.
    """
    if not domain.startswith(("https://", "http://")):
        domain = "https://" + domain
    try:
        url = urlsplit(domain)
    except ValueError as e:
        raise SourceError(f"invalid domain: {e}")
    if not url.netloc:
        raise SourceError(f"invalid domain: {domain!r}")
    return f"{url.scheme}://{url.netloc}{WELL_KNOWN_PATH}"


def _read_limited(response: httpx.Response) -> bytes:
    body = bytearray()
    for chunk in response.iter_bytes():
        body.extend(chunk)
        if len(body) >= MAX_BODY_SIZE:
            logger.debug(f"Response body truncated to {MAX_BODY_SIZE} bytes")
            break
    return bytes(body[:MAX_BODY_SIZE])


def count_labels_from_url(
    domain: str, client: Optional[httpx.Client] = None, timeout: float = TIMEOUT
) -> LabelCount:
    """Fetches the .well-known/webauthn document of a domain and counts its labels.

    HTTP errors and unexpected content types are reported in the error_message of
    the result.

    :param domain: A domain name, or a URL of the relying party.
    :param client: Optional httpx.Client to use for the request.
    :param timeout: Timeout for the request, in seconds.
    :return: The labels found.
    :raises SourceError: If the document could not be fetched.
    """
    url = well_known_url(domain)
    logger.debug(f"Fetching {url}")

    own_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        with client.stream("GET", url) as response:
            if response.status_code != 200:
                return LabelCount(
                    url=url,
                    error_message="HTTP request failed with status code: "
                    f"{response.status_code}",
                )
            content_type = response.headers.get("Content-Type", "")
            if "application/json" not in content_type:
                return LabelCount(
                    url=url, error_message=f"unexpected content type: {content_type}"
                )
            body = _read_limited(response)
    except httpx.HTTPError as e:
        raise SourceError(f"failed to fetch well-known URL: {e}")
    finally:
        if own_client:
            client.close()

    return count_labels(body, url)


def count_labels_from_file(path: str) -> LabelCount:
    """Reads a .well-known/webauthn document from a file and counts its labels.

    :param path: The path of the file.
    :return: The labels found.
    :raises SourceError: If the file could not be read.
    """
    logger.debug(f"Reading {path}")
    try:
        with open(path, "rb") as f:
            body = f.read(MAX_BODY_SIZE)
    except OSError as e:
        raise SourceError(f"failed to open file: {e}")

    return count_labels(body, path)
