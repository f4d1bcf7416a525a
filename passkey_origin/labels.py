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
Extraction of the eTLD+1 label of a host, which is the unit browsers limit when
evaluating the origins listed by a relying party. Public suffixes are looked up
in the copy of the public suffix list bundled with tldextract, fetched from:

  https://publicsuffix.org/list/public_suffix_list.dat

The bundled list is used as-is, it is never refreshed over the network.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

import tldextract

logger = logging.getLogger(__name__)

_tld_extract = tldextract.TLDExtract(
    suffix_list_urls=(), cache_dir=None, include_psl_private_domains=True
)

_PORT = re.compile(r":\d*$")


def public_suffix(domain: str) -> str:
    """Finds the longest public suffix of a domain.

    Domains under a top-level domain missing from the list get their last label
    as suffix, following the default "*" rule of the list.

    :param domain: The domain to look up.
    :return: The public suffix.
    """
    return _tld_extract(domain).suffix or domain.rpartition(".")[2]


def extract_label(
    host: str, lookup: Optional[Callable[[str], str]] = None
) -> Optional[str]:
    """Gets the label of a host, the part preceding its public suffix.

    For example, the label of "test.example.org" is "test.example", and the label
    of "foo.co.uk" is "foo". The case of the host is kept as-is.

    :param host: The host of an origin, optionally with a port.
    :param lookup: Optional callable returning the public suffix of a domain,
        defaults to :func:`public_suffix`.
    :return: The label, or None if the host should be skipped.
    """
    if "." not in host:
        return None

    domain = _PORT.sub("", host)
    suffix = (lookup or public_suffix)(domain)
    if suffix and domain.lower().endswith(suffix.lower()):
        label = domain[: -len(suffix)]
    else:
        label = domain
    if label.endswith("."):
        label = label[:-1]

    if not label:
        # The host is itself a public suffix
        logger.debug(f"No registrable domain in host: {host}")
        return None
    return label
