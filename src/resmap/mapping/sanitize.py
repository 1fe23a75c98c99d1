# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""UTF-8 sanitization for label values."""

from __future__ import annotations

from typing import Union


def sanitize_utf8(value: Union[str, bytes]) -> str:
    """Return *value* as valid UTF-8 text.

    Invalid byte sequences and lone surrogates become U+FFFD. Valid text is
    returned unchanged, so applying this twice equals applying it once.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return value.encode("utf-8", errors="surrogatepass").decode("utf-8", errors="replace")
    return value
