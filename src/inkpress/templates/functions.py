"""Helper functions available inside every template.

The set is closed: every compiled template gets the same read-only table
built by ``build_function_library``. Adding a helper means adding it here.
"""

import re
from collections.abc import Callable, Mapping
from functools import partial
from types import MappingProxyType
from typing import Any

from markupsafe import Markup

from inkpress.l10n import StringTables

BRAND_TEXT = "write.as"
BRAND_LINK = '<a href="https://writefreely.org">writefreely</a>'

# First letter of a word: not preceded by another word character or an apostrophe
_WORD_START_RE = re.compile(r"(?<![\w'’])([^\W\d_])")


def large_num_fmt(n: int) -> str:
    """Format an integer with thousands separators (1234567 -> "1,234,567")."""
    return f"{int(n):,}"


def pluralize(singular: str, plural: str, n: int) -> str:
    """Choose the singular word only when n is exactly 1."""
    if n == 1:
        return singular
    return plural


def is_rtl(direction: str) -> bool:
    return direction == "rtl"


def is_ltr(direction: str) -> bool:
    return direction in ("ltr", "auto")


def title(text: str) -> str:
    """Capitalize the first letter of every word, leaving other letters as-is.

    Unlike ``str.title`` this does not lowercase the rest of a word and does
    not start a new word after an apostrophe ("o'neil's BBQ" -> "O'neil's BBQ").
    """
    return _WORD_START_RE.sub(lambda m: m.group(1).title(), text)


def has_prefix(s: str, prefix: str) -> bool:
    return s.startswith(prefix)


def has_suffix(s: str, suffix: str) -> bool:
    return s.endswith(suffix)


def make_dict(*values: Any) -> dict[str, Any]:
    """Build a mapping from alternating keys and values.

    Lets a template pass several named values to an included fragment:
    ``{% with args = dict("post", p, "single", true) %}``. Values may be of
    any type; keys must be strings.

    Raises:
        ValueError: If the number of arguments is odd or a key is not a string
    """
    if len(values) % 2 != 0:
        raise ValueError("dict: invalid number of parameters")
    result: dict[str, Any] = {}
    for i in range(0, len(values), 2):
        key = values[i]
        if not isinstance(key, str):
            raise ValueError("dict: keys must be strings")
        result[key] = values[i + 1]
    return result


def local_str(tables: StringTables, term: str, lang: str) -> str:
    """Look up a term for a language, falling back to the default table.

    An empty translation counts as missing.
    """
    s = tables.strings(lang).get(term, "")
    if not s:
        s = tables.strings("").get(term, "")
    return s


def local_html(tables: StringTables, term: str, lang: str) -> Markup:
    """Look up a term and mark it as safe HTML.

    The first occurrence of the brand name is replaced with a link. The result
    bypasses autoescaping, so string tables must never hold user content.
    """
    s = local_str(tables, term, lang)
    s = s.replace(BRAND_TEXT, BRAND_LINK, 1)
    return Markup(s)


def build_function_library(tables: StringTables) -> Mapping[str, Callable[..., Any]]:
    """Build the read-only name -> function table injected into templates.

    Args:
        tables: String tables used by localstr and localhtml

    Returns:
        Immutable mapping of template function names to callables
    """
    return MappingProxyType({
        "largeNumFmt": large_num_fmt,
        "pluralize": pluralize,
        "isRTL": is_rtl,
        "isLTR": is_ltr,
        "localstr": partial(local_str, tables),
        "localhtml": partial(local_html, tables),
        "tolower": str.lower,
        "title": title,
        "hasPrefix": has_prefix,
        "hasSuffix": has_suffix,
        "dict": make_dict,
    })

