"""Parsing of the options that configure the built-in HTTP traffic modifier."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Optional


class ModifierOptionError(ValueError):
    """Raised when a modifier option value cannot be parsed."""


def _compile(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern.encode())
    except re.error as exc:
        raise ModifierOptionError(f"invalid regexp {pattern!r}: {exc}") from exc


_TEMPLATE_REF = re.compile(rb"\{([A-Za-z0-9_]+)\}|([A-Za-z0-9_]+)")


def _group_value(match: re.Match, name: str) -> bytes:
    if name.isascii() and name.isdigit():
        index = int(name)
        if index > match.re.groups:
            return b""
        return match.group(index) or b""
    index = match.re.groupindex.get(name)
    if index is None:
        return b""
    return match.group(index) or b""


def _expand(template: bytes, match: re.Match) -> bytes:
    """Expand ``$1``, ``${1}``, ``$name``, ``${name}`` and ``$$`` in a template."""
    out = bytearray()
    pos = 0
    while pos < len(template):
        dollar = template.find(b"$", pos)
        if dollar < 0:
            out += template[pos:]
            break
        out += template[pos:dollar]
        if template[dollar + 1:dollar + 2] == b"$":
            out += b"$"
            pos = dollar + 2
            continue
        ref = _TEMPLATE_REF.match(template, dollar + 1)
        if ref is None:
            out += b"$"
            pos = dollar + 1
            continue
        name = (ref.group(1) or ref.group(2)).decode()
        out += _group_value(match, name)
        pos = ref.end()
    return bytes(out)


def _substitute(pattern: re.Pattern, target: bytes, value: bytes) -> bytes:
    return pattern.sub(lambda m: _expand(target, m), value)


@dataclass(frozen=True)
class HeaderFilter:
    """A header name and the regexp its value is checked against."""

    name: bytes
    pattern: re.Pattern


@dataclass(frozen=True)
class BasicAuthFilter:
    """A regexp matched against decoded basic-auth credentials."""

    pattern: re.Pattern


@dataclass(frozen=True)
class HashFilter:
    """A header or parameter name and the percentage of hashed values let through."""

    name: bytes
    percent: int


@dataclass(frozen=True)
class HeaderValue:
    """A header to set on every request."""

    name: str
    value: str


@dataclass(frozen=True)
class ParamValue:
    """A query parameter to set on every request."""

    name: bytes
    value: bytes


@dataclass(frozen=True)
class UrlRewrite:
    """A URL rewrite rule: a source regexp and a replacement template."""

    pattern: re.Pattern
    target: bytes

    def apply(self, path: bytes) -> Optional[bytes]:
        """Rewrite ``path`` if the rule matches it; return None otherwise."""
        if self.pattern.search(path) is None:
            return None
        return _substitute(self.pattern, self.target, path)


@dataclass(frozen=True)
class HeaderRewrite:
    """A header rewrite rule: header name, source regexp and replacement template."""

    header: bytes
    pattern: re.Pattern
    target: bytes

    def apply(self, value: bytes) -> Optional[bytes]:
        """Rewrite a header value if the rule matches it; return None otherwise."""
        if self.pattern.search(value) is None:
            return None
        return _substitute(self.pattern, self.target, value)


@dataclass(frozen=True)
class UrlRegexp:
    """A regexp matched against request paths."""

    pattern: re.Pattern


def parse_header_filter(value: str) -> HeaderFilter:
    """Parse ``Name:regexp``."""
    parts = value.split(":", 1)
    if len(parts) < 2:
        raise ModifierOptionError(
            "need both header and value, colon-delimited (ex. user_id:^169$)"
        )
    return HeaderFilter(name=parts[0].encode(), pattern=_compile(parts[1].strip()))


def parse_basic_auth_filter(value: str) -> BasicAuthFilter:
    """Parse a regexp for decoded basic-auth credentials."""
    return BasicAuthFilter(pattern=_compile(value))


_DECIMAL = re.compile(r"[0-9]+")
_OCTAL = re.compile(r"[+-]?0[0-7]+")


def _parse_int_any_base(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        if _OCTAL.fullmatch(text):
            return int(text, 8)
        return 0


def _parse_unsigned(text: str) -> int:
    return int(text) if _DECIMAL.fullmatch(text) else 0


def parse_hash_filter(value: str) -> HashFilter:
    """Parse ``Name:NN%`` (or the deprecated ``Name:num/den``)."""
    parts = value.split(":", 1)
    if len(parts) < 2:
        raise ModifierOptionError(
            "need both header and value, colon-delimited (ex. user_id:50%)"
        )
    name = parts[0].encode()
    val = parts[1].strip()
    if "%" in val:
        percent = _parse_int_any_base(val[:-1]) & 0xFFFFFFFF
    elif "/" in val:
        fraction = val.split("/")
        numerator = _parse_unsigned(fraction[0])
        denominator = _parse_unsigned(fraction[1])
        if denominator == 0:
            raise ModifierOptionError("fraction denominator must not be zero")
        percent = int((numerator / denominator) * 100) & 0xFFFFFFFF
    else:
        raise ModifierOptionError("Value should be percent and contain '%'")
    return HashFilter(name=name, percent=percent)


def parse_header(value: str) -> HeaderValue:
    """Parse ``Key: Value``."""
    parts = value.split(":", 1)
    if len(parts) != 2:
        raise ModifierOptionError("Expected `Key: Value`")
    return HeaderValue(name=parts[0].strip(), value=parts[1].strip())


def parse_param(value: str) -> ParamValue:
    """Parse ``Key=Value``."""
    parts = value.split("=", 1)
    if len(parts) != 2:
        raise ModifierOptionError("Expected `Key=Value`")
    return ParamValue(name=parts[0].strip().encode(), value=parts[1].strip().encode())


def parse_method(value: str) -> bytes:
    """Return an allowed HTTP method as bytes."""
    return value.encode()


def parse_url_rewrite(value: str) -> UrlRewrite:
    """Parse ``src_regexp:target``."""
    parts = value.split(":", 1)
    if len(parts) < 2:
        raise ModifierOptionError(
            "need both src and target, colon-delimited (ex. /a:/b)"
        )
    return UrlRewrite(pattern=_compile(parts[0]), target=parts[1].encode())


def parse_header_rewrite(value: str) -> HeaderRewrite:
    """Parse ``Header: regexp,target``."""
    message = (
        "need both header, regexp and rewrite target, colon-delimited "
        "(ex. Header: regexp,target)"
    )
    header_parts = value.split(":", 1)
    if len(header_parts) < 2:
        raise ModifierOptionError(message)
    value_parts = header_parts[1].strip().split(",", 1)
    if len(value_parts) < 2:
        raise ModifierOptionError(message)
    return HeaderRewrite(
        header=header_parts[0].encode(),
        pattern=_compile(value_parts[0]),
        target=value_parts[1].encode(),
    )


def parse_url_regexp(value: str) -> UrlRegexp:
    """Parse a regexp for request paths."""
    return UrlRegexp(pattern=_compile(value))


@dataclass
class ModifierConfig:
    """Configuration of the built-in traffic modifier."""

    url_negative_regexp: list[UrlRegexp] = field(default_factory=list)
    url_regexp: list[UrlRegexp] = field(default_factory=list)
    url_rewrite: list[UrlRewrite] = field(default_factory=list)
    header_rewrite: list[HeaderRewrite] = field(default_factory=list)
    header_filters: list[HeaderFilter] = field(default_factory=list)
    header_negative_filters: list[HeaderFilter] = field(default_factory=list)
    header_basic_auth_filters: list[BasicAuthFilter] = field(default_factory=list)
    header_hash_filters: list[HashFilter] = field(default_factory=list)
    param_hash_filters: list[HashFilter] = field(default_factory=list)
    params: list[ParamValue] = field(default_factory=list)
    headers: list[HeaderValue] = field(default_factory=list)
    methods: list[bytes] = field(default_factory=list)

    def add(self, option: str, value: str) -> None:
        """Parse ``value`` for the named command-line option and append it."""
        try:
            attribute, parser = _OPTIONS[option]
        except KeyError:
            raise ModifierOptionError(f"unknown modifier option {option!r}") from None
        getattr(self, attribute).append(parser(value))

    def is_empty(self) -> bool:
        """True when no modification or filtering is configured."""
        return not any(
            (
                self.url_regexp,
                self.url_negative_regexp,
                self.url_rewrite,
                self.header_rewrite,
                self.header_filters,
                self.header_negative_filters,
                self.header_basic_auth_filters,
                self.header_hash_filters,
                self.param_hash_filters,
                self.params,
                self.headers,
                self.methods,
            )
        )


_OPTIONS: dict[str, tuple[str, Callable[[str], object]]] = {
    "http-disallow-url": ("url_negative_regexp", parse_url_regexp),
    "http-allow-url": ("url_regexp", parse_url_regexp),
    "http-rewrite-url": ("url_rewrite", parse_url_rewrite),
    "http-rewrite-header": ("header_rewrite", parse_header_rewrite),
    "http-allow-header": ("header_filters", parse_header_filter),
    "http-disallow-header": ("header_negative_filters", parse_header_filter),
    "http-basic-auth-filter": ("header_basic_auth_filters", parse_basic_auth_filter),
    "http-header-limiter": ("header_hash_filters", parse_hash_filter),
    "http-param-limiter": ("param_hash_filters", parse_hash_filter),
    "http-set-param": ("params", parse_param),
    "http-set-header": ("headers", parse_header),
    "http-allow-method": ("methods", parse_method),
}