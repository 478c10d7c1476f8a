"""String rules, under the ``string`` namespace.

Refinements only judge string values; anything else is left to the
``string`` rule itself.
"""

from __future__ import annotations

import ipaddress
import re
from typing import TYPE_CHECKING, Any, Mapping
from urllib.parse import urlsplit

from ..exceptions import RuleCompileError
from ..rule import NO_COERCION, FlagRule, SyncRule
from .base import ExactSize, MaxSize, MinSize, TypedRule, single_arg
from .general import Valid

if TYPE_CHECKING:
    from ..context import CompileContext, ValidationContext

# Patterns are matched with fullmatch, so they carry no anchors.
EMAIL_RE = re.compile(
    r"[-a-z\d~!$%^&*_=+}{'?]+(\.[-a-z\d~!$%^&*_=+}{'?]+)*@"
    r"([a-z\d_][-a-z\d_]*(\.[-a-z\d_]+)*\.([a-zрф]{2,6})|"
    r"([\d]{1,3}\.[\d]{1,3}\.[\d]{1,3}\.[\d]{1,3}))(:[\d]{1,5})?",
    re.IGNORECASE,
)
GUID_RE = re.compile(r"[\dA-F]{8}[-]?([\dA-F]{4}[-]?){3}[\dA-F]{12}", re.IGNORECASE)
HEX_RE = re.compile(r"[a-f\d]+", re.IGNORECASE)
ISO_DATE_RE = re.compile(
    r"([\+-]?\d{4}(?!\d{2}\b))((-?)((0[1-9]|1[0-2])(\3([12]\d|0[1-9]|3[01]))?"
    r"|W([0-4]\d|5[0-2])(-?[1-7])?|(00[1-9]|0[1-9]\d|[12]\d{2}|3([0-5]\d|6[1-6])))"
    r"([T\s]((([01]\d|2[0-3])((:?)[0-5]\d)?|24:?00)([\.,]\d+(?!:))?)?"
    r"(\17[0-5]\d([\.,]\d+)?)?([zZ]|([\+-])([01]\d|2[0-3]):?([0-5]\d)?)?)?)?"
)
CREDIT_CARD_RE = re.compile(r"\d{16}")
ALNUM_RE = re.compile(r"[a-z\d]+", re.IGNORECASE)
TOKEN_RE = re.compile(r"\w+", re.ASCII)
HOSTNAME_RE = re.compile(
    r"(([a-z\d]|[a-z\d][a-z\d\-]*[a-z\d])\.)*([a-z\d]|[a-z\d][a-z\d\-]*[a-z\d])",
    re.IGNORECASE,
)
TLD_RE = re.compile(r"[a-z¡-￿]{2,}", re.IGNORECASE)

IP_VERSIONS = ("ipv4", "ipv6")
CIDR_MODES = ("forbidden", "optional", "required")
DEFAULT_URI_PROTOCOLS = ("http", "https", "ftp")


class StringRule(TypedRule):
    accepts = (str,)


class StringValidator(SyncRule):
    """The value must be a non-empty string."""

    rule_name = "string"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return isinstance(ctx.value, str) and len(ctx.value) > 0


class Insensitive(FlagRule):
    """Makes the declared ``valid`` allow-list ignore case.

    Applies to a ``valid`` declared earlier in the chain; a ``valid``
    declared later looks for this flag itself.
    """

    rule_name = "string.insensitive"
    target = Valid
    # Repeated ``valid`` declarations merge into the first instance
    from_last = False

    def apply(self, rule: Valid, ctx: CompileContext) -> None:
        rule.case_insensitive = True


class Min(MinSize, StringRule):
    rule_name = "string.min"


class Max(MaxSize, StringRule):
    rule_name = "string.max"


class Length(ExactSize, StringRule):
    rule_name = "string.length"


class CreditCard(StringRule):
    """16-digit card number with a valid Luhn checksum."""

    rule_name = "string.creditCard"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        digits = ctx.value
        if not CREDIT_CARD_RE.fullmatch(digits):
            return False
        total = 0
        for i, char in enumerate(digits):
            digit = int(char)
            if i % 2 == 0:
                digit *= 2
                if digit > 9:
                    digit = 1 + (digit % 10)
            total += digit
        return total % 10 == 0


class RegEx(StringRule):
    rule_name = "string.regex"

    def compile(self, ctx: CompileContext) -> None:
        pattern = single_arg(self, ctx)
        self._regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        if not isinstance(self._regex, re.Pattern):
            raise RuleCompileError(self.name, f"expects a pattern, got {type(pattern).__name__}")

    def validate_sync(self, ctx: ValidationContext) -> Any:
        return bool(self._regex.search(ctx.value)) or {"regex": self._regex.pattern}


class AlphaNumeric(StringRule):
    rule_name = "string.alphanum"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ALNUM_RE.fullmatch(ctx.value) is not None


class Token(StringRule):
    rule_name = "string.token"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return TOKEN_RE.fullmatch(ctx.value) is not None


class Email(StringRule):
    rule_name = "string.email"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return EMAIL_RE.fullmatch(ctx.value) is not None


class IP(StringRule):
    """IPv4/IPv6 address, optionally with a CIDR prefix.

    Options:
        versions: Allowed versions, any of ``"ipv4"``, ``"ipv6"`` (default both)
        cidr: ``"forbidden"`` (default), ``"optional"`` or ``"required"``
    """

    rule_name = "string.ip"

    def compile(self, ctx: CompileContext) -> None:
        options = ctx.args[0] if ctx.args else None
        self._versions = list(IP_VERSIONS)
        self._cidr = "forbidden"
        if not options:
            return
        if not isinstance(options, Mapping):
            raise RuleCompileError(self.name, f"expects an options mapping, got {type(options).__name__}")

        if options.get("versions"):
            versions = list(options["versions"])
            unknown = [v for v in versions if v not in IP_VERSIONS]
            if unknown:
                raise RuleCompileError(self.name, f"unknown IP versions: {unknown}")
            self._versions = versions
        if options.get("cidr"):
            if options["cidr"] not in CIDR_MODES:
                raise RuleCompileError(self.name, f"unknown cidr mode: {options['cidr']!r}")
            self._cidr = options["cidr"]

    def validate_sync(self, ctx: ValidationContext) -> Any:
        address, sep, prefix = ctx.value.partition("/")
        not_matched = {"reason": "not-matched", "allowed": list(self._versions)}
        try:
            ip = ipaddress.ip_address(address)
        except ValueError:
            return not_matched
        if f"ipv{ip.version}" not in self._versions:
            return not_matched

        if sep:
            if not (prefix.isascii() and prefix.isdigit()) or int(prefix) > ip.max_prefixlen:
                return not_matched
            if self._cidr == "forbidden":
                return {"reason": "cidr-not-allowed"}
        elif self._cidr == "required":
            return {"reason": "cidr-required"}
        return True


class URI(StringRule):
    """Absolute URI, or a relative reference when allowed.

    Options:
        schemes: Allowed schemes, as strings (exact match) or compiled patterns
        allow_relative: Accept references without a host (default False)
    """

    rule_name = "string.uri"

    def compile(self, ctx: CompileContext) -> None:
        options = ctx.args[0] if ctx.args else None
        self._schemes: list[re.Pattern] | None = None
        self._allow_relative = False
        if not options:
            return
        if not isinstance(options, Mapping):
            raise RuleCompileError(self.name, f"expects an options mapping, got {type(options).__name__}")

        if options.get("schemes"):
            self._schemes = [
                re.compile(f"^{re.escape(matcher)}$") if isinstance(matcher, str) else matcher
                for matcher in options["schemes"]
            ]
        self._allow_relative = bool(options.get("allow_relative", False))

    def validate_sync(self, ctx: ValidationContext) -> Any:
        try:
            parts = urlsplit(ctx.value)
        except ValueError:
            return False

        if not parts.scheme and not parts.netloc:
            if parts.path:
                return self._allow_relative or {"reason": "relative-not-allowed"}
            return False

        if self._schemes is not None and not any(
            matcher.search(parts.scheme) for matcher in self._schemes
        ):
            return {
                "reason": "scheme not allowed",
                "allowed": [matcher.pattern for matcher in self._schemes],
            }
        if not parts.netloc:
            return False
        return self._is_url(parts)

    def _is_url(self, parts: Any) -> bool:
        if self._schemes is None and parts.scheme not in DEFAULT_URI_PROTOCOLS:
            return False
        try:
            parts.port
        except ValueError:
            return False
        host = parts.hostname
        if not host:
            return False
        try:
            ipaddress.ip_address(host)
            return True
        except ValueError:
            pass
        labels = host.split(".")
        return (
            len(labels) > 1
            and HOSTNAME_RE.fullmatch(host) is not None
            and TLD_RE.fullmatch(labels[-1]) is not None
        )


class GUID(StringRule):
    rule_name = "string.guid"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return GUID_RE.fullmatch(ctx.value) is not None


class Hex(StringRule):
    rule_name = "string.hex"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return HEX_RE.fullmatch(ctx.value) is not None


class Hostname(StringRule):
    rule_name = "string.hostname"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return HOSTNAME_RE.fullmatch(ctx.value) is not None


class LowerCase(StringRule):
    rule_name = "string.lowercase"

    def coerce(self, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else NO_COERCION

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ctx.value.lower() == ctx.value


class UpperCase(StringRule):
    rule_name = "string.uppercase"

    def coerce(self, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else NO_COERCION

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ctx.value.upper() == ctx.value


class Trim(StringRule):
    rule_name = "string.trim"

    def coerce(self, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else NO_COERCION

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ctx.value.strip() == ctx.value


class IsoDate(StringRule):
    rule_name = "string.isoDate"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ISO_DATE_RE.fullmatch(ctx.value) is not None


RULES = [
    StringValidator,
    Insensitive,
    Min,
    Max,
    Length,
    CreditCard,
    RegEx,
    AlphaNumeric,
    Token,
    Email,
    IP,
    URI,
    GUID,
    Hex,
    Hostname,
    LowerCase,
    UpperCase,
    Trim,
    IsoDate,
]
