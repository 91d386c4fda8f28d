"""
Grok pattern catalog and template compiler.

A template such as ``%{IPV4:client} %{WORD}`` is expanded recursively into a
single Python regular expression. Placeholders take the forms::

    %{NAME}               expand fragment NAME
    %{NAME:field}         expand NAME and capture it as ``field``
    %{NAME=regex}         define NAME inline, then expand it
    %{NAME:field=regex}   both

Captures are made for aliased placeholders at any depth and for unaliased
placeholders written directly in the template (named after the fragment).
Unaliased placeholders inside fragment definitions become non-capturing
groups.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .errors import CompileError

logger = logging.getLogger(__name__)

# =============================================================================
# BUILT-IN FRAGMENTS
# =============================================================================

DEFAULT_PATTERNS: dict[str, str] = {
    # Generic
    "WORD": r"\b\w+\b",
    "NOTSPACE": r"\S+",
    "SPACE": r"\s*",
    "DATA": r".*?",
    "GREEDYDATA": r".*",
    "QUOTEDSTRING": r"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'",
    "QS": r"%{QUOTEDSTRING}",
    "UUID": r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}",

    # Numeric
    "INT": r"[+-]?[0-9]+",
    "BASE10NUM": r"[+-]?(?:[0-9]+(?:\.[0-9]+)?|\.[0-9]+)",
    "NUMBER": r"%{BASE10NUM}",
    "BASE16NUM": r"(?<![0-9A-Fa-f])[+-]?(?:0x)?[0-9A-Fa-f]+",
    "POSINT": r"\b[1-9][0-9]*\b",
    "NONNEGINT": r"\b[0-9]+\b",

    # Identity
    "USERNAME": r"[a-zA-Z0-9._-]+",
    "USER": r"%{USERNAME}",
    "EMAILLOCALPART": r"[a-zA-Z0-9._%+-]+",
    "EMAILADDRESS": r"%{EMAILLOCALPART}@%{HOSTNAME}",

    # Network
    "IPV4": (
        r"(?<![0-9])(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9]{1,2})\.){3}"
        r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9]{1,2})(?![0-9])"
    ),
    "IPV6": (
        r"(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}"
        r"|(?:[0-9a-fA-F]{1,4}:){1,6}:[0-9a-fA-F]{1,4}"
        r"|(?:[0-9a-fA-F]{1,4}:){1,7}:"
        r"|::(?:[0-9a-fA-F]{1,4}:){0,6}[0-9a-fA-F]{1,4}"
    ),
    "IP": r"%{IPV6}|%{IPV4}",
    "MAC": r"(?:[0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}",
    "HOSTNAME": r"\b[0-9A-Za-z][0-9A-Za-z-]{0,62}(?:\.[0-9A-Za-z][0-9A-Za-z-]{0,62})*\.?\b",
    "IPORHOST": r"%{IP}|%{HOSTNAME}",
    "HOSTPORT": r"%{IPORHOST}:%{POSINT}",

    # Paths and URIs
    "UNIXPATH": r"(?:/[\w%!$@:.,+~-]*)+",
    "WINPATH": r"(?:[A-Za-z]+:|\\)(?:\\[^\\?*]*)+",
    "PATH": r"%{UNIXPATH}|%{WINPATH}",
    "URIPROTO": r"[A-Za-z][A-Za-z0-9+.-]+",
    "URIHOST": r"%{IPORHOST}(?::%{POSINT})?",
    "URIPATH": r"(?:/[A-Za-z0-9$.+!*'(),~:;=@#%&_-]*)+",
    "URIPARAM": r"\?[A-Za-z0-9$.+!*'|(),~@#%&/=:;_?\[\]<>-]*",
    "URIPATHPARAM": r"%{URIPATH}(?:%{URIPARAM})?",
    "URI": r"%{URIPROTO}://(?:%{USER}(?::[^@]*)?@)?(?:%{URIHOST})?(?:%{URIPATHPARAM})?",

    # Dates and times
    "MONTH": (
        r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?"
        r"|Jul(?:y)?|Aug(?:ust)?|Sep(?:tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\b"
    ),
    "MONTHNUM": r"0?[1-9]|1[0-2]",
    "MONTHDAY": r"0[1-9]|[12][0-9]|3[01]|[1-9]",
    "DAY": r"Mon(?:day)?|Tue(?:sday)?|Wed(?:nesday)?|Thu(?:rsday)?|Fri(?:day)?|Sat(?:urday)?|Sun(?:day)?",
    "YEAR": r"(?:\d\d){1,2}",
    "HOUR": r"2[0123]|[01]?[0-9]",
    "MINUTE": r"[0-5][0-9]",
    "SECOND": r"(?:[0-5]?[0-9]|60)(?:[:.,][0-9]+)?",
    "TIME": r"(?<![0-9])%{HOUR}:%{MINUTE}(?::%{SECOND})?(?![0-9])",
    "DATE_US": r"%{MONTHNUM}[/-]%{MONTHDAY}[/-]%{YEAR}",
    "DATE_EU": r"%{MONTHDAY}[./-]%{MONTHNUM}[./-]%{YEAR}",
    "DATE": r"%{DATE_US}|%{DATE_EU}",
    "DATESTAMP": r"%{DATE}[- ]%{TIME}",
    "ISO8601_TIMEZONE": r"Z|[+-]%{HOUR}(?::?%{MINUTE})",
    "TIMESTAMP_ISO8601": (
        r"%{YEAR}-%{MONTHNUM}-%{MONTHDAY}[T ]%{HOUR}:?%{MINUTE}"
        r"(?::?%{SECOND})?%{ISO8601_TIMEZONE}?"
    ),
    "HTTPDATE": r"%{MONTHDAY}/%{MONTH}/%{YEAR}:%{TIME} %{INT}",
    "SYSLOGTIMESTAMP": r"%{MONTH} +%{MONTHDAY} %{TIME}",

    # Logs
    "LOGLEVEL": (
        r"[Aa]lert|ALERT|[Tt]race|TRACE|[Dd]ebug|DEBUG|[Nn]otice|NOTICE|[Ii]nfo|INFO"
        r"|[Ww]arn(?:ing)?|WARN(?:ING)?|[Ee]rr(?:or)?|ERR(?:OR)?|[Cc]rit(?:ical)?|CRIT(?:ICAL)?"
        r"|[Ff]atal|FATAL|[Ss]evere|SEVERE|EMERG(?:ENCY)?|[Ee]merg(?:ency)?"
    ),
    "PROG": r"[\x21-\x5a\x5c\x5e-\x7e]+",
    "SYSLOGPROG": r"%{PROG:program}(?:\[%{POSINT:pid}\])?",
    "SYSLOGHOST": r"%{IPORHOST}",
    "SYSLOGBASE": r"%{SYSLOGTIMESTAMP:timestamp} (?:%{SYSLOGHOST:logsource} )?%{SYSLOGPROG}:",
    "HTTPDUSER": r"%{EMAILADDRESS}|%{USER}",
    "COMMONAPACHELOG": (
        r"%{IPORHOST:clientip} %{HTTPDUSER:ident} %{HTTPDUSER:auth} \[%{HTTPDATE:timestamp}\] "
        r"\"(?:%{WORD:verb} %{NOTSPACE:request}(?: HTTP/%{NUMBER:httpversion})?|%{DATA:rawrequest})\" "
        r"%{NUMBER:response} (?:%{NUMBER:bytes}|-)"
    ),
    "COMBINEDAPACHELOG": r"%{COMMONAPACHELOG} %{QS:referrer} %{QS:agent}",
}

_PLACEHOLDER = re.compile(
    r"%\{(?P<name>\w+)"
    r"(?::(?P<field>[\w.@\[\]-]+))?"
    r"(?:=(?P<definition>(?:[^{}]|\{[^{}]*\})+))?"
    r"\}"
)


@dataclass(frozen=True)
class GrokPattern:
    """A compiled template.

    ``groups`` pairs each generated regex group name with the field name it
    is reported under, in template order.
    """
    template: str
    regex: re.Pattern[str]
    groups: tuple[tuple[str, str], ...] = ()

    @property
    def fields(self) -> list[str]:
        seen: list[str] = []
        for _, name in self.groups:
            if name not in seen:
                seen.append(name)
        return seen

    def match(self, text: str) -> Optional[dict[str, str]]:
        """Search ``text`` and return the captures that took part in the match."""
        m = self.regex.search(text)
        if m is None:
            return None
        captures: dict[str, str] = {}
        for group, name in self.groups:
            value = m.group(group)
            if value is not None:
                captures[name] = value
        return captures


@dataclass
class _Expansion:
    template: str
    definitions: dict[str, str]
    named_only: bool
    groups: list[tuple[str, str]] = field(default_factory=list)

    def expand(self, text: str, stack: tuple[str, ...] = ()) -> str:
        # Anything opening with %{ that is not a whole placeholder
        if "%{" in _PLACEHOLDER.sub("", text):
            raise CompileError("malformed placeholder", self.template, stack[-1] if stack else None)

        def replace(m: re.Match) -> str:
            name = m.group("name")
            alias = m.group("field")
            if m.group("definition") is not None:
                self.definitions[name] = m.group("definition")
            if name in stack:
                raise CompileError("recursive pattern", self.template, name)
            try:
                definition = self.definitions[name]
            except KeyError:
                raise CompileError("unknown pattern", self.template, name) from None

            if alias is None and not stack and not self.named_only:
                alias = name
            if alias is None:
                return "(?:" + self.expand(definition, stack + (name,)) + ")"
            group = f"_g{len(self.groups)}"
            self.groups.append((group, alias))
            return f"(?P<{group}>" + self.expand(definition, stack + (name,)) + ")"

        return _PLACEHOLDER.sub(replace, text)


class PatternCatalog:
    """Named fragment definitions that templates are compiled against."""

    def __init__(self, aliases: Mapping[str, str] | None = None, include_defaults: bool = True):
        self.definitions: dict[str, str] = dict(DEFAULT_PATTERNS) if include_defaults else {}
        if aliases:
            self.definitions.update(aliases)

    def __len__(self) -> int:
        return len(self.definitions)

    def compile(self, template: str, named_only: bool = False) -> GrokPattern:
        """Expand ``template`` and compile it.

        Raises CompileError for malformed placeholders, unknown or recursive
        fragment references and expressions the regex engine rejects.
        """
        expansion = _Expansion(template=template, definitions=dict(self.definitions), named_only=named_only)
        expanded = expansion.expand(template)
        try:
            regex = re.compile(expanded)
        except re.error as e:
            raise CompileError(f"invalid regular expression ({e})", template) from e
        logger.debug("Compiled %r into %d capture(s)", template, len(expansion.groups))
        return GrokPattern(template=template, regex=regex, groups=tuple(expansion.groups))
