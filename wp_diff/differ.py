# wp_diff/differ.py
"""
Differ: resolves both fetch handles of a page, classifies each side and
computes the structural diff between them.

A side is *absent* when its body is not JSON, is not an object/array or is
an empty collection; that is the end-of-collection signal the paginator
relies on. Fetch failures are reported to the error sink and also make the
side absent.
"""
from __future__ import annotations

import asyncio
import enum
import json
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from deepdiff import DeepDiff
from deepdiff.helper import notpresent

from wp_diff.errors import FetchError, ParseError
from wp_diff.logger import get_logger

if TYPE_CHECKING:
    from wp_diff.fetcher import FetchHandle
    from wp_diff.reporter import Reporter

__all__ = (
    "DiffKind",
    "DiffEntry",
    "ReportRecord",
    "PageState",
    "SideResult",
    "PageComparison",
    "parse_body",
    "compute_diff",
    "Differ",
    "DEFAULT_EXCLUDE_FIELDS",
)

DEFAULT_EXCLUDE_FIELDS: Tuple[str, ...] = ("count",)

PathT = Tuple[Union[str, int], ...]

log = get_logger("differ")


class DiffKind(str, enum.Enum):
    ADDED = "N"
    REMOVED = "D"
    CHANGED = "E"
    ARRAY = "A"


@dataclass(frozen=True, slots=True)
class DiffEntry:
    """One structural difference. ``ARRAY`` entries point at the list and carry ``index``/``item``."""

    kind: DiffKind
    path: PathT = ()
    lhs: Any = None
    rhs: Any = None
    index: Optional[int] = None
    item: Optional[DiffEntry] = None

    @property
    def terminal_key(self) -> Union[str, int, None]:
        if self.kind is DiffKind.ARRAY:
            return self.index
        return self.path[-1] if self.path else None

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind.value, "path": list(self.path)}
        if self.kind is DiffKind.ARRAY:
            out["index"] = self.index
            out["item"] = self.item.as_dict() if self.item else None
            return out
        out["lhs"] = self.lhs
        out["rhs"] = self.rhs
        return out


@dataclass(frozen=True, slots=True)
class ReportRecord:
    """Result of one page comparison; emitted once per page, even with no diffs."""

    url_a: str
    url_b: str
    diffs: Tuple[DiffEntry, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {"urlA": self.url_a, "urlB": self.url_b, "diff": [d.as_dict() for d in self.diffs]}


class PageState(str, enum.Enum):
    HAS_DATA = "has-data"
    END_OF_COLLECTION = "end-of-collection"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class SideResult:
    url: str
    state: PageState
    value: Any = None

    @property
    def present(self) -> bool:
        return self.state is PageState.HAS_DATA


@dataclass(frozen=True, slots=True)
class PageComparison:
    record: ReportRecord
    side_a: SideResult
    side_b: SideResult

    @property
    def both_present(self) -> bool:
        return self.side_a.present and self.side_b.present


# --------------------------------------------------------------------------- #
# Parsing & classification                                                    #
# --------------------------------------------------------------------------- #


def parse_body(body: str) -> Any:
    """``json.loads`` with failures raised as :class:`ParseError`."""
    try:
        return json.loads(body)
    except (TypeError, ValueError) as exc:
        raise ParseError(body if isinstance(body, str) else repr(body), exc) from exc


def has_data(value: Any) -> bool:
    """Only non-empty objects and arrays count as data."""
    # stricter than a bare "[]" check: null and {} also end the collection
    return isinstance(value, (dict, list)) and len(value) > 0


# --------------------------------------------------------------------------- #
# Structural diff                                                             #
# --------------------------------------------------------------------------- #

_REPORT_KINDS: Dict[str, DiffKind] = {
    "dictionary_item_added": DiffKind.ADDED,
    "dictionary_item_removed": DiffKind.REMOVED,
    "values_changed": DiffKind.CHANGED,
    "type_changes": DiffKind.CHANGED,
}
_ITERABLE_KINDS: Dict[str, DiffKind] = {
    "iterable_item_added": DiffKind.ADDED,
    "iterable_item_removed": DiffKind.REMOVED,
}


def _exclude_patterns(exclude: Iterable[str]) -> List[str]:
    # DeepDiff renders string keys as ['key'] or ["key"]
    return [rf"\[(['\"]){re.escape(name)}\1\]$" for name in exclude]


def _plain(value: Any) -> Any:
    return None if value is notpresent else value


def _sort_key(entry: DiffEntry) -> Tuple[Tuple[int, str], ...]:
    full = entry.path + ((entry.index,) if entry.kind is DiffKind.ARRAY else ())
    return tuple((0, f"{p:012d}") if isinstance(p, int) else (1, str(p)) for p in full)


def _one_sided(value: Any, exclude: frozenset, present_is_a: bool) -> List[DiffEntry]:
    items = value.items() if isinstance(value, dict) else enumerate(value)
    entries = []
    for key, item in items:
        if key in exclude:
            continue
        lhs, rhs = (item, None) if present_is_a else (None, item)
        entries.append(DiffEntry(DiffKind.ADDED, (key,), lhs=lhs, rhs=rhs))
    return entries


def compute_diff(
    value_a: Any,
    value_b: Any,
    exclude_fields: Sequence[str] = DEFAULT_EXCLUDE_FIELDS,
) -> Tuple[DiffEntry, ...]:
    """Diff *value_a* against *value_b*; ``None`` means the side is absent.

    Against an absent side every top-level element of the present side is
    reported as ``ADDED``. Entries whose terminal key is in *exclude_fields*
    are never returned.
    """
    exclude = frozenset(exclude_fields)

    if value_a is None and value_b is None:
        return ()
    if value_a is None or value_b is None:
        present = value_a if value_b is None else value_b
        if not isinstance(present, (dict, list)):
            return (DiffEntry(DiffKind.CHANGED, (), lhs=value_a, rhs=value_b),)
        return tuple(sorted(_one_sided(present, exclude, value_b is None), key=_sort_key))

    tree = DeepDiff(
        value_a,
        value_b,
        view="tree",
        exclude_regex_paths=_exclude_patterns(exclude) or None,
    )

    entries: List[DiffEntry] = []
    for report_type, levels in tree.items():
        for level in levels:
            path = tuple(level.path(output_format="list"))
            if report_type in _ITERABLE_KINDS:
                item_kind = _ITERABLE_KINDS[report_type]
                item = DiffEntry(item_kind, (), lhs=_plain(level.t1), rhs=_plain(level.t2))
                entry = DiffEntry(DiffKind.ARRAY, path[:-1], index=path[-1], item=item)
            elif report_type in _REPORT_KINDS:
                entry = DiffEntry(
                    _REPORT_KINDS[report_type], path, lhs=_plain(level.t1), rhs=_plain(level.t2)
                )
            else:
                log.debug("Ignoring DeepDiff report type %s at %s", report_type, path)
                continue
            if entry.terminal_key in exclude:
                continue
            entries.append(entry)

    return tuple(sorted(entries, key=_sort_key))


# --------------------------------------------------------------------------- #
# Differ                                                                      #
# --------------------------------------------------------------------------- #


class Differ:
    """Awaits a pair of fetch handles and emits one :class:`ReportRecord`."""

    def __init__(
        self,
        reporter: Reporter,
        exclude_fields: Sequence[str] = DEFAULT_EXCLUDE_FIELDS,
    ) -> None:
        self.reporter = reporter
        self.exclude_fields = tuple(exclude_fields)

    async def diff(self, handle_a: FetchHandle, handle_b: FetchHandle) -> PageComparison:
        outcome_a, outcome_b = await asyncio.gather(
            handle_a.resolve(), handle_b.resolve(), return_exceptions=True
        )
        side_a = self._settle(handle_a.url, outcome_a)
        side_b = self._settle(handle_b.url, outcome_b)

        record = ReportRecord(
            url_a=handle_a.url,
            url_b=handle_b.url,
            diffs=compute_diff(side_a.value, side_b.value, self.exclude_fields),
        )
        self.reporter.info(record)
        return PageComparison(record, side_a, side_b)

    def _settle(self, url: str, outcome: Union[str, BaseException]) -> SideResult:
        if isinstance(outcome, FetchError):
            self.reporter.error(outcome)
            return SideResult(url, PageState.ERROR)
        if isinstance(outcome, BaseException):
            raise outcome

        try:
            value = parse_body(outcome)
        except ParseError as exc:
            log.debug("%s: %s", url, exc)
            return SideResult(url, PageState.END_OF_COLLECTION)

        if not has_data(value):
            return SideResult(url, PageState.END_OF_COLLECTION)
        return SideResult(url, PageState.HAS_DATA, value)
