"""Near-duplicate warnings for newly created entities."""

from __future__ import annotations

import logging
import unicodedata
from difflib import SequenceMatcher
from typing import TYPE_CHECKING

from bulk_import.domain.associations import extract_mapping, is_blank
from bulk_import.domain.model import FuzzyMatch, ImportAction

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bulk_import.domain.context import RowContext
    from bulk_import.domain.descriptor import DuplicateCheck, ModelDescriptor
    from bulk_import.domain.model import Record
    from bulk_import.domain.ports import ImportStore

log = logging.getLogger(__name__)


def normalize_name(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return " ".join(stripped.casefold().split())


def names_similar(left: str, right: str, *, threshold: float) -> bool:
    a, b = normalize_name(left), normalize_name(right)
    if not a or not b:
        return False
    if a in b or b in a:
        return True
    return SequenceMatcher(None, a, b).ratio() >= threshold


class DuplicateCandidateMatcher:
    """Flags stored entities in the same groups whose name resembles a new one.

    Matches are reported as warnings and kept for manual review; the new entity
    is still saved.
    """

    def __init__(self, store: ImportStore, descriptor: ModelDescriptor) -> None:
        self.store = store
        self.descriptor = descriptor

    def check(
        self,
        entity: object,
        record: Record,
        action: ImportAction,
        context: RowContext,
    ) -> FuzzyMatch | None:
        rule = self.descriptor.duplicate_check
        if rule is None or action is not ImportAction.CREATE or context.params.skip_fuzzy_search:
            return None
        groups = self._group_values(rule, record, context)
        if not groups:
            return None

        name = getattr(entity, rule.name_attribute, None)
        if not isinstance(name, str) or not name.strip():
            return None

        mapping_key = context.params.mapping_key_for(self.descriptor.association(rule.association))
        stored = self.store.find_in_groups(
            self.descriptor.model, rule.association, mapping_key, groups
        )
        candidates = tuple(
            candidate
            for candidate in stored
            if candidate is not entity and self._resembles(candidate, name, rule)
        )
        if not candidates:
            return None

        match = FuzzyMatch(entity=entity, candidates=candidates, row=context.row)
        context.run.fuzzy_matches.append(match)
        count = len(candidates)
        noun = self.descriptor.pluralized(count).lower()
        log.debug("Row %s: %s possible duplicates of %r", context.row, count, name)
        context.aggregator.report_warning(
            f"{count} {noun} found with similar {rule.name_attribute.replace('_', ' ')}: {name}",
            row=context.row,
            action=action,
        )
        return match

    @staticmethod
    def _resembles(candidate: object, name: str, rule: DuplicateCheck) -> bool:
        other = getattr(candidate, rule.name_attribute, None)
        return isinstance(other, str) and names_similar(name, other, threshold=rule.threshold)

    def _group_values(
        self, rule: DuplicateCheck, record: Record, context: RowContext
    ) -> Sequence[object]:
        mapping_key = context.params.mapping_key_for(self.descriptor.association(rule.association))
        for group_field in rule.group_fields:
            raw = record.get(group_field)
            if is_blank(raw):
                continue
            items = raw if isinstance(raw, (list, tuple, set, frozenset)) else [raw]
            return [
                value
                for value in (extract_mapping(item, mapping_key) for item in items)
                if not is_blank(value)
            ]
        return []
