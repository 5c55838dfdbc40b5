"""Repository for named allocation rules."""

import dataclasses
from typing import Optional

from ...core.models import AllocationRatio, AllocationRule
from ..query import BaseRepository, RowMapper


class AllocationRulesRepository(BaseRepository[AllocationRule]):
    _table = "allocation_rules"
    _mapper = RowMapper(AllocationRule)

    def create(self, name: str, ratio: AllocationRatio) -> AllocationRule:
        return self._insert(AllocationRule(
            name=name,
            freiberuf_pct=ratio.freiberuf_pct,
            gewerbe_pct=ratio.gewerbe_pct,
            personal_pct=ratio.personal_pct,
        ))

    def get_by_name(self, name: str) -> Optional[AllocationRule]:
        row = self._query().where("name = ?", name).fetch_one(self._db().conn)
        return self._mapper.map(row) if row else None

    def list_all(self) -> list[AllocationRule]:
        rows = self._query().order_by("name ASC").fetch_all(self._db().conn)
        return self._mapper.map_all(rows)

    def update_ratio(self, rule: AllocationRule, ratio: AllocationRatio) -> AllocationRule:
        """Replace the percentages of an existing rule. Assets keep their own copy."""
        return self.save(dataclasses.replace(
            rule,
            freiberuf_pct=ratio.freiberuf_pct,
            gewerbe_pct=ratio.gewerbe_pct,
            personal_pct=ratio.personal_pct,
        ))
