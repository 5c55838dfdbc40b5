"""Repository for depreciable assets (Anlagenverzeichnis)."""

from datetime import date
from decimal import Decimal
from typing import Optional

from ...core.depreciation import dispose
from ...core.exceptions import AssetNotFoundError
from ...core.models import AllocationRatio, DepreciableAsset
from ..database import get_db
from ..query import QueryBuilder

ORDER = "acquisition_date ASC, id ASC"


class AssetsRepository:
    def _query(self) -> QueryBuilder:
        return QueryBuilder("depreciable_assets")

    def create(self, asset: DepreciableAsset) -> DepreciableAsset:
        db = get_db()
        ratio = asset.ratio
        cursor = db.conn.execute(
            """INSERT INTO depreciable_assets
               (name, acquisition_date, net_cost, useful_life_months,
                freiberuf_pct, gewerbe_pct, personal_pct, expense_id, disposal_date)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                asset.name,
                asset.acquisition_date.isoformat(),
                str(asset.net_cost),
                asset.useful_life_months,
                ratio.freiberuf_pct if ratio else None,
                ratio.gewerbe_pct if ratio else None,
                ratio.personal_pct if ratio else None,
                asset.expense_id,
                asset.disposal_date.isoformat() if asset.disposal_date else None,
            ),
        )
        if not db._in_transaction:
            db.conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def get_by_id(self, asset_id: int) -> Optional[DepreciableAsset]:
        db = get_db()
        row = self._query().where("id = ?", asset_id).fetch_one(db.conn)
        if row is None:
            return None
        return self._row_to_asset(row)

    def list_all(self) -> list[DepreciableAsset]:
        db = get_db()
        rows = self._query().order_by(ORDER).fetch_all(db.conn)
        return [self._row_to_asset(r) for r in rows]

    def list_for_year(self, year: int) -> list[DepreciableAsset]:
        """Assets acquired by the end of `year` and not disposed before it."""
        db = get_db()
        rows = (
            self._query()
            .where("acquisition_date <= ?", date(year, 12, 31).isoformat())
            .where("(disposal_date IS NULL OR disposal_date >= ?)", date(year, 1, 1).isoformat())
            .order_by(ORDER)
            .fetch_all(db.conn)
        )
        return [self._row_to_asset(r) for r in rows]

    def dispose(self, asset_id: int, disposal_date: date) -> DepreciableAsset:
        """Mark an asset as sold or retired.

        Raises:
            AssetNotFoundError: no asset with this id.
            AssetAlreadyDisposedError: the asset was disposed before.
            DisposalBeforeAcquisitionError: disposal_date precedes acquisition.
        """
        asset = self.get_by_id(asset_id)
        if asset is None:
            raise AssetNotFoundError(f"Asset {asset_id} not found")
        disposed = dispose(asset, disposal_date)
        db = get_db()
        db.conn.execute(
            """UPDATE depreciable_assets
               SET disposal_date = ?, updated_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (disposed.disposal_date.isoformat(), asset_id),
        )
        if not db._in_transaction:
            db.conn.commit()
        return disposed

    def delete(self, asset_id: int) -> bool:
        db = get_db()
        cursor = db.conn.execute(
            "DELETE FROM depreciable_assets WHERE id = ?", (asset_id,)
        )
        if not db._in_transaction:
            db.conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_asset(row) -> DepreciableAsset:
        ratio = None
        if row["freiberuf_pct"] is not None:
            ratio = AllocationRatio(
                row["freiberuf_pct"], row["gewerbe_pct"], row["personal_pct"]
            )
        return DepreciableAsset(
            id=row["id"],
            name=row["name"],
            acquisition_date=date.fromisoformat(row["acquisition_date"]),
            net_cost=Decimal(str(row["net_cost"])),
            useful_life_months=row["useful_life_months"],
            ratio=ratio,
            expense_id=row["expense_id"],
            disposal_date=(
                date.fromisoformat(row["disposal_date"]) if row["disposal_date"] else None
            ),
        )
