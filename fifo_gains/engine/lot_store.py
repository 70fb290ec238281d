# fifo_gains/engine/lot_store.py
import logging
from collections import deque
from decimal import Decimal
from typing import Deque, Dict, Iterable, List, Mapping, Optional

from fifo_gains.domain.lots import TaxLot

logger = logging.getLogger(__name__)


class LotStore:
    """
    Per-asset FIFO queues of open tax lots.

    Lots are appended at the tail and only ever leave from the head, so the queue
    order is the acquisition order the caller fed in. Closed lots move to an audit
    list and are never matched again. Everything handed out is a copy.
    """

    def __init__(self):
        self._open_lots: Dict[str, Deque[TaxLot]] = {}
        self._closed_lots: Dict[str, List[TaxLot]] = {}

    @classmethod
    def from_snapshots(cls, snapshots: Optional[Mapping[str, Iterable[TaxLot]]]) -> "LotStore":
        store = cls()
        if not snapshots:
            return store
        for asset, lots in snapshots.items():
            for lot in lots:
                if lot.asset != asset:
                    raise ValueError(f"Carried-over lot {lot.lot_id} belongs to asset {lot.asset}, not {asset}.")
                store.add_lot(lot.copy())
        logger.debug(f"Seeded lot store with {sum(len(q) for q in store._open_lots.values())} carried-over lots "
                     f"across {len(store._open_lots)} assets.")
        return store

    def add_lot(self, lot: TaxLot) -> None:
        if lot.closed:
            raise ValueError(f"Cannot add closed lot {lot.lot_id} for asset {lot.asset} to the open queue.")
        self._open_lots.setdefault(lot.asset, deque()).append(lot)

    def peek_oldest(self, asset: str) -> Optional[TaxLot]:
        queue = self._open_lots.get(asset)
        if not queue:
            return None
        return queue[0]

    def remove_if_fully_consumed(self, asset: str) -> Optional[TaxLot]:
        queue = self._open_lots.get(asset)
        if not queue or not queue[0].closed:
            return None
        closed_lot = queue.popleft()
        self._closed_lots.setdefault(asset, []).append(closed_lot)
        logger.debug(f"Lot {closed_lot.lot_id} for asset {asset} fully consumed and closed.")
        return closed_lot

    def snapshot(self, asset: str) -> List[TaxLot]:
        return [lot.copy() for lot in self._open_lots.get(asset, ())]

    def snapshots(self) -> Dict[str, List[TaxLot]]:
        return {asset: self.snapshot(asset) for asset in self.assets() if self._open_lots.get(asset)}

    def closed_lots(self, asset: str) -> List[TaxLot]:
        return [lot.copy() for lot in self._closed_lots.get(asset, ())]

    def all_closed_lots(self) -> Dict[str, List[TaxLot]]:
        return {asset: self.closed_lots(asset) for asset in sorted(self._closed_lots)}

    def open_quantity(self, asset: str) -> Decimal:
        return sum((lot.remaining_quantity for lot in self._open_lots.get(asset, ())), Decimal(0))

    def assets(self) -> List[str]:
        return sorted(set(self._open_lots) | set(self._closed_lots))
