# fifo_gains/parsers/snapshot_io.py
import json
import logging
import os
from typing import Dict, List, Mapping, Sequence

from pydantic import ValidationError

from fifo_gains.domain.lots import TaxLot
from .raw_models import RawTaxLotRecord
import fifo_gains.config as global_config

logger = logging.getLogger(__name__)


def carryover_to_json_dict(carryover: Mapping[str, Sequence[TaxLot]]) -> dict:
    return {
        "format_version": global_config.CARRYOVER_FORMAT_VERSION,
        "lots": {
            asset: [RawTaxLotRecord.from_tax_lot(lot).to_json_dict() for lot in lots]
            for asset, lots in sorted(carryover.items())
        },
    }


def carryover_from_json_dict(data: Mapping) -> Dict[str, List[TaxLot]]:
    if not isinstance(data, dict):
        raise ValueError(f"Carry-over document must be a JSON object, got {type(data).__name__}.")
    version = data.get("format_version")
    if version != global_config.CARRYOVER_FORMAT_VERSION:
        raise ValueError(f"Unsupported carry-over format_version {version!r}, expected {global_config.CARRYOVER_FORMAT_VERSION}.")
    lots_by_asset = data.get("lots")
    if not isinstance(lots_by_asset, dict):
        raise ValueError("Carry-over document has no 'lots' mapping.")

    carryover: Dict[str, List[TaxLot]] = {}
    for asset, raw_lots in lots_by_asset.items():
        lots: List[TaxLot] = []
        for position, raw_lot in enumerate(raw_lots):
            try:
                lot = RawTaxLotRecord.model_validate(raw_lot).to_tax_lot()
            except ValidationError as e:
                raise ValueError(f"Carried-over lot #{position} of asset {asset} is invalid: {e.errors()}") from e
            if lot.asset != asset:
                raise ValueError(f"Carried-over lot {lot.lot_id} is stored under {asset} but belongs to {lot.asset}.")
            lots.append(lot)
        carryover[asset] = lots
    return carryover


def save_carryover(carryover: Mapping[str, Sequence[TaxLot]], file_path: str) -> None:
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(carryover_to_json_dict(carryover), f, indent=2, ensure_ascii=False)
    logger.info(f"Saved carry-over lots for {len(carryover)} assets to {file_path}.")


def load_carryover(file_path: str) -> Dict[str, List[TaxLot]]:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Could not decode carry-over JSON from {file_path}: {e}")
        raise ValueError(f"Carry-over file {file_path} is not valid JSON: {e}") from e
    carryover = carryover_from_json_dict(data)
    logger.info(f"Loaded carry-over lots for {len(carryover)} assets from {file_path}.")
    return carryover
