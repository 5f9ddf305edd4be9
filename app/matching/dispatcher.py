import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.matching.scoring import DEFAULT_POLICY, MatchScore, ScoringPolicy, score
from app.models.asset import Asset
from app.models.item import Item, ItemType
from app.models.notification import REF_POTENTIAL_MATCH
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Match:
    asset_id: uuid.UUID
    owner_id: int
    result: MatchScore


class MatchDispatcher:
    """Runs found items against lost-mode assets and notifies likely owners.

    ``dispatch`` is the synchronous pass. ``submit`` hands a pass to the
    worker pool and returns immediately; whatever goes wrong inside it is
    logged and dropped.
    """

    def __init__(self, engine: Engine, notifier, policy: ScoringPolicy = DEFAULT_POLICY, max_workers: int = 2):
        self.engine = engine
        self.notifier = notifier
        self.policy = policy
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="matching")

    def dispatch(self, found_item: Item, candidates: Iterable[Asset]) -> List[Match]:
        matches: List[Match] = []
        seen = set()

        for asset in candidates:
            if not asset.lost_mode or asset.id in seen:
                continue

            result = score(found_item, asset, self.policy)
            if not result.is_match:
                continue

            seen.add(asset.id)
            matches.append(Match(asset_id=asset.id, owner_id=asset.owner_id, result=result))

            try:
                self.notifier.send(
                    asset.owner_id,
                    "Potential Match Found!",
                    f"An item matching your lost asset '{asset.description}' was reported found.",
                    REF_POTENTIAL_MATCH,
                    found_item.id,
                )
            except Exception:
                logger.exception(
                    "match_notify_failed found_item=%s asset=%s owner=%s",
                    found_item.id, asset.id, asset.owner_id,
                )

        logger.info("matching_done found_item=%s matches=%d", found_item.id, len(matches))
        return matches

    def submit(self, found_item_id: uuid.UUID) -> Future:
        return self.executor.submit(self._run, found_item_id)

    def _run(self, found_item_id: uuid.UUID) -> List[Match]:
        try:
            with Session(self.engine) as session:
                found_item = session.get(Item, found_item_id)
                if not found_item or found_item.type != ItemType.FOUND:
                    logger.warning("matching_skipped found_item=%s reason=not_found", found_item_id)
                    return []

                lost_assets = session.exec(
                    select(Asset).where(Asset.lost_mode == True)  # noqa: E712
                ).all()

                return self.dispatch(found_item, lost_assets)
        except Exception:
            logger.exception("matching_failed found_item=%s", found_item_id)
            return []

    def shutdown(self, wait: bool = True):
        self.executor.shutdown(wait=wait)
