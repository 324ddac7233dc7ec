"""Lawsuit Service - search, detail, similarity, recommendations and saved searches."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.claims import Claim
from app.models.lawsuits import Defendant, Lawsuit, SavedSearch
from app.models.users import User
from app.schemas.api import SearchParams
from app.schemas.notifications import Frequency
from app.services.entity_resolution import defendant_key

log = get_logger("lawsuit_service")


class LawsuitService:
    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Lawsuits
    # -------------------------------------------------------------------------
    def search(self, params: SearchParams) -> Dict[str, Any]:
        """Filtered, paginated lawsuit search ordered by opt-out deadline then name."""
        stmt = select(Lawsuit)

        if params.query:
            stmt = stmt.where(Lawsuit.name.ilike(f"%{params.query}%"))
        if params.category:
            stmt = stmt.where(Lawsuit.category == params.category)
        if params.deadline_after:
            stmt = stmt.where(Lawsuit.opt_out_deadline >= params.deadline_after)
        if params.deadline_before:
            stmt = stmt.where(Lawsuit.opt_out_deadline <= params.deadline_before)

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar() or 0

        offset = (params.page - 1) * params.limit
        stmt = stmt.order_by(Lawsuit.opt_out_deadline.asc().nullslast(), Lawsuit.name.asc())
        stmt = stmt.limit(params.limit).offset(offset)
        lawsuits = list(self.db.execute(stmt).scalars().all())

        return {
            "lawsuits": lawsuits,
            "total": total,
            "page": params.page,
            "limit": params.limit,
            "has_more": offset + len(lawsuits) < total,
        }

    def get(self, lawsuit_id: uuid.UUID) -> Optional[Lawsuit]:
        return self.db.get(Lawsuit, lawsuit_id)

    def similar(self, lawsuit_id: uuid.UUID, limit: int = 3) -> Optional[List[Lawsuit]]:
        """Other lawsuits naming at least one of the same defendants, or None if unknown."""
        lawsuit = self.get(lawsuit_id)
        if not lawsuit:
            return None

        keys = {defendant_key(d) for d in lawsuit.defendants}
        keys.discard(None)
        if not keys:
            return []

        # Same normalization as defendant_key
        normalized_name = func.lower(func.trim(Defendant.company_name))
        related = (
            select(Defendant.lawsuit_id)
            .where(normalized_name.in_(keys))
            .where(Defendant.lawsuit_id != lawsuit_id)
        )
        stmt = select(Lawsuit).where(Lawsuit.id.in_(related)).order_by(Lawsuit.name.asc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def recommend_for_user(self, user_id: uuid.UUID, limit: int = 10) -> Optional[List[Lawsuit]]:
        """
        Lawsuits the user has not claimed yet, soonest deadline first.

        When the profile carries ``demographics.location`` only lawsuits whose
        ``eligibility_criteria.residence`` lists that location qualify.
        Returns None for an unknown user.
        """
        user = self.db.get(User, user_id)
        if not user:
            return None

        claimed = select(Claim.lawsuit_id).where(Claim.user_id == user_id)
        stmt = (
            select(Lawsuit)
            .where(Lawsuit.id.not_in(claimed))
            .order_by(Lawsuit.opt_out_deadline.asc().nullslast(), Lawsuit.name.asc())
        )

        location = (user.demographics or {}).get("location")
        if not location:
            return list(self.db.execute(stmt.limit(limit)).scalars().all())

        recommendations: List[Lawsuit] = []
        for lawsuit in self.db.execute(stmt).scalars():
            if _resides_in(lawsuit, str(location)):
                recommendations.append(lawsuit)
                if len(recommendations) >= limit:
                    break
        log.debug(f"{len(recommendations)} recommendations for user={user_id} in {location}")
        return recommendations

    def social_proof(self, lawsuit_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        """Claim counts and average payout for a lawsuit, or None if unknown."""
        lawsuit = self.get(lawsuit_id)
        if not lawsuit:
            return None

        total = self.db.execute(select(func.count()).where(Claim.lawsuit_id == lawsuit_id)).scalar() or 0
        approved = (
            self.db.execute(
                select(func.count()).where(Claim.lawsuit_id == lawsuit_id, Claim.status == "approved")
            ).scalar()
            or 0
        )
        return {
            "total_claims": total,
            "approved_claims": approved,
            "average_payout": (lawsuit.success_metrics or {}).get("average_payout"),
        }

    # -------------------------------------------------------------------------
    # Saved searches
    # -------------------------------------------------------------------------
    def save_search(self, user_id: uuid.UUID, params: SearchParams) -> Optional[SavedSearch]:
        if not self.db.get(User, user_id):
            return None
        saved = SavedSearch(
            user_id=user_id,
            search_query=params.model_dump(mode="json", exclude_none=True),
            notification_enabled=False,
        )
        self.db.add(saved)
        self.db.commit()
        self.db.refresh(saved)
        log.info(f"Saved search {saved.id} for user={user_id}")
        return saved

    def list_saved_searches(self, user_id: uuid.UUID) -> List[SavedSearch]:
        stmt = select(SavedSearch).where(SavedSearch.user_id == user_id).order_by(SavedSearch.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def delete_saved_search(self, search_id: uuid.UUID) -> bool:
        saved = self.db.get(SavedSearch, search_id)
        if not saved:
            return False
        self.db.delete(saved)
        self.db.commit()
        return True

    def update_saved_search_notifications(
        self,
        search_id: uuid.UUID,
        enabled: bool,
        frequency: Optional[Frequency] = None,
    ) -> Optional[SavedSearch]:
        saved = self.db.get(SavedSearch, search_id)
        if not saved:
            return None
        saved.notification_enabled = enabled
        if frequency is not None:
            saved.notification_frequency = frequency.value
        self.db.commit()
        self.db.refresh(saved)
        return saved


def _resides_in(lawsuit: Lawsuit, location: str) -> bool:
    residence = (lawsuit.eligibility_criteria or {}).get("residence")
    if isinstance(residence, str):
        residence = [residence]
    if not isinstance(residence, list):
        return False
    wanted = location.strip().lower()
    return any(isinstance(place, str) and place.strip().lower() == wanted for place in residence)
