from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import ForbiddenError
from domain.enums import WalkerSpecialization
from domain.models import WalkerProfile, WalkerSpecializationEntry
from domain.schemas.walker_schemas import (
    SpecializationOption,
    SpecializationResponse,
    WalkerProfileResponse,
    WalkerProfileUpdate,
)
from repositories import WalkerProfileRepository
from services.user_service import UserService

logger = logging.getLogger("offleash.walker_profiles")

PROFILE_FIELDS = (
    "bio",
    "profile_photo_url",
    "emergency_contact_name",
    "emergency_contact_phone",
    "emergency_contact_relationship",
    "years_experience",
)


def to_profile_response(
    profile: WalkerProfile, specializations: List[WalkerSpecializationEntry]
) -> WalkerProfileResponse:
    return WalkerProfileResponse(
        id=profile.id,
        user_id=profile.user_id,
        bio=profile.bio,
        profile_photo_url=profile.profile_photo_url,
        emergency_contact_name=profile.emergency_contact_name,
        emergency_contact_phone=profile.emergency_contact_phone,
        emergency_contact_relationship=profile.emergency_contact_relationship,
        years_experience=profile.years_experience or 0,
        specializations=[
            SpecializationResponse(
                id=s.id,
                specialization=s.specialization.value,
                display_name=s.specialization.display_name,
                certified=bool(s.certified),
                certification_date=s.certification_date,
                certification_expiry=s.certification_expiry,
                notes=s.notes,
            )
            for s in specializations
        ],
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


class WalkerProfileService:
    """Walker bios, emergency contacts and specializations"""

    @staticmethod
    def list_specializations() -> List[SpecializationOption]:
        return [SpecializationOption(value=s.value, display_name=s.display_name) for s in WalkerSpecialization]

    @staticmethod
    def get_or_create(db: Session, org_id: UUID, walker_id: UUID) -> WalkerProfile:
        """A walker without a profile gets an empty one on first read"""
        repo = WalkerProfileRepository(db)
        profile = repo.get_for_user(org_id, walker_id)
        if profile:
            return profile
        try:
            profile = repo.create(WalkerProfile(organization_id=org_id, user_id=walker_id))
        except Exception:
            db.rollback()
            logger.exception("Error creating profile for walker %s", walker_id)
            raise
        logger.info(f"walker_profile_created walker_id={walker_id}")
        return profile

    @staticmethod
    def get_profile(db: Session, tenant: TenantContext, walker_id: UUID) -> WalkerProfileResponse:
        UserService.get_walker(db, tenant.org_id, walker_id)
        profile = WalkerProfileService.get_or_create(db, tenant.org_id, walker_id)
        specializations = WalkerProfileRepository(db).list_specializations(profile.id)
        return to_profile_response(profile, specializations)

    @staticmethod
    def get_my_profile(db: Session, tenant: TenantContext) -> WalkerProfileResponse:
        if not tenant.is_walker:
            raise ForbiddenError("Only walkers have a walker profile")
        return WalkerProfileService.get_profile(db, tenant, tenant.user_id)

    @staticmethod
    def update_profile(
        db: Session, tenant: TenantContext, walker_id: UUID, data: WalkerProfileUpdate
    ) -> WalkerProfileResponse:
        """
        Apply the fields present in ``data``. A ``specializations`` list
        replaces the whole set; names that are not known specializations
        are skipped.
        """
        if not (tenant.is_admin or tenant.user_id == walker_id):
            raise ForbiddenError("Only admins or the walker may edit a walker profile")
        UserService.get_walker(db, tenant.org_id, walker_id)

        profile = WalkerProfileService.get_or_create(db, tenant.org_id, walker_id)
        repo = WalkerProfileRepository(db)
        changes = data.model_dump(exclude_unset=True, include=set(PROFILE_FIELDS))

        try:
            for field, value in changes.items():
                setattr(profile, field, value)

            if data.specializations is not None:
                repo.delete_specializations(profile.id)
                seen = set()
                for item in data.specializations:
                    kind = WalkerSpecialization.parse(item.specialization)
                    if kind is None or kind in seen:
                        continue
                    seen.add(kind)
                    db.add(
                        WalkerSpecializationEntry(
                            walker_profile_id=profile.id,
                            specialization=kind,
                            certified=item.certified,
                            certification_date=item.certification_date,
                            certification_expiry=item.certification_expiry,
                            notes=item.notes,
                        )
                    )
            db.commit()
            db.refresh(profile)
        except Exception:
            db.rollback()
            logger.exception("Error updating profile for walker %s", walker_id)
            raise

        logger.info(f"walker_profile_updated walker_id={walker_id} fields={sorted(changes)}")
        return to_profile_response(profile, repo.list_specializations(profile.id))
