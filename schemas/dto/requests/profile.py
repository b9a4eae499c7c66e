"""
Request DTOs for profile endpoints.

CreateProfileRequest — POST /api/create-profile
UpdateProfileRequest — PUT /api/update-profile

Section models mirror the stored sub-documents; field names arrive in
camelCase from the clients.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PersonalInfoIn(_Section):
    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    mobile: str = Field(min_length=1)
    gender: str = Field(min_length=1)
    looking_for: str = Field(alias="lookingFor", min_length=1)
    profile_image: Optional[str] = Field(default=None, alias="profileImage")


class DemographicsIn(_Section):
    date_of_birth: str = Field(alias="dateOfBirth", min_length=1)
    height: str = Field(min_length=1)
    marital_status: str = Field(alias="maritalStatus", min_length=1)
    religion: str = Field(min_length=1)
    community: str = Field(min_length=1)
    mother_tongue: str = Field(alias="motherTongue", min_length=1)
    place_of_birth: Optional[str] = Field(default=None, alias="placeOfBirth")


class ProfessionalInfoIn(_Section):
    education: str = Field(min_length=1)
    field_of_study: str = Field(alias="fieldOfStudy", min_length=1)
    occupation: str = Field(min_length=1)
    income: str = Field(min_length=1)


class LocationIn(_Section):
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)


class FamilyInfoIn(_Section):
    father: Optional[str] = None
    mother: Optional[str] = None


class CredentialsIn(_Section):
    password: str
    remember_me: bool = Field(default=False, alias="rememberMe")


class CreateProfileRequest(BaseModel):
    """Request body for POST /api/create-profile."""

    model_config = ConfigDict(populate_by_name=True)

    personal_info: PersonalInfoIn = Field(alias="personalInfo")
    demographics: DemographicsIn
    professional_info: ProfessionalInfoIn = Field(alias="professionalInfo")
    location: LocationIn
    family_info: Optional[FamilyInfoIn] = Field(default=None, alias="familyInfo")
    hobbies: Optional[str] = None
    credentials: CredentialsIn
    app_version: Optional[str] = Field(default=None, alias="appVersion")


# Partial sections for updates: every field optional, only provided ones change


class PersonalInfoPatch(_Section):
    name: Optional[str] = None
    mobile: Optional[str] = None
    gender: Optional[str] = None
    looking_for: Optional[str] = Field(default=None, alias="lookingFor")
    profile_image: Optional[str] = Field(default=None, alias="profileImage")


class DemographicsPatch(_Section):
    date_of_birth: Optional[str] = Field(default=None, alias="dateOfBirth")
    height: Optional[str] = None
    marital_status: Optional[str] = Field(default=None, alias="maritalStatus")
    religion: Optional[str] = None
    community: Optional[str] = None
    mother_tongue: Optional[str] = Field(default=None, alias="motherTongue")
    place_of_birth: Optional[str] = Field(default=None, alias="placeOfBirth")


class ProfessionalInfoPatch(_Section):
    education: Optional[str] = None
    field_of_study: Optional[str] = Field(default=None, alias="fieldOfStudy")
    occupation: Optional[str] = None
    income: Optional[str] = None


class LocationPatch(_Section):
    city: Optional[str] = None
    state: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    """Request body for PUT /api/update-profile. Email and password are not editable here."""

    model_config = ConfigDict(populate_by_name=True)

    profile_id: str = Field(alias="profileId", min_length=1)
    personal_info: Optional[PersonalInfoPatch] = Field(default=None, alias="personalInfo")
    demographics: Optional[DemographicsPatch] = None
    professional_info: Optional[ProfessionalInfoPatch] = Field(
        default=None, alias="professionalInfo"
    )
    location: Optional[LocationPatch] = None
    family_info: Optional[FamilyInfoIn] = Field(default=None, alias="familyInfo")
    hobbies: Optional[str] = None
