"""Pydantic schemas for driver provisioning and deprovisioning endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field


class DriverCreateRequest(BaseModel):
    """Request schema for provisioning a driver account directly."""

    email: str | None = Field(None, description="Email address of the driver")
    first_name: str | None = Field(None, description="Driver first name")
    last_name: str | None = Field(None, description="Driver last name")
    phone: str | None = Field(None, description="Optional phone number")
    company_id: str | None = Field(None, description="Company the driver works for")
    parcel_rate: Decimal | str | None = Field(None, description="Pay per parcel")
    cover_rate: Decimal | str | None = Field(None, description="Pay per covered parcel")


class ProvisionedDriverResponse(BaseModel):
    """Response schema for a provisioned driver."""

    user_id: str
    driver_profile_id: str
    temporary_password: str = Field(
        ..., description="Temporary password, to share manually if the email failed"
    )
    email_sent: bool
    warning: str | None = None


class ResendCredentialsResponse(BaseModel):
    message: str = "Credentials sent successfully"
    delivery_id: str | None = None


class DeletionSummaryResponse(BaseModel):
    """Response schema for a driver deprovisioning."""

    success: bool = True
    message: str
    deleted_records: dict[str, int]
    auth_user_deleted: bool
    partial_failure: bool
    failed_tables: dict[str, str] = Field(default_factory=dict)
