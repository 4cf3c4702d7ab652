"""
Pydantic models used for request validation and API data contracts.

Each class defines the structure of data expected in API endpoints, ensuring
validation and automatic OpenAPI schema generation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class UserCredentials(BaseModel):
    """
    Represents login credentials for a user.
    """
    email: str
    """The login e-mail of the user."""
    password: str
    """The plaintext password provided for authentication."""


class SignUpDetails(BaseModel):
    """Sign-up form."""
    email: str = Field(..., description="Login e-mail address.", examples=["dr.jones@clinic.org"])
    password: str = Field(..., description="Plaintext password; must satisfy the password policy.")
    full_name: Optional[str] = Field(None, description="Display name.")
    accepted_terms: bool = Field(False, description="The user accepted the terms of service.")
    country: Optional[str] = Field(None, description="Country of practice.")
    medical_sector: Optional[str] = Field(None, description="Medical sector (e.g. 'Emergency Medicine').")


class EmailOnly(BaseModel):
    """Body carrying just an e-mail address (resend verification, forgot password)."""
    email: str


class PasswordReset(BaseModel):
    token: str
    """Token from the password-reset link."""
    new_password: str


class NewCase(BaseModel):
    """
    Represents a case being opened from the case input.
    """
    case_details: Optional[str] = Field(
        None,
        description="Opening description of the case (at least 10 characters). Omit to open an empty case.",
    )


class CaseRename(BaseModel):
    case_title: str


class FollowUpMessage(BaseModel):
    """
    Represents a follow-up message in an existing case.
    """
    content: str
    """The caller's text."""
    image: Optional[str] = Field(None, description="Base64 image, with or without a data: prefix.")
    attachments: Optional[List[str]] = Field(None, description="Stored file paths attached to the message.")


class CompletionRequest(BaseModel):
    """Payload of the bare completion endpoint."""
    prompt: str
    image: Optional[str] = None


class VerificationEmailRequest(BaseModel):
    email: str
    verification_url: str


class SupportMessageBody(BaseModel):
    content: str


class ContactSalesDetails(BaseModel):
    """Enterprise plan inquiry."""
    company_name: str
    contact_name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None


class SubscriptionActivation(BaseModel):
    """PayPal checkout approval reported by the SPA."""
    subscription_id: str = Field(..., description="Subscription ID returned by PayPal on approval.")


class BlockFlags(BaseModel):
    """Admin update of the blocking flags. Omitted flags stay unchanged."""
    is_blocked: Optional[bool] = None
    case_blocked: Optional[bool] = None


class SubscriptionUpdate(BaseModel):
    subscription_status: str = Field(..., description="'free', 'active' or 'cancelled'.")


class LeadStatusUpdate(BaseModel):
    status: str = Field(..., description="'new', 'contacted' or 'closed'.")
