"""
Read-only domain records consumed by the context builder.

Records arrive from the record-fetching collaborator already loaded; the
pipeline only reads them. Enum values match the identifiers used by the
property-management backend.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum
from typing import Optional, Tuple


class BillingType(IntEnum):
    MONTHLY = 0
    DAILY = 1
    NIGHTLY = 2


class BillingMethod(IntEnum):
    INVOICE = 0
    CREDIT_CARD = 1


class DepositType(IntEnum):
    DEPOSIT = 0
    CLR = 1  # corporate letter of responsibility
    SDW = 2  # security deposit waiver


class ReservationNotice(IntEnum):
    THIRTY_DAYS = 0
    FIFTEEN_DAYS = 1
    FOURTEEN_DAYS = 2


class EntityType(IntEnum):
    UNKNOWN = 0
    ORGANIZATION = 1
    RESERVATION = 2
    COMPANY = 3
    OWNER = 4
    TENANT = 5


CHECK_IN_TIMES = {
    1: "12:00 PM",
    2: "1:00 PM",
    3: "2:00 PM",
    4: "3:00 PM",
    5: "4:00 PM",
    6: "5:00 PM",
}

CHECK_OUT_TIMES = {
    1: "8:00 AM",
    2: "9:00 AM",
    3: "10:00 AM",
    4: "11:00 AM",
    5: "12:00 PM",
    6: "1:00 PM",
}


def check_in_time(time_id: Optional[int]) -> str:
    return CHECK_IN_TIMES.get(time_id, "") if time_id else ""


def check_out_time(time_id: Optional[int]) -> str:
    return CHECK_OUT_TIMES.get(time_id, "") if time_id else ""


@dataclass(frozen=True)
class Logo:
    """
    Stored image for an office or organization.

    Either a ready data URL or raw base64 content plus its content type.
    """

    data_url: Optional[str] = None
    content: Optional[str] = None
    content_type: str = "image/png"

    def as_data_url(self) -> str:
        if self.data_url:
            return self.data_url
        if not self.content:
            return ""
        if self.content.startswith("data:"):
            return self.content
        return f"data:{self.content_type};base64,{self.content}"


@dataclass(frozen=True)
class Address:
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    is_international: bool = False


@dataclass(frozen=True)
class Property:
    property_code: str
    address: Address = field(default_factory=Address)
    suite: Optional[str] = None
    phone: Optional[str] = None
    bedrooms: int = 0
    bathrooms: float = 0
    parking_notes: Optional[str] = None
    building: Optional[str] = None
    internet_network: Optional[str] = None
    internet_password: Optional[str] = None
    tenant_key_code: Optional[str] = None
    alarm_code: Optional[str] = None


@dataclass(frozen=True)
class Reservation:
    reservation_code: str
    tenant_name: Optional[str] = None
    arrival_date: Optional[date] = None
    departure_date: Optional[date] = None
    number_of_people: int = 0
    billing_type: Optional[BillingType] = None
    billing_method: Optional[BillingMethod] = None
    billing_rate: float = 0.0
    deposit: float = 0.0
    deposit_type: DepositType = DepositType.DEPOSIT
    departure_fee: float = 0.0
    reservation_notice: Optional[ReservationNotice] = None
    check_in_time_id: Optional[int] = None
    check_out_time_id: Optional[int] = None
    has_pets: bool = False
    number_of_pets: int = 0
    pet_fee: float = 0.0
    pet_description: Optional[str] = None
    allow_extensions: bool = False


@dataclass(frozen=True)
class Company:
    name: str
    address: Address = field(default_factory=Address)


@dataclass(frozen=True)
class Contact:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Address = field(default_factory=Address)
    entity_type: EntityType = EntityType.TENANT

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass(frozen=True)
class Office:
    """Operating office and its fee defaults."""

    name: str
    phone: Optional[str] = None
    fax: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[Logo] = None
    maintenance_email: Optional[str] = None
    after_hours_phone: Optional[str] = None
    after_hours_instructions: Optional[str] = None
    default_key_fee: float = 0.0
    undisclosed_pet_fee: float = 0.0
    minimum_smoking_fee: float = 0.0
    parking_low_end: float = 0.0
    parking_high_end: float = 0.0
    days_to_refund_deposit: int = 0
    # Fees by bedroom count: 1, 2, 3, 4 bedrooms; utility_house covers 5+
    utility_fees: Tuple[Optional[float], ...] = (None, None, None, None)
    utility_house: Optional[float] = None
    maid_fees: Tuple[Optional[float], ...] = (None, None, None, None)


@dataclass(frozen=True)
class AccountingOffice:
    name: str
    address: Address = field(default_factory=Address)
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[Logo] = None
    bank_name: Optional[str] = None
    bank_routing: Optional[str] = None
    bank_account: Optional[str] = None
    bank_swift_code: Optional[str] = None
    bank_address: Optional[str] = None
    bank_phone: Optional[str] = None


@dataclass(frozen=True)
class Organization:
    name: str
    address: Address = field(default_factory=Address)
    phone: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[Logo] = None


# Free-text lease clauses, in template order
LEASE_INFORMATION_FIELDS = (
    "rentalPayment",
    "securityDeposit",
    "securityDepositWaiver",
    "cancellationPolicy",
    "keyPickUpDropOff",
    "partialMonth",
    "departureNotification",
    "holdover",
    "departureServiceFee",
    "checkoutProcedure",
    "parking",
    "rulesAndRegulations",
    "occupyingTenants",
    "utilityAllowance",
    "maidService",
    "pets",
    "smoking",
    "emergencies",
    "homeownersAssociation",
    "indemnification",
    "defaultClause",
    "attorneyCollectionFees",
    "reservedRights",
    "propertyUse",
    "miscellaneous",
)


@dataclass(frozen=True)
class LeaseInformation:
    """
    Office-authored lease clauses keyed by placeholder name.

    Clause text may itself contain {{placeholders}} such as {{billingRate}};
    they are resolved once against the generic layers before use.
    """

    clauses: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_mapping(cls, clauses) -> "LeaseInformation":
        unknown = set(clauses) - set(LEASE_INFORMATION_FIELDS)
        if unknown:
            raise ValueError(f"Unknown lease clause(s): {', '.join(sorted(unknown))}")
        return cls(tuple((name, clauses[name] or "") for name in LEASE_INFORMATION_FIELDS if name in clauses))


@dataclass(frozen=True)
class WelcomeLetterInformation:
    """Property-specific arrival details for the welcome letter."""

    arrival_instructions: Optional[str] = None
    mailbox_instructions: Optional[str] = None
    package_instructions: Optional[str] = None
    parking_information: Optional[str] = None
    access: Optional[str] = None
    amenities: Optional[str] = None
    laundry: Optional[str] = None
    provided_furnishings: Optional[str] = None
    housekeeping: Optional[str] = None
    television_source: Optional[str] = None
    internet_service: Optional[str] = None
    key_return: Optional[str] = None
    concierge: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_contact_number: Optional[str] = None


@dataclass(frozen=True)
class LedgerLine:
    description: Optional[str] = None
    amount: float = 0.0


@dataclass(frozen=True)
class Invoice:
    invoice_id: str
    invoice_name: Optional[str] = None
    invoice_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_amount: float = 0.0
    paid_amount: float = 0.0
    ledger_lines: Tuple[LedgerLine, ...] = ()

    @property
    def total_due(self) -> float:
        return (self.total_amount or 0) - (self.paid_amount or 0)
