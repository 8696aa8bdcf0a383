"""
Context Builder

Turns domain records into the named layers of a ResolutionContext, one builder
per record kind, and assembles the layer stack for each document kind.

Layer order is precedence order: a later layer overrides an earlier one only
for keys it defines itself. Formatting rules (dates, money, phone numbers) live
here so templates receive finished strings.
"""

from datetime import date
from typing import Callable, Dict, Optional

from rentdocs.contexts.templating.fragment_registry import FragmentRegistry, get_fragment_registry
from rentdocs.contexts.templating.records import (
    AccountingOffice,
    Address,
    BillingMethod,
    BillingType,
    Company,
    Contact,
    DepositType,
    EntityType,
    Invoice,
    LeaseInformation,
    Office,
    Organization,
    Property,
    Reservation,
    ReservationNotice,
    WelcomeLetterInformation,
    check_in_time,
    check_out_time,
)
from rentdocs.contexts.templating.resolution_context import ResolutionContext
from rentdocs.contexts.templating.resolver import PlaceholderResolver
from rentdocs.utils.formatting import (
    currency,
    join_present,
    long_date,
    money,
    phone_number,
    short_date,
    website_with_protocol,
)
from rentdocs.utils.timestamp import today

Layer = Dict[str, str]

# Predicate names used by lease templates
DEPOSIT_TYPE_SDW = "depositTypeSDW"
BILLING_TYPE_MONTHLY = "billingTypeMonthly"

BILLING_TYPE_TEXT = {
    BillingType.MONTHLY: ("Monthly", "monthly", "month", "day"),
    BillingType.DAILY: ("Daily", "daily", "day", "day"),
    BillingType.NIGHTLY: ("Nightly", "nightly", "night", "night"),
}

BILLING_METHOD_TEXT = {
    BillingMethod.INVOICE: "Invoice",
    BillingMethod.CREDIT_CARD: "Credit Card",
}

NOTICE_DAYS = {
    ReservationNotice.THIRTY_DAYS: "30",
    ReservationNotice.FIFTEEN_DAYS: "15",
    ReservationNotice.FOURTEEN_DAYS: "14",
}


# ---------------------------------------------------------------------------
# Address helpers
# ---------------------------------------------------------------------------


def format_address(address: Address, suite: Optional[str] = None) -> str:
    """Comma-joined address; international addresses use both address lines."""
    unit = f"#{suite}" if suite else None
    if address.is_international:
        return join_present([address.address1, unit, address.address2])
    return join_present([address.address1, unit, address.city, address.state, address.zip])


def format_mailing_address(address: Address) -> str:
    """Single-line "street city, state zip" form used on invoices."""
    return (
        f"{address.address1 or ''} {address.city or ''}, {address.state or ''} {address.zip or ''}"
    ).strip()


def _is_company_contact(contact: Contact, company: Optional[Company]) -> bool:
    return contact.entity_type == EntityType.COMPANY and company is not None


# ---------------------------------------------------------------------------
# Derived text
# ---------------------------------------------------------------------------


def responsible_party(contact: Contact, company: Optional[Company] = None) -> str:
    """Company name for company contacts, otherwise the contact's full name."""
    if _is_company_contact(contact, company):
        return company.name
    return contact.full_name


def responsible_noun(contact: Contact, company: Optional[Company] = None) -> str:
    return "Company" if _is_company_contact(contact, company) else "Tenant"


def deposit_requirement_text(reservation: Reservation) -> str:
    if reservation.deposit_type == DepositType.CLR:
        return "Corporate Letter of Responsibility"
    if reservation.deposit_type == DepositType.SDW:
        return f"${money(reservation.deposit)} per month"
    return f"${money(reservation.deposit)} "


def deposit_requirement_note(reservation: Reservation) -> str:
    if reservation.deposit_type == DepositType.CLR:
        return "(Required to reserve unit)"
    if reservation.deposit_type == DepositType.SDW:
        return "(To be included with monthly rent)"
    return "(See below)"


def security_deposit_text(reservation: Reservation) -> str:
    if reservation.deposit_type == DepositType.CLR:
        return "$0.00"
    if reservation.deposit_type == DepositType.SDW:
        return f"${money(reservation.deposit)} per month"
    return f"${money(reservation.deposit)} "


def security_prorate_text(reservation: Reservation) -> str:
    if reservation.deposit_type == DepositType.CLR:
        return "$0.00"
    prorate_unit = BILLING_TYPE_TEXT.get(reservation.billing_type, ("", "", "", ""))[3]
    return f"${money((reservation.deposit or 0) / 30)} per {prorate_unit}"


def partial_month_text(reservation: Reservation) -> str:
    if reservation.billing_type == BillingType.DAILY:
        return f"${money(reservation.billing_rate)} per day."
    if reservation.billing_type == BillingType.NIGHTLY:
        return f"${money(reservation.billing_rate)} per night."
    return "Monthly Rate divided by 30 days."


def pet_text(reservation: Reservation) -> str:
    if not reservation.has_pets:
        return "None"
    return (
        f"${money(reservation.pet_fee)}     {reservation.number_of_pets} pet(s)    "
        f"Type(s):{reservation.pet_description or ''}"
    )


def notice_text(reservation: Reservation) -> str:
    days = NOTICE_DAYS.get(reservation.reservation_notice)
    return f"({days} day written notice is required)" if days else ""


def organization_display_name(organization: Organization, office: Optional[Office] = None) -> str:
    if office is not None:
        return f"{organization.name} {office.name}"
    return organization.name


def _fee_for_bedrooms(fees, bedrooms: int, fallback: Optional[float]) -> str:
    if 1 <= bedrooms <= len(fees):
        fee = fees[bedrooms - 1]
    else:
        fee = fallback
    return money(fee) if fee is not None else ""


def utility_penalty_fee(office: Office, property: Property) -> str:
    """Utility allowance by bedroom count; five or more uses the house rate."""
    return _fee_for_bedrooms(office.utility_fees, property.bedrooms, office.utility_house)


def maid_service_fee(office: Office, property: Property) -> str:
    """Maid service fee by bedroom count; five or more uses the four-bedroom rate."""
    return _fee_for_bedrooms(office.maid_fees, property.bedrooms, office.maid_fees[-1])


def _logo_url(*owners) -> str:
    """First available logo among the owners, as a data URL."""
    for owner in owners:
        if owner is not None and owner.logo is not None:
            url = owner.logo.as_data_url()
            if url:
                return url
    return ""


# ---------------------------------------------------------------------------
# Layer builders
# ---------------------------------------------------------------------------


def contact_layer(contact: Contact, company: Optional[Company] = None) -> Layer:
    """Contact fields; company contacts use the company's address."""
    address = company.address if _is_company_contact(contact, company) else contact.address
    layer = {
        "clientCode": contact.contact_code or "",
        "responsibleParty": responsible_party(contact, company),
        "responsiblePartyNoun": responsible_noun(contact, company),
        "contactName": contact.full_name,
        "contactPhone": phone_number(contact.phone),
        "contactEmail": contact.email or "",
        "contactAddress1": address.address1 or "",
        "contactAddress2": address.address2 or "",
        "contactCity": address.city or "",
        "contactState": address.state or "",
        "contactZip": address.zip or "",
        "contactAddress": format_address(address),
    }
    if company is not None:
        layer["companyName"] = company.name
    return layer


def reservation_layer(
    reservation: Reservation,
    on: Optional[date] = None,
    date_formatter: Callable = long_date,
) -> Layer:
    """
    Reservation fields.

    Args:
        reservation: Reservation record
        on: Document date for {{reservationDate}} (defaults to today)
        date_formatter: Formatter for arrival and departure dates
    """
    billing, billing_lower, billing_day, _ = BILLING_TYPE_TEXT.get(
        reservation.billing_type, ("", "", "", "")
    )
    return {
        "reservationCode": reservation.reservation_code or "",
        "tenantName": reservation.tenant_name or "",
        "arrivalDate": date_formatter(reservation.arrival_date),
        "departureDate": date_formatter(reservation.departure_date),
        "numberOfPeople": str(reservation.number_of_people or 0),
        "billingType": billing,
        "billingTypeLower": billing_lower,
        "billingTypeDay": billing_day,
        "billingMethod": BILLING_METHOD_TEXT.get(reservation.billing_method, ""),
        "billingRate": money(reservation.billing_rate),
        "deposit": money(reservation.deposit),
        "depositText": deposit_requirement_text(reservation),
        "depositText2": deposit_requirement_note(reservation),
        "depositLabel": "Security Deposit Waiver"
        if reservation.deposit_type == DepositType.SDW
        else "Deposit",
        "securityText": security_deposit_text(reservation),
        "securityProrateText": security_prorate_text(reservation),
        "letterOfResponsibilityText": "Corporate Letter of Responsibility"
        if reservation.deposit_type == DepositType.CLR
        else "Letter of Responsibility",
        "partialMonthText": partial_month_text(reservation),
        "reservationDate": long_date(on or today()),
        "checkInTime": check_in_time(reservation.check_in_time_id),
        "checkOutTime": check_out_time(reservation.check_out_time_id),
        "reservationNotice": notice_text(reservation),
        "reservationNoticeDay": NOTICE_DAYS.get(reservation.reservation_notice, ""),
        "departureFee": money(reservation.departure_fee),
        "tenantPets": pet_text(reservation),
        "extensionsPossible": "Yes" if reservation.allow_extensions else "No",
    }


def property_layer(property: Property, reservation: Optional[Reservation] = None) -> Layer:
    address = property.address
    return {
        "propertyCode": property.property_code or "",
        "communityAddress": format_address(address),
        "apartmentAddress": format_address(address, suite=property.suite),
        "propertyAddress": format_mailing_address(address),
        "propertyPhone": phone_number(property.phone) or "N/A",
        "propertyAddress1": address.address1 or "",
        "propertyCity": address.city or "",
        "propertyState": address.state or "",
        "propertyZip": address.zip or "",
        "propertySuite": property.suite or "",
        "propertyBedrooms": str(property.bedrooms or 0),
        "propertyBathrooms": f"{property.bathrooms or 0:g}",
        "propertyFixedExp": money(reservation.departure_fee if reservation else 0),
        "propertyParking": property.parking_notes or "",
    }


def office_layer(
    office: Office,
    organization: Optional[Organization] = None,
    property: Optional[Property] = None,
) -> Layer:
    """Office contact details, fee defaults and the office logo."""
    layer = {
        "officeName": office.name,
        "officeDescription": office.name,
        "officePhone": phone_number(office.phone) or "N/A",
        "officeFax": phone_number(office.fax) or "N/A",
        "defaultKeyFee": f"${money(office.default_key_fee)}",
        "undisclosedPetFee": f"${money(office.undisclosed_pet_fee)}",
        "minimumSmokingFee": f"${money(office.minimum_smoking_fee)}",
        "parkingPenaltyLow": f"${money(office.parking_low_end)}",
        "parkingPenaltyHigh": f"${money(office.parking_high_end)}",
        "maintenanceEmail": office.maintenance_email or "",
        "afterHoursPhone": phone_number(office.after_hours_phone),
        "afterHoursInstructions": office.after_hours_instructions or "",
        "daysToRefundDeposit": str(office.days_to_refund_deposit or 0),
        "officeLogoBase64": _logo_url(office, organization),
    }
    if property is not None:
        layer["utilityPenaltyFee"] = utility_penalty_fee(office, property)
        layer["maidServicePenaltyFee"] = maid_service_fee(office, property)
    return layer


def organization_layer(organization: Organization, office: Optional[Office] = None) -> Layer:
    name = organization_display_name(organization, office)
    website = (office.website if office is not None and office.website else None) or organization.website
    logo = _logo_url(organization)
    return {
        "organizationName": organization.name,
        "organization-office": name,
        "organization-office-caps": name.upper(),
        "organizationPhone": phone_number(organization.phone),
        "organizationAddress": format_address(organization.address),
        "organizationWebsite": website or "",
        "organizationHref": website_with_protocol(organization.website),
        "orgLogoBase64": logo,
        "logoBase64": logo,
    }


def accounting_office_layer(accounting_office: AccountingOffice) -> Layer:
    address = accounting_office.address
    return {
        "accountingOfficeName": accounting_office.name,
        "accountingOfficeAddress": address.address1 or "",
        "accountingOfficeCityStateZip": f"{address.city or ''}, {address.state or ''} {address.zip or ''}",
        "accountingOfficeEmail": accounting_office.email or "",
        "accountingOfficePhone": phone_number(accounting_office.phone),
        "accountingOfficeWebsite": accounting_office.website or "",
        "accountingOfficeBank": accounting_office.bank_name or "",
        "accountingOfficeBankRouting": accounting_office.bank_routing or "",
        "accountingOfficeBankAccount": accounting_office.bank_account or "",
        "accountingOfficeSwithCode": accounting_office.bank_swift_code or "",
        "accountingOfficeBankAddress": accounting_office.bank_address or "",
        "accountingOfficeBankPhone": phone_number(accounting_office.bank_phone),
    }


def ledger_rows(invoice: Invoice, registry: Optional[FragmentRegistry] = None) -> str:
    """
    Render the invoice's ledger lines as table rows.

    Every row carries the invoice date; descriptions are HTML-escaped.
    """
    if not invoice.ledger_lines:
        return ""
    registry = registry or get_fragment_registry()
    invoice_date = short_date(invoice.invoice_date)
    lines = [
        {
            "date": invoice_date,
            "description": line.description or "",
            "amount": currency(line.amount),
        }
        for line in invoice.ledger_lines
    ]
    return registry.render("ledger_lines", lines=lines).rstrip("\n")


def invoice_layer(invoice: Invoice, registry: Optional[FragmentRegistry] = None) -> Layer:
    return {
        "invoiceName": invoice.invoice_name or "",
        "invoiceDate": short_date(invoice.invoice_date),
        "startDate": short_date(invoice.start_date),
        "endDate": short_date(invoice.end_date),
        "totalAmount": currency(invoice.total_amount),
        "paidAmount": currency(invoice.paid_amount),
        "totalDue": currency(invoice.total_due),
        "ledgerLinesRows": ledger_rows(invoice, registry),
    }


def welcome_letter_layer(
    letter: WelcomeLetterInformation,
    property: Property,
    office: Optional[Office] = None,
) -> Layer:
    """Arrival details; office contacts take precedence over the letter's emergency contact."""
    layer = {
        "building": property.building or "N/A",
        "size": f"{property.bedrooms}/{property.bathrooms:g}",
        "unitFloorLevel": property.suite or "N/A",
        "phone": phone_number(property.phone) or "N/A",
        "internetNetwork": property.internet_network or "N/A",
        "internetPassword": property.internet_password or "N/A",
        "keypadAccess": property.tenant_key_code or "",
        "alarmCode": property.alarm_code or "",
        "arrivalInstructions": letter.arrival_instructions or "",
        "mailboxInstructions": letter.mailbox_instructions or "",
        "packageInstructions": letter.package_instructions or "",
        "parkingInformation": letter.parking_information or "",
        "access": letter.access or "",
        "amenities": letter.amenities or "",
        "laundry": letter.laundry or "",
        "providedFurnishings": letter.provided_furnishings or "",
        "housekeeping": letter.housekeeping or "",
        "televisionSource": letter.television_source or "",
        "internetService": letter.internet_service or "",
        "keyReturn": letter.key_return or "",
        "concierge": letter.concierge or "",
    }
    if office is not None and (office.maintenance_email or office.after_hours_phone):
        layer["maintenanceEmail"] = office.maintenance_email or ""
        layer["afterHoursPhone"] = phone_number(office.after_hours_phone)
    else:
        layer["maintenanceEmail"] = letter.emergency_contact or ""
        layer["afterHoursPhone"] = phone_number(letter.emergency_contact_number)
    return layer


def lease_information_layer(
    lease_information: LeaseInformation,
    generic: ResolutionContext,
    predicates: Optional[Dict[str, bool]] = None,
    resolver: Optional[PlaceholderResolver] = None,
) -> Layer:
    """
    Lease clauses with their own placeholders already resolved.

    Clause text is resolved once against the generic layers; the result is
    literal and is not scanned again when the lease template is resolved.
    """
    resolver = resolver or PlaceholderResolver()
    return {
        name: resolver.resolve(text, generic, predicates)
        for name, text in lease_information.clauses
    }


# ---------------------------------------------------------------------------
# Document contexts
# ---------------------------------------------------------------------------


def lease_predicates(reservation: Reservation) -> Dict[str, bool]:
    """Predicate map for lease conditional sections."""
    return {
        DEPOSIT_TYPE_SDW: reservation.deposit_type == DepositType.SDW,
        BILLING_TYPE_MONTHLY: reservation.billing_type == BillingType.MONTHLY,
    }


def build_lease_context(
    reservation: Reservation,
    property: Property,
    contact: Contact,
    organization: Organization,
    office: Optional[Office] = None,
    company: Optional[Company] = None,
    lease_information: Optional[LeaseInformation] = None,
    on: Optional[date] = None,
) -> ResolutionContext:
    """
    Layer stack for a lease: lease-info, contact, reservation, property,
    office, organization.
    """
    generic = [
        ("contact", contact_layer(contact, company)),
        ("reservation", reservation_layer(reservation, on=on)),
        ("property", property_layer(property, reservation)),
    ]
    if office is not None:
        generic.append(("office", office_layer(office, organization, property)))
    generic.append(("organization", organization_layer(organization, office)))

    context = ResolutionContext.from_layers(generic)
    if lease_information is None:
        return context

    lease_layer = lease_information_layer(
        lease_information, context, lease_predicates(reservation)
    )
    return ResolutionContext.from_layers([("lease-info", lease_layer)] + generic)


def build_welcome_letter_context(
    reservation: Reservation,
    property: Property,
    organization: Organization,
    letter: Optional[WelcomeLetterInformation] = None,
    office: Optional[Office] = None,
    on: Optional[date] = None,
) -> ResolutionContext:
    """Layer stack for a welcome letter."""
    layers = [
        ("reservation", reservation_layer(reservation, on=on)),
        ("property", property_layer(property, reservation)),
        ("organization", organization_layer(organization, office)),
        (
            "welcome-letter",
            welcome_letter_layer(letter or WelcomeLetterInformation(), property, office),
        ),
    ]
    return ResolutionContext.from_layers(layers)


def build_invoice_context(
    invoice: Invoice,
    reservation: Reservation,
    office: Office,
    organization: Optional[Organization] = None,
    property: Optional[Property] = None,
    contact: Optional[Contact] = None,
    company: Optional[Company] = None,
    accounting_office: Optional[AccountingOffice] = None,
    registry: Optional[FragmentRegistry] = None,
) -> ResolutionContext:
    """
    Layer stack for an invoice.

    The office logo prefers the accounting office, then the office, then the
    organization.
    """
    layers = [("reservation", reservation_layer(reservation, date_formatter=short_date))]
    if contact is not None:
        contact_values = contact_layer(contact, company)
        if _is_company_contact(contact, company):
            contact_values["contactAddress"] = format_mailing_address(company.address)
        else:
            contact_values["contactAddress"] = format_mailing_address(contact.address)
        layers.append(("contact", contact_values))
    if property is not None:
        layers.append(("property", property_layer(property, reservation)))
    if organization is not None:
        layers.append(("organization", organization_layer(organization)))

    office_values = office_layer(office, organization)
    office_values["officeLogoBase64"] = _logo_url(accounting_office, office, organization)
    layers.append(("office", office_values))

    if accounting_office is not None:
        layers.append(("accounting-office", accounting_office_layer(accounting_office)))
    layers.append(("invoice", invoice_layer(invoice, registry)))
    return ResolutionContext.from_layers(layers)
