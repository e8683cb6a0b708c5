# module_schemas.py: record shapes for every admin module
from __future__ import annotations

from typing import Dict, Optional

from forms import Field, ModuleSchema, is_blank
from dashboard_core import readiness_status

INSTALLMENT_PERIODS = (3, 6, 12, 15, 18, 24)

PASS_TYPES = ("KOC", "KNPC", "GO", "RATQA", "ABDALI", "WANEET")
SPONSORS = ("Masar", "Ajal", "A", "B", "C")
VISA_TYPES = (
    ("business_visa", "Business Visa"),
    ("work_visa", "Work Visa"),
    ("family_visa", "Family Visa"),
    ("other", "Other"),
)
MARITAL = ("single", "married", "divorced", "widowed")
PRIORITIES = ("low", "medium", "high", "urgent")
APPROVAL_STATUS = ("active", "expired", "pending_renewal")
TRIP_STATUS = ("scheduled", "in_progress", "completed", "cancelled")


# ---------------------- reusable sub-record field sets ----------------------

PASS_FIELDS = (
    Field("passType", "Pass Type", "select", options=PASS_TYPES),
    Field("issuanceDate", "Issuance Date", "date"),
    Field("expiryDate", "Expiry Date", "date"),
    Field("sponsor", "Sponsor", "select", options=SPONSORS),
)

EMERGENCY_CONTACT_FIELDS = (
    Field("name", "Name", required=True),
    Field("relationship", "Relationship"),
    Field("phone", "Phone"),
    Field("email", "Email", "email"),
)

SKILL_TAG_FIELDS = (
    Field("name", "Skill", required=True),
    Field("level", "Level", "select", default="intermediate",
          options=("beginner", "intermediate", "advanced", "expert")),
    Field("endorsedBy", "Endorsed By"),
)

PARTY_FIELDS = (
    Field("name", "Party Name"),
    Field("type", "Party Type", "select", default="plaintiff",
          options=(("plaintiff", "Plaintiff"), ("defendant", "Defendant"), ("third_party", "Third Party"))),
    Field("contactInfo", "Contact Info"),
)

OTHER_APPROVAL_FIELDS = (
    Field("authority", "Authority", required=True),
    Field("approvalNumber", "Approval Number"),
    Field("approvalDate", "Approval Date", "date"),
    Field("expiryDate", "Expiry Date", "date"),
    Field("status", "Status", "select", default="active", options=APPROVAL_STATUS),
    Field("notes", "Notes"),
)

COST_PARTS = ("transport", "accommodation", "dailyAllowance", "miscellaneous")


def pass_complete(p: dict) -> bool:
    return all(not is_blank(p.get(k)) for k in ("passType", "issuanceDate", "expiryDate", "sponsor"))


def installment_value(cost, period) -> Optional[float]:
    """Per-installment insurance amount rounded to cents; None when not computable."""
    try:
        cost = float(cost)
        period = int(period)
    except (TypeError, ValueError):
        return None
    if period <= 0:
        return None
    return round(cost / period, 2)


# ---------------------- prepare hooks (run after parse) ----------------------

def _prepare_employee(payload: dict, draft: dict) -> dict:
    tracker = payload.get("readinessTracker") or {}
    tracker["readyForField"] = readiness_status(tracker)
    payload["readinessTracker"] = tracker
    return payload


def _prepare_residency(payload: dict, draft: dict) -> dict:
    has = str(draft.get("hasPasses", "false")).lower() == "true"
    payload["hasPasses"] = has
    payload["passes"] = [p for p in payload.get("passes", []) if pass_complete(p)] if has else []
    return payload


def _prepare_vehicle(payload: dict, draft: dict) -> dict:
    has = str(draft.get("hasPasses", "no")).lower() == "yes"
    payload["passes"] = [p for p in payload.get("passes", []) if pass_complete(p)] if has else []
    if payload.get("insurancePaymentSystem") != "installments":
        payload["installmentValue"] = None
        payload["insuranceInstallmentPeriod"] = None
        payload["installmentCalculationMode"] = "auto"
    elif payload.get("installmentCalculationMode", "auto") == "auto":
        payload["installmentValue"] = installment_value(
            payload.get("insuranceCost"), payload.get("insuranceInstallmentPeriod")
        )
    return payload


def _prepare_travel_request(payload: dict, draft: dict) -> dict:
    cost = payload.get("estimatedCost") or {}
    cost["total"] = round(sum((cost.get(k) or 0) for k in COST_PARTS), 2)
    payload["estimatedCost"] = cost
    return payload


def _prepare_facility(payload: dict, draft: dict) -> dict:
    fire = payload.get("fireDepartmentApproval") or {}
    fire["correctiveActions"] = [a for a in fire.get("correctiveActions", []) if a.strip()]
    payload["fireDepartmentApproval"] = fire
    return payload


def _prepare_legal_case(payload: dict, draft: dict) -> dict:
    payload["parties"] = [p for p in payload.get("parties", []) if not is_blank(p.get("name"))]
    return payload


# ---------------------- schemas ----------------------

EMPLOYEE = ModuleSchema(
    key="employees",
    title="Employees",
    resource="employees",
    noun="Employee",
    list_key="employees",
    fields=(
        Field("name", "Full Name", required=True),
        Field("employeeId", "Employee ID"),
        Field("email", "Email", "email"),
        Field("phone", "Phone"),
        Field("position", "Position"),
        Field("department", "Department", required=True),
        Field("site", "Site"),
        Field("status", "Status", "select", default="active",
              options=("active", "on-leave", "resigned", "suspended")),
        Field("employmentType", "Employment Type", "select", default="full-time",
              options=("full-time", "part-time", "contractor", "daily")),
        Field("workMode", "Work Mode", "select", default="office", options=("office", "remote", "hybrid")),
        Field("hireDate", "Hire Date", "date"),
        Field("salary", "Salary", "number"),
        Field("hourlyRate", "Hourly Rate", "number"),
        Field("gender", "Gender", "select", default="male", options=("male", "female", "other")),
        Field("maritalStatus", "Marital Status", "select", default="single", options=MARITAL),
        Field("dateOfBirth", "Date of Birth", "date"),
        Field("employeeType", "Employee Type", "select", options=("Citizen", "Foreigner")),
        Field("civilId", "Civil ID", required_when=("employeeType", "Citizen"),
              visible_when=("employeeType", "Citizen")),
        Field("citizenType", "Citizen Type", "select", options=("Kuwaiti", "Bedoun"),
              visible_when=("employeeType", "Citizen")),
        Field("residencyNumber", "Residency No.", required_when=("employeeType", "Foreigner"),
              visible_when=("employeeType", "Foreigner")),
        Field("nationality", "Nationality", visible_when=("employeeType", "Foreigner")),
        Field("passportNumber", "Passport Number"),
        Field("address", "Address", "textarea"),
        Field("attritionRisk", "Attrition Risk", "select", default="low", options=("low", "medium", "high")),
        Field("customTags", "Tags", "tags"),
        Field("driverLicense", "Driver License", "group", fields=(
            Field("number", "License Number"),
            Field("type", "License Type"),
            Field("expiryDate", "License Expiry", "date"),
        )),
        Field("readinessTracker", "Readiness", "group", fields=(
            Field("licenseValid", "License valid", "bool"),
            Field("safetyTraining", "Safety training", "bool"),
            Field("medicallyFit", "Medically fit", "bool"),
            Field("vehicleAssigned", "Vehicle assigned", "bool"),
        )),
        Field("emergencyContacts", "Emergency Contacts", "list", fields=EMERGENCY_CONTACT_FIELDS),
        Field("skillTags", "Skills", "list", fields=SKILL_TAG_FIELDS),
        Field("privateNotes", "Private Notes", "textarea"),
    ),
    table_columns=(
        ("Name", "name"), ("Employee ID", "employeeId"), ("Department", "department"),
        ("Position", "position"), ("Site", "site"), ("Status", "status"),
        ("Email", "email"), ("Phone", "phone"),
    ),
    search_fields=("name", "employeeId", "email", "phone"),
    filter_fields=("department", "status", "position", "site", "employmentType"),
    prepare=_prepare_employee,
    export_columns=(
        ("Name", "name"), ("Employee ID", "employeeId"), ("Email", "email"), ("Phone", "phone"),
        ("Position", "position"), ("Department", "department"), ("Site", "site"),
        ("Status", "status"), ("Employment Type", "employmentType"), ("Hire Date", "hireDate"),
        ("Salary", "salary"),
    ),
)

RESIDENCY = ModuleSchema(
    key="residencies",
    title="Employee Residencies",
    resource="residencies",
    noun="Record",
    fields=(
        Field("employee", "Employee", "select", required=True, source="employees"),
        Field("employeeType", "Employee Type", "select",
              options=(("citizen", "Citizen"), ("foreigner", "Foreigner"))),
        Field("coId", "Co. ID"),
        Field("passportNumber", "Passport Number"),
        Field("passportExpiry", "Passport Expiry", "date"),
        Field("nationality", "Nationality"),
        Field("residencyNumber", "Residency Number", required_when=("employeeType", "foreigner")),
        Field("residencyExpiry", "Residency Expiry", "date", required_when=("employeeType", "foreigner")),
        Field("civilId", "Civil ID", required_when=("employeeType", "citizen")),
        Field("civilIdExpiry", "Civil ID Expiry", "date"),
        Field("visaType", "Visa Type", "select", options=VISA_TYPES),
        Field("visaNumber", "Visa Number"),
        Field("visaExpiry", "Visa Expiry", "date"),
        Field("workPermitStart", "Work Permit Start", "date"),
        Field("workPermitEnd", "Work Permit End", "date"),
        Field("workPermitCopy", "Work Permit Copy", "file"),
        Field("sponsor", "Sponsor", "select", options=SPONSORS),
        Field("status", "Status", "select", default="active",
              options=("active", "expired", "under_renewal", "cancelled", "deported")),
        Field("hasPasses", "Has Passes", "select", default="false", options=(("false", "No"), ("true", "Yes"))),
        Field("passes", "Passes", "list", fields=PASS_FIELDS, visible_when=("hasPasses", "true")),
        Field("maritalStatus", "Marital Status", "select", options=MARITAL),
        Field("numberOfDependents", "Number of Dependents", "number", integer=True),
        Field("dependentsLocation", "Dependents Location", "select",
              options=(("kuwait", "Kuwait"), ("home_country", "Home Country"), ("other", "Other"))),
        Field("dependentsLocationOther", "Other Location", visible_when=("dependentsLocation", "other")),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Employee", "employee.name"), ("Co. ID", "coId"), ("Residency #", "residencyNumber"),
        ("Residency Expiry", "residencyExpiry"), ("Passport Expiry", "passportExpiry"),
        ("Sponsor", "sponsor"), ("Status", "status"),
    ),
    search_fields=("employee.name", "coId", "residencyNumber", "civilId", "passportNumber"),
    filter_fields=("status", "sponsor"),
    prepare=_prepare_residency,
)

GOVERNMENT_DOCUMENT = ModuleSchema(
    key="govdocs",
    title="Government Documents",
    resource="government_documents",
    noun="Document",
    fields=(
        Field("documentType", "Document Type", "select", required=True, options=(
            ("commercial_license", "Commercial License"),
            ("import_license", "Import License"),
            ("traffic_license", "Traffic License"),
            ("municipality_license", "Municipality License"),
            ("fire_department_license", "Fire Department License"),
            ("other", "Other"),
        )),
        Field("documentNumber", "Document Number", required=True),
        Field("title", "Title", required=True),
        Field("description", "Description", "textarea"),
        Field("issuingAuthority", "Issuing Authority"),
        Field("issueDate", "Issue Date", "date"),
        Field("expiryDate", "Expiry Date", "date", required=True),
        Field("status", "Status", "select", default="active",
              options=("active", "expired", "pending_renewal", "suspended", "cancelled")),
        Field("renewalFee", "Renewal Fee", "number"),
        Field("renewalProcess", "Renewal Process", "textarea"),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Type", "documentType"), ("Number", "documentNumber"), ("Title", "title"),
        ("Authority", "issuingAuthority"), ("Expiry", "expiryDate"), ("Status", "status"),
    ),
    search_fields=("title", "documentNumber", "issuingAuthority"),
    filter_fields=("documentType", "status"),
)

VEHICLE = ModuleSchema(
    key="vehicles",
    title="Vehicle Registrations",
    resource="vehicles",
    noun="Vehicle registration",
    fields=(
        Field("vehicle", "Asset", "select", required=True, source="assets"),
        Field("plateNumber", "Plate Number", required=True),
        Field("chassisNumber", "Chassis Number"),
        Field("engineNumber", "Engine Number"),
        Field("registrationNumber", "Registration Number"),
        Field("registrationExpiry", "Registration Expiry", "date", required=True),
        Field("assetRegistrationType", "Registration Type", "select", default="public",
              options=("public", "private")),
        Field("periodicCheck", "Periodic Check", "group", fields=(
            Field("issuanceDate", "Check Issued", "date"),
            Field("expiryDate", "Check Expiry", "date"),
        )),
        Field("insuranceCompany", "Insurance Company"),
        Field("insurancePolicyNumber", "Policy Number"),
        Field("insuranceExpiry", "Insurance Expiry", "date"),
        Field("insuranceCost", "Insurance Cost", "number",
              required_when=("insurancePaymentSystem", "installments")),
        Field("insurancePaymentSystem", "Payment System", "select", default="cash",
              options=(("cash", "Cash"), ("installments", "Installments"))),
        Field("insuranceInstallmentPeriod", "Installment Period (months)", "select",
              options=INSTALLMENT_PERIODS,
              required_when=("insurancePaymentSystem", "installments"),
              visible_when=("insurancePaymentSystem", "installments")),
        Field("installmentCalculationMode", "Calculation", "select", default="auto",
              options=(("auto", "Auto"), ("manual", "Manual")),
              visible_when=("insurancePaymentSystem", "installments")),
        Field("installmentValue", "Installment Value", "number",
              required_when=("installmentCalculationMode", "manual"),
              visible_when=("insurancePaymentSystem", "installments")),
        Field("status", "Status", "select", default="active",
              options=("active", "expired", "suspended", "cancelled")),
        Field("registrationCardCountry", "Card Country"),
        Field("registrationCardBrand", "Card Brand"),
        Field("registrationCardCapacity", "Card Capacity"),
        Field("registrationCardShape", "Card Shape"),
        Field("registrationCardColour", "Card Colour"),
        Field("hasPasses", "Has Passes", "select", default="no", options=(("no", "No"), ("yes", "Yes"))),
        Field("passes", "Passes", "list", fields=PASS_FIELDS, visible_when=("hasPasses", "yes")),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Asset", "vehicle.description"), ("Plate", "plateNumber"), ("Registration #", "registrationNumber"),
        ("Registration Expiry", "registrationExpiry"), ("Insurance Expiry", "insuranceExpiry"),
        ("Payment", "insurancePaymentSystem"), ("Status", "status"),
    ),
    search_fields=("plateNumber", "registrationNumber", "chassisNumber", "insuranceCompany"),
    filter_fields=("status", "insurancePaymentSystem"),
    prepare=_prepare_vehicle,
)

CORRESPONDENCE = ModuleSchema(
    key="correspondence",
    title="Government Correspondence",
    resource="correspondence",
    noun="Correspondence",
    fields=(
        Field("referenceNumber", "Reference Number", required=True),
        Field("subject", "Subject", required=True),
        Field("description", "Description", "textarea"),
        Field("ministry", "Ministry", required=True),
        Field("department", "Department"),
        Field("contactPerson", "Contact Person"),
        Field("contactPhone", "Contact Phone"),
        Field("contactEmail", "Contact Email", "email"),
        Field("submissionDate", "Submission Date", "date", required=True),
        Field("submissionMethod", "Submission Method", "select", default="in_person",
              options=(("in_person", "In Person"), "email", "fax", "post")),
        Field("requestType", "Request Type", "select", default="application",
              options=("application", "query", "complaint", "information_request")),
        Field("status", "Status", "select", default="submitted",
              options=("submitted", "under_review", "approved", "rejected", "pending_documents", "completed")),
        Field("expectedResponseDate", "Expected Response", "date"),
        Field("actualResponseDate", "Actual Response", "date"),
        Field("responseReceived", "Response received", "bool"),
        Field("responseDetails", "Response Details", "textarea", visible_when=("responseReceived", True)),
        Field("followUpRequired", "Follow-up required", "bool"),
        Field("followUpDate", "Follow-up Date", "date", required_when=("followUpRequired", True),
              visible_when=("followUpRequired", True)),
        Field("followUpNotes", "Follow-up Notes", "textarea", visible_when=("followUpRequired", True)),
        Field("priority", "Priority", "select", default="medium", options=PRIORITIES),
        Field("assignedTo", "Assigned To", "select", source="employees"),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Reference", "referenceNumber"), ("Subject", "subject"), ("Ministry", "ministry"),
        ("Submitted", "submissionDate"), ("Priority", "priority"), ("Status", "status"),
    ),
    search_fields=("referenceNumber", "subject", "ministry", "contactPerson"),
    filter_fields=("status", "priority", "requestType"),
)

LEGAL_CASE = ModuleSchema(
    key="legal",
    title="Legal Cases",
    resource="legal_cases",
    noun="Legal case",
    fields=(
        Field("caseNumber", "Case Number", required=True),
        Field("serial", "Serial"),
        Field("title", "Title", required=True),
        Field("description", "Description", "textarea"),
        Field("caseType", "Case Type", "select", required=True, options=(
            "labour_dispute", "traffic_fine", "contract_dispute", "regulatory_violation", "other")),
        Field("court", "Court"),
        Field("courtLocation", "Court Location"),
        Field("filingDate", "Filing Date", "date"),
        Field("status", "Status", "select", default="open",
              options=("open", "pending", "in_progress", "resolved", "closed", "appealed")),
        Field("priority", "Priority", "select", default="medium", options=PRIORITIES),
        Field("estimatedCost", "Estimated Cost", "number"),
        Field("actualCost", "Actual Cost", "number"),
        Field("legalRepresentative", "Legal Representative", "group", fields=(
            Field("name", "Lawyer Name"),
            Field("firm", "Firm"),
            Field("phone", "Phone"),
            Field("email", "Email", "email"),
            Field("contractAmount", "Contract Amount", "number"),
        )),
        Field("parties", "Parties", "list", fields=PARTY_FIELDS,
              default=[{"name": "", "type": "plaintiff", "contactInfo": ""}]),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Case #", "caseNumber"), ("Title", "title"), ("Type", "caseType"), ("Court", "court"),
        ("Filed", "filingDate"), ("Priority", "priority"), ("Status", "status"),
    ),
    search_fields=("caseNumber", "title", "court", "legalRepresentative.name"),
    filter_fields=("status", "priority", "caseType"),
    prepare=_prepare_legal_case,
)

_APPROVAL_BASE = (
    Field("approvalNumber", "Approval Number"),
    Field("approvalDate", "Approval Date", "date"),
    Field("expiryDate", "Expiry Date", "date"),
)

FACILITY = ModuleSchema(
    key="facilities",
    title="Company Facilities",
    resource="facilities",
    noun="Facility",
    fields=(
        Field("facilityName", "Facility Name", required=True),
        Field("facilityType", "Facility Type", "select", default="office",
              options=("office", "warehouse", "workshop", "showroom", "residential", "other")),
        Field("address", "Address", required=True),
        Field("area", "Area (sqm)", "number"),
        Field("rentAgreement", "Rent Agreement", "group", fields=(
            Field("agreementNumber", "Agreement Number"),
            Field("landlordName", "Landlord"),
            Field("landlordContact", "Landlord Contact"),
            Field("startDate", "Start Date", "date"),
            Field("endDate", "End Date", "date"),
            Field("monthlyRent", "Monthly Rent", "number"),
            Field("securityDeposit", "Security Deposit", "number"),
            Field("renewalTerms", "Renewal Terms"),
            Field("status", "Status", "select", default="active",
                  options=("active", "expired", "pending_renewal", "terminated")),
        )),
        Field("municipalityApproval", "Municipality Approval", "group", fields=_APPROVAL_BASE + (
            Field("approvalType", "Approval Type"),
            Field("status", "Status", "select", default="active", options=APPROVAL_STATUS),
            Field("renewalProcess", "Renewal Process"),
        )),
        Field("fireDepartmentApproval", "Fire Department Approval", "group", fields=_APPROVAL_BASE + (
            Field("inspectionDate", "Inspection Date", "date"),
            Field("status", "Status", "select", default="active", options=APPROVAL_STATUS),
            Field("findings", "Findings", "textarea"),
            Field("correctiveActions", "Corrective Actions", "tags"),
        )),
        Field("mocApproval", "MOC Approval", "group", fields=_APPROVAL_BASE + (
            Field("approvalType", "Approval Type"),
            Field("status", "Status", "select", default="active", options=APPROVAL_STATUS),
        )),
        Field("otherApprovals", "Other Approvals", "list", fields=OTHER_APPROVAL_FIELDS),
        Field("status", "Status", "select", default="active",
              options=("active", "inactive", "under_renovation", "closed")),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Facility", "facilityName"), ("Type", "facilityType"), ("Address", "address"),
        ("Rent End", "rentAgreement.endDate"), ("Municipality Expiry", "municipalityApproval.expiryDate"),
        ("Fire Dept. Expiry", "fireDepartmentApproval.expiryDate"), ("Status", "status"),
    ),
    search_fields=("facilityName", "address", "rentAgreement.landlordName"),
    filter_fields=("facilityType", "status"),
    prepare=_prepare_facility,
)

TRAVEL_REQUEST = ModuleSchema(
    key="travelreq",
    title="Travel Requests",
    resource="travel_requests",
    noun="Travel request",
    fields=(
        Field("employee", "Employee", "select", required=True, source="employees"),
        Field("travelType", "Travel Type", "select", default="domestic", options=("domestic", "international")),
        Field("purpose", "Purpose", "textarea", required=True),
        Field("destination", "Destination", "group", fields=(
            Field("country", "Country", required=True),
            Field("city", "City"),
            Field("venue", "Venue"),
        )),
        Field("travelDates", "Travel Dates", "group", fields=(
            Field("departure", "Departure", "date", required=True),
            Field("return", "Return", "date", required=True),
            Field("flexibility", "Flexibility"),
        )),
        Field("duration", "Duration (days)", "number", integer=True),
        Field("localContact", "Local Contact", "group", fields=(
            Field("name", "Contact Name"),
            Field("organization", "Organization"),
            Field("phone", "Phone"),
            Field("email", "Email", "email"),
        )),
        Field("plannedItinerary", "Planned Itinerary", "textarea"),
        Field("estimatedCost", "Estimated Cost", "group", fields=tuple(
            Field(part, label, "number") for part, label in zip(
                COST_PARTS, ("Transport", "Accommodation", "Daily Allowance", "Miscellaneous"))
        )),
        Field("budgetCode", "Budget Code"),
        Field("projectCode", "Project Code"),
        Field("department", "Department"),
        Field("urgency", "Urgency", "select", default="medium", options=PRIORITIES),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Request #", "requestNumber"), ("Employee", "employee.name"), ("Type", "travelType"),
        ("Country", "destination.country"), ("Departure", "travelDates.departure"),
        ("Total Cost", "estimatedCost.total"), ("Status", "status"),
    ),
    search_fields=("requestNumber", "employee.name", "destination.country", "purpose"),
    filter_fields=("travelType", "urgency", "status"),
    prepare=_prepare_travel_request,
)

_PERMIT_FIELDS = (
    Field("required", "Required", "bool"),
    Field("type", "Type"),
    Field("processingTime", "Processing Time (days)", "number", integer=True),
    Field("estimatedCost", "Estimated Cost", "number"),
    Field("documentsRequired", "Documents Required", "tags"),
    Field("notes", "Notes"),
    Field("status", "Status", "select", default="not_required",
          options=("not_required", "pending", "in_progress", "approved", "rejected")),
)

TRAVEL_AUTHORIZATION = ModuleSchema(
    key="travelauth",
    title="Travel Authorizations",
    resource="travel_authorizations",
    noun="Travel authorization",
    fields=(
        Field("travelRequest", "Travel Request", "select", required=True, source="travel_requests"),
        Field("employee", "Employee", "select", required=True, source="employees"),
        Field("destination", "Destination", "group", fields=(
            Field("country", "Country"),
            Field("city", "City"),
        )),
        Field("travelDates", "Travel Dates", "group", fields=(
            Field("departure", "Departure", "date"),
            Field("return", "Return", "date"),
        )),
        Field("purpose", "Purpose", "textarea"),
        Field("totalBudgetApproved", "Budget Approved", "number"),
        Field("budgetStatus", "Budget Status", "select", default="pending",
              options=("pending", "approved", "rejected")),
        Field("visaRequirements", "Visa Requirements", "group", fields=_PERMIT_FIELDS),
        Field("workPermit", "Work Permit", "group", fields=_PERMIT_FIELDS),
        Field("approvedTravelClass", "Travel Class", "select", default="economy",
              options=("economy", "premium_economy", "business", "first")),
        Field("bookingChannels", "Booking Channels", "tags"),
        Field("specialRequirements", "Special Requirements", "tags"),
        Field("safetyBriefing", "Safety Briefing", "group", fields=(
            Field("required", "Required", "bool", default=True),
            Field("completed", "Completed", "bool"),
            Field("notes", "Notes"),
        )),
        Field("insurance", "Insurance", "group", fields=(
            Field("required", "Required", "bool", default=True),
            Field("type", "Type"),
            Field("coverage", "Coverage"),
            Field("cost", "Cost", "number"),
            Field("status", "Status", "select", default="pending", options=("pending", "active", "expired")),
        )),
        Field("status", "Status", "select", default="draft",
              options=("draft", "pending_approval", "approved", "rejected", "cancelled")),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Authorization #", "authorizationNumber"), ("Employee", "employee.name"),
        ("Country", "destination.country"), ("Departure", "travelDates.departure"),
        ("Budget", "totalBudgetApproved"), ("Budget Status", "budgetStatus"),
        ("Visa", "visaRequirements.status"), ("Status", "status"),
    ),
    search_fields=("authorizationNumber", "employee.name", "destination.country"),
    filter_fields=("status", "budgetStatus"),
)

ITINERARY = ModuleSchema(
    key="itinerary",
    title="Travel Itinerary",
    resource="travel",
    noun="Travel record",
    fields=(
        Field("employee", "Employee", "select", required=True, source="employees"),
        Field("destinationCountry", "Destination Country", required=True),
        Field("destinationCity", "Destination City"),
        Field("purpose", "Purpose", "textarea"),
        Field("startDate", "Start Date", "date", required=True),
        Field("endDate", "End Date", "date", required=True),
        Field("flightDetails", "Flight Details"),
        Field("accommodationInfo", "Accommodation"),
        Field("contactAbroad", "Contact Abroad"),
        Field("travelStatus", "Status", "select", default="scheduled", options=TRIP_STATUS),
        Field("actualAmount", "Actual Cost", "number"),
        Field("emergencyContacts", "Emergency Contacts", "list", fields=EMERGENCY_CONTACT_FIELDS),
        Field("notes", "Notes", "textarea"),
    ),
    table_columns=(
        ("Employee", "employee.name"), ("Country", "destinationCountry"), ("City", "destinationCity"),
        ("Start", "startDate"), ("End", "endDate"), ("Status", "travelStatus"),
    ),
    search_fields=("employee.name", "destinationCountry", "destinationCity", "purpose"),
    filter_fields=("travelStatus", "destinationCountry"),
)

COUNTRY_GUIDELINE = ModuleSchema(
    key="guidelines",
    title="Country Guidelines",
    resource="country_guidelines",
    noun="Guideline",
    fields=(
        Field("country", "Country", required=True),
        Field("flagIcon", "Flag Icon"),
        Field("tags", "Tags", "tags"),
        Field("notes", "Guidelines", "textarea", required=True),
    ),
    table_columns=(("Flag", "flagIcon"), ("Country", "country"), ("Tags", "tags"), ("Guidelines", "notes")),
    search_fields=("country", "notes", "tags"),
)

GUIDELINE_TAG_SUGGESTIONS = (
    "Visa Required", "Vaccination", "Safety", "Cultural", "Dress Code",
    "Currency", "Health", "Security", "Business Etiquette",
)

ALL_SCHEMAS: Dict[str, ModuleSchema] = {
    s.key: s for s in (
        EMPLOYEE, RESIDENCY, GOVERNMENT_DOCUMENT, VEHICLE, CORRESPONDENCE, LEGAL_CASE, FACILITY,
        TRAVEL_REQUEST, TRAVEL_AUTHORIZATION, ITINERARY, COUNTRY_GUIDELINE,
    )
}


def get_schema(key: str) -> ModuleSchema:
    try:
        return ALL_SCHEMAS[key]
    except KeyError:
        raise KeyError(f"Unknown module '{key}'") from None
