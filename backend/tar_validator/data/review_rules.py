"""Keyword tables for document classification and completeness review."""

CLASSIFICATION_KEYWORDS: dict[str, list[str]] = {
    "TAR": [
        "travel authorization request",
        "tar",
        "deliverable",
        "contract travel",
        "resource utilization",
        "status report",
        "per diem",
        "rates",
    ],
    "RIP": [
        "rip",
        "request to initialize a purchase",
        "request for initial purchase",
    ],
    "INVOICE": [
        "invoice",
        "billing",
        "payment request",
        "labor hours",
        "expense report",
        "cost reimbursement",
        "billing period",
        "invoice number",
        "amount due",
        "payment terms",
    ],
}

# Tie-break order when scores are equal
CLASSIFICATION_PRIORITY = ("TAR", "RIP", "INVOICE")

TAR_SECTIONS: dict[str, list[str]] = {
    "Contract Information": ["contract number", "contract", "agreement"],
    "Reporting Period": ["period", "quarter", "fy", "qtr", "month", "reporting period"],
    "Executive Summary": ["executive summary", "summary", "overview"],
    "Travel Approach": ["travel approach", "methodology", "technical"],
    "Risk Assessment": ["risk", "risk assessment", "mitigation"],
    "Resource Utilization": ["resource", "personnel", "staff", "hours"],
    "Deliverable Status": ["deliverable", "milestone", "completion"],
}

RIP_SECTIONS: dict[str, list[str]] = {
    "Technical Volume": ["technical volume", "technical approach", "solution"],
    "Management Volume": ["management", "management approach", "project management"],
    "Cost Volume": ["cost", "pricing", "cost breakdown", "budget"],
    "Past Performance": ["past performance", "experience", "references"],
    "Key Personnel": ["key personnel", "staff", "team", "resume"],
    "Compliance Matrix": ["compliance", "requirements", "matrix"],
}

INVOICE_ELEMENTS: dict[str, list[str]] = {
    "Invoice Number": ["invoice number", "invoice #", "inv #"],
    "Contract Number": ["contract", "agreement", "po number"],
    "Billing Period": ["billing period", "period", "invoice period"],
    "Labor Hours": ["hours", "labor", "time"],
    "Hourly Rates": ["rate", "billing rate", "hourly"],
    "Total Amount": ["total", "amount due", "invoice total"],
    "Tax Information": ["tax", "gst", "vat"],
}

TAR_MIN_WORDS = 1000
RIP_MIN_WORDS = 2000
INVOICE_FORMAT_SCORE = 85
UNKNOWN_FORMAT_SCORE = 50

# Risk score weights
RISK_WEIGHTS = {
    "completeness": 0.4,
    "compliance": 0.3,
    "format": 0.2,
    "issues": 0.1,
}
ISSUE_PENALTY = 5
