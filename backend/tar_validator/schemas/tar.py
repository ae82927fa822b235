from pydantic import BaseModel


class ItineraryStopIn(BaseModel):
    date: str | None = None
    city: str | None = None
    state: str | None = None


class TarValidationRequest(BaseModel):
    """Flat TAR field/value payload. Unlisted fields pass through to validation."""
    travelerName: str | None = None
    traveler: str | None = None
    authorizationNumber: str | None = None
    title: str | None = None
    vendorCode: str | None = None
    dutyStation: str | None = None
    city: str | None = None
    state: str | None = None
    contactNumber: str | None = None
    poc: str | None = None
    travelPurpose: str | None = None
    purpose: str | None = None
    estimatedCost: float | str | None = None
    totalCost: float | str | None = None
    duration: int | str | None = None
    tripDate: str | None = None
    tripStartDate: str | None = None
    tripEndDate: str | None = None
    departureDate: str | None = None
    returnDate: str | None = None
    rentalCar: float | str | None = None
    parking: float | str | None = None
    conferenceFee: float | str | None = None
    miscellaneous: float | str | None = None
    itinerary: list[ItineraryStopIn] | None = None

    # Base64 document, optionally a data URL
    documentContent: str | None = None
    pdfContent: str | None = None
    mimeType: str | None = None
    filename: str | None = None

    model_config = {"extra": "allow"}

    def to_tar_data(self) -> dict:
        return self.model_dump(exclude_none=True)


class CostBreakdownOut(BaseModel):
    location: str
    date: str
    mie: float
    lodging: float
    total: float


class ValidationResultResponse(BaseModel):
    success: bool
    isValid: bool
    state: str
    errors: list[str]
    warnings: list[str]
    message: str
    expectedCost: float | None = None
    claimedCost: float | None = None
    variance: float | None = None
    variancePercent: float | None = None
    duration: int | None = None
    breakdown: list[CostBreakdownOut] = []
    validationReport: dict | None = None
    extractionQuality: dict | None = None


class BulkValidationItem(BaseModel):
    tarId: str
    result: ValidationResultResponse
