from bto.schemas.primitives import Nric, ProjectName, OfficerSlots, UnitCount
from bto.schemas.people import PersonCreateRequest, PersonResponse
from bto.schemas.projects import ProjectCreateRequest, ProjectPatchRequest, ProjectResponse
from bto.schemas.applications import ApplicationCreateRequest, ApplicationResponse
from bto.schemas.bookings import BookingCreateRequest, BookingResponse, ReceiptResponse
from bto.schemas.officer_registrations import RegistrationCreateRequest, RegistrationResponse
from bto.schemas.enquiries import EnquiryCreateRequest, EnquiryResponse
