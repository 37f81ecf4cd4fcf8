# Services
from hms.services.event_bus import event_bus, Event
from hms.services.room_service import RoomService
from hms.services.booking_service import BookingService
from hms.services.checkout_service import CheckOutService
from hms.services.activity_service import ActivityService
from hms.services.finance_service import FinanceService
from hms.services.report_service import ReportService
from hms.services.menu_service import MenuService
from hms.services.facility_service import FacilityService
from hms.services.user_service import UserService

__all__ = [
    'event_bus', 'Event',
    'RoomService', 'BookingService', 'CheckOutService', 'ActivityService',
    'FinanceService', 'ReportService', 'MenuService', 'FacilityService', 'UserService'
]
