from enum import Enum


class TableNames(str, Enum):
    GUESTS = "guests"
    RSVP_HISTORY = "rsvp_history"
    COMMUNICATION_LOGS = "communication_logs"
    TRANSPORT_OPTIONS = "transport_options"
    TRANSPORT_SCHEDULES = "transport_schedules"
    SEAT_BOOKINGS = "seat_bookings"
    CARPOOL_OFFERS = "carpool_offers"
    CARPOOL_PARTICIPANTS = "carpool_participants"
