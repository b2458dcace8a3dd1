TRANSPORT_OPTIONS_URL = "/transport/options"
TRANSPORT_SCHEDULES_URL = "/transport/options/{option_id}/schedules"
SCHEDULE_BOOKINGS_URL = "/transport/schedules/{schedule_id}/bookings"
BOOKING_URL = "/transport/bookings/{booking_id}"
GUEST_BOOKINGS_URL = "/guests/{guest_id}/transport-bookings"
