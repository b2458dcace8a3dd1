GUESTS_URL = "/guests"
REGISTER_SELF_URL = "/guests/register"
MY_GUEST_URL = "/guests/me"
GUEST_URL = "/guests/{guest_id}"
GUEST_HISTORY_URL = "/guests/{guest_id}/history"
GUEST_COMMUNICATIONS_URL = "/guests/{guest_id}/communications"
SUBMIT_RSVP_URL = "/guests/{guest_id}/rsvp"
OVERRIDE_STATUS_URL = "/guests/{guest_id}/status"
LINK_ACCOUNT_URL = "/guests/{guest_id}/account"
ARCHIVE_GUEST_URL = "/guests/{guest_id}/archive"
RESTORE_GUEST_URL = "/guests/{guest_id}/restore"
BULK_ARCHIVE_URL = "/guests/archive"
SEND_REMINDER_URL = "/guests/{guest_id}/reminders"
SEND_PENDING_REMINDERS_URL = "/guests/reminders"
