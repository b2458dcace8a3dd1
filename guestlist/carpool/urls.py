CARPOOL_OFFERS_URL = "/carpool/offers"
CARPOOL_OFFER_URL = "/carpool/offers/{offer_id}"
CARPOOL_JOIN_URL = "/carpool/offers/{offer_id}/participants"
CARPOOL_PARTICIPANT_URL = "/carpool/participants/{participant_id}"
GUEST_CARPOOLS_URL = "/guests/{guest_id}/carpools"
