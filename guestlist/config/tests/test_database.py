"""Store failures surface as StoreUnavailableError."""

import pytest

from guestlist.errors import StoreUnavailableError
from guestlist.guests.dtos import GuestSearchFilter
from guestlist.guests.features.create_guest.write_model import SqlGuestCreateWriteModel
from guestlist.guests.repository.read_models import SqlGuestReadModel

pytestmark = pytest.mark.usefixtures("unreachable_store")


async def test_read_model_reports_store_unavailable():
    with pytest.raises(StoreUnavailableError) as exc_info:
        await SqlGuestReadModel().search(GuestSearchFilter())

    assert exc_info.value.code == "store_unavailable"


async def test_write_model_reports_store_unavailable():
    with pytest.raises(StoreUnavailableError):
        await SqlGuestCreateWriteModel().create_guest(name="Jane", email="jane@example.com")
