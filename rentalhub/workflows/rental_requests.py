# rentalhub/workflows/rental_requests.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..clients.cancellation import RequestScope
from ..domain.contracts import contract_from_booking
from ..errors import FormValidationError
from ..schemas import Booking, Contract, RoomInfo
from ..services.base import Api
from ..services.booking_service import BookingService
from ..services.contract_service import ContractService
from ..services.room_service import RoomService

log = logging.getLogger(__name__)

BOOKING_NOT_FOUND_MSG = "Không tìm thấy yêu cầu thuê"


@dataclass(frozen=True)
class ApprovalOutcome:
    booking: Booking
    contract: Optional[Contract]
    requests: list[Booking]


class RentalRequestWorkflow:
    """
    Host view over incoming booking requests.

    Approve = PUT approve -> derive contract (duration, total rent) -> POST
    contract -> re-fetch the request list. Steps are independent calls: if the
    contract POST fails the booking stays approved on the server, and the list
    is still re-fetched into `requests`.
    """

    def __init__(self, api: Api) -> None:
        self.api = api
        self.bookings = BookingService(api)
        self.contracts = ContractService(api)
        self.rooms = RoomService(api)
        self.requests: list[Booking] = []

    def list_requests(self, status: str = "all") -> list[Booking]:
        requests = self.bookings.list_host()
        requests = self._with_room_info(requests)
        if status and status != "all":
            requests = [r for r in requests if r.status == status]
        self.requests = requests
        return requests

    def _with_room_info(self, requests: list[Booking]) -> list[Booking]:
        missing = sorted({r.room_id for r in requests if r.room_info is None and r.room_id})
        if not missing:
            return requests

        loads = [lambda rid=rid: self.rooms.get_room(rid) for rid in missing]
        if isinstance(self.api, RequestScope):
            rooms = self.api.gather(*loads)
        else:
            rooms = [load() for load in loads]

        by_id: dict[str, RoomInfo] = {
            rid: RoomInfo.model_validate(room.model_dump()) for rid, room in zip(missing, rooms) if room is not None
        }
        return [
            r.model_copy(update={"room_info": by_id.get(r.room_id)}) if r.room_info is None and r.room_id else r
            for r in requests
        ]

    def _resolve(self, booking: Union[Booking, str]) -> Booking:
        if isinstance(booking, Booking):
            return booking
        for r in self.list_requests():
            if r.key == booking:
                return r
        raise FormValidationError(BOOKING_NOT_FOUND_MSG, field="booking_id")

    def approve_and_create_contract(
        self,
        booking: Union[Booking, str],
        *,
        now: Optional[datetime] = None,
    ) -> ApprovalOutcome:
        req = self._resolve(booking)
        booking_id = req.key
        if not booking_id:
            raise FormValidationError(BOOKING_NOT_FOUND_MSG, field="booking_id")

        # dry run first: a request that cannot produce a contract is not approved
        contract_from_booking(req, now=now)

        approved = self.bookings.approve(booking_id)
        merged = req
        if approved is not None:
            merged = Booking.model_validate(
                {**req.model_dump(exclude_none=True), **approved.model_dump(exclude_none=True)}
            )

        payload = contract_from_booking(merged, room=merged.room_info or req.room_info, now=now)
        log.info(
            "booking approved, creating contract (duration=%s, rent_price=%s)",
            payload.duration,
            payload.rent_price,
            extra={"booking_id": booking_id, "room_id": payload.room_id},
        )
        # the booking is approved from here on; the list is re-read even if the POST fails
        try:
            contract = self.contracts.create(payload)
        finally:
            if isinstance(self.api, RequestScope):
                self.api.invalidate()
            self.list_requests()
        return ApprovalOutcome(booking=merged, contract=contract, requests=self.requests)

    def reject(self, booking_id: str, reason: Optional[str] = None) -> list[Booking]:
        self.bookings.reject(booking_id, reason)
        log.info("booking rejected", extra={"booking_id": booking_id})
        return self.list_requests()
