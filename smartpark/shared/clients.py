import json
from decimal import Decimal
from typing import List

from tornado import httpclient

import smartpark.shared.rest_models as rest_models
from smartpark.shared.util import serialize_model

HEADERS = {'Content-Type': 'application/json; charset=UTF-8'}


class ParkingLotRest(object):
    """
    An async client for the parking lot REST API
    """

    def __init__(self, base_url, http_client):
        self.client = http_client
        self.rest_url = f"{base_url}/spaces"

    async def create_lot(self, lot: rest_models.ParkingLot) -> int:
        request = httpclient.HTTPRequest(self.rest_url, body=serialize_model(lot), headers=HEADERS, method='POST')
        response = await self.client.fetch(request)
        return rest_models.ParkingLotCreationResponse(**json.loads(response.body)).id

    async def get_lot(self, lot_id: int) -> rest_models.ParkingLot:
        response = await self.client.fetch(f"{self.rest_url}/{lot_id}")
        return rest_models.ParkingLot(**json.loads(response.body))

    async def get_lots(self) -> List[rest_models.ParkingLot]:
        response = await self.client.fetch(self.rest_url)
        return [rest_models.ParkingLot(**data) for data in json.loads(response.body)]

    async def update_price(self, lot_id: int, price: Decimal):
        msgbody = serialize_model(rest_models.ParkingLotPriceMessage(price))
        request = httpclient.HTTPRequest(f"{self.rest_url}/{lot_id}/price", body=msgbody, headers=HEADERS,
                                         method='POST')
        await self.client.fetch(request)


class BookingRest(object):
    """
    An async client for the booking REST API, acting on behalf of one user
    """

    def __init__(self, base_url, http_client, user_id: str):
        self.client = http_client
        self.rest_url = f"{base_url}/bookings"
        self.headers = dict(HEADERS, **{'X-User-Id': user_id})

    async def _post(self, url: str, body: str) -> dict:
        request = httpclient.HTTPRequest(url, body=body, headers=self.headers, method='POST')
        response = await self.client.fetch(request)
        return json.loads(response.body)

    async def _get(self, url: str):
        response = await self.client.fetch(httpclient.HTTPRequest(url, headers=self.headers))
        return response.body

    async def create_booking(self, lot_id: int, spot_type: str, duration_hours: int) -> rest_models.Booking:
        body = serialize_model(rest_models.BookingRequest(lot_id, spot_type, duration_hours))
        return rest_models.Booking(**await self._post(self.rest_url, body))

    async def cancel_booking(self, booking_id: str) -> rest_models.Booking:
        return rest_models.Booking(**await self._post(f"{self.rest_url}/{booking_id}/cancel", '{}'))

    async def confirm_booking(self, booking_id: str, paid: bool) -> rest_models.Booking:
        body = serialize_model(rest_models.PaymentMessage(paid))
        return rest_models.Booking(**await self._post(f"{self.rest_url}/{booking_id}/confirm", body))

    async def get_booking(self, booking_id: str) -> rest_models.Booking:
        return rest_models.Booking(**json.loads(await self._get(f"{self.rest_url}/{booking_id}")))

    async def list_active(self) -> List[rest_models.Booking]:
        return [rest_models.Booking(**data) for data in json.loads(await self._get(self.rest_url))]

    async def list_history(self) -> List[rest_models.Booking]:
        return [rest_models.Booking(**data) for data in json.loads(await self._get(f"{self.rest_url}/history"))]

    async def get_ticket(self, booking_id: str) -> str:
        body = await self._get(f"{self.rest_url}/{booking_id}/ticket")
        return body.decode('utf-8')
