import json
import logging
from contextlib import contextmanager

from tornado import web

from smartpark.backend.engine import errors
from smartpark.backend.engine.reservation import ReservationService
from smartpark.shared.rest_models import (BookingRequest, ParkingLot, ParkingLotCreationResponse,
                                          ParkingLotPriceMessage, PaymentMessage)
from smartpark.shared.util import serialize_model, serialize_models

logger = logging.getLogger('backend')

ERROR_STATUS = {
    errors.InvalidDuration: 400,
    errors.PaymentDeclined: 402,
    errors.LotNotFound: 404,
    errors.NotFound: 404,
    errors.OutOfCapacity: 409,
    errors.InvalidTransition: 409,
    errors.PersistenceFailure: 503,
}

USER_HEADER = 'X-User-Id'


def error_status(err: errors.ReservationError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(err, error_type):
            return status
    return 500


@contextmanager
def domain_errors():
    '''Turns reservation errors raised inside the block into HTTP errors carrying the error text'''
    try:
        yield
    except errors.ReservationError as err:
        if isinstance(err, errors.PersistenceFailure):
            logger.error('Storage unavailable: {}'.format(err))
        raise web.HTTPError(error_status(err), str(err)) from err


class ReservationHandlerBase(web.RequestHandler):
    def initialize(self, service: ReservationService) -> None:
        self.service = service

    def set_default_headers(self):
        self.set_header('Content-Type', 'application/json; charset=UTF-8')

    def write_error(self, status_code, **kwargs):
        self.set_header('Content-Type', 'application/json; charset=UTF-8')
        if status_code == 500:
            self.finish(json.dumps({'error': 'HTTP internal server error'}))
        else:
            exc = kwargs.get('exc_info', (None, None))[1]
            if isinstance(exc, web.HTTPError) and exc.log_message:
                message = exc.log_message
            else:
                message = self._reason
            self.finish(json.dumps({'error': message}))

    def load_json(self):
        if not self.request.headers.get('Content-Type', '').startswith('application/json'):
            raise web.HTTPError(400, 'Invalid content type')
        try:
            return json.loads(self.request.body)
        except ValueError:
            raise web.HTTPError(400, 'Invalid JSON body')

    @staticmethod
    def load_from_json_data(cls: object, json_data: dict, err_msg: str) -> object:
        if not isinstance(json_data, dict):
            raise web.HTTPError(400, err_msg)
        try:
            return cls(**json_data)
        # Display validation errors
        except ValueError as err:
            raise web.HTTPError(400, str(err))
        # Fall back to provided error message as TypeErrors are ugly
        except TypeError:
            raise web.HTTPError(400, err_msg)

    @property
    def user_id(self) -> str:
        user_id = self.request.headers.get(USER_HEADER, '').strip()
        if not user_id:
            raise web.HTTPError(401, 'Missing {} header'.format(USER_HEADER))
        return user_id


class ParkingLotsHandler(ReservationHandlerBase):
    async def get(self):
        with domain_errors():
            self.write(serialize_models(await self.service.list_lots()))

    async def post(self):
        json_data = self.load_json()
        if isinstance(json_data, dict):
            # availability is owned by the ledger, new lots always start empty
            json_data.pop('available', None)
            json_data.pop('id', None)
        lot = self.load_from_json_data(ParkingLot, json_data, 'Invalid parking lot data')
        with domain_errors():
            lot_id = await self.service.add_lot(lot)
        self.write(serialize_model(ParkingLotCreationResponse(id=lot_id)))


class IndividualLotHandler(ReservationHandlerBase):
    async def get(self, lot_id: str):
        with domain_errors():
            self.write(serialize_model(await self.service.get_lot(int(lot_id))))


class IndividualLotPriceHandler(ReservationHandlerBase):
    async def post(self, lot_id: str):
        msg = self.load_from_json_data(ParkingLotPriceMessage, self.load_json(), 'Invalid price data')
        with domain_errors():
            await self.service.update_lot_price(int(lot_id), msg.price_per_hour)


class BookingsHandler(ReservationHandlerBase):
    async def get(self):
        with domain_errors():
            self.write(serialize_models(await self.service.list_active(self.user_id)))

    async def post(self):
        user_id = self.user_id
        req = self.load_from_json_data(BookingRequest, self.load_json(), 'Invalid booking data')
        with domain_errors():
            booking = await self.service.create_booking(req.lot_id, user_id, req.spot_type, req.duration_hours)
        self.set_status(201)
        self.write(serialize_model(booking))


class BookingHistoryHandler(ReservationHandlerBase):
    async def get(self):
        with domain_errors():
            self.write(serialize_models(await self.service.list_history(self.user_id)))


class IndividualBookingHandler(ReservationHandlerBase):
    async def get(self, booking_id: str):
        with domain_errors():
            self.write(serialize_model(await self.service.get_booking(booking_id, self.user_id)))


class BookingCancelHandler(ReservationHandlerBase):
    async def post(self, booking_id: str):
        with domain_errors():
            await self.service.get_booking(booking_id, self.user_id)
            booking = await self.service.cancel_booking(booking_id)
        self.write(serialize_model(booking))


class BookingConfirmHandler(ReservationHandlerBase):
    async def post(self, booking_id: str):
        with domain_errors():
            await self.service.get_booking(booking_id, self.user_id)
            msg = self.load_from_json_data(PaymentMessage, self.load_json(), 'Invalid payment data')
            booking = await self.service.confirm_booking(booking_id, msg.paid)
        self.write(serialize_model(booking))


class BookingTicketHandler(ReservationHandlerBase):
    async def get(self, booking_id: str):
        with domain_errors():
            ticket = await self.service.render_ticket(booking_id, self.user_id)
        self.set_header('Content-Type', 'text/plain; charset=UTF-8')
        self.set_header('Content-Disposition', 'attachment; filename="parking-ticket-{}.txt"'.format(booking_id))
        self.write(ticket)


def make_routes(service: ReservationService) -> list:
    args = {'service': service}
    return [(r'/spaces', ParkingLotsHandler, args),
            (r'/spaces/([0-9]+)', IndividualLotHandler, args),
            (r'/spaces/([0-9]+)/price', IndividualLotPriceHandler, args),
            (r'/bookings', BookingsHandler, args),
            (r'/bookings/history', BookingHistoryHandler, args),
            (r'/bookings/([0-9a-f]+)', IndividualBookingHandler, args),
            (r'/bookings/([0-9a-f]+)/cancel', BookingCancelHandler, args),
            (r'/bookings/([0-9a-f]+)/confirm', BookingConfirmHandler, args),
            (r'/bookings/([0-9a-f]+)/ticket', BookingTicketHandler, args)]
