import argparse
import asyncio
import logging

import testing.postgresql
import tornado.ioloop
import tornado.log
import tornado.web

from smartpark.backend.db.dbaccess import DbAccess
from smartpark.backend.db.memstore import MemoryStore
from smartpark.backend.engine.errors import PersistenceFailure
from smartpark.backend.engine.reservation import ReservationService
from smartpark.backend.rest_server.rest_server import make_routes

logger = logging.getLogger('backend')


def make_app(service: ReservationService) -> tornado.web.Application:
    return tornado.web.Application(make_routes(service))


async def expire_bookings(service: ReservationService) -> None:
    try:
        await service.expire_due()
    except PersistenceFailure as e:
        # the next sweep picks the bookings up again
        logger.error("Expiry sweep failed : '{}'".format(e))


async def serve(store, port: int, expiry_interval: float) -> None:
    service = ReservationService(store)
    app = make_app(service)
    app.listen(port)
    logger.info('Listening on port {}'.format(port))

    sweeper = tornado.ioloop.PeriodicCallback(lambda: expire_bookings(service), expiry_interval * 1000)
    sweeper.start()
    await asyncio.Event().wait()


async def open_store(use_memory: bool, db_url: str, init_tables: bool, reset_tables: bool):
    if use_memory:
        logger.info('Using the in-memory store, bookings are lost on exit')
        return MemoryStore()
    return await DbAccess.create(db_url, init_tables=init_tables, reset_tables=reset_tables)


def main(temp_db: bool, db_url: str, reset_tables: bool, use_memory: bool, port: int, expiry_interval: float):
    async def run(url: str, init_tables: bool):
        store = await open_store(use_memory, url, init_tables, reset_tables)
        await serve(store, port, expiry_interval)

    if temp_db:
        with testing.postgresql.Postgresql() as postgresql:
            asyncio.run(run(postgresql.url(), True))
    else:
        asyncio.run(run(db_url, False))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Parking reservation backend.')
    parser.add_argument("--db", default="postgresql://localhost/postgres", help="Database full url")
    parser.add_argument("--temp-db", action='store_true', help="Create and initialise a temporary database")
    parser.add_argument("--reset-tables", action='store_true', help="Drop and recreate database tables")
    parser.add_argument("--memory", action='store_true', help="Keep lots and bookings in memory instead of a database")
    parser.add_argument("--port", type=int, default=8888, help="HTTP port")
    parser.add_argument("--expiry-interval", type=float, default=60.0,
                        help="Seconds between sweeps that complete ended bookings")
    parser.add_argument("--log-level", default="info", help="Logging level")
    args: argparse.Namespace = parser.parse_args()

    tornado.log.enable_pretty_logging()
    logging.getLogger().setLevel(args.log_level.upper())

    main(args.temp_db, args.db, args.reset_tables, args.memory, args.port, args.expiry_interval)
