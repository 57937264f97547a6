# flake8: noqa
PARKINGLOTS_CREATE_TABLE = """
CREATE TABLE ParkingLots (
	id              serial PRIMARY KEY,
	name            text NOT NULL,
	address         text NOT NULL,
	capacity        integer NOT NULL CHECK (capacity >= 0),
	price_per_hour  numeric(12, 2) NOT NULL CHECK (price_per_hour >= 0),
	num_available   integer NOT NULL CHECK (num_available >= 0 AND num_available <= capacity)
);
"""

PARKINGLOTS_DROP_TABLE = """
DROP TABLE IF EXISTS ParkingLots;
"""

BOOKINGS_CREATE_TABLE = """
CREATE TABLE Bookings (
	id              text PRIMARY KEY,
	park_id         integer NOT NULL,
	user_id         text NOT NULL,
	spot_type       text NOT NULL,
	spot_label      text NOT NULL,
	price_per_hour  numeric(12, 2) NOT NULL,
	duration_hours  integer NOT NULL CHECK (duration_hours > 0),
	start_time      timestamptz NOT NULL,
	end_time        timestamptz NOT NULL,
	total_price     numeric(14, 2) NOT NULL,
	status          text NOT NULL,

	FOREIGN KEY(park_id) REFERENCES ParkingLots(id)
);

CREATE INDEX ON Bookings (user_id, start_time);
CREATE INDEX ON Bookings (status, end_time);
"""

BOOKINGS_DROP_TABLE = """
DROP TABLE IF EXISTS Bookings;
"""

PARKINGLOTS_INSERT = """
INSERT INTO ParkingLots (name, address, capacity, price_per_hour, num_available)
VALUES ($1, $2, $3, $4, $5)
RETURNING id;
"""

PARKINGLOTS_SELECT = """
SELECT * FROM ParkingLots WHERE id = $1;
"""

PARKINGLOTS_SELECT_ALL = """
SELECT * FROM ParkingLots ORDER BY id;
"""

PARKINGLOTS_UPDATE_AVAILABILITY = """
UPDATE ParkingLots
SET num_available = $2
WHERE id = $1
RETURNING id;
"""

PARKINGLOTS_UPDATE_PRICE = """
UPDATE ParkingLots
SET price_per_hour = $2
WHERE id = $1
RETURNING id;
"""

PARKINGLOTS_DECREMENT_AVAILABLE = """
UPDATE ParkingLots
SET num_available = num_available - 1
WHERE id = $1
 AND num_available > 0
RETURNING num_available;
"""

PARKINGLOTS_INCREMENT_AVAILABLE = """
UPDATE ParkingLots
SET num_available = LEAST(num_available + 1, capacity)
WHERE id = $1
RETURNING num_available;
"""

BOOKINGS_INSERT = """
INSERT INTO Bookings (id, park_id, user_id, spot_type, spot_label, price_per_hour, duration_hours,
                      start_time, end_time, total_price, status)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11);
"""

BOOKINGS_SELECT = """
SELECT * FROM Bookings WHERE id = $1;
"""

BOOKINGS_SELECT_BY_USER = """
SELECT * FROM Bookings
WHERE user_id = $1
ORDER BY start_time DESC;
"""

BOOKINGS_SELECT_DUE = """
SELECT * FROM Bookings
WHERE status = any($1::text[])
 AND end_time <= $2
ORDER BY end_time;
"""

BOOKINGS_COUNT_HOLDING = """
SELECT count(*) FROM Bookings
WHERE park_id = $1
 AND status = any($2::text[]);
"""

BOOKINGS_UPDATE_STATUS = """
UPDATE Bookings
SET status = $3
WHERE id = $1
 AND status = $2
RETURNING id;
"""
